"""
Application Exceptions
Typed errors raised by the engines and services, translated to HTTP responses in main.py
"""
from fastapi import status


class AppError(Exception):
    """Base class for all expected application errors"""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "APP_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(AppError):
    """Missing or malformed input, rejected before any write"""
    code = "VALIDATION_FAILED"


class WeightBudgetExceeded(ValidationFailed):
    """A KRA selection or mandatory template would push the weightage above the budget"""
    code = "WEIGHT_BUDGET_EXCEEDED"

    def __init__(self, current: int, requested: int, budget: int, scope: str):
        self.current = current
        self.requested = requested
        self.budget = budget
        super().__init__(
            f"Adding {requested}% would exceed the {budget}% weight limit for {scope}. Current: {current}%"
        )


class InsufficientStock(ValidationFailed):
    code = "INSUFFICIENT_STOCK"


class PermissionDenied(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "PERMISSION_DENIED"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class DuplicateRecord(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "DUPLICATE_RECORD"


class InvalidTransition(AppError):
    """KRA assignment state change not allowed from the current state"""
    status_code = status.HTTP_409_CONFLICT
    code = "INVALID_TRANSITION"


class BackendError(AppError):
    """Store/network failure; the original cause is logged, not exposed"""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "BACKEND_ERROR"

    def __init__(self, message: str = "The operation failed. Please try again later."):
        super().__init__(message)
