"""
KRA Template Model
Department-scoped Key Result Area definitions (`kra_templates` collection)
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class KraTemplate(BaseModel):
    """KRA template record"""
    id: Optional[str] = None
    title: str
    description: str = ""
    department: str
    is_mandatory: bool = False
    weightage: int = Field(0, ge=0, le=100)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    created_by: Optional[str] = None
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None

    class Config:
        extra = "forbid"
        json_schema_extra = {
            "example": {
                "title": "Close monthly sales target",
                "description": "Achieve the assigned monthly revenue",
                "department": "Sales",
                "is_mandatory": True,
                "weightage": 40,
            }
        }


class KraTemplateCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = ""
    department: str
    is_mandatory: bool = False
    weightage: int = Field(0, ge=0, le=100)

    class Config:
        extra = "forbid"


class KraTemplateUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    department: Optional[str] = None
    is_mandatory: Optional[bool] = None
    weightage: Optional[int] = Field(None, ge=0, le=100)

    class Config:
        extra = "forbid"


class AssignmentState(str, Enum):
    """State of a KRA for one employee, as shown in goal reports"""
    MANDATORY = "mandatory"
    PENDING = "pending"
    APPROVED = "approved"


class EmployeeKra(BaseModel):
    """One row of an employee's goal report"""
    kra_id: str
    title: str
    description: str
    is_mandatory: bool
    weightage: int
    state: AssignmentState


class GoalReport(BaseModel):
    employee_id: str
    employee_name: str
    department: str
    total_weightage: int
    kras: List[EmployeeKra]


class KraAction(str, Enum):
    """Manager decisions on an employee's KRA"""
    APPROVE = "approve"
    REJECT = "reject"
    REMOVE = "remove"
