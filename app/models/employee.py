"""
Employee Model
Schema for employee records in the `users` collection
"""
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


class Role(str, Enum):
    """Role hierarchy, ordered from least to most privileged"""
    EMPLOYEE = "employee"
    HR = "hr"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"

    @property
    def level(self) -> int:
        return _ROLE_ORDER.index(self) + 1

    def _compare(self, other, op):
        if not isinstance(other, Role):
            return NotImplemented
        return op(self.level, other.level)

    def __lt__(self, other):
        return self._compare(other, int.__lt__)

    def __le__(self, other):
        return self._compare(other, int.__le__)

    def __gt__(self, other):
        return self._compare(other, int.__gt__)

    def __ge__(self, other):
        return self._compare(other, int.__ge__)


_ROLE_ORDER = [Role.EMPLOYEE, Role.HR, Role.ADMIN, Role.SUPER_ADMIN]


class KraStatus(str, Enum):
    """Status of an optional KRA selection"""
    PENDING = "pending"
    APPROVED = "approved"


class KraAssignment(BaseModel):
    """Optional KRA selected by an employee"""
    kra_id: str
    status: KraStatus = KraStatus.PENDING
    requested_at: Optional[datetime] = None

    class Config:
        extra = "forbid"


class BankDetails(BaseModel):
    """Employee bank and tax details"""
    account_number: str = ""
    bank_name: str = ""
    ifsc_code: str = ""
    pan_number: str = ""
    uan_number: str = ""
    pf_number: str = ""

    class Config:
        extra = "forbid"


class Employee(BaseModel):
    """Employee record"""

    id: Optional[str] = None

    # Basic Information
    employee_code: str
    name: str
    email: EmailStr
    phone: str = ""

    # Employment Details
    department: str
    designation: str = ""
    role: Role = Role.EMPLOYEE
    joining_date: Optional[date] = None
    ctc: Optional[float] = None  # annual

    # Payroll
    bank_details: BankDetails = Field(default_factory=BankDetails)

    # Performance
    kras: List[KraAssignment] = []

    # Authentication
    password_hash: str = ""
    is_blocked: bool = False

    # Metadata
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    last_login: Optional[datetime] = None

    @field_validator("kras", mode="before")
    @classmethod
    def normalize_legacy_kras(cls, value):
        # Older records stored bare template ids; those were approved selections
        if value is None:
            return []
        return [
            {"kra_id": item, "status": KraStatus.APPROVED.value} if isinstance(item, str) else item
            for item in value
        ]

    class Config:
        extra = "forbid"
        json_schema_extra = {
            "example": {
                "employee_code": "EMP001",
                "name": "John Doe",
                "email": "john.doe@company.com",
                "phone": "+91-9876543210",
                "department": "IT",
                "designation": "Senior Developer",
                "role": "employee",
                "joining_date": "2023-05-01",
                "ctc": 600000,
            }
        }


class EmployeeCreate(BaseModel):
    """Schema for provisioning a new employee"""
    employee_code: str
    name: str
    email: EmailStr
    password: str = Field(..., min_length=6)
    phone: str = ""
    department: str
    designation: str = ""
    role: Role = Role.EMPLOYEE
    joining_date: Optional[date] = None
    ctc: Optional[float] = Field(None, ge=0)
    bank_details: Optional[BankDetails] = None

    class Config:
        extra = "forbid"


class EmployeeUpdate(BaseModel):
    """Schema for HR/admin edits of an employee profile"""
    employee_code: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    department: Optional[str] = None
    designation: Optional[str] = None
    role: Optional[Role] = None
    joining_date: Optional[date] = None
    ctc: Optional[float] = Field(None, ge=0)
    bank_details: Optional[BankDetails] = None

    class Config:
        extra = "forbid"


class EmployeeResponse(BaseModel):
    """Schema for employee response (without sensitive data)"""
    id: str
    employee_code: str
    name: str
    email: EmailStr
    phone: str
    department: str
    designation: str
    role: Role
    joining_date: Optional[date] = None
    ctc: Optional[float] = None
    bank_details: BankDetails
    kras: List[KraAssignment] = []
    is_blocked: bool

    class Config:
        from_attributes = True
