"""
Payroll Model
Schema for monthly payroll records (`payroll` collection)
"""
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class CtcMode(str, Enum):
    YEARLY = "yearly"
    MONTHLY = "monthly"


class PayrollSettings(BaseModel):
    """Calculator inputs chosen by the operator"""
    ctc_value: float = Field(..., ge=0)
    ctc_mode: CtcMode = CtcMode.YEARLY
    basic_percent: float = Field(50.0, ge=0, le=100)
    paid_days: float = Field(30, ge=0)
    total_days: float = Field(30, ge=0)
    pf_enabled: bool = True
    esic_enabled: bool = True
    pt_enabled: bool = True

    class Config:
        extra = "forbid"


class ManualAdjustments(BaseModel):
    """Operator-entered amounts, applied as-is"""
    incentive: float = Field(0, ge=0)
    arrears: float = Field(0, ge=0)
    tds: float = Field(0, ge=0)
    advance: float = Field(0, ge=0)

    class Config:
        extra = "forbid"


class PayrollEarnings(BaseModel):
    basic: float = 0
    hra: float = 0
    special: float = 0
    incentive: float = 0
    arrears: float = 0


class PayrollDeductions(BaseModel):
    pf: float = 0
    esic: float = 0
    pt: float = 0
    tds: float = 0
    advance: float = 0


class PayrollTotals(BaseModel):
    gross_earnings: float = 0
    total_deductions: float = 0
    net_pay: float = 0


class PayrollBreakdown(BaseModel):
    """Calculator output"""
    earnings: PayrollEarnings
    deductions: PayrollDeductions
    totals: PayrollTotals


class PayrollRecord(BaseModel):
    """Payroll record; one document per save"""
    id: Optional[str] = None

    # Employee snapshot
    employee_id: str
    employee_code: str = ""
    employee_name: str
    designation: str = ""
    department: str = ""
    pan_number: str = ""
    uan_number: str = ""
    bank_name: str = ""
    bank_account: str = ""
    joining_date: Optional[date] = None

    month: str  # YYYY-MM

    settings: PayrollSettings
    earnings: PayrollEarnings
    deductions: PayrollDeductions
    totals: PayrollTotals

    status: str = "Processed"
    created_at: datetime = Field(default_factory=datetime.utcnow)
    created_by: Optional[str] = None

    class Config:
        extra = "forbid"


class PayrollRequest(BaseModel):
    """Process payroll for one employee and month"""
    employee_id: str
    month: str = Field(..., pattern=r"^\d{4}-(0[1-9]|1[0-2])$")
    settings: Optional[PayrollSettings] = None
    adjustments: ManualAdjustments = Field(default_factory=ManualAdjustments)

    class Config:
        extra = "forbid"


class PayrollPreviewRequest(BaseModel):
    settings: PayrollSettings
    adjustments: ManualAdjustments = Field(default_factory=ManualAdjustments)

    class Config:
        extra = "forbid"


class YearlyPayoffReport(BaseModel):
    employee_id: str
    year: int
    records: List[PayrollRecord]
    total_net: float
    total_advance: float
