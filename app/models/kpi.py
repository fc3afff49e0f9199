"""
KPI Model
Scored KRA instances per employee and reporting period (`kpi_records` collection)
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class PeriodType(str, Enum):
    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    HALF_YEARLY = "Half-Yearly"
    YEARLY = "Yearly"


class KpiRecord(BaseModel):
    """KPI record; (user_id, kra_id, financial_year, period_type, time_frame) is its key"""
    id: Optional[str] = None

    user_id: str
    user_name: str
    kra_id: str
    kra_title: str
    kra_description: str = ""
    department: str = ""

    financial_year: str
    period_type: PeriodType
    time_frame: str

    target: Optional[float] = None
    actual: Optional[float] = None
    weightage: float = 0
    score: int = 0

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    updated_by: Optional[str] = None

    class Config:
        extra = "forbid"


class KpiEntry(BaseModel):
    """Manager input for one KRA of a scorecard"""
    kra_id: str
    target: Optional[float] = None
    actual: Optional[float] = None
    weightage: Optional[float] = Field(None, ge=0, le=100)

    class Config:
        extra = "forbid"


class ScorecardSave(BaseModel):
    financial_year: str
    period_type: PeriodType
    time_frame: str
    entries: List[KpiEntry]

    class Config:
        extra = "forbid"


class ScorecardRow(BaseModel):
    kra_id: str
    title: str
    description: str = ""
    target: Optional[float] = None
    actual: Optional[float] = None
    weightage: float = 0
    score: int = 0
    record_id: Optional[str] = None


class Scorecard(BaseModel):
    employee_id: str
    employee_name: str
    department: str
    financial_year: str
    period_type: PeriodType
    time_frame: str
    rows: List[ScorecardRow]
    overall_score: int
    grade: str
