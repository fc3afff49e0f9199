"""
KPI Routes
Scorecards per financial year and period
"""
from fastapi import APIRouter, Depends, Response
from typing import Optional

from app.api.deps import get_store
from app.api.routes.auth import get_current_employee
from app.db.store import DocumentStore
from app.models.employee import Employee
from app.models.kpi import PeriodType, Scorecard, ScorecardSave
from app.services.kpi import KpiService


router = APIRouter()


@router.get("/periods")
async def get_periods(current_employee: Employee = Depends(get_current_employee)):
    """Period types, their time frames and today's defaults"""
    return KpiService.periods()


@router.get("/{employee_id}", response_model=Scorecard)
async def get_scorecard(
    employee_id: str,
    financial_year: Optional[str] = None,
    period_type: Optional[PeriodType] = None,
    time_frame: Optional[str] = None,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    """
    Scorecard for one employee; defaults to the current financial year and quarter
    """
    return await KpiService(store).get_scorecard(
        current_employee, employee_id, financial_year, period_type, time_frame
    )


@router.put("/{employee_id}", response_model=Scorecard)
async def save_scorecard(
    employee_id: str,
    data: ScorecardSave,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    """Save targets and actuals for a subordinate (HR and above)"""
    return await KpiService(store).save_scorecard(current_employee, employee_id, data)


@router.get("/{employee_id}/export")
async def export_scorecard(
    employee_id: str,
    financial_year: Optional[str] = None,
    period_type: Optional[PeriodType] = None,
    time_frame: Optional[str] = None,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    """Scorecard as CSV, one row per KRA plus the overall score"""
    card = await KpiService(store).get_scorecard(
        current_employee, employee_id, financial_year, period_type, time_frame
    )
    filename = f"{card.employee_name}_{card.time_frame}.csv".replace(" ", "_")
    return Response(
        content=KpiService.scorecard_csv(card),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
