"""
Payroll Routes
Salary processing, payroll history and payslip generation
"""
from fastapi import APIRouter, Depends, Response
from typing import List, Optional

from app.api.deps import get_store
from app.api.routes.auth import get_current_employee
from app.db.store import DocumentStore
from app.models.employee import Employee
from app.models.payroll import (
    PayrollBreakdown,
    PayrollPreviewRequest,
    PayrollRecord,
    PayrollRequest,
    YearlyPayoffReport,
)
from app.services.payroll import PayrollService

router = APIRouter()


@router.post("/preview", response_model=PayrollBreakdown)
async def preview_payroll(
    data: PayrollPreviewRequest,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    """Run the calculator without saving anything"""
    return PayrollService(store).preview(data)


@router.post("/", response_model=PayrollRecord)
async def process_payroll(
    data: PayrollRequest,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    """
    Process payroll for one employee and month (HR and above).
    Settings default to the employee's CTC with full attendance.
    """
    return await PayrollService(store).process(current_employee, data)


@router.get("/", response_model=List[PayrollRecord])
async def list_payroll(
    month: Optional[str] = None,
    search: Optional[str] = None,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    """Payroll history, newest first"""
    return await PayrollService(store).list_records(current_employee, month, search)


@router.get("/reports/{employee_id}/{year}", response_model=YearlyPayoffReport)
async def yearly_report(
    employee_id: str,
    year: int,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    return await PayrollService(store).yearly_report(current_employee, employee_id, year)


@router.get("/reports/{employee_id}/{year}/csv")
async def yearly_report_csv(
    employee_id: str,
    year: int,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    service = PayrollService(store)
    report = await service.yearly_report(current_employee, employee_id, year)
    return Response(
        content=service.report_csv(report),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="payoff_{employee_id}_{year}.csv"'},
    )


@router.get("/{record_id}", response_model=PayrollRecord)
async def get_payroll(
    record_id: str,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    return await PayrollService(store).get(current_employee, record_id)


@router.get("/{record_id}/payslip")
async def download_payslip(
    record_id: str,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    """Payslip PDF for a saved payroll record"""
    service = PayrollService(store)
    record = await service.get(current_employee, record_id)
    pdf = await service.payslip_pdf(current_employee, record_id)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="Payslip_{record.employee_code}_{record.month}.pdf"'},
    )


@router.delete("/{record_id}")
async def delete_payroll(
    record_id: str,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    """Delete a payroll record (Admin and above)"""
    await PayrollService(store).delete(current_employee, record_id)
    return {"message": "Payroll record deleted"}
