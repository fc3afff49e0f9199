"""
Payroll Service
Processes monthly payroll, lists saved records and builds yearly payoff reports
"""
import csv
import io
import logging
from typing import List, Optional

from app.config import settings
from app.core.payroll import StatutoryRules, calculate_payroll
from app.core.permissions import require_role, require_self_or_manager
from app.db.store import Collections, DocumentStore, to_record
from app.exceptions import NotFound, ValidationFailed
from app.models.employee import Employee, Role
from app.models.payroll import (
    PayrollBreakdown,
    PayrollPreviewRequest,
    PayrollRecord,
    PayrollRequest,
    PayrollSettings,
    YearlyPayoffReport,
)
from app.services.company import CompanyService
from app.services.pdf import render_payslip
from app.services.users import UserService

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    "Month", "Employee Code", "Name", "Paid Days", "Gross Earnings",
    "PF", "ESIC", "PT", "TDS", "Advance", "Total Deductions", "Net Pay",
]


class PayrollService:
    def __init__(self, store: DocumentStore, rules: Optional[StatutoryRules] = None):
        self.store = store
        self.rules = rules or StatutoryRules.from_settings(settings)
        self.users = UserService(store)
        self.company = CompanyService(store)

    def preview(self, data: PayrollPreviewRequest) -> PayrollBreakdown:
        return calculate_payroll(data.settings, data.adjustments, self.rules)

    @staticmethod
    def default_settings(employee: Employee) -> PayrollSettings:
        if employee.ctc is None:
            raise ValidationFailed(f"No CTC on file for {employee.name}; provide payroll settings")
        return PayrollSettings(
            ctc_value=employee.ctc,
            basic_percent=settings.DEFAULT_BASIC_PERCENT,
            paid_days=settings.DEFAULT_MONTH_DAYS,
            total_days=settings.DEFAULT_MONTH_DAYS,
        )

    async def process(self, actor: Employee, data: PayrollRequest) -> PayrollRecord:
        """Calculate and append a payroll record; earlier records for the month are kept"""
        require_role(actor, Role.HR)
        employee = await self.users.get(data.employee_id)
        payroll_settings = data.settings or self.default_settings(employee)
        breakdown = calculate_payroll(payroll_settings, data.adjustments, self.rules)

        bank = employee.bank_details
        record = PayrollRecord(
            employee_id=employee.id,
            employee_code=employee.employee_code,
            employee_name=employee.name,
            designation=employee.designation,
            department=employee.department,
            pan_number=bank.pan_number,
            uan_number=bank.uan_number,
            bank_name=bank.bank_name,
            bank_account=bank.account_number,
            joining_date=employee.joining_date,
            month=data.month,
            settings=payroll_settings,
            earnings=breakdown.earnings,
            deductions=breakdown.deductions,
            totals=breakdown.totals,
            created_by=actor.id,
        )
        record.id = await self.store.add(Collections.PAYROLL, to_record(record))
        logger.info(
            "Payroll %s for %s processed by %s: net %s",
            data.month, employee.employee_code, actor.employee_code, record.totals.net_pay,
        )
        return record

    async def list_records(self, actor: Employee, month: Optional[str] = None, search: Optional[str] = None) -> List[PayrollRecord]:
        require_role(actor, Role.HR)
        filters = [("month", "==", month)] if month else []
        records = [
            PayrollRecord.model_validate(r)
            for r in await self.store.query(Collections.PAYROLL, filters, order_by=("created_at", "desc"))
        ]
        if search:
            needle = search.strip().casefold()
            records = [
                r for r in records
                if needle in r.employee_name.casefold() or needle in r.employee_code.casefold()
            ]
        return records

    async def get(self, actor: Employee, record_id: str) -> PayrollRecord:
        record = await self.store.get(Collections.PAYROLL, record_id)
        if record is None:
            raise NotFound("Payroll record not found")
        payroll = PayrollRecord.model_validate(record)
        if payroll.employee_id != actor.id:
            require_role(actor, Role.HR)
        return payroll

    async def delete(self, actor: Employee, record_id: str) -> None:
        require_role(actor, Role.ADMIN)
        if await self.store.get(Collections.PAYROLL, record_id) is None:
            raise NotFound("Payroll record not found")
        await self.store.delete(Collections.PAYROLL, record_id)
        logger.info("Payroll record %s deleted by %s", record_id, actor.employee_code)

    async def yearly_report(self, actor: Employee, employee_id: str, year: int) -> YearlyPayoffReport:
        """All of an employee's records whose month falls in the calendar year"""
        employee = await self.users.get(employee_id)
        require_self_or_manager(actor, employee)
        prefix = f"{year:04d}-"
        records = [
            PayrollRecord.model_validate(r)
            for r in await self.store.query(
                Collections.PAYROLL,
                [("employee_id", "==", employee_id), ("month", ">=", f"{prefix}01"), ("month", "<=", f"{prefix}12")],
                order_by=("month", "asc"),
            )
            if r.get("month", "").startswith(prefix)
        ]
        return YearlyPayoffReport(
            employee_id=employee_id,
            year=year,
            records=records,
            total_net=sum(r.totals.net_pay for r in records),
            total_advance=sum(r.deductions.advance for r in records),
        )

    @staticmethod
    def report_csv(report: YearlyPayoffReport) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(CSV_COLUMNS)
        for r in report.records:
            writer.writerow([
                r.month, r.employee_code, r.employee_name,
                f"{r.settings.paid_days:g}/{r.settings.total_days:g}",
                r.totals.gross_earnings,
                r.deductions.pf, r.deductions.esic, r.deductions.pt, r.deductions.tds, r.deductions.advance,
                r.totals.total_deductions, r.totals.net_pay,
            ])
        writer.writerow(["Total", "", "", "", "", "", "", "", "", report.total_advance, "", report.total_net])
        return buffer.getvalue()

    async def payslip_pdf(self, actor: Employee, record_id: str) -> bytes:
        record = await self.get(actor, record_id)
        return render_payslip(record, await self.company.get())
