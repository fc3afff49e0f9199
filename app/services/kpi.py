"""
KPI Service
Scorecards per employee and reporting period
"""
import csv
import io
import logging
from datetime import date, datetime
from typing import Dict, List, Optional

from app.core import kpi as scoring
from app.core.kra import active_kras
from app.core.permissions import require_role, require_self_or_manager, require_subordinate
from app.db.store import Collections, DocumentStore, WriteKind, WriteOp, to_record
from app.exceptions import ValidationFailed
from app.models.employee import Employee, Role
from app.models.kpi import KpiRecord, PeriodType, Scorecard, ScorecardSave
from app.services.kra import KraService
from app.services.users import UserService

logger = logging.getLogger(__name__)

SCORECARD_COLUMNS = ["KRA", "Weight %", "Target", "Actual", "Score %", "Grade"]


class KpiService:
    def __init__(self, store: DocumentStore):
        self.store = store
        self.users = UserService(store)
        self.kras = KraService(store)

    @staticmethod
    def periods(today: Optional[date] = None) -> Dict[str, object]:
        """Period choices plus the defaults for today"""
        period_type, time_frame = scoring.current_period(today)
        return {
            "time_frames": {p.value: frames for p, frames in scoring.TIME_FRAMES.items()},
            "current_financial_year": scoring.current_financial_year(today),
            "default_period_type": period_type.value,
            "default_time_frame": time_frame,
        }

    async def _records(self, employee_id: str, financial_year: str, period_type: PeriodType, time_frame: str) -> List[KpiRecord]:
        records = await self.store.query(
            Collections.KPI_RECORDS,
            [
                ("user_id", "==", employee_id),
                ("financial_year", "==", financial_year),
                ("period_type", "==", period_type.value),
                ("time_frame", "==", time_frame),
            ],
        )
        return [KpiRecord.model_validate(r) for r in records]

    def _check_period(self, employee: Employee, financial_year: str, period_type: PeriodType, time_frame: str) -> None:
        scoring.parse_financial_year(financial_year)
        scoring.validate_period(period_type, time_frame)
        if scoring.joined_after_financial_year(employee.joining_date, financial_year):
            raise ValidationFailed(f"{employee.name} joined after {financial_year}; no KPI records exist for it")

    async def get_scorecard(
        self,
        actor: Employee,
        employee_id: str,
        financial_year: Optional[str] = None,
        period_type: Optional[PeriodType] = None,
        time_frame: Optional[str] = None,
    ) -> Scorecard:
        employee = await self.users.get(employee_id)
        require_self_or_manager(actor, employee)

        financial_year = financial_year or scoring.current_financial_year()
        if period_type is None or time_frame is None:
            default_type, default_frame = scoring.current_period()
            period_type = period_type or default_type
            time_frame = time_frame or (default_frame if period_type == default_type else scoring.TIME_FRAMES[period_type][0])
        self._check_period(employee, financial_year, period_type, time_frame)

        templates = await self.kras.list_templates(employee.department)
        existing = await self._records(employee.id, financial_year, period_type, time_frame)
        rows = scoring.build_rows(active_kras(employee, templates), existing)
        overall = scoring.overall_score((row.score, row.weightage) for row in rows)

        return Scorecard(
            employee_id=employee.id,
            employee_name=employee.name,
            department=employee.department,
            financial_year=financial_year,
            period_type=period_type,
            time_frame=time_frame,
            rows=rows,
            overall_score=overall,
            grade=scoring.grade_for(overall),
        )

    async def save_scorecard(self, actor: Employee, employee_id: str, data: ScorecardSave) -> Scorecard:
        """Upsert every entry of one scorecard in a single atomic batch"""
        require_role(actor, Role.HR)
        employee = await self.users.get(employee_id)
        require_subordinate(actor, employee)
        self._check_period(employee, data.financial_year, data.period_type, data.time_frame)

        templates = {t.id: t for t in active_kras(employee, await self.kras.list_templates(employee.department))}
        unknown = [entry.kra_id for entry in data.entries if entry.kra_id not in templates]
        if unknown:
            raise ValidationFailed(f"KRAs not active for {employee.name}: {', '.join(unknown)}")

        existing = {
            r.kra_id: r
            for r in await self._records(employee.id, data.financial_year, data.period_type, data.time_frame)
        }
        now = datetime.utcnow()
        ops = []
        for entry in data.entries:
            template = templates[entry.kra_id]
            weightage = entry.weightage if entry.weightage is not None else template.weightage
            score = scoring.calculate_score(entry.target, entry.actual)
            record = existing.get(entry.kra_id)
            if record is not None:
                ops.append(WriteOp(
                    collection=Collections.KPI_RECORDS,
                    id=record.id,
                    kind=WriteKind.UPDATE,
                    record={
                        "target": entry.target,
                        "actual": entry.actual,
                        "weightage": weightage,
                        "score": score,
                        "updated_at": now.isoformat(),
                        "updated_by": actor.id,
                    },
                ))
            else:
                new_record = KpiRecord(
                    user_id=employee.id,
                    user_name=employee.name,
                    kra_id=template.id,
                    kra_title=template.title,
                    kra_description=template.description,
                    department=employee.department,
                    financial_year=data.financial_year,
                    period_type=data.period_type,
                    time_frame=data.time_frame,
                    target=entry.target,
                    actual=entry.actual,
                    weightage=weightage,
                    score=score,
                    created_at=now,
                    updated_at=now,
                    updated_by=actor.id,
                )
                ops.append(WriteOp(
                    collection=Collections.KPI_RECORDS,
                    id=self.store.new_id(),
                    kind=WriteKind.SET,
                    record=to_record(new_record),
                ))

        await self.store.batch_write(ops)
        logger.info(
            "Scorecard %s %s/%s for %s saved by %s (%d entries)",
            data.financial_year, data.period_type.value, data.time_frame,
            employee.employee_code, actor.employee_code, len(ops),
        )
        return await self.get_scorecard(actor, employee.id, data.financial_year, data.period_type, data.time_frame)

    @staticmethod
    def scorecard_csv(card: Scorecard) -> str:
        """One row per KRA, then a blank line and the OVERALL row with its grade"""
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(SCORECARD_COLUMNS)
        for row in card.rows:
            writer.writerow([
                row.title,
                f"{row.weightage:g}",
                "" if row.target is None else f"{row.target:g}",
                "" if row.actual is None else f"{row.actual:g}",
                row.score,
                "",
            ])
        writer.writerow([])
        writer.writerow(["OVERALL", "", "", "", card.overall_score, card.grade])
        return buffer.getvalue()
