"""
KRA Service
Template management and the per-employee selection/approval workflow
"""
import csv
import io
import logging
from datetime import datetime
from typing import AsyncIterator, List, Optional

from app.config import settings
from app.core import kra as rules
from app.core.permissions import require_role, require_self_or_manager, require_subordinate
from app.db.store import Collections, DocumentStore, to_record
from app.exceptions import AppError, NotFound
from app.models.employee import Employee, KraAssignment, Role
from app.models.kra import GoalReport, KraAction, KraTemplate, KraTemplateCreate, KraTemplateUpdate
from app.services.users import UserService

logger = logging.getLogger(__name__)

GOAL_REPORT_COLUMNS = ["S.No", "Title", "Description", "Type", "Status", "Weightage"]


def _template(record: dict) -> KraTemplate:
    return KraTemplate.model_validate(record)


class KraService:
    def __init__(self, store: DocumentStore, budget: int = settings.KRA_WEIGHT_BUDGET):
        self.store = store
        self.budget = budget
        self.users = UserService(store)

    # Templates

    async def list_templates(self, department: Optional[str] = None) -> List[KraTemplate]:
        filters = [("department", "==", department)] if department else []
        records = await self.store.query(Collections.KRA_TEMPLATES, filters, order_by=("created_at", "asc"))
        return [_template(r) for r in records]

    async def get_template(self, template_id: str) -> KraTemplate:
        record = await self.store.get(Collections.KRA_TEMPLATES, template_id)
        if record is None:
            raise NotFound("KRA template not found")
        return _template(record)

    async def create_template(self, actor: Employee, data: KraTemplateCreate) -> KraTemplate:
        require_role(actor, Role.HR)
        existing = await self.list_templates(data.department)
        rules.check_template_budget(existing, data.department, data.is_mandatory, data.weightage, budget=self.budget)

        template = KraTemplate(**data.model_dump(), created_by=actor.id)
        template.id = await self.store.add(Collections.KRA_TEMPLATES, to_record(template))
        logger.info(
            "KRA template '%s' (%s, %d%%, mandatory=%s) created by %s",
            template.title, template.department, template.weightage, template.is_mandatory, actor.employee_code,
        )
        return template

    async def update_template(self, actor: Employee, template_id: str, data: KraTemplateUpdate) -> KraTemplate:
        require_role(actor, Role.HR)
        current = await self.get_template(template_id)
        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        changes.update(updated_at=datetime.utcnow(), updated_by=actor.id)
        updated = KraTemplate.model_validate({**current.model_dump(), **changes})

        existing = await self.list_templates(updated.department)
        rules.check_template_budget(
            existing, updated.department, updated.is_mandatory, updated.weightage,
            editing_id=template_id, budget=self.budget,
        )

        partial = to_record(updated)
        await self.store.update(Collections.KRA_TEMPLATES, template_id, {k: partial[k] for k in changes})
        logger.info("KRA template %s updated by %s", template_id, actor.employee_code)
        return updated

    async def delete_template(self, actor: Employee, template_id: str) -> None:
        require_role(actor, Role.HR)
        await self.get_template(template_id)
        await self.store.delete(Collections.KRA_TEMPLATES, template_id)
        logger.info("KRA template %s deleted by %s", template_id, actor.employee_code)

    async def watch_templates(self, department: Optional[str] = None) -> AsyncIterator[List[KraTemplate]]:
        """Live template list, re-emitted after every change"""
        filters = [("department", "==", department)] if department else []
        async for records in self.store.subscribe(Collections.KRA_TEMPLATES, filters, ("created_at", "asc")):
            yield [_template(r) for r in records]

    # Selections

    async def _save_kras(self, employee: Employee, kras: List[KraAssignment]) -> None:
        # The whole list is written in one update
        await self.store.update(
            Collections.USERS,
            employee.id,
            {"kras": [k.model_dump(mode="json") for k in kras], "updated_at": datetime.utcnow().isoformat()},
        )
        employee.kras = kras

    async def _report(self, employee: Employee, templates: List[KraTemplate]) -> GoalReport:
        return GoalReport(
            employee_id=employee.id,
            employee_name=employee.name,
            department=employee.department,
            total_weightage=rules.total_weight(employee, templates),
            kras=rules.employee_kras(employee, templates),
        )

    async def goal_report(self, actor: Employee, employee_id: str) -> GoalReport:
        employee = await self.users.get(employee_id)
        require_self_or_manager(actor, employee)
        templates = await self.list_templates(employee.department)
        return await self._report(employee, templates)

    async def request(self, actor: Employee, kra_id: str) -> GoalReport:
        """Employee asks for an optional KRA in their own department"""
        employee = await self.users.get(actor.id)
        template = await self.get_template(kra_id)
        templates = await self.list_templates(employee.department)
        candidates = templates if template.department == employee.department else templates + [template]
        try:
            kras = rules.request_kra(employee, candidates, kra_id, budget=self.budget)
        except AppError as exc:
            logger.warning("KRA request %s by %s rejected: %s", kra_id, employee.employee_code, exc.message)
            raise
        await self._save_kras(employee, kras)
        logger.info("KRA %s requested by %s", kra_id, employee.employee_code)
        return await self._report(employee, templates)

    async def withdraw(self, actor: Employee, kra_id: str) -> GoalReport:
        employee = await self.users.get(actor.id)
        try:
            kras = rules.withdraw_kra(employee, kra_id)
        except AppError as exc:
            logger.warning("KRA withdraw %s by %s rejected: %s", kra_id, employee.employee_code, exc.message)
            raise
        await self._save_kras(employee, kras)
        logger.info("KRA %s withdrawn by %s", kra_id, employee.employee_code)
        return await self._report(employee, await self.list_templates(employee.department))

    async def decide(self, actor: Employee, employee_id: str, kra_id: str, action: KraAction) -> GoalReport:
        """Manager approve / reject / remove on a subordinate's KRA"""
        require_role(actor, Role.HR)
        employee = await self.users.get(employee_id)
        require_subordinate(actor, employee)
        templates = await self.list_templates(employee.department)

        try:
            if action == KraAction.APPROVE:
                kras = rules.approve_kra(employee, kra_id)
            elif action == KraAction.REJECT:
                kras = rules.reject_kra(employee, kra_id)
            else:
                kras = rules.remove_kra(employee, templates, kra_id)
        except AppError as exc:
            logger.warning(
                "KRA %s of %s: %s by %s rejected: %s",
                kra_id, employee.employee_code, action.value, actor.employee_code, exc.message,
            )
            raise

        await self._save_kras(employee, kras)
        logger.info("KRA %s of %s: %s by %s", kra_id, employee.employee_code, action.value, actor.employee_code)
        return await self._report(employee, templates)

    @staticmethod
    def goal_report_csv(report: GoalReport) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(GOAL_REPORT_COLUMNS)
        for number, kra in enumerate(report.kras, start=1):
            writer.writerow([
                number,
                kra.title,
                kra.description,
                "Mandatory" if kra.is_mandatory else "Optional",
                kra.state.value.upper(),
                f"{kra.weightage}%",
            ])
        return buffer.getvalue()
