"""
Company Service
Single organization settings record printed on payslips and invoices
"""
import logging
from datetime import datetime

from app.core.permissions import require_role
from app.db.store import Collections, DocumentStore, to_record
from app.exceptions import NotFound
from app.models.company import CompanySettings, CompanySettingsUpdate
from app.models.employee import Employee, Role

logger = logging.getLogger(__name__)

SETTINGS_ID = "default"


class CompanyService:
    def __init__(self, store: DocumentStore):
        self.store = store

    async def get(self) -> CompanySettings:
        record = await self.store.get(Collections.COMPANY_SETTINGS, SETTINGS_ID)
        if record is None:
            # Defaults from configuration until someone saves
            return CompanySettings()
        return CompanySettings.model_validate(record)

    async def update(self, actor: Employee, data: CompanySettingsUpdate) -> CompanySettings:
        require_role(actor, Role.ADMIN)
        current = await self.get()
        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        updated = current.model_copy(update={**changes, "updated_at": datetime.utcnow(), "updated_by": actor.id})

        record = to_record(updated)
        try:
            await self.store.update(Collections.COMPANY_SETTINGS, SETTINGS_ID, record)
        except NotFound:
            await self.store.add(Collections.COMPANY_SETTINGS, {**record, "id": SETTINGS_ID})
        logger.info("Company settings updated by %s: %s", actor.employee_code, ", ".join(sorted(changes)) or "no changes")
        return updated
