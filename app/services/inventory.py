"""
Inventory Service
Stock items, low-stock filtering and valuation
"""
import logging
from datetime import datetime
from typing import List, Optional

from app.core.permissions import require_role
from app.db.store import Collections, DocumentStore, to_record
from app.exceptions import DuplicateRecord, NotFound, ValidationFailed
from app.models.employee import Employee, Role
from app.models.inventory import InventoryItem, InventoryItemCreate, InventoryItemUpdate, InventorySummary

logger = logging.getLogger(__name__)

STOCK_FILTERS = ("all", "low_stock")


def is_low_stock(item: InventoryItem) -> bool:
    return item.qty <= item.min_level


def summarize(items: List[InventoryItem]) -> InventorySummary:
    return InventorySummary(
        total_items=len(items),
        total_value=sum(item.qty * item.cost_price for item in items),
        low_stock=sum(1 for item in items if is_low_stock(item)),
    )


class InventoryService:
    def __init__(self, store: DocumentStore):
        self.store = store

    async def list_items(self, actor: Employee, stock_filter: str = "all") -> List[InventoryItem]:
        require_role(actor, Role.HR)
        if stock_filter not in STOCK_FILTERS:
            raise ValidationFailed(f"Unknown stock filter '{stock_filter}'")
        items = [
            InventoryItem.model_validate(r)
            for r in await self.store.query(Collections.INVENTORY, order_by=("name", "asc"))
        ]
        if stock_filter == "low_stock":
            items = [item for item in items if is_low_stock(item)]
        return items

    async def get(self, item_id: str) -> InventoryItem:
        record = await self.store.get(Collections.INVENTORY, item_id)
        if record is None:
            raise NotFound("Inventory item not found")
        return InventoryItem.model_validate(record)

    async def _ensure_unique_sku(self, sku: str, exclude_id: Optional[str] = None) -> None:
        for record in await self.store.query(Collections.INVENTORY, [("sku", "==", sku)]):
            if record["id"] != exclude_id:
                raise DuplicateRecord(f"SKU {sku} already exists")

    async def create(self, actor: Employee, data: InventoryItemCreate) -> InventoryItem:
        require_role(actor, Role.HR)
        if not data.name.strip() or not data.sku.strip():
            raise ValidationFailed("Name and SKU are required")
        await self._ensure_unique_sku(data.sku)

        item = InventoryItem(**data.model_dump())
        item.id = await self.store.add(Collections.INVENTORY, to_record(item))
        logger.info("Inventory item %s (%s) created by %s", item.sku, item.name, actor.employee_code)
        return item

    async def update(self, actor: Employee, item_id: str, data: InventoryItemUpdate) -> InventoryItem:
        require_role(actor, Role.HR)
        current = await self.get(item_id)
        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        if "sku" in changes:
            if not changes["sku"].strip():
                raise ValidationFailed("SKU cannot be blank")
            await self._ensure_unique_sku(changes["sku"], exclude_id=item_id)
        changes["last_updated"] = datetime.utcnow()

        updated = InventoryItem.model_validate({**current.model_dump(), **changes})
        partial = to_record(updated)
        await self.store.update(Collections.INVENTORY, item_id, {k: partial[k] for k in changes})
        logger.info("Inventory item %s updated by %s", updated.sku, actor.employee_code)
        return updated

    async def delete(self, actor: Employee, item_id: str) -> None:
        require_role(actor, Role.HR)
        item = await self.get(item_id)
        await self.store.delete(Collections.INVENTORY, item_id)
        logger.info("Inventory item %s deleted by %s", item.sku, actor.employee_code)

    async def summary(self, actor: Employee) -> InventorySummary:
        return summarize(await self.list_items(actor))
