"""
Invoice Service
GST sales invoices with stock decrement on save
"""
import logging
from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional

from app.core.gst import compute_invoice
from app.core.permissions import require_role
from app.db.store import Collections, DocumentStore, WriteKind, WriteOp, to_record
from app.exceptions import DuplicateRecord, InsufficientStock, NotFound, ValidationFailed
from app.models.employee import Employee, Role
from app.models.inventory import InventoryItem
from app.models.invoice import Invoice, InvoiceCreate, PaymentStatus
from app.services.company import CompanyService
from app.services.pdf import render_invoice

logger = logging.getLogger(__name__)


def generate_invoice_no(now: Optional[datetime] = None) -> str:
    """INV- followed by the last six digits of the millisecond timestamp"""
    millis = int((now or datetime.utcnow()).timestamp() * 1000)
    return f"INV-{millis % 1_000_000:06d}"


class InvoiceService:
    def __init__(self, store: DocumentStore):
        self.store = store
        self.company = CompanyService(store)

    async def preview(self, data: InvoiceCreate) -> Invoice:
        """Computed invoice without saving or touching stock"""
        company = await self.company.get()
        lines, totals = compute_invoice(
            data.items,
            company.state_code,
            data.party.billing_code,
            data.meta.payment_status,
            data.meta.amount_paid,
        )
        meta = data.meta
        if meta.payment_status == PaymentStatus.PAID:
            meta = meta.model_copy(update={"amount_paid": totals.grand_total})
        elif meta.payment_status == PaymentStatus.DUE:
            meta = meta.model_copy(update={"amount_paid": 0})
        return Invoice(meta=meta, party=data.party, items=lines, totals=totals)

    async def _invoice_no_taken(self, invoice_no: str) -> bool:
        return bool(await self.store.query(Collections.INVOICES, [("meta.invoice_no", "==", invoice_no)]))

    async def _stock_updates(self, data: InvoiceCreate) -> List[WriteOp]:
        """One inventory update per linked item; raises when any item is short"""
        needed: Dict[str, float] = defaultdict(float)
        for line in data.items:
            if line.inventory_id:
                needed[line.inventory_id] += line.qty

        now = datetime.utcnow().isoformat()
        ops = []
        for item_id, qty in needed.items():
            record = await self.store.get(Collections.INVENTORY, item_id)
            if record is None:
                # Item deleted since the line was picked; sold as a free-text line
                continue
            item = InventoryItem.model_validate(record)
            if item.qty < qty:
                raise InsufficientStock(f"Insufficient stock for {item.name}: {item.qty:g} available, {qty:g} requested")
            ops.append(WriteOp(
                collection=Collections.INVENTORY,
                id=item_id,
                kind=WriteKind.UPDATE,
                record={"qty": item.qty - qty, "last_updated": now},
            ))
        return ops

    async def create(self, actor: Employee, data: InvoiceCreate) -> Invoice:
        require_role(actor, Role.HR)
        if not data.party.name.strip():
            raise ValidationFailed("Customer name is required")

        invoice = await self.preview(data)
        invoice_no = (data.meta.invoice_no or "").strip()
        if invoice_no:
            if await self._invoice_no_taken(invoice_no):
                raise DuplicateRecord(f"Invoice {invoice_no} already exists")
        else:
            invoice_no = generate_invoice_no()
            while await self._invoice_no_taken(invoice_no):
                invoice_no = f"INV-{(int(invoice_no[4:]) + 1) % 1_000_000:06d}"
        invoice.meta = invoice.meta.model_copy(update={"invoice_no": invoice_no})
        invoice.created_by = actor.id

        stock_ops = await self._stock_updates(data)
        invoice.id = self.store.new_id()
        # Invoice and stock decrements commit together or not at all
        await self.store.batch_write(
            [WriteOp(collection=Collections.INVOICES, id=invoice.id, kind=WriteKind.SET, record=to_record(invoice))]
            + stock_ops
        )
        logger.info(
            "Invoice %s for %s saved by %s: total %s, %d stock items updated",
            invoice_no, invoice.party.name, actor.employee_code, invoice.totals.grand_total, len(stock_ops),
        )
        return invoice

    async def list_invoices(self, actor: Employee) -> List[Invoice]:
        require_role(actor, Role.HR)
        records = await self.store.query(Collections.INVOICES, order_by=("created_at", "desc"))
        return [Invoice.model_validate(r) for r in records]

    async def get(self, actor: Employee, invoice_id: str) -> Invoice:
        require_role(actor, Role.HR)
        record = await self.store.get(Collections.INVOICES, invoice_id)
        if record is None:
            raise NotFound("Invoice not found")
        return Invoice.model_validate(record)

    async def invoice_pdf(self, actor: Employee, invoice_id: str) -> bytes:
        invoice = await self.get(actor, invoice_id)
        return render_invoice(invoice, await self.company.get())
