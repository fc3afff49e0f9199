"""
Invoice Model
GST sales invoices (`invoices` collection)
"""
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class PaymentStatus(str, Enum):
    PAID = "Paid"
    PARTIAL = "Partial"
    DUE = "Due"


class InvoiceParty(BaseModel):
    name: str = ""
    gstin: str = ""
    mobile: str = ""
    billing_address: str = ""
    billing_state: str = ""
    billing_code: str = ""
    shipping_address: str = ""
    shipping_state: str = ""
    shipping_code: str = ""

    class Config:
        extra = "forbid"


class InvoiceLineInput(BaseModel):
    description: str
    inventory_id: Optional[str] = None
    hsn: str = ""
    qty: float = Field(1, ge=0)
    unit: str = "Nos"
    rate: float = Field(0, ge=0)
    discount_percent: float = Field(0, ge=0, le=100)
    gst_rate: float = Field(18, ge=0, le=100)

    class Config:
        extra = "forbid"


class InvoiceLine(InvoiceLineInput):
    """Line item with computed tax columns"""
    taxable_value: float = 0
    tax_amount: float = 0
    cgst: float = 0
    sgst: float = 0
    igst: float = 0
    total: float = 0


class InvoiceTotals(BaseModel):
    taxable: float = 0
    tax: float = 0
    cgst: float = 0
    sgst: float = 0
    igst: float = 0
    grand_total: float = 0
    round_off: float = 0
    balance_due: float = 0
    is_inter_state: bool = False


class InvoiceMeta(BaseModel):
    invoice_no: Optional[str] = None
    invoice_date: date = Field(default_factory=date.today)
    due_date: Optional[date] = None
    transport_mode: str = "Road"
    vehicle_no: str = ""
    destination: str = ""
    terms_of_delivery: str = ""
    payment_status: PaymentStatus = PaymentStatus.DUE
    payment_mode: str = ""
    amount_paid: float = Field(0, ge=0)

    class Config:
        extra = "forbid"


class InvoiceCreate(BaseModel):
    meta: InvoiceMeta = Field(default_factory=InvoiceMeta)
    party: InvoiceParty
    items: List[InvoiceLineInput] = Field(..., min_length=1)

    class Config:
        extra = "forbid"


class Invoice(BaseModel):
    id: Optional[str] = None
    meta: InvoiceMeta
    party: InvoiceParty
    items: List[InvoiceLine]
    totals: InvoiceTotals
    type: str = "Sales"
    created_at: datetime = Field(default_factory=datetime.utcnow)
    created_by: Optional[str] = None

    class Config:
        extra = "forbid"
