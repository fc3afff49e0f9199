"""
GST Invoice Calculator
Line-item taxable values, CGST/SGST vs IGST split, round-off and balance due
"""
from typing import Iterable, List, Tuple

from app.core.payroll import round_half_up
from app.models.invoice import InvoiceLine, InvoiceLineInput, InvoiceTotals, PaymentStatus


def is_inter_state(company_state_code: str, billing_state_code: str) -> bool:
    return (billing_state_code or "").strip() != (company_state_code or "").strip()


def compute_line(item: InvoiceLineInput, inter_state: bool) -> InvoiceLine:
    base_amount = item.qty * item.rate
    discount = base_amount * item.discount_percent / 100
    taxable = base_amount - discount
    tax = taxable * item.gst_rate / 100

    if inter_state:
        cgst, sgst, igst = 0.0, 0.0, tax
    else:
        cgst, sgst, igst = tax / 2, tax / 2, 0.0

    return InvoiceLine(
        **item.model_dump(),
        taxable_value=taxable,
        tax_amount=tax,
        cgst=cgst,
        sgst=sgst,
        igst=igst,
        total=taxable + tax,
    )


def balance_due(grand_total: float, payment_status: PaymentStatus, amount_paid: float) -> float:
    if payment_status == PaymentStatus.PAID:
        return 0
    if payment_status == PaymentStatus.PARTIAL:
        return grand_total - amount_paid
    return grand_total


def compute_invoice(
    items: Iterable[InvoiceLineInput],
    company_state_code: str,
    billing_state_code: str,
    payment_status: PaymentStatus = PaymentStatus.DUE,
    amount_paid: float = 0,
) -> Tuple[List[InvoiceLine], InvoiceTotals]:
    """Compute every line and the invoice totals; the grand total is rounded to whole rupees"""
    inter_state = is_inter_state(company_state_code, billing_state_code)
    lines = [compute_line(item, inter_state) for item in items]

    taxable = sum(line.taxable_value for line in lines)
    tax = sum(line.tax_amount for line in lines)
    grand_total = round_half_up(taxable + tax)

    totals = InvoiceTotals(
        taxable=taxable,
        tax=tax,
        cgst=sum(line.cgst for line in lines),
        sgst=sum(line.sgst for line in lines),
        igst=sum(line.igst for line in lines),
        grand_total=grand_total,
        round_off=round(grand_total - (taxable + tax), 2),
        balance_due=balance_due(grand_total, payment_status, amount_paid),
        is_inter_state=inter_state,
    )
    return lines, totals
