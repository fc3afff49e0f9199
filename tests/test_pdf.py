"""Tests for PDF rendering helpers (app/services/pdf.py)."""

from datetime import date

import pytest

from app.core.gst import compute_invoice
from app.core.payroll import calculate_payroll
from app.models.company import CompanySettings
from app.models.invoice import Invoice, InvoiceLineInput, InvoiceMeta, InvoiceParty, PaymentStatus
from app.models.payroll import PayrollRecord, PayrollSettings
from app.services.pdf import amount_in_words, format_inr, invoice_summary, render_invoice, render_payslip


@pytest.mark.parametrize(
    "amount,text",
    [(0, "0.00"), (999, "999.00"), (1000, "1,000.00"), (123456.5, "1,23,456.50"),
     (12345678, "1,23,45,678.00"), (-4500, "-4,500.00")],
)
def test_indian_grouping(amount, text):
    assert format_inr(amount) == text


def test_amount_in_words():
    assert amount_in_words(48000) == "Rupees Forty-Eight Thousand Only"
    assert amount_in_words(150000) == "Rupees One Lakh Fifty Thousand Only"
    assert amount_in_words(10.5) == "Rupees Ten and Fifty Paise Only"


def test_payslip_renders():
    settings = PayrollSettings(ctc_value=600000, paid_days=28, total_days=30)
    breakdown = calculate_payroll(settings)
    record = PayrollRecord(
        employee_id="u1", employee_code="EMP010", employee_name="Rohan Das", month="2024-05",
        joining_date=date(2022, 6, 1), settings=settings, **breakdown.model_dump(),
    )
    pdf = render_payslip(record, CompanySettings(name="Manuastro LLP"))
    assert pdf.startswith(b"%PDF")


def test_invoice_renders_many_lines():
    items = [InvoiceLineInput(description=f"Item {n}", qty=1, rate=100) for n in range(60)]
    lines, totals = compute_invoice(items, "05", "07")
    invoice = Invoice(
        meta=InvoiceMeta(invoice_no="INV-000001"),
        party=InvoiceParty(name="Himalaya Traders", billing_code="07"),
        items=lines,
        totals=totals,
    )
    pdf = render_invoice(invoice, CompanySettings())
    assert pdf.startswith(b"%PDF")


def summary_for(status, amount_paid=0):
    items = [InvoiceLineInput(description="Service", qty=1, rate=1000)]
    lines, totals = compute_invoice(items, "05", "05", status, amount_paid)
    invoice = Invoice(
        meta=InvoiceMeta(invoice_no="INV-000002", payment_status=status, amount_paid=amount_paid),
        party=InvoiceParty(name="Himalaya Traders", billing_code="05"),
        items=lines,
        totals=totals,
    )
    return dict(invoice_summary(invoice))


def test_partial_invoice_prints_amount_paid():
    summary = summary_for(PaymentStatus.PARTIAL, 500)
    assert summary["Less: Amount Paid"] == 500
    assert summary["Balance Due"] == 680
    assert summary["CGST"] == pytest.approx(90)


def test_due_invoice_omits_amount_paid():
    summary = summary_for(PaymentStatus.DUE)
    assert "Less: Amount Paid" not in summary
    assert summary["Balance Due"] == 1180
