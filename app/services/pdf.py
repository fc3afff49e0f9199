"""
PDF Rendering
Payslip and GST invoice documents drawn with reportlab
"""
import io
import math
from typing import List, Sequence, Tuple

from num2words import num2words
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from app.models.company import CompanySettings
from app.models.invoice import Invoice, PaymentStatus
from app.models.payroll import PayrollRecord

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 12 * mm
CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN
ROW_HEIGHT = 6 * mm


def format_inr(amount: float) -> str:
    """Indian digit grouping, e.g. 1234567.5 -> 12,34,567.50"""
    if amount is None or math.isnan(amount):
        return "-"
    sign = "-" if amount < 0 else ""
    whole, fraction = f"{abs(amount):.2f}".split(".")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])
    return f"{sign}{whole}.{fraction}"


def amount_in_words(amount: float) -> str:
    """Rupees and paise in words (Indian numbering)"""
    if amount is None or math.isnan(amount):
        return "-"
    rupees = int(abs(amount))
    paise = int(round((abs(amount) - rupees) * 100))
    words = num2words(rupees, lang="en_IN").replace(",", "").title()
    prefix = "Minus " if amount < 0 else ""
    if paise:
        paise_words = num2words(paise, lang="en_IN").replace(",", "").title()
        return f"{prefix}Rupees {words} and {paise_words} Paise Only"
    return f"{prefix}Rupees {words} Only"


def _header(c: canvas.Canvas, company: CompanySettings, title: str, subtitle: str) -> float:
    top = PAGE_HEIGHT - MARGIN
    c.setFillColor(colors.HexColor("#F5F5F5"))
    c.rect(MARGIN, top - 24 * mm, CONTENT_WIDTH, 24 * mm, stroke=0, fill=1)
    c.setFillColor(colors.black)

    c.setFont("Helvetica-Bold", 15)
    c.drawString(MARGIN + 4 * mm, top - 9 * mm, company.name)
    c.setFont("Helvetica", 8)
    c.drawString(MARGIN + 4 * mm, top - 14 * mm, company.address)
    contact = "  |  ".join(x for x in (company.email, company.phone, company.website) if x)
    if contact:
        c.drawString(MARGIN + 4 * mm, top - 18 * mm, contact)
    if company.gstin:
        c.drawString(MARGIN + 4 * mm, top - 22 * mm, f"GSTIN: {company.gstin}  State: {company.state} ({company.state_code})")

    c.setFont("Helvetica-Bold", 14)
    c.drawRightString(PAGE_WIDTH - MARGIN - 4 * mm, top - 9 * mm, title)
    c.setFont("Helvetica", 10)
    c.drawRightString(PAGE_WIDTH - MARGIN - 4 * mm, top - 15 * mm, subtitle)
    return top - 28 * mm


def _detail_grid(c: canvas.Canvas, y: float, pairs: Sequence[Tuple[str, str]]) -> float:
    """Two label/value columns inside a box; returns the y below the box"""
    rows = math.ceil(len(pairs) / 2)
    height = rows * ROW_HEIGHT + 4 * mm
    c.rect(MARGIN, y - height, CONTENT_WIDTH, height)
    half = CONTENT_WIDTH / 2
    c.setFont("Helvetica", 9)
    for index, (label, value) in enumerate(pairs):
        col, row = index % 2, index // 2
        x = MARGIN + 4 * mm + col * half
        row_y = y - 6 * mm - row * ROW_HEIGHT
        c.setFont("Helvetica-Bold", 9)
        c.drawString(x, row_y, label)
        c.setFont("Helvetica", 9)
        c.drawString(x + 32 * mm, row_y, str(value) if value not in (None, "") else "-")
    return y - height - 4 * mm


def render_payslip(record: PayrollRecord, company: CompanySettings) -> bytes:
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle(f"Payslip {record.employee_name} {record.month}")

    y = _header(c, company, "PAYSLIP", record.month)

    y = _detail_grid(c, y, [
        ("Name:", record.employee_name),
        ("Designation:", record.designation),
        ("Emp ID:", record.employee_code),
        ("Department:", record.department),
        ("Bank Name:", record.bank_name),
        ("Bank A/c:", record.bank_account),
        ("PAN No:", record.pan_number),
        ("UAN:", record.uan_number),
        ("Paid Days:", f"{record.settings.paid_days:g} / {record.settings.total_days:g}"),
        ("Date of Joining:", record.joining_date.isoformat() if record.joining_date else "-"),
    ])

    earnings: List[Tuple[str, float]] = [
        ("Basic Salary", record.earnings.basic),
        ("HRA", record.earnings.hra),
        ("Special Allow.", record.earnings.special),
        ("Incentive", record.earnings.incentive),
        ("Arrears", record.earnings.arrears),
    ]
    deductions: List[Tuple[str, float]] = [
        ("Provident Fund", record.deductions.pf),
        ("ESIC", record.deductions.esic),
        ("Prof. Tax", record.deductions.pt),
        ("TDS", record.deductions.tds),
        ("Advance", record.deductions.advance),
    ]

    # Earnings | Deductions table
    col = CONTENT_WIDTH / 4
    c.setFillColor(colors.HexColor("#323232"))
    c.rect(MARGIN, y - ROW_HEIGHT, CONTENT_WIDTH, ROW_HEIGHT, stroke=0, fill=1)
    c.setFillColor(colors.white)
    c.setFont("Helvetica-Bold", 9)
    for i, heading in enumerate(("EARNINGS", "AMOUNT", "DEDUCTIONS", "AMOUNT")):
        if i % 2:
            c.drawRightString(MARGIN + (i + 1) * col - 2 * mm, y - 4 * mm, heading)
        else:
            c.drawString(MARGIN + i * col + 2 * mm, y - 4 * mm, heading)
    c.setFillColor(colors.black)
    y -= ROW_HEIGHT

    c.setFont("Helvetica", 9)
    for (earn_label, earn_amount), (ded_label, ded_amount) in zip(earnings, deductions):
        c.rect(MARGIN, y - ROW_HEIGHT, CONTENT_WIDTH, ROW_HEIGHT)
        c.drawString(MARGIN + 2 * mm, y - 4 * mm, earn_label)
        c.drawRightString(MARGIN + 2 * col - 2 * mm, y - 4 * mm, format_inr(earn_amount))
        c.drawString(MARGIN + 2 * col + 2 * mm, y - 4 * mm, ded_label)
        c.drawRightString(MARGIN + 4 * col - 2 * mm, y - 4 * mm, format_inr(ded_amount))
        y -= ROW_HEIGHT

    c.setFillColor(colors.HexColor("#F0F0F0"))
    c.rect(MARGIN, y - ROW_HEIGHT, CONTENT_WIDTH, ROW_HEIGHT, fill=1)
    c.setFillColor(colors.black)
    c.setFont("Helvetica-Bold", 9)
    c.drawString(MARGIN + 2 * mm, y - 4 * mm, "Total Earnings")
    c.drawRightString(MARGIN + 2 * col - 2 * mm, y - 4 * mm, format_inr(record.totals.gross_earnings))
    c.drawString(MARGIN + 2 * col + 2 * mm, y - 4 * mm, "Total Deductions")
    c.drawRightString(MARGIN + 4 * col - 2 * mm, y - 4 * mm, format_inr(record.totals.total_deductions))
    c.line(MARGIN + 2 * col, y + 6 * ROW_HEIGHT, MARGIN + 2 * col, y - ROW_HEIGHT)
    y -= ROW_HEIGHT + 5 * mm

    # Net pay strip
    c.rect(MARGIN, y - 22 * mm, CONTENT_WIDTH, 22 * mm)
    c.setFont("Helvetica-Bold", 11)
    c.drawString(MARGIN + 4 * mm, y - 8 * mm, "NET SALARY PAYABLE:")
    c.setFont("Helvetica-Bold", 15)
    c.drawRightString(PAGE_WIDTH - MARGIN - 4 * mm, y - 8 * mm, f"{company.currency_symbol} {format_inr(record.totals.net_pay)}")
    c.setFont("Helvetica", 9)
    c.drawString(MARGIN + 4 * mm, y - 16 * mm, f"Amount in words: {amount_in_words(record.totals.net_pay)}")
    y -= 40 * mm

    _signatures(c, y, "Employee Signature", "Authorised Signatory")
    c.setFont("Helvetica-Oblique", 8)
    c.drawCentredString(PAGE_WIDTH / 2, MARGIN, "This is a computer-generated payslip and does not require a signature.")

    c.showPage()
    c.save()
    return buffer.getvalue()


def _signatures(c: canvas.Canvas, y: float, left: str, right: str) -> None:
    c.setFont("Helvetica", 9)
    c.line(MARGIN + 4 * mm, y, MARGIN + 60 * mm, y)
    c.drawString(MARGIN + 4 * mm, y - 5 * mm, left)
    c.line(PAGE_WIDTH - MARGIN - 60 * mm, y, PAGE_WIDTH - MARGIN - 4 * mm, y)
    c.drawRightString(PAGE_WIDTH - MARGIN - 4 * mm, y - 5 * mm, right)


def invoice_summary(invoice: Invoice) -> List[Tuple[str, float]]:
    """Label and amount rows printed under the line items"""
    totals, meta = invoice.totals, invoice.meta
    summary = [("Taxable Value", totals.taxable)]
    if totals.is_inter_state:
        summary.append(("IGST", totals.igst))
    else:
        summary += [("CGST", totals.cgst), ("SGST", totals.sgst)]
    summary += [("Round Off", totals.round_off), ("Grand Total", totals.grand_total)]
    if meta.payment_status != PaymentStatus.DUE:
        summary.append(("Less: Amount Paid", meta.amount_paid))
    summary.append(("Balance Due", totals.balance_due))
    return summary


def render_invoice(invoice: Invoice, company: CompanySettings) -> bytes:
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    meta, party, totals = invoice.meta, invoice.party, invoice.totals
    c.setTitle(f"Invoice {meta.invoice_no}")

    y = _header(c, company, "TAX INVOICE", meta.invoice_no or "")
    y = _detail_grid(c, y, [
        ("Bill To:", party.name),
        ("Invoice No:", meta.invoice_no),
        ("GSTIN:", party.gstin),
        ("Date:", meta.invoice_date.isoformat()),
        ("Address:", party.billing_address),
        ("Transport:", meta.transport_mode),
        ("State:", f"{party.billing_state} ({party.billing_code})"),
        ("Vehicle No:", meta.vehicle_no),
        ("Mobile:", party.mobile),
        ("Destination:", meta.destination),
    ])

    if totals.is_inter_state:
        headings = ["S.No", "Description", "HSN", "Qty", "Rate", "Disc %", "Taxable", "IGST", "Amount"]
        widths = [10, 52, 16, 14, 20, 14, 22, 18, 20]
    else:
        headings = ["S.No", "Description", "HSN", "Qty", "Rate", "Disc %", "Taxable", "CGST", "SGST", "Amount"]
        widths = [10, 44, 14, 12, 18, 12, 22, 17, 17, 20]
    scale = CONTENT_WIDTH / (sum(widths) * mm)
    widths = [w * mm * scale for w in widths]

    def draw_heading(top: float) -> float:
        c.setFillColor(colors.HexColor("#323232"))
        c.rect(MARGIN, top - ROW_HEIGHT, CONTENT_WIDTH, ROW_HEIGHT, stroke=0, fill=1)
        c.setFillColor(colors.white)
        c.setFont("Helvetica-Bold", 8)
        x = MARGIN
        for heading, width in zip(headings, widths):
            c.drawString(x + 1 * mm, top - 4 * mm, heading)
            x += width
        c.setFillColor(colors.black)
        return top - ROW_HEIGHT

    y = draw_heading(y)
    c.setFont("Helvetica", 8)
    for number, line in enumerate(invoice.items, start=1):
        if y - ROW_HEIGHT < MARGIN + 60 * mm:
            c.showPage()
            y = draw_heading(PAGE_HEIGHT - MARGIN)
            c.setFont("Helvetica", 8)
        tax_cells = (
            [format_inr(line.igst)] if totals.is_inter_state
            else [format_inr(line.cgst), format_inr(line.sgst)]
        )
        cells = [
            str(number),
            line.description[:32],
            line.hsn,
            f"{line.qty:g} {line.unit}",
            format_inr(line.rate),
            f"{line.discount_percent:g}",
            format_inr(line.taxable_value),
            *tax_cells,
            format_inr(line.total),
        ]
        c.rect(MARGIN, y - ROW_HEIGHT, CONTENT_WIDTH, ROW_HEIGHT)
        x = MARGIN
        for cell, width in zip(cells, widths):
            c.drawString(x + 1 * mm, y - 4 * mm, cell)
            x += width
        y -= ROW_HEIGHT

    y -= 4 * mm
    for label, value in invoice_summary(invoice):
        bold = label in ("Grand Total", "Balance Due")
        c.setFont("Helvetica-Bold" if bold else "Helvetica", 9)
        c.drawString(PAGE_WIDTH - MARGIN - 75 * mm, y, label)
        c.drawRightString(PAGE_WIDTH - MARGIN - 4 * mm, y, format_inr(value))
        y -= 5 * mm

    c.setFont("Helvetica", 9)
    c.drawString(MARGIN + 4 * mm, y, f"Amount in words: {amount_in_words(totals.grand_total)}")
    y -= 5 * mm
    c.drawString(MARGIN + 4 * mm, y, f"Payment: {meta.payment_status.value}" + (f" via {meta.payment_mode}" if meta.payment_mode else ""))
    y -= 20 * mm

    _signatures(c, y, "Receiver's Signature", f"For {company.name}")
    c.setFont("Helvetica-Oblique", 8)
    c.drawCentredString(PAGE_WIDTH / 2, MARGIN, "This is a computer-generated invoice.")

    c.showPage()
    c.save()
    return buffer.getvalue()
