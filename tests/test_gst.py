"""Tests for GST invoice calculations (app/core/gst.py)."""

import pytest

from app.core.gst import balance_due, compute_invoice, is_inter_state
from app.models.invoice import InvoiceLineInput, PaymentStatus

LINE = InvoiceLineInput(description="Servo motor", qty=2, rate=100, discount_percent=10, gst_rate=18)


class TestLines:
    def test_intra_state_splits_tax(self):
        lines, totals = compute_invoice([LINE], "05", "05")

        assert lines[0].taxable_value == pytest.approx(180)
        assert lines[0].cgst == pytest.approx(16.2)
        assert lines[0].sgst == pytest.approx(16.2)
        assert lines[0].igst == 0
        assert lines[0].total == pytest.approx(212.4)
        assert not totals.is_inter_state

    def test_inter_state_uses_igst(self):
        lines, totals = compute_invoice([LINE], "05", "07")

        assert lines[0].igst == pytest.approx(32.4)
        assert lines[0].cgst == 0
        assert totals.igst == pytest.approx(32.4)
        assert totals.is_inter_state

    def test_state_codes_are_compared_trimmed(self):
        assert not is_inter_state("05", " 05 ")


class TestTotals:
    def test_grand_total_rounds_to_whole_rupees(self):
        _, totals = compute_invoice([LINE], "05", "05")
        assert totals.grand_total == 212
        assert totals.round_off == pytest.approx(-0.4)

    def test_half_rupee_rounds_up(self):
        line = InvoiceLineInput(description="Cable", qty=1, rate=100, gst_rate=12.5)
        _, totals = compute_invoice([line], "05", "05")
        assert totals.grand_total == 113
        assert totals.round_off == pytest.approx(0.5)

    def test_multiple_lines_sum(self):
        other = InvoiceLineInput(description="Install", qty=1, rate=1000, gst_rate=18)
        _, totals = compute_invoice([LINE, other], "05", "05")
        assert totals.taxable == pytest.approx(1180)
        assert totals.tax == pytest.approx(212.4)
        assert totals.grand_total == 1392


class TestBalance:
    def test_paid(self):
        assert balance_due(1000, PaymentStatus.PAID, 0) == 0

    def test_due(self):
        assert balance_due(1000, PaymentStatus.DUE, 300) == 1000

    def test_partial(self):
        _, totals = compute_invoice([LINE], "05", "05", PaymentStatus.PARTIAL, 100)
        assert totals.balance_due == 112
