"""Tests for KPI scoring and financial-year helpers (app/core/kpi.py)."""

from datetime import date

import pytest

from app.core import kpi as scoring
from app.exceptions import ValidationFailed
from app.models.kpi import KpiRecord, PeriodType
from app.models.kra import KraTemplate


class TestScore:
    @pytest.mark.parametrize(
        "target,actual,expected",
        [
            (0, 50, 0),
            (None, 50, 0),
            ("", 50, 0),
            (100, 100, 100),
            (100, 150, 150),
            (3, 1, 33),
            (200, 1, 1),
            (100, None, 0),
            ("80", "60", 75),
        ],
    )
    def test_calculate_score(self, target, actual, expected):
        assert scoring.calculate_score(target, actual) == expected

    def test_overall_is_weighted_average(self):
        assert scoring.overall_score([(100, 50), (50, 50)]) == 75

    def test_overall_without_weight_is_zero(self):
        assert scoring.overall_score([]) == 0
        assert scoring.overall_score([(80, 0)]) == 0

    @pytest.mark.parametrize(
        "score,grade",
        [(95, "Outstanding"), (90, "Outstanding"), (75, "Exceeds Expectations"),
         (60, "Meets Expectations"), (59, "Needs Improvement")],
    )
    def test_grades(self, score, grade):
        assert scoring.grade_for(score) == grade


class TestFinancialYear:
    @pytest.mark.parametrize(
        "day,label",
        [
            (date(2023, 5, 1), "FY 2023-24"),
            (date(2024, 2, 1), "FY 2023-24"),
            (date(2024, 3, 31), "FY 2023-24"),
            (date(2024, 4, 1), "FY 2024-25"),
        ],
    )
    def test_april_boundary(self, day, label):
        assert scoring.financial_year_for(day) == label

    def test_shift_moves_both_halves(self):
        assert scoring.shift_financial_year("FY 2023-24", 1) == "FY 2024-25"
        assert scoring.shift_financial_year("FY 2023-24", -1) == "FY 2022-23"

    def test_century_rollover(self):
        assert scoring.shift_financial_year("FY 1999-00", 1) == "FY 2000-01"
        assert scoring.format_financial_year(2099) == "FY 2099-00"

    @pytest.mark.parametrize("label", ["2023-24", "FY 2023-25", "FY 23-24", ""])
    def test_invalid_labels(self, label):
        with pytest.raises(ValidationFailed):
            scoring.parse_financial_year(label)

    def test_joined_after_financial_year(self):
        assert scoring.joined_after_financial_year(date(2025, 7, 1), "FY 2023-24")
        assert not scoring.joined_after_financial_year(date(2025, 7, 1), "FY 2024-25")
        assert not scoring.joined_after_financial_year(None, "FY 2023-24")


class TestPeriods:
    @pytest.mark.parametrize(
        "day,frame",
        [
            (date(2024, 2, 1), "Q4 (Jan-Mar)"),
            (date(2024, 5, 1), "Q1 (Apr-Jun)"),
            (date(2024, 8, 15), "Q2 (Jul-Sep)"),
            (date(2024, 11, 30), "Q3 (Oct-Dec)"),
        ],
    )
    def test_default_period_is_the_quarter(self, day, frame):
        assert scoring.current_period(day) == (PeriodType.QUARTERLY, frame)

    def test_validate_period(self):
        scoring.validate_period(PeriodType.MONTHLY, "April")
        scoring.validate_period(PeriodType.YEARLY, "Full Year")
        with pytest.raises(ValidationFailed):
            scoring.validate_period(PeriodType.HALF_YEARLY, "Q1 (Apr-Jun)")


class TestBuildRows:
    def test_rows_use_saved_record_or_template_defaults(self):
        templates = [
            KraTemplate(id="revenue", title="Revenue", department="Sales", is_mandatory=True, weightage=60),
            KraTemplate(id="leads", title="Leads", department="Sales", weightage=40),
        ]
        saved = KpiRecord(
            id="r1", user_id="u1", user_name="Rohan", kra_id="revenue", kra_title="Revenue",
            financial_year="FY 2024-25", period_type=PeriodType.QUARTERLY, time_frame="Q1 (Apr-Jun)",
            target=200, actual=150, weightage=70,
        )
        rows = scoring.build_rows(templates, [saved])

        assert rows[0].score == 75
        assert rows[0].weightage == 70
        assert rows[0].record_id == "r1"
        assert rows[1].target is None
        assert rows[1].score == 0
        assert rows[1].weightage == 40
