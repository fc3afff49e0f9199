"""
KPI Scoring
Per-KRA scores, weighted overall score and financial-year period helpers.

Financial years run April to March and are labelled ``FY 2023-24``.
"""
import math
import re
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Tuple

from app.core.payroll import round_half_up
from app.exceptions import ValidationFailed
from app.models.kpi import KpiRecord, PeriodType, ScorecardRow
from app.models.kra import KraTemplate

FY_PATTERN = re.compile(r"^FY (\d{4})-(\d{2})$")

MONTHS = [
    "April", "May", "June", "July", "August", "September",
    "October", "November", "December", "January", "February", "March",
]
QUARTERS = ["Q1 (Apr-Jun)", "Q2 (Jul-Sep)", "Q3 (Oct-Dec)", "Q4 (Jan-Mar)"]
HALVES = ["H1 (Apr-Sep)", "H2 (Oct-Mar)"]
FULL_YEAR = ["Full Year"]

TIME_FRAMES: Dict[PeriodType, List[str]] = {
    PeriodType.MONTHLY: MONTHS,
    PeriodType.QUARTERLY: QUARTERS,
    PeriodType.HALF_YEARLY: HALVES,
    PeriodType.YEARLY: FULL_YEAR,
}

GRADES: List[Tuple[int, str]] = [
    (90, "Outstanding"),
    (75, "Exceeds Expectations"),
    (60, "Meets Expectations"),
]


def _to_float(value: Any) -> float:
    if value is None or value == "":
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def calculate_score(target: Any, actual: Any) -> int:
    """round(actual / target * 100); 0 for a missing/zero target or a non-numeric result"""
    target_value = _to_float(target)
    if math.isnan(target_value) or target_value == 0:
        return 0
    score = round_half_up(_to_float(actual) / target_value * 100)
    if math.isnan(score) or math.isinf(score):
        return 0
    return int(score)


def overall_score(rows: Iterable[Tuple[float, float]]) -> int:
    """Weighted average of (score, weightage) pairs, 0 when there is no weight"""
    total_weight = 0.0
    weighted_sum = 0.0
    for score, weightage in rows:
        weight = _to_float(weightage)
        if math.isnan(weight):
            weight = 0
        total_weight += weight
        weighted_sum += score * weight
    if total_weight <= 0:
        return 0
    return int(round_half_up(weighted_sum / total_weight))


def grade_for(score: int) -> str:
    for threshold, label in GRADES:
        if score >= threshold:
            return label
    return "Needs Improvement"


def financial_year_for(day: date) -> str:
    start_year = day.year if day.month >= 4 else day.year - 1
    return format_financial_year(start_year)


def format_financial_year(start_year: int) -> str:
    return f"FY {start_year}-{(start_year + 1) % 100:02d}"


def current_financial_year(today: Optional[date] = None) -> str:
    return financial_year_for(today or date.today())


def parse_financial_year(label: str) -> int:
    """Return the start year of an ``FY YYYY-YY`` label"""
    match = FY_PATTERN.match(label or "")
    if not match:
        raise ValidationFailed(f"Invalid financial year '{label}', expected e.g. 'FY 2023-24'")
    start_year = int(match.group(1))
    if int(match.group(2)) != (start_year + 1) % 100:
        raise ValidationFailed(f"Invalid financial year '{label}'")
    return start_year


def shift_financial_year(label: str, years: int) -> str:
    """Move both halves of a label forwards/backwards"""
    return format_financial_year(parse_financial_year(label) + years)


def current_period(today: Optional[date] = None) -> Tuple[PeriodType, str]:
    """Default scorecard period: the quarter containing today"""
    month = (today or date.today()).month
    if month <= 3:
        return PeriodType.QUARTERLY, QUARTERS[3]
    if month <= 6:
        return PeriodType.QUARTERLY, QUARTERS[0]
    if month <= 9:
        return PeriodType.QUARTERLY, QUARTERS[1]
    return PeriodType.QUARTERLY, QUARTERS[2]


def validate_period(period_type: PeriodType, time_frame: str) -> None:
    if time_frame not in TIME_FRAMES[period_type]:
        raise ValidationFailed(f"'{time_frame}' is not a valid {period_type.value} time frame")


def joined_after_financial_year(joining_date: Optional[date], label: str) -> bool:
    """True when an employee joined after the end year of the financial year"""
    if joining_date is None:
        return False
    return joining_date.year > parse_financial_year(label) + 1


def build_rows(active: Iterable[KraTemplate], existing: Iterable[KpiRecord]) -> List[ScorecardRow]:
    """One row per active KRA, from its saved record or template defaults"""
    by_kra = {record.kra_id: record for record in existing}
    rows = []
    for kra in active:
        record = by_kra.get(kra.id)
        target = record.target if record else None
        actual = record.actual if record else None
        weightage = record.weightage if record and record.weightage else kra.weightage
        rows.append(
            ScorecardRow(
                kra_id=kra.id,
                title=kra.title,
                description=kra.description,
                target=target,
                actual=actual,
                weightage=weightage or 0,
                score=calculate_score(target, actual),
                record_id=record.id if record else None,
            )
        )
    return rows
