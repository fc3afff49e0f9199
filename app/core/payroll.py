"""
Payroll Calculator
Prorated CTC split and statutory deductions (PF, ESIC, Professional Tax).

All derived amounts are whole currency units: every derivation step is
rounded half-up. Under partial attendance Basic, HRA and Special are
prorated independently, so their sum may drift from the prorated CTC by a
rupee or two.

Nothing here validates input; NaN in manual fields propagates into the totals.
"""
import math
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from app.models.payroll import (
    CtcMode,
    ManualAdjustments,
    PayrollBreakdown,
    PayrollDeductions,
    PayrollEarnings,
    PayrollSettings,
    PayrollTotals,
)

# (upper gross limit, monthly tax)
PT_SLABS: Tuple[Tuple[float, float], ...] = (
    (7500, 0),
    (10000, 175),
    (math.inf, 200),
)


@dataclass(frozen=True)
class StatutoryRules:
    hra_ratio: float = 0.5
    pf_wage_ceiling: float = 15000
    pf_rate: float = 0.12
    esic_gross_limit: float = 21000
    esic_rate: float = 0.0075
    pt_slabs: Sequence[Tuple[float, float]] = field(default=PT_SLABS)

    @classmethod
    def from_settings(cls, settings) -> "StatutoryRules":
        return cls(
            hra_ratio=settings.HRA_RATIO,
            pf_wage_ceiling=settings.PF_WAGE_CEILING,
            pf_rate=settings.PF_RATE,
            esic_gross_limit=settings.ESIC_GROSS_LIMIT,
            esic_rate=settings.ESIC_RATE,
        )


DEFAULT_RULES = StatutoryRules()


def round_half_up(value: float) -> float:
    """Round to the nearest integer, .5 going up (NaN/inf pass through)"""
    if math.isnan(value) or math.isinf(value):
        return value
    return math.floor(value + 0.5)


def monthly_ctc(ctc_value: float, ctc_mode: CtcMode) -> float:
    return ctc_value / 12 if ctc_mode == CtcMode.YEARLY else ctc_value


def proration(paid_days: float, total_days: float) -> float:
    return paid_days / total_days if total_days > 0 else 0


def provident_fund(basic: float, enabled: bool = True, rules: StatutoryRules = DEFAULT_RULES) -> float:
    """Employee PF on basic, capped at the statutory wage ceiling"""
    if not enabled:
        return 0
    return round_half_up(min(basic, rules.pf_wage_ceiling) * rules.pf_rate)


def esic_contribution(gross: float, enabled: bool = True, rules: StatutoryRules = DEFAULT_RULES) -> float:
    """Employee ESIC; only gross salaries up to the eligibility limit contribute"""
    if not enabled or gross > rules.esic_gross_limit:
        return 0
    return math.ceil(gross * rules.esic_rate)


def professional_tax(gross: float, enabled: bool = True, rules: StatutoryRules = DEFAULT_RULES) -> float:
    if not enabled:
        return 0
    for limit, tax in rules.pt_slabs:
        if gross <= limit:
            return tax
    return rules.pt_slabs[-1][1]


def split_ctc(payroll_settings: PayrollSettings, rules: StatutoryRules = DEFAULT_RULES) -> Tuple[float, float, float]:
    """Return prorated (basic, hra, special)"""
    monthly = monthly_ctc(payroll_settings.ctc_value, payroll_settings.ctc_mode)
    ratio = proration(payroll_settings.paid_days, payroll_settings.total_days)

    master_basic = round_half_up(monthly * payroll_settings.basic_percent / 100)
    master_hra = round_half_up(master_basic * rules.hra_ratio)
    # Special absorbs the remainder so the masters reconstruct the monthly CTC
    master_special = round_half_up(monthly) - master_basic - master_hra

    basic = round_half_up(master_basic * ratio)
    hra = round_half_up(master_hra * ratio)
    special = round_half_up(master_special * ratio)
    return basic, hra, special


def calculate_payroll(
    payroll_settings: PayrollSettings,
    adjustments: Optional[ManualAdjustments] = None,
    rules: StatutoryRules = DEFAULT_RULES,
) -> PayrollBreakdown:
    """Compute earnings, deductions and totals for one employee-month"""
    adjustments = adjustments or ManualAdjustments()

    basic, hra, special = split_ctc(payroll_settings, rules)
    gross = basic + hra + special

    earnings = PayrollEarnings(
        basic=basic,
        hra=hra,
        special=special,
        incentive=adjustments.incentive,
        arrears=adjustments.arrears,
    )
    deductions = PayrollDeductions(
        pf=provident_fund(basic, payroll_settings.pf_enabled, rules),
        esic=esic_contribution(gross, payroll_settings.esic_enabled, rules),
        pt=professional_tax(gross, payroll_settings.pt_enabled, rules),
        tds=adjustments.tds,
        advance=adjustments.advance,
    )
    return PayrollBreakdown(
        earnings=earnings,
        deductions=deductions,
        totals=compute_totals(earnings, deductions),
    )


def compute_totals(earnings: PayrollEarnings, deductions: PayrollDeductions) -> PayrollTotals:
    gross_earnings = earnings.basic + earnings.hra + earnings.special + earnings.incentive + earnings.arrears
    total_deductions = deductions.pf + deductions.esic + deductions.pt + deductions.tds + deductions.advance
    return PayrollTotals(
        gross_earnings=gross_earnings,
        total_deductions=total_deductions,
        net_pay=gross_earnings - total_deductions,
    )
