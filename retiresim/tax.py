"""Federal and state tax computation for a simulated year."""

from __future__ import annotations

from dataclasses import dataclass

from .income import MandatoryIncome
from .inflation import cumulative_inflation_cached
from .schema import PlanInput
from .social_security import compute_taxable_ss
from .state import SimulationState, YearContext
from .tax_data import (
    AGE_65_BONUS_AGE,
    CAPITAL_GAINS_BRACKETS,
    DEFAULT_CAP_GAINS_RATE_PCT,
    DEFAULT_FEDERAL_EFFECTIVE_RATE_PCT,
    EXTRA_DEDUCTION_MFJ_65_PLUS_PER_PERSON,
    EXTRA_DEDUCTION_SINGLE_65_PLUS,
    FEDERAL_BRACKETS,
    STANDARD_DEDUCTIONS,
    STATE_TAX_DATA,
)
from .tax_year import TaxYearIncome, compute_ordinary_before_ss, compute_provisional_base


@dataclass(slots=True)
class TaxResult:
    taxes_federal: float
    taxes_state: float
    taxable_ordinary_income: float
    taxable_capital_gains: float
    taxable_social_security: float = 0.0

    @property
    def total(self) -> float:
        return self.taxes_federal + self.taxes_state


def normalize_filing_status(filing_status: str) -> str:
    if filing_status in STANDARD_DEDUCTIONS:
        return filing_status
    return "single"


def federal_rates(plan: PlanInput) -> tuple[float, float]:
    """Return (federal effective rate pct, capital gains rate pct) with defaults applied."""
    taxes = plan.taxes
    federal = taxes.federal_effective_rate_pct
    cap_gains = taxes.cap_gains_rate_pct
    return (
        DEFAULT_FEDERAL_EFFECTIVE_RATE_PCT if federal is None else federal,
        DEFAULT_CAP_GAINS_RATE_PCT if cap_gains is None else cap_gains,
    )


def _adjusted_brackets(
    brackets_by_status: dict[str, list[tuple[float | None, float]]],
    filing_status: str,
    inflation_multiplier: float,
) -> list[tuple[float | None, float]]:
    base = brackets_by_status[normalize_filing_status(filing_status)]
    return [(None if upper is None else upper * inflation_multiplier, rate) for upper, rate in base]


def _progressive_tax(amount: float, brackets: list[tuple[float | None, float]]) -> float:
    if amount <= 0:
        return 0.0

    remaining = amount
    lower = 0.0
    tax = 0.0
    for upper, rate in brackets:
        if remaining <= 0:
            break
        if upper is None:
            taxable_at_rate = remaining
        else:
            taxable_at_rate = min(remaining, max(0.0, upper - lower))
        tax += taxable_at_rate * rate
        remaining -= taxable_at_rate
        if upper is None:
            break
        lower = upper
    return max(0.0, tax)


def compute_federal_income_tax(taxable_income: float, filing_status: str, inflation_multiplier: float = 1.0) -> float:
    return _progressive_tax(taxable_income, _adjusted_brackets(FEDERAL_BRACKETS, filing_status, inflation_multiplier))


def compute_capital_gains_tax(
    gains: float,
    ordinary_taxable_income: float,
    filing_status: str,
    inflation_multiplier: float = 1.0,
) -> float:
    """Tax gains stacked on top of ordinary taxable income in the 0/15/20% brackets."""
    if gains <= 0:
        return 0.0

    brackets = _adjusted_brackets(CAPITAL_GAINS_BRACKETS, filing_status, inflation_multiplier)
    base = max(0.0, ordinary_taxable_income)
    top = base + gains
    lower = 0.0
    tax = 0.0
    for upper, rate in brackets:
        band_top = top if upper is None else min(top, upper)
        band_bottom = max(base, lower)
        if band_top > band_bottom:
            tax += (band_top - band_bottom) * rate
        if upper is None or upper >= top:
            break
        lower = upper
    return max(0.0, tax)


def compute_state_tax(
    state_code: str,
    total_ordinary_income: float,
    taxable_ss: float,
    total_capital_gains: float,
    federal_standard_deduction: float,
    income_rate_override: float | None = None,
    cap_gains_rate_override: float | None = None,
) -> float:
    """State tax on ordinary income and gains using flat effective rates.

    Unknown states pay nothing unless an override rate is configured. States
    without a tabulated deduction get half the federal deduction.
    """
    info = STATE_TAX_DATA.get(state_code.upper())

    if income_rate_override is not None:
        income_rate = income_rate_override
    elif info is not None:
        income_rate = info[0]
    else:
        income_rate = 0.0

    if cap_gains_rate_override is not None:
        cap_gains_rate = cap_gains_rate_override
    elif info is not None:
        cap_gains_rate = info[1]
    else:
        cap_gains_rate = income_rate

    state_ordinary = total_ordinary_income
    state_deduction: float | None = None
    if info is not None:
        ss_exempt = info[2]
        if ss_exempt == "yes":
            state_ordinary -= taxable_ss
        elif ss_exempt == "partial":
            state_ordinary -= taxable_ss * 0.5
        state_deduction = info[3]
    if state_deduction is None:
        state_deduction = float(round(federal_standard_deduction * 0.5))

    state_taxable = max(0.0, state_ordinary - state_deduction)
    return state_taxable * income_rate / 100.0 + max(0.0, total_capital_gains) * cap_gains_rate / 100.0


def _age_bonus(ctx: YearContext) -> float:
    bonus = 0.0
    if ctx.filing_status == "single":
        if ctx.primary_alive and ctx.age_primary >= AGE_65_BONUS_AGE:
            bonus += EXTRA_DEDUCTION_SINGLE_65_PLUS
        if not ctx.primary_alive and ctx.spouse_alive and ctx.age_spouse is not None and ctx.age_spouse >= AGE_65_BONUS_AGE:
            bonus += EXTRA_DEDUCTION_SINGLE_65_PLUS
        return bonus

    if ctx.primary_alive and ctx.age_primary >= AGE_65_BONUS_AGE:
        bonus += EXTRA_DEDUCTION_MFJ_65_PLUS_PER_PERSON
    if ctx.spouse_alive and ctx.age_spouse is not None and ctx.age_spouse >= AGE_65_BONUS_AGE:
        bonus += EXTRA_DEDUCTION_MFJ_65_PLUS_PER_PERSON
    return bonus


def inflate_deduction(state: SimulationState, ctx: YearContext) -> float:
    """Standard deduction for the year, inflated from year one, with 65+ add-ons.

    Without an override the base follows the year's filing status, so it
    resets when a survivor moves to single.
    """
    plan = state.plan
    multiplier = cumulative_inflation_cached(
        ctx.year_index, state.cumulative_inflation_by_year, plan, state.scenario_inflation
    )
    override = plan.taxes.standard_deduction_override
    base = override if override is not None else STANDARD_DEDUCTIONS[normalize_filing_status(ctx.filing_status)]
    return (base + _age_bonus(ctx)) * multiplier


def calculate_taxes(
    plan: PlanInput,
    mandatory: MandatoryIncome,
    rmd_total: float,
    taxable_ordinary_from_withdrawals: float,
    taxable_capital_gains: float,
    standard_deduction: float,
    filing_status: str,
    inflation_multiplier: float = 1.0,
) -> TaxResult:
    """Compute federal and state taxes for one candidate withdrawal mix.

    The federal model is either a flat effective rate on taxable ordinary
    income plus a flat capital gains rate ("effective"), or progressive
    brackets indexed by ``inflation_multiplier`` ("bracket").
    """
    taxes = plan.taxes
    federal_rate, cap_gains_rate = federal_rates(plan)

    total_capital_gains = max(0.0, taxable_capital_gains)
    year_income = TaxYearIncome(
        nqdc_distributions=mandatory.nqdc_distributions,
        retirement_distributions=rmd_total + taxable_ordinary_from_withdrawals,
        social_security_income=mandatory.social_security_income,
        other_income=mandatory.taxable_other_ordinary,
        capital_gains=total_capital_gains,
    )
    ordinary_before_ss = compute_ordinary_before_ss(year_income)
    taxable_ss = compute_taxable_ss(
        mandatory.social_security_income, compute_provisional_base(year_income), filing_status
    )
    total_ordinary = ordinary_before_ss + taxable_ss

    federal_taxable_ordinary = max(0.0, total_ordinary - standard_deduction)
    if taxes.federal_model == "bracket":
        ordinary_tax = compute_federal_income_tax(federal_taxable_ordinary, filing_status, inflation_multiplier)
        if taxes.cap_gains_rate_pct is not None:
            cap_gains_tax = total_capital_gains * taxes.cap_gains_rate_pct / 100.0
        else:
            cap_gains_tax = compute_capital_gains_tax(
                total_capital_gains, federal_taxable_ordinary, filing_status, inflation_multiplier
            )
    else:
        ordinary_tax = federal_taxable_ordinary * federal_rate / 100.0
        cap_gains_tax = total_capital_gains * cap_gains_rate / 100.0

    state_tax = 0.0
    if taxes.state_model != "none":
        state_tax = compute_state_tax(
            plan.household.state_of_residence,
            total_ordinary,
            taxable_ss,
            total_capital_gains,
            standard_deduction,
            taxes.state_effective_rate_pct,
            taxes.state_cap_gains_rate_pct,
        )

    return TaxResult(
        taxes_federal=max(0.0, ordinary_tax + cap_gains_tax),
        taxes_state=max(0.0, state_tax),
        taxable_ordinary_income=total_ordinary,
        taxable_capital_gains=total_capital_gains,
        taxable_social_security=taxable_ss,
    )
