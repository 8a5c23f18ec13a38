"""Income and deduction aggregation for a single tax year."""

from __future__ import annotations

from dataclasses import dataclass

from .social_security import compute_taxable_ss
from .tax_data import (
    EXTRA_DEDUCTION_MFJ_65_PLUS_PER_PERSON,
    EXTRA_DEDUCTION_SINGLE_65_PLUS,
    MEDICAL_EXPENSE_FLOOR_PCT,
    PROVISIONAL_BASE_INCLUDES_NET_GAINS,
    SALT_CAP,
    STANDARD_DEDUCTIONS,
)


@dataclass(slots=True)
class TaxYearIncome:
    wages: float = 0.0
    self_employment_income: float = 0.0
    interest_income: float = 0.0
    # qualified_dividends is a subset of dividend_income, not additive.
    dividend_income: float = 0.0
    qualified_dividends: float = 0.0
    capital_gains: float = 0.0
    capital_losses: float = 0.0
    rental_income: float = 0.0
    nqdc_distributions: float = 0.0
    retirement_distributions: float = 0.0
    social_security_income: float = 0.0
    other_income: float = 0.0


@dataclass(slots=True)
class ItemizedDeductions:
    mortgage_interest: float = 0.0
    state_and_local_taxes: float = 0.0
    charitable_contributions: float = 0.0
    medical_expenses: float = 0.0
    other: float = 0.0


@dataclass(slots=True)
class TaxYearDeductions:
    use_itemized: bool = False
    itemized: ItemizedDeductions | None = None
    # Explicit standard deduction; None derives it from the filing status.
    standard_deduction: float | None = None


def compute_total_gross_income(income: TaxYearIncome) -> float:
    return (
        income.wages
        + income.self_employment_income
        + income.interest_income
        + income.dividend_income
        + income.capital_gains
        + income.rental_income
        + income.nqdc_distributions
        + income.retirement_distributions
        + income.social_security_income
        + income.other_income
        - income.capital_losses
    )


def compute_ordinary_before_ss(income: TaxYearIncome) -> float:
    return (
        income.wages
        + income.self_employment_income
        + income.interest_income
        + (income.dividend_income - income.qualified_dividends)
        + income.rental_income
        + income.nqdc_distributions
        + income.retirement_distributions
        + income.other_income
    )


def compute_provisional_base(income: TaxYearIncome) -> float:
    """Non-SS income feeding the Social Security provisional income test.

    Net capital gains are included but floored at zero, so losses can cancel
    gains without ever reducing the ordinary part of the base.
    """
    base = compute_ordinary_before_ss(income)
    if PROVISIONAL_BASE_INCLUDES_NET_GAINS:
        base += max(0.0, income.capital_gains - income.capital_losses)
    return base


def compute_ordinary_income(income: TaxYearIncome, filing_status: str) -> float:
    """Everything except capital gains and qualified dividends, plus taxable SS."""
    taxable_ss = compute_taxable_ss(income.social_security_income, compute_provisional_base(income), filing_status)
    return compute_ordinary_before_ss(income) + taxable_ss


def _standard_deduction(filing_status: str, taxpayers_65_plus: int) -> float:
    base = STANDARD_DEDUCTIONS.get(filing_status, STANDARD_DEDUCTIONS["single"])
    if taxpayers_65_plus <= 0:
        return base
    if filing_status in ("single", "hoh"):
        return base + EXTRA_DEDUCTION_SINGLE_65_PLUS
    return base + EXTRA_DEDUCTION_MFJ_65_PLUS_PER_PERSON * min(taxpayers_65_plus, 2)


def compute_deduction(
    deductions: TaxYearDeductions,
    gross_income: float,
    filing_status: str = "single",
    taxpayers_65_plus: int = 0,
) -> float:
    """Itemized total (SALT capped, medical above the AGI floor) or the standard deduction."""
    if deductions.use_itemized and deductions.itemized is not None:
        itemized = deductions.itemized
        salt = min(itemized.state_and_local_taxes, SALT_CAP)
        medical = max(0.0, itemized.medical_expenses - MEDICAL_EXPENSE_FLOOR_PCT * gross_income)
        return itemized.mortgage_interest + salt + itemized.charitable_contributions + medical + itemized.other

    if deductions.standard_deduction is not None:
        return deductions.standard_deduction
    return _standard_deduction(filing_status, taxpayers_65_plus)
