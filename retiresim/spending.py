"""Spending targets, guardrails and the year's net spendable cash."""

from __future__ import annotations

from dataclasses import dataclass

from .income import MandatoryIncome
from .inflation import cumulative_inflation_cached
from .state import AccountState, SimulationState, YearContext
from .tax_data import GUARDRAIL_MAX_WITHDRAWAL_RATE_PCT, GUARDRAIL_PORTFOLIO_CEILING_MULTIPLIER


@dataclass(slots=True)
class SpendingResult:
    target_spend: float
    actual_spend: float


@dataclass(slots=True)
class NetSpendableResult:
    net_spendable: float
    shortfall: float
    surplus: float
    gross_income: float


def apply_guardrails(
    target_spend: float,
    total_portfolio: float,
    inflation_multiplier: float,
    ceiling: float | None = None,
    floor: float | None = None,
) -> float:
    """Clamp spending against the whole portfolio.

    Ceiling rule first: a portfolio above 20x the inflated ceiling spends the
    ceiling. Floor rule second: a withdrawal rate above 6% is cut back to 6% of
    the portfolio but never below the inflated floor.
    """
    if ceiling is not None and ceiling > 0:
        inflated_ceiling = ceiling * inflation_multiplier
        if total_portfolio > GUARDRAIL_PORTFOLIO_CEILING_MULTIPLIER * inflated_ceiling:
            return inflated_ceiling

    if floor is not None and floor > 0 and total_portfolio > 0:
        inflated_floor = floor * inflation_multiplier
        withdrawal_rate = target_spend / total_portfolio * 100.0
        if withdrawal_rate > GUARDRAIL_MAX_WITHDRAWAL_RATE_PCT:
            capped = total_portfolio * GUARDRAIL_MAX_WITHDRAWAL_RATE_PCT / 100.0
            return max(inflated_floor, min(target_spend, capped))

    return target_spend


def inflate_spending(state: SimulationState, ctx: YearContext) -> SpendingResult:
    plan = state.plan
    if ctx.both_dead:
        return SpendingResult(target_spend=0.0, actual_spend=0.0)

    multiplier = cumulative_inflation_cached(
        ctx.year_index, state.cumulative_inflation_by_year, plan, state.scenario_inflation
    )
    target_spend = plan.spending.target_annual_spend * multiplier
    if ctx.is_survivor_phase:
        target_spend *= plan.spending.survivor_spending_adjustment_pct / 100.0

    actual_spend = target_spend
    if plan.strategy.guardrails_enabled:
        actual_spend = apply_guardrails(
            target_spend,
            state.total_balance(),
            multiplier,
            plan.spending.ceiling_annual_spend,
            plan.spending.floor_annual_spend,
        )
    return SpendingResult(target_spend=target_spend, actual_spend=actual_spend)


def _deposit_surplus(accounts: list[AccountState], surplus: float) -> None:
    taxable = [account for account in accounts if account.type == "taxable"]
    if not taxable:
        return
    target = max(taxable, key=lambda account: account.balance)
    target.balance += surplus
    target.cost_basis += surplus


def compute_net_spendable(
    actual_spend: float,
    mandatory: MandatoryIncome,
    rmd_total: float,
    total_withdrawn: float,
    roth_withdrawals: float,
    total_tax: float,
    accounts: list[AccountState],
) -> NetSpendableResult:
    """Compare after-tax cash with the spending need.

    Surplus cash is reinvested in the largest taxable account as new basis;
    without a taxable account it is simply spent.
    """
    gross_income = mandatory.total + rmd_total + (total_withdrawn - roth_withdrawals)
    net_spendable = gross_income + roth_withdrawals - total_tax
    shortfall = max(0.0, actual_spend - net_spendable)
    surplus = max(0.0, net_spendable - actual_spend)
    if surplus > 0:
        _deposit_surplus(accounts, surplus)
    return NetSpendableResult(
        net_spendable=net_spendable,
        shortfall=shortfall,
        surplus=surplus,
        gross_income=gross_income,
    )
