"""Core year-by-year retirement simulation engine."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any

from .convergence import iterate_until_converged
from .income import MandatoryIncome, compute_mandatory_income
from .inflation import cumulative_inflation_cached
from .phase import determine_phase
from .rebalance import rebalance
from .returns import apply_fees, apply_returns, compute_baseline_return
from .rmd import compute_rmds
from .schema import PlanInput
from .spending import compute_net_spendable, inflate_spending
from .state import AccountState, MarketScenario, SimulationState, accounts_from_plan
from .tax import TaxResult, calculate_taxes, federal_rates, inflate_deduction
from .tax_data import INITIAL_TAX_ESTIMATE_FRACTION
from .withdrawals import WithdrawalResult, compute_withdrawal_target, solve_withdrawals

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class YearResult:
    year: int
    age_primary: int
    age_spouse: int | None
    is_survivor_phase: bool
    filing_status: str
    target_spend: float
    actual_spend: float
    gross_income: float
    social_security_income: float
    taxable_social_security: float
    nqdc_distributions: float
    rmd_total: float
    rmd_by_account: dict[str, float]
    pension_and_other_income: float
    adjustment_income: float
    roth_withdrawals: float
    withdrawals_by_account: dict[str, float]
    taxes_federal: float
    taxes_state: float
    taxable_ordinary_income: float
    taxable_capital_gains: float
    standard_deduction: float
    net_spendable: float
    shortfall: float
    surplus: float
    fees: float
    rebalance_realized_gains: float
    tax_converged: bool
    convergence_iterations: int
    end_balance_by_account: dict[str, float]
    cost_basis_by_account: dict[str, float]

    @property
    def end_balance_total(self) -> float:
        return sum(self.end_balance_by_account.values())


@dataclass(slots=True)
class PlanSummary:
    success_probability: float
    median_terminal_value: float
    worst_case_shortfall: float | None = None


@dataclass(slots=True)
class PlanResult:
    summary: PlanSummary
    yearly: list[YearResult]
    assumptions_used: dict[str, Any] = field(default_factory=dict)


def initialize_state(plan: PlanInput, scenario: MarketScenario | None = None) -> SimulationState:
    """Fresh per-run state; nothing mutable is shared with ``plan`` or other runs."""
    accounts = accounts_from_plan(plan)
    return SimulationState(
        accounts=accounts,
        plan=plan,
        current_year=plan.start_year,
        scenario_returns=list(scenario.returns) if scenario is not None else None,
        scenario_inflation=(
            list(scenario.inflation) if scenario is not None and scenario.inflation is not None else None
        ),
        baseline_return=compute_baseline_return(accounts),
    )


def compute_horizon(plan: PlanInput) -> int:
    primary = plan.household.primary
    spouse = plan.household.spouse
    primary_years = primary.life_expectancy - primary.current_age
    spouse_years = spouse.life_expectancy - spouse.current_age if spouse is not None else 0
    horizon = max(primary_years, spouse_years)
    if horizon <= 0:
        raise ValueError(
            f"invalid simulation horizon: {horizon} years "
            f"(primary age {primary.current_age}, life expectancy {primary.life_expectancy})"
        )
    return horizon


def _snapshot(accounts: list[AccountState]) -> list[tuple[float, float]]:
    return [(account.balance, account.cost_basis) for account in accounts]


def _restore(accounts: list[AccountState], snapshot: list[tuple[float, float]]) -> None:
    for account, (balance, cost_basis) in zip(accounts, snapshot):
        account.balance = balance
        account.cost_basis = cost_basis


def simulate_year(state: SimulationState) -> YearResult:
    """Run one year's pipeline against ``state`` and record the outcome.

    Investment returns are not applied here; the driver grows balances after
    the result is recorded so next year's RMDs see this year's ending value.
    """
    plan = state.plan
    ctx = determine_phase(state)
    mandatory = compute_mandatory_income(state, ctx)
    standard_deduction = inflate_deduction(state, ctx)
    rmd = compute_rmds(state, ctx)
    spending = inflate_spending(state, ctx)

    federal_rate, cap_gains_rate = federal_rates(plan)
    inflation_multiplier = cumulative_inflation_cached(
        ctx.year_index, state.cumulative_inflation_by_year, plan, state.scenario_inflation
    )
    current_ordinary = mandatory.nqdc_distributions + mandatory.taxable_other_ordinary + rmd.rmd_total
    rebalance_gains_to_tax = state.prior_year_rebalance_gains

    if state.prior_year_total_tax > 0:
        initial_estimate = state.prior_year_total_tax
    else:
        initial_estimate = spending.actual_spend * federal_rate / 100.0 * INITIAL_TAX_ESTIMATE_FRACTION

    snapshot = _snapshot(state.accounts)

    def _solve(estimated_tax: float) -> tuple[tuple[WithdrawalResult, TaxResult], float]:
        _restore(state.accounts, snapshot)
        target = compute_withdrawal_target(spending.actual_spend, estimated_tax, mandatory, rmd.rmd_total)
        withdrawals = solve_withdrawals(
            state.accounts,
            target,
            plan.strategy.withdrawal_order,
            current_ordinary_income=current_ordinary,
            standard_deduction=standard_deduction,
            federal_rate_pct=federal_rate,
            cap_gains_rate_pct=cap_gains_rate,
        )
        taxes = calculate_taxes(
            plan,
            mandatory,
            rmd.rmd_total,
            withdrawals.taxable_ordinary_from_withdrawals,
            withdrawals.taxable_capital_gains_from_withdrawals + rebalance_gains_to_tax,
            standard_deduction,
            ctx.filing_status,
            inflation_multiplier,
        )
        return (withdrawals, taxes), taxes.total

    convergence = iterate_until_converged(_solve, initial_estimate)
    withdrawals, taxes = convergence.result
    if not convergence.converged:
        logger.warning(
            "Tax/withdrawal solver did not converge in %s after %s iterations; using last estimate",
            ctx.calendar_year,
            convergence.iterations,
        )

    cash_in = _cash_in(mandatory, rmd.rmd_total, withdrawals)
    state.prior_year_total_tax = taxes.total if cash_in > 0 else 0.0

    net = compute_net_spendable(
        spending.actual_spend,
        mandatory,
        rmd.rmd_total,
        withdrawals.total_withdrawn,
        withdrawals.roth_withdrawals,
        taxes.total,
        state.accounts,
    )
    fees = apply_fees(state.accounts)
    rebalanced = rebalance(state.accounts, plan.strategy.rebalance_frequency)
    state.prior_year_rebalance_gains = rebalanced.realized_gains

    logger.debug(
        "year=%s spend=%.2f withdrawn=%.2f tax=%.2f shortfall=%.2f",
        ctx.calendar_year,
        spending.actual_spend,
        withdrawals.total_withdrawn,
        taxes.total,
        net.shortfall,
    )

    return YearResult(
        year=ctx.calendar_year,
        age_primary=ctx.age_primary,
        age_spouse=ctx.age_spouse,
        is_survivor_phase=ctx.is_survivor_phase,
        filing_status=ctx.filing_status,
        target_spend=spending.target_spend,
        actual_spend=spending.actual_spend,
        gross_income=net.gross_income,
        social_security_income=mandatory.social_security_income,
        taxable_social_security=taxes.taxable_social_security,
        nqdc_distributions=mandatory.nqdc_distributions,
        rmd_total=rmd.rmd_total,
        rmd_by_account=dict(rmd.rmd_by_account),
        pension_and_other_income=mandatory.pension_and_other_income,
        adjustment_income=mandatory.adjustment_income,
        roth_withdrawals=withdrawals.roth_withdrawals,
        withdrawals_by_account=dict(withdrawals.withdrawals_by_account),
        taxes_federal=taxes.taxes_federal,
        taxes_state=taxes.taxes_state,
        taxable_ordinary_income=taxes.taxable_ordinary_income,
        taxable_capital_gains=taxes.taxable_capital_gains,
        standard_deduction=standard_deduction,
        net_spendable=net.net_spendable,
        shortfall=net.shortfall,
        surplus=net.surplus,
        fees=fees,
        rebalance_realized_gains=rebalanced.realized_gains,
        tax_converged=convergence.converged,
        convergence_iterations=convergence.iterations,
        end_balance_by_account={account.id: max(0.0, account.balance) for account in state.accounts},
        cost_basis_by_account={account.id: max(0.0, account.cost_basis) for account in state.accounts},
    )


def _cash_in(mandatory: MandatoryIncome, rmd_total: float, withdrawals: WithdrawalResult) -> float:
    return mandatory.total + rmd_total + withdrawals.total_withdrawn


def _assumptions(plan: PlanInput, horizon: int, scenario: MarketScenario | None) -> dict[str, Any]:
    federal_rate, cap_gains_rate = federal_rates(plan)
    return {
        "simulation_mode": plan.market.simulation_mode,
        "scenario": scenario.name if scenario is not None else None,
        "inflation_pct": plan.spending.inflation_pct,
        "federal_model": plan.taxes.federal_model,
        "state_model": plan.taxes.state_model,
        "federal_effective_rate_pct": federal_rate,
        "cap_gains_rate_pct": cap_gains_rate,
        "withdrawal_order": plan.strategy.withdrawal_order,
        "rebalance_frequency": plan.strategy.rebalance_frequency,
        "guardrails_enabled": plan.strategy.guardrails_enabled,
        "survivor_filing_years": plan.taxes.survivor_filing_years,
        "horizon": horizon,
        "start_year": plan.start_year,
    }


def summarize(yearly: list[YearResult]) -> PlanSummary:
    """Single-path summary: success is all-or-nothing on any shortfall year."""
    terminal = yearly[-1].end_balance_total if yearly else 0.0
    total_shortfall = sum(row.shortfall for row in yearly)
    return PlanSummary(
        success_probability=0.0 if any(row.shortfall > 0 for row in yearly) else 1.0,
        median_terminal_value=terminal,
        worst_case_shortfall=total_shortfall if total_shortfall > 0 else None,
    )


def simulate(plan: PlanInput, scenario: MarketScenario | None = None) -> PlanResult:
    """Simulate ``plan`` over its full horizon.

    Without ``scenario`` every account grows at its own expected return and
    the plan's inflation rate applies. With one, the scenario's year-indexed
    series replace them for as many years as they cover.
    """
    horizon = compute_horizon(plan)
    state = initialize_state(plan, scenario)
    logger.debug("Simulating %s years from %s", horizon, plan.start_year)

    yearly: list[YearResult] = []
    for year_index in range(horizon):
        state.year_index = year_index
        state.current_year = plan.start_year + year_index
        cumulative_inflation_cached(year_index, state.cumulative_inflation_by_year, plan, state.scenario_inflation)

        yearly.append(simulate_year(state))

        state.baseline_return = compute_baseline_return(state.accounts)
        apply_returns(state)

    return PlanResult(
        summary=summarize(yearly),
        yearly=yearly,
        assumptions_used=_assumptions(plan, horizon, scenario),
    )
