"""Mutable per-run simulation state and per-year context."""

from __future__ import annotations

from dataclasses import dataclass, field

from .schema import DeferredCompSchedule, PlanInput


@dataclass(slots=True)
class AccountState:
    id: str
    type: str
    owner: str
    balance: float
    cost_basis: float
    expected_return_pct: float
    fee_pct: float
    target_allocation_pct: float | None = None
    deferred_comp_schedule: DeferredCompSchedule | None = None
    volatility_pct: float | None = None


@dataclass(slots=True)
class MarketScenario:
    """Year-indexed return and inflation percentages for one market path."""

    name: str
    returns: list[float]
    inflation: list[float] | None = None


@dataclass(slots=True)
class YearContext:
    year_index: int
    calendar_year: int
    age_primary: int
    age_spouse: int | None
    is_survivor_phase: bool
    survivor_id: str | None
    survivor_year_count: int
    filing_status: str
    primary_alive: bool
    spouse_alive: bool
    both_dead: bool = False


@dataclass(slots=True)
class SimulationState:
    accounts: list[AccountState]
    plan: PlanInput
    current_year: int
    year_index: int = 0
    prior_year_total_tax: float = 0.0
    prior_year_rebalance_gains: float = 0.0
    scenario_returns: list[float] | None = None
    scenario_inflation: list[float] | None = None
    baseline_return: float = 0.0
    survivor_transitioned: bool = False
    first_survivor_year_index: int = -1
    # cumulative_inflation_by_year[i] = product of (1 + rate_j / 100) for j < i
    cumulative_inflation_by_year: list[float] = field(default_factory=lambda: [1.0])

    def total_balance(self) -> float:
        return sum(account.balance for account in self.accounts)


def accounts_from_plan(plan: PlanInput) -> list[AccountState]:
    return [
        AccountState(
            id=account.id,
            type=account.type,
            owner=account.owner,
            balance=account.current_balance,
            cost_basis=account.cost_basis if account.cost_basis is not None else account.current_balance,
            expected_return_pct=account.expected_return_pct,
            fee_pct=account.fee_pct,
            target_allocation_pct=account.target_allocation_pct,
            deferred_comp_schedule=account.deferred_comp_schedule,
            volatility_pct=account.volatility_pct,
        )
        for account in plan.accounts
    ]
