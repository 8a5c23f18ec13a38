"""Required Minimum Distribution helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

from .state import SimulationState, YearContext

# IRS Uniform Lifetime Table.
UNIFORM_LIFETIME_DIVISORS: Final[dict[int, float]] = {
    72: 27.4,
    73: 26.5,
    74: 25.5,
    75: 24.6,
    76: 23.7,
    77: 22.9,
    78: 22.0,
    79: 21.1,
    80: 20.2,
    81: 19.4,
    82: 18.5,
    83: 17.7,
    84: 16.8,
    85: 16.0,
    86: 15.2,
    87: 14.4,
    88: 13.7,
    89: 12.9,
    90: 12.2,
    91: 11.5,
    92: 10.8,
    93: 10.1,
    94: 9.5,
    95: 8.9,
    96: 8.4,
    97: 7.8,
    98: 7.3,
    99: 6.8,
    100: 6.4,
    101: 6.0,
    102: 5.6,
    103: 5.2,
    104: 4.9,
    105: 4.6,
    106: 4.3,
    107: 4.1,
    108: 3.9,
    109: 3.7,
    110: 3.5,
    111: 3.4,
    112: 3.3,
    113: 3.1,
    114: 3.0,
    115: 2.9,
    116: 2.8,
    117: 2.7,
    118: 2.5,
    119: 2.3,
    120: 2.0,
}

MIN_TABLE_AGE: Final[int] = min(UNIFORM_LIFETIME_DIVISORS)
MAX_TABLE_AGE: Final[int] = max(UNIFORM_LIFETIME_DIVISORS)


@dataclass(slots=True)
class RmdResult:
    rmd_total: float = 0.0
    rmd_by_account: dict[str, float] = field(default_factory=dict)


def get_rmd_start_age(birth_year: int) -> int:
    """SECURE 2.0 start age: 72 through 1950, 73 for 1951-1959, 75 after."""
    if birth_year <= 1950:
        return 72
    if birth_year <= 1959:
        return 73
    return 75


def lookup_distribution_period(age: int) -> float:
    if age < MIN_TABLE_AGE:
        return 0.0
    if age > MAX_TABLE_AGE:
        return UNIFORM_LIFETIME_DIVISORS[MAX_TABLE_AGE]
    return UNIFORM_LIFETIME_DIVISORS.get(age, UNIFORM_LIFETIME_DIVISORS[MAX_TABLE_AGE])


def compute_rmd_amount(balance: float, age: int) -> float:
    period = lookup_distribution_period(age)
    if period <= 0 or balance <= 0:
        return 0.0
    return balance / period


def _owner_age_and_birth_year(state: SimulationState, ctx: YearContext, owner: str) -> tuple[int, int]:
    household = state.plan.household
    if ctx.is_survivor_phase:
        owner = ctx.survivor_id or "primary"
    if owner == "spouse" and household.spouse is not None:
        age = ctx.age_spouse if ctx.age_spouse is not None else ctx.age_primary
        return age, household.spouse.birth_year
    return ctx.age_primary, household.primary.birth_year


def compute_rmds(state: SimulationState, ctx: YearContext) -> RmdResult:
    """Withdraw each tax-deferred account's RMD from its balance.

    Runs before any discretionary withdrawal, so ``balance`` is still the
    prior year-end value. Consolidated survivor accounts use the survivor's age.
    """
    result = RmdResult()
    for account in state.accounts:
        if account.type != "taxDeferred" or account.balance <= 0:
            continue

        age, birth_year = _owner_age_and_birth_year(state, ctx, account.owner)
        if age < get_rmd_start_age(birth_year):
            continue

        amount = min(account.balance, compute_rmd_amount(account.balance, age))
        if amount <= 0:
            continue

        account.balance -= amount
        result.rmd_total += amount
        result.rmd_by_account[account.id] = result.rmd_by_account.get(account.id, 0.0) + amount
    return result
