"""Joint/survivor phase tracking and filing status derivation."""

from __future__ import annotations

from .state import AccountState, SimulationState, YearContext
from .tax_data import SURVIVOR_FILING_YEARS


def derive_survivor_filing_status(survivor_year_count: int, survivor_filing_years: int = SURVIVOR_FILING_YEARS) -> str:
    """Filing status for the n-th survivor year (1 = year of death).

    The first ``survivor_filing_years`` years keep joint treatment as
    "survivor"; later years file "single".
    """
    if survivor_year_count <= survivor_filing_years:
        return "survivor"
    return "single"


def _consolidate_accounts(accounts: list[AccountState], survivor_id: str) -> None:
    deceased_id = "spouse" if survivor_id == "primary" else "primary"
    for account in accounts:
        if account.owner in (deceased_id, "joint"):
            account.owner = survivor_id


def determine_phase(state: SimulationState) -> YearContext:
    """Build the year's context and advance the survivor bookkeeping on ``state``.

    Ages freeze at life expectancy once a person has died. On the first
    survivor year the deceased's and joint accounts move to the survivor.
    """
    household = state.plan.household
    primary = household.primary
    spouse = household.spouse
    year_index = state.year_index

    primary_alive = year_index < primary.life_expectancy - primary.current_age
    age_primary = primary.current_age + year_index if primary_alive else primary.life_expectancy

    age_spouse: int | None = None
    spouse_alive = False
    if spouse is not None:
        spouse_alive = year_index < spouse.life_expectancy - spouse.current_age
        age_spouse = spouse.current_age + year_index if spouse_alive else spouse.life_expectancy

    has_spouse = spouse is not None
    is_survivor_phase = has_spouse and (primary_alive != spouse_alive)

    survivor_id: str | None = None
    survivor_year_count = 0
    if is_survivor_phase:
        survivor_id = "primary" if primary_alive else "spouse"
        if not state.survivor_transitioned:
            state.first_survivor_year_index = year_index
            state.survivor_transitioned = True
            _consolidate_accounts(state.accounts, survivor_id)
        survivor_year_count = year_index - state.first_survivor_year_index + 1

    both_dead = (not primary_alive and not spouse_alive) if has_spouse else not primary_alive

    filing_status = household.filing_status
    if both_dead:
        filing_status = "single"
    elif is_survivor_phase:
        filing_status = derive_survivor_filing_status(survivor_year_count, state.plan.taxes.survivor_filing_years)

    return YearContext(
        year_index=year_index,
        calendar_year=state.current_year,
        age_primary=age_primary,
        age_spouse=age_spouse,
        is_survivor_phase=is_survivor_phase,
        survivor_id=survivor_id,
        survivor_year_count=survivor_year_count,
        filing_status=filing_status,
        primary_alive=primary_alive,
        spouse_alive=spouse_alive,
        both_dead=both_dead,
    )
