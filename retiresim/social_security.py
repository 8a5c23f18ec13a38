"""Social Security benefit projection and benefit taxation."""

from __future__ import annotations

from .inflation import cola_multiplier_for_range
from .schema import PersonProfile, PlanInput
from .state import YearContext
from .tax_data import SS_PROVISIONAL_INCOME_THRESHOLDS


def compute_taxable_ss(ss_income: float, other_taxable_income: float, filing_status: str) -> float:
    """Taxable portion of benefits under the IRS Pub. 915 worksheet.

    Provisional income is ``other_taxable_income + 0.5 * ss_income``. Unknown
    filing statuses use the single thresholds.
    """
    if ss_income <= 0:
        return 0.0

    lower, upper = SS_PROVISIONAL_INCOME_THRESHOLDS.get(filing_status, SS_PROVISIONAL_INCOME_THRESHOLDS["single"])
    provisional = other_taxable_income + 0.5 * ss_income
    if provisional <= lower:
        return 0.0
    if provisional <= upper:
        return min(0.5 * ss_income, 0.5 * (provisional - lower))
    return min(0.85 * ss_income, 0.85 * (provisional - upper) + 0.5 * (upper - lower))


def _person_benefit(
    person: PersonProfile,
    calendar_year: int,
    year_index: int,
    plan: PlanInput,
    cache: list[float],
    scenario_inflation: list[float] | None,
) -> float:
    claim = person.social_security
    if claim is None:
        return 0.0

    claim_year = person.birth_year + claim.claim_age
    if calendar_year < claim_year:
        return 0.0

    annual = claim.estimated_monthly_benefit_at_claim * 12.0
    years_since_claim = calendar_year - claim_year
    if years_since_claim == 0:
        return annual

    return annual * cola_multiplier_for_range(
        year_index - years_since_claim,
        year_index,
        claim.cola_pct,
        plan,
        cache,
        scenario_inflation,
    )


def compute_social_security(
    plan: PlanInput,
    ctx: YearContext,
    cache: list[float],
    scenario_inflation: list[float] | None = None,
) -> float:
    """Household gross benefits for the year.

    In the survivor phase the survivor keeps the larger of the two benefits.
    """
    household = plan.household

    def benefit(person: PersonProfile | None) -> float:
        if person is None:
            return 0.0
        return _person_benefit(person, ctx.calendar_year, ctx.year_index, plan, cache, scenario_inflation)

    primary_ss = benefit(household.primary) if ctx.primary_alive else 0.0
    spouse_ss = benefit(household.spouse) if ctx.spouse_alive else 0.0

    if ctx.is_survivor_phase and ctx.survivor_id is not None:
        if ctx.survivor_id == "primary":
            survivor, deceased, own = household.primary, household.spouse, primary_ss
        else:
            survivor, deceased, own = household.spouse, household.primary, spouse_ss
        if (
            survivor is not None
            and deceased is not None
            and survivor.social_security is not None
            and deceased.social_security is not None
        ):
            return max(own, benefit(deceased))
        return own

    return primary_ss + spouse_ss
