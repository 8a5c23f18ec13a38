"""Income that arrives regardless of the withdrawal strategy."""

from __future__ import annotations

from dataclasses import dataclass

from .inflation import cola_multiplier_for_range, inflation_multiplier_for_range
from .social_security import compute_social_security
from .state import SimulationState, YearContext


@dataclass(slots=True)
class MandatoryIncome:
    social_security_income: float = 0.0
    nqdc_distributions: float = 0.0
    pension_and_other_income: float = 0.0
    adjustment_income: float = 0.0
    # Taxable streams and adjustments; excludes SS and NQDC.
    taxable_other_ordinary: float = 0.0

    @property
    def total(self) -> float:
        return (
            self.social_security_income
            + self.nqdc_distributions
            + self.pension_and_other_income
            + self.adjustment_income
        )


def _is_owner_alive(owner: str, ctx: YearContext) -> bool:
    if owner == "primary":
        return ctx.primary_alive
    if owner == "spouse":
        return ctx.spouse_alive
    return ctx.primary_alive or ctx.spouse_alive


def _nqdc_distributions(state: SimulationState, ctx: YearContext) -> float:
    """Pay scheduled deferred-comp amounts, reducing each account's balance.

    Anything left after the schedule's end year is paid as a lump sum.
    """
    total = 0.0
    for account in state.accounts:
        schedule = account.deferred_comp_schedule
        if account.type != "deferredComp" or schedule is None or account.balance <= 0:
            continue
        if ctx.calendar_year < schedule.start_year:
            continue

        if ctx.calendar_year > schedule.end_year:
            total += account.balance
            account.balance = 0.0
            continue

        amount = schedule.amount * 12.0 if schedule.frequency == "monthly" else schedule.amount
        years_since_start = ctx.calendar_year - schedule.start_year
        if schedule.inflation_adjusted and years_since_start > 0:
            amount *= inflation_multiplier_for_range(
                state.year_index - years_since_start,
                state.year_index,
                state.plan,
                state.cumulative_inflation_by_year,
                state.scenario_inflation,
            )

        amount = min(amount, account.balance)
        account.balance -= amount
        total += amount
    return total


def _income_streams(state: SimulationState, ctx: YearContext) -> tuple[float, float]:
    total = 0.0
    taxable = 0.0
    for stream in state.plan.other_income:
        if ctx.calendar_year < stream.start_year:
            continue
        if stream.end_year is not None and ctx.calendar_year > stream.end_year:
            continue
        if not _is_owner_alive(stream.owner, ctx) and not (ctx.is_survivor_phase and stream.survivor_continues):
            continue

        amount = stream.annual_amount
        years_since_start = ctx.calendar_year - stream.start_year
        if years_since_start > 0 and stream.cola_pct:
            amount *= cola_multiplier_for_range(
                state.year_index - years_since_start,
                state.year_index,
                stream.cola_pct,
                state.plan,
                state.cumulative_inflation_by_year,
                state.scenario_inflation,
            )

        total += amount
        if stream.taxable:
            taxable += amount
    return total, taxable


def _adjustments(state: SimulationState, ctx: YearContext) -> tuple[float, float]:
    total = 0.0
    taxable = 0.0
    for adjustment in state.plan.adjustments:
        end_year = adjustment.end_year if adjustment.end_year is not None else adjustment.year
        if not adjustment.year <= ctx.calendar_year <= end_year:
            continue

        amount = adjustment.amount
        years_since_start = ctx.calendar_year - adjustment.year
        if adjustment.inflation_adjusted and years_since_start > 0:
            amount *= inflation_multiplier_for_range(
                state.year_index - years_since_start,
                state.year_index,
                state.plan,
                state.cumulative_inflation_by_year,
                state.scenario_inflation,
            )

        total += amount
        if adjustment.taxable:
            taxable += amount
    return total, taxable


def compute_mandatory_income(state: SimulationState, ctx: YearContext) -> MandatoryIncome:
    social_security = compute_social_security(
        state.plan,
        ctx,
        state.cumulative_inflation_by_year,
        state.scenario_inflation,
    )
    nqdc = _nqdc_distributions(state, ctx)
    streams_total, streams_taxable = _income_streams(state, ctx)
    adjustments_total, adjustments_taxable = _adjustments(state, ctx)
    return MandatoryIncome(
        social_security_income=social_security,
        nqdc_distributions=nqdc,
        pension_and_other_income=streams_total,
        adjustment_income=adjustments_total,
        taxable_other_ordinary=streams_taxable + adjustments_taxable,
    )
