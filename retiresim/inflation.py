"""Inflation rates and cumulative multipliers for a simulation run."""

from __future__ import annotations

from .schema import PlanInput


def get_inflation_rate(year_index: int, plan: PlanInput, scenario_inflation: list[float] | None = None) -> float:
    """Inflation percent for a year: scenario series when available, else the plan rate."""
    if scenario_inflation is not None and 0 <= year_index < len(scenario_inflation):
        return scenario_inflation[year_index]
    return plan.spending.inflation_pct


def cumulative_inflation(year_index: int, plan: PlanInput, scenario_inflation: list[float] | None = None) -> float:
    cumulative = 1.0
    for idx in range(year_index):
        cumulative *= 1.0 + get_inflation_rate(idx, plan, scenario_inflation) / 100.0
    return cumulative


def cumulative_inflation_cached(
    year_index: int,
    cache: list[float],
    plan: PlanInput,
    scenario_inflation: list[float] | None = None,
) -> float:
    """Return the multiplier for ``year_index``, extending ``cache`` in place as needed.

    Each index is computed once per run from its predecessor.
    """
    if not cache:
        cache.append(1.0)
    while len(cache) <= year_index:
        prev_idx = len(cache) - 1
        cache.append(cache[prev_idx] * (1.0 + get_inflation_rate(prev_idx, plan, scenario_inflation) / 100.0))
    return cache[year_index]


def inflation_multiplier_for_range(
    start_idx: int,
    end_idx: int,
    plan: PlanInput,
    cache: list[float],
    scenario_inflation: list[float] | None = None,
) -> float:
    """Compound plan inflation from ``start_idx`` to ``end_idx``.

    Indices before the simulation start (negative) use the year-0 rate.
    """
    if end_idx <= start_idx:
        return 1.0

    multiplier = 1.0
    if start_idx < 0:
        pre_sim_years = min(-start_idx, end_idx - start_idx)
        rate = get_inflation_rate(0, plan, scenario_inflation)
        multiplier *= (1.0 + rate / 100.0) ** pre_sim_years

    sim_start = max(0, start_idx)
    if end_idx > sim_start:
        end_value = cumulative_inflation_cached(end_idx, cache, plan, scenario_inflation)
        multiplier *= end_value / cache[sim_start]
    return multiplier


def cola_multiplier_for_range(
    start_idx: int,
    end_idx: int,
    cola_pct: float,
    plan: PlanInput,
    cache: list[float],
    scenario_inflation: list[float] | None = None,
) -> float:
    """Compound a COLA between two year indices.

    Without a scenario series every year grows at ``cola_pct``. With one,
    in-scenario years follow scenario inflation and the rest use ``cola_pct``.
    """
    if end_idx <= start_idx:
        return 1.0
    if scenario_inflation is None:
        return (1.0 + cola_pct / 100.0) ** (end_idx - start_idx)

    multiplier = 1.0
    pre_sim_years = max(0, min(-start_idx, end_idx - start_idx))
    if pre_sim_years > 0:
        multiplier *= (1.0 + cola_pct / 100.0) ** pre_sim_years

    scenario_start = max(0, start_idx)
    scenario_end = min(end_idx, len(scenario_inflation))
    if scenario_end > scenario_start:
        end_value = cumulative_inflation_cached(scenario_end, cache, plan, scenario_inflation)
        multiplier *= end_value / cache[scenario_start]

    post_years = end_idx - max(scenario_start, len(scenario_inflation))
    if post_years > 0:
        multiplier *= (1.0 + cola_pct / 100.0) ** post_years
    return multiplier
