import pytest

from retiresim.inflation import (
    cola_multiplier_for_range,
    cumulative_inflation,
    cumulative_inflation_cached,
    get_inflation_rate,
    inflation_multiplier_for_range,
)
from tests.helpers import build_plan, minimal_plan_dict


def _plan(rate: float = 3.0):
    data = minimal_plan_dict()
    data["spending"]["inflation_pct"] = rate
    return build_plan(data)


def test_scenario_rate_overrides_plan_rate_within_series():
    plan = _plan()
    assert get_inflation_rate(0, plan, [5.0, 6.0]) == 5.0
    assert get_inflation_rate(1, plan, [5.0, 6.0]) == 6.0
    assert get_inflation_rate(2, plan, [5.0, 6.0]) == 3.0


def test_cached_multiplier_matches_direct_computation():
    plan = _plan()
    scenario = [2.0, 8.0, -1.0]
    cache: list[float] = [1.0]
    for idx in range(8):
        assert cumulative_inflation_cached(idx, cache, plan, scenario) == pytest.approx(
            cumulative_inflation(idx, plan, scenario)
        )
    assert len(cache) == 8


def test_cache_extends_only_as_needed():
    plan = _plan()
    cache: list[float] = [1.0]
    assert cumulative_inflation_cached(3, cache, plan) == pytest.approx(1.03**3)
    assert len(cache) == 4
    cumulative_inflation_cached(1, cache, plan)
    assert len(cache) == 4


def test_range_multiplier_handles_pre_simulation_years():
    plan = _plan()
    cache: list[float] = [1.0]
    # Two years before the simulation at the year-0 rate, then two in-simulation years.
    assert inflation_multiplier_for_range(-2, 2, plan, cache) == pytest.approx(1.03**4)
    assert inflation_multiplier_for_range(3, 3, plan, cache) == 1.0


def test_cola_multiplier_without_scenario_uses_cola_rate():
    plan = _plan()
    assert cola_multiplier_for_range(0, 3, 2.0, plan, [1.0]) == pytest.approx(1.02**3)


def test_cola_multiplier_follows_scenario_inflation():
    plan = _plan()
    scenario = [10.0, 10.0]
    # Two scenario years at 10%, then one more year at the 2% COLA.
    assert cola_multiplier_for_range(0, 3, 2.0, plan, [1.0], scenario) == pytest.approx(1.1 * 1.1 * 1.02)
