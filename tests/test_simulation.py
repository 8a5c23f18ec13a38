import json
import random
import threading

import pytest

from retiresim.schema import SchemaError
from retiresim.simulation import SimulationCancelled, load_scenarios, monte_carlo_scenarios, run_simulation
from retiresim.state import MarketScenario
from tests.helpers import build_plan, minimal_plan_dict


def _catalogue() -> dict[str, MarketScenario]:
    return {
        "boom": MarketScenario(name="boom", returns=[20.0] * 5),
        "bust": MarketScenario(name="bust", returns=[-60.0] * 5, inflation=[8.0] * 5),
    }


def test_deterministic_mode_is_a_single_run():
    batch = run_simulation(build_plan())

    assert batch.mode == "deterministic"
    assert batch.run_count == 1
    assert batch.seed is None
    assert batch.result.summary.success_probability == 1.0


def test_monte_carlo_is_reproducible_with_seed():
    plan = build_plan()
    first = run_simulation(plan, mode_override="monteCarlo", runs_override=20, seed=42)
    second = run_simulation(plan, mode_override="monteCarlo", runs_override=20, seed=42)

    assert first.run_count == 20
    assert first.seed == 42
    assert first.terminal_values == second.terminal_values
    assert first.result.yearly == second.result.yearly
    assert 0.0 <= first.result.summary.success_probability <= 1.0
    assert first.result.assumptions_used["run_count"] == 20


def test_monte_carlo_reports_median_terminal_value():
    batch = run_simulation(build_plan(), mode_override="monteCarlo", runs_override=9, seed=7)

    ordered = sorted(batch.terminal_values)
    assert batch.result.summary.median_terminal_value == pytest.approx(ordered[4])


def test_monte_carlo_paths_cover_horizon():
    scenarios = monte_carlo_scenarios(build_plan(), 3, random.Random(1))

    assert len(scenarios) == 3
    assert all(len(scenario.returns) == 5 for scenario in scenarios)
    assert all(value >= -95.0 for scenario in scenarios for value in scenario.returns)


def test_historical_mode_requires_known_ids():
    data = minimal_plan_dict()
    data["market"] = {"simulation_mode": "historical", "historical_scenario_ids": ["boom", "missing"]}

    with pytest.raises(ValueError, match="missing"):
        run_simulation(build_plan(data), scenarios=_catalogue())


def test_stress_mode_aggregates_named_scenarios():
    data = minimal_plan_dict()
    data["accounts"][0]["current_balance"] = 200000
    data["accounts"][0]["cost_basis"] = 200000
    data["market"] = {"simulation_mode": "stress", "stress_scenario_ids": ["boom", "bust"]}

    batch = run_simulation(build_plan(data), scenarios=_catalogue())

    assert batch.run_count == 2
    assert batch.result.summary.success_probability == pytest.approx(0.5)
    assert batch.result.summary.worst_case_shortfall is not None


def test_unknown_mode_is_rejected():
    with pytest.raises(ValueError, match="unsupported simulation mode"):
        run_simulation(build_plan(), mode_override="quantum")


def test_cancelled_batch_raises():
    event = threading.Event()
    event.set()

    with pytest.raises(SimulationCancelled):
        run_simulation(build_plan(), mode_override="monteCarlo", runs_override=5, seed=1, cancel_event=event)


def test_load_scenarios(tmp_path):
    path = tmp_path / "scenarios.json"
    path.write_text(json.dumps({"gfc": {"name": "2008", "returns": [-37, 26], "inflation": [0.1, 2.7]}}), encoding="utf-8")

    catalogue = load_scenarios(path)

    assert catalogue["gfc"].name == "2008"
    assert catalogue["gfc"].returns == [-37.0, 26.0]
    assert catalogue["gfc"].inflation == [0.1, 2.7]


def test_load_scenarios_rejects_missing_returns(tmp_path):
    path = tmp_path / "scenarios.json"
    path.write_text(json.dumps({"gfc": {"inflation": [1.0]}}), encoding="utf-8")

    with pytest.raises(SchemaError, match=r"scenarios\.gfc\.returns: expected array"):
        load_scenarios(path)
