"""Batch orchestration: deterministic, historical, stress and Monte Carlo runs."""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
from pathlib import Path
import random
import threading

from .engine import PlanResult, PlanSummary, compute_horizon, simulate
from .returns import compute_baseline_return
from .schema import PlanInput, SchemaError
from .state import MarketScenario, accounts_from_plan

logger = logging.getLogger(__name__)

DEFAULT_VOLATILITY_PCT = 12.0
# Draws below this are clamped; a year cannot lose more than everything.
MIN_ANNUAL_RETURN_PCT = -95.0

SIMULATION_MODES = ("deterministic", "historical", "stress", "monteCarlo")


class SimulationCancelled(RuntimeError):
    pass


@dataclass(slots=True)
class BatchResult:
    mode: str
    seed: int | None
    result: PlanResult
    run_count: int
    terminal_values: list[float]


def _portfolio_volatility(plan: PlanInput) -> float:
    """Balance-weighted volatility, falling back to the default per account."""
    accounts = plan.accounts
    total = sum(account.current_balance for account in accounts)
    if total <= 0:
        return DEFAULT_VOLATILITY_PCT
    weighted = sum(
        account.current_balance
        * (account.volatility_pct if account.volatility_pct is not None else DEFAULT_VOLATILITY_PCT)
        for account in accounts
    )
    return weighted / total


def monte_carlo_scenarios(plan: PlanInput, runs: int, rng: random.Random) -> list[MarketScenario]:
    """Independent normal return paths around the portfolio's expected return."""
    horizon = compute_horizon(plan)
    mean = compute_baseline_return(accounts_from_plan(plan))
    stdev = _portfolio_volatility(plan)
    scenarios: list[MarketScenario] = []
    for run in range(max(1, runs)):
        returns = [max(MIN_ANNUAL_RETURN_PCT, rng.gauss(mean, stdev)) for _ in range(horizon)]
        scenarios.append(MarketScenario(name=f"mc-{run + 1}", returns=returns))
    return scenarios


def _named_scenarios(ids: list[str], catalogue: dict[str, MarketScenario] | None, mode: str) -> list[MarketScenario]:
    if not ids:
        raise ValueError(f"{mode} mode requires at least one scenario id")
    catalogue = catalogue or {}
    missing = [scenario_id for scenario_id in ids if scenario_id not in catalogue]
    if missing:
        raise ValueError(f"unknown {mode} scenario id(s): {', '.join(missing)}")
    return [catalogue[scenario_id] for scenario_id in ids]


def _median_index(values: list[float]) -> int:
    ordered = sorted(range(len(values)), key=lambda idx: values[idx])
    return ordered[(len(ordered) - 1) // 2]


def _aggregate(results: list[PlanResult], mode: str, seed: int | None) -> BatchResult:
    terminal_values = [result.summary.median_terminal_value for result in results]
    shortfalls = [sum(row.shortfall for row in result.yearly) for result in results]
    successes = sum(1 for total in shortfalls if total <= 0)
    worst = max(shortfalls)

    median_run = results[_median_index(terminal_values)]
    summary = PlanSummary(
        success_probability=successes / len(results),
        median_terminal_value=median_run.summary.median_terminal_value,
        worst_case_shortfall=worst if worst > 0 else None,
    )
    assumptions = dict(median_run.assumptions_used)
    assumptions.update({"simulation_mode": mode, "run_count": len(results), "seed": seed})
    return BatchResult(
        mode=mode,
        seed=seed,
        result=PlanResult(summary=summary, yearly=median_run.yearly, assumptions_used=assumptions),
        run_count=len(results),
        terminal_values=terminal_values,
    )


def run_simulation(
    plan: PlanInput,
    mode_override: str | None = None,
    runs_override: int | None = None,
    seed: int | None = None,
    scenarios: dict[str, MarketScenario] | None = None,
    cancel_event: threading.Event | None = None,
) -> BatchResult:
    """Run ``plan`` under its market mode and summarize across runs.

    Historical and stress modes look their scenario ids up in ``scenarios``.
    The yearly rows reported are those of the median-terminal-value run.
    Setting ``cancel_event`` stops the batch between runs.
    """
    mode = mode_override or plan.market.simulation_mode
    if mode not in SIMULATION_MODES:
        raise ValueError(f"unsupported simulation mode: {mode}")

    if mode == "deterministic":
        result = simulate(plan)
        return BatchResult(
            mode=mode,
            seed=None,
            result=result,
            run_count=1,
            terminal_values=[result.summary.median_terminal_value],
        )

    if mode == "monteCarlo":
        if seed is None:
            seed = random.randint(1, 2**31 - 1)
        runs = runs_override if runs_override is not None else plan.market.monte_carlo_runs
        paths = monte_carlo_scenarios(plan, runs, random.Random(seed))
    elif mode == "historical":
        paths = _named_scenarios(plan.market.historical_scenario_ids, scenarios, mode)
    else:
        paths = _named_scenarios(plan.market.stress_scenario_ids, scenarios, mode)

    logger.info("Running %s %s scenario(s)", len(paths), mode)
    results: list[PlanResult] = []
    for path in paths:
        if cancel_event is not None and cancel_event.is_set():
            raise SimulationCancelled(f"{mode} batch cancelled after {len(results)} of {len(paths)} runs")
        results.append(simulate(plan, path))
    return _aggregate(results, mode, seed)


def load_scenarios(path: str | Path) -> dict[str, MarketScenario]:
    """Load a scenario catalogue: ``{id: {"returns": [...], "inflation": [...]}}``."""
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise SchemaError("scenarios: root must be a JSON object")

    catalogue: dict[str, MarketScenario] = {}
    for scenario_id, entry in raw.items():
        entry_path = f"scenarios.{scenario_id}"
        if not isinstance(entry, dict):
            raise SchemaError(f"{entry_path}: expected object")
        returns = entry.get("returns")
        if not isinstance(returns, list):
            raise SchemaError(f"{entry_path}.returns: expected array")
        inflation = entry.get("inflation")
        if inflation is not None and not isinstance(inflation, list):
            raise SchemaError(f"{entry_path}.inflation: expected array")
        catalogue[scenario_id] = MarketScenario(
            name=str(entry.get("name", scenario_id)),
            returns=[float(value) for value in returns],
            inflation=[float(value) for value in inflation] if inflation is not None else None,
        )
    return catalogue
