"""CLI entry point for retiresim."""

from __future__ import annotations

import argparse
from dataclasses import asdict
import json
import logging
from pathlib import Path
import sys

from .schema import SchemaError, load_plan
from .simulation import SIMULATION_MODES, BatchResult, load_scenarios, run_simulation


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Year-by-year retirement simulation")
    parser.add_argument("plan", help="Path to plan JSON file")
    parser.add_argument("-o", "--output", help="Write the full result as JSON to this path")
    parser.add_argument("--mode", choices=SIMULATION_MODES, help="Override simulation mode")
    parser.add_argument("--runs", type=int, help="Override Monte Carlo run count")
    parser.add_argument("--seed", type=int, help="Random seed for reproducibility")
    parser.add_argument("--scenarios", help="Scenario catalogue JSON for historical/stress modes")
    parser.add_argument("--summary", action="store_true", help="Print text summary to stdout")
    parser.add_argument("--json", action="store_true", help="Print the full result as JSON to stdout")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log each simulated year")
    return parser


def _result_payload(batch: BatchResult) -> dict:
    payload = asdict(batch.result)
    payload["mode"] = batch.mode
    payload["seed"] = batch.seed
    payload["run_count"] = batch.run_count
    return payload


def _print_summary(batch: BatchResult) -> None:
    result = batch.result
    summary = result.summary
    print(f"Mode: {batch.mode}")
    if result.yearly:
        print(f"Years: {result.yearly[0].year}-{result.yearly[-1].year}")
    print(f"Success probability: {summary.success_probability:.1%} ({batch.run_count} runs)")
    print(f"Median terminal value: ${summary.median_terminal_value:,.0f}")
    if summary.worst_case_shortfall is not None:
        print(f"Worst-case shortfall: ${summary.worst_case_shortfall:,.0f}")
    unconverged = [row.year for row in result.yearly if not row.tax_converged]
    if unconverged:
        print(f"Approximate tax years: {len(unconverged)}")
    if batch.seed is not None:
        print(f"Seed: {batch.seed}")


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        plan = load_plan(args.plan)
        scenarios = load_scenarios(args.scenarios) if args.scenarios else None
    except (SchemaError, OSError, ValueError) as exc:
        print(f"Failed to load plan: {exc}", file=sys.stderr)
        return 2

    try:
        batch = run_simulation(plan, mode_override=args.mode, runs_override=args.runs, seed=args.seed, scenarios=scenarios)
    except ValueError as exc:
        print(f"Simulation failed: {exc}", file=sys.stderr)
        return 1

    if args.summary or not (args.json or args.output):
        _print_summary(batch)
    if args.json:
        print(json.dumps(_result_payload(batch), indent=2))
    if args.output:
        Path(args.output).write_text(json.dumps(_result_payload(batch), indent=2), encoding="utf-8")
        print(f"Wrote results to {Path(args.output)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
