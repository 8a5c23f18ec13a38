"""Bounded fixed-point iteration for the tax/withdrawal circular dependency."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from .tax_data import MAX_CONVERGENCE_ITERATIONS, WITHDRAWAL_CONVERGENCE_THRESHOLD

T = TypeVar("T")


@dataclass(slots=True)
class ConvergenceResult(Generic[T]):
    result: T
    converged: bool
    iterations: int


def iterate_until_converged(
    compute: Callable[[float], tuple[T, float]],
    initial_tax_estimate: float,
    *,
    max_iterations: int = MAX_CONVERGENCE_ITERATIONS,
    threshold: float = WITHDRAWAL_CONVERGENCE_THRESHOLD,
) -> ConvergenceResult[T]:
    """Feed each iteration's actual tax back in as the next estimate.

    ``compute`` maps an estimated tax to ``(result, actual_tax)``. Stops once
    the two agree within ``threshold``; otherwise returns the last result with
    ``converged=False`` after ``max_iterations`` passes.
    """
    if max_iterations < 1:
        raise ValueError("max_iterations must be >= 1")

    estimate = initial_tax_estimate
    last_result: T | None = None
    for iteration in range(1, max_iterations + 1):
        last_result, actual_tax = compute(estimate)
        if abs(actual_tax - estimate) < threshold:
            return ConvergenceResult(result=last_result, converged=True, iterations=iteration)
        estimate = actual_tax

    return ConvergenceResult(result=last_result, converged=False, iterations=max_iterations)  # type: ignore[arg-type]
