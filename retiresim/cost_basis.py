"""Cost basis math for taxable accounts using the average cost method."""

from __future__ import annotations


def round_cents(value: float) -> float:
    return round(value * 100.0) / 100.0


def compute_gain_fraction(balance: float, cost_basis: float) -> float:
    """Share of a taxable balance that is unrealized gain, clamped to [0, 1]."""
    if balance <= 0:
        return 0.0
    return min(1.0, max(0.0, (balance - cost_basis) / balance))


def compute_taxable_gain(withdrawal_amount: float, gain_fraction: float) -> float:
    return round_cents(withdrawal_amount * gain_fraction)


def reduce_basis(cost_basis: float, withdrawal_amount: float, gain_fraction: float) -> float:
    """Remove the return-of-basis portion of a withdrawal from the basis."""
    return max(0.0, round_cents(cost_basis - withdrawal_amount * (1.0 - gain_fraction)))
