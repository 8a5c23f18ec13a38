"""Target-allocation rebalancing between accounts."""

from __future__ import annotations

from dataclasses import dataclass, field

from .cost_basis import compute_gain_fraction, compute_taxable_gain, reduce_basis
from .state import AccountState
from .tax_data import REBALANCE_MIN_DELTA


@dataclass(slots=True)
class RebalanceResult:
    realized_gains: float = 0.0
    # Positive values are inflows, negative values outflows.
    transfers_by_account: dict[str, float] = field(default_factory=dict)


def rebalance(accounts: list[AccountState], frequency: str) -> RebalanceResult:
    """Move participating accounts to their target allocation.

    Quarterly rebalancing is collapsed into the same single yearly pass as
    annual. Gains realized by selling taxable holdings are returned so the
    caller can tax them in the following year.
    """
    result = RebalanceResult()
    if frequency == "none":
        return result

    participants = [
        account
        for account in accounts
        if account.target_allocation_pct is not None and account.target_allocation_pct > 0
    ]
    total_value = sum(account.balance for account in participants)
    if not participants or total_value <= 0:
        return result

    targets = [(account, total_value * account.target_allocation_pct / 100.0) for account in participants]
    for account, target_balance in targets:
        delta = target_balance - account.balance
        if abs(delta) < REBALANCE_MIN_DELTA:
            continue

        if account.type == "taxable":
            if delta > 0:
                account.cost_basis += delta
            else:
                gain_fraction = compute_gain_fraction(account.balance, account.cost_basis)
                result.realized_gains += compute_taxable_gain(-delta, gain_fraction)
                account.cost_basis = reduce_basis(account.cost_basis, -delta, gain_fraction)

        account.balance = target_balance
        result.transfers_by_account[account.id] = delta
    return result
