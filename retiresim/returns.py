"""Investment returns and management fees."""

from __future__ import annotations

from .state import AccountState, SimulationState


def compute_baseline_return(accounts: list[AccountState]) -> float:
    """Balance-weighted expected return of the whole portfolio (0 when empty)."""
    total_balance = sum(account.balance for account in accounts)
    if total_balance <= 0:
        return 0.0
    return sum(account.balance * account.expected_return_pct for account in accounts) / total_balance


def compute_account_return(account: AccountState, scenario_return: float, baseline_return: float) -> float:
    """Scenario return shifted by the account's spread over the portfolio baseline."""
    return scenario_return + (account.expected_return_pct - baseline_return)


def apply_returns(state: SimulationState) -> None:
    """Grow balances for ``state.year_index``; cost basis is left unchanged."""
    scenario = state.scenario_returns
    for account in state.accounts:
        if account.balance <= 0:
            continue
        if scenario is not None and state.year_index < len(scenario):
            return_pct = compute_account_return(account, scenario[state.year_index], state.baseline_return)
        else:
            return_pct = account.expected_return_pct
        account.balance = max(0.0, account.balance * (1.0 + return_pct / 100.0))


def apply_fees(accounts: list[AccountState]) -> float:
    total_fees = 0.0
    for account in accounts:
        if account.balance <= 0 or account.fee_pct <= 0:
            continue
        fee = account.balance * account.fee_pct / 100.0
        account.balance = max(0.0, account.balance - fee)
        total_fees += fee
    return total_fees
