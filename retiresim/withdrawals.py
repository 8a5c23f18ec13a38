"""Withdrawal targeting and allocation across accounts."""

from __future__ import annotations

from dataclasses import dataclass, field

from .cost_basis import compute_gain_fraction, compute_taxable_gain, reduce_basis
from .income import MandatoryIncome
from .state import AccountState

DEFERRED_TYPES = ("taxDeferred", "deferredComp")


@dataclass(slots=True)
class WithdrawalResult:
    withdrawals_by_account: dict[str, float] = field(default_factory=dict)
    total_withdrawn: float = 0.0
    taxable_ordinary_from_withdrawals: float = 0.0
    taxable_capital_gains_from_withdrawals: float = 0.0
    roth_withdrawals: float = 0.0


def compute_withdrawal_target(
    actual_spend: float,
    estimated_taxes: float,
    mandatory: MandatoryIncome,
    rmd_total: float,
) -> float:
    """Cash still needed from discretionary withdrawals, floored at zero."""
    target = (
        actual_spend
        + estimated_taxes
        - mandatory.social_security_income
        - mandatory.nqdc_distributions
        - mandatory.pension_and_other_income
        - mandatory.adjustment_income
        - rmd_total
    )
    return max(0.0, target)


def apply_withdrawal(account: AccountState, amount: float, result: WithdrawalResult) -> float:
    """Take up to ``amount`` from ``account`` and record its tax character."""
    amount = min(amount, account.balance)
    if amount <= 0:
        return 0.0

    result.withdrawals_by_account[account.id] = result.withdrawals_by_account.get(account.id, 0.0) + amount
    if account.type == "taxable":
        gain_fraction = compute_gain_fraction(account.balance, account.cost_basis)
        result.taxable_capital_gains_from_withdrawals += compute_taxable_gain(amount, gain_fraction)
        account.cost_basis = reduce_basis(account.cost_basis, amount, gain_fraction)
    elif account.type in DEFERRED_TYPES:
        result.taxable_ordinary_from_withdrawals += amount
    elif account.type == "roth":
        result.roth_withdrawals += amount

    account.balance = max(0.0, account.balance - amount)
    return amount


def _withdraw_in_order(accounts: list[AccountState], remaining: float, result: WithdrawalResult) -> float:
    for account in accounts:
        if remaining <= 0:
            break
        if account.balance <= 0:
            continue
        remaining -= apply_withdrawal(account, remaining, result)
    return remaining


def _of_types(accounts: list[AccountState], *types: str) -> list[AccountState]:
    return [account for account_type in types for account in accounts if account.type == account_type]


def _withdraw_pro_rata(accounts: list[AccountState], target: float, result: WithdrawalResult) -> float:
    total_balance = sum(account.balance for account in accounts)
    if total_balance <= 0:
        return target

    capped_target = min(target, total_balance)
    withdrawable = [account for account in accounts if account.balance > 0]
    withdrawn = 0.0
    for idx, account in enumerate(withdrawable):
        if idx == len(withdrawable) - 1:
            # Last account absorbs rounding so the capped target is met exactly.
            amount = capped_target - withdrawn
        else:
            amount = capped_target * account.balance / total_balance
        withdrawn += apply_withdrawal(account, amount, result)
    return target - withdrawn


def _withdraw_tax_optimized(
    accounts: list[AccountState],
    target: float,
    result: WithdrawalResult,
    *,
    current_ordinary_income: float,
    standard_deduction: float,
    federal_rate_pct: float,
    cap_gains_rate_pct: float,
) -> float:
    remaining = target
    deferred = _of_types(accounts, *DEFERRED_TYPES)

    # Ordinary income up to the standard deduction is untaxed.
    free_space = max(0.0, standard_deduction - current_ordinary_income)
    if free_space > 0:
        space = min(free_space, remaining)
        for account in deferred:
            if space <= 0 or remaining <= 0:
                break
            if account.balance <= 0:
                continue
            taken = apply_withdrawal(account, min(space, remaining), result)
            space -= taken
            remaining -= taken

    if remaining <= 0:
        return remaining

    taxable = sorted(
        (account for account in accounts if account.type == "taxable" and account.balance > 0),
        key=lambda account: compute_gain_fraction(account.balance, account.cost_basis),
    )
    if cap_gains_rate_pct < federal_rate_pct:
        remaining = _withdraw_in_order(taxable, remaining, result)
        remaining = _withdraw_in_order(deferred, remaining, result)
    else:
        remaining = _withdraw_in_order(deferred, remaining, result)
        remaining = _withdraw_in_order(taxable, remaining, result)

    return _withdraw_in_order(_of_types(accounts, "roth"), remaining, result)


def solve_withdrawals(
    accounts: list[AccountState],
    withdrawal_target: float,
    strategy: str,
    *,
    current_ordinary_income: float = 0.0,
    standard_deduction: float = 0.0,
    federal_rate_pct: float = 0.0,
    cap_gains_rate_pct: float = 0.0,
) -> WithdrawalResult:
    """Draw ``withdrawal_target`` from ``accounts`` following ``strategy``.

    Balances and taxable cost basis are mutated in place. When the accounts
    cannot cover the target, ``total_withdrawn`` is simply smaller; the gap
    shows up later as a shortfall. Unknown strategies use taxableFirst.
    """
    result = WithdrawalResult()
    if withdrawal_target <= 0:
        return result

    if strategy == "taxDeferredFirst":
        ordered = _of_types(accounts, "taxDeferred", "deferredComp", "taxable", "roth")
        remaining = _withdraw_in_order(ordered, withdrawal_target, result)
    elif strategy == "proRata":
        remaining = _withdraw_pro_rata(accounts, withdrawal_target, result)
    elif strategy == "taxOptimized":
        remaining = _withdraw_tax_optimized(
            accounts,
            withdrawal_target,
            result,
            current_ordinary_income=current_ordinary_income,
            standard_deduction=standard_deduction,
            federal_rate_pct=federal_rate_pct,
            cap_gains_rate_pct=cap_gains_rate_pct,
        )
    else:
        ordered = _of_types(accounts, "taxable", "taxDeferred", "deferredComp", "roth")
        remaining = _withdraw_in_order(ordered, withdrawal_target, result)

    result.total_withdrawn = withdrawal_target - max(0.0, remaining)
    return result
