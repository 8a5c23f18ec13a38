import copy
import json
from pathlib import Path

from retiresim.schema import PlanInput
from retiresim.state import AccountState


def write_plan(tmp_path: Path, data: dict, filename: str = "plan.json") -> Path:
    path = tmp_path / filename
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def clone_plan(data: dict) -> dict:
    return copy.deepcopy(data)


def minimal_plan_dict() -> dict:
    """Single filer, one taxable account, no Social Security, no taxes by default."""
    return {
        "start_year": 2026,
        "household": {
            "filing_status": "single",
            "state_of_residence": "WA",
            "primary": {"birth_year": 1961, "current_age": 65, "life_expectancy": 70},
        },
        "accounts": [
            {
                "id": "brokerage",
                "type": "taxable",
                "owner": "primary",
                "current_balance": 500000,
                "cost_basis": 500000,
                "expected_return_pct": 0.0,
            }
        ],
        "spending": {"target_annual_spend": 40000, "inflation_pct": 0.0},
        "taxes": {
            "federal_effective_rate_pct": 0,
            "cap_gains_rate_pct": 0,
            "state_model": "none",
        },
    }


def build_plan(data: dict | None = None) -> PlanInput:
    return PlanInput.from_dict(data if data is not None else minimal_plan_dict())


def account(
    account_id: str,
    account_type: str,
    balance: float,
    *,
    cost_basis: float | None = None,
    owner: str = "primary",
    expected_return_pct: float = 0.0,
    fee_pct: float = 0.0,
    target_allocation_pct: float | None = None,
) -> AccountState:
    return AccountState(
        id=account_id,
        type=account_type,
        owner=owner,
        balance=balance,
        cost_basis=balance if cost_basis is None else cost_basis,
        expected_return_pct=expected_return_pct,
        fee_pct=fee_pct,
        target_allocation_pct=target_allocation_pct,
    )
