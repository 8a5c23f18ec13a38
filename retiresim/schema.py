"""Plan input dataclasses and JSON loading."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
from pathlib import Path
from typing import Any

from .tax_data import BASE_CALENDAR_YEAR, SURVIVOR_FILING_YEARS


class SchemaError(ValueError):
    """Raised when raw JSON cannot be parsed into schema objects."""


def _expect_dict(value: Any, path: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise SchemaError(f"{path}: expected object")
    return value


def _expect_list(value: Any, path: str) -> list[Any]:
    if not isinstance(value, list):
        raise SchemaError(f"{path}: expected array")
    return value


def _require(data: dict[str, Any], key: str, path: str) -> Any:
    if key not in data:
        raise SchemaError(f"{path}.{key}: missing required field")
    return data[key]


def _optional(data: dict[str, Any], key: str, default: Any = None) -> Any:
    return data.get(key, default)


def _optional_float(data: dict[str, Any], key: str) -> float | None:
    value = _optional(data, key)
    return float(value) if value is not None else None


def _optional_int(data: dict[str, Any], key: str) -> int | None:
    value = _optional(data, key)
    return int(value) if value is not None else None


@dataclass(slots=True)
class SocialSecurityClaim:
    claim_age: int
    estimated_monthly_benefit_at_claim: float
    cola_pct: float

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "SocialSecurityClaim":
        return cls(
            claim_age=int(_require(data, "claim_age", path)),
            estimated_monthly_benefit_at_claim=float(_require(data, "estimated_monthly_benefit_at_claim", path)),
            cola_pct=float(_optional(data, "cola_pct", 0.0)),
        )


@dataclass(slots=True)
class PersonProfile:
    id: str
    birth_year: int
    current_age: int
    life_expectancy: int
    social_security: SocialSecurityClaim | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str, person_id: str) -> "PersonProfile":
        ss_raw = _optional(data, "social_security")
        social_security = None
        if ss_raw is not None:
            social_security = SocialSecurityClaim.from_dict(_expect_dict(ss_raw, f"{path}.social_security"), f"{path}.social_security")
        current_age = int(_require(data, "current_age", path))
        return cls(
            id=person_id,
            birth_year=int(_require(data, "birth_year", path)),
            current_age=current_age,
            life_expectancy=int(_require(data, "life_expectancy", path)),
            social_security=social_security,
        )


@dataclass(slots=True)
class Household:
    filing_status: str
    state_of_residence: str
    primary: PersonProfile
    spouse: PersonProfile | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str = "household") -> "Household":
        primary = PersonProfile.from_dict(_expect_dict(_require(data, "primary", path), f"{path}.primary"), f"{path}.primary", "primary")
        spouse_raw = _optional(data, "spouse")
        spouse = None
        if spouse_raw is not None:
            spouse = PersonProfile.from_dict(_expect_dict(spouse_raw, f"{path}.spouse"), f"{path}.spouse", "spouse")
        return cls(
            filing_status=_require(data, "filing_status", path),
            state_of_residence=_require(data, "state_of_residence", path),
            primary=primary,
            spouse=spouse,
        )


@dataclass(slots=True)
class DeferredCompSchedule:
    start_year: int
    end_year: int
    frequency: str
    amount: float
    inflation_adjusted: bool

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "DeferredCompSchedule":
        return cls(
            start_year=int(_require(data, "start_year", path)),
            end_year=int(_require(data, "end_year", path)),
            frequency=_optional(data, "frequency", "annual"),
            amount=float(_require(data, "amount", path)),
            inflation_adjusted=bool(_optional(data, "inflation_adjusted", False)),
        )


@dataclass(slots=True)
class Account:
    id: str
    name: str
    type: str
    owner: str
    current_balance: float
    expected_return_pct: float
    fee_pct: float = 0.0
    cost_basis: float | None = None
    volatility_pct: float | None = None
    target_allocation_pct: float | None = None
    deferred_comp_schedule: DeferredCompSchedule | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "Account":
        schedule_raw = _optional(data, "deferred_comp_schedule")
        schedule = None
        if schedule_raw is not None:
            schedule = DeferredCompSchedule.from_dict(
                _expect_dict(schedule_raw, f"{path}.deferred_comp_schedule"), f"{path}.deferred_comp_schedule"
            )
        account_id = _require(data, "id", path)
        return cls(
            id=account_id,
            name=_optional(data, "name", account_id),
            type=_require(data, "type", path),
            owner=_require(data, "owner", path),
            current_balance=float(_require(data, "current_balance", path)),
            expected_return_pct=float(_require(data, "expected_return_pct", path)),
            fee_pct=float(_optional(data, "fee_pct", 0.0)),
            cost_basis=_optional_float(data, "cost_basis"),
            volatility_pct=_optional_float(data, "volatility_pct"),
            target_allocation_pct=_optional_float(data, "target_allocation_pct"),
            deferred_comp_schedule=schedule,
        )


@dataclass(slots=True)
class IncomeStream:
    id: str
    name: str
    owner: str
    start_year: int
    annual_amount: float
    taxable: bool
    end_year: int | None = None
    cola_pct: float | None = None
    survivor_continues: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "IncomeStream":
        stream_id = _require(data, "id", path)
        return cls(
            id=stream_id,
            name=_optional(data, "name", stream_id),
            owner=_require(data, "owner", path),
            start_year=int(_require(data, "start_year", path)),
            annual_amount=float(_require(data, "annual_amount", path)),
            taxable=bool(_require(data, "taxable", path)),
            end_year=_optional_int(data, "end_year"),
            cola_pct=_optional_float(data, "cola_pct"),
            survivor_continues=bool(_optional(data, "survivor_continues", False)),
        )


@dataclass(slots=True)
class Adjustment:
    id: str
    name: str
    year: int
    amount: float
    taxable: bool
    end_year: int | None = None
    inflation_adjusted: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "Adjustment":
        adjustment_id = _require(data, "id", path)
        return cls(
            id=adjustment_id,
            name=_optional(data, "name", adjustment_id),
            year=int(_require(data, "year", path)),
            amount=float(_require(data, "amount", path)),
            taxable=bool(_require(data, "taxable", path)),
            end_year=_optional_int(data, "end_year"),
            inflation_adjusted=bool(_optional(data, "inflation_adjusted", False)),
        )


@dataclass(slots=True)
class SpendingPlan:
    target_annual_spend: float
    inflation_pct: float
    survivor_spending_adjustment_pct: float = 100.0
    floor_annual_spend: float | None = None
    ceiling_annual_spend: float | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str = "spending") -> "SpendingPlan":
        return cls(
            target_annual_spend=float(_require(data, "target_annual_spend", path)),
            inflation_pct=float(_require(data, "inflation_pct", path)),
            survivor_spending_adjustment_pct=float(_optional(data, "survivor_spending_adjustment_pct", 100.0)),
            floor_annual_spend=_optional_float(data, "floor_annual_spend"),
            ceiling_annual_spend=_optional_float(data, "ceiling_annual_spend"),
        )


@dataclass(slots=True)
class TaxConfig:
    federal_model: str = "effective"
    state_model: str = "effective"
    federal_effective_rate_pct: float | None = None
    state_effective_rate_pct: float | None = None
    state_cap_gains_rate_pct: float | None = None
    cap_gains_rate_pct: float | None = None
    standard_deduction_override: float | None = None
    survivor_filing_years: int = SURVIVOR_FILING_YEARS

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str = "taxes") -> "TaxConfig":
        return cls(
            federal_model=_optional(data, "federal_model", "effective"),
            state_model=_optional(data, "state_model", "effective"),
            federal_effective_rate_pct=_optional_float(data, "federal_effective_rate_pct"),
            state_effective_rate_pct=_optional_float(data, "state_effective_rate_pct"),
            state_cap_gains_rate_pct=_optional_float(data, "state_cap_gains_rate_pct"),
            cap_gains_rate_pct=_optional_float(data, "cap_gains_rate_pct"),
            standard_deduction_override=_optional_float(data, "standard_deduction_override"),
            survivor_filing_years=int(_optional(data, "survivor_filing_years", SURVIVOR_FILING_YEARS)),
        )


@dataclass(slots=True)
class MarketConfig:
    simulation_mode: str = "deterministic"
    historical_scenario_ids: list[str] = field(default_factory=list)
    stress_scenario_ids: list[str] = field(default_factory=list)
    monte_carlo_runs: int = 1000

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str = "market") -> "MarketConfig":
        return cls(
            simulation_mode=_optional(data, "simulation_mode", "deterministic"),
            historical_scenario_ids=list(_expect_list(_optional(data, "historical_scenario_ids", []), f"{path}.historical_scenario_ids")),
            stress_scenario_ids=list(_expect_list(_optional(data, "stress_scenario_ids", []), f"{path}.stress_scenario_ids")),
            monte_carlo_runs=int(_optional(data, "monte_carlo_runs", 1000)),
        )


@dataclass(slots=True)
class StrategyConfig:
    withdrawal_order: str = "taxableFirst"
    rebalance_frequency: str = "none"
    guardrails_enabled: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str = "strategy") -> "StrategyConfig":
        return cls(
            withdrawal_order=_optional(data, "withdrawal_order", "taxableFirst"),
            rebalance_frequency=_optional(data, "rebalance_frequency", "none"),
            guardrails_enabled=bool(_optional(data, "guardrails_enabled", False)),
        )


@dataclass(slots=True)
class PlanInput:
    household: Household
    accounts: list[Account]
    spending: SpendingPlan
    other_income: list[IncomeStream] = field(default_factory=list)
    adjustments: list[Adjustment] = field(default_factory=list)
    taxes: TaxConfig = field(default_factory=TaxConfig)
    market: MarketConfig = field(default_factory=MarketConfig)
    strategy: StrategyConfig = field(default_factory=StrategyConfig)
    start_year: int = BASE_CALENDAR_YEAR

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PlanInput":
        return cls(
            household=Household.from_dict(_expect_dict(_require(data, "household", "plan"), "household")),
            accounts=[
                Account.from_dict(_expect_dict(item, f"accounts[{idx}]"), f"accounts[{idx}]")
                for idx, item in enumerate(_expect_list(_require(data, "accounts", "plan"), "accounts"))
            ],
            spending=SpendingPlan.from_dict(_expect_dict(_require(data, "spending", "plan"), "spending")),
            other_income=[
                IncomeStream.from_dict(_expect_dict(item, f"other_income[{idx}]"), f"other_income[{idx}]")
                for idx, item in enumerate(_expect_list(_optional(data, "other_income", []), "other_income"))
            ],
            adjustments=[
                Adjustment.from_dict(_expect_dict(item, f"adjustments[{idx}]"), f"adjustments[{idx}]")
                for idx, item in enumerate(_expect_list(_optional(data, "adjustments", []), "adjustments"))
            ],
            taxes=TaxConfig.from_dict(_expect_dict(_optional(data, "taxes", {}), "taxes")),
            market=MarketConfig.from_dict(_expect_dict(_optional(data, "market", {}), "market")),
            strategy=StrategyConfig.from_dict(_expect_dict(_optional(data, "strategy", {}), "strategy")),
            start_year=int(_optional(data, "start_year", BASE_CALENDAR_YEAR)),
        )


def load_plan(path: str | Path) -> PlanInput:
    """Load plan JSON into strongly-typed dataclasses."""
    source = Path(path)
    raw = json.loads(source.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise SchemaError("plan: root must be a JSON object")
    return PlanInput.from_dict(raw)
