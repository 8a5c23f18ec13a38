import pytest

from retiresim.schema import SchemaError, load_plan
from tests.helpers import clone_plan, write_plan


def test_load_plan_rejects_non_object_root(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("[]", encoding="utf-8")

    with pytest.raises(SchemaError, match="plan: root must be a JSON object"):
        load_plan(path)


def test_load_sample_plan(sample_plan_dict, tmp_path):
    plan = load_plan(write_plan(tmp_path, sample_plan_dict))

    assert plan.household.filing_status == "mfj"
    assert plan.household.spouse is not None
    assert plan.household.spouse.social_security.claim_age == 67
    assert [account.type for account in plan.accounts] == ["taxable", "taxDeferred", "roth", "deferredComp"]
    assert plan.accounts[3].deferred_comp_schedule.end_year == 2030
    assert plan.strategy.withdrawal_order == "taxOptimized"
    assert plan.taxes.survivor_filing_years == 2


def test_load_plan_requires_household_primary(tmp_path, sample_plan_dict):
    data = clone_plan(sample_plan_dict)
    del data["household"]["primary"]
    path = write_plan(tmp_path, data)

    with pytest.raises(SchemaError, match=r"household\.primary: missing required field"):
        load_plan(path)


def test_load_plan_requires_account_fields(tmp_path, sample_plan_dict):
    data = clone_plan(sample_plan_dict)
    del data["accounts"][0]["type"]
    path = write_plan(tmp_path, data)

    with pytest.raises(SchemaError, match=r"accounts\[0\]\.type: missing required field"):
        load_plan(path)


def test_load_plan_rejects_wrong_collection_types(tmp_path, sample_plan_dict):
    data = clone_plan(sample_plan_dict)
    data["accounts"] = {}
    path = write_plan(tmp_path, data)

    with pytest.raises(SchemaError, match=r"accounts: expected array"):
        load_plan(path)


def test_load_plan_rejects_invalid_nested_object_type(tmp_path, sample_plan_dict):
    data = clone_plan(sample_plan_dict)
    data["household"]["spouse"] = "bad"
    path = write_plan(tmp_path, data)

    with pytest.raises(SchemaError, match=r"household\.spouse: expected object"):
        load_plan(path)


def test_optional_sections_take_defaults(tmp_path, sample_plan_dict):
    data = clone_plan(sample_plan_dict)
    for key in ("taxes", "market", "strategy", "other_income", "adjustments", "start_year"):
        data.pop(key)
    data["accounts"][0].pop("cost_basis")
    path = write_plan(tmp_path, data)

    plan = load_plan(path)

    assert plan.start_year == 2026
    assert plan.taxes.federal_model == "effective"
    assert plan.market.simulation_mode == "deterministic"
    assert plan.strategy.rebalance_frequency == "none"
    assert plan.other_income == []
    assert plan.accounts[0].cost_basis is None


def test_unrecognised_person_and_household_keys_are_ignored(tmp_path, sample_plan_dict):
    data = clone_plan(sample_plan_dict)
    data["household"]["marital_status"] = "married"
    data["household"]["primary"]["retirement_age"] = 65
    path = write_plan(tmp_path, data)

    plan = load_plan(path)

    assert plan.household.primary.current_age == 66
    assert not hasattr(plan.household.primary, "retirement_age")
