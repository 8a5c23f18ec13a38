import pytest

from retiresim.engine import initialize_state
from retiresim.income import MandatoryIncome
from retiresim.phase import determine_phase
from retiresim.tax import (
    calculate_taxes,
    compute_capital_gains_tax,
    compute_federal_income_tax,
    compute_state_tax,
    inflate_deduction,
)
from tests.helpers import build_plan, minimal_plan_dict


def test_federal_brackets_single():
    assert compute_federal_income_tax(50000, "single") == pytest.approx(5914.0)


def test_federal_brackets_scale_with_inflation():
    assert compute_federal_income_tax(100000, "single", inflation_multiplier=2.0) == pytest.approx(2 * 5914.0)


def test_federal_tax_zero_for_non_positive_income():
    assert compute_federal_income_tax(0, "mfj") == 0.0
    assert compute_federal_income_tax(-500, "mfj") == 0.0


def test_capital_gains_stack_on_ordinary_income():
    assert compute_capital_gains_tax(20000, 40000, "single") == pytest.approx(11650 * 0.15)


def test_capital_gains_fully_in_zero_bracket():
    assert compute_capital_gains_tax(20000, 10000, "mfj") == 0.0


def test_state_tax_exempts_social_security_and_uses_state_deduction():
    tax = compute_state_tax("VA", 100000, 20000, 10000, 30000)
    assert tax == pytest.approx(72000 * 0.0575 + 10000 * 0.0575)


def test_state_tax_for_unknown_state_uses_override_and_half_federal_deduction():
    assert compute_state_tax("ZZ", 100000, 0, 0, 30000) == 0.0
    assert compute_state_tax("ZZ", 100000, 0, 0, 30000, income_rate_override=5.0) == pytest.approx(85000 * 0.05)


def test_state_code_is_case_insensitive():
    assert compute_state_tax("va", 50000, 0, 0, 30000) == compute_state_tax("VA", 50000, 0, 0, 30000)


def _tax_plan(**taxes):
    data = minimal_plan_dict()
    data["taxes"] = {"federal_effective_rate_pct": 20, "cap_gains_rate_pct": 15, "state_model": "none", **taxes}
    return build_plan(data)


def test_calculate_taxes_effective_model():
    plan = _tax_plan()
    mandatory = MandatoryIncome(pension_and_other_income=20000, taxable_other_ordinary=20000)

    result = calculate_taxes(plan, mandatory, 10000, 30000, 5000, 15000, "single")

    assert result.taxable_ordinary_income == pytest.approx(60000)
    assert result.taxable_capital_gains == pytest.approx(5000)
    assert result.taxes_federal == pytest.approx(45000 * 0.20 + 5000 * 0.15)
    assert result.taxes_state == 0.0


def test_calculate_taxes_bracket_model():
    data = minimal_plan_dict()
    data["taxes"] = {"federal_model": "bracket", "state_model": "none"}
    plan = build_plan(data)
    mandatory = MandatoryIncome(pension_and_other_income=20000, taxable_other_ordinary=20000)

    result = calculate_taxes(plan, mandatory, 10000, 30000, 5000, 15000, "single")

    ordinary_tax = 1192.5 + (45000 - 11925) * 0.12
    gains_tax = 1650 * 0.15
    assert result.taxes_federal == pytest.approx(ordinary_tax + gains_tax)


def test_calculate_taxes_includes_taxable_social_security():
    plan = _tax_plan()
    mandatory = MandatoryIncome(social_security_income=40000)

    result = calculate_taxes(plan, mandatory, 0, 60000, 0, 30000, "mfj")

    assert result.taxable_social_security == pytest.approx(34000)
    assert result.taxable_ordinary_income == pytest.approx(94000)
    assert result.taxes_federal == pytest.approx((94000 - 30000) * 0.20)


def test_capital_gains_raise_provisional_income():
    plan = _tax_plan()
    mandatory = MandatoryIncome(social_security_income=30000)

    result = calculate_taxes(plan, mandatory, 0, 0, 40000, 15000, "single")

    # provisional = 40,000 + 15,000; 0.85 * (55,000 - 34,000) + 4,500
    assert result.taxable_social_security == pytest.approx(22350)
    assert result.taxes_federal == pytest.approx((22350 - 15000) * 0.20 + 40000 * 0.15)


def test_calculate_taxes_adds_state_tax():
    data = minimal_plan_dict()
    data["household"]["state_of_residence"] = "IL"
    data["taxes"] = {"federal_effective_rate_pct": 0, "cap_gains_rate_pct": 0}
    plan = build_plan(data)

    result = calculate_taxes(plan, MandatoryIncome(), 0, 50000, 0, 15000, "single")

    assert result.taxes_state == pytest.approx(50000 * 0.0495)


def test_inflate_deduction_adds_single_age_bonus():
    state = initialize_state(build_plan())
    ctx = determine_phase(state)

    assert inflate_deduction(state, ctx) == pytest.approx(15000 + 1550)


def test_inflate_deduction_for_couple_over_65_with_inflation():
    data = minimal_plan_dict()
    data["household"] = {
        "filing_status": "mfj",
        "state_of_residence": "WA",
        "primary": {"birth_year": 1958, "current_age": 68, "life_expectancy": 90},
        "spouse": {"birth_year": 1960, "current_age": 66, "life_expectancy": 90},
    }
    data["spending"]["inflation_pct"] = 2.0
    state = initialize_state(build_plan(data))
    state.year_index = 1
    state.current_year = 2027
    ctx = determine_phase(state)

    assert inflate_deduction(state, ctx) == pytest.approx((30000 + 2 * 1300) * 1.02)


def test_inflate_deduction_override():
    data = minimal_plan_dict()
    data["taxes"]["standard_deduction_override"] = 20000
    state = initialize_state(build_plan(data))
    ctx = determine_phase(state)

    assert inflate_deduction(state, ctx) == pytest.approx(20000 + 1550)
