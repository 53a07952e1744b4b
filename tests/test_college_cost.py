from decimal import Decimal

import pytest

from fincalc.calculators.college_cost import (
    COLLEGE_PRESETS,
    CollegeInputs,
    calculate_college_cost,
    calculate_future_value_of_savings,
    calculate_monthly_savings,
    calculate_total_college_cost,
    college_type_name,
    validate_college_inputs,
)


def make_inputs(**overrides):
    values = dict(
        annual_cost=20000,
        cost_increase_rate=5,
        attendance_duration=4,
        percent_from_savings=100,
        current_savings=10000,
        return_rate=6,
        tax_rate=0,
        years_until_college=10,
    )
    values.update(overrides)
    return CollegeInputs(**values)


def test_future_value_of_savings():
    value = calculate_future_value_of_savings(Decimal("10000"), Decimal("6"), Decimal("0"), 10)
    assert float(value) == pytest.approx(17908.48, abs=0.01)


def test_tax_reduces_growth():
    taxed = calculate_future_value_of_savings(Decimal("10000"), Decimal("6"), Decimal("25"), 10)
    untaxed = calculate_future_value_of_savings(Decimal("10000"), Decimal("6"), Decimal("0"), 10)
    assert taxed < untaxed
    # 6 % taxed at 25 % grows at 4.5 %
    assert float(taxed) == pytest.approx(10000 * 1.045 ** 10, abs=0.01)


def test_total_cost_inflates_each_year():
    total, years = calculate_total_college_cost(Decimal("20000"), Decimal("5"), 0, 4)
    assert float(total) == pytest.approx(86202.50, abs=0.01)
    assert [y.year for y in years] == [1, 2, 3, 4]
    assert years[0].annual_cost == Decimal("20000")
    assert years[-1].cumulative_cost == total


def test_monthly_savings():
    assert float(
        calculate_monthly_savings(Decimal("100000"), Decimal("0"), Decimal("6"), Decimal("0"), 10)
    ) == pytest.approx(610.21, abs=0.01)
    assert float(
        calculate_monthly_savings(Decimal("100000"), Decimal("0"), Decimal("0"), Decimal("0"), 10)
    ) == pytest.approx(833.33, abs=0.01)


def test_monthly_savings_zero_when_already_covered():
    assert calculate_monthly_savings(Decimal("1000"), Decimal("5000"), Decimal("5"), Decimal("0"), 5) == 0
    assert calculate_monthly_savings(Decimal("1000"), Decimal("0"), Decimal("5"), Decimal("0"), 0) == 0


def test_full_calculation():
    results = calculate_college_cost(make_inputs())
    assert len(results.year_by_year_costs) == 4
    assert float(results.future_value_of_savings) == pytest.approx(17908.48, abs=0.01)
    shortfall = results.total_college_cost - results.future_value_of_savings
    assert results.additional_savings_needed == shortfall
    assert results.monthly_savings_required > 0
    assert 0 < results.percent_covered_by_savings < 100


def test_partial_savings_share():
    full = calculate_college_cost(make_inputs(current_savings=0))
    half = calculate_college_cost(make_inputs(current_savings=0, percent_from_savings=50))
    assert float(half.monthly_savings_required) == pytest.approx(float(full.monthly_savings_required) / 2)


def test_presets_and_names():
    assert COLLEGE_PRESETS["private-4year"] == Decimal("65470")
    assert college_type_name("public-2year") == "2-Year Public College"
    assert college_type_name("unknown") == "unknown"


def test_validation():
    assert validate_college_inputs(make_inputs()) == []
    errors = validate_college_inputs(make_inputs(attendance_duration=0, tax_rate=120, years_until_college=40))
    assert "Attendance duration must be between 1 and 10 years" in errors
    assert "Tax rate must be between 0 and 100" in errors
    assert "Years until college must be between 0 and 30" in errors
