from decimal import Decimal

import pytest

from fincalc.calculators.rent import RentInputs, affordability_level, calculate_rent, validate_rent_inputs


def make_inputs(**overrides):
    values = dict(monthly_rent=2000, utilities=150, insurance=25, parking=100, other_costs=50)
    values.update(overrides)
    return RentInputs(**values)


def test_rent_only():
    results = calculate_rent(RentInputs(monthly_rent=1500))
    assert results.monthly_total == Decimal("1500")
    assert results.annual_total == Decimal("18000")
    assert results.cost_breakdown.rent == Decimal("1500")


def test_all_costs_are_added():
    results = calculate_rent(make_inputs())
    assert results.monthly_total == Decimal("2325")
    assert results.annual_total == Decimal("27900")
    assert results.cost_breakdown.utilities == Decimal("150")
    assert results.cost_breakdown.other == Decimal("50")


def test_discount_then_tax():
    assert float(calculate_rent(make_inputs(discount=10)).monthly_total) == pytest.approx(2092.5)
    assert float(calculate_rent(make_inputs(tax_rate=5)).monthly_total) == pytest.approx(2441.25)


def test_breakdown_carries_discount_proportionally():
    results = calculate_rent(make_inputs(discount=10))
    breakdown = results.cost_breakdown
    parts = [breakdown.rent, breakdown.utilities, breakdown.insurance, breakdown.parking, breakdown.other]
    assert float(sum(parts)) == pytest.approx(float(results.monthly_total))
    assert float(breakdown.rent) == pytest.approx(1800)


def test_zero_costs_have_zero_breakdown():
    results = calculate_rent(RentInputs(monthly_rent=0))
    assert results.monthly_total == 0
    assert results.cost_breakdown.rent == 0


def test_yearly_projection_grows():
    results = calculate_rent(make_inputs(annual_increase=3, years=3))
    projection = results.yearly_projection
    assert [y.year for y in projection] == [1, 2, 3]
    assert projection[0].monthly_total == results.monthly_total
    assert float(projection[2].monthly_total) == pytest.approx(2325 * 1.03 ** 2)
    assert projection[1].annual_total == projection[1].monthly_total * 12


def test_affordability():
    results = calculate_rent(make_inputs(monthly_income=6000))
    assert float(results.affordability_ratio) == pytest.approx(38.75)
    assert results.affordability == "caution"
    assert results.affordability_message == "Caution - Above recommended range"
    assert results.max_affordable_rent == Decimal("1800")


def test_affordability_levels():
    assert affordability_level(Decimal("30")) == "affordable"
    assert affordability_level(Decimal("40")) == "caution"
    assert affordability_level(Decimal("40.1")) == "high-risk"


def test_no_income_means_no_ratio():
    results = calculate_rent(make_inputs())
    assert results.affordability_ratio == 0
    assert results.max_affordable_rent == 0


def test_validation():
    assert validate_rent_inputs(make_inputs()) == []
    errors = validate_rent_inputs(make_inputs(parking=-5, discount=120, years=0))
    assert errors == [
        "Parking cannot be negative",
        "Discount must be between 0 and 100",
        "Years must be between 1 and 50",
    ]
