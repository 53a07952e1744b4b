from decimal import Decimal

import pytest

from fincalc.calculators.annuity_payout import AnnuityInputs
from fincalc.calculators.currency import CurrencyInputs
from fincalc.calculators.rent import RentInputs
from fincalc.utils import build_input, decimal_from_str, to_decimal


def test_decimal_from_str_strips_commas():
    assert decimal_from_str("1,250.50") == Decimal("1250.50")


@pytest.mark.parametrize("value", ["inf", "-Infinity", "nan", "1e999", "abc"])
def test_non_finite_and_oversized_values_are_rejected(value):
    with pytest.raises(ValueError):
        decimal_from_str(value)


def test_to_decimal_rejects_infinite_values():
    with pytest.raises(ValueError):
        to_decimal(float("inf"))
    with pytest.raises(ValueError):
        to_decimal(Decimal("Infinity"))
    with pytest.raises(ValueError):
        to_decimal(True)


def test_build_input_converts_numbers():
    inputs = build_input(RentInputs, {"monthly_rent": "1,500", "years": "3"})
    assert inputs.monthly_rent == Decimal("1500")
    assert inputs.years == 3
    assert build_input(RentInputs, {"monthly_rent": 1500, "years": 3.0}).years == 3


@pytest.mark.parametrize("years", [12.7, "12.5", True, "inf", [12]])
def test_build_input_rejects_non_integral_years(years):
    with pytest.raises(ValueError, match="Invalid integer for years"):
        build_input(RentInputs, {"monthly_rent": 1500, "years": years})


def test_build_input_rejects_non_text_for_text_fields():
    with pytest.raises(ValueError, match="Invalid text for from_currency"):
        build_input(CurrencyInputs, {"amount": 1, "from_currency": 5})
    with pytest.raises(ValueError, match="Invalid text for frequency"):
        build_input(AnnuityInputs, {"principal": 1000, "annual_rate": 5, "years": 1, "frequency": ["monthly"]})
