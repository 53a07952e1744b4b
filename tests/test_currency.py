import json
from decimal import Decimal

import pytest

from fincalc.calculators.currency import (
    CURRENCIES,
    EXCHANGE_RATES,
    POPULAR_CURRENCIES,
    CurrencyInputs,
    calculate_currency,
    calculate_percentage_change,
    convert_currency,
    get_all_currencies,
    get_common_conversions,
    get_exchange_rate,
    get_multi_currency_comparison,
    is_valid_currency,
    load_exchange_rates,
    validate_currency_inputs,
)


def test_every_rate_has_currency_metadata():
    assert len(CURRENCIES) == 20
    assert set(EXCHANGE_RATES) == set(CURRENCIES)
    assert CURRENCIES["JPY"].decimals == 0


def test_cross_rates_go_through_usd():
    assert get_exchange_rate("USD", "EUR") == Decimal("0.92")
    assert get_exchange_rate("GBP", "GBP") == 1
    assert float(get_exchange_rate("EUR", "GBP")) == pytest.approx(0.79 / 0.92)
    with pytest.raises(ValueError):
        get_exchange_rate("USD", "XYZ")


def test_convert_currency():
    result = convert_currency(Decimal("100"), "USD", "JPY")
    assert result.converted_amount == Decimal("14900")
    assert float(result.inverse_rate) == pytest.approx(1 / 149)
    assert result.timestamp is not None


@pytest.mark.parametrize("source,target", [("USD", "EUR"), ("GBP", "JPY"), ("INR", "TRY")])
def test_round_trip_returns_original_amount(source, target):
    there = convert_currency(Decimal("1234.56"), source, target)
    back = convert_currency(there.converted_amount, target, source)
    assert float(back.converted_amount) == pytest.approx(1234.56)


def test_multi_currency_comparison_skips_base():
    comparison = get_multi_currency_comparison(Decimal("100"), "USD", POPULAR_CURRENCIES)
    codes = [c.currency for c in comparison.conversions]
    assert "USD" not in codes
    assert len(codes) == len(POPULAR_CURRENCIES) - 1


def test_common_conversions():
    common = get_common_conversions("USD", "EUR")
    assert [int(c.amount) for c in common] == [1, 10, 100, 1000, 10000]
    assert common[2].converted == Decimal("92")


def test_percentage_change():
    assert calculate_percentage_change(Decimal("100"), Decimal("110")) == Decimal("10")
    assert calculate_percentage_change(Decimal("0"), Decimal("5")) == 0


def test_currency_list_and_lookup():
    currencies = get_all_currencies()
    assert {"code": "EUR", "name": "Euro", "symbol": "€"} in currencies
    assert is_valid_currency("CHF")
    assert not is_valid_currency("XYZ")


def test_calculate_currency_bundles_views():
    results = calculate_currency(CurrencyInputs(amount=50, from_currency="usd", to_currency="gbp"))
    assert results.conversion.to_currency == "GBP"
    assert float(results.conversion.converted_amount) == pytest.approx(39.5)
    assert len(results.common) == 5


def test_load_exchange_rates_overrides_table(tmp_path):
    path = tmp_path / "rates.json"
    path.write_text(json.dumps({"eur": 0.5, "GBP": "0.25"}), encoding="utf-8")
    rates = load_exchange_rates(path)
    assert rates == {"EUR": Decimal("0.5"), "GBP": Decimal("0.25"), "USD": Decimal("1")}
    assert get_exchange_rate("EUR", "GBP", rates) == Decimal("0.5")
    assert not is_valid_currency("JPY", rates)


@pytest.mark.parametrize("payload", [[1, 2], {"XYZ": 1}, {"EUR": 0}])
def test_load_exchange_rates_rejects_bad_files(tmp_path, payload):
    path = tmp_path / "rates.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    with pytest.raises(ValueError):
        load_exchange_rates(path)


def test_validation():
    assert validate_currency_inputs(CurrencyInputs(amount=10)) == []
    errors = validate_currency_inputs(CurrencyInputs(amount=-1, from_currency="ABC", to_currency="XYZ"))
    assert errors == [
        "Amount must be greater than or equal to 0",
        "Invalid from currency",
        "Invalid to currency",
    ]
