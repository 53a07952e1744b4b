from decimal import Decimal

import pytest

from fincalc.calculators.credit_card import (
    CreditCardInputs,
    calculate_credit_card_payoff,
    calculate_minimum_payment,
    calculate_payment_for_timeframe,
    calculate_payoff_details,
    generate_amortization_schedule,
    validate_credit_card_inputs,
)


def test_minimum_payment():
    assert calculate_minimum_payment(Decimal("5000"), Decimal("18")) == Decimal("125")
    assert calculate_minimum_payment(Decimal("1000"), Decimal("0")) == Decimal("15")
    assert calculate_minimum_payment(Decimal("10"), Decimal("18")) == Decimal("10")
    assert calculate_minimum_payment(Decimal("0"), Decimal("18")) == 0


def test_payment_for_timeframe():
    payment = calculate_payment_for_timeframe(Decimal("5000"), Decimal("18"), 24)
    assert float(payment) == pytest.approx(249.62, abs=0.01)
    assert calculate_payment_for_timeframe(Decimal("1200"), Decimal("0"), 12) == Decimal("100")


def test_fixed_payment_payoff():
    details = calculate_payoff_details(Decimal("5000"), Decimal("18"), Decimal("200"))
    assert details.months == 32
    assert 1250 < details.total_interest < 1400
    assert float(details.total_paid) == pytest.approx(5000 + float(details.total_interest))
    assert details.last_payment < Decimal("200")
    assert not details.will_grow


def test_zero_apr_payoff():
    details = calculate_payoff_details(Decimal("1200"), Decimal("0"), Decimal("100"))
    assert details.months == 12
    assert details.total_interest == 0


def test_payment_below_interest_will_grow():
    details = calculate_payoff_details(Decimal("5000"), Decimal("24"), Decimal("100"))
    assert details.will_grow
    assert details.months is None
    assert details.total_interest is None


def test_minimum_payments_recompute_and_finish():
    details = calculate_payoff_details(Decimal("5000"), Decimal("18"), Decimal("125"), is_minimum_payment=True)
    assert details.months is not None
    assert not details.will_grow
    assert details.months > 32
    schedule = generate_amortization_schedule(
        Decimal("5000"), Decimal("18"), Decimal("125"), max_months=3, is_minimum_payment=True
    )
    assert len(schedule) == 3
    assert schedule[1].payment < schedule[0].payment


def test_schedule_is_truncated_for_display():
    schedule = generate_amortization_schedule(Decimal("5000"), Decimal("18"), Decimal("200"), max_months=12)
    assert len(schedule) == 12
    assert generate_amortization_schedule(Decimal("0"), Decimal("18"), Decimal("200")) == []


def test_fixed_strategy_comparisons():
    results = calculate_credit_card_payoff(
        CreditCardInputs(balance=5000, apr=18, payment_type="fixed", fixed_payment=200)
    )
    assert results.months_to_payoff == 32
    assert [c.type for c in results.payment_comparisons] == ["minimum", "current", "double", "extra"]
    double = results.payment_comparisons[2]
    assert double.payment == Decimal("400")
    assert double.interest_saved > 0
    assert double.time_saved > 0
    assert len(results.amortization_schedule) == 32
    assert float(results.monthly_interest_rate) == pytest.approx(0.015)
    assert float(results.first_month_interest) == pytest.approx(75.0)
    assert float(results.effective_apr) == pytest.approx(19.56, abs=0.01)


def test_timeframe_strategy():
    results = calculate_credit_card_payoff(
        CreditCardInputs(balance=5000, apr=18, payment_type="timeframe", payoff_months=24)
    )
    assert results.months_to_payoff == 24
    assert float(results.total_paid) == pytest.approx(249.62 * 24, abs=0.5)
    assert [c.type for c in results.payment_comparisons] == ["minimum", "current"]


def test_minimum_strategy_has_double_comparison():
    results = calculate_credit_card_payoff(CreditCardInputs(balance=5000, apr=18))
    assert [c.type for c in results.payment_comparisons] == ["current", "double"]
    assert results.monthly_payment == Decimal("125")
    assert len(results.amortization_schedule) == 60


def test_unknown_payment_type():
    with pytest.raises(ValueError):
        calculate_credit_card_payoff(CreditCardInputs(balance=5000, apr=18, payment_type="weekly"))


def test_validation():
    assert validate_credit_card_inputs(CreditCardInputs(balance=5000, apr=18)) == []
    errors = validate_credit_card_inputs(
        CreditCardInputs(balance=5000, apr=24, payment_type="fixed", fixed_payment=100)
    )
    assert errors == ["Payment must be greater than the monthly interest of $100.00"]
    errors = validate_credit_card_inputs(CreditCardInputs(balance=0, apr=45, payment_type="timeframe"))
    assert "Balance must be greater than $0" in errors
    assert "APR must be between 0% and 40%" in errors
    assert "Payoff timeframe must be at least 1 month" in errors
