"""Calculator registry.

Maps a calculator slug (as used on the command line and in API URLs) to its
input record, validation function and compute function so that callers can
drive any calculator by name from a plain mapping of inputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Type

from .calculators import annuity_payout, college_cost, credit_card, currency, discount, k401, lease, payment, rent
from .utils import build_input


@dataclass(frozen=True)
class Calculator:
    slug: str
    title: str
    input_type: Type[Any]
    validate: Callable[..., List[str]]
    compute: Callable[..., Any]
    schedule_field: Optional[str] = None  # result attribute holding the schedule rows
    uses_rates: bool = False  # validate/compute accept an exchange rate table


CALCULATORS: Dict[str, Calculator] = {
    c.slug: c
    for c in (
        Calculator(
            "401k",
            "401(k) Retirement",
            k401.K401Inputs,
            k401.validate_401k_inputs,
            k401.calculate_401k,
            "year_by_year_projection",
        ),
        Calculator(
            "annuity-payout",
            "Annuity Payout",
            annuity_payout.AnnuityInputs,
            annuity_payout.validate_annuity_input,
            annuity_payout.calculate_annuity,
            "schedule",
        ),
        Calculator(
            "lease",
            "Lease",
            lease.LeaseInputs,
            lease.validate_lease_inputs,
            lease.calculate_lease,
            "schedule",
        ),
        Calculator(
            "college-cost",
            "College Cost",
            college_cost.CollegeInputs,
            college_cost.validate_college_inputs,
            college_cost.calculate_college_cost,
            "year_by_year_costs",
        ),
        Calculator(
            "credit-card",
            "Credit Card Payoff",
            credit_card.CreditCardInputs,
            credit_card.validate_credit_card_inputs,
            credit_card.calculate_credit_card_payoff,
            "amortization_schedule",
        ),
        Calculator(
            "currency",
            "Currency Converter",
            currency.CurrencyInputs,
            currency.validate_currency_inputs,
            currency.calculate_currency,
            "common",
            uses_rates=True,
        ),
        Calculator(
            "discount",
            "Discount",
            discount.DiscountInputs,
            discount.validate_discount_inputs,
            discount.calculate_discount,
        ),
        Calculator(
            "payment",
            "Loan Payment",
            payment.PaymentInputs,
            payment.validate_payment_inputs,
            payment.calculate_payment_schedule,
            "schedule",
        ),
        Calculator(
            "rent",
            "Rent",
            rent.RentInputs,
            rent.validate_rent_inputs,
            rent.calculate_rent,
            "yearly_projection",
        ),
    )
}


def get_calculator(slug: str) -> Calculator:
    try:
        return CALCULATORS[slug]
    except KeyError:
        raise LookupError(f"Unknown calculator: {slug}") from None


def run_calculator(
    calculator: Calculator, data: Mapping[str, Any], rates: Optional[Mapping[str, Any]] = None
) -> Tuple[List[str], Optional[Any]]:
    """Build, validate and compute in one go.

    Returns ``(errors, None)`` when the inputs cannot be built or fail
    validation, otherwise ``([], result)``. A ``ValueError`` raised by the
    compute function (an undefined formula) propagates to the caller.
    """
    try:
        inputs = build_input(calculator.input_type, data)
    except ValueError as exc:
        return [str(exc)], None

    extra = {"rates": rates} if calculator.uses_rates and rates else {}
    errors = calculator.validate(inputs, **extra)
    if errors:
        return errors, None
    return [], calculator.compute(inputs, **extra)
