"""Payment calculator.

Computes the monthly payment on a loan with an optional balloon (future
value), payments at the end or the beginning of each period and an interest
rate that may compound less often than monthly:

    PMT = (PV * r * (1 + r)^n - FV * r) / ((1 + r)^n - 1)

where ``r`` is the effective monthly rate ``(1 + i/c)^(c/12) - 1`` for an
annual rate ``i`` compounded ``c`` times a year.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List

from ..amortization import amortize, periodic_payment
from ..utils import ZERO, coerce_decimal_fields, percent_to_rate

logger = logging.getLogger(__name__)

COMPOUNDING_PERIODS: Dict[str, int] = {
    "annually": 1,
    "semi-annually": 2,
    "quarterly": 4,
    "monthly": 12,
}
PAYMENT_TYPES = ("end", "beginning")
PAYMENTS_PER_YEAR = 12


@dataclass
class PaymentInputs:
    present_value: Decimal
    annual_interest_rate: Decimal
    number_of_periods: int
    future_value: Decimal = Decimal("0")
    compounding: str = "monthly"
    payment_type: str = "end"

    def __post_init__(self) -> None:
        coerce_decimal_fields(self)


@dataclass
class PaymentScheduleRow:
    period: int
    payment: Decimal
    principal: Decimal
    interest: Decimal
    balance: Decimal
    cumulative_principal: Decimal
    cumulative_interest: Decimal


@dataclass
class PaymentResult:
    monthly_payment: Decimal
    total_payments: Decimal
    total_interest: Decimal
    total_principal: Decimal
    schedule: List[PaymentScheduleRow] = field(default_factory=list)


def compounding_periods_per_year(compounding: str) -> int:
    try:
        return COMPOUNDING_PERIODS[compounding]
    except KeyError:
        raise ValueError(f"Unknown compounding frequency: {compounding}") from None


def effective_rate(annual_rate: Decimal, compounding: str, payments_per_year: int = PAYMENTS_PER_YEAR) -> Decimal:
    """Return the interest rate per payment period for ``annual_rate`` percent."""
    per_year = compounding_periods_per_year(compounding)
    rate_per_compound = percent_to_rate(annual_rate) / per_year
    if per_year == payments_per_year:
        return rate_per_compound
    return (1 + rate_per_compound) ** (Decimal(per_year) / payments_per_year) - 1


def calculate_payment(inputs: PaymentInputs) -> Decimal:
    if inputs.number_of_periods <= 0:
        raise ValueError("Number of periods must be greater than 0")
    rate = effective_rate(inputs.annual_interest_rate, inputs.compounding)
    return periodic_payment(
        inputs.present_value,
        rate,
        inputs.number_of_periods,
        future_value=inputs.future_value,
        due_at_start=inputs.payment_type == "beginning",
    )


def calculate_payment_schedule(inputs: PaymentInputs) -> PaymentResult:
    """Return the payment, totals and full schedule.

    The balance after the last payment equals the balloon amount. With
    payments at the beginning of a period each payment is applied before that
    period's interest accrues.
    """
    if inputs.payment_type not in PAYMENT_TYPES:
        raise ValueError(f"Unknown payment type: {inputs.payment_type}")

    payment = calculate_payment(inputs)
    rate = effective_rate(inputs.annual_interest_rate, inputs.compounding)
    run = amortize(
        inputs.present_value,
        rate,
        payment,
        periods=inputs.number_of_periods,
        residual=inputs.future_value,
        due_at_start=inputs.payment_type == "beginning",
    )

    schedule: List[PaymentScheduleRow] = []
    cumulative_principal = ZERO
    cumulative_interest = ZERO
    for entry in run.entries:
        cumulative_principal += entry.principal
        cumulative_interest += entry.interest
        schedule.append(
            PaymentScheduleRow(
                period=entry.period,
                payment=entry.payment,
                principal=entry.principal,
                interest=entry.interest,
                balance=max(ZERO, entry.remaining_balance),
                cumulative_principal=cumulative_principal,
                cumulative_interest=cumulative_interest,
            )
        )

    logger.debug("Payment %s over %d periods at %s per period", payment, inputs.number_of_periods, rate)
    return PaymentResult(
        monthly_payment=payment,
        total_payments=payment * inputs.number_of_periods,
        total_interest=cumulative_interest,
        total_principal=inputs.present_value - inputs.future_value,
        schedule=schedule,
    )


def validate_payment_inputs(inputs: PaymentInputs) -> List[str]:
    errors: List[str] = []

    if inputs.present_value <= 0:
        errors.append("Loan amount must be greater than 0")
    if inputs.future_value < 0:
        errors.append("Balloon payment cannot be negative")
    if inputs.future_value > inputs.present_value:
        errors.append("Balloon payment cannot exceed the loan amount")
    if not 0 <= inputs.annual_interest_rate <= 50:
        errors.append("Interest rate must be between 0% and 50%")
    if not 1 <= inputs.number_of_periods <= 600:
        errors.append("Number of periods must be between 1 and 600")
    if inputs.compounding not in COMPOUNDING_PERIODS:
        errors.append(f"Compounding must be one of: {', '.join(COMPOUNDING_PERIODS)}")
    if inputs.payment_type not in PAYMENT_TYPES:
        errors.append(f"Payment type must be one of: {', '.join(PAYMENT_TYPES)}")

    return errors
