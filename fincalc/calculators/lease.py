"""Lease calculator.

Uses the standard lease formula:

    monthly payment = depreciation fee + finance fee
    depreciation fee = (asset value - residual value) / months
    finance fee      = (asset value + residual value) * money factor
    money factor     = annual rate / 2400

The payment can be solved from a rate, or the effective rate from a payment.
Because the payment is linear in the money factor the reverse calculation is
closed form.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from ..data_models import ScheduleEntry
from ..utils import ZERO, coerce_decimal_fields

logger = logging.getLogger(__name__)

MONEY_FACTOR_DIVISOR = Decimal("2400")


@dataclass
class LeaseInputs:
    """Inputs for the lease calculator.

    Provide ``interest_rate`` to solve the payment, or ``monthly_payment`` to
    solve the effective rate. ``lease_term`` is in months.
    """

    asset_value: Decimal
    residual_value: Decimal
    lease_term: int
    interest_rate: Optional[Decimal] = None
    monthly_payment: Optional[Decimal] = None

    def __post_init__(self) -> None:
        coerce_decimal_fields(self)


@dataclass
class LeaseResults:
    monthly_payment: Decimal
    total_payments: Decimal
    total_interest: Decimal
    total_depreciation: Decimal
    depreciation_fee: Decimal
    finance_fee: Decimal
    money_factor: Decimal
    effective_rate: Optional[Decimal] = None  # set in payment mode
    schedule: List[ScheduleEntry] = field(default_factory=list)


def money_factor(annual_rate: Decimal) -> Decimal:
    """Convert an annual percentage rate into a lease money factor."""
    return annual_rate / MONEY_FACTOR_DIVISOR


def _fees(asset_value: Decimal, residual_value: Decimal, months: int, annual_rate: Decimal):
    depreciation_fee = (asset_value - residual_value) / months
    finance_fee = (asset_value + residual_value) * money_factor(annual_rate)
    return depreciation_fee, finance_fee


def effective_rate_for_payment(
    asset_value: Decimal, residual_value: Decimal, months: int, payment: Decimal
) -> Decimal:
    """Return the annual rate at which the lease formula yields ``payment``."""
    depreciation_fee = (asset_value - residual_value) / months
    return (payment - depreciation_fee) * MONEY_FACTOR_DIVISOR / (asset_value + residual_value)


def lease_schedule(inputs: LeaseInputs, result: LeaseResults) -> List[ScheduleEntry]:
    """Return monthly rows; the remaining value falls to the residual value.

    Each payment splits into the finance fee (interest) and the depreciation
    fee (principal), so the final remaining balance equals the residual.
    """
    schedule: List[ScheduleEntry] = []
    remaining = inputs.asset_value
    for period in range(1, inputs.lease_term + 1):
        remaining -= result.depreciation_fee
        if period == inputs.lease_term:
            remaining = inputs.residual_value
        schedule.append(
            ScheduleEntry(
                period=period,
                payment=result.monthly_payment,
                interest=result.finance_fee,
                principal=result.depreciation_fee,
                remaining_balance=remaining,
            )
        )
    return schedule


def calculate_lease(inputs: LeaseInputs) -> LeaseResults:
    """Calculate lease payment details.

    Raises
    ------
    ValueError
        When the inputs make the formula undefined, e.g. a residual value that
        is not below the asset value.
    """
    asset, residual, term = inputs.asset_value, inputs.residual_value, inputs.lease_term

    if asset <= 0:
        raise ValueError("Asset value must be greater than 0")
    if residual < 0:
        raise ValueError("Residual value cannot be negative")
    if residual >= asset:
        raise ValueError("Residual value must be less than asset value")
    if term <= 0:
        raise ValueError("Lease term must be greater than 0")

    total_depreciation = asset - residual

    if inputs.interest_rate is not None:
        if inputs.interest_rate < 0:
            raise ValueError("Interest rate cannot be negative")
        rate = inputs.interest_rate
        depreciation_fee, finance_fee = _fees(asset, residual, term, rate)
        payment = depreciation_fee + finance_fee
        effective_rate = None
    elif inputs.monthly_payment is not None:
        payment = inputs.monthly_payment
        if payment <= 0:
            raise ValueError("Monthly payment must be greater than 0")
        min_payment = total_depreciation / term
        if payment < min_payment:
            raise ValueError(
                f"Monthly payment is too low to cover depreciation. Minimum payment: ${min_payment:.2f}"
            )
        rate = effective_rate_for_payment(asset, residual, term, payment)
        depreciation_fee, finance_fee = _fees(asset, residual, term, rate)
        effective_rate = rate
    else:
        raise ValueError("Either interest rate or monthly payment must be provided")

    total_payments = payment * term
    result = LeaseResults(
        monthly_payment=payment,
        total_payments=total_payments,
        total_interest=total_payments - total_depreciation,
        total_depreciation=total_depreciation,
        depreciation_fee=depreciation_fee,
        finance_fee=finance_fee,
        money_factor=money_factor(rate),
        effective_rate=effective_rate,
    )
    result.schedule = lease_schedule(inputs, result)
    logger.debug("Lease over %d months: payment %s", term, payment)
    return result


def validate_lease_inputs(inputs: LeaseInputs) -> List[str]:
    errors: List[str] = []

    if inputs.asset_value <= 0:
        errors.append("Asset value must be greater than 0")
    if inputs.asset_value > 100_000_000:
        errors.append("Asset value seems unusually high")
    if inputs.residual_value < 0:
        errors.append("Residual value cannot be negative")
    if inputs.residual_value >= inputs.asset_value:
        errors.append("Residual value must be less than asset value")
    if inputs.lease_term <= 0:
        errors.append("Lease term must be greater than 0")
    if inputs.lease_term > 360:
        errors.append("Lease term cannot exceed 360 months (30 years)")

    if inputs.interest_rate is not None:
        if inputs.interest_rate < 0:
            errors.append("Interest rate cannot be negative")
        if inputs.interest_rate > 50:
            errors.append("Interest rate seems unusually high")

    if inputs.monthly_payment is not None:
        if inputs.monthly_payment <= 0:
            errors.append("Monthly payment must be greater than 0")
        if inputs.lease_term > 0:
            min_payment = (inputs.asset_value - inputs.residual_value) / inputs.lease_term
            if inputs.monthly_payment < min_payment:
                errors.append(f"Monthly payment is too low. Minimum: ${min_payment:.2f}")

    if inputs.interest_rate is None and inputs.monthly_payment is None:
        errors.append("Provide either an interest rate or a monthly payment")

    return errors
