"""Credit card payoff calculator.

Works out how long a balance takes to pay off with minimum payments, a fixed
monthly payment or a payment sized to clear the card in a given number of
months, and compares the chosen strategy with a few alternatives.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, List, Optional

from ..amortization import MAX_PERIODS, amortize, periodic_payment
from ..data_models import ScheduleEntry
from ..utils import ZERO, coerce_decimal_fields, percent_to_rate

logger = logging.getLogger(__name__)

PAYMENT_TYPES = ("minimum", "fixed", "timeframe")
MINIMUM_PAYMENT_FLOOR = Decimal("15")
MINIMUM_PAYMENT_PERCENT = Decimal("0.01")
EXTRA_PAYMENT = Decimal("50")
SCHEDULE_DISPLAY_MONTHS = 60


@dataclass
class CreditCardInputs:
    balance: Decimal
    apr: Decimal
    payment_type: str = "minimum"
    fixed_payment: Decimal = Decimal("0")
    payoff_months: int = 0

    def __post_init__(self) -> None:
        coerce_decimal_fields(self)


@dataclass
class PayoffDetails:
    """Outcome of paying a balance down.

    ``months``, ``total_interest`` and ``total_paid`` are ``None`` when the
    payment does not cover the interest (``will_grow``). When the payoff needs
    more than the iteration cap the totals cover the capped months and
    ``hit_limit`` is set.
    """

    months: Optional[int]
    total_interest: Optional[Decimal]
    total_paid: Optional[Decimal]
    last_payment: Decimal
    will_grow: bool = False
    hit_limit: bool = False


@dataclass
class PaymentComparison:
    type: str  # "minimum", "current", "double" or "extra"
    payment: Decimal
    months_to_payoff: Optional[int]
    total_interest: Optional[Decimal]
    total_paid: Optional[Decimal]
    interest_saved: Optional[Decimal] = None
    time_saved: Optional[int] = None


@dataclass
class CreditCardResults:
    monthly_payment: Decimal
    months_to_payoff: Optional[int]
    total_interest: Optional[Decimal]
    total_paid: Optional[Decimal]
    effective_apr: Decimal
    minimum_payment: Decimal
    daily_interest_rate: Decimal
    monthly_interest_rate: Decimal
    first_month_interest: Decimal
    last_payment: Decimal
    will_grow: bool = False
    hit_limit: bool = False
    payment_comparisons: List[PaymentComparison] = field(default_factory=list)
    amortization_schedule: List[ScheduleEntry] = field(default_factory=list)


def _monthly_rate(apr: Decimal) -> Decimal:
    return percent_to_rate(apr) / 12


def calculate_minimum_payment(balance: Decimal, apr: Decimal) -> Decimal:
    """Return 1 % of the balance plus a month of interest, at least $15.

    Balances under $15 are paid in full.
    """
    if balance <= 0:
        return ZERO
    if balance < MINIMUM_PAYMENT_FLOOR:
        return balance
    calculated = balance * MINIMUM_PAYMENT_PERCENT + balance * _monthly_rate(apr)
    return max(MINIMUM_PAYMENT_FLOOR, calculated)


def _minimum_payment_rule(apr: Decimal) -> Callable[[Decimal], Decimal]:
    monthly_rate = _monthly_rate(apr)

    def rule(balance: Decimal) -> Decimal:
        # Once the balance with interest drops below the floor, pay it all off
        if balance * (1 + monthly_rate) < MINIMUM_PAYMENT_FLOOR:
            return balance * (1 + monthly_rate)
        return calculate_minimum_payment(balance, apr)

    return rule


def calculate_payment_for_timeframe(balance: Decimal, apr: Decimal, months: int) -> Decimal:
    """Return the level payment that clears ``balance`` in ``months``."""
    if months <= 0 or balance <= 0:
        return ZERO
    return periodic_payment(balance, _monthly_rate(apr), months)


def calculate_payoff_details(
    balance: Decimal, apr: Decimal, payment: Decimal, is_minimum_payment: bool = False
) -> PayoffDetails:
    """Walk the balance down month by month.

    With ``is_minimum_payment`` the minimum payment is recomputed every month
    from the outstanding balance, otherwise ``payment`` is paid each month.
    """
    if balance <= 0 or payment <= 0:
        return PayoffDetails(months=0, total_interest=ZERO, total_paid=ZERO, last_payment=ZERO)

    rule = _minimum_payment_rule(apr) if is_minimum_payment else None
    run = amortize(balance, _monthly_rate(apr), payment, payment_rule=rule, max_periods=MAX_PERIODS)

    if run.will_grow:
        logger.debug("Payment %s does not cover the interest on %s", payment, balance)
        return PayoffDetails(
            months=None,
            total_interest=None,
            total_paid=None,
            last_payment=payment,
            will_grow=True,
        )

    return PayoffDetails(
        months=run.periods,
        total_interest=run.total_interest,
        total_paid=run.total_paid,
        last_payment=run.entries[-1].payment if run.entries else ZERO,
        hit_limit=run.hit_limit,
    )


def generate_amortization_schedule(
    balance: Decimal,
    apr: Decimal,
    payment: Decimal,
    max_months: int = SCHEDULE_DISPLAY_MONTHS,
    is_minimum_payment: bool = False,
) -> List[ScheduleEntry]:
    """Return at most ``max_months`` rows of the payoff schedule for display."""
    if balance <= 0 or payment <= 0 or max_months <= 0:
        return []
    rule = _minimum_payment_rule(apr) if is_minimum_payment else None
    return amortize(balance, _monthly_rate(apr), payment, payment_rule=rule, max_periods=max_months).entries


def _saved(current: Optional[Decimal], alternative: Optional[Decimal]) -> Optional[Decimal]:
    if current is None or alternative is None:
        return None
    return current - alternative


def _months_saved(current: Optional[int], alternative: Optional[int]) -> Optional[int]:
    if current is None or alternative is None:
        return None
    return current - alternative


def _comparison(kind: str, payment: Decimal, details: PayoffDetails, current: Optional[PayoffDetails] = None):
    return PaymentComparison(
        type=kind,
        payment=payment,
        months_to_payoff=details.months,
        total_interest=details.total_interest,
        total_paid=details.total_paid,
        interest_saved=_saved(current.total_interest, details.total_interest) if current else None,
        time_saved=_months_saved(current.months, details.months) if current else None,
    )


def calculate_credit_card_payoff(inputs: CreditCardInputs) -> CreditCardResults:
    balance, apr, payment_type = inputs.balance, inputs.apr, inputs.payment_type
    if payment_type not in PAYMENT_TYPES:
        raise ValueError(f"Unknown payment type: {payment_type}")

    monthly_rate = _monthly_rate(apr)
    minimum_payment = calculate_minimum_payment(balance, apr)

    if payment_type == "minimum":
        monthly_payment = minimum_payment
    elif payment_type == "fixed":
        monthly_payment = inputs.fixed_payment
    else:
        monthly_payment = calculate_payment_for_timeframe(balance, apr, inputs.payoff_months)

    if payment_type == "timeframe":
        total_paid = monthly_payment * inputs.payoff_months
        current = PayoffDetails(
            months=inputs.payoff_months,
            total_interest=total_paid - balance,
            total_paid=total_paid,
            last_payment=monthly_payment,
        )
    else:
        current = calculate_payoff_details(balance, apr, monthly_payment, payment_type == "minimum")

    comparisons: List[PaymentComparison] = []
    if payment_type != "minimum":
        minimum = calculate_payoff_details(balance, apr, minimum_payment, True)
        comparisons.append(_comparison("minimum", minimum_payment, minimum))
    comparisons.append(_comparison("current", monthly_payment, current))
    if payment_type in ("fixed", "minimum"):
        double_payment = monthly_payment * 2
        doubled = calculate_payoff_details(balance, apr, double_payment)
        comparisons.append(_comparison("double", double_payment, doubled, current))
    if payment_type == "fixed":
        extra_payment = monthly_payment + EXTRA_PAYMENT
        extra = calculate_payoff_details(balance, apr, extra_payment)
        comparisons.append(_comparison("extra", extra_payment, extra, current))

    display_months = min(current.months or SCHEDULE_DISPLAY_MONTHS, SCHEDULE_DISPLAY_MONTHS)
    schedule = generate_amortization_schedule(
        balance, apr, monthly_payment, display_months, payment_type == "minimum"
    )

    return CreditCardResults(
        monthly_payment=monthly_payment,
        months_to_payoff=current.months,
        total_interest=current.total_interest,
        total_paid=current.total_paid,
        effective_apr=((1 + monthly_rate) ** 12 - 1) * 100,
        minimum_payment=minimum_payment,
        daily_interest_rate=percent_to_rate(apr) / 365,
        monthly_interest_rate=monthly_rate,
        first_month_interest=balance * monthly_rate,
        last_payment=current.last_payment,
        will_grow=current.will_grow,
        hit_limit=current.hit_limit,
        payment_comparisons=comparisons,
        amortization_schedule=schedule,
    )


def validate_credit_card_inputs(inputs: CreditCardInputs) -> List[str]:
    errors: List[str] = []

    if inputs.balance <= 0:
        errors.append("Balance must be greater than $0")
    if inputs.balance > 999_999:
        errors.append("Balance must be less than $1,000,000")
    if inputs.apr < 0:
        errors.append("APR cannot be negative")
    if inputs.apr > 40:
        errors.append("APR must be between 0% and 40%")
    if inputs.payment_type not in PAYMENT_TYPES:
        errors.append(f"Payment type must be one of: {', '.join(PAYMENT_TYPES)}")

    if inputs.payment_type == "fixed":
        if inputs.fixed_payment < MINIMUM_PAYMENT_FLOOR:
            errors.append("Fixed payment must be at least $15")
        if inputs.fixed_payment > inputs.balance:
            errors.append("Fixed payment cannot exceed the balance")
        monthly_interest = inputs.balance * _monthly_rate(inputs.apr)
        if inputs.fixed_payment <= monthly_interest:
            errors.append(f"Payment must be greater than the monthly interest of ${monthly_interest:,.2f}")

    if inputs.payment_type == "timeframe":
        if inputs.payoff_months < 1:
            errors.append("Payoff timeframe must be at least 1 month")
        if inputs.payoff_months > 360:
            errors.append("Payoff timeframe cannot exceed 30 years (360 months)")

    return errors
