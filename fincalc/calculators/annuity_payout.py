"""Annuity payout calculator.

Two modes are supported: *fixed length*, where the payout amount is solved
from a principal, rate and number of years, and *fixed payment*, where the
number of payouts is solved from a principal, rate and payout amount. Both
produce a year-by-year schedule built from the shared amortization loop.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import ROUND_CEILING, Decimal
from typing import Dict, List, Optional

from ..amortization import MAX_PERIODS, amortize, periodic_payment, periods_to_payoff
from ..data_models import ScheduleEntry
from ..utils import ZERO, coerce_decimal_fields, percent_to_rate

logger = logging.getLogger(__name__)

PAYMENTS_PER_YEAR: Dict[str, int] = {
    "annually": 1,
    "semiannually": 2,
    "quarterly": 4,
    "monthly": 12,
    "semimonthly": 24,
    "biweekly": 26,
}


@dataclass
class AnnuityInputs:
    """Inputs for the annuity payout calculator.

    Exactly one of ``years`` (fixed length mode) and ``payout_amount`` (fixed
    payment mode) is expected.
    """

    principal: Decimal
    annual_rate: Decimal
    frequency: str = "monthly"
    years: Optional[int] = None
    payout_amount: Optional[Decimal] = None

    def __post_init__(self) -> None:
        coerce_decimal_fields(self)


@dataclass
class AnnuityYear:
    year: int
    beginning_balance: Decimal
    interest: Decimal
    principal: Decimal
    payment: Decimal
    ending_balance: Decimal


@dataclass
class AnnuityResult:
    """Result of an annuity payout calculation.

    When the payout never exhausts the principal ``total_payments``,
    ``total_payout``, ``total_interest`` and ``years`` are ``None``.
    ``will_grow`` is True when the payout is smaller than the interest earned,
    so the balance increases over time. ``hit_limit`` is True when the payout
    lasts longer than ``MAX_PERIODS`` periods; the totals still cover the full
    duration but the schedule stops at the cap.
    """

    payout_amount: Decimal
    total_payments: Optional[int]
    total_payout: Optional[Decimal]
    total_interest: Optional[Decimal]
    years: Optional[Decimal] = None
    will_grow: bool = False
    hit_limit: bool = False
    schedule: List[AnnuityYear] = field(default_factory=list)


def payments_per_year(frequency: str) -> int:
    try:
        return PAYMENTS_PER_YEAR[frequency]
    except KeyError:
        raise ValueError(f"Unknown payment frequency: {frequency}") from None


def _periodic_rate(annual_rate: Decimal, frequency: str) -> Decimal:
    return percent_to_rate(annual_rate) / payments_per_year(frequency)


def _group_by_year(principal: Decimal, entries: List[ScheduleEntry], per_year: int) -> List[AnnuityYear]:
    schedule: List[AnnuityYear] = []
    beginning = principal
    for start in range(0, len(entries), per_year):
        chunk = entries[start : start + per_year]
        schedule.append(
            AnnuityYear(
                year=start // per_year + 1,
                beginning_balance=beginning,
                interest=sum((e.interest for e in chunk), ZERO),
                principal=sum((e.principal for e in chunk), ZERO),
                payment=sum((e.payment for e in chunk), ZERO),
                ending_balance=chunk[-1].remaining_balance,
            )
        )
        beginning = chunk[-1].remaining_balance
    return schedule


def generate_amortization_schedule(
    principal: Decimal, annual_rate: Decimal, years: int, frequency: str
) -> List[AnnuityYear]:
    """Return the fixed-length payout schedule aggregated by year."""
    per_year = payments_per_year(frequency)
    rate = _periodic_rate(annual_rate, frequency)
    total_payments = years * per_year
    payment = periodic_payment(principal, rate, total_payments)
    run = amortize(principal, rate, payment, periods=total_payments)
    return _group_by_year(principal, run.entries, per_year)


def calculate_annuity_payout(
    principal: Decimal, annual_rate: Decimal, years: int, frequency: str = "monthly"
) -> AnnuityResult:
    """Fixed length mode: solve the payout that exhausts ``principal`` in ``years``."""
    total_payments = years * payments_per_year(frequency)
    rate = _periodic_rate(annual_rate, frequency)
    payout = periodic_payment(principal, rate, total_payments)
    total_payout = payout * total_payments

    return AnnuityResult(
        payout_amount=payout,
        total_payments=total_payments,
        total_payout=total_payout,
        total_interest=total_payout - principal,
        years=Decimal(years),
        will_grow=False,
        schedule=generate_amortization_schedule(principal, annual_rate, years, frequency),
    )


def calculate_payout_duration(
    principal: Decimal, annual_rate: Decimal, payout_amount: Decimal, frequency: str = "monthly"
) -> AnnuityResult:
    """Fixed payment mode: solve how long ``payout_amount`` can be paid out."""
    per_year = payments_per_year(frequency)
    rate = _periodic_rate(annual_rate, frequency)

    payments = periods_to_payoff(principal, rate, payout_amount)
    if payments is None:
        first_interest = principal * rate
        logger.debug("Payout %s never depletes principal %s", payout_amount, principal)
        return AnnuityResult(
            payout_amount=payout_amount,
            total_payments=None,
            total_payout=None,
            total_interest=None,
            years=None,
            will_grow=payout_amount < first_interest,
        )

    total_payments = int(payments.to_integral_value(rounding=ROUND_CEILING))
    total_payout = payout_amount * total_payments
    run = amortize(principal, rate, payout_amount, max_periods=MAX_PERIODS)
    if run.hit_limit:
        logger.debug("Payout schedule cut at %d of %d periods", MAX_PERIODS, total_payments)

    return AnnuityResult(
        payout_amount=payout_amount,
        total_payments=total_payments,
        total_payout=total_payout,
        total_interest=total_payout - principal,
        years=payments / per_year,
        will_grow=False,
        hit_limit=run.hit_limit,
        schedule=_group_by_year(principal, run.entries, per_year),
    )


def calculate_annuity(inputs: AnnuityInputs) -> AnnuityResult:
    """Run whichever mode ``inputs`` describes."""
    if inputs.years is not None:
        return calculate_annuity_payout(inputs.principal, inputs.annual_rate, inputs.years, inputs.frequency)
    if inputs.payout_amount is not None:
        return calculate_payout_duration(
            inputs.principal, inputs.annual_rate, inputs.payout_amount, inputs.frequency
        )
    raise ValueError("Either years or payout amount must be provided")


def validate_annuity_input(inputs: AnnuityInputs) -> List[str]:
    errors: List[str] = []

    if inputs.principal <= 0:
        errors.append("Starting principal must be greater than 0")
    if inputs.principal > 100_000_000:
        errors.append("Starting principal must be less than $100,000,000")

    if inputs.annual_rate < 0:
        errors.append("Interest rate cannot be negative")
    if inputs.annual_rate > 50:
        errors.append("Interest rate must be less than 50%")

    if inputs.years is not None:
        if inputs.years <= 0:
            errors.append("Years must be greater than 0")
        if inputs.years > 100:
            errors.append("Years must be less than 100")

    if inputs.payout_amount is not None and inputs.payout_amount <= 0:
        errors.append("Payout amount must be greater than 0")

    if inputs.years is None and inputs.payout_amount is None:
        errors.append("Provide either years or a payout amount")

    if inputs.frequency not in PAYMENTS_PER_YEAR:
        errors.append(f"Payment frequency must be one of: {', '.join(PAYMENTS_PER_YEAR)}")

    return errors
