"""Periodic amortization loop shared by the payment-style calculators.

The annuity payout, credit card, lease and payment calculators all follow the
same pattern: given a balance, a periodic rate and a payment, walk forward one
period at a time, split each payment into interest and principal and keep a
running balance. This module implements that loop once, along with the two
closed-form annuity formulas it is usually paired with.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Callable, Optional

from .data_models import AmortizationRun, ScheduleEntry
from .utils import ZERO

logger = logging.getLogger(__name__)

MAX_PERIODS = 600  # 50 years of monthly payments
PAYOFF_TOLERANCE = Decimal("0.01")
ROUNDING_TOLERANCE = Decimal("0.005")


def periodic_payment(
    principal: Decimal,
    rate: Decimal,
    periods: int,
    future_value: Decimal = ZERO,
    due_at_start: bool = False,
) -> Decimal:
    """Return the level payment that amortizes ``principal`` over ``periods``.

    The formula is:

        payment = (PV * r * (1 + r)^n - FV * r) / ((1 + r)^n - 1)

    where ``PV`` is the principal, ``FV`` an optional balloon left after the
    last payment, ``r`` the periodic rate and ``n`` the number of payments.
    Payments made at the start of each period are smaller by a factor of
    ``1 + r``. When the rate is zero the payment is ``(PV - FV) / n``.
    """
    if periods <= 0:
        raise ValueError("Number of periods must be positive")
    if rate == 0:
        return (principal - future_value) / Decimal(periods)
    factor = (1 + rate) ** periods
    payment = (principal * rate * factor - future_value * rate) / (factor - 1)
    if due_at_start:
        payment = payment / (1 + rate)
    return payment


def periods_to_payoff(principal: Decimal, rate: Decimal, payment: Decimal) -> Optional[Decimal]:
    """Return the (fractional) number of payments needed to clear ``principal``.

    Uses ``n = ln(PMT / (PMT - PV * r)) / ln(1 + r)``. Returns ``None`` when the
    payment does not exceed the interest accrued in the first period, i.e. the
    balance would never be paid off.
    """
    if payment <= 0:
        return None
    if rate == 0:
        return principal / payment
    first_interest = principal * rate
    if payment <= first_interest:
        return None
    return (payment / (payment - first_interest)).ln() / (1 + rate).ln()


def amortize(
    principal: Decimal,
    rate: Decimal,
    payment: Optional[Decimal] = None,
    *,
    periods: Optional[int] = None,
    residual: Decimal = ZERO,
    payment_rule: Optional[Callable[[Decimal], Decimal]] = None,
    due_at_start: bool = False,
    max_periods: int = MAX_PERIODS,
) -> AmortizationRun:
    """Build a period-by-period amortization schedule.

    Parameters
    ----------
    principal: Decimal
        Starting balance.
    rate: Decimal
        Interest rate per period as a decimal (``0.005`` for 0.5 %).
    payment: Decimal, optional
        Level payment. Ignored when ``payment_rule`` is given.
    periods: int, optional
        Fixed number of periods. When omitted the loop runs until the balance
        is paid off, the payment stops covering interest, or ``max_periods``
        is reached.
    residual: Decimal
        Balance expected to remain after the last fixed period (balloon or
        lease residual). The final balance is snapped to it within half a cent.
    payment_rule: callable, optional
        Called with the outstanding balance at the start of each period to
        compute that period's payment (e.g. credit card minimum payments).
    due_at_start: bool
        Payments are made at the beginning of each period, before interest
        accrues. Only supported with a fixed number of periods.
    max_periods: int
        Iteration cap for open-ended schedules.
    """
    if payment is None and payment_rule is None:
        raise ValueError("Either a payment or a payment rule is required")
    if due_at_start and periods is None:
        raise ValueError("Payments due at the start of a period need a fixed term")

    run = AmortizationRun()
    balance = principal
    limit = periods if periods is not None else max_periods
    period = 0

    while period < limit:
        if periods is None and balance <= PAYOFF_TOLERANCE:
            break
        period += 1
        current_payment = payment_rule(balance) if payment_rule is not None else payment

        if due_at_start:
            interest = (balance - current_payment) * rate
        else:
            interest = balance * rate

        if periods is None:
            if current_payment >= balance + interest:
                # Final payment clears the balance and this period's interest
                run.entries.append(
                    ScheduleEntry(
                        period=period,
                        payment=balance + interest,
                        interest=interest,
                        principal=balance,
                        remaining_balance=ZERO,
                    )
                )
                balance = ZERO
                break
            if current_payment <= interest:
                run.will_grow = True
                logger.debug(
                    "Payment %s does not cover interest %s in period %d; stopping",
                    current_payment,
                    interest,
                    period,
                )
                break

        principal_payment = current_payment - interest
        if principal_payment < 0:
            run.will_grow = True
        balance -= principal_payment

        if periods is not None and period == periods:
            if (balance - residual).copy_abs() < ROUNDING_TOLERANCE:
                balance = residual
        elif balance.copy_abs() < ROUNDING_TOLERANCE:
            balance = ZERO

        run.entries.append(
            ScheduleEntry(
                period=period,
                payment=current_payment,
                interest=interest,
                principal=principal_payment,
                remaining_balance=balance,
            )
        )

    if periods is None and not run.will_grow and balance > PAYOFF_TOLERANCE:
        run.hit_limit = True
        logger.debug("Amortization stopped at %d periods with %s outstanding", period, balance)

    return run
