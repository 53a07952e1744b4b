"""Data models shared by the calculators.

Each calculator module defines its own flat input and result records. The
records here describe the amortization loop that several of them share: one
``ScheduleEntry`` per period and an ``AmortizationRun`` that collects the
entries together with the flags the loop raises when a balance cannot be paid
down.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List


@dataclass
class ScheduleEntry:
    """One period of an amortization schedule.

    Attributes
    ----------
    period: int
        1-based period number.
    payment: Decimal
        Cash paid in the period. Always equals ``interest + principal``.
    interest: Decimal
        Interest accrued in the period.
    principal: Decimal
        Part of the payment that reduced the balance.
    remaining_balance: Decimal
        Balance after the payment has been applied.
    """

    period: int
    payment: Decimal
    interest: Decimal
    principal: Decimal
    remaining_balance: Decimal


@dataclass
class AmortizationRun:
    """Result of running the amortization loop.

    ``will_grow`` is set when a payment did not cover the interest accrued in
    its period, so the balance would never reach zero. ``hit_limit`` is set when
    the loop stopped on its iteration cap with a balance still outstanding.
    """

    entries: List[ScheduleEntry] = field(default_factory=list)
    hit_limit: bool = False
    will_grow: bool = False

    @property
    def periods(self) -> int:
        return len(self.entries)

    @property
    def total_paid(self) -> Decimal:
        return sum((e.payment for e in self.entries), Decimal("0"))

    @property
    def total_interest(self) -> Decimal:
        return sum((e.interest for e in self.entries), Decimal("0"))

    @property
    def total_principal(self) -> Decimal:
        return sum((e.principal for e in self.entries), Decimal("0"))

    @property
    def final_balance(self) -> Decimal:
        return self.entries[-1].remaining_balance if self.entries else Decimal("0")
