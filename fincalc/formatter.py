"""Output helpers for the calculators.

Formatting functions turn ``Decimal`` results into display strings, and the
``print_*`` functions render summaries and schedules as plain text tables for
the command line.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Tuple

RULE = "-" * 72


def format_currency(amount: Optional[Decimal], symbol: str = "$", decimals: int = 2) -> str:
    if amount is None:
        return "n/a"
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.{decimals}f}"


def format_percentage(value: Optional[Decimal], decimals: int = 2) -> str:
    if value is None:
        return "n/a"
    return f"{value:.{decimals}f}%"


def format_number(value: Optional[Decimal], decimals: int = 2) -> str:
    if value is None:
        return "n/a"
    return f"{value:,.{decimals}f}"


def format_exchange_rate(rate: Decimal) -> str:
    """Show small rates with more precision so they do not round to zero."""
    return f"{rate:.6f}" if rate < 1 else f"{rate:.4f}"


def format_months(months: Optional[int]) -> str:
    """Render a month count as e.g. ``2 years, 3 months``."""
    if months is None:
        return "never"
    years, rest = divmod(months, 12)
    parts = []
    if years:
        parts.append(f"{years} year{'s' if years != 1 else ''}")
    if rest or not years:
        parts.append(f"{rest} month{'s' if rest != 1 else ''}")
    return ", ".join(parts)


def format_years(years: Optional[Decimal]) -> str:
    if years is None:
        return "never"
    return f"{years:.1f} years"


def print_summary(title: str, rows: Sequence[Tuple[str, str]]) -> None:
    """Print labelled values under a title, aligned on the colon."""
    width = max((len(label) for label, _ in rows), default=0)
    print(title)
    print(RULE)
    for label, value in rows:
        print(f"{label:<{width}} : {value}")
    print(RULE)


def print_table(headers: List[str], rows: Iterable[Sequence[object]]) -> None:
    """Print rows as a tab separated table; Decimals are shown with 2 places."""
    print("\t".join(headers))
    for row in rows:
        print("\t".join(f"{v:.2f}" if isinstance(v, Decimal) else str(v) for v in row))
