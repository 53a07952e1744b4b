"""Discount calculator.

Any two of original price, discount (percent or fixed amount) and final
price determine the rest:

    discount amount  = original price * percent / 100
    final price      = original price - discount amount
    discount percent = discount amount / original price * 100
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

from ..utils import HUNDRED, coerce_decimal_fields, percent_to_rate

logger = logging.getLogger(__name__)

DISCOUNT_MODES = ("percent", "fixed")


@dataclass
class DiscountInputs:
    """Inputs for the discount calculator.

    In ``percent`` mode the discount is given as ``discount_percent``, in
    ``fixed`` mode as ``discount_amount``. Leave unknown values as ``None``.
    """

    mode: str = "percent"
    original_price: Optional[Decimal] = None
    discount_percent: Optional[Decimal] = None
    discount_amount: Optional[Decimal] = None
    final_price: Optional[Decimal] = None

    def __post_init__(self) -> None:
        coerce_decimal_fields(self)

    def provided_values(self) -> List[Decimal]:
        values = [self.original_price, self.discount_percent, self.discount_amount, self.final_price]
        return [v for v in values if v is not None]


@dataclass
class DiscountResults:
    original_price: Decimal
    discount_percent: Decimal
    discount_amount: Decimal
    final_price: Decimal
    savings: Decimal


def _percent_of(part: Decimal, whole: Decimal) -> Decimal:
    if whole == 0:
        raise ValueError("Original price must be greater than 0")
    return part / whole * HUNDRED


def _solve_percent_mode(inputs: DiscountInputs):
    original, percent, final = inputs.original_price, inputs.discount_percent, inputs.final_price
    if original is not None and percent is not None:
        amount = original * percent_to_rate(percent)
        return original, percent, amount, original - amount
    if original is not None and final is not None:
        amount = original - final
        return original, _percent_of(amount, original), amount, final
    if percent is not None and final is not None:
        if percent >= HUNDRED:
            raise ValueError("A 100% discount cannot be combined with a final price")
        original = final / (1 - percent_to_rate(percent))
        return original, percent, original - final, final
    raise ValueError(
        "Invalid combination. Provide original price and discount percent, or original price "
        "and final price, or discount percent and final price."
    )


def _solve_fixed_mode(inputs: DiscountInputs):
    original, amount, final = inputs.original_price, inputs.discount_amount, inputs.final_price
    if original is not None and amount is not None:
        return original, _percent_of(amount, original), amount, original - amount
    if original is not None and final is not None:
        amount = original - final
        return original, _percent_of(amount, original), amount, final
    if amount is not None and final is not None:
        original = final + amount
        return original, _percent_of(amount, original), amount, final
    raise ValueError(
        "Invalid combination. Provide original price and discount amount, or original price "
        "and final price, or discount amount and final price."
    )


def calculate_discount(inputs: DiscountInputs) -> DiscountResults:
    """Solve the missing discount values.

    Raises
    ------
    ValueError
        With fewer than two values, when every value is zero, or for a
        combination the mode cannot solve.
    """
    provided = inputs.provided_values()
    if len(provided) < 2 or all(v == 0 for v in provided):
        raise ValueError("Please provide at least 2 values")

    if inputs.mode == "percent":
        original, percent, amount, final = _solve_percent_mode(inputs)
    elif inputs.mode == "fixed":
        original, percent, amount, final = _solve_fixed_mode(inputs)
    else:
        raise ValueError(f"Unknown discount mode: {inputs.mode}")

    logger.debug("Discount in %s mode: %s off %s", inputs.mode, amount, original)
    return DiscountResults(
        original_price=original,
        discount_percent=percent,
        discount_amount=amount,
        final_price=final,
        savings=amount,
    )


def validate_discount_inputs(inputs: DiscountInputs) -> List[str]:
    errors: List[str] = []
    original, final = inputs.original_price, inputs.final_price

    if len(inputs.provided_values()) < 2:
        errors.append("Please provide at least 2 values to calculate")
    if inputs.mode not in DISCOUNT_MODES:
        errors.append(f"Mode must be one of: {', '.join(DISCOUNT_MODES)}")

    if original is not None and original < 0:
        errors.append("Original price cannot be negative")
    if inputs.discount_percent is not None:
        if inputs.discount_percent < 0:
            errors.append("Discount percent cannot be negative")
        if inputs.discount_percent > 100:
            errors.append("Discount percent cannot be greater than 100%")
    if inputs.discount_amount is not None and inputs.discount_amount < 0:
        errors.append("Discount amount cannot be negative")
    if final is not None and final < 0:
        errors.append("Final price cannot be negative")

    if original is not None and final is not None and final > original:
        errors.append("Final price cannot be greater than original price")
    if original is not None and inputs.discount_amount is not None and inputs.discount_amount > original:
        errors.append("Discount amount cannot be greater than original price")

    return errors
