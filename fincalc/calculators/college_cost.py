"""College cost calculator.

Projects the cost of college with tuition inflation, grows current savings at
an after-tax return and works out the monthly saving needed to cover the
share of costs the family wants to pay from savings.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Tuple

from ..utils import HUNDRED, ZERO, coerce_decimal_fields, percent_to_rate

logger = logging.getLogger(__name__)

# 2024 average annual costs
COLLEGE_PRESETS: Dict[str, Decimal] = {
    "custom": Decimal("0"),
    "private-4year": Decimal("65470"),
    "public-instate-4year": Decimal("30990"),
    "public-outstate-4year": Decimal("50920"),
    "public-2year": Decimal("21320"),
}

COLLEGE_TYPE_NAMES: Dict[str, str] = {
    "custom": "Custom",
    "private-4year": "4-Year Private College",
    "public-instate-4year": "4-Year Public (In-State)",
    "public-outstate-4year": "4-Year Public (Out-of-State)",
    "public-2year": "2-Year Public College",
}


@dataclass
class CollegeInputs:
    annual_cost: Decimal
    cost_increase_rate: Decimal
    attendance_duration: int
    percent_from_savings: Decimal
    current_savings: Decimal
    return_rate: Decimal
    tax_rate: Decimal
    years_until_college: int

    def __post_init__(self) -> None:
        coerce_decimal_fields(self)


@dataclass
class YearCost:
    year: int
    annual_cost: Decimal
    cumulative_cost: Decimal


@dataclass
class CollegeResults:
    total_college_cost: Decimal
    future_value_of_savings: Decimal
    additional_savings_needed: Decimal
    monthly_savings_required: Decimal
    percent_covered_by_savings: Decimal
    year_by_year_costs: List[YearCost] = field(default_factory=list)


def college_type_name(college_type: str) -> str:
    return COLLEGE_TYPE_NAMES.get(college_type, college_type)


def _after_tax_rate(return_rate: Decimal, tax_rate: Decimal) -> Decimal:
    return percent_to_rate(return_rate) * (1 - percent_to_rate(tax_rate))


def calculate_future_value_of_savings(
    current_savings: Decimal, return_rate: Decimal, tax_rate: Decimal, years: int
) -> Decimal:
    """Grow ``current_savings`` at the after-tax return, compounded annually."""
    return current_savings * (1 + _after_tax_rate(return_rate, tax_rate)) ** years


def calculate_total_college_cost(
    current_annual_cost: Decimal, inflation_rate: Decimal, years_until_start: int, duration: int
) -> Tuple[Decimal, List[YearCost]]:
    """Return the total inflated cost and the cost of each year of attendance.

    Year ``k`` of college (0-based) is inflated for ``years_until_start + k``
    years from today.
    """
    growth = 1 + percent_to_rate(inflation_rate)
    cumulative = ZERO
    year_by_year: List[YearCost] = []
    for year in range(duration):
        annual_cost = current_annual_cost * growth ** (years_until_start + year)
        cumulative += annual_cost
        year_by_year.append(YearCost(year=year + 1, annual_cost=annual_cost, cumulative_cost=cumulative))
    return cumulative, year_by_year


def calculate_monthly_savings(
    target_amount: Decimal,
    current_savings: Decimal,
    return_rate: Decimal,
    tax_rate: Decimal,
    years_to_save: int,
) -> Decimal:
    """Return the monthly deposit needed to reach ``target_amount``.

    Current savings grow with annual compounding; the shortfall is covered by
    the future value of an annuity of monthly deposits:

        deposit = shortfall * i / ((1 + i)^n - 1)

    with ``i`` the monthly after-tax rate and ``n`` the number of months.
    """
    if years_to_save <= 0:
        return ZERO

    after_tax = _after_tax_rate(return_rate, tax_rate)
    monthly_rate = after_tax / 12
    months = years_to_save * 12

    shortfall = target_amount - current_savings * (1 + after_tax) ** years_to_save
    if shortfall <= 0:
        return ZERO
    if monthly_rate == 0:
        return shortfall / months
    return shortfall * monthly_rate / ((1 + monthly_rate) ** months - 1)


def calculate_college_cost(inputs: CollegeInputs) -> CollegeResults:
    total_cost, year_by_year = calculate_total_college_cost(
        inputs.annual_cost,
        inputs.cost_increase_rate,
        inputs.years_until_college,
        inputs.attendance_duration,
    )
    savings_value = calculate_future_value_of_savings(
        inputs.current_savings, inputs.return_rate, inputs.tax_rate, inputs.years_until_college
    )
    from_savings = total_cost * percent_to_rate(inputs.percent_from_savings)

    logger.debug("College cost %s, savings at start %s", total_cost, savings_value)
    return CollegeResults(
        total_college_cost=total_cost,
        future_value_of_savings=savings_value,
        additional_savings_needed=max(ZERO, from_savings - savings_value),
        monthly_savings_required=calculate_monthly_savings(
            from_savings,
            inputs.current_savings,
            inputs.return_rate,
            inputs.tax_rate,
            inputs.years_until_college,
        ),
        percent_covered_by_savings=savings_value / total_cost * HUNDRED if total_cost > 0 else ZERO,
        year_by_year_costs=year_by_year,
    )


def validate_college_inputs(inputs: CollegeInputs) -> List[str]:
    errors: List[str] = []

    if inputs.annual_cost < 0:
        errors.append("Annual cost cannot be negative")
    if not 0 <= inputs.cost_increase_rate <= 100:
        errors.append("Cost increase rate must be between 0 and 100")
    if not 1 <= inputs.attendance_duration <= 10:
        errors.append("Attendance duration must be between 1 and 10 years")
    if not 0 <= inputs.percent_from_savings <= 100:
        errors.append("Percent from savings must be between 0 and 100")
    if inputs.current_savings < 0:
        errors.append("Current savings cannot be negative")
    if not 0 <= inputs.return_rate <= 100:
        errors.append("Return rate must be between 0 and 100")
    if not 0 <= inputs.tax_rate <= 100:
        errors.append("Tax rate must be between 0 and 100")
    if not 0 <= inputs.years_until_college <= 30:
        errors.append("Years until college must be between 0 and 30")

    return errors
