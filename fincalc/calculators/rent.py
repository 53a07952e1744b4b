"""Rent calculator.

Adds up the monthly cost of renting, applies a discount and tax, projects the
cost forward with an annual rent increase and checks it against income using
the 30 % rule.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List

from ..utils import HUNDRED, ZERO, coerce_decimal_fields, percent_to_rate

logger = logging.getLogger(__name__)

AFFORDABLE_RATIO = Decimal("30")
CAUTION_RATIO = Decimal("40")

AFFORDABILITY_MESSAGES: Dict[str, str] = {
    "affordable": "Affordable - Within recommended range",
    "caution": "Caution - Above recommended range",
    "high-risk": "High Risk - Well above recommended range",
}


@dataclass
class RentInputs:
    monthly_rent: Decimal
    utilities: Decimal = Decimal("0")
    insurance: Decimal = Decimal("0")
    parking: Decimal = Decimal("0")
    other_costs: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")
    tax_rate: Decimal = Decimal("0")
    annual_increase: Decimal = Decimal("0")
    years: int = 1
    monthly_income: Decimal = Decimal("0")

    def __post_init__(self) -> None:
        coerce_decimal_fields(self)

    @property
    def base_total(self) -> Decimal:
        return self.monthly_rent + self.utilities + self.insurance + self.parking + self.other_costs


@dataclass
class CostBreakdown:
    rent: Decimal
    utilities: Decimal
    insurance: Decimal
    parking: Decimal
    other: Decimal


@dataclass
class RentYear:
    year: int
    monthly_total: Decimal
    annual_total: Decimal


@dataclass
class RentResults:
    """Result of the rent calculation.

    ``affordability_ratio`` is the monthly total as a percentage of monthly
    income, zero when no income was given.
    """

    monthly_total: Decimal
    annual_total: Decimal
    cost_breakdown: CostBreakdown
    affordability_ratio: Decimal
    affordability: str
    affordability_message: str
    max_affordable_rent: Decimal
    yearly_projection: List[RentYear] = field(default_factory=list)


def affordability_level(ratio: Decimal) -> str:
    if ratio <= AFFORDABLE_RATIO:
        return "affordable"
    if ratio <= CAUTION_RATIO:
        return "caution"
    return "high-risk"


def calculate_monthly_total(inputs: RentInputs) -> Decimal:
    total = inputs.base_total
    if inputs.discount > 0:
        total *= 1 - percent_to_rate(inputs.discount)
    if inputs.tax_rate > 0:
        total *= 1 + percent_to_rate(inputs.tax_rate)
    return total


def calculate_yearly_projection(monthly_total: Decimal, annual_increase: Decimal, years: int) -> List[RentYear]:
    growth = 1 + percent_to_rate(annual_increase)
    projection: List[RentYear] = []
    for year in range(1, years + 1):
        monthly = monthly_total * growth ** (year - 1)
        projection.append(RentYear(year=year, monthly_total=monthly, annual_total=monthly * 12))
    return projection


def calculate_rent(inputs: RentInputs) -> RentResults:
    monthly_total = calculate_monthly_total(inputs)

    base_total = inputs.base_total
    # Each item carries its share of the discount and tax
    factor = monthly_total / base_total if base_total > 0 else ZERO
    breakdown = CostBreakdown(
        rent=inputs.monthly_rent * factor,
        utilities=inputs.utilities * factor,
        insurance=inputs.insurance * factor,
        parking=inputs.parking * factor,
        other=inputs.other_costs * factor,
    )

    ratio = monthly_total / inputs.monthly_income * HUNDRED if inputs.monthly_income > 0 else ZERO
    level = affordability_level(ratio)
    logger.debug("Monthly rent total %s, %s%% of income", monthly_total, ratio)

    return RentResults(
        monthly_total=monthly_total,
        annual_total=monthly_total * 12,
        cost_breakdown=breakdown,
        affordability_ratio=ratio,
        affordability=level,
        affordability_message=AFFORDABILITY_MESSAGES[level],
        max_affordable_rent=inputs.monthly_income * percent_to_rate(AFFORDABLE_RATIO),
        yearly_projection=calculate_yearly_projection(monthly_total, inputs.annual_increase, inputs.years),
    )


def validate_rent_inputs(inputs: RentInputs) -> List[str]:
    errors: List[str] = []

    amounts = {
        "Monthly rent": inputs.monthly_rent,
        "Utilities": inputs.utilities,
        "Insurance": inputs.insurance,
        "Parking": inputs.parking,
        "Other costs": inputs.other_costs,
        "Monthly income": inputs.monthly_income,
    }
    for label, value in amounts.items():
        if value < 0:
            errors.append(f"{label} cannot be negative")

    if not 0 <= inputs.discount <= 100:
        errors.append("Discount must be between 0 and 100")
    if not 0 <= inputs.tax_rate <= 100:
        errors.append("Tax rate must be between 0 and 100")
    if not 0 <= inputs.annual_increase <= 100:
        errors.append("Annual increase must be between 0 and 100")
    if not 1 <= inputs.years <= 50:
        errors.append("Years must be between 1 and 50")

    return errors
