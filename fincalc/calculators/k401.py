"""401(k) retirement projection.

Projects a 401(k) balance year by year until retirement: salary growth,
employee contributions capped at the IRS limits, a two-tier employer match,
investment returns on the beginning balance and inflation-adjusted values.
Retirement income is estimated with the 4 % safe withdrawal rule.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List

from ..utils import HUNDRED, ZERO, coerce_decimal_fields, percent_to_rate

logger = logging.getLogger(__name__)

# 2026 IRS limits
EMPLOYEE_CONTRIBUTION_UNDER_50 = Decimal("24500")
EMPLOYEE_CONTRIBUTION_50_PLUS = Decimal("31000")  # includes $6,500 catch-up
TOTAL_CONTRIBUTION_LIMIT = Decimal("72000")
TOTAL_CONTRIBUTION_LIMIT_50_PLUS = Decimal("79500")
CATCH_UP_AGE = 50

SAFE_WITHDRAWAL_RATE = Decimal("4")


@dataclass
class K401Inputs:
    """User inputs for a 401(k) projection. All rates are percentages."""

    current_age: int
    retirement_age: int
    life_expectancy: int
    current_annual_salary: Decimal
    current_401k_balance: Decimal
    employee_contribution_percent: Decimal
    employer_match1_percent: Decimal = Decimal("0")  # 100 means dollar-for-dollar
    employer_match1_limit: Decimal = Decimal("0")  # % of salary matched by tier 1
    employer_match2_percent: Decimal = Decimal("0")
    employer_match2_limit: Decimal = Decimal("0")
    expected_salary_increase: Decimal = Decimal("0")
    expected_annual_return: Decimal = Decimal("0")
    expected_inflation: Decimal = Decimal("0")

    def __post_init__(self) -> None:
        coerce_decimal_fields(self)


@dataclass
class YearProjection:
    year: int
    age: int
    salary: Decimal
    employee_contribution: Decimal
    employer_contribution: Decimal
    total_contribution: Decimal
    investment_return: Decimal
    balance: Decimal
    balance_in_todays_dollars: Decimal
    contribution_hit_limit: bool


@dataclass
class ContributionLimitInfo:
    year: int
    age: int
    employee_contribution: Decimal
    contribution_limit: Decimal
    hit_limit: bool
    limit_type: str  # "standard" or "with catch-up"


@dataclass
class K401Results:
    years_to_retirement: int
    years_in_retirement: int
    current_401k_balance: Decimal
    projected_balance_at_retirement: Decimal
    inflation_adjusted_balance: Decimal
    first_year_employee_contribution: Decimal
    first_year_employer_contribution: Decimal
    first_year_total_contribution: Decimal
    total_employee_contributions: Decimal
    total_employer_contributions: Decimal
    total_contributions: Decimal
    total_investment_growth: Decimal
    final_year_salary: Decimal
    final_year_employee_contribution: Decimal
    final_year_employer_contribution: Decimal
    safe_withdrawal_rate: Decimal
    first_year_withdrawal: Decimal
    monthly_withdrawal: Decimal
    replacement_ratio: Decimal  # % of final salary replaced
    savings_multiple: Decimal  # balance as a multiple of final salary
    year_by_year_projection: List[YearProjection] = field(default_factory=list)
    contribution_limits_info: List[ContributionLimitInfo] = field(default_factory=list)


def employee_contribution_limit(age: int) -> Decimal:
    """Return the IRS elective deferral limit, including catch-up from age 50."""
    return EMPLOYEE_CONTRIBUTION_50_PLUS if age >= CATCH_UP_AGE else EMPLOYEE_CONTRIBUTION_UNDER_50


def total_contribution_limit(age: int) -> Decimal:
    """Return the combined employee + employer limit for ``age``."""
    return TOTAL_CONTRIBUTION_LIMIT_50_PLUS if age >= CATCH_UP_AGE else TOTAL_CONTRIBUTION_LIMIT


def calculate_employee_contribution(salary: Decimal, contribution_percent: Decimal, age: int) -> Decimal:
    """Return the lesser of ``salary * percent`` and the IRS limit."""
    desired = salary * percent_to_rate(contribution_percent)
    return min(desired, employee_contribution_limit(age))


def calculate_employer_match(
    salary: Decimal,
    employee_contribution: Decimal,
    match1_percent: Decimal,
    match1_limit: Decimal,
    match2_percent: Decimal,
    match2_limit: Decimal,
) -> Decimal:
    """Return the employer match under a two-tier formula.

    Tier 1 matches ``match1_percent`` of the employee's contributions up to
    ``match1_limit`` % of salary. Tier 2 matches ``match2_percent`` of the part
    between ``match1_limit`` and ``match2_limit`` % of salary. For example
    100 % on the first 3 % and 50 % on the next 2 % is ``(100, 3, 50, 5)``.
    """
    if salary <= 0:
        return ZERO
    contributed_percent = employee_contribution / salary * HUNDRED
    match = ZERO

    if match1_limit > 0 and match1_percent > 0:
        tier1 = min(contributed_percent, match1_limit)
        match += salary * percent_to_rate(tier1) * percent_to_rate(match1_percent)

    if match2_limit > match1_limit and match2_percent > 0 and contributed_percent > match1_limit:
        tier2 = min(contributed_percent - match1_limit, match2_limit - match1_limit)
        match += salary * percent_to_rate(tier2) * percent_to_rate(match2_percent)

    return match


def future_value(present: Decimal, annual_rate: Decimal, years: int) -> Decimal:
    """Compound ``present`` at ``annual_rate`` percent for ``years``."""
    if years == 0:
        return present
    return present * (1 + percent_to_rate(annual_rate)) ** years


def present_value(future: Decimal, inflation_rate: Decimal, years: int) -> Decimal:
    """Discount ``future`` back to today's dollars at ``inflation_rate`` percent."""
    if years == 0:
        return future
    return future / (1 + percent_to_rate(inflation_rate)) ** years


def safe_withdrawal(balance: Decimal, withdrawal_rate: Decimal = SAFE_WITHDRAWAL_RATE) -> Decimal:
    return balance * percent_to_rate(withdrawal_rate)


def calculate_401k(inputs: K401Inputs) -> K401Results:
    """Project a 401(k) balance until retirement.

    Each year the employee contribution is capped at the IRS limit for that
    age, the employer match is capped so that the combined contribution stays
    within the total limit, the expected return is applied to the balance at
    the beginning of the year and the salary then grows for the next year.
    """
    years_to_retirement = max(0, inputs.retirement_age - inputs.current_age)
    years_in_retirement = inputs.life_expectancy - inputs.retirement_age

    balance = inputs.current_401k_balance
    salary = inputs.current_annual_salary
    return_rate = percent_to_rate(inputs.expected_annual_return)
    salary_growth = percent_to_rate(inputs.expected_salary_increase)

    total_employee = ZERO
    total_employer = ZERO
    first_employee = ZERO
    first_employer = ZERO
    final_salary = inputs.current_annual_salary
    final_employee = ZERO
    final_employer = ZERO
    projection: List[YearProjection] = []
    limits: List[ContributionLimitInfo] = []

    for year in range(years_to_retirement):
        age = inputs.current_age + year
        employee_limit = employee_contribution_limit(age)
        total_limit = total_contribution_limit(age)

        employee = calculate_employee_contribution(salary, inputs.employee_contribution_percent, age)
        employer = calculate_employer_match(
            salary,
            employee,
            inputs.employer_match1_percent,
            inputs.employer_match1_limit,
            inputs.employer_match2_percent,
            inputs.employer_match2_limit,
        )
        desired_employee = salary * percent_to_rate(inputs.employee_contribution_percent)
        total_capped = employee + employer > total_limit
        if total_capped:
            employer = max(ZERO, total_limit - employee)
        contribution = employee + employer

        if year == 0:
            first_employee = employee
            first_employer = employer
        if year == years_to_retirement - 1:
            final_salary = salary
            final_employee = employee
            final_employer = employer

        investment_return = balance * return_rate
        balance = balance + investment_return + contribution
        total_employee += employee
        total_employer += employer

        projection.append(
            YearProjection(
                year=year + 1,
                age=age,
                salary=salary,
                employee_contribution=employee,
                employer_contribution=employer,
                total_contribution=contribution,
                investment_return=investment_return,
                balance=balance,
                balance_in_todays_dollars=present_value(balance, inputs.expected_inflation, year + 1),
                contribution_hit_limit=desired_employee > employee_limit or total_capped,
            )
        )
        limits.append(
            ContributionLimitInfo(
                year=year + 1,
                age=age,
                employee_contribution=employee,
                contribution_limit=employee_limit,
                hit_limit=desired_employee > employee_limit,
                limit_type="with catch-up" if age >= CATCH_UP_AGE else "standard",
            )
        )

        salary = salary * (1 + salary_growth)

    logger.debug("Projected %d years of 401(k) contributions", years_to_retirement)

    total_contributions = total_employee + total_employer
    first_year_withdrawal = safe_withdrawal(balance)
    replacement_ratio = first_year_withdrawal / final_salary * HUNDRED if final_salary > 0 else ZERO
    savings_multiple = balance / final_salary if final_salary > 0 else ZERO

    return K401Results(
        years_to_retirement=years_to_retirement,
        years_in_retirement=years_in_retirement,
        current_401k_balance=inputs.current_401k_balance,
        projected_balance_at_retirement=balance,
        inflation_adjusted_balance=present_value(balance, inputs.expected_inflation, years_to_retirement),
        first_year_employee_contribution=first_employee,
        first_year_employer_contribution=first_employer,
        first_year_total_contribution=first_employee + first_employer,
        total_employee_contributions=total_employee,
        total_employer_contributions=total_employer,
        total_contributions=total_contributions,
        total_investment_growth=balance - inputs.current_401k_balance - total_contributions,
        final_year_salary=final_salary,
        final_year_employee_contribution=final_employee,
        final_year_employer_contribution=final_employer,
        safe_withdrawal_rate=SAFE_WITHDRAWAL_RATE,
        first_year_withdrawal=first_year_withdrawal,
        monthly_withdrawal=first_year_withdrawal / 12,
        replacement_ratio=replacement_ratio,
        savings_multiple=savings_multiple,
        year_by_year_projection=projection,
        contribution_limits_info=limits,
    )


def validate_401k_inputs(inputs: K401Inputs) -> List[str]:
    """Return a list of problems with ``inputs``; empty when they are usable."""
    errors: List[str] = []

    if inputs.current_age < 18 or inputs.current_age > 120:
        errors.append("Current age must be between 18 and 120")
    if inputs.retirement_age < inputs.current_age:
        errors.append("Retirement age must be greater than current age")
    if inputs.retirement_age < 50 or inputs.retirement_age > 80:
        errors.append("Retirement age should be between 50 and 80")
    if inputs.life_expectancy <= inputs.retirement_age:
        errors.append("Life expectancy must be greater than retirement age")
    if inputs.life_expectancy > 120:
        errors.append("Life expectancy cannot exceed 120 years")

    if inputs.current_annual_salary < 0:
        errors.append("Current annual salary cannot be negative")
    if inputs.current_401k_balance < 0:
        errors.append("Current 401(k) balance cannot be negative")

    if not 0 <= inputs.employee_contribution_percent <= 100:
        errors.append("Employee contribution must be between 0% and 100%")
    if not 0 <= inputs.employer_match1_percent <= 200:
        errors.append("Employer match 1 must be between 0% and 200%")
    if not 0 <= inputs.employer_match1_limit <= 100:
        errors.append("Employer match 1 limit must be between 0% and 100%")
    if not 0 <= inputs.employer_match2_percent <= 200:
        errors.append("Employer match 2 must be between 0% and 200%")
    if not 0 <= inputs.employer_match2_limit <= 100:
        errors.append("Employer match 2 limit must be between 0% and 100%")
    if 0 < inputs.employer_match2_limit <= inputs.employer_match1_limit:
        errors.append("Employer match 2 limit must be greater than match 1 limit")

    if not -10 <= inputs.expected_salary_increase <= 20:
        errors.append("Expected salary increase should be between -10% and 20%")
    if not -20 <= inputs.expected_annual_return <= 30:
        errors.append("Expected annual return should be between -20% and 30%")
    if not -5 <= inputs.expected_inflation <= 20:
        errors.append("Expected inflation should be between -5% and 20%")

    return errors
