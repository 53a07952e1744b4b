"""Command-line interface for the financial calculators.

This module uses ``click`` to implement one command per calculator. Results
are printed to the terminal or exported to JSON/CSV files. Amount options
accept shorthand such as ``500k`` or ``1.2m`` and thousands separators.
"""

from __future__ import annotations

import csv
import dataclasses
import json
import logging
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional

import click

from .amortization import MAX_PERIODS
from .calculators.annuity_payout import PAYMENTS_PER_YEAR
from .calculators.college_cost import COLLEGE_PRESETS, college_type_name
from .calculators.credit_card import PAYMENT_TYPES as CARD_PAYMENT_TYPES
from .calculators.currency import CURRENCIES, load_exchange_rates
from .calculators.discount import DISCOUNT_MODES
from .calculators.payment import COMPOUNDING_PERIODS, PAYMENT_TYPES
from .formatter import (
    format_currency,
    format_exchange_rate,
    format_months,
    format_number,
    format_percentage,
    format_years,
    print_summary,
    print_table,
)
from .registry import CALCULATORS, Calculator, get_calculator, run_calculator
from .utils import decimal_from_str, to_jsonable

logger = logging.getLogger(__name__)

MAX_PRINTED_ROWS = 120
GENERIC_ERROR = "Unable to calculate with the given inputs."


def parse_amount(value: str) -> Decimal:
    """Parse a numeric string with optional suffixes.

    Accepts plain numbers ("500000"), thousands separators ("500,000") and
    shorthand with ``k``/``m`` suffixes (e.g., "500k" meaning 500,000).
    """
    value = value.strip().lower().replace(",", "").lstrip("$")
    factor = Decimal("1")
    if value.endswith("k"):
        factor = Decimal("1000")
        value = value[:-1]
    elif value.endswith("m"):
        factor = Decimal("1000000")
        value = value[:-1]
    try:
        return decimal_from_str(value) * factor
    except ValueError:
        raise click.BadParameter(f"Invalid amount: {value}")


def parse_percent(value: str) -> Decimal:
    """Parse a percentage string such as "5", "5%" or "6.25"."""
    value = value.strip()
    if value.endswith("%"):
        value = value[:-1]
    try:
        return decimal_from_str(value)
    except ValueError:
        raise click.BadParameter(f"Invalid percentage: {value}")


def _amount(value: Optional[str]) -> Optional[Decimal]:
    return parse_amount(value) if value is not None else None


def _percent(value: Optional[str]) -> Optional[Decimal]:
    return parse_percent(value) if value is not None else None


def _calculate(slug: str, data: Dict[str, Any], rates: Optional[Dict[str, Decimal]] = None):
    calculator = get_calculator(slug)
    try:
        errors, result = run_calculator(calculator, data, rates)
    except ValueError as exc:
        logger.debug("Calculation %s failed: %s", slug, exc)
        raise click.ClickException(GENERIC_ERROR)
    if errors:
        raise click.UsageError("\n".join(errors))
    return calculator, result


def _schedule_rows(calculator: Calculator, result: Any) -> List[Any]:
    if calculator.schedule_field is None:
        return []
    return list(getattr(result, calculator.schedule_field))


def export_to_json(path: Path, calculator: Calculator, result: Any) -> None:
    """Export the result summary and schedule to a JSON file."""
    summary = to_jsonable(result)
    schedule = summary.pop(calculator.schedule_field, []) if calculator.schedule_field else []
    data = {"calculator": calculator.slug, "summary": summary, "schedule": schedule}
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_to_csv(path: Path, calculator: Calculator, result: Any) -> None:
    """Export the schedule rows to a CSV file."""
    if calculator.schedule_field is None:
        raise click.BadParameter(f"The {calculator.slug} calculator has no schedule to export as CSV")
    rows = _schedule_rows(calculator, result)
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        if not rows:
            return
        header = [field.name for field in dataclasses.fields(rows[0])]
        writer.writerow(header)
        for row in rows:
            writer.writerow([to_jsonable(getattr(row, name)) for name in header])


def _emit(calculator: Calculator, result: Any, output: Optional[str], show) -> None:
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, calculator, result)
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, calculator, result)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
        click.echo(f"Results exported to {path}")
    else:
        show(result)


def _print_rows(headers: List[str], rows: List[List[object]]) -> None:
    if len(rows) > MAX_PRINTED_ROWS:
        click.echo(f"Schedule has {len(rows)} rows; showing first {MAX_PRINTED_ROWS} rows.")
        rows = rows[:MAX_PRINTED_ROWS]
    print_table(headers, rows)


output_option = click.option("--output", "-o", "output", type=str, help="Output file path (.json or .csv)")


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Financial calculators: retirement, loans, leases, savings and more."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)


@cli.command("list")
def list_calculators() -> None:
    """List the available calculators."""
    for slug, calculator in CALCULATORS.items():
        click.echo(f"{slug:16s} {calculator.title}")


@cli.command("401k")
@click.option("--age", "current_age", required=True, type=int, help="Current age")
@click.option("--retirement-age", required=True, type=int, help="Planned retirement age")
@click.option("--life-expectancy", default=85, show_default=True, type=int)
@click.option("--salary", required=True, help="Current annual salary")
@click.option("--balance", default="0", help="Current 401(k) balance")
@click.option("--contribution", required=True, help="Employee contribution (percent of salary)")
@click.option("--match1-percent", default="0", help="Employer match rate for tier 1 (percent)")
@click.option("--match1-limit", default="0", help="Salary percent matched by tier 1")
@click.option("--match2-percent", default="0", help="Employer match rate for tier 2 (percent)")
@click.option("--match2-limit", default="0", help="Salary percent matched by tier 2")
@click.option("--salary-increase", default="0", help="Expected annual salary increase (percent)")
@click.option("--return", "annual_return", default="0", help="Expected annual return (percent)")
@click.option("--inflation", default="0", help="Expected inflation (percent)")
@output_option
def k401(current_age, retirement_age, life_expectancy, salary, balance, contribution, match1_percent,
         match1_limit, match2_percent, match2_limit, salary_increase, annual_return, inflation, output) -> None:
    """Project a 401(k) balance to retirement."""
    data = {
        "current_age": current_age,
        "retirement_age": retirement_age,
        "life_expectancy": life_expectancy,
        "current_annual_salary": parse_amount(salary),
        "current_401k_balance": parse_amount(balance),
        "employee_contribution_percent": parse_percent(contribution),
        "employer_match1_percent": parse_percent(match1_percent),
        "employer_match1_limit": parse_percent(match1_limit),
        "employer_match2_percent": parse_percent(match2_percent),
        "employer_match2_limit": parse_percent(match2_limit),
        "expected_salary_increase": parse_percent(salary_increase),
        "expected_annual_return": parse_percent(annual_return),
        "expected_inflation": parse_percent(inflation),
    }
    calculator, result = _calculate("401k", data)

    def show(r) -> None:
        print_summary(
            "401(k) projection",
            [
                ("Years to retirement", str(r.years_to_retirement)),
                ("Balance at retirement", format_currency(r.projected_balance_at_retirement)),
                ("In today's dollars", format_currency(r.inflation_adjusted_balance)),
                ("Employee contributions", format_currency(r.total_employee_contributions)),
                ("Employer contributions", format_currency(r.total_employer_contributions)),
                ("Investment growth", format_currency(r.total_investment_growth)),
                ("First year withdrawal", format_currency(r.first_year_withdrawal)),
                ("Monthly withdrawal", format_currency(r.monthly_withdrawal)),
                ("Income replacement", format_percentage(r.replacement_ratio)),
            ],
        )
        _print_rows(
            ["Year", "Age", "Salary", "Employee", "Employer", "Return", "Balance", "Limit"],
            [
                [y.year, y.age, y.salary, y.employee_contribution, y.employer_contribution,
                 y.investment_return, y.balance, "Yes" if y.contribution_hit_limit else "No"]
                for y in r.year_by_year_projection
            ],
        )

    _emit(calculator, result, output, show)


@cli.command("annuity-payout")
@click.option("--principal", "-p", required=True, help="Starting principal")
@click.option("--rate", "-r", required=True, help="Annual interest rate (percent)")
@click.option("--years", "-y", type=int, help="Pay out over this many years")
@click.option("--payout", help="Pay out this amount each period instead")
@click.option("--frequency", type=click.Choice(list(PAYMENTS_PER_YEAR)), default="monthly", show_default=True)
@output_option
def annuity_payout(principal, rate, years, payout, frequency, output) -> None:
    """Compute an annuity payout or how long a payout lasts."""
    data = {
        "principal": parse_amount(principal),
        "annual_rate": parse_percent(rate),
        "years": years,
        "payout_amount": _amount(payout),
        "frequency": frequency,
    }
    calculator, result = _calculate("annuity-payout", data)

    def show(r) -> None:
        print_summary(
            "Annuity payout",
            [
                (f"Payout ({frequency})", format_currency(r.payout_amount)),
                ("Number of payouts", str(r.total_payments) if r.total_payments is not None else "unlimited"),
                ("Total payout", format_currency(r.total_payout)),
                ("Total interest", format_currency(r.total_interest)),
                ("Duration", format_years(r.years)),
            ],
        )
        if r.total_payments is None:
            if r.will_grow:
                click.echo("The payout is less than the interest earned; the balance will keep growing.")
            else:
                click.echo("The payout equals the interest earned; the principal is never used up.")
            return
        if r.hit_limit:
            click.echo(f"The schedule shows the first {MAX_PERIODS} payouts only.")
        _print_rows(
            ["Year", "Start", "Interest", "Principal", "Payout", "End"],
            [[y.year, y.beginning_balance, y.interest, y.principal, y.payment, y.ending_balance] for y in r.schedule],
        )

    _emit(calculator, result, output, show)


@cli.command()
@click.option("--asset-value", required=True, help="Price of the leased asset")
@click.option("--residual-value", required=True, help="Value at the end of the lease")
@click.option("--term", "-t", "lease_term", required=True, type=int, help="Lease term in months")
@click.option("--rate", "-r", help="Annual interest rate (percent)")
@click.option("--payment", help="Monthly payment, to solve the effective rate")
@output_option
def lease(asset_value, residual_value, lease_term, rate, payment, output) -> None:
    """Compute a lease payment, or the rate implied by a payment."""
    data = {
        "asset_value": parse_amount(asset_value),
        "residual_value": parse_amount(residual_value),
        "lease_term": lease_term,
        "interest_rate": _percent(rate),
        "monthly_payment": _amount(payment),
    }
    calculator, result = _calculate("lease", data)

    def show(r) -> None:
        rows = [
            ("Monthly payment", format_currency(r.monthly_payment)),
            ("Depreciation fee", format_currency(r.depreciation_fee)),
            ("Finance fee", format_currency(r.finance_fee)),
            ("Money factor", format_number(r.money_factor, 6)),
            ("Total payments", format_currency(r.total_payments)),
            ("Total interest", format_currency(r.total_interest)),
        ]
        if r.effective_rate is not None:
            rows.append(("Effective rate", format_percentage(r.effective_rate)))
        print_summary("Lease", rows)
        _print_rows(
            ["Month", "Payment", "Finance", "Depreciation", "Remaining"],
            [[e.period, e.payment, e.interest, e.principal, e.remaining_balance] for e in r.schedule],
        )

    _emit(calculator, result, output, show)


@cli.command("college-cost")
@click.option("--college-type", type=click.Choice(list(COLLEGE_PRESETS)), default="custom", show_default=True)
@click.option("--annual-cost", help="Current annual cost (defaults to the college type average)")
@click.option("--cost-increase", default="5", show_default=True, help="Annual cost increase (percent)")
@click.option("--duration", "attendance_duration", default=4, show_default=True, type=int, help="Years of attendance")
@click.option("--percent-from-savings", default="100", show_default=True, help="Share paid from savings (percent)")
@click.option("--savings", default="0", help="Current savings")
@click.option("--return", "return_rate", default="5", show_default=True, help="Return on savings (percent)")
@click.option("--tax-rate", default="0", help="Tax on returns (percent)")
@click.option("--years-until", "years_until_college", required=True, type=int, help="Years until college starts")
@output_option
def college_cost(college_type, annual_cost, cost_increase, attendance_duration, percent_from_savings,
                 savings, return_rate, tax_rate, years_until_college, output) -> None:
    """Project college costs and the monthly saving needed."""
    if annual_cost is not None:
        cost = parse_amount(annual_cost)
    elif college_type != "custom":
        cost = COLLEGE_PRESETS[college_type]
    else:
        raise click.BadParameter("Provide --annual-cost or pick a --college-type")
    data = {
        "annual_cost": cost,
        "cost_increase_rate": parse_percent(cost_increase),
        "attendance_duration": attendance_duration,
        "percent_from_savings": parse_percent(percent_from_savings),
        "current_savings": parse_amount(savings),
        "return_rate": parse_percent(return_rate),
        "tax_rate": parse_percent(tax_rate),
        "years_until_college": years_until_college,
    }
    calculator, result = _calculate("college-cost", data)

    def show(r) -> None:
        print_summary(
            f"College cost ({college_type_name(college_type)})",
            [
                ("Total college cost", format_currency(r.total_college_cost)),
                ("Savings at start", format_currency(r.future_value_of_savings)),
                ("Additional needed", format_currency(r.additional_savings_needed)),
                ("Monthly savings", format_currency(r.monthly_savings_required)),
                ("Covered by savings", format_percentage(r.percent_covered_by_savings)),
            ],
        )
        _print_rows(
            ["Year", "Cost", "Cumulative"],
            [[y.year, y.annual_cost, y.cumulative_cost] for y in r.year_by_year_costs],
        )

    _emit(calculator, result, output, show)


@cli.command("credit-card")
@click.option("--balance", "-b", required=True, help="Card balance")
@click.option("--apr", "-r", required=True, help="Annual percentage rate")
@click.option("--payment-type", type=click.Choice(CARD_PAYMENT_TYPES), default="minimum", show_default=True)
@click.option("--payment", "fixed_payment", help="Fixed monthly payment")
@click.option("--months", "payoff_months", type=int, help="Pay off within this many months")
@output_option
def credit_card(balance, apr, payment_type, fixed_payment, payoff_months, output) -> None:
    """Work out how long a credit card balance takes to pay off."""
    data = {
        "balance": parse_amount(balance),
        "apr": parse_percent(apr),
        "payment_type": payment_type,
        "fixed_payment": _amount(fixed_payment),
        "payoff_months": payoff_months,
    }
    calculator, result = _calculate("credit-card", data)

    def show(r) -> None:
        print_summary(
            "Credit card payoff",
            [
                ("Monthly payment", format_currency(r.monthly_payment)),
                ("Time to pay off", format_months(r.months_to_payoff)),
                ("Total interest", format_currency(r.total_interest)),
                ("Total paid", format_currency(r.total_paid)),
                ("Effective APR", format_percentage(r.effective_apr)),
                ("First month interest", format_currency(r.first_month_interest)),
            ],
        )
        if r.will_grow:
            click.echo("The payment does not cover the interest; the balance will grow.")
        elif r.hit_limit:
            click.echo("The balance is not paid off within 50 years; totals cover the first 50 years.")
        _print_rows(
            ["Strategy", "Payment", "Months", "Interest", "Saved"],
            [
                [c.type, c.payment, c.months_to_payoff if c.months_to_payoff is not None else "never",
                 c.total_interest if c.total_interest is not None else "n/a",
                 c.interest_saved if c.interest_saved is not None else ""]
                for c in r.payment_comparisons
            ],
        )
        _print_rows(
            ["Month", "Payment", "Interest", "Principal", "Balance"],
            [[e.period, e.payment, e.interest, e.principal, e.remaining_balance] for e in r.amortization_schedule],
        )

    _emit(calculator, result, output, show)


@cli.command()
@click.option("--amount", "-a", required=True, help="Amount to convert")
@click.option("--from", "from_currency", default="USD", show_default=True, help="Currency code to convert from")
@click.option("--to", "to_currency", default="EUR", show_default=True, help="Currency code to convert to")
@click.option("--rates-file", type=click.Path(exists=True, dir_okay=False), help="JSON file of USD-based rates")
@output_option
def currency(amount, from_currency, to_currency, rates_file, output) -> None:
    """Convert an amount between currencies."""
    rates = None
    if rates_file:
        try:
            rates = load_exchange_rates(Path(rates_file))
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="--rates-file")
    data = {"amount": parse_amount(amount), "from_currency": from_currency, "to_currency": to_currency}
    calculator, result = _calculate("currency", data, rates)

    def show(r) -> None:
        conv = r.conversion
        src, dst = CURRENCIES[conv.from_currency], CURRENCIES[conv.to_currency]
        print_summary(
            "Currency conversion",
            [
                ("Amount", format_currency(conv.amount, src.symbol, src.decimals)),
                ("Converted", format_currency(conv.converted_amount, dst.symbol, dst.decimals)),
                ("Rate", f"1 {conv.from_currency} = {format_exchange_rate(conv.exchange_rate)} {conv.to_currency}"),
                ("Inverse", f"1 {conv.to_currency} = {format_exchange_rate(conv.inverse_rate)} {conv.from_currency}"),
            ],
        )
        _print_rows(
            ["Currency", "Amount", "Rate"],
            [[c.currency, c.amount, format_exchange_rate(c.rate)] for c in r.popular.conversions],
        )

    _emit(calculator, result, output, show)


@cli.command()
@click.option("--mode", type=click.Choice(DISCOUNT_MODES), default="percent", show_default=True)
@click.option("--original", "original_price", help="Original price")
@click.option("--percent", "discount_percent", help="Discount percent")
@click.option("--amount", "discount_amount", help="Discount amount")
@click.option("--final", "final_price", help="Final price")
@output_option
def discount(mode, original_price, discount_percent, discount_amount, final_price, output) -> None:
    """Solve a discount from any two of price, discount and final price."""
    data = {
        "mode": mode,
        "original_price": _amount(original_price),
        "discount_percent": _percent(discount_percent),
        "discount_amount": _amount(discount_amount),
        "final_price": _amount(final_price),
    }
    calculator, result = _calculate("discount", data)

    def show(r) -> None:
        print_summary(
            "Discount",
            [
                ("Original price", format_currency(r.original_price)),
                ("Discount", format_percentage(r.discount_percent)),
                ("You save", format_currency(r.savings)),
                ("Final price", format_currency(r.final_price)),
            ],
        )

    _emit(calculator, result, output, show)


@cli.command()
@click.option("--present-value", "-p", required=True, help="Loan amount")
@click.option("--rate", "-r", required=True, help="Annual interest rate (percent)")
@click.option("--periods", "-n", "number_of_periods", required=True, type=int, help="Number of monthly payments")
@click.option("--future-value", default="0", help="Balloon left after the last payment")
@click.option("--compounding", type=click.Choice(list(COMPOUNDING_PERIODS)), default="monthly", show_default=True)
@click.option("--payment-type", type=click.Choice(PAYMENT_TYPES), default="end", show_default=True)
@output_option
def payment(present_value, rate, number_of_periods, future_value, compounding, payment_type, output) -> None:
    """Compute a loan payment and its amortization schedule."""
    data = {
        "present_value": parse_amount(present_value),
        "annual_interest_rate": parse_percent(rate),
        "number_of_periods": number_of_periods,
        "future_value": parse_amount(future_value),
        "compounding": compounding,
        "payment_type": payment_type,
    }
    calculator, result = _calculate("payment", data)

    def show(r) -> None:
        print_summary(
            "Payment",
            [
                ("Monthly payment", format_currency(r.monthly_payment)),
                ("Total payments", format_currency(r.total_payments)),
                ("Total interest", format_currency(r.total_interest)),
                ("Principal repaid", format_currency(r.total_principal)),
            ],
        )
        _print_rows(
            ["Period", "Payment", "Principal", "Interest", "Balance"],
            [[e.period, e.payment, e.principal, e.interest, e.balance] for e in r.schedule],
        )

    _emit(calculator, result, output, show)


@cli.command()
@click.option("--rent", "monthly_rent", required=True, help="Monthly rent")
@click.option("--utilities", default="0")
@click.option("--insurance", default="0")
@click.option("--parking", default="0")
@click.option("--other", "other_costs", default="0", help="Other monthly costs")
@click.option("--discount", default="0", help="Discount (percent)")
@click.option("--tax-rate", default="0", help="Tax (percent)")
@click.option("--increase", "annual_increase", default="0", help="Annual rent increase (percent)")
@click.option("--years", default=1, show_default=True, type=int, help="Years to project")
@click.option("--income", "monthly_income", default="0", help="Monthly income for the affordability check")
@output_option
def rent(monthly_rent, utilities, insurance, parking, other_costs, discount, tax_rate, annual_increase,
         years, monthly_income, output) -> None:
    """Total up the cost of renting and check affordability."""
    data = {
        "monthly_rent": parse_amount(monthly_rent),
        "utilities": parse_amount(utilities),
        "insurance": parse_amount(insurance),
        "parking": parse_amount(parking),
        "other_costs": parse_amount(other_costs),
        "discount": parse_percent(discount),
        "tax_rate": parse_percent(tax_rate),
        "annual_increase": parse_percent(annual_increase),
        "years": years,
        "monthly_income": parse_amount(monthly_income),
    }
    calculator, result = _calculate("rent", data)

    def show(r) -> None:
        rows = [
            ("Monthly total", format_currency(r.monthly_total)),
            ("Annual total", format_currency(r.annual_total)),
        ]
        if r.max_affordable_rent > 0:
            rows.append(("Share of income", format_percentage(r.affordability_ratio, 1)))
            rows.append(("Affordability", r.affordability_message))
            rows.append(("Max affordable rent", format_currency(r.max_affordable_rent)))
        print_summary("Rent", rows)
        _print_rows(
            ["Year", "Monthly", "Annual"],
            [[y.year, y.monthly_total, y.annual_total] for y in r.yearly_projection],
        )

    _emit(calculator, result, output, show)


if __name__ == "__main__":
    cli()
