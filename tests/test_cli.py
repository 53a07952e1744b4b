import csv
import json
from decimal import Decimal

import click
import pytest
from click.testing import CliRunner

from fincalc.main import cli, parse_amount, parse_percent


@pytest.fixture
def runner():
    return CliRunner()


def test_parse_amount_suffixes():
    assert parse_amount("500k") == Decimal("500000")
    assert parse_amount("1.5m") == Decimal("1500000")
    assert parse_amount("250,000") == Decimal("250000")
    with pytest.raises(click.BadParameter):
        parse_amount("lots")


def test_parse_percent():
    assert parse_percent("5%") == Decimal("5")
    assert parse_percent("6.25") == Decimal("6.25")
    with pytest.raises(click.BadParameter):
        parse_percent("five")


def test_list_shows_every_calculator(runner):
    result = runner.invoke(cli, ["list"])
    assert result.exit_code == 0
    for slug in ("401k", "annuity-payout", "lease", "college-cost", "credit-card", "currency", "discount",
                 "payment", "rent"):
        assert slug in result.output


def test_annuity_payout_summary(runner):
    result = runner.invoke(cli, ["annuity-payout", "-p", "500k", "-r", "5", "-y", "10"])
    assert result.exit_code == 0, result.output
    assert "$5,303.28" in result.output
    assert "$136,393.09" in result.output


def test_annuity_payout_that_never_depletes(runner):
    result = runner.invoke(cli, ["annuity-payout", "-p", "100k", "-r", "6", "--payout", "400"])
    assert result.exit_code == 0, result.output
    assert "balance will keep growing" in result.output


def test_validation_errors_exit_with_usage_error(runner):
    result = runner.invoke(cli, ["credit-card", "-b", "5000", "-r", "45"])
    assert result.exit_code == 2
    assert "APR must be between 0% and 40%" in result.output


def test_undefined_formula_reports_generic_message(runner):
    # Validation does not look at the discount combination; the formula rejects it
    result = runner.invoke(cli, ["discount", "--percent", "20", "--amount", "10"])
    assert result.exit_code == 1
    assert "Unable to calculate with the given inputs." in result.output


def test_bad_amount_is_rejected(runner):
    result = runner.invoke(cli, ["rent", "--rent", "abc"])
    assert result.exit_code == 2
    assert "Invalid amount" in result.output


def test_lease_table(runner):
    result = runner.invoke(cli, ["lease", "--asset-value", "30k", "--residual-value", "18k", "-t", "36", "-r", "5"])
    assert result.exit_code == 0, result.output
    assert "$433.33" in result.output
    assert "Month\tPayment" in result.output


def test_college_cost_preset(runner):
    result = runner.invoke(cli, ["college-cost", "--college-type", "public-2year", "--years-until", "5"])
    assert result.exit_code == 0, result.output
    assert "2-Year Public College" in result.output


def test_college_cost_needs_a_cost(runner):
    result = runner.invoke(cli, ["college-cost", "--years-until", "5"])
    assert result.exit_code == 2


def test_export_payment_schedule_to_csv(runner, tmp_path):
    path = tmp_path / "schedule.csv"
    result = runner.invoke(cli, ["payment", "-p", "10000", "-r", "6", "-n", "12", "--output", str(path)])
    assert result.exit_code == 0, result.output
    with path.open(newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 12
    assert float(rows[-1]["balance"]) == pytest.approx(0)
    assert "cumulative_interest" in rows[0]


def test_export_credit_card_to_json(runner, tmp_path):
    path = tmp_path / "card.json"
    result = runner.invoke(
        cli,
        ["credit-card", "-b", "5000", "-r", "18", "--payment-type", "fixed", "--payment", "200", "-o", str(path)],
    )
    assert result.exit_code == 0, result.output
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["calculator"] == "credit-card"
    assert data["summary"]["months_to_payoff"] == 32
    assert len(data["schedule"]) == 32
    assert "amortization_schedule" not in data["summary"]


def test_discount_cannot_export_csv(runner, tmp_path):
    path = tmp_path / "discount.csv"
    result = runner.invoke(cli, ["discount", "--original", "100", "--percent", "20", "-o", str(path)])
    assert result.exit_code == 2


def test_unsupported_output_format(runner, tmp_path):
    result = runner.invoke(cli, ["rent", "--rent", "1500", "-o", str(tmp_path / "rent.txt")])
    assert result.exit_code == 2


def test_currency_with_rates_file(runner, tmp_path):
    rates = tmp_path / "rates.json"
    rates.write_text(json.dumps({"EUR": 0.5}), encoding="utf-8")
    result = runner.invoke(cli, ["currency", "-a", "100", "--to", "EUR", "--rates-file", str(rates)])
    assert result.exit_code == 0, result.output
    assert "€50.00" in result.output


def test_currency_unknown_code(runner):
    result = runner.invoke(cli, ["currency", "-a", "100", "--to", "XYZ"])
    assert result.exit_code == 2
    assert "Invalid to currency" in result.output


def test_401k_and_rent_commands(runner):
    result = runner.invoke(cli, ["401k", "--age", "30", "--retirement-age", "65", "--salary", "100k",
                                 "--contribution", "10", "--return", "7"])
    assert result.exit_code == 0, result.output
    assert "Balance at retirement" in result.output
    result = runner.invoke(cli, ["rent", "--rent", "2000", "--utilities", "325", "--income", "6000"])
    assert result.exit_code == 0, result.output
    assert "Caution - Above recommended range" in result.output


def test_infinite_amount_is_rejected(runner):
    result = runner.invoke(cli, ["rent", "--rent", "inf"])
    assert result.exit_code == 2
    assert "Invalid amount" in result.output
    with pytest.raises(click.BadParameter):
        parse_percent("Infinity")


def test_long_annuity_payout_notes_the_cap(runner):
    result = runner.invoke(cli, ["annuity-payout", "-p", "10000", "-r", "0", "--payout", "1"])
    assert result.exit_code == 0, result.output
    assert "10000" in result.output
    assert "first 600 payouts" in result.output
