"""Currency conversion.

Rates are quoted against the US dollar (1 USD = X currency) and cross rates
are derived through USD. The bundled table holds approximate rates for
demonstration; a JSON file with the same shape can replace it.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from ..utils import HUNDRED, ZERO, coerce_decimal_fields, to_decimal

logger = logging.getLogger(__name__)


@dataclass
class CurrencyInfo:
    name: str
    symbol: str
    decimals: int


CURRENCIES: Dict[str, CurrencyInfo] = {
    "USD": CurrencyInfo("US Dollar", "$", 2),
    "EUR": CurrencyInfo("Euro", "€", 2),
    "GBP": CurrencyInfo("British Pound", "£", 2),
    "JPY": CurrencyInfo("Japanese Yen", "¥", 0),
    "CNY": CurrencyInfo("Chinese Yuan", "¥", 2),
    "CAD": CurrencyInfo("Canadian Dollar", "C$", 2),
    "AUD": CurrencyInfo("Australian Dollar", "A$", 2),
    "CHF": CurrencyInfo("Swiss Franc", "CHF", 2),
    "INR": CurrencyInfo("Indian Rupee", "₹", 2),
    "MXN": CurrencyInfo("Mexican Peso", "Mex$", 2),
    "BRL": CurrencyInfo("Brazilian Real", "R$", 2),
    "KRW": CurrencyInfo("South Korean Won", "₩", 0),
    "SEK": CurrencyInfo("Swedish Krona", "kr", 2),
    "NOK": CurrencyInfo("Norwegian Krone", "kr", 2),
    "DKK": CurrencyInfo("Danish Krone", "kr", 2),
    "SGD": CurrencyInfo("Singapore Dollar", "S$", 2),
    "HKD": CurrencyInfo("Hong Kong Dollar", "HK$", 2),
    "NZD": CurrencyInfo("New Zealand Dollar", "NZ$", 2),
    "ZAR": CurrencyInfo("South African Rand", "R", 2),
    "TRY": CurrencyInfo("Turkish Lira", "₺", 2),
}

# 1 USD = X currency, approximate as of January 2025
EXCHANGE_RATES: Dict[str, Decimal] = {
    "USD": Decimal("1.0"),
    "EUR": Decimal("0.92"),
    "GBP": Decimal("0.79"),
    "JPY": Decimal("149.0"),
    "CNY": Decimal("7.24"),
    "CAD": Decimal("1.36"),
    "AUD": Decimal("1.53"),
    "CHF": Decimal("0.88"),
    "INR": Decimal("83.0"),
    "MXN": Decimal("17.0"),
    "BRL": Decimal("4.95"),
    "KRW": Decimal("1320.0"),
    "SEK": Decimal("10.45"),
    "NOK": Decimal("10.75"),
    "DKK": Decimal("6.88"),
    "SGD": Decimal("1.34"),
    "HKD": Decimal("7.82"),
    "NZD": Decimal("1.65"),
    "ZAR": Decimal("18.5"),
    "TRY": Decimal("32.5"),
}

POPULAR_CURRENCIES = ["USD", "EUR", "GBP", "JPY", "CNY", "CAD", "AUD", "CHF"]
COMMON_AMOUNTS = [Decimal(a) for a in (1, 10, 100, 1000, 10000)]

Rates = Mapping[str, Decimal]


@dataclass
class CurrencyInputs:
    amount: Decimal
    from_currency: str = "USD"
    to_currency: str = "EUR"

    def __post_init__(self) -> None:
        coerce_decimal_fields(self)
        self.from_currency = self.from_currency.upper()
        self.to_currency = self.to_currency.upper()


@dataclass
class ConversionResult:
    amount: Decimal
    from_currency: str
    to_currency: str
    converted_amount: Decimal
    exchange_rate: Decimal
    inverse_rate: Decimal
    timestamp: datetime


@dataclass
class CurrencyAmount:
    currency: str
    amount: Decimal
    rate: Decimal


@dataclass
class MultiCurrencyComparison:
    base_currency: str
    base_amount: Decimal
    conversions: List[CurrencyAmount] = field(default_factory=list)


@dataclass
class CommonConversion:
    amount: Decimal
    converted: Decimal


@dataclass
class CurrencyResults:
    """Everything the currency page shows for one conversion."""

    conversion: ConversionResult
    popular: MultiCurrencyComparison
    common: List[CommonConversion] = field(default_factory=list)


def load_exchange_rates(path: Path) -> Dict[str, Decimal]:
    """Load a ``{"EUR": 0.92, ...}`` rate table from a JSON file.

    Rates are relative to USD. Codes are upper-cased; unknown codes are
    rejected so that every rate has display metadata.
    """
    with Path(path).open("r", encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, dict):
        raise ValueError(f"Exchange rate file must contain an object: {path}")
    rates: Dict[str, Decimal] = {}
    for code, value in raw.items():
        code = code.upper()
        if code not in CURRENCIES:
            raise ValueError(f"Unknown currency in rate file: {code}")
        rate = to_decimal(value)
        if rate <= 0:
            raise ValueError(f"Exchange rate for {code} must be positive")
        rates[code] = rate
    rates.setdefault("USD", Decimal("1"))
    logger.info("Loaded %d exchange rates from %s", len(rates), path)
    return rates


def is_valid_currency(code: str, rates: Optional[Rates] = None) -> bool:
    return code in CURRENCIES and code in (rates or EXCHANGE_RATES)


def get_exchange_rate(from_currency: str, to_currency: str, rates: Optional[Rates] = None) -> Decimal:
    """Return how many units of ``to_currency`` one unit of ``from_currency`` buys."""
    if from_currency == to_currency:
        return Decimal("1")
    table = rates or EXCHANGE_RATES
    try:
        return table[to_currency] / table[from_currency]
    except KeyError as exc:
        raise ValueError(f"Unknown currency: {exc.args[0]}") from None


def convert_currency(
    amount: Decimal, from_currency: str, to_currency: str, rates: Optional[Rates] = None
) -> ConversionResult:
    rate = get_exchange_rate(from_currency, to_currency, rates)
    return ConversionResult(
        amount=amount,
        from_currency=from_currency,
        to_currency=to_currency,
        converted_amount=amount * rate,
        exchange_rate=rate,
        inverse_rate=1 / rate,
        timestamp=datetime.now(timezone.utc),
    )


def get_multi_currency_comparison(
    amount: Decimal, from_currency: str, target_currencies: List[str], rates: Optional[Rates] = None
) -> MultiCurrencyComparison:
    conversions = []
    for currency in target_currencies:
        # A custom rate table may cover only some of the targets
        if currency == from_currency or not is_valid_currency(currency, rates):
            continue
        result = convert_currency(amount, from_currency, currency, rates)
        conversions.append(CurrencyAmount(currency, result.converted_amount, result.exchange_rate))
    return MultiCurrencyComparison(base_currency=from_currency, base_amount=amount, conversions=conversions)


def get_common_conversions(
    from_currency: str, to_currency: str, rates: Optional[Rates] = None
) -> List[CommonConversion]:
    rate = get_exchange_rate(from_currency, to_currency, rates)
    return [CommonConversion(amount=a, converted=a * rate) for a in COMMON_AMOUNTS]


def calculate_percentage_change(old_value: Decimal, new_value: Decimal) -> Decimal:
    if old_value == 0:
        return ZERO
    return (new_value - old_value) / old_value * HUNDRED


def get_all_currencies() -> List[Dict[str, str]]:
    return [{"code": code, "name": info.name, "symbol": info.symbol} for code, info in CURRENCIES.items()]


def calculate_currency(inputs: CurrencyInputs, rates: Optional[Rates] = None) -> CurrencyResults:
    conversion = convert_currency(inputs.amount, inputs.from_currency, inputs.to_currency, rates)
    return CurrencyResults(
        conversion=conversion,
        popular=get_multi_currency_comparison(inputs.amount, inputs.from_currency, POPULAR_CURRENCIES, rates),
        common=get_common_conversions(inputs.from_currency, inputs.to_currency, rates),
    )


def validate_currency_inputs(inputs: CurrencyInputs, rates: Optional[Rates] = None) -> List[str]:
    errors: List[str] = []

    if inputs.amount.is_nan():
        errors.append("Amount must be a valid number")
    elif inputs.amount < 0:
        errors.append("Amount must be greater than or equal to 0")
    if not is_valid_currency(inputs.from_currency, rates):
        errors.append("Invalid from currency")
    if not is_valid_currency(inputs.to_currency, rates):
        errors.append("Invalid to currency")

    return errors
