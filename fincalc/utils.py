"""Utility functions for the financial calculators.

This module provides helpers for turning user input into ``Decimal`` values,
for building calculator input records from plain mappings (CLI options, JSON
request bodies) and for turning result records back into JSON-serialisable
structures.
"""

from __future__ import annotations

import dataclasses
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, getcontext
from typing import Any, Dict, Mapping, Type, TypeVar

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

ZERO = Decimal("0")
HUNDRED = Decimal("100")
MAX_DIGITS = 20  # integer digits accepted in an input value

T = TypeVar("T")


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips any commas and handles both integer and float-like
    strings. It raises ``ValueError`` if conversion fails or the value is not
    a finite number of a sensible magnitude.
    """
    try:
        cleaned = value.replace(",", "").strip()
        result = Decimal(cleaned)
    except (InvalidOperation, AttributeError) as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc
    if not result.is_finite() or result.adjusted() >= MAX_DIGITS:
        raise ValueError(f"Invalid numeric value: {value}")
    return result


def to_decimal(value: Any) -> Decimal:
    """Return ``value`` as a ``Decimal``.

    Floats go through ``str`` so that ``0.1`` becomes ``Decimal("0.1")`` rather
    than its binary expansion.
    """
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError(f"Invalid numeric value: {value}")
        return value
    if isinstance(value, bool):
        raise ValueError(f"Invalid numeric value: {value}")
    return decimal_from_str(str(value))


def percent_to_rate(percent: Decimal) -> Decimal:
    """Convert a percentage (``5`` for 5 %) into a decimal rate (``0.05``)."""
    return percent / HUNDRED


def _is_decimal_field(field: dataclasses.Field) -> bool:
    # Annotations are strings because modules use ``from __future__ import annotations``
    return "Decimal" in str(field.type)


def _is_int_field(field: dataclasses.Field) -> bool:
    return str(field.type) in ("int", "Optional[int]")


def _is_str_field(field: dataclasses.Field) -> bool:
    return str(field.type) in ("str", "Optional[str]")


def _to_int(name: str, value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    try:
        number = to_decimal(value)
    except ValueError as exc:
        raise ValueError(f"Invalid integer for {name}: {value}") from exc
    if number != number.to_integral_value():
        raise ValueError(f"Invalid integer for {name}: {value}")
    return int(number)


def coerce_decimal_fields(record: Any) -> None:
    """Convert every ``Decimal``-annotated field of a dataclass in place."""
    for field in dataclasses.fields(record):
        value = getattr(record, field.name)
        if value is None:
            continue
        if _is_decimal_field(field):
            setattr(record, field.name, to_decimal(value))


def build_input(cls: Type[T], data: Mapping[str, Any]) -> T:
    """Build a calculator input record from a plain mapping.

    Unknown keys and missing required fields raise ``ValueError``. Empty
    strings are treated as missing optional values.
    """
    known = {f.name: f for f in dataclasses.fields(cls)}
    unknown = sorted(set(data) - set(known))
    if unknown:
        raise ValueError(f"Unknown field(s): {', '.join(unknown)}")

    kwargs: Dict[str, Any] = {}
    for name, field in known.items():
        if name not in data or data[name] is None or data[name] == "":
            continue
        value = data[name]
        if _is_int_field(field):
            kwargs[name] = _to_int(name, value)
        elif _is_decimal_field(field):
            kwargs[name] = to_decimal(value)
        elif _is_str_field(field):
            if not isinstance(value, str):
                raise ValueError(f"Invalid text for {name}")
            kwargs[name] = value
        else:
            kwargs[name] = value

    missing = [
        name
        for name, field in known.items()
        if name not in kwargs
        and field.default is dataclasses.MISSING
        and field.default_factory is dataclasses.MISSING  # type: ignore[misc]
    ]
    if missing:
        raise ValueError(f"Missing required field(s): {', '.join(missing)}")
    return cls(**kwargs)


def to_jsonable(value: Any) -> Any:
    """Recursively convert result records into JSON-serialisable values.

    Decimals become floats, dates become ISO strings and dataclasses become
    dictionaries.
    """
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value
