"""Utility functions for the mortgage calculator.

This module provides helpers for turning user input into ``Decimal`` values,
validating them, rounding results to cents and formatting amounts as Malaysian
ringgit. It also converts result dataclasses into plain JSON-friendly
structures for export.
"""

from __future__ import annotations

import dataclasses
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, getcontext
from typing import Any, Union

from .errors import InvalidParameter, NOT_APPLICABLE

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

Number = Union[int, float, str, Decimal]

CENT = Decimal("0.01")
CURRENCY_PREFIX = "RM "


def to_decimal(value: Number, name: str = "value") -> Decimal:
    """Convert a number or numeric string into a finite ``Decimal``.

    Strings may contain thousands separators (``"1,250,000"``). Floats are
    converted through ``str`` so ``4.1`` becomes ``Decimal("4.1")`` rather
    than its binary expansion.

    Raises
    ------
    InvalidParameter
        If the value is missing, not numeric, or not finite.
    """
    if value is None:
        raise InvalidParameter(name, "a value is required")
    if isinstance(value, bool):
        raise InvalidParameter(name, f"expected a number, got {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            if isinstance(value, str):
                cleaned = value.strip().replace(",", "")
                result = Decimal(cleaned)
            elif isinstance(value, float):
                result = Decimal(repr(value))
            else:
                result = Decimal(value)
        except (InvalidOperation, ValueError, TypeError) as exc:
            raise InvalidParameter(name, f"invalid numeric value {value!r}") from exc
    if not result.is_finite():
        raise InvalidParameter(name, f"must be finite, got {value!r}")
    return result


def require_positive(value: Number, name: str) -> Decimal:
    number = to_decimal(value, name)
    if number <= 0:
        raise InvalidParameter(name, f"must be greater than zero, got {number}")
    return number


def require_non_negative(value: Number, name: str) -> Decimal:
    number = to_decimal(value, name)
    if number < 0:
        raise InvalidParameter(name, f"must not be negative, got {number}")
    return number


def require_tenure(value: Any, name: str = "tenure_years") -> int:
    """Validate a whole, positive count such as a tenure in years or a month number."""
    if isinstance(value, bool):
        raise InvalidParameter(name, f"expected a whole number, got {value!r}")
    number = to_decimal(value, name)
    if number != number.to_integral_value():
        raise InvalidParameter(name, f"expected a whole number, got {value!r}")
    if number <= 0:
        raise InvalidParameter(name, f"must be greater than zero, got {number}")
    return int(number)


def round2(value: Number) -> Decimal:
    """Round to two decimals, halves away from zero (``2.345`` -> ``2.35``)."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def format_number(value: Number, decimals: int = 2) -> str:
    """Format a number with thousands separators, e.g. ``1,234.56``."""
    number = to_decimal(value)
    if decimals == 0:
        return f"{number.quantize(Decimal(1), rounding=ROUND_HALF_UP):,}"
    quantum = Decimal(1).scaleb(-decimals)
    return f"{number.quantize(quantum, rounding=ROUND_HALF_UP):,}"


def format_currency(value: Any) -> str:
    """Format an amount as ringgit: ``RM 1,234.56``.

    Missing or non-numeric values render as ``RM 0.00`` so display code never
    shows ``NaN``.
    """
    try:
        return CURRENCY_PREFIX + format_number(value)
    except InvalidParameter:
        return CURRENCY_PREFIX + "0.00"


def format_percent(rate: Decimal) -> str:
    """Render a fractional rate as a percentage label (``0.008`` -> ``0.8%``)."""
    percent = (rate * 100).normalize()
    # normalize() yields exponent notation for whole tens (1E+1)
    if percent == percent.to_integral_value():
        percent = percent.quantize(Decimal(1))
    return f"{percent}%"


def as_serializable(obj: Any) -> Any:
    """Convert result objects into JSON-serialisable structures.

    Dataclasses become dicts, ``Decimal`` values become floats, tuples become
    lists and the ``NOT_APPLICABLE`` sentinel becomes ``"N/A"``.
    """
    if obj is NOT_APPLICABLE:
        return str(obj)
    if isinstance(obj, Decimal):
        return float(obj)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        data = {f.name: as_serializable(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
        kind = getattr(obj, "kind", None)
        if kind is not None and "kind" not in data:
            data["kind"] = kind
        return data
    if isinstance(obj, dict):
        return {str(k): as_serializable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [as_serializable(v) for v in obj]
    return obj
