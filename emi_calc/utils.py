"""Utility functions for the EMI calculator.

Helpers that coerce user input (numbers, numeric strings, shorthand amounts
like ``"25L"``) into ``Decimal`` and ``int`` values, round to currency
precision and render amounts with Indian digit grouping.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, getcontext
from typing import Union

from .errors import InvalidInput

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")

# Suffix multipliers accepted by ``parse_amount``; longest suffixes first
_AMOUNT_SUFFIXES = (
    ("lakh", Decimal("100000")),
    ("cr", Decimal("10000000")),
    ("k", Decimal("1000")),
    ("l", Decimal("100000")),
    ("m", Decimal("1000000")),
)


def to_decimal(value: Number, name: str = "value") -> Decimal:
    """Convert ``value`` into a finite ``Decimal``.

    Floats go through ``str`` so ``0.1`` becomes ``Decimal("0.1")`` rather
    than its binary expansion. Strings may contain thousands separators.

    Raises
    ------
    InvalidInput
        If the value is ``None``, a bool, NaN, infinite or not numeric.
    """
    if isinstance(value, Decimal):
        result = value
    elif value is None or isinstance(value, bool):
        raise InvalidInput(f"{name} must be a number, got {value!r}")
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(str(value))
    elif isinstance(value, str):
        cleaned = value.strip().replace(",", "")
        if not cleaned:
            raise InvalidInput(f"{name} is empty")
        try:
            result = Decimal(cleaned)
        except InvalidOperation as exc:
            raise InvalidInput(f"Invalid numeric value for {name}: {value}") from exc
    else:
        raise InvalidInput(f"{name} must be a number, got {type(value).__name__}")
    if not result.is_finite():
        raise InvalidInput(f"{name} must be finite, got {value!r}")
    return result


def to_months(value: Number, name: str = "tenure") -> int:
    """Convert ``value`` into a whole number of months."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    months = to_decimal(value, name)
    if months != months.to_integral_value():
        raise InvalidInput(f"{name} must be a whole number of months, got {value}")
    return int(months)


def quantize_currency(value: Decimal) -> Decimal:
    """Round ``value`` to cents using round-half-up."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_amount(value: str) -> Decimal:
    """Parse a numeric string with optional suffixes.

    Accepts plain numbers ("500000") and shorthand with ``k``, ``m``, ``l``
    / ``lakh`` and ``cr`` suffixes (e.g. "25L" meaning 2,500,000).
    """
    text = value.strip().lower().replace(",", "")
    factor = Decimal(1)
    for suffix, multiplier in _AMOUNT_SUFFIXES:
        if text.endswith(suffix):
            factor = multiplier
            text = text[: -len(suffix)].strip()
            break
    return to_decimal(text, "amount") * factor


def format_currency(value: Number, symbol: str = "₹") -> str:
    """Render an amount with lakh/crore grouping and two decimals.

    ``format_currency(2500000)`` returns ``"₹25,00,000.00"``.
    """
    amount = quantize_currency(to_decimal(value, "amount"))
    sign = "-" if amount < 0 else ""
    whole, fraction = f"{abs(amount):.2f}".split(".")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])
    return f"{sign}{symbol}{whole}.{fraction}"
