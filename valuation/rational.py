"""Exact rational arithmetic over quantities and monetary amounts.

Everything in the valuation path is a ``Fraction``.  Missing operands count
as zero so callers can write ``add(portfolio.get(key), delta)`` directly.
"""

from __future__ import annotations

from decimal import ROUND_HALF_EVEN, Decimal
from fractions import Fraction


def add(x: Fraction | None, y: Fraction | None) -> Fraction:
    return Fraction(x or 0) + Fraction(y or 0)


def sub(x: Fraction | None, y: Fraction | None) -> Fraction:
    return Fraction(x or 0) - Fraction(y or 0)


def is_zero(x: Fraction | None) -> bool:
    return x is None or x == 0


def adjust(mapping: dict[str, Fraction], key: str, delta: Fraction) -> None:
    """Add *delta* to ``mapping[key]``, dropping the key if it lands on zero."""
    value = add(mapping.get(key), delta)
    if is_zero(value):
        mapping.pop(key, None)
    else:
        mapping[key] = value


def format_decimal(value: Fraction, places: int = 2) -> str:
    """Render *value* as a rounded decimal string (display only)."""
    quantum = Decimal(1).scaleb(-places)
    exact = Decimal(value.numerator) / Decimal(value.denominator)
    return str(exact.quantize(quantum, rounding=ROUND_HALF_EVEN))


def to_strings(mapping: dict[str, Fraction] | None) -> dict[str, str]:
    """Exact string form of every value, for logs and reports."""
    return {key: str(value) for key, value in (mapping or {}).items()}
