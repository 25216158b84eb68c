"""Money helpers. Amounts are integer paise inside the engine."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

Number = Union[int, float, str, Decimal]

_CENT = Decimal("0.01")


def to_minor(value: Number) -> int:
    """Convert a major-unit amount (rupees) to integer paise."""
    amount = Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP)
    return int(amount * 100)


def to_major(minor: int) -> Decimal:
    return (Decimal(minor) / 100).quantize(_CENT)


def divide(minor: int, parts: int) -> int:
    """Split an amount into ``parts`` and round half up to the nearest paisa."""
    if parts <= 0:
        raise ValueError("parts must be positive")
    quotient = (Decimal(minor) / parts).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return int(quotient)


def percent_of(minor: int, percent: Number) -> int:
    share = Decimal(minor) * Decimal(str(percent)) / 100
    return int(share.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def format_currency(minor: int) -> str:
    """Return amount formatted to two decimals."""
    return f"{to_major(minor):.2f}"
