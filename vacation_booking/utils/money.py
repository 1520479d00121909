"""Decimal helpers for currency amounts."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Any) -> Decimal:
    """
    Convert a number to a Decimal rounded half-up to cents.

    Floats go through str() so 0.1 stays 0.10 rather than its binary expansion.

    Example:
        >>> to_money(2.675)
        Decimal('2.68')
    """
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def money_to_json(value: Decimal) -> str:
    """Serialize a money amount as a fixed two-decimal string."""
    return str(to_money(value))
