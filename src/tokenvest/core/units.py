"""
Fixed-point percent helpers.

Percentages carry two implied decimals (10000 == 100.00%). Conversions to
and from token units truncate toward zero and never go through floats.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_DOWN
from typing import Any

from tokenvest.core.constants import PERCENT_BASIS, PERCENT_DECIMALS

_QUANTIZER = Decimal(f"1e-{PERCENT_DECIMALS}")


def tokens_from_percent(percent: int, total_supply: int) -> int:
    """Token units backing ``percent`` of ``total_supply``, truncated."""
    return percent * total_supply // PERCENT_BASIS


def tokens_to_percent(tokens: int, total_supply: int) -> int:
    """Percent units represented by ``tokens``, truncated.

    ``tokens_to_percent(tokens_from_percent(p))`` never exceeds ``p``.
    """
    if total_supply <= 0:
        raise ValueError("total_supply must be positive")
    return tokens * PERCENT_BASIS // total_supply


def parse_percent(value: Any) -> int:
    """Convert ``value`` to fixed-point percent units.

    Integers are taken as already scaled (1250 == 12.50%). Strings and
    Decimals are read as human percentages ("12.5" == 1250), truncating any
    digits past the second decimal.
    """
    if isinstance(value, bool):
        raise ValueError("Percent cannot be a boolean")
    if isinstance(value, int):
        scaled = value
    else:
        try:
            dec = value if isinstance(value, Decimal) else Decimal(str(value).strip().rstrip("%"))
            if not dec.is_finite():
                raise ValueError(f"Invalid percent value: {value}")
            scaled = int(dec.quantize(_QUANTIZER, rounding=ROUND_DOWN).scaleb(PERCENT_DECIMALS))
        except (InvalidOperation, TypeError) as exc:
            raise ValueError(f"Invalid percent value: {value}") from exc

    if scaled < 0:
        raise ValueError("Percent cannot be negative")
    if scaled > PERCENT_BASIS:
        raise ValueError(f"Percent cannot exceed {format_percent(PERCENT_BASIS)}")
    return scaled


def format_percent(percent: int) -> str:
    """Format fixed-point percent units as a string, e.g. 1250 -> '12.50'."""
    return f"{Decimal(percent).scaleb(-PERCENT_DECIMALS).quantize(_QUANTIZER)}"
