"""Money helpers for the storefront.

Amounts are ``Decimal`` in the major unit of the store currency (e.g. SAR)
and are stored with two decimal places (``Numeric(12, 2)``). Rounding is
half-up to the cent, applied once per computed amount.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

# ─── constants ───────────────────────────────────────────────────────────────

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

Number = Union[Decimal, int, float, str]


# ─── helpers ─────────────────────────────────────────────────────────────────


def to_decimal(value: Number) -> Decimal:
    """Coerce ``value`` to Decimal without float artefacts (0.15 stays 0.15)."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_money(value: Number) -> Decimal:
    """Round to cents, half-up."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value: Number, currency: str) -> str:
    """Render an amount for messages, e.g. ``255.00 SAR``."""
    return f"{quantize_money(value)} {currency}"
