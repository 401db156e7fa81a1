"""Price, totals and SKU helpers shared by cart, checkout and admin catalog."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from libs.common.currency import ZERO, quantize_money, to_decimal

DEFAULT_BASE_SKU = "PROD"


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    shipping_amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    discount_amount: Decimal = ZERO


def effective_unit_price(price, sale_price=None) -> Decimal:
    """Sale price when present (zero included), otherwise the list price."""
    if sale_price is not None:
        return quantize_money(sale_price)
    return quantize_money(price)


def line_total(unit_price: Decimal, quantity: int) -> Decimal:
    return quantize_money(to_decimal(unit_price) * quantity)


def compute_order_totals(
    line_totals: Iterable[Decimal],
    *,
    shipping_cost: Decimal,
    tax_rate: Decimal,
) -> OrderTotals:
    """total = subtotal + shipping + tax, with tax = subtotal * tax_rate.

    Each amount is rounded half-up to cents once.
    """
    subtotal = quantize_money(sum((to_decimal(t) for t in line_totals), ZERO))
    shipping_amount = quantize_money(shipping_cost)
    tax_amount = quantize_money(subtotal * to_decimal(tax_rate))
    return OrderTotals(
        subtotal=subtotal,
        shipping_amount=shipping_amount,
        tax_amount=tax_amount,
        total_amount=subtotal + shipping_amount + tax_amount,
    )


def color_sku_code(color_code: Optional[str]) -> str:
    """'Red' -> 'RED', 'Navy Blue' -> 'NAV'."""
    return (color_code or "").strip()[:3].upper()


def build_variant_sku(
    base_sku: Optional[str],
    color_code: Optional[str] = None,
    size_code: Optional[str] = None,
) -> str:
    """Base SKU plus ``-COLOR``, ``-SIZE`` or ``-COLOR-SIZE``."""
    parts = [(base_sku or "").strip() or DEFAULT_BASE_SKU]
    color = color_sku_code(color_code)
    if color:
        parts.append(color)
    size = (size_code or "").strip().upper()
    if size:
        parts.append(size)
    return "-".join(parts)
