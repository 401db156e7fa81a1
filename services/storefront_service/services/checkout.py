"""Checkout and order placement, all inside one database transaction.

Flow for both ``POST /api/checkout`` (cart lines) and ``POST /api/orders``
(explicit lines):

1. Read the settings record (fallback defaults when absent)
2. SELECT FOR UPDATE the referenced product and variant rows
3. Validate every line: product exists and is active, variant belongs to the
   product, requested quantity fits the available stock
4. Price lines from the database (sale price wins), compute totals
5. Decrement stock, insert order + items, delete the caller's cart lines,
   insert the admin notification
6. Commit once; any error rolls everything back
"""

import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence

from libs.common.config import get_settings
from libs.common.currency import format_money
from libs.common.errors import (
    ConflictError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from libs.common.logging import get_logger
from services.storefront_service.models import (
    CartItem,
    Notification,
    NotificationType,
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    Product,
    ProductVariant,
)
from services.storefront_service.services.pricing import (
    compute_order_totals,
    effective_unit_price,
    line_total,
)
from services.storefront_service.services.settings_ops import get_store_settings
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

logger = get_logger(__name__)

PLACEHOLDER_IMAGE = "/placeholder.jpg"


@dataclass(frozen=True)
class OrderLine:
    """A requested line, before validation."""

    product_id: uuid.UUID
    quantity: int
    variant_id: Optional[uuid.UUID] = None
    color: Optional[str] = None
    size: Optional[str] = None


@dataclass
class ResolvedLine:
    """A validated, priced line bound to its locked rows."""

    product: Product
    variant: Optional[ProductVariant]
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    color: Optional[str] = None
    size: Optional[str] = None


def admin_order_link(order_id: uuid.UUID) -> str:
    return f"/admin/orders/{order_id}"


def initial_payment_status(payment_method: PaymentMethod) -> PaymentStatus:
    """Cash on delivery is collected later; card payments are taken upfront."""
    if payment_method == PaymentMethod.CASH_ON_DELIVERY:
        return PaymentStatus.PENDING
    return PaymentStatus.PAID


# ---------------------------------------------------------------------------
# Row locking
# ---------------------------------------------------------------------------


async def lock_products(
    db: AsyncSession, product_ids: Sequence[uuid.UUID]
) -> dict[uuid.UUID, Product]:
    """Load and row-lock products (ordered by id to keep lock order stable).

    ``populate_existing`` refreshes rows already in the identity map so the
    stock values are the ones read under the lock.
    """
    if not product_ids:
        return {}
    result = await db.execute(
        select(Product)
        .where(Product.id.in_(set(product_ids)))
        .order_by(Product.id)
        .options(selectinload(Product.variants), selectinload(Product.images))
        .with_for_update(of=Product)
        .execution_options(populate_existing=True)
    )
    return {product.id: product for product in result.scalars().all()}


async def lock_variants(
    db: AsyncSession, variant_ids: Sequence[uuid.UUID]
) -> dict[uuid.UUID, ProductVariant]:
    if not variant_ids:
        return {}
    result = await db.execute(
        select(ProductVariant)
        .where(ProductVariant.id.in_(set(variant_ids)))
        .order_by(ProductVariant.id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return {variant.id: variant for variant in result.scalars().all()}


# ---------------------------------------------------------------------------
# Validation & pricing
# ---------------------------------------------------------------------------


def resolve_lines(
    lines: Sequence[OrderLine], products: dict[uuid.UUID, Product]
) -> list[ResolvedLine]:
    """Validate stock and price every line. Fails fast on the first bad line.

    Quantities of repeated product/variant lines are checked cumulatively.
    """
    resolved: list[ResolvedLine] = []
    requested: dict[tuple[uuid.UUID, Optional[uuid.UUID]], int] = {}

    for line in lines:
        if line.quantity <= 0:
            raise ValidationError("Quantity must be at least 1")

        product = products.get(line.product_id)
        if product is None:
            raise NotFoundError(f"Product {line.product_id} not found")
        if not product.is_active:
            raise ValidationError(f"Product {product.name} is not available")

        variant = None
        if line.variant_id is not None:
            variant = product.find_variant(line.variant_id)
            if variant is None:
                raise NotFoundError(
                    f"Variant {line.variant_id} not found for product {product.name}"
                )
        elif product.has_variants:
            raise ValidationError(f"Please choose a variant for {product.name}")

        if product.has_variants and variant is not None:
            available = variant.stock
        else:
            available = product.stock

        key = (product.id, variant.id if variant is not None else None)
        requested[key] = requested.get(key, 0) + line.quantity
        if requested[key] > available:
            raise ConflictError(
                f"Insufficient stock for {product.name}. "
                f"Available: {available}, requested: {requested[key]}"
            )

        unit_price = effective_unit_price(product.price, product.sale_price)
        resolved.append(
            ResolvedLine(
                product=product,
                variant=variant,
                quantity=line.quantity,
                unit_price=unit_price,
                total_price=line_total(unit_price, line.quantity),
                color=line.color,
                size=line.size,
            )
        )

    return resolved


def _decrement_stock(line: ResolvedLine) -> None:
    if line.product.has_variants and line.variant is not None:
        line.variant.stock -= line.quantity
    else:
        line.product.stock -= line.quantity


def _order_item(line: ResolvedLine) -> OrderItem:
    product = line.product
    return OrderItem(
        product_id=product.id,
        variant_id=line.variant.id if line.variant is not None else None,
        product_name=product.name,
        product_name_ar=product.name_ar,
        product_image=product.primary_image_url or PLACEHOLDER_IMAGE,
        sku=line.variant.sku if line.variant is not None else product.sku,
        color=line.color,
        size=line.size,
        quantity=line.quantity,
        unit_price=line.unit_price,
        total_price=line.total_price,
    )


# ---------------------------------------------------------------------------
# Placement
# ---------------------------------------------------------------------------


async def place_order(
    db: AsyncSession,
    *,
    user_id: str,
    lines: Sequence[OrderLine],
    shipping_address: dict,
    payment_method: PaymentMethod,
    notes: Optional[str] = None,
) -> Order:
    """Validate, price and persist an order in a single transaction.

    Also deletes the caller's cart lines and writes a ``new_order``
    notification. Raises ``NotFoundError`` / ``ValidationError`` /
    ``ConflictError``; nothing is written when it raises.
    """
    if not lines:
        raise ValidationError("Your cart is empty")

    try:
        settings = await get_store_settings(db)

        products = await lock_products(db, [line.product_id for line in lines])
        await lock_variants(
            db, [line.variant_id for line in lines if line.variant_id is not None]
        )
        resolved = resolve_lines(lines, products)

        totals = compute_order_totals(
            (line.total_price for line in resolved),
            shipping_cost=settings.shipping_cost,
            tax_rate=settings.tax_rate,
        )

        for line in resolved:
            _decrement_stock(line)

        order = Order(
            id=uuid.uuid4(),
            order_number=Order.generate_order_number(
                get_settings().ORDER_NUMBER_PREFIX
            ),
            user_id=user_id,
            status=OrderStatus.PENDING,
            payment_method=payment_method,
            payment_status=initial_payment_status(payment_method),
            subtotal=totals.subtotal,
            tax_amount=totals.tax_amount,
            shipping_amount=totals.shipping_amount,
            discount_amount=totals.discount_amount,
            total_amount=totals.total_amount,
            currency=settings.currency,
            shipping_address=shipping_address,
            notes=notes,
            items=[_order_item(line) for line in resolved],
        )
        db.add(order)

        await db.execute(delete(CartItem).where(CartItem.user_id == user_id))

        db.add(
            Notification(
                type=NotificationType.NEW_ORDER,
                message=(
                    f"New order {order.order_number} for "
                    f"{format_money(order.total_amount, order.currency)}"
                ),
                link=admin_order_link(order.id),
            )
        )

        await db.commit()
    except StoreError as exc:
        await db.rollback()
        logger.warning("Order rejected for user %s: %s", user_id, exc.detail)
        raise
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Placed order %s for user %s (%d lines, total=%s %s)",
        order.order_number,
        user_id,
        len(resolved),
        order.total_amount,
        order.currency,
    )
    return order


async def checkout_cart(
    db: AsyncSession,
    *,
    user_id: str,
    shipping_address: dict,
    payment_method: PaymentMethod,
    notes: Optional[str] = None,
) -> Order:
    """Turn the caller's cart into an order."""
    result = await db.execute(
        select(CartItem)
        .where(CartItem.user_id == user_id)
        .order_by(CartItem.created_at)
    )
    cart_items = result.scalars().all()
    if not cart_items:
        raise ValidationError("Your cart is empty")

    lines = [
        OrderLine(
            product_id=item.product_id,
            variant_id=item.variant_id,
            quantity=item.quantity,
            color=item.color_name,
            size=item.size_name,
        )
        for item in cart_items
    ]
    return await place_order(
        db,
        user_id=user_id,
        lines=lines,
        shipping_address=shipping_address,
        payment_method=payment_method,
        notes=notes,
    )
