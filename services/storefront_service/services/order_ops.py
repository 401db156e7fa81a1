"""Order reads, cancellation with stock restore, and admin status updates."""

import uuid
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.common.errors import ForbiddenError, NotFoundError, ValidationError
from libs.common.logging import get_logger
from services.storefront_service.models import (
    Notification,
    NotificationType,
    Order,
    OrderStatus,
    Product,
    ProductVariant,
)
from services.storefront_service.models.enums import (
    NON_CANCELLABLE_STATUSES,
    ORDER_STATUS_TRANSITIONS,
)
from services.storefront_service.services.checkout import admin_order_link
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def get_order(
    db: AsyncSession, order_id: uuid.UUID, *, for_update: bool = False
) -> Order:
    query = select(Order).where(Order.id == order_id).options(selectinload(Order.items))
    if for_update:
        query = query.with_for_update(of=Order)
    result = await db.execute(query)
    order = result.scalar_one_or_none()
    if not order:
        raise NotFoundError("Order not found")
    return order


def ensure_can_access(order: Order, *, user_id: str, is_admin: bool) -> None:
    """Owners and admins only."""
    if not is_admin and order.user_id != user_id:
        raise ForbiddenError("You do not have access to this order")


# ---------------------------------------------------------------------------
# Cancellation
# ---------------------------------------------------------------------------


async def _restore_stock(db: AsyncSession, order: Order) -> int:
    """Put every line's quantity back. Returns the number of lines restored.

    Mirrors checkout: variant stock for variant products, product stock
    otherwise.
    """
    restored = 0
    for item in order.items:
        result = await db.execute(
            select(Product).where(Product.id == item.product_id).with_for_update()
        )
        product = result.scalar_one_or_none()
        if product is None:
            logger.warning(
                "Skipping stock restore for order %s: product %s no longer exists",
                order.order_number,
                item.product_id,
            )
            continue

        if product.has_variants and item.variant_id is not None:
            result = await db.execute(
                select(ProductVariant)
                .where(
                    ProductVariant.id == item.variant_id,
                    ProductVariant.product_id == product.id,
                )
                .with_for_update()
            )
            variant = result.scalar_one_or_none()
            if variant is None:
                logger.warning(
                    "Skipping stock restore for order %s: variant %s no longer exists",
                    order.order_number,
                    item.variant_id,
                )
                continue
            variant.stock += item.quantity
        else:
            product.stock += item.quantity
        restored += 1
    return restored


def ensure_cancellable(order: Order) -> None:
    if order.status == OrderStatus.CANCELLED:
        raise ValidationError("Order is already cancelled")
    if order.status in NON_CANCELLABLE_STATUSES:
        raise ValidationError(
            f"Order cannot be cancelled once it is {order.status.value}"
        )


async def apply_cancellation(db: AsyncSession, order: Order, *, cancelled_by: str) -> None:
    """Mark cancelled, restore stock and notify admins. The caller commits."""
    ensure_cancellable(order)

    order.status = OrderStatus.CANCELLED
    order.cancelled_at = utc_now()
    restored = await _restore_stock(db, order)

    db.add(
        Notification(
            type=NotificationType.ORDER_CANCELLED,
            message=f"Order {order.order_number} was cancelled",
            link=admin_order_link(order.id),
        )
    )
    logger.info(
        "Cancelled order %s by %s (%d/%d lines restocked)",
        order.order_number,
        cancelled_by,
        restored,
        len(order.items),
    )


async def cancel_order(
    db: AsyncSession,
    *,
    order_id: uuid.UUID,
    user_id: str,
    is_admin: bool,
) -> Order:
    """Cancel an order as its owner or an admin; single commit."""
    order = await get_order(db, order_id, for_update=True)
    ensure_can_access(order, user_id=user_id, is_admin=is_admin)

    try:
        await apply_cancellation(db, order, cancelled_by=user_id)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    return order


# ---------------------------------------------------------------------------
# Admin updates
# ---------------------------------------------------------------------------


async def update_order_admin(
    db: AsyncSession,
    *,
    order: Order,
    performed_by: str,
    status: Optional[OrderStatus] = None,
    tracking_number: Optional[str] = None,
    tracking_url: Optional[str] = None,
    admin_notes: Optional[str] = None,
) -> tuple[dict, dict]:
    """Apply status/tracking changes. Returns ``(old_values, new_values)``.

    Status moves must follow ``ORDER_STATUS_TRANSITIONS``. ``cancelled`` goes
    through the cancellation path (stock restore). The caller commits.
    """
    old_values: dict = {}
    new_values: dict = {}

    if status is not None and status != order.status:
        if order.status == OrderStatus.CANCELLED:
            raise ValidationError("Cancelled orders cannot change status")
        if status not in ORDER_STATUS_TRANSITIONS[order.status]:
            raise ValidationError(
                f"Cannot change order status from {order.status.value} to {status.value}"
            )

        old_values["status"] = order.status.value
        new_values["status"] = status.value

        if status == OrderStatus.CANCELLED:
            await apply_cancellation(db, order, cancelled_by=performed_by)
        else:
            order.status = status
            if status == OrderStatus.SHIPPED:
                order.shipped_at = utc_now()
            elif status == OrderStatus.DELIVERED:
                order.delivered_at = utc_now()
            logger.info(
                "Order %s status %s -> %s by %s",
                order.order_number,
                old_values["status"],
                status.value,
                performed_by,
            )

    for field, value in (
        ("tracking_number", tracking_number),
        ("tracking_url", tracking_url),
        ("admin_notes", admin_notes),
    ):
        if value is not None and value != getattr(order, field):
            old_values[field] = getattr(order, field)
            new_values[field] = value
            setattr(order, field, value)

    return old_values, new_values
