"""Orders router: order history, direct order creation and cancellation."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.errors import NotFoundError, ValidationError
from libs.db.session import get_async_db
from services.storefront_service.dependencies import is_admin_user
from services.storefront_service.models import Order, OrderStatus
from services.storefront_service.routers._helpers import paginate
from services.storefront_service.schemas import (
    OrderCreateRequest,
    OrderListResponse,
    OrderResponse,
)
from services.storefront_service.services.checkout import OrderLine, place_order
from services.storefront_service.services.order_ops import (
    cancel_order,
    ensure_can_access,
    get_order,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

router = APIRouter(tags=["orders"])


def parse_status(status: Optional[str]) -> Optional[OrderStatus]:
    """Accept ``pending`` as well as ``PENDING``."""
    if not status:
        return None
    try:
        return OrderStatus(status.strip().lower())
    except ValueError:
        raise ValidationError(f"Invalid order status: {status}") from None


# ============================================================================
# ORDER HISTORY
# ============================================================================


@router.get("/orders", response_model=OrderListResponse)
async def list_orders(
    status: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """List the caller's orders, newest first. Admins see every order."""
    query = select(Order).options(selectinload(Order.items))
    if not await is_admin_user(db, current_user.user_id):
        query = query.where(Order.user_id == current_user.user_id)

    status_filter = parse_status(status)
    if status_filter:
        query = query.where(Order.status == status_filter)

    query = query.order_by(Order.created_at.desc())
    orders, total, _ = await paginate(db, query, page=page, page_size=page_size)

    return OrderListResponse(
        items=[OrderResponse.model_validate(o) for o in orders],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.post("/orders", response_model=OrderResponse, status_code=201)
async def create_order(
    order_in: OrderCreateRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Create an order from explicit lines (prices come from the catalog)."""
    lines = [
        OrderLine(
            product_id=line.product_id,
            variant_id=line.variant_id,
            quantity=line.quantity,
            color=line.color,
            size=line.size,
        )
        for line in order_in.items
    ]
    order = await place_order(
        db,
        user_id=current_user.user_id,
        lines=lines,
        shipping_address=order_in.shipping_address.model_dump(),
        payment_method=order_in.payment_method,
        notes=order_in.notes,
    )
    return order


@router.get("/orders/number/{order_number}", response_model=OrderResponse)
async def get_order_by_number(
    order_number: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Get order by its human-readable number."""
    query = (
        select(Order)
        .where(Order.order_number == order_number)
        .options(selectinload(Order.items))
    )
    result = await db.execute(query)
    order = result.scalar_one_or_none()
    if not order:
        raise NotFoundError("Order not found")

    ensure_can_access(
        order,
        user_id=current_user.user_id,
        is_admin=await is_admin_user(db, current_user.user_id),
    )
    return order


@router.get("/orders/{order_id}", response_model=OrderResponse)
async def get_order_detail(
    order_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Get a single order (owner or admin)."""
    order = await get_order(db, order_id)
    ensure_can_access(
        order,
        user_id=current_user.user_id,
        is_admin=await is_admin_user(db, current_user.user_id),
    )
    return order


@router.post("/orders/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order_endpoint(
    order_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Cancel an order and put its stock back."""
    return await cancel_order(
        db,
        order_id=order_id,
        user_id=current_user.user_id,
        is_admin=await is_admin_user(db, current_user.user_id),
    )
