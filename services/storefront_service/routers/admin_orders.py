"""Admin orders router: list, inspect and update any order."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.storefront_service.dependencies import require_admin
from services.storefront_service.models import AuditEntityType, Order, UserProfile
from services.storefront_service.routers._helpers import log_audit, paginate
from services.storefront_service.routers.orders import parse_status
from services.storefront_service.schemas import (
    AdminOrderDetailResponse,
    AdminOrderResponse,
    AdminOrderUpdate,
    OrderCustomer,
    OrderListResponse,
)
from services.storefront_service.services.order_ops import (
    get_order,
    update_order_admin,
)
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

router = APIRouter(tags=["admin-orders"])

# Shown when the profile behind an order no longer exists
DELETED_CUSTOMER = OrderCustomer(full_name="Deleted user", email="")


@router.get("/orders", response_model=OrderListResponse)
async def list_all_orders(
    status: Optional[str] = Query(None, description="Case-insensitive status"),
    search: Optional[str] = Query(None, description="Order number or user id"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """List all orders, newest first."""
    query = select(Order).options(selectinload(Order.items))

    status_filter = parse_status(status)
    if status_filter:
        query = query.where(Order.status == status_filter)
    if search:
        search_term = f"%{search.strip()}%"
        query = query.where(
            or_(Order.order_number.ilike(search_term), Order.user_id.ilike(search_term))
        )

    query = query.order_by(Order.created_at.desc())
    orders, total, _ = await paginate(db, query, page=page, page_size=page_size)

    return OrderListResponse(
        items=[AdminOrderResponse.model_validate(o) for o in orders],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/orders/{order_id}", response_model=AdminOrderDetailResponse)
async def get_order_admin(
    order_id: uuid.UUID,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """One order with the customer's contact details."""
    order = await get_order(db, order_id)
    profile = await db.get(UserProfile, order.user_id)

    response = AdminOrderDetailResponse.model_validate(order)
    response.customer = (
        OrderCustomer.model_validate(profile) if profile else DELETED_CUSTOMER
    )
    return response


@router.put("/orders/{order_id}", response_model=AdminOrderResponse)
async def update_order(
    order_id: uuid.UUID,
    update_in: AdminOrderUpdate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Update status, tracking details or admin notes.

    Moving to ``cancelled`` restores stock like a shopper cancellation.
    """
    order = await get_order(db, order_id, for_update=True)

    try:
        old_values, new_values = await update_order_admin(
            db,
            order=order,
            performed_by=current_user.user_id,
            status=update_in.status,
            tracking_number=update_in.tracking_number,
            tracking_url=update_in.tracking_url,
            admin_notes=update_in.admin_notes,
        )
        if new_values:
            await log_audit(
                db,
                AuditEntityType.ORDER,
                order.id,
                "status_changed" if "status" in new_values else "updated",
                current_user.user_id,
                old_value=old_values,
                new_value=new_values,
            )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    return order
