"""Admin dashboard aggregates."""

from libs.common.currency import ZERO, quantize_money
from services.storefront_service.models import (
    Conversation,
    Notification,
    Order,
    OrderStatus,
    Product,
    UserProfile,
)
from services.storefront_service.models.enums import OPEN_ORDER_STATUSES
from services.storefront_service.schemas import DashboardStats, RecentOrder
from services.storefront_service.services.catalog_ops import in_stock_clause
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

RECENT_ORDERS_LIMIT = 5


async def _count(db: AsyncSession, query) -> int:
    result = await db.execute(select(func.count()).select_from(query.subquery()))
    return result.scalar_one()


async def count_out_of_stock(db: AsyncSession) -> int:
    """Active products whose available stock is zero."""
    query = select(Product.id).where(
        Product.is_active.is_(True), in_stock_clause(in_stock=False)
    )
    return await _count(db, query)


async def build_dashboard(db: AsyncSession) -> DashboardStats:
    revenue_result = await db.execute(
        select(func.coalesce(func.sum(Order.total_amount), 0)).where(
            Order.status != OrderStatus.CANCELLED
        )
    )
    total_revenue = quantize_money(revenue_result.scalar_one() or ZERO)

    total_sales = await _count(db, select(Order.id))
    total_users = await _count(db, select(UserProfile.id))
    total_products = await _count(db, select(Product.id))
    pending_orders = await _count(
        db, select(Order.id).where(Order.status.in_(list(OPEN_ORDER_STATUSES)))
    )
    out_of_stock = await count_out_of_stock(db)
    unread_notifications = await _count(
        db, select(Notification.id).where(Notification.is_read.is_(False))
    )
    unread_messages = await _count(
        db, select(Conversation.id).where(Conversation.unread_by_admin.is_(True))
    )

    recent_result = await db.execute(
        select(Order).order_by(Order.created_at.desc()).limit(RECENT_ORDERS_LIMIT)
    )
    recent_orders = [
        RecentOrder(
            id=order.id,
            order_number=order.order_number,
            customer_name=order.customer_name,
            total_amount=order.total_amount,
            status=order.status,
            created_at=order.created_at,
        )
        for order in recent_result.scalars().all()
    ]

    return DashboardStats(
        total_revenue=total_revenue,
        total_sales=total_sales,
        total_users=total_users,
        total_products=total_products,
        pending_orders=pending_orders,
        out_of_stock_products=out_of_stock,
        unread_notifications=unread_notifications,
        unread_messages=unread_messages,
        recent_orders=recent_orders,
    )
