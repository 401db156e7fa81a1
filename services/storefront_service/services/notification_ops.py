"""Admin notification reads and batch mark-as-read."""

import uuid

from libs.common.errors import NotFoundError
from libs.common.logging import get_logger
from services.storefront_service.models import Notification
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


async def list_notifications(
    db: AsyncSession, *, unread_only: bool = False, limit: int = 100
) -> list[Notification]:
    query = select(Notification).order_by(Notification.created_at.desc())
    if unread_only:
        query = query.where(Notification.is_read.is_(False))
    result = await db.execute(query.limit(limit))
    return list(result.scalars().all())


async def mark_all_read(db: AsyncSession) -> int:
    """Flip every unread notification in one statement. Returns rows updated."""
    result = await db.execute(
        update(Notification)
        .where(Notification.is_read.is_(False))
        .values(is_read=True)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    updated = result.rowcount or 0
    logger.info("Marked %d notifications as read", updated)
    return updated


async def mark_read(db: AsyncSession, notification_id: uuid.UUID) -> Notification:
    result = await db.execute(
        select(Notification).where(Notification.id == notification_id)
    )
    notification = result.scalar_one_or_none()
    if not notification:
        raise NotFoundError("Notification not found")

    if not notification.is_read:
        notification.is_read = True
        await db.commit()
    return notification
