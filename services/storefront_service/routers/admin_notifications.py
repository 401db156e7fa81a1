"""Admin notifications router."""

import uuid

from fastapi import APIRouter, Depends, Query
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.storefront_service.dependencies import require_admin
from services.storefront_service.schemas import MarkReadResponse, NotificationResponse
from services.storefront_service.services.notification_ops import (
    list_notifications,
    mark_all_read,
    mark_read,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["admin-notifications"])


@router.get("/notifications", response_model=list[NotificationResponse])
async def get_notifications(
    unread_only: bool = False,
    limit: int = Query(100, ge=1, le=500),
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Newest first."""
    return await list_notifications(db, unread_only=unread_only, limit=limit)


@router.post("/notifications", response_model=MarkReadResponse)
async def mark_all_notifications_read(
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Mark every unread notification as read in one batch."""
    updated = await mark_all_read(db)
    return MarkReadResponse(updated=updated)


@router.post("/notifications/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: uuid.UUID,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    return await mark_read(db, notification_id)
