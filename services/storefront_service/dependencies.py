"""Request dependencies: caller profile and admin gate."""

from typing import Optional

from fastapi import Depends
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.errors import ForbiddenError
from libs.db.session import get_async_db
from services.storefront_service.models import UserProfile
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession


async def load_profile(db: AsyncSession, user_id: str) -> Optional[UserProfile]:
    result = await db.execute(select(UserProfile).where(UserProfile.id == user_id))
    return result.scalar_one_or_none()


async def is_admin_user(db: AsyncSession, user_id: str) -> bool:
    """Read the admin flag from the database (never cached)."""
    profile = await load_profile(db, user_id)
    return bool(profile and profile.is_admin)


async def require_admin(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
) -> AuthUser:
    """Require a caller whose profile carries the admin flag."""
    if not await is_admin_user(db, current_user.user_id):
        raise ForbiddenError("Forbidden: Not an admin")
    return current_user
