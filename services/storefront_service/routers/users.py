"""Users router: the caller's own profile."""

from fastapi import APIRouter, Depends
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.storefront_service.dependencies import load_profile
from services.storefront_service.models import UserProfile
from services.storefront_service.schemas import UserProfileResponse, UserProfileUpdate
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["users"])
logger = get_logger(__name__)


async def get_or_create_profile(db: AsyncSession, user: AuthUser) -> UserProfile:
    """Load the caller's profile, creating it from token claims on first use."""
    profile = await load_profile(db, user.user_id)
    if profile:
        return profile

    profile = UserProfile(id=user.user_id, email=user.email, full_name=user.name)
    db.add(profile)
    await db.commit()
    logger.info("Created profile for user %s", user.user_id)
    return profile


@router.get("/users/me", response_model=UserProfileResponse)
async def get_me(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await get_or_create_profile(db, current_user)


@router.patch("/users/me", response_model=UserProfileResponse)
async def update_me(
    profile_in: UserProfileUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Update name/phone. The admin flag is never writable here."""
    profile = await get_or_create_profile(db, current_user)
    for field, value in profile_in.model_dump(exclude_unset=True).items():
        setattr(profile, field, value)
    await db.commit()
    return profile
