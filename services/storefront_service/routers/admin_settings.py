"""Admin store settings router."""

from fastapi import APIRouter, Depends
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.storefront_service.dependencies import require_admin
from services.storefront_service.models import AuditEntityType
from services.storefront_service.routers._helpers import log_audit
from services.storefront_service.schemas import (
    StoreSettingsResponse,
    StoreSettingsUpdate,
)
from services.storefront_service.services.settings_ops import (
    get_store_settings,
    upsert_store_settings,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["admin-settings"])


@router.get("/settings", response_model=StoreSettingsResponse)
async def get_settings_record(
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Current settings (defaults when none were saved)."""
    return await get_store_settings(db)


@router.put("/settings", response_model=StoreSettingsResponse)
async def update_settings_record(
    settings_in: StoreSettingsUpdate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    settings, old_values = await upsert_store_settings(
        db,
        shipping_cost=settings_in.shipping_cost,
        tax_rate=settings_in.tax_rate,
        currency=settings_in.currency,
    )
    await log_audit(
        db,
        AuditEntityType.SETTINGS,
        settings.id,
        "updated",
        current_user.user_id,
        old_value=old_values,
        new_value=settings_in.model_dump(mode="json"),
    )
    await db.commit()
    return settings
