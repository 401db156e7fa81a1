"""Store settings record with environment-configured fallbacks."""

from decimal import Decimal

from libs.common.config import get_settings
from libs.common.logging import get_logger
from services.storefront_service.models import StoreSettings
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

SETTINGS_ROW_ID = 1


def default_store_settings() -> StoreSettings:
    """Transient settings object built from DEFAULT_* configuration."""
    config = get_settings()
    return StoreSettings(
        id=SETTINGS_ROW_ID,
        shipping_cost=config.DEFAULT_SHIPPING_COST,
        tax_rate=config.DEFAULT_TAX_RATE,
        currency=config.DEFAULT_CURRENCY,
    )


async def get_store_settings(db: AsyncSession) -> StoreSettings:
    """Return the settings row, or the fallback defaults when it is absent."""
    result = await db.execute(
        select(StoreSettings).where(StoreSettings.id == SETTINGS_ROW_ID)
    )
    settings = result.scalar_one_or_none()
    if settings is None:
        logger.debug("No store settings row, using defaults")
        return default_store_settings()
    return settings


async def upsert_store_settings(
    db: AsyncSession,
    *,
    shipping_cost: Decimal,
    tax_rate: Decimal,
    currency: str,
) -> tuple[StoreSettings, dict]:
    """Create or update the settings row. Returns ``(settings, old_values)``.

    The caller commits.
    """
    result = await db.execute(
        select(StoreSettings)
        .where(StoreSettings.id == SETTINGS_ROW_ID)
        .with_for_update()
    )
    settings = result.scalar_one_or_none()
    if settings is None:
        current = default_store_settings()
        settings = StoreSettings(id=SETTINGS_ROW_ID)
        db.add(settings)
    else:
        current = settings

    old_values = {
        "shipping_cost": str(current.shipping_cost),
        "tax_rate": str(current.tax_rate),
        "currency": current.currency,
    }

    settings.shipping_cost = shipping_cost
    settings.tax_rate = tax_rate
    settings.currency = currency.upper()
    await db.flush()
    return settings, old_values
