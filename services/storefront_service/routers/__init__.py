"""Storefront service routers package."""

from services.storefront_service.routers.admin_catalog import router as admin_catalog_router
from services.storefront_service.routers.admin_dashboard import (
    router as admin_dashboard_router,
)
from services.storefront_service.routers.admin_notifications import (
    router as admin_notifications_router,
)
from services.storefront_service.routers.admin_orders import router as admin_orders_router
from services.storefront_service.routers.admin_settings import (
    router as admin_settings_router,
)
from services.storefront_service.routers.cart import router as cart_router
from services.storefront_service.routers.catalog import router as catalog_router
from services.storefront_service.routers.checkout import router as checkout_router
from services.storefront_service.routers.messages import router as messages_router
from services.storefront_service.routers.orders import router as orders_router
from services.storefront_service.routers.users import router as users_router

__all__ = [
    "admin_catalog_router",
    "admin_dashboard_router",
    "admin_notifications_router",
    "admin_orders_router",
    "admin_settings_router",
    "cart_router",
    "catalog_router",
    "checkout_router",
    "messages_router",
    "orders_router",
    "users_router",
]
