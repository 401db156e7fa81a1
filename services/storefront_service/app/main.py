"""FastAPI application for the Storefront Service."""

from fastapi import FastAPI
from libs.common.errors import add_exception_handlers
from libs.common.middleware import add_cors_middleware, add_observability_middleware
from libs.common.rate_limit import add_rate_limiting
from services.storefront_service.routers import (
    admin_catalog_router,
    admin_dashboard_router,
    admin_notifications_router,
    admin_orders_router,
    admin_settings_router,
    cart_router,
    catalog_router,
    checkout_router,
    messages_router,
    orders_router,
    users_router,
)


def create_app() -> FastAPI:
    """Create and configure the Storefront Service FastAPI app."""
    app = FastAPI(
        title="Otaku Store API",
        version="0.1.0",
        description="Anime merchandise storefront - catalog, cart, checkout, orders and admin.",
    )

    # Rate limiter state (checkout endpoint)
    add_rate_limiting(app)

    # Structured logging + request tracing, then CORS as the outermost layer
    add_observability_middleware(app)
    add_cors_middleware(app)

    # Every error leaves as {"error": message}
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "storefront"}

    # Public store routes (catalog, cart, checkout, orders, profile, messages)
    app.include_router(catalog_router, prefix="/api")
    app.include_router(cart_router, prefix="/api")
    app.include_router(checkout_router, prefix="/api")
    app.include_router(orders_router, prefix="/api")
    app.include_router(users_router, prefix="/api")
    app.include_router(messages_router, prefix="/api")

    # Admin routes (orders, catalog, dashboard, notifications, settings)
    app.include_router(admin_orders_router, prefix="/api/admin")
    app.include_router(admin_catalog_router, prefix="/api/admin")
    app.include_router(admin_dashboard_router, prefix="/api/admin")
    app.include_router(admin_notifications_router, prefix="/api/admin")
    app.include_router(admin_settings_router, prefix="/api/admin")

    return app


app = create_app()
