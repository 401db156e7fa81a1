"""Storefront service models package."""

from services.storefront_service.models.catalog import (
    Category,
    Product,
    ProductImage,
    ProductVariant,
)
from services.storefront_service.models.commerce import (
    CartItem,
    Order,
    OrderItem,
    StoreAuditLog,
    StoreSettings,
)
from services.storefront_service.models.enums import (
    AuditEntityType,
    NotificationType,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from services.storefront_service.models.messaging import (
    Conversation,
    Message,
    Notification,
)
from services.storefront_service.models.users import UserProfile

__all__ = [
    "AuditEntityType",
    "CartItem",
    "Category",
    "Conversation",
    "Message",
    "Notification",
    "NotificationType",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentMethod",
    "PaymentStatus",
    "Product",
    "ProductImage",
    "ProductVariant",
    "StoreAuditLog",
    "StoreSettings",
    "UserProfile",
]
