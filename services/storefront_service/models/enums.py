"""Enum definitions for storefront models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# Orders in these states can no longer be cancelled
NON_CANCELLABLE_STATUSES = frozenset({OrderStatus.SHIPPED, OrderStatus.DELIVERED})

# Counted as "pending" on the admin dashboard
OPEN_ORDER_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.PROCESSING})

# Forward-only moves an admin may make; cancellation only before shipment
ORDER_STATUS_TRANSITIONS = {
    OrderStatus.PENDING: frozenset(
        {
            OrderStatus.PROCESSING,
            OrderStatus.SHIPPED,
            OrderStatus.DELIVERED,
            OrderStatus.CANCELLED,
        }
    ),
    OrderStatus.PROCESSING: frozenset(
        {OrderStatus.SHIPPED, OrderStatus.DELIVERED, OrderStatus.CANCELLED}
    ),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


class PaymentMethod(str, enum.Enum):
    CASH_ON_DELIVERY = "cash_on_delivery"
    CREDIT_CARD = "credit_card"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class NotificationType(str, enum.Enum):
    NEW_ORDER = "new_order"
    ORDER_CANCELLED = "order_cancelled"


class AuditEntityType(str, enum.Enum):
    PRODUCT = "product"
    CATEGORY = "category"
    ORDER = "order"
    SETTINGS = "settings"
