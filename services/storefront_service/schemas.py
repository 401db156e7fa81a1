"""Pydantic schemas for the storefront service."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel
from services.storefront_service.models import (
    NotificationType,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)


class CamelRequest(BaseModel):
    """Request body accepting both snake_case and camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# USER SCHEMAS
# ============================================================================


class UserProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: Optional[str]
    full_name: Optional[str]
    phone: Optional[str]
    is_admin: bool
    created_at: datetime


class UserProfileUpdate(CamelRequest):
    full_name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)


# ============================================================================
# CATEGORY SCHEMAS
# ============================================================================


class CategoryBase(CamelRequest):
    name: str = Field(..., min_length=1, max_length=100)
    name_ar: Optional[str] = Field(None, max_length=100)
    slug: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    description_ar: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=512)
    sort_order: int = 0
    is_active: bool = True


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(CamelRequest):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    name_ar: Optional[str] = Field(None, max_length=100)
    slug: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    description_ar: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=512)
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None


class CategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    name_ar: Optional[str]
    slug: str
    description: Optional[str]
    description_ar: Optional[str]
    image_url: Optional[str]
    sort_order: int
    is_active: bool
    products_count: int
    created_at: datetime
    updated_at: datetime


# ============================================================================
# PRODUCT SCHEMAS
# ============================================================================


class ProductVariantCreate(CamelRequest):
    color_code: Optional[str] = Field(None, max_length=50)
    size_code: Optional[str] = Field(None, max_length=50)
    sku: Optional[str] = Field(None, max_length=100)  # Generated when omitted
    stock: int = Field(0, ge=0)


class ProductVariantResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    color_code: Optional[str]
    size_code: Optional[str]
    sku: str
    stock: int


class ProductImageCreate(CamelRequest):
    image_url: str = Field(..., min_length=1, max_length=512)
    alt_text: Optional[str] = Field(None, max_length=255)
    sort_order: int = 0
    is_primary: bool = False


class ProductImageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    image_url: str
    alt_text: Optional[str]
    sort_order: int
    is_primary: bool


class ProductBase(CamelRequest):
    name: str = Field(..., min_length=1, max_length=255)
    name_ar: Optional[str] = Field(None, max_length=255)
    slug: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    description_ar: Optional[str] = None
    detailed_description: Optional[str] = None
    detailed_description_ar: Optional[str] = None
    price: Decimal = Field(..., ge=0)
    sale_price: Optional[Decimal] = Field(None, ge=0)
    sku: Optional[str] = Field(None, max_length=100)
    stock: int = Field(0, ge=0)
    category_id: Optional[uuid.UUID] = None
    tags: list[str] = Field(default_factory=list)
    tags_ar: list[str] = Field(default_factory=list)
    is_featured: bool = False
    is_new_arrival: bool = False
    is_best_seller: bool = False
    is_on_sale: bool = False
    is_active: bool = True
    has_variants: bool = False
    weight: Optional[Decimal] = Field(None, ge=0)


class ProductCreate(ProductBase):
    variants: list[ProductVariantCreate] = Field(default_factory=list)
    images: list[ProductImageCreate] = Field(default_factory=list)


class ProductUpdate(CamelRequest):
    """Partial update; ``variants``/``images`` replace the existing sets."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    name_ar: Optional[str] = Field(None, max_length=255)
    slug: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    description_ar: Optional[str] = None
    detailed_description: Optional[str] = None
    detailed_description_ar: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    sale_price: Optional[Decimal] = Field(None, ge=0)
    sku: Optional[str] = Field(None, max_length=100)
    stock: Optional[int] = Field(None, ge=0)
    category_id: Optional[uuid.UUID] = None
    tags: Optional[list[str]] = None
    tags_ar: Optional[list[str]] = None
    is_featured: Optional[bool] = None
    is_new_arrival: Optional[bool] = None
    is_best_seller: Optional[bool] = None
    is_on_sale: Optional[bool] = None
    is_active: Optional[bool] = None
    has_variants: Optional[bool] = None
    weight: Optional[Decimal] = Field(None, ge=0)
    variants: Optional[list[ProductVariantCreate]] = None
    images: Optional[list[ProductImageCreate]] = None


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    category_id: Optional[uuid.UUID]
    name: str
    name_ar: Optional[str]
    slug: str
    description: Optional[str]
    description_ar: Optional[str]
    price: Decimal
    sale_price: Optional[Decimal]
    effective_price: Decimal
    sku: str
    stock: int
    available_stock: int
    tags: list[str] = []
    tags_ar: list[str] = []
    is_featured: bool
    is_new_arrival: bool
    is_best_seller: bool
    is_on_sale: bool
    is_active: bool
    has_variants: bool
    rating: Decimal
    reviews_count: int
    created_at: datetime
    updated_at: datetime
    images: list[ProductImageResponse] = []


class ProductDetail(ProductResponse):
    """Full product detail with variants, images and category."""

    detailed_description: Optional[str]
    detailed_description_ar: Optional[str]
    weight: Optional[Decimal]
    variants: list[ProductVariantResponse] = []
    category: Optional[CategoryResponse] = None


class ProductListResponse(BaseModel):
    """Paginated product list."""

    items: list[ProductResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


# ============================================================================
# CART SCHEMAS
# ============================================================================


class CartItemCreate(CamelRequest):
    product_id: uuid.UUID
    variant_id: Optional[uuid.UUID] = None
    quantity: int = Field(1, ge=1)
    color_name: Optional[str] = Field(None, max_length=50)
    size_name: Optional[str] = Field(None, max_length=50)


class CartItemUpdate(CamelRequest):
    quantity: int = Field(..., ge=1)


class CartItemResponse(BaseModel):
    id: uuid.UUID
    product_id: uuid.UUID
    variant_id: Optional[uuid.UUID]
    quantity: int
    color_name: Optional[str]
    size_name: Optional[str]

    # Enriched from product/variant
    product_name: str
    product_slug: str
    product_image: Optional[str] = None
    sku: Optional[str] = None
    unit_price: Decimal
    line_total: Decimal
    available_stock: int


class CartResponse(BaseModel):
    items: list[CartItemResponse] = []
    item_count: int = 0
    subtotal: Decimal = Decimal("0")


# ============================================================================
# CHECKOUT SCHEMAS
# ============================================================================


class ShippingAddress(CamelRequest):
    """Shipping address snapshot copied onto the order."""

    full_name: str = Field(..., max_length=255)
    phone: str = Field(..., max_length=50)
    address: str = Field(..., max_length=500)
    city: str = Field(..., max_length=100)
    postal_code: Optional[str] = Field(None, max_length=20)

    @field_validator("full_name", "phone", "address", "city")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value


class CheckoutRequest(CamelRequest):
    shipping_address: ShippingAddress
    payment_method: PaymentMethod
    notes: Optional[str] = Field(None, max_length=1000)


class CheckoutResponse(BaseModel):
    """Returned by camelCase alias; the total is a JSON number."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    order_id: uuid.UUID
    order_number: str
    total_amount: Decimal

    @field_serializer("total_amount")
    def serialize_total(self, value: Decimal) -> float:
        return float(value)


class OrderLineCreate(CamelRequest):
    """An explicit order line; prices are always looked up server-side."""

    product_id: uuid.UUID
    variant_id: Optional[uuid.UUID] = None
    quantity: int = Field(..., ge=1)
    color: Optional[str] = Field(None, max_length=50)
    size: Optional[str] = Field(None, max_length=50)


class OrderCreateRequest(CheckoutRequest):
    items: list[OrderLineCreate] = Field(..., min_length=1)


# ============================================================================
# ORDER SCHEMAS
# ============================================================================


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    product_id: uuid.UUID
    variant_id: Optional[uuid.UUID]
    product_name: str
    product_name_ar: Optional[str]
    product_image: str
    sku: Optional[str]
    color: Optional[str]
    size: Optional[str]
    quantity: int
    unit_price: Decimal
    total_price: Decimal


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    order_number: str
    user_id: str
    status: OrderStatus
    payment_method: PaymentMethod
    payment_status: PaymentStatus

    subtotal: Decimal
    tax_amount: Decimal
    shipping_amount: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    currency: str

    shipping_address: dict
    notes: Optional[str]
    tracking_number: Optional[str]
    tracking_url: Optional[str]

    shipped_at: Optional[datetime]
    delivered_at: Optional[datetime]
    cancelled_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    items: list[OrderItemResponse] = []


class AdminOrderResponse(OrderResponse):
    admin_notes: Optional[str]


class OrderCustomer(BaseModel):
    """Contact details of the shopper who placed an order."""

    model_config = ConfigDict(from_attributes=True)

    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class AdminOrderDetailResponse(AdminOrderResponse):
    customer: Optional[OrderCustomer] = None


class OrderListResponse(BaseModel):
    """Paginated order list."""

    items: list[OrderResponse]
    total: int
    page: int
    page_size: int


class AdminOrderUpdate(CamelRequest):
    """Update order status/tracking (admin)."""

    status: Optional[OrderStatus] = None
    tracking_number: Optional[str] = Field(None, max_length=100)
    tracking_url: Optional[str] = Field(None, max_length=512)
    admin_notes: Optional[str] = None


# ============================================================================
# DASHBOARD SCHEMAS
# ============================================================================


class RecentOrder(BaseModel):
    id: uuid.UUID
    order_number: str
    customer_name: Optional[str]
    total_amount: Decimal
    status: OrderStatus
    created_at: datetime


class DashboardStats(BaseModel):
    total_revenue: Decimal
    total_sales: int
    total_users: int
    total_products: int
    pending_orders: int
    out_of_stock_products: int
    unread_notifications: int
    unread_messages: int
    recent_orders: list[RecentOrder] = []


# ============================================================================
# NOTIFICATION SCHEMAS
# ============================================================================


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    type: NotificationType
    message: str
    link: Optional[str]
    is_read: bool
    created_at: datetime


class MarkReadResponse(BaseModel):
    success: bool = True
    updated: int


# ============================================================================
# SETTINGS SCHEMAS
# ============================================================================


class StoreSettingsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    shipping_cost: Decimal
    tax_rate: Decimal
    currency: str


class StoreSettingsUpdate(CamelRequest):
    shipping_cost: Decimal = Field(..., ge=0)
    tax_rate: Decimal = Field(..., ge=0, le=1)
    currency: str = Field(..., min_length=3, max_length=3)


# ============================================================================
# MESSAGE SCHEMAS
# ============================================================================


class MessageCreate(CamelRequest):
    message: str = Field(..., min_length=1, max_length=4000)
    conversation_id: Optional[uuid.UUID] = None


class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    sender_id: str
    is_from_admin: bool
    body: str
    created_at: datetime


class MessageCreateResponse(BaseModel):
    success: bool = True
    conversation_id: uuid.UUID


class ConversationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: str
    last_message: Optional[str]
    unread_by_admin: bool
    last_message_at: Optional[datetime]
    messages: list[MessageResponse] = []
