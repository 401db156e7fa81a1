"""Storefront catalog models: categories, products, variants, images."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.types import JSONType
from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Integer
from sqlalchemy import Numeric, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

# ============================================================================
# CATALOG MODELS
# ============================================================================


class Category(Base):
    """Product categories (e.g., 'Figures', 'Plush', 'Apparel')."""

    __tablename__ = "categories"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    name_ar: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description_ar: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)

    sort_order: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default="true"
    )

    # Denormalized, maintained by admin product operations
    products_count: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    # Relationships
    products = relationship("Product", back_populates="category")

    def __repr__(self):
        return f"<Category {self.slug}>"


class Product(Base):
    """Products available in the store (e.g., 'Gojo Satoru 1/7 Figure')."""

    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    category_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("categories.id", ondelete="SET NULL"),
        index=True,
        nullable=True,
    )

    # Bilingual copy
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    name_ar: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description_ar: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    detailed_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    detailed_description_ar: Mapped[Optional[str]] = mapped_column(
        Text, nullable=True
    )

    # Pricing
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    sale_price: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(12, 2), nullable=True
    )

    sku: Mapped[str] = mapped_column(String(100), nullable=False)
    # Authoritative only when has_variants is False
    stock: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )

    tags: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)
    tags_ar: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)

    # Merchandising flags
    is_featured: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )
    is_new_arrival: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )
    is_best_seller: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )
    is_on_sale: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default="true"
    )

    has_variants: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )
    weight: Mapped[Optional[Decimal]] = mapped_column(Numeric(8, 3), nullable=True)

    # Review aggregates
    rating: Mapped[Decimal] = mapped_column(
        Numeric(3, 2), default=0, server_default="0"
    )
    reviews_count: Mapped[int] = mapped_column(Integer, default=0, server_default="0")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (CheckConstraint("stock >= 0", name="product_stock_non_negative"),)

    # Relationships
    category = relationship("Category", back_populates="products")
    variants = relationship(
        "ProductVariant",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductVariant.sku",
    )
    images = relationship(
        "ProductImage",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductImage.sort_order",
    )

    @property
    def effective_price(self) -> Decimal:
        """Sale price when set, otherwise the list price."""
        return self.sale_price if self.sale_price is not None else self.price

    @property
    def available_stock(self) -> int:
        """Sum of variant stock for variant products, product stock otherwise.

        Requires ``variants`` to be loaded for variant products.
        """
        if self.has_variants:
            return sum(v.stock for v in self.variants)
        return self.stock

    @property
    def primary_image_url(self) -> Optional[str]:
        if not self.images:
            return None
        primary = next((img for img in self.images if img.is_primary), self.images[0])
        return primary.image_url

    def find_variant(self, variant_id: uuid.UUID) -> Optional["ProductVariant"]:
        return next((v for v in self.variants if v.id == variant_id), None)

    def __repr__(self):
        return f"<Product {self.slug}>"


class ProductVariant(Base):
    """A colour/size combination of a product with its own stock."""

    __tablename__ = "product_variants"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("products.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    color_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    size_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    # Base SKU plus colour/size suffix, e.g. "FIG-001-RED-L"
    sku: Mapped[str] = mapped_column(String(100), nullable=False)

    stock: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        UniqueConstraint("product_id", "sku", name="unique_product_variant_sku"),
        CheckConstraint("stock >= 0", name="variant_stock_non_negative"),
    )

    # Relationships
    product = relationship("Product", back_populates="variants")

    def __repr__(self):
        return f"<ProductVariant {self.sku} stock={self.stock}>"


class ProductImage(Base):
    """Product images (URLs only)."""

    __tablename__ = "product_images"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
    )

    image_url: Mapped[str] = mapped_column(String(512), nullable=False)
    alt_text: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    is_primary: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )

    # Relationships
    product = relationship("Product", back_populates="images")

    def __repr__(self):
        return f"<ProductImage {self.id}>"
