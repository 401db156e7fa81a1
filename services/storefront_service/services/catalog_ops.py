"""Admin catalog operations: product variants/images and category counters."""

import uuid
from typing import Iterable, Optional

from libs.common.errors import NotFoundError, ValidationError
from libs.common.logging import get_logger
from services.storefront_service.models import (
    Category,
    Product,
    ProductImage,
    ProductVariant,
)
from services.storefront_service.schemas import ProductImageCreate, ProductVariantCreate
from services.storefront_service.services.pricing import (
    DEFAULT_BASE_SKU,
    build_variant_sku,
)
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


def variant_stock_total():
    """Correlated SUM(variant.stock) for the enclosing Product row."""
    return (
        select(func.coalesce(func.sum(ProductVariant.stock), 0))
        .where(ProductVariant.product_id == Product.id)
        .correlate(Product)
        .scalar_subquery()
    )


def in_stock_clause(in_stock: bool = True):
    """SQL filter on the available stock of a product."""
    variant_stock = variant_stock_total()
    if in_stock:
        return (Product.has_variants.is_(True) & (variant_stock > 0)) | (
            Product.has_variants.is_(False) & (Product.stock > 0)
        )
    return (Product.has_variants.is_(True) & (variant_stock <= 0)) | (
        Product.has_variants.is_(False) & (Product.stock <= 0)
    )


def effective_price_column():
    return func.coalesce(Product.sale_price, Product.price)


async def get_category_or_404(db: AsyncSession, category_id: uuid.UUID) -> Category:
    result = await db.execute(select(Category).where(Category.id == category_id))
    category = result.scalar_one_or_none()
    if not category:
        raise NotFoundError("Category not found")
    return category


async def adjust_products_count(
    db: AsyncSession, category_id: Optional[uuid.UUID], delta: int
) -> None:
    """Move the denormalised ``products_count`` of a category by ``delta``."""
    if category_id is None or delta == 0:
        return
    category = await get_category_or_404(db, category_id)
    category.products_count = max(0, (category.products_count or 0) + delta)


def build_variants(
    base_sku: Optional[str], variants_in: Iterable[ProductVariantCreate]
) -> list[ProductVariant]:
    """Create variant rows; missing SKUs are derived from colour/size codes."""
    variants = []
    seen_skus: set[str] = set()
    for variant_in in variants_in:
        sku = variant_in.sku or build_variant_sku(
            base_sku, variant_in.color_code, variant_in.size_code
        )
        if sku in seen_skus:
            raise ValidationError(f"Duplicate variant SKU: {sku}")
        seen_skus.add(sku)
        variants.append(
            ProductVariant(
                color_code=variant_in.color_code,
                size_code=variant_in.size_code,
                sku=sku,
                stock=variant_in.stock,
            )
        )
    return variants


def build_images(images_in: Iterable[ProductImageCreate]) -> list[ProductImage]:
    images = [
        ProductImage(
            image_url=image_in.image_url,
            alt_text=image_in.alt_text,
            sort_order=image_in.sort_order if image_in.sort_order else index,
            is_primary=image_in.is_primary,
        )
        for index, image_in in enumerate(images_in)
    ]
    # Exactly one primary image when any exist
    if images and not any(image.is_primary for image in images):
        images[0].is_primary = True
    return images


async def ensure_unique_slug(
    db: AsyncSession, model, slug: str, *, exclude_id: Optional[uuid.UUID] = None
) -> None:
    query = select(model.id).where(model.slug == slug)
    if exclude_id is not None:
        query = query.where(model.id != exclude_id)
    result = await db.execute(query)
    if result.first() is not None:
        raise ValidationError(f"Slug '{slug}' is already in use")


def product_snapshot(product: Product) -> dict:
    """JSON-safe subset of a product for the audit log."""
    return {
        "name": product.name,
        "slug": product.slug,
        "price": str(product.price),
        "sale_price": str(product.sale_price) if product.sale_price is not None else None,
        "stock": product.stock,
        "is_active": product.is_active,
        "category_id": str(product.category_id) if product.category_id else None,
    }


async def create_product(
    db: AsyncSession, *, data: dict, variants_in, images_in
) -> Product:
    """Insert a product with its variants and images. The caller commits."""
    await ensure_unique_slug(db, Product, data["slug"])
    if data.get("category_id") is not None:
        await get_category_or_404(db, data["category_id"])

    data["sku"] = data.get("sku") or DEFAULT_BASE_SKU
    product = Product(**data)
    product.variants = build_variants(product.sku, variants_in)
    product.images = build_images(images_in)
    if product.variants:
        product.has_variants = True
    db.add(product)

    await adjust_products_count(db, product.category_id, +1)
    await db.flush()
    logger.info(
        "Created product %s (%d variants)", product.slug, len(product.variants)
    )
    return product


def sync_variants(product: Product, variants_in) -> None:
    """Replace the variant set, keeping rows (and ids) whose SKU survives."""
    existing = {variant.sku: variant for variant in product.variants}
    synced = []
    for variant in build_variants(product.sku, variants_in):
        current = existing.get(variant.sku)
        if current is None:
            synced.append(variant)
            continue
        current.color_code = variant.color_code
        current.size_code = variant.size_code
        current.stock = variant.stock
        synced.append(current)
    product.variants = synced
    product.has_variants = bool(synced)


async def update_product(
    db: AsyncSession,
    *,
    product: Product,
    data: dict,
    variants_in=None,
    images_in=None,
) -> Product:
    """Apply a partial update; given variants/images replace the current sets."""
    if "slug" in data and data["slug"] != product.slug:
        await ensure_unique_slug(db, Product, data["slug"], exclude_id=product.id)

    old_category_id = product.category_id
    if "category_id" in data and data["category_id"] != old_category_id:
        if data["category_id"] is not None:
            await get_category_or_404(db, data["category_id"])
        await adjust_products_count(db, old_category_id, -1)
        await adjust_products_count(db, data["category_id"], +1)

    for field, value in data.items():
        setattr(product, field, value)

    if variants_in is not None:
        sync_variants(product, variants_in)
    if images_in is not None:
        product.images = build_images(images_in)

    await db.flush()
    return product


async def delete_product(db: AsyncSession, *, product: Product) -> None:
    """Hard delete; order items keep their snapshots. The caller commits."""
    await adjust_products_count(db, product.category_id, -1)
    await db.delete(product)
    await db.flush()
    logger.info("Deleted product %s", product.slug)
