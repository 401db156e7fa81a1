"""Storefront cart router: per-user cart lines."""

import uuid

from fastapi import APIRouter, Depends
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.currency import ZERO
from libs.common.errors import ConflictError, NotFoundError, ValidationError
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.storefront_service.models import CartItem, Product
from services.storefront_service.schemas import (
    CartItemCreate,
    CartItemResponse,
    CartItemUpdate,
    CartResponse,
)
from services.storefront_service.services.pricing import (
    effective_unit_price,
    line_total,
)
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

router = APIRouter(tags=["cart"])
logger = get_logger(__name__)


# ============================================================================
# CART HELPERS
# ============================================================================


def line_available_stock(product: Product, variant) -> int:
    if product.has_variants and variant is not None:
        return variant.stock
    return product.stock


async def load_cart_items(db: AsyncSession, user_id: str) -> list[CartItem]:
    query = (
        select(CartItem)
        .where(CartItem.user_id == user_id)
        .order_by(CartItem.created_at)
        .options(
            selectinload(CartItem.product).selectinload(Product.images),
            selectinload(CartItem.product).selectinload(Product.variants),
            selectinload(CartItem.variant),
        )
        .execution_options(populate_existing=True)
    )
    result = await db.execute(query)
    return list(result.scalars().all())


async def build_cart_response(db: AsyncSession, user_id: str) -> CartResponse:
    """Enrich cart lines with live product data and a subtotal."""
    items = await load_cart_items(db, user_id)

    enriched_items = []
    subtotal = ZERO
    for item in items:
        product = item.product
        variant = item.variant
        unit_price = effective_unit_price(product.price, product.sale_price)
        total = line_total(unit_price, item.quantity)
        subtotal += total

        enriched_items.append(
            CartItemResponse(
                id=item.id,
                product_id=item.product_id,
                variant_id=item.variant_id,
                quantity=item.quantity,
                color_name=item.color_name,
                size_name=item.size_name,
                product_name=product.name,
                product_slug=product.slug,
                product_image=product.primary_image_url,
                sku=variant.sku if variant else product.sku,
                unit_price=unit_price,
                line_total=total,
                available_stock=line_available_stock(product, variant),
            )
        )

    return CartResponse(
        items=enriched_items,
        item_count=sum(item.quantity for item in items),
        subtotal=subtotal,
    )


async def get_cart_item_or_404(
    db: AsyncSession, item_id: uuid.UUID, user_id: str
) -> CartItem:
    query = (
        select(CartItem)
        .where(CartItem.id == item_id, CartItem.user_id == user_id)
        .options(
            selectinload(CartItem.product).selectinload(Product.variants),
            selectinload(CartItem.variant),
        )
    )
    result = await db.execute(query)
    item = result.scalar_one_or_none()
    if not item:
        raise NotFoundError("Cart item not found")
    return item


# ============================================================================
# CART ENDPOINTS
# ============================================================================


@router.get("/cart", response_model=CartResponse)
async def get_cart(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Get current cart."""
    return await build_cart_response(db, current_user.user_id)


@router.post("/cart/items", response_model=CartResponse)
async def add_to_cart(
    item_in: CartItemCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Add item to cart (merges with an existing line for the same variant)."""
    query = (
        select(Product)
        .where(Product.id == item_in.product_id)
        .options(selectinload(Product.variants))
    )
    result = await db.execute(query)
    product = result.scalar_one_or_none()

    if not product:
        raise NotFoundError("Product not found")
    if not product.is_active:
        raise ValidationError("Product is not available")

    variant = None
    if item_in.variant_id is not None:
        variant = product.find_variant(item_in.variant_id)
        if variant is None:
            raise NotFoundError("Product variant not found")
    elif product.has_variants:
        raise ValidationError("Please choose a variant for this product")

    available = line_available_stock(product, variant)

    existing_query = select(CartItem).where(
        CartItem.user_id == current_user.user_id,
        CartItem.product_id == product.id,
        (
            CartItem.variant_id == item_in.variant_id
            if item_in.variant_id is not None
            else CartItem.variant_id.is_(None)
        ),
    )
    existing_result = await db.execute(existing_query)
    existing_item = existing_result.scalar_one_or_none()

    new_quantity = item_in.quantity + (existing_item.quantity if existing_item else 0)
    if new_quantity > available:
        raise ConflictError(f"Only {available} available")

    if existing_item:
        existing_item.quantity = new_quantity
        if item_in.color_name:
            existing_item.color_name = item_in.color_name
        if item_in.size_name:
            existing_item.size_name = item_in.size_name
    else:
        db.add(
            CartItem(
                user_id=current_user.user_id,
                product_id=product.id,
                variant_id=item_in.variant_id,
                quantity=item_in.quantity,
                color_name=item_in.color_name,
                size_name=item_in.size_name,
            )
        )

    await db.commit()
    return await build_cart_response(db, current_user.user_id)


@router.patch("/cart/items/{item_id}", response_model=CartResponse)
async def update_cart_item(
    item_id: uuid.UUID,
    item_in: CartItemUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Update cart item quantity."""
    item = await get_cart_item_or_404(db, item_id, current_user.user_id)

    available = line_available_stock(item.product, item.variant)
    if item_in.quantity > available:
        raise ConflictError(f"Only {available} available")

    item.quantity = item_in.quantity
    await db.commit()
    return await build_cart_response(db, current_user.user_id)


@router.delete("/cart/items/{item_id}", response_model=CartResponse)
async def remove_cart_item(
    item_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Remove item from cart."""
    item = await get_cart_item_or_404(db, item_id, current_user.user_id)
    await db.delete(item)
    await db.commit()
    return await build_cart_response(db, current_user.user_id)


@router.delete("/cart", response_model=CartResponse)
async def clear_cart(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Remove every line from the cart."""
    await db.execute(delete(CartItem).where(CartItem.user_id == current_user.user_id))
    await db.commit()
    logger.info("Cleared cart for user %s", current_user.user_id)
    return CartResponse()
