"""Storefront catalog router: categories and products."""

import uuid
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query
from libs.common.errors import NotFoundError
from libs.db.session import get_async_db
from services.storefront_service.models import Category, Product
from services.storefront_service.routers._helpers import paginate
from services.storefront_service.schemas import (
    CategoryResponse,
    ProductDetail,
    ProductListResponse,
    ProductResponse,
)
from services.storefront_service.services.catalog_ops import (
    effective_price_column,
    in_stock_clause,
)
from sqlalchemy import String, cast, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

router = APIRouter(tags=["catalog"])


# ============================================================================
# CATALOG - CATEGORIES
# ============================================================================


@router.get("/categories", response_model=list[CategoryResponse])
async def list_categories(
    db: AsyncSession = Depends(get_async_db),
):
    """List all active categories in display order."""
    query = (
        select(Category)
        .where(Category.is_active.is_(True))
        .order_by(Category.sort_order, Category.name)
    )
    result = await db.execute(query)
    return result.scalars().all()


@router.get("/categories/{slug}", response_model=CategoryResponse)
async def get_category(
    slug: str,
    db: AsyncSession = Depends(get_async_db),
):
    """Get category by slug."""
    query = select(Category).where(Category.slug == slug, Category.is_active.is_(True))
    result = await db.execute(query)
    category = result.scalar_one_or_none()
    if not category:
        raise NotFoundError("Category not found")
    return category


# ============================================================================
# CATALOG - PRODUCTS
# ============================================================================


def apply_product_filters(
    query,
    *,
    category: Optional[str] = None,
    category_id: Optional[uuid.UUID] = None,
    featured: Optional[bool] = None,
    new_arrival: Optional[bool] = None,
    best_seller: Optional[bool] = None,
    on_sale: Optional[bool] = None,
    in_stock: Optional[bool] = None,
    search: Optional[str] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
):
    """Shared by the public and admin product listings."""
    if category:
        query = query.join(Category, Product.category_id == Category.id).where(
            Category.slug == category
        )
    if category_id:
        query = query.where(Product.category_id == category_id)

    if featured is not None:
        query = query.where(Product.is_featured.is_(featured))
    if new_arrival is not None:
        query = query.where(Product.is_new_arrival.is_(new_arrival))
    if best_seller is not None:
        query = query.where(Product.is_best_seller.is_(best_seller))
    if on_sale is not None:
        query = query.where(Product.is_on_sale.is_(on_sale))
    if in_stock is not None:
        query = query.where(in_stock_clause(in_stock))

    if search:
        search_term = f"%{search.strip()}%"
        query = query.where(
            or_(
                Product.name.ilike(search_term),
                Product.name_ar.ilike(search_term),
                Product.description.ilike(search_term),
                Product.description_ar.ilike(search_term),
                cast(Product.tags, String).ilike(search_term),
                cast(Product.tags_ar, String).ilike(search_term),
            )
        )

    if min_price is not None:
        query = query.where(effective_price_column() >= min_price)
    if max_price is not None:
        query = query.where(effective_price_column() <= max_price)

    return query


@router.get("/products", response_model=ProductListResponse)
async def list_products(
    category: Optional[str] = Query(None, description="Category slug"),
    category_id: Optional[uuid.UUID] = None,
    featured: Optional[bool] = None,
    new_arrival: Optional[bool] = None,
    best_seller: Optional[bool] = None,
    on_sale: Optional[bool] = None,
    in_stock: Optional[bool] = None,
    search: Optional[str] = None,
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_async_db),
):
    """Browse active products with filtering and pagination."""
    query = select(Product).where(Product.is_active.is_(True))
    query = apply_product_filters(
        query,
        category=category,
        category_id=category_id,
        featured=featured,
        new_arrival=new_arrival,
        best_seller=best_seller,
        on_sale=on_sale,
        in_stock=in_stock,
        search=search,
        min_price=min_price,
        max_price=max_price,
    )
    query = query.order_by(Product.created_at.desc(), Product.name).options(
        selectinload(Product.images), selectinload(Product.variants)
    )

    products, total, total_pages = await paginate(
        db, query, page=page, page_size=page_size
    )
    return ProductListResponse(
        items=[ProductResponse.model_validate(p) for p in products],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages,
    )


@router.get("/products/{slug}", response_model=ProductDetail)
async def get_product(
    slug: str,
    db: AsyncSession = Depends(get_async_db),
):
    """Get product detail with variants, images and category."""
    query = (
        select(Product)
        .where(Product.slug == slug, Product.is_active.is_(True))
        .options(
            selectinload(Product.variants),
            selectinload(Product.images),
            selectinload(Product.category),
        )
    )
    result = await db.execute(query)
    product = result.scalar_one_or_none()
    if not product:
        raise NotFoundError("Product not found")
    return ProductDetail.model_validate(product)
