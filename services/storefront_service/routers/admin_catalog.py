"""Admin catalog router: categories and products (with variants and images)."""

import uuid
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from libs.auth.models import AuthUser
from libs.common.errors import NotFoundError
from libs.db.session import get_async_db
from services.storefront_service.dependencies import require_admin
from services.storefront_service.models import AuditEntityType, Category, Product
from services.storefront_service.routers._helpers import log_audit, paginate
from services.storefront_service.routers.catalog import apply_product_filters
from services.storefront_service.schemas import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    ProductCreate,
    ProductDetail,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
)
from services.storefront_service.services.catalog_ops import (
    create_product,
    delete_product,
    ensure_unique_slug,
    get_category_or_404,
    product_snapshot,
    update_product,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

router = APIRouter(tags=["admin-catalog"])


# ============================================================================
# CATEGORIES
# ============================================================================


@router.get("/categories", response_model=list[CategoryResponse])
async def list_all_categories(
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """List all categories (including archived)."""
    query = select(Category).order_by(Category.sort_order, Category.name)
    result = await db.execute(query)
    return result.scalars().all()


@router.post(
    "/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED
)
async def create_category(
    category_in: CategoryCreate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Create a new category."""
    await ensure_unique_slug(db, Category, category_in.slug)

    category = Category(id=uuid.uuid4(), **category_in.model_dump())
    db.add(category)

    await log_audit(
        db,
        AuditEntityType.CATEGORY,
        category.id,
        "created",
        current_user.user_id,
        new_value=category_in.model_dump(mode="json"),
    )
    await db.commit()
    await db.refresh(category)
    return category


@router.put("/categories/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: uuid.UUID,
    category_in: CategoryUpdate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Update a category."""
    category = await get_category_or_404(db, category_id)

    update_data = category_in.model_dump(exclude_unset=True)
    if "slug" in update_data and update_data["slug"] != category.slug:
        await ensure_unique_slug(db, Category, update_data["slug"], exclude_id=category.id)

    old_values = {
        "name": category.name,
        "slug": category.slug,
        "is_active": category.is_active,
    }
    for field, value in update_data.items():
        setattr(category, field, value)

    await log_audit(
        db,
        AuditEntityType.CATEGORY,
        category.id,
        "updated",
        current_user.user_id,
        old_value=old_values,
        new_value=category_in.model_dump(mode="json", exclude_unset=True),
    )

    await db.commit()
    await db.refresh(category)
    return category


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: uuid.UUID,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Archive a category (soft delete by setting is_active=False)."""
    category = await get_category_or_404(db, category_id)

    category.is_active = False
    await log_audit(
        db, AuditEntityType.CATEGORY, category.id, "archived", current_user.user_id
    )
    await db.commit()
    return None


# ============================================================================
# PRODUCTS
# ============================================================================


async def get_product_or_404(db: AsyncSession, product_id: uuid.UUID) -> Product:
    query = (
        select(Product)
        .where(Product.id == product_id)
        .options(
            selectinload(Product.variants),
            selectinload(Product.images),
            selectinload(Product.category),
        )
        .execution_options(populate_existing=True)
    )
    result = await db.execute(query)
    product = result.scalar_one_or_none()
    if not product:
        raise NotFoundError("Product not found")
    return product


@router.get("/products", response_model=ProductListResponse)
async def list_all_products(
    category_id: Optional[uuid.UUID] = None,
    is_active: Optional[bool] = None,
    in_stock: Optional[bool] = None,
    search: Optional[str] = None,
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """List all products (including inactive)."""
    query = select(Product)
    if is_active is not None:
        query = query.where(Product.is_active.is_(is_active))
    query = apply_product_filters(
        query,
        category_id=category_id,
        in_stock=in_stock,
        search=search,
        min_price=min_price,
        max_price=max_price,
    )
    query = query.order_by(Product.created_at.desc()).options(
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


@router.post(
    "/products", response_model=ProductDetail, status_code=status.HTTP_201_CREATED
)
async def create_product_endpoint(
    product_in: ProductCreate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Create a product with variants and images."""
    product = await create_product(
        db,
        data=product_in.model_dump(exclude={"variants", "images"}),
        variants_in=product_in.variants,
        images_in=product_in.images,
    )

    await log_audit(
        db,
        AuditEntityType.PRODUCT,
        product.id,
        "created",
        current_user.user_id,
        new_value=product_snapshot(product),
    )
    await db.commit()
    return await get_product_or_404(db, product.id)


@router.get("/products/{product_id}", response_model=ProductDetail)
async def get_product_admin(
    product_id: uuid.UUID,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Get product with full details."""
    return await get_product_or_404(db, product_id)


@router.put("/products/{product_id}", response_model=ProductDetail)
async def update_product_endpoint(
    product_id: uuid.UUID,
    product_in: ProductUpdate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Update a product; ``variants``/``images`` replace the existing sets."""
    product = await get_product_or_404(db, product_id)
    old_values = product_snapshot(product)

    product = await update_product(
        db,
        product=product,
        data=product_in.model_dump(exclude_unset=True, exclude={"variants", "images"}),
        variants_in=product_in.variants,
        images_in=product_in.images,
    )

    await log_audit(
        db,
        AuditEntityType.PRODUCT,
        product.id,
        "updated",
        current_user.user_id,
        old_value=old_values,
        new_value=product_snapshot(product),
    )
    await db.commit()
    return await get_product_or_404(db, product.id)


@router.delete("/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product_endpoint(
    product_id: uuid.UUID,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Delete a product. Past orders keep their item snapshots."""
    product = await get_product_or_404(db, product_id)
    old_values = product_snapshot(product)

    await delete_product(db, product=product)
    await log_audit(
        db,
        AuditEntityType.PRODUCT,
        product_id,
        "deleted",
        current_user.user_id,
        old_value=old_values,
    )
    await db.commit()
    return None
