"""
Model factories for creating valid test data.

Every factory produces a valid, insertable SQLAlchemy model instance.
Override any field via kwargs.

Usage:
    product = ProductFactory.create(price=Decimal("100.00"), stock=5)
    db_session.add(product)
    await db_session.commit()
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _uuid() -> uuid.UUID:
    return uuid.uuid4()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _slug(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


def _unique_email() -> str:
    return f"test-{uuid.uuid4().hex[:8]}@test.com"


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class UserProfileFactory:
    @staticmethod
    def create(**overrides):
        from services.storefront_service.models import UserProfile

        defaults = {
            "id": f"user-{uuid.uuid4().hex[:8]}",
            "email": _unique_email(),
            "full_name": "Test Shopper",
            "is_admin": False,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return UserProfile(**defaults)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class CategoryFactory:
    @staticmethod
    def create(**overrides):
        from services.storefront_service.models import Category

        slug = overrides.pop("slug", _slug("category"))
        defaults = {
            "id": _uuid(),
            "name": slug.replace("-", " ").title(),
            "slug": slug,
            "sort_order": 0,
            "is_active": True,
            "products_count": 0,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Category(**defaults)


class ProductFactory:
    @staticmethod
    def create(**overrides):
        from services.storefront_service.models import Product

        slug = overrides.pop("slug", _slug("product"))
        defaults = {
            "id": _uuid(),
            "name": slug.replace("-", " ").title(),
            "slug": slug,
            "price": Decimal("100.00"),
            "sale_price": None,
            "sku": f"SKU-{uuid.uuid4().hex[:6].upper()}",
            "stock": 10,
            "tags": [],
            "tags_ar": [],
            "is_active": True,
            "has_variants": False,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Product(**defaults)


class ProductVariantFactory:
    @staticmethod
    def create(product_id=None, **overrides):
        from services.storefront_service.models import ProductVariant

        defaults = {
            "id": _uuid(),
            "product_id": product_id or _uuid(),
            "color_code": "Black",
            "size_code": "M",
            "sku": f"VAR-{uuid.uuid4().hex[:6].upper()}",
            "stock": 5,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return ProductVariant(**defaults)


class ProductImageFactory:
    @staticmethod
    def create(product_id=None, **overrides):
        from services.storefront_service.models import ProductImage

        defaults = {
            "id": _uuid(),
            "product_id": product_id or _uuid(),
            "image_url": "/images/test.jpg",
            "sort_order": 0,
            "is_primary": True,
            "created_at": _now(),
        }
        defaults.update(overrides)
        return ProductImage(**defaults)


# ---------------------------------------------------------------------------
# Commerce
# ---------------------------------------------------------------------------


class CartItemFactory:
    @staticmethod
    def create(user_id, product_id, **overrides):
        from services.storefront_service.models import CartItem

        defaults = {
            "id": _uuid(),
            "user_id": user_id,
            "product_id": product_id,
            "variant_id": None,
            "quantity": 1,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return CartItem(**defaults)


class StoreSettingsFactory:
    @staticmethod
    def create(**overrides):
        from services.storefront_service.models import StoreSettings

        defaults = {
            "id": 1,
            "shipping_cost": Decimal("25.00"),
            "tax_rate": Decimal("0.15"),
            "currency": "SAR",
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return StoreSettings(**defaults)
