"""Shared helpers for storefront tests: bearer tokens and seeded rows."""

import uuid
from decimal import Decimal

import pytest
import pytest_asyncio
from libs.auth.tokens import create_access_token
from tests.factories import (
    ProductFactory,
    ProductImageFactory,
    ProductVariantFactory,
    UserProfileFactory,
)

SHIPPING_ADDRESS = {
    "fullName": "Sara Ahmed",
    "phone": "+966500000000",
    "address": "King Fahd Road 12",
    "city": "Riyadh",
    "postalCode": "12211",
}


def bearer(user_id: str, **claims) -> dict:
    """Authorization header carrying a freshly signed token for ``user_id``."""
    return {"Authorization": f"Bearer {create_access_token(user_id, **claims)}"}


@pytest.fixture
def shopper_id() -> str:
    return f"shopper-{uuid.uuid4().hex[:8]}"


@pytest.fixture
def shopper_headers(shopper_id) -> dict:
    return bearer(shopper_id, email=f"{shopper_id}@test.com", name="Sara Ahmed")


@pytest_asyncio.fixture
async def admin_user(db_session):
    """An admin profile committed to the database."""
    profile = UserProfileFactory.create(
        id=f"admin-{uuid.uuid4().hex[:8]}", is_admin=True, full_name="Store Admin"
    )
    db_session.add(profile)
    await db_session.commit()
    return profile


@pytest.fixture
def admin_headers(admin_user) -> dict:
    return bearer(admin_user.id, email=admin_user.email)


async def make_product(db, *, images: bool = True, **overrides):
    """Insert a simple (non-variant) product and return it."""
    product = ProductFactory.create(**overrides)
    if images:
        product.images = [ProductImageFactory.create(product_id=product.id)]
    db.add(product)
    await db.commit()
    return product


async def make_variant_product(db, *, stocks=(3, 4), price=Decimal("150.00"), **overrides):
    """Insert a product with one variant per entry in ``stocks``."""
    product = ProductFactory.create(
        price=price, has_variants=True, stock=0, **overrides
    )
    sizes = ["S", "M", "L", "XL"]
    product.variants = [
        ProductVariantFactory.create(
            product_id=product.id,
            size_code=sizes[i],
            sku=f"{product.sku}-BLA-{sizes[i]}",
            stock=stock,
        )
        for i, stock in enumerate(stocks)
    ]
    product.images = [ProductImageFactory.create(product_id=product.id)]
    db.add(product)
    await db.commit()
    return product
