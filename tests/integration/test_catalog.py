"""Integration tests for the public catalog endpoints."""

from decimal import Decimal

import pytest
from tests.conftest import make_product, make_variant_product
from tests.factories import CategoryFactory


async def _seed_catalog(db):
    figures = CategoryFactory.create(slug="figures", name="Figures", sort_order=1)
    plush = CategoryFactory.create(slug="plush", name="Plush", sort_order=2)
    archived = CategoryFactory.create(slug="archived", is_active=False)
    db.add_all([figures, plush, archived])
    await db.commit()

    await make_product(
        db,
        slug="gojo-figure",
        name="Gojo Satoru Figure",
        category_id=figures.id,
        price=Decimal("899.00"),
        sale_price=Decimal("799.00"),
        is_featured=True,
        is_on_sale=True,
        tags=["jujutsu kaisen", "gojo"],
    )
    await make_product(
        db,
        slug="luffy-figure",
        name="Luffy Gear 5",
        category_id=figures.id,
        price=Decimal("450.00"),
        stock=0,
    )
    await make_product(
        db,
        slug="pikachu-plush",
        name="Pikachu Plush",
        category_id=plush.id,
        price=Decimal("95.00"),
        is_new_arrival=True,
    )
    await make_product(db, slug="hidden-item", name="Hidden", is_active=False)
    return figures, plush


def _slugs(response) -> set[str]:
    return {item["slug"] for item in response.json()["items"]}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_categories_only_active_in_order(client, db_session):
    await _seed_catalog(db_session)

    response = await client.get("/api/categories")

    assert response.status_code == 200
    assert [c["slug"] for c in response.json()] == ["figures", "plush"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_get_category_by_slug(client, db_session):
    await _seed_catalog(db_session)

    assert (await client.get("/api/categories/plush")).status_code == 200
    missing = await client.get("/api/categories/archived")
    assert missing.status_code == 404
    assert missing.json() == {"error": "Category not found"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_products_hides_inactive(client, db_session):
    await _seed_catalog(db_session)

    response = await client.get("/api/products")

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 3
    assert data["page"] == 1
    assert data["total_pages"] == 1
    assert "hidden-item" not in _slugs(response)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_filter_by_category_slug(client, db_session):
    await _seed_catalog(db_session)

    response = await client.get("/api/products", params={"category": "figures"})
    assert _slugs(response) == {"gojo-figure", "luffy-figure"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_filter_flags(client, db_session):
    await _seed_catalog(db_session)

    featured = await client.get("/api/products", params={"featured": "true"})
    assert _slugs(featured) == {"gojo-figure"}

    new_arrivals = await client.get("/api/products", params={"new_arrival": "true"})
    assert _slugs(new_arrivals) == {"pikachu-plush"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_filter_in_stock(client, db_session):
    await _seed_catalog(db_session)
    await make_variant_product(db_session, slug="hoodie", stocks=(0, 2))
    await make_variant_product(db_session, slug="sold-out-tee", stocks=(0, 0))

    in_stock = await client.get("/api/products", params={"in_stock": "true"})
    assert _slugs(in_stock) == {"gojo-figure", "pikachu-plush", "hoodie"}

    out_of_stock = await client.get("/api/products", params={"in_stock": "false"})
    assert _slugs(out_of_stock) == {"luffy-figure", "sold-out-tee"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_filter_price_range_uses_sale_price(client, db_session):
    await _seed_catalog(db_session)

    response = await client.get(
        "/api/products", params={"min_price": "400", "max_price": "800"}
    )
    # Gojo is 899 but on sale for 799
    assert _slugs(response) == {"gojo-figure", "luffy-figure"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_search_matches_name_and_tags(client, db_session):
    await _seed_catalog(db_session)

    by_name = await client.get("/api/products", params={"search": "pikachu"})
    assert _slugs(by_name) == {"pikachu-plush"}

    by_tag = await client.get("/api/products", params={"search": "jujutsu"})
    assert _slugs(by_tag) == {"gojo-figure"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_pagination(client, db_session):
    await _seed_catalog(db_session)

    response = await client.get("/api/products", params={"page": 2, "page_size": 2})

    data = response.json()
    assert data["total"] == 3
    assert data["total_pages"] == 2
    assert len(data["items"]) == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_product_detail(client, db_session):
    figures, _ = await _seed_catalog(db_session)

    response = await client.get("/api/products/gojo-figure")

    assert response.status_code == 200, response.text
    data = response.json()
    assert Decimal(data["effective_price"]) == Decimal("799.00")
    assert data["available_stock"] == 10
    assert data["category"]["slug"] == "figures"
    assert data["variants"] == []
    assert len(data["images"]) == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_variant_product_detail_sums_stock(client, db_session):
    await make_variant_product(db_session, slug="hoodie", stocks=(3, 4))

    response = await client.get("/api/products/hoodie")

    data = response.json()
    assert data["has_variants"] is True
    assert data["available_stock"] == 7
    assert len(data["variants"]) == 2


@pytest.mark.asyncio
@pytest.mark.integration
async def test_inactive_product_detail_is_404(client, db_session):
    await _seed_catalog(db_session)

    response = await client.get("/api/products/hidden-item")
    assert response.status_code == 404
