"""Integration tests for the admin endpoints."""

import uuid
from decimal import Decimal

import pytest
from services.storefront_service.models import (
    AuditEntityType,
    Category,
    Order,
    OrderStatus,
    StoreAuditLog,
)
from sqlalchemy import select
from tests.conftest import SHIPPING_ADDRESS, make_product, make_variant_product
from tests.factories import CategoryFactory, UserProfileFactory


async def _place_order(client, headers, product, quantity=1):
    await client.post(
        "/api/cart/items",
        headers=headers,
        json={"productId": str(product.id), "quantity": quantity},
    )
    response = await client.post(
        "/api/checkout",
        headers=headers,
        json={"shippingAddress": SHIPPING_ADDRESS, "paymentMethod": "cash_on_delivery"},
    )
    assert response.status_code == 200, response.text
    return response.json()


async def _audit_logs(db, entity_type):
    result = await db.execute(
        select(StoreAuditLog).where(StoreAuditLog.entity_type == entity_type)
    )
    return result.scalars().all()


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_category_lifecycle(client, db_session, admin_headers):
    created = await client.post(
        "/api/admin/categories",
        headers=admin_headers,
        json={"name": "Figures", "nameAr": "مجسمات", "slug": "figures", "sortOrder": 1},
    )
    assert created.status_code == 201, created.text
    category_id = created.json()["id"]
    assert created.json()["name_ar"] == "مجسمات"

    duplicate = await client.post(
        "/api/admin/categories",
        headers=admin_headers,
        json={"name": "Other", "slug": "figures"},
    )
    assert duplicate.status_code == 400

    updated = await client.put(
        f"/api/admin/categories/{category_id}",
        headers=admin_headers,
        json={"name": "Scale Figures"},
    )
    assert updated.status_code == 200
    assert updated.json()["name"] == "Scale Figures"

    archived = await client.delete(
        f"/api/admin/categories/{category_id}", headers=admin_headers
    )
    assert archived.status_code == 204

    public = await client.get("/api/categories")
    assert public.json() == []
    admin_list = await client.get("/api/admin/categories", headers=admin_headers)
    assert len(admin_list.json()) == 1

    logs = await _audit_logs(db_session, AuditEntityType.CATEGORY)
    assert sorted(log.action for log in logs) == ["archived", "created", "updated"]


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_product_with_variants(client, db_session, admin_headers):
    category = CategoryFactory.create(slug="apparel")
    db_session.add(category)
    await db_session.commit()

    response = await client.post(
        "/api/admin/products",
        headers=admin_headers,
        json={
            "name": "Survey Corps Hoodie",
            "slug": "survey-corps-hoodie",
            "price": "220.00",
            "sku": "APP-AOT-01",
            "categoryId": str(category.id),
            "variants": [
                {"colorCode": "Black", "sizeCode": "M", "stock": 4},
                {"colorCode": "Green", "sizeCode": "L", "stock": 2},
            ],
            "images": [{"imageUrl": "/images/hoodie.jpg"}],
        },
    )

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["has_variants"] is True
    assert data["available_stock"] == 6
    assert {v["sku"] for v in data["variants"]} == {"APP-AOT-01-BLA-M", "APP-AOT-01-GRE-L"}
    assert data["images"][0]["is_primary"] is True
    assert data["category"]["products_count"] == 1

    logs = await _audit_logs(db_session, AuditEntityType.PRODUCT)
    assert [log.action for log in logs] == ["created"]
    assert logs[0].new_value["price"] == "220.00"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_and_delete_product(client, db_session, admin_headers):
    product = await make_product(db_session, price=Decimal("50.00"))

    updated = await client.put(
        f"/api/admin/products/{product.id}",
        headers=admin_headers,
        json={"salePrice": "40.00", "isOnSale": True},
    )
    assert updated.status_code == 200, updated.text
    assert Decimal(updated.json()["effective_price"]) == Decimal("40.00")

    deleted = await client.delete(
        f"/api/admin/products/{product.id}", headers=admin_headers
    )
    assert deleted.status_code == 204

    missing = await client.get(
        f"/api/admin/products/{product.id}", headers=admin_headers
    )
    assert missing.status_code == 404

    logs = await _audit_logs(db_session, AuditEntityType.PRODUCT)
    assert sorted(log.action for log in logs) == ["deleted", "updated"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_product_list_includes_inactive(client, db_session, admin_headers):
    await make_product(db_session, slug="visible")
    await make_product(db_session, slug="hidden", is_active=False)

    everything = await client.get("/api/admin/products", headers=admin_headers)
    assert everything.json()["total"] == 2

    inactive = await client.get(
        "/api/admin/products", headers=admin_headers, params={"is_active": "false"}
    )
    assert [p["slug"] for p in inactive.json()["items"]] == ["hidden"]


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_ship_order(client, db_session, admin_headers, shopper_headers):
    product = await make_product(db_session)
    placed = await _place_order(client, shopper_headers, product)

    response = await client.put(
        f"/api/admin/orders/{placed['orderId']}",
        headers=admin_headers,
        json={"status": "shipped", "trackingNumber": "TRK-1", "adminNotes": "Fragile"},
    )

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["status"] == "shipped"
    assert data["shipped_at"] is not None
    assert data["tracking_number"] == "TRK-1"
    assert data["admin_notes"] == "Fragile"

    logs = await _audit_logs(db_session, AuditEntityType.ORDER)
    assert len(logs) == 1
    assert logs[0].action == "status_changed"
    assert logs[0].old_value["status"] == "pending"
    assert logs[0].new_value["status"] == "shipped"

    # Shipped orders can no longer be cancelled by the shopper
    cancel = await client.post(
        f"/api/orders/{placed['orderId']}/cancel", headers=shopper_headers
    )
    assert cancel.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_cancel_restores_stock(client, db_session, admin_headers, shopper_headers):
    product = await make_product(db_session, stock=5)
    placed = await _place_order(client, shopper_headers, product, quantity=2)

    response = await client.put(
        f"/api/admin/orders/{placed['orderId']}",
        headers=admin_headers,
        json={"status": "cancelled"},
    )

    assert response.status_code == 200, response.text
    assert response.json()["cancelled_at"] is not None
    await db_session.refresh(product)
    assert product.stock == 5


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_cannot_reopen_delivered_order(
    client, db_session, admin_headers, shopper_headers
):
    product = await make_product(db_session, stock=5)
    placed = await _place_order(client, shopper_headers, product, quantity=2)
    url = f"/api/admin/orders/{placed['orderId']}"

    delivered = await client.put(url, headers=admin_headers, json={"status": "delivered"})
    assert delivered.status_code == 200, delivered.text

    reopened = await client.put(url, headers=admin_headers, json={"status": "pending"})
    assert reopened.status_code == 400
    assert reopened.json() == {
        "error": "Cannot change order status from delivered to pending"
    }

    cancel = await client.post(
        f"/api/orders/{placed['orderId']}/cancel", headers=shopper_headers
    )
    assert cancel.status_code == 400
    await db_session.refresh(product)
    assert product.stock == 3


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_order_detail_includes_customer(
    client, db_session, admin_headers, shopper_id, shopper_headers
):
    product = await make_product(db_session)
    placed = await _place_order(client, shopper_headers, product)
    url = f"/api/admin/orders/{placed['orderId']}"

    # No profile yet for this shopper
    response = await client.get(url, headers=admin_headers)
    assert response.status_code == 200, response.text
    assert response.json()["customer"] == {
        "full_name": "Deleted user",
        "email": "",
        "phone": None,
    }

    await client.get("/api/users/me", headers=shopper_headers)
    response = await client.get(url, headers=admin_headers)
    assert response.json()["customer"] == {
        "full_name": "Sara Ahmed",
        "email": f"{shopper_id}@test.com",
        "phone": None,
    }


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_order_list_filters(client, db_session, admin_headers, shopper_headers):
    product = await make_product(db_session, stock=10)
    first = await _place_order(client, shopper_headers, product)
    await _place_order(client, shopper_headers, product)

    everything = await client.get("/api/admin/orders", headers=admin_headers)
    assert everything.json()["total"] == 2

    by_number = await client.get(
        "/api/admin/orders",
        headers=admin_headers,
        params={"search": first["orderNumber"]},
    )
    assert by_number.json()["total"] == 1

    delivered = await client.get(
        "/api/admin/orders", headers=admin_headers, params={"status": "Delivered"}
    )
    assert delivered.json()["total"] == 0


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_dashboard_numbers(client, db_session, admin_headers, shopper_headers):
    db_session.add(UserProfileFactory.create())
    await db_session.commit()
    product = await make_product(db_session, price=Decimal("100.00"), stock=10)
    await make_product(db_session, stock=0)
    await make_variant_product(db_session, stocks=(0, 0))

    kept = await _place_order(client, shopper_headers, product, quantity=2)
    cancelled = await _place_order(client, shopper_headers, product, quantity=1)
    await client.post(f"/api/orders/{cancelled['orderId']}/cancel", headers=shopper_headers)

    order = await db_session.get(Order, uuid.UUID(kept["orderId"]))
    order.status = OrderStatus.PROCESSING
    await db_session.commit()

    response = await client.get("/api/admin/dashboard", headers=admin_headers)

    assert response.status_code == 200, response.text
    data = response.json()
    # Revenue excludes the cancelled order
    assert Decimal(data["total_revenue"]) == Decimal("255.00")
    assert data["total_sales"] == 2
    assert data["pending_orders"] == 1
    assert data["total_products"] == 3
    assert data["out_of_stock_products"] == 2
    # Admin + the extra profile
    assert data["total_users"] == 2
    # new_order x2 + order_cancelled x1
    assert data["unread_notifications"] == 3
    assert data["unread_messages"] == 0
    assert len(data["recent_orders"]) == 2
    assert data["recent_orders"][0]["customer_name"] == "Sara Ahmed"


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_notifications_mark_all_read(client, db_session, admin_headers, shopper_headers):
    product = await make_product(db_session, stock=10)
    await _place_order(client, shopper_headers, product)
    await _place_order(client, shopper_headers, product)

    listing = await client.get("/api/admin/notifications", headers=admin_headers)
    assert listing.status_code == 200
    assert len(listing.json()) == 2
    assert all(n["type"] == "new_order" for n in listing.json())

    marked = await client.post("/api/admin/notifications", headers=admin_headers)
    assert marked.json() == {"success": True, "updated": 2}

    unread = await client.get(
        "/api/admin/notifications", headers=admin_headers, params={"unread_only": "true"}
    )
    assert unread.json() == []

    again = await client.post("/api/admin/notifications", headers=admin_headers)
    assert again.json()["updated"] == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_mark_single_notification_read(client, db_session, admin_headers, shopper_headers):
    product = await make_product(db_session)
    await _place_order(client, shopper_headers, product)
    notification_id = (
        await client.get("/api/admin/notifications", headers=admin_headers)
    ).json()[0]["id"]

    response = await client.post(
        f"/api/admin/notifications/{notification_id}/read", headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["is_read"] is True


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_settings_fall_back_to_defaults(client, admin_headers):
    response = await client.get("/api/admin/settings", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()
    assert Decimal(data["shipping_cost"]) == Decimal("25")
    assert Decimal(data["tax_rate"]) == Decimal("0.15")
    assert data["currency"] == "SAR"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_settings_update_applies_to_checkout(
    client, db_session, admin_headers, shopper_headers
):
    response = await client.put(
        "/api/admin/settings",
        headers=admin_headers,
        json={"shippingCost": "10.00", "taxRate": "0.05", "currency": "usd"},
    )
    assert response.status_code == 200, response.text
    assert response.json()["currency"] == "USD"

    again = await client.put(
        "/api/admin/settings",
        headers=admin_headers,
        json={"shippingCost": "15.00", "taxRate": "0.10", "currency": "USD"},
    )
    assert again.status_code == 200

    product = await make_product(db_session, price=Decimal("100.00"))
    placed = await _place_order(client, shopper_headers, product)
    # 100 + 15 shipping + 10 tax
    assert placed["totalAmount"] == 125.0

    logs = await _audit_logs(db_session, AuditEntityType.SETTINGS)
    assert len(logs) == 2
    assert sorted(log.old_value["currency"] for log in logs) == ["SAR", "USD"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_settings_reject_invalid_tax_rate(client, admin_headers):
    response = await client.put(
        "/api/admin/settings",
        headers=admin_headers,
        json={"shippingCost": "10.00", "taxRate": "1.5", "currency": "SAR"},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unknown_category_update_is_404(client, db_session, admin_headers):
    response = await client.put(
        f"/api/admin/categories/{uuid.uuid4()}",
        headers=admin_headers,
        json={"name": "x"},
    )
    assert response.status_code == 404
    result = await db_session.execute(select(Category))
    assert result.scalars().all() == []
