"""Integration tests for cart, checkout and the shopper order endpoints."""

import uuid
from decimal import Decimal

import pytest
from services.storefront_service.models import CartItem, Notification, Order
from sqlalchemy import func, select
from tests.conftest import SHIPPING_ADDRESS, bearer, make_product, make_variant_product


async def _count(db, model, *criteria) -> int:
    query = select(func.count()).select_from(model)
    if criteria:
        query = query.where(*criteria)
    return await db.scalar(query)


async def _checkout(client, headers, **overrides):
    payload = {
        "shippingAddress": SHIPPING_ADDRESS,
        "paymentMethod": "cash_on_delivery",
    }
    payload.update(overrides)
    return await client.post("/api/checkout", headers=headers, json=payload)


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_empty_cart(client, shopper_headers):
    response = await client.get("/api/cart", headers=shopper_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["items"] == []
    assert data["item_count"] == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_add_to_cart_merges_lines(client, db_session, shopper_headers):
    product = await make_product(db_session, price=Decimal("100.00"), stock=5)

    await client.post(
        "/api/cart/items",
        headers=shopper_headers,
        json={"productId": str(product.id), "quantity": 1},
    )
    response = await client.post(
        "/api/cart/items",
        headers=shopper_headers,
        json={"product_id": str(product.id), "quantity": 2},
    )

    assert response.status_code == 200, response.text
    data = response.json()
    assert len(data["items"]) == 1
    assert data["items"][0]["quantity"] == 3
    assert data["item_count"] == 3
    assert Decimal(data["subtotal"]) == Decimal("300.00")
    assert data["items"][0]["available_stock"] == 5


@pytest.mark.asyncio
@pytest.mark.integration
async def test_add_to_cart_over_stock(client, db_session, shopper_headers):
    product = await make_product(db_session, stock=2)

    response = await client.post(
        "/api/cart/items",
        headers=shopper_headers,
        json={"productId": str(product.id), "quantity": 3},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Only 2 available"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_add_to_cart_unknown_product(client, shopper_headers):
    response = await client.post(
        "/api/cart/items",
        headers=shopper_headers,
        json={"productId": str(uuid.uuid4()), "quantity": 1},
    )
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_variant_product_requires_variant(client, db_session, shopper_headers):
    product = await make_variant_product(db_session)

    response = await client.post(
        "/api/cart/items",
        headers=shopper_headers,
        json={"productId": str(product.id), "quantity": 1},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Please choose a variant for this product"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_and_remove_cart_item(client, db_session, shopper_headers):
    product = await make_product(db_session, stock=5)
    added = await client.post(
        "/api/cart/items",
        headers=shopper_headers,
        json={"productId": str(product.id), "quantity": 1},
    )
    item_id = added.json()["items"][0]["id"]

    updated = await client.patch(
        f"/api/cart/items/{item_id}", headers=shopper_headers, json={"quantity": 4}
    )
    assert updated.status_code == 200
    assert updated.json()["items"][0]["quantity"] == 4

    too_many = await client.patch(
        f"/api/cart/items/{item_id}", headers=shopper_headers, json={"quantity": 6}
    )
    assert too_many.status_code == 400

    removed = await client.delete(f"/api/cart/items/{item_id}", headers=shopper_headers)
    assert removed.status_code == 200
    assert removed.json()["items"] == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_cannot_touch_someone_elses_cart_item(client, db_session, shopper_headers):
    product = await make_product(db_session, stock=5)
    added = await client.post(
        "/api/cart/items",
        headers=shopper_headers,
        json={"productId": str(product.id), "quantity": 1},
    )
    item_id = added.json()["items"][0]["id"]

    response = await client.delete(
        f"/api/cart/items/{item_id}", headers=bearer("other-shopper")
    )
    assert response.status_code == 404


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_flow(client, db_session, shopper_id, shopper_headers):
    """Cart of 2 x 100 -> order of 255, stock decremented, cart emptied."""
    product = await make_product(db_session, price=Decimal("100.00"), stock=10)
    await client.post(
        "/api/cart/items",
        headers=shopper_headers,
        json={"productId": str(product.id), "quantity": 2},
    )

    response = await _checkout(client, shopper_headers, notes="Ring the bell")

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["success"] is True
    assert data["orderNumber"].startswith("ORD-")
    assert data["totalAmount"] == 255.0

    await db_session.refresh(product)
    assert product.stock == 8
    assert await _count(db_session, CartItem, CartItem.user_id == shopper_id) == 0
    assert await _count(db_session, Order) == 1
    assert await _count(db_session, Notification) == 1

    cart = await client.get("/api/cart", headers=shopper_headers)
    assert cart.json()["items"] == []

    order = await client.get(f"/api/orders/{data['orderId']}", headers=shopper_headers)
    assert order.status_code == 200
    order_data = order.json()
    assert order_data["status"] == "pending"
    assert order_data["shipping_address"]["full_name"] == "Sara Ahmed"
    assert order_data["notes"] == "Ring the bell"
    assert len(order_data["items"]) == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_response_uses_camel_case(client, db_session, shopper_headers):
    product = await make_product(db_session, price=Decimal("100.00"), stock=10)
    await client.post(
        "/api/cart/items",
        headers=shopper_headers,
        json={"productId": str(product.id), "quantity": 1},
    )

    response = await _checkout(client, shopper_headers)

    assert response.status_code == 200, response.text
    data = response.json()
    assert sorted(data) == ["orderId", "orderNumber", "success", "totalAmount"]
    assert isinstance(data["totalAmount"], float)
    assert data["totalAmount"] == 140.0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_empty_cart(client, shopper_headers):
    response = await _checkout(client, shopper_headers)

    assert response.status_code == 400
    assert response.json() == {"error": "Your cart is empty"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_requires_address_fields(client, db_session, shopper_headers):
    product = await make_product(db_session)
    await client.post(
        "/api/cart/items",
        headers=shopper_headers,
        json={"productId": str(product.id), "quantity": 1},
    )

    response = await _checkout(
        client, shopper_headers, shippingAddress={**SHIPPING_ADDRESS, "city": "  "}
    )
    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_rejects_unknown_payment_method(client, shopper_headers):
    response = await _checkout(client, shopper_headers, paymentMethod="bitcoin")
    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_stock_changed_since_add(
    client, db_session, shopper_id, shopper_headers
):
    """Stock is re-checked at checkout; nothing is written on a shortage."""
    product = await make_product(db_session, stock=3)
    await client.post(
        "/api/cart/items",
        headers=shopper_headers,
        json={"productId": str(product.id), "quantity": 3},
    )
    product.stock = 1
    await db_session.commit()

    response = await _checkout(client, shopper_headers)

    assert response.status_code == 400
    assert "Insufficient stock" in response.json()["error"]
    assert await _count(db_session, Order) == 0
    assert await _count(db_session, CartItem, CartItem.user_id == shopper_id) == 1


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_order_from_explicit_lines(client, db_session, shopper_headers):
    product = await make_variant_product(db_session, stocks=(5, 5))
    variant = product.variants[0]

    response = await client.post(
        "/api/orders",
        headers=shopper_headers,
        json={
            "items": [
                {
                    "productId": str(product.id),
                    "variantId": str(variant.id),
                    "quantity": 2,
                    "size": "S",
                }
            ],
            "shippingAddress": SHIPPING_ADDRESS,
            "paymentMethod": "credit_card",
        },
    )

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["payment_status"] == "paid"
    assert data["items"][0]["variant_id"] == str(variant.id)
    assert data["items"][0]["size"] == "S"
    # 2 x 150 + 25 shipping + 45 tax
    assert Decimal(data["total_amount"]) == Decimal("370.00")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_order_needs_items(client, shopper_headers):
    response = await client.post(
        "/api/orders",
        headers=shopper_headers,
        json={
            "items": [],
            "shippingAddress": SHIPPING_ADDRESS,
            "paymentMethod": "cash_on_delivery",
        },
    )
    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_orders_are_private(client, db_session, shopper_headers):
    product = await make_product(db_session)
    await client.post(
        "/api/cart/items",
        headers=shopper_headers,
        json={"productId": str(product.id), "quantity": 1},
    )
    checkout = await _checkout(client, shopper_headers)
    order_id = checkout.json()["orderId"]
    order_number = checkout.json()["orderNumber"]

    stranger = bearer("stranger")
    assert (await client.get(f"/api/orders/{order_id}", headers=stranger)).status_code == 403
    assert (
        await client.get(f"/api/orders/number/{order_number}", headers=stranger)
    ).status_code == 403
    assert (
        await client.post(f"/api/orders/{order_id}/cancel", headers=stranger)
    ).status_code == 403

    listing = await client.get("/api/orders", headers=stranger)
    assert listing.json()["total"] == 0

    mine = await client.get("/api/orders", headers=shopper_headers)
    assert mine.json()["total"] == 1
    by_number = await client.get(
        f"/api/orders/number/{order_number}", headers=shopper_headers
    )
    assert by_number.status_code == 200


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_sees_every_order(client, db_session, shopper_headers, admin_headers):
    product = await make_product(db_session)
    await client.post(
        "/api/cart/items",
        headers=shopper_headers,
        json={"productId": str(product.id), "quantity": 1},
    )
    await _checkout(client, shopper_headers)

    response = await client.get("/api/orders", headers=admin_headers)
    assert response.json()["total"] == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_order_status_filter_is_case_insensitive(
    client, db_session, shopper_headers
):
    product = await make_product(db_session)
    await client.post(
        "/api/cart/items",
        headers=shopper_headers,
        json={"productId": str(product.id), "quantity": 1},
    )
    await _checkout(client, shopper_headers)

    pending = await client.get(
        "/api/orders", headers=shopper_headers, params={"status": "PENDING"}
    )
    assert pending.json()["total"] == 1

    shipped = await client.get(
        "/api/orders", headers=shopper_headers, params={"status": "shipped"}
    )
    assert shipped.json()["total"] == 0

    invalid = await client.get(
        "/api/orders", headers=shopper_headers, params={"status": "lost"}
    )
    assert invalid.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_cancel_order_restores_stock(client, db_session, shopper_headers):
    product = await make_product(db_session, stock=4)
    await client.post(
        "/api/cart/items",
        headers=shopper_headers,
        json={"productId": str(product.id), "quantity": 3},
    )
    order_id = (await _checkout(client, shopper_headers)).json()["orderId"]

    response = await client.post(
        f"/api/orders/{order_id}/cancel", headers=shopper_headers
    )

    assert response.status_code == 200, response.text
    assert response.json()["status"] == "cancelled"
    await db_session.refresh(product)
    assert product.stock == 4

    again = await client.post(f"/api/orders/{order_id}/cancel", headers=shopper_headers)
    assert again.status_code == 400
    assert again.json() == {"error": "Order is already cancelled"}
