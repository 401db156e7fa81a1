"""Checkout router: turn the caller's cart into an order."""

from fastapi import APIRouter, Depends, Request
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.rate_limit import checkout_limit
from libs.db.session import get_async_db
from services.storefront_service.schemas import CheckoutRequest, CheckoutResponse
from services.storefront_service.services.checkout import checkout_cart
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["checkout"])


@router.post(
    "/checkout", response_model=CheckoutResponse, response_model_by_alias=True
)
@checkout_limit
async def checkout(
    request: Request,
    checkout_in: CheckoutRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Place an order for everything in the cart.

    Stock checks, stock decrement, order insert, cart clearing and the admin
    notification commit together or not at all.
    """
    order = await checkout_cart(
        db,
        user_id=current_user.user_id,
        shipping_address=checkout_in.shipping_address.model_dump(),
        payment_method=checkout_in.payment_method,
        notes=checkout_in.notes,
    )
    return CheckoutResponse(
        order_id=order.id,
        order_number=order.order_number,
        total_amount=order.total_amount,
    )
