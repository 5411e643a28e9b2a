# /storefront/routes/checkout.py

import logging
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from storefront.models.api import CheckoutRequest, CheckoutResponse
from storefront.services.cart_service import Cart
from storefront.services.checkout_service import CheckoutService
from storefront.utils.dependencies import get_checkout_service
from storefront.utils.rate_limiter import limiter

# Order submission. The cart travels in the request body because it is held
# by the shopper's client; the server never persists it.

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/checkout", tags=["Checkout"])


@router.post("", response_model=CheckoutResponse)
@limiter.limit("10/minute")
async def submit_checkout(
    request: Request,
    payload: CheckoutRequest,
    checkout_service: CheckoutService = Depends(get_checkout_service),
):
    """
    422: required fields or payment method missing (nothing was sent).
    400: the cart is empty.
    502: the order endpoint rejected the order or could not be reached.
    """
    cart = Cart()
    for item in payload.items:
        cart.add(item, item.quantity)

    result = await checkout_service.submit(payload.customer_info, cart, payload.payment_method)
    body = CheckoutResponse(
        success=result.success,
        order=result.order,
        message=result.message,
        missing_fields=result.missing_fields,
    )
    if result.success:
        return body

    logger.warning(f"Checkout rejected: {result.message}")
    if result.missing_fields:
        status_code = 422
    elif result.rejected_locally:
        status_code = 400
    else:
        status_code = 502
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))
