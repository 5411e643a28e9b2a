# /storefront/services/checkout_service.py

import httpx
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel

from storefront.config.settings import settings
from storefront.models.domain import (
    CustomerInfo, OrderItem, OrderResult, OrderSubmission, PaymentMethod
)
from storefront.services.cart_service import Cart
from storefront.services.woocommerce_service import describe_error
from storefront.utils.metrics import checkout_submissions_counter

logger = logging.getLogger(__name__)

REQUIRED_CUSTOMER_FIELDS = ("first_name", "last_name", "email", "phone", "address", "city")
UNKNOWN_METHOD_TITLE = "Méthode inconnue"


class CheckoutResult(BaseModel):
    success: bool
    order: Optional[Dict[str, Any]] = None
    message: Optional[str] = None
    missing_fields: List[str] = []
    rejected_locally: bool = False


def compute_totals(
    subtotal: float,
    free_shipping_threshold: Optional[float] = None,
    shipping_fee: Optional[float] = None,
) -> Tuple[float, float]:
    """Returns (shipping, total); shipping is free from the threshold upwards."""
    threshold = settings.free_shipping_threshold if free_shipping_threshold is None else free_shipping_threshold
    fee = settings.shipping_fee if shipping_fee is None else shipping_fee
    shipping = 0 if subtotal >= threshold else fee
    return shipping, subtotal + shipping


def missing_fields(customer: CustomerInfo, payment_method_id: Optional[str]) -> List[str]:
    missing = [field for field in REQUIRED_CUSTOMER_FIELDS if not getattr(customer, field, "").strip()]
    if not payment_method_id:
        missing.append("payment_method")
    return missing


def assemble_order(
    customer: CustomerInfo,
    cart: Cart,
    payment_method_id: str,
    payment_methods: Sequence[PaymentMethod],
) -> OrderSubmission:
    """Snapshots the cart and the chosen payment method into an order payload."""
    selected = next((method for method in payment_methods if method.id == payment_method_id), None)
    subtotal = cart.subtotal
    shipping, total = compute_totals(subtotal)
    return OrderSubmission(
        customer_info=customer,
        items=[
            OrderItem(id=item.id, name=item.name, price=item.price, quantity=item.quantity, total=item.total)
            for item in cart.items
        ],
        payment_method=payment_method_id,
        payment_method_title=selected.title if selected else UNKNOWN_METHOD_TITLE,
        subtotal=subtotal,
        shipping=shipping,
        total=total,
    )


class OrderClient:
    """Posts order submissions to the order creation endpoint."""

    def __init__(self, endpoint_url: str, timeout: float = 15.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.endpoint_url = endpoint_url
        self.http_client = httpx.AsyncClient(timeout=httpx.Timeout(timeout, connect=5.0), transport=transport)

    async def create_order(self, submission: OrderSubmission) -> OrderResult:
        try:
            resp = await self.http_client.post(self.endpoint_url, json=submission.model_dump(mode="json"))
            if resp.is_error:
                return self._error_result(resp)
            body = resp.json()
            if not isinstance(body, dict):
                raise ValueError("expected an object")
            return OrderResult.model_validate(body)
        except Exception as e:
            message = describe_error(e)
            logger.error(f"Order creation failed: {message}")
            return OrderResult(success=False, message=message)

    @staticmethod
    def _error_result(resp: httpx.Response) -> OrderResult:
        """Keeps the endpoint's own message when the error body carries one."""
        message = None
        try:
            body = resp.json()
            if isinstance(body, dict) and isinstance(body.get("message"), str):
                message = body["message"]
        except ValueError:
            pass
        message = message or f"Order endpoint returned {resp.status_code}"
        logger.error(f"Order creation rejected with status {resp.status_code}: {message}")
        return OrderResult(success=False, message=message)

    async def aclose(self):
        await self.http_client.aclose()


class CheckoutService:
    def __init__(self, order_client: OrderClient, payment_service=None):
        self.order_client = order_client
        self.payment_service = payment_service

    async def submit(
        self,
        customer: CustomerInfo,
        cart: Cart,
        payment_method_id: Optional[str],
        payment_methods: Optional[Sequence[PaymentMethod]] = None,
    ) -> CheckoutResult:
        """
        Validates and submits an order.

        Missing fields, an empty cart and a cart that is not hydrated yet are
        rejected before any network call. When ``payment_methods`` is not
        given they are loaded through the payment service, only after local
        validation passed. The cart is cleared only after the order endpoint
        confirms the order; otherwise it is left untouched so the shopper can
        retry.
        """
        missing = missing_fields(customer, payment_method_id)
        if missing:
            checkout_submissions_counter.labels(status="invalid").inc()
            return CheckoutResult(
                success=False,
                message=f"Please fill in all required fields: {', '.join(missing)}",
                missing_fields=missing,
                rejected_locally=True,
            )

        if not cart.is_hydrated:
            checkout_submissions_counter.labels(status="not_hydrated").inc()
            return CheckoutResult(
                success=False, message="Cart is still loading, please try again", rejected_locally=True
            )

        if len(cart) == 0:
            checkout_submissions_counter.labels(status="empty_cart").inc()
            return CheckoutResult(success=False, message="Your cart is empty", rejected_locally=True)

        if payment_methods is None:
            payment_methods = await self.payment_service.list_enabled_payment_methods() if self.payment_service else []

        submission = assemble_order(customer, cart, payment_method_id, payment_methods)
        logger.info(
            f"Submitting order with {len(submission.items)} items, total {submission.total} "
            f"via {submission.payment_method}"
        )
        result = await self.order_client.create_order(submission)

        if not result.success:
            checkout_submissions_counter.labels(status="rejected").inc()
            return CheckoutResult(success=False, message=result.message or "Order could not be created")

        cart.clear()
        checkout_submissions_counter.labels(status="success").inc()
        return CheckoutResult(success=True, order=result.order)
