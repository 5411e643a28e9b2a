# /storefront/services/payment_service.py

import logging
from typing import List

from storefront.models.api import PaymentMethodsResponse
from storefront.models.domain import PaymentGateway, PaymentMethod, PaymentMethodSettings
from storefront.services.woocommerce_service import WooCommerceService
from storefront.utils.metrics import payment_methods_counter

# Projects the platform's payment gateway configuration into the small shape
# the checkout form needs. When the platform cannot be reached, checkout keeps
# working with cash on delivery only.

logger = logging.getLogger(__name__)

FALLBACK_PAYMENT_METHOD = PaymentMethod(
    id="cod",
    title="Paiement à la livraison",
    description="Paiement en espèces à la réception",
    method_title="Cash on Delivery",
    method_description="",
    enabled=True,
    supports=["products"],
    settings=PaymentMethodSettings(
        instructions="Paiement en espèces uniquement",
        enable_for_methods=[],
    ),
)


def _setting_value(gateway: PaymentGateway, key: str, expected: type, default):
    setting = gateway.settings.get(key)
    value = setting.value if setting else None
    return value if isinstance(value, expected) else default


def normalize_gateway(gateway: PaymentGateway) -> PaymentMethod:
    """Projects a validated gateway; settings of an unexpected type fall back to their defaults."""
    enable_for_methods = _setting_value(gateway, "enable_for_methods", list, [])
    return PaymentMethod(
        id=gateway.id,
        title=gateway.title,
        description=gateway.description,
        method_title=gateway.method_title,
        method_description=gateway.method_description,
        enabled=gateway.enabled,
        supports=gateway.supports or [],
        settings=PaymentMethodSettings(
            instructions=_setting_value(gateway, "instructions", str, ""),
            enable_for_methods=[str(method) for method in enable_for_methods],
        ),
    )


class PaymentService:
    def __init__(self, catalog: WooCommerceService):
        self.catalog = catalog

    async def load_payment_methods(self) -> PaymentMethodsResponse:
        """
        Loads the enabled payment methods. On failure the response is marked
        unsuccessful but still carries the cash-on-delivery fallback.
        """
        response = await self.catalog.list_payment_gateways()
        if not response.success:
            payment_methods_counter.labels(status="fallback").inc()
            logger.error(f"Falling back to cash on delivery: {response.message}")
            return PaymentMethodsResponse(
                success=False,
                data=[FALLBACK_PAYMENT_METHOD.model_copy(deep=True)],
                message=response.message or "Could not load payment methods",
            )

        methods = []
        for gateway in response.data or []:
            # Disabled gateways are never offered, not even greyed out.
            if gateway.enabled is not True:
                continue
            methods.append(normalize_gateway(gateway))

        payment_methods_counter.labels(status="success").inc()
        logger.info(f"{len(methods)} enabled payment methods found")
        return PaymentMethodsResponse(success=True, data=methods)

    async def list_enabled_payment_methods(self) -> List[PaymentMethod]:
        response = await self.load_payment_methods()
        return response.data
