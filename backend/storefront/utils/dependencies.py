# /storefront/utils/dependencies.py

import secrets
import structlog
from fastapi import Request, HTTPException

from storefront.config.settings import settings
from storefront.services.catalog_service import CatalogService
from storefront.services.category_resolver import CategoryResolver
from storefront.services.checkout_service import CheckoutService
from storefront.services.payment_service import PaymentService
from storefront.services.woocommerce_service import WooCommerceService

log = structlog.get_logger(__name__)


def get_woocommerce_service(request: Request) -> WooCommerceService:
    return request.app.state.woocommerce


def get_category_resolver(request: Request) -> CategoryResolver:
    return request.app.state.category_resolver


def get_catalog_service(request: Request) -> CatalogService:
    return request.app.state.catalog_service


def get_payment_service(request: Request) -> PaymentService:
    return request.app.state.payment_service


def get_checkout_service(request: Request) -> CheckoutService:
    return request.app.state.checkout_service


async def verify_metrics_access(request: Request):
    if settings.api_key:
        provided_key = request.headers.get("X-API-KEY")
        if not (provided_key and secrets.compare_digest(provided_key, settings.api_key)):
            log.warning("Rejected metrics request with invalid API key.")
            raise HTTPException(status_code=403, detail="Invalid or missing API key")
