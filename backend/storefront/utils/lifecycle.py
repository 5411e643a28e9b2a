# /storefront/utils/lifecycle.py

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI

from storefront.config.settings import settings
from storefront.utils.logging import setup_logging
from storefront.services.cache_service import cache_service
from storefront.services.catalog_service import CatalogService
from storefront.services.category_resolver import CategoryResolver
from storefront.services.checkout_service import CheckoutService, OrderClient
from storefront.services.payment_service import PaymentService
from storefront.services.woocommerce_service import WooCommerceService

# Builds the service graph on startup and closes its HTTP clients on shutdown.
# Routes reach the services through app.state (see utils/dependencies.py).

logger = logging.getLogger(__name__)


def build_services(app: FastAPI) -> None:
    catalog = WooCommerceService(
        settings.wc_api_url,
        settings.wc_consumer_key,
        settings.wc_consumer_secret,
        version=settings.wc_api_version,
        timeout=settings.wc_timeout_seconds,
        retry_attempts=settings.wc_retry_attempts,
        retry_budget=settings.wc_retry_budget_seconds,
    )
    resolver = CategoryResolver(catalog, cache=cache_service, ttl=settings.category_cache_ttl)
    order_client = OrderClient(settings.order_endpoint_url, timeout=settings.order_timeout_seconds)

    app.state.woocommerce = catalog
    app.state.category_resolver = resolver
    app.state.catalog_service = CatalogService(catalog, resolver)
    payment_service = PaymentService(catalog)
    app.state.payment_service = payment_service
    app.state.order_client = order_client
    app.state.checkout_service = CheckoutService(order_client, payment_service)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    setup_logging()

    logger.info("Application starting up...")
    build_services(app)
    logger.info(f"Storefront ready, proxying {settings.wc_api_url} ({settings.wc_api_version})")

    yield  # Application is now running

    logger.info("Application shutting down...")
    await app.state.woocommerce.aclose()
    await app.state.order_client.aclose()
    await cache_service.close()
