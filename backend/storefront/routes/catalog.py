# /storefront/routes/catalog.py

import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request

from storefront.models.api import ApiResponse, CatalogPage, PaymentMethodsResponse, ProductPage, ProductView
from storefront.models.domain import Category
from storefront.services.catalog_service import (
    CatalogService, CatalogUnavailable, ProductNotFound, to_product_view
)
from storefront.services.payment_service import PaymentService
from storefront.services.query_builder import CatalogIntent
from storefront.services.woocommerce_service import WooCommerceService
from storefront.utils.dependencies import (
    get_catalog_service, get_payment_service, get_woocommerce_service
)
from storefront.utils.rate_limiter import limiter

# Read-only catalog endpoints consumed by the storefront pages.

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Catalog"])


@router.get("/catalog", response_model=CatalogPage)
@limiter.limit("60/minute")
async def get_catalog_page(
    request: Request,
    catalog_service: CatalogService = Depends(get_catalog_service),
):
    """
    Product listing page. Accepts the storefront's URL filter vocabulary:
    page, category (slug), filter, sort, search, price_min, price_max.
    """
    intent = CatalogIntent.from_query_params(request.query_params)
    return await catalog_service.load_catalog_page(intent)


@router.get("/categories", response_model=ApiResponse[List[Category]])
async def get_categories(catalog: WooCommerceService = Depends(get_woocommerce_service)):
    return await catalog.list_categories()


@router.get("/products/{slug}", response_model=ProductPage)
@limiter.limit("60/minute")
async def get_product_page(
    request: Request,
    slug: str,
    catalog_service: CatalogService = Depends(get_catalog_service),
):
    try:
        return await catalog_service.load_product_page(slug)
    except ProductNotFound:
        raise HTTPException(status_code=404, detail="Product not found")
    except CatalogUnavailable as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.get("/products/by-id/{product_id}", response_model=ProductView)
async def get_product_by_id(
    product_id: int,
    catalog: WooCommerceService = Depends(get_woocommerce_service),
):
    response = await catalog.get_product_by_id(product_id)
    if not response.success:
        raise HTTPException(status_code=502, detail=response.message)
    if response.data is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return to_product_view(response.data)


@router.get("/payment-methods", response_model=PaymentMethodsResponse, tags=["Checkout"])
async def get_payment_methods(payment_service: PaymentService = Depends(get_payment_service)):
    """Enabled payment methods; on failure the cash-on-delivery fallback is returned with an error message."""
    return await payment_service.load_payment_methods()
