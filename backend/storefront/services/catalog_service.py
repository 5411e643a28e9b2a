# /storefront/services/catalog_service.py

import asyncio
import logging
from typing import List, Optional

from storefront.config.settings import settings
from storefront.models.api import ApiResponse, CatalogPage, ProductPage, ProductView
from storefront.models.domain import Category, Product
from storefront.services import pricing
from storefront.services.category_resolver import CategoryResolver
from storefront.services.query_builder import CatalogIntent, SpecialFilter, build_catalog_query
from storefront.services.woocommerce_service import WooCommerceService

# Page-level data loaders used by the HTTP routes. The catalog page never
# fails as a whole: each section degrades on its own when its request fails.

logger = logging.getLogger(__name__)

PAGE_TITLES = {
    SpecialFilter.SALE: "Promotions",
    SpecialFilter.FEATURED: "Produits Vedettes",
    SpecialFilter.NEW: "Nouvelles Arrivées",
}


class ProductNotFound(Exception):
    pass


class CatalogUnavailable(Exception):
    pass


def to_product_view(product: Product) -> ProductView:
    return ProductView(
        product=product,
        is_on_sale=pricing.is_on_sale(product),
        discount_percentage=pricing.get_discount_percentage(product),
        formatted_price=pricing.format_price(product.price, settings.currency),
        formatted_regular_price=pricing.format_price(product.regular_price or product.price, settings.currency),
        image=pricing.get_product_image(product),
    )


def page_title(intent: CatalogIntent, selected_category: Optional[Category]) -> str:
    if intent.special_filter in PAGE_TITLES:
        return PAGE_TITLES[intent.special_filter]
    if selected_category:
        return selected_category.name
    if intent.search:
        return f'Résultats pour: "{intent.search}"'
    return "Boutique"


class CatalogService:
    def __init__(self, catalog: WooCommerceService, resolver: CategoryResolver):
        self.catalog = catalog
        self.resolver = resolver

    async def load_catalog_page(self, intent: CatalogIntent) -> CatalogPage:
        """
        Loads products and categories concurrently. A failure in either only
        marks that section as failed; the other is still returned.
        """
        products_response, categories_response = await asyncio.gather(
            self._load_products(intent),
            self.catalog.list_categories(),
        )

        categories: List[Category] = (categories_response.data or []) if categories_response.success else []
        selected_category = None
        if intent.category_slug and categories:
            selected_category = next((c for c in categories if c.slug == intent.category_slug), None)

        products = (products_response.data or []) if products_response.success else []
        per_page = settings.products_per_page
        return CatalogPage(
            products=[to_product_view(product) for product in products],
            categories=categories,
            selected_category=selected_category,
            title=page_title(intent, selected_category),
            page=intent.page,
            has_more=products_response.success and len(products) == per_page,
            has_error=not products_response.success,
            error_message=None if products_response.success else (
                products_response.message or "Could not load products"
            ),
            categories_error=None if categories_response.success else categories_response.message,
        )

    async def load_product_page(self, slug: str) -> ProductPage:
        """Raises ProductNotFound or CatalogUnavailable so routes can pick a status code."""
        response = await self.catalog.get_product_by_slug(slug)
        if not response.success:
            raise CatalogUnavailable(response.message or "Catalog unavailable")
        if response.data is None:
            raise ProductNotFound(slug)

        product = response.data
        related = await self.catalog.get_related_products(product)
        if not related.success:
            logger.warning(f"Related products unavailable for '{slug}': {related.message}")
        return ProductPage(
            product=to_product_view(product),
            related_products=[to_product_view(p) for p in related.data or []],
        )

    async def _load_products(self, intent: CatalogIntent) -> ApiResponse[List[Product]]:
        try:
            params = await build_catalog_query(intent, self.resolver)
        except Exception as e:
            logger.error(f"Could not build catalog query: {e}", exc_info=True)
            return ApiResponse.fail(f"Could not build catalog query: {e}", data=[])
        logger.info(f"Catalog query parameters: {params}")
        return await self.catalog.list_products(params)
