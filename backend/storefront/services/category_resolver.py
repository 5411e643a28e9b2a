# /storefront/services/category_resolver.py

import logging
from typing import List, Optional

from storefront.models.domain import Category
from storefront.services.woocommerce_service import WooCommerceService
from storefront.utils.metrics import category_resolution_counter

# Navigation links carry category slugs, but the product search endpoint only
# filters by numeric category id. This resolver bridges the two by looking
# the slug up in the full category snapshot.
#
# Snapshot cache policy: a successful snapshot is kept for `ttl` seconds
# (0 disables caching), `invalidate()` drops it immediately, and a failed
# fetch is never cached.

logger = logging.getLogger(__name__)

SNAPSHOT_CACHE_KEY = "storefront:categories:snapshot"


class CategoryResolver:
    def __init__(self, catalog: WooCommerceService, cache=None, ttl: int = 60):
        self.catalog = catalog
        self.cache = cache
        self.ttl = ttl

    async def get_snapshot(self) -> Optional[List[Category]]:
        """Returns the category snapshot, or None when it could not be fetched."""
        if self._cache_enabled:
            cached = await self.cache.get_json(SNAPSHOT_CACHE_KEY)
            if isinstance(cached, list):
                try:
                    return [Category.model_validate(item) for item in cached]
                except ValueError as e:
                    logger.warning(f"Ignoring invalid cached category snapshot: {e}")

        response = await self.catalog.list_categories()
        if not response.success:
            logger.warning(f"Category snapshot unavailable: {response.message}")
            return None

        categories = response.data or []
        if self._cache_enabled:
            await self.cache.set_json(
                SNAPSHOT_CACHE_KEY, [category.model_dump() for category in categories], ttl=self.ttl
            )
        return categories

    async def resolve_category_id(self, slug: str) -> Optional[int]:
        """Returns the id of the category whose slug matches exactly, else None. Never raises."""
        category = await self.get_category_by_slug(slug)
        if category is None:
            category_resolution_counter.labels(status="not_found").inc()
            logger.warning(f"Category slug '{slug}' did not resolve to an id")
            return None
        category_resolution_counter.labels(status="resolved").inc()
        return category.id

    async def get_category_by_slug(self, slug: str) -> Optional[Category]:
        categories = await self.get_snapshot()
        if not categories:
            return None
        return next((category for category in categories if category.slug == slug), None)

    async def get_category_by_id(self, category_id: int) -> Optional[Category]:
        categories = await self.get_snapshot()
        if not categories:
            return None
        return next((category for category in categories if category.id == category_id), None)

    async def invalidate(self):
        if self.cache is not None:
            await self.cache.delete(SNAPSHOT_CACHE_KEY)

    @property
    def _cache_enabled(self) -> bool:
        return self.cache is not None and self.ttl > 0
