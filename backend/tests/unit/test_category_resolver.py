# backend/tests/unit/test_category_resolver.py

import httpx
import pytest
from unittest.mock import AsyncMock

from storefront.services.category_resolver import CategoryResolver, SNAPSHOT_CACHE_KEY


def _category_handler(categories, calls):
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=categories)
    return handler


@pytest.mark.asyncio
async def test_every_slug_in_snapshot_resolves(woocommerce_factory, category_payloads):
    calls = []
    resolver = CategoryResolver(woocommerce_factory(_category_handler(category_payloads, calls)))

    for category in category_payloads:
        assert await resolver.resolve_category_id(category["slug"]) == category["id"]


@pytest.mark.asyncio
async def test_unknown_slug_returns_none(woocommerce_factory, category_payloads):
    resolver = CategoryResolver(woocommerce_factory(_category_handler(category_payloads, [])))
    assert await resolver.resolve_category_id("robes") is None
    # exact match only
    assert await resolver.resolve_category_id("Voiles") is None


@pytest.mark.asyncio
async def test_snapshot_request_shape(woocommerce_factory, category_payloads):
    calls = []
    resolver = CategoryResolver(woocommerce_factory(_category_handler(category_payloads, calls)))
    await resolver.resolve_category_id("voiles")

    request = calls[0]
    assert request.url.path == "/wp-json/wc/v3/products/categories"
    assert request.url.params["per_page"] == "100"
    assert request.url.params["hide_empty"] == "true"
    assert request.url.params["orderby"] == "count"
    assert request.url.params["order"] == "desc"


@pytest.mark.asyncio
async def test_fetch_failure_is_not_found_not_an_exception(woocommerce_factory):
    def handler(request):
        return httpx.Response(500, json={"code": "internal", "message": "boom"})

    resolver = CategoryResolver(woocommerce_factory(handler))
    assert await resolver.resolve_category_id("voiles") is None


@pytest.mark.asyncio
async def test_without_cache_every_resolution_refetches(woocommerce_factory, category_payloads):
    calls = []
    resolver = CategoryResolver(woocommerce_factory(_category_handler(category_payloads, calls)))
    await resolver.resolve_category_id("voiles")
    await resolver.resolve_category_id("accessoires")
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_cached_snapshot_is_reused(woocommerce_factory, category_payloads):
    calls = []
    cache = AsyncMock()
    cache.get_json.return_value = None
    resolver = CategoryResolver(woocommerce_factory(_category_handler(category_payloads, calls)), cache=cache, ttl=30)

    assert await resolver.resolve_category_id("voiles") == 15
    cache.set_json.assert_awaited_once()
    key, stored = cache.set_json.await_args.args
    assert key == SNAPSHOT_CACHE_KEY
    assert cache.set_json.await_args.kwargs["ttl"] == 30

    cache.get_json.return_value = stored
    assert await resolver.resolve_category_id("melhfa-soie") == 31
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_failed_fetch_is_not_cached(woocommerce_factory):
    cache = AsyncMock()
    cache.get_json.return_value = None
    resolver = CategoryResolver(
        woocommerce_factory(lambda request: httpx.Response(503, json={"message": "maintenance"})),
        cache=cache,
        ttl=30,
    )
    assert await resolver.resolve_category_id("voiles") is None
    cache.set_json.assert_not_awaited()


@pytest.mark.asyncio
async def test_zero_ttl_bypasses_cache(woocommerce_factory, category_payloads):
    cache = AsyncMock()
    resolver = CategoryResolver(woocommerce_factory(_category_handler(category_payloads, [])), cache=cache, ttl=0)
    await resolver.resolve_category_id("voiles")
    cache.get_json.assert_not_awaited()
    cache.set_json.assert_not_awaited()


@pytest.mark.asyncio
async def test_invalidate_drops_snapshot():
    cache = AsyncMock()
    resolver = CategoryResolver(AsyncMock(), cache=cache, ttl=30)
    await resolver.invalidate()
    cache.delete.assert_awaited_once_with(SNAPSHOT_CACHE_KEY)


@pytest.mark.asyncio
async def test_get_category_by_id(woocommerce_factory, category_payloads):
    resolver = CategoryResolver(woocommerce_factory(_category_handler(category_payloads, [])))
    category = await resolver.get_category_by_id(22)
    assert category.slug == "accessoires"
    assert await resolver.get_category_by_id(999) is None
