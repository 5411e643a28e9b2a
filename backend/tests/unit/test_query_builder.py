# backend/tests/unit/test_query_builder.py

import pytest
from unittest.mock import AsyncMock

from storefront.services.query_builder import CatalogIntent, SpecialFilter, build_catalog_query


@pytest.fixture
def resolver():
    known = {"voiles": 15, "accessoires": 22}
    mock = AsyncMock()
    mock.resolve_category_id.side_effect = lambda slug: known.get(slug)
    return mock


@pytest.mark.asyncio
async def test_defaults_page_size_and_newest_first(resolver):
    params = await build_catalog_query(CatalogIntent(), resolver)
    assert params == {"page": 1, "per_page": 20, "orderby": "date", "order": "desc"}
    resolver.resolve_category_id.assert_not_awaited()


@pytest.mark.asyncio
async def test_category_slug_is_resolved_to_id(resolver):
    params = await build_catalog_query(CatalogIntent(page=2, category_slug="voiles"), resolver)
    assert params["category"] == 15
    assert params["page"] == 2
    resolver.resolve_category_id.assert_awaited_once_with("voiles")


@pytest.mark.asyncio
async def test_unknown_category_slug_drops_the_filter(resolver):
    params = await build_catalog_query(CatalogIntent(category_slug="inconnue"), resolver)
    assert "category" not in params


@pytest.mark.asyncio
async def test_search_is_forwarded_when_not_blank(resolver):
    params = await build_catalog_query(CatalogIntent(search="  soie "), resolver)
    assert params["search"] == "soie"
    params = await build_catalog_query(CatalogIntent(search="   "), resolver)
    assert "search" not in params


@pytest.mark.asyncio
@pytest.mark.parametrize("price_min, price_max, expected", [
    (0, 100000, {}),
    (20000, 50000, {"min_price": 20000, "max_price": 50000}),
    (-5, 150000, {}),
    (1, 99999.5, {"min_price": 1, "max_price": 99999.5}),
    (None, None, {}),
])
async def test_price_bounds_only_when_they_narrow(resolver, price_min, price_max, expected):
    params = await build_catalog_query(CatalogIntent(price_min=price_min, price_max=price_max), resolver)
    bounds = {key: params[key] for key in ("min_price", "max_price") if key in params}
    assert bounds == expected


@pytest.mark.asyncio
async def test_sale_and_featured_flags(resolver):
    sale = await build_catalog_query(CatalogIntent(special_filter=SpecialFilter.SALE), resolver)
    featured = await build_catalog_query(CatalogIntent(special_filter=SpecialFilter.FEATURED), resolver)
    assert sale["on_sale"] is True and "featured" not in sale
    assert featured["featured"] is True and "on_sale" not in featured


@pytest.mark.asyncio
@pytest.mark.parametrize("sort", ["price-asc", "price-desc", "name-asc", None, "bogus"])
async def test_new_filter_always_forces_date_desc(resolver, sort):
    params = await build_catalog_query(CatalogIntent(special_filter=SpecialFilter.NEW, sort=sort), resolver)
    assert params["orderby"] == "date"
    assert params["order"] == "desc"


@pytest.mark.asyncio
@pytest.mark.parametrize("sort, expected", [
    ("price-asc", ("price", "asc")),
    ("price-desc", ("price", "desc")),
    ("name-asc", ("title", "asc")),
    ("name-desc", ("title", "desc")),
    ("date-desc", ("date", "desc")),
    ("popularity", ("date", "desc")),
    (None, ("date", "desc")),
])
async def test_sort_mapping(resolver, sort, expected):
    params = await build_catalog_query(CatalogIntent(sort=sort), resolver)
    assert (params["orderby"], params["order"]) == expected


def test_intent_from_query_params():
    intent = CatalogIntent.from_query_params({
        "page": "3",
        "category": "voiles",
        "filter": "sale",
        "sort": "price-asc",
        "search": "noir",
        "price_min": "20000",
        "price_max": "50000",
    })
    assert intent.page == 3
    assert intent.category_slug == "voiles"
    assert intent.special_filter == SpecialFilter.SALE
    assert intent.sort == "price-asc"
    assert intent.search == "noir"
    assert (intent.price_min, intent.price_max) == (20000, 50000)


def test_intent_from_query_params_ignores_garbage():
    intent = CatalogIntent.from_query_params({
        "page": "abc",
        "filter": "clearance",
        "price_min": "cheap",
        "price_max": "",
        "category": "",
    })
    assert intent.page == 1
    assert intent.special_filter is None
    assert intent.price_min is None and intent.price_max is None
    assert intent.category_slug is None


def test_intent_from_query_params_negative_page():
    assert CatalogIntent.from_query_params({"page": "-4"}).page == 1
