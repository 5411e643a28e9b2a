# backend/tests/unit/test_catalog_service.py

import pytest
from unittest.mock import AsyncMock

from storefront.models.api import ApiResponse
from storefront.models.domain import Category, Product
from storefront.services.catalog_service import (
    CatalogService, CatalogUnavailable, ProductNotFound, page_title, to_product_view
)
from storefront.services.query_builder import CatalogIntent, SpecialFilter
from factories import make_category, make_product


def _products(count):
    return [Product.model_validate(make_product(i)) for i in range(1, count + 1)]


def _categories():
    return [Category.model_validate(make_category(15, "voiles")), Category.model_validate(make_category(22, "accessoires"))]


@pytest.fixture
def catalog():
    mock = AsyncMock()
    mock.list_products.return_value = ApiResponse.ok(_products(3))
    mock.list_categories.return_value = ApiResponse.ok(_categories())
    return mock


@pytest.fixture
def resolver():
    mock = AsyncMock()
    mock.resolve_category_id.return_value = 15
    return mock


@pytest.mark.asyncio
async def test_catalog_page_combines_products_and_categories(catalog, resolver):
    page = await CatalogService(catalog, resolver).load_catalog_page(CatalogIntent(category_slug="voiles"))

    assert [view.product.id for view in page.products] == [1, 2, 3]
    assert page.selected_category.id == 15
    assert page.title == "Voiles"
    assert page.has_error is False
    assert page.has_more is False
    catalog.list_products.assert_awaited_once()
    assert catalog.list_products.await_args.args[0]["category"] == 15


@pytest.mark.asyncio
async def test_product_failure_keeps_categories(catalog, resolver):
    catalog.list_products.return_value = ApiResponse.fail("API error: timeout", data=[])
    page = await CatalogService(catalog, resolver).load_catalog_page(CatalogIntent())

    assert page.products == []
    assert page.has_error is True
    assert page.error_message == "API error: timeout"
    assert [c.slug for c in page.categories] == ["voiles", "accessoires"]


@pytest.mark.asyncio
async def test_category_failure_keeps_products(catalog, resolver):
    catalog.list_categories.return_value = ApiResponse.fail("API error: 500 - boom", data=[])
    page = await CatalogService(catalog, resolver).load_catalog_page(CatalogIntent())

    assert len(page.products) == 3
    assert page.categories == []
    assert page.categories_error == "API error: 500 - boom"
    assert page.has_error is False


@pytest.mark.asyncio
async def test_full_page_signals_more(catalog, resolver):
    catalog.list_products.return_value = ApiResponse.ok(_products(20))
    page = await CatalogService(catalog, resolver).load_catalog_page(CatalogIntent(page=2))
    assert page.has_more is True
    assert page.page == 2


@pytest.mark.asyncio
async def test_product_page(catalog, resolver):
    product = _products(1)[0]
    catalog.get_product_by_slug.return_value = ApiResponse.ok(product)
    catalog.get_related_products.return_value = ApiResponse.ok(_products(3)[1:])

    page = await CatalogService(catalog, resolver).load_product_page("melhfa-1")

    assert page.product.product.id == 1
    assert [view.product.id for view in page.related_products] == [2, 3]


@pytest.mark.asyncio
async def test_product_page_related_failure_is_tolerated(catalog, resolver):
    catalog.get_product_by_slug.return_value = ApiResponse.ok(_products(1)[0])
    catalog.get_related_products.return_value = ApiResponse.fail("API error: timeout", data=[])
    page = await CatalogService(catalog, resolver).load_product_page("melhfa-1")
    assert page.related_products == []


@pytest.mark.asyncio
async def test_product_page_not_found(catalog, resolver):
    catalog.get_product_by_slug.return_value = ApiResponse.ok(None)
    with pytest.raises(ProductNotFound):
        await CatalogService(catalog, resolver).load_product_page("inconnu")


@pytest.mark.asyncio
async def test_product_page_unavailable(catalog, resolver):
    catalog.get_product_by_slug.return_value = ApiResponse.fail("API error: timeout")
    with pytest.raises(CatalogUnavailable):
        await CatalogService(catalog, resolver).load_product_page("melhfa-1")


def test_page_title():
    voiles = _categories()[0]
    assert page_title(CatalogIntent(special_filter=SpecialFilter.SALE), voiles) == "Promotions"
    assert page_title(CatalogIntent(), voiles) == "Voiles"
    assert page_title(CatalogIntent(search="noir"), None) == 'Résultats pour: "noir"'
    assert page_title(CatalogIntent(), None) == "Boutique"


def test_product_view():
    product = Product.model_validate(make_product(1, on_sale=True, sale_price="7500", price="7500"))
    view = to_product_view(product)
    assert view.is_on_sale is True
    assert view.discount_percentage == 25
    assert view.formatted_price == "7\u202f500 MRU"
    assert view.formatted_regular_price == "10\u202f000 MRU"
    assert view.image == "https://shop.test/img/1.jpg"
