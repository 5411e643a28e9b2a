import os

import httpx
import pytest
from fastapi.testclient import TestClient
from dotenv import load_dotenv

# Load the test environment FIRST, before any storefront imports, so that the
# settings module finds the required variables.
load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), "..", ".env.test"))

from storefront.main import app  # noqa: E402
from storefront.services.woocommerce_service import WooCommerceService  # noqa: E402
from storefront.utils.rate_limiter import limiter  # noqa: E402
from factories import make_category, make_product  # noqa: E402


@pytest.fixture
def product_payload():
    return make_product


@pytest.fixture
def category_payloads():
    return [
        make_category(15, "voiles", count=12),
        make_category(22, "accessoires", count=4),
        make_category(31, "melhfa-soie", count=2),
    ]


@pytest.fixture
def woocommerce_factory():
    """
    Builds a WooCommerceService whose HTTP traffic goes to ``handler``
    (an httpx.MockTransport handler) instead of the network.
    """
    def factory(handler, **kwargs):
        kwargs.setdefault("retry_attempts", 1)
        return WooCommerceService(
            "https://shop.test",
            "ck_test",
            "cs_test",
            transport=httpx.MockTransport(handler),
            **kwargs,
        )

    return factory


@pytest.fixture(scope="function")
def test_client():
    """
    Provides a TestClient for API integration tests. Tests replace the
    services they exercise through app.dependency_overrides.
    """
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
    limiter.reset()
