# /storefront/services/woocommerce_service.py

import httpx
import logging
import tenacity
from typing import Any, Callable, Dict, List, Optional

from storefront.models.api import ApiResponse
from storefront.models.domain import Category, PaymentGateway, Product
from storefront.utils.circuit_breaker import CircuitBreaker, CircuitOpenError
from storefront.utils.metrics import catalog_requests_counter

logger = logging.getLogger(__name__)

DEFAULT_PRODUCT_PARAMS = {"page": 1, "per_page": 20, "status": "publish"}

# One page large enough to hold every category the storefront navigates by.
CATEGORY_SNAPSHOT_PARAMS = {"per_page": 100, "hide_empty": True, "orderby": "count", "order": "desc"}

# Only failures to reach the platform are retried. A read timeout means the
# platform is hanging; retrying it would outlast the request timeout.
RETRYABLE_ERRORS = (httpx.ConnectError, httpx.ConnectTimeout, httpx.RemoteProtocolError)


class WooCommerceService:
    """
    Async client for the WooCommerce REST API.

    Every public operation returns an ApiResponse envelope; transport and
    platform errors are logged and turned into ``success=False`` results
    instead of being raised.
    """

    def __init__(
        self,
        base_url: str,
        consumer_key: str,
        consumer_secret: str,
        version: str = "wc/v3",
        timeout: float = 10.0,
        retry_attempts: int = 3,
        retry_budget: float = 8.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.version = version
        self.retry_attempts = retry_attempts
        self.retry_budget = retry_budget
        self.circuit_breaker = CircuitBreaker(name="woocommerce")
        # Query string authentication, as the platform expects over HTTPS.
        self.http_client = httpx.AsyncClient(
            base_url=f"{self.base_url}/wp-json/{version}/",
            params={"consumer_key": consumer_key, "consumer_secret": consumer_secret},
            timeout=httpx.Timeout(timeout, connect=5.0),
            transport=transport,
        )

    async def resilient_api_call(self, func: Callable, *args, **kwargs):
        retrying = tenacity.AsyncRetrying(
            retry=tenacity.retry_if_exception_type(RETRYABLE_ERRORS),
            stop=tenacity.stop_after_attempt(self.retry_attempts) | tenacity.stop_after_delay(self.retry_budget),
            wait=tenacity.wait_exponential(multiplier=2, min=1, max=10),
            before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        return await retrying(func, *args, **kwargs)

    async def aclose(self):
        await self.http_client.aclose()

    # --- Products ---

    async def list_products(self, params: Optional[Dict[str, Any]] = None) -> ApiResponse[List[Product]]:
        """Lists published products; ``params`` use the platform's query vocabulary."""
        query = {**DEFAULT_PRODUCT_PARAMS, **(params or {})}
        try:
            data = await self._get("products", query)
            products = self._parse_products(data)
            logger.info(f"Received {len(products)} products for page {query.get('page')}")
            return ApiResponse.ok(products)
        except Exception as e:
            return self._failure("products", e, data=[])

    async def get_product_by_slug(self, slug: str) -> ApiResponse[Optional[Product]]:
        """An unknown slug is a successful lookup with no data, not an error."""
        try:
            data = await self._get("products", {"slug": slug, "status": "publish"})
            products = self._parse_products(data)
            return ApiResponse.ok(products[0] if products else None)
        except Exception as e:
            return self._failure("product_by_slug", e)

    async def get_product_by_id(self, product_id: int) -> ApiResponse[Optional[Product]]:
        try:
            data = await self._get(f"products/{product_id}")
            if not isinstance(data, dict):
                raise ValueError("expected a product object")
            return ApiResponse.ok(Product.model_validate(data))
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                catalog_requests_counter.labels(endpoint="product_by_id", status="not_found").inc()
                return ApiResponse.ok(None)
            return self._failure("product_by_id", e)
        except Exception as e:
            return self._failure("product_by_id", e)

    async def get_featured_products(self, limit: int = 6) -> ApiResponse[List[Product]]:
        return await self.list_products({"featured": True, "per_page": limit, "orderby": "date", "order": "desc"})

    async def get_sale_products(self, limit: int = 6) -> ApiResponse[List[Product]]:
        return await self.list_products({"on_sale": True, "per_page": limit, "orderby": "date", "order": "desc"})

    async def get_new_arrivals(self, limit: int = 8) -> ApiResponse[List[Product]]:
        return await self.list_products({"per_page": limit, "orderby": "date", "order": "desc"})

    async def search_products(self, query: str, limit: int = 20) -> ApiResponse[List[Product]]:
        return await self.list_products({"search": query, "per_page": limit})

    async def get_products_by_category(self, category_id: int, limit: int = 20) -> ApiResponse[List[Product]]:
        return await self.list_products({"category": category_id, "per_page": limit, "orderby": "date", "order": "desc"})

    async def get_related_products(self, product: Product, limit: int = 4) -> ApiResponse[List[Product]]:
        """Products sharing the first category of ``product``, excluding the product itself."""
        if not product.categories:
            return ApiResponse.ok([])
        return await self.list_products({
            "category": product.categories[0].id,
            "per_page": limit,
            "exclude": [product.id],
        })

    # --- Categories ---

    async def list_categories(self) -> ApiResponse[List[Category]]:
        """Returns the full, non-empty category snapshot ordered by product count."""
        try:
            data = await self._get("products/categories", CATEGORY_SNAPSHOT_PARAMS)
            if not isinstance(data, list):
                raise ValueError("expected a list of categories")
            categories = [Category.model_validate(item) for item in data]
            categories = [category for category in categories if category.count > 0]
            logger.info(f"Received {len(categories)} categories")
            return ApiResponse.ok(categories)
        except Exception as e:
            return self._failure("categories", e, data=[])

    # --- Payment gateways ---

    async def list_payment_gateways(self) -> ApiResponse[List[PaymentGateway]]:
        try:
            data = await self._get("payment_gateways")
            if not isinstance(data, list):
                raise ValueError("expected a list of payment gateways")
            gateways = [
                PaymentGateway.from_woocommerce_api(item) if isinstance(item, dict) else None for item in data
            ]
            return ApiResponse.ok([gateway for gateway in gateways if gateway])
        except Exception as e:
            return self._failure("payment_gateways", e, data=[])

    # --- Diagnostics ---

    async def test_connection(self) -> ApiResponse[Dict[str, Any]]:
        """Fetches one product and a few categories to check credentials and reachability."""
        try:
            products = await self._get("products", {"per_page": 1})
            categories = await self._get("products/categories", {"per_page": 5})
            return ApiResponse.ok({
                "status": "success",
                "products_count": len(products),
                "categories_count": len(categories),
                "first_category": categories[0].get("name") if categories else None,
            })
        except Exception as e:
            return self._failure("test_connection", e, data={"status": "error"})

    # --- Private Helper Methods ---

    async def _get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GETs an endpoint and returns the decoded JSON body; raises on any failure."""
        resp = await self.circuit_breaker.call(
            self.resilient_api_call, self.http_client.get, endpoint, params=self._encode_params(params or {})
        )
        resp.raise_for_status()
        catalog_requests_counter.labels(endpoint=endpoint.split("/")[0], status="success").inc()
        return resp.json()

    @staticmethod
    def _encode_params(params: Dict[str, Any]) -> Dict[str, Any]:
        """Drops unset values and joins id lists the way the platform parses them."""
        encoded = {}
        for key, value in params.items():
            if value is None:
                continue
            if isinstance(value, (list, tuple, set)):
                value = ",".join(str(item) for item in value)
            encoded[key] = value
        return encoded

    @staticmethod
    def _parse_products(data: Any) -> List[Product]:
        if not isinstance(data, list):
            raise ValueError("expected a list of products")
        products = []
        for item in data:
            product = Product.from_woocommerce_api(item) if isinstance(item, dict) else None
            if product:
                products.append(product)
        return products

    def _failure(self, endpoint: str, error: Exception, data: Any = None) -> ApiResponse:
        message = describe_error(error)
        catalog_requests_counter.labels(endpoint=endpoint, status="error").inc()
        logger.error(f"WooCommerce {endpoint} request failed: {message}")
        return ApiResponse.fail(message, data=data)


def describe_error(error: Exception) -> str:
    """Turns a transport or platform exception into a human-readable reason."""
    if isinstance(error, httpx.HTTPStatusError):
        response = error.response
        platform_message = None
        try:
            body = response.json()
            if isinstance(body, dict):
                platform_message = body.get("message")
        except ValueError:
            pass
        return f"API error: {response.status_code} - {platform_message or response.reason_phrase or 'Unknown'}"
    if isinstance(error, httpx.TimeoutException):
        return "API error: timeout"
    if isinstance(error, httpx.TransportError):
        return f"API error: {str(error) or error.__class__.__name__}"
    if isinstance(error, CircuitOpenError):
        return "API error: catalog platform temporarily unavailable"
    if isinstance(error, ValueError):
        return "API error: malformed response"
    return f"API error: {error}"
