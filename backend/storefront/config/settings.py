# /storefront/config/settings.py

import sys
from typing import List
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # WooCommerce REST API
    wc_api_url: str
    wc_consumer_key: str
    wc_consumer_secret: str
    wc_api_version: str = "wc/v3"
    wc_timeout_seconds: float = 10.0
    # Connection failures are retried until this many seconds have passed;
    # read timeouts are never retried.
    wc_retry_attempts: int = 3
    wc_retry_budget_seconds: float = 8.0

    # Catalog behaviour
    products_per_page: int = 20
    price_ceiling: int = 100000
    currency: str = "MRU"
    category_cache_ttl: int = 60  # seconds; 0 disables the snapshot cache

    # Checkout
    free_shipping_threshold: int = 50000
    shipping_fee: int = 5000
    order_endpoint_url: str = "http://localhost:3000/api/orders/create"
    order_timeout_seconds: float = 15.0

    # Redis
    redis_url: str = "redis://localhost:6379"

    # Security
    api_key: str | None = None

    # Deployment
    workers: int = 4
    environment: str = Field(default="production", env="ENVIRONMENT")

    cors_allowed_origins: List[str] = Field(
        default=["http://localhost:3000"],
        env="CORS_ALLOWED_ORIGINS"
    )

    allowed_hosts: str = Field(
        default="localhost,127.0.0.1",
        env="ALLOWED_HOSTS"
    )

    # App Metadata & Limits
    api_version: str = "v1"
    rate_limit_per_minute: int = 100
    # A catalog request makes at most two platform calls one after the other
    # (category snapshot, then products), so this must stay above
    # 2 x (wc_retry_budget_seconds + wc_timeout_seconds).
    request_timeout_seconds: float = 40.0

    # ---------------- Validators ---------------- #

    @field_validator("cors_allowed_origins", mode="before")
    @classmethod
    def parse_cors_allowed_origins(cls, v):
        """
        Accept either a comma-separated string or a list for cors_allowed_origins.
        """
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("wc_api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("free_shipping_threshold", "shipping_fee", "price_ceiling")
    @classmethod
    def must_not_be_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Monetary settings cannot be negative")
        return v

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


def validate_environment(settings_obj: Settings):
    try:
        if not settings_obj.wc_api_url.startswith(("http://", "https://")):
            raise ValueError("WC_API_URL must be an absolute http(s) URL")

        if settings_obj.environment == "production":
            for var in ["wc_consumer_key", "wc_consumer_secret"]:
                if not getattr(settings_obj, var):
                    raise ValueError(f"{var.upper()} is required in production")

        platform_budget = 2 * (settings_obj.wc_retry_budget_seconds + settings_obj.wc_timeout_seconds)
        if settings_obj.request_timeout_seconds <= platform_budget:
            raise ValueError(
                f"REQUEST_TIMEOUT_SECONDS must exceed {platform_budget}s so degraded responses can be returned"
            )

        return settings_obj

    except Exception as e:
        print(f"--- [ERROR] Environment validation failed: {e}")
        sys.exit(1)


settings = Settings()
validate_environment(settings)
