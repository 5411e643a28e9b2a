# /storefront/models/domain.py

import logging
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime, timezone

# Core Pydantic models shared by the catalog client, the normalizers and
# checkout. Platform payloads carry many more fields than we use, so every
# model built from raw platform data ignores unknown keys.

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PlatformModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class CategoryRef(PlatformModel):
    id: int
    name: str = ""
    slug: str = ""


class ProductImage(PlatformModel):
    id: Optional[int] = None
    src: str
    alt: str = ""


class ProductAttribute(PlatformModel):
    id: Optional[int] = None
    name: str
    options: List[str] = []


class Product(PlatformModel):
    id: int
    name: str
    slug: str
    permalink: str = ""
    price: str = ""
    regular_price: str = ""
    sale_price: str = ""
    on_sale: bool = False
    featured: bool = False
    stock_status: str = "instock"
    stock_quantity: Optional[int] = None
    short_description: str = ""
    description: str = ""
    categories: List[CategoryRef] = []
    images: List[ProductImage] = []
    attributes: List[ProductAttribute] = []

    @field_validator("price", "regular_price", "sale_price", mode="before")
    @classmethod
    def price_as_string(cls, v):
        # The platform sends decimal strings, but older stores answer with
        # numbers or null for unset prices.
        if v is None:
            return ""
        return str(v)

    @classmethod
    def from_woocommerce_api(cls, product_data: Dict[str, Any]) -> Optional["Product"]:
        """
        Build a Product from a raw WooCommerce product dictionary.
        Malformed entries are logged and skipped instead of failing the whole listing.
        """
        try:
            return cls.model_validate(product_data)
        except (ValueError, TypeError) as e:
            logger.error(f"Could not parse product with ID {product_data.get('id')}: {e}")
            return None


class Category(PlatformModel):
    id: int
    name: str
    slug: str
    parent: int = 0
    description: str = ""
    count: int = 0


class GatewaySetting(PlatformModel):
    id: str = ""
    label: str = ""
    type: str = ""
    value: Any = None


class PaymentGateway(PlatformModel):
    id: str
    title: str = ""
    description: str = ""
    order: Any = None
    enabled: bool = False
    method_title: str = ""
    method_description: str = ""
    method_supports: List[str] = []
    supports: List[str] = []
    settings: Dict[str, GatewaySetting] = {}

    @field_validator("settings", mode="before")
    @classmethod
    def empty_settings_as_dict(cls, v):
        # PHP serializes an empty settings map as [].
        return v or {}

    @classmethod
    def from_woocommerce_api(cls, gateway_data: Dict[str, Any]) -> Optional["PaymentGateway"]:
        """One unusable gateway must not hide the others; log it and skip it."""
        try:
            return cls.model_validate(gateway_data)
        except (ValueError, TypeError) as e:
            logger.error(f"Could not parse payment gateway '{gateway_data.get('id')}': {e}")
            return None


class PaymentMethodSettings(BaseModel):
    instructions: str = ""
    enable_for_methods: List[str] = []


class PaymentMethod(BaseModel):
    id: str
    title: str
    description: str = ""
    method_title: str = ""
    method_description: str = ""
    enabled: bool = True
    supports: List[str] = []
    settings: PaymentMethodSettings = Field(default_factory=PaymentMethodSettings)


class CartItem(BaseModel):
    id: int
    name: str
    price: float = Field(ge=0)
    quantity: int = Field(default=1, ge=1)
    image: Optional[str] = None
    slug: Optional[str] = None

    @property
    def total(self) -> float:
        return self.price * self.quantity


class WishlistItem(BaseModel):
    id: int
    name: str
    price: str = ""
    regular_price: str = ""
    sale_price: str = ""
    image: Optional[str] = None
    slug: Optional[str] = None
    added_at: datetime = Field(default_factory=utc_now)


class CustomerInfo(BaseModel):
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    postal_code: str = ""
    country: str = "MR"
    notes: str = ""


class OrderItem(BaseModel):
    id: int
    name: str
    price: float
    quantity: int
    total: float


class OrderSubmission(BaseModel):
    customer_info: CustomerInfo
    items: List[OrderItem]
    payment_method: str
    payment_method_title: str
    subtotal: float
    shipping: float
    total: float


class OrderResult(BaseModel):
    success: bool
    order: Optional[Dict[str, Any]] = None
    message: Optional[str] = None
