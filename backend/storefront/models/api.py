# /storefront/models/api.py

from pydantic import BaseModel, Field
from typing import Generic, List, Dict, Optional, TypeVar, Any
from datetime import datetime

from storefront.models.domain import (
    Category, CartItem, CustomerInfo, PaymentMethod, Product, utc_now
)

# Pydantic models for the uniform result envelope and for the request and
# response bodies of the HTTP API.

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Uniform result envelope returned by every catalog client operation."""
    success: bool
    data: Optional[T] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, data: Any) -> "ApiResponse":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, message: str, data: Any = None) -> "ApiResponse":
        return cls(success=False, data=data, message=message)


class APIResponse(BaseModel):
    success: bool
    message: str
    data: Optional[Dict] = None
    timestamp: datetime = Field(default_factory=utc_now)
    version: str


class PaymentMethodsResponse(BaseModel):
    success: bool
    data: List[PaymentMethod] = []
    message: Optional[str] = None


class ProductView(BaseModel):
    """A product plus the presentation fields derived from its prices."""
    product: Product
    is_on_sale: bool
    discount_percentage: int
    formatted_price: str
    formatted_regular_price: str
    image: str


class CatalogPage(BaseModel):
    products: List[ProductView] = []
    categories: List[Category] = []
    selected_category: Optional[Category] = None
    title: str
    page: int
    has_more: bool = False
    has_error: bool = False
    error_message: Optional[str] = None
    categories_error: Optional[str] = None


class ProductPage(BaseModel):
    product: ProductView
    related_products: List[ProductView] = []


class CheckoutRequest(BaseModel):
    customer_info: CustomerInfo
    items: List[CartItem] = Field(default_factory=list)
    payment_method: Optional[str] = None


class CheckoutResponse(BaseModel):
    success: bool
    order: Optional[Dict[str, Any]] = None
    message: Optional[str] = None
    missing_fields: List[str] = []
