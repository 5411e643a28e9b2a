# /storefront/services/query_builder.py

"""
Catalog query builder.

Translates the storefront's URL-level filter vocabulary (page, category slug,
filter, sort, search, price_min, price_max) into the query parameters of the
platform's product listing endpoint.

Rules, applied in order:
  1. page and a fixed page size are always sent.
  2. a category slug is resolved to its numeric id; an unknown slug drops
     the category constraint.
  3. a non-blank search term is sent as-is.
  4. price bounds are only sent when they actually narrow the range.
  5. the "sale" and "featured" filters set platform flags; "new" forces
     newest-first ordering and skips step 6.
  6. the sort key maps to an (orderby, order) pair, defaulting to newest first.
"""

import logging
import math
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from storefront.config.settings import settings
from storefront.services.category_resolver import CategoryResolver

logger = logging.getLogger(__name__)


class SpecialFilter(str, Enum):
    SALE = "sale"
    FEATURED = "featured"
    NEW = "new"


DEFAULT_SORT = "date-desc"

SORT_OPTIONS: Dict[str, Tuple[str, str]] = {
    "price-asc": ("price", "asc"),
    "price-desc": ("price", "desc"),
    "name-asc": ("title", "asc"),
    "name-desc": ("title", "desc"),
    "date-desc": ("date", "desc"),
}


class CatalogIntent(BaseModel):
    page: int = Field(default=1, ge=1)
    search: Optional[str] = None
    category_slug: Optional[str] = None
    price_min: Optional[float] = None
    price_max: Optional[float] = None
    special_filter: Optional[SpecialFilter] = None
    sort: Optional[str] = None

    @field_validator("search", "category_slug", "sort")
    @classmethod
    def blank_as_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None

    @classmethod
    def from_query_params(cls, params: Mapping[str, Any]) -> "CatalogIntent":
        """
        Builds an intent from raw URL query parameters. Values that cannot be
        parsed are treated as absent rather than rejected.
        """
        page = _to_number(params.get("page"))
        filter_value = params.get("filter")
        special_filter = None
        if filter_value in {f.value for f in SpecialFilter}:
            special_filter = SpecialFilter(filter_value)

        return cls(
            page=int(page) if page and page >= 1 else 1,
            search=params.get("search"),
            category_slug=params.get("category"),
            price_min=_to_number(params.get("price_min")),
            price_max=_to_number(params.get("price_max")),
            special_filter=special_filter,
            sort=params.get("sort"),
        )


def sort_params(sort: Optional[str]) -> Tuple[str, str]:
    return SORT_OPTIONS.get(sort or DEFAULT_SORT, SORT_OPTIONS[DEFAULT_SORT])


async def build_catalog_query(
    intent: CatalogIntent,
    resolver: CategoryResolver,
    per_page: Optional[int] = None,
    price_ceiling: Optional[float] = None,
) -> Dict[str, Any]:
    per_page = per_page or settings.products_per_page
    price_ceiling = price_ceiling if price_ceiling is not None else settings.price_ceiling

    params: Dict[str, Any] = {"page": intent.page, "per_page": per_page}

    if intent.category_slug:
        category_id = await resolver.resolve_category_id(intent.category_slug)
        if category_id is not None:
            params["category"] = category_id
        else:
            logger.warning(f"Dropping category filter for unknown slug '{intent.category_slug}'")

    if intent.search:
        params["search"] = intent.search

    if intent.price_min is not None and intent.price_min > 0:
        params["min_price"] = _clean_number(intent.price_min)
    if intent.price_max is not None and intent.price_max < price_ceiling:
        params["max_price"] = _clean_number(intent.price_max)

    if intent.special_filter == SpecialFilter.SALE:
        params["on_sale"] = True
    elif intent.special_filter == SpecialFilter.FEATURED:
        params["featured"] = True
    elif intent.special_filter == SpecialFilter.NEW:
        params["orderby"], params["order"] = SORT_OPTIONS[DEFAULT_SORT]
        return params

    params["orderby"], params["order"] = sort_params(intent.sort)
    return params


def _to_number(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _clean_number(value: float):
    return int(value) if float(value).is_integer() else value
