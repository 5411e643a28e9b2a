# /storefront/services/cart_service.py

"""
Cart and wishlist state.

Both collections are owned by the shopper's client and travel to the server
as snapshots. A collection rebuilt from a snapshot starts un-hydrated: it can
be read (so the server-rendered view and the first interactive view agree)
but it refuses mutations until ``mark_hydrated()`` is called, and it never
asks for an "empty cart" redirect before then.
"""

import logging
from typing import Any, Dict, Generic, Iterable, List, Optional, TypeVar

from storefront.models.domain import CartItem, WishlistItem, utc_now

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT", CartItem, WishlistItem)


class HydrationPendingError(RuntimeError):
    """Raised when a collection is mutated before hydration completed."""


class HydratedCollection(Generic[ItemT]):
    item_model: type

    def __init__(self, items: Optional[Iterable[ItemT]] = None, hydrated: bool = True):
        self._items: Dict[int, ItemT] = {}
        for item in items or []:
            self._items[item.id] = item
        self._hydrated = hydrated

    @classmethod
    def from_snapshot(cls, snapshot: Optional[List[Dict[str, Any]]]):
        """Rebuilds server-side state from a client snapshot; starts un-hydrated."""
        items = [cls.item_model.model_validate(entry) for entry in snapshot or []]
        return cls(items, hydrated=False)

    # --- Hydration ---

    @property
    def is_hydrated(self) -> bool:
        return self._hydrated

    def mark_hydrated(self):
        self._hydrated = True

    def should_redirect_when_empty(self) -> bool:
        return self._hydrated and not self._items

    def _require_hydrated(self):
        if not self._hydrated:
            raise HydrationPendingError(f"{type(self).__name__} is not hydrated yet")

    # --- Reads ---

    @property
    def items(self) -> List[ItemT]:
        return list(self._items.values())

    def contains(self, item_id: int) -> bool:
        return item_id in self._items

    def get(self, item_id: int) -> Optional[ItemT]:
        return self._items.get(item_id)

    def snapshot(self) -> List[Dict[str, Any]]:
        return [item.model_dump(mode="json") for item in self._items.values()]

    def __len__(self) -> int:
        return len(self._items)

    # --- Mutations ---

    def remove(self, item_id: int):
        self._require_hydrated()
        self._items.pop(item_id, None)

    def clear(self):
        self._require_hydrated()
        self._items.clear()


class Cart(HydratedCollection[CartItem]):
    item_model = CartItem

    def add(self, item: CartItem, qty: int = 1):
        """Adds ``qty`` units, merging with an existing line for the same product."""
        self._require_hydrated()
        if qty <= 0:
            return
        existing = self._items.get(item.id)
        if existing:
            self._items[item.id] = existing.model_copy(update={"quantity": existing.quantity + qty})
        else:
            self._items[item.id] = item.model_copy(update={"quantity": qty})

    def set_quantity(self, item_id: int, qty: int):
        """A quantity of zero or less removes the line."""
        self._require_hydrated()
        if qty <= 0:
            self._items.pop(item_id, None)
            return
        existing = self._items.get(item_id)
        if existing is None:
            logger.warning(f"Ignoring quantity change for product {item_id} not in cart")
            return
        self._items[item_id] = existing.model_copy(update={"quantity": qty})

    def quantity_of(self, item_id: int) -> int:
        item = self._items.get(item_id)
        return item.quantity if item else 0

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self._items.values())

    @property
    def subtotal(self) -> float:
        return sum(item.total for item in self._items.values())


class Wishlist(HydratedCollection[WishlistItem]):
    item_model = WishlistItem

    def add(self, item: WishlistItem, qty: int = 1):
        """Wishlist entries have no quantity; adding twice keeps the first entry."""
        self._require_hydrated()
        if item.id in self._items:
            return
        self._items[item.id] = item.model_copy(update={"added_at": utc_now()})

    def toggle(self, item: WishlistItem) -> bool:
        """Adds or removes ``item``; returns True when it is now wishlisted."""
        if self.contains(item.id):
            self.remove(item.id)
            return False
        self.add(item)
        return True

    def set_quantity(self, item_id: int, qty: int):
        self._require_hydrated()
        if qty <= 0:
            self._items.pop(item_id, None)

    def quantity_of(self, item_id: int) -> int:
        return 1 if item_id in self._items else 0

    @property
    def item_count(self) -> int:
        return len(self._items)
