"""Item counters and the keyed store a cart keeps them in."""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Iterator, Optional

from .identity import item_key
from .validation import require_integer, require_positive

if TYPE_CHECKING:
    from .interfaces import CartItem


@dataclass
class ItemCounter:
    """An item together with how many units of it are held."""

    item: CartItem
    quantity: int = 0


class RemovalFloor(enum.Enum):
    """When a partial removal deletes the counter.

    CART deletes once the remaining quantity is zero or below. LEGACY only
    deletes below zero, so an exact-zero counter stays in the store (and
    is skipped when totals are computed).
    """

    CART = "cart"
    LEGACY = "legacy"

    def should_delete(self, remaining: int) -> bool:
        if self is RemovalFloor.LEGACY:
            return remaining < 0
        return remaining <= 0


class ItemCounterStore:
    """Mapping of item key to :class:`ItemCounter`, in insertion order."""

    def __init__(self, removal_floor: RemovalFloor = RemovalFloor.CART) -> None:
        self._counters: dict[str, ItemCounter] = {}
        self.removal_floor = removal_floor

    def add(self, item: CartItem, quantity: int = 1) -> ItemCounter:
        """Add units of an item, merging with an existing counter of the same key."""
        require_integer(quantity, "quantity must be an integer")
        require_positive(quantity, "quantity must be positive")

        key = item_key(item)
        counter = self._counters.get(key)
        if counter is None:
            counter = ItemCounter(item=item, quantity=quantity)
            self._counters[key] = counter
        else:
            counter.quantity += quantity
        return counter

    def remove(self, item: CartItem, quantity: Optional[int] = None) -> bool:
        """Remove an item, or some units of it.

        Returns True when the counter was deleted. Removing an item that is
        not stored is a no-op.
        """
        key = item_key(item)
        counter = self._counters.get(key)
        if counter is None:
            return False

        if quantity is None:
            del self._counters[key]
            return True

        require_integer(quantity, "quantity must be an integer")
        require_positive(quantity, "quantity must be positive")
        counter.quantity -= quantity
        if self.removal_floor.should_delete(counter.quantity):
            del self._counters[key]
            return True
        return False

    def set_quantity(self, item: CartItem, quantity: int) -> None:
        require_integer(quantity, "quantity must be an integer")
        key = item_key(item)
        if quantity <= 0:
            self._counters.pop(key, None)
            return
        counter = self._counters.get(key)
        if counter is None:
            self._counters[key] = ItemCounter(item=item, quantity=quantity)
        else:
            counter.quantity = quantity

    def quantity_of(self, item: CartItem) -> Optional[int]:
        """Stored quantity, or None when the item is absent."""
        counter = self._counters.get(item_key(item))
        if counter is None:
            return None
        return counter.quantity

    def get(self, key: str) -> Optional[ItemCounter]:
        return self._counters.get(key)

    def clear(self) -> None:
        self._counters.clear()

    def counters(self) -> list[ItemCounter]:
        """Shallow copies of the stored counters."""
        return [replace(counter) for counter in self._counters.values()]

    def items(self) -> list[CartItem]:
        return [counter.item for counter in self._counters.values()]

    def keys(self) -> list[str]:
        return list(self._counters)

    def reorder(self, keys: list[str]) -> None:
        """Rebuild the mapping in the given key order."""
        self._counters = {key: self._counters[key] for key in keys}

    def __len__(self) -> int:
        return len(self._counters)

    def __contains__(self, item: object) -> bool:
        try:
            return item_key(item) in self._counters
        except AttributeError:
            return False

    def __iter__(self) -> Iterator[ItemCounter]:
        return iter(list(self._counters.values()))
