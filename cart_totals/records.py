"""Records exchanged between the totals stages and promotion hooks."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Optional

from . import money
from .identity import ItemDifference, PromotionDifference, is_same_item, item_key

if TYPE_CHECKING:
    from .counter import ItemCounter
    from .interfaces import CartItem, Promotion


@dataclass(frozen=True)
class ItemSubtotal:
    item: CartItem
    quantity: int
    subtotal_before_promotions: Decimal
    subtotal_after_promotions: Decimal


@dataclass(frozen=True)
class ItemPromoImpact:
    """Signed price change a promotion made to one item's subtotal."""

    item: CartItem
    promotion: Promotion
    price_impact: Decimal


@dataclass
class PromoImpact:
    """Everything one promotion changed while the promotion and item lists converged."""

    promotion: Promotion
    item_differences: list[ItemDifference] = field(default_factory=list)
    promotion_differences: list[PromotionDifference] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.item_differences and not self.promotion_differences


class ItemSubtotalReducer:
    """Mutable view of one item subtotal for the redistribution pass.

    Assigning a negative ``subtotal`` stores zero.
    """

    __slots__ = ("item", "quantity", "_subtotal")

    def __init__(self, item: CartItem, quantity: int, subtotal: Decimal) -> None:
        self.item = item
        self.quantity = quantity
        self._subtotal = subtotal

    @property
    def subtotal(self) -> Decimal:
        return self._subtotal

    @subtotal.setter
    def subtotal(self, value: Decimal) -> None:
        value = money.to_decimal(value)
        self._subtotal = money.ZERO if money.is_negative(value) else value

    def __repr__(self) -> str:
        return f"ItemSubtotalReducer({item_key(self.item)!r}, {self.quantity}, {self._subtotal})"


@dataclass(frozen=True)
class ModifiedCartItemData:
    item: CartItem
    quantity: int

    def price_total(self) -> Decimal:
        """Undiscounted price of the held units."""
        return money.mul(money.to_decimal(self.item.unit_price), money.to_decimal(self.quantity))


@dataclass(frozen=True)
class ModifiedCartData:
    """Read-only view of the cart handed to promotion hooks."""

    items: tuple[ModifiedCartItemData, ...] = ()
    promotions: tuple[Promotion, ...] = ()

    @classmethod
    def from_counters(
        cls, counters: list[ItemCounter], promotions: list[Promotion]
    ) -> ModifiedCartData:
        return cls(
            items=tuple(ModifiedCartItemData(c.item, c.quantity) for c in counters),
            promotions=tuple(promotions),
        )

    def get_item_quantity(self, item: CartItem) -> Optional[int]:
        """Quantity of the item, or None if the view does not hold it."""
        for data in self.items:
            if is_same_item(data.item, item):
                return data.quantity
        return None

    def get_total_quantity(self) -> int:
        return sum(data.quantity for data in self.items)

    def get_items(self) -> list[CartItem]:
        return [data.item for data in self.items]

    def has_promotion(self, promotion: Promotion) -> bool:
        return any(is_same_item(p, promotion) for p in self.promotions)


class PromoCalculationsContext:
    """Per-call scratch space, namespaced by promotion identity.

    One promotion's hook invocations within a single totals computation
    share values through here, e.g. a running total across items. A new
    context is created for every computation.
    """

    def __init__(self) -> None:
        self._data: dict[str, dict[str, Any]] = {}

    def get_data(self) -> dict[str, dict[str, Any]]:
        return {key: dict(values) for key, values in self._data.items()}

    def set_value(self, promotion: Promotion, key: str, value: Any) -> None:
        self._data.setdefault(item_key(promotion), {})[key] = value

    def get_value(self, promotion: Promotion, key: str, default: Any = None) -> Any:
        return self._data.get(item_key(promotion), {}).get(key, default)

    def has_value(self, promotion: Promotion, key: str) -> bool:
        return key in self._data.get(item_key(promotion), {})
