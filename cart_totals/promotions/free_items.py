"""Promotions that give units of an item away."""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import TYPE_CHECKING

from .. import money
from ..counter import ItemCounter
from ..identity import is_same_item
from ..validation import require_integer, require_positive
from .base import PromotionTemplate

if TYPE_CHECKING:
    from ..interfaces import CartItem
    from ..records import ModifiedCartData, PromoCalculationsContext


class FreeItemPromotion(PromotionTemplate):
    """Up to ``quantity`` units of ``item`` cost nothing."""

    def __init__(
        self,
        cart_id: str,
        item: CartItem,
        quantity: int = 1,
        cart_type: str = "free_item",
        **kwargs,
    ) -> None:
        super().__init__(cart_id, cart_type, **kwargs)
        require_integer(quantity, "free quantity must be an integer")
        require_positive(quantity, "free quantity must be positive")
        self.item = item
        self.quantity = quantity

    def free_units(self, held: int) -> int:
        return min(self.quantity, held)

    def reduce_item_subtotal(
        self,
        snapshot: ModifiedCartData,
        item: CartItem,
        subtotal: Decimal,
        context: PromoCalculationsContext,
    ) -> Decimal:
        if not is_same_item(item, self.item):
            return subtotal
        held = snapshot.get_item_quantity(item) or 0
        discount = money.mul(money.to_decimal(item.unit_price), money.to_decimal(self.free_units(held)))
        return money.sub(subtotal, discount)


class GiftPromotion(FreeItemPromotion):
    """Put ``quantity`` units of a gift in the cart and make them free.

    Units of the gift the customer added themselves count toward the gift;
    only the shortfall is added.
    """

    def __init__(
        self,
        cart_id: str,
        gift: CartItem,
        quantity: int = 1,
        cart_type: str = "gift",
        **kwargs,
    ) -> None:
        super().__init__(cart_id, gift, quantity, cart_type, **kwargs)

    @property
    def gift(self) -> CartItem:
        return self.item

    def reduce_items(
        self, snapshot: ModifiedCartData, counters: list[ItemCounter]
    ) -> list[ItemCounter]:
        result = []
        found = False
        for counter in counters:
            if is_same_item(counter.item, self.gift):
                found = True
                if counter.quantity < self.quantity:
                    counter = replace(counter, quantity=self.quantity)
            result.append(counter)
        if not found:
            result.append(ItemCounter(self.gift, self.quantity))
        return result
