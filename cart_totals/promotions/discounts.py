"""Percentage, fixed-sum and bundle discounts."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Iterable, Optional

from .. import money
from ..identity import item_key
from ..validation import require_non_negative
from .base import PromotionTemplate

if TYPE_CHECKING:
    from ..interfaces import CartItem
    from ..records import ItemSubtotalReducer, ModifiedCartData, PromoCalculationsContext

# Digits kept by discount arithmetic before the final rounding.
DISCOUNT_SCALE = 4


class CartPercentageDiscount(PromotionTemplate):
    """Multiply each item's subtotal, e.g. ``multiplier="0.9"`` for 10% off.

    Args:
        item_types: Only items of these cart types are discounted; all
            items when omitted.
    """

    def __init__(
        self,
        cart_id: str,
        multiplier: money.DecimalLike,
        cart_type: str = "discount",
        *,
        item_types: Optional[Iterable[str]] = None,
        **kwargs,
    ) -> None:
        super().__init__(cart_id, cart_type, **kwargs)
        self.multiplier = money.to_decimal(multiplier)
        require_non_negative(self.multiplier, "discount multiplier must be non-negative")
        self.item_types = frozenset(item_types) if item_types is not None else None

    def applies_to(self, item: CartItem) -> bool:
        return self.item_types is None or item.cart_type in self.item_types

    def reduce_item_subtotal(
        self,
        snapshot: ModifiedCartData,
        item: CartItem,
        subtotal: Decimal,
        context: PromoCalculationsContext,
    ) -> Decimal:
        if not self.applies_to(item):
            return subtotal
        return money.mul(subtotal, self.multiplier, DISCOUNT_SCALE)


class CartFixedSumDiscount(PromotionTemplate):
    """Take a fixed amount off the whole cart.

    The amount is spread over the items in proportion to their subtotals
    once every item has been priced. Shares are truncated to ``scale``; the
    leftover is handed out one smallest unit at a time, largest truncated
    remainder first, and never past an item's subtotal. The shares add up
    to exactly the discount, which never exceeds the cart's subtotal.
    """

    def __init__(
        self,
        cart_id: str,
        amount: money.DecimalLike,
        cart_type: str = "discount",
        *,
        scale: int = DISCOUNT_SCALE,
        **kwargs,
    ) -> None:
        super().__init__(cart_id, cart_type, **kwargs)
        self.amount = money.to_decimal(amount)
        require_non_negative(self.amount, "discount amount must be non-negative")
        require_non_negative(scale, "scale must be non-negative")
        self.scale = scale

    def reduce_items_subtotal(
        self,
        reducers: list[ItemSubtotalReducer],
        context: PromoCalculationsContext,
        snapshot: ModifiedCartData,
    ) -> None:
        total = money.total(r.subtotal for r in reducers)
        if total.is_zero() or self.amount.is_zero():
            return

        discount = min(self.amount, total)
        exact = [money.div(money.mul(r.subtotal, discount), total) for r in reducers]
        shares = [money.truncate(value, self.scale) for value in exact]
        self._allocate_leftover(reducers, exact, shares, money.sub(discount, money.total(shares)))

        for reducer, share in zip(reducers, shares):
            reducer.subtotal = money.sub(reducer.subtotal, share)
        context.set_value(self, "discount", discount)

    def _allocate_leftover(
        self,
        reducers: list[ItemSubtotalReducer],
        exact: list[Decimal],
        shares: list[Decimal],
        leftover: Decimal,
    ) -> None:
        unit = money.ONE.scaleb(-self.scale)
        order = sorted(
            range(len(reducers)),
            key=lambda i: (money.sub(exact[i], shares[i]), reducers[i].subtotal),
            reverse=True,
        )
        while money.is_positive(leftover):
            progressed = False
            for i in order:
                if not money.is_positive(leftover):
                    break
                room = money.sub(reducers[i].subtotal, shares[i])
                step = min(unit, leftover, room)
                if money.is_positive(step):
                    shares[i] = money.add(shares[i], step)
                    leftover = money.sub(leftover, step)
                    progressed = True
            if not progressed:
                break


class BundleDiscount(PromotionTemplate):
    """Discount the bundle members, but only when the cart holds all of them."""

    def __init__(
        self,
        cart_id: str,
        items: Iterable[CartItem],
        multiplier: money.DecimalLike,
        cart_type: str = "bundle",
        **kwargs,
    ) -> None:
        super().__init__(cart_id, cart_type, **kwargs)
        self.items = tuple(items)
        self.multiplier = money.to_decimal(multiplier)
        require_non_negative(self.multiplier, "bundle multiplier must be non-negative")
        self._member_keys = frozenset(item_key(i) for i in self.items)

    def is_complete(self, snapshot: ModifiedCartData, context: PromoCalculationsContext) -> bool:
        if not context.has_value(self, "complete"):
            complete = bool(self.items) and all(
                (snapshot.get_item_quantity(member) or 0) > 0 for member in self.items
            )
            context.set_value(self, "complete", complete)
        return context.get_value(self, "complete")

    def reduce_item_subtotal(
        self,
        snapshot: ModifiedCartData,
        item: CartItem,
        subtotal: Decimal,
        context: PromoCalculationsContext,
    ) -> Decimal:
        if item_key(item) not in self._member_keys or not self.is_complete(snapshot, context):
            return subtotal
        return money.mul(subtotal, self.multiplier, DISCOUNT_SCALE)
