"""Immutable result of one totals computation."""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, Mapping, Optional

from . import money
from .identity import item_key
from .interfaces import WeightedCartItem
from .records import ItemPromoImpact, ItemSubtotal, PromoImpact

if TYPE_CHECKING:
    from .counter import ItemCounter
    from .interfaces import CartItem, Promotion

TotalRounding = Callable[[Decimal], Decimal]


def _copy_impact(impact: PromoImpact) -> PromoImpact:
    return replace(
        impact,
        item_differences=list(impact.item_differences),
        promotion_differences=list(impact.promotion_differences),
    )


class CartTotals:
    """Priced cart contents plus the audit trail of every promotion change.

    All queries are projections over the stored result; nothing is
    recomputed and nothing here can mutate the cart it came from.
    """

    def __init__(
        self,
        items: Mapping[str, ItemCounter],
        promotions: Mapping[str, Promotion],
        item_subtotals: list[ItemSubtotal],
        item_promo_impacts: list[ItemPromoImpact],
        promo_impacts: Mapping[str, PromoImpact],
        not_eligible: list[Promotion],
        rounding: TotalRounding,
    ) -> None:
        self._items = {key: (c.item, c.quantity) for key, c in items.items()}
        self._promotions = dict(promotions)
        self._item_subtotals = tuple(item_subtotals)
        self._item_promo_impacts = tuple(item_promo_impacts)
        self._promo_impacts = {
            key: _copy_impact(impact) for key, impact in promo_impacts.items() if not impact.is_empty()
        }
        self._not_eligible = tuple(not_eligible)
        self._rounding = rounding

    def get_total(self) -> Decimal:
        """Sum of every item's discounted subtotal, unrounded."""
        return money.total(s.subtotal_after_promotions for s in self._item_subtotals)

    def get_subtotal(self) -> Decimal:
        """Sum of every item's subtotal before promotions."""
        return money.total(s.subtotal_before_promotions for s in self._item_subtotals)

    def get_rounded_total(self) -> Decimal:
        return self._rounding(self.get_total())

    def get_rounding_amount(self) -> Decimal:
        """Signed difference the total rounding added to the total."""
        return money.sub(self.get_rounded_total(), self.get_total())

    def get_weight(self) -> Decimal:
        """Total weight of the weighted items."""
        return money.total(
            money.mul(money.to_decimal(item.weight), money.to_decimal(quantity))
            for item, quantity in self._items.values()
            if isinstance(item, WeightedCartItem)
        )

    def get_items(self) -> list[CartItem]:
        return [item for item, _ in self._items.values()]

    def get_item_quantity(self, item: CartItem) -> Optional[int]:
        """Final quantity of the item, or None if it is not in the result."""
        entry = self._items.get(item_key(item))
        if entry is None:
            return None
        return entry[1]

    def get_promotions(self) -> list[Promotion]:
        """Promotions that survived convergence, in applied order."""
        return list(self._promotions.values())

    def get_not_eligible(self) -> list[Promotion]:
        return list(self._not_eligible)

    def get_item_subtotals(self) -> list[ItemSubtotal]:
        return list(self._item_subtotals)

    def get_item_subtotal(self, item: CartItem) -> Optional[ItemSubtotal]:
        key = item_key(item)
        for subtotal in self._item_subtotals:
            if item_key(subtotal.item) == key:
                return subtotal
        return None

    def get_subtotal_for_item(self, item: CartItem) -> Decimal:
        """Discounted subtotal of one item; zero when the item is absent."""
        subtotal = self.get_item_subtotal(item)
        if subtotal is None:
            return money.ZERO
        return subtotal.subtotal_after_promotions

    def get_subtotal_for_promotion(self, promotion: Promotion) -> Decimal:
        """Net price change caused by one promotion (negative for discounts)."""
        key = item_key(promotion)
        return money.total(
            impact.price_impact
            for impact in self._item_promo_impacts
            if item_key(impact.promotion) == key
        )

    def get_item_promo_impacts(self) -> list[ItemPromoImpact]:
        return list(self._item_promo_impacts)

    def get_promo_impacts(self) -> dict[str, PromoImpact]:
        """Copies of the recorded impacts, keyed by promotion key."""
        return {key: _copy_impact(impact) for key, impact in self._promo_impacts.items()}

    def get_promo_impact(self, promotion: Promotion) -> Optional[PromoImpact]:
        impact = self._promo_impacts.get(item_key(promotion))
        if impact is None:
            return None
        return _copy_impact(impact)

    def has_promotion_diff(self) -> bool:
        """Whether any promotion added or removed another promotion."""
        return any(impact.promotion_differences for impact in self._promo_impacts.values())

    def has_item_diff(self) -> bool:
        """Whether any promotion changed an item quantity."""
        return any(impact.item_differences for impact in self._promo_impacts.values())

    def __repr__(self) -> str:
        return (
            f"CartTotals(items={len(self._items)}, promotions={len(self._promotions)}, "
            f"total={self.get_total()})"
        )
