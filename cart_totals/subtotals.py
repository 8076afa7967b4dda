"""Per-item subtotal reduction (stage 3) and cross-item redistribution (stage 4)."""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import TYPE_CHECKING

from . import money
from .records import (
    ItemPromoImpact,
    ItemSubtotal,
    ItemSubtotalReducer,
    ModifiedCartData,
    PromoCalculationsContext,
)

if TYPE_CHECKING:
    from .counter import ItemCounter
    from .interfaces import Promotion


def _clamp(value: Decimal) -> Decimal:
    return money.ZERO if money.is_negative(value) else value


def reduce_item_subtotals(
    counters: list[ItemCounter],
    promotions: list[Promotion],
    context: PromoCalculationsContext,
    impacts: list[ItemPromoImpact],
) -> list[ItemSubtotal]:
    """Fold every promotion's ``reduce_item_subtotal`` over each item.

    Each item starts from its raw ``unit_price * quantity``. Promotions run
    in list order; each sees the previous one's clamped result. Every
    non-zero change is appended to ``impacts``.
    """
    snapshot = ModifiedCartData.from_counters(counters, promotions)
    subtotals = []
    for counter in counters:
        if counter.quantity <= 0:
            continue

        item = counter.item
        before = money.mul(money.to_decimal(item.unit_price), money.to_decimal(counter.quantity))
        running = before
        for promotion in promotions:
            reduced = promotion.reduce_item_subtotal(snapshot, item, running, context)
            reduced = _clamp(money.to_decimal(reduced))
            delta = money.sub(reduced, running)
            if not delta.is_zero():
                impacts.append(ItemPromoImpact(item=item, promotion=promotion, price_impact=delta))
            running = reduced

        subtotals.append(
            ItemSubtotal(
                item=item,
                quantity=counter.quantity,
                subtotal_before_promotions=before,
                subtotal_after_promotions=running,
            )
        )
    return subtotals


def redistribute(
    subtotals: list[ItemSubtotal],
    promotions: list[Promotion],
    context: PromoCalculationsContext,
    snapshot: ModifiedCartData,
    impacts: list[ItemPromoImpact],
) -> list[ItemSubtotal]:
    """Let each promotion rewrite the already reduced subtotals as a whole.

    The hook assigns ``reducer.subtotal`` on the views it is given. Changed
    items get a new "after" value; "before" stays as stage 3 left it.
    """
    for promotion in promotions:
        reducers = [
            ItemSubtotalReducer(s.item, s.quantity, s.subtotal_after_promotions) for s in subtotals
        ]
        promotion.reduce_items_subtotal(list(reducers), context, snapshot)

        updated = []
        for stored, reducer in zip(subtotals, reducers):
            delta = money.sub(reducer.subtotal, stored.subtotal_after_promotions)
            if not delta.is_zero():
                impacts.append(
                    ItemPromoImpact(item=stored.item, promotion=promotion, price_impact=delta)
                )
                stored = replace(stored, subtotal_after_promotions=reducer.subtotal)
            updated.append(stored)
        subtotals = updated
    return subtotals
