"""Shared test fixtures: sample items and promotions with scripted behaviour.

Items:
- APPLE: 200 per unit
- BREAD: 120 per unit
- GIFT_BAG: 50 per unit, type "gift"
"""

from dataclasses import replace

from cart_totals.counter import ItemCounter
from cart_totals.identity import is_same_item
from cart_totals.interfaces import Product
from cart_totals.promotions import PromotionTemplate


# =============================================================================
# Items
# =============================================================================

APPLE = Product("apple", unit_price=200)
BREAD = Product("bread", unit_price=120)
GIFT_BAG = Product("bag", unit_price=50, cart_type="gift")


# =============================================================================
# Promotions with scripted hooks
# =============================================================================


class ReAddingPromotion(PromotionTemplate):
    """Puts ``target`` back into the promotion list whenever it is missing."""

    def __init__(self, cart_id, target, **kwargs):
        super().__init__(cart_id, **kwargs)
        self.target = target

    def reduce_promotions(self, snapshot, promotions):
        if any(is_same_item(p, self.target) for p in promotions):
            return promotions
        return promotions + [self.target]


class AlwaysGrowingPromotion(PromotionTemplate):
    """Adds one more unit of ``item`` every time it runs; never converges."""

    def __init__(self, cart_id, item, **kwargs):
        super().__init__(cart_id, **kwargs)
        self.item = item

    def reduce_items(self, snapshot, counters):
        return counters + [ItemCounter(self.item, 1)]


class DroppingPromotion(PromotionTemplate):
    """Removes ``item`` from the items being priced."""

    def __init__(self, cart_id, item, **kwargs):
        super().__init__(cart_id, **kwargs)
        self.item = item

    def reduce_items(self, snapshot, counters):
        return [c for c in counters if not is_same_item(c.item, self.item)]


class MutatingPromotion(PromotionTemplate):
    """Sets the quantity of ``item`` by mutating the counters it is given."""

    def __init__(self, cart_id, item, quantity, **kwargs):
        super().__init__(cart_id, **kwargs)
        self.item = item
        self.quantity = quantity

    def reduce_items(self, snapshot, counters):
        for counter in counters:
            if is_same_item(counter.item, self.item):
                counter.quantity = self.quantity
        return counters


class ZeroPaddingPromotion(PromotionTemplate):
    """Appends a zero-quantity copy of every counter."""

    def reduce_items(self, snapshot, counters):
        return counters + [replace(c, quantity=0) for c in counters]


class OvercutPromotion(PromotionTemplate):
    """Subtracts ``amount`` from every item subtotal."""

    def __init__(self, cart_id, amount, **kwargs):
        super().__init__(cart_id, **kwargs)
        self.amount = amount

    def reduce_item_subtotal(self, snapshot, item, subtotal, context):
        return subtotal - self.amount


class RecordingPromotion(PromotionTemplate):
    """Records the item quantities visible in each snapshot it receives."""

    def __init__(self, cart_id, **kwargs):
        super().__init__(cart_id, **kwargs)
        self.seen_items = []
        self.seen_promotions = []

    def reduce_promotions(self, snapshot, promotions):
        self.seen_promotions.append([p.cart_id for p in snapshot.promotions])
        return promotions

    def reduce_items(self, snapshot, counters):
        self.seen_items.append({d.item.cart_id: d.quantity for d in snapshot.items})
        return counters


class RunningTotalPromotion(PromotionTemplate):
    """Counts the items it has seen in the calculation context."""

    def reduce_item_subtotal(self, snapshot, item, subtotal, context):
        context.set_value(self, "seen", context.get_value(self, "seen", 0) + 1)
        return subtotal


def excluding(cart_id, *cart_types):
    """Promotion that switches off promotions of the given types."""
    return PromotionTemplate(cart_id, "exclusive", excludes=cart_types)
