"""Identity keys for cart items and promotions.

Items and promotions are the same logical entity when their
(cart_id, cart_type) pair matches, regardless of object identity. The key
is a plain string so it can address dicts and contexts directly.

The separator is assumed never to occur inside either field; an id that
contains it could collide with a different (cart_id, cart_type) pair.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Iterable, Union

from .errors import InconsistentStateError

if TYPE_CHECKING:
    from .counter import ItemCounter
    from .interfaces import CartItem, Promotion

    Keyed = Union[CartItem, Promotion]

KEY_SEPARATOR = "________"


@dataclass(frozen=True)
class ItemDifference:
    """Signed quantity change of one item."""

    item: CartItem
    difference: int


@dataclass(frozen=True)
class PromotionDifference:
    """A promotion added (+1) to or removed (-1) from the active list."""

    promotion: Promotion
    difference: int


def item_key(entity: Keyed) -> str:
    """Compute the identity key of an item or promotion."""
    return f"{entity.cart_id}{KEY_SEPARATOR}{entity.cart_type}"


def is_same_item(a: Keyed, b: Keyed) -> bool:
    return a.cart_id == b.cart_id and a.cart_type == b.cart_type


def keyed_items(counters: Iterable[ItemCounter]) -> dict[str, ItemCounter]:
    """Index counters by item key, summing quantities of duplicate keys.

    Always builds fresh counters so the inputs are never mutated.
    """
    result: dict[str, ItemCounter] = {}
    for counter in counters:
        key = item_key(counter.item)
        if key in result:
            result[key].quantity += counter.quantity
        else:
            result[key] = replace(counter)
    return result


def keyed_promotions(promotions: Iterable[Promotion]) -> dict[str, Promotion]:
    """Index promotions by key. The first occurrence keeps its position."""
    result: dict[str, Promotion] = {}
    for promotion in promotions:
        result.setdefault(item_key(promotion), promotion)
    return result


def _delta(before: dict[str, int], after: dict[str, int]) -> dict[str, int]:
    delta = dict(after)
    for key, count in before.items():
        delta[key] = delta.get(key, 0) - count
    return delta


def _lookup(key: str, *sources: dict):
    for source in sources:
        if key in source:
            return source[key]
    raise InconsistentStateError(key)


def promotion_diff(
    before: Iterable[Promotion], after: Iterable[Promotion]
) -> list[PromotionDifference]:
    """Membership diff between two promotion lists.

    Presence is binary: listing a promotion twice does not count twice.
    """
    keyed_before = keyed_promotions(before)
    keyed_after = keyed_promotions(after)
    delta = _delta(
        {key: 1 for key in keyed_before},
        {key: 1 for key in keyed_after},
    )

    result = []
    for key, count in delta.items():
        promotion = _lookup(key, keyed_after, keyed_before)
        if count != 0:
            result.append(PromotionDifference(promotion=promotion, difference=count))
    return result


def item_diff(
    before: dict[str, ItemCounter], after: dict[str, ItemCounter]
) -> list[ItemDifference]:
    """Per-key quantity delta between two keyed counter collections."""
    delta = _delta(
        {key: counter.quantity for key, counter in before.items()},
        {key: counter.quantity for key, counter in after.items()},
    )

    result = []
    for key, count in delta.items():
        counter = _lookup(key, after, before)
        if count != 0:
            result.append(ItemDifference(item=counter.item, difference=count))
    return result
