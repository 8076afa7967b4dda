"""Tests for identity keys and collection diffs."""

import pytest

from cart_totals.counter import ItemCounter
from cart_totals.errors import InconsistentStateError
from cart_totals.identity import (
    KEY_SEPARATOR,
    _lookup,
    is_same_item,
    item_diff,
    item_key,
    keyed_items,
    keyed_promotions,
    promotion_diff,
)
from cart_totals.interfaces import Product
from cart_totals.promotions import PromotionTemplate

from .fixtures import APPLE, BREAD


# =============================================================================
# Keys
# =============================================================================


class TestItemKey:
    def test_key_format(self) -> None:
        assert item_key(APPLE) == "apple" + KEY_SEPARATOR + "product"

    def test_same_item_ignores_price(self) -> None:
        """Identity is (cart_id, cart_type) only."""
        assert is_same_item(APPLE, Product("apple", unit_price=999))

    def test_type_distinguishes(self) -> None:
        assert not is_same_item(APPLE, Product("apple", 200, cart_type="gift"))

    def test_promotions_share_the_scheme(self) -> None:
        promo = PromotionTemplate("apple", "product")
        assert item_key(promo) == item_key(APPLE)


# =============================================================================
# Keyed collections
# =============================================================================


class TestKeyedItems:
    def test_merges_duplicates(self) -> None:
        keyed = keyed_items([ItemCounter(APPLE, 2), ItemCounter(BREAD, 1), ItemCounter(APPLE, 3)])
        assert list(keyed) == [item_key(APPLE), item_key(BREAD)]
        assert keyed[item_key(APPLE)].quantity == 5

    def test_inputs_not_mutated(self) -> None:
        first = ItemCounter(APPLE, 2)
        keyed = keyed_items([first, ItemCounter(APPLE, 3)])
        assert first.quantity == 2
        assert keyed[item_key(APPLE)] is not first


class TestKeyedPromotions:
    def test_first_occurrence_wins(self) -> None:
        a = PromotionTemplate("a")
        a_again = PromotionTemplate("a")
        b = PromotionTemplate("b")
        keyed = keyed_promotions([a, b, a_again])
        assert list(keyed.values()) == [a, b]
        assert keyed[item_key(a)] is a


# =============================================================================
# Diffs
# =============================================================================


class TestPromotionDiff:
    def test_no_change(self) -> None:
        a, b = PromotionTemplate("a"), PromotionTemplate("b")
        assert promotion_diff([a, b], [b, a]) == []

    def test_added_and_removed(self) -> None:
        a, b, c = PromotionTemplate("a"), PromotionTemplate("b"), PromotionTemplate("c")
        diff = promotion_diff([a, b], [a, c])
        changes = {d.promotion.cart_id: d.difference for d in diff}
        assert changes == {"b": -1, "c": 1}

    def test_duplicates_count_once(self) -> None:
        """Membership is binary, listing twice is not a change."""
        a = PromotionTemplate("a")
        assert promotion_diff([a], [a, a]) == []


class TestItemDiff:
    def test_quantity_delta(self) -> None:
        before = keyed_items([ItemCounter(APPLE, 2), ItemCounter(BREAD, 1)])
        after = keyed_items([ItemCounter(APPLE, 5)])
        diff = item_diff(before, after)
        changes = {d.item.cart_id: d.difference for d in diff}
        assert changes == {"apple": 3, "bread": -1}

    def test_unchanged_is_empty(self) -> None:
        before = keyed_items([ItemCounter(APPLE, 2)])
        after = keyed_items([ItemCounter(APPLE, 2)])
        assert item_diff(before, after) == []

    def test_lookup_of_unknown_key_raises(self) -> None:
        with pytest.raises(InconsistentStateError):
            _lookup("missing", {}, {})
