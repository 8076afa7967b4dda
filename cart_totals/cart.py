"""Cart state and the totals entry point.

A :class:`Cart` owns the item counters and the ordered promotion list for
one shopping session. :meth:`Cart.perform_totals` prices a copy of that
state; the cart itself is only changed by the add/remove methods.

Example::

    cart = Cart()
    cart.add_item(Product("A", unit_price=200), 2)
    cart.add_promotion(CartPercentageDiscount("TENOFF", multiplier="0.9"))
    totals = cart.perform_totals()
    totals.get_total()  # Decimal("360.0000")
"""

from __future__ import annotations

from functools import partial
from typing import Any, Callable, Iterable, Mapping, Optional, Union

import structlog

from . import money
from .config import CartConfig
from .convergence import converge_items, converge_promotions
from .counter import ItemCounter, ItemCounterStore, RemovalFloor
from .errors import InvalidArgumentError, ItemNotFoundError
from .identity import is_same_item, item_key, keyed_items, keyed_promotions
from .interfaces import BoundCartItem, CartItem, MultipleBoundCartItem, Promotion
from .records import ItemPromoImpact, ModifiedCartData, PromoCalculationsContext, PromoImpact
from .subtotals import redistribute, reduce_item_subtotals
from .totals import CartTotals, TotalRounding
from .validation import require_integer, require_non_negative, require_positive

logger = structlog.get_logger(__name__)

ItemFilter = Union[str, Callable[[CartItem], bool]]

# Sort position for item types missing from a sort_by_type() order.
UNSORTED_POSITION = 1000


def build_type_condition(type_filter: str) -> Callable[[CartItem], bool]:
    """Build an item predicate from a type filter string.

    ``"product"`` matches one type, ``"product,gift"`` any of several and a
    leading ``~`` negates the match, so ``"~"`` matches every item.
    """
    negative = type_filter.startswith("~")
    if negative:
        type_filter = type_filter[1:]
    types = {t for t in type_filter.split(",") if t}

    def condition(item: CartItem) -> bool:
        matched = item.cart_type in types
        return not matched if negative else matched

    return condition


def _as_condition(item_filter: ItemFilter) -> Callable[[CartItem], bool]:
    if isinstance(item_filter, str):
        return build_type_condition(item_filter)
    if callable(item_filter):
        return item_filter
    raise InvalidArgumentError("item filter must be a type string or a callable")


class Cart:
    """Shopping cart: item counters, promotions and pricing settings."""

    def __init__(
        self,
        context: Optional[Mapping[str, Any]] = None,
        config: Optional[CartConfig] = None,
        total_rounding: Optional[TotalRounding] = None,
    ) -> None:
        config = config or CartConfig()
        self._items = ItemCounterStore(config.removal_floor)
        self._promotions: list[Promotion] = []
        # target cart_id -> keys of the items bound to it
        self._bindings: dict[str, dict[str, None]] = {}
        self._context: dict[str, Any] = dict(context or {})
        self._rounding_decimals = config.rounding_decimals
        self._max_iterations = config.max_iterations
        self._total_rounding = total_rounding

    # --- settings ---

    @property
    def context(self) -> Mapping[str, Any]:
        """Free-form data promotions may read in ``is_eligible``."""
        return self._context

    def set_context(self, context: Mapping[str, Any]) -> None:
        self._context = dict(context)

    @property
    def removal_floor(self) -> RemovalFloor:
        return self._items.removal_floor

    def get_rounding_decimals(self) -> int:
        return self._rounding_decimals

    def set_rounding_decimals(self, rounding_decimals: int) -> None:
        require_integer(rounding_decimals, "rounding decimals must be an integer")
        require_non_negative(rounding_decimals, "rounding decimals must be non-negative")
        self._rounding_decimals = rounding_decimals

    def get_total_rounding(self) -> Optional[TotalRounding]:
        return self._total_rounding

    def set_total_rounding(self, rounding: Optional[TotalRounding]) -> None:
        """Set the function that turns a raw total into the payable total.

        None restores half-up rounding to ``rounding_decimals``.
        """
        self._total_rounding = rounding

    # --- items ---

    def _find(self, cart_id: str) -> Optional[ItemCounter]:
        for counter in self._items:
            if counter.item.cart_id == cart_id:
                return counter
        return None

    def has_item(self, cart_id: str) -> bool:
        return self._find(cart_id) is not None

    def get_item(self, cart_id: str) -> CartItem:
        """Fetch an item by cart id.

        Raises:
            ItemNotFoundError: If no item has this cart id.
        """
        counter = self._find(cart_id)
        if counter is None:
            raise ItemNotFoundError(cart_id)
        return counter.item

    def get_item_quantity(self, item: CartItem) -> Optional[int]:
        """Stored quantity, or None when the item is not in the cart."""
        return self._items.quantity_of(item)

    def get_items(self, item_filter: ItemFilter = "~") -> list[CartItem]:
        condition = _as_condition(item_filter)
        return [item for item in self._items.items() if condition(item)]

    def count_items(self, item_filter: ItemFilter = "~") -> int:
        return len(self.get_items(item_filter))

    def is_empty(self, item_filter: ItemFilter = "~") -> bool:
        return self.count_items(item_filter) == 0

    def add_item(self, item: CartItem, quantity: int = 1) -> None:
        """Add units of an item; an item already in the cart has its quantity increased.

        A bound item needs its target(s) in the cart already. If it follows
        its target's quantity, ``quantity`` is replaced by the target's.

        Raises:
            ItemNotFoundError: If a bound item's target is not in the cart.
            InvalidArgumentError: If quantity is not a positive integer.
        """
        require_integer(quantity, "quantity must be an integer")
        require_positive(quantity, "quantity must be positive")
        existing = self._items.quantity_of(item)
        if existing is not None:
            self._change_quantity(item, existing + quantity)
            return

        targets: list[str] = []
        if isinstance(item, BoundCartItem):
            target = self._find(item.bound_item_cart_id)
            if target is None:
                raise ItemNotFoundError(item.bound_item_cart_id)
            if item.update_quantity_automatically:
                quantity = target.quantity
            targets.append(item.bound_item_cart_id)

        if isinstance(item, MultipleBoundCartItem):
            for target_id in item.bound_item_cart_ids:
                if not self.has_item(target_id):
                    raise ItemNotFoundError(target_id)
            targets.extend(item.bound_item_cart_ids)

        self._items.add(item, quantity)
        for target_id in targets:
            self._bind(item, target_id)
        logger.debug("item_added", item=item_key(item), quantity=quantity)

    def set_items(self, items: Iterable[tuple[CartItem, int]]) -> None:
        """Replace the cart contents with (item, quantity) pairs."""
        self.clear_items()
        for item, quantity in items:
            self.add_item(item, quantity)

    def set_item_quantity(self, cart_id: str, quantity: int) -> None:
        """Set an item's quantity; zero removes it.

        Items bound to it with ``update_quantity_automatically`` follow.

        Raises:
            ItemNotFoundError: If no item has this cart id.
        """
        require_integer(quantity, "quantity must be an integer")
        require_non_negative(quantity, "quantity must be non-negative")
        counter = self._find(cart_id)
        if counter is None:
            raise ItemNotFoundError(cart_id)

        if quantity == 0:
            self.remove_item(counter.item)
            return
        self._change_quantity(counter.item, quantity)

    def _change_quantity(self, item: CartItem, quantity: int) -> None:
        if self._items.quantity_of(item) == quantity:
            return
        self._items.set_quantity(item, quantity)
        self._sync_bound_quantities(item.cart_id, quantity)
        logger.debug("item_quantity_set", item=item_key(item), quantity=quantity)

    def remove_item(self, item: CartItem, quantity: Optional[int] = None) -> None:
        """Remove an item, or ``quantity`` units of it.

        Whether a partial removal that leaves exactly zero deletes the item
        depends on the cart's removal floor. Deleting an item also deletes
        the items bound to it. Removing an absent item does nothing.
        """
        if item not in self._items:
            return

        deleted = self._items.remove(item, quantity)
        if deleted:
            self._unbind(item)
            logger.debug("item_removed", item=item_key(item))
            return

        remaining = self._items.quantity_of(item)
        if remaining is not None:
            self._sync_bound_quantities(item.cart_id, remaining)
        logger.debug("item_quantity_reduced", item=item_key(item), quantity=remaining)

    def clear_items(self) -> None:
        self._items.clear()
        self._bindings.clear()

    def sort_by_type(self, order: list[str]) -> None:
        """Reorder items by type; types not listed go last, in current order."""
        positions = {cart_type: i for i, cart_type in enumerate(order)}
        keys = sorted(
            self._items.keys(),
            key=lambda k: positions.get(self._items.get(k).item.cart_type, UNSORTED_POSITION),
        )
        self._items.reorder(keys)

    def _bind(self, item: CartItem, target_id: str) -> None:
        self._bindings.setdefault(target_id, {})[item_key(item)] = None

    def _unbind(self, item: CartItem) -> None:
        # Drop items bound to this one (if no same-id item is left to hold them).
        if not self.has_item(item.cart_id):
            for bound_key in list(self._bindings.pop(item.cart_id, {})):
                bound = self._items.get(bound_key)
                if bound is not None:
                    self.remove_item(bound.item)

        key = item_key(item)
        for target_id in list(self._bindings):
            targets = self._bindings[target_id]
            targets.pop(key, None)
            if not targets:
                del self._bindings[target_id]

    def _sync_bound_quantities(self, target_id: str, quantity: int) -> None:
        # A target left at zero (legacy floor) takes its auto-bound items with it.
        for bound_key in list(self._bindings.get(target_id, {})):
            bound = self._items.get(bound_key)
            if (
                bound is None
                or not isinstance(bound.item, BoundCartItem)
                or not bound.item.update_quantity_automatically
            ):
                continue
            if quantity > 0:
                self._items.set_quantity(bound.item, quantity)
            else:
                self.remove_item(bound.item)

    # --- promotions ---

    def add_promotion(self, promotion: Promotion) -> None:
        """Append a promotion. A promotion with the same key is not added twice."""
        if any(is_same_item(p, promotion) for p in self._promotions):
            return
        self._promotions.append(promotion)

    def remove_promotion(self, promotion: Promotion) -> None:
        self._promotions = [p for p in self._promotions if not is_same_item(p, promotion)]

    def set_promotions(self, promotions: Iterable[Promotion]) -> None:
        self._promotions = []
        for promotion in promotions:
            self.add_promotion(promotion)

    def get_promotions(self) -> list[Promotion]:
        return list(self._promotions)

    # --- totals ---

    def _rounding(self) -> TotalRounding:
        if self._total_rounding is not None:
            return self._total_rounding
        return partial(money.round_half_up, scale=self._rounding_decimals)

    def perform_totals(self, item_filter: ItemFilter = "~") -> CartTotals:
        """Price the cart.

        Works on copies of the item counters: promotions are filtered by
        eligibility, converged, allowed to rewrite the items, then fold over
        each item's subtotal and finally redistribute across items.

        Args:
            item_filter: Type filter string or predicate selecting the items
                to price (default: all).

        Raises:
            ConvergenceError: If promotions keep rewriting each other or the
                items past the configured restart limit.
        """
        condition = _as_condition(item_filter)
        counters = [c for c in self._items.counters() if c.quantity > 0 and condition(c.item)]
        context = PromoCalculationsContext()
        promo_impacts: dict[str, PromoImpact] = {}

        eligible, rejected = [], []
        for promotion in self._promotions:
            (eligible if promotion.is_eligible(self) else rejected).append(promotion)

        promotions = converge_promotions(eligible, counters, promo_impacts, self._max_iterations)
        active = {item_key(p) for p in promotions}
        not_eligible = [p for p in rejected if item_key(p) not in active]

        items = converge_items(promotions, counters, promo_impacts, self._max_iterations)

        item_impacts: list[ItemPromoImpact] = []
        subtotals = reduce_item_subtotals(items, promotions, context, item_impacts)
        snapshot = ModifiedCartData.from_counters(items, promotions)
        subtotals = redistribute(subtotals, promotions, context, snapshot, item_impacts)

        totals = CartTotals(
            items=keyed_items(items),
            promotions=keyed_promotions(promotions),
            item_subtotals=subtotals,
            item_promo_impacts=item_impacts,
            promo_impacts=promo_impacts,
            not_eligible=not_eligible,
            rounding=self._rounding(),
        )
        logger.debug(
            "totals_computed",
            items=len(items),
            promotions=len(promotions),
            not_eligible=len(not_eligible),
            total=str(totals.get_total()),
        )
        return totals
