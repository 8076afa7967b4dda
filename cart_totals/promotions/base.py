"""Base class for the bundled promotion templates."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Callable, Iterable, Optional

from ..interfaces import CartItem, Promotion

if TYPE_CHECKING:
    from ..cart import Cart
    from ..counter import ItemCounter
    from ..records import ItemSubtotalReducer, ModifiedCartData, PromoCalculationsContext

EligibilityCheck = Callable[["Cart"], bool]


class PromotionTemplate(Promotion):
    """Promotion whose hooks change nothing until a subclass overrides them.

    Args:
        cart_id: Promotion identifier.
        cart_type: Promotion kind.
        excludes: Cart types of promotions this one switches off while it
            is active (mutual exclusion).
        eligible: Predicate over the cart; always eligible when omitted.
    """

    def __init__(
        self,
        cart_id: str,
        cart_type: str = "discount",
        *,
        excludes: Iterable[str] = (),
        eligible: Optional[EligibilityCheck] = None,
    ) -> None:
        self._cart_id = cart_id
        self._cart_type = cart_type
        self.excludes = frozenset(excludes)
        self._eligible = eligible

    @property
    def cart_id(self) -> str:
        return self._cart_id

    @property
    def cart_type(self) -> str:
        return self._cart_type

    def is_eligible(self, cart: Cart) -> bool:
        if self._eligible is None:
            return True
        return self._eligible(cart)

    def reduce_promotions(
        self, snapshot: ModifiedCartData, promotions: list[Promotion]
    ) -> list[Promotion]:
        if not self.excludes:
            return promotions
        return [p for p in promotions if p.cart_type not in self.excludes]

    def reduce_items(
        self, snapshot: ModifiedCartData, counters: list[ItemCounter]
    ) -> list[ItemCounter]:
        return counters

    def reduce_item_subtotal(
        self,
        snapshot: ModifiedCartData,
        item: CartItem,
        subtotal: Decimal,
        context: PromoCalculationsContext,
    ) -> Decimal:
        return subtotal

    def reduce_items_subtotal(
        self,
        reducers: list[ItemSubtotalReducer],
        context: PromoCalculationsContext,
        snapshot: ModifiedCartData,
    ) -> None:
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._cart_id!r}, {self._cart_type!r})"
