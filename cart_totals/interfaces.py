"""Capabilities the totals engine consumes: cart items and promotions.

Items are structural (``typing.Protocol``): any object exposing
``cart_id``, ``cart_type`` and ``unit_price`` can be put in a cart.
Promotions implement the :class:`Promotion` ABC and its four reduction
hooks, called in this order by :meth:`Cart.perform_totals`:

1. ``reduce_promotions``: rewrite the active promotion list.
2. ``reduce_items``: rewrite item quantities (inject gifts, drop items).
3. ``reduce_item_subtotal``: adjust one item's running subtotal.
4. ``reduce_items_subtotal``: redistribute across all item subtotals.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Protocol, Sequence, runtime_checkable

if TYPE_CHECKING:
    from .cart import Cart
    from .counter import ItemCounter
    from .records import ItemSubtotalReducer, ModifiedCartData, PromoCalculationsContext


@runtime_checkable
class CartItem(Protocol):
    """A priced unit identified by (cart_id, cart_type)."""

    @property
    def cart_id(self) -> str: ...

    @property
    def cart_type(self) -> str: ...

    @property
    def unit_price(self) -> int:
        """Unit price in the minor currency unit."""
        ...


@runtime_checkable
class WeightedCartItem(CartItem, Protocol):
    """Item with a unit weight, counted by :meth:`CartTotals.get_weight`."""

    @property
    def weight(self) -> float: ...


@runtime_checkable
class BoundCartItem(CartItem, Protocol):
    """Item that follows another item in the cart (e.g. a deposit, a warranty).

    Removing the target removes the bound item. When
    ``update_quantity_automatically`` is true the bound item's quantity
    tracks the target's.
    """

    @property
    def bound_item_cart_id(self) -> str: ...

    @property
    def update_quantity_automatically(self) -> bool: ...


@runtime_checkable
class MultipleBoundCartItem(CartItem, Protocol):
    """Item bound to several targets; removed when any of them is removed."""

    @property
    def bound_item_cart_ids(self) -> Sequence[str]: ...


@dataclass(frozen=True)
class Product:
    """Plain cart item."""

    cart_id: str
    unit_price: int
    cart_type: str = "product"


@dataclass(frozen=True)
class WeightedProduct:
    cart_id: str
    unit_price: int
    weight: float
    cart_type: str = "product"


@dataclass(frozen=True)
class BoundProduct:
    cart_id: str
    unit_price: int
    bound_item_cart_id: str
    update_quantity_automatically: bool = True
    cart_type: str = "bound"


@dataclass(frozen=True)
class MultipleBoundProduct:
    cart_id: str
    unit_price: int
    bound_item_cart_ids: tuple[str, ...]
    cart_type: str = "bound"


class Promotion(ABC):
    """Rule that can veto itself, rewrite promotions, rewrite items,
    adjust item subtotals or redistribute amounts across items.

    Implementations must be stateless across calls; per-call scratch state
    belongs in the :class:`PromoCalculationsContext` handed to the
    subtotal hooks.
    """

    @property
    @abstractmethod
    def cart_id(self) -> str:
        """Promotion identifier."""

    @property
    @abstractmethod
    def cart_type(self) -> str:
        """Promotion kind, e.g. ``"discount"`` or ``"gift"``."""

    @abstractmethod
    def is_eligible(self, cart: Cart) -> bool:
        """Whether the promotion takes part in this totals computation."""

    @abstractmethod
    def reduce_promotions(
        self, snapshot: ModifiedCartData, promotions: list[Promotion]
    ) -> list[Promotion]:
        """Return the promotions that remain active.

        ``promotions`` excludes this promotion; it is kept regardless.
        """

    @abstractmethod
    def reduce_items(
        self, snapshot: ModifiedCartData, counters: list[ItemCounter]
    ) -> list[ItemCounter]:
        """Return the item counters after this promotion's changes."""

    @abstractmethod
    def reduce_item_subtotal(
        self,
        snapshot: ModifiedCartData,
        item: CartItem,
        subtotal: Decimal,
        context: PromoCalculationsContext,
    ) -> Decimal:
        """Return the item's new subtotal. Negative results are clamped to zero."""

    @abstractmethod
    def reduce_items_subtotal(
        self,
        reducers: list[ItemSubtotalReducer],
        context: PromoCalculationsContext,
        snapshot: ModifiedCartData,
    ) -> None:
        """Redistribute amounts by assigning ``reducer.subtotal`` in place."""
