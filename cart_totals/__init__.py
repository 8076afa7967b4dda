"""Shopping cart totals with fixed-point promotion convergence."""

from .cart import Cart, ItemFilter, build_type_condition
from .config import CartConfig, parse_removal_floor
from .counter import ItemCounter, ItemCounterStore, RemovalFloor
from .errors import (
    CartError,
    InvalidArgumentError,
    DivisionByZeroError,
    ItemNotFoundError,
    InconsistentStateError,
    ConvergenceError,
)
from .identity import (
    KEY_SEPARATOR,
    ItemDifference,
    PromotionDifference,
    item_key,
    is_same_item,
    keyed_items,
    keyed_promotions,
    item_diff,
    promotion_diff,
)
from .interfaces import (
    CartItem,
    WeightedCartItem,
    BoundCartItem,
    MultipleBoundCartItem,
    Product,
    WeightedProduct,
    BoundProduct,
    MultipleBoundProduct,
    Promotion,
)
from .logs import configure_logging
from .promotions import (
    PromotionTemplate,
    CartPercentageDiscount,
    CartFixedSumDiscount,
    BundleDiscount,
    FreeItemPromotion,
    GiftPromotion,
)
from .records import (
    ItemSubtotal,
    ItemPromoImpact,
    PromoImpact,
    ItemSubtotalReducer,
    ModifiedCartItemData,
    ModifiedCartData,
    PromoCalculationsContext,
)
from .totals import CartTotals, TotalRounding
from .validation import require_positive, require_non_negative, require_integer

__all__ = [
    # Cart
    "Cart",
    "ItemFilter",
    "build_type_condition",
    "CartTotals",
    "TotalRounding",
    # Config
    "CartConfig",
    "parse_removal_floor",
    "configure_logging",
    # Counters
    "ItemCounter",
    "ItemCounterStore",
    "RemovalFloor",
    # Errors
    "CartError",
    "InvalidArgumentError",
    "DivisionByZeroError",
    "ItemNotFoundError",
    "InconsistentStateError",
    "ConvergenceError",
    # Identity
    "KEY_SEPARATOR",
    "ItemDifference",
    "PromotionDifference",
    "item_key",
    "is_same_item",
    "keyed_items",
    "keyed_promotions",
    "item_diff",
    "promotion_diff",
    # Items and promotions
    "CartItem",
    "WeightedCartItem",
    "BoundCartItem",
    "MultipleBoundCartItem",
    "Product",
    "WeightedProduct",
    "BoundProduct",
    "MultipleBoundProduct",
    "Promotion",
    # Promotion templates
    "PromotionTemplate",
    "CartPercentageDiscount",
    "CartFixedSumDiscount",
    "BundleDiscount",
    "FreeItemPromotion",
    "GiftPromotion",
    # Records
    "ItemSubtotal",
    "ItemPromoImpact",
    "PromoImpact",
    "ItemSubtotalReducer",
    "ModifiedCartItemData",
    "ModifiedCartData",
    "PromoCalculationsContext",
    # Validation
    "require_positive",
    "require_non_negative",
    "require_integer",
]
