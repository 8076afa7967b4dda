"""Ready-made promotions built on :class:`PromotionTemplate`."""

from .base import EligibilityCheck, PromotionTemplate
from .discounts import BundleDiscount, CartFixedSumDiscount, CartPercentageDiscount, DISCOUNT_SCALE
from .free_items import FreeItemPromotion, GiftPromotion

__all__ = [
    "EligibilityCheck",
    "PromotionTemplate",
    "BundleDiscount",
    "CartFixedSumDiscount",
    "CartPercentageDiscount",
    "DISCOUNT_SCALE",
    "FreeItemPromotion",
    "GiftPromotion",
]
