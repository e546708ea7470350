"""Discount stack and the per-order pricing pipeline."""

from .discounts import (
    DEFAULT_RULES,
    DiscountContext,
    DiscountEngine,
    DiscountResult,
    DiscountRule,
    PromotionalDiscount,
    SeasonalDiscount,
    TierDiscount,
    VolumeDiscount,
)
from .pipeline import OrderPipeline, price_order

__all__ = [
    "DEFAULT_RULES",
    "DiscountContext",
    "DiscountEngine",
    "DiscountResult",
    "DiscountRule",
    "OrderPipeline",
    "PromotionalDiscount",
    "SeasonalDiscount",
    "TierDiscount",
    "VolumeDiscount",
    "price_order",
]
