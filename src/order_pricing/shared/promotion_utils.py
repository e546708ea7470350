"""
Promotion and loyalty tables for order pricing.

Defines the recognized promotional codes and the customer tier ladder used
by the discount engine, with lookup helpers for both.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from .models import CustomerTier


class PromotionType(str, Enum):
    """Recognized promotional codes."""

    SAVE10 = "SAVE10"  # 10% off
    SAVE20 = "SAVE20"  # 20% off
    SAVE50 = "SAVE50"  # 50% off


@dataclass(frozen=True)
class PromotionConfig:
    """Configuration for a promotion type."""

    code: str
    discount_pct: Decimal
    description: str


@dataclass(frozen=True)
class TierConfig:
    """Spend threshold and discount for a customer tier."""

    tier: CustomerTier
    threshold: Decimal
    discount_pct: Decimal


# Promotion configurations
PROMOTION_CONFIGS = {
    PromotionType.SAVE10: PromotionConfig(
        code="SAVE10",
        discount_pct=Decimal("0.10"),
        description="10% off your order",
    ),
    PromotionType.SAVE20: PromotionConfig(
        code="SAVE20",
        discount_pct=Decimal("0.20"),
        description="20% off your order",
    ),
    PromotionType.SAVE50: PromotionConfig(
        code="SAVE50",
        discount_pct=Decimal("0.50"),
        description="50% off your order",
    ),
}

# Highest threshold first
CUSTOMER_TIERS = (
    TierConfig(CustomerTier.PREMIUM, Decimal("1000"), Decimal("0.10")),
    TierConfig(CustomerTier.GOLD, Decimal("500"), Decimal("0")),
    TierConfig(CustomerTier.STANDARD, Decimal("0"), Decimal("0")),
)


def normalize_promo_code(code: str | None) -> str | None:
    """Strip and upper-case a buyer-supplied code; blank codes become None."""
    if code is None:
        return None
    code = code.strip().upper()
    return code or None


def lookup_promotion(code: str | None) -> PromotionConfig | None:
    """
    Find the promotion for a buyer-supplied code.

    Args:
        code: Promo code as typed by the buyer (case-insensitive)

    Returns:
        Matching promotion config, or None for missing or unrecognized codes
    """
    code = normalize_promo_code(code)
    if code is None:
        return None
    try:
        return PROMOTION_CONFIGS[PromotionType(code)]
    except ValueError:
        return None


def get_customer_tier(total_spent: Decimal) -> CustomerTier:
    """Classify lifetime spend into a tier (premium >= 1000, gold >= 500)."""
    return get_tier_config(total_spent).tier


def get_tier_config(total_spent: Decimal) -> TierConfig:
    for config in CUSTOMER_TIERS:
        if total_spent >= config.threshold:
            return config
    return CUSTOMER_TIERS[-1]
