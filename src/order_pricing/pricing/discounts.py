"""
Discount engine for order pricing.

Applies the discount stack to an order's pre-discount total. Rules run in a
fixed order (customer tier, volume, promotional code, seasonal) and each one
takes its percentage off the total left by the rules before it, so the
order of the stack decides how much of the discount each rule is credited
with.
"""

from dataclasses import dataclass
from decimal import Decimal

from ..config.models import PricingOptions
from ..shared.models import DiscountEntry, DiscountType, Order
from ..shared.promotion_utils import (
    get_tier_config,
    lookup_promotion,
    normalize_promo_code,
)

ZERO = Decimal("0")


@dataclass(frozen=True)
class DiscountContext:
    """Inputs visible to every discount rule."""

    order: Order
    options: PricingOptions
    month: int


@dataclass(frozen=True)
class DiscountResult:
    """Final price and the discounts that produced it."""

    final_price: Decimal
    discounts: tuple[DiscountEntry, ...]


class DiscountRule:
    """Base class for a single step of the discount stack."""

    discount_type: DiscountType

    def rate(self, context: DiscountContext) -> Decimal:
        """Fraction (0-1) of the running total to take off."""
        raise NotImplementedError

    def code(self, context: DiscountContext) -> str | None:
        return None


class TierDiscount(DiscountRule):
    """Loyalty discount by customer tier (premium 10%, gold and standard 0%)."""

    discount_type = DiscountType.TIER

    def rate(self, context: DiscountContext) -> Decimal:
        return get_tier_config(context.order.customer.total_spent).discount_pct


class VolumeDiscount(DiscountRule):
    """Discount for large orders, decided on total quantity."""

    discount_type = DiscountType.VOLUME

    def rate(self, context: DiscountContext) -> Decimal:
        if context.order.total_quantity > context.options.large_order_threshold:
            return context.options.volume_discount_rate
        return ZERO


class PromotionalDiscount(DiscountRule):
    """Discount for a recognized promo code; unknown codes give nothing."""

    discount_type = DiscountType.PROMOTIONAL

    def rate(self, context: DiscountContext) -> Decimal:
        promotion = lookup_promotion(context.options.promotional_code)
        return promotion.discount_pct if promotion else ZERO

    def code(self, context: DiscountContext) -> str | None:
        return normalize_promo_code(context.options.promotional_code)


class SeasonalDiscount(DiscountRule):
    """Discount during seasonal months (December by default)."""

    discount_type = DiscountType.SEASONAL

    def rate(self, context: DiscountContext) -> Decimal:
        if context.month in context.options.seasonal_months:
            return context.options.seasonal_discount_rate
        return ZERO


DEFAULT_RULES: tuple[DiscountRule, ...] = (
    TierDiscount(),
    VolumeDiscount(),
    PromotionalDiscount(),
    SeasonalDiscount(),
)


class DiscountEngine:
    """
    Applies an ordered sequence of discount rules.

    Only rules with a non-zero rate are recorded. A rule takes its share of
    the non-negative part of the running total, and the final price is
    clamped at zero.
    """

    def __init__(self, rules: tuple[DiscountRule, ...] | list[DiscountRule] | None = None):
        self.rules = tuple(rules) if rules is not None else DEFAULT_RULES

    def apply_discounts(
        self,
        pre_discount_total: Decimal,
        order: Order,
        options: PricingOptions,
        month: int | None = None,
    ) -> DiscountResult:
        """
        Apply the discount stack to a pre-discount total.

        Args:
            pre_discount_total: Subtotal + adjustments + tax + fee
            order: Validated order being priced
            options: Pricing options (promo code, rates, thresholds)
            month: Calendar month for seasonal rules; taken from
                ``options.current_month`` when omitted

        Returns:
            DiscountResult with the clamped final price and applied discounts

        Raises:
            ValueError: If no month is given and the options do not pin one
        """
        if month is None:
            month = options.current_month
        if month is None:
            raise ValueError("Seasonal rules need a month: pass month or set current_month")

        context = DiscountContext(order=order, options=options, month=month)

        running_total = pre_discount_total
        applied = []
        for rule in self.rules:
            rate = rule.rate(context)
            if rate <= ZERO:
                continue
            amount = max(running_total, ZERO) * rate
            running_total -= amount
            applied.append(
                DiscountEntry(
                    type=rule.discount_type,
                    amount=amount,
                    percentage=rate,
                    code=rule.code(context),
                )
            )

        return DiscountResult(
            final_price=max(ZERO, running_total), discounts=tuple(applied)
        )
