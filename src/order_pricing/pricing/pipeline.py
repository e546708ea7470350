"""
Order pricing pipeline.

Runs one order through validation, pricing, the discount stack and the
acceptance gate, producing exactly one outcome:

    validate --invalid--> Rejected(validation_failed)
        |
      valid --> compute pricing --> apply discounts --> acceptance gate
                                                          |-- pass --> Accepted
                                                          |-- fail --> Rejected(below_minimum |
                                                                                completion_failed)

Any fault raised while pricing is converted to Rejected(error) here; this is
the only place the pipeline recovers from exceptions, and nothing escapes
to the caller.
"""

from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from ..config.models import PricingOptions
from ..shared.exceptions import (
    OrderCompletionError,
    OrderValidationError,
    PricingComputationError,
)
from ..shared.logging_utils import get_structured_logger
from ..shared.models import (
    CENTS,
    AcceptedOrder,
    Order,
    PricingBreakdown,
    RejectedOrder,
    RejectionReason,
)
from ..shared.promotion_utils import get_customer_tier
from ..shared.validators import OrderValidator, PricingCalculator
from .discounts import DiscountEngine

log = get_structured_logger(__name__)


def extract_order_id(order: Any) -> str | None:
    """Best-effort order id for reporting, even for malformed records."""
    if isinstance(order, Order):
        return order.id
    if isinstance(order, Mapping) and order.get("id") not in (None, ""):
        return str(order["id"])
    return None


def utc_now() -> datetime:
    return datetime.now(UTC)


def _money(value: Decimal) -> str:
    return str(value.quantize(CENTS, rounding=ROUND_HALF_UP))


def resolve_options(options: PricingOptions | Mapping | None) -> PricingOptions:
    """Accept options as a model, a wire-format mapping, or None for defaults."""
    if options is None:
        return PricingOptions()
    if isinstance(options, PricingOptions):
        return options
    return PricingOptions.model_validate(dict(options))


class OrderPipeline:
    """
    Prices single orders; holds no per-order state, so it is safe to share.

    Args:
        validator: Order validator
        discount_engine: Discount stack
        clock: Source of the current time (UTC), read only to pin the
            seasonal month when the options leave it open
    """

    def __init__(
        self,
        validator: OrderValidator | None = None,
        discount_engine: DiscountEngine | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.validator = validator or OrderValidator()
        self.discount_engine = discount_engine or DiscountEngine()
        self.clock = clock

    def price_order(
        self, order: Any, options: PricingOptions | Mapping | None = None
    ) -> AcceptedOrder | RejectedOrder:
        """
        Price one order.

        Args:
            order: Raw order mapping (decoded JSON) or Order model
            options: Pricing options; defaults apply when omitted, and an
                open current_month is pinned from the clock

        Returns:
            AcceptedOrder with the pricing breakdown, or RejectedOrder with
            the reason

        Raises:
            pydantic.ValidationError: If ``options`` is a mapping that does
                not describe valid pricing options
        """
        options = resolve_options(options)
        if options.current_month is None:
            options = options.with_month(self.clock().month)
        order_id = extract_order_id(order)
        warnings: tuple[str, ...] = ()

        with log.correlation():
            try:
                validation = self.validator.validate(order)
                warnings = validation.warnings
                for warning in warnings:
                    log.warning("Order timestamp ignored", order_id=order_id, detail=warning)

                if not validation.valid:
                    raise OrderValidationError(
                        order_id=order_id, errors=list(validation.errors)
                    )

                outcome = self._price_valid_order(order, options, warnings)

            except OrderValidationError as e:
                log.info("Order rejected", order_id=order_id, reason="validation_failed", errors=e.errors)
                return RejectedOrder(
                    order_id=order_id,
                    reason=RejectionReason.VALIDATION_FAILED,
                    message="Order validation failed",
                    errors=tuple(e.errors),
                    warnings=warnings,
                )
            except OrderCompletionError as e:
                log.info("Order rejected", order_id=order_id, reason=e.reason, detail=str(e))
                return RejectedOrder(
                    order_id=order_id,
                    reason=RejectionReason(e.reason),
                    message=str(e),
                    warnings=warnings,
                )
            except Exception as e:
                log.error(
                    "Order pricing failed",
                    order_id=order_id,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                return RejectedOrder(
                    order_id=order_id,
                    reason=RejectionReason.ERROR,
                    message=str(e),
                    warnings=warnings,
                )

            log.debug(
                "Order accepted",
                order_id=order_id,
                final_price=outcome.pricing.final_price,
                discounts=[entry.type.value for entry in outcome.pricing.discounts],
            )
            return outcome

    def _price_valid_order(
        self, raw_order: Any, options: PricingOptions, warnings: tuple[str, ...]
    ) -> AcceptedOrder:
        order_id = extract_order_id(raw_order)
        try:
            order = (
                raw_order
                if isinstance(raw_order, Order)
                else Order.model_validate(raw_order)
            )
            totals = PricingCalculator(options).compute_pricing(order)
            result = self.discount_engine.apply_discounts(
                totals.pre_discount_total, order, options
            )
            breakdown = PricingBreakdown(
                subtotal=totals.subtotal,
                adjustments=totals.adjustments,
                tax=totals.tax,
                fee=totals.fee,
                pre_discount_total=totals.pre_discount_total,
                discounts=result.discounts,
                final_price=result.final_price,
                total_quantity=totals.total_quantity,
                customer_tier=get_customer_tier(order.customer.total_spent),
            )
        except Exception as e:
            raise PricingComputationError(type(e).__name__, order_id, e) from e

        self._check_acceptance(order, breakdown, options)

        return AcceptedOrder(
            order_id=order.id,
            customer_id=order.customer.id,
            item_count=len(order.items),
            pricing=breakdown,
            warnings=warnings,
        )

    def _check_acceptance(
        self, order: Order, breakdown: PricingBreakdown, options: PricingOptions
    ) -> None:
        """
        Apply the acceptance gate.

        Raises:
            OrderCompletionError: If the order fails one of the enabled checks
        """
        final_price = breakdown.final_price

        if options.require_minimum_value and final_price < options.minimum_order_value:
            raise OrderCompletionError(
                f"Order value {_money(final_price)} below minimum "
                f"{_money(options.minimum_order_value)}",
                reason=RejectionReason.BELOW_MINIMUM.value,
                order_id=order.id,
            )

        if options.strict_mode and final_price <= 0:
            raise OrderCompletionError(
                f"Order final price {_money(final_price)} is not positive",
                reason=RejectionReason.COMPLETION_FAILED.value,
                order_id=order.id,
            )

        if options.skip_invalid_customers and order.customer.invalid:
            raise OrderCompletionError(
                f"Customer '{order.customer.id}' is flagged invalid",
                reason=RejectionReason.COMPLETION_FAILED.value,
                order_id=order.id,
            )


_default_pipeline = OrderPipeline()


def price_order(
    order: Any, options: PricingOptions | Mapping | None = None
) -> AcceptedOrder | RejectedOrder:
    """Price one order with the default pipeline."""
    return _default_pipeline.price_order(order, options)
