"""Unit tests for the order pricing pipeline."""

import copy
import json
import logging
from datetime import UTC, datetime
from decimal import Decimal

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st
from pydantic import TypeAdapter, ValidationError

from order_pricing import OrderPipeline, price_order
from order_pricing.config.models import PricingOptions
from order_pricing.shared.models import (
    AcceptedOrder,
    CustomerTier,
    DiscountType,
    Order,
    OrderOutcome,
    RejectedOrder,
    RejectionReason,
)


@pytest.fixture
def pipeline():
    return OrderPipeline()


class TestWorkedExamples:
    """The reference scenarios for the pipeline."""

    def test_premium_customer_with_promo(self, pipeline, sample_order):
        options = {"taxRate": 0.1, "promotionalCode": "SAVE10", "currentMonth": 6}
        outcome = pipeline.price_order(sample_order, options)

        assert isinstance(outcome, AcceptedOrder)
        assert outcome.order_id == "123"
        assert outcome.customer_id == "cust1"
        assert outcome.item_count == 1

        pricing = outcome.pricing
        assert pricing.subtotal == Decimal("20")
        assert pricing.tax == Decimal("2")
        assert pricing.fee == Decimal("2.5")
        assert pricing.pre_discount_total == Decimal("24.5")
        assert pricing.customer_tier == CustomerTier.PREMIUM
        assert pricing.discount_for(DiscountType.TIER) == Decimal("2.45")
        assert pricing.discount_for(DiscountType.VOLUME) == Decimal("0")
        assert pricing.discount_for(DiscountType.PROMOTIONAL) == Decimal("2.205")
        assert pricing.discount_for(DiscountType.SEASONAL) == Decimal("0")
        assert pricing.final_price == Decimal("19.845")
        assert pricing.rounded().final_price == Decimal("19.85")

    def test_invalid_email_rejected(self, pipeline, sample_order):
        sample_order["customer"]["email"] = "not-an-email"
        outcome = pipeline.price_order(sample_order, {"currentMonth": 6})

        assert isinstance(outcome, RejectedOrder)
        assert outcome.reason == RejectionReason.VALIDATION_FAILED
        assert outcome.order_id == "123"
        assert any("email" in error for error in outcome.errors)

    def test_email_with_trailing_newline_rejected(self, pipeline, sample_order):
        sample_order["customer"]["email"] = "test@example.com\n"
        outcome = pipeline.price_order(sample_order, {"currentMonth": 6})

        assert isinstance(outcome, RejectedOrder)
        assert outcome.reason == RejectionReason.VALIDATION_FAILED

    def test_below_minimum_rejected(self, pipeline, make_order):
        order = make_order(lines=[(1, 1)])
        outcome = pipeline.price_order(
            order, {"requireMinimumValue": True, "currentMonth": 6}
        )

        assert isinstance(outcome, RejectedOrder)
        assert outcome.reason == RejectionReason.BELOW_MINIMUM
        assert outcome.message == "Order value 3.60 below minimum 10.00"

    def test_empty_items_rejected(self, pipeline, sample_order):
        sample_order["items"] = []
        outcome = pipeline.price_order(sample_order)

        assert outcome.reason == RejectionReason.VALIDATION_FAILED
        assert any("at least one item" in error for error in outcome.errors)

    def test_unknown_promo_code_still_accepted(self, pipeline, sample_order):
        outcome = pipeline.price_order(
            sample_order, {"promotionalCode": "FAKE", "currentMonth": 6}
        )

        assert isinstance(outcome, AcceptedOrder)
        assert outcome.pricing.discount_for(DiscountType.PROMOTIONAL) == Decimal("0")
        assert outcome.pricing.final_price == Decimal("22.05")


class TestAcceptanceGate:
    """Test the checks applied after pricing."""

    def test_minimum_is_inclusive(self, pipeline, make_order):
        options = PricingOptions(
            tax_rate=0,
            apply_fees=False,
            require_minimum_value=True,
            current_month=6,
        )
        outcome = pipeline.price_order(make_order(lines=[(10, 1)]), options)

        assert isinstance(outcome, AcceptedOrder)
        assert outcome.pricing.final_price == Decimal("10")

    def test_minimum_not_checked_unless_enabled(self, pipeline, make_order):
        outcome = pipeline.price_order(make_order(lines=[(1, 1)]), {"currentMonth": 6})
        assert isinstance(outcome, AcceptedOrder)

    def test_strict_mode_rejects_zero_price(self, pipeline, sample_order):
        options = {"strictMode": True, "adjustments": [-100], "currentMonth": 6}
        outcome = pipeline.price_order(sample_order, options)

        assert isinstance(outcome, RejectedOrder)
        assert outcome.reason == RejectionReason.COMPLETION_FAILED

    def test_zero_price_accepted_without_strict_mode(self, pipeline, sample_order):
        outcome = pipeline.price_order(
            sample_order, {"adjustments": [-100], "currentMonth": 6}
        )

        assert isinstance(outcome, AcceptedOrder)
        assert outcome.pricing.final_price == Decimal("0")

    def test_minimum_checked_before_strict_mode(self, pipeline, sample_order):
        options = {
            "strictMode": True,
            "requireMinimumValue": True,
            "adjustments": [-100],
            "currentMonth": 6,
        }
        outcome = pipeline.price_order(sample_order, options)

        assert outcome.reason == RejectionReason.BELOW_MINIMUM

    def test_invalid_customer_skipped_when_enabled(self, pipeline, sample_order):
        sample_order["customer"]["invalid"] = True

        accepted = pipeline.price_order(sample_order, {"currentMonth": 6})
        rejected = pipeline.price_order(
            sample_order, {"skipInvalidCustomers": True, "currentMonth": 6}
        )

        assert isinstance(accepted, AcceptedOrder)
        assert isinstance(rejected, RejectedOrder)
        assert rejected.reason == RejectionReason.COMPLETION_FAILED
        assert "cust1" in rejected.message


class TestFaultHandling:
    """Faults during pricing become rejected outcomes."""

    @pytest.mark.parametrize("history", [{"totalSpent": "lots"}, "gold", [1, 2]])
    def test_malformed_purchase_history(self, pipeline, make_order, history):
        order = make_order(order_id="ord-9")
        order["customer"]["purchaseHistory"] = history
        outcome = pipeline.price_order(order, {"currentMonth": 6})

        assert isinstance(outcome, RejectedOrder)
        assert outcome.reason == RejectionReason.ERROR
        assert outcome.order_id == "ord-9"
        assert "Error pricing order 'ord-9'" in outcome.message

    def test_non_record_order(self, pipeline):
        outcome = pipeline.price_order(None)

        assert outcome.reason == RejectionReason.VALIDATION_FAILED
        assert outcome.order_id is None

    def test_invalid_options_raise(self, pipeline, sample_order):
        with pytest.raises(ValidationError):
            pipeline.price_order(sample_order, {"taxRate": 2})


class TestSeasonalMonth:
    """The month comes from the options or the pipeline's clock."""

    def test_open_month_pinned_from_clock(self, sample_order):
        december = OrderPipeline(clock=lambda: datetime(2024, 12, 15, tzinfo=UTC))
        june = OrderPipeline(clock=lambda: datetime(2024, 6, 15, tzinfo=UTC))

        assert december.price_order(sample_order).pricing.discount_for(
            DiscountType.SEASONAL
        ) > 0
        assert june.price_order(sample_order).pricing.discount_for(
            DiscountType.SEASONAL
        ) == 0

    def test_same_clock_same_outcome(self, sample_order):
        pipeline = OrderPipeline(clock=lambda: datetime(2024, 12, 31, 23, 59, tzinfo=UTC))
        assert pipeline.price_order(sample_order) == pipeline.price_order(sample_order)

    def test_explicit_month_ignores_clock(self, sample_order):
        def broken_clock():
            raise AssertionError("clock read with a pinned month")

        pipeline = OrderPipeline(clock=broken_clock)
        outcome = pipeline.price_order(sample_order, {"currentMonth": 12})

        assert outcome.pricing.discount_for(DiscountType.SEASONAL) > 0


class TestPipelineBehavior:
    def test_idempotent(self, pipeline, sample_order):
        options = {"promotionalCode": "SAVE20", "currentMonth": 12}
        assert pipeline.price_order(sample_order, options) == pipeline.price_order(
            sample_order, options
        )

    def test_input_not_mutated(self, pipeline, sample_order):
        snapshot = copy.deepcopy(sample_order)
        pipeline.price_order(sample_order, {"promotionalCode": "SAVE10", "currentMonth": 6})
        assert sample_order == snapshot

    def test_accepts_order_model(self, pipeline, sample_order, june_options):
        from_model = pipeline.price_order(Order.model_validate(sample_order), june_options)
        from_dict = pipeline.price_order(sample_order, june_options)

        assert from_model == from_dict

    def test_item_count_is_number_of_lines(self, pipeline, make_order, june_options):
        outcome = pipeline.price_order(make_order(lines=[(1, 3), (2, 4)]), june_options)

        assert outcome.item_count == 2
        assert outcome.pricing.total_quantity == 7

    def test_timestamp_warning_carried_on_outcome(self, pipeline, sample_order, june_options):
        sample_order["createdAt"] = "last tuesday"
        outcome = pipeline.price_order(sample_order, june_options)

        assert isinstance(outcome, AcceptedOrder)
        assert len(outcome.warnings) == 1

    def test_module_level_price_order(self, sample_order, june_options):
        assert isinstance(price_order(sample_order, june_options), AcceptedOrder)

    def test_order_logs_share_correlation_id(self, pipeline, sample_order, caplog):
        sample_order["createdAt"] = "never"
        sample_order["customer"]["email"] = "bad"

        with caplog.at_level(logging.INFO, logger="order_pricing"):
            pipeline.price_order(sample_order, {"currentMonth": 6})

        entries = [json.loads(record.message) for record in caplog.records]
        assert [entry["message"] for entry in entries] == [
            "Order timestamp ignored",
            "Order rejected",
        ]
        correlation_ids = {entry["correlation_id"] for entry in entries}
        assert len(correlation_ids) == 1
        assert correlation_ids.pop().startswith("CORR_")

    def test_outcome_round_trips_through_union(self, pipeline, sample_order):
        sample_order["items"] = []
        outcome = pipeline.price_order(sample_order)
        data = outcome.model_dump(mode="json", by_alias=True)

        assert data["status"] == "rejected"
        assert TypeAdapter(OrderOutcome).validate_python(data) == outcome

    @settings(suppress_health_check=[HealthCheck.function_scoped_fixture])
    @given(
        lines=st.lists(
            st.tuples(
                st.decimals(min_value="0.01", max_value="2000", places=2),
                st.integers(min_value=1, max_value=30),
            ),
            min_size=1,
            max_size=6,
        ),
        adjustments=st.lists(
            st.decimals(min_value="-5000", max_value="500", places=2), max_size=3
        ),
        spent=st.integers(min_value=0, max_value=3000),
        code=st.sampled_from([None, "SAVE10", "SAVE50", "FAKE"]),
        month=st.integers(min_value=1, max_value=12),
    )
    def test_final_price_never_negative(
        self, pipeline, lines, adjustments, spent, code, month
    ):
        order = {
            "id": "prop",
            "items": [
                {"id": f"i{n}", "price": price, "quantity": qty}
                for n, (price, qty) in enumerate(lines)
            ],
            "customer": {
                "id": "c",
                "email": "c@example.com",
                "purchaseHistory": {"totalSpent": spent},
            },
        }
        options = PricingOptions(
            adjustments=adjustments, promotional_code=code, current_month=month
        )
        outcome = pipeline.price_order(order, options)

        assert isinstance(outcome, AcceptedOrder)
        assert outcome.pricing.final_price >= 0
