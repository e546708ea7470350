"""Unit tests for order and pricing models."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from order_pricing.shared.exceptions import (
    ConfigurationError,
    OrderValidationError,
    PricingComputationError,
)
from order_pricing.shared.models import (
    Customer,
    CustomerTier,
    DiscountEntry,
    DiscountType,
    Item,
    Order,
    PricingBreakdown,
    to_decimal,
)


class TestToDecimal:
    @pytest.mark.parametrize(
        "value,expected",
        [(10, Decimal("10")), (0.1, Decimal("0.1")), (" 2.50 ", Decimal("2.50"))],
    )
    def test_conversions(self, value, expected):
        assert to_decimal(value) == expected

    @pytest.mark.parametrize("value", [None, True, "abc", [1]])
    def test_passthrough(self, value):
        assert to_decimal(value) == value


class TestOrderModels:
    def test_order_from_wire_format(self, sample_order):
        order = Order.model_validate(sample_order)

        assert order.id == "123"
        assert order.items[0].line_total == Decimal("20")
        assert order.customer.total_spent == Decimal("1200")
        assert order.total_quantity == 2

    def test_numeric_ids_become_strings(self):
        item = Item(id=7, price=1, quantity=1)
        assert item.id == "7"

    def test_missing_history_counts_as_zero(self):
        customer = Customer(id="c", email="c@example.com")
        assert customer.total_spent == Decimal("0")

    def test_null_total_spent_counts_as_zero(self):
        customer = Customer.model_validate(
            {"id": "c", "email": "c@example.com", "purchaseHistory": {"totalSpent": None}}
        )
        assert customer.total_spent == Decimal("0")

    def test_orders_are_frozen(self, sample_order):
        order = Order.model_validate(sample_order)
        with pytest.raises(ValidationError):
            order.id = "other"


class TestPricingBreakdown:
    @pytest.fixture
    def breakdown(self):
        return PricingBreakdown(
            subtotal=Decimal("20"),
            tax=Decimal("2.0"),
            fee=Decimal("2.50"),
            pre_discount_total=Decimal("24.50"),
            discounts=(
                DiscountEntry(type=DiscountType.TIER, amount=Decimal("2.45"), percentage=Decimal("0.10")),
                DiscountEntry(
                    type=DiscountType.PROMOTIONAL,
                    amount=Decimal("2.205"),
                    percentage=Decimal("0.10"),
                    code="SAVE10",
                ),
            ),
            final_price=Decimal("19.845"),
            total_quantity=2,
            customer_tier=CustomerTier.PREMIUM,
        )

    def test_total_discount(self, breakdown):
        assert breakdown.total_discount == Decimal("4.655")

    def test_discount_for(self, breakdown):
        assert breakdown.discount_for(DiscountType.PROMOTIONAL) == Decimal("2.205")
        assert breakdown.discount_for(DiscountType.SEASONAL) == Decimal("0")

    def test_rounded_half_up(self, breakdown):
        rounded = breakdown.rounded()

        assert rounded.final_price == Decimal("19.85")
        assert rounded.discounts[1].amount == Decimal("2.21")
        assert rounded.tax == Decimal("2.00")
        assert breakdown.final_price == Decimal("19.845")

    def test_wire_names(self, breakdown):
        data = breakdown.model_dump(mode="json", by_alias=True)

        assert data["finalPrice"] == "19.845"
        assert data["preDiscountTotal"] == "24.50"
        assert data["customerTier"] == "premium"
        assert data["discounts"][1]["code"] == "SAVE10"


class TestExceptions:
    def test_validation_error_message(self):
        error = OrderValidationError(order_id="42", errors=["Order must have an id"])

        assert error.errors == ["Order must have an id"]
        assert str(error) == (
            "Order validation failed | Order: 42 | Validation error: Order must have an id"
        )

    def test_computation_error_wraps_original(self):
        original = ZeroDivisionError("division by zero")
        error = PricingComputationError("ZeroDivisionError", "42", original)

        assert error.original_error is original
        assert str(error) == (
            "Error pricing order '42': ZeroDivisionError (Original error: division by zero)"
        )

    def test_configuration_error_names_file(self):
        error = ConfigurationError("Invalid JSON", "pricing.json")
        assert str(error) == "Error loading configuration 'pricing.json': Invalid JSON"
