"""
Pytest configuration and fixtures for order pricing tests.

Provides sample orders, customers and option sets shared across the unit
and integration suites.
"""

import copy
from collections.abc import Callable
from decimal import Decimal

import pytest

from order_pricing.config.models import PricingOptions


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch, tmp_path):
    """Keep config discovery away from the developer's environment."""
    for var in (
        "ORDER_PRICING_CONFIG_FILE",
        "ORDER_PRICING_TAX_RATE",
        "ORDER_PRICING_LARGE_ORDER_THRESHOLD",
        "ORDER_PRICING_MINIMUM_ORDER_VALUE",
        "ORDER_PRICING_STRICT_MODE",
        "ORDER_PRICING_REQUIRE_MINIMUM_VALUE",
        "ORDER_PRICING_APPLY_FEES",
        "ORDER_PRICING_LOG_LEVEL",
        "ORDER_PRICING_MAX_WORKERS",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def premium_customer() -> dict:
    """Customer with enough history for the premium tier."""
    return {
        "id": "cust1",
        "email": "test@example.com",
        "purchaseHistory": {"totalSpent": 1200},
    }


@pytest.fixture
def standard_customer() -> dict:
    """Customer without purchase history."""
    return {"id": "cust2", "email": "new.buyer@example.org"}


@pytest.fixture
def sample_order(premium_customer) -> dict:
    """The reference order: one line of 2 x 10.00 for a premium customer."""
    return {
        "id": "123",
        "items": [{"id": "item1", "price": 10, "quantity": 2}],
        "customer": premium_customer,
    }


@pytest.fixture
def make_order(standard_customer) -> Callable[..., dict]:
    """Factory for order records with (price, quantity) lines."""

    def _make(
        order_id: str = "ord-1",
        lines: list[tuple] | None = None,
        customer: dict | None = None,
        **extra,
    ) -> dict:
        lines = lines if lines is not None else [(10, 2)]
        order = {
            "id": order_id,
            "items": [
                {"id": f"item{i + 1}", "price": price, "quantity": quantity}
                for i, (price, quantity) in enumerate(lines)
            ],
            "customer": copy.deepcopy(customer or standard_customer),
        }
        order.update(extra)
        return order

    return _make


@pytest.fixture
def june_options() -> PricingOptions:
    """Default options pinned outside the seasonal month."""
    return PricingOptions(tax_rate=Decimal("0.1"), current_month=6)


@pytest.fixture
def december_options() -> PricingOptions:
    """Default options pinned to December."""
    return PricingOptions(tax_rate=Decimal("0.1"), current_month=12)
