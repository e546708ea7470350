"""
Validators and calculators for incoming orders.

This package implements order validation and the pre-discount pricing
calculation that runs on orders once they pass validation.
"""

from .order import OrderValidator, is_valid_email, parse_timestamp
from .pricing import PricingCalculator, PricingTotals

__all__ = [
    # Validation
    "OrderValidator",
    "is_valid_email",
    "parse_timestamp",
    # Pricing
    "PricingCalculator",
    "PricingTotals",
]
