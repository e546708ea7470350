"""
Order Pricing

Deterministic pricing for batches of purchase orders:
- Order validation with complete error reporting
- Subtotal, tax and handling fee calculation
- Ordered discount stack (customer tier, volume, promo code, seasonal)
- Acceptance gate and batch statistics
"""

from .pricing.pipeline import OrderPipeline, price_order

__version__ = "1.0.0"
__author__ = "Order Pricing"

__all__ = ["OrderPipeline", "price_order"]
