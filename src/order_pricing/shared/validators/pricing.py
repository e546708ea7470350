"""
Pricing calculator.

Derives the pre-discount figures of a validated order:

- Subtotal = sum of price x quantity
- Adjustments = sum of the signed line adjustments from the options
- Tax = (Subtotal + Adjustments) x tax rate
- Fee = large-order fee when total quantity exceeds the threshold, else the
  standard fee (zero when fees are disabled)
- Pre-discount total = Subtotal + Adjustments + Tax + Fee
"""

from dataclasses import dataclass
from decimal import Decimal

from ...config.models import PricingOptions
from ..models import Order


@dataclass(frozen=True)
class PricingTotals:
    """Pre-discount figures for one order."""

    subtotal: Decimal
    adjustments: Decimal
    tax: Decimal
    fee: Decimal
    pre_discount_total: Decimal
    total_quantity: int


class PricingCalculator:
    """
    Computes subtotal, tax and fee for validated orders.

    Arithmetic is exact ``Decimal`` with no intermediate rounding, so the
    sequential discount steps do not accumulate drift.
    """

    def __init__(self, options: PricingOptions | None = None):
        self.options = options or PricingOptions()

    def calculate_subtotal(self, order: Order) -> Decimal:
        return sum((item.line_total for item in order.items), Decimal("0"))

    def calculate_tax(self, taxable_amount: Decimal) -> Decimal:
        return taxable_amount * self.options.tax_rate

    def is_large_order(self, total_quantity: int) -> bool:
        """Large orders are decided on total units, not on number of lines."""
        return total_quantity > self.options.large_order_threshold

    def calculate_fee(self, total_quantity: int) -> Decimal:
        """
        Calculate the handling fee.

        Args:
            total_quantity: Sum of item quantities in the order

        Returns:
            Large-order fee, standard fee, or zero when fees are disabled
        """
        if not self.options.apply_fees:
            return Decimal("0")
        if self.is_large_order(total_quantity):
            return self.options.large_order_fee
        return self.options.standard_fee

    def compute_pricing(self, order: Order) -> PricingTotals:
        """
        Calculate the complete pre-discount pricing for an order.

        Args:
            order: Order that passed validation

        Returns:
            PricingTotals with subtotal, adjustments, tax, fee and
            pre-discount total
        """
        adjustments = sum(self.options.adjustments, Decimal("0"))
        subtotal = self.calculate_subtotal(order)
        total_quantity = order.total_quantity
        tax = self.calculate_tax(subtotal + adjustments)
        fee = self.calculate_fee(total_quantity)

        return PricingTotals(
            subtotal=subtotal,
            adjustments=adjustments,
            tax=tax,
            fee=fee,
            pre_discount_total=subtotal + adjustments + tax + fee,
            total_quantity=total_quantity,
        )
