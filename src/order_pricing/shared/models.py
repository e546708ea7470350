"""
Core data models for the order pricing service.

This module contains the order input records (orders, items, customers),
the derived pricing records (discount entries, pricing breakdowns) and the
tagged outcome produced for every order the pipeline sees.

Input records accept both the camelCase wire names used by upstream
services (``purchaseHistory``, ``totalSpent``, ``createdAt``) and the
snake_case attribute names. Derived records are frozen value objects.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

CENTS = Decimal("0.01")


def to_decimal(value: Any) -> Any:
    """
    Convert numbers and numeric strings to ``Decimal``.

    Floats go through ``str`` so ``0.1`` becomes ``Decimal("0.1")`` rather
    than its binary expansion. Anything that cannot be converted is returned
    unchanged so the model validator reports it.
    """
    if value is None or isinstance(value, (Decimal, bool)):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if isinstance(value, str):
        try:
            return Decimal(value.strip())
        except InvalidOperation:
            return value
    return value


def _id_to_str(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


# ================================
# ENUMERATIONS
# ================================


class CustomerTier(str, Enum):
    """Customer classification derived from historical spend."""

    STANDARD = "standard"
    GOLD = "gold"
    PREMIUM = "premium"


class DiscountType(str, Enum):
    """Discount rules, listed in the order they are applied."""

    TIER = "tier"
    VOLUME = "volume"
    PROMOTIONAL = "promotional"
    SEASONAL = "seasonal"


class RejectionReason(str, Enum):
    """Why the pipeline rejected an order."""

    VALIDATION_FAILED = "validation_failed"
    BELOW_MINIMUM = "below_minimum"
    COMPLETION_FAILED = "completion_failed"
    ERROR = "error"


# ================================
# ORDER INPUT MODELS
# ================================


class Item(BaseModel):
    """A single order line."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., description="Item identifier")
    price: Decimal = Field(..., description="Unit price")
    quantity: int = Field(..., description="Units ordered")

    @field_validator("id", mode="before")
    @classmethod
    def parse_id(cls, v):
        return _id_to_str(v)

    @field_validator("price", mode="before")
    @classmethod
    def parse_price(cls, v):
        """Parse price from string or number."""
        return to_decimal(v)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class PurchaseHistory(BaseModel):
    """Historical purchase summary for a customer."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    total_spent: Decimal = Field(
        Decimal("0"), alias="totalSpent", description="Lifetime spend"
    )

    @field_validator("total_spent", mode="before")
    @classmethod
    def parse_total_spent(cls, v):
        """Missing spend counts as zero."""
        if v is None:
            return Decimal("0")
        return to_decimal(v)


class Customer(BaseModel):
    """Customer placing the order."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., description="Customer identifier")
    email: str = Field(..., description="Contact email")
    purchase_history: PurchaseHistory | None = Field(None, alias="purchaseHistory")
    invalid: bool = Field(
        False, description="Set by the caller to flag a customer as not trusted"
    )

    @field_validator("id", mode="before")
    @classmethod
    def parse_id(cls, v):
        return _id_to_str(v)

    @property
    def total_spent(self) -> Decimal:
        if self.purchase_history is None:
            return Decimal("0")
        return self.purchase_history.total_spent


class Order(BaseModel):
    """Purchase order submitted for pricing."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., description="Order identifier")
    items: tuple[Item, ...] = Field(..., description="Order lines")
    customer: Customer
    created_at: Any = Field(
        None, alias="createdAt", description="Creation timestamp (ISO string, epoch ms)"
    )

    @field_validator("id", mode="before")
    @classmethod
    def parse_id(cls, v):
        return _id_to_str(v)

    @property
    def total_quantity(self) -> int:
        """Sum of item quantities (not the number of lines)."""
        return sum(item.quantity for item in self.items)


# ================================
# DERIVED MODELS
# ================================


class ValidationResult(BaseModel):
    """Outcome of order validation."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()


class DiscountEntry(BaseModel):
    """One applied discount rule."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    type: DiscountType
    amount: Decimal = Field(..., description="Amount taken off the running total")
    percentage: Decimal = Field(..., description="Rate applied (0-1)")
    code: str | None = Field(None, description="Promo code, for promotional discounts")


class PricingBreakdown(BaseModel):
    """Full price derivation for an accepted order."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    subtotal: Decimal
    adjustments: Decimal = Decimal("0")
    tax: Decimal
    fee: Decimal
    pre_discount_total: Decimal = Field(..., alias="preDiscountTotal")
    discounts: tuple[DiscountEntry, ...] = ()
    final_price: Decimal = Field(..., alias="finalPrice")
    total_quantity: int = Field(..., alias="totalQuantity")
    customer_tier: CustomerTier = Field(..., alias="customerTier")

    @property
    def total_discount(self) -> Decimal:
        return sum((entry.amount for entry in self.discounts), Decimal("0"))

    def discount_for(self, discount_type: DiscountType) -> Decimal:
        """Amount taken off by ``discount_type``; zero when the rule did not apply."""
        for entry in self.discounts:
            if entry.type == discount_type:
                return entry.amount
        return Decimal("0")

    def rounded(self) -> "PricingBreakdown":
        """Copy with every money field quantized to cents (ROUND_HALF_UP)."""

        def cents(value: Decimal) -> Decimal:
            return value.quantize(CENTS, rounding=ROUND_HALF_UP)

        return self.model_copy(
            update={
                "subtotal": cents(self.subtotal),
                "adjustments": cents(self.adjustments),
                "tax": cents(self.tax),
                "fee": cents(self.fee),
                "pre_discount_total": cents(self.pre_discount_total),
                "discounts": tuple(
                    entry.model_copy(update={"amount": cents(entry.amount)})
                    for entry in self.discounts
                ),
                "final_price": cents(self.final_price),
            }
        )


class AcceptedOrder(BaseModel):
    """Order that passed every gate, with its pricing."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    status: Literal["accepted"] = "accepted"
    order_id: str = Field(..., alias="orderId")
    customer_id: str = Field(..., alias="customerId")
    item_count: int = Field(..., alias="itemCount", description="Number of order lines")
    pricing: PricingBreakdown
    warnings: tuple[str, ...] = ()

    def rounded(self) -> "AcceptedOrder":
        """Copy with the pricing quantized to cents for display."""
        return self.model_copy(update={"pricing": self.pricing.rounded()})


class RejectedOrder(BaseModel):
    """Order the pipeline refused, with the reason."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    status: Literal["rejected"] = "rejected"
    order_id: str | None = Field(None, alias="orderId")
    reason: RejectionReason
    message: str
    errors: tuple[str, ...] | None = None
    warnings: tuple[str, ...] = ()


OrderOutcome = Annotated[AcceptedOrder | RejectedOrder, Field(discriminator="status")]
