"""
Configuration models for the order pricing service.

``PricingOptions`` carries the per-call pricing knobs (tax rate, fee and
discount constants, acceptance gate switches). ``PricingConfig`` wraps a set
of default options with service-level settings and is what gets loaded
from ``order_pricing.json``.
"""

import json
import logging
from decimal import Decimal
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..shared.exceptions import ConfigurationError
from ..shared.models import to_decimal

logger = logging.getLogger(__name__)


class PricingOptions(BaseModel):
    """Options recognized by the pricing pipeline for a single order."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    tax_rate: Decimal = Field(
        Decimal("0.10"), ge=0, le=1, alias="taxRate", description="Tax rate (0-1)"
    )
    apply_fees: bool = Field(
        True, alias="applyFees", description="Add the handling fee to the total"
    )
    large_order_threshold: int = Field(
        10,
        ge=0,
        alias="largeOrderThreshold",
        description="Total quantity above which an order counts as large",
    )
    standard_fee: Decimal = Field(
        Decimal("2.50"), ge=0, alias="standardFee", description="Fee for regular orders"
    )
    large_order_fee: Decimal = Field(
        Decimal("5.00"), ge=0, alias="largeOrderFee", description="Fee for large orders"
    )
    promotional_code: str | None = Field(
        None, alias="promotionalCode", description="Promo code supplied by the buyer"
    )
    strict_mode: bool = Field(
        False, alias="strictMode", description="Reject orders whose final price is <= 0"
    )
    require_minimum_value: bool = Field(
        False,
        alias="requireMinimumValue",
        description="Reject orders whose final price is below minimum_order_value",
    )
    minimum_order_value: Decimal = Field(
        Decimal("10"), ge=0, alias="minimumOrderValue", description="Minimum final price"
    )
    skip_invalid_customers: bool = Field(
        False,
        alias="skipInvalidCustomers",
        description="Reject orders whose customer is flagged invalid",
    )
    adjustments: tuple[Decimal, ...] = Field(
        default_factory=tuple,
        description="Signed line adjustments added once to the item subtotal",
    )
    volume_discount_rate: Decimal = Field(
        Decimal("0.05"), ge=0, le=1, alias="volumeDiscountRate"
    )
    seasonal_discount_rate: Decimal = Field(
        Decimal("0.15"), ge=0, le=1, alias="seasonalDiscountRate"
    )
    seasonal_months: tuple[int, ...] = Field(
        (12,), alias="seasonalMonths", description="Months (1-12) with seasonal discount"
    )
    current_month: int | None = Field(
        None,
        ge=1,
        le=12,
        alias="currentMonth",
        description="Calendar month used for seasonal rules (pinned by the caller when omitted)",
    )

    @field_validator(
        "tax_rate",
        "standard_fee",
        "large_order_fee",
        "minimum_order_value",
        "volume_discount_rate",
        "seasonal_discount_rate",
        mode="before",
    )
    @classmethod
    def parse_decimal(cls, v):
        """Parse money and rate fields from strings or numbers."""
        return to_decimal(v)

    @field_validator("adjustments", mode="before")
    @classmethod
    def parse_adjustments(cls, v):
        """Treat a missing adjustment list as empty."""
        if v is None:
            return ()
        return tuple(to_decimal(item) for item in v)

    @field_validator("seasonal_months")
    @classmethod
    def validate_months(cls, v: tuple[int, ...]) -> tuple[int, ...]:
        for month in v:
            if not 1 <= month <= 12:
                raise ValueError(f"Seasonal month out of range: {month}")
        return v

    def with_month(self, month: int) -> "PricingOptions":
        """Copy of these options pinned to ``month``."""
        return self.model_validate(
            {**self.model_dump(), "current_month": month}
        )

    def merged(self, overrides: dict | None = None) -> "PricingOptions":
        """Copy of these options with wire-format or attribute overrides applied."""
        if not overrides:
            return self
        data = self.model_dump()
        data.update(PricingOptions.model_validate(overrides).model_dump(exclude_unset=True))
        return self.model_validate(data)


class PricingConfig(BaseModel):
    """Main configuration model for the order pricing service."""

    model_config = ConfigDict(populate_by_name=True)

    defaults: PricingOptions = Field(
        default_factory=PricingOptions, description="Default pricing options"
    )
    log_level: str = Field("INFO", alias="logLevel", description="Root log level")
    max_workers: int = Field(
        1, gt=0, alias="maxWorkers", description="Worker threads for batch pricing"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level

    @classmethod
    def from_file(cls, file_path: str | Path) -> "PricingConfig":
        """
        Load configuration from a JSON file.

        Args:
            file_path: Path to the configuration JSON file

        Returns:
            PricingConfig instance

        Raises:
            FileNotFoundError: If the file doesn't exist
            ConfigurationError: If the JSON is invalid or doesn't match the schema
        """
        path = Path(file_path)

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {file_path}")

        try:
            with path.open("r") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError("Invalid JSON", path, e)

        try:
            config = cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError("Configuration does not match schema", path, e)

        logger.info(f"Loaded pricing configuration from {path}")
        return config

    def to_file(self, file_path: str | Path) -> None:
        """
        Save configuration to a JSON file.

        Args:
            file_path: Path where to save the configuration file
        """
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with path.open("w") as f:
            json.dump(self.model_dump(mode="json", by_alias=True), f, indent=2)
