"""Configuration models and loading for the order pricing service."""

from .models import PricingConfig, PricingOptions

__all__ = ["PricingConfig", "PricingOptions"]
