"""FastAPI dependencies for the order pricing service."""

import logging

from ..config.models import PricingConfig
from ..config.settings import load_config_with_fallback
from ..pricing.pipeline import OrderPipeline

logger = logging.getLogger(__name__)

_config: PricingConfig | None = None
_pipeline = OrderPipeline()


def get_config() -> PricingConfig:
    """Get the active configuration, loading it on first use."""
    global _config
    if _config is None:
        _config = load_config_with_fallback()
        logger.info("Pricing configuration loaded")
    return _config


def update_config(new_config: PricingConfig) -> None:
    """Replace the active configuration."""
    global _config
    _config = new_config


def get_pipeline() -> OrderPipeline:
    return _pipeline
