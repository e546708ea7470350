"""
Configuration loading and management for the order pricing service.

This module provides utilities for loading, validating, and managing
configuration settings from files and environment variables.
"""

import logging
import os
from pathlib import Path

from ..shared.exceptions import ConfigurationError
from .models import PricingConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "order_pricing.json"

# Environment variable -> PricingOptions field (wire name)
ENV_OPTION_VARS = {
    "ORDER_PRICING_TAX_RATE": "taxRate",
    "ORDER_PRICING_LARGE_ORDER_THRESHOLD": "largeOrderThreshold",
    "ORDER_PRICING_MINIMUM_ORDER_VALUE": "minimumOrderValue",
    "ORDER_PRICING_STRICT_MODE": "strictMode",
    "ORDER_PRICING_REQUIRE_MINIMUM_VALUE": "requireMinimumValue",
    "ORDER_PRICING_APPLY_FEES": "applyFees",
}

ENV_SERVICE_VARS = {
    "ORDER_PRICING_LOG_LEVEL": "logLevel",
    "ORDER_PRICING_MAX_WORKERS": "maxWorkers",
}


def load_config(
    config_path: str | Path | None = None, config_name: str = DEFAULT_CONFIG_NAME
) -> PricingConfig:
    """
    Load configuration from file with path resolution.

    Args:
        config_path: Explicit path to config file or directory containing config
        config_name: Name of config file (default: "order_pricing.json")

    Returns:
        PricingConfig: Loaded and validated configuration

    Raises:
        FileNotFoundError: If no configuration file is found
        ConfigurationError: If configuration is invalid
    """
    if config_path is None:
        search_paths = [
            Path.cwd() / config_name,
            Path.cwd() / "config" / config_name,
        ]

        for path in search_paths:
            if path.exists():
                config_path = path
                break
        else:
            raise FileNotFoundError(
                f"Configuration file '{config_name}' not found in any of: "
                f"{[str(p) for p in search_paths]}"
            )

    config_path = Path(config_path)

    if config_path.is_dir():
        config_path = config_path / config_name

    return PricingConfig.from_file(config_path)


def get_config_from_env() -> PricingConfig | None:
    """
    Try to load configuration from environment variables.

    ``ORDER_PRICING_CONFIG_FILE`` points at a config file; otherwise the
    individual ``ORDER_PRICING_*`` variables are applied on top of the
    defaults.

    Returns:
        PricingConfig if any environment variable is set, None otherwise

    Raises:
        ConfigurationError: If a variable holds an invalid value
    """
    config_file_env = os.getenv("ORDER_PRICING_CONFIG_FILE")
    if config_file_env:
        return load_config(config_file_env)

    option_values = {
        field: os.environ[var] for var, field in ENV_OPTION_VARS.items() if var in os.environ
    }
    service_values = {
        field: os.environ[var] for var, field in ENV_SERVICE_VARS.items() if var in os.environ
    }
    if not option_values and not service_values:
        return None

    try:
        return PricingConfig.model_validate({"defaults": option_values, **service_values})
    except ValueError as e:
        raise ConfigurationError("Invalid environment variable configuration", original_error=e)


def load_config_with_fallback(config_path: str | Path | None = None) -> PricingConfig:
    """
    Load configuration with fallback to environment variables and defaults.

    Priority order:
    1. Explicit config file path
    2. Environment variable ORDER_PRICING_CONFIG_FILE
    3. Individual ORDER_PRICING_* environment variables
    4. Default locations (order_pricing.json, config/order_pricing.json)
    5. Built-in defaults

    Args:
        config_path: Optional explicit path to config file

    Returns:
        PricingConfig: Loaded configuration
    """
    if config_path:
        try:
            return load_config(config_path)
        except FileNotFoundError:
            logger.warning(f"Config file {config_path} not found, trying fallbacks")

    env_config = get_config_from_env()
    if env_config:
        return env_config

    try:
        return load_config()
    except FileNotFoundError:
        pass

    logger.info("No configuration found, using built-in defaults")
    return PricingConfig()
