"""
Custom exceptions for the order pricing service.

This module contains specialized exception classes for the error conditions
that can occur while validating, pricing and accepting an order, plus
configuration loading errors. The order pipeline converts every pricing
exception into a rejected outcome; none of them escape ``price_order``.
"""

from pathlib import Path


class OrderPricingException(Exception):
    """Base exception for all order pricing errors."""

    pass


class OrderValidationError(OrderPricingException):
    """Exception raised when an order fails structural or semantic validation."""

    def __init__(
        self,
        message: str = "Order validation failed",
        order_id: str | None = None,
        errors: list[str] | None = None,
    ):
        self.order_id = order_id
        self.errors = errors or []

        error_parts = [message]

        if order_id:
            error_parts.append(f"Order: {order_id}")

        if self.errors:
            error_parts.extend([f"Validation error: {error}" for error in self.errors])

        super().__init__(" | ".join(error_parts))


class OrderCompletionError(OrderPricingException):
    """Exception raised when a valid order fails the acceptance gate."""

    def __init__(self, message: str, reason: str, order_id: str | None = None):
        self.reason = reason
        self.order_id = order_id
        super().__init__(message)


class PricingComputationError(OrderPricingException):
    """Exception raised when pricing or discount computation faults."""

    def __init__(
        self,
        message: str,
        order_id: str | None = None,
        original_error: Exception | None = None,
    ):
        self.order_id = order_id
        self.original_error = original_error

        if order_id:
            message = f"Error pricing order '{order_id}': {message}"

        if original_error:
            message = f"{message} (Original error: {original_error})"

        super().__init__(message)


class ConfigurationError(OrderPricingException):
    """Exception raised when pricing configuration cannot be loaded."""

    def __init__(
        self,
        message: str,
        file_path: Path | None = None,
        original_error: Exception | None = None,
    ):
        self.file_path = file_path
        self.original_error = original_error

        if file_path:
            message = f"Error loading configuration '{file_path}': {message}"

        if original_error:
            message = f"{message} (Original error: {original_error})"

        super().__init__(message)
