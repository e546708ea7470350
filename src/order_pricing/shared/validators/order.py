"""
Order validator.

Checks the structure and content of a raw order record before it is priced.
Every rule is evaluated so callers get the complete error list, not just
the first failure. An unparseable creation timestamp is reported as a
warning and does not block processing.
"""

import math
import re
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel

from ..models import ValidationResult

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


def is_valid_email(email: Any) -> bool:
    """Check an address against the simple local@domain.tld pattern."""
    return isinstance(email, str) and EMAIL_PATTERN.fullmatch(email) is not None


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, Decimal):
        return value.is_finite()
    if isinstance(value, (int, float)):
        return math.isfinite(value)
    return False


def _has_id(value: Any) -> bool:
    if isinstance(value, str):
        return bool(value.strip())
    return isinstance(value, int) and not isinstance(value, bool)


def parse_timestamp(value: Any) -> datetime:
    """
    Parse an order creation timestamp.

    Accepts ``datetime`` instances, ISO 8601 strings (a trailing ``Z`` is
    read as UTC) and epoch milliseconds.

    Raises:
        ValueError: If the value is not a recognizable instant
    """
    if isinstance(value, datetime):
        return value
    if _is_number(value):
        return datetime.fromtimestamp(float(value) / 1000, tz=UTC)
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(text)
    raise ValueError(f"Unrecognized timestamp: {value!r}")


class OrderValidator:
    """
    Validates raw order records.

    Accepts mappings (decoded JSON) or ``Order`` models. The validator has
    no side effects and never raises for bad input; problems are reported
    in the returned ``ValidationResult``.
    """

    def validate(self, order: Any) -> ValidationResult:
        """
        Validate an order record.

        Args:
            order: Raw order mapping or Order model

        Returns:
            ValidationResult with ``valid`` set when no errors were found
        """
        if isinstance(order, BaseModel):
            order = order.model_dump(by_alias=True)

        if not isinstance(order, Mapping):
            return ValidationResult(
                valid=False, errors=("Order must be a structured record",)
            )

        errors: list[str] = []
        warnings: list[str] = []

        if not _has_id(order.get("id")):
            errors.append("Order must have an id")

        errors.extend(self._validate_items(order.get("items")))
        errors.extend(self._validate_customer(order.get("customer")))

        created_at = order.get("createdAt", order.get("created_at"))
        if created_at is not None:
            try:
                parse_timestamp(created_at)
            except (ValueError, TypeError, OverflowError, OSError):
                warnings.append(f"Order createdAt is not a valid timestamp: {created_at!r}")

        return ValidationResult(
            valid=not errors, errors=tuple(errors), warnings=tuple(warnings)
        )

    def _validate_items(self, items: Any) -> list[str]:
        if (
            not isinstance(items, Sequence)
            or isinstance(items, (str, bytes))
            or len(items) == 0
        ):
            return ["Order must have at least one item"]

        errors = []
        for index, item in enumerate(items):
            problems = self._item_problems(item)
            if problems:
                label = f"Item {index}"
                if isinstance(item, Mapping) and _has_id(item.get("id")):
                    label = f"Item {index} ({item['id']})"
                errors.append(f"{label} is invalid: {'; '.join(problems)}")
        return errors

    def _item_problems(self, item: Any) -> list[str]:
        if not isinstance(item, Mapping):
            return ["item must be a structured record"]

        problems = []
        if not _has_id(item.get("id")):
            problems.append("missing id")

        price = item.get("price")
        if not _is_number(price) or price <= 0:
            problems.append(f"price must be greater than 0 (got {price!r})")

        quantity = item.get("quantity")
        if not _is_number(quantity) or quantity != int(quantity) or quantity <= 0:
            problems.append(f"quantity must be a positive integer (got {quantity!r})")

        return problems

    def _validate_customer(self, customer: Any) -> list[str]:
        if not isinstance(customer, Mapping):
            return ["Order must have a customer"]

        errors = []
        if not _has_id(customer.get("id")):
            errors.append("Customer must have an id")

        email = customer.get("email")
        if not is_valid_email(email):
            errors.append(f"Customer email is invalid: {email!r}")

        return errors
