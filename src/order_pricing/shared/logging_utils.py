"""Structured logging utilities for order pricing."""
import json
import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Iterator, Optional

# Per-context so concurrent batch workers keep their own id
_correlation_id: ContextVar[Optional[str]] = ContextVar(
    "order_pricing_correlation_id", default=None
)


class StructuredLogger:
    """Structured JSON logger with correlation ID support."""

    def __init__(self, logger_name: str):
        self.logger = logging.getLogger(logger_name)

    @property
    def correlation_id(self) -> Optional[str]:
        return _correlation_id.get()

    def set_correlation_id(self, correlation_id: str):
        """Set correlation ID for current context."""
        _correlation_id.set(correlation_id)

    def clear_correlation_id(self):
        """Clear correlation ID."""
        _correlation_id.set(None)

    def generate_correlation_id(self) -> str:
        """Generate new correlation ID."""
        return f"CORR_{uuid.uuid4().hex[:12]}"

    @contextmanager
    def correlation(self, correlation_id: Optional[str] = None) -> Iterator[str]:
        """Scope a correlation ID to a block, restoring the previous one after."""
        corr_id = correlation_id or self.generate_correlation_id()
        token = _correlation_id.set(corr_id)
        try:
            yield corr_id
        finally:
            _correlation_id.reset(token)

    def _format_message(self, level: str, message: str, **kwargs) -> str:
        """Format log message with structured data."""
        log_entry = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": level,
            "message": message,
            "correlation_id": _correlation_id.get() or "none",
        }

        if kwargs:
            log_entry["context"] = kwargs

        # Decimal amounts and enums are rendered as strings
        return json.dumps(log_entry, default=str)

    def info(self, message: str, **kwargs):
        """Log info with structured data."""
        if self.logger.isEnabledFor(logging.INFO):
            self.logger.info(self._format_message("INFO", message, **kwargs))

    def warning(self, message: str, **kwargs):
        """Log warning with structured data."""
        if self.logger.isEnabledFor(logging.WARNING):
            self.logger.warning(self._format_message("WARNING", message, **kwargs))

    def error(self, message: str, **kwargs):
        """Log error with structured data."""
        if self.logger.isEnabledFor(logging.ERROR):
            self.logger.error(self._format_message("ERROR", message, **kwargs))

    def debug(self, message: str, **kwargs):
        """Log debug with structured data."""
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(self._format_message("DEBUG", message, **kwargs))


def get_structured_logger(name: str) -> StructuredLogger:
    """Get or create structured logger."""
    return StructuredLogger(name)
