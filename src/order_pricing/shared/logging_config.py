"""Logging configuration for structured logging."""
import logging
import sys


def configure_structured_logging(level: str = "INFO"):
    """Configure structured logging for the application."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(message)s",  # JSON already formatted
        stream=sys.stderr,
    )

    # Keep the order log readable when served over HTTP
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
