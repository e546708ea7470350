"""
Main FastAPI application entry point for the order pricing service.

This module creates and configures the FastAPI application with the pricing
routes, exception handlers, health and metrics endpoints.
"""

import logging
import traceback
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from . import __version__
from .api.dependencies import get_config
from .api.models import ErrorResponse, HealthCheckResponse
from .api.pricing_router import router as pricing_router
from .shared.logging_config import configure_structured_logging

logger = logging.getLogger(__name__)

APP_NAME = "Order Pricing API"
APP_VERSION = __version__
APP_DESCRIPTION = """
**Order Pricing API** computes deterministic, auditable prices for purchase orders.

Each order is validated, priced (subtotal, tax, handling fee), run through the
discount stack (customer tier, volume, promotional code, seasonal) and either
accepted with a full pricing breakdown or rejected with a reason.
"""


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown events."""
    config = get_config()
    configure_structured_logging(level=config.log_level)

    logger.info(f"Starting {APP_NAME} v{APP_VERSION}")
    yield
    logger.info("Application shutdown completed")


app = FastAPI(
    title=APP_NAME,
    version=APP_VERSION,
    description=APP_DESCRIPTION,
    lifespan=lifespan,
    docs_url="/docs",
    openapi_url="/openapi.json",
)


def _error_content(error_response: ErrorResponse) -> dict:
    content = error_response.model_dump()
    content["timestamp"] = content["timestamp"].isoformat()
    return content


# ================================
# EXCEPTION HANDLERS
# ================================


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions with consistent error format."""
    error_response = ErrorResponse(
        error=f"HTTP_{exc.status_code}", message=str(exc.detail), timestamp=datetime.now(UTC)
    )
    return JSONResponse(status_code=exc.status_code, content=_error_content(error_response))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.error(f"Unhandled exception: {exc}")
    logger.error(traceback.format_exc())

    error_response = ErrorResponse(
        error="INTERNAL_SERVER_ERROR",
        message="An unexpected error occurred",
        details={"exception_type": type(exc).__name__},
        timestamp=datetime.now(UTC),
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_content(error_response),
    )


# ================================
# MIDDLEWARE
# ================================


@app.middleware("http")
async def logging_middleware(request: Request, call_next):
    """Log all requests and responses."""
    start_time = datetime.now(UTC)
    response = await call_next(request)
    duration = (datetime.now(UTC) - start_time).total_seconds()
    logger.info(
        f"{request.method} {request.url.path} - "
        f"Status: {response.status_code} - "
        f"Duration: {duration:.3f}s"
    )
    return response


# ================================
# CORE ROUTES
# ================================


@app.get(
    "/health",
    response_model=HealthCheckResponse,
    summary="Health check",
    description="Check that the service is up and its configuration is loadable",
)
async def health_check():
    """Comprehensive health check endpoint."""
    checks = {}
    overall_status = "healthy"

    try:
        config = get_config()
        checks["configuration"] = {
            "status": "healthy",
            "tax_rate": str(config.defaults.tax_rate),
            "max_workers": config.max_workers,
        }
    except Exception as e:
        checks["configuration"] = {"status": "unhealthy", "error": str(e)}
        overall_status = "unhealthy"

    return HealthCheckResponse(
        status=overall_status,
        timestamp=datetime.now(UTC),
        version=APP_VERSION,
        checks=checks,
    )


@app.get(
    "/metrics",
    summary="Prometheus metrics",
    description="Prometheus metrics endpoint for pricing volume and latency",
    tags=["Monitoring"],
)
async def prometheus_metrics():
    """Return metrics in Prometheus exposition format for scraping."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


app.include_router(pricing_router)


# ================================
# DEVELOPMENT SERVER
# ================================


def run_dev_server():
    """Run the development server."""
    # Import here to avoid hard dependency during module import in test envs
    import uvicorn

    uvicorn.run(
        "order_pricing.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )


if __name__ == "__main__":
    run_dev_server()
