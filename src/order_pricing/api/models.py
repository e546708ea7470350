"""
Pydantic models for FastAPI requests and responses.

Order records are accepted as free-form JSON objects so that malformed
orders reach the pricing pipeline and come back as rejected outcomes
instead of request validation errors.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PriceOrderRequest(BaseModel):
    """Request model for pricing a single order."""

    order: Any = Field(..., description="Order record (id, items, customer)")
    options: dict[str, Any] | None = Field(
        None,
        description="Pricing option overrides applied on top of the configured defaults",
        examples=[{"promotionalCode": "SAVE10", "currentMonth": 6}],
    )


class PriceBatchRequest(BaseModel):
    """Request model for pricing a batch of orders."""

    model_config = ConfigDict(populate_by_name=True)

    orders: list[Any] = Field(..., description="Order records")
    options: dict[str, Any] | None = Field(
        None, description="Pricing option overrides shared by the batch"
    )
    include_details: bool = Field(
        True, alias="includeDetails", description="Return per-order outcomes"
    )
    include_statistics: bool = Field(
        True, alias="includeStatistics", description="Return run statistics"
    )


class HealthCheckResponse(BaseModel):
    """Response model for health checks."""

    status: str = Field(..., description="Overall health status")
    timestamp: datetime = Field(..., description="Health check timestamp")
    version: str = Field(..., description="Application version")
    checks: dict[str, dict[str, Any]] = Field(
        ..., description="Individual component health checks"
    )


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error: str = Field(..., description="Error type or code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | None = Field(None, description="Additional error details")
    timestamp: datetime = Field(..., description="Error timestamp")
