"""
FastAPI router for order pricing endpoints.

Prices single orders and batches of orders with the configured default
options, optionally overridden per request.
"""

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import ValidationError

from ..batch import BatchAggregator, BatchReport
from ..config.models import PricingConfig, PricingOptions
from ..pricing.pipeline import OrderPipeline
from ..shared.metrics import record_outcome
from ..shared.models import OrderOutcome
from .dependencies import get_config, get_pipeline
from .models import PriceBatchRequest, PriceOrderRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["Pricing"])


def _resolve_options(config: PricingConfig, overrides: dict | None) -> PricingOptions:
    try:
        return config.defaults.merged(overrides)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid pricing options: {e.errors(include_url=False)}",
        )


@router.post(
    "/price",
    response_model=OrderOutcome,
    summary="Price a single order",
    description=(
        "Validate and price one order. Invalid orders are not an HTTP error: "
        "they come back as a rejected outcome with the reason."
    ),
)
def price_single_order(
    request: PriceOrderRequest,
    config: PricingConfig = Depends(get_config),
    pipeline: OrderPipeline = Depends(get_pipeline),
):
    """
    Price one order.

    Example:
        POST /api/orders/price
        {
            "order": {"id": "123", "items": [...], "customer": {...}},
            "options": {"promotionalCode": "SAVE10"}
        }
    """
    options = _resolve_options(config, request.options)

    start = time.perf_counter()
    outcome = pipeline.price_order(request.order, options)
    record_outcome(outcome, time.perf_counter() - start)

    return outcome


@router.post(
    "/batch",
    response_model=BatchReport,
    summary="Price a batch of orders",
    description="Price every order in the batch and return counts, outcomes and statistics.",
)
def price_order_batch(
    request: PriceBatchRequest,
    config: PricingConfig = Depends(get_config),
    pipeline: OrderPipeline = Depends(get_pipeline),
):
    """Price a batch of orders."""
    options = _resolve_options(config, request.options)
    logger.info(f"Batch pricing request received: {len(request.orders)} orders")

    aggregator = BatchAggregator(pipeline=pipeline, max_workers=config.max_workers)
    return aggregator.process(
        request.orders,
        options,
        include_details=request.include_details,
        include_statistics=request.include_statistics,
    )
