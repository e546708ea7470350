"""
Batch pricing and run statistics.

Runs the order pipeline over a batch, splits outcomes into accepted and
rejected orders and folds them into ``RunStatistics``. Statistics are an
immutable value updated through an explicit reduction step
(``RunStatistics.record``) performed by a single writer, so orders can be
priced on worker threads without sharing counters.
"""

import time
from collections.abc import Callable, Iterable, Iterator, Mapping
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from decimal import Decimal
from typing import Any

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, computed_field

from ..config.models import PricingOptions
from ..pricing.pipeline import OrderPipeline, resolve_options, utc_now
from ..shared.logging_utils import get_structured_logger
from ..shared.metrics import record_outcome
from ..shared.models import AcceptedOrder, RejectedOrder

log = get_structured_logger(__name__)


# Column order of BatchReport.to_dataframe
DATAFRAME_COLUMNS = [
    "order_id",
    "status",
    "reason",
    "customer_id",
    "item_count",
    "total_quantity",
    "customer_tier",
    "subtotal",
    "tax",
    "fee",
    "pre_discount_total",
    "total_discount",
    "final_price",
    "message",
]


class RunStatistics(BaseModel):
    """Counts and totals for one batch run."""

    model_config = ConfigDict(frozen=True)

    successful: int = 0
    failed: int = 0
    total_value: Decimal = Field(Decimal("0"), description="Sum of accepted final prices")
    rejections_by_reason: dict[str, int] = Field(default_factory=dict)
    started_at: datetime
    finished_at: datetime | None = None

    @computed_field
    @property
    def total_processed(self) -> int:
        return self.successful + self.failed

    @computed_field
    @property
    def average_order_value(self) -> Decimal:
        if self.successful == 0:
            return Decimal("0")
        return self.total_value / self.successful

    @computed_field
    @property
    def elapsed_seconds(self) -> float | None:
        if self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()

    def record(self, outcome: AcceptedOrder | RejectedOrder) -> "RunStatistics":
        """Return new statistics with ``outcome`` folded in."""
        if isinstance(outcome, AcceptedOrder):
            return self.model_copy(
                update={
                    "successful": self.successful + 1,
                    "total_value": self.total_value + outcome.pricing.final_price,
                }
            )

        reasons = dict(self.rejections_by_reason)
        reasons[outcome.reason.value] = reasons.get(outcome.reason.value, 0) + 1
        return self.model_copy(
            update={"failed": self.failed + 1, "rejections_by_reason": reasons}
        )

    def finish(self, finished_at: datetime) -> "RunStatistics":
        return self.model_copy(update={"finished_at": finished_at})


class BatchReport(BaseModel):
    """Result of pricing a batch of orders."""

    model_config = ConfigDict(frozen=True)

    total: int
    successful: int
    failed: int
    orders: tuple[AcceptedOrder, ...] | None = None
    rejected: tuple[RejectedOrder, ...] | None = None
    statistics: RunStatistics | None = None

    def rounded(self) -> "BatchReport":
        """Copy with accepted orders' pricing quantized to cents for display."""
        if self.orders is None:
            return self
        return self.model_copy(
            update={"orders": tuple(order.rounded() for order in self.orders)}
        )

    def to_dataframe(self) -> pd.DataFrame:
        """
        Flatten per-order detail into a table, one row per order.

        Accepted orders come first. Money columns hold Decimals.

        Raises:
            ValueError: If the report was built without per-order detail
        """
        if self.orders is None or self.rejected is None:
            raise ValueError("Batch report has no per-order detail")

        rows: list[dict[str, Any]] = []
        for accepted in self.orders:
            pricing = accepted.pricing
            rows.append(
                {
                    "order_id": accepted.order_id,
                    "status": accepted.status,
                    "reason": None,
                    "customer_id": accepted.customer_id,
                    "item_count": accepted.item_count,
                    "total_quantity": pricing.total_quantity,
                    "customer_tier": pricing.customer_tier.value,
                    "subtotal": pricing.subtotal,
                    "tax": pricing.tax,
                    "fee": pricing.fee,
                    "pre_discount_total": pricing.pre_discount_total,
                    "total_discount": pricing.total_discount,
                    "final_price": pricing.final_price,
                    "message": None,
                }
            )
        for rejected in self.rejected:
            rows.append(
                {
                    "order_id": rejected.order_id,
                    "status": rejected.status,
                    "reason": rejected.reason.value,
                    "message": rejected.message,
                }
            )

        return pd.DataFrame(rows, columns=DATAFRAME_COLUMNS)


class BatchAggregator:
    """
    Prices a batch of orders and assembles the batch report.

    Args:
        pipeline: Order pipeline to run per order
        max_workers: Worker threads; 1 prices orders sequentially
        clock: Source of the current time (UTC)
    """

    def __init__(
        self,
        pipeline: OrderPipeline | None = None,
        max_workers: int = 1,
        clock: Callable[[], datetime] = utc_now,
    ):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.pipeline = pipeline or OrderPipeline()
        self.max_workers = max_workers
        self.clock = clock

    def process(
        self,
        orders: Iterable[Any],
        options: PricingOptions | Mapping | None = None,
        include_details: bool = True,
        include_statistics: bool = True,
    ) -> BatchReport:
        """
        Price every order in a batch.

        The seasonal month is pinned once for the whole batch when the
        options leave it open, so every order sees the same month.

        Args:
            orders: Raw order records or Order models
            options: Pricing options shared by the batch
            include_details: Include accepted and rejected outcomes
            include_statistics: Include run statistics

        Returns:
            BatchReport with counts and the requested detail
        """
        orders = list(orders)
        options = resolve_options(options)
        started_at = self.clock()
        if options.current_month is None:
            options = options.with_month(started_at.month)

        statistics = RunStatistics(started_at=started_at)
        accepted: list[AcceptedOrder] = []
        rejected: list[RejectedOrder] = []

        for outcome, duration in self._evaluate(orders, options):
            statistics = statistics.record(outcome)
            record_outcome(outcome, duration)
            if isinstance(outcome, AcceptedOrder):
                accepted.append(outcome)
            else:
                rejected.append(outcome)

        statistics = statistics.finish(self.clock())

        log.info(
            "Batch priced",
            total=len(orders),
            successful=statistics.successful,
            failed=statistics.failed,
            total_value=statistics.total_value,
            elapsed_seconds=statistics.elapsed_seconds,
        )

        return BatchReport(
            total=len(orders),
            successful=statistics.successful,
            failed=statistics.failed,
            orders=tuple(accepted) if include_details else None,
            rejected=tuple(rejected) if include_details else None,
            statistics=statistics if include_statistics else None,
        )

    def _evaluate(
        self, orders: list[Any], options: PricingOptions
    ) -> Iterator[tuple[AcceptedOrder | RejectedOrder, float]]:
        """Yield (outcome, seconds) per order, in input order."""
        if self.max_workers > 1 and len(orders) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                yield from executor.map(lambda order: self._timed(order, options), orders)
        else:
            for order in orders:
                yield self._timed(order, options)

    def _timed(
        self, order: Any, options: PricingOptions
    ) -> tuple[AcceptedOrder | RejectedOrder, float]:
        start = time.perf_counter()
        outcome = self.pipeline.price_order(order, options)
        return outcome, time.perf_counter() - start
