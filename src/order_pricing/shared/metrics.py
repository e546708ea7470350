"""Prometheus metrics for order pricing."""

from prometheus_client import REGISTRY, Counter, Histogram

from .models import AcceptedOrder, RejectedOrder


def _get_or_create_metric(metric_class, name: str, doc: str, labelnames=None, **kwargs):
    """Get existing metric or create new one to avoid duplication errors in tests."""
    # Counters register without their _total suffix
    names = {name, name.removesuffix("_total")}
    for collector in list(REGISTRY._collector_to_names.keys()):
        if getattr(collector, "_name", None) in names:
            return collector
    try:
        if labelnames is not None:
            kwargs["labelnames"] = labelnames
        return metric_class(name, doc, registry=REGISTRY, **kwargs)
    except ValueError as e:
        if "Duplicated timeseries" in str(e):
            # Registered concurrently, look it up again
            for collector in list(REGISTRY._collector_to_names.keys()):
                if getattr(collector, "_name", None) in names:
                    return collector
        raise


orders_priced_total = _get_or_create_metric(
    Counter,
    "orders_priced_total",
    "Total number of orders run through the pricing pipeline",
    ["outcome"],
)

orders_rejected_total = _get_or_create_metric(
    Counter,
    "orders_rejected_total",
    "Total number of rejected orders",
    ["reason"],
)

order_pricing_duration_seconds = _get_or_create_metric(
    Histogram,
    "order_pricing_duration_seconds",
    "Time taken to price a single order",
    buckets=[0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1],
)

order_final_price = _get_or_create_metric(
    Histogram,
    "order_final_price",
    "Final payable price of accepted orders",
    buckets=[10, 25, 50, 100, 250, 500, 1000, 2500, 5000],
)


def record_outcome(outcome: AcceptedOrder | RejectedOrder, duration_seconds: float):
    """Record one pipeline outcome."""
    orders_priced_total.labels(outcome=outcome.status).inc()
    order_pricing_duration_seconds.observe(duration_seconds)
    if isinstance(outcome, RejectedOrder):
        orders_rejected_total.labels(reason=outcome.reason.value).inc()
    else:
        order_final_price.observe(float(outcome.pricing.final_price))
