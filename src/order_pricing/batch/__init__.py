"""Batch pricing: runs the pipeline per order and aggregates statistics."""

from .aggregator import BatchAggregator, BatchReport, RunStatistics

__all__ = ["BatchAggregator", "BatchReport", "RunStatistics"]
