"""Metrics — Prometheus metrics for queries and reversals."""

from __future__ import annotations

from ledger_ops.metrics.collector import LedgerMetrics, MetricsCollector

__all__ = ["LedgerMetrics", "MetricsCollector"]
