"""Metrics collector — Prometheus counters and histograms.

- ``ledger_fetch_histogram``            duration of transaction page fetches
- ``ledger_stale_responses_total``      fetch responses dropped as superseded
- ``ledger_reversal_total``             reversal submissions by kind and outcome
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING

from prometheus_client import CollectorRegistry, Counter, Histogram

if TYPE_CHECKING:
    from collections.abc import Iterator


_PREFIX = "ledger"


class MetricsCollector:
    """Low-level Prometheus collector that owns the registry.

    Use :class:`LedgerMetrics` for the high-level tracking interface.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or CollectorRegistry()

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._registry

    def histogram(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Histogram:
        """Register and return a Histogram."""
        return Histogram(name, doc, labels, registry=self._registry)

    def counter(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Counter:
        """Register and return a Counter."""
        return Counter(name, doc, labels, registry=self._registry)


class LedgerMetrics:
    """High-level metrics for transaction queries and reversals."""

    def __init__(self, collector: MetricsCollector | None = None) -> None:
        self._collector = collector or MetricsCollector()

        self._fetch = self._collector.histogram(
            f"{_PREFIX}_fetch_histogram",
            "Duration of transaction page fetches",
        )
        self._stale = self._collector.counter(
            f"{_PREFIX}_stale_responses",
            "Fetch responses dropped because a newer request superseded them",
        )
        self._reversals = self._collector.counter(
            f"{_PREFIX}_reversal",
            "Reversal submissions by kind and outcome",
            ("kind", "outcome"),
        )

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._collector.registry

    @contextmanager
    def track_fetch(self) -> Iterator[None]:
        """Track the duration of a transaction page fetch."""
        start = time.monotonic()
        try:
            yield
        finally:
            self._fetch.observe(time.monotonic() - start)

    def record_stale_response(self) -> None:
        """Count a superseded fetch response."""
        self._stale.inc()

    def record_reversal(self, kind: str, outcome: str) -> None:
        """Count a reversal submission (outcome: success, rejected, error)."""
        self._reversals.labels(kind=kind, outcome=outcome).inc()
