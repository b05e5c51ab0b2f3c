"""Prometheus instrumentation for calculation requests.

The engine depends only on the ``RequestMetrics`` protocol. The server wires
in ``PrometheusMetrics``; tests can pass ``NullMetrics`` or their own fake.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator, Optional, Protocol

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Gauge, Histogram, generate_latest

DURATION_BUCKETS = (0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0)

METRICS_CONTENT_TYPE = CONTENT_TYPE_LATEST


class RequestMetrics(Protocol):
    """Observability collaborator notified once per calculation request."""

    def increment_requests(self) -> None: ...

    def increment_errors(self) -> None: ...

    def observe_duration(self, seconds: float) -> None: ...

    def request_started(self) -> None: ...

    def request_finished(self) -> None: ...


class NullMetrics:
    """Discards every observation."""

    def increment_requests(self) -> None:
        pass

    def increment_errors(self) -> None:
        pass

    def observe_duration(self, seconds: float) -> None:
        pass

    def request_started(self) -> None:
        pass

    def request_finished(self) -> None:
        pass


class PrometheusMetrics:
    """Request counters, error counters, an active gauge and a latency histogram.

    Metrics live in their own registry so several instances can coexist
    (one per server, one per test) without name collisions in the global
    default registry.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry if registry is not None else CollectorRegistry()

        self.requests_total = Counter(
            "finance_requests",
            "Total number of finance engine calculation requests",
            registry=self.registry,
        )
        self.errors_total = Counter(
            "finance_errors",
            "Total number of errors in finance engine calculations",
            registry=self.registry,
        )
        self.request_duration = Histogram(
            "finance_request_duration_seconds",
            "Duration of finance engine calculation requests in seconds",
            buckets=DURATION_BUCKETS,
            registry=self.registry,
        )
        self.active_requests = Gauge(
            "finance_active_requests",
            "Number of active finance engine calculation requests",
            registry=self.registry,
        )

    def increment_requests(self) -> None:
        self.requests_total.inc()

    def increment_errors(self) -> None:
        self.errors_total.inc()

    def observe_duration(self, seconds: float) -> None:
        self.request_duration.observe(seconds)

    def request_started(self) -> None:
        self.active_requests.inc()

    def request_finished(self) -> None:
        self.active_requests.dec()

    def render(self) -> bytes:
        """Text exposition format for a ``/metrics`` scrape."""
        return generate_latest(self.registry)


@contextmanager
def request_timer(metrics: RequestMetrics) -> Iterator[None]:
    """Track one in-flight request and record its duration on every exit path."""
    metrics.request_started()
    start = time.perf_counter()
    try:
        yield
    finally:
        metrics.observe_duration(time.perf_counter() - start)
        metrics.request_finished()
