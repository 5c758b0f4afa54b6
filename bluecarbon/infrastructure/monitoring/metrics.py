"""Prometheus metrics for the registry.

Three groups, all labelled with `service` and `environment`:

- HTTP: request latency, request count, failed requests by error type
- lifecycle: submissions created, status transitions, credits minted and
  sold (count and tonnes), oracle calls by outcome
- sync: outbox delivery attempts by result, outbox depth by status

Environment Variables:
- SERVICE_NAME (default: bluecarbon-api)
- ENVIRONMENT (default: development)
"""

import os
import threading
import time

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

METRICS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

# Request latency buckets, 10ms to 10s; oracle-backed uploads sit at the top
REQUEST_DURATION_BUCKETS = (0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)

BASE_LABELS = ("service", "environment")


class MetricsCollector:
    """Owns one CollectorRegistry and every registry metric.

    Tests pass their own CollectorRegistry (or none, for a fresh one) so
    collectors never share state.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or CollectorRegistry()
        self._service_name = os.environ.get("SERVICE_NAME", "bluecarbon-api")
        self._environment = os.environ.get("ENVIRONMENT", "development")
        self.startup_times: dict[str, float] = {}

        self.uptime_seconds = self._gauge("uptime_seconds", "Seconds since start")
        self.http_request_duration_seconds = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            labelnames=[*BASE_LABELS, "method", "endpoint"],
            buckets=REQUEST_DURATION_BUCKETS,
            registry=self._registry,
        )
        self.http_requests_total = self._counter(
            "http_requests_total",
            "HTTP requests",
            "method",
            "endpoint",
            "status",
        )
        self.http_requests_failed_total = self._counter(
            "http_requests_failed_total",
            "HTTP requests answered with 4xx or 5xx",
            "method",
            "endpoint",
            "status",
            "error_type",
        )

        self.submissions_created_total = self._counter(
            "submissions_created_total",
            "Submissions created, by initial status",
            "status",
        )
        self.status_transitions_total = self._counter(
            "submission_status_transitions_total",
            "Reviewer status transitions, by target status",
            "status",
        )
        self.credits_minted_total = self._counter(
            "credits_minted_total", "Credit records minted"
        )
        self.credits_minted_tonnes_total = self._counter(
            "credits_minted_tonnes_total", "Tonnes CO2e minted"
        )
        self.credits_sold_total = self._counter(
            "credits_sold_total", "Credit records sold"
        )
        self.credits_sold_tonnes_total = self._counter(
            "credits_sold_tonnes_total", "Tonnes CO2e sold"
        )
        self.oracle_calls_total = self._counter(
            "oracle_calls_total", "Image oracle calls", "operation", "outcome"
        )

        self.outbox_deliveries_total = self._counter(
            "outbox_deliveries_total",
            "Remote write attempts, by operation and result",
            "operation",
            "result",
        )
        self.outbox_entries = self._gauge(
            "outbox_entries", "Outbox entries, by sync status", "status"
        )

    def _counter(self, name: str, documentation: str, *labels: str) -> Counter:
        return Counter(
            name,
            documentation,
            labelnames=[*BASE_LABELS, *labels],
            registry=self._registry,
        )

    def _gauge(self, name: str, documentation: str, *labels: str) -> Gauge:
        return Gauge(
            name,
            documentation,
            labelnames=[*BASE_LABELS, *labels],
            registry=self._registry,
        )

    def _labels(self) -> dict[str, str]:
        return {"service": self._service_name, "environment": self._environment}

    # HTTP

    def observe_request_duration(
        self, method: str, endpoint: str, duration: float
    ) -> None:
        self.http_request_duration_seconds.labels(
            method=method, endpoint=endpoint, **self._labels()
        ).observe(duration)

    def increment_requests(self, method: str, endpoint: str, status: str) -> None:
        self.http_requests_total.labels(
            method=method, endpoint=endpoint, status=status, **self._labels()
        ).inc()

    def increment_failed_requests(
        self, method: str, endpoint: str, status: str, error_type: str
    ) -> None:
        self.http_requests_failed_total.labels(
            method=method,
            endpoint=endpoint,
            status=status,
            error_type=error_type,
            **self._labels(),
        ).inc()

    # Lifecycle

    def record_submission_created(self, initial_status: str) -> None:
        self.submissions_created_total.labels(
            status=initial_status, **self._labels()
        ).inc()

    def record_status_transition(self, to_status: str) -> None:
        self.status_transitions_total.labels(status=to_status, **self._labels()).inc()

    def record_credit_minted(self, amount: float) -> None:
        self.credits_minted_total.labels(**self._labels()).inc()
        self.credits_minted_tonnes_total.labels(**self._labels()).inc(amount)

    def record_credit_sold(self, amount: float) -> None:
        self.credits_sold_total.labels(**self._labels()).inc()
        self.credits_sold_tonnes_total.labels(**self._labels()).inc(amount)

    def record_oracle_call(self, operation: str, outcome: str) -> None:
        self.oracle_calls_total.labels(
            operation=operation, outcome=outcome, **self._labels()
        ).inc()

    # Sync

    def record_outbox_delivery(self, operation: str, result: str) -> None:
        self.outbox_deliveries_total.labels(
            operation=operation, result=result, **self._labels()
        ).inc()

    def set_outbox_depth(self, status: str, count: int) -> None:
        self.outbox_entries.labels(status=status, **self._labels()).set(count)

    # Uptime

    def record_startup(self, service: str) -> None:
        self.startup_times[service] = time.time()

    def get_uptime_seconds(self, service: str) -> float:
        """Seconds since record_startup(service); 0.0 if never started."""
        started = self.startup_times.get(service)
        return 0.0 if started is None else time.time() - started

    def update_uptime_gauges(self) -> None:
        for service in self.startup_times:
            self.uptime_seconds.labels(
                service=service, environment=self._environment
            ).set(self.get_uptime_seconds(service))

    def get_registry(self) -> CollectorRegistry:
        return self._registry


_collector: MetricsCollector | None = None
_collector_lock = threading.Lock()


def get_metrics_collector() -> MetricsCollector:
    """Process-wide collector shared by middleware, services and /v1/metrics."""
    global _collector
    if _collector is None:
        with _collector_lock:
            if _collector is None:
                _collector = MetricsCollector()
    return _collector


def generate_metrics() -> bytes:
    """Render the shared collector in Prometheus text format."""
    collector = get_metrics_collector()
    collector.update_uptime_gauges()
    return generate_latest(collector.get_registry())


def reset_metrics_collector() -> None:
    """Drop the shared collector (tests only)."""
    global _collector
    with _collector_lock:
        _collector = None
