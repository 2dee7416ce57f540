"""
Prometheus metrics for the mentorship scheduling service.

Service operation timings come from the @measure_operation decorator; the
scheduling counters below are incremented by the engines themselves.
"""

from threading import Lock
from typing import Optional, cast

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Custom registry so tests and multiple app instances don't collide with the default one
REGISTRY = CollectorRegistry()

http_request_duration_seconds = Histogram(
    "mentorship_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint", "status_code"],
    registry=REGISTRY,
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

http_requests_total = Counter(
    "mentorship_http_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status_code"],
    registry=REGISTRY,
)

http_requests_in_progress = Gauge(
    "mentorship_http_requests_in_progress",
    "Number of HTTP requests currently being processed",
    ["method"],
    registry=REGISTRY,
)

service_operation_duration_seconds = Histogram(
    "mentorship_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "mentorship_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "mentorship_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

slot_claim_conflicts_total = Counter(
    "mentorship_slot_claim_conflicts_total",
    "Check-and-set slot claims that lost to a concurrent writer or stale state",
    ["operation", "reason"],  # operation: book | reschedule
    registry=REGISTRY,
)

session_transitions_total = Counter(
    "mentorship_session_transitions_total",
    "Committed session status transitions",
    ["from_status", "to_status"],
    registry=REGISTRY,
)

notification_dispatch_failures_total = Counter(
    "mentorship_notification_dispatch_failures_total",
    "Post-commit notification dispatches that raised",
    ["event_type"],
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Manages Prometheus metrics collection and exposure."""

    _lock: Lock = Lock()

    @staticmethod
    def record_http_request(method: str, endpoint: str, duration: float, status_code: int) -> None:
        """Record HTTP request metrics."""
        labels = {"method": method, "endpoint": endpoint, "status_code": str(status_code)}
        http_request_duration_seconds.labels(**labels).observe(duration)
        http_requests_total.labels(**labels).inc()

    @staticmethod
    def track_http_request_start(method: str) -> None:
        http_requests_in_progress.labels(method=method).inc()

    @staticmethod
    def track_http_request_end(method: str) -> None:
        http_requests_in_progress.labels(method=method).dec()

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        """
        Record service operation metrics from @measure_operation decorator.

        Args:
            service: Service name (e.g., 'BookingService')
            operation: Operation/method name (e.g., 'book_session')
            duration: Operation duration in seconds
            status: Operation status ('success' or 'error')
            error_type: Type of error if status is 'error'
        """
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()
        if status == "error" and error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()

    @staticmethod
    def inc_slot_claim_conflict(operation: str, reason: str) -> None:
        slot_claim_conflicts_total.labels(operation=operation, reason=reason).inc()

    @staticmethod
    def inc_session_transition(from_status: str, to_status: str) -> None:
        session_transitions_total.labels(from_status=from_status, to_status=to_status).inc()

    @staticmethod
    def inc_notification_failure(event_type: str) -> None:
        notification_dispatch_failures_total.labels(event_type=event_type).inc()

    @staticmethod
    def get_metrics() -> bytes:
        """
        Generate Prometheus metrics in exposition format.

        Returns:
            Metrics data in Prometheus text format
        """
        with PrometheusMetrics._lock:
            return cast(bytes, generate_latest(REGISTRY))

    @staticmethod
    def get_content_type() -> str:
        """Get the content type for Prometheus metrics."""
        return cast(str, CONTENT_TYPE_LATEST)


# Singleton instance
prometheus_metrics = PrometheusMetrics()
