"""
Prometheus metrics for the marketplace backend.

Per-operation timings come from ``BaseService.measure_operation``; the
booking counters are bumped by the booking engine and notification sink.
Everything lives in a private registry exposed at ``/metrics/prometheus``.
"""

from typing import Optional, cast

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

REGISTRY = CollectorRegistry()

# Service layer
service_operation_duration_seconds = Histogram(
    "marketplace_service_operation_duration_seconds",
    "Time spent in a service-layer operation",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

service_operations_total = Counter(
    "marketplace_service_operations_total",
    "Service-layer operations by outcome",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "marketplace_errors_total",
    "Failed service-layer operations by exception type",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

# Booking domain
bookings_created_total = Counter(
    "marketplace_bookings_created_total",
    "Bookings committed, by party kind and currency",
    ["party", "currency"],  # party: customer | guest
    registry=REGISTRY,
)

booking_status_changes_total = Counter(
    "marketplace_booking_status_changes_total",
    "Booking status changes by target status",
    ["status"],
    registry=REGISTRY,
)

booking_notifications_total = Counter(
    "marketplace_booking_notifications_total",
    "Booking confirmation dispatch outcomes",
    ["status"],  # sent | failed | skipped
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Thin facade so callers never touch metric objects directly."""

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        """
        Record one call of a measured service method.

        ``error_type`` is the exception class name and only counts when
        ``status`` is ``"error"``.
        """
        labels = {"service": service, "operation": operation}
        service_operation_duration_seconds.labels(**labels).observe(duration)
        service_operations_total.labels(status=status, **labels).inc()
        if status == "error" and error_type:
            errors_total.labels(error_type=error_type, **labels).inc()

    @staticmethod
    def inc_booking_created(party: str, currency: str) -> None:
        bookings_created_total.labels(party=party, currency=currency).inc()

    @staticmethod
    def inc_booking_status_change(status: str) -> None:
        booking_status_changes_total.labels(status=status).inc()

    @staticmethod
    def record_notification_outcome(status: str) -> None:
        booking_notifications_total.labels(status=status).inc()

    @staticmethod
    def render() -> bytes:
        """Current registry contents in the text exposition format."""
        return cast(bytes, generate_latest(REGISTRY))

    @staticmethod
    def content_type() -> str:
        return cast(str, CONTENT_TYPE_LATEST)


prometheus_metrics = PrometheusMetrics()
