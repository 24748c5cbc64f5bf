"""
Prometheus metrics for the mentorship scheduling services.

Service timings come from ``BaseService.measure_operation``. Booking
conflicts and availability edits have their own counters so the routine
"someone else took it" race stays visible even though the mentee flow
recovers from it.
"""

from typing import Dict, Optional, cast

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

# Private registry; never shared with the process-wide default
REGISTRY = CollectorRegistry()

operation_latency_seconds = Histogram(
    "mentorship_service_operation_duration_seconds",
    "Wall-clock time spent in a scheduling service call",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.002, 0.005, 0.01, 0.02, 0.05, 0.1, 0.2, 0.5, 1.0, 2.0, 5.0),
)

operations_total = Counter(
    "mentorship_service_operations_total",
    "Scheduling service calls by outcome",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

operation_errors_total = Counter(
    "mentorship_errors_total",
    "Failed scheduling service calls by exception type",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

booking_conflicts_total = Counter(
    "mentorship_booking_conflicts_total",
    "Booking attempts rejected because the slot was already taken",
    ["source"],  # commit | requester
    registry=REGISTRY,
)

availability_changes_total = Counter(
    "mentorship_availability_changes_total",
    "Mentor availability edits by action and outcome",
    ["action", "outcome"],  # add|set_available|remove , success|rejected
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Facade over the scheduling metrics."""

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        """
        Record one timed service call.

        Args:
            service: Service class name, e.g. 'BookingCommitService'
            operation: Name passed to measure_operation, e.g. 'book'
            duration: Seconds spent in the call
            status: 'success' or 'error'
            error_type: Exception class name when the call failed
        """
        operation_latency_seconds.labels(service=service, operation=operation).observe(
            max(duration, 0.0)
        )
        operations_total.labels(service=service, operation=operation, status=status).inc()
        if status == "error" and error_type:
            operation_errors_total.labels(
                service=service, operation=operation, error_type=error_type
            ).inc()

    @staticmethod
    def record_booking_conflict(source: str = "commit") -> None:
        booking_conflicts_total.labels(source=source).inc()

    @staticmethod
    def record_availability_change(action: str, outcome: str = "success") -> None:
        availability_changes_total.labels(action=action, outcome=outcome).inc()

    @staticmethod
    def get_metrics() -> bytes:
        """Render the private registry in the text exposition format."""
        return cast(bytes, generate_latest(REGISTRY))

    @staticmethod
    def get_content_type() -> str:
        return cast(str, CONTENT_TYPE_LATEST)

    @staticmethod
    def sample_value(name: str, labels: Optional[Dict[str, str]] = None) -> float:
        """Current value of one sample, 0.0 when it has not been recorded yet."""
        value = REGISTRY.get_sample_value(name, labels or {})
        return float(value) if value is not None else 0.0


prometheus_metrics = PrometheusMetrics()
