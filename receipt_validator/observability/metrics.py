"""
Metrics Collection with Prometheus.

Exposes receipt validation metrics for monitoring.
"""

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram

from receipt_validator.config import get_settings


class ValidatorMetrics:
    """
    Centralized metrics for receipt validation.

    Covers:
    - Validation calls (rate, outcome, duration) per environment
    - Production to sandbox retries
    """

    def __init__(self, enabled: bool = True, registry: CollectorRegistry = REGISTRY) -> None:
        """Initialize all Prometheus metrics."""
        self.enabled = enabled

        self.validations_total = Counter(
            "receipt_validations_total",
            "Total verifyReceipt calls by environment and outcome",
            ["environment", "outcome"],
            registry=registry,
        )

        self.validation_duration_seconds = Histogram(
            "receipt_validation_duration_seconds",
            "verifyReceipt call duration in seconds",
            ["environment"],
            buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
            registry=registry,
        )

        self.environment_retries_total = Counter(
            "receipt_environment_retries_total",
            "Total production calls retried against sandbox",
            registry=registry,
        )

    def record_validation(self, environment: str, outcome: str, duration: float) -> None:
        """Record a finished verifyReceipt call.

        Outcome is "valid", a status error class name, or a call failure class name.
        """
        if not self.enabled:
            return
        self.validations_total.labels(environment=environment, outcome=outcome).inc()
        self.validation_duration_seconds.labels(environment=environment).observe(duration)

    def record_retry(self) -> None:
        if not self.enabled:
            return
        self.environment_retries_total.inc()


# Global metrics instance
metrics = ValidatorMetrics(enabled=get_settings().metrics_enabled)
