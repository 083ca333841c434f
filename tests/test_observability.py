"""
Tests for logging setup and validation metrics.
"""

import structlog
from prometheus_client import REGISTRY, CollectorRegistry

from receipt_validator.config import Settings
from receipt_validator.observability import get_logger, log_context, setup_logging
from receipt_validator.observability.metrics import ValidatorMetrics, metrics


def _sample(name: str, labels: dict[str, str] | None = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


class TestMetrics:
    """Tests for ValidatorMetrics."""

    def test_record_validation(self):
        labels = {"environment": "Production", "outcome": "valid"}
        before = _sample("receipt_validations_total", labels)

        metrics.record_validation("Production", "valid", 0.12)

        assert _sample("receipt_validations_total", labels) == before + 1

    def test_record_retry(self):
        before = _sample("receipt_environment_retries_total")
        metrics.record_retry()
        assert _sample("receipt_environment_retries_total") == before + 1

    def test_disabled_records_nothing(self):
        registry = CollectorRegistry()
        disabled = ValidatorMetrics(enabled=False, registry=registry)

        disabled.record_validation("Sandbox", "UnknownStatusError", 0.1)
        disabled.record_retry()

        labels = {"environment": "Sandbox", "outcome": "UnknownStatusError"}
        assert registry.get_sample_value("receipt_validations_total", labels) is None
        assert registry.get_sample_value("receipt_environment_retries_total") == 0.0

    def test_private_registry(self):
        registry = CollectorRegistry()
        isolated = ValidatorMetrics(registry=registry)

        isolated.record_validation("Custom", "TransportError", 0.3)

        labels = {"environment": "Custom", "outcome": "TransportError"}
        assert registry.get_sample_value("receipt_validations_total", labels) == 1.0
        assert registry.get_sample_value(
            "receipt_validation_duration_seconds_count", {"environment": "Custom"}
        ) == 1.0


class TestLogging:
    """Tests for structlog configuration."""

    def teardown_method(self):
        structlog.reset_defaults()

    def test_json_renderer(self):
        setup_logging(Settings(_env_file=None, log_format="json"))
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_console_renderer(self):
        setup_logging(Settings(_env_file=None, log_format="console"))
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_service_name_added(self):
        setup_logging(Settings(_env_file=None, service_name="test-svc"))
        processors = structlog.get_config()["processors"]

        event_dict = {"event": "receipt_validation_started"}
        for processor in processors:
            if getattr(processor, "__name__", "") == "add_app_context":
                event_dict = processor(None, "info", event_dict)

        assert event_dict["service"] == "test-svc"

    def test_get_logger(self):
        assert get_logger("tests") is not None

    def test_log_context_binds_and_unbinds(self):
        with log_context(request_id="req-123"):
            assert structlog.contextvars.get_contextvars()["request_id"] == "req-123"
        assert "request_id" not in structlog.contextvars.get_contextvars()
