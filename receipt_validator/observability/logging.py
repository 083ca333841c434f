"""
Structured Logging with Structlog.

Provides JSON-formatted logs with service context.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from receipt_validator.config import Settings, get_settings


def _app_context(service_name: str) -> Processor:
    def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        """Add service name to all log entries."""
        event_dict["service"] = service_name
        return event_dict

    return add_app_context


def setup_logging(settings: Settings | None = None) -> None:
    """
    Configure structured logging with structlog.

    Logs are formatted as JSON for machine parsing with the following structure:
    {
        "event": "receipt_validation_completed",
        "level": "info",
        "timestamp": "2025-01-08T12:00:00.123456Z",
        "logger": "receipt_validator.services.validator",
        "service": "receipt-validator",
        ...additional context
    }
    """
    settings = settings or get_settings()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper()),
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _app_context(settings.service_name),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Usage:
        logger = get_logger(__name__)
        logger.info("receipt_validation_started", environment="Production")
    """
    return structlog.get_logger(name)  # type: ignore[no-any-return]


class log_context:
    """
    Context manager for adding structured logging context.

    Usage:
        with log_context(request_id="req-123"):
            await validator.validate_auto(receipt)
    """

    def __init__(self, **kwargs: Any) -> None:
        self.context = kwargs

    def __enter__(self) -> None:
        structlog.contextvars.bind_contextvars(**self.context)

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        structlog.contextvars.unbind_contextvars(*self.context.keys())
