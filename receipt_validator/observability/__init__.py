"""
Observability module - Logging and Metrics.
"""

from receipt_validator.observability.logging import get_logger, log_context, setup_logging
from receipt_validator.observability.metrics import metrics

__all__ = [
    "get_logger",
    "log_context",
    "setup_logging",
    "metrics",
]
