"""
receipt_validator - App Store receipt validation and purchase state.
"""

from receipt_validator.exceptions import (
    PayloadEncodingError,
    ReceiptStatusError,
    ReceiptValidationError,
    RequestCancelledError,
    RequestConstructionError,
    ResponseDecodeError,
    TransportError,
)
from receipt_validator.models.environment import Environment
from receipt_validator.models.ordering import SortKey, latest_record, sort_records
from receipt_validator.models.purchase import PurchaseRecord, SubscriptionStatus, TriState
from receipt_validator.models.receipt import ValidationResponse
from receipt_validator.models.status import status_error
from receipt_validator.services.validator import ReceiptValidator, ValidatorConfig

__version__ = "0.1.0"

__all__ = [
    "Environment",
    "PayloadEncodingError",
    "PurchaseRecord",
    "ReceiptStatusError",
    "ReceiptValidationError",
    "ReceiptValidator",
    "RequestCancelledError",
    "RequestConstructionError",
    "ResponseDecodeError",
    "SortKey",
    "SubscriptionStatus",
    "TransportError",
    "TriState",
    "ValidationResponse",
    "ValidatorConfig",
    "latest_record",
    "sort_records",
    "status_error",
]
