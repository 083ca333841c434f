"""
Pytest Configuration and Centralized Fixtures.

Provides reusable builders for testing:
- Purchase records with sensible defaults
- Wire-format verifyReceipt payloads
- Validators backed by httpx.MockTransport
"""

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from receipt_validator.models.purchase import PurchaseRecord
from receipt_validator.services.validator import ReceiptValidator, ValidatorConfig

# 2018-06-01T00:00:00Z
BASE_MS = 1527811200000
# 2100-01-01T00:00:00Z
FAR_FUTURE_MS = 4102444800000

# ============================================================================
# Purchase Record Fixtures
# ============================================================================


@pytest.fixture
def make_record() -> Callable[..., PurchaseRecord]:
    """Factory for purchase records; keyword arguments override defaults."""

    def _make(**overrides: Any) -> PurchaseRecord:
        fields: dict[str, Any] = {
            "product_id": "com.example.app.monthly",
            "transaction_id": "1000000000000001",
            "original_transaction_id": "1000000000000001",
            "purchase_date_ms": BASE_MS,
            "original_purchase_date_ms": BASE_MS,
        }
        fields.update(overrides)
        return PurchaseRecord(**fields)

    return _make


@pytest.fixture
def record_payload() -> dict[str, str]:
    """latest_receipt_info entry as Apple sends it (strings everywhere)."""
    return {
        "quantity": "1",
        "product_id": "com.example.app.monthly",
        "transaction_id": "1000000000000002",
        "original_transaction_id": "1000000000000001",
        "purchase_date": "2018-06-01 00:00:00 Etc/GMT",
        "purchase_date_ms": str(BASE_MS),
        "purchase_date_pst": "2018-05-31 17:00:00 America/Los_Angeles",
        "original_purchase_date": "2018-06-01 00:00:00 Etc/GMT",
        "original_purchase_date_ms": str(BASE_MS),
        "expires_date": "2100-01-01 00:00:00 Etc/GMT",
        "expires_date_ms": str(FAR_FUTURE_MS),
        "web_order_line_item_id": "1000000040000001",
        "is_trial_period": "false",
        "is_in_intro_offer_period": "false",
    }


@pytest.fixture
def response_payload(record_payload: dict[str, str]) -> dict[str, Any]:
    """Successful verifyReceipt body for an auto-renewable subscription."""
    return {
        "status": 0,
        "environment": "Production",
        "receipt": {
            "receipt_type": "Production",
            "bundle_id": "com.example.app",
            "application_version": "42",
            "original_application_version": "1.0",
            "receipt_creation_date_ms": str(BASE_MS),
            "request_date_ms": str(BASE_MS),
            "original_purchase_date_ms": str(BASE_MS),
            "in_app": [record_payload],
        },
        "latest_receipt": "bGF0ZXN0LXJlY2VpcHQ=",
        "latest_receipt_info": [record_payload],
        "pending_renewal_info": [
            {
                "product_id": "com.example.app.monthly",
                "original_transaction_id": "1000000000000001",
                "auto_renew_product_id": "com.example.app.monthly",
                "auto_renew_status": "1",
            }
        ],
    }


# ============================================================================
# Validator Fixtures
# ============================================================================


class RecordingHandler:
    """MockTransport handler that replays queued responses and records requests."""

    def __init__(self, responses: list[httpx.Response | Exception]) -> None:
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.responses.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    @property
    def urls(self) -> list[str]:
        return [str(request.url) for request in self.requests]

    def body(self, index: int = 0) -> dict[str, Any]:
        return json.loads(self.requests[index].content)


@pytest.fixture
def validator_factory() -> Callable[..., tuple[ReceiptValidator, RecordingHandler]]:
    """Build a validator whose HTTP calls are answered from a queue."""

    def _create(
        *responses: httpx.Response | Exception,
        shared_secret: str = "",
        exclude_old_transactions: bool = False,
    ) -> tuple[ReceiptValidator, RecordingHandler]:
        handler = RecordingHandler(list(responses))
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        config = ValidatorConfig(
            shared_secret=shared_secret,
            exclude_old_transactions=exclude_old_transactions,
            http_client=client,
        )
        return ReceiptValidator(config), handler

    return _create


@pytest.fixture
def status_response() -> Callable[..., httpx.Response]:
    """Factory for JSON responses carrying a status (plus extra fields)."""

    def _create(status: int, **extra: Any) -> httpx.Response:
        return httpx.Response(200, json={"status": status, **extra})

    return _create
