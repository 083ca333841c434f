"""
Response Parser - decode verifyReceipt JSON into typed models.

Apple encodes integers, booleans and tri-states as strings ("1527811200000",
"true", "0"). This is the only place those tokens are interpreted.
"""

from collections.abc import Mapping

from receipt_validator.exceptions import ResponseDecodeError
from receipt_validator.models.purchase import (
    CancellationReason,
    ExpirationIntent,
    PendingRenewalInfo,
    PurchaseRecord,
    TriState,
)
from receipt_validator.models.receipt import Receipt, ValidationResponse


def _parse_int(value: object, field_name: str) -> int | None:
    """Parse an integer that may be sent as a JSON number or a numeric string."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ResponseDecodeError(f"{field_name} must be an integer, got boolean")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as exc:
            raise ResponseDecodeError(f"{field_name} is not an integer: {value!r}") from exc
    raise ResponseDecodeError(f"{field_name} must be an integer, got {type(value).__name__}")


def _parse_bool(value: object, field_name: str) -> bool:
    """Parse a boolean sent as "true"/"false", "1"/"0" or a JSON bool."""
    if value is None or value == "":
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        token = value.strip().lower()
        if token in ("true", "1"):
            return True
        if token in ("false", "0"):
            return False
    raise ResponseDecodeError(f"{field_name} is not a boolean: {value!r}")


def _parse_str(value: object, field_name: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    raise ResponseDecodeError(f"{field_name} must be a string, got {type(value).__name__}")


def _optional_str(value: object, field_name: str) -> str | None:
    parsed = _parse_str(value, field_name)
    return parsed or None


def _parse_cancellation_reason(value: object) -> CancellationReason | None:
    token = _parse_str(value, "cancellation_reason")
    if not token:
        return None
    try:
        return CancellationReason(token)
    except ValueError as exc:
        raise ResponseDecodeError(f"Unknown cancellation_reason: {token!r}") from exc


def _parse_expiration_intent(value: object) -> ExpirationIntent | None:
    token = _parse_str(value, "expiration_intent")
    if not token:
        return None
    try:
        return ExpirationIntent(token)
    except ValueError:
        return ExpirationIntent.UNKNOWN


def _require_mapping(value: object, field_name: str) -> Mapping[str, object]:
    if not isinstance(value, Mapping):
        raise ResponseDecodeError(f"{field_name} must be an object, got {type(value).__name__}")
    return value


def _require_list(value: object, field_name: str) -> list[object]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ResponseDecodeError(f"{field_name} must be an array, got {type(value).__name__}")
    return value


def parse_purchase_record(data: Mapping[str, object]) -> PurchaseRecord:
    """Parse one latest_receipt_info / in_app entry."""
    transaction_id = _parse_str(data.get("transaction_id"), "transaction_id")
    quantity = _parse_int(data.get("quantity"), "quantity")

    return PurchaseRecord(
        product_id=_parse_str(data.get("product_id"), "product_id"),
        transaction_id=transaction_id,
        original_transaction_id=_parse_str(
            data.get("original_transaction_id"), "original_transaction_id"
        )
        or transaction_id,
        purchase_date_ms=_parse_int(data.get("purchase_date_ms"), "purchase_date_ms") or 0,
        original_purchase_date_ms=_parse_int(
            data.get("original_purchase_date_ms"), "original_purchase_date_ms"
        )
        or 0,
        quantity=1 if quantity is None else quantity,
        purchase_date=_parse_str(data.get("purchase_date"), "purchase_date"),
        original_purchase_date=_parse_str(
            data.get("original_purchase_date"), "original_purchase_date"
        ),
        expires_date_ms=_parse_int(data.get("expires_date_ms"), "expires_date_ms"),
        expires_date=_parse_str(data.get("expires_date"), "expires_date"),
        web_order_line_item_id=_optional_str(
            data.get("web_order_line_item_id"), "web_order_line_item_id"
        ),
        is_trial_period=_parse_bool(data.get("is_trial_period"), "is_trial_period"),
        is_in_intro_offer_period=_parse_bool(
            data.get("is_in_intro_offer_period"), "is_in_intro_offer_period"
        ),
        auto_renew_status=TriState.parse(data.get("auto_renew_status")),
        auto_renew_product_id=_optional_str(
            data.get("auto_renew_product_id"), "auto_renew_product_id"
        ),
        is_in_billing_retry_period=TriState.parse(data.get("is_in_billing_retry_period")),
        expiration_intent=_parse_expiration_intent(data.get("expiration_intent")),
        price_consent_status=TriState.parse(data.get("price_consent_status")),
        cancellation_date_ms=_parse_int(data.get("cancellation_date_ms"), "cancellation_date_ms"),
        cancellation_date=_parse_str(data.get("cancellation_date"), "cancellation_date"),
        cancellation_reason=_parse_cancellation_reason(data.get("cancellation_reason")),
    )


def parse_pending_renewal_info(data: Mapping[str, object]) -> PendingRenewalInfo:
    """Parse one pending_renewal_info entry."""
    return PendingRenewalInfo(
        product_id=_parse_str(data.get("product_id"), "product_id"),
        original_transaction_id=_parse_str(
            data.get("original_transaction_id"), "original_transaction_id"
        ),
        auto_renew_product_id=_optional_str(
            data.get("auto_renew_product_id"), "auto_renew_product_id"
        ),
        auto_renew_status=TriState.parse(data.get("auto_renew_status")),
        is_in_billing_retry_period=TriState.parse(data.get("is_in_billing_retry_period")),
        expiration_intent=_parse_expiration_intent(data.get("expiration_intent")),
        price_consent_status=TriState.parse(data.get("price_consent_status")),
    )


def _parse_records(value: object, field_name: str) -> tuple[PurchaseRecord, ...]:
    return tuple(
        parse_purchase_record(_require_mapping(item, field_name))
        for item in _require_list(value, field_name)
    )


def parse_receipt(data: Mapping[str, object]) -> Receipt:
    """Parse the echoed receipt object."""
    return Receipt(
        bundle_id=_parse_str(data.get("bundle_id"), "bundle_id"),
        application_version=_parse_str(data.get("application_version"), "application_version"),
        original_application_version=_parse_str(
            data.get("original_application_version"), "original_application_version"
        ),
        receipt_type=_parse_str(data.get("receipt_type"), "receipt_type"),
        receipt_creation_date_ms=_parse_int(
            data.get("receipt_creation_date_ms"), "receipt_creation_date_ms"
        )
        or 0,
        request_date_ms=_parse_int(data.get("request_date_ms"), "request_date_ms") or 0,
        original_purchase_date_ms=_parse_int(
            data.get("original_purchase_date_ms"), "original_purchase_date_ms"
        )
        or 0,
        receipt_expiration_date_ms=_parse_int(
            data.get("receipt_expiration_date_ms"), "receipt_expiration_date_ms"
        ),
        in_app=_parse_records(data.get("in_app"), "in_app"),
    )


def parse_validation_response(payload: object) -> ValidationResponse:
    """
    Build a ValidationResponse from a decoded JSON body.

    Args:
        payload: Result of JSON-decoding the response body

    Returns:
        Fully typed validation response

    Raises:
        ResponseDecodeError: If the body does not have the expected shape
    """
    data = _require_mapping(payload, "response body")

    status = _parse_int(data.get("status"), "status")
    if status is None:
        raise ResponseDecodeError("status is missing")

    receipt_data = data.get("receipt")
    receipt = (
        parse_receipt(_require_mapping(receipt_data, "receipt")) if receipt_data else None
    )

    return ValidationResponse(
        status=status,
        environment=_optional_str(data.get("environment"), "environment"),
        receipt=receipt,
        latest_receipt=_parse_str(data.get("latest_receipt"), "latest_receipt"),
        latest_receipt_info=_parse_records(data.get("latest_receipt_info"), "latest_receipt_info"),
        latest_expired_receipt_info=_parse_records(
            data.get("latest_expired_receipt_info"), "latest_expired_receipt_info"
        ),
        pending_renewal_info=tuple(
            parse_pending_renewal_info(_require_mapping(item, "pending_renewal_info"))
            for item in _require_list(data.get("pending_renewal_info"), "pending_renewal_info")
        ),
        is_retryable=_parse_bool(data.get("is-retryable"), "is-retryable"),
    )
