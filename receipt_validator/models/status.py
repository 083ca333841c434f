"""
verifyReceipt status codes and their error conditions.

https://developer.apple.com/documentation/appstorereceipts/status
"""

from receipt_validator.exceptions import (
    IncorrectSecretError,
    InternalDataAccessError,
    MalformedJSONError,
    MalformedReceiptDataError,
    NotAuthenticatedError,
    ProductionOnSandboxError,
    ReceiptStatusError,
    SandboxOnProductionError,
    ServerNotAvailableError,
    SubscriptionExpiredError,
    UnauthorizedReceiptError,
    UnknownStatusError,
)

STATUS_OK = 0
STATUS_MALFORMED_JSON = 21000
STATUS_MALFORMED_RECEIPT_DATA = 21002
STATUS_NOT_AUTHENTICATED = 21003
STATUS_INCORRECT_SECRET = 21004
STATUS_SERVER_NOT_AVAILABLE = 21005
STATUS_SUBSCRIPTION_EXPIRED = 21006
STATUS_SANDBOX_ON_PRODUCTION = 21007
STATUS_PRODUCTION_ON_SANDBOX = 21008
STATUS_UNAUTHORIZED_RECEIPT = 21010
STATUS_INTERNAL_DATA_ACCESS_MIN = 21100
STATUS_INTERNAL_DATA_ACCESS_MAX = 21199


def status_error(status: int) -> ReceiptStatusError | None:
    """
    Map a verifyReceipt status code to its error condition.

    Discrete codes are checked first, then the internal data access range,
    then everything else falls back to UnknownStatusError.

    Args:
        status: Status code from the verification response

    Returns:
        None for status 0, otherwise the matching condition
    """
    if status == STATUS_OK:
        return None
    if status == STATUS_MALFORMED_JSON:
        return MalformedJSONError(status)
    if status == STATUS_MALFORMED_RECEIPT_DATA:
        return MalformedReceiptDataError(status)
    if status == STATUS_NOT_AUTHENTICATED:
        return NotAuthenticatedError(status)
    if status == STATUS_INCORRECT_SECRET:
        return IncorrectSecretError(status)
    if status == STATUS_SERVER_NOT_AVAILABLE:
        return ServerNotAvailableError(status)
    if status == STATUS_SUBSCRIPTION_EXPIRED:
        return SubscriptionExpiredError(status)
    if status == STATUS_SANDBOX_ON_PRODUCTION:
        return SandboxOnProductionError(status)
    if status == STATUS_PRODUCTION_ON_SANDBOX:
        return ProductionOnSandboxError(status)
    if status == STATUS_UNAUTHORIZED_RECEIPT:
        return UnauthorizedReceiptError(status)
    if STATUS_INTERNAL_DATA_ACCESS_MIN <= status <= STATUS_INTERNAL_DATA_ACCESS_MAX:
        return InternalDataAccessError(status)
    return UnknownStatusError(status)


def is_environment_mismatch(error: ReceiptStatusError | None) -> bool:
    """Check if a status condition means the receipt went to the wrong endpoint."""
    return isinstance(error, (SandboxOnProductionError, ProductionOnSandboxError))
