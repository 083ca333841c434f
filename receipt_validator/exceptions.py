"""
Exception Classes - Strongly typed exception hierarchy.

Call failures (encoding, request construction, transport, decode) are raised.
Status conditions describe a remote rejection of a decoded response and are
returned by ``status_error`` rather than raised by the validator.
"""


class ReceiptValidationError(Exception):
    """Base exception for all receipt validation errors."""

    pass


class ConfigurationError(ReceiptValidationError):
    """Raised when configuration is missing or invalid."""

    pass


# ============================================================================
# Call Failures - the receipt never got a usable answer
# ============================================================================


class PayloadEncodingError(ReceiptValidationError):
    """Raised when the request payload cannot be serialized."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Payload encoding error: {message}")


class RequestConstructionError(ReceiptValidationError):
    """Raised when the HTTP request cannot be built (bad URL, bad headers)."""

    def __init__(self, url: str, message: str) -> None:
        self.url = url
        self.message = message
        super().__init__(f"Request construction error for {url}: {message}")


class TransportError(ReceiptValidationError):
    """Raised when the HTTP call to the verification endpoint fails."""

    def __init__(self, url: str, message: str) -> None:
        self.url = url
        self.message = message
        super().__init__(f"Transport error for {url}: {message}")


class RequestCancelledError(TransportError):
    """Raised when the call is cut short by its deadline or transport timeout."""

    pass


class ResponseDecodeError(ReceiptValidationError):
    """Raised when the response body is not a well-formed verification response."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Response decode error: {message}")


# ============================================================================
# Status Conditions - the remote service rejected the receipt
# ============================================================================


class ReceiptStatusError(ReceiptValidationError):
    """Base for every non-zero verifyReceipt status condition."""

    description = "the receipt was rejected"

    def __init__(self, status: int) -> None:
        self.status = status
        super().__init__(f"{self.description} (status {status})")


class MalformedJSONError(ReceiptStatusError):
    description = "the App Store could not read the JSON object you provided"


class MalformedReceiptDataError(ReceiptStatusError):
    description = "the data in the receipt-data property was malformed or missing"


class NotAuthenticatedError(ReceiptStatusError):
    description = "the receipt could not be authenticated"


class IncorrectSecretError(ReceiptStatusError):
    description = (
        "the shared secret you provided does not match the shared secret on file for your account"
    )


class ServerNotAvailableError(ReceiptStatusError):
    description = "the receipt server is not currently available"


class SubscriptionExpiredError(ReceiptStatusError):
    description = "the receipt is valid but the subscription has expired"


class SandboxOnProductionError(ReceiptStatusError):
    description = (
        "this receipt is from the test environment, but it was sent to the production "
        "environment for verification"
    )


class ProductionOnSandboxError(ReceiptStatusError):
    description = (
        "this receipt is from the production environment, but it was sent to the test "
        "environment for verification"
    )


class UnauthorizedReceiptError(ReceiptStatusError):
    description = (
        "this receipt could not be authorized, treat this the same as if a purchase was never made"
    )


class InternalDataAccessError(ReceiptStatusError):
    description = "internal data access error"


class UnknownStatusError(ReceiptStatusError):
    description = "an unknown error occurred"
