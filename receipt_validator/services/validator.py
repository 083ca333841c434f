"""
App Store Receipt Validator.

Validates base64 receipts against the legacy verifyReceipt endpoint.
https://developer.apple.com/documentation/appstorereceipts/verifyreceipt

The validator holds no per-call state. Each call makes one POST through the
injected httpx.AsyncClient (validate_auto makes at most two, in sequence),
so a single validator can be shared across tasks.
"""

import asyncio
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from types import TracebackType

import httpx
from pydantic import ValidationError
from structlog import get_logger

from receipt_validator.config import Settings
from receipt_validator.exceptions import (
    PayloadEncodingError,
    ReceiptValidationError,
    RequestCancelledError,
    RequestConstructionError,
    ResponseDecodeError,
    TransportError,
)
from receipt_validator.models.environment import Environment
from receipt_validator.models.receipt import ValidationRequest, ValidationResponse
from receipt_validator.models.status import is_environment_mismatch
from receipt_validator.observability.metrics import metrics
from receipt_validator.services.response_parser import parse_validation_response

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 10.0  # Seconds, applied when the validator builds its own client
REQUEST_HEADERS = {"Content-Type": "application/json; charset=utf-8"}


@dataclass(frozen=True)
class ValidatorConfig:
    """Configuration for ReceiptValidator."""

    shared_secret: str = ""  # App-specific shared secret; omitted from the payload when empty
    exclude_old_transactions: bool = False  # Only return the latest renewal per subscription
    timeout: float = DEFAULT_TIMEOUT  # Transport timeout for the default client
    environment: Environment = field(default_factory=Environment.production)  # validate() default
    http_client: httpx.AsyncClient | None = None  # Injected requester; not closed by the validator

    def __post_init__(self) -> None:
        """Validate configuration fields."""
        if self.timeout <= 0:
            raise ValueError(f"Timeout must be positive: {self.timeout}")

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
    ) -> "ValidatorConfig":
        """Build a validator config from environment settings."""
        return cls(
            shared_secret=settings.shared_secret,
            exclude_old_transactions=settings.exclude_old_transactions,
            timeout=settings.http_timeout,
            environment=settings.default_environment(),
            http_client=http_client,
        )


@asynccontextmanager
async def _deadline(timeout: float | None) -> AsyncIterator[list[str]]:
    """
    Cancel the wrapped calls after timeout seconds (None means no deadline).

    Yields the list of endpoints attempted so far; callers append each URL
    before calling it, and expiry reports the last one as the call in flight.
    """
    attempted: list[str] = []
    try:
        async with asyncio.timeout(timeout):
            yield attempted
    except TimeoutError as exc:
        url = attempted[-1] if attempted else ""
        raise RequestCancelledError(url, f"deadline of {timeout}s exceeded") from exc


class ReceiptValidator:
    """
    verifyReceipt client.

    Non-zero statuses are returned inside the ValidationResponse, never raised;
    only failures of the call itself raise.
    """

    def __init__(self, config: ValidatorConfig | None = None) -> None:
        """
        Initialize receipt validator.

        Args:
            config: Validator configuration; defaults to no shared secret,
                production endpoint and a 10 second transport timeout
        """
        self.config = config or ValidatorConfig()
        self._owns_client = self.config.http_client is None
        self._client = self.config.http_client or httpx.AsyncClient(timeout=self.config.timeout)

        logger.info(
            "receipt_validator_initialized",
            environment=self.config.environment.name,
            has_shared_secret=bool(self.config.shared_secret),
            injected_client=not self._owns_client,
        )

    async def aclose(self) -> None:
        """Close the HTTP client if the validator created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "ReceiptValidator":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    def _encode_payload(self, receipt: str) -> bytes:
        """Serialize the request body."""
        try:
            request = ValidationRequest(
                receipt_data=receipt,
                password=self.config.shared_secret,
                exclude_old_transactions=self.config.exclude_old_transactions,
            )
            return request.to_json()
        except (ValidationError, TypeError, ValueError) as exc:
            raise PayloadEncodingError(str(exc)) from exc

    def _build_request(self, url: str, body: bytes) -> httpx.Request:
        try:
            request = self._client.build_request("POST", url, content=body, headers=REQUEST_HEADERS)
        except (httpx.InvalidURL, TypeError, ValueError) as exc:
            raise RequestConstructionError(url, str(exc)) from exc

        if request.url.scheme not in ("http", "https") or not request.url.host:
            raise RequestConstructionError(url, "URL must be absolute http(s)")
        return request

    async def _send(self, request: httpx.Request, url: str) -> httpx.Response:
        try:
            return await self._client.send(request)
        except httpx.TimeoutException as exc:
            raise RequestCancelledError(url, f"transport timeout: {exc}") from exc
        except httpx.HTTPError as exc:
            raise TransportError(url, str(exc) or type(exc).__name__) from exc

    @staticmethod
    def _decode(response: httpx.Response) -> ValidationResponse:
        try:
            payload = response.json()
        except ValueError as exc:
            raise ResponseDecodeError(f"body is not valid JSON: {exc}") from exc
        return parse_validation_response(payload)

    async def _validate(self, receipt: str, environment: Environment) -> ValidationResponse:
        url = environment.url
        started = time.perf_counter()

        logger.info(
            "receipt_validation_started",
            environment=environment.name,
            url=url,
            receipt_length=len(receipt),
        )

        try:
            body = self._encode_payload(receipt)
            request = self._build_request(url, body)
            response = await self._send(request, url)

            if response.status_code != httpx.codes.OK:
                logger.warning(
                    "receipt_validation_unexpected_http_status",
                    environment=environment.name,
                    http_status=response.status_code,
                )

            result = self._decode(response)
        except asyncio.CancelledError:
            # Deadline expiry surfaces here as cancellation; callers translate it
            logger.warning("receipt_validation_cancelled", environment=environment.name, url=url)
            metrics.record_validation(
                environment.name, RequestCancelledError.__name__, time.perf_counter() - started
            )
            raise
        except ReceiptValidationError as exc:
            logger.error(
                "receipt_validation_failed",
                environment=environment.name,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            metrics.record_validation(
                environment.name, type(exc).__name__, time.perf_counter() - started
            )
            raise

        status_error = result.status_error()
        outcome = "valid" if status_error is None else type(status_error).__name__
        metrics.record_validation(environment.name, outcome, time.perf_counter() - started)

        logger.info(
            "receipt_validation_completed",
            environment=environment.name,
            status=result.status,
            outcome=outcome,
            reported_environment=result.environment,
            latest_receipt_info_count=len(result.latest_receipt_info),
        )

        return result

    async def validate(
        self,
        receipt: str,
        environment: Environment | None = None,
        *,
        timeout: float | None = None,
    ) -> ValidationResponse:
        """
        Validate a receipt against one environment.

        Args:
            receipt: Base64 receipt from StoreKit (encoding is not checked here;
                a bad receipt comes back as status 21002)
            environment: Target endpoint; defaults to the configured environment
            timeout: Deadline in seconds for the whole call

        Returns:
            Decoded response, whatever its status

        Raises:
            PayloadEncodingError: Payload could not be serialized
            RequestConstructionError: Request could not be built
            TransportError: Network call failed (RequestCancelledError on deadline)
            ResponseDecodeError: Body was not a verification response
        """
        environment = environment or self.config.environment
        async with _deadline(timeout) as attempted:
            attempted.append(environment.url)
            return await self._validate(receipt, environment)

    async def validate_auto(
        self,
        receipt: str,
        *,
        timeout: float | None = None,
    ) -> ValidationResponse:
        """
        Validate against production, retrying once against sandbox on an
        environment mismatch (status 21007 or 21008).

        The sandbox response is returned as-is, even when its status is non-zero.
        A raised error on the production call is not retried.

        Args:
            receipt: Base64 receipt from StoreKit
            timeout: Deadline in seconds covering both calls
        """
        production = Environment.production()
        sandbox = Environment.sandbox()
        async with _deadline(timeout) as attempted:
            attempted.append(production.url)
            result = await self._validate(receipt, production)

            if not is_environment_mismatch(result.status_error()):
                return result

            logger.info(
                "receipt_environment_retry",
                status=result.status,
                from_environment=production.name,
                to_environment=sandbox.name,
            )
            metrics.record_retry()

            attempted.append(sandbox.url)
            return await self._validate(receipt, sandbox)
