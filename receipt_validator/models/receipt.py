"""
verifyReceipt request and response models.

The request is a Pydantic model (it is serialized onto the wire); the decoded
response and everything inside it are immutable dataclasses.

https://developer.apple.com/documentation/appstorereceipts/verifyreceipt
"""

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from receipt_validator.exceptions import ReceiptStatusError
from receipt_validator.models.environment import Environment
from receipt_validator.models.ordering import SortKey, latest_record
from receipt_validator.models.purchase import PendingRenewalInfo, PurchaseRecord
from receipt_validator.models.status import status_error
from receipt_validator.models.timestamps import ms_to_datetime, utc_now


class ValidationRequest(BaseModel):
    """POST body for the verifyReceipt endpoint.

    Empty password and false exclude flag are left out of the serialized body.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    receipt_data: str = Field(..., min_length=1, alias="receipt-data")
    password: str = Field("", alias="password")
    exclude_old_transactions: bool = Field(False, alias="exclude-old-transactions")

    def to_json(self) -> bytes:
        """Serialize with wire field names, omitting defaulted fields."""
        return self.model_dump_json(by_alias=True, exclude_defaults=True).encode("utf-8")


@dataclass(frozen=True)
class Receipt:
    """Receipt metadata echoed back by the verification service."""

    bundle_id: str = ""
    application_version: str = ""
    original_application_version: str = ""
    receipt_type: str = ""
    receipt_creation_date_ms: int = 0
    request_date_ms: int = 0
    original_purchase_date_ms: int = 0
    receipt_expiration_date_ms: int | None = None  # Volume Purchase Program only
    in_app: tuple[PurchaseRecord, ...] = ()

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check if the receipt itself has expired (receipts without a date never do)."""
        if self.receipt_expiration_date_ms is None:
            return False
        return ms_to_datetime(self.receipt_expiration_date_ms) < (now or utc_now())


@dataclass(frozen=True)
class ValidationResponse:
    """Decoded verifyReceipt response.

    A non-zero status is a remote rejection, not a failed call; check
    ``status_error()`` before trusting any purchase data.
    """

    status: int
    environment: str | None = None
    receipt: Receipt | None = None
    latest_receipt: str = ""
    latest_receipt_info: tuple[PurchaseRecord, ...] = ()
    latest_expired_receipt_info: tuple[PurchaseRecord, ...] = ()
    pending_renewal_info: tuple[PendingRenewalInfo, ...] = ()
    is_retryable: bool = False

    def status_error(self) -> ReceiptStatusError | None:
        """Return the status condition, or None when the receipt is valid."""
        return status_error(self.status)

    def is_valid(self) -> bool:
        """Check if the receipt is valid (expired subscriptions included)."""
        return self.status == 0

    def is_renewable(self) -> bool:
        """Check if the receipt carries auto-renewable subscription data."""
        return bool(self.latest_receipt) and bool(self.latest_receipt_info)

    def environment_kind(self) -> Environment | None:
        """Environment the check was actually performed against."""
        return Environment.from_name(self.environment)

    def latest_record(self, key: SortKey = SortKey.PURCHASE_DATE) -> PurchaseRecord | None:
        """Most recent entry of latest_receipt_info, or None if it is empty."""
        return latest_record(self.latest_receipt_info, key)

    def renewal_info_for(self, product_id: str) -> PendingRenewalInfo | None:
        """Pending renewal info for a product, if Apple sent any."""
        for info in self.pending_renewal_info:
            if info.product_id == product_id:
                return info
        return None
