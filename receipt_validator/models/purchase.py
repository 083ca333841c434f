"""
Purchase record domain models - Immutable dataclasses for in-app purchases.

NO RAW STRINGS - String-encoded booleans and tri-states from the wire are
decoded into enums before a record is built.

https://developer.apple.com/documentation/appstorereceipts/responsebody/latest_receipt_info
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from receipt_validator.models.timestamps import ms_to_datetime, utc_now


class SubscriptionStatus(str, Enum):
    """Derived lifecycle status of a purchase record."""

    TRIAL = "trial"
    PAID = "paid"
    EXPIRED = "expired"
    PENDING = "pending"
    CANCELED = "canceled"


class TriState(str, Enum):
    """Optional flag that Apple sends as "1"/"0" or omits."""

    ON = "on"
    OFF = "off"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: object) -> "TriState":
        """
        Decode a wire token.

        "1"/"true"/True -> ON, "0"/"false"/False -> OFF, anything else
        (missing, empty, unexpected) -> UNKNOWN.
        """
        if isinstance(value, bool):
            return cls.ON if value else cls.OFF
        if isinstance(value, int):
            if value == 1:
                return cls.ON
            if value == 0:
                return cls.OFF
            return cls.UNKNOWN
        if isinstance(value, str):
            token = value.strip().lower()
            if token in ("1", "true"):
                return cls.ON
            if token in ("0", "false"):
                return cls.OFF
        return cls.UNKNOWN


class CancellationReason(str, Enum):
    """Why Apple customer support canceled a transaction."""

    OTHER = "0"
    ISSUE_IN_APP = "1"


class ExpirationIntent(str, Enum):
    """Why a subscription expired."""

    CUSTOMER_CANCELED = "1"
    BILLING_ERROR = "2"
    PRICE_INCREASE_DECLINED = "3"
    PRODUCT_UNAVAILABLE = "4"
    UNKNOWN = "5"


@dataclass(frozen=True)
class PurchaseRecord:
    """Single in-app purchase or subscription transaction.

    Produced only by decoding a verification response and never mutated.
    The *_ms fields hold epoch milliseconds (0 when absent for required
    dates, None when absent for optional ones); the plain string fields
    keep Apple's formatted form.
    """

    product_id: str
    transaction_id: str
    original_transaction_id: str
    purchase_date_ms: int = 0
    original_purchase_date_ms: int = 0
    quantity: int = 1
    purchase_date: str = ""
    original_purchase_date: str = ""

    # Subscriptions only
    expires_date_ms: int | None = None
    expires_date: str = ""
    web_order_line_item_id: str | None = None
    is_trial_period: bool = False
    is_in_intro_offer_period: bool = False
    auto_renew_status: TriState = TriState.UNKNOWN
    auto_renew_product_id: str | None = None
    is_in_billing_retry_period: TriState = TriState.UNKNOWN
    expiration_intent: ExpirationIntent | None = None
    price_consent_status: TriState = TriState.UNKNOWN

    # Refunds / support cancellations
    cancellation_date_ms: int | None = None
    cancellation_date: str = ""
    cancellation_reason: CancellationReason | None = None

    @property
    def purchased_at(self) -> datetime:
        return ms_to_datetime(self.purchase_date_ms)

    @property
    def originally_purchased_at(self) -> datetime:
        return ms_to_datetime(self.original_purchase_date_ms)

    @property
    def expires_at(self) -> datetime | None:
        if self.expires_date_ms is None:
            return None
        return ms_to_datetime(self.expires_date_ms)

    @property
    def canceled_at(self) -> datetime | None:
        if self.cancellation_date_ms is None:
            return None
        return ms_to_datetime(self.cancellation_date_ms)

    def is_restore(self) -> bool:
        """Check if this transaction restores an earlier one."""
        return self.original_transaction_id != self.transaction_id

    def is_subscription(self) -> bool:
        return self.expires_date_ms is not None

    def is_canceled(self) -> bool:
        """Check if auto-renew was turned off or support canceled the transaction."""
        if self.auto_renew_status is TriState.OFF:
            return True
        if self.cancellation_reason is not None:
            return True
        return self.cancellation_date_ms is not None and self.cancellation_date_ms > 0

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check if the expiration date lies strictly before now."""
        expires_at = self.expires_at
        if expires_at is None:
            return False
        return expires_at < (now or utc_now())

    def is_pending(self) -> bool:
        """Check if Apple is still retrying billing for this subscription."""
        return self.is_in_billing_retry_period is TriState.ON

    def is_trial(self) -> bool:
        return self.is_trial_period

    def status(self, now: datetime | None = None) -> SubscriptionStatus:
        """
        Derive the lifecycle status.

        First match wins: canceled, expired, pending, trial, paid.
        """
        if self.is_canceled():
            return SubscriptionStatus.CANCELED
        if self.is_expired(now):
            return SubscriptionStatus.EXPIRED
        if self.is_pending():
            return SubscriptionStatus.PENDING
        if self.is_trial():
            return SubscriptionStatus.TRIAL
        return SubscriptionStatus.PAID


@dataclass(frozen=True)
class PendingRenewalInfo:
    """Renewal state for one auto-renewable subscription.

    A pending renewal may be scheduled in the future or may have failed in the
    past for some reason.
    """

    product_id: str
    original_transaction_id: str = ""
    auto_renew_product_id: str | None = None
    auto_renew_status: TriState = TriState.UNKNOWN
    is_in_billing_retry_period: TriState = TriState.UNKNOWN
    expiration_intent: ExpirationIntent | None = None
    price_consent_status: TriState = TriState.UNKNOWN

    def will_renew(self) -> bool:
        """Check if subscription will auto-renew."""
        return self.auto_renew_status is TriState.ON
