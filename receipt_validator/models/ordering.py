"""Ordering of purchase records by purchase date."""

from collections.abc import Iterable
from datetime import datetime
from enum import Enum

from receipt_validator.models.purchase import PurchaseRecord


class SortKey(str, Enum):
    """Date field to order purchase records by."""

    PURCHASE_DATE = "purchase_date"
    ORIGINAL_PURCHASE_DATE = "original_purchase_date"

    def extract(self, record: PurchaseRecord) -> datetime:
        if self is SortKey.ORIGINAL_PURCHASE_DATE:
            return record.originally_purchased_at
        return record.purchased_at


def sort_records(
    records: Iterable[PurchaseRecord],
    key: SortKey = SortKey.PURCHASE_DATE,
) -> list[PurchaseRecord]:
    """
    Return records in ascending date order.

    The sort is stable and the input is left untouched.
    """
    return sorted(records, key=key.extract)


def latest_record(
    records: Iterable[PurchaseRecord],
    key: SortKey = SortKey.PURCHASE_DATE,
) -> PurchaseRecord | None:
    """Return the record with the latest date, or None when there are none."""
    ordered = sort_records(records, key)
    if not ordered:
        return None
    return ordered[-1]
