"""Epoch-millisecond timestamp helpers."""

from datetime import UTC, datetime, timedelta

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
MAX_DATETIME = datetime.max.replace(tzinfo=UTC)
MIN_DATETIME = datetime.min.replace(tzinfo=UTC)


def ms_to_datetime(ms: int) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime.

    Values outside the datetime range clamp to its bounds, so ordering and
    expiry checks still hold for them.
    """
    try:
        return EPOCH + timedelta(milliseconds=ms)
    except OverflowError:
        return MAX_DATETIME if ms > 0 else MIN_DATETIME


def utc_now() -> datetime:
    return datetime.now(UTC)
