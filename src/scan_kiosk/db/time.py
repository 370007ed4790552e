"""Time utilities for the ledger and the metrics day buckets."""

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

DAY_KEY_FORMAT = "%Y-%m-%d"


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def ensure_utc(moment: datetime) -> datetime:
    """Return ``moment`` as an aware UTC datetime; naive values are read as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def day_key(moment: datetime | None = None, tz: str = "Australia/Brisbane") -> str:
    """Return the calendar day of ``moment`` in the named zone as ``YYYY-MM-DD``.

    The host's local timezone never takes part in the conversion.

    Args:
        moment: Instant to bucket; defaults to now
        tz: IANA zone name that defines "today"

    Returns:
        Day key string
    """
    instant = ensure_utc(moment if moment is not None else utcnow())
    return instant.astimezone(ZoneInfo(tz)).strftime(DAY_KEY_FORMAT)
