"""Clock helpers.

The domain only ever handles timezone-aware UTC datetimes.
"""

from datetime import datetime, timezone

UTC = timezone.utc


def utc_now() -> datetime:
    return datetime.now(UTC)


def ensure_tz_aware(dt: datetime) -> datetime:
    """Attach UTC to a naive datetime read back from a store without tz support."""
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=UTC)
