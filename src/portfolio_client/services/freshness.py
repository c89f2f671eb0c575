"""Cache freshness policy for the local replica."""

from datetime import datetime, timedelta
from typing import Optional

# The remote data updates roughly twice a day.
CACHE_VALIDITY = timedelta(hours=6)


def is_fresh(
    last_sync: Optional[datetime],
    now: datetime,
    validity: timedelta = CACHE_VALIDITY,
) -> bool:
    """True if a sync happened and is younger than the validity window."""
    if last_sync is None:
        return False
    return now - last_sync < validity


def should_use_cache(
    last_sync: Optional[datetime],
    now: datetime,
    force_refresh: bool = False,
    validity: timedelta = CACHE_VALIDITY,
) -> bool:
    """Whether a load may be served from the local replica without a fetch."""
    if force_refresh:
        return False
    return is_fresh(last_sync, now, validity)


def cache_age(last_sync: Optional[datetime], now: datetime) -> Optional[timedelta]:
    if last_sync is None:
        return None
    return max(now - last_sync, timedelta(0))


def format_age(age: Optional[timedelta]) -> str:
    """Short human age, e.g. '2h 5m', '45m', 'just now', 'never'."""
    if age is None:
        return "never"
    minutes = int(age.total_seconds() // 60)
    if minutes < 1:
        return "just now"
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"
