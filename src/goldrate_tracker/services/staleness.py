"""
Freshness classification for stored rate timestamps.
"""

from datetime import datetime, timedelta
from typing import Any, Optional

from goldrate_tracker.config import DEFAULT_STALE_THRESHOLD_HOURS
from goldrate_tracker.models import utc_now
from goldrate_tracker.utils.parsing import parse_timestamp

DEFAULT_STALE_THRESHOLD = timedelta(hours=DEFAULT_STALE_THRESHOLD_HOURS)

FRESH = "fresh"
STALE = "stale"


def is_stale(
    timestamp: Any,
    now: Optional[datetime] = None,
    threshold: timedelta = DEFAULT_STALE_THRESHOLD
) -> bool:
    """
    Check whether data captured at ``timestamp`` is stale.

    Absent or unparseable timestamps count as stale. Otherwise the data is
    stale once ``now - timestamp`` reaches the threshold. Never raises.

    Args:
        timestamp: datetime, ISO-8601 string or None
        now: Reference time (defaults to current UTC time)
        threshold: Age at which data becomes stale

    Returns:
        True if stale
    """
    captured = parse_timestamp(timestamp)
    if captured is None:
        return True

    reference = parse_timestamp(now) if now is not None else utc_now()
    if reference is None:
        return True

    return reference - captured >= threshold


def freshness_label(
    timestamp: Any,
    now: Optional[datetime] = None,
    threshold: timedelta = DEFAULT_STALE_THRESHOLD
) -> str:
    """'fresh' or 'stale' for the presentation layer."""
    return STALE if is_stale(timestamp, now, threshold) else FRESH
