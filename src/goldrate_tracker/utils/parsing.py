"""
Validation and parsing of upstream rate payloads and stored timestamps.
Nothing that fails validation is allowed into the reconciler.
"""

import math
import re
import logging
from datetime import datetime, timezone
from typing import Any, List, Optional

from goldrate_tracker.exceptions import ValidationError
from goldrate_tracker.models import RateEntry
from goldrate_tracker.utils.comparison import unique_by_code

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('code', 'label', 'price')


# ============================================================================
# PRICE UTILITIES
# ============================================================================

def parse_price(value: Any) -> Optional[int]:
    """
    Convert an upstream price to whole currency units.

    Handles:
    - Integers: 25000 → 25000
    - Integral floats: 25000.0 → 25000
    - Numeric strings with space or non-breaking space grouping: "25 000" → 25000

    Booleans, NaN/inf, fractional, negative and non-numeric values are rejected.

    Args:
        value: Raw price value from JSON

    Returns:
        Integer price or None if the value is not a valid price
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, str):
        cleaned = value.strip().replace('\xa0', '').replace('\u202f', '').replace(' ', '')
        if not re.fullmatch(r"\d+(\.0+)?", cleaned):
            return None
        value = float(cleaned)

    if isinstance(value, int):
        return value if value >= 0 else None

    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value) or not value.is_integer() or value < 0:
            return None
        return int(value)

    return None


# ============================================================================
# PAYLOAD VALIDATION
# ============================================================================

def parse_rate_entry(item: Any) -> Optional[RateEntry]:
    """
    Validate a single upstream item.

    Args:
        item: One element of the upstream JSON array

    Returns:
        RateEntry or None if the item is missing fields or has a bad price
    """
    if not isinstance(item, dict):
        logger.warning("Skipping non-object rate entry: %r", item)
        return None

    missing = [f for f in REQUIRED_FIELDS if item.get(f) in (None, '')]
    if missing:
        logger.warning("Skipping rate entry missing fields %s: %r", missing, item)
        return None

    price = parse_price(item['price'])
    if price is None:
        logger.warning("Skipping rate entry %s with invalid price: %r", item['code'], item['price'])
        return None

    return RateEntry(code=str(item['code']).strip(), label=str(item['label']).strip(), price=price)


def parse_rate_payload(data: Any) -> List[RateEntry]:
    """
    Validate an upstream payload and return the usable entries.

    Invalid entries are dropped. Duplicate codes keep their first occurrence.

    Args:
        data: Decoded JSON response body

    Returns:
        List of RateEntry in upstream order

    Raises:
        ValidationError: If the payload is not a list or has no valid entries
    """
    if not isinstance(data, list):
        raise ValidationError(f"Invalid rates payload: expected list, got {type(data).__name__}")

    parsed = [parse_rate_entry(item) for item in data]
    entries = unique_by_code(entry for entry in parsed if entry is not None)

    if not entries:
        raise ValidationError(f"No valid rate entries in payload ({len(data)} items received)")

    dropped = len(data) - len(entries)
    if dropped:
        logger.info("Accepted %d rate entries, dropped %d", len(entries), dropped)

    return entries


# ============================================================================
# TIMESTAMP UTILITIES
# ============================================================================

def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a timestamp into an aware UTC datetime.

    Accepts datetimes (naive values are treated as UTC) and ISO-8601 strings,
    including a trailing 'Z'.

    Args:
        value: datetime, ISO string or None

    Returns:
        Aware datetime or None if the value cannot be parsed
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
