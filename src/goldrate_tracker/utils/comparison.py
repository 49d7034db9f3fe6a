"""
Change detection between freshly fetched entries and the stored current snapshot.
"""

import logging
from typing import Dict, Iterable, List, Optional

from goldrate_tracker.models import RateEntry, Snapshot

logger = logging.getLogger(__name__)


def unique_by_code(entries: Iterable[RateEntry]) -> List[RateEntry]:
    """
    Drop entries whose code was already seen, keeping the first occurrence.

    Args:
        entries: Rate entries in upstream order

    Returns:
        Entries with unique codes, order preserved
    """
    seen = set()
    unique: List[RateEntry] = []
    for entry in entries:
        if entry.code in seen:
            logger.warning("Skipping duplicate rate code %s", entry.code)
            continue
        seen.add(entry.code)
        unique.append(entry)
    return unique


def build_price_map(entries: Iterable[RateEntry]) -> Dict[str, int]:
    """Mapping of code to price (first occurrence of a code wins)."""
    prices: Dict[str, int] = {}
    for entry in entries:
        prices.setdefault(entry.code, entry.price)
    return prices


def needs_update(fetched: Iterable[RateEntry], stored: Optional[Snapshot]) -> bool:
    """
    Decide whether fetched entries differ from the stored snapshot.

    An update is needed when nothing is stored, when the number of codes
    differs, or when any fetched code has a different stored price. Only the
    fetched codes are iterated; codes that exist solely in the stored set are
    caught by the size check.

    Args:
        fetched: Entries from the latest fetch (any order)
        stored: Current snapshot or None

    Returns:
        True if the store must rotate
    """
    if stored is None:
        return True

    fetched_map = build_price_map(fetched)
    stored_map = stored.price_map()

    if len(fetched_map) != len(stored_map):
        return True

    for code, price in fetched_map.items():
        if stored_map.get(code) != price:
            return True

    return False
