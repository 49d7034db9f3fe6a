#!/usr/bin/env python3
"""
Digit tile analysis for the physical price board.

The board is built from single-digit tiles. When prices change, the
operator needs to know which tiles to fetch (and which become spare).
A "6" tile turned upside down serves as a "9", so the two can optionally
be tallied together.
"""

from collections import Counter
from typing import Dict, Iterable

from goldrate_tracker.constants import DIGITS, MERGED_DIGIT_SOURCE, MERGED_DIGIT_TARGET
from goldrate_tracker.models import DigitAnalysis, RateEntry


def count_digits(entries: Iterable[RateEntry], merge_nine_into_six: bool = False) -> Counter:
    """
    Tally decimal digits across all prices.

    Args:
        entries: Rate entries whose prices are rendered on the board
        merge_nine_into_six: Count every '9' as a '6'

    Returns:
        Counter of digit character to occurrences
    """
    counts: Counter = Counter()
    for entry in entries:
        for char in str(entry.price):
            if not char.isdigit():
                continue
            if merge_nine_into_six and char == MERGED_DIGIT_SOURCE:
                char = MERGED_DIGIT_TARGET
            counts[char] += 1
    return counts


def _deltas(current, previous, merge_nine_into_six: bool) -> Dict[str, int]:
    current_counts = count_digits(current, merge_nine_into_six)
    previous_counts = count_digits(previous, merge_nine_into_six)
    return {d: current_counts[d] - previous_counts[d] for d in DIGITS}


def compute_needed(
    current: Iterable[RateEntry],
    previous: Iterable[RateEntry],
    merge_nine_into_six: bool = False
) -> Dict[str, int]:
    """
    Tiles that must be added to show the current prices.

    Args:
        current: Entries now on display
        previous: Entries previously on display
        merge_nine_into_six: Treat '9' and '6' as one tile

    Returns:
        Digit to positive count, ascending by digit, zero deltas omitted
    """
    deltas = _deltas(current, previous, merge_nine_into_six)
    return {d: n for d, n in deltas.items() if n > 0}


def compute_removed(
    current: Iterable[RateEntry],
    previous: Iterable[RateEntry],
    merge_nine_into_six: bool = False
) -> Dict[str, int]:
    """Tiles freed by the change, as positive counts, ascending by digit."""
    deltas = _deltas(current, previous, merge_nine_into_six)
    return {d: -n for d, n in deltas.items() if n < 0}


def analyze_digits(
    current: Iterable[RateEntry],
    previous: Iterable[RateEntry],
    merge_nine_into_six: bool = False,
    track_removals: bool = False
) -> DigitAnalysis:
    """
    Compute tiles to add and, when tracking removals, tiles to take down.

    Args:
        current: Entries now on display
        previous: Entries previously on display
        merge_nine_into_six: Treat '9' and '6' as one tile
        track_removals: Also report negative deltas

    Returns:
        DigitAnalysis with ``needed`` and ``removed`` maps
    """
    current = list(current)
    previous = list(previous)
    deltas = _deltas(current, previous, merge_nine_into_six)
    return DigitAnalysis(
        needed={d: n for d, n in deltas.items() if n > 0},
        removed={d: -n for d, n in deltas.items() if n < 0} if track_removals else {},
    )
