#!/usr/bin/env python3
"""
Plain-text rate board report.
Renders rate cards with deltas, the freshness header, previous prices and
the digit tiles needed to update the physical board.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from goldrate_tracker.models import RateEntry, ReconciliationResult
from goldrate_tracker.services.digit_analysis import analyze_digits
from goldrate_tracker.services.staleness import DEFAULT_STALE_THRESHOLD, is_stale

WIDTH = 50


def format_local_time(value: datetime, utc_offset_hours: int = 5) -> str:
    """
    Format a timestamp in the display timezone as 'dd.mm.YYYY HH:MM'.

    Args:
        value: Aware datetime (naive values are treated as UTC)
        utc_offset_hours: Offset of the display timezone from UTC

    Returns:
        Formatted string
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    local = value.astimezone(timezone(timedelta(hours=utc_offset_hours)))
    return local.strftime('%d.%m.%Y %H:%M')


def format_price(price: int) -> str:
    """Group thousands with spaces: 25500 -> '25 500'."""
    return f"{price:,}".replace(',', ' ')


def sort_by_code(entries: List[RateEntry]) -> List[RateEntry]:
    """
    Order entries by numeric purity code, highest first (999, 750, 585).
    Non-numeric codes go to the end in original order.
    """
    def sort_key(entry: RateEntry):
        try:
            return (0, -int(entry.code))
        except ValueError:
            return (1, 0)

    return sorted(entries, key=sort_key)


def price_delta(entry: RateEntry, previous: Optional[RateEntry]) -> int:
    """Price change against the previous entry of the same code (0 if none)."""
    return entry.price - previous.price if previous else 0


def format_delta(delta: int) -> str:
    if delta > 0:
        return f"▲ +{format_price(delta)}"
    if delta < 0:
        return f"▼ -{format_price(-delta)}"
    return "no change"


def render_report(
    result: ReconciliationResult,
    now: Optional[datetime] = None,
    utc_offset_hours: int = 5,
    stale_threshold: timedelta = DEFAULT_STALE_THRESHOLD,
    merge_nine_into_six: bool = True,
    track_removals: bool = False
) -> str:
    """
    Render a reconciliation result as a text report.

    Args:
        result: Result to render
        now: Reference time for the freshness check
        utc_offset_hours: Display timezone offset
        stale_threshold: Age at which data is flagged stale
        merge_nine_into_six: Count '9' tiles as '6' in the digit section
        track_removals: Also list tiles that become spare

    Returns:
        Formatted report string
    """
    stale = is_stale(result.last_updated, now, stale_threshold)
    status = "STALE" if stale else "UP TO DATE"

    report_lines = [
        f"{'=' * WIDTH}",
        f"{status:<12}{format_local_time(result.last_updated, utc_offset_hours):>{WIDTH - 12}}",
    ]
    if result.error:
        report_lines.append(f"Refresh failed, showing stored rates: {result.error}")
    report_lines.extend([f"{'=' * WIDTH}", ""])

    for entry in sort_by_code(result.current):
        delta = price_delta(entry, result.previous_entry(entry.code))
        report_lines.extend([
            f"{format_price(entry.price):>12}  {entry.label}",
            f"{'':>12}  {format_delta(delta)}",
            "",
        ])

    if result.has_previous:
        analysis = analyze_digits(
            result.current,
            result.previous,
            merge_nine_into_six=merge_nine_into_six,
            track_removals=track_removals,
        )

        if not analysis.is_empty:
            report_lines.extend([f"{'-' * WIDTH}", "BOARD UPDATE", ""])
            if analysis.needed:
                report_lines.append(
                    "Add:    " + "  ".join(f"{d} ×{n}" for d, n in analysis.needed.items())
                )
            if analysis.removed:
                report_lines.append(
                    "Remove: " + "  ".join(f"{d} ×{n}" for d, n in analysis.removed.items())
                )
            if merge_nine_into_six:
                report_lines.append("* 6 and 9 share a tile (counted as 6)")
            report_lines.append("")

        report_lines.extend([f"{'-' * WIDTH}", "PREVIOUS PRICES", ""])
        for entry in sort_by_code(result.previous):
            report_lines.append(f"{entry.label:<10}{format_price(entry.price):>12}")
        if result.previous_updated is not None:
            report_lines.append(
                f"Recorded: {format_local_time(result.previous_updated, utc_offset_hours)}"
            )
        report_lines.append("")

    report_lines.append(f"{'=' * WIDTH}")

    return "\n".join(report_lines)
