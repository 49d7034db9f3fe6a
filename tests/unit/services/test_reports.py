"""Unit tests for the text report."""

from datetime import datetime, timedelta, timezone

from goldrate_tracker.models import RateEntry, ReconciliationResult
from goldrate_tracker.services.reports import (
    format_delta,
    format_local_time,
    format_price,
    price_delta,
    render_report,
    sort_by_code,
)


def _result(current, previous, base_time, **kwargs):
    return ReconciliationResult(
        current=current,
        previous=previous,
        last_updated=base_time,
        previous_updated=(base_time - timedelta(hours=3)) if previous else None,
        **kwargs
    )


class TestFormatting:
    """Test formatting helpers."""

    def test_local_time_uses_offset(self, base_time):
        """Test timestamps are shown in UTC+5."""
        assert format_local_time(base_time) == "10.03.2025 09:00"

    def test_local_time_naive_is_utc(self):
        """Test naive timestamps are treated as UTC."""
        assert format_local_time(datetime(2025, 3, 10, 20, 30)) == "11.03.2025 01:30"

    def test_local_time_custom_offset(self, base_time):
        """Test another display offset."""
        assert format_local_time(base_time, utc_offset_hours=0) == "10.03.2025 04:00"

    def test_format_price(self):
        """Test thousands are grouped with spaces."""
        assert format_price(25500) == "25 500"
        assert format_price(999) == "999"

    def test_format_delta(self):
        """Test delta arrows."""
        assert format_delta(500) == "▲ +500"
        assert format_delta(-1200) == "▼ -1 200"
        assert format_delta(0) == "no change"

    def test_price_delta(self):
        """Test deltas against the previous entry."""
        entry = RateEntry(code="999", label="999", price=25500)

        assert price_delta(entry, RateEntry(code="999", label="999", price=25000)) == 500
        assert price_delta(entry, None) == 0


class TestSortByCode:
    """Test card ordering."""

    def test_numeric_descending(self):
        """Test higher purities come first."""
        entries = [RateEntry(code=c, label=c, price=1) for c in ("585", "999", "750")]

        assert [e.code for e in sort_by_code(entries)] == ["999", "750", "585"]

    def test_non_numeric_last(self):
        """Test non-numeric codes go to the end in original order."""
        entries = [RateEntry(code=c, label=c, price=1) for c in ("b", "585", "a", "999")]

        assert [e.code for e in sort_by_code(entries)] == ["999", "585", "b", "a"]


class TestRenderReport:
    """Test the full report."""

    def test_fresh_first_snapshot(self, initial_rates, base_time):
        """Test a first snapshot shows cards without board or previous sections."""
        report = render_report(_result(initial_rates, [], base_time), now=base_time + timedelta(hours=1))

        assert "UP TO DATE" in report
        assert "10.03.2025 09:00" in report
        assert "25 000  999" in report
        assert "BOARD UPDATE" not in report
        assert "PREVIOUS PRICES" not in report

    def test_stale_header(self, initial_rates, base_time):
        """Test old data is flagged stale."""
        report = render_report(_result(initial_rates, [], base_time), now=base_time + timedelta(hours=12))

        assert "STALE" in report

    def test_change_with_board_update(self, initial_rates, changed_rates, base_time):
        """Test deltas, tiles to add and previous prices after a change."""
        report = render_report(
            _result(changed_rates, initial_rates, base_time),
            now=base_time,
            track_removals=True,
        )

        assert "▲ +500" in report
        assert "no change" in report
        assert "Add:    5 ×1" in report
        assert "Remove: 0 ×1" in report
        assert "* 6 and 9 share a tile (counted as 6)" in report
        assert "PREVIOUS PRICES" in report
        assert "Recorded: 10.03.2025 06:00" in report

    def test_cards_sorted_descending(self, base_time):
        """Test cards are ordered by purity code."""
        current = [RateEntry(code=c, label=f"{c} label", price=1000) for c in ("585", "999")]

        report = render_report(_result(current, [], base_time), now=base_time)

        assert report.index("999 label") < report.index("585 label")

    def test_error_line(self, initial_rates, base_time):
        """Test a fallback result shows the refresh error."""
        report = render_report(_result(initial_rates, [], base_time, error="HTTP 502"), now=base_time)

        assert "Refresh failed, showing stored rates: HTTP 502" in report

    def test_merge_note_omitted_when_disabled(self, base_time):
        """Test the shared-tile note only appears when merging."""
        previous = [RateEntry(code="999", label="999", price=16)]
        current = [RateEntry(code="999", label="999", price=19)]

        merged = render_report(_result(current, previous, base_time), now=base_time)
        separate = render_report(
            _result(current, previous, base_time), now=base_time, merge_nine_into_six=False
        )

        assert "BOARD UPDATE" not in merged
        assert "Add:    9 ×1" in separate
        assert "share a tile" not in separate
