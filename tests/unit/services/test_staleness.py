"""Unit tests for freshness classification."""

from datetime import datetime, timedelta, timezone

import pytest

from goldrate_tracker.services.staleness import FRESH, STALE, freshness_label, is_stale


class TestIsStale:
    """Test the staleness threshold."""

    def test_just_under_threshold_is_fresh(self, base_time):
        """Test 11h59m old data is fresh."""
        now = base_time + timedelta(hours=11, minutes=59)

        assert is_stale(base_time, now) is False

    def test_at_threshold_is_stale(self, base_time):
        """Test data exactly 12h old is stale."""
        assert is_stale(base_time, base_time + timedelta(hours=12)) is True

    def test_iso_string_timestamp(self, base_time):
        """Test ISO strings are accepted."""
        assert is_stale("2025-03-10T04:00:00+00:00", base_time + timedelta(hours=1)) is False

    def test_offset_timestamps_compare_in_utc(self, base_time):
        """Test a UTC+5 timestamp is compared by instant, not wall clock."""
        local = datetime(2025, 3, 10, 9, 0, tzinfo=timezone(timedelta(hours=5)))

        assert is_stale(local, base_time + timedelta(hours=11)) is False

    @pytest.mark.parametrize("value", [None, "", "not-a-date", 42])
    def test_absent_or_malformed_is_stale(self, value, base_time):
        """Test missing or unparseable timestamps are stale."""
        assert is_stale(value, base_time) is True

    def test_naive_now_treated_as_utc(self, base_time):
        """Test a naive reference time is read as UTC."""
        assert is_stale(base_time, datetime(2025, 3, 10, 5, 0)) is False

    def test_future_timestamp_is_fresh(self, base_time):
        """Test timestamps ahead of now are not stale."""
        assert is_stale(base_time + timedelta(hours=1), base_time) is False

    def test_custom_threshold(self, base_time):
        """Test a shorter threshold."""
        assert is_stale(base_time, base_time + timedelta(hours=2), timedelta(hours=1)) is True


class TestFreshnessLabel:
    """Test the presentation label."""

    def test_labels(self, base_time):
        """Test fresh and stale labels."""
        assert freshness_label(base_time, base_time + timedelta(hours=1)) == FRESH
        assert freshness_label(None, base_time) == STALE
