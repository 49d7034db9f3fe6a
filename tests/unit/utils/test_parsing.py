"""Unit tests for payload validation and parsing utilities."""

from datetime import datetime, timezone

import pytest

from goldrate_tracker.exceptions import ValidationError
from goldrate_tracker.models import RateEntry
from goldrate_tracker.utils.parsing import (
    parse_price,
    parse_rate_entry,
    parse_rate_payload,
    parse_timestamp,
)


class TestParsePrice:
    """Test upstream price conversion."""

    def test_integer(self):
        """Test plain integer prices pass through."""
        assert parse_price(25000) == 25000

    def test_integral_float(self):
        """Test integral floats become ints."""
        assert parse_price(25000.0) == 25000

    def test_numeric_string(self):
        """Test numeric strings with grouping spaces."""
        assert parse_price("25000") == 25000
        assert parse_price("25 000") == 25000
        assert parse_price("25\xa0000") == 25000

    @pytest.mark.parametrize("value", [None, True, False, "abc", "", "12.5", 12.5,
                                       float('nan'), float('inf'), -5, [], {}])
    def test_rejects_invalid(self, value):
        """Test non-numeric, fractional, negative and boolean prices are rejected."""
        assert parse_price(value) is None


class TestParseRateEntry:
    """Test single entry validation."""

    def test_valid_entry(self):
        """Test a complete entry is accepted."""
        entry = parse_rate_entry({"code": "999", "label": "999 проба", "price": 25000})

        assert entry == RateEntry(code="999", label="999 проба", price=25000)

    def test_numeric_code_is_stringified(self):
        """Test numeric codes are stored as strings."""
        entry = parse_rate_entry({"code": 585, "label": "585", "price": 14800})

        assert entry.code == "585"

    @pytest.mark.parametrize("item", [
        {"label": "999", "price": 25000},
        {"code": "999", "price": 25000},
        {"code": "999", "label": "999"},
        {"code": "", "label": "999", "price": 25000},
        {"code": "999", "label": "999", "price": None},
    ])
    def test_missing_fields(self, item):
        """Test entries missing required fields are dropped."""
        assert parse_rate_entry(item) is None

    def test_non_numeric_price(self):
        """Test entries with a non-numeric price are dropped."""
        assert parse_rate_entry({"code": "999", "label": "999", "price": "n/a"}) is None

    def test_non_dict_item(self):
        """Test non-object items are dropped."""
        assert parse_rate_entry("999") is None


class TestParseRatePayload:
    """Test whole payload validation."""

    def test_valid_payload(self, sample_payload):
        """Test all valid entries are returned in order."""
        entries = parse_rate_payload(sample_payload)

        assert [e.code for e in entries] == ["999", "750", "585"]
        assert entries[0].price == 25000

    def test_drops_invalid_entries(self, sample_payload):
        """Test invalid entries are dropped without failing the payload."""
        payload = sample_payload + [{"code": "500", "label": "500"}, {"code": "375", "label": "375", "price": "x"}]

        entries = parse_rate_payload(payload)

        assert len(entries) == 3
        assert all(isinstance(e.price, int) for e in entries)

    def test_duplicate_codes_keep_first(self):
        """Test duplicate codes keep their first occurrence."""
        entries = parse_rate_payload([
            {"code": "999", "label": "999", "price": 25000},
            {"code": "999", "label": "999", "price": 26000},
        ])

        assert len(entries) == 1
        assert entries[0].price == 25000

    def test_not_a_list(self):
        """Test non-list payloads raise ValidationError."""
        with pytest.raises(ValidationError, match="expected list"):
            parse_rate_payload({"code": "999"})

    def test_no_valid_entries(self):
        """Test payloads with nothing usable raise ValidationError."""
        with pytest.raises(ValidationError, match="No valid rate entries"):
            parse_rate_payload([{"code": "999"}])

    def test_empty_list(self):
        """Test an empty list raises ValidationError."""
        with pytest.raises(ValidationError):
            parse_rate_payload([])


class TestParseTimestamp:
    """Test timestamp parsing."""

    def test_iso_string_with_offset(self):
        """Test ISO strings with an offset."""
        parsed = parse_timestamp("2025-03-10T04:00:00+00:00")

        assert parsed == datetime(2025, 3, 10, 4, 0, tzinfo=timezone.utc)

    def test_iso_string_with_z(self):
        """Test ISO strings with a trailing Z."""
        parsed = parse_timestamp("2025-03-10T04:00:00.000Z")

        assert parsed == datetime(2025, 3, 10, 4, 0, tzinfo=timezone.utc)

    def test_naive_datetime_treated_as_utc(self):
        """Test naive datetimes get UTC attached."""
        parsed = parse_timestamp(datetime(2025, 3, 10, 4, 0))

        assert parsed.tzinfo == timezone.utc

    @pytest.mark.parametrize("value", [None, "", "yesterday", 12345, object()])
    def test_unparseable(self, value):
        """Test unparseable values return None."""
        assert parse_timestamp(value) is None
