"""
Tests for datetime_utils module.
"""
import pytest
from datetime import datetime, timezone, timedelta
from quickink.utils.datetime_utils import (
    epoch_millis,
    format_audit,
    format_long,
    format_short,
    parse_timestamp,
    to_base36,
    to_iso_z,
    utc_now,
)

NOON = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class TestUtcNow:
    """Test utc_now() function."""

    def test_returns_timezone_aware(self):
        """utc_now() returns timezone-aware datetime."""
        now = utc_now()
        assert now.tzinfo is not None
        assert now.tzinfo == timezone.utc

    def test_returns_utc(self):
        """utc_now() returns UTC time."""
        now = utc_now()
        diff = abs((now - datetime.now(timezone.utc)).total_seconds())
        assert diff < 1  # Within 1 second


class TestParseTimestamp:
    """Test parse_timestamp() function."""

    def test_none_returns_none(self):
        assert parse_timestamp(None) is None

    def test_empty_string_returns_none(self):
        assert parse_timestamp("") is None
        assert parse_timestamp("   ") is None

    def test_iso_with_z_suffix(self):
        """Parses ISO format with Z suffix."""
        result = parse_timestamp("2024-01-01T12:00:00Z")
        assert result == NOON
        assert result.tzinfo == timezone.utc

    def test_iso_with_millis(self):
        result = parse_timestamp("2024-01-01T12:00:00.250Z")
        assert result.microsecond == 250000

    def test_offset_converted_to_utc(self):
        """Non-UTC offsets are normalized to UTC."""
        result = parse_timestamp("2024-01-01T14:00:00+02:00")
        assert result == NOON
        assert result.tzinfo == timezone.utc

    def test_naive_string_assumed_utc(self):
        result = parse_timestamp("2024-01-01T12:00:00")
        assert result == NOON

    def test_naive_datetime_becomes_utc(self):
        result = parse_timestamp(datetime(2024, 1, 1, 12, 0, 0))
        assert result.tzinfo == timezone.utc
        assert result == NOON

    def test_aware_datetime_converted(self):
        eastern = timezone(timedelta(hours=-5))
        result = parse_timestamp(datetime(2024, 1, 1, 7, 0, 0, tzinfo=eastern))
        assert result == NOON

    def test_invalid_string_returns_none(self):
        assert parse_timestamp("not-a-date") is None
        assert parse_timestamp("yesterday") is None

    def test_non_string_non_datetime_returns_none(self):
        assert parse_timestamp(12345) is None


class TestDisplayFormats:
    """Test the display format helpers."""

    def test_format_short(self):
        assert format_short(NOON) == "Jan 1, 2024, 12:00 PM UTC"

    def test_format_short_morning(self):
        dt = datetime(2024, 3, 15, 9, 5, tzinfo=timezone.utc)
        assert format_short(dt) == "Mar 15, 2024, 09:05 AM UTC"

    def test_format_short_midnight(self):
        dt = datetime(2024, 3, 15, 0, 30, tzinfo=timezone.utc)
        assert format_short(dt) == "Mar 15, 2024, 12:30 AM UTC"

    def test_format_short_converts_offset(self):
        """Display is always rendered in UTC."""
        plus_two = timezone(timedelta(hours=2))
        dt = datetime(2024, 1, 1, 14, 0, tzinfo=plus_two)
        assert format_short(dt) == "Jan 1, 2024, 12:00 PM UTC"

    def test_format_long(self):
        assert format_long(NOON) == "January 1, 2024 at 12:00:00 PM UTC"

    def test_format_long_afternoon(self):
        dt = datetime(2024, 12, 31, 23, 59, 58, tzinfo=timezone.utc)
        assert format_long(dt) == "December 31, 2024 at 11:59:58 PM UTC"

    def test_format_audit(self):
        assert format_audit(NOON) == "Jan 1, 2024, 12:00 PM"

    def test_format_audit_pads_hour(self):
        dt = datetime(2024, 1, 1, 9, 15, tzinfo=timezone.utc)
        assert format_audit(dt) == "Jan 1, 2024, 09:15 AM"


class TestIsoAndEpoch:
    """Test to_iso_z(), epoch_millis() and to_base36()."""

    def test_to_iso_z(self):
        assert to_iso_z(NOON) == "2024-01-01T12:00:00.000Z"

    def test_to_iso_z_truncates_to_millis(self):
        dt = datetime(2024, 1, 1, 12, 0, 0, 123999, tzinfo=timezone.utc)
        assert to_iso_z(dt) == "2024-01-01T12:00:00.123Z"

    def test_epoch_millis(self):
        assert epoch_millis(NOON) == 1704110400000

    def test_epoch_millis_origin(self):
        assert epoch_millis(datetime(1970, 1, 1, tzinfo=timezone.utc)) == 0

    @pytest.mark.parametrize(
        "number,expected",
        [(0, "0"), (9, "9"), (10, "a"), (35, "z"), (36, "10"), (1295, "zz")],
    )
    def test_to_base36(self, number, expected):
        assert to_base36(number) == expected

    def test_to_base36_matches_int_parsing(self):
        assert int(to_base36(1704110400000), 36) == 1704110400000

    def test_to_base36_negative_rejected(self):
        with pytest.raises(ValueError):
            to_base36(-1)
