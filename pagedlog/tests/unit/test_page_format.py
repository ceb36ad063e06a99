"""Tests for page line and file name formats."""

from datetime import datetime, timedelta, timezone

import pytest

from pagedlog.core.pages.format import (
    PageLine,
    encoded_size,
    format_line,
    format_timestamp,
    page_file_name,
    parse_line,
    parse_page_file_name,
)


class TestLineFormat:
    """Test line formatting and parsing."""

    def test_format_line(self):
        """Test a line is the timestamp, a space and the message."""
        timestamp = datetime(2024, 5, 1, 12, 30, 45, 123456, tzinfo=timezone.utc)

        assert format_line("Step started", timestamp) == "2024-05-01T12:30:45.123456Z Step started"

    def test_timestamp_always_has_fraction(self):
        """Test whole seconds still render six fractional digits."""
        timestamp = datetime(2024, 5, 1, 12, 30, 45, tzinfo=timezone.utc)

        assert format_timestamp(timestamp) == "2024-05-01T12:30:45.000000Z"

    def test_timestamp_converted_to_utc(self):
        """Test aware timestamps are rendered in UTC."""
        plus_two = timezone(timedelta(hours=2))
        timestamp = datetime(2024, 5, 1, 14, 0, 0, tzinfo=plus_two)

        assert format_timestamp(timestamp) == "2024-05-01T12:00:00.000000Z"

    def test_parse_line(self):
        """Test parsing recovers timestamp and message."""
        timestamp = datetime(2024, 5, 1, 12, 30, 45, 5, tzinfo=timezone.utc)

        parsed = parse_line(format_line("a message  with spaces", timestamp) + "\n")

        assert parsed == PageLine(timestamp=timestamp, message="a message  with spaces")

    def test_parse_empty_message(self):
        """Test a line with an empty message."""
        parsed = parse_line("2024-05-01T12:30:45.000000Z ")

        assert parsed.message == ""

    def test_parse_malformed_line(self):
        """Test lines without a timestamp are rejected."""
        with pytest.raises(ValueError):
            parse_line("no-timestamp-here")

        with pytest.raises(ValueError):
            parse_line("yesterday something happened")

    def test_encoded_size(self):
        """Test sizes are UTF-8 byte counts."""
        assert encoded_size("abc") == 3
        assert encoded_size("é") == 2
        assert encoded_size("€") == 3


class TestPageFileName:
    """Test page file naming."""

    def test_page_file_name(self):
        """Test names are log id, underscore, sequence."""
        assert page_file_name("3f2b", 1) == "3f2b_1.log"
        assert page_file_name("3f2b", 12) == "3f2b_12.log"

    def test_parse_page_file_name(self):
        """Test a uuid log id containing dashes."""
        log_id = "0b9c8e8e-0d4e-4c44-9a35-8b7f6a1d2c3e"

        assert parse_page_file_name(f"{log_id}_7.log") == (log_id, 7)

    @pytest.mark.parametrize(
        "name",
        ["notes.txt", "abc.log", "abc_.log", "_3.log", "abc_x.log", "abc_0.log"],
    )
    def test_parse_rejects_other_files(self, name):
        """Test names that are not page files."""
        with pytest.raises(ValueError, match="Not a page file"):
            parse_page_file_name(name)
