"""Unit tests for stackdump.utils.time."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from stackdump.utils.time import format_timestamp


class TestFormatTimestamp:
    """Tests for format_timestamp."""

    def test_milliseconds(self) -> None:
        assert format_timestamp(datetime(2009, 3, 5, 22, 28, 34, 823000)) == "2009-03-05T22:28:34.823"

    def test_whole_seconds_keep_milliseconds(self) -> None:
        assert format_timestamp(datetime(2009, 3, 5, 22, 28, 34)) == "2009-03-05T22:28:34.000"

    def test_microseconds_truncated(self) -> None:
        assert format_timestamp(datetime(2009, 3, 5, 22, 28, 34, 823999)) == "2009-03-05T22:28:34.823"

    def test_aware_keeps_offset(self) -> None:
        value = datetime(2009, 3, 5, 22, 28, 34, tzinfo=timezone(timedelta(hours=2)))

        assert format_timestamp(value) == "2009-03-05T22:28:34.000+02:00"
