"""
Unit tests for relative timestamp labels.
"""

from datetime import datetime, timedelta, timezone

import pytest

from zanichat.services.timestamps import format_timestamp

NOW = datetime(2024, 5, 20, 12, 0, tzinfo=timezone.utc)


class TestFormatTimestamp:
    """Tests for format_timestamp()."""

    @pytest.mark.parametrize(
        "age, expected",
        [
            (timedelta(seconds=0), "now"),
            (timedelta(seconds=59), "now"),
            (timedelta(minutes=1), "1m"),
            (timedelta(minutes=59, seconds=59), "59m"),
            (timedelta(hours=1), "1h"),
            (timedelta(hours=23, minutes=59), "23h"),
            (timedelta(days=1), "1d"),
            (timedelta(days=6, hours=23), "6d"),
        ],
    )
    def test_relative_labels(self, age: timedelta, expected: str) -> None:
        assert format_timestamp(NOW - age, NOW) == expected

    def test_week_or_older_shows_date(self) -> None:
        assert format_timestamp(NOW - timedelta(days=7), NOW) == "2024-05-13"

    def test_future_reads_now(self) -> None:
        assert format_timestamp(NOW + timedelta(minutes=5), NOW) == "now"

    def test_naive_datetime_is_utc(self) -> None:
        assert format_timestamp(datetime(2024, 5, 20, 11, 30), NOW) == "30m"

    def test_defaults_to_current_time(self) -> None:
        assert format_timestamp(datetime.now(timezone.utc)) == "now"
