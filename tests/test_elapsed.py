"""
Tests for timestamp parsing and duration-based elapsed-time arithmetic.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app.services.elapsed import (
    add_elapsed,
    format_elapsed,
    hours_between,
    parse_elapsed,
    parse_timestamp,
    relative_time,
    to_iso,
)

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


class TestParseElapsed:
    @pytest.mark.parametrize("text,expected", [
        ("4h ago", timedelta(hours=4)),
        ("2d 3h ago", timedelta(days=2, hours=3)),
        ("30 minutes ago", timedelta(minutes=30)),
        ("an hour ago", timedelta(hours=1)),
        ("a day ago", timedelta(days=1)),
        ("4h and 30m ago", timedelta(hours=4, minutes=30)),
        ("1.5 hours ago", timedelta(hours=1.5)),
        ("2 weeks", timedelta(weeks=2)),
        ("45s ago", timedelta(seconds=45)),
        ("Just now", timedelta(0)),
    ])
    def test_recognised_forms(self, text, expected):
        assert parse_elapsed(text) == expected

    @pytest.mark.parametrize("text", [None, "", "unknown", "a while back", "5 parsecs ago"])
    def test_unrecognised_forms_return_none(self, text):
        assert parse_elapsed(text) is None


class TestFormatElapsed:
    @pytest.mark.parametrize("delta,expected", [
        (timedelta(seconds=30), "just now"),
        (timedelta(minutes=45), "45m ago"),
        (timedelta(hours=4), "4h ago"),
        (timedelta(hours=4, minutes=30), "4h 30m ago"),
        (timedelta(hours=27), "1d 3h ago"),
        (timedelta(days=2), "2d ago"),
    ])
    def test_largest_two_units(self, delta, expected):
        assert format_elapsed(delta) == expected

    def test_negative_duration_uses_magnitude(self):
        assert format_elapsed(timedelta(hours=-2)) == "2h ago"


class TestAddElapsed:
    def test_ages_previous_value_by_gap(self):
        assert add_elapsed("4h ago", timedelta(hours=3)) == "7h ago"

    def test_crosses_into_days(self):
        assert add_elapsed("20h ago", timedelta(hours=6, minutes=10)) == "1d 2h ago"

    def test_just_now_plus_gap(self):
        assert add_elapsed("just now", timedelta(minutes=90)) == "1h 30m ago"

    def test_negative_gap_still_ages(self):
        assert add_elapsed("1h ago", timedelta(hours=-1)) == "2h ago"

    def test_unparseable_previous_returns_none(self):
        assert add_elapsed("unknown", timedelta(hours=1)) is None
        assert add_elapsed(None, timedelta(hours=1)) is None


class TestTimestamps:
    def test_zulu_suffix(self):
        assert parse_timestamp("2026-10-18T12:00:00Z") == NOW

    def test_naive_is_read_as_utc(self):
        assert parse_timestamp("2026-10-18T12:00:00") == NOW
        assert parse_timestamp(datetime(2026, 10, 18, 12, 0)) == NOW

    def test_offset_is_normalised_to_utc(self):
        parsed = parse_timestamp("2026-10-18T14:00:00+02:00")
        assert parsed == NOW
        assert parsed.tzinfo == timezone.utc

    @pytest.mark.parametrize("value", ["yesterday", "", None, 12345])
    def test_unparseable_values(self, value):
        assert parse_timestamp(value) is None

    def test_to_iso_round_trip(self):
        assert parse_timestamp(to_iso(NOW)) == NOW
        assert to_iso(datetime(2026, 10, 18, 12, 0)).endswith("+00:00")

    def test_hours_between_is_unsigned(self):
        earlier = NOW - timedelta(hours=5)
        assert hours_between(earlier, NOW) == pytest.approx(5.0)
        assert hours_between(NOW, earlier) == pytest.approx(5.0)

    def test_relative_time(self):
        assert relative_time(to_iso(NOW - timedelta(minutes=5)), NOW) == "5m ago"
        assert relative_time("not a time", NOW) == "unknown time ago"
