# tests/test_date_range.py
"""
Tests for the export date/date-range parser.

Covers the accepted date and time formats, arrow ranges, same-day end-time-only
ranges, zone handling and the errors raised for unparseable input.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from notion_ical.errors import DateParseError
from notion_ical.sources.date_range import parse_date, parse_date_range

UTC = timezone.utc
ZURICH = ZoneInfo("Europe/Zurich")


# ---------------------------------------------------------------------------
# Single dates
# ---------------------------------------------------------------------------

def test_slash_date_only_is_midnight_and_end_equals_start():
    start, end = parse_date_range("2023/01/02", UTC)
    assert start == datetime(2023, 1, 2, 0, 0, tzinfo=UTC)
    assert end == start


@pytest.mark.parametrize("text, expected", [
    ("January 2, 2023", datetime(2023, 1, 2, 0, 0)),
    ("January 2, 2023 15:00", datetime(2023, 1, 2, 15, 0)),
    ("January 2, 2023 3:00 PM", datetime(2023, 1, 2, 15, 0)),
    ("January 2, 2023 9:30 am", datetime(2023, 1, 2, 9, 30)),
    ("Jan 2, 2023 08:15", datetime(2023, 1, 2, 8, 15)),
    ("2023/01/02 07:45", datetime(2023, 1, 2, 7, 45)),
    ("2023-01-02", datetime(2023, 1, 2, 0, 0)),
    ("  December 31, 2022  ", datetime(2022, 12, 31, 0, 0)),
])
def test_accepted_formats(text, expected):
    assert parse_date(text, UTC) == expected.replace(tzinfo=UTC)


def test_result_is_in_given_zone():
    start, _ = parse_date_range("January 2, 2023 3:00 PM", ZURICH)
    assert start.tzinfo is ZURICH
    assert start.utcoffset() == timedelta(hours=1)
    assert start.astimezone(UTC) == datetime(2023, 1, 2, 14, 0, tzinfo=UTC)


# ---------------------------------------------------------------------------
# Ranges
# ---------------------------------------------------------------------------

def test_end_time_only_merges_onto_start_date():
    start, end = parse_date_range("January 2, 2023 3:00 PM → 5:00 PM", ZURICH)
    assert start == datetime(2023, 1, 2, 15, 0, tzinfo=ZURICH)
    assert end == datetime(2023, 1, 2, 17, 0, tzinfo=ZURICH)


def test_full_range():
    start, end = parse_date_range("January 2, 2023 → January 4, 2023", UTC)
    assert start == datetime(2023, 1, 2, tzinfo=UTC)
    assert end == datetime(2023, 1, 4, tzinfo=UTC)


def test_full_range_with_times():
    start, end = parse_date_range("2023/01/02 22:00 → 2023/01/03 02:30", UTC)
    assert start == datetime(2023, 1, 2, 22, 0, tzinfo=UTC)
    assert end == datetime(2023, 1, 3, 2, 30, tzinfo=UTC)


def test_end_time_before_start_time_rolls_to_next_day():
    start, end = parse_date_range("January 2, 2023 11:00 PM → 1:00 AM", UTC)
    assert end == datetime(2023, 1, 3, 1, 0, tzinfo=UTC)


def test_blank_right_side_is_single_date():
    start, end = parse_date_range("January 2, 2023 →  ", UTC)
    assert start == end


@pytest.mark.parametrize("text", [
    "January 2, 2023",
    "January 2, 2023 3:00 PM → 5:00 PM",
    "January 2, 2023 → February 1, 2023",
    "2023/01/02 10:00 → 2023/01/02 10:00",
    "January 2, 2023 11:00 PM → 1:00 AM",
])
def test_start_never_after_end(text):
    start, end = parse_date_range(text, UTC)
    assert start <= end


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

def test_unparseable_left_side_names_input():
    with pytest.raises(DateParseError) as exc:
        parse_date_range("not a date", UTC)
    assert "not a date" in str(exc.value)


def test_unparseable_right_side_names_right_part():
    with pytest.raises(DateParseError) as exc:
        parse_date_range("January 2, 2023 → sometime", UTC)
    assert "sometime" in str(exc.value)


def test_full_range_ending_before_start_is_rejected():
    with pytest.raises(DateParseError):
        parse_date_range("January 4, 2023 → January 2, 2023", UTC)


def test_parse_error_is_a_value_error():
    with pytest.raises(ValueError):
        parse_date("31/31/2023", UTC)
