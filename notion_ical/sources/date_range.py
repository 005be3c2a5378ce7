"""
Date range parsing for dates as Notion writes them into CSV exports.

A cell holds either a single date/time or two joined by an arrow:

    January 2, 2023
    January 2, 2023 3:00 PM
    January 2, 2023 3:00 PM → January 4, 2023 9:00 AM
    January 2, 2023 3:00 PM → 5:00 PM        (same day, end time only)
    2023/01/02 15:00

Every date format is tried with every time format, date-only last, and the
first combination that parses wins. This is deliberately permissive: a
day/month-ambiguous string is taken by whichever format comes first.
"""
from __future__ import annotations

from datetime import datetime, time, timedelta, tzinfo
from typing import Tuple

from ..errors import DateParseError

ARROW = "→"

DATE_FORMATS: Tuple[str, ...] = (
    "%B %d, %Y",   # January 2, 2023
    "%b %d, %Y",   # Jan 2, 2023
    "%Y/%m/%d",
    "%Y-%m-%d",
)

TIME_FORMATS: Tuple[str, ...] = (
    "%H:%M",
    "%I:%M %p",
)


def _date_time_formats():
    for fd in DATE_FORMATS:
        for ft in TIME_FORMATS:
            yield f"{fd} {ft}"
        yield fd


def parse_date(text: str, zone: tzinfo) -> datetime:
    """Parse one date (time optional, midnight when absent) in *zone*."""
    s = (text or "").strip()
    for fmt in _date_time_formats():
        try:
            naive = datetime.strptime(s, fmt)
        except ValueError:
            continue
        return naive.replace(tzinfo=zone)
    raise DateParseError(f"{s!r} is not a valid date")


def parse_time(text: str) -> time:
    s = (text or "").strip()
    for fmt in TIME_FORMATS:
        try:
            return datetime.strptime(s, fmt).time()
        except ValueError:
            continue
    raise DateParseError(f"{s!r} is not a valid date or time")


def parse_date_range(text: str, zone: tzinfo) -> Tuple[datetime, datetime]:
    """
    Returns (start, end) as timezone-aware datetimes in *zone*.

    Without a right-hand side end == start. A right-hand side that is only a
    time lands on the start's calendar day (the next day if it would
    otherwise end before the start).
    """
    left, sep, right = (text or "").partition(ARROW)
    start = parse_date(left, zone)

    if not sep or not right.strip():
        return start, start

    try:
        end = parse_date(right, zone)
    except DateParseError:
        t = parse_time(right)
        end = start.replace(hour=t.hour, minute=t.minute, second=t.second, microsecond=0)
        if end < start:
            end += timedelta(days=1)
        return start, end

    if end < start:
        raise DateParseError(f"{text.strip()!r} ends before it starts")
    return start, end
