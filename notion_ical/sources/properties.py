"""
Rendering of record fields into (name, value) display strings.

Live fields arrive as typed Notion property values and are rendered by type
(an absent value renders as ""). Export columns are already text and are
passed through untouched.
"""
from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from typing import Any, Callable, Dict, Optional, Tuple
from zoneinfo import ZoneInfo

from ..errors import DateParseError
from ..models import EventProperty
from .blocks import file_url, rich_text_to_plain

DATE_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
ARROW = "→"


def parse_notion_datetime(value: str, zone: tzinfo = timezone.utc) -> datetime:
    """
    ISO 8601 date or date-time from the API, timezone-aware.

    - trailing 'Z' is UTC
    - date-only values are midnight
    - naive values are interpreted in *zone*
    """
    s = (value or "").strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError as e:
        raise DateParseError(f"{value!r} is not a valid date") from e
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=zone)
    return dt


def notion_date_range(date: Dict[str, Any], zone: tzinfo = timezone.utc) -> Tuple[datetime, Optional[datetime]]:
    """(start, end) of a date value; end is None when the value has none."""
    if date.get("time_zone"):
        zone = ZoneInfo(date["time_zone"])
    start = parse_notion_datetime(date["start"], zone)
    end = parse_notion_datetime(date["end"], zone) if date.get("end") else None
    return start, end


def _format_datetime(value: Optional[str]) -> str:
    if not value:
        return ""
    return parse_notion_datetime(value).strftime(DATE_TIME_FORMAT)


def _format_date(date: Dict[str, Any]) -> str:
    start = _format_datetime(date.get("start"))
    if date.get("end"):
        return f"{start} {ARROW} {_format_datetime(date['end'])}"
    return start


def _format_general(number: Any) -> str:
    n = float(number)
    return str(int(n)) if n.is_integer() else repr(n)


def _render_scalar(result: Dict[str, Any]) -> str:
    # formula and rollup results: {"type": "number", "number": 3}
    kind = result.get("type")
    value = result.get(kind)
    if value is None:
        return ""
    if kind == "date":
        return _format_date(value)
    if kind == "number":
        return _format_general(value)
    if kind == "boolean":
        return "true" if value else "false"
    if kind == "array":
        return ", ".join(render_live_value(item) for item in value)
    return str(value)


def _names(items: Any) -> str:
    return ", ".join(item.get("name") or "" for item in items)


_LIVE_RENDERERS: Dict[str, Callable[[Any], str]] = {
    "title": rich_text_to_plain,
    "rich_text": rich_text_to_plain,
    "number": lambda n: f"{n:f}",
    "select": lambda option: option.get("name") or "",
    "status": lambda option: option.get("name") or "",
    "multi_select": _names,
    "date": _format_date,
    "formula": _render_scalar,
    "rollup": _render_scalar,
    "relation": lambda related: ", ".join(r.get("id") or "" for r in related),
    "people": _names,
    "files": lambda files: ", ".join(file_url(f) for f in files),
    "checkbox": lambda checked: "Yes" if checked else "No",
    "url": str,
    "email": str,
    "phone_number": str,
    "created_time": _format_datetime,
    "last_edited_time": _format_datetime,
    "created_by": lambda user: user.get("name") or "",
    "last_edited_by": lambda user: user.get("name") or "",
    "unique_id": lambda uid: "-".join(str(p) for p in (uid.get("prefix"), uid.get("number")) if p is not None),
}


def render_live_value(prop: Dict[str, Any]) -> str:
    """Display string of one typed property value; "" for null or unknown types."""
    kind = prop.get("type")
    value = prop.get(kind)
    if value is None or kind not in _LIVE_RENDERERS:
        return ""
    return _LIVE_RENDERERS[kind](value)


class LiveProperty(EventProperty):
    """A database page property, rendered on access from its API payload."""
    payload: Dict[str, Any]

    @property
    def value(self) -> str:
        return render_live_value(self.payload)


class SnapshotProperty(EventProperty):
    """A CSV column of an export: header and cell, verbatim."""
    raw: str

    @property
    def value(self) -> str:
        return self.raw
