from __future__ import annotations

import logging
from datetime import timedelta, timezone
from typing import BinaryIO, List

from icalendar import Calendar
from icalendar import Event as ICalEvent
from icalendar import vDuration

from .models import Event
from .sources.base import BaseSource

logger = logging.getLogger(__name__)

PRODID = "-//notion-ical//notion-ical//EN"
REFRESH_INTERVAL = timedelta(hours=12)


def to_ical_event(event: Event) -> ICalEvent:
    summary = f"{event.emoji} {event.title}" if event.emoji else event.title

    vevent = ICalEvent()
    vevent.add("uid", event.id)
    vevent.add("summary", summary)
    vevent.add("dtstamp", event.start.astimezone(timezone.utc))
    vevent.add("dtstart", event.start.astimezone(timezone.utc))
    vevent.add("dtend", event.end.astimezone(timezone.utc))
    vevent.add("description", event.description())
    if event.url:
        vevent.add("url", event.url)
    return vevent


def to_calendar(name: str, events: List[Event]) -> Calendar:
    cal = Calendar()
    cal.add("prodid", PRODID)
    cal.add("version", "2.0")
    cal.add("name", name)
    cal.add("x-wr-calname", name)

    refresh = vDuration(REFRESH_INTERVAL)
    refresh.params["VALUE"] = "DURATION"
    cal["REFRESH-INTERVAL"] = refresh
    cal["X-PUBLISHED-TTL"] = vDuration(REFRESH_INTERVAL)

    for event in events:
        cal.add_component(to_ical_event(event))
    return cal


def convert(source: BaseSource, stream: BinaryIO) -> int:
    """Read every event of *source* once and write them to *stream* as iCalendar."""
    events = source.read_all()
    stream.write(to_calendar(source.name(), events).to_ical())
    logger.info("Processed %d events", len(events))
    return len(events)
