"""Serialization of a :class:`~rapla_ics.models.Calendar` to iCalendar.

Rapla pages are always in German local time, so every feed carries the
same ``Europe/Berlin`` ``VTIMEZONE`` and event times are written as
local times bound to it.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import icalendar

from .models import Calendar, Event

TZID = "Europe/Berlin"
LOCAL_TZ = ZoneInfo(TZID)


def _build_timezone() -> icalendar.Timezone:
    """Return the ``VTIMEZONE`` for Central European (Summer) Time."""
    daylight = icalendar.TimezoneDaylight()
    daylight.add("dtstart", datetime(1970, 3, 29, 2, 0, 0))
    daylight.add("tzoffsetfrom", timedelta(hours=1))
    daylight.add("tzoffsetto", timedelta(hours=2))
    daylight.add("tzname", "CEST")
    daylight.add("rrule", {"freq": "YEARLY", "bymonth": 3, "byday": "-1SU"})

    standard = icalendar.TimezoneStandard()
    standard.add("dtstart", datetime(1970, 10, 25, 3, 0, 0))
    standard.add("tzoffsetfrom", timedelta(hours=2))
    standard.add("tzoffsetto", timedelta(hours=1))
    standard.add("tzname", "CET")
    standard.add("rrule", {"freq": "YEARLY", "bymonth": 10, "byday": "-1SU"})

    tz = icalendar.Timezone()
    tz.add("tzid", TZID)
    tz.add_component(daylight)
    tz.add_component(standard)
    return tz


TIMEZONE = _build_timezone()


def _build_event(ev: Event) -> icalendar.Event:
    """Convert one :class:`Event` into a ``VEVENT``.

    ``DTSTAMP`` is the start time in UTC rather than the generation time
    so that serializing the same calendar twice gives identical output.
    """
    start = datetime.combine(ev.date, ev.start)
    end = datetime.combine(ev.date, ev.end)

    event = icalendar.Event()
    event.add("uid", ev.uid)
    event.add("dtstamp", start.replace(tzinfo=LOCAL_TZ).astimezone(timezone.utc))
    event.add("dtstart", start, parameters={"TZID": TZID})
    event.add("dtend", end, parameters={"TZID": TZID})
    event.add("summary", ev.title)

    if ev.location is not None:
        event.add("location", ev.location)

    if ev.organizer is not None:
        # Plain names, not a mailto: address, so escape them as text
        event.add("organizer", icalendar.vText(ev.organizer))

    return event


def build_calendar(calendar: Calendar) -> icalendar.Calendar:
    """Build an :class:`icalendar.Calendar` holding every event of *calendar*.

    :param calendar: The extracted calendar.
    :returns: A fully populated :class:`icalendar.Calendar`.
    """
    cal = icalendar.Calendar()
    cal.add("version", "2.0")
    cal.add("prodid", calendar.name)
    cal.add("x-wr-calname", calendar.name)
    cal.add("x-wr-timezone", TZID)
    cal.add_component(TIMEZONE)

    for ev in calendar.events:
        cal.add_component(_build_event(ev))

    return cal


def serialize(calendar: Calendar) -> str:
    """Return *calendar* as iCalendar (RFC 5545) text.

    :param calendar: The extracted calendar.
    :returns: The feed, ready to be served as ``text/calendar``.
    """
    return build_calendar(calendar).to_ical().decode("utf-8")
