"""Data classes for a parsed Rapla timetable.

Provides :class:`Calendar`, the result of one extraction, and
:class:`Event`, a single scheduled item on one day.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date, time
from typing import Any


def _timestamp(d: date, t: time) -> str:
    """Return a floating local timestamp ``YYYYMMDDTHHMM00``."""
    return f"{d:%Y%m%d}T{t:%H%M}00"


@dataclass(frozen=True)
class Event:
    """A single timetable entry.

    :param date: The day the event takes place.
    :param start: Start time of day.
    :param end: End time of day. Not checked against *start*.
    :param title: The event label, with HTML entities already unescaped.
    :param location: Room or resource, or ``None`` if the page lists none.
    :param organizer: Lecturer name(s) joined with ``", "``, or ``None``.
    """

    date: date
    start: time
    end: time
    title: str
    location: str | None = None
    organizer: str | None = None

    @property
    def dtstart(self) -> str:
        return _timestamp(self.date, self.start)

    @property
    def dtend(self) -> str:
        return _timestamp(self.date, self.end)

    @property
    def uid(self) -> str:
        """Identifier derived only from the start timestamp and the title.

        Calendar clients use it to match events across repeated fetches,
        so it must stay stable for the same ``(date, start, title)``.
        """
        return f"{self.dtstart}_{self.title.replace(' ', '-')}"

    def to_dict(self) -> dict[str, str]:
        data = {
            "date": self.date.isoformat(),
            "start": f"{self.start:%H:%M}",
            "end": f"{self.end:%H:%M}",
            "title": self.title,
        }
        if self.location is not None:
            data["location"] = self.location
        if self.organizer is not None:
            data["organizer"] = self.organizer
        return data


@dataclass(frozen=True)
class Calendar:
    """A named, ordered sequence of :class:`Event` values.

    :param name: The page title, trimmed.
    :param events: Events in document order (week, row, column).
    """

    name: str
    events: tuple[Event, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "events": [ev.to_dict() for ev in self.events],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)
