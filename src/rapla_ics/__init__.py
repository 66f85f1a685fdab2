"""Converts Rapla timetable pages into ICS calendar feeds.

This package exposes the following public symbols:

* :func:`extract` - parses a Rapla week-grid page into a :class:`Calendar`.
* :func:`serialize` - renders a :class:`Calendar` as iCalendar text.
* :class:`RaplaIcs` - downloads a Rapla page and produces ICS or JSON.
* :class:`Calendar` and :class:`Event` - the extracted data.
* :class:`ExtractionError` - base class of every extraction failure.
"""

from .errors import (
    ExtractionError,
    IncompleteDetail,
    InvalidDate,
    MalformedNumber,
    MalformedTime,
    MissingAnchor,
)
from .ics import serialize
from .models import Calendar, Event
from .parser import DetailFormat, extract
from .rapla_ics import RaplaIcs

__all__ = [
    "Calendar",
    "DetailFormat",
    "Event",
    "ExtractionError",
    "IncompleteDetail",
    "InvalidDate",
    "MalformedNumber",
    "MalformedTime",
    "MissingAnchor",
    "RaplaIcs",
    "extract",
    "serialize",
]
