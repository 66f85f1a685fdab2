"""Extraction of a :class:`~rapla_ics.models.Calendar` from a Rapla page.

The Rapla week view renders each week as a table inside
``div.calendar``. The layout looks like this::

    <select name="year"><option selected>2024</option></select>
    <div class="calendar">
      <table class="week_table"><tbody>
        <tr><th class="week_number">KW 10</th>
            <td class="week_header"><nobr>Mo 04.03.</nobr></td>...</tr>
        <tr><td class="week_smallseparatorcell"></td>
            <td class="week_block"><a>10:00&nbsp;-11:30<br>Title</a>...</td>
            <td class="week_separatorcell"></td>...</tr>
      </tbody></table>
    </div>

Every separator cell moves the day column one step to the right. Week
tables carry no year, so the year is seeded from the page's year
selector and incremented whenever week 1 follows another week.

Every missing or malformed piece raises an
:class:`~rapla_ics.errors.ExtractionError`; a page is either read
completely or not at all.
"""

from __future__ import annotations

import enum
import logging
import re
from datetime import date, datetime, time, timedelta

import soupsieve as sv
from bs4 import BeautifulSoup, Tag

from .errors import (
    IncompleteDetail,
    InvalidDate,
    MalformedNumber,
    MalformedTime,
    MissingAnchor,
)
from .models import Calendar, Event

logger = logging.getLogger(__name__)

TITLE = sv.compile("title")
SELECTED_YEAR = sv.compile("select[name=year] > option[selected]")
WEEKS = sv.compile("div.calendar > table.week_table")
WEEK_NUMBER = sv.compile("th.week_number")
WEEK_START = sv.compile("tr > td.week_header > nobr")
ANCHOR = sv.compile("a")
RESOURCE = sv.compile("span.resource")
PERSON = sv.compile("span.person")
INFOTABLE = sv.compile("table.infotable")
EVENT_TYPE = sv.compile("strong")

SEPARATOR_PREFIX = "week_separatorcell"
EVENT_CLASS = "week_block"

# "&nbsp;-" as it reads once the parser has decoded the entity
TIME_SEPARATOR = "\xa0-"

EVENT_TYPES = ("Vorlesung", "Online-Format", "Klausur")
ONLINE_TYPE = "Online-Format"
ONLINE_LOCATION = "Online"
ADMINISTRATIVE_PREFIXES = ("Belegung", "Raum belegt")
EXAM_PLACEHOLDER = "Klausur"

# "Mo 04.03.24 10:00-11:30", "Mo 10:00-11:30 wöchentlich", "10:00-11:30 wöchentlich"
FREE_TEXT_TIME = re.compile(
    r"^(?:(?P<weekday>[^\W\d]+)\.?\s+)?"
    r"(?:(?P<date>\d{1,2}\.\d{1,2}\.\d{2,4})\s+)?"
    r"(?P<start>\d{1,2}:\d{2})\s*-\s*(?P<end>\d{1,2}:\d{2})"
    r"(?:\s+(?P<recurrence>\S.*))?$"
)


class DetailFormat(str, enum.Enum):
    """How the text inside an event cell is laid out.

    * ``ANCHOR`` - ``HH:MM&nbsp;-HH:MM<br>Title`` inside the cell's link.
    * ``FREE_TEXT`` - a single ``"<Weekday> DD.MM.YY HH:MM-HH:MM"`` style
      line plus an info table holding the title. Only lectures, online
      lectures and exams are kept; room bookings and bare exam
      placeholders are dropped.
    """

    ANCHOR = "anchor"
    FREE_TEXT = "free_text"


def _parse_int(text: str, context: str, week_index: int | None = None) -> int:
    try:
        value = int(text)
    except ValueError:
        raise MalformedNumber(f"{context} {text!r}", week_index) from None
    if value < 0:
        raise MalformedNumber(f"{context} {text!r}", week_index)
    return value


def _parse_time(text: str, week_index: int) -> time:
    try:
        return datetime.strptime(text.strip(), "%H:%M").time()
    except ValueError:
        raise MalformedTime(repr(text), week_index) from None


def _make_date(year: int, month: int, day: int, week_index: int) -> date:
    try:
        return date(year, month, day)
    except ValueError:
        raise InvalidDate(f"{day:02d}.{month:02d}.{year}", week_index) from None


def _anchor_lines(anchor: Tag) -> list[str]:
    """Split the contents of *anchor* at its ``<br>`` elements."""
    lines = [""]
    for node in anchor.children:
        if isinstance(node, Tag):
            if node.name == "br":
                lines.append("")
            else:
                lines[-1] += node.get_text()
        else:
            lines[-1] += str(node)
    return lines


def _organizer(cell: Tag) -> str | None:
    names = []
    for person in PERSON.select(cell):
        # Lists are rendered as "Doe, John," with a trailing comma
        name = person.get_text(strip=True).rstrip(",").strip()
        if name:
            names.append(name)
    return ", ".join(names) if names else None


def _parse_anchor_detail(cell: Tag, day: date, week_index: int) -> Event:
    anchor = ANCHOR.select_one(cell)
    if anchor is None:
        raise MissingAnchor("event anchor", week_index)

    lines = _anchor_lines(anchor)
    if len(lines) < 2:
        raise IncompleteDetail(f"expected time and title lines in {lines!r}", week_index)

    times = lines[0].split(TIME_SEPARATOR)
    if len(times) < 2:
        raise MissingAnchor("time range separator", week_index)
    start = _parse_time(times[0], week_index)
    end = _parse_time(times[1], week_index)

    location = None
    resources = RESOURCE.select(cell)
    if len(resources) > 1:
        location = resources[1].get_text(strip=True) or None

    return Event(
        date=day,
        start=start,
        end=end,
        title=lines[1].strip(),
        location=location,
        organizer=_organizer(cell),
    )


def _parse_free_text_detail(cell: Tag, day: date, week_index: int) -> Event | None:
    event_type = EVENT_TYPE.select_one(cell)
    if event_type is None:
        raise MissingAnchor("event type", week_index)
    kind = event_type.get_text(strip=True)
    if not kind.startswith(EVENT_TYPES):
        logger.debug("Skipping %r entry on %s", kind, day)
        return None

    infotable = INFOTABLE.select_one(cell)
    if infotable is None:
        raise MissingAnchor("info table", week_index)
    columns = infotable.find_all("td")
    if len(columns) < 2:
        raise IncompleteDetail("info table has no title column", week_index)
    title = columns[1].get_text(" ", strip=True)

    if title.startswith(ADMINISTRATIVE_PREFIXES) or title == EXAM_PLACEHOLDER:
        logger.debug("Skipping placeholder %r on %s", title, day)
        return None

    divs = cell.find_all("div")
    if len(divs) < 2:
        raise MissingAnchor("time line", week_index)
    line = " ".join(divs[1].get_text(" ").split())
    m = FREE_TEXT_TIME.match(line)
    if not m:
        raise MalformedTime(repr(line), week_index)

    if m.group("date"):
        dd, mm, yy = m.group("date").split(".")
        year = _parse_int(yy, "event year", week_index)
        if year < 100:
            year += 2000
        day = _make_date(
            year,
            _parse_int(mm, "event month", week_index),
            _parse_int(dd, "event day", week_index),
            week_index,
        )

    if kind.startswith(ONLINE_TYPE):
        location = ONLINE_LOCATION
    else:
        resources = [r.get_text(strip=True) for r in RESOURCE.select(cell)]
        location = ", ".join(r for r in resources if r) or None

    return Event(
        date=day,
        start=_parse_time(m.group("start"), week_index),
        end=_parse_time(m.group("end"), week_index),
        title=title,
        location=location,
        organizer=_organizer(cell),
    )


_DETAIL_PARSERS = {
    DetailFormat.ANCHOR: _parse_anchor_detail,
    DetailFormat.FREE_TEXT: _parse_free_text_detail,
}


def _week_start(week: Tag, week_index: int) -> tuple[int, int]:
    """Return ``(day, month)`` of the Monday in the ``"Mo 04.03."`` header cell."""
    header = WEEK_START.select_one(week)
    if header is None:
        raise MissingAnchor("week start date", week_index)

    tokens = header.get_text().split()
    if len(tokens) < 2:
        raise MalformedNumber(f"week start date {header.get_text()!r}", week_index)
    parts = tokens[1].rstrip(".").split(".")
    if len(parts) < 2:
        raise MalformedNumber(f"week start date {tokens[1]!r}", week_index)

    day = _parse_int(parts[0], "week start day", week_index)
    month = _parse_int(parts[1], "week start month", week_index)
    return day, month


def _week_number(week: Tag, week_index: int) -> int:
    header = WEEK_NUMBER.select_one(week)
    if header is None:
        raise MissingAnchor("week number", week_index)
    tokens = header.get_text().split()
    if len(tokens) < 2:
        raise MalformedNumber(f"week number {header.get_text()!r}", week_index)
    return _parse_int(tokens[1], "week number", week_index)


def _parse_week(
    week: Tag,
    monday: date,
    week_index: int,
    detail_format: DetailFormat,
) -> list[Event]:
    parse_detail = _DETAIL_PARSERS[detail_format]
    events: list[Event] = []

    # The first row holds the week number and the day headers
    for row in week.find_all("tr", recursive=False)[1:]:
        day_index = 0
        for cell in row.find_all("td", recursive=False):
            classes = cell.get("class") or []
            if not classes:
                continue
            css_class = classes[0]

            if css_class.startswith(SEPARATOR_PREFIX):
                day_index += 1

            if css_class != EVENT_CLASS:
                continue

            event = parse_detail(cell, monday + timedelta(days=day_index), week_index)
            if event is not None:
                events.append(event)

    return events


def extract(html: str, detail_format: DetailFormat = DetailFormat.ANCHOR) -> Calendar:
    """Parse a Rapla week-grid page into a :class:`Calendar`.

    :param html: The full page markup.
    :param detail_format: Layout of the text inside event cells.
    :returns: The calendar, with events in document order.
    :raises ExtractionError: If any required part of the page is missing
        or malformed. No partial calendar is returned.
    """
    detail_format = DetailFormat(detail_format)
    soup = BeautifulSoup(html, "html.parser")

    title = TITLE.select_one(soup)
    if title is None:
        raise MissingAnchor("title")
    name = title.get_text().strip()

    year_option = SELECTED_YEAR.select_one(soup)
    if year_option is None:
        raise MissingAnchor("selected year")
    current_year = _parse_int(year_option.get_text().strip(), "selected year")

    events: list[Event] = []
    for week_index, table in enumerate(WEEKS.select(soup)):
        # Rows sit directly in the table when the markup has no <tbody>
        week = table.find("tbody", recursive=False) or table
        week_number = _week_number(week, week_index)

        # Week 1 after any other week means the page crossed into a new year
        if week_number == 1 and week_index > 0:
            current_year += 1

        day, month = _week_start(week, week_index)
        year = current_year
        # Week 1 may start in the last days of December. The first table
        # takes its year from the year selector, which is already the year
        # of its Monday.
        if week_number == 1 and week_index > 0 and month == 12:
            year -= 1
        monday = _make_date(year, month, day, week_index)
        logger.debug("Week %d: number %d starting %s", week_index, week_number, monday)
        events.extend(_parse_week(week, monday, week_index, detail_format))

    logger.debug("Extracted %d events from %r", len(events), name)
    return Calendar(name=name, events=tuple(events))
