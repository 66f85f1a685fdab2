"""Tests for the free-text event detail format."""

from datetime import date, time
from pathlib import Path

import pytest

from pages import page, row, week
from rapla_ics import DetailFormat, IncompleteDetail, MalformedTime, MissingAnchor, extract

FIXTURES = Path(__file__).parent / "fixtures"
FREE_TEXT_HTML = (FIXTURES / "calendar_free_text.html").read_text(encoding="utf-8")


@pytest.fixture()
def events():
    """Extract the free-text fixture and return its events."""
    return extract(FREE_TEXT_HTML, DetailFormat.FREE_TEXT).events


def _cell(title, line, event_type="Vorlesung", resources=()):
    spans = "".join(f'<span class="resource">{r}</span>' for r in resources)
    return (
        f'<td class="week_block"><a href="#"><div><strong>{event_type}</strong></div>'
        f"<div>{line}</div></a>"
        f'<span class="tooltip"><table class="infotable"><tr><td>Name:</td>'
        f"<td>{title}</td></tr></table>{spans}</span></td>"
    )


def test_placeholders_are_skipped(events):
    """Room bookings, 'Belegung' entries and bare exams are dropped."""
    titles = [e.title for e in events]
    assert titles == ["Algorithms & Data Structures", "Statistik", "Englisch"]


def test_weekday_and_date_line(events):
    """``"Di 05.03.24 10:00-11:30"`` carries its own date."""
    ev = events[0]
    assert ev.date == date(2024, 3, 5)
    assert ev.start == time(10, 0)
    assert ev.end == time(11, 30)
    assert ev.location == "TINF22B, Room A1"
    assert ev.organizer == "Prof. Smith"


def test_weekday_and_recurrence_line(events):
    """``"Do 13:00-14:30 wöchentlich"`` takes its date from the grid column."""
    ev = events[1]
    assert ev.date == date(2024, 3, 7)
    assert ev.start == time(13, 0)
    assert ev.end == time(14, 30)
    assert ev.location is None
    assert ev.organizer is None


def test_recurrence_only_line(events):
    """``"09:00-10:30 wöchentlich"`` has no weekday at all."""
    ev = events[2]
    assert ev.date == date(2024, 3, 9)
    assert ev.start == time(9, 0)
    assert ev.organizer == "Dr. Jones"


def test_four_digit_year_in_line():
    html = page([week(rows=[row(_cell("Physik", "Mi 06.03.2024 08:00-09:30"))])])
    ev = extract(html, "free_text").events[0]
    assert ev.date == date(2024, 3, 6)


def test_format_accepts_string_value():
    """The format may be given by its value, as read from configuration."""
    html = page([week(rows=[row(_cell("Physik", "08:00-09:30"))])])
    assert extract(html, "free_text").events[0].title == "Physik"


def test_exam_with_subject_is_kept():
    """Only the bare word 'Klausur' is a placeholder."""
    html = page([week(rows=[row(_cell("Klausur Mathematik", "Mo 04.03.24 08:00-10:00"))])])
    assert extract(html, DetailFormat.FREE_TEXT).events[0].title == "Klausur Mathematik"


def test_missing_info_table():
    cell = (
        '<td class="week_block"><a href="#"><div><strong>Vorlesung</strong></div>'
        "<div>08:00-09:00</div></a></td>"
    )
    with pytest.raises(MissingAnchor, match="info table"):
        extract(page([week(rows=[row(cell)])]), DetailFormat.FREE_TEXT)


def test_online_format_location():
    """Online lectures are placed "Online" whatever resources they list."""
    cell = _cell("Datenbanken", "08:00-09:30", "Online-Format", resources=("TINF22B",))
    ev = extract(page([week(rows=[row(cell)])]), DetailFormat.FREE_TEXT).events[0]
    assert ev.title == "Datenbanken"
    assert ev.location == "Online"


def test_exam_type_is_kept():
    cell = _cell("Klausur Mathematik", "08:00-10:00", "Klausur", resources=("Aula",))
    ev = extract(page([week(rows=[row(cell)])]), DetailFormat.FREE_TEXT).events[0]
    assert ev.location == "Aula"


@pytest.mark.parametrize("event_type", ["Sonstiges", "Raum", "Sprechstunde"])
def test_other_event_types_are_skipped(event_type):
    cells = [_cell("Beratung", "08:00-09:00", event_type), _cell("Physik", "10:00-11:00")]
    events = extract(page([week(rows=[row(*cells)])]), DetailFormat.FREE_TEXT).events
    assert [e.title for e in events] == ["Physik"]


def test_missing_event_type():
    cell = (
        '<td class="week_block"><a href="#"><div>08:00-09:00</div></a>'
        '<table class="infotable"><tr><td>Name:</td><td>Physik</td></tr></table></td>'
    )
    with pytest.raises(MissingAnchor, match="event type"):
        extract(page([week(rows=[row(cell)])]), DetailFormat.FREE_TEXT)


def test_malformed_time_line():
    html = page([week(rows=[row(_cell("Physik", "ganztägig"))])])
    with pytest.raises(MalformedTime, match="ganztägig"):
        extract(html, DetailFormat.FREE_TEXT)


def test_anchor_format_rejects_free_text_page():
    """The default format does not guess: a free-text page fails."""
    with pytest.raises(IncompleteDetail):
        extract(FREE_TEXT_HTML)
