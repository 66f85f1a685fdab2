"""Tests for the errors raised when a page cannot be read."""

import pytest

from pages import EMPTY, event_cell, page, row, week
from rapla_ics import (
    ExtractionError,
    IncompleteDetail,
    InvalidDate,
    MalformedNumber,
    MalformedTime,
    MissingAnchor,
    extract,
)


def test_missing_title():
    """Without a title there is no calendar at all."""
    with pytest.raises(MissingAnchor) as exc_info:
        extract(page([week(rows=[row(event_cell())])], title=None))
    assert exc_info.value.context == "title"
    assert exc_info.value.week_index is None


def test_missing_selected_year():
    with pytest.raises(MissingAnchor, match="selected year"):
        extract(page([], year=None))


def test_selected_year_not_a_number():
    with pytest.raises(MalformedNumber, match="selected year"):
        extract(page([], year="next"))


def test_missing_week_number():
    """The failing week is reported by its index."""
    html = page([week(10, "Mo 04.03."), week(None, "Mo 11.03.")])
    with pytest.raises(MissingAnchor) as exc_info:
        extract(html)
    assert exc_info.value.context == "week number"
    assert exc_info.value.week_index == 1
    assert "(week 1)" in str(exc_info.value)


def test_week_number_single_token():
    with pytest.raises(MalformedNumber, match="week number"):
        extract(page([week(number_text="KW")]))


def test_week_number_not_a_number():
    with pytest.raises(MalformedNumber, match="week number"):
        extract(page([week(number_text="KW x")]))


def test_week_number_negative():
    with pytest.raises(MalformedNumber, match="week number"):
        extract(page([week(number_text="KW -3")]))


def test_missing_week_start():
    with pytest.raises(MissingAnchor, match="week start date"):
        extract(page([week(start=None)]))


def test_week_start_without_date_token():
    with pytest.raises(MalformedNumber, match="week start date"):
        extract(page([week(start="Mo")]))


def test_week_start_day_not_a_number():
    with pytest.raises(MalformedNumber, match="week start day"):
        extract(page([week(start="Mo xx.03.")]))


def test_invalid_week_start_date():
    with pytest.raises(InvalidDate, match="31.02.2024"):
        extract(page([week(start="Mo 31.02.")]))


def test_event_without_anchor():
    cell = '<td class="week_block">Lecture</td>'
    with pytest.raises(MissingAnchor, match="event anchor"):
        extract(page([week(rows=[row(cell)])]))


def test_event_with_single_line():
    with pytest.raises(IncompleteDetail):
        extract(page([week(rows=[row(event_cell(anchor="10:00&nbsp;-11:30"))])]))


def test_event_without_time_separator():
    with pytest.raises(MissingAnchor, match="time range separator"):
        extract(page([week(rows=[row(event_cell(times="10:00-11:30"))])]))


def test_event_with_malformed_time():
    with pytest.raises(MalformedTime, match="1O:00"):
        extract(page([week(rows=[row(event_cell(times="1O:00&nbsp;-11:30"))])]))


def test_one_bad_event_fails_whole_page():
    """A single broken event aborts the extraction even after good ones."""
    rows = [row(event_cell()), row(EMPTY, event_cell(times="25:00&nbsp;-26:00"))]
    with pytest.raises(ExtractionError):
        extract(page([week(rows=rows)]))


def test_errors_share_base_class():
    for cls in (MissingAnchor, MalformedNumber, InvalidDate, MalformedTime, IncompleteDetail):
        assert issubclass(cls, ExtractionError)
