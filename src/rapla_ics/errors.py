"""Exceptions raised when a Rapla page cannot be turned into a calendar."""

from __future__ import annotations


class ExtractionError(Exception):
    """Base class for every extraction failure.

    :param context: What was being read when the failure happened.
    :param week_index: Zero-based index of the week table, if known.
    """

    def __init__(self, context: str, week_index: int | None = None) -> None:
        self.context = context
        self.week_index = week_index
        super().__init__(str(self))

    def _describe(self) -> str:
        return self.context

    def __str__(self) -> str:
        msg = self._describe()
        if self.week_index is not None:
            msg = f"{msg} (week {self.week_index})"
        return msg


class MissingAnchor(ExtractionError):
    """A required element (title, year control, week header...) is absent."""

    def _describe(self) -> str:
        return f"missing anchor: {self.context}"


class MalformedNumber(ExtractionError):
    """Text expected to be an integer did not parse as one."""

    def _describe(self) -> str:
        return f"malformed number: {self.context}"


class InvalidDate(ExtractionError):
    """Day, month and year do not form a real calendar date."""

    def _describe(self) -> str:
        return f"invalid date: {self.context}"


class MalformedTime(ExtractionError):
    """A time token is not in ``HH:MM`` form."""

    def _describe(self) -> str:
        return f"malformed time: {self.context}"


class IncompleteDetail(ExtractionError):
    """An event cell has fewer parts than required."""

    def _describe(self) -> str:
        return f"incomplete event detail: {self.context}"
