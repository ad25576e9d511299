"""Error types raised by the task store engine.

Every error carries a user-facing message. They are only caught at the
command boundary (CLI, tool handlers, API routes).
"""

from __future__ import annotations

from typing import Optional


class TodoError(Exception):
    """Base class for all gtd-todo errors."""

    def __init__(self, message: str, hint: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint

    def to_dict(self) -> dict:
        d = {"error": self.message, "code": type(self).__name__}
        if self.hint:
            d["hint"] = self.hint
        return d


class ValidationError(TodoError):
    """Bad user input: task number, priority or date token."""


class InvalidDate(ValidationError):
    """A YYYY-MM-DD token that is not a real calendar date."""


class UnrecognizedToken(ValidationError):
    """A due date token that is neither a date nor a known keyword."""


class NotFound(TodoError):
    """A task number that resolves to nothing in the current view."""


class IndexOutOfRange(NotFound):
    """A physical line index outside the store."""


class StoreUnavailable(TodoError):
    """The backing file could not be created, locked, read or written."""
