"""
Due date resolution utilities.

Pure functions, no I/O. ``today`` is always passed in so callers (and tests)
control the reference date.
"""

import re
from datetime import date, datetime, timedelta
from typing import Optional

from gtd_todo.errors import InvalidDate, UnrecognizedToken

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# date.weekday() numbering: Monday == 0
WEEKDAYS = {
    "mon": 0, "monday": 0,
    "tue": 1, "tuesday": 1,
    "wed": 2, "wednesday": 2,
    "thu": 3, "thursday": 3,
    "fri": 4, "friday": 4,
    "sat": 5, "saturday": 5,
    "sun": 6, "sunday": 6,
}

TODAY_WORDS = ("today", "tod")
TOMORROW_WORDS = ("tomorrow", "tom")


def is_valid_iso_date(value: str) -> bool:
    """True if value is a YYYY-MM-DD string naming a real calendar date."""
    if not value or not ISO_DATE_RE.match(value):
        return False
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return False
    return True


def resolve_due_date(token: Optional[str], today: date) -> Optional[str]:
    """
    Resolve a due date token into an ISO 8601 date string.

    Supports:
    - ISO 8601: "2026-02-15" (validated, returned unchanged)
    - Weekday names: "mon".."sun", "monday".."sunday" -> next occurrence
      strictly after today
    - "today"/"tod", "tomorrow"/"tom"

    Args:
        token: User supplied token (case-insensitive)
        today: Reference date

    Returns:
        ISO date string, or None for an empty token

    Raises:
        InvalidDate: token looks like YYYY-MM-DD but is not a real date
        UnrecognizedToken: token matches none of the supported forms
    """
    if token is None:
        return None
    token = token.strip()
    if not token:
        return None

    if ISO_DATE_RE.match(token):
        if not is_valid_iso_date(token):
            raise InvalidDate(f"Invalid date '{token}'")
        return token

    word = token.lower()
    if word in TODAY_WORDS:
        return today.isoformat()
    if word in TOMORROW_WORDS:
        return (today + timedelta(days=1)).isoformat()

    if word in WEEKDAYS:
        days_ahead = (WEEKDAYS[word] - today.weekday()) % 7
        if days_ahead == 0:
            days_ahead = 7
        return (today + timedelta(days=days_ahead)).isoformat()

    raise UnrecognizedToken(f"Unrecognized date '{token}'")


def due_status(due: Optional[str], today: date) -> Optional[str]:
    """Return "overdue", "today" or None for a task's due date."""
    if not due:
        return None
    today_str = today.isoformat()
    # ISO strings compare chronologically
    if due < today_str:
        return "overdue"
    if due == today_str:
        return "today"
    return None


def check_due_date(due: Optional[str], window: Optional[str], today: date) -> bool:
    """
    Check whether a due date falls inside a listing window.

    Args:
        due: ISO due date (or None)
        window: "today", "overdue", or None/"all" for any due date
        today: Reference date

    Returns:
        True if the task belongs in the window
    """
    if not due:
        return False
    if window == "today":
        return due == today.isoformat()
    if window == "overdue":
        return due < today.isoformat()
    return True
