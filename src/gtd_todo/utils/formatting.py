"""
Canonical tag formatting for todo.txt lines.

This module is the single source of truth for how each tag token is written
into a task description. New tasks always carry their tags in the order
project, context, due, inbox.
"""

from typing import Optional

from gtd_todo.models.task import INBOX_MARKER

PROJECT_SIGIL = "+"
CONTEXT_SIGIL = "@"
DUE_KEY = "due:"


def format_project(value: Optional[str]) -> Optional[str]:
    """
    Render a project tag, adding the ``+`` sigil if the user left it off.

    Args:
        value: "Health" or "+Health" (empty/None means no project)

    Returns:
        "+Health", or None
    """
    if not value or not value.strip():
        return None
    value = value.strip()
    return value if value.startswith(PROJECT_SIGIL) else f"{PROJECT_SIGIL}{value}"


def format_context(value: Optional[str]) -> Optional[str]:
    """Render a context tag, adding the ``@`` sigil if missing."""
    if not value or not value.strip():
        return None
    value = value.strip()
    return value if value.startswith(CONTEXT_SIGIL) else f"{CONTEXT_SIGIL}{value}"


def format_due(value: Optional[str]) -> Optional[str]:
    """Render ``due:YYYY-MM-DD`` for a resolved due date."""
    if not value:
        return None
    return f"{DUE_KEY}{value}"


def format_priority(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return f"({value})"


def format_inbox() -> str:
    return INBOX_MARKER
