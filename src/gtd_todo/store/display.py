"""
Display order engine.

Maps between the physical line order of todo.txt and the numbered list a
user sees. Views are rebuilt from a fresh snapshot of the lines on every
call; nothing here is cached.

Ordering for open views:
1. drop completed lines
2. drop inbox items (unless mode is ALL)
3. prioritized tasks sorted A..Z, equal priorities in physical order
4. unprioritized tasks in physical order
5. number 1..N

The completed view lists the most recent completion date first; equal dates
come out last-in-file first.
"""

import re
from typing import List, Optional, Sequence, Union

from gtd_todo.errors import NotFound, ValidationError
from gtd_todo.models.view import DisplayEntry, DisplayList, ViewMode
from gtd_todo.parsers.todo_parser import parse_lines

LIST_HINT = "Run 't list' to see available tasks."
LIST_ALL_HINT = "Run 't list all' to see all tasks."
INBOX_HINT = "Run 't inbox' to see inbox items."
TASK_NUMBER_RE = re.compile(r"^[1-9][0-9]*$")


def _number(mode: ViewMode, ordered: List[tuple]) -> DisplayList:
    entries = [
        DisplayEntry(number=n, line_index=idx, raw=raw, task=task)
        for n, (idx, raw, task) in enumerate(ordered, start=1)
    ]
    return DisplayList(mode=mode, entries=entries)


def build_view(lines: Sequence[str], mode: Union[ViewMode, str] = ViewMode.ACTIONABLE) -> DisplayList:
    """
    Compute the ordered display list for one view of the store.

    Args:
        lines: Physical lines of the store, in file order
        mode: ACTIONABLE, ALL or COMPLETED

    Returns:
        DisplayList numbered from 1
    """
    mode = ViewMode(mode)
    parsed = parse_lines(lines)
    rows = [
        (idx, lines[idx].rstrip("\r\n"), task)
        for idx, task in enumerate(parsed)
        if task is not None
    ]

    if mode is ViewMode.COMPLETED:
        done = [r for r in rows if r[2].completed]
        done.sort(key=lambda r: (r[2].completion_date or "", r[0]), reverse=True)
        return _number(mode, done)

    rows = [r for r in rows if not r[2].completed]
    if mode is not ViewMode.ALL:
        rows = [r for r in rows if not r[2].is_inbox]

    # sorted() is stable, so equal priorities keep physical order
    prioritized = sorted((r for r in rows if r[2].has_priority), key=lambda r: r[2].priority)
    unprioritized = [r for r in rows if not r[2].has_priority]
    return _number(mode, prioritized + unprioritized)


def inbox_view(lines: Sequence[str]) -> DisplayList:
    """Inbox items in display order, renumbered 1..N."""
    view = build_view(lines, ViewMode.ALL)
    ordered = [(e.line_index, e.raw, e.task) for e in view if e.task.is_inbox]
    return _number(ViewMode.ALL, ordered)


def filter_view(view: DisplayList, term: Optional[str]) -> List[DisplayEntry]:
    """
    Case-insensitive substring filter over a view.

    Entries keep the numbers of the unfiltered view, so a number read off a
    filtered listing still resolves to the same task.
    """
    if not term:
        return list(view.entries)
    needle = term.lower()
    return [e for e in view if needle in e.raw.lower()]


def parse_task_number(value) -> int:
    """
    Validate a user supplied task number.

    Raises:
        ValidationError: not a positive integer
    """
    if isinstance(value, bool):
        raise ValidationError(f"Invalid task number '{value}' (must be a positive number)")
    if isinstance(value, int):
        number = value
    else:
        text = str(value).strip()
        if not TASK_NUMBER_RE.match(text):
            raise ValidationError(f"Invalid task number '{value}' (must be a positive number)")
        number = int(text)
    if number < 1:
        raise ValidationError(f"Invalid task number '{value}' (must be a positive number)")
    return number


def resolve(
    view: DisplayList, n: int, hint: Optional[str] = None, label: str = "Task"
) -> DisplayEntry:
    """
    Resolve a 1-based display number to its entry.

    Raises:
        NotFound: n is not within [1, len(view)]
    """
    if isinstance(n, bool) or not isinstance(n, int) or n < 1 or n > len(view):
        if hint is None:
            hint = LIST_ALL_HINT if view.mode is ViewMode.ALL else LIST_HINT
        raise NotFound(f"{label} #{n} not found.", hint=hint)
    return view.entries[n - 1]


def resolve_line(lines: Sequence[str], mode: Union[ViewMode, str], n: int) -> int:
    """Build the view for ``mode`` and return the physical index of task ``n``."""
    return resolve(build_view(lines, mode), n).line_index
