"""
Parser for todo.txt lines.

Main API:
    parse_line(line)  -> TaskLine
    serialize(task)   -> str

Line grammar (prefix tokens are positional, tags float freely):

    [x YYYY-MM-DD ][(A) ][YYYY-MM-DD ]description [+project] [@context] [due:YYYY-MM-DD] [status:inbox]

Parsing never fails. Anything that does not fit the prefix grammar stays in
the description, so hand-edited files keep working. serialize() writes the
prefix back in fixed order, which makes parse_line(serialize(t)) == t.
"""

import re
from datetime import date
from typing import Iterable, List, Optional, Set, Tuple

from gtd_todo.models.task import INBOX_MARKER, TaskLine
from gtd_todo.utils.dates import is_valid_iso_date
from gtd_todo.utils.formatting import (
    format_context,
    format_due,
    format_inbox,
    format_priority,
    format_project,
)

COMPLETED_RE = re.compile(r"^x (?:(\d{4}-\d{2}-\d{2})(?: |$))?")
PRIORITY_RE = re.compile(r"^\(([A-Z])\)(?: |$)")
DATE_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})(?: |$)")
DUE_RE = re.compile(r"^due:(\d{4}-\d{2}-\d{2})$")
VALID_PRIORITY_RE = re.compile(r"^[A-Za-z]$")


# ---------------------------------------------------------------------------
# Tag scanning
# ---------------------------------------------------------------------------

def scan_tags(description: str) -> Tuple[Set[str], Set[str], Optional[str], bool]:
    """
    Extract tags from a description without removing them.

    Returns:
        (projects, contexts, due_date, is_inbox). The first ``due:`` token
        wins if a hand-edited line carries several.
    """
    projects: Set[str] = set()
    contexts: Set[str] = set()
    due_date: Optional[str] = None
    is_inbox = False

    for word in description.split():
        if len(word) > 1 and word[0] == "+":
            projects.add(word[1:])
        elif len(word) > 1 and word[0] == "@":
            contexts.add(word[1:])
        elif word == INBOX_MARKER:
            is_inbox = True
        elif due_date is None:
            m = DUE_RE.match(word)
            if m:
                due_date = m.group(1)

    return projects, contexts, due_date, is_inbox


def _tagged(description: str, **fields) -> TaskLine:
    projects, contexts, due_date, is_inbox = scan_tags(description)
    return TaskLine(
        description=description,
        projects=projects,
        contexts=contexts,
        due_date=due_date,
        is_inbox=is_inbox,
        **fields,
    )


# ---------------------------------------------------------------------------
# Line parsing / serialization
# ---------------------------------------------------------------------------

def parse_line(line: str) -> TaskLine:
    """
    Parse one physical line into a TaskLine.

    Args:
        line: Raw line; a trailing newline is ignored

    Returns:
        TaskLine. Malformed prefixes degrade to description text.
    """
    rest = line.rstrip("\r\n")
    completed = False
    completion_date = None
    priority = None
    creation_date = None

    m = COMPLETED_RE.match(rest)
    if m:
        completed = True
        completion_date = m.group(1)
        rest = rest[m.end():]

    m = PRIORITY_RE.match(rest)
    if m:
        priority = m.group(1)
        rest = rest[m.end():]

    m = DATE_RE.match(rest)
    if m and is_valid_iso_date(m.group(1)):
        creation_date = m.group(1)
        rest = rest[m.end():]

    return _tagged(
        rest,
        completed=completed,
        completion_date=completion_date,
        priority=priority,
        creation_date=creation_date,
    )


def serialize(task: TaskLine) -> str:
    """
    Render a TaskLine as a single todo.txt line (no trailing newline).

    Order: completion marker + date, priority, creation date, description.
    """
    parts: List[str] = []
    if task.completed:
        parts.append("x")
        if task.completion_date:
            parts.append(task.completion_date)
    if task.priority:
        parts.append(format_priority(task.priority))
    if task.creation_date:
        parts.append(task.creation_date)
    if task.description or not parts:
        parts.append(task.description)
    return " ".join(parts)


def is_blank(line: str) -> bool:
    """Blank lines are kept in the file but are never tasks."""
    return not line.strip()


def parse_lines(lines: Iterable[str]) -> List[Optional[TaskLine]]:
    """Parse every physical line; blank lines map to None."""
    return [None if is_blank(line) else parse_line(line) for line in lines]


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def normalize_priority(value: Optional[str]) -> Optional[str]:
    """
    Validate a user supplied priority.

    Returns:
        Uppercase letter, None for empty input

    Raises:
        ValueError: value is not a single letter A-Z
    """
    if value is None or not value.strip():
        return None
    value = value.strip()
    if not VALID_PRIORITY_RE.match(value):
        raise ValueError(f"Invalid priority '{value}' (must be A-Z)")
    return value.upper()


def _strip_words(text: str, drop) -> str:
    return " ".join(w for w in text.split() if not drop(w))


def build_task(
    text: str,
    *,
    creation_date: str,
    priority: Optional[str] = None,
    project: Optional[str] = None,
    context: Optional[str] = None,
    due: Optional[str] = None,
    inbox: bool = False,
) -> TaskLine:
    """
    Build a new open task from free text plus optional metadata.

    Tags are appended in the order project, context, due, inbox. Any inbox
    marker already in ``text`` is removed, and an existing ``due:`` token is
    replaced when a new due date is given, so neither is ever duplicated.
    """
    text = _strip_words(text, lambda w: w == INBOX_MARKER)
    if due:
        text = _strip_words(text, lambda w: DUE_RE.match(w) is not None)

    words = [text] if text else []
    for token in (format_project(project), format_context(context), format_due(due)):
        if token:
            words.append(token)
    if inbox:
        words.append(format_inbox())

    return _tagged(
        " ".join(words),
        priority=normalize_priority(priority),
        creation_date=creation_date,
    )


def make_inbox_item(text: str, today: date, priority: Optional[str] = None) -> TaskLine:
    """An inbox capture: ``[(P) ]today text status:inbox``."""
    return build_task(text, creation_date=today.isoformat(), priority=priority, inbox=True)


def make_added_task(text: str, today: date) -> TaskLine:
    """
    A task added directly (bypassing the inbox).

    A leading ``(A)`` in the text is honoured as priority; a creation date is
    added if the text does not already carry one.
    """
    task = parse_line(text.strip())
    if task.completed:
        # "x ..." typed by the user is just text for a new task
        task = parse_line(f"{today.isoformat()} {text.strip()}")
    if task.creation_date is None:
        task.creation_date = today.isoformat()
    return task


def complete_task(task: TaskLine, today: date) -> TaskLine:
    """
    Return the completed form of a task.

    The completion marker and date are prefixed, priority is dropped and the
    creation date and description are kept verbatim.
    """
    return TaskLine(
        description=task.description,
        completed=True,
        completion_date=today.isoformat(),
        priority=None,
        creation_date=task.creation_date,
        projects=set(task.projects),
        contexts=set(task.contexts),
        due_date=task.due_date,
        is_inbox=task.is_inbox,
    )
