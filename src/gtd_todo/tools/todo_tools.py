"""
Todo tool handlers.

Core logic lives in handle_* functions (return dicts).
MCP wrappers in register_todo_tools() serialize to JSON strings.

Handlers never prompt. Anything that needs confirmation on the command line
(deleting a task) takes the confirmation as an argument instead.
"""

import functools
import json
import logging
from datetime import date
from typing import Optional

from mcp.server.fastmcp import FastMCP

from gtd_todo.errors import InvalidDate, TodoError, UnrecognizedToken, ValidationError
from gtd_todo.models.view import DisplayEntry, ViewMode
from gtd_todo.parsers.todo_parser import (
    build_task,
    complete_task,
    make_added_task,
    make_inbox_item,
    normalize_priority,
    parse_line,
    serialize,
)
from gtd_todo.store.display import (
    INBOX_HINT,
    LIST_ALL_HINT,
    build_view,
    filter_view,
    inbox_view,
    parse_task_number,
    resolve,
)
from gtd_todo.utils.dates import check_due_date, due_status, resolve_due_date
from gtd_todo.workflow.inbox import Choice, InboxWorkflow, parse_choice

log = logging.getLogger(__name__)

DUE_WINDOWS = {"today": "today", "t": "today", "overdue": "overdue", "o": "overdue"}


def _entry_to_dict(entry: DisplayEntry, today: Optional[date] = None) -> dict:
    """Serialize a DisplayEntry to a JSON-serializable dict."""
    task = entry.task
    d = {
        "number": entry.number,
        "line_index": entry.line_index,
        "line": entry.raw,
        "description": task.description,
        "completed": task.completed,
        "completion_date": task.completion_date,
        "priority": task.priority,
        "creation_date": task.creation_date,
        "projects": sorted(task.projects),
        "contexts": sorted(task.contexts),
        "due": task.due_date,
        "inbox": task.is_inbox,
    }
    if today is not None:
        d["due_status"] = due_status(task.due_date, today)
    return d


def _reports_errors(fn):
    """Turn TodoError into the ``{"error": ...}`` result shape."""
    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except TodoError as e:
            log.debug("%s failed: %s", fn.__name__, e.message)
            return e.to_dict()
    return wrapper


# ---------------------------------------------------------------------------
# Handler functions (return dicts, shared by MCP tools and REST API)
# ---------------------------------------------------------------------------


@_reports_errors
def handle_list(
    store,
    *,
    view: str = "actionable",
    filter: Optional[str] = None,
    today: Optional[date] = None,
) -> dict:
    today = today or date.today()
    try:
        mode = ViewMode(view)
    except ValueError:
        raise ValidationError(
            f"Unknown view '{view}'", hint="Use one of: actionable, all, completed."
        ) from None

    lines = store.read_lines()
    entries = filter_view(build_view(lines, mode), filter)
    return {
        "view": mode.value,
        "tasks": [_entry_to_dict(e, today) for e in entries],
        "total": len(entries),
        "inbox_pending": len(inbox_view(lines)),
    }


@_reports_errors
def handle_inbox(store) -> dict:
    items = inbox_view(store.read_lines())
    return {
        "items": [dict(_entry_to_dict(e), text=e.task.inbox_text) for e in items],
        "total": len(items),
    }


@_reports_errors
def handle_capture(store, *, text: str, today: Optional[date] = None) -> dict:
    text = (text or "").strip()
    if not text:
        raise ValidationError("Nothing to capture: text is empty")
    line = serialize(make_inbox_item(text, today or date.today()))
    index = store.append(line)
    log.debug("Captured line %d", index)
    return {"captured": line, "line_index": index}


@_reports_errors
def handle_add(
    store,
    *,
    text: str,
    priority: Optional[str] = None,
    project: Optional[str] = None,
    context: Optional[str] = None,
    due: Optional[str] = None,
    today: Optional[date] = None,
) -> dict:
    today = today or date.today()
    text = (text or "").strip()
    if not text:
        raise ValidationError("Nothing to add: text is empty")

    task = make_added_task(text, today)
    if priority or project or context or due:
        try:
            task = build_task(
                task.description,
                creation_date=task.creation_date,
                priority=priority or task.priority,
                project=project,
                context=context,
                due=resolve_due_date(due, today),
            )
        except ValueError as e:
            raise ValidationError(str(e)) from None

    line = serialize(task)
    index = store.append(line)
    log.debug("Added line %d", index)
    return {"added": line, "line_index": index}


@_reports_errors
def handle_done(store, *, number, today: Optional[date] = None) -> dict:
    today = today or date.today()
    number = parse_task_number(number)

    with store.transaction() as tx:
        entry = resolve(build_view(tx.lines, ViewMode.ACTIONABLE), number)
        completed = serialize(complete_task(parse_line(entry.raw), today))
        tx.replace(entry.line_index, completed, expected=entry.raw)

    log.debug("Completed line %d", entry.line_index)
    return {"number": number, "was": entry.raw, "completed": completed}


@_reports_errors
def handle_delete(
    store,
    *,
    number,
    expected: Optional[str] = None,
    confirm: bool = False,
) -> dict:
    number = parse_task_number(number)
    if expected is None and not confirm:
        raise ValidationError(
            "Deletion not confirmed",
            hint="Pass the task's current line as 'expected', or confirm=true.",
        )

    with store.transaction() as tx:
        entry = resolve(build_view(tx.lines, ViewMode.ALL), number, hint=LIST_ALL_HINT)
        tx.delete(entry.line_index, expected=entry.raw if expected is None else expected)

    log.debug("Deleted line %d", entry.line_index)
    return {"number": number, "deleted": entry.raw}


@_reports_errors
def handle_process(
    store,
    *,
    number,
    action: str,
    priority: Optional[str] = None,
    project: Optional[str] = None,
    context: Optional[str] = None,
    due: Optional[str] = None,
    today: Optional[date] = None,
) -> dict:
    today = today or date.today()
    number = parse_task_number(number)
    choice = parse_choice(action or "")
    if choice is None or choice is Choice.QUIT:
        raise ValidationError(f"Unknown action '{action}'", hint="Use one of: a, d, s.")

    workflow = InboxWorkflow(store, console=None, ask=None, today=today)
    entry = resolve(workflow.items(), number, hint=INBOX_HINT, label="Inbox item")

    if choice is Choice.DELETE:
        workflow.delete(entry)
        return {"action": "delete", "deleted": entry.raw}
    if choice is Choice.SKIP:
        item = workflow.skip(entry)
        return {"action": "skip", "requeued": serialize(item)}

    # Bad metadata is dropped with a warning, as in the interactive review
    warnings = []
    try:
        priority = normalize_priority(priority)
    except ValueError as e:
        warnings.append(f"{e}, ignoring")
        priority = None
    try:
        due = resolve_due_date(due, today)
    except (InvalidDate, UnrecognizedToken) as e:
        warnings.append(f"{e.message}, ignoring")
        due = None

    task = build_task(
        entry.task.inbox_text,
        creation_date=today.isoformat(),
        priority=priority,
        project=project,
        context=context,
        due=due,
    )
    workflow.commit_actionable(entry, task)
    return {
        "action": "actionable",
        "was": entry.raw,
        "task": serialize(task),
        "warnings": warnings,
    }


@_reports_errors
def handle_due(store, *, window: Optional[str] = None, today: Optional[date] = None) -> dict:
    today = today or date.today()
    key = DUE_WINDOWS.get((window or "").lower())

    lines = store.read_lines()
    actionable = build_view(lines, ViewMode.ACTIONABLE)
    tasks = []
    for entry in build_view(lines, ViewMode.ALL):
        if not check_due_date(entry.task.due_date, key, today):
            continue
        d = _entry_to_dict(entry, today)
        # Numbers match the actionable list; inbox items have none
        listed = actionable.find_line(entry.line_index)
        d["number"] = listed.number if listed is not None else None
        tasks.append(d)
    return {"window": key or "all", "tasks": tasks, "total": len(tasks)}


@_reports_errors
def handle_completed(store) -> dict:
    view = build_view(store.read_lines(), ViewMode.COMPLETED)
    return {"tasks": [_entry_to_dict(e) for e in view], "total": len(view)}


# ---------------------------------------------------------------------------
# MCP tool registration (thin wrappers)
# ---------------------------------------------------------------------------


def register_todo_tools(mcp: FastMCP, store) -> None:
    """Register all todo MCP tools onto the FastMCP instance."""

    @mcp.tool()
    def todo_list(view: str = "actionable", filter: Optional[str] = None) -> str:
        """
        List tasks in display order.

        Prioritized tasks come first (A..Z), then unprioritized tasks in file
        order. The returned numbers are the ones todo_done and todo_delete
        accept: todo_done uses the "actionable" numbering, todo_delete uses
        the "all" numbering.

        Args:
            view: "actionable" (default, excludes inbox), "all" (includes
                  inbox items) or "completed" (most recent first)
            filter: Case-insensitive substring filter, e.g. "+Health".
                    Filtered tasks keep their unfiltered numbers.

        Returns:
            JSON object with tasks, total and inbox_pending
        """
        return json.dumps(handle_list(store, view=view, filter=filter))

    @mcp.tool()
    def todo_inbox() -> str:
        """
        List unprocessed inbox items, numbered 1..N.

        Returns:
            JSON object with items and total
        """
        return json.dumps(handle_inbox(store))

    @mcp.tool()
    def todo_capture(text: str) -> str:
        """
        Capture an idea into the inbox (``YYYY-MM-DD text status:inbox``).

        Args:
            text: Free text of the idea

        Returns:
            JSON object with the captured line
        """
        return json.dumps(handle_capture(store, text=text))

    @mcp.tool()
    def todo_add(
        text: str,
        priority: Optional[str] = None,
        project: Optional[str] = None,
        context: Optional[str] = None,
        due: Optional[str] = None,
    ) -> str:
        """
        Add a task directly, skipping the inbox.

        Args:
            text: Task text; a leading "(A)" sets the priority
            priority: Single letter A-Z
            project: Project name, with or without "+"
            context: Context name, with or without "@"
            due: YYYY-MM-DD, weekday name, "today" or "tomorrow"

        Returns:
            JSON object with the added line
        """
        return json.dumps(
            handle_add(store, text=text, priority=priority, project=project, context=context, due=due)
        )

    @mcp.tool()
    def todo_done(number: int) -> str:
        """
        Mark task N of the actionable list as complete.

        Args:
            number: Task number as shown by todo_list (view "actionable")

        Returns:
            JSON object with the completed line
        """
        return json.dumps(handle_done(store, number=number))

    @mcp.tool()
    def todo_delete(number: int, expected: Optional[str] = None, confirm: bool = False) -> str:
        """
        Permanently delete task N of the "all" view.

        One of expected or confirm is required. With expected, the delete
        only happens if task N's line still reads exactly that.

        Args:
            number: Task number as shown by todo_list (view "all")
            expected: The task's current line, as returned in "line"
            confirm: Delete without checking the line text

        Returns:
            JSON object with the deleted line
        """
        return json.dumps(handle_delete(store, number=number, expected=expected, confirm=confirm))

    @mcp.tool()
    def todo_process(
        number: int,
        action: str,
        priority: Optional[str] = None,
        project: Optional[str] = None,
        context: Optional[str] = None,
        due: Optional[str] = None,
    ) -> str:
        """
        Process one inbox item.

        Args:
            number: Inbox item number as shown by todo_inbox
            action: "a" make actionable, "d" delete, "s" skip (requeue at end)
            priority: For "a": single letter A-Z
            project: For "a": project name
            context: For "a": context name
            due: For "a": YYYY-MM-DD, weekday name, "today" or "tomorrow"

        Returns:
            JSON object describing the transition. For "a", an invalid
            priority or due date is dropped and reported in "warnings".
        """
        return json.dumps(
            handle_process(
                store,
                number=number,
                action=action,
                priority=priority,
                project=project,
                context=context,
                due=due,
            )
        )

    @mcp.tool()
    def todo_due(window: Optional[str] = None) -> str:
        """
        Open tasks that have a due date.

        Args:
            window: None for all, "today" (or "t"), "overdue" (or "o")

        Returns:
            JSON object with tasks; inbox items have number null
        """
        return json.dumps(handle_due(store, window=window))

    @mcp.tool()
    def todo_completed() -> str:
        """
        Completed tasks, most recent completion first.

        Returns:
            JSON object with tasks and total
        """
        return json.dumps(handle_completed(store))
