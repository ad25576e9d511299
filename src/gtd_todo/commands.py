"""
Command handlers for the ``t`` CLI.

Each handler takes the parsed argparse namespace, which also carries the
collaborators set up by cli.main(): ``store``, ``console``, ``ask`` and
``today``. Handlers return an exit code and raise TodoError subclasses for
anything the user must be told about; cli.main() turns those into messages.
"""

import logging

from rich.markup import escape

from gtd_todo.errors import ValidationError
from gtd_todo.models.view import ViewMode
from gtd_todo.parsers.todo_parser import complete_task, make_added_task, parse_line, serialize
from gtd_todo.store.display import (
    LIST_ALL_HINT,
    build_view,
    filter_view,
    inbox_view,
    parse_task_number,
    resolve,
)
from gtd_todo.utils.console import RULE, SEPARATOR, render_entry
from gtd_todo.utils.dates import check_due_date
from gtd_todo.workflow.inbox import InboxWorkflow

log = logging.getLogger(__name__)

DUE_WINDOWS = {
    "today": "today",
    "t": "today",
    "overdue": "overdue",
    "o": "overdue",
}


def _workflow(args) -> InboxWorkflow:
    return InboxWorkflow(args.store, args.console, args.ask, args.today)


def _number_arg(value, usage: str, hint: str = None) -> int:
    try:
        return parse_task_number(value)
    except ValidationError:
        raise ValidationError(usage, hint=hint) from None


# --- inbox ---

def cmd_inbox(args) -> int:
    """List the inbox, or capture ``args.text`` into it."""
    console = args.console
    text = " ".join(args.text or []).strip()

    if text:
        _workflow(args).capture(text)
        console.print(f"[green]* Added to inbox:[/green] {escape(text)}")
        return 0

    items = inbox_view(args.store.read_lines())
    if not len(items):
        console.print("[yellow]Inbox is empty[/yellow]")
        console.print("Use 't \"your idea\"' to capture something.")
        return 0

    console.print(f"[cyan]Inbox ({len(items)} items)[/cyan]")
    console.print(SEPARATOR)
    for entry in items:
        console.print(f"{entry.number:2d}. {escape(entry.task.inbox_text)}")
    console.print("\nRun [bold]t process[/bold] to review these items.")
    return 0


# --- list ---

def cmd_list(args) -> int:
    """Show actionable tasks (or all open tasks), optionally filtered."""
    console = args.console
    words = list(args.words or [])
    show_all = bool(getattr(args, "show_all", False))
    if words and words[0] == "all":
        show_all = True
        words = words[1:]
    term = " ".join(words).strip() or None

    console.print("[cyan]Todo List[/cyan]")
    console.print(SEPARATOR)

    lines = args.store.read_lines()
    if not any(line.strip() for line in lines):
        console.print("[yellow]No tasks yet. Add one with 't \"your task\"'[/yellow]")
        return 0

    view = build_view(lines, ViewMode.ALL if show_all else ViewMode.ACTIONABLE)
    entries = filter_view(view, term)

    if not entries:
        console.print("[yellow]No tasks found.[/yellow]")
    else:
        prioritized = [e for e in entries if e.task.has_priority]
        other = [e for e in entries if not e.task.has_priority]
        if prioritized:
            console.print("\n[bold]Priority Tasks:[/bold]")
            for entry in prioritized:
                console.print(render_entry(entry, args.today))
        if other:
            console.print("\n[bold]Other Tasks:[/bold]")
            for entry in other:
                console.print(render_entry(entry, args.today))
        console.print(f"\n[cyan]Total: {len(entries)} task(s)[/cyan]")

    if not show_all:
        pending = len(inbox_view(lines))
        if pending:
            console.print(f"[yellow]{pending} item(s) in inbox awaiting processing[/yellow]")
    return 0


# --- add ---

def cmd_add(args) -> int:
    """Add a task directly, skipping the inbox."""
    text = " ".join(args.text or []).strip()
    if not text:
        raise ValidationError('Usage: t add "task" [@context] [+project]')
    line = serialize(make_added_task(text, args.today))
    args.store.append(line)
    args.console.print(f"[green]* Added:[/green] {escape(line)}")
    return 0


# --- done ---

def _show_completed(args) -> int:
    console = args.console
    console.print("[cyan]Completed Tasks[/cyan]")
    console.print(SEPARATOR)

    view = build_view(args.store.read_lines(), ViewMode.COMPLETED)
    if not len(view):
        console.print("[yellow]No completed tasks yet.[/yellow]")
        return 0

    for entry in view:
        shown = entry.raw[2:] if entry.raw.startswith("x ") else entry.raw
        console.print(f"{entry.number:2d}. \\[x] {escape(shown)}")
    console.print(f"\n[cyan]Total: {len(view)} completed[/cyan]")
    return 0


def cmd_done(args) -> int:
    """Without a number: completed tasks. With one: complete that task."""
    if args.number is None:
        return _show_completed(args)

    number = _number_arg(
        args.number,
        "Usage: t done <task_number> (must be a positive number)",
        hint="Or run 't done' with no arguments to see completed tasks.",
    )

    # Resolve and rewrite under one lock so the number cannot go stale
    with args.store.transaction() as tx:
        entry = resolve(build_view(tx.lines, ViewMode.ACTIONABLE), number)
        completed = serialize(complete_task(parse_line(entry.raw), args.today))
        tx.replace(entry.line_index, completed, expected=entry.raw)

    log.debug("Completed line %d", entry.line_index)
    args.console.print(f"[green]\\[x] Completed:[/green] {escape(entry.raw)}")
    return 0


# --- delete ---

def cmd_delete(args) -> int:
    """Delete task N of the ``list all`` view after confirmation."""
    console = args.console
    number = _number_arg(args.number, "Usage: t xx <task_number> (must be a positive number)")

    view = build_view(args.store.read_lines(), ViewMode.ALL)
    entry = resolve(view, number, hint=LIST_ALL_HINT)

    console.print(f"[yellow]Delete:[/yellow] {escape(entry.raw)}")
    try:
        confirm = args.ask("Are you sure? (y/N): ")
    except EOFError:
        confirm = ""
    if confirm.strip().lower() != "y":
        console.print("[blue]Cancelled.[/blue]")
        return 0

    args.store.delete_line(entry.line_index, expected=entry.raw)
    console.print(f"[red]✗ Deleted:[/red] {escape(entry.raw)}")
    return 0


# --- process ---

def cmd_process(args) -> int:
    """Interactive inbox review: every item, or just item N."""
    workflow = _workflow(args)
    if args.number is None:
        workflow.process_all()
        return 0
    number = _number_arg(args.number, "Usage: t process [inbox_number] (must be a positive number)")
    workflow.process_one(number)
    return 0


# --- due ---

def cmd_due(args) -> int:
    """Open tasks with due dates: all, due today, or overdue."""
    console = args.console
    window = DUE_WINDOWS.get((args.window or "").lower())
    today = args.today

    console.print("[cyan]Tasks by Due Date[/cyan]")
    console.print(SEPARATOR)
    if window == "today":
        console.print(f"\n[bold]Due Today ({today.isoformat()}):[/bold]")
    elif window == "overdue":
        console.print("\n[bold]Overdue:[/bold]")
    else:
        console.print("\n[bold]All with due dates:[/bold]")

    lines = args.store.read_lines()
    actionable = build_view(lines, ViewMode.ACTIONABLE)
    matches = [e for e in build_view(lines, ViewMode.ALL) if check_due_date(e.task.due_date, window, today)]
    if not matches:
        console.print("  (none)")
        return 0

    for entry in matches:
        # Numbers match 't list' so they can be passed to 't done'
        listed = actionable.find_line(entry.line_index)
        if listed is not None:
            console.print(render_entry(listed, today))
        else:
            console.print(f"  - {escape(entry.raw)} (inbox)")
    return 0


# --- help ---

HELP_ROWS = [
    ('t "idea"', "Quick capture to inbox (default)"),
    ('t add "task"', "Add task directly (skip inbox)"),
    ("t inbox / t i", "List inbox items"),
    ("t process / t p", "Interactive inbox review"),
    ("t process 2", "Process specific inbox item"),
    ("t list / t l", "Show actionable tasks (excludes inbox)"),
    ("t list all / t la", "Show all including inbox"),
    ("t list +Project", "Filter by project"),
    ("t done / t d", "Show completed tasks"),
    ("t done N / t d N", "Mark task #N as complete"),
    ("t xx N", "Delete task #N permanently"),
    ("t due / t du", "Show tasks with due dates"),
    ("t due today / t du t", "Show tasks due today"),
    ("t due overdue / t du o", "Show overdue tasks"),
    ("t help / t h", "Show this help"),
]


def cmd_help(args) -> int:
    console = args.console
    console.print("[bold]Todo.txt GTD Manager[/bold]\n")
    console.print("[cyan]Command                 Description[/cyan]")
    console.print(RULE)
    for usage, description in HELP_ROWS:
        console.print(f"{escape(usage):<24}{description}")
    return 0
