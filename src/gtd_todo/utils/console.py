"""
Terminal output and prompt helpers built on rich.

Colors are dropped automatically when stdout is not a terminal. Task text is
always markup-escaped before printing because todo lines may contain square
brackets.
"""

import sys
from datetime import date
from typing import Callable, Optional, TextIO

from rich.console import Console
from rich.markup import escape

from gtd_todo.models.view import DisplayEntry
from gtd_todo.utils.dates import due_status

SEPARATOR = "━" * 40
RULE = "─" * 53

# Prompt collaborator: takes the prompt text, returns the user's line
Prompter = Callable[[str], str]


def make_console(file: Optional[TextIO] = None, stderr: bool = False) -> Console:
    return Console(file=file, stderr=stderr, highlight=False, soft_wrap=True)


def console_prompter(console: Console) -> Prompter:
    """Prompt through the console (raises EOFError on end of input)."""
    def ask(prompt: str) -> str:
        return console.input(escape(prompt))
    return ask


def render_line(raw: str, today: date, due: Optional[str]) -> str:
    """Markup for one task line, highlighting overdue / due-today tasks."""
    status = due_status(due, today)
    text = escape(raw)
    if status == "overdue":
        return f"[red]{text}[/red] ! OVERDUE"
    if status == "today":
        return f"[yellow]{text}[/yellow] \\[TODAY]"
    return text


def render_entry(entry: DisplayEntry, today: date) -> str:
    """``NN. line`` with due highlighting."""
    return f"{entry.number:2d}. {render_line(entry.raw, today, entry.task.due_date)}"


def print_error(console: Console, message: str, hint: Optional[str] = None) -> None:
    console.print(f"[red]{escape(message)}[/red]")
    if hint:
        console.print(f"[cyan]{escape(hint)}[/cyan]")


def default_console() -> Console:
    return make_console(sys.stdout)
