#!/usr/bin/env python3
"""
Unit tests for the command handlers (commands.py) and the CLI entry point.
"""

import io
import sys
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from gtd_todo.cli import main, route_argv
from gtd_todo.commands import (
    cmd_add,
    cmd_delete,
    cmd_done,
    cmd_due,
    cmd_help,
    cmd_inbox,
    cmd_list,
    cmd_process,
)
from gtd_todo.errors import NotFound, ValidationError
from gtd_todo.store.todo_store import TodoStore
from gtd_todo.utils.console import make_console

MONDAY = date(2024, 1, 15)


# --- test fixtures ---

class Args:
    """Minimal args namespace for testing CLI functions."""
    def __init__(self, **kwargs):
        for k, v in kwargs.items():
            setattr(self, k, v)


def _no_prompt(prompt):
    raise AssertionError(f"unexpected prompt: {prompt}")


def _make_env(tmp_path, content=""):
    """Returns (todo_file, make_args, output buffer)."""
    todo_file = tmp_path / "todo.txt"
    todo_file.write_text(content, encoding="utf-8")
    out = io.StringIO()
    store = TodoStore(todo_file)
    console = make_console(out)

    def make_args(ask=_no_prompt, **kwargs):
        return Args(store=store, console=console, ask=ask, today=MONDAY, **kwargs)

    return todo_file, make_args, out


def _answers(*answers):
    queue = list(answers)

    def ask(prompt):
        if not queue:
            raise EOFError
        return queue.pop(0)
    return ask


MIXED = (
    "Plain task\n"                          # physical 0
    "2024-01-10 Idea status:inbox\n"        # physical 1
    "(B) Second priority\n"                 # physical 2
    "(A) Top priority due:2024-01-14\n"     # physical 3
    "x 2024-01-12 Old thing\n"              # physical 4
    "Due today due:2024-01-15\n"            # physical 5
)


# ============================================================
# inbox / add
# ============================================================

class TestCmdInbox:
    def test_capture(self, tmp_path):
        todo_file, make_args, out = _make_env(tmp_path)
        assert cmd_inbox(make_args(text=["Look", "into", "solar"])) == 0
        assert todo_file.read_text() == "2024-01-15 Look into solar status:inbox\n"
        assert "Added to inbox: Look into solar" in out.getvalue()

    def test_list(self, tmp_path):
        todo_file, make_args, out = _make_env(tmp_path, MIXED)
        cmd_inbox(make_args(text=[]))
        text = out.getvalue()
        assert "Inbox (1 items)" in text
        assert " 1. Idea" in text
        assert "status:inbox" not in text

    def test_empty(self, tmp_path):
        todo_file, make_args, out = _make_env(tmp_path, "Plain\n")
        cmd_inbox(make_args(text=[]))
        assert "Inbox is empty" in out.getvalue()


class TestCmdAdd:
    def test_add(self, tmp_path):
        todo_file, make_args, out = _make_env(tmp_path, "one\n")
        cmd_add(make_args(text=["(A)", "Call", "mom", "@phone"]))
        assert todo_file.read_text() == "one\n(A) 2024-01-15 Call mom @phone\n"

    def test_add_requires_text(self, tmp_path):
        todo_file, make_args, out = _make_env(tmp_path)
        with pytest.raises(ValidationError):
            cmd_add(make_args(text=[]))


# ============================================================
# list
# ============================================================

class TestCmdList:
    def test_actionable_sections(self, tmp_path):
        todo_file, make_args, out = _make_env(tmp_path, MIXED)
        cmd_list(make_args(words=[], show_all=False))
        text = out.getvalue()
        assert text.index(" 1. (A) Top priority") < text.index(" 2. (B) Second priority")
        assert " 3. Plain task" in text
        assert " 4. Due today due:2024-01-15 [TODAY]" in text
        assert "! OVERDUE" in text
        assert "Idea" not in text.split("Total")[0]
        assert "1 item(s) in inbox awaiting processing" in text

    def test_all_word(self, tmp_path):
        todo_file, make_args, out = _make_env(tmp_path, MIXED)
        cmd_list(make_args(words=["all"], show_all=False))
        text = out.getvalue()
        assert " 4. 2024-01-10 Idea status:inbox" in text
        assert "awaiting processing" not in text

    def test_filter_keeps_numbers(self, tmp_path):
        todo_file, make_args, out = _make_env(tmp_path, MIXED)
        cmd_list(make_args(words=["plain"], show_all=False))
        text = out.getvalue()
        assert " 3. Plain task" in text
        assert "Total: 1 task(s)" in text

    def test_empty_store(self, tmp_path):
        todo_file, make_args, out = _make_env(tmp_path)
        cmd_list(make_args(words=[], show_all=False))
        assert "No tasks yet" in out.getvalue()


# ============================================================
# done
# ============================================================

class TestCmdDone:
    def test_completes_display_number_not_physical(self, tmp_path):
        content = "B task\nA task\n(A) Priority task\nC task\n"
        todo_file, make_args, out = _make_env(tmp_path, content)
        cmd_done(make_args(number="1"))
        assert todo_file.read_text() == (
            "B task\nA task\nx 2024-01-15 Priority task\nC task\n"
        )

    def test_duplicate_lines(self, tmp_path):
        content = "(A) first\nsame\nsame\n"
        todo_file, make_args, out = _make_env(tmp_path, content)
        # Display: 1=(A) first, 2=same (physical 1), 3=same (physical 2)
        cmd_done(make_args(number="3"))
        assert todo_file.read_text() == "(A) first\nsame\nx 2024-01-15 same\n"

    def test_not_found_writes_nothing(self, tmp_path):
        todo_file, make_args, out = _make_env(tmp_path, MIXED)
        with pytest.raises(NotFound) as exc:
            cmd_done(make_args(number="9"))
        assert exc.value.message == "Task #9 not found."
        assert todo_file.read_text() == MIXED

    def test_bad_number(self, tmp_path):
        todo_file, make_args, out = _make_env(tmp_path, MIXED)
        with pytest.raises(ValidationError):
            cmd_done(make_args(number="abc"))

    def test_show_completed(self, tmp_path):
        todo_file, make_args, out = _make_env(tmp_path, MIXED)
        cmd_done(make_args(number=None))
        text = out.getvalue()
        assert " 1. [x] 2024-01-12 Old thing" in text
        assert "Total: 1 completed" in text


# ============================================================
# delete
# ============================================================

class TestCmdDelete:
    def test_confirmed(self, tmp_path):
        todo_file, make_args, out = _make_env(tmp_path, MIXED)
        # 'all' view: 1=(A) Top, 2=(B) Second, 3=Plain, 4=Idea, 5=Due today
        cmd_delete(make_args(number="4", ask=_answers("y")))
        assert "Idea" not in todo_file.read_text()
        assert len(todo_file.read_text().splitlines()) == 5

    def test_cancelled(self, tmp_path):
        todo_file, make_args, out = _make_env(tmp_path, MIXED)
        cmd_delete(make_args(number="1", ask=_answers("n")))
        assert todo_file.read_text() == MIXED
        assert "Cancelled." in out.getvalue()

    def test_end_of_input_cancels(self, tmp_path):
        todo_file, make_args, out = _make_env(tmp_path, MIXED)
        cmd_delete(make_args(number="1", ask=_answers()))
        assert todo_file.read_text() == MIXED

    def test_not_found_hint(self, tmp_path):
        todo_file, make_args, out = _make_env(tmp_path, MIXED)
        with pytest.raises(NotFound) as exc:
            cmd_delete(make_args(number="6"))
        assert exc.value.hint == "Run 't list all' to see all tasks."

    def test_missing_number(self, tmp_path):
        todo_file, make_args, out = _make_env(tmp_path, MIXED)
        with pytest.raises(ValidationError) as exc:
            cmd_delete(make_args(number=None))
        assert exc.value.message.startswith("Usage: t xx")


# ============================================================
# process / due / help
# ============================================================

class TestCmdProcess:
    def test_single_item(self, tmp_path):
        todo_file, make_args, out = _make_env(tmp_path, MIXED)
        cmd_process(make_args(number="1", ask=_answers("d")))
        assert "Idea" not in todo_file.read_text()

    def test_full_review(self, tmp_path):
        todo_file, make_args, out = _make_env(tmp_path, MIXED)
        cmd_process(make_args(number=None, ask=_answers("a", "", "", "", "")))
        assert todo_file.read_text().endswith("2024-01-15 Idea\n")


class TestCmdDue:
    def test_all(self, tmp_path):
        todo_file, make_args, out = _make_env(tmp_path, MIXED + "Idea two due:2024-02-01 status:inbox\n")
        cmd_due(make_args(window=None))
        text = out.getvalue()
        assert " 1. (A) Top priority" in text
        assert " 4. Due today" in text
        assert "  - Idea two due:2024-02-01 status:inbox (inbox)" in text

    def test_today(self, tmp_path):
        todo_file, make_args, out = _make_env(tmp_path, MIXED)
        cmd_due(make_args(window="t"))
        text = out.getvalue()
        assert "Due Today (2024-01-15)" in text
        assert "Due today" in text
        assert "Top priority" not in text

    def test_overdue(self, tmp_path):
        todo_file, make_args, out = _make_env(tmp_path, MIXED)
        cmd_due(make_args(window="o"))
        text = out.getvalue()
        assert "Top priority" in text
        assert "Due today due" not in text

    def test_none(self, tmp_path):
        todo_file, make_args, out = _make_env(tmp_path, "Plain\n")
        cmd_due(make_args(window=None))
        assert "(none)" in out.getvalue()


class TestCmdHelp:
    def test_help(self, tmp_path):
        todo_file, make_args, out = _make_env(tmp_path)
        assert cmd_help(make_args()) == 0
        assert "t xx N" in out.getvalue()


# ============================================================
# CLI routing / entry point
# ============================================================

class TestRouteArgv:
    def test_no_args_lists(self):
        assert route_argv([]) == ["list"]

    def test_bare_text_captures(self):
        assert route_argv(["buy", "milk"]) == ["inbox", "buy", "milk"]

    def test_known_command(self):
        assert route_argv(["done", "3"]) == ["done", "3"]

    def test_global_options_skipped(self):
        assert route_argv(["--file", "x.txt", "idea"]) == ["--file", "x.txt", "inbox", "idea"]
        assert route_argv(["--file=x.txt", "-v"]) == ["--file=x.txt", "-v", "list"]

    def test_help_flag(self):
        assert route_argv(["-h"]) == ["help"]


class TestMain:
    def test_capture_and_list(self, tmp_path, capsys):
        todo_file = tmp_path / "sub" / "todo.txt"
        assert main(["--file", str(todo_file), "Look", "into", "solar"]) == 0
        assert todo_file.read_text().endswith("Look into solar status:inbox\n")

        assert main(["--file", str(todo_file), "add", "Call", "mom"]) == 0
        assert main(["--file", str(todo_file)]) == 0
        out = capsys.readouterr().out
        assert " 1. " in out and "Call mom" in out
        assert "1 item(s) in inbox awaiting processing" in out

    def test_error_exit_code(self, tmp_path, capsys):
        todo_file = tmp_path / "todo.txt"
        assert main(["--file", str(todo_file), "done", "5"]) == 1
        out = capsys.readouterr().out
        assert "Task #5 not found." in out
        assert "Run 't list' to see available tasks." in out

    def test_unusable_store(self, tmp_path, capsys):
        blocker = tmp_path / "afile"
        blocker.write_text("x")
        assert main(["--file", str(blocker / "todo.txt"), "list"]) == 1
