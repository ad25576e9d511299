#!/usr/bin/env python3
"""
t - GTD-style todo.txt manager with an inbox workflow

Usage:
    t "idea"                  capture to the inbox (default)
    t add "task"              add a task directly
    t inbox | i               list the inbox
    t process | p [N]         review the inbox (or inbox item N)
    t list | ls | l [all] [filter]
    t la [filter]             list including inbox items
    t done | do | d [N]       completed tasks, or complete task N
    t xx N                    delete task N (numbered as in 't list all')
    t due | du [today|t|overdue|o]
    t help | h

Options:
    --file PATH               todo file (overrides TODO_FILE and ~/.todo/config)
    -v, --verbose             debug logging on stderr
"""

import argparse
import logging
import sys
from datetime import date
from typing import List, Optional

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
from gtd_todo.config import resolve_config
from gtd_todo.errors import StoreUnavailable, TodoError
from gtd_todo.utils.console import console_prompter, default_console, print_error

log = logging.getLogger(__name__)

COMMANDS = {
    "inbox", "i",
    "list", "ls", "l", "la",
    "add",
    "done", "do", "d",
    "xx",
    "process", "p",
    "due", "du",
    "help", "h",
}
GLOBAL_FLAGS = {"-v", "--verbose"}
GLOBAL_OPTIONS = {"--file"}
HELP_FLAGS = {"-h", "--help"}


def route_argv(argv: List[str]) -> List[str]:
    """
    Rewrite argv so bare text becomes a capture.

    ``t buy milk`` -> ``t inbox buy milk``; no command -> ``t list``;
    ``t -h`` -> ``t help``.
    """
    argv = list(argv)
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg in GLOBAL_FLAGS or any(arg.startswith(f"{opt}=") for opt in GLOBAL_OPTIONS):
            i += 1
        elif arg in GLOBAL_OPTIONS:
            i += 2
        elif arg in HELP_FLAGS:
            argv[i] = "help"
            return argv
        elif arg in COMMANDS:
            return argv
        else:
            argv.insert(i, "inbox")
            return argv
    return argv + ["list"]


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="t",
        description="GTD-style todo.txt manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
        add_help=False,
    )
    parser.add_argument("--file", help="Path to todo.txt")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command")

    # --- inbox ---
    inbox_p = subparsers.add_parser("inbox", aliases=["i"], help="List or capture inbox items")
    inbox_p.add_argument("text", nargs=argparse.REMAINDER, help="Text to capture")
    inbox_p.set_defaults(func=cmd_inbox)

    # --- list ---
    list_p = subparsers.add_parser("list", aliases=["ls", "l"], help="Show actionable tasks")
    list_p.add_argument("words", nargs="*", help="'all' and/or a filter such as +Project")
    list_p.set_defaults(func=cmd_list, show_all=False)

    la_p = subparsers.add_parser("la", help="Show all tasks including inbox")
    la_p.add_argument("words", nargs="*", help="Optional filter")
    la_p.set_defaults(func=cmd_list, show_all=True)

    # --- add ---
    add_p = subparsers.add_parser("add", help="Add a task directly (skip inbox)")
    add_p.add_argument("text", nargs=argparse.REMAINDER, help="Task text")
    add_p.set_defaults(func=cmd_add)

    # --- done ---
    done_p = subparsers.add_parser("done", aliases=["do", "d"], help="Show completed or complete task N")
    done_p.add_argument("number", nargs="?", help="Task number from 't list'")
    done_p.set_defaults(func=cmd_done)

    # --- xx ---
    delete_p = subparsers.add_parser("xx", help="Delete task N permanently")
    delete_p.add_argument("number", nargs="?", help="Task number from 't list all'")
    delete_p.set_defaults(func=cmd_delete)

    # --- process ---
    process_p = subparsers.add_parser("process", aliases=["p"], help="Interactive inbox review")
    process_p.add_argument("number", nargs="?", help="Inbox item number")
    process_p.set_defaults(func=cmd_process)

    # --- due ---
    due_p = subparsers.add_parser("due", aliases=["du"], help="Show tasks with due dates")
    due_p.add_argument("window", nargs="?", help="today|t|overdue|o")
    due_p.set_defaults(func=cmd_due)

    # --- help ---
    help_p = subparsers.add_parser("help", aliases=["h"], help="Show help")
    help_p.set_defaults(func=cmd_help)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point. Returns the process exit code."""
    argv = sys.argv[1:] if argv is None else argv
    parser = build_parser()
    args = parser.parse_args(route_argv(argv))

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    console = default_console()
    args.console = console
    args.ask = console_prompter(console)
    args.today = date.today()

    if args.func is cmd_help:
        return cmd_help(args)

    config = resolve_config(args.file)
    log.debug("Using %s (from %s)", config.todo_file, config.source)
    args.store = config.store()
    try:
        args.store.ensure_exists()
    except StoreUnavailable as e:
        print_error(console, f"Error: {e.message}")
        return 1

    try:
        return args.func(args)
    except TodoError as e:
        print_error(console, e.message, e.hint)
        return 1
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")
        return 130


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
