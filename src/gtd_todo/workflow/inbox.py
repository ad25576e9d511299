"""
Inbox capture and review.

Review is a small state machine:

    Listing -> ReviewingItem -> Actionable | Deleted | Skipped -> Listing
                             -> Quit

Full review always re-reads the store and takes the first remaining inbox
item, because every transition shifts physical line indices. Prompts run
outside the store lock; each transition then commits in one locked
transaction that first checks the item's line is still what was shown.
Progress already committed stays committed when the user quits.
"""

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from rich.console import Console
from rich.markup import escape

from gtd_todo.errors import InvalidDate, NotFound, UnrecognizedToken
from gtd_todo.models.task import TaskLine
from gtd_todo.models.view import DisplayEntry, DisplayList
from gtd_todo.parsers.todo_parser import build_task, make_inbox_item, normalize_priority, serialize
from gtd_todo.store.display import INBOX_HINT, inbox_view, resolve
from gtd_todo.store.todo_store import TodoStore
from gtd_todo.utils.console import SEPARATOR, Prompter
from gtd_todo.utils.dates import resolve_due_date

log = logging.getLogger(__name__)

FULL_MENU = "  (a) Make actionable    (d) Delete    (s) Skip    (q) Quit"
SINGLE_MENU = "  (a) Make actionable    (d) Delete    (s) Skip"


class Choice(str, Enum):
    ACTIONABLE = "a"
    DELETE = "d"
    SKIP = "s"
    QUIT = "q"


def parse_choice(answer: str) -> Optional[Choice]:
    """Map a typed answer to a Choice (case-insensitive), or None."""
    try:
        return Choice(answer.strip().lower())
    except ValueError:
        return None


@dataclass
class ProcessSummary:
    actionable: int = 0
    deleted: int = 0
    skipped: int = 0
    quit: bool = False


class InboxWorkflow:
    """
    Inbox operations over a TodoStore.

    Args:
        store: Store handle
        console: Output
        ask: Prompt collaborator (prompt text -> answer)
        today: Date used for new creation dates and due resolution
    """

    def __init__(self, store: TodoStore, console: Console, ask: Prompter, today: date) -> None:
        self.store = store
        self.console = console
        self.ask = ask
        self.today = today

    # --- capture / listing ---

    def capture(self, text: str) -> TaskLine:
        """Append ``today text status:inbox``."""
        item = make_inbox_item(text, self.today)
        self.store.append(serialize(item))
        log.debug("Captured inbox item: %s", item.description)
        return item

    def items(self) -> DisplayList:
        return inbox_view(self.store.read_lines())

    # --- transitions ---

    def prompt_metadata(self, text: str) -> TaskLine:
        """
        Ask for priority, project, context and due date, then build the task.

        Bad priority or due input is reported and dropped; it never aborts
        the transition.
        """
        priority = self.ask("  Priority (A-Z or Enter to skip): ")
        try:
            priority = normalize_priority(priority)
        except ValueError:
            self.console.print(
                f"[yellow]  Warning: Invalid priority '{escape(priority.strip())}' (must be A-Z), ignoring[/yellow]"
            )
            priority = None

        project = self.ask("  Project (e.g., Health): ")
        context = self.ask("  Context (e.g., phone): ")
        due_input = self.ask("  Due date (YYYY-MM-DD or day name or today/tomorrow): ")

        due = None
        try:
            due = resolve_due_date(due_input, self.today)
        except (InvalidDate, UnrecognizedToken) as e:
            self.console.print(f"[yellow]  Warning: {escape(e.message)}, ignoring[/yellow]")

        return build_task(
            text,
            creation_date=self.today.isoformat(),
            priority=priority,
            project=project,
            context=context,
            due=due,
        )

    def make_actionable(self, entry: DisplayEntry) -> TaskLine:
        """Prompt for metadata, then replace the inbox line with the new task."""
        return self.commit_actionable(entry, self.prompt_metadata(entry.task.inbox_text))

    def commit_actionable(self, entry: DisplayEntry, task: TaskLine) -> TaskLine:
        """Remove the inbox line and append ``task`` in one transaction."""
        new_line = serialize(task)

        def commit(tx):
            tx.delete(entry.line_index, expected=entry.raw)
            tx.append(new_line)

        self.store.mutate(commit)
        log.debug("Inbox line %d made actionable: %s", entry.line_index, new_line)
        return task

    def delete(self, entry: DisplayEntry) -> str:
        return self.store.delete_line(entry.line_index, expected=entry.raw)

    def skip(self, entry: DisplayEntry) -> TaskLine:
        """
        Requeue an item at the end of the store.

        The item is re-captured, so its creation date becomes today. Text and
        priority are kept.
        """
        item = make_inbox_item(entry.task.inbox_text, self.today, priority=entry.task.priority)
        new_line = serialize(item)

        def commit(tx):
            tx.delete(entry.line_index, expected=entry.raw)
            tx.append(new_line)

        self.store.mutate(commit)
        log.debug("Inbox line %d requeued", entry.line_index)
        return item

    # --- review loops ---

    def _show(self, label, entry: DisplayEntry, menu: str) -> None:
        self.console.print(f"\n[bold]\\[{label}][/bold] {escape(entry.task.inbox_text)}\n")
        self.console.print(menu)

    def process_all(self) -> ProcessSummary:
        """Review every inbox item until the inbox is empty or the user quits."""
        summary = ProcessSummary()
        count = len(self.items())
        if count == 0:
            self.console.print("[green]Inbox is empty! Nothing to process.[/green]")
            return summary

        self.console.print(f"[cyan]Processing Inbox ({count} items)[/cyan]")
        self.console.print(SEPARATOR)

        item_num = 1
        while True:
            view = self.items()
            if not len(view):
                break
            entry = view.entries[0]
            self._show(item_num, entry, FULL_MENU)

            try:
                choice = parse_choice(self.ask("Choice: "))
                if choice is Choice.ACTIONABLE:
                    task = self.make_actionable(entry)
                    self.console.print(f"[green]* Updated:[/green] {escape(serialize(task))}")
                    summary.actionable += 1
                elif choice is Choice.DELETE:
                    self.delete(entry)
                    self.console.print(f"[yellow]* Deleted:[/yellow] {escape(entry.task.inbox_text)}")
                    summary.deleted += 1
                elif choice is Choice.SKIP:
                    self.skip(entry)
                    self.console.print("[blue]-> Skipped (moved to end)[/blue]")
                    summary.skipped += 1
                    item_num += 1
                elif choice is Choice.QUIT:
                    self.console.print("\n[yellow]Quit.[/yellow]")
                    summary.quit = True
                    break
                else:
                    self.console.print("[red]Invalid choice.[/red]")
            except NotFound as e:
                self.console.print(f"[red]{escape(e.message)}[/red]")
            except EOFError:
                self.console.print("\n[yellow]Quit.[/yellow]")
                summary.quit = True
                break

        self.console.print(SEPARATOR)
        self.console.print(
            f"[green]Done![/green] {summary.actionable} actionable, "
            f"{summary.deleted} deleted, {summary.skipped} skipped"
        )
        return summary

    def process_one(self, number: int) -> Optional[Choice]:
        """
        Review a single inbox item by its inbox number.

        Only make-actionable and delete change the store; any other answer
        leaves the item where it is.

        Raises:
            NotFound: no inbox item with that number
        """
        entry = resolve(self.items(), number, hint=INBOX_HINT, label="Inbox item")

        self.console.print("[cyan]Processing Inbox Item[/cyan]")
        self.console.print(SEPARATOR)
        self._show(number, entry, SINGLE_MENU)

        try:
            choice = parse_choice(self.ask("Choice: "))
            if choice is Choice.ACTIONABLE:
                task = self.make_actionable(entry)
                self.console.print(SEPARATOR)
                self.console.print(f"[green]* Updated:[/green] {escape(serialize(task))}")
                return choice
            if choice is Choice.DELETE:
                self.delete(entry)
                self.console.print(SEPARATOR)
                self.console.print(f"[yellow]* Deleted:[/yellow] {escape(entry.task.inbox_text)}")
                return choice
        except EOFError:
            log.debug("Input closed while reviewing inbox item %d", number)

        self.console.print(SEPARATOR)
        self.console.print("[blue]-> Skipped[/blue]")
        return Choice.SKIP
