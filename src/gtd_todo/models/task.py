"""
Core task data model.

A TaskLine is the structured form of one physical line of todo.txt. Tag
fields (projects, contexts, due date, inbox status) are extracted once at
parse time from the description, which still carries them as plain text.
The canonical rendering back to text lives in parsers.todo_parser.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Set

INBOX_MARKER = "status:inbox"


@dataclass
class TaskLine:
    """
    A single todo.txt task.

    ``description`` holds everything after the completion / priority /
    creation-date prefix, tags included. ``projects`` and ``contexts`` are
    stored without their ``+`` / ``@`` sigils.
    """

    description: str
    completed: bool = False
    completion_date: Optional[str] = None
    priority: Optional[str] = None
    creation_date: Optional[str] = None
    projects: Set[str] = field(default_factory=set)
    contexts: Set[str] = field(default_factory=set)
    due_date: Optional[str] = None
    is_inbox: bool = False

    @property
    def has_priority(self) -> bool:
        return self.priority is not None

    @property
    def is_actionable(self) -> bool:
        """Open and already processed out of the inbox."""
        return not self.completed and not self.is_inbox

    @property
    def inbox_text(self) -> str:
        """Description with the inbox marker removed, as shown during review."""
        words = [w for w in self.description.split(" ") if w != INBOX_MARKER]
        return " ".join(w for w in words if w).strip()
