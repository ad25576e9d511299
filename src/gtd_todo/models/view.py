"""
Display list models.

A DisplayList is derived per command from a snapshot of the store: it pairs
the number a user sees with the physical line that number refers to. It is
never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional

from gtd_todo.models.task import TaskLine


class ViewMode(str, Enum):
    ACTIONABLE = "actionable"
    ALL = "all"
    COMPLETED = "completed"


@dataclass(frozen=True)
class DisplayEntry:
    """One visible task: its display number, physical index and parsed form."""

    number: int
    line_index: int
    raw: str
    task: TaskLine


@dataclass
class DisplayList:
    """Ordered display entries for one view of the store."""

    mode: ViewMode
    entries: List[DisplayEntry] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[DisplayEntry]:
        return iter(self.entries)

    @property
    def prioritized(self) -> List[DisplayEntry]:
        return [e for e in self.entries if e.task.has_priority]

    @property
    def unprioritized(self) -> List[DisplayEntry]:
        return [e for e in self.entries if not e.task.has_priority]

    def line_indices(self) -> List[int]:
        return [e.line_index for e in self.entries]

    def find_line(self, line_index: int) -> Optional[DisplayEntry]:
        """Reverse mapping: physical line index to its display entry."""
        for entry in self.entries:
            if entry.line_index == line_index:
                return entry
        return None
