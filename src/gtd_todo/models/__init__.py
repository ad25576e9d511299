from .task import TaskLine, INBOX_MARKER
from .view import DisplayEntry, DisplayList, ViewMode

__all__ = [
    "TaskLine",
    "INBOX_MARKER",
    "DisplayEntry",
    "DisplayList",
    "ViewMode",
]
