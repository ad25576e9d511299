from .display import (
    build_view,
    inbox_view,
    filter_view,
    parse_task_number,
    resolve,
    resolve_line,
)
from .todo_store import TodoStore, Transaction, LOCK_FILE_NAME

__all__ = [
    "build_view",
    "inbox_view",
    "filter_view",
    "parse_task_number",
    "resolve",
    "resolve_line",
    "TodoStore",
    "Transaction",
    "LOCK_FILE_NAME",
]
