from .todo_parser import (
    parse_line,
    parse_lines,
    serialize,
    scan_tags,
    build_task,
    make_inbox_item,
    make_added_task,
    complete_task,
    normalize_priority,
)

__all__ = [
    "parse_line",
    "parse_lines",
    "serialize",
    "scan_tags",
    "build_task",
    "make_inbox_item",
    "make_added_task",
    "complete_task",
    "normalize_priority",
]
