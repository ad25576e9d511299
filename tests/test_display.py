"""
Tests for store/display.py: view ordering, numbering and resolution.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from gtd_todo.errors import NotFound, ValidationError
from gtd_todo.models.view import ViewMode
from gtd_todo.store.display import (
    build_view,
    filter_view,
    inbox_view,
    parse_task_number,
    resolve,
    resolve_line,
)


LINES = [
    "Plain one\n",                                  # 0
    "(C) Low\n",                                    # 1
    "2024-01-10 Idea one status:inbox\n",           # 2
    "(A) High\n",                                   # 3
    "x 2024-01-12 Done early\n",                    # 4
    "(B) Middle\n",                                 # 5
    "\n",                                           # 6
    "2024-01-11 Idea two status:inbox\n",           # 7
    "Plain two\n",                                  # 8
    "x 2024-01-14 Done late\n",                     # 9
    "(A) Also high\n",                              # 10
    "2024-01-12 (B) not a priority status:inbox\n",  # 11
]


class TestActionableView:
    def test_order(self):
        view = build_view(LINES, ViewMode.ACTIONABLE)
        assert [e.raw for e in view] == [
            "(A) High",
            "(A) Also high",
            "(B) Middle",
            "(C) Low",
            "Plain one",
            "Plain two",
        ]
        assert [e.number for e in view] == [1, 2, 3, 4, 5, 6]

    def test_physical_indices(self):
        view = build_view(LINES, ViewMode.ACTIONABLE)
        assert view.line_indices() == [3, 10, 5, 1, 0, 8]

    def test_prioritized_split(self):
        view = build_view(LINES)
        assert len(view.prioritized) == 4
        assert len(view.unprioritized) == 2

    def test_a_c_b(self):
        view = build_view(["(A) a\n", "(C) c\n", "(B) b\n"])
        assert [e.task.priority for e in view] == ["A", "B", "C"]

    def test_deterministic(self):
        assert build_view(LINES) == build_view(LINES)

    def test_ties_keep_file_order(self):
        lines = ["(B) second\n", "(A) first\n", "(B) third\n"]
        view = build_view(lines)
        assert [e.raw for e in view] == ["(A) first", "(B) second", "(B) third"]

    def test_empty_store(self):
        assert len(build_view([])) == 0

    def test_mode_from_string(self):
        assert build_view(LINES, "all").mode is ViewMode.ALL


class TestAllView:
    def test_includes_inbox(self):
        view = build_view(LINES, ViewMode.ALL)
        assert len(view) == 9
        # Inbox items are unprioritized, so they sit among the plain tasks
        assert [e.line_index for e in view.unprioritized] == [0, 2, 7, 8, 11]

    def test_blank_lines_never_numbered(self):
        view = build_view(LINES, ViewMode.ALL)
        assert 6 not in view.line_indices()


class TestCompletedView:
    def test_most_recent_first(self):
        view = build_view(LINES, ViewMode.COMPLETED)
        assert [e.raw for e in view] == ["x 2024-01-14 Done late", "x 2024-01-12 Done early"]


class TestInboxView:
    def test_renumbered(self):
        items = inbox_view(LINES)
        assert [e.number for e in items] == [1, 2, 3]
        assert [e.line_index for e in items] == [2, 7, 11]

    def test_counts(self):
        lines = [
            "a status:inbox\n",
            "b\n",
            "c status:inbox\n",
            "d\n",
            "e status:inbox\n",
        ]
        assert len(inbox_view(lines)) == 3
        assert len(build_view(lines, ViewMode.ACTIONABLE)) == 2
        assert len(build_view(lines, ViewMode.ALL)) == 5


class TestFilterView:
    def test_keeps_numbers(self):
        view = build_view(LINES)
        filtered = filter_view(view, "plain")
        assert [(e.number, e.raw) for e in filtered] == [(5, "Plain one"), (6, "Plain two")]

    def test_no_term(self):
        view = build_view(LINES)
        assert len(filter_view(view, None)) == len(view)
        assert len(filter_view(view, "")) == len(view)


class TestResolve:
    def test_resolves_to_line(self):
        view = build_view(LINES)
        assert resolve(view, 1).line_index == 3
        assert resolve(view, 6).line_index == 8

    @pytest.mark.parametrize("n", [0, -1, 7])
    def test_out_of_range(self, n):
        view = build_view(LINES)
        with pytest.raises(NotFound) as exc:
            resolve(view, n)
        assert exc.value.message == f"Task #{n} not found."
        assert exc.value.hint == "Run 't list' to see available tasks."

    def test_all_view_hint(self):
        view = build_view(LINES, ViewMode.ALL)
        with pytest.raises(NotFound) as exc:
            resolve(view, 10)
        assert "list all" in exc.value.hint

    def test_resolve_line(self):
        assert resolve_line(LINES, ViewMode.ALL, 1) == 3


class TestParseTaskNumber:
    def test_valid(self):
        assert parse_task_number("3") == 3
        assert parse_task_number(" 12 ") == 12
        assert parse_task_number(4) == 4

    @pytest.mark.parametrize("value", ["0", "-1", "abc", "1.5", "", "٣", True, 0, None])
    def test_invalid(self, value):
        with pytest.raises(ValidationError):
            parse_task_number(value)
