"""
Locked read-modify-write access to the todo.txt backing file.

TodoStore is the explicit store handle passed to the display engine, the
command layer and the inbox workflow. Every mutation:

1. takes an exclusive flock on the dedicated lock file
2. reads the whole file
3. changes exactly the targeted line(s)
4. writes a temp sibling and os.replace()s it over the todo file
5. releases the lock (on every exit path)

Untouched lines are kept byte-for-byte, including their line endings and any
bytes that are not valid UTF-8. Reads outside a mutation take no lock.
"""

import fcntl
import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, List, Optional, TypeVar

from gtd_todo.errors import IndexOutOfRange, NotFound, StoreUnavailable

log = logging.getLogger(__name__)

LOCK_FILE_NAME = ".todo.lock"
ENCODING = "utf-8"
# Invalid UTF-8 survives a read/write cycle unchanged
ERRORS = "surrogateescape"

T = TypeVar("T")


def split_physical_lines(content: str) -> List[str]:
    """Split on ``\\n`` only, keeping each line's ending."""
    parts = content.split("\n")
    lines = [p + "\n" for p in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def _ending(line: str) -> str:
    if line.endswith("\r\n"):
        return "\r\n"
    if line.endswith("\n"):
        return "\n"
    return ""


def strip_ending(line: str) -> str:
    return line.rstrip("\r\n")


class Transaction:
    """
    Pending edits to an in-memory copy of the store.

    Created by TodoStore.transaction(); the store writes ``lines`` back only
    if the block exits without an exception and something changed.
    """

    def __init__(self, lines: List[str]) -> None:
        self.lines = lines
        self.dirty = False

    def __len__(self) -> int:
        return len(self.lines)

    def text_lines(self) -> List[str]:
        return [strip_ending(line) for line in self.lines]

    def _check(self, index: int, expected: Optional[str]) -> None:
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self.lines):
            raise IndexOutOfRange(
                f"Line {index} is out of range (store has {len(self.lines)} lines)."
            )
        if expected is not None and strip_ending(self.lines[index]) != expected:
            raise NotFound(
                "Task changed since it was listed.",
                hint="Run 't list' again and retry.",
            )

    def append(self, line: str) -> int:
        """Append one line; returns its physical index."""
        if self.lines and not _ending(self.lines[-1]):
            self.lines[-1] += "\n"
        self.lines.append(strip_ending(line) + "\n")
        self.dirty = True
        return len(self.lines) - 1

    def replace(self, index: int, new_line: str, expected: Optional[str] = None) -> str:
        """Overwrite one physical line, keeping its line ending; returns the old text."""
        self._check(index, expected)
        old = self.lines[index]
        self.lines[index] = strip_ending(new_line) + _ending(old)
        self.dirty = True
        return strip_ending(old)

    def delete(self, index: int, expected: Optional[str] = None) -> str:
        """Remove one physical line; returns its text."""
        self._check(index, expected)
        old = self.lines.pop(index)
        self.dirty = True
        return strip_ending(old)


class TodoStore:
    """Handle on one todo.txt file and its lock file."""

    def __init__(self, path: Path, lock_path: Optional[Path] = None) -> None:
        self.path = Path(path)
        self.lock_path = Path(lock_path) if lock_path else self.path.parent / LOCK_FILE_NAME

    def __repr__(self) -> str:
        return f"TodoStore({str(self.path)!r})"

    # --- setup / reads ---

    def ensure_exists(self) -> None:
        """Create the directory and an empty todo file if missing."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreUnavailable(f"Cannot create directory {self.path.parent}: {e}") from e
        try:
            self.path.touch(exist_ok=True)
        except OSError as e:
            raise StoreUnavailable(f"Cannot create file {self.path}: {e}") from e

    def read_lines(self) -> List[str]:
        """
        Read all physical lines (with endings), without locking.

        A concurrent writer may be mid-write; callers that mutate must use
        transaction() instead.
        """
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding=ENCODING, errors=ERRORS, newline="") as f:
                return split_physical_lines(f.read())
        except OSError as e:
            raise StoreUnavailable(f"Cannot read {self.path}: {e}") from e

    def read_text_lines(self) -> List[str]:
        return [strip_ending(line) for line in self.read_lines()]

    # --- locking ---

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the exclusive lock for the duration of the block. No timeout."""
        # The directory is created by ensure_exists(), never here
        try:
            lock_file = open(self.lock_path, "a")
        except OSError as e:
            raise StoreUnavailable(f"Cannot open lock file {self.lock_path}: {e}") from e

        try:
            try:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
            except BlockingIOError:
                log.warning("Waiting for lock on %s", self.lock_path)
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
        except OSError as e:
            lock_file.close()
            raise StoreUnavailable(f"Cannot lock {self.lock_path}: {e}") from e

        try:
            yield
        finally:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)
            lock_file.close()

    def _write_lines(self, lines: List[str]) -> None:
        # Replace the symlink target, not the link itself
        target = self.path.resolve()
        tmp = target.with_name(f".{target.name}.tmp")
        try:
            with open(tmp, "w", encoding=ENCODING, errors=ERRORS, newline="") as f:
                f.write("".join(lines))
                f.flush()
                os.fsync(f.fileno())
            if target.exists():
                os.chmod(tmp, target.stat().st_mode & 0o7777)
            os.replace(tmp, target)
        except OSError as e:
            try:
                tmp.unlink()
            except OSError:
                log.debug("No temp file to clean up at %s", tmp)
            raise StoreUnavailable(f"Cannot write {self.path}: {e}") from e

    # --- mutations ---

    @contextmanager
    def transaction(self) -> Iterator[Transaction]:
        """
        Locked read-modify-write block.

        Usage:
            with store.transaction() as tx:
                tx.delete(3, expected=old_text)
                tx.append(new_text)

        The file is rewritten once, on clean exit, if anything changed. An
        exception inside the block leaves the file untouched.
        """
        with self.locked():
            if not self.path.parent.exists():
                raise StoreUnavailable(f"Directory {self.path.parent} does not exist")
            tx = Transaction(self.read_lines())
            yield tx
            if tx.dirty:
                self._write_lines(tx.lines)
                log.debug("Wrote %d line(s) to %s", len(tx.lines), self.path)

    def mutate(self, fn: Callable[[Transaction], T]) -> T:
        """Run ``fn`` inside a transaction and return its result."""
        with self.transaction() as tx:
            return fn(tx)

    def append(self, line: str) -> int:
        """Append one line at the end of the store."""
        with self.transaction() as tx:
            index = tx.append(line)
        log.debug("Appended line %d: %s", index, line)
        return index

    def replace_line(self, index: int, new_line: str, expected: Optional[str] = None) -> str:
        """Overwrite exactly one physical line. Returns the replaced text."""
        with self.transaction() as tx:
            old = tx.replace(index, new_line, expected)
        log.debug("Replaced line %d: %s -> %s", index, old, new_line)
        return old

    def delete_line(self, index: int, expected: Optional[str] = None) -> str:
        """Remove exactly one physical line. Returns the removed text."""
        with self.transaction() as tx:
            old = tx.delete(index, expected)
        log.debug("Deleted line %d: %s", index, old)
        return old
