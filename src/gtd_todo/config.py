"""
Configuration: where the todo file lives.

Precedence for the todo file path:
1. explicit override (``--file``), then the TODO_FILE environment variable
2. TODO_FILE in the persisted config file (~/.todo/config)
3. built-in default ~/.todo/todo.txt

The config file uses shell-style ``KEY=value`` lines, so an existing
``~/.todo/config`` written for the shell version keeps working.
"""

import logging
import os
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

from gtd_todo.store.todo_store import LOCK_FILE_NAME, TodoStore

log = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".todo"
CONFIG_FILE = CONFIG_DIR / "config"
DEFAULT_TODO_FILE = CONFIG_DIR / "todo.txt"


def _expand(value: str, env: Mapping[str, str]) -> str:
    home = env.get("HOME", str(Path.home()))
    value = value.replace("${HOME}", home).replace("$HOME", home)
    return os.path.expanduser(value)


def load_config_file(path: Path = CONFIG_FILE, env: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """
    Read ``KEY=value`` pairs from a shell-style config file.

    Comments, blank lines, ``export`` prefixes and quotes are handled; lines
    that do not parse are skipped with a warning. A missing file is empty.
    """
    env = os.environ if env is None else env
    values: Dict[str, str] = {}
    if not path.exists():
        return values

    for line_no, line in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if stripped.startswith("export "):
            stripped = stripped[len("export "):].strip()
        key, sep, raw = stripped.partition("=")
        if not sep or not key.strip().isidentifier():
            log.warning("Ignoring malformed config line %s:%d", path, line_no)
            continue
        try:
            parts = shlex.split(raw, comments=True)
        except ValueError:
            log.warning("Ignoring malformed config line %s:%d", path, line_no)
            continue
        values[key.strip()] = _expand(" ".join(parts), env)
    return values


@dataclass
class Config:
    """Resolved runtime settings."""

    todo_file: Path
    source: str

    @property
    def todo_dir(self) -> Path:
        return self.todo_file.parent

    @property
    def lock_file(self) -> Path:
        return self.todo_dir / LOCK_FILE_NAME

    def store(self) -> TodoStore:
        return TodoStore(self.todo_file, self.lock_file)


def resolve_config(
    override: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    config_file: Path = CONFIG_FILE,
    default: Path = DEFAULT_TODO_FILE,
) -> Config:
    """
    Resolve the todo file path.

    Args:
        override: Explicit path from the command line
        env: Environment mapping (default os.environ)
        config_file: Persisted config location
        default: Fallback path

    Returns:
        Config with the chosen path and which layer supplied it
    """
    env = os.environ if env is None else env

    if override:
        return Config(Path(_expand(override, env)), "override")
    if env.get("TODO_FILE"):
        return Config(Path(_expand(env["TODO_FILE"], env)), "environment")

    persisted = load_config_file(config_file, env).get("TODO_FILE")
    if persisted:
        return Config(Path(persisted), "config")

    return Config(Path(default), "default")


def env_flag(name: str, default: bool, env: Optional[Mapping[str, str]] = None) -> bool:
    env = os.environ if env is None else env
    raw = env.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("true", "1", "yes", "on")
