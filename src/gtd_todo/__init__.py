"""GTD-style todo.txt manager with an inbox workflow."""

__version__ = "0.1.0"
