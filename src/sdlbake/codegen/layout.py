"""
Source layout helpers.

Rendered expressions are plain strings that may span several lines; nested
lines are indented relative to column 0 of the expression.
"""

from __future__ import annotations

from collections.abc import Sequence

INDENT = "    "
MAX_WIDTH = 99


def indent(text: str, levels: int = 1) -> str:
    """Indent every non-empty line of text."""
    prefix = INDENT * levels
    return "\n".join(prefix + line if line else line for line in text.split("\n"))


def _bracketed(opening: str, items: Sequence[str], closing: str, width: int) -> str:
    if not items:
        return opening + closing
    one_line = opening + ", ".join(items) + closing
    if "\n" not in one_line and len(one_line) <= width:
        return one_line
    body = "\n".join(indent(item) + "," for item in items)
    return f"{opening}\n{body}\n{closing}"


def call(func: str, args: Sequence[str], width: int = MAX_WIDTH) -> str:
    """Render ``func(arg, ...)``, one argument per line when it does not fit."""
    return _bracketed(f"{func}(", args, ")", width)


def list_expr(items: Sequence[str], width: int = MAX_WIDTH) -> str:
    return _bracketed("[", items, "]", width)


def dict_expr(items: Sequence[tuple[str, str]], width: int = MAX_WIDTH) -> str:
    """Render a dict display from (key source, value source) pairs."""
    return _bracketed("{", [f"{key}: {value}" for key, value in items], "}", width)
