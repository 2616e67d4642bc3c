"""Cursor-based edits on a LaTeX source string."""
from __future__ import annotations

from typing import Tuple

FRACTION = r"\frac{}{}"
SUPERSCRIPT = "^{}"
SUBSCRIPT = "_{}"
SQUARE_ROOT = r"\sqrt{}"
INTEGRAL = r"\int_{}"
SUM = r"\sum_{}"

SNIPPETS = {
    "fraction": FRACTION,
    "superscript": SUPERSCRIPT,
    "subscript": SUBSCRIPT,
    "square_root": SQUARE_ROOT,
    "integral": INTEGRAL,
    "sum": SUM,
}


def insert_at(source: str, position: int, text: str) -> Tuple[str, int]:
    """Return the edited source and the caret position after the insert."""
    return source[:position] + text + source[position:], position + len(text)


def replace_range(source: str, start: int, end: int, text: str) -> Tuple[str, int]:
    return source[:start] + text + source[end:], start + len(text)


def wrap_selection(source: str, start: int, end: int, before: str, after: str = "") -> Tuple[str, Tuple[int, int]]:
    """Surround ``source[start:end]``; returns the new selection span of the wrapped text."""
    selected = source[start:end]
    edited = source[:start] + before + selected + after + source[end:]
    new_start = start + len(before)
    return edited, (new_start, new_start + len(selected))
