"""Math delimiter handling shared by the rendering backends."""
from __future__ import annotations

import re
from typing import Mapping

_DOLLARS_RE = re.compile(r"^\$+|\$+$")
_BRACKETS_RE = re.compile(r"^\\[\[\(]|\\[\]\)]$")

INLINE_FORMATS = {
    "dollar": ("$", "$"),
    "parentheses": ("\\(", "\\)"),
}
BLOCK_FORMATS = {
    "double_dollar": ("$$", "$$"),
    "brackets": ("\\[", "\\]"),
}


def strip_delimiters(latex: str) -> str:
    """Remove surrounding ``$``, ``$$``, ``\\(..\\)`` and ``\\[..\\]`` delimiters.

    Runs to a fixed point so nested wrappers are removed too and repeated
    application returns the same string.
    """
    previous = None
    current = latex.strip()
    while current != previous:
        previous = current
        current = _DOLLARS_RE.sub("", current).strip()
        current = _BRACKETS_RE.sub("", current).strip()
    return current


def format_inline_formula(latex: str, style: str = "dollar") -> str:
    opening, closing = INLINE_FORMATS.get(style, INLINE_FORMATS["dollar"])
    return f"{opening}{latex}{closing}"


def format_block_formula(latex: str, style: str = "double_dollar") -> str:
    opening, closing = BLOCK_FORMATS.get(style, BLOCK_FORMATS["double_dollar"])
    return f"{opening}{latex}{closing}"


def expand_macros(latex: str, macros: Mapping[str, str]) -> str:
    """Replace user macros such as ``\\RR`` with their expansion (single pass)."""
    if not macros:
        return latex
    expanded = latex
    for name, replacement in macros.items():
        command = name if name.startswith("\\") else "\\" + name
        pattern = re.compile(re.escape(command) + r"(?![a-zA-Z])")
        expanded = pattern.sub(lambda _match, value=replacement: value, expanded)
    return expanded


__all__ = [
    "strip_delimiters",
    "format_inline_formula",
    "format_block_formula",
    "expand_macros",
]
