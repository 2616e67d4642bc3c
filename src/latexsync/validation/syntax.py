"""Single-pass LaTeX syntax checker.

Escape tokens (a backslash plus the following character) are consumed as one
unit, so ``\\{``, ``\\}`` and ``\\$`` never affect brace balance or math mode.
Empty or whitespace-only input is valid.
"""
from __future__ import annotations

import re
from typing import FrozenSet, Optional

UNMATCHED_CLOSING_BRACE = "Unmatched closing brace"
MISSING_CLOSING_BRACE = "Missing closing brace"
EXTRA_CLOSING_BRACE = "Extra closing brace"
UNCLOSED_MATH_MODE = "Unclosed math mode"
UNKNOWN_COMMAND = "Unknown LaTeX command: {command}"

KNOWN_COMMANDS: FrozenSet[str] = frozenset(
    {
        "frac", "sqrt", "sum", "int", "lim",
        "alpha", "beta", "gamma", "delta", "epsilon", "theta", "lambda",
        "mu", "pi", "sigma", "phi", "omega",
        "infty", "partial", "nabla", "cdot", "times", "div", "pm", "mp",
        "leq", "geq", "neq", "approx", "equiv", "sim", "propto",
        "left", "right", "begin", "end",
        "text", "mathbf", "mathit", "mathrm",
        "sin", "cos", "tan", "log", "ln", "exp", "max", "min", "sup", "inf",
    }
)

COMMAND_RE = re.compile(r"\\([a-zA-Z]+)")


def validate_latex_syntax(latex: str, strict: bool = False) -> Optional[str]:
    """Return a description of the first syntax error, or ``None``.

    With ``strict`` every ``\\name`` command must appear in ``KNOWN_COMMANDS``.
    """
    text = latex.strip()
    if not text:
        return None

    depth = 0
    in_math = False
    i = 0
    length = len(text)
    while i < length:
        char = text[i]
        if char == "\\" and i + 1 < length:
            i += 2
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth < 0:
                return UNMATCHED_CLOSING_BRACE
        elif char == "$":
            in_math = not in_math
        i += 1

    if depth != 0:
        return MISSING_CLOSING_BRACE if depth > 0 else EXTRA_CLOSING_BRACE
    if in_math:
        return UNCLOSED_MATH_MODE

    if strict:
        for match in COMMAND_RE.finditer(text):
            if match.group(1) not in KNOWN_COMMANDS:
                return UNKNOWN_COMMAND.format(command=match.group(0))
    return None


def is_valid_latex(latex: str, strict: bool = False) -> bool:
    return validate_latex_syntax(latex, strict=strict) is None


__all__ = [
    "KNOWN_COMMANDS",
    "validate_latex_syntax",
    "is_valid_latex",
    "UNMATCHED_CLOSING_BRACE",
    "MISSING_CLOSING_BRACE",
    "EXTRA_CLOSING_BRACE",
    "UNCLOSED_MATH_MODE",
]
