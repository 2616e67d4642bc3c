"""Shared core utilities: document model, clocks, text edits and logging."""

from . import text_ops
from .clock import AsyncioClock, Clock, VirtualClock
from .document import (
    DocumentContent,
    DocumentSection,
    FormulaBlock,
    FormulaResult,
    InputType,
    default_document,
)

__all__ = [
    "text_ops",
    "AsyncioClock",
    "Clock",
    "VirtualClock",
    "DocumentContent",
    "DocumentSection",
    "FormulaBlock",
    "FormulaResult",
    "InputType",
    "default_document",
]
