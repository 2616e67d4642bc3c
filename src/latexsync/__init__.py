"""Convenience imports for the latexsync package."""

from .config import Settings, settings
from .core.document import (
    DocumentContent,
    DocumentSection,
    FormulaBlock,
    FormulaResult,
    InputType,
    create_formula_result_document,
    create_formula_result_single,
    default_document,
)
from .editor import DocumentEditor, FormulaEditor
from .render import MathRenderer, RenderEngine, RenderOptions, RenderResult, default_renderer
from .sync import RenderSyncController
from .validation import validate_document, validate_latex_syntax

__all__ = [
    "Settings",
    "settings",
    "DocumentContent",
    "DocumentSection",
    "FormulaBlock",
    "FormulaResult",
    "InputType",
    "create_formula_result_document",
    "create_formula_result_single",
    "default_document",
    "DocumentEditor",
    "FormulaEditor",
    "MathRenderer",
    "RenderEngine",
    "RenderOptions",
    "RenderResult",
    "default_renderer",
    "RenderSyncController",
    "validate_document",
    "validate_latex_syntax",
]
