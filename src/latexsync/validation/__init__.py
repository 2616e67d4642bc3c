"""Syntax and structural validation."""

from .syntax import KNOWN_COMMANDS, is_valid_latex, validate_latex_syntax
from .structure import (
    EMPTY_DOCUMENT,
    EMPTY_SECTION,
    validate_document,
    validate_document_content,
    validate_document_section,
    validate_formula_result,
)

__all__ = [
    "EMPTY_DOCUMENT",
    "EMPTY_SECTION",
    "KNOWN_COMMANDS",
    "is_valid_latex",
    "validate_latex_syntax",
    "validate_document",
    "validate_document_content",
    "validate_document_section",
    "validate_formula_result",
]
