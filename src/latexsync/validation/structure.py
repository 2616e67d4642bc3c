"""Structural validation for documents and recognition results."""
from __future__ import annotations

from typing import List, Optional

from ..core.document import DocumentContent, DocumentSection, FormulaResult
from .syntax import validate_latex_syntax

EMPTY_DOCUMENT = "Document must have at least one section"
EMPTY_SECTION = "Section must have either text or formulas"


def validate_document_section(section: DocumentSection) -> Optional[str]:
    if not section.text.strip() and not section.formulas:
        return EMPTY_SECTION
    return None


def validate_document_content(document: DocumentContent) -> Optional[str]:
    """Return the first structural error of ``document``, or ``None``."""
    if not document.sections:
        return EMPTY_DOCUMENT
    for section in document.sections:
        error = validate_document_section(section)
        if error:
            return error
    return None


def validate_formula_result(result: FormulaResult) -> Optional[str]:
    if not result.latex.strip():
        return "LaTeX content cannot be empty"
    if result.confidence < 0 or result.confidence > 1:
        return "Confidence must be between 0 and 1"
    return None


def validate_document(document: DocumentContent, strict: bool = False) -> List[str]:
    """Collect every structural and syntax error in ``document``.

    Formula anchors outside ``0..len(text)`` are reported, never clamped.
    """
    errors: List[str] = []
    if not document.sections:
        errors.append(EMPTY_DOCUMENT)

    for s_idx, section in enumerate(document.sections, start=1):
        if validate_document_section(section):
            errors.append(f"Section {s_idx} must contain text or formulas")
        text_length = len(section.text)
        for f_idx, formula in enumerate(section.formulas, start=1):
            label = f"Section {s_idx} formula {f_idx}"
            if formula.position < 0 or formula.position > text_length:
                errors.append(
                    f"{label} position {formula.position} is outside the text range 0-{text_length}"
                )
            if not formula.latex.strip():
                errors.append(f"{label} must not be empty")
            syntax_error = validate_latex_syntax(formula.latex, strict=strict)
            if syntax_error:
                errors.append(f"{label}: {syntax_error}")
    return errors


__all__ = [
    "validate_document",
    "validate_document_content",
    "validate_document_section",
    "validate_formula_result",
    "EMPTY_DOCUMENT",
    "EMPTY_SECTION",
]
