"""
Document model for the editor engine.

Formula documents are sections of plain text with formula fragments anchored
at character offsets into the section text. The structural mutators defined
here never raise: each returns the index of the element it touched, or
``None`` when the call is refused (index out of range, last section removal,
unknown field). Position bounds are *not* enforced on insert; an anchor past
the end of the text is left in place for validation to report.
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel


class _Model(BaseModel):
    # camelCase on the wire (recognition payloads), snake_case in Python.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InputType(str, Enum):
    SINGLE_FORMULA = "SingleFormula"
    DOCUMENT = "Document"


class FormulaBlock(_Model):
    """A formula anchored at ``position`` in its section's text."""

    latex: str
    position: int
    is_inline: bool = False


class DocumentSection(_Model):
    heading: Optional[str] = None
    text: str = ""
    formulas: List[FormulaBlock] = Field(default_factory=list)


class DocumentContent(_Model):
    """Ordered sections with an optional title."""

    title: Optional[str] = None
    sections: List[DocumentSection] = Field(default_factory=list)

    # --- Section mutators ---

    def add_section(self, title: Optional[str] = None, position: Optional[int] = None) -> int:
        """Insert a new empty section at ``position`` (or append) and return its index."""
        section = DocumentSection(heading=title or f"Section {len(self.sections) + 1}")
        if position is not None and 0 <= position <= len(self.sections):
            self.sections.insert(position, section)
            return position
        self.sections.append(section)
        return len(self.sections) - 1

    def remove_section(self, index: int) -> Optional[int]:
        if not self._has_section(index) or len(self.sections) <= 1:
            return None
        del self.sections[index]
        return index

    def move_section(self, from_index: int, to_index: int) -> Optional[int]:
        """Swap two sections; returns ``to_index``."""
        if not self._has_section(from_index) or not self._has_section(to_index):
            return None
        if from_index == to_index:
            return None
        sections = self.sections
        sections[from_index], sections[to_index] = sections[to_index], sections[from_index]
        return to_index

    def duplicate_section(self, index: int) -> Optional[int]:
        if not self._has_section(index):
            return None
        copy = self.sections[index].model_copy(deep=True)
        copy.heading = (copy.heading or "") + " (copy)"
        self.sections.insert(index + 1, copy)
        return index + 1

    def update_section(self, index: int, **updates: Any) -> Optional[int]:
        if not self._has_section(index) or not _known_fields(DocumentSection, updates):
            return None
        merged = {**self.sections[index].model_dump(), **updates}
        try:
            self.sections[index] = DocumentSection.model_validate(merged)
        except ValidationError:
            return None
        return index

    # --- Formula mutators ---

    def add_formula(
        self,
        section_index: int,
        latex: str = "",
        position: Optional[int] = None,
        is_inline: bool = False,
    ) -> Optional[int]:
        """Anchor a formula in a section; defaults to the end of the section text."""
        if not self._has_section(section_index):
            return None
        section = self.sections[section_index]
        anchor = len(section.text) if position is None else position
        section.formulas.append(FormulaBlock(latex=latex, position=anchor, is_inline=is_inline))
        return len(section.formulas) - 1

    def remove_formula(self, section_index: int, formula_index: int) -> Optional[int]:
        if not self._has_formula(section_index, formula_index):
            return None
        del self.sections[section_index].formulas[formula_index]
        return formula_index

    def update_formula(self, section_index: int, formula_index: int, **updates: Any) -> Optional[int]:
        if not self._has_formula(section_index, formula_index):
            return None
        if not _known_fields(FormulaBlock, updates):
            return None
        formulas = self.sections[section_index].formulas
        merged = {**formulas[formula_index].model_dump(), **updates}
        try:
            formulas[formula_index] = FormulaBlock.model_validate(merged)
        except ValidationError:
            return None
        return formula_index

    # --- Aggregate queries ---

    @property
    def total_sections(self) -> int:
        return len(self.sections)

    @property
    def total_formulas(self) -> int:
        return sum(len(section.formulas) for section in self.sections)

    @property
    def total_characters(self) -> int:
        count = len(self.title or "")
        for section in self.sections:
            count += len(section.heading or "") + len(section.text)
            count += sum(len(formula.latex) for formula in section.formulas)
        return count

    def _has_section(self, index: int) -> bool:
        return 0 <= index < len(self.sections)

    def _has_formula(self, section_index: int, formula_index: int) -> bool:
        if not self._has_section(section_index):
            return False
        return 0 <= formula_index < len(self.sections[section_index].formulas)


def _known_fields(model: type[BaseModel], updates: dict) -> bool:
    return bool(updates) and all(key in model.model_fields for key in updates)


def default_document(title: Optional[str] = None) -> DocumentContent:
    """Empty document with one auto-created section."""
    document = DocumentContent(title=title)
    document.add_section("Section 1")
    return document


def structurally_equal(left: Any, right: Any) -> bool:
    """Value equality for latex strings and document models."""
    if isinstance(left, BaseModel) and isinstance(right, BaseModel):
        return type(left) is type(right) and left.model_dump() == right.model_dump()
    return left == right


# --- Recognition results ---


class SingleFormulaContent(BaseModel):
    formula: str = Field(alias="SingleFormula")

    model_config = ConfigDict(populate_by_name=True)


class DocumentResultContent(BaseModel):
    document: DocumentContent = Field(alias="Document")

    model_config = ConfigDict(populate_by_name=True)


ResultContent = Union[SingleFormulaContent, DocumentResultContent]


def _now_ms() -> int:
    return int(time.time() * 1000)


class FormulaResult(_Model):
    """Output of the recognition pipeline used to seed an editor session."""

    latex: str
    confidence: float
    timestamp: int = Field(default_factory=_now_ms)
    input_type: InputType
    content: ResultContent

    def to_document(self) -> DocumentContent:
        """Return the content as a document; a bare formula becomes one section."""
        if isinstance(self.content, DocumentResultContent):
            return self.content.document.model_copy(deep=True)
        document = DocumentContent(title="Recognition result")
        document.sections.append(
            DocumentSection(
                heading="Formula",
                text="",
                formulas=[FormulaBlock(latex=self.content.formula, position=0, is_inline=False)],
            )
        )
        return document


def create_formula_result_single(latex: str, confidence: float) -> FormulaResult:
    return FormulaResult(
        latex=latex,
        confidence=confidence,
        input_type=InputType.SINGLE_FORMULA,
        content=SingleFormulaContent(formula=latex),
    )


def create_formula_result_document(latex: str, confidence: float, document: DocumentContent) -> FormulaResult:
    return FormulaResult(
        latex=latex,
        confidence=confidence,
        input_type=InputType.DOCUMENT,
        content=DocumentResultContent(document=document),
    )


__all__ = [
    "InputType",
    "FormulaBlock",
    "DocumentSection",
    "DocumentContent",
    "SingleFormulaContent",
    "DocumentResultContent",
    "ResultContent",
    "FormulaResult",
    "default_document",
    "structurally_equal",
    "create_formula_result_single",
    "create_formula_result_document",
]
