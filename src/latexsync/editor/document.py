"""Editor session for multi-section formula documents."""
from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from ..core.document import DocumentContent, FormulaResult, default_document
from ..validation.structure import validate_document, validate_formula_result
from .session import EditorSession

LOGGER = logging.getLogger(__name__)

SECTION_FORMULA_SEPARATOR = r" \quad "


class DocumentEditor(EditorSession[DocumentContent]):
    """Document session with section/formula CRUD and an active-section pointer.

    All structural edits go through this class so that the dirty flag,
    validation and preview follow them. Refused edits return ``None`` and
    leave the document untouched.
    """

    def __init__(self, initial_document: Optional[DocumentContent] = None, **kwargs) -> None:
        self.active_section = 0
        self.validation_errors: List[str] = []
        super().__init__(initial_document if initial_document is not None else default_document(), **kwargs)

    def _copy(self, value: DocumentContent) -> DocumentContent:
        return value.model_copy(deep=True)

    def _collect_errors(self) -> List[str]:
        self.validation_errors = validate_document(self._current, strict=self.config.strict_commands)
        return list(self.validation_errors)

    def _render_source(self) -> str:
        sections = self._current.sections
        if not sections:
            return ""
        index = min(self.active_section, len(sections) - 1)
        formulas = [formula.latex for formula in sections[index].formulas if formula.latex.strip()]
        return SECTION_FORMULA_SEPARATOR.join(formulas)

    @property
    def is_valid(self) -> bool:
        return not self.validation_errors and self.syntax_error is None and bool(self._current.sections)

    def reset_to_original(self) -> None:
        self.validation_errors = []
        self._clamp_active_section()
        super().reset_to_original()

    def set_original(self, value: DocumentContent) -> None:
        self.validation_errors = []
        super().set_original(value)
        self._clamp_active_section()

    def validate_document(self) -> List[str]:
        """Synchronous full validation; returns every error found."""
        self._run_validation()
        self._sync_preview()
        self._notify()
        return list(self.validation_errors)

    def export(self) -> DocumentContent:
        """Detached copy of the working document for export collaborators."""
        return self.current

    def import_recognition_result(self, result: FormulaResult) -> bool:
        error = validate_formula_result(result)
        if error:
            LOGGER.warning("Importing recognition result with issue: %s", error)
        self.active_section = 0
        self.set_original(result.to_document())
        return True

    # --- Aggregate queries ---

    @property
    def total_sections(self) -> int:
        return self._current.total_sections

    @property
    def total_formulas(self) -> int:
        return self._current.total_formulas

    @property
    def total_characters(self) -> int:
        return self._current.total_characters

    # --- Section CRUD ---

    def add_section(self, title: Optional[str] = None, position: Optional[int] = None) -> Optional[int]:
        return self._mutate(lambda doc: doc.add_section(title, position))

    def remove_section(self, index: int) -> Optional[int]:
        removed = self._current.remove_section(index)
        if removed is not None:
            self._clamp_active_section()
            self._touch()
        return removed

    def move_section(self, from_index: int, to_index: int) -> Optional[int]:
        moved = self._current.move_section(from_index, to_index)
        if moved is not None:
            # The active pointer follows the section it was on.
            if self.active_section == from_index:
                self.active_section = to_index
            elif self.active_section == to_index:
                self.active_section = from_index
            self._touch()
        return moved

    def duplicate_section(self, index: int) -> Optional[int]:
        return self._mutate(lambda doc: doc.duplicate_section(index))

    def update_section(self, index: int, **updates: Any) -> Optional[int]:
        return self._mutate(lambda doc: doc.update_section(index, **updates))

    # --- Formula CRUD ---

    def add_formula(
        self,
        section_index: int,
        latex: str = "",
        position: Optional[int] = None,
        is_inline: bool = False,
    ) -> Optional[int]:
        return self._mutate(lambda doc: doc.add_formula(section_index, latex, position, is_inline))

    def remove_formula(self, section_index: int, formula_index: int) -> Optional[int]:
        return self._mutate(lambda doc: doc.remove_formula(section_index, formula_index))

    def update_formula(self, section_index: int, formula_index: int, **updates: Any) -> Optional[int]:
        return self._mutate(lambda doc: doc.update_formula(section_index, formula_index, **updates))

    # --- Navigation ---

    def set_active_section(self, index: int) -> bool:
        if 0 <= index < len(self._current.sections):
            self.active_section = index
            self._sync_preview()
            return True
        return False

    def next_section(self) -> bool:
        return self.set_active_section(self.active_section + 1)

    def previous_section(self) -> bool:
        return self.set_active_section(self.active_section - 1)

    # --- Internals ---

    def _mutate(self, edit: Callable[[DocumentContent], Optional[int]]) -> Optional[int]:
        result = edit(self._current)
        if result is not None:
            self._touch()
        return result

    def _clamp_active_section(self) -> None:
        count = len(self._current.sections)
        if self.active_section >= count:
            self.active_section = max(0, count - 1)


__all__ = ["DocumentEditor", "SECTION_FORMULA_SEPARATOR"]
