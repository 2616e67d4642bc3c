"""Editor session for a single LaTeX formula."""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from ..core import text_ops
from ..core.document import DocumentResultContent, FormulaResult, InputType, SingleFormulaContent
from ..validation.syntax import validate_latex_syntax
from .session import EditorSession

LOGGER = logging.getLogger(__name__)


class FormulaEditor(EditorSession[str]):
    """Original/current pair of LaTeX strings seeded from a recognition result."""

    def __init__(self, initial_result: Optional[FormulaResult] = None, **kwargs) -> None:
        self.recognition_result: Optional[FormulaResult] = (
            initial_result.model_copy(deep=True) if initial_result is not None else None
        )
        super().__init__(initial_result.latex if initial_result is not None else "", **kwargs)

    def _copy(self, value: str) -> str:
        return value

    def _collect_errors(self) -> List[str]:
        error = validate_latex_syntax(self._current, strict=self.config.strict_commands)
        return [error] if error else []

    def _render_source(self) -> str:
        return self._current

    @property
    def is_valid(self) -> bool:
        return self.syntax_error is None and bool(self._current.strip())

    def update_latex(self, latex: str) -> None:
        self.update(latex)

    def load_result(self, result: FormulaResult) -> None:
        """Seed the session from a fresh recognition result."""
        self.recognition_result = result.model_copy(deep=True)
        self.set_original(result.latex)

    def _after_save(self, committed: str) -> None:
        result = self.recognition_result
        if result is None:
            return
        result.latex = committed
        if result.input_type is InputType.SINGLE_FORMULA:
            result.content = SingleFormulaContent(formula=committed)
        elif isinstance(result.content, DocumentResultContent):
            document = result.content.document
            if document.sections and document.sections[0].formulas:
                document.sections[0].formulas[0].latex = committed
        LOGGER.debug("Recognition result updated after save")

    # --- Text utilities ---

    def insert_at_position(self, position: int, text: str) -> int:
        latex, caret = text_ops.insert_at(self._current, position, text)
        self.update(latex)
        return caret

    def replace_range(self, start: int, end: int, text: str) -> int:
        latex, caret = text_ops.replace_range(self._current, start, end, text)
        self.update(latex)
        return caret

    def wrap_selection(self, start: int, end: int, before: str, after: str = "") -> Tuple[int, int]:
        latex, selection = text_ops.wrap_selection(self._current, start, end, before, after)
        self.update(latex)
        return selection

    def insert_snippet(self, name: str, position: Optional[int] = None) -> int:
        """Insert one of ``text_ops.SNIPPETS`` (``fraction``, ``sum``, ...) at ``position``."""
        snippet = text_ops.SNIPPETS[name]
        return self.insert_at_position(len(self._current) if position is None else position, snippet)


__all__ = ["FormulaEditor"]
