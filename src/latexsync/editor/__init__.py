"""Editor sessions: single formula and multi-section document."""

from .document import DocumentEditor
from .formula import FormulaEditor
from .session import EditorSession, EditorSnapshot

__all__ = ["DocumentEditor", "FormulaEditor", "EditorSession", "EditorSnapshot"]
