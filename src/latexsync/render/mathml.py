"""latex2mathml backend producing MathML markup."""
from __future__ import annotations

import importlib

from .base import RenderBackend, RenderEngine, RenderOptions
from .delimiters import strip_delimiters


class MathMLBackend(RenderBackend):
    """Convert raw LaTeX to MathML; display mode maps to ``display="block"``."""

    engine = RenderEngine.MATHML

    def __init__(self) -> None:
        super().__init__()
        self._convert = None

    async def _load(self) -> None:
        self._convert = importlib.import_module("latex2mathml.converter").convert

    def prepare(self, latex: str, options: RenderOptions) -> str:
        return strip_delimiters(latex)

    async def _render(self, prepared: str, options: RenderOptions) -> str:
        display = "block" if options.display_mode else "inline"
        return self._convert(prepared, display=display)


__all__ = ["MathMLBackend"]
