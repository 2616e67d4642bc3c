"""matplotlib mathtext backend producing inline SVG."""
from __future__ import annotations

import importlib
import io

from .base import RenderBackend, RenderEngine, RenderOptions
from .delimiters import strip_delimiters

# mathtext has no equivalent for these; they are dropped before parsing.
UNSUPPORTED_TOKENS = (
    r"\displaystyle",
    r"\textstyle",
    r"\begin{aligned}",
    r"\end{aligned}",
    r"\begin{align}",
    r"\end{align}",
    r"\begin{equation}",
    r"\end{equation}",
)


class MathTextBackend(RenderBackend):
    """Render LaTeX/mathtext strings into SVG markup."""

    engine = RenderEngine.MATHTEXT

    def __init__(self, fontsize: int = 14, display_fontsize: int = 20, color: str = "#000000") -> None:
        super().__init__()
        self.fontsize = fontsize
        self.display_fontsize = display_fontsize
        self.color = color
        self._mathtext = None
        self._font_properties = None

    async def _load(self) -> None:
        self._mathtext = importlib.import_module("matplotlib.mathtext")
        self._font_properties = importlib.import_module("matplotlib.font_manager").FontProperties

    def prepare(self, latex: str, options: RenderOptions) -> str:
        text = strip_delimiters(latex)
        for token in UNSUPPORTED_TOKENS:
            text = text.replace(token, "")
        text = " ".join(text.split()) or r"\ "
        return f"${text}$"

    async def _render(self, prepared: str, options: RenderOptions) -> str:
        size = self.display_fontsize if options.display_mode else self.fontsize
        buffer = io.BytesIO()
        self._mathtext.math_to_image(
            prepared,
            buffer,
            prop=self._font_properties(size=size),
            format="svg",
            color=self.color,
        )
        svg = buffer.getvalue().decode("utf-8")
        start = svg.find("<svg")
        return svg[start:] if start >= 0 else svg


__all__ = ["MathTextBackend"]
