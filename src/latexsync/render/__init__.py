"""Rendering backends and the fallback adapter in front of them."""

from .base import EngineState, RenderBackend, RenderEngine, RenderOptions, RenderResult
from .delimiters import expand_macros, format_block_formula, format_inline_formula, strip_delimiters
from .engine import MathRenderer, default_renderer
from .mathml import MathMLBackend
from .mathtext import MathTextBackend

__all__ = [
    "EngineState",
    "RenderBackend",
    "RenderEngine",
    "RenderOptions",
    "RenderResult",
    "MathRenderer",
    "default_renderer",
    "MathMLBackend",
    "MathTextBackend",
    "expand_macros",
    "format_block_formula",
    "format_inline_formula",
    "strip_delimiters",
]
