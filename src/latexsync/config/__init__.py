"""
Typed configuration package for latexsync.

This package exposes:
- ``Settings`` / ``settings``: environment-driven toggles (pydantic-settings).
- Typed literals: ``RenderEngineChoice``, ``DisplayModeChoice``.
"""

from .settings import (
    Settings,
    settings,
    RenderEngineChoice,
    DisplayModeChoice,
)

__all__ = [
    "Settings",
    "settings",
    "RenderEngineChoice",
    "DisplayModeChoice",
]
