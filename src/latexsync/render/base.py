from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from ..exceptions import RenderBackendError

LOGGER = logging.getLogger(__name__)


class RenderEngine(str, Enum):
    MATHTEXT = "mathtext"
    MATHML = "mathml"

    @property
    def fallback(self) -> "RenderEngine":
        """The other engine, used for the single cross-backend retry."""
        return RenderEngine.MATHML if self is RenderEngine.MATHTEXT else RenderEngine.MATHTEXT


class EngineState(str, Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"


@dataclass
class RenderOptions:
    display_mode: bool = False
    throw_on_error: bool = False
    error_color: str = "#cc0000"
    macros: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class RenderResult:
    success: bool
    html: Optional[str] = None
    error: Optional[str] = None
    render_time_ms: float = 0.0
    engine: Optional[RenderEngine] = None


class RenderBackend(ABC):
    """A loadable converter from LaTeX source to displayable markup.

    Subclasses implement ``_load``, ``prepare`` and ``_render``. A failed load
    is logged and leaves the backend in ``LOADING``; it is never retried.
    """

    engine: RenderEngine

    def __init__(self) -> None:
        self.state = EngineState.UNLOADED

    def is_loaded(self) -> bool:
        return self.state is EngineState.LOADED

    @property
    def is_loading(self) -> bool:
        return self.state is EngineState.LOADING

    async def load(self) -> None:
        if self.state is not EngineState.UNLOADED:
            return
        self.state = EngineState.LOADING
        try:
            await self._load()
        except Exception:
            LOGGER.exception("Failed to load %s rendering engine", self.engine.value)
            return
        self.state = EngineState.LOADED
        LOGGER.info("%s rendering engine loaded", self.engine.value)

    async def render(self, latex: str, options: RenderOptions) -> str:
        """Render ``latex``; raises ``RenderBackendError`` on any failure."""
        prepared = self.prepare(latex, options)
        try:
            return await self._render(prepared, options)
        except RenderBackendError:
            raise
        except Exception as exc:
            raise RenderBackendError(self.engine.value, str(exc) or type(exc).__name__) from exc

    @abstractmethod
    async def _load(self) -> None:
        """Import or initialise whatever the backend needs."""

    @abstractmethod
    def prepare(self, latex: str, options: RenderOptions) -> str:
        """Normalise delimiters for this backend. Must be idempotent."""

    @abstractmethod
    async def _render(self, prepared: str, options: RenderOptions) -> str:
        pass
