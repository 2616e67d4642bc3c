"""
Rendering engine adapter.

``MathRenderer`` fronts one backend per ``RenderEngine``. Every call returns
a ``RenderResult``; backend failures and load timeouts are retried once on
the other engine and never raised to the caller.
"""
from __future__ import annotations

import asyncio
import html
from functools import lru_cache
from typing import Dict, Mapping, Optional

from ..config import Settings, settings
from ..exceptions import EngineLoadTimeoutError, RenderBackendError
from ..core.clock import AsyncioClock, Clock
from ..core.logging_setup import get_logger
from .base import RenderBackend, RenderEngine, RenderOptions, RenderResult
from .delimiters import expand_macros
from .mathml import MathMLBackend
from .mathtext import MathTextBackend

LOGGER = get_logger(__name__)


class MathRenderer:
    def __init__(
        self,
        backends: Mapping[RenderEngine, RenderBackend],
        *,
        clock: Optional[Clock] = None,
        default_engine: RenderEngine = RenderEngine.MATHTEXT,
        load_timeout_ms: int = 10_000,
        poll_interval_ms: int = 100,
    ) -> None:
        missing = [engine.value for engine in RenderEngine if engine not in backends]
        if missing:
            raise ValueError(f"No backend registered for: {', '.join(missing)}")
        if poll_interval_ms <= 0:
            raise ValueError("poll_interval_ms must be positive")
        self._backends: Dict[RenderEngine, RenderBackend] = dict(backends)
        self._clock = clock or AsyncioClock()
        self._load_tasks: Dict[RenderEngine, asyncio.Task] = {}
        self.default_engine = default_engine
        self.load_timeout_ms = load_timeout_ms
        self.poll_interval_ms = poll_interval_ms

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None, clock: Optional[Clock] = None) -> "MathRenderer":
        config = config or settings
        return cls(
            {
                RenderEngine.MATHTEXT: MathTextBackend(),
                RenderEngine.MATHML: MathMLBackend(),
            },
            clock=clock,
            default_engine=RenderEngine(config.default_engine),
            load_timeout_ms=config.engine_load_timeout_ms,
            poll_interval_ms=config.engine_poll_interval_ms,
        )

    def backend(self, engine: RenderEngine) -> RenderBackend:
        return self._backends[engine]

    # --- Loading ---

    async def preload(self) -> None:
        """Load every backend concurrently."""
        await asyncio.gather(*(backend.load() for backend in self._backends.values()))

    def is_engine_loaded(self, engine: RenderEngine) -> bool:
        return self._backends[engine].is_loaded()

    def engine_status(self) -> Dict[str, Dict[str, bool]]:
        return {
            engine.value: {"loaded": backend.is_loaded(), "loading": backend.is_loading}
            for engine, backend in self._backends.items()
        }

    def _ensure_loading(self, engine: RenderEngine) -> None:
        backend = self._backends[engine]
        if backend.is_loaded() or engine in self._load_tasks:
            return
        self._load_tasks[engine] = asyncio.ensure_future(backend.load())

    async def wait_for_engine(self, engine: RenderEngine, timeout_ms: Optional[int] = None) -> bool:
        """Poll the loaded flag until it is set or ``timeout_ms`` elapses."""
        timeout_ms = self.load_timeout_ms if timeout_ms is None else timeout_ms
        backend = self._backends[engine]
        deadline = self._clock.monotonic() + timeout_ms / 1000.0
        while not backend.is_loaded():
            remaining = deadline - self._clock.monotonic()
            if remaining <= 0:
                return False
            await self._clock.sleep(min(self.poll_interval_ms / 1000.0, remaining))
        return True

    # --- Rendering ---

    async def render(
        self,
        latex: str,
        engine: Optional[RenderEngine] = None,
        options: Optional[RenderOptions] = None,
    ) -> RenderResult:
        started = self._clock.monotonic()
        if not latex.strip():
            return RenderResult(success=True, html="", render_time_ms=self._elapsed_ms(started))

        engine = engine or self.default_engine
        options = options or RenderOptions()
        source = expand_macros(latex, options.macros)

        try:
            markup = await self._render_with(engine, source, options)
            return RenderResult(success=True, html=markup, render_time_ms=self._elapsed_ms(started), engine=engine)
        except RenderBackendError as exc:
            primary_error = exc

        fallback = engine.fallback
        LOGGER.warning("render fallback", engine=engine.value, fallback=fallback.value, error=primary_error.message)
        try:
            markup = await self._render_with(fallback, source, options)
            return RenderResult(success=True, html=markup, render_time_ms=self._elapsed_ms(started), engine=fallback)
        except RenderBackendError as exc:
            fallback_error = exc

        message = (
            f"Both rendering engines failed. {engine.value}: {primary_error.message}. "
            f"{fallback.value}: {fallback_error.message}"
        )
        LOGGER.error("render failed", engine=engine.value, error=message)
        markup = None if options.throw_on_error else self._error_markup(latex, message, options.error_color)
        return RenderResult(success=False, html=markup, error=message, render_time_ms=self._elapsed_ms(started))

    async def _render_with(self, engine: RenderEngine, latex: str, options: RenderOptions) -> str:
        backend = self._backends[engine]
        if not backend.is_loaded():
            self._ensure_loading(engine)
            if not await self.wait_for_engine(engine):
                raise EngineLoadTimeoutError(engine.value, self.load_timeout_ms)
        return await backend.render(latex, options)

    def _elapsed_ms(self, started: float) -> float:
        return (self._clock.monotonic() - started) * 1000.0

    @staticmethod
    def _error_markup(latex: str, message: str, color: str) -> str:
        return (
            f'<span class="latexsync-error" style="color:{html.escape(color)}" '
            f'title="{html.escape(message)}">{html.escape(latex)}</span>'
        )


@lru_cache(maxsize=None)
def default_renderer() -> MathRenderer:
    """Process-wide renderer; its backends load once and are shared by all sessions."""
    return MathRenderer.from_settings(settings)


__all__ = ["MathRenderer", "default_renderer"]
