"""
Render synchronisation for a live preview.

Edits arm a single debounce slot; when it fires a render starts. At most one
render is in flight: manual renders issued meanwhile share its outcome, and a
debounce that fires meanwhile waits for it before rendering the newest source.
Results are applied in the order renders were started.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, List, Optional, Set, Tuple

from ..config import Settings, settings
from ..core import text_ops
from ..core.clock import AsyncioClock, Clock
from ..render.base import RenderEngine, RenderOptions, RenderResult
from ..render.engine import MathRenderer
from .timer import DebounceTimer

LOGGER = logging.getLogger(__name__)


class SyncPhase(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    RENDERING = "rendering"
    ERROR = "error"


@dataclass
class PreviewState:
    latex: str
    engine: RenderEngine
    display_mode: str
    auto_sync: bool
    rendered_html: str = ""
    is_rendering: bool = False
    render_error: Optional[str] = None
    last_render_time_ms: Optional[float] = None
    sync_count: int = 0
    phase: SyncPhase = SyncPhase.IDLE


class RenderSyncController:
    def __init__(
        self,
        renderer: MathRenderer,
        latex: str = "",
        *,
        config: Optional[Settings] = None,
        clock: Optional[Clock] = None,
        engine: Optional[RenderEngine] = None,
        display_mode: Optional[str] = None,
        auto_sync: Optional[bool] = None,
        debounce_ms: Optional[int] = None,
    ) -> None:
        self._config = config or settings
        self._renderer = renderer
        self._clock = clock or AsyncioClock()
        self._defaults = (
            engine or RenderEngine(self._config.default_engine),
            display_mode or self._config.display_mode,
            self._config.auto_sync if auto_sync is None else auto_sync,
        )
        self.state = PreviewState(
            latex=latex,
            engine=self._defaults[0],
            display_mode=self._defaults[1],
            auto_sync=self._defaults[2],
        )
        delay = self._config.render_debounce_ms if debounce_ms is None else debounce_ms
        self._timer = DebounceTimer(self._clock, delay, name="render")
        self._inflight: Optional[asyncio.Task] = None
        self._inflight_key: Optional[Tuple[str, RenderEngine, str]] = None
        self._waiters: List[asyncio.Future] = []
        self._tasks: Set[asyncio.Task] = set()
        self._listeners: List[Callable[[PreviewState], None]] = []

    # --- Observation ---

    def subscribe(self, listener: Callable[[PreviewState], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        snapshot = replace(self.state)
        for listener in list(self._listeners):
            listener(snapshot)

    @property
    def has_content(self) -> bool:
        return bool(self.state.latex.strip())

    @property
    def has_error(self) -> bool:
        return self.state.render_error is not None

    @property
    def is_ready(self) -> bool:
        return not self.state.is_rendering and not self.has_error and self.has_content

    @property
    def pending(self) -> bool:
        return self._timer.pending

    def render_stats(self) -> dict:
        return {
            "character_count": len(self.state.latex),
            "line_count": len(self.state.latex.split("\n")),
            "render_time_ms": self.state.last_render_time_ms,
            "sync_count": self.state.sync_count,
            "engine": self.state.engine.value,
        }

    # --- Commands ---

    def update_text(self, latex: str, schedule: bool = True) -> None:
        """Replace the tracked source; with auto-sync on, (re)arm the debounce."""
        self.state.latex = latex
        if schedule and self.state.auto_sync:
            self._schedule()
        else:
            self._notify()

    def set_engine(self, engine: RenderEngine) -> None:
        if engine == self.state.engine:
            return
        self.state.engine = engine
        self._reschedule_after_option_change()

    def set_display_mode(self, mode: str) -> bool:
        """Switch between ``inline`` and ``block``; unknown modes are refused."""
        if mode not in ("inline", "block"):
            LOGGER.warning("Ignoring unknown display mode %r", mode)
            return False
        if mode != self.state.display_mode:
            self.state.display_mode = mode
            self._reschedule_after_option_change()
        return True

    def set_auto_sync(self, enabled: bool) -> Optional[asyncio.Task]:
        """Toggle auto-sync; enabling it with content renders right away."""
        self.state.auto_sync = enabled
        self._notify()
        if enabled and self.has_content:
            return self._spawn(self.render())
        return None

    def toggle_auto_sync(self) -> Optional[asyncio.Task]:
        return self.set_auto_sync(not self.state.auto_sync)

    def cancel_pending(self, reason: str = "Pending render cancelled") -> bool:
        """Drop the pending debounce; anyone awaiting it gets a failed result carrying ``reason``."""
        cancelled = self._timer.cancel()
        if cancelled:
            self._resolve_waiters(RenderResult(success=False, error=reason))
            self._update_phase()
            self._notify()
        return cancelled

    async def force_render(self) -> RenderResult:
        return await self.render()

    async def manual_sync(self) -> RenderResult:
        return await self.render()

    def debounced_render(self) -> "asyncio.Future[RenderResult]":
        """Arm the debounce and return a future for the render it eventually runs."""
        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        self._schedule()
        return waiter

    async def render(self) -> RenderResult:
        """Render now, cancelling any pending debounce.

        While a render of the current source is in flight its outcome is
        returned instead of starting a second one. A render of an older source
        is awaited first, then the current source is rendered.
        """
        superseded = self._timer.cancel()
        result: Optional[RenderResult] = None
        while self._inflight is not None:
            inflight, key = self._inflight, self._inflight_key
            result = await asyncio.shield(inflight)
            if key == self._render_key():
                break
            result = None
        if result is None:
            if not self.has_content:
                self.state.rendered_html = ""
                self.state.render_error = None
                self._update_phase()
                self._notify()
                result = RenderResult(success=True, html="")
            else:
                self._inflight_key = self._render_key()
                self._inflight = asyncio.ensure_future(self._perform_render(*self._inflight_key))
                result = await asyncio.shield(self._inflight)
        if superseded:
            self._resolve_waiters(result)
        return result

    def clear_preview(self) -> None:
        if self._timer.cancel():
            self._resolve_waiters(RenderResult(success=True, html=""))
        self.state.latex = ""
        self.state.rendered_html = ""
        self.state.render_error = None
        self.state.last_render_time_ms = None
        self._update_phase()
        self._notify()

    def reset_state(self) -> None:
        self.clear_preview()
        self.state.sync_count = 0
        self.state.engine, self.state.display_mode, self.state.auto_sync = self._defaults
        self._notify()

    def close(self) -> None:
        """Cancel pending work. An in-flight render still completes."""
        self._timer.cancel()
        for task in list(self._tasks):
            task.cancel()
        self._resolve_waiters(RenderResult(success=False, error="Preview closed"))
        self._update_phase()

    # --- Text utilities ---

    def insert_at_position(self, position: int, text: str) -> int:
        latex, caret = text_ops.insert_at(self.state.latex, position, text)
        self.update_text(latex)
        return caret

    def replace_range(self, start: int, end: int, text: str) -> int:
        latex, caret = text_ops.replace_range(self.state.latex, start, end, text)
        self.update_text(latex)
        return caret

    def wrap_selection(self, start: int, end: int, before: str, after: str = "") -> tuple:
        latex, selection = text_ops.wrap_selection(self.state.latex, start, end, before, after)
        self.update_text(latex)
        return selection

    # --- Internals ---

    def _reschedule_after_option_change(self) -> None:
        if self.state.auto_sync and self.has_content:
            self._schedule()
        else:
            self._notify()

    def _schedule(self) -> None:
        self._timer.arm(self._on_timer_fired)
        self._update_phase()
        self._notify()

    def _on_timer_fired(self) -> None:
        self._spawn(self._run_debounced())

    async def _run_debounced(self) -> Optional[RenderResult]:
        if self._inflight is not None:
            await asyncio.shield(self._inflight)
            if self._timer.pending:
                LOGGER.debug("Debounced render superseded while waiting for in-flight render")
                return None
        result = await self.render()
        self._resolve_waiters(result)
        return result

    async def _perform_render(self, latex: str, engine: RenderEngine, display_mode: str) -> RenderResult:
        options = RenderOptions(
            display_mode=display_mode == "block",
            throw_on_error=False,
            error_color=self._config.error_color,
        )
        self.state.is_rendering = True
        self.state.phase = SyncPhase.RENDERING
        self._notify()
        try:
            result = await self._renderer.render(latex, engine, options)
        except Exception as exc:
            LOGGER.exception("Unexpected error while rendering preview")
            result = RenderResult(success=False, error=str(exc) or "Unknown rendering error")
        finally:
            self._inflight = None
            self._inflight_key = None
            self.state.is_rendering = False

        self.state.last_render_time_ms = round(result.render_time_ms, 3)
        if result.success:
            # A failed render keeps the last good output on screen.
            self.state.rendered_html = result.html or ""
            self.state.render_error = None
            self.state.sync_count += 1
        else:
            self.state.render_error = result.error or "Rendering failed"
        self._update_phase()
        self._notify()
        return result

    def _render_key(self) -> Tuple[str, RenderEngine, str]:
        return self.state.latex, self.state.engine, self.state.display_mode

    def _update_phase(self) -> None:
        if self.state.is_rendering:
            self.state.phase = SyncPhase.RENDERING
        elif self._timer.pending:
            self.state.phase = SyncPhase.PENDING
        elif self.state.render_error is not None:
            self.state.phase = SyncPhase.ERROR
        else:
            self.state.phase = SyncPhase.IDLE

    def _resolve_waiters(self, result: RenderResult) -> None:
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(result)

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task


__all__ = ["RenderSyncController", "PreviewState", "SyncPhase"]
