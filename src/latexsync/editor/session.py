"""
Shared editor-session machinery.

A session owns an ``original``/``current`` pair. Edits land on ``current``
synchronously; validation and saving are cooperative and guarded so that only
one of each is outstanding at a time. Rendering goes through a
``RenderSyncController`` and is withheld while a syntax error is set.
"""
from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, List, Optional, Set, TypeVar

from ..config import Settings, settings
from ..core.clock import AsyncioClock, Clock
from ..core.document import structurally_equal
from ..core.logging_setup import get_logger
from ..render.base import RenderEngine, RenderResult
from ..render.engine import MathRenderer, default_renderer
from ..sync.bus import SnapshotBus
from ..sync.preview import RenderSyncController
from ..sync.timer import DebounceTimer

T = TypeVar("T")
SaveHook = Callable[[Any], Awaitable[None]]


@dataclass(frozen=True)
class EditorSnapshot:
    original: Any
    current: Any
    is_modified: bool
    syntax_error: Optional[str]
    is_validating: bool
    is_saving: bool
    rendered_output: str
    render_error: Optional[str]
    last_render_time_ms: Optional[float]


class EditorSession(ABC, Generic[T]):
    def __init__(
        self,
        initial: T,
        *,
        renderer: Optional[MathRenderer] = None,
        config: Optional[Settings] = None,
        clock: Optional[Clock] = None,
        on_save: Optional[SaveHook] = None,
        bus: Optional[SnapshotBus] = None,
    ) -> None:
        self.config = config or settings
        self._log = get_logger(__name__, session=type(self).__name__)
        self._clock = clock or AsyncioClock()
        self._on_save = on_save
        self.bus = bus or SnapshotBus()

        self._original: T = self._copy(initial)
        self._current: T = self._copy(initial)
        # Every edit bumps the version; equal versions mean current is untouched.
        self._version = 0
        self._original_version = 0

        self.syntax_error: Optional[str] = None
        self.is_validating = False
        self.is_saving = False

        self._validation_timer = DebounceTimer(self._clock, self.config.validation_debounce_ms, name="validation")
        self._save_timer = DebounceTimer(self._clock, self.config.validation_debounce_ms * 2, name="save")
        self._tasks: Set[asyncio.Task] = set()

        self.preview = RenderSyncController(
            renderer or default_renderer(),
            self._render_source(),
            config=self.config,
            clock=self._clock,
        )
        self.preview.subscribe(lambda _state: self._notify())

    # --- Hooks for the concrete session ---

    @abstractmethod
    def _copy(self, value: T) -> T:
        """Detached copy of a payload."""

    @abstractmethod
    def _collect_errors(self) -> List[str]:
        """Validate ``current``; return every error found."""

    @abstractmethod
    def _render_source(self) -> str:
        """LaTeX to preview for the current payload."""

    def _after_save(self, committed: T) -> None:
        pass

    # --- Derived state ---

    @property
    def original(self) -> T:
        return self._copy(self._original)

    @property
    def current(self) -> T:
        return self._copy(self._current)

    @property
    def is_modified(self) -> bool:
        if self._version == self._original_version:
            return False
        return not structurally_equal(self._current, self._original)

    @property
    def can_save(self) -> bool:
        return self.is_modified and self.syntax_error is None and not self.is_saving

    @property
    @abstractmethod
    def is_valid(self) -> bool:
        pass

    def snapshot(self) -> EditorSnapshot:
        preview = self.preview.state
        return EditorSnapshot(
            original=self.original,
            current=self.current,
            is_modified=self.is_modified,
            syntax_error=self.syntax_error,
            is_validating=self.is_validating,
            is_saving=self.is_saving,
            rendered_output=preview.rendered_html,
            render_error=preview.render_error,
            last_render_time_ms=preview.last_render_time_ms,
        )

    def _notify(self) -> None:
        self.bus.publish(self.snapshot())

    # --- Edit commands ---

    def update(self, value: T) -> None:
        """Replace the working copy."""
        self._current = self._copy(value)
        self._touch()

    def reset_to_original(self) -> None:
        self._current = self._copy(self._original)
        self._version = self._original_version
        self.syntax_error = None
        self._validation_timer.cancel()
        self._save_timer.cancel()
        self._sync_preview()
        self._notify()

    def set_original(self, value: T) -> None:
        """Replace both original and current, e.g. after loading content."""
        self._original = self._copy(value)
        self._current = self._copy(value)
        self._version += 1
        self._original_version = self._version
        self._after_edit()

    def _touch(self) -> None:
        self._version += 1
        self._after_edit()

    def _after_edit(self) -> None:
        if self.config.auto_validate:
            self._validation_timer.arm(lambda: self._spawn(self.validate()))
        else:
            self._sync_preview()
        self._notify()

    # --- Validation and saving ---

    def _run_validation(self) -> bool:
        errors = self._collect_errors()
        self.syntax_error = "; ".join(errors) if errors else None
        return not errors

    async def validate(self) -> bool:
        """Validate the working copy. A call made while one is running is a no-op."""
        if self.is_validating:
            return False
        self.is_validating = True
        self._validation_timer.cancel()
        self._notify()
        try:
            await asyncio.sleep(0)
            valid = self._run_validation()
        finally:
            self.is_validating = False
        self._sync_preview()
        self._notify()
        if valid and self.config.auto_save and self.can_save:
            self._save_timer.arm(lambda: self._spawn(self.save()))
        return valid

    async def save(self) -> bool:
        """Commit ``current`` as the new ``original`` if it is modified and valid.

        The working copy is validated again first, so a ``syntax_error`` left
        by an earlier validation never blocks a save of fixed content.
        """
        if not self.is_modified or self.is_saving:
            return False
        self.is_saving = True
        self._save_timer.cancel()
        self._notify()
        try:
            self._validation_timer.cancel()
            valid = self._run_validation()
            self._sync_preview()
            if not valid:
                self._log.warning("save rejected", error=self.syntax_error)
                return False
            committed = self._copy(self._current)
            committed_version = self._version
            if self._on_save is not None:
                try:
                    await self._on_save(self._copy(committed))
                except Exception as exc:
                    self._log.error("save hook failed", error=repr(exc))
                    return False
            self._original = committed
            self._original_version = committed_version
            self._after_save(committed)
            self._log.info("save committed", version=committed_version)
            return True
        finally:
            self.is_saving = False
            self._notify()

    # --- Rendering ---

    def _sync_preview(self) -> None:
        if self.syntax_error is not None:
            self.preview.cancel_pending(self.syntax_error)
            return
        source = self._render_source()
        self.preview.update_text(source, schedule=bool(source.strip()))

    async def render(self, force: bool = True) -> RenderResult:
        """Render now (``force``) or after the debounce window."""
        if self.syntax_error is not None:
            return RenderResult(success=False, error=self.syntax_error)
        self.preview.update_text(self._render_source(), schedule=False)
        if force:
            return await self.preview.force_render()
        return await self.preview.debounced_render()

    def set_engine(self, engine: RenderEngine) -> None:
        self.preview.set_engine(engine)

    def set_display_mode(self, mode: str) -> bool:
        return self.preview.set_display_mode(mode)

    def set_auto_sync(self, enabled: bool) -> Optional[asyncio.Task]:
        if self.syntax_error is not None:
            self.preview.state.auto_sync = enabled
            return None
        return self.preview.set_auto_sync(enabled)

    def close(self) -> None:
        self._validation_timer.cancel()
        self._save_timer.cancel()
        for task in list(self._tasks):
            task.cancel()
        self.preview.close()

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task


__all__ = ["EditorSession", "EditorSnapshot", "SaveHook"]
