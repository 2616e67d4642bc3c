from __future__ import annotations

import logging
from typing import Callable, Optional

from ..core.clock import Clock, TimerHandle

LOGGER = logging.getLogger(__name__)


class DebounceTimer:
    """Single-slot pending timer.

    ``arm`` replaces whatever is pending, so a burst of calls collapses into
    one callback fired ``delay_ms`` after the last call.
    """

    def __init__(self, clock: Clock, delay_ms: int, name: str = "debounce") -> None:
        self._clock = clock
        self.delay_ms = delay_ms
        self.name = name
        self._handle: Optional[TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def arm(self, callback: Callable[[], None]) -> None:
        if self.cancel():
            LOGGER.debug("%s timer re-armed", self.name)

        def _fire() -> None:
            self._handle = None
            callback()

        self._handle = self._clock.call_later(self.delay_ms / 1000.0, _fire)

    def cancel(self) -> bool:
        """Drop the pending callback; returns whether one was pending."""
        if self._handle is None:
            return False
        self._handle.cancel()
        self._handle = None
        return True
