"""Injectable time sources for the cooperative scheduler.

``AsyncioClock`` delegates to the running event loop. ``VirtualClock`` only
moves when ``advance`` is awaited, which lets debounce windows, load timeouts
and render timings be exercised without wall-clock delays.
"""
from __future__ import annotations

import asyncio
import heapq
import itertools
import time
from abc import ABC, abstractmethod
from typing import Callable, List, Protocol, Tuple


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Clock(ABC):
    @abstractmethod
    def monotonic(self) -> float:
        """Current time in seconds."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` once after ``delay`` seconds unless cancelled."""

    @abstractmethod
    async def sleep(self, delay: float) -> None:
        pass


class AsyncioClock(Clock):
    def monotonic(self) -> float:
        return time.perf_counter()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return asyncio.get_running_loop().call_later(delay, callback)

    async def sleep(self, delay: float) -> None:
        await asyncio.sleep(delay)


class _VirtualTimer:
    __slots__ = ("when", "callback", "cancelled")

    def __init__(self, when: float, callback: Callable[[], None]) -> None:
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class VirtualClock(Clock):
    """Deterministic clock; time advances only through ``advance``."""

    def __init__(self, start: float = 0.0, settle_rounds: int = 25) -> None:
        self._now = start
        self._settle_rounds = settle_rounds
        self._queue: List[Tuple[float, int, _VirtualTimer]] = []
        self._counter = itertools.count()

    def monotonic(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        timer = _VirtualTimer(self._now + max(0.0, delay), callback)
        heapq.heappush(self._queue, (timer.when, next(self._counter), timer))
        return timer

    async def sleep(self, delay: float) -> None:
        if delay <= 0:
            await asyncio.sleep(0)
            return
        future = asyncio.get_running_loop().create_future()

        def _wake() -> None:
            if not future.done():
                future.set_result(None)

        self.call_later(delay, _wake)
        await future

    @property
    def pending_timers(self) -> int:
        return sum(1 for _, _, timer in self._queue if not timer.cancelled)

    async def settle(self) -> None:
        """Give ready tasks a chance to run without moving time."""
        for _ in range(self._settle_rounds):
            await asyncio.sleep(0)

    async def advance(self, seconds: float) -> None:
        """Move time forward, firing due timers in order and letting tasks run."""
        target = self._now + seconds
        await self.settle()
        while self._queue and self._queue[0][0] <= target:
            when, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now = max(self._now, when)
            timer.callback()
            await self.settle()
        self._now = target
        await self.settle()


__all__ = ["Clock", "AsyncioClock", "VirtualClock", "TimerHandle"]
