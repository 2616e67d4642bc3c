"""Cooperative scheduling primitives and the preview render controller."""

from .bus import SnapshotBus
from ..core.clock import AsyncioClock, Clock, VirtualClock
from .preview import PreviewState, RenderSyncController, SyncPhase
from .timer import DebounceTimer

__all__ = [
    "AsyncioClock",
    "Clock",
    "VirtualClock",
    "DebounceTimer",
    "SnapshotBus",
    "PreviewState",
    "RenderSyncController",
    "SyncPhase",
]
