import asyncio
from typing import Any, AsyncIterator, List


class SnapshotBus:
    """Fan-out pub/sub for editor snapshots; each subscriber owns a queue."""

    def __init__(self) -> None:
        self._subscribers: List[asyncio.Queue] = []

    def subscribe(self) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue()
        self._subscribers.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        if queue in self._subscribers:
            self._subscribers.remove(queue)

    def publish(self, snapshot: Any) -> None:
        for queue in self._subscribers:
            queue.put_nowait(snapshot)

    async def stream(self) -> AsyncIterator[Any]:
        queue = self.subscribe()
        try:
            while True:
                yield await queue.get()
        finally:
            self.unsubscribe(queue)


__all__ = ["SnapshotBus"]
