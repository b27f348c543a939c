from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator

Snapshot = dict[str, int]


class CounterStore(ABC):
    """Shared per-restaurant point counters.

    Implementations only need commutative increments and wholesale snapshot
    reads; clients never read-modify-write a counter.
    """

    @abstractmethod
    async def increment(self, key: str, delta: int) -> None:
        pass

    @abstractmethod
    async def reset(self, key: str) -> None:
        """Drop the counter for *key* entirely."""
        pass

    @abstractmethod
    def subscribe(self) -> AsyncGenerator[Snapshot, None]:
        """Yield the full mapping now and again after every change.

        Each call starts a new subscription. A subscription cannot be
        restarted once closed.
        """
        pass


class InMemoryCounterStore(CounterStore):
    """Process-local counter store."""

    def __init__(self) -> None:
        self._counts: Snapshot = {}
        self._subscribers: list[asyncio.Queue[Snapshot]] = []

    def peek(self) -> Snapshot:
        return dict(self._counts)

    def _publish(self) -> None:
        for queue in self._subscribers:
            queue.put_nowait(dict(self._counts))

    async def increment(self, key: str, delta: int) -> None:
        self._counts[key] = self._counts.get(key, 0) + delta
        self._publish()

    async def reset(self, key: str) -> None:
        if self._counts.pop(key, None) is not None:
            self._publish()

    async def subscribe(self) -> AsyncGenerator[Snapshot, None]:
        queue: asyncio.Queue[Snapshot] = asyncio.Queue()
        self._subscribers.append(queue)
        try:
            yield dict(self._counts)
            while True:
                yield await queue.get()
        finally:
            self._subscribers.remove(queue)

    def clear(self) -> None:
        self._counts.clear()
