from __future__ import annotations

import asyncio
import logging
from typing import Any

from ..votes.models import ScoreDelta
from .config import DEFAULT_SYNC_CONFIG, SyncConfig
from .store import CounterStore, InMemoryCounterStore, Snapshot

logger = logging.getLogger(__name__)


class AggregateSync:
    """Best-effort bridge between local ballots and the community tally.

    Pushes never raise: a failed increment is logged and counted, and the
    leaderboard keeps showing the last-known tally (or falls back to
    local-only scoring when no snapshot has arrived for the current
    restaurant set).
    """

    def __init__(self, store: CounterStore, config: SyncConfig = DEFAULT_SYNC_CONFIG) -> None:
        self.store = store
        self.config = config
        self._snapshot: Snapshot = {}
        self._live = False
        self._push_failures = 0
        self._last_error: str | None = None
        self._task: asyncio.Task | None = None

    # ── Push ─────────────────────────────────────────────────────────────

    async def push(self, restaurant_id: str, delta: int) -> bool:
        """Increment the shared counter. Returns ``False`` on failure."""
        if not self.config.enabled:
            return False
        try:
            await asyncio.wait_for(
                self.store.increment(restaurant_id, delta),
                timeout=self.config.push_timeout,
            )
            return True
        except Exception as e:
            self._push_failures += 1
            self._last_error = f"push failed: {e!r}"
            logger.warning(
                "Tally push of %+d for %s failed, continuing in degraded mode",
                delta, restaurant_id, exc_info=True,
            )
            return False

    async def push_many(self, deltas: list[ScoreDelta]) -> None:
        # Sequential so removals land before additions.
        for d in deltas:
            await self.push(d.restaurant_id, d.delta)

    async def reset(self, restaurant_id: str) -> None:
        try:
            await self.store.reset(restaurant_id)
        except Exception as e:
            self._last_error = f"reset failed: {e!r}"
            logger.warning("Tally reset for %s failed", restaurant_id, exc_info=True)
        self._snapshot.pop(restaurant_id, None)

    # ── Pull ─────────────────────────────────────────────────────────────

    def apply_snapshot(self, snapshot: Snapshot) -> None:
        """Replace the last-known tally wholesale and go live."""
        self._snapshot = dict(snapshot)
        self._live = True

    async def listen(self) -> None:
        """Follow a fresh subscription until it ends or fails."""
        stream = self.store.subscribe()
        try:
            async for snapshot in stream:
                self.apply_snapshot(snapshot)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._live = False
            self._last_error = f"subscription failed: {e!r}"
            logger.warning("Tally subscription failed, switching to local mode", exc_info=True)
        finally:
            await stream.aclose()

    def start(self) -> None:
        if not self.config.enabled or self._task is not None:
            return
        self._task = asyncio.get_running_loop().create_task(self.listen())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def catalog_loaded(self) -> None:
        """The restaurant set changed: not live until the next emission."""
        self._live = False
        if self._task is not None:
            await self.stop()
            self.start()

    # ── Read path ────────────────────────────────────────────────────────

    @property
    def is_live(self) -> bool:
        return self._live

    def snapshot(self) -> Snapshot | None:
        """Tally to display, or ``None`` in local-only mode."""
        if not self._live:
            return None
        return dict(self._snapshot)

    def last_known(self) -> Snapshot:
        return dict(self._snapshot)

    def status(self) -> dict[str, Any]:
        return {
            "mode": "live" if self._live else "local",
            "live": self._live,
            "push_failures": self._push_failures,
            "last_error": self._last_error,
        }

    def clear(self) -> None:
        self._snapshot = {}
        self._live = False
        self._push_failures = 0
        self._last_error = None


_store = InMemoryCounterStore()
_sync = AggregateSync(_store)


def get_sync() -> AggregateSync:
    return _sync


def get_store() -> InMemoryCounterStore:
    return _store
