"""Base for watchers that re-run one request and emit changed snapshots.

Lifecycle: idle -> watching (timer running, snapshot cached) -> idle.

Every start and stop bumps a generation counter. A tick remembers the
generation it started under and drops its result if the counter moved while
the request was in flight, so a stopped or restarted watcher never emits a
stale snapshot.
"""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

import structlog

from uniroute.chain.client import BlockSource
from uniroute.constants import DEFAULT_WATCH_INTERVAL_SECONDS

from .stream import ChangeStream
from .task import BlockTrigger, RepeatingTask

logger = structlog.get_logger()

T = TypeVar("T")


class SnapshotWatcher(Generic[T]):
    """Re-runs a cached request on a timer and emits when the result changes.

    Subclasses implement `_changed` (and optionally `_matches`).

    Ticks come from a timer, or from new blocks when `blocks` is given. Both
    triggers go through the same generation guard.

    Args:
        interval: Seconds between ticks (between head polls in block mode)
        clock: Returns the current unix time, used for deadline checks
        name: Label used in logs and for the timer task
        blocks: Chain head source; switches ticks to one per new block
    """

    def __init__(
        self,
        interval: float = DEFAULT_WATCH_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.time,
        name: str = "watcher",
        blocks: BlockSource | None = None,
    ):
        self.name = name
        self.clock = clock
        self.changes: ChangeStream[T] = ChangeStream(name)
        self.timer: RepeatingTask | BlockTrigger
        if blocks is None:
            self.timer = RepeatingTask(self.tick, interval, immediate=False, name=name)
        else:
            self.timer = BlockTrigger(self.tick, blocks, interval, name=name)
        self.snapshot: T | None = None
        self._fetch: Callable[[], Awaitable[T]] | None = None
        self._generation = 0

    @property
    def active(self) -> bool:
        return self.timer.active

    def _changed(self, old: T, new: T) -> bool:
        raise NotImplementedError

    def _matches(self, old: T, new: T) -> bool:
        """False if `new` belongs to a different request than `old`."""
        return True

    def _deadline_elapsed(self, snapshot: T) -> bool:
        expires = getattr(snapshot, "trade_expires", None)
        return expires is not None and expires <= int(self.clock())

    async def _watch(self, fetch: Callable[[], Awaitable[T]]) -> T:
        """Stop any previous request, run `fetch`, cache it and start the timer."""
        self.stop()
        generation = self._generation
        snapshot = await fetch()
        if generation != self._generation:
            # another request replaced this one while it was in flight
            return snapshot
        self._fetch = fetch
        self.snapshot = snapshot
        self.timer.restart()
        logger.debug("watcher_started", watcher=self.name)
        return snapshot

    async def tick(self) -> None:
        """Re-run the cached request once and emit if the result changed."""
        if not self.changes.has_observers or self.snapshot is None or self._fetch is None:
            return

        generation = self._generation
        new = await self._fetch()
        if generation != self._generation or self.changes.completed:
            logger.debug("watcher_tick_discarded", watcher=self.name)
            return

        old = self.snapshot
        if not self._matches(old, new):
            logger.debug("watcher_tick_mismatch", watcher=self.name)
            return
        if not (self._changed(old, new) or self._deadline_elapsed(old)):
            return

        self.snapshot = new
        logger.debug("watcher_snapshot_changed", watcher=self.name)
        self.changes.emit(new)

    def stop(self) -> None:
        """Cancel the timer; results of in-flight ticks are discarded."""
        self._generation += 1
        self.timer.cancel()

    def destroy(self) -> None:
        """Stop watching and complete the change stream."""
        self.stop()
        self.snapshot = None
        self._fetch = None
        self.changes.complete()


__all__ = ["SnapshotWatcher"]
