"""Multi-subscriber change stream.

Dispatch is synchronous: `emit` calls every live subscriber before it
returns, and a subscriber removed by `unsubscribe` (or by `complete`) is
never called again, even in the middle of an emit.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from typing import Generic, TypeVar

import structlog

logger = structlog.get_logger()

T = TypeVar("T")

_DONE = object()


class Subscription:
    """Handle returned by ChangeStream.subscribe."""

    def __init__(self, stream: ChangeStream, callback: Callable, on_complete: Callable[[], None] | None):
        self._stream = stream
        self.callback = callback
        self.on_complete = on_complete
        self.closed = False

    def unsubscribe(self) -> None:
        """Stop delivery. Safe to call more than once."""
        if not self.closed:
            self.closed = True
            self._stream._remove(self)


class ChangeStream(Generic[T]):
    """Publish/subscribe channel for one live subscription."""

    def __init__(self, name: str = ""):
        self.name = name
        self._subscriptions: list[Subscription] = []
        self.completed = False

    @property
    def has_observers(self) -> bool:
        return bool(self._subscriptions)

    def subscribe(
        self,
        callback: Callable[[T], None],
        on_complete: Callable[[], None] | None = None,
    ) -> Subscription:
        """Register a subscriber.

        Args:
            callback: Called with every emitted item
            on_complete: Called once when the stream completes

        Raises:
            RuntimeError: If the stream has already completed
        """
        if self.completed:
            raise RuntimeError(f"Stream {self.name!r} is completed")
        subscription = Subscription(self, callback, on_complete)
        self._subscriptions.append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def emit(self, item: T) -> None:
        """Deliver `item` to every live subscriber. No-op once completed."""
        if self.completed:
            return
        for subscription in list(self._subscriptions):
            if subscription.closed:
                continue
            try:
                subscription.callback(item)
            except Exception:
                logger.exception("stream_subscriber_failed", stream=self.name)

    def complete(self) -> None:
        """Close the stream: notify and drop every subscriber."""
        if self.completed:
            return
        self.completed = True
        subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            subscription.closed = True
            if subscription.on_complete is not None:
                subscription.on_complete()

    async def listen(self) -> AsyncIterator[T]:
        """Iterate over emitted items until the stream completes.

        Example:
            async for context in watcher.changes.listen():
                ...
        """
        queue: asyncio.Queue = asyncio.Queue()
        subscription = self.subscribe(queue.put_nowait, lambda: queue.put_nowait(_DONE))
        try:
            while True:
                item = await queue.get()
                if item is _DONE:
                    return
                yield item
        finally:
            subscription.unsubscribe()


__all__ = ["ChangeStream", "Subscription"]
