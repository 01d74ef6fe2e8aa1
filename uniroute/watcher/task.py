"""Cancellable repeating task and new-block trigger."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import structlog

from uniroute.chain.client import BlockSource

logger = structlog.get_logger()


class RepeatingTask:
    """Runs an async callback every `interval` seconds on the running loop.

    At most one underlying asyncio.Task exists at a time: `restart()` cancels
    the current one before scheduling its replacement. A failing tick is
    logged and the schedule continues.

    Args:
        callback: Coroutine function run on each tick
        interval: Seconds between ticks
        immediate: Run the first tick right away instead of after one interval
        name: Label used for the task and in logs
    """

    def __init__(
        self,
        callback: Callable[[], Awaitable[None]],
        interval: float,
        *,
        immediate: bool = True,
        name: str = "repeating-task",
    ):
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.callback = callback
        self.interval = interval
        self.immediate = immediate
        self.name = name
        self._task: asyncio.Task | None = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the task. Must be called with a running event loop.

        Raises:
            RuntimeError: If the task is already active
        """
        if self.active:
            raise RuntimeError(f"{self.name} is already running")
        self._task = asyncio.get_running_loop().create_task(self._run(), name=self.name)

    def cancel(self) -> None:
        """Cancel the task if it is running."""
        if self._task is not None:
            if not self._task.done():
                self._task.cancel()
            self._task = None

    def restart(self) -> None:
        """Cancel any running task, then start a fresh one."""
        self.cancel()
        self.start()

    async def _run(self) -> None:
        if not self.immediate:
            await asyncio.sleep(self.interval)
        while True:
            try:
                await self.callback()
            except Exception:
                logger.exception("repeating_task_tick_failed", task=self.name)
            await asyncio.sleep(self.interval)


class BlockTrigger:
    """Runs an async callback once per new block.

    The chain head is polled every `interval` seconds. The first poll after a
    start only records the head; each later poll that sees a higher block
    number runs the callback once, however many blocks went by. The handle
    has the same start/cancel/restart shape as RepeatingTask, and `restart()`
    cancels the running poller before starting a new one.

    Args:
        callback: Coroutine function run on each new block
        blocks: Source of the latest block number
        interval: Seconds between head polls
        name: Label used for the task and in logs
    """

    def __init__(
        self,
        callback: Callable[[], Awaitable[None]],
        blocks: BlockSource,
        interval: float,
        *,
        name: str = "block-trigger",
    ):
        self.callback = callback
        self.blocks = blocks
        self.name = name
        self.last_block: int | None = None
        self._poller = RepeatingTask(self.poll, interval, name=name)

    @property
    def interval(self) -> float:
        return self._poller.interval

    @property
    def active(self) -> bool:
        return self._poller.active

    def start(self) -> None:
        """Start polling from the current head.

        Raises:
            RuntimeError: If the trigger is already active
        """
        self.last_block = None
        self._poller.start()

    def cancel(self) -> None:
        self._poller.cancel()

    def restart(self) -> None:
        self.cancel()
        self.start()

    async def poll(self) -> bool:
        """Read the head once; run the callback if a new block arrived.

        Returns:
            True if the callback ran
        """
        number = await self.blocks.block_number()
        previous = self.last_block
        if previous is not None and number <= previous:
            return False
        self.last_block = number
        if previous is None:
            return False
        logger.debug("new_block", task=self.name, block=number)
        await self.callback()
        return True


__all__ = ["BlockTrigger", "RepeatingTask"]
