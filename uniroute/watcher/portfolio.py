"""Live LP positions, one change stream per pair."""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from uniroute.constants import DEFAULT_WATCH_INTERVAL_SECONDS
from uniroute.models.liquidity import PairLiquiditySnapshot
from uniroute.models.types import normalize_address
from uniroute.portfolio.scanner import PortfolioScanner

from .stream import ChangeStream
from .task import RepeatingTask

logger = structlog.get_logger()


class PortfolioWatcher:
    """Refreshes every watched pair in one batched scan per tick.

    A pair's stream emits when the pair's `block_timestamp_last` advanced,
    i.e. its reserves were updated on-chain. Unsubscribing one pair completes
    only that pair's stream.

    Args:
        scanner: Scanner bound to the watched wallet
        interval: Seconds between refreshes
    """

    def __init__(self, scanner: PortfolioScanner, interval: float = DEFAULT_WATCH_INTERVAL_SECONDS):
        self.scanner = scanner
        self.timer = RepeatingTask(
            self.tick, interval, immediate=False, name=f"portfolio:{scanner.wallet}"
        )
        self.streams: dict[str, ChangeStream[PairLiquiditySnapshot]] = {}
        self.snapshots: dict[str, PairLiquiditySnapshot] = {}
        self._generation = 0

    @property
    def active(self) -> bool:
        return self.timer.active

    async def watch_pairs(self, pair_addresses: Iterable[str]) -> list[PairLiquiditySnapshot]:
        """Start watching pairs and return their current snapshots.

        Pairs already watched keep their streams. The timer is restarted.
        """
        addresses = [normalize_address(a, validate=True) for a in pair_addresses]
        for address in addresses:
            if address not in self.streams:
                self.streams[address] = ChangeStream(f"pair:{address}")

        generation = self._generation
        snapshots = await self.scanner.pair_liquidity(addresses)
        if generation == self._generation:
            for snapshot in snapshots:
                if snapshot.pair_address in self.streams:
                    self.snapshots[snapshot.pair_address] = snapshot
        self.resync()
        return snapshots

    def stream(self, pair_address: str) -> ChangeStream[PairLiquiditySnapshot]:
        """Change stream of a watched pair.

        Raises:
            KeyError: If the pair is not watched
        """
        return self.streams[normalize_address(pair_address)]

    async def tick(self) -> None:
        """Refresh all pairs that have observers and fan out the changes."""
        watched = [a for a, s in self.streams.items() if s.has_observers]
        if not watched:
            return

        generation = self._generation
        snapshots = await self.scanner.pair_liquidity(watched)
        if generation != self._generation:
            logger.debug("watcher_tick_discarded", watcher="portfolio")
            return

        for snapshot in snapshots:
            address = snapshot.pair_address
            stream = self.streams.get(address)
            if stream is None:
                # unsubscribed while the scan was in flight
                continue
            old = self.snapshots.get(address)
            if old is not None and snapshot.block_timestamp_last <= old.block_timestamp_last:
                continue
            self.snapshots[address] = snapshot
            stream.emit(snapshot)

    def unsubscribe_pair(self, pair_address: str) -> None:
        """Stop watching one pair; the others keep running."""
        address = normalize_address(pair_address)
        stream = self.streams.pop(address, None)
        self.snapshots.pop(address, None)
        if stream is not None:
            stream.complete()
        if not self.streams:
            self.stop()

    def resync(self) -> None:
        """Restart the refresh timer. The running timer is always cancelled first."""
        self.stop()
        self.timer.start()

    def stop(self) -> None:
        self._generation += 1
        self.timer.cancel()

    def destroy(self) -> None:
        """Stop the timer and complete every pair stream."""
        self.stop()
        streams, self.streams = self.streams, {}
        self.snapshots.clear()
        for stream in streams.values():
            stream.complete()


__all__ = ["PortfolioWatcher"]
