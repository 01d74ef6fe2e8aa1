"""Tests for the snapshot watcher lifecycle and stale-tick guard."""

import asyncio
from dataclasses import dataclass

import pytest

from uniroute.watcher.base import SnapshotWatcher
from tests.helpers import NOW


@dataclass(frozen=True)
class Reading:
    value: int
    trade_expires: int | None = None


class ValueWatcher(SnapshotWatcher[Reading]):
    def _changed(self, old: Reading, new: Reading) -> bool:
        return old.value != new.value


class FakeSource:
    """Fetch callable whose result is captured before an optional gate."""

    def __init__(self, value: int = 1, trade_expires: int | None = None):
        self.value = value
        self.trade_expires = trade_expires
        self.calls = 0
        self.gate: asyncio.Event | None = None

    async def fetch(self) -> Reading:
        self.calls += 1
        reading = Reading(self.value, self.trade_expires)
        if self.gate is not None:
            await self.gate.wait()
        return reading


@pytest.fixture
def watcher():
    return ValueWatcher(interval=60, clock=lambda: NOW, name="test")


async def start(watcher: ValueWatcher, source: FakeSource) -> list[Reading]:
    """Start watching, stop the timer so ticks are driven by the test, subscribe."""
    await watcher._watch(source.fetch)
    watcher.timer.cancel()
    received: list[Reading] = []
    watcher.changes.subscribe(received.append)
    return received


class TestWatch:
    @pytest.mark.asyncio
    async def test_caches_and_starts_timer(self, watcher):
        snapshot = await watcher._watch(FakeSource(7).fetch)

        assert snapshot == Reading(7)
        assert watcher.snapshot == snapshot
        assert watcher.active
        watcher.stop()

    @pytest.mark.asyncio
    async def test_failed_request_leaves_watcher_idle(self, watcher):
        async def broken():
            raise RuntimeError("rpc down")

        with pytest.raises(RuntimeError):
            await watcher._watch(broken)
        assert not watcher.active
        assert watcher.snapshot is None

    @pytest.mark.asyncio
    async def test_replaced_request_not_cached(self, watcher):
        slow = FakeSource(1)
        slow.gate = asyncio.Event()
        first = asyncio.create_task(watcher._watch(slow.fetch))
        await asyncio.sleep(0)

        await watcher._watch(FakeSource(2).fetch)
        slow.gate.set()
        await first

        assert watcher.snapshot == Reading(2)
        watcher.stop()


class TestTick:
    """Tests for change detection on each tick."""

    @pytest.mark.asyncio
    async def test_emits_on_change(self, watcher):
        source = FakeSource(1)
        received = await start(watcher, source)

        await watcher.tick()
        source.value = 2
        await watcher.tick()

        assert received == [Reading(2)]
        assert watcher.snapshot == Reading(2)

    @pytest.mark.asyncio
    async def test_no_observers_no_request(self, watcher):
        source = FakeSource(1)
        await watcher._watch(source.fetch)

        await watcher.tick()

        assert source.calls == 1
        watcher.stop()

    @pytest.mark.asyncio
    async def test_elapsed_deadline_emits_unchanged_result(self, watcher):
        source = FakeSource(1, trade_expires=NOW)
        received = await start(watcher, source)

        source.trade_expires = NOW + 1200
        await watcher.tick()

        assert received == [Reading(1, NOW + 1200)]

    @pytest.mark.asyncio
    async def test_future_deadline_not_emitted(self, watcher):
        source = FakeSource(1, trade_expires=NOW + 1)
        received = await start(watcher, source)

        await watcher.tick()

        assert received == []

    @pytest.mark.asyncio
    async def test_in_flight_tick_dropped_after_stop(self, watcher):
        source = FakeSource(1)
        received = await start(watcher, source)

        source.value = 2
        source.gate = asyncio.Event()
        tick = asyncio.create_task(watcher.tick())
        await asyncio.sleep(0)
        watcher.stop()
        source.gate.set()
        await tick

        assert received == []
        assert watcher.snapshot == Reading(1)


class TestDestroy:
    @pytest.mark.asyncio
    async def test_completes_stream(self, watcher):
        completions = []
        await watcher._watch(FakeSource(1).fetch)
        watcher.changes.subscribe(lambda item: None, lambda: completions.append(True))

        watcher.destroy()

        assert completions == [True]
        assert not watcher.active
        assert watcher.snapshot is None
        await watcher.tick()
