"""Tests for per-pair live LP positions."""

import asyncio
from decimal import Decimal

import pytest

from uniroute.models.liquidity import PairLiquiditySnapshot
from uniroute.watcher.portfolio import PortfolioWatcher
from tests.helpers import NOW, PAIR_A, PAIR_B, USDC, WALLET, WETH


def make_snapshot(pair: str, block_timestamp_last: int = NOW, lp_tokens: str = "1") -> PairLiquiditySnapshot:
    return PairLiquiditySnapshot(
        pair_address=pair,
        token0_address=USDC,
        token1_address=WETH,
        token0=None,
        token1=None,
        pair_token0_balance=0,
        pair_token1_balance=0,
        token0_estimated_pool=None,
        token1_estimated_pool=None,
        total_supply=Decimal(100),
        lp_tokens=Decimal(lp_tokens),
        lp_decimals=18,
        pool_share="1.00",
        block_timestamp_last=block_timestamp_last,
    )


class FakeScanner:
    """Scanner returning the current snapshot of each requested pair."""

    def __init__(self, *snapshots: PairLiquiditySnapshot):
        self.wallet = WALLET
        self.snapshots = {s.pair_address: s for s in snapshots}
        self.calls: list[list[str]] = []
        self.gate: asyncio.Event | None = None

    def update(self, snapshot: PairLiquiditySnapshot) -> None:
        self.snapshots[snapshot.pair_address] = snapshot

    async def pair_liquidity(self, pair_addresses):
        pair_addresses = list(pair_addresses)
        self.calls.append(pair_addresses)
        result = [self.snapshots[a] for a in pair_addresses if a in self.snapshots]
        if self.gate is not None:
            await self.gate.wait()
        return result


@pytest.fixture
def scanner():
    return FakeScanner(make_snapshot(PAIR_A), make_snapshot(PAIR_B))


@pytest.fixture
def watcher(scanner):
    return PortfolioWatcher(scanner, interval=60)


async def watch_both(watcher: PortfolioWatcher) -> dict[str, list]:
    """Watch both pairs with the timer stopped and one subscriber each."""
    await watcher.watch_pairs([PAIR_A, PAIR_B])
    watcher.timer.cancel()
    received: dict[str, list] = {PAIR_A: [], PAIR_B: []}
    for pair, items in received.items():
        watcher.stream(pair).subscribe(items.append)
    return received


class TestWatchPairs:
    @pytest.mark.asyncio
    async def test_returns_snapshots_and_starts(self, watcher):
        snapshots = await watcher.watch_pairs([PAIR_A, PAIR_B.upper()[2:]])

        assert [s.pair_address for s in snapshots] == [PAIR_A, PAIR_B]
        assert set(watcher.streams) == {PAIR_A, PAIR_B}
        assert watcher.active
        watcher.destroy()

    def test_unknown_pair_stream(self, watcher):
        with pytest.raises(KeyError):
            watcher.stream(PAIR_A)


class TestTick:
    """Tests for per-pair change fan-out."""

    @pytest.mark.asyncio
    async def test_only_advanced_pairs_emit(self, watcher, scanner):
        received = await watch_both(watcher)

        scanner.update(make_snapshot(PAIR_A, NOW + 12, lp_tokens="2"))
        await watcher.tick()

        assert [s.lp_tokens for s in received[PAIR_A]] == [Decimal(2)]
        assert received[PAIR_B] == []

    @pytest.mark.asyncio
    async def test_older_timestamp_ignored(self, watcher, scanner):
        received = await watch_both(watcher)

        scanner.update(make_snapshot(PAIR_A, NOW - 12))
        await watcher.tick()

        assert received[PAIR_A] == []

    @pytest.mark.asyncio
    async def test_scans_only_observed_pairs(self, watcher, scanner):
        await watcher.watch_pairs([PAIR_A, PAIR_B])
        watcher.timer.cancel()
        watcher.stream(PAIR_B).subscribe(lambda snapshot: None)

        await watcher.tick()

        assert scanner.calls[-1] == [PAIR_B]

    @pytest.mark.asyncio
    async def test_in_flight_tick_dropped_after_resync(self, watcher, scanner):
        received = await watch_both(watcher)

        scanner.update(make_snapshot(PAIR_A, NOW + 12))
        scanner.gate = asyncio.Event()
        tick = asyncio.create_task(watcher.tick())
        await asyncio.sleep(0)
        watcher.resync()
        scanner.gate.set()
        await tick

        assert received[PAIR_A] == []
        watcher.destroy()


class TestLifecycle:
    """Tests for unsubscribe, resync and destroy."""

    @pytest.mark.asyncio
    async def test_unsubscribe_one_pair(self, watcher, scanner):
        received = await watch_both(watcher)
        completions = []
        watcher.stream(PAIR_A).subscribe(lambda snapshot: None, lambda: completions.append(PAIR_A))

        watcher.unsubscribe_pair(PAIR_A)
        scanner.update(make_snapshot(PAIR_B, NOW + 12))
        await watcher.tick()

        assert completions == [PAIR_A]
        assert set(watcher.streams) == {PAIR_B}
        assert len(received[PAIR_B]) == 1

    @pytest.mark.asyncio
    async def test_unsubscribing_last_pair_stops(self, watcher):
        await watcher.watch_pairs([PAIR_A])

        watcher.unsubscribe_pair(PAIR_A)

        assert not watcher.active
        assert watcher.streams == {}

    @pytest.mark.asyncio
    async def test_resync_keeps_one_timer(self, watcher):
        await watcher.watch_pairs([PAIR_A])
        tasks = [watcher.timer._task]

        for _ in range(3):
            watcher.resync()
            tasks.append(watcher.timer._task)
        await asyncio.sleep(0.01)

        assert all(task.cancelled() for task in tasks[:-1])
        assert not tasks[-1].done()
        watcher.destroy()

    @pytest.mark.asyncio
    async def test_destroy_completes_every_stream(self, watcher):
        completions = []
        await watcher.watch_pairs([PAIR_A, PAIR_B])
        for pair in (PAIR_A, PAIR_B):
            watcher.stream(pair).subscribe(lambda snapshot: None, lambda pair=pair: completions.append(pair))

        watcher.destroy()

        assert sorted(completions) == [PAIR_A, PAIR_B]
        assert not watcher.active
        assert watcher.snapshots == {}
