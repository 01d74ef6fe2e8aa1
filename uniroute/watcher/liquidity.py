"""Live liquidity quotes and pair info."""

from __future__ import annotations

from decimal import Decimal

from uniroute.chain.client import BlockSource
from uniroute.liquidity.engine import LiquidityEngine
from uniroute.models.liquidity import AddLiquidityInfo, LiquidityTradeContext, RemoveLiquidityInfo
from uniroute.models.route import TradeDirection

from .base import SnapshotWatcher


def _engine_name(kind: str, engine: LiquidityEngine) -> str:
    return f"{kind}:{engine.token_a.symbol}/{engine.token_b.symbol}"


class LiquidityWatcher(SnapshotWatcher[LiquidityTradeContext]):
    """Keeps an add-liquidity context fresh.

    Emits when the expected counter amount or the wallet's LP balance moved,
    or when the cached context's deadline has passed. Given `blocks`, it
    refreshes once per new block instead of on a timer.
    """

    def __init__(
        self,
        engine: LiquidityEngine,
        interval: float | None = None,
        blocks: BlockSource | None = None,
    ):
        super().__init__(
            interval=interval or engine.settings.watch_interval_seconds,
            clock=engine.builder.clock,
            name=_engine_name("add-liquidity", engine),
            blocks=blocks,
        )
        self.engine = engine

    async def add_liquidity(
        self,
        amount: Decimal,
        direction: TradeDirection = TradeDirection.INPUT,
        counter_amount: Decimal | None = None,
    ) -> LiquidityTradeContext:
        """Quote a deposit and keep watching it."""
        return await self._watch(
            lambda: self.engine.add_liquidity_context(amount, direction, counter_amount)
        )

    def _matches(self, old: LiquidityTradeContext, new: LiquidityTradeContext) -> bool:
        return (
            old.token_a.same_as(new.token_a)
            and old.token_b.same_as(new.token_b)
            and old.transaction.from_ == new.transaction.from_
            and old.quote.base_convert_request == new.quote.base_convert_request
        )

    def _changed(self, old: LiquidityTradeContext, new: LiquidityTradeContext) -> bool:
        return (
            old.quote.expected_convert_quote != new.quote.expected_convert_quote
            or old.quote.lp_balance != new.quote.lp_balance
        )


class AddLiquidityInfoWatcher(SnapshotWatcher[AddLiquidityInfo]):
    """Emits AddLiquidityInfo when the per-LP ratios or the LP balance move."""

    def __init__(
        self,
        engine: LiquidityEngine,
        interval: float | None = None,
        blocks: BlockSource | None = None,
    ):
        super().__init__(
            interval=interval or engine.settings.watch_interval_seconds,
            clock=engine.builder.clock,
            name=_engine_name("add-liquidity-info", engine),
            blocks=blocks,
        )
        self.engine = engine

    async def watch(self) -> AddLiquidityInfo:
        return await self._watch(self.engine.add_liquidity_info)

    def _changed(self, old: AddLiquidityInfo, new: AddLiquidityInfo) -> bool:
        return (
            old.token_a_per_lp_token != new.token_a_per_lp_token
            or old.token_b_per_lp_token != new.token_b_per_lp_token
            or old.lp_token_balance != new.lp_token_balance
        )


class RemoveLiquidityInfoWatcher(SnapshotWatcher[RemoveLiquidityInfo]):
    """Emits RemoveLiquidityInfo when the per-LP ratios or the LP balance move."""

    def __init__(
        self,
        engine: LiquidityEngine,
        interval: float | None = None,
        blocks: BlockSource | None = None,
    ):
        super().__init__(
            interval=interval or engine.settings.watch_interval_seconds,
            clock=engine.builder.clock,
            name=_engine_name("remove-liquidity-info", engine),
            blocks=blocks,
        )
        self.engine = engine

    async def watch(self) -> RemoveLiquidityInfo:
        return await self._watch(self.engine.remove_liquidity_info)

    def _changed(self, old: RemoveLiquidityInfo, new: RemoveLiquidityInfo) -> bool:
        return (
            old.token_a_per_lp_token != new.token_a_per_lp_token
            or old.token_b_per_lp_token != new.token_b_per_lp_token
            or old.lp_token_balance != new.lp_token_balance
        )


__all__ = ["LiquidityWatcher", "AddLiquidityInfoWatcher", "RemoveLiquidityInfoWatcher"]
