"""Live trade quotes."""

from __future__ import annotations

from decimal import Decimal

from uniroute.chain.client import BlockSource
from uniroute.models.route import TradeDirection
from uniroute.models.trade import TradeContext
from uniroute.router import TradeRouter

from .base import SnapshotWatcher


class TradeWatcher(SnapshotWatcher[TradeContext]):
    """Keeps a TradeContext fresh and emits it on `changes` when it moves.

    A new context is emitted when the expected quote, the route or the LP fee
    changed, or when the cached context's deadline has passed.
    """

    def __init__(
        self,
        router: TradeRouter,
        interval: float | None = None,
        blocks: BlockSource | None = None,
    ):
        super().__init__(
            interval=interval or router.settings.watch_interval_seconds,
            clock=router.builder.clock,
            name=f"trade:{router.from_token.symbol}>{router.to_token.symbol}",
            blocks=blocks,
        )
        self.router = router

    async def trade(
        self, amount: Decimal, direction: TradeDirection = TradeDirection.INPUT
    ) -> TradeContext:
        """Quote a trade and keep watching it.

        Any previous request on this watcher is cancelled first.
        """
        return await self._watch(lambda: self.router.trade(amount, direction))

    def _matches(self, old: TradeContext, new: TradeContext) -> bool:
        return (
            old.from_token.same_as(new.from_token)
            and old.to_token.same_as(new.to_token)
            and old.transaction.from_ == new.transaction.from_
            and old.direction is new.direction
            and old.base_convert_request == new.base_convert_request
        )

    def _changed(self, old: TradeContext, new: TradeContext) -> bool:
        return (
            old.expected_convert_quote != new.expected_convert_quote
            or old.route_text != new.route_text
            or old.liquidity_provider_fee != new.liquidity_provider_fee
        )


__all__ = ["TradeWatcher"]
