"""Live watchers: re-run a request on a timer or per block and push changed results.

Module structure:
- stream.py: ChangeStream publish/subscribe channel
- task.py: RepeatingTask (cancellable asyncio timer) and BlockTrigger (one tick per new block)
- base.py: SnapshotWatcher with the generation guard against stale ticks
- trade.py: TradeWatcher over TradeRouter.trade
- liquidity.py: Add-liquidity context and pair info watchers
- portfolio.py: PortfolioWatcher with one stream per pair
"""

from uniroute.watcher.base import SnapshotWatcher
from uniroute.watcher.liquidity import (
    AddLiquidityInfoWatcher,
    LiquidityWatcher,
    RemoveLiquidityInfoWatcher,
)
from uniroute.watcher.portfolio import PortfolioWatcher
from uniroute.watcher.stream import ChangeStream, Subscription
from uniroute.watcher.task import BlockTrigger, RepeatingTask
from uniroute.watcher.trade import TradeWatcher

__all__ = [
    "AddLiquidityInfoWatcher",
    "BlockTrigger",
    "ChangeStream",
    "LiquidityWatcher",
    "PortfolioWatcher",
    "RemoveLiquidityInfoWatcher",
    "RepeatingTask",
    "SnapshotWatcher",
    "Subscription",
    "TradeWatcher",
]
