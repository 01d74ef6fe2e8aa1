"""V2 liquidity quoting.

Module structure:
- math.py: Constant-product LP math (minted liquidity, pool share, proportional burn)
- engine.py: LiquidityEngine reading a pair and quoting add/remove operations
"""

from uniroute.liquidity.engine import LiquidityEngine, PairReading
from uniroute.liquidity.math import (
    MINIMUM_LIQUIDITY_FLOOR,
    liquidity_minted,
    pool_share_after_deposit,
    pool_share_of_supply,
    proportional_amount,
    quote_counter_amount,
)

__all__ = [
    "LiquidityEngine",
    "MINIMUM_LIQUIDITY_FLOOR",
    "PairReading",
    "liquidity_minted",
    "pool_share_after_deposit",
    "pool_share_of_supply",
    "proportional_amount",
    "quote_counter_amount",
]
