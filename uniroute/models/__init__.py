"""Immutable value objects for routing, quoting and liquidity."""

from uniroute.models.liquidity import (
    AddLiquidityInfo,
    AddLiquidityQuote,
    LiquidityTradeContext,
    PairLiquiditySnapshot,
    PairState,
    RemoveLiquidityInfo,
    RemoveLiquidityQuote,
)
from uniroute.models.network import CloneContracts, CustomNetwork
from uniroute.models.route import (
    ProtocolVersion,
    Route,
    RouteQuote,
    TradeDirection,
    TradePath,
    Transaction,
    trade_path,
)
from uniroute.models.token import Token
from uniroute.models.trade import BalanceInfo, TradeContext

__all__ = [
    "AddLiquidityInfo",
    "AddLiquidityQuote",
    "BalanceInfo",
    "CloneContracts",
    "CustomNetwork",
    "LiquidityTradeContext",
    "PairLiquiditySnapshot",
    "PairState",
    "ProtocolVersion",
    "RemoveLiquidityInfo",
    "RemoveLiquidityQuote",
    "Route",
    "RouteQuote",
    "Token",
    "TradeContext",
    "TradeDirection",
    "TradePath",
    "Transaction",
    "trade_path",
]
