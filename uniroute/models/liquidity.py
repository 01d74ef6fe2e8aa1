"""Liquidity value objects: pair state, add/remove quotes and portfolio snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from uniroute.models.route import ProtocolVersion, TradeDirection, Transaction
from uniroute.models.token import Token
from uniroute.models.trade import BalanceInfo


@dataclass(frozen=True)
class PairState:
    """On-chain state of a V2 pair, oriented to the caller's (tokenA, tokenB).

    Reserves are in human units. `reversed` is True when the pair's canonical
    token0 is the caller's tokenB.
    """

    pair_address: str | None
    reserve_a: Decimal
    reserve_b: Decimal
    total_supply: Decimal
    lp_balance: Decimal
    reversed: bool
    block_timestamp_last: int = 0

    @property
    def exists(self) -> bool:
        return self.pair_address is not None

    @property
    def has_liquidity(self) -> bool:
        return self.exists and self.reserve_a > 0 and self.reserve_b > 0 and self.total_supply > 0


@dataclass(frozen=True)
class AddLiquidityQuote:
    """Priced add-liquidity request.

    With direction INPUT the caller fixed token A and token B was derived;
    with OUTPUT the caller fixed token B.
    """

    direction: TradeDirection
    amount_a: Decimal
    amount_b: Decimal
    min_amount_a: Decimal
    min_amount_b: Decimal
    is_first_supplier: bool
    lp_tokens_to_receive: Decimal
    pool_share: str
    lp_balance: Decimal
    transaction: Transaction
    trade_expires: int
    version: ProtocolVersion = ProtocolVersion.V2

    @property
    def base_convert_request(self) -> Decimal:
        return self.amount_a if self.direction is TradeDirection.INPUT else self.amount_b

    @property
    def expected_convert_quote(self) -> Decimal:
        return self.amount_b if self.direction is TradeDirection.INPUT else self.amount_a


@dataclass(frozen=True)
class LiquidityTradeContext:
    """Add-liquidity quote plus balance and allowance checks for both tokens."""

    quote: AddLiquidityQuote
    token_a: Token
    token_b: Token
    token_a_balance: BalanceInfo
    token_b_balance: BalanceInfo
    token_a_has_enough_allowance: bool
    token_b_has_enough_allowance: bool
    token_a_approval_transaction: Transaction | None
    token_b_approval_transaction: Transaction | None

    @property
    def transaction(self) -> Transaction:
        return self.quote.transaction

    @property
    def trade_expires(self) -> int:
        return self.quote.trade_expires


@dataclass(frozen=True)
class AddLiquidityInfo:
    """Ratio-based view of a pair for a prospective supplier."""

    lp_token: str | None
    lp_token_balance: Decimal
    token_a_per_lp_token: Decimal
    token_b_per_lp_token: Decimal
    estimated_token_a_owned: Decimal
    estimated_token_b_owned: Decimal
    allowance_a: Decimal
    allowance_b: Decimal
    is_first_supplier: bool
    self_pool_lp_token: Decimal
    total_pool_lp_token: Decimal
    version: ProtocolVersion = ProtocolVersion.V2


@dataclass(frozen=True)
class RemoveLiquidityInfo:
    """A wallet's position in a pair, as seen before burning LP tokens."""

    lp_address: str
    lp_token_balance: Decimal
    token_a_per_lp_token: Decimal
    token_b_per_lp_token: Decimal
    estimated_token_a_owned: Decimal
    estimated_token_b_owned: Decimal
    pool_share: str
    allowance: Decimal
    version: ProtocolVersion = ProtocolVersion.V2


@dataclass(frozen=True)
class RemoveLiquidityQuote:
    """Priced remove-liquidity request."""

    lp_amount: Decimal
    amount_a: Decimal
    amount_b: Decimal
    min_amount_a: Decimal
    min_amount_b: Decimal
    transaction: Transaction
    trade_expires: int
    version: ProtocolVersion = ProtocolVersion.V2


@dataclass(frozen=True)
class PairLiquiditySnapshot:
    """A wallet's LP position in one pair.

    Token metadata is None when the token could not be resolved; the estimated
    pool amounts are None in that case as well.
    """

    pair_address: str
    token0_address: str
    token1_address: str
    token0: Token | None
    token1: Token | None
    pair_token0_balance: int
    pair_token1_balance: int
    token0_estimated_pool: Decimal | None
    token1_estimated_pool: Decimal | None
    total_supply: Decimal
    lp_tokens: Decimal
    lp_decimals: int
    pool_share: str
    block_timestamp_last: int
    version: ProtocolVersion = ProtocolVersion.V2


__all__ = [
    "PairState",
    "AddLiquidityQuote",
    "LiquidityTradeContext",
    "AddLiquidityInfo",
    "RemoveLiquidityInfo",
    "RemoveLiquidityQuote",
    "PairLiquiditySnapshot",
]
