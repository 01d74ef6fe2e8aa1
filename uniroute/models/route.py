"""Route, quote and transaction value objects."""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum

from uniroute.constants import MAX_ROUTE_LENGTH
from uniroute.errors import ConfigurationError, ErrorCode
from uniroute.models.token import Token
from uniroute.models.types import normalize_address


class ProtocolVersion(Enum):
    """Exchange protocol version."""

    V2 = "v2"
    V3 = "v3"


class TradeDirection(Enum):
    """Which side of the trade the caller fixes."""

    INPUT = "input"
    OUTPUT = "output"


class TradePath(Enum):
    """Overall shape of a trade, which decides unit and method selection."""

    ETH_TO_ERC20 = "eth_to_erc20"
    ERC20_TO_ETH = "erc20_to_eth"
    ERC20_TO_ERC20 = "erc20_to_erc20"


def trade_path(from_token: Token, to_token: Token) -> TradePath:
    """Classify a token pair into a trade path.

    Raises:
        ConfigurationError: If both sides are the same token or both are native
    """
    if from_token.same_as(to_token):
        raise ConfigurationError(
            f"Cannot trade {from_token.symbol} for itself", ErrorCode.INVALID_TRADE_PATH
        )
    if from_token.is_native and to_token.is_native:
        raise ConfigurationError("Cannot trade native for native", ErrorCode.INVALID_TRADE_PATH)
    if from_token.is_native:
        return TradePath.ETH_TO_ERC20
    if to_token.is_native:
        return TradePath.ERC20_TO_ETH
    return TradePath.ERC20_TO_ERC20


@dataclass(frozen=True)
class Route:
    """An ordered path of 2 to 4 distinct tokens on one protocol version.

    Attributes:
        tokens: Tokens in trade order; native legs keep the native pseudo-token
        version: Protocol the route executes on
        fee: LP fee charged per hop as a fraction (0.003 for V2)
        fee_tier: Raw V3 pool fee tier (e.g. 3000), None for V2
    """

    tokens: tuple[Token, ...]
    version: ProtocolVersion
    fee: Decimal
    fee_tier: int | None = None

    def __post_init__(self) -> None:
        if not 2 <= len(self.tokens) <= MAX_ROUTE_LENGTH:
            raise ValueError(f"Route must have 2-{MAX_ROUTE_LENGTH} tokens, got {len(self.tokens)}")
        addresses = [t.address for t in self.tokens]
        if len(set(addresses)) != len(addresses):
            raise ValueError(f"Route tokens must be distinct: {addresses}")

    @property
    def hops(self) -> int:
        """Number of swaps along the route."""
        return len(self.tokens) - 1

    @property
    def is_direct(self) -> bool:
        return len(self.tokens) == 2

    @property
    def addresses(self) -> tuple[str, ...]:
        return tuple(t.address for t in self.tokens)

    @property
    def text(self) -> str:
        """Human-readable label, e.g. 'ETH > USDC > DAI'."""
        return " > ".join(t.symbol for t in self.tokens)

    @property
    def key(self) -> tuple[ProtocolVersion, tuple[str, ...], int | None]:
        """Identity used for deduplication."""
        return (self.version, self.addresses, self.fee_tier)


@dataclass(frozen=True)
class Transaction:
    """Unsigned transaction envelope.

    `value` is a 0x-prefixed hex wei amount; token-only legs use "0x00".
    """

    to: str
    from_: str
    data: str
    value: str = "0x00"

    def __post_init__(self) -> None:
        object.__setattr__(self, "to", normalize_address(self.to))
        object.__setattr__(self, "from_", normalize_address(self.from_))

    @property
    def value_wei(self) -> int:
        return int(self.value, 16)

    def to_dict(self) -> dict[str, str]:
        return {"to": self.to, "from": self.from_, "data": self.data, "value": self.value}


@dataclass(frozen=True)
class RouteQuote:
    """A priced route.

    Attributes:
        route: The route that was priced
        direction: Which side the caller fixed
        base_amount: The caller's requested amount (human units)
        expected: Expected output (INPUT) or required input (OUTPUT)
        bound: Minimum output (INPUT) or maximum input (OUTPUT) after slippage
        transaction: Swap transaction for this route
        trade_expires: Unix time after which the quote is stale
        gas_price_estimated_by: Gas price (gwei) used for re-ranking, if any
    """

    route: Route
    direction: TradeDirection
    base_amount: Decimal
    expected: Decimal
    bound: Decimal
    transaction: Transaction
    trade_expires: int
    gas_price_estimated_by: Decimal | None = None

    @property
    def version(self) -> ProtocolVersion:
        return self.route.version

    @property
    def route_text(self) -> str:
        return self.route.text

    @property
    def liquidity_provider_fee(self) -> Decimal:
        return self.route.fee

    def with_gas_price(self, gas_price_gwei: Decimal) -> RouteQuote:
        """Copy of this quote tagged with the gas price used to rank it."""
        return replace(self, gas_price_estimated_by=gas_price_gwei)


__all__ = [
    "ProtocolVersion",
    "TradeDirection",
    "TradePath",
    "trade_path",
    "Route",
    "Transaction",
    "RouteQuote",
]
