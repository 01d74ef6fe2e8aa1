"""Caller-facing trade result."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from uniroute.models.route import ProtocolVersion, RouteQuote, TradeDirection, Transaction
from uniroute.models.token import Token


@dataclass(frozen=True)
class BalanceInfo:
    """A wallet balance and whether it covers the trade."""

    has_enough: bool
    balance: Decimal


@dataclass(frozen=True)
class TradeContext:
    """Full result of a quote/trade request.

    Exactly one of `min_amount_convert_quote` (INPUT) and `maximum_sent`
    (OUTPUT) is set.
    """

    version: ProtocolVersion
    direction: TradeDirection
    base_convert_request: Decimal
    expected_convert_quote: Decimal
    min_amount_convert_quote: Decimal | None
    maximum_sent: Decimal | None
    liquidity_provider_fee: tuple[Decimal, ...]
    liquidity_provider_fee_percent: Decimal
    trade_expires: int
    route_path_tokens: tuple[Token, ...]
    route_text: str
    route_path: tuple[str, ...]
    has_enough_allowance: bool
    approval_transaction: Transaction | None
    from_token: Token
    to_token: Token
    from_balance: BalanceInfo
    to_balance: Decimal
    transaction: Transaction
    gas_price_estimated_by: Decimal | None
    all_tried_routes: tuple[RouteQuote, ...]

    @property
    def bound(self) -> Decimal:
        """The slippage-bounded counterpart for whichever direction applies."""
        if self.direction is TradeDirection.INPUT:
            assert self.min_amount_convert_quote is not None
            return self.min_amount_convert_quote
        assert self.maximum_sent is not None
        return self.maximum_sent


__all__ = ["BalanceInfo", "TradeContext"]
