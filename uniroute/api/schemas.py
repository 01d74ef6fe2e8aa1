"""Pydantic request/response models for the HTTP API.

Amounts cross the HTTP boundary as decimal strings in human units so no
precision is lost to JSON floats.
"""

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

from uniroute.models.liquidity import LiquidityTradeContext, PairLiquiditySnapshot, RemoveLiquidityQuote
from uniroute.models.route import Transaction
from uniroute.models.trade import TradeContext
from uniroute.models.types import Address, Bytes, DecimalStr
from uniroute.quoting.amounts import format_amount

Direction = Literal["input", "output"]


def _amount(value: Decimal | None) -> str | None:
    return None if value is None else format_amount(value)


class TransactionModel(BaseModel):
    """Unsigned transaction, ready for an external signer."""

    to: Address
    from_: Address = Field(alias="from")
    data: Bytes
    value: str = Field(description="Wei amount as 0x-prefixed hex")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_transaction(cls, tx: Transaction | None) -> "TransactionModel | None":
        if tx is None:
            return None
        return cls(to=tx.to, from_=tx.from_, data=tx.data, value=tx.value)


class ErrorResponse(BaseModel):
    """Body of a 400 response."""

    code: str
    message: str


# =============================================================================
# Trades
# =============================================================================


class TradeQuoteRequest(BaseModel):
    """Quote a trade between two tokens for a wallet."""

    from_token: Address = Field(alias="fromToken")
    to_token: Address = Field(alias="toToken")
    wallet: Address
    amount: DecimalStr
    direction: Direction = "input"

    model_config = {"populate_by_name": True}


class BalanceModel(BaseModel):
    has_enough: bool = Field(alias="hasEnough")
    balance: str

    model_config = {"populate_by_name": True}


class TradeQuoteResponse(BaseModel):
    """A routed trade: best route, bounds, checks and the transaction."""

    version: str
    direction: Direction
    base_convert_request: str = Field(alias="baseConvertRequest")
    expected_convert_quote: str = Field(alias="expectedConvertQuote")
    min_amount_convert_quote: str | None = Field(default=None, alias="minAmountConvertQuote")
    maximum_sent: str | None = Field(default=None, alias="maximumSent")
    liquidity_provider_fee: list[str] = Field(alias="liquidityProviderFee")
    liquidity_provider_fee_percent: str = Field(alias="liquidityProviderFeePercent")
    trade_expires: int = Field(alias="tradeExpires")
    route_text: str = Field(alias="routeText")
    route_path: list[Address] = Field(alias="routePath")
    has_enough_allowance: bool = Field(alias="hasEnoughAllowance")
    approval_transaction: TransactionModel | None = Field(default=None, alias="approvalTransaction")
    from_balance: BalanceModel = Field(alias="fromBalance")
    to_balance: str = Field(alias="toBalance")
    transaction: TransactionModel
    gas_price_estimated_by: str | None = Field(default=None, alias="gasPriceEstimatedBy")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_context(cls, ctx: TradeContext) -> "TradeQuoteResponse":
        return cls(
            version=ctx.version.value,
            direction=ctx.direction.value,
            base_convert_request=format_amount(ctx.base_convert_request),
            expected_convert_quote=format_amount(ctx.expected_convert_quote),
            min_amount_convert_quote=_amount(ctx.min_amount_convert_quote),
            maximum_sent=_amount(ctx.maximum_sent),
            liquidity_provider_fee=[format_amount(f) for f in ctx.liquidity_provider_fee],
            liquidity_provider_fee_percent=format_amount(ctx.liquidity_provider_fee_percent),
            trade_expires=ctx.trade_expires,
            route_text=ctx.route_text,
            route_path=list(ctx.route_path),
            has_enough_allowance=ctx.has_enough_allowance,
            approval_transaction=TransactionModel.from_transaction(ctx.approval_transaction),
            from_balance=BalanceModel(
                has_enough=ctx.from_balance.has_enough,
                balance=format_amount(ctx.from_balance.balance),
            ),
            to_balance=format_amount(ctx.to_balance),
            transaction=TransactionModel.from_transaction(ctx.transaction),
            gas_price_estimated_by=_amount(ctx.gas_price_estimated_by),
        )


# =============================================================================
# Liquidity
# =============================================================================


class AddLiquidityRequest(BaseModel):
    """Quote a deposit into the (tokenA, tokenB) pair."""

    token_a: Address = Field(alias="tokenA")
    token_b: Address = Field(alias="tokenB")
    wallet: Address
    amount: DecimalStr
    direction: Direction = "input"
    counter_amount: DecimalStr | None = Field(
        default=None,
        alias="counterAmount",
        description="Other side's amount; required for the first supplier",
    )

    model_config = {"populate_by_name": True}


class AddLiquidityResponse(BaseModel):
    amount_a: str = Field(alias="amountA")
    amount_b: str = Field(alias="amountB")
    min_amount_a: str = Field(alias="minAmountA")
    min_amount_b: str = Field(alias="minAmountB")
    is_first_supplier: bool = Field(alias="isFirstSupplier")
    lp_tokens_to_receive: str = Field(alias="lpTokensToReceive")
    pool_share: str = Field(alias="poolShare")
    token_a_balance: BalanceModel = Field(alias="tokenABalance")
    token_b_balance: BalanceModel = Field(alias="tokenBBalance")
    token_a_approval_transaction: TransactionModel | None = Field(
        default=None, alias="tokenAApprovalTransaction"
    )
    token_b_approval_transaction: TransactionModel | None = Field(
        default=None, alias="tokenBApprovalTransaction"
    )
    transaction: TransactionModel
    trade_expires: int = Field(alias="tradeExpires")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_context(cls, ctx: LiquidityTradeContext) -> "AddLiquidityResponse":
        quote = ctx.quote
        return cls(
            amount_a=format_amount(quote.amount_a),
            amount_b=format_amount(quote.amount_b),
            min_amount_a=format_amount(quote.min_amount_a),
            min_amount_b=format_amount(quote.min_amount_b),
            is_first_supplier=quote.is_first_supplier,
            lp_tokens_to_receive=format_amount(quote.lp_tokens_to_receive),
            pool_share=quote.pool_share,
            token_a_balance=BalanceModel(
                has_enough=ctx.token_a_balance.has_enough,
                balance=format_amount(ctx.token_a_balance.balance),
            ),
            token_b_balance=BalanceModel(
                has_enough=ctx.token_b_balance.has_enough,
                balance=format_amount(ctx.token_b_balance.balance),
            ),
            token_a_approval_transaction=TransactionModel.from_transaction(
                ctx.token_a_approval_transaction
            ),
            token_b_approval_transaction=TransactionModel.from_transaction(
                ctx.token_b_approval_transaction
            ),
            transaction=TransactionModel.from_transaction(ctx.transaction),
            trade_expires=ctx.trade_expires,
        )


class RemoveLiquidityRequest(BaseModel):
    """Quote burning LP tokens of the (tokenA, tokenB) pair."""

    token_a: Address = Field(alias="tokenA")
    token_b: Address = Field(alias="tokenB")
    wallet: Address
    lp_amount: DecimalStr = Field(alias="lpAmount")

    model_config = {"populate_by_name": True}


class RemoveLiquidityResponse(BaseModel):
    lp_amount: str = Field(alias="lpAmount")
    amount_a: str = Field(alias="amountA")
    amount_b: str = Field(alias="amountB")
    min_amount_a: str = Field(alias="minAmountA")
    min_amount_b: str = Field(alias="minAmountB")
    transaction: TransactionModel
    trade_expires: int = Field(alias="tradeExpires")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_quote(cls, quote: RemoveLiquidityQuote) -> "RemoveLiquidityResponse":
        return cls(
            lp_amount=format_amount(quote.lp_amount),
            amount_a=format_amount(quote.amount_a),
            amount_b=format_amount(quote.amount_b),
            min_amount_a=format_amount(quote.min_amount_a),
            min_amount_b=format_amount(quote.min_amount_b),
            transaction=TransactionModel.from_transaction(quote.transaction),
            trade_expires=quote.trade_expires,
        )


# =============================================================================
# Portfolio
# =============================================================================


class PortfolioRequest(BaseModel):
    """Scan a wallet's LP positions.

    When `pairs` is given only those pairs are valued; otherwise the factory
    is scanned (bounded by `maxPairs`).
    """

    wallet: Address
    pairs: list[Address] | None = None
    max_pairs: int | None = Field(default=None, alias="maxPairs", gt=0)

    model_config = {"populate_by_name": True}


class PairLiquidityModel(BaseModel):
    pair_address: Address = Field(alias="pairAddress")
    token0: Address
    token1: Address
    token0_symbol: str | None = Field(default=None, alias="token0Symbol")
    token1_symbol: str | None = Field(default=None, alias="token1Symbol")
    token0_estimated_pool: str | None = Field(default=None, alias="token0EstimatedPool")
    token1_estimated_pool: str | None = Field(default=None, alias="token1EstimatedPool")
    lp_tokens: str = Field(alias="lpTokens")
    total_supply: str = Field(alias="totalSupply")
    pool_share: str = Field(alias="poolShare")
    block_timestamp_last: int = Field(alias="blockTimestampLast")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_snapshot(cls, snap: PairLiquiditySnapshot) -> "PairLiquidityModel":
        return cls(
            pair_address=snap.pair_address,
            token0=snap.token0_address,
            token1=snap.token1_address,
            token0_symbol=snap.token0.symbol if snap.token0 else None,
            token1_symbol=snap.token1.symbol if snap.token1 else None,
            token0_estimated_pool=_amount(snap.token0_estimated_pool),
            token1_estimated_pool=_amount(snap.token1_estimated_pool),
            lp_tokens=format_amount(snap.lp_tokens),
            total_supply=format_amount(snap.total_supply),
            pool_share=snap.pool_share,
            block_timestamp_last=snap.block_timestamp_last,
        )


class PortfolioResponse(BaseModel):
    pairs: list[PairLiquidityModel]


__all__ = [
    "TransactionModel",
    "ErrorResponse",
    "TradeQuoteRequest",
    "TradeQuoteResponse",
    "AddLiquidityRequest",
    "AddLiquidityResponse",
    "RemoveLiquidityRequest",
    "RemoveLiquidityResponse",
    "PortfolioRequest",
    "PairLiquidityModel",
    "PortfolioResponse",
]
