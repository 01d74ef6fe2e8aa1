"""Liquidity engine: add/remove-liquidity quotes for one V2 pair and wallet.

The pair orders its tokens canonically (token0 < token1). Everything here is
expressed in the caller's (tokenA, tokenB) order: reserves are flipped on read
when token0 is the caller's tokenB, so no result or transaction argument ever
leaks the canonical order.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

import structlog

from uniroute.chain.abi import ALLOWANCE, BALANCE_OF, GET_PAIR, GET_RESERVES, TOKEN0, TOTAL_SUPPLY
from uniroute.chain.client import ChainClient, ContractCall
from uniroute.chain.registry import ContractRegistry
from uniroute.chain.wallet import allowance_call, allowance_of, balance_call, balance_of
from uniroute.config import Settings
from uniroute.constants import LP_TOKEN_DECIMALS
from uniroute.errors import ConfigurationError, ErrorCode
from uniroute.models.liquidity import (
    AddLiquidityInfo,
    AddLiquidityQuote,
    LiquidityTradeContext,
    PairState,
    RemoveLiquidityInfo,
    RemoveLiquidityQuote,
)
from uniroute.models.route import ProtocolVersion, TradeDirection, Transaction, trade_path
from uniroute.models.token import Token
from uniroute.models.trade import BalanceInfo
from uniroute.models.types import UINT256_MAX, is_zero_address
from uniroute.quoting.amounts import slippage_minimum, to_base_units, truncate
from uniroute.transactions.builder import TransactionBuilder

from .math import (
    amount_per_lp_token,
    liquidity_minted,
    pool_share_after_deposit,
    pool_share_of_supply,
    proportional_amount,
    quote_counter_amount,
)

logger = structlog.get_logger()

ZERO = Decimal(0)


@dataclass(frozen=True)
class PairReading:
    """Pair state plus the wallet's balances and allowances, read together."""

    state: PairState
    balance_a: Decimal
    balance_b: Decimal
    allowance_a: Decimal
    allowance_b: Decimal
    lp_allowance: Decimal


class LiquidityEngine:
    """Quotes liquidity operations on the V2 pair of (token_a, token_b).

    Args:
        client: Chain client for batched reads
        registry: Factory and router addresses
        settings: Slippage tolerance
        builder: Builds approve/add/remove transactions for the wallet
        token_a: First token in the caller's order
        token_b: Second token in the caller's order

    Raises:
        ConfigurationError: If both tokens wrap to the same contract
    """

    def __init__(
        self,
        client: ChainClient,
        registry: ContractRegistry,
        settings: Settings,
        builder: TransactionBuilder,
        token_a: Token,
        token_b: Token,
    ):
        trade_path(token_a, token_b)
        if registry.wrapped_address(token_a) == registry.wrapped_address(token_b):
            raise ConfigurationError(
                f"{token_a.symbol} and {token_b.symbol} share one pair side",
                ErrorCode.INVALID_TRADE_PATH,
            )
        self.client = client
        self.registry = registry
        self.settings = settings
        self.builder = builder
        self.token_a = token_a
        self.token_b = token_b

    @property
    def wallet(self) -> str:
        return self.builder.wallet

    async def read(self) -> PairReading:
        """Read the pair and the wallet's position in two batched calls.

        The first batch looks the pair up on the factory alongside the wallet's
        token balances and router allowances; the second reads the pair itself.
        """
        router = self.registry.v2.router
        wrapped_a = self.registry.wrapped_address(self.token_a)
        wrapped_b = self.registry.wrapped_address(self.token_b)

        batch = [
            ContractCall(self.registry.v2.factory, GET_PAIR, (wrapped_a, wrapped_b), reference="pair"),
            balance_call(self.registry, self.token_a, self.wallet, "balance_a"),
            balance_call(self.registry, self.token_b, self.wallet, "balance_b"),
        ]
        for reference, token in (("allowance_a", self.token_a), ("allowance_b", self.token_b)):
            call = allowance_call(token, self.wallet, router, reference)
            if call is not None:
                batch.append(call)
        first = {r.reference: r for r in await self.client.call(batch)}

        balance_a = balance_of(first["balance_a"], self.token_a.decimals)
        balance_b = balance_of(first["balance_b"], self.token_b.decimals)
        allowance_a = allowance_of(first.get("allowance_a"), self.token_a.decimals)
        allowance_b = allowance_of(first.get("allowance_b"), self.token_b.decimals)

        pair_result = first["pair"]
        pair = pair_result.values["pair"] if pair_result.success else None
        if pair is None or is_zero_address(pair):
            logger.debug("pair_not_found", token_a=wrapped_a, token_b=wrapped_b)
            state = PairState(
                pair_address=None,
                reserve_a=ZERO,
                reserve_b=ZERO,
                total_supply=ZERO,
                lp_balance=ZERO,
                reversed=wrapped_a > wrapped_b,
            )
            return PairReading(state, balance_a, balance_b, allowance_a, allowance_b, ZERO)

        second = {
            r.reference: r
            for r in await self.client.call(
                [
                    ContractCall(pair, GET_RESERVES, reference="reserves"),
                    ContractCall(pair, TOTAL_SUPPLY, reference="total_supply"),
                    ContractCall(pair, TOKEN0, reference="token0"),
                    ContractCall(pair, BALANCE_OF, (self.wallet,), reference="lp_balance"),
                    ContractCall(pair, ALLOWANCE, (self.wallet, router), reference="lp_allowance"),
                ]
            )
        }

        reserves = second["reserves"]
        token0 = second["token0"]
        reversed_ = token0.values["token0"] != wrapped_a if token0.success else wrapped_a > wrapped_b
        reserve0 = int(reserves.values["reserve0"]) if reserves.success else 0
        reserve1 = int(reserves.values["reserve1"]) if reserves.success else 0
        raw_a, raw_b = (reserve1, reserve0) if reversed_ else (reserve0, reserve1)

        total_supply = second["total_supply"]
        state = PairState(
            pair_address=pair,
            reserve_a=Decimal(raw_a).scaleb(-self.token_a.decimals),
            reserve_b=Decimal(raw_b).scaleb(-self.token_b.decimals),
            total_supply=(
                Decimal(int(total_supply.values["total_supply"])).scaleb(-LP_TOKEN_DECIMALS)
                if total_supply.success
                else ZERO
            ),
            lp_balance=balance_of(second["lp_balance"], LP_TOKEN_DECIMALS),
            reversed=reversed_,
            block_timestamp_last=int(reserves.values["block_timestamp_last"]) if reserves.success else 0,
        )
        return PairReading(
            state,
            balance_a,
            balance_b,
            allowance_a,
            allowance_b,
            allowance_of(second["lp_allowance"], LP_TOKEN_DECIMALS),
        )

    async def quote_add_liquidity(
        self,
        amount: Decimal,
        direction: TradeDirection = TradeDirection.INPUT,
        counter_amount: Decimal | None = None,
    ) -> AddLiquidityQuote:
        """Quote a deposit into the pair.

        Args:
            amount: Amount of token A (INPUT) or token B (OUTPUT)
            direction: Which side `amount` fixes
            counter_amount: Amount of the other side; required when the pair
                has no liquidity yet, ignored otherwise

        Raises:
            ConfigurationError: If the amount is not positive, or the caller is
                the first supplier and gave no counter amount
        """
        return self._quote_add(await self.read(), amount, direction, counter_amount)

    def _quote_add(
        self,
        reading: PairReading,
        amount: Decimal,
        direction: TradeDirection,
        counter_amount: Decimal | None,
    ) -> AddLiquidityQuote:
        if amount <= 0:
            raise ConfigurationError(f"Amount must be positive, got {amount}", ErrorCode.INVALID_AMOUNT)

        state = reading.state
        dec_a, dec_b = self.token_a.decimals, self.token_b.decimals
        is_first_supplier = not state.has_liquidity

        if is_first_supplier:
            if counter_amount is None or counter_amount <= 0:
                raise ConfigurationError(
                    f"Pool {self.token_a.symbol}/{self.token_b.symbol} has no liquidity; "
                    "the first supplier must provide both amounts",
                    ErrorCode.MISSING_COUNTER_AMOUNT,
                )
            if direction is TradeDirection.INPUT:
                amount_a, amount_b = truncate(amount, dec_a), truncate(counter_amount, dec_b)
            else:
                amount_a, amount_b = truncate(counter_amount, dec_a), truncate(amount, dec_b)
            # no reserves to move against: the deposit sets the price
            min_a, min_b = amount_a, amount_b
            total_supply = ZERO
        else:
            if direction is TradeDirection.INPUT:
                amount_a = truncate(amount, dec_a)
                amount_b = quote_counter_amount(amount_a, state.reserve_a, state.reserve_b, dec_b)
            else:
                amount_b = truncate(amount, dec_b)
                amount_a = quote_counter_amount(amount_b, state.reserve_b, state.reserve_a, dec_a)
            min_a = slippage_minimum(amount_a, self.settings.slippage, dec_a)
            min_b = slippage_minimum(amount_b, self.settings.slippage, dec_b)
            total_supply = state.total_supply

        liquidity = liquidity_minted(amount_a, amount_b, state.reserve_a, state.reserve_b, total_supply)
        transaction = self.builder.add_liquidity(
            self.token_a,
            self.token_b,
            to_base_units(amount_a, dec_a),
            to_base_units(amount_b, dec_b),
            to_base_units(min_a, dec_a),
            to_base_units(min_b, dec_b),
        )

        quote = AddLiquidityQuote(
            direction=direction,
            amount_a=amount_a,
            amount_b=amount_b,
            min_amount_a=min_a,
            min_amount_b=min_b,
            is_first_supplier=is_first_supplier,
            lp_tokens_to_receive=liquidity,
            pool_share=pool_share_after_deposit(liquidity, total_supply),
            lp_balance=state.lp_balance,
            transaction=transaction,
            trade_expires=self.builder.deadline(),
        )
        logger.info(
            "add_liquidity_quoted",
            token_a=self.token_a.address,
            token_b=self.token_b.address,
            amount_a=str(amount_a),
            amount_b=str(amount_b),
            first_supplier=is_first_supplier,
            pool_share=quote.pool_share,
        )
        return quote

    async def add_liquidity_context(
        self,
        amount: Decimal,
        direction: TradeDirection = TradeDirection.INPUT,
        counter_amount: Decimal | None = None,
    ) -> LiquidityTradeContext:
        """Quote a deposit and check the wallet can fund and approve it.

        Approval transactions are included only for tokens whose router
        allowance is below the deposit amount.
        """
        reading = await self.read()
        quote = self._quote_add(reading, amount, direction, counter_amount)

        a_allowed = reading.allowance_a >= quote.amount_a
        b_allowed = reading.allowance_b >= quote.amount_b
        return LiquidityTradeContext(
            quote=quote,
            token_a=self.token_a,
            token_b=self.token_b,
            token_a_balance=BalanceInfo(reading.balance_a >= quote.amount_a, reading.balance_a),
            token_b_balance=BalanceInfo(reading.balance_b >= quote.amount_b, reading.balance_b),
            token_a_has_enough_allowance=a_allowed,
            token_b_has_enough_allowance=b_allowed,
            token_a_approval_transaction=None if a_allowed else self.builder.approve(self.token_a.address),
            token_b_approval_transaction=None if b_allowed else self.builder.approve(self.token_b.address),
        )

    async def add_liquidity_info(self) -> AddLiquidityInfo:
        """Per-LP-token ratios and the wallet's current stake, before depositing."""
        reading = await self.read()
        state = reading.state
        per_a = amount_per_lp_token(state.reserve_a, state.total_supply, self.token_a.decimals)
        per_b = amount_per_lp_token(state.reserve_b, state.total_supply, self.token_b.decimals)
        return AddLiquidityInfo(
            lp_token=state.pair_address,
            lp_token_balance=state.lp_balance,
            token_a_per_lp_token=per_a,
            token_b_per_lp_token=per_b,
            estimated_token_a_owned=truncate(state.lp_balance * per_a, self.token_a.decimals),
            estimated_token_b_owned=truncate(state.lp_balance * per_b, self.token_b.decimals),
            allowance_a=reading.allowance_a,
            allowance_b=reading.allowance_b,
            is_first_supplier=not state.has_liquidity,
            self_pool_lp_token=state.lp_balance,
            total_pool_lp_token=state.total_supply,
        )

    def _require_pair(self, state: PairState) -> str:
        if state.pair_address is None or state.total_supply <= 0:
            raise ConfigurationError(
                f"No liquidity pool for {self.token_a.symbol}/{self.token_b.symbol}",
                ErrorCode.INVALID_PAIR,
            )
        return state.pair_address

    async def remove_liquidity_info(self) -> RemoveLiquidityInfo:
        """The wallet's position in the pair, before burning LP tokens.

        Raises:
            ConfigurationError: If the pair does not exist or has no supply
        """
        reading = await self.read()
        state = reading.state
        pair = self._require_pair(state)
        per_a = amount_per_lp_token(state.reserve_a, state.total_supply, self.token_a.decimals)
        per_b = amount_per_lp_token(state.reserve_b, state.total_supply, self.token_b.decimals)
        return RemoveLiquidityInfo(
            lp_address=pair,
            lp_token_balance=state.lp_balance,
            token_a_per_lp_token=per_a,
            token_b_per_lp_token=per_b,
            estimated_token_a_owned=truncate(state.lp_balance * per_a, self.token_a.decimals),
            estimated_token_b_owned=truncate(state.lp_balance * per_b, self.token_b.decimals),
            pool_share=pool_share_of_supply(state.lp_balance, state.total_supply),
            allowance=reading.lp_allowance,
        )

    async def quote_remove_liquidity(self, lp_amount: Decimal) -> RemoveLiquidityQuote:
        """Quote burning `lp_amount` LP tokens.

        Raises:
            ConfigurationError: If the amount is not positive or the pair has no supply
        """
        if lp_amount <= 0:
            raise ConfigurationError(
                f"LP amount must be positive, got {lp_amount}", ErrorCode.INVALID_AMOUNT
            )
        state = (await self.read()).state
        self._require_pair(state)

        dec_a, dec_b = self.token_a.decimals, self.token_b.decimals
        lp_amount = truncate(lp_amount, LP_TOKEN_DECIMALS)
        amount_a = proportional_amount(state.reserve_a, lp_amount, state.total_supply, dec_a)
        amount_b = proportional_amount(state.reserve_b, lp_amount, state.total_supply, dec_b)
        min_a = slippage_minimum(amount_a, self.settings.slippage, dec_a)
        min_b = slippage_minimum(amount_b, self.settings.slippage, dec_b)

        transaction = self.builder.remove_liquidity(
            self.token_a,
            self.token_b,
            to_base_units(lp_amount, LP_TOKEN_DECIMALS),
            to_base_units(min_a, dec_a),
            to_base_units(min_b, dec_b),
        )
        logger.info(
            "remove_liquidity_quoted",
            pair=state.pair_address,
            lp_amount=str(lp_amount),
            amount_a=str(amount_a),
            amount_b=str(amount_b),
        )
        return RemoveLiquidityQuote(
            lp_amount=lp_amount,
            amount_a=amount_a,
            amount_b=amount_b,
            min_amount_a=min_a,
            min_amount_b=min_b,
            transaction=transaction,
            trade_expires=self.builder.deadline(),
            version=ProtocolVersion.V2,
        )

    async def lp_approval_transaction(self, amount: int = UINT256_MAX) -> Transaction:
        """Approve the router to spend the wallet's LP tokens of this pair.

        Raises:
            ConfigurationError: If the pair does not exist or has no supply
        """
        pair = self._require_pair((await self.read()).state)
        return self.builder.approve(pair, ProtocolVersion.V2, amount)


__all__ = ["LiquidityEngine", "PairReading"]
