"""Quote engine: prices every candidate route in one batched call.

For exact-input the quote is the path's final output amount; for
exact-output it is the path's first required input amount. Candidates whose
pricing call reverts are dropped, never treated as fatal.
"""

from __future__ import annotations

from decimal import Decimal

import structlog

from uniroute.chain.abi import (
    GET_AMOUNTS_IN,
    GET_AMOUNTS_OUT,
    QUOTE_EXACT_INPUT_SINGLE,
    QUOTE_EXACT_OUTPUT_SINGLE,
)
from uniroute.chain.client import CallResult, ChainClient, ContractCall
from uniroute.chain.registry import ContractRegistry
from uniroute.config import Settings
from uniroute.errors import ConfigurationError, ErrorCode
from uniroute.models.route import ProtocolVersion, Route, RouteQuote, TradeDirection, trade_path
from uniroute.models.token import Token
from uniroute.routing.discovery import DiscoveredRoutes
from uniroute.transactions.builder import TransactionBuilder

from .amounts import (
    from_base_units,
    slippage_maximum,
    slippage_minimum,
    to_base_units,
)

logger = structlog.get_logger()


def amount_decimals(from_token: Token, to_token: Token, direction: TradeDirection) -> tuple[int, int]:
    """Decimals of the fixed side and of the quoted side.

    Returns:
        (base_decimals, quote_decimals): INPUT fixes fromToken and quotes
        toToken; OUTPUT fixes toToken and quotes fromToken.
    """
    if direction is TradeDirection.INPUT:
        return from_token.decimals, to_token.decimals
    return to_token.decimals, from_token.decimals


class QuoteEngine:
    """Prices candidate routes and builds their swap transactions.

    Args:
        client: Chain client for the batched pricing call
        registry: Router and quoter addresses
        settings: Slippage tolerance
        builder: Builds the per-route swap transaction
    """

    def __init__(
        self,
        client: ChainClient,
        registry: ContractRegistry,
        settings: Settings,
        builder: TransactionBuilder,
    ):
        self.client = client
        self.registry = registry
        self.settings = settings
        self.builder = builder

    def _pricing_call(self, index: int, route: Route, direction: TradeDirection, amount: int) -> ContractCall:
        if route.version is ProtocolVersion.V2:
            m = GET_AMOUNTS_OUT if direction is TradeDirection.INPUT else GET_AMOUNTS_IN
            path = [self.registry.wrapped_address(t) for t in route.tokens]
            return ContractCall(self.registry.v2.router, m, (amount, path), reference=index)

        m = QUOTE_EXACT_INPUT_SINGLE if direction is TradeDirection.INPUT else QUOTE_EXACT_OUTPUT_SINGLE
        return ContractCall(
            self.registry.v3.quoter,
            m,
            (
                self.registry.wrapped_address(route.tokens[0]),
                self.registry.wrapped_address(route.tokens[-1]),
                route.fee_tier,
                amount,
                0,
            ),
            reference=index,
        )

    @staticmethod
    def _quoted_amount(route: Route, direction: TradeDirection, result: CallResult) -> int:
        if route.version is ProtocolVersion.V2:
            amounts = result.values["amounts"]
            return int(amounts[-1] if direction is TradeDirection.INPUT else amounts[0])
        key = "amount_out" if direction is TradeDirection.INPUT else "amount_in"
        return int(result.values[key])

    async def quote(
        self,
        from_token: Token,
        to_token: Token,
        amount: Decimal,
        direction: TradeDirection,
        routes: DiscoveredRoutes,
    ) -> list[RouteQuote]:
        """Price all candidate routes.

        Args:
            from_token: Token being sold
            to_token: Token being bought
            amount: Human amount of the fixed side
            direction: INPUT (amount sold is fixed) or OUTPUT (amount bought is fixed)
            routes: Candidates from the discoverer

        Returns:
            Priced quotes, best first: descending expected output for INPUT,
            ascending expected input for OUTPUT. Empty if nothing priced.

        Raises:
            ConfigurationError: If the pair is degenerate or the amount rounds to zero
        """
        trade_path(from_token, to_token)
        base_decimals, quote_decimals = amount_decimals(from_token, to_token, direction)

        amount_base = to_base_units(amount, base_decimals)
        if amount_base <= 0:
            raise ConfigurationError(
                f"Amount must be positive in base units, got {amount}", ErrorCode.INVALID_AMOUNT
            )

        candidates = routes.all
        if not candidates:
            return []

        batch = [self._pricing_call(i, r, direction, amount_base) for i, r in enumerate(candidates)]
        results = await self.client.call(batch)

        quotes: list[RouteQuote] = []
        for result in results:
            route = candidates[result.reference]
            if not result.success:
                logger.debug("route_quote_failed", route=route.text, version=route.version.value)
                continue

            quoted = self._quoted_amount(route, direction, result)
            if quoted <= 0:
                logger.debug("route_quote_empty", route=route.text, version=route.version.value)
                continue

            expected = from_base_units(quoted, quote_decimals)
            if direction is TradeDirection.INPUT:
                bound = slippage_minimum(expected, self.settings.slippage, quote_decimals)
            else:
                bound = slippage_maximum(expected, self.settings.slippage, quote_decimals)

            transaction = self.builder.swap(
                route, direction, amount_base, to_base_units(bound, quote_decimals)
            )
            quotes.append(
                RouteQuote(
                    route=route,
                    direction=direction,
                    base_amount=amount,
                    expected=expected,
                    bound=bound,
                    transaction=transaction,
                    trade_expires=self.builder.deadline(),
                )
            )

        quotes.sort(key=lambda q: q.expected, reverse=direction is TradeDirection.INPUT)

        logger.info(
            "routes_quoted",
            from_token=from_token.address,
            to_token=to_token.address,
            direction=direction.value,
            candidates=len(candidates),
            priced=len(quotes),
            best=str(quotes[0].expected) if quotes else None,
        )
        return quotes


__all__ = ["QuoteEngine", "amount_decimals"]
