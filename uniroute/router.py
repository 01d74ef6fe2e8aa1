"""Trade router: the discover -> quote -> select pipeline for one token pair.

A TradeRouter is bound to one (from_token, to_token, wallet) triple and owns
one instance of each pipeline stage. `trade()` runs the whole pipeline and
returns a TradeContext; the live watcher re-runs it on every tick.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from decimal import Decimal

import structlog

from uniroute.chain.client import ChainClient
from uniroute.chain.prices import FiatPriceFeed
from uniroute.chain.registry import ContractRegistry
from uniroute.chain.tokens import TokenMetadataResolver
from uniroute.chain.wallet import allowance_call, allowance_of, balance_call, balance_of
from uniroute.config import Settings
from uniroute.errors import ConfigurationError, ErrorCode, NoRouteFoundError
from uniroute.models.route import ProtocolVersion, RouteQuote, TradeDirection, trade_path
from uniroute.models.token import Token
from uniroute.models.trade import BalanceInfo, TradeContext
from uniroute.models.types import normalize_address
from uniroute.quoting.amounts import truncate
from uniroute.quoting.engine import QuoteEngine
from uniroute.routing.discovery import RouteDiscoverer
from uniroute.routing.selector import BestRouteSelector
from uniroute.transactions.builder import TransactionBuilder

logger = structlog.get_logger()


def liquidity_provider_fees(quote: RouteQuote, decimals: int) -> tuple[Decimal, ...]:
    """LP fee charged on each hop, in units of the token sold.

    The fee is taken on the amount sold: the fixed base amount for INPUT,
    the expected input for OUTPUT.
    """
    sold = quote.base_amount if quote.direction is TradeDirection.INPUT else quote.expected
    fee = truncate(sold * quote.route.fee, decimals)
    return tuple(fee for _ in range(quote.route.hops))


class TradeRouter:
    """Routes trades between two tokens for one wallet.

    Args:
        client: Chain client for every batched read
        registry: Contract addresses and hub tokens of the network
        settings: Slippage, deadline, multihop and version settings
        from_token: Token being sold
        to_token: Token being bought
        wallet: Address that will sign the resulting transactions
        price_feed: Fiat prices, enables gas-aware re-ranking on mainnet
        clock: Returns the current unix time (injectable for tests)

    Raises:
        ConfigurationError: If the pair is degenerate (same token, or native to native)
    """

    def __init__(
        self,
        client: ChainClient,
        registry: ContractRegistry,
        settings: Settings,
        from_token: Token,
        to_token: Token,
        wallet: str,
        price_feed: FiatPriceFeed | None = None,
        clock: Callable[[], float] = time.time,
    ):
        trade_path(from_token, to_token)
        self.client = client
        self.registry = registry
        self.settings = settings
        self.from_token = from_token
        self.to_token = to_token
        self.builder = TransactionBuilder(registry, wallet, settings, clock=clock)
        self.discoverer = RouteDiscoverer(client, registry, settings)
        self.engine = QuoteEngine(client, registry, settings, self.builder)
        self.selector = BestRouteSelector(client, registry, settings, price_feed)

    @classmethod
    async def create(
        cls,
        client: ChainClient,
        resolver: TokenMetadataResolver,
        registry: ContractRegistry,
        settings: Settings,
        from_address: str,
        to_address: str,
        wallet: str,
        price_feed: FiatPriceFeed | None = None,
    ) -> TradeRouter:
        """Resolve both tokens' metadata in one batch and build a router.

        Raises:
            ConfigurationError: If either address is invalid or not a token
        """
        tokens = await resolver.resolve([from_address, to_address])
        missing = [a for a in (from_address, to_address) if normalize_address(a) not in tokens]
        if missing:
            raise ConfigurationError(f"Token not found: {missing[0]}", ErrorCode.TOKEN_NOT_FOUND)
        return cls(
            client,
            registry,
            settings,
            tokens[normalize_address(from_address)],
            tokens[normalize_address(to_address)],
            wallet,
            price_feed,
        )

    @property
    def wallet(self) -> str:
        return self.builder.wallet

    async def find_best_route(
        self, amount: Decimal, direction: TradeDirection = TradeDirection.INPUT
    ) -> list[RouteQuote]:
        """Discover and price every route, best first (no balance checks, no re-ranking)."""
        routes = await self.discoverer.discover(self.from_token, self.to_token)
        return await self.engine.quote(self.from_token, self.to_token, amount, direction, routes)

    async def _wallet_state(
        self, versions: set[ProtocolVersion]
    ) -> tuple[Decimal, Decimal, dict[ProtocolVersion, Decimal]]:
        batch = [
            balance_call(self.registry, self.from_token, self.wallet, "from_balance"),
            balance_call(self.registry, self.to_token, self.wallet, "to_balance"),
        ]
        for version in sorted(versions, key=lambda v: v.value):
            call = allowance_call(
                self.from_token, self.wallet, self.registry.router_for(version), ("allowance", version)
            )
            if call is not None:
                batch.append(call)
        results = {r.reference: r for r in await self.client.call(batch)}

        from_balance = balance_of(results["from_balance"], self.from_token.decimals)
        to_balance = balance_of(results["to_balance"], self.to_token.decimals)
        allowances = {
            v: allowance_of(results.get(("allowance", v)), self.from_token.decimals) for v in versions
        }
        return from_balance, to_balance, allowances

    async def trade(
        self, amount: Decimal, direction: TradeDirection = TradeDirection.INPUT
    ) -> TradeContext:
        """Run the full pipeline for a trade.

        Args:
            amount: Amount sold (INPUT) or bought (OUTPUT), in human units
            direction: Which side `amount` fixes

        Returns:
            TradeContext for the best route

        Raises:
            NoRouteFoundError: If no candidate route could be priced
            ConfigurationError: If the amount is not positive
        """
        quotes = await self.find_best_route(amount, direction)
        if not quotes:
            raise NoRouteFoundError(
                f"No routes found for {self.from_token.symbol} > {self.to_token.symbol}",
                ErrorCode.NO_ROUTES_FOUND,
            )

        versions = {q.version for q in quotes}
        from_balance, to_balance, allowances = await self._wallet_state(versions)

        # candidates for re-ranking are filtered against the engine's best route
        sold = amount if direction is TradeDirection.INPUT else quotes[0].bound
        selected = await self.selector.select(
            quotes,
            from_token=self.from_token,
            to_token=self.to_token,
            allowance_ok={v: allowances[v] >= sold for v in versions},
            has_enough_balance=from_balance >= sold,
        )
        best = selected[0]

        # the route actually sent may need more input than the engine's best
        sold = amount if direction is TradeDirection.INPUT else best.bound
        has_enough_balance = from_balance >= sold
        has_enough_allowance = allowances[best.version] >= sold
        approval = (
            None
            if has_enough_allowance
            else self.builder.approve(self.from_token.address, best.version)
        )

        context = TradeContext(
            version=best.version,
            direction=direction,
            base_convert_request=amount,
            expected_convert_quote=best.expected,
            min_amount_convert_quote=best.bound if direction is TradeDirection.INPUT else None,
            maximum_sent=best.bound if direction is TradeDirection.OUTPUT else None,
            liquidity_provider_fee=liquidity_provider_fees(best, self.from_token.decimals),
            liquidity_provider_fee_percent=best.route.fee,
            trade_expires=best.trade_expires,
            route_path_tokens=best.route.tokens,
            route_text=best.route_text,
            route_path=tuple(self.registry.wrapped_address(t) for t in best.route.tokens),
            has_enough_allowance=has_enough_allowance,
            approval_transaction=approval,
            from_token=self.from_token,
            to_token=self.to_token,
            from_balance=BalanceInfo(has_enough_balance, from_balance),
            to_balance=to_balance,
            transaction=best.transaction,
            gas_price_estimated_by=best.gas_price_estimated_by,
            all_tried_routes=tuple(selected),
        )
        logger.info(
            "trade_routed",
            route=context.route_text,
            version=context.version.value,
            direction=direction.value,
            expected=str(context.expected_convert_quote),
            has_enough_allowance=has_enough_allowance,
            has_enough_balance=has_enough_balance,
        )
        return context


__all__ = ["TradeRouter", "liquidity_provider_fees"]
