"""Best-route selection with optional gas-aware re-ranking.

Default: the quote engine's order already puts the best economic outcome
first. Gas-aware re-ranking (mainnet only, gas price source configured,
multihop enabled, caller balance sufficient) compares at most one quote per
hop count among routes whose allowance is already sufficient, scoring each
by fiat value net of estimated gas cost, and promotes the winner to the front.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import Decimal

import structlog

from uniroute.chain.client import ChainClient
from uniroute.chain.prices import GWEI, FiatPriceFeed
from uniroute.chain.registry import ContractRegistry
from uniroute.config import Settings
from uniroute.errors import ErrorCode, NoRouteFoundError
from uniroute.models.route import ProtocolVersion, RouteQuote, TradeDirection
from uniroute.models.token import Token

logger = structlog.get_logger()

WEI_PER_ETH = Decimal(10**18)


def pick_per_hop_bucket(
    quotes: Sequence[RouteQuote],
    allowance_ok: Mapping[ProtocolVersion, bool],
) -> list[RouteQuote]:
    """First quote per hop count (1, 2, 3) among sufficient-allowance routes.

    Args:
        quotes: Quotes in best-first order
        allowance_ok: Allowance sufficiency per protocol version

    Returns:
        At most one quote per hop count, in input order
    """
    picked: list[RouteQuote] = []
    seen_hops: set[int] = set()
    for quote in quotes:
        if not allowance_ok.get(quote.version, False):
            continue
        if quote.route.hops in seen_hops:
            continue
        seen_hops.add(quote.route.hops)
        picked.append(quote)
    return picked


class BestRouteSelector:
    """Orders priced quotes so the best route is first.

    Args:
        client: Used for gas estimation
        registry: Network identity and wrapped native token
        settings: Gas price source and multihop switch
        price_feed: Fiat prices for gas-aware re-ranking
    """

    def __init__(
        self,
        client: ChainClient,
        registry: ContractRegistry,
        settings: Settings,
        price_feed: FiatPriceFeed | None = None,
    ):
        self.client = client
        self.registry = registry
        self.settings = settings
        self.price_feed = price_feed

    def gas_rerank_enabled(self, has_enough_balance: bool) -> bool:
        """True if gas-aware re-ranking applies to this request."""
        return (
            self.registry.is_mainnet
            and self.settings.gas_price_source is not None
            and self.price_feed is not None
            and not self.settings.disable_multihops
            and has_enough_balance
        )

    async def select(
        self,
        quotes: Sequence[RouteQuote],
        *,
        from_token: Token,
        to_token: Token,
        allowance_ok: Mapping[ProtocolVersion, bool],
        has_enough_balance: bool,
    ) -> list[RouteQuote]:
        """Order quotes best-first.

        Args:
            quotes: Priced quotes in engine order
            from_token: Token being sold
            to_token: Token being bought
            allowance_ok: Allowance sufficiency per protocol version
            has_enough_balance: Whether the wallet covers the trade

        Returns:
            A new list with the selected route first

        Raises:
            NoRouteFoundError: If there are no priced quotes at all
        """
        if not quotes:
            raise NoRouteFoundError(
                f"No routes found for {from_token.symbol} > {to_token.symbol}",
                ErrorCode.NO_ROUTES_FOUND,
            )

        ordered = list(quotes)
        if not self.gas_rerank_enabled(has_enough_balance):
            return ordered

        return await self._rerank(ordered, from_token, to_token, allowance_ok)

    async def _rerank(
        self,
        quotes: list[RouteQuote],
        from_token: Token,
        to_token: Token,
        allowance_ok: Mapping[ProtocolVersion, bool],
    ) -> list[RouteQuote]:
        assert self.settings.gas_price_source is not None
        assert self.price_feed is not None

        candidates = pick_per_hop_bucket(quotes, allowance_ok)
        if not candidates:
            logger.debug("gas_rerank_skipped", reason="no_route_with_allowance")
            return quotes

        direction = quotes[0].direction
        valued_token = to_token if direction is TradeDirection.INPUT else from_token
        valued_address = self.registry.wrapped_address(valued_token)
        eth_address = self.registry.wrapped_native.address

        try:
            gas_price = await self.settings.gas_price_source.gas_price_gwei()
            prices = await self.price_feed.prices([valued_address, eth_address])
        except Exception as e:
            logger.warning("gas_rerank_unavailable", error=str(e))
            return quotes

        if valued_address not in prices or eth_address not in prices:
            logger.warning(
                "gas_rerank_unavailable",
                error="missing fiat price",
                tokens=[a for a in (valued_address, eth_address) if a not in prices],
            )
            return quotes

        token_price = prices[valued_address]
        eth_price = prices[eth_address]

        best: RouteQuote | None = None
        best_score: Decimal | None = None
        for quote in candidates:
            try:
                gas_units = await self.client.estimate_gas(quote.transaction)
            except Exception as e:
                logger.warning("gas_estimate_failed", route=quote.route_text, error=str(e))
                continue

            gas_cost = Decimal(gas_units) * gas_price * GWEI / WEI_PER_ETH * eth_price
            value = quote.expected * token_price
            score = value - gas_cost if direction is TradeDirection.INPUT else -value - gas_cost
            logger.debug(
                "gas_rerank_candidate",
                route=quote.route_text,
                hops=quote.route.hops,
                gas_units=gas_units,
                score=str(score),
            )
            if best_score is None or score > best_score:
                best, best_score = quote, score

        tagged = [q.with_gas_price(gas_price) for q in quotes]
        if best is None:
            return tagged

        best_index = next(i for i, q in enumerate(quotes) if q is best)
        tagged.insert(0, tagged.pop(best_index))
        logger.info(
            "gas_rerank_applied",
            route=best.route_text,
            gas_price_gwei=str(gas_price),
            score=str(best_score),
        )
        return tagged


__all__ = ["BestRouteSelector", "pick_per_hop_bucket"]
