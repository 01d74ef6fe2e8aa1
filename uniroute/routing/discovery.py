"""Route discovery through a small fixed set of hub tokens.

Candidate routes are bounded: direct (2 tokens), one hub (3 tokens) and two
hubs (4 tokens). Every pair a candidate would trade through is checked for
existence in a single batched factory lookup before any pricing happens.

Route construction for V2:
- forward: tokens with a pair against fromToken
- backward: tokens with a pair against toToken
- joint: forward ∩ backward
- direct [from, to] if the pair exists
- [from, hub, to] for every hub in joint
- [from, x, hub, to] for hub in joint and x in forward with a (x, hub) pair
- [from, hub, y, to] for hub in joint and y in backward with a (hub, y) pair

V3 is routed direct-only, one candidate per existing fee tier.
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import combinations

import structlog

from uniroute.chain.abi import GET_PAIR, GET_POOL
from uniroute.chain.client import ChainClient, ContractCall
from uniroute.chain.registry import ContractRegistry
from uniroute.config import Settings
from uniroute.constants import V2_LP_FEE, V3_FEE_DENOMINATOR, V3_FEE_TIERS
from uniroute.models.route import ProtocolVersion, Route, trade_path
from uniroute.models.token import Token
from uniroute.models.types import is_zero_address

logger = structlog.get_logger()


@dataclass(frozen=True)
class DiscoveredRoutes:
    """Unpriced candidates, partitioned by protocol version."""

    v2: tuple[Route, ...] = ()
    v3: tuple[Route, ...] = ()

    @property
    def all(self) -> tuple[Route, ...]:
        return self.v2 + self.v3

    def __len__(self) -> int:
        return len(self.v2) + len(self.v3)


class PairSet:
    """Set of existing unordered token pairs, keyed by wrapped address."""

    def __init__(self) -> None:
        self._pairs: set[frozenset[str]] = set()

    def add(self, token_a: str, token_b: str) -> None:
        self._pairs.add(frozenset((token_a, token_b)))

    def has(self, token_a: str, token_b: str) -> bool:
        return frozenset((token_a, token_b)) in self._pairs

    def neighbors(self, token: str, candidates: tuple[str, ...]) -> list[str]:
        """Candidates that share a pair with `token`, in candidate order."""
        return [c for c in candidates if c != token and self.has(token, c)]

    def __len__(self) -> int:
        return len(self._pairs)


class RouteDiscoverer:
    """Enumerates candidate routes between two tokens.

    Args:
        client: Chain client used for the batched existence check
        registry: Network contracts and hub tokens
        settings: Multihop and protocol version switches
    """

    def __init__(self, client: ChainClient, registry: ContractRegistry, settings: Settings):
        self.client = client
        self.registry = registry
        self.settings = settings

    def hubs_for(self, from_token: Token, to_token: Token) -> tuple[Token, ...]:
        """Hub tokens usable between two tokens.

        A hub equal to either side (after wrapping) is excluded, which also
        drops the wrapped-native hub whenever a side is native.
        """
        ends = {self.registry.wrapped_address(from_token), self.registry.wrapped_address(to_token)}
        return tuple(h for h in self.registry.hub_tokens if h.address not in ends)

    def _pair_lookups(self, from_address: str, to_address: str, hubs: tuple[str, ...]) -> list[tuple[str, str]]:
        lookups: list[tuple[str, str]] = [(from_address, to_address)]
        if not self.settings.disable_multihops:
            lookups += [(from_address, h) for h in hubs]
            lookups += [(h, to_address) for h in hubs]
            lookups += list(combinations(hubs, 2))

        seen: set[frozenset[str]] = set()
        unique = []
        for a, b in lookups:
            key = frozenset((a, b))
            if key not in seen:
                seen.add(key)
                unique.append((a, b))
        return unique

    async def discover(self, from_token: Token, to_token: Token) -> DiscoveredRoutes:
        """Discover all candidate routes for a token pair.

        Args:
            from_token: Token being sold
            to_token: Token being bought

        Returns:
            Candidates with verified pair existence, partitioned by version

        Raises:
            ConfigurationError: If the pair is degenerate (same token, native/native)
        """
        trade_path(from_token, to_token)

        from_address = self.registry.wrapped_address(from_token)
        to_address = self.registry.wrapped_address(to_token)
        hubs = self.hubs_for(from_token, to_token)
        hub_by_address = {h.address: h for h in hubs}
        hub_addresses = tuple(hub_by_address)

        batch: list[ContractCall] = []
        if self.settings.uses(ProtocolVersion.V2):
            for a, b in self._pair_lookups(from_address, to_address, hub_addresses):
                batch.append(
                    ContractCall(self.registry.v2.factory, GET_PAIR, (a, b), reference=("v2", a, b))
                )
        if self.settings.uses(ProtocolVersion.V3):
            for fee in V3_FEE_TIERS:
                batch.append(
                    ContractCall(
                        self.registry.v3.factory,
                        GET_POOL,
                        (from_address, to_address, fee),
                        reference=("v3", fee),
                    )
                )

        results = await self.client.call(batch)

        pairs = PairSet()
        v3_fees: list[int] = []
        for result in results:
            if not result.success:
                continue
            if result.reference[0] == "v2":
                if not is_zero_address(result.values["pair"]):
                    _, a, b = result.reference
                    pairs.add(a, b)
            elif not is_zero_address(result.values["pool"]):
                v3_fees.append(result.reference[1])

        v2_routes = self._build_v2_routes(from_token, to_token, pairs, hub_by_address)
        v3_routes = tuple(
            Route(
                tokens=(from_token, to_token),
                version=ProtocolVersion.V3,
                fee=fee / V3_FEE_DENOMINATOR,
                fee_tier=fee,
            )
            for fee in v3_fees
        )

        discovered = DiscoveredRoutes(v2=v2_routes, v3=v3_routes)
        logger.info(
            "routes_discovered",
            from_token=from_token.address,
            to_token=to_token.address,
            pairs_checked=len(batch),
            pairs_found=len(pairs),
            v2_routes=len(v2_routes),
            v3_routes=len(v3_routes),
        )
        return discovered

    def _build_v2_routes(
        self,
        from_token: Token,
        to_token: Token,
        pairs: PairSet,
        hub_by_address: dict[str, Token],
    ) -> tuple[Route, ...]:
        from_address = self.registry.wrapped_address(from_token)
        to_address = self.registry.wrapped_address(to_token)
        hub_addresses = tuple(hub_by_address)

        paths: list[tuple[str, ...]] = []
        if pairs.has(from_address, to_address):
            paths.append((from_address, to_address))

        if not self.settings.disable_multihops:
            forward = pairs.neighbors(from_address, hub_addresses)
            backward = pairs.neighbors(to_address, hub_addresses)
            joint = [h for h in forward if h in backward]

            for hub in joint:
                paths.append((from_address, hub, to_address))
                for x in forward:
                    if pairs.has(x, hub):
                        paths.append((from_address, x, hub, to_address))
                for y in backward:
                    if pairs.has(hub, y):
                        paths.append((from_address, hub, y, to_address))

        def token_for(address: str) -> Token:
            if address == from_address:
                return from_token
            if address == to_address:
                return to_token
            return hub_by_address[address]

        routes: list[Route] = []
        seen: set[tuple[str, ...]] = set()
        for path in paths:
            if len(set(path)) != len(path) or path in seen:
                continue
            seen.add(path)
            routes.append(
                Route(
                    tokens=tuple(token_for(a) for a in path),
                    version=ProtocolVersion.V2,
                    fee=V2_LP_FEE,
                )
            )
        return tuple(routes)


__all__ = ["DiscoveredRoutes", "PairSet", "RouteDiscoverer"]
