"""Portfolio scanner: find and value a wallet's V2 liquidity positions.

Both scans are a fixed number of batched round trips regardless of how many
pairs are involved; `chunk_size` only bounds the size of each request.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

import structlog

from uniroute.chain.abi import (
    ALL_PAIRS,
    ALL_PAIRS_LENGTH,
    BALANCE_OF,
    DECIMALS,
    GET_RESERVES,
    TOKEN0,
    TOKEN1,
    TOTAL_SUPPLY,
)
from uniroute.chain.client import CallResult, ChainClient, ContractCall
from uniroute.chain.registry import ContractRegistry
from uniroute.chain.tokens import TokenMetadataResolver
from uniroute.constants import LP_TOKEN_DECIMALS
from uniroute.liquidity.math import pool_share_of_supply, proportional_amount
from uniroute.models.liquidity import PairLiquiditySnapshot
from uniroute.models.types import normalize_address
from uniroute.quoting.amounts import from_base_units

logger = structlog.get_logger()

PAIR_FIELDS = (TOKEN0, TOKEN1, GET_RESERVES, TOTAL_SUPPLY, BALANCE_OF, DECIMALS)


class PortfolioScanner:
    """Scans V2 pairs for one wallet's LP positions.

    Args:
        client: Chain client for batched reads
        registry: Factory address
        resolver: Token metadata lookup for the pairs' underlying tokens
        wallet: Address whose LP balances are scanned
    """

    def __init__(
        self,
        client: ChainClient,
        registry: ContractRegistry,
        resolver: TokenMetadataResolver,
        wallet: str,
    ):
        self.client = client
        self.registry = registry
        self.resolver = resolver
        self.wallet = normalize_address(wallet, validate=True)

    async def _call_chunked(self, batch: list[ContractCall], chunk_size: int | None) -> list[CallResult]:
        if not chunk_size:
            return await self.client.call(batch)
        results: list[CallResult] = []
        for start in range(0, len(batch), chunk_size):
            results.extend(await self.client.call(batch[start : start + chunk_size]))
        return results

    async def find_supplied_pairs(
        self,
        max_pairs: int | None = None,
        chunk_size: int | None = None,
    ) -> list[str]:
        """Every pair in which the wallet holds a positive LP balance.

        Args:
            max_pairs: Only scan the first `max_pairs` pairs ever created
            chunk_size: Maximum calls per batched request

        Returns:
            Pair addresses in factory creation order
        """
        if chunk_size is not None and chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")

        factory = self.registry.v2.factory
        (length_result,) = await self.client.call([ContractCall(factory, ALL_PAIRS_LENGTH)])
        total = int(length_result.values["length"]) if length_result.success else 0
        if max_pairs is not None:
            total = min(total, max_pairs)
        if total == 0:
            return []

        pair_results = await self._call_chunked(
            [ContractCall(factory, ALL_PAIRS, (i,), reference=i) for i in range(total)], chunk_size
        )
        pairs = [r.values["pair"] for r in pair_results if r.success]

        balance_results = await self._call_chunked(
            [ContractCall(pair, BALANCE_OF, (self.wallet,), reference=pair) for pair in pairs],
            chunk_size,
        )
        supplied = [
            r.reference for r in balance_results if r.success and int(r.values["balance"]) > 0
        ]

        logger.info("supplied_pairs_found", scanned=total, supplied=len(supplied))
        return supplied

    async def pair_liquidity(self, pair_addresses: Sequence[str]) -> list[PairLiquiditySnapshot]:
        """Value the wallet's position in each pair.

        Pairs whose token0/token1 reads fail are not V2 pairs and are skipped.

        Returns:
            One snapshot per readable pair, in input order
        """
        pairs = list(dict.fromkeys(normalize_address(a, validate=True) for a in pair_addresses))
        if not pairs:
            return []

        batch = []
        for pair in pairs:
            for m in PAIR_FIELDS:
                args = (self.wallet,) if m is BALANCE_OF else ()
                batch.append(ContractCall(pair, m, args, reference=(pair, m.name)))
        fields = {r.reference: r for r in await self.client.call(batch)}

        readable = []
        for pair in pairs:
            if fields[(pair, TOKEN0.name)].success and fields[(pair, TOKEN1.name)].success:
                readable.append(pair)
            else:
                logger.warning("pair_unreadable", pair=pair)

        token_addresses = sorted(
            {fields[(p, m.name)].values[m.output_names[0]] for p in readable for m in (TOKEN0, TOKEN1)}
        )
        tokens = await self.resolver.resolve(token_addresses)

        holdings_batch = [
            ContractCall(
                fields[(pair, m.name)].values[m.output_names[0]],
                BALANCE_OF,
                (pair,),
                reference=(pair, m.name),
            )
            for pair in readable
            for m in (TOKEN0, TOKEN1)
        ]
        holdings = {r.reference: r for r in await self.client.call(holdings_batch)}

        snapshots = [self._snapshot(pair, fields, holdings, tokens) for pair in readable]
        logger.info("pair_liquidity_read", pairs=len(snapshots))
        return snapshots

    def _snapshot(self, pair, fields, holdings, tokens) -> PairLiquiditySnapshot:
        token0_address = fields[(pair, TOKEN0.name)].values["token0"]
        token1_address = fields[(pair, TOKEN1.name)].values["token1"]
        token0 = tokens.get(token0_address)
        token1 = tokens.get(token1_address)

        decimals = fields[(pair, DECIMALS.name)]
        lp_decimals = int(decimals.values["decimals"]) if decimals.success else LP_TOKEN_DECIMALS
        supply = fields[(pair, TOTAL_SUPPLY.name)]
        total_supply = (
            from_base_units(int(supply.values["total_supply"]), lp_decimals)
            if supply.success
            else Decimal(0)
        )
        balance = fields[(pair, BALANCE_OF.name)]
        lp_tokens = (
            from_base_units(int(balance.values["balance"]), lp_decimals)
            if balance.success
            else Decimal(0)
        )
        reserves = fields[(pair, GET_RESERVES.name)]

        held0 = holdings[(pair, TOKEN0.name)]
        held1 = holdings[(pair, TOKEN1.name)]
        pair_token0_balance = int(held0.values["balance"]) if held0.success else 0
        pair_token1_balance = int(held1.values["balance"]) if held1.success else 0

        def estimate(held: int, token) -> Decimal | None:
            if token is None:
                return None
            return proportional_amount(
                from_base_units(held, token.decimals), lp_tokens, total_supply, token.decimals
            )

        return PairLiquiditySnapshot(
            pair_address=pair,
            token0_address=token0_address,
            token1_address=token1_address,
            token0=token0,
            token1=token1,
            pair_token0_balance=pair_token0_balance,
            pair_token1_balance=pair_token1_balance,
            token0_estimated_pool=estimate(pair_token0_balance, token0),
            token1_estimated_pool=estimate(pair_token1_balance, token1),
            total_supply=total_supply,
            lp_tokens=lp_tokens,
            lp_decimals=lp_decimals,
            pool_share=pool_share_of_supply(lp_tokens, total_supply),
            block_timestamp_last=(
                int(reserves.values["block_timestamp_last"]) if reserves.success else 0
            ),
        )


__all__ = ["PortfolioScanner"]
