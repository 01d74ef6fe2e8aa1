"""Token metadata resolution."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

import structlog

from uniroute.chain.abi import DECIMALS, NAME, SYMBOL
from uniroute.chain.client import ChainClient, ContractCall
from uniroute.chain.registry import ContractRegistry
from uniroute.errors import ConfigurationError, ErrorCode
from uniroute.models.token import Token
from uniroute.models.types import is_valid_address, normalize_address

logger = structlog.get_logger()


class TokenMetadataResolver(Protocol):
    """Protocol for batch token metadata lookups."""

    async def resolve(self, addresses: Iterable[str]) -> dict[str, Token]:
        """Resolve metadata for a set of addresses.

        Args:
            addresses: Token addresses (any case); the native pseudo-address is allowed

        Returns:
            Mapping of normalized address -> Token for every resolvable address
        """
        ...


class OnChainTokenResolver:
    """Resolve decimals/symbol/name with one batched read, caching results.

    The native pseudo-address resolves to the registry's native token without
    any call. A failed `decimals` call means the address is not a token and
    it is left out of the result; a failed symbol or name is tolerated.
    """

    def __init__(self, client: ChainClient, registry: ContractRegistry):
        self.client = client
        self.registry = registry
        self._cache: dict[str, Token] = {registry.native.address: registry.native}

    async def resolve(self, addresses: Iterable[str]) -> dict[str, Token]:
        normalized = []
        for address in addresses:
            if not is_valid_address(address):
                raise ConfigurationError(f"Invalid token address: {address}", ErrorCode.INVALID_ADDRESS)
            normalized.append(normalize_address(address))

        missing = sorted({a for a in normalized if a not in self._cache})
        if missing:
            await self._fetch(missing)

        return {a: self._cache[a] for a in normalized if a in self._cache}

    async def get(self, address: str) -> Token:
        """Resolve a single token.

        Raises:
            ConfigurationError: If the address is not a token
        """
        resolved = await self.resolve([address])
        token = resolved.get(normalize_address(address))
        if token is None:
            raise ConfigurationError(f"Token not found: {address}", ErrorCode.TOKEN_NOT_FOUND)
        return token

    async def _fetch(self, addresses: list[str]) -> None:
        batch = []
        for address in addresses:
            for m in (DECIMALS, SYMBOL, NAME):
                batch.append(ContractCall(address, m, reference=(address, m.name)))
        results = {r.reference: r for r in await self.client.call(batch)}

        for address in addresses:
            decimals = results[(address, DECIMALS.name)]
            if not decimals.success:
                logger.debug("token_metadata_missing", token=address)
                continue
            symbol = results[(address, SYMBOL.name)]
            name = results[(address, NAME.name)]
            self._cache[address] = Token(
                chain_id=self.registry.chain_id,
                address=address,
                decimals=int(decimals.values["decimals"]),
                symbol=symbol.values["symbol"] if symbol.success else "",
                name=name.values["name"] if name.success else "",
            )

        logger.debug("token_metadata_resolved", requested=len(addresses))


__all__ = ["TokenMetadataResolver", "OnChainTokenResolver"]
