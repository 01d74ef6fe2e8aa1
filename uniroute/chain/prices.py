"""Fiat price feed and gas price sources.

Both are optional collaborators, only used for gas-aware route re-ranking.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal
from typing import Protocol

import httpx
import structlog
from web3 import AsyncWeb3

from uniroute.models.types import normalize_address

logger = structlog.get_logger()

COINGECKO_API_URL = "https://api.coingecko.com/api/v3"

GWEI = Decimal(10**9)


class FiatPriceFeed(Protocol):
    """Protocol for token -> fiat unit price lookups."""

    async def prices(self, addresses: Iterable[str]) -> dict[str, Decimal]:
        """Get fiat prices for token addresses.

        Args:
            addresses: Token addresses (wrapped native for the native currency)

        Returns:
            Mapping of normalized address -> fiat price; unknown tokens are omitted
        """
        ...


class GasPriceSource(Protocol):
    """Protocol for current gas price lookups."""

    async def gas_price_gwei(self) -> Decimal:
        """Current gas price in gwei."""
        ...


class CoinGeckoPriceFeed:
    """FiatPriceFeed backed by the CoinGecko simple token price API."""

    def __init__(
        self,
        platform: str = "ethereum",
        currency: str = "usd",
        *,
        base_url: str = COINGECKO_API_URL,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ):
        """Initialize the feed.

        Args:
            platform: CoinGecko asset platform id
            currency: Fiat currency code
            base_url: API root
            client: Shared HTTP client (one is created per request otherwise)
            timeout: Request timeout in seconds
        """
        self.platform = platform
        self.currency = currency
        self.base_url = base_url.rstrip("/")
        self._client = client
        self.timeout = timeout

    async def prices(self, addresses: Iterable[str]) -> dict[str, Decimal]:
        wanted = sorted({normalize_address(a) for a in addresses})
        if not wanted:
            return {}

        url = f"{self.base_url}/simple/token_price/{self.platform}"
        params = {"contract_addresses": ",".join(wanted), "vs_currencies": self.currency}

        if self._client is not None:
            response = await self._client.get(url, params=params)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, params=params)
        response.raise_for_status()
        payload = response.json()

        result: dict[str, Decimal] = {}
        for address, quote in payload.items():
            price = quote.get(self.currency) if isinstance(quote, dict) else None
            if price is None:
                continue
            result[normalize_address(address)] = Decimal(str(price))

        missing = [a for a in wanted if a not in result]
        if missing:
            logger.debug("fiat_price_missing", tokens=missing)
        return result


class StaticGasPriceSource:
    """GasPriceSource returning a fixed price. Useful for tests and simulations."""

    def __init__(self, gwei: Decimal | int | str):
        self.gwei = Decimal(str(gwei))

    async def gas_price_gwei(self) -> Decimal:
        return self.gwei


class Web3GasPriceSource:
    """GasPriceSource reading eth_gasPrice from the node."""

    def __init__(self, w3: AsyncWeb3):
        self.w3 = w3

    async def gas_price_gwei(self) -> Decimal:
        wei = await self.w3.eth.gas_price
        return Decimal(int(wei)) / GWEI


__all__ = [
    "FiatPriceFeed",
    "GasPriceSource",
    "CoinGeckoPriceFeed",
    "StaticGasPriceSource",
    "Web3GasPriceSource",
]
