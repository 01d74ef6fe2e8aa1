"""Pytest configuration and fixtures."""

from collections.abc import Iterable
from decimal import Decimal
from typing import Any

import pytest

from uniroute.chain.abi import ContractMethod
from uniroute.chain.client import CallResult, ContractCall
from uniroute.chain.registry import ContractRegistry
from uniroute.config import Settings
from uniroute.models.route import ProtocolVersion, Transaction
from uniroute.models.token import Token
from uniroute.transactions.builder import TransactionBuilder
from tests.helpers import DAI, NOW, UNI, USDC, WALLET, make_token

# =============================================================================
# Mock classes for dependency injection
# =============================================================================


def _freeze(value: Any) -> Any:
    """Make call arguments hashable and case-insensitive for lookups."""
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    if isinstance(value, str):
        return value.lower()
    return value


class MockChainClient:
    """Mock ChainClient answering calls from a response table.

    Responses are keyed by (target, method name, args). A call with no
    registered response fails, like a revert inside an aggregate3 batch.

    Usage:
        chain = MockChainClient()
        chain.set(V2_FACTORY, GET_PAIR, (WETH, USDC), pair=PAIR_A)
        chain.fail(PAIR_A, GET_RESERVES)
        chain.gas["0x01"] = 300_000
    """

    DEFAULT_GAS = 150_000

    def __init__(self) -> None:
        self.responses: dict[tuple, dict[str, Any] | None] = {}
        self.batches: list[list[ContractCall]] = []  # Track calls for assertions
        self.gas: dict[str, int] = {}
        self.gas_failures: set[str] = set()
        self.estimates: list[Transaction] = []

    @staticmethod
    def _key(target: str, method: ContractMethod, args: Iterable[Any]) -> tuple:
        return (target.lower(), method.name, _freeze(tuple(args)))

    def set(self, target: str, method: ContractMethod, args: Iterable[Any] = (), **values: Any) -> None:
        """Register a successful response."""
        self.responses[self._key(target, method, args)] = values

    def fail(self, target: str, method: ContractMethod, args: Iterable[Any] = ()) -> None:
        """Register an explicit failure (same as leaving the call unregistered)."""
        self.responses[self._key(target, method, args)] = None

    @property
    def calls(self) -> list[ContractCall]:
        return [c for batch in self.batches for c in batch]

    async def call(self, batch):
        self.batches.append(list(batch))
        results = []
        for request in batch:
            values = self.responses.get(self._key(request.target, request.method, request.args))
            if values is None:
                results.append(CallResult(reference=request.reference, success=False))
            else:
                results.append(CallResult(reference=request.reference, success=True, values=values))
        return results

    async def estimate_gas(self, transaction: Transaction) -> int:
        self.estimates.append(transaction)
        if transaction.data in self.gas_failures:
            raise RuntimeError(f"execution reverted: {transaction.data}")
        return self.gas.get(transaction.data, self.DEFAULT_GAS)


class MockTokenResolver:
    """Mock TokenMetadataResolver backed by a fixed token list.

    Usage:
        resolver = MockTokenResolver([weth, usdc])
        await resolver.resolve([WETH, "0xunknown..."])  # -> {WETH: weth}
    """

    def __init__(self, tokens: Iterable[Token] = ()) -> None:
        self.tokens = {t.address: t for t in tokens}
        self.calls: list[list[str]] = []  # Track calls for assertions

    async def resolve(self, addresses):
        addresses = [a.lower() for a in addresses]
        self.calls.append(addresses)
        return {a: self.tokens[a] for a in addresses if a in self.tokens}


class MockPriceFeed:
    """Mock FiatPriceFeed with fixed prices.

    Usage:
        feed = MockPriceFeed({WETH: Decimal(2000), USDC: Decimal(1)})
        feed = MockPriceFeed(error=RuntimeError("rate limited"))
    """

    def __init__(self, prices: dict[str, Decimal] | None = None, error: Exception | None = None) -> None:
        self._prices = {a.lower(): p for a, p in (prices or {}).items()}
        self.error = error
        self.calls: list[list[str]] = []

    async def prices(self, addresses):
        addresses = list(addresses)
        self.calls.append(addresses)
        if self.error is not None:
            raise self.error
        return {a: self._prices[a] for a in addresses if a in self._prices}


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def chain() -> MockChainClient:
    """Empty mock chain: every call fails until a response is registered."""
    return MockChainClient()


@pytest.fixture
def registry() -> ContractRegistry:
    """Mainnet contract registry."""
    return ContractRegistry.for_chain(1)


@pytest.fixture
def settings() -> Settings:
    """Default settings (0.5% slippage, 20 minute deadline, V2 and V3)."""
    return Settings()


@pytest.fixture
def v2_settings() -> Settings:
    """Settings routing through V2 only."""
    return Settings(protocol_versions=(ProtocolVersion.V2,))


@pytest.fixture
def clock():
    """Clock frozen at NOW."""
    return lambda: NOW


@pytest.fixture
def builder(registry, settings, clock) -> TransactionBuilder:
    """Transaction builder for the test wallet with a frozen clock."""
    return TransactionBuilder(registry, WALLET, settings, clock=clock)


@pytest.fixture
def weth(registry) -> Token:
    return registry.wrapped_native


@pytest.fixture
def eth(registry) -> Token:
    """Native currency pseudo-token."""
    return registry.native


@pytest.fixture
def usdc() -> Token:
    return make_token(USDC)


@pytest.fixture
def dai() -> Token:
    return make_token(DAI)


@pytest.fixture
def uni() -> Token:
    return make_token(UNI)


@pytest.fixture
def known_tokens(weth, eth, usdc, dai, uni) -> list[Token]:
    return [weth, eth, usdc, dai, uni]


@pytest.fixture
def resolver(known_tokens) -> MockTokenResolver:
    return MockTokenResolver(known_tokens)


@pytest.fixture
def tokens_by_address(known_tokens) -> dict[str, Token]:
    return {t.address: t for t in known_tokens}
