"""Contract registry: per-network contract addresses and token set.

A ContractRegistry is built once per pipeline and passed explicitly to every
component that needs an address; there is no module-level mutable state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from uniroute.constants import (
    MAINNET,
    MAINNET_HUB_TOKENS,
    MULTICALL3_ADDRESS,
    SUPPORTED_CHAIN_IDS,
    V2_FACTORY_ADDRESS,
    V2_ROUTER_ADDRESS,
    V3_FACTORY_ADDRESS,
    V3_QUOTER_ADDRESS,
    V3_ROUTER_ADDRESS,
    WRAPPED_NATIVE,
)
from uniroute.errors import ConfigurationError, ErrorCode
from uniroute.models.network import CloneContracts, CustomNetwork
from uniroute.models.route import ProtocolVersion
from uniroute.models.token import Token
from uniroute.models.types import is_valid_address, normalize_address

if TYPE_CHECKING:
    from uniroute.config import Settings


def _checked(name: str, address: str) -> str:
    if not is_valid_address(address):
        raise ConfigurationError(f"Invalid {name} address: {address}", ErrorCode.INVALID_ADDRESS)
    return normalize_address(address)


@dataclass(frozen=True)
class V2Contracts:
    """Uniswap V2 router and factory addresses."""

    router: str
    factory: str


@dataclass(frozen=True)
class V3Contracts:
    """Uniswap V3 router, factory and quoter addresses."""

    router: str
    factory: str
    quoter: str


@dataclass(frozen=True)
class ContractRegistry:
    """Resolved contract addresses and routing tokens for one network.

    Attributes:
        chain_id: Chain the addresses belong to
        v2: V2 deployment
        v3: V3 deployment
        multicall: Multicall3 deployment used for batching
        native: Native-currency pseudo-token
        wrapped_native: Wrapped native token (WETH or equivalent)
        hub_tokens: Tokens used to bridge multi-hop routes (includes wrapped native)
        is_custom: True when built from a CustomNetwork
    """

    chain_id: int
    v2: V2Contracts
    v3: V3Contracts
    multicall: str
    native: Token
    wrapped_native: Token
    hub_tokens: tuple[Token, ...]
    is_custom: bool = False

    @classmethod
    def for_chain(
        cls,
        chain_id: int,
        clone_contracts: CloneContracts | None = None,
        custom_network: CustomNetwork | None = None,
    ) -> ContractRegistry:
        """Resolve the registry for a chain.

        Args:
            chain_id: Chain id of the connected network
            clone_contracts: Optional address overrides for a forked deployment
            custom_network: Optional description of a non-canonical network

        Returns:
            Registry with every address validated and normalized

        Raises:
            ConfigurationError: If the chain is unsupported and no custom network is
                given, or if any override address is invalid
        """
        clone = clone_contracts or CloneContracts()

        if custom_network is not None:
            if custom_network.chain_id != chain_id:
                raise ConfigurationError(
                    f"Custom network chain id {custom_network.chain_id} does not match {chain_id}",
                    ErrorCode.CHAIN_NOT_SUPPORTED,
                )
            native = Token.native(chain_id, custom_network.native_symbol, custom_network.native_name)
            wrapped = custom_network.wrapped_native
            hubs = _dedupe((*custom_network.base_tokens, wrapped))
            multicall = custom_network.multicall_address or MULTICALL3_ADDRESS
        elif chain_id in SUPPORTED_CHAIN_IDS:
            native = Token.native(chain_id)
            address, symbol, name = WRAPPED_NATIVE[chain_id]
            wrapped = Token(chain_id, address, 18, symbol, name)
            if chain_id == MAINNET:
                hubs = tuple(
                    Token(chain_id, addr, decimals, sym, nm)
                    for addr, decimals, sym, nm in MAINNET_HUB_TOKENS
                ) + (wrapped,)
            else:
                hubs = (wrapped,)
            multicall = MULTICALL3_ADDRESS
        else:
            raise ConfigurationError(
                f"Chain id {chain_id} is not supported; supply a custom network",
                ErrorCode.CHAIN_NOT_SUPPORTED,
            )

        return cls(
            chain_id=chain_id,
            v2=V2Contracts(
                router=_checked("v2 router", clone.v2_router or V2_ROUTER_ADDRESS),
                factory=_checked("v2 factory", clone.v2_factory or V2_FACTORY_ADDRESS),
            ),
            v3=V3Contracts(
                router=_checked("v3 router", clone.v3_router or V3_ROUTER_ADDRESS),
                factory=_checked("v3 factory", clone.v3_factory or V3_FACTORY_ADDRESS),
                quoter=_checked("v3 quoter", clone.v3_quoter or V3_QUOTER_ADDRESS),
            ),
            multicall=_checked("multicall", multicall),
            native=native,
            wrapped_native=wrapped,
            hub_tokens=hubs,
            is_custom=custom_network is not None,
        )

    @classmethod
    def from_settings(cls, chain_id: int, settings: Settings) -> ContractRegistry:
        """Resolve the registry with the overrides carried by `settings`."""
        return cls.for_chain(chain_id, settings.clone_contracts, settings.custom_network)

    def check_settings(self, settings: Settings) -> None:
        """Raise if `settings` carry overrides this registry was not built with.

        Raises:
            ConfigurationError: If the clone contracts or custom network differ
        """
        if settings.clone_contracts is None and settings.custom_network is None:
            return
        if type(self).from_settings(self.chain_id, settings) != self:
            raise ConfigurationError(
                "Registry does not reflect the clone contracts or custom network in settings; "
                "build it with ContractRegistry.from_settings",
                ErrorCode.INVALID_SETTINGS,
            )

    @property
    def is_mainnet(self) -> bool:
        return self.chain_id == MAINNET and not self.is_custom

    def router_for(self, version: ProtocolVersion) -> str:
        """Router (spender) address for a protocol version."""
        return self.v2.router if version is ProtocolVersion.V2 else self.v3.router

    def wrap(self, token: Token) -> Token:
        """Map the native pseudo-token to the wrapped native token."""
        return self.wrapped_native if token.is_native else token

    def wrapped_address(self, token: Token) -> str:
        return self.wrap(token).address


def _dedupe(tokens: tuple[Token, ...]) -> tuple[Token, ...]:
    seen: set[str] = set()
    result = []
    for token in tokens:
        if token.address not in seen:
            seen.add(token.address)
            result.append(token)
    return tuple(result)


__all__ = ["ContractRegistry", "V2Contracts", "V3Contracts"]
