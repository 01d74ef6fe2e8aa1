"""Network and contract override descriptions."""

from __future__ import annotations

from dataclasses import dataclass

from uniroute.constants import NATIVE_NAME, NATIVE_SYMBOL
from uniroute.models.token import Token


@dataclass(frozen=True)
class CloneContracts:
    """Addresses of a forked (cloned) exchange deployment.

    Any field left as None falls back to the canonical deployment.
    """

    v2_router: str | None = None
    v2_factory: str | None = None
    v3_router: str | None = None
    v3_factory: str | None = None
    v3_quoter: str | None = None


@dataclass(frozen=True)
class CustomNetwork:
    """A chain without a canonical deployment, described by the caller.

    Attributes:
        name: Display name of the network
        wrapped_native: Wrapped native token (WETH equivalent)
        multicall_address: Multicall3 deployment on this network, if not canonical
        native_symbol: Symbol of the native currency
        native_name: Name of the native currency
        base_tokens: Extra hub tokens for multi-hop routing
    """

    name: str
    wrapped_native: Token
    multicall_address: str | None = None
    native_symbol: str = NATIVE_SYMBOL
    native_name: str = NATIVE_NAME
    base_tokens: tuple[Token, ...] = ()

    @property
    def chain_id(self) -> int:
        return self.wrapped_native.chain_id


__all__ = ["CloneContracts", "CustomNetwork"]
