"""Token value object."""

from __future__ import annotations

from dataclasses import dataclass

from uniroute.constants import NATIVE_ADDRESS, NATIVE_DECIMALS, NATIVE_NAME, NATIVE_SYMBOL
from uniroute.models.types import normalize_address


@dataclass(frozen=True)
class Token:
    """An ERC20 token, or the chain's native currency.

    The native currency is represented by the reserved NATIVE_ADDRESS. It is
    wrapped before touching any contract and unwrapped when labelling routes.
    """

    chain_id: int
    address: str
    decimals: int
    symbol: str
    name: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "address", normalize_address(self.address, validate=True))
        if not 0 <= self.decimals <= 255:
            raise ValueError(f"Token decimals out of range: {self.decimals}")

    @property
    def is_native(self) -> bool:
        """True if this token is the native-currency pseudo-token."""
        return self.address == NATIVE_ADDRESS

    @classmethod
    def native(cls, chain_id: int, symbol: str = NATIVE_SYMBOL, name: str = NATIVE_NAME) -> Token:
        """Build the native-currency token for a chain."""
        return cls(
            chain_id=chain_id,
            address=NATIVE_ADDRESS,
            decimals=NATIVE_DECIMALS,
            symbol=symbol,
            name=name,
        )

    def same_as(self, other: Token) -> bool:
        """Compare identity (chain and address), ignoring metadata."""
        return self.chain_id == other.chain_id and self.address == other.address


__all__ = ["Token"]
