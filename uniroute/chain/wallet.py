"""Wallet balance and allowance reads.

Native balances are read through Multicall3 `getEthBalance` so they can ride
in the same batch as ERC20 reads. The native currency needs no approval, so
its allowance is reported as unlimited without a call.
"""

from __future__ import annotations

from collections.abc import Hashable
from decimal import Decimal

from uniroute.chain.abi import ALLOWANCE, BALANCE_OF, GET_ETH_BALANCE
from uniroute.chain.client import CallResult, ContractCall
from uniroute.chain.registry import ContractRegistry
from uniroute.models.token import Token
from uniroute.models.types import UINT256_MAX
from uniroute.quoting.amounts import from_base_units


def balance_call(registry: ContractRegistry, token: Token, wallet: str, reference: Hashable) -> ContractCall:
    """Read `wallet`'s balance of `token` (native or ERC20)."""
    if token.is_native:
        return ContractCall(registry.multicall, GET_ETH_BALANCE, (wallet,), reference=reference)
    return ContractCall(token.address, BALANCE_OF, (wallet,), reference=reference)


def allowance_call(token: Token, wallet: str, spender: str, reference: Hashable) -> ContractCall | None:
    """Read `wallet`'s allowance of `token` to `spender`; None for native."""
    if token.is_native:
        return None
    return ContractCall(token.address, ALLOWANCE, (wallet, spender), reference=reference)


def balance_of(result: CallResult | None, decimals: int) -> Decimal:
    """Human balance from a result; a failed read counts as zero."""
    if result is None or not result.success:
        return Decimal(0)
    return from_base_units(int(result.values["balance"]), decimals)


def allowance_of(result: CallResult | None, decimals: int) -> Decimal:
    """Human allowance from a result; no result (native) is unlimited."""
    if result is None:
        return from_base_units(UINT256_MAX, decimals)
    if not result.success:
        return Decimal(0)
    return from_base_units(int(result.values["allowance"]), decimals)


__all__ = ["balance_call", "allowance_call", "balance_of", "allowance_of"]
