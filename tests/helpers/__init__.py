"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Token, contract and wallet addresses
- factories: Token, route and quote factories, chain stubs
- calldata: Decoding of built transaction data
"""

from tests.helpers.constants import (
    AAVE,
    COMP,
    DAI,
    MULTICALL3,
    NATIVE,
    NOW,
    PAIR_A,
    PAIR_B,
    PAIR_C,
    POOL_V3,
    TOKEN_DECIMALS,
    UNI,
    USDC,
    USDT,
    V2_FACTORY,
    V2_ROUTER,
    V3_FACTORY,
    V3_QUOTER,
    V3_ROUTER,
    WALLET,
    WBTC,
    WETH,
)
from tests.helpers.calldata import decode_args
from tests.helpers.factories import make_quote, make_route, make_token, stub_v2_pair

__all__ = [
    # Constants
    "WETH",
    "USDC",
    "DAI",
    "USDT",
    "WBTC",
    "COMP",
    "UNI",
    "AAVE",
    "NATIVE",
    "V2_ROUTER",
    "V2_FACTORY",
    "V3_ROUTER",
    "V3_FACTORY",
    "V3_QUOTER",
    "MULTICALL3",
    "WALLET",
    "PAIR_A",
    "PAIR_B",
    "PAIR_C",
    "POOL_V3",
    "NOW",
    "TOKEN_DECIMALS",
    # Factories
    "make_token",
    "make_route",
    "make_quote",
    "stub_v2_pair",
    # Calldata
    "decode_args",
]
