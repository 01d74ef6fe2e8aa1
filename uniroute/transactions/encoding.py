"""Router calldata encoding.

Pure functions: every argument, including the deadline, is passed in. The
addresses given here are already wrapped (no native pseudo-address) and all
amounts are integer base units.
"""

from __future__ import annotations

from collections.abc import Sequence

from uniroute.chain.abi import (
    ADD_LIQUIDITY,
    ADD_LIQUIDITY_ETH,
    APPROVE,
    EXACT_INPUT_SINGLE,
    EXACT_OUTPUT_SINGLE,
    MULTICALL,
    REMOVE_LIQUIDITY,
    REMOVE_LIQUIDITY_ETH,
    SWAP_ETH_FOR_EXACT_TOKENS,
    SWAP_EXACT_ETH_FOR_TOKENS,
    SWAP_EXACT_TOKENS_FOR_ETH,
    SWAP_EXACT_TOKENS_FOR_TOKENS,
    SWAP_TOKENS_FOR_EXACT_ETH,
    SWAP_TOKENS_FOR_EXACT_TOKENS,
    UNWRAP_WETH9,
)
from uniroute.models.route import TradeDirection, TradePath
from uniroute.models.types import UINT256_MAX, ZERO_ADDRESS


def encode_approve(spender: str, amount: int = UINT256_MAX) -> str:
    """Encode ERC20 approve(spender, amount)."""
    return APPROVE.encode_hex(spender, amount)


def encode_v2_swap(
    path_kind: TradePath,
    direction: TradeDirection,
    path: Sequence[str],
    amount: int,
    bound: int,
    recipient: str,
    deadline: int,
) -> str:
    """Encode a V2 router swap.

    Args:
        path_kind: Overall trade path (decides the ETH/token method family)
        direction: INPUT fixes amount in, OUTPUT fixes amount out
        path: Wrapped token addresses in trade order
        amount: Exact amount in (INPUT) or exact amount out (OUTPUT)
        bound: Minimum out (INPUT) or maximum in (OUTPUT)
        recipient: Address receiving the output
        deadline: Unix deadline

    Returns:
        0x-prefixed calldata. For ETH input the ETH amount travels in the
        transaction value, never in calldata.
    """
    path = list(path)
    if path_kind is TradePath.ETH_TO_ERC20:
        if direction is TradeDirection.INPUT:
            return SWAP_EXACT_ETH_FOR_TOKENS.encode_hex(bound, path, recipient, deadline)
        return SWAP_ETH_FOR_EXACT_TOKENS.encode_hex(amount, path, recipient, deadline)

    if path_kind is TradePath.ERC20_TO_ETH:
        m = SWAP_EXACT_TOKENS_FOR_ETH if direction is TradeDirection.INPUT else SWAP_TOKENS_FOR_EXACT_ETH
    elif direction is TradeDirection.INPUT:
        m = SWAP_EXACT_TOKENS_FOR_TOKENS
    else:
        m = SWAP_TOKENS_FOR_EXACT_TOKENS
    return m.encode_hex(amount, bound, path, recipient, deadline)


def encode_v3_swap(
    path_kind: TradePath,
    direction: TradeDirection,
    token_in: str,
    token_out: str,
    fee_tier: int,
    amount: int,
    bound: int,
    wallet: str,
    deadline: int,
) -> str:
    """Encode a single-pool V3 swap wrapped in router multicall.

    When the output is native, the router keeps the WETH (recipient = zero
    address) and a trailing unwrapWETH9 call pays the wallet in ETH.
    """
    unwrap = path_kind is TradePath.ERC20_TO_ETH
    recipient = ZERO_ADDRESS if unwrap else wallet
    params = (token_in, token_out, fee_tier, recipient, deadline, amount, bound, 0)

    swap_method = EXACT_INPUT_SINGLE if direction is TradeDirection.INPUT else EXACT_OUTPUT_SINGLE
    calls = [swap_method.encode_call(params)]
    if unwrap:
        minimum_out = bound if direction is TradeDirection.INPUT else amount
        calls.append(UNWRAP_WETH9.encode_call(minimum_out, wallet))

    return MULTICALL.encode_hex(calls)


def encode_add_liquidity(
    token_a: str,
    token_b: str,
    amount_a: int,
    amount_b: int,
    min_a: int,
    min_b: int,
    recipient: str,
    deadline: int,
    *,
    native_side: str | None = None,
) -> str:
    """Encode addLiquidity, or addLiquidityETH when one side is native.

    Args:
        native_side: "a" or "b" if that side is the native currency; its
            address argument is ignored and its amount goes in the value.
    """
    if native_side == "a":
        return ADD_LIQUIDITY_ETH.encode_hex(token_b, amount_b, min_b, min_a, recipient, deadline)
    if native_side == "b":
        return ADD_LIQUIDITY_ETH.encode_hex(token_a, amount_a, min_a, min_b, recipient, deadline)
    return ADD_LIQUIDITY.encode_hex(
        token_a, token_b, amount_a, amount_b, min_a, min_b, recipient, deadline
    )


def encode_remove_liquidity(
    token_a: str,
    token_b: str,
    liquidity: int,
    min_a: int,
    min_b: int,
    recipient: str,
    deadline: int,
    *,
    native_side: str | None = None,
) -> str:
    """Encode removeLiquidity, or removeLiquidityETH when one side is native."""
    if native_side == "a":
        return REMOVE_LIQUIDITY_ETH.encode_hex(token_b, liquidity, min_b, min_a, recipient, deadline)
    if native_side == "b":
        return REMOVE_LIQUIDITY_ETH.encode_hex(token_a, liquidity, min_a, min_b, recipient, deadline)
    return REMOVE_LIQUIDITY.encode_hex(token_a, token_b, liquidity, min_a, min_b, recipient, deadline)


__all__ = [
    "encode_approve",
    "encode_v2_swap",
    "encode_v3_swap",
    "encode_add_liquidity",
    "encode_remove_liquidity",
]
