"""Constant-product liquidity math in arbitrary-precision Decimal.

All inputs and outputs are human units. Reserves and amounts must already be
oriented to the same (tokenA, tokenB) order.
"""

from __future__ import annotations

import decimal
from decimal import Decimal

from uniroute.constants import LP_TOKEN_DECIMALS, MINIMUM_LIQUIDITY
from uniroute.quoting.amounts import DECIMAL_HIGH_PREC_CONTEXT, truncate

# MINIMUM_LIQUIDITY base units of an 18-decimal LP token
MINIMUM_LIQUIDITY_FLOOR = Decimal(MINIMUM_LIQUIDITY).scaleb(-LP_TOKEN_DECIMALS)

HUNDRED = Decimal(100)


def quote_counter_amount(amount: Decimal, reserve_in: Decimal, reserve_out: Decimal, decimals: int) -> Decimal:
    """Amount of the other token matching the pool ratio: amount * reserve_out / reserve_in.

    Args:
        amount: Amount of the side the caller fixed
        reserve_in: Reserve of the fixed side
        reserve_out: Reserve of the side being derived
        decimals: Decimals of the derived side (result is truncated)
    """
    if reserve_in <= 0:
        raise ValueError("reserve_in must be positive")
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return truncate(amount * reserve_out / reserve_in, decimals)


def liquidity_minted(
    amount_a: Decimal,
    amount_b: Decimal,
    reserve_a: Decimal,
    reserve_b: Decimal,
    total_supply: Decimal,
) -> Decimal:
    """LP tokens minted for a deposit.

    First supplier (no supply yet): sqrt(amount_a * amount_b) - MINIMUM_LIQUIDITY_FLOOR.
    Otherwise: min(amount_a * total_supply / reserve_a, amount_b * total_supply / reserve_b).
    The result is truncated to LP token decimals and never negative.
    """
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT) as ctx:
        if total_supply <= 0:
            liquidity = (amount_a * amount_b).sqrt(ctx) - MINIMUM_LIQUIDITY_FLOOR
        else:
            if reserve_a <= 0 or reserve_b <= 0:
                raise ValueError("reserves must be positive when total supply is positive")
            liquidity = min(
                amount_a * total_supply / reserve_a,
                amount_b * total_supply / reserve_b,
            )
        return max(truncate(liquidity, LP_TOKEN_DECIMALS), Decimal(0))


def format_percent(value: Decimal) -> str:
    """Render a percentage clamped to 100 with 2 truncated decimals."""
    if value >= HUNDRED:
        return "100"
    if value <= 0:
        return "0.00"
    return format(truncate(value, 2), "f")


def pool_share_after_deposit(liquidity: Decimal, total_supply: Decimal) -> str:
    """Share of the pool after minting: liquidity / (liquidity + total_supply) * 100."""
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        denominator = liquidity + total_supply
        if denominator <= 0:
            return format_percent(Decimal(0))
        return format_percent(liquidity / denominator * HUNDRED)


def pool_share_of_supply(lp_balance: Decimal, total_supply: Decimal) -> str:
    """Share already held: lp_balance / total_supply * 100."""
    if total_supply <= 0:
        return format_percent(Decimal(0))
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return format_percent(lp_balance / total_supply * HUNDRED)


def proportional_amount(reserve: Decimal, lp_amount: Decimal, total_supply: Decimal, decimals: int) -> Decimal:
    """Underlying amount redeemable for `lp_amount`: reserve * lp_amount / total_supply."""
    if total_supply <= 0:
        return Decimal(0)
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return truncate(reserve * lp_amount / total_supply, decimals)


def amount_per_lp_token(reserve: Decimal, total_supply: Decimal, decimals: int) -> Decimal:
    """Underlying amount backing one LP token."""
    return proportional_amount(reserve, Decimal(1), total_supply, decimals)


__all__ = [
    "MINIMUM_LIQUIDITY_FLOOR",
    "quote_counter_amount",
    "liquidity_minted",
    "format_percent",
    "pool_share_after_deposit",
    "pool_share_of_supply",
    "proportional_amount",
    "amount_per_lp_token",
]
