"""High-precision amount conversion and slippage helpers.

All amount arithmetic uses Decimal in a 78-digit context, enough for any
uint256 value. Every shift into on-chain base units truncates (ROUND_DOWN):
a minimum is never rounded up and a maximum never gains dust.
"""

from __future__ import annotations

import decimal
from decimal import ROUND_DOWN, Decimal

# 78 digits of precision: enough for uint256 values (up to ~10^77)
DECIMAL_HIGH_PREC_CONTEXT = decimal.Context(prec=78, rounding=ROUND_DOWN)


def truncate(amount: Decimal, decimals: int) -> Decimal:
    """Truncate an amount to `decimals` fractional digits."""
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return amount.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_DOWN)


def to_base_units(amount: Decimal, decimals: int) -> int:
    """Convert a human amount to integer base units, truncating dust.

    Args:
        amount: Human-readable amount (e.g. Decimal("1.5") WETH)
        decimals: Token decimals

    Returns:
        Integer amount scaled by 10**decimals
    """
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return int(amount.scaleb(decimals).to_integral_value(rounding=ROUND_DOWN))


def from_base_units(value: int, decimals: int) -> Decimal:
    """Convert integer base units to an exact human amount."""
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return Decimal(value).scaleb(-decimals)


def slippage_minimum(expected: Decimal, slippage: Decimal, decimals: int) -> Decimal:
    """Minimum acceptable amount: expected - trunc(expected * slippage).

    Always <= expected for slippage in [0, 1).
    """
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        delta = truncate(expected * slippage, decimals)
        return truncate(expected - delta, decimals)


def slippage_maximum(expected: Decimal, slippage: Decimal, decimals: int) -> Decimal:
    """Maximum amount to send: expected + trunc(expected * slippage).

    Always >= expected for slippage in [0, 1).
    """
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        delta = truncate(expected * slippage, decimals)
        return truncate(expected + delta, decimals)


def format_amount(amount: Decimal) -> str:
    """Render an amount as a plain (non-scientific) decimal string."""
    return format(amount.normalize(), "f") if amount else "0"


__all__ = [
    "DECIMAL_HIGH_PREC_CONTEXT",
    "truncate",
    "to_base_units",
    "from_base_units",
    "slippage_minimum",
    "slippage_maximum",
    "format_amount",
]
