"""Route pricing and amount arithmetic.

Module structure:
- amounts.py: Decimal conversion, truncation and slippage helpers
- engine.py: QuoteEngine batching all candidate prices in one call
"""

from uniroute.quoting.amounts import (
    from_base_units,
    slippage_maximum,
    slippage_minimum,
    to_base_units,
    truncate,
)
from uniroute.quoting.engine import QuoteEngine

__all__ = [
    "QuoteEngine",
    "from_base_units",
    "slippage_maximum",
    "slippage_minimum",
    "to_base_units",
    "truncate",
]
