"""uniroute - off-chain trade routing and liquidity quoting for Uniswap-style exchanges."""

from uniroute.config import Settings
from uniroute.errors import (
    ConfigurationError,
    ErrorCode,
    NoRouteFoundError,
    RouterError,
    UnsupportedOperationError,
)
from uniroute.router import TradeRouter

__version__ = "0.1.0"
__all__ = [
    "ConfigurationError",
    "ErrorCode",
    "NoRouteFoundError",
    "RouterError",
    "Settings",
    "TradeRouter",
    "UnsupportedOperationError",
    "__version__",
]
