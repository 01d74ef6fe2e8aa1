"""Error taxonomy for routing and liquidity operations.

Every error carries a stable machine-readable code alongside its message.
Expected conditions (a missing pair, an insufficient allowance, a reverting
candidate inside a batch) are not errors: they are returned as data.
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(Enum):
    """Machine-readable error codes."""

    INVALID_ADDRESS = "invalid_address"
    CHAIN_NOT_SUPPORTED = "chain_not_supported"
    INVALID_TRADE_PATH = "invalid_trade_path"
    INVALID_SETTINGS = "invalid_settings"
    INVALID_AMOUNT = "invalid_amount"
    TOKEN_NOT_FOUND = "token_not_found"
    MISSING_COUNTER_AMOUNT = "missing_counter_amount"
    INVALID_PAIR = "invalid_pair"
    NO_ROUTES_FOUND = "no_routes_found"
    VERSION_NOT_SUPPORTED = "version_not_supported"


class RouterError(Exception):
    """Base error for routing and liquidity operations."""

    default_code = ErrorCode.INVALID_SETTINGS

    def __init__(self, message: str, code: ErrorCode | None = None) -> None:
        self.code = code or self.default_code
        self.message = message
        super().__init__(f"{self.code.value}: {message}")

    def to_dict(self) -> dict[str, str]:
        """Serialize for API responses."""
        return {"code": self.code.value, "message": self.message}


class ConfigurationError(RouterError):
    """Missing or invalid configuration, unsupported chain, or degenerate trade path."""

    default_code = ErrorCode.INVALID_SETTINGS


class NoRouteFoundError(RouterError):
    """No candidate route could be priced."""

    default_code = ErrorCode.NO_ROUTES_FOUND


class UnsupportedOperationError(RouterError):
    """Operation not implemented for the requested protocol version."""

    default_code = ErrorCode.VERSION_NOT_SUPPORTED


__all__ = [
    "ErrorCode",
    "RouterError",
    "ConfigurationError",
    "NoRouteFoundError",
    "UnsupportedOperationError",
]
