"""Shared type definitions and address helpers.

These types are used by the value objects and by the HTTP request models.
"""

from decimal import Decimal, InvalidOperation
from typing import Annotated, Any

from pydantic import BeforeValidator, Field

# Maximum uint256 value
UINT256_MAX = 2**256 - 1

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def validate_decimal_str(value: Any) -> str:
    """Validate that a value is a non-negative decimal amount.

    Args:
        value: Value to validate (string, int or Decimal)

    Returns:
        The amount as a plain decimal string

    Raises:
        ValueError: If value is not a finite non-negative decimal number
    """
    if isinstance(value, bool) or not isinstance(value, (str, int, Decimal)):
        raise ValueError(f"Amount must be a decimal string, got {type(value).__name__}")

    try:
        amount = Decimal(str(value))
    except InvalidOperation as err:
        raise ValueError(f"Amount must be a decimal string: '{value}'") from err

    if not amount.is_finite():
        raise ValueError(f"Amount must be finite: {value}")
    if amount < 0:
        raise ValueError(f"Amount cannot be negative: {value}")

    return str(value)


# Ethereum address (40 hex chars after 0x prefix)
Address = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{40}$")]

# Human-readable token amount as decimal string (validated)
DecimalStr = Annotated[
    str,
    BeforeValidator(validate_decimal_str),
    Field(description="Token amount in human units as decimal string"),
]

# Arbitrary hex bytes
Bytes = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]*$")]


def normalize_address(address: str, *, validate: bool = False) -> str:
    """Normalize an Ethereum address to lowercase.

    Args:
        address: An Ethereum address (with or without 0x prefix)
        validate: If True, raises ValueError for invalid addresses.
                  If False (default), returns normalized form without validation.

    Returns:
        Lowercase address with 0x prefix

    Raises:
        ValueError: If validate=True and address is not a valid Ethereum address
    """
    addr = address.lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr

    if validate and not is_valid_address(addr):
        raise ValueError(f"Invalid address: {address}")

    return addr


def is_valid_address(address: str) -> bool:
    """Check if a string is a valid Ethereum address.

    Args:
        address: String to validate

    Returns:
        True if valid Ethereum address format
    """
    if not isinstance(address, str):
        return False
    if not address.startswith("0x"):
        return False
    if len(address) != 42:
        return False
    try:
        int(address, 16)
        return True
    except ValueError:
        return False


def is_zero_address(address: str) -> bool:
    """Check whether an address is the zero address (no contract)."""
    return normalize_address(address) == ZERO_ADDRESS


def to_hex_value(amount: int) -> str:
    """Format a wei amount as a 0x-prefixed hex string for a transaction value."""
    if amount < 0:
        raise ValueError(f"Transaction value cannot be negative: {amount}")
    return hex(amount) if amount else "0x00"
