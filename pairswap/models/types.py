"""Shared type definitions for pool models.

These types are used by the persisted snapshot and the read API.
"""

from typing import Annotated, Any

from pydantic import BeforeValidator, Field, PlainSerializer

# Maximum uint256 value
UINT256_MAX = 2**256 - 1


def validate_uint(value: Any) -> int:
    """Validate that a value is a non-negative integer within uint256 range.

    Accepts ints and decimal strings, so snapshots written with amounts as
    strings read back unchanged.

    Args:
        value: Value to validate (string or int)

    Returns:
        The value as an int

    Raises:
        ValueError: If value is not a valid non-negative integer within uint256 range
    """
    if isinstance(value, bool):
        raise ValueError("Uint cannot be a boolean")

    if isinstance(value, int):
        int_value = value
    elif isinstance(value, str):
        try:
            int_value = int(value)
        except ValueError as err:
            raise ValueError(f"Uint must be a decimal integer string: '{value}'") from err
    else:
        raise ValueError(f"Uint must be string or int, got {type(value).__name__}")

    if int_value < 0:
        raise ValueError(f"Uint cannot be negative: {value}")
    if int_value > UINT256_MAX:
        raise ValueError(f"Uint overflow: {value} > 2^256-1")

    return int_value


# Non-negative 256-bit integer, serialized as a decimal string
Uint = Annotated[
    int,
    BeforeValidator(validate_uint),
    PlainSerializer(str, return_type=str, when_used="json"),
    Field(description="256-bit unsigned integer, decimal string on the wire"),
]

# Ethereum-style address (40 hex chars after 0x prefix)
Address = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{40}$")]


def normalize_address(address: str, *, validate: bool = False) -> str:
    """Normalize an address to lowercase with a 0x prefix.

    Args:
        address: An address (with or without 0x prefix)
        validate: If True, raises ValueError for invalid addresses.

    Returns:
        Lowercase address with 0x prefix

    Raises:
        ValueError: If validate=True and address is not a valid address
    """
    addr = address.lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr

    if validate and not is_valid_address(addr):
        raise ValueError(f"Invalid address: {address}")

    return addr


def is_valid_address(address: str) -> bool:
    """Check if a string is a valid 0x-prefixed 20-byte hex address."""
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
