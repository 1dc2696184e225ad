"""Protocol constants for the pool engine.

Centralizes fixed-point scales, fee denominators and well-known accounts.
"""

from pairswap.models.types import is_valid_address

# 18-decimal fixed-point unit used by fee indices and stable-curve math
ONE_18 = 10**18

# Fee tiers and protocol cuts are expressed in basis points
FEE_DENOMINATOR = 10_000

# Shares locked forever on the first mint
MINIMUM_LIQUIDITY = 10**3

# Smallest acceptable stable-curve value for the first deposit
MINIMUM_K = 10**10

# Minimum spacing between two oracle observations, in seconds
PERIOD_SIZE = 1800

# Iteration cap for the stable-curve Newton solver
MAX_SOLVER_ITERATIONS = 255

# Decimals of the pool share token
SHARE_DECIMALS = 18


def _validate_account(name: str, address: str) -> str:
    """Validate a well-known account address at import time.

    Raises:
        ValueError: If the address is invalid
    """
    if not is_valid_address(address):
        raise ValueError(f"Invalid {name} address: {address} (must be 0x + 40 hex chars)")
    return address


# Mint/burn counterparty of the share ledger
ZERO_ADDRESS = _validate_account("ZERO_ADDRESS", "0x" + "0" * 40)

# Holder of the permanently locked MINIMUM_LIQUIDITY shares
DEAD_ADDRESS = _validate_account("DEAD_ADDRESS", "0x" + "0" * 39 + "1")
