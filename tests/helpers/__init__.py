"""Test helpers module for shared test utilities.

- constants: Account addresses, amounts and start time
- factories: Pool construction and liquidity/swap shortcuts
"""

from tests.helpers.constants import (
    ALICE,
    BOB,
    BORROWER,
    CAROL,
    ESCROW,
    FEE_HANDLER,
    ONE,
    POOL,
    START_TIME,
    TOKEN_A,
    TOKEN_B,
    TOKEN_C,
)
from tests.helpers.factories import (
    add_liquidity,
    make_pool,
    make_tokens,
    remove_liquidity,
    swap_exact_in,
)

__all__ = [
    # Constants
    "ALICE",
    "BOB",
    "BORROWER",
    "CAROL",
    "ESCROW",
    "FEE_HANDLER",
    "ONE",
    "POOL",
    "START_TIME",
    "TOKEN_A",
    "TOKEN_B",
    "TOKEN_C",
    # Factories
    "add_liquidity",
    "make_pool",
    "make_tokens",
    "remove_liquidity",
    "swap_exact_in",
]
