"""Pytest configuration and fixtures."""

import pytest

from pairswap.clock import ManualClock
from pairswap.factory import StaticFactory
from pairswap.pool import Pool
from pairswap.tokens import InMemoryToken
from tests.helpers import (
    ALICE,
    FEE_HANDLER,
    ONE,
    START_TIME,
    add_liquidity,
    make_pool,
    make_tokens,
)


@pytest.fixture
def clock() -> ManualClock:
    """Manual clock starting at START_TIME."""
    return ManualClock(START_TIME)


@pytest.fixture
def factory() -> StaticFactory:
    """Factory view with no protocol cut, not paused."""
    return StaticFactory(fee_handler=FEE_HANDLER)


@pytest.fixture
def tokens() -> tuple[InMemoryToken, InMemoryToken]:
    """Two 18-decimal tokens; the first one is token0."""
    return make_tokens()


@pytest.fixture
def volatile_pool(tokens, factory, clock) -> Pool:
    """Empty constant-product pool with a 30 bps fee."""
    token_a, token_b = tokens
    return make_pool(token_a, token_b, stable=False, fee=30, factory=factory, clock=clock)


@pytest.fixture
def seeded_volatile_pool(volatile_pool) -> Pool:
    """Volatile pool with 100/400 reserves provided by ALICE."""
    add_liquidity(volatile_pool, ALICE, 100 * ONE, 400 * ONE)
    return volatile_pool


@pytest.fixture
def stable_pool(tokens, factory, clock) -> Pool:
    """Empty stable pool with a 5 bps fee."""
    token_a, token_b = tokens
    return make_pool(token_a, token_b, stable=True, fee=5, factory=factory, clock=clock)


@pytest.fixture
def seeded_stable_pool(stable_pool) -> Pool:
    """Stable pool with balanced 100/100 reserves provided by ALICE."""
    add_liquidity(stable_pool, ALICE, 100 * ONE, 100 * ONE)
    return stable_pool
