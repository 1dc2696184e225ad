"""Tests for PoolRegistry."""

import pytest

from pairswap.registry import PoolRegistry
from pairswap.tokens import InMemoryToken
from tests.helpers import POOL, TOKEN_A, TOKEN_B, TOKEN_C, make_pool, make_tokens


class TestPoolRegistry:
    """Lookup by address and by pair."""

    def test_empty(self):
        registry = PoolRegistry()
        assert len(registry) == 0
        assert registry.all() == []
        assert registry.get(POOL) is None

    def test_get_by_address(self, volatile_pool):
        registry = PoolRegistry([volatile_pool])
        assert registry.get(POOL.upper().replace("0X", "0x")) is volatile_pool
        assert POOL in registry

    def test_get_by_pair_in_either_order(self, volatile_pool):
        registry = PoolRegistry([volatile_pool])
        assert registry.get_pool(TOKEN_A, TOKEN_B, False) is volatile_pool
        assert registry.get_pool(TOKEN_B, TOKEN_A, False) is volatile_pool
        assert registry.get_pool(TOKEN_A, TOKEN_B, True) is None

    def test_stable_and_volatile_coexist(self, factory, clock):
        token_a, token_b = make_tokens()
        volatile = make_pool(token_a, token_b, factory=factory, clock=clock)
        stable = make_pool(
            token_a,
            token_b,
            stable=True,
            fee=5,
            factory=factory,
            clock=clock,
            address="0x" + "20" * 20,
            escrow="0x" + "21" * 20,
        )
        registry = PoolRegistry([volatile, stable])
        assert registry.get_pool(TOKEN_A, TOKEN_B, True) is stable
        assert registry.all() == [volatile, stable]

    def test_duplicate_address(self, volatile_pool, factory, clock):
        registry = PoolRegistry([volatile_pool])
        other = make_pool(
            InMemoryToken(TOKEN_A, "AAA"),
            InMemoryToken(TOKEN_C, "CCC"),
            factory=factory,
            clock=clock,
        )
        with pytest.raises(ValueError):
            registry.add(other)

    def test_duplicate_pair(self, volatile_pool, factory, clock):
        registry = PoolRegistry([volatile_pool])
        other = make_pool(factory=factory, clock=clock, address="0x" + "20" * 20)
        with pytest.raises(ValueError):
            registry.add(other)
        assert len(registry) == 1
