"""Pool registry.

PoolRegistry is an explicit collection of pools handed to whatever needs
to look pools up (the read API, simulations). The engine itself never
consults it: every pool operation goes through a pool handle.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable

import structlog

from pairswap.models.types import normalize_address
from pairswap.pool import Pool

logger = structlog.get_logger()


def _pair_key(token_a: str, token_b: str, stable: bool) -> tuple[str, str, bool]:
    """Canonical (token0, token1, stable) key, lower address first."""
    a = normalize_address(token_a)
    b = normalize_address(token_b)
    if bytes.fromhex(a[2:]) > bytes.fromhex(b[2:]):
        a, b = b, a
    return a, b, stable


class PoolRegistry:
    """Pools indexed by address and by (token pair, curve kind).

    There is at most one pool per pair and curve kind, matching how pools
    are deployed: a stable and a volatile pool may coexist for the same pair.
    """

    def __init__(self, pools: Iterable[Pool] | None = None) -> None:
        self._pools: dict[str, Pool] = {}
        self._by_pair: dict[tuple[str, str, bool], Pool] = {}
        self._lock = threading.Lock()
        if pools:
            for pool in pools:
                self.add(pool)

    def add(self, pool: Pool) -> None:
        """Register a pool.

        Raises:
            ValueError: If the address or the (pair, stable) slot is taken
        """
        token0, token1 = pool.tokens()
        key = _pair_key(token0, token1, pool.stable)
        with self._lock:
            if pool.address in self._pools:
                raise ValueError(f"Pool {pool.address} already registered")
            if key in self._by_pair:
                raise ValueError(
                    f"A {'stable' if pool.stable else 'volatile'} pool for "
                    f"{key[0]}/{key[1]} is already registered"
                )
            self._pools[pool.address] = pool
            self._by_pair[key] = pool
        logger.debug("pool_registered", pool=pool.address, stable=pool.stable)

    def get(self, address: str) -> Pool | None:
        """Look up a pool by address."""
        return self._pools.get(normalize_address(address))

    def get_pool(self, token_a: str, token_b: str, stable: bool) -> Pool | None:
        """Look up a pool by its tokens (in either order) and curve kind."""
        return self._by_pair.get(_pair_key(token_a, token_b, stable))

    def all(self) -> list[Pool]:
        """All registered pools, in registration order."""
        with self._lock:
            return list(self._pools.values())

    def __len__(self) -> int:
        return len(self._pools)

    def __contains__(self, address: object) -> bool:
        return isinstance(address, str) and normalize_address(address) in self._pools
