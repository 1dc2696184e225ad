"""Fee escrow.

One escrow per pool holds every fee the pool collects. LP-claimable and
protocol-owned fees share the same token balances and are told apart by
bookkeeping: the escrow tracks the protocol's part, the pool's fee
indices track the LPs' part.
"""

from __future__ import annotations

import threading
from collections.abc import Callable

import structlog

from pairswap import journal
from pairswap.errors import Forbidden
from pairswap.factory import FactoryView
from pairswap.models.types import normalize_address
from pairswap.safe_int import S
from pairswap.tokens import Token

logger = structlog.get_logger()


class FeeEscrow:
    """Custody of a pool's collected fees.

    Attributes:
        address: Account that holds the fee tokens
        pool: Address of the owning pool
        protocol_fees0: token0 fees owed to the protocol
        protocol_fees1: token1 fees owed to the protocol
    """

    def __init__(
        self,
        address: str,
        pool: str,
        token0: Token,
        token1: Token,
        factory: FactoryView,
        protocol_fees0: int = 0,
        protocol_fees1: int = 0,
        lock: threading.RLock | None = None,
        persist: Callable[[], None] | None = None,
    ) -> None:
        self.address = normalize_address(address, validate=True)
        self.pool = normalize_address(pool, validate=True)
        self.token0 = token0
        self.token1 = token1
        self.factory = factory
        self.protocol_fees0 = protocol_fees0
        self.protocol_fees1 = protocol_fees1
        # Shared with the owning pool so withdrawals serialize with swaps
        self._lock = lock if lock is not None else threading.RLock()
        self._persist = persist

    def _set_protocol_fees(self, amount0: int, amount1: int) -> None:
        journal.record(self._restore_protocol_fees, self.protocol_fees0, self.protocol_fees1)
        self.protocol_fees0 = amount0
        self.protocol_fees1 = amount1

    def _restore_protocol_fees(self, amount0: int, amount1: int) -> None:
        self.protocol_fees0 = amount0
        self.protocol_fees1 = amount1

    def _only_pool(self, caller: str) -> None:
        if normalize_address(caller) != self.pool:
            raise Forbidden(f"{caller} is not the pool of this escrow")

    def notify_protocol_fee(self, caller: str, amount0: int, amount1: int) -> None:
        """Record the protocol's cut of fees the pool just moved here."""
        self._only_pool(caller)
        with self._lock:
            self._set_protocol_fees(
                (S(self.protocol_fees0) + S(amount0)).value,
                (S(self.protocol_fees1) + S(amount1)).value,
            )

    def claim_fees_for(self, caller: str, recipient: str, amount0: int, amount1: int) -> None:
        """Pay an LP's claimed fees."""
        self._only_pool(caller)
        with self._lock:
            if amount0 > 0:
                self.token0.transfer(self.address, recipient, amount0)
            if amount1 > 0:
                self.token1.transfer(self.address, recipient, amount1)

    def withdraw_protocol_fees(
        self, caller: str, recipient: str, amount0: int, amount1: int
    ) -> None:
        """Pay out protocol fees to recipient.

        Raises:
            Forbidden: If caller is not the factory's fee handler
            Underflow: If either amount exceeds the tracked protocol fees
        """
        if normalize_address(caller) != normalize_address(self.factory.fee_handler):
            raise Forbidden(f"{caller} is not the fee handler")
        with journal.atomic() as tx:
            tx.acquire(self._lock)
            self._set_protocol_fees(
                (S(self.protocol_fees0) - S(amount0)).value,
                (S(self.protocol_fees1) - S(amount1)).value,
            )
            if amount0 > 0:
                self.token0.transfer(self.address, recipient, amount0)
            if amount1 > 0:
                self.token1.transfer(self.address, recipient, amount1)
            if self._persist is not None:
                self._persist()
        logger.info(
            "protocol_fees_withdrawn",
            escrow=self.address,
            recipient=recipient,
            amount0=amount0,
            amount1=amount1,
        )
