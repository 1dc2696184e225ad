"""Index-based pro-rata fee distribution.

Each swap fee raises a global per-asset index by fee * 1e18 / total shares.
Each holder keeps a checkpoint of the index at their last balance change;
the difference times their balance is what they earned since. Nothing
iterates over holders.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from pairswap import journal
from pairswap.constants import ONE_18
from pairswap.models.types import normalize_address
from pairswap.safe_int import S


@dataclass
class FeeCheckpoint:
    """Per-holder fee bookkeeping.

    Attributes:
        supply_index0: index0 at the holder's last checkpoint
        supply_index1: index1 at the holder's last checkpoint
        claimable0: token0 fees earned and not yet claimed
        claimable1: token1 fees earned and not yet claimed
    """

    supply_index0: int = 0
    supply_index1: int = 0
    claimable0: int = 0
    claimable1: int = 0


class FeeAccrual:
    """Global fee indices plus per-holder checkpoints."""

    def __init__(
        self,
        index0: int = 0,
        index1: int = 0,
        checkpoints: dict[str, FeeCheckpoint] | None = None,
    ) -> None:
        self.index0 = index0
        self.index1 = index1
        self._checkpoints: dict[str, FeeCheckpoint] = dict(checkpoints or {})

    @property
    def checkpoints(self) -> dict[str, FeeCheckpoint]:
        """Copy of all checkpoints by holder."""
        return {holder: replace(cp) for holder, cp in self._checkpoints.items()}

    def checkpoint_of(self, holder: str) -> FeeCheckpoint:
        """Copy of a holder's checkpoint (zeroed if the holder is unknown)."""
        return replace(self._checkpoints.get(normalize_address(holder), FeeCheckpoint()))

    def update_for(self, holder: str, balance: int) -> None:
        """Credit fees earned since the holder's checkpoint, then move it to the current index.

        Must run before the holder's share balance changes, with the balance
        as it was before the change.
        """
        holder = normalize_address(holder)
        self._journal_checkpoint(holder)
        cp = self._checkpoints.setdefault(holder, FeeCheckpoint())
        if balance > 0:
            delta0 = S(self.index0) - S(cp.supply_index0)
            delta1 = S(self.index1) - S(cp.supply_index1)
            if delta0 > 0:
                cp.claimable0 = (S(cp.claimable0) + S(balance) * delta0 // ONE_18).value
            if delta1 > 0:
                cp.claimable1 = (S(cp.claimable1) + S(balance) * delta1 // ONE_18).value
        cp.supply_index0 = self.index0
        cp.supply_index1 = self.index1

    def distribute(self, amount0: int, amount1: int, total_supply: int) -> tuple[int, int]:
        """Spread LP fee amounts over the share supply.

        A ratio that rounds to zero is dropped; the tokens stay in escrow
        unattributed, so the index never over-credits.

        Returns:
            Tuple of (index0 increase, index1 increase)
        """
        if total_supply == 0:
            return 0, 0
        ratio0 = (S(amount0) * ONE_18 // S(total_supply)).value
        ratio1 = (S(amount1) * ONE_18 // S(total_supply)).value
        journal.record(self._restore_indices, self.index0, self.index1)
        self.index0 += ratio0
        self.index1 += ratio1
        return ratio0, ratio1

    def pending(self, holder: str, balance: int) -> tuple[int, int]:
        """Claimable amounts as they would be after a checkpoint, without mutating."""
        cp = self.checkpoint_of(holder)
        claimable0, claimable1 = cp.claimable0, cp.claimable1
        if balance > 0:
            claimable0 += (S(balance) * (S(self.index0) - S(cp.supply_index0)) // ONE_18).value
            claimable1 += (S(balance) * (S(self.index1) - S(cp.supply_index1)) // ONE_18).value
        return claimable0, claimable1

    def take_claimable(self, holder: str) -> tuple[int, int]:
        """Zero and return a holder's claimable amounts."""
        holder = normalize_address(holder)
        cp = self._checkpoints.get(holder)
        if cp is None:
            return 0, 0
        self._journal_checkpoint(holder)
        claimed = (cp.claimable0, cp.claimable1)
        cp.claimable0 = 0
        cp.claimable1 = 0
        return claimed

    def _journal_checkpoint(self, holder: str) -> None:
        previous = self._checkpoints.get(holder)
        saved = None if previous is None else replace(previous)
        journal.record(self._restore_checkpoint, holder, saved)

    def _restore_checkpoint(self, holder: str, previous: FeeCheckpoint | None) -> None:
        if previous is None:
            self._checkpoints.pop(holder, None)
        else:
            self._checkpoints[holder] = previous

    def _restore_indices(self, index0: int, index1: int) -> None:
        self.index0 = index0
        self.index1 = index1
