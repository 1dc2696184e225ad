"""Reserve ledger: accounted balances and cumulative reserve integrals."""

from __future__ import annotations

from dataclasses import astuple, dataclass

from pairswap import journal
from pairswap.safe_int import S


@dataclass
class ReserveLedger:
    """Accounted reserves of a pool and their time integrals.

    The cumulative values grow by reserve * seconds elapsed on every update,
    so the average reserve over any interval is the cumulative delta divided
    by the interval length.

    Attributes:
        reserve0: Accounted balance of token0
        reserve1: Accounted balance of token1
        block_timestamp_last: Time of the last update (seconds)
        reserve0_cumulative_last: Integral of reserve0 over time up to block_timestamp_last
        reserve1_cumulative_last: Integral of reserve1 over time up to block_timestamp_last
    """

    reserve0: int = 0
    reserve1: int = 0
    block_timestamp_last: int = 0
    reserve0_cumulative_last: int = 0
    reserve1_cumulative_last: int = 0

    def update(self, balance0: int, balance1: int, now: int) -> None:
        """Accumulate the old reserves over the elapsed time, then adopt the balances.

        Accumulation is skipped while either reserve is empty.

        Raises:
            Underflow: If now is earlier than the last update
        """
        time_elapsed = (S(now) - S(self.block_timestamp_last)).value
        journal.record(self._restore, astuple(self))
        if time_elapsed > 0 and self.reserve0 != 0 and self.reserve1 != 0:
            self.reserve0_cumulative_last = (
                S(self.reserve0_cumulative_last) + S(self.reserve0) * time_elapsed
            ).value
            self.reserve1_cumulative_last = (
                S(self.reserve1_cumulative_last) + S(self.reserve1) * time_elapsed
            ).value
        self.reserve0 = balance0
        self.reserve1 = balance1
        self.block_timestamp_last = now

    def _restore(self, state: tuple[int, int, int, int, int]) -> None:
        (
            self.reserve0,
            self.reserve1,
            self.block_timestamp_last,
            self.reserve0_cumulative_last,
            self.reserve1_cumulative_last,
        ) = state

    def current_cumulative_prices(self, now: int) -> tuple[int, int, int]:
        """Cumulative values extrapolated to now, without mutating the ledger.

        Returns:
            Tuple of (reserve0_cumulative, reserve1_cumulative, now)
        """
        reserve0_cumulative = S(self.reserve0_cumulative_last)
        reserve1_cumulative = S(self.reserve1_cumulative_last)
        if self.block_timestamp_last != now:
            time_elapsed = (S(now) - S(self.block_timestamp_last)).value
            reserve0_cumulative = reserve0_cumulative + S(self.reserve0) * time_elapsed
            reserve1_cumulative = reserve1_cumulative + S(self.reserve1) * time_elapsed
        return reserve0_cumulative.value, reserve1_cumulative.value, now
