"""Time-weighted average price oracle.

Observations of the cumulative reserve integrals are recorded at most
once per period. The average reserves between two observations are
the cumulative deltas divided by the time between them; feeding those
reserves through the live pricing function gives a historical quote that
is consistent with how swaps are priced.

Cadence is at least period_size but has no upper bound: an idle pool
records nothing until it is touched again.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from pairswap import journal
from pairswap.constants import PERIOD_SIZE
from pairswap.errors import InsufficientObservations
from pairswap.safe_int import S

# Prices a trade against a pair of (reserve0, reserve1)
ReservePricer = Callable[[int, int], int]


@dataclass(frozen=True)
class Observation:
    """A recorded point of the cumulative reserve trail."""

    timestamp: int
    reserve0_cumulative: int
    reserve1_cumulative: int


def average_reserves(start: Observation, end: Observation) -> tuple[int, int]:
    """Average reserves between two observations.

    Raises:
        DivisionByZero: If both observations share a timestamp
        Underflow: If end precedes start
    """
    time_elapsed = S(end.timestamp) - S(start.timestamp)
    reserve0 = (S(end.reserve0_cumulative) - S(start.reserve0_cumulative)) // time_elapsed
    reserve1 = (S(end.reserve1_cumulative) - S(start.reserve1_cumulative)) // time_elapsed
    return reserve0.value, reserve1.value


class PriceOracle:
    """Append-only sequence of observations with TWAP queries."""

    def __init__(
        self,
        observations: Iterable[Observation],
        period_size: int = PERIOD_SIZE,
    ) -> None:
        self._observations: list[Observation] = list(observations)
        if not self._observations:
            raise ValueError("PriceOracle requires an initial observation")
        self.period_size = period_size

    @classmethod
    def start(cls, timestamp: int, period_size: int = PERIOD_SIZE) -> PriceOracle:
        """Create an oracle whose first observation has zero cumulatives."""
        return cls([Observation(timestamp, 0, 0)], period_size)

    @property
    def observations(self) -> tuple[Observation, ...]:
        return tuple(self._observations)

    def __len__(self) -> int:
        return len(self._observations)

    def last_observation(self) -> Observation:
        return self._observations[-1]

    def record(self, timestamp: int, reserve0_cumulative: int, reserve1_cumulative: int) -> bool:
        """Append an observation if more than a period passed since the last one.

        Returns:
            True if an observation was appended
        """
        last = self._observations[-1]
        if (S(timestamp) - S(last.timestamp)) > self.period_size:
            self._observations.append(
                Observation(timestamp, reserve0_cumulative, reserve1_cumulative)
            )
            journal.record(self._observations.pop)
            return True
        return False

    def sample(self, points: int, window: int, price: ReservePricer) -> list[int]:
        """Price each of the last `points` intervals spanning `window` observations.

        Args:
            points: Number of intervals to return
            window: Observations per interval
            price: Pricing function applied to each interval's average reserves

        Returns:
            List of prices, oldest first

        Raises:
            InsufficientObservations: If fewer than points * window intervals exist
        """
        if points <= 0 or window <= 0:
            raise ValueError(f"points and window must be positive, got {points}, {window}")
        length = len(self._observations) - 1
        if points * window > length:
            raise InsufficientObservations(
                f"Need {points * window} intervals, only {length} recorded"
            )

        prices = []
        for i in range(length - points * window, length, window):
            reserve0, reserve1 = average_reserves(
                self._observations[i], self._observations[i + window]
            )
            prices.append(price(reserve0, reserve1))
        return prices

    def quote(self, granularity: int, price: ReservePricer) -> int:
        """Mean price over the last `granularity` observation intervals."""
        prices = self.sample(granularity, 1, price)
        return sum(prices) // granularity

    def current(
        self,
        now: int,
        reserve0_cumulative: int,
        reserve1_cumulative: int,
        price: ReservePricer,
    ) -> int:
        """Price over the interval from the last observation to now.

        If the last observation was recorded at now, the one before it is
        used instead so the interval is never empty.

        Raises:
            InsufficientObservations: If the only observation was recorded at now
        """
        observation = self._observations[-1]
        if observation.timestamp == now:
            if len(self._observations) < 2:
                raise InsufficientObservations("No observation older than the current time")
            observation = self._observations[-2]
        reserve0, reserve1 = average_reserves(
            observation, Observation(now, reserve0_cumulative, reserve1_cumulative)
        )
        return price(reserve0, reserve1)
