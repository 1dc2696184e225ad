"""Tests for cumulative reserves and TWAP queries."""

import pytest

from pairswap.errors import InsufficientObservations
from pairswap.math.curves import volatile_amount_out
from pairswap.oracle import Observation, PriceOracle, average_reserves
from tests.helpers import BOB, ONE, START_TIME, TOKEN_A, TOKEN_B, swap_exact_in

SPOT_PRICE = volatile_amount_out(ONE, 100 * ONE, 400 * ONE)


class TestCumulativeReserves:
    """Reserves integrate over time on every update."""

    def test_no_accumulation_while_empty(self, volatile_pool, clock):
        clock.advance(100)
        volatile_pool.sync()
        assert volatile_pool.reserve0_cumulative_last == 0
        assert volatile_pool.block_timestamp_last == START_TIME + 100

    def test_sync_accumulates(self, seeded_volatile_pool, clock):
        pool = seeded_volatile_pool
        clock.advance(100)
        pool.sync()
        assert pool.reserve0_cumulative_last == 100 * ONE * 100
        assert pool.reserve1_cumulative_last == 400 * ONE * 100

    def test_current_cumulative_prices_extrapolates(self, seeded_volatile_pool, clock):
        pool = seeded_volatile_pool
        clock.advance(100)
        assert pool.current_cumulative_prices() == (
            100 * ONE * 100,
            400 * ONE * 100,
            START_TIME + 100,
        )
        # Read-only
        assert pool.reserve0_cumulative_last == 0

    def test_cumulatives_never_decrease(self, seeded_volatile_pool, clock):
        pool = seeded_volatile_pool
        last = (0, 0)
        for step in range(5):
            clock.advance(700)
            swap_exact_in(pool, BOB, TOKEN_A if step % 2 else TOKEN_B, ONE)
            current = (pool.reserve0_cumulative_last, pool.reserve1_cumulative_last)
            assert current[0] >= last[0] and current[1] >= last[1]
            last = current


class TestObservationCadence:
    """Observations are recorded at most once per period."""

    def test_initial_observation(self, volatile_pool):
        assert volatile_pool.observations == (Observation(START_TIME, 0, 0),)
        assert volatile_pool.observation_length() == 1

    def test_recorded_only_after_period(self, seeded_volatile_pool, clock):
        pool = seeded_volatile_pool
        clock.advance(1000)
        pool.sync()
        clock.advance(800)
        pool.sync()
        assert pool.observation_length() == 1

        clock.advance(1)
        pool.sync()
        assert pool.observation_length() == 2
        assert pool.last_observation() == Observation(
            START_TIME + 1801, 100 * ONE * 1801, 400 * ONE * 1801
        )


class TestTwapQueries:
    """Historical prices priced through the live curve, without fees."""

    def test_quote_at_constant_reserves(self, seeded_volatile_pool, clock):
        pool = seeded_volatile_pool
        clock.advance(3600)
        pool.sync()
        assert pool.quote(TOKEN_A, ONE, 1) == SPOT_PRICE

    def test_twap_weights_by_time(self, seeded_volatile_pool, clock):
        """Average reserves are Δcumulative // Δt across a swap."""
        pool = seeded_volatile_pool
        clock.advance(1000)
        swap_exact_in(pool, BOB, TOKEN_A, 10 * ONE)
        reserve0, reserve1 = pool.reserve0, pool.reserve1
        clock.advance(2600)
        pool.sync()

        observation = pool.last_observation()
        assert observation.reserve0_cumulative == 100 * ONE * 1000 + reserve0 * 2600
        assert observation.reserve1_cumulative == 400 * ONE * 1000 + reserve1 * 2600
        average0 = observation.reserve0_cumulative // 3600
        average1 = observation.reserve1_cumulative // 3600
        assert pool.quote(TOKEN_A, ONE, 1) == volatile_amount_out(ONE, average0, average1)
        assert pool.quote(TOKEN_B, ONE, 1) == volatile_amount_out(ONE, average1, average0)

    def test_prices_and_sample(self, seeded_volatile_pool, clock):
        pool = seeded_volatile_pool
        for _ in range(4):
            clock.advance(3600)
            pool.sync()
        assert pool.prices(TOKEN_A, ONE, 3) == [SPOT_PRICE] * 3
        assert pool.sample(TOKEN_A, ONE, 2, 2) == [SPOT_PRICE] * 2
        assert pool.quote(TOKEN_A, ONE, 4) == SPOT_PRICE

    def test_too_few_observations(self, seeded_volatile_pool, clock):
        pool = seeded_volatile_pool
        clock.advance(3600)
        pool.sync()
        with pytest.raises(InsufficientObservations):
            pool.prices(TOKEN_A, ONE, 2)
        with pytest.raises(InsufficientObservations):
            pool.sample(TOKEN_A, ONE, 1, 2)

    def test_unknown_token(self, seeded_volatile_pool, clock):
        clock.advance(3600)
        seeded_volatile_pool.sync()
        with pytest.raises(ValueError):
            seeded_volatile_pool.quote("0x" + "99" * 20, ONE, 1)


class TestCurrent:
    """current() prices the interval since the last observation."""

    def test_no_history(self, seeded_volatile_pool):
        with pytest.raises(InsufficientObservations):
            seeded_volatile_pool.current(TOKEN_A, ONE)

    def test_since_last_observation(self, seeded_volatile_pool, clock):
        clock.advance(600)
        assert seeded_volatile_pool.current(TOKEN_A, ONE) == SPOT_PRICE

    def test_falls_back_when_observed_now(self, seeded_volatile_pool, clock):
        """If the last observation was taken now, the previous one is used."""
        pool = seeded_volatile_pool
        clock.advance(3600)
        pool.sync()
        assert pool.last_observation().timestamp == clock()
        assert pool.current(TOKEN_A, ONE) == SPOT_PRICE


class TestPriceOracle:
    """The oracle component on its own."""

    def test_requires_observation(self):
        with pytest.raises(ValueError):
            PriceOracle([])

    def test_average_reserves(self):
        start = Observation(0, 0, 0)
        end = Observation(10, 1000, 4000)
        assert average_reserves(start, end) == (100, 400)

    def test_invalid_sample_arguments(self):
        oracle = PriceOracle.start(0)
        with pytest.raises(ValueError):
            oracle.sample(0, 1, lambda r0, r1: 0)

    def test_record_returns_whether_appended(self):
        oracle = PriceOracle.start(0, period_size=10)
        assert oracle.record(10, 1, 1) is False
        assert oracle.record(11, 1, 1) is True
        assert len(oracle) == 2
