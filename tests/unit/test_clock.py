"""Tests for time sources."""

import time

import pytest

from pairswap.clock import ManualClock, SystemClock


class TestClocks:
    def test_manual_clock(self):
        clock = ManualClock(100)
        assert clock() == 100
        assert clock.advance(5) == 105
        assert clock() == 105

    def test_manual_clock_cannot_go_back(self):
        with pytest.raises(ValueError):
            ManualClock(100).advance(-1)

    def test_system_clock(self):
        assert abs(SystemClock()() - int(time.time())) <= 1
