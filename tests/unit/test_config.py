"""Tests for engine configuration."""

import pytest

from pairswap.config import DEFAULT_ENGINE_CONFIG, EngineConfig


class TestEngineConfigDefaults:
    """Default values match the protocol constants."""

    def test_defaults(self):
        config = EngineConfig()
        assert config.period_size == 1800
        assert config.minimum_liquidity == 1000
        assert config.minimum_k == 10**10
        assert config.max_solver_iterations == 255
        assert config.strict_convergence is True

    def test_default_instance(self):
        assert DEFAULT_ENGINE_CONFIG == EngineConfig()

    def test_frozen(self):
        with pytest.raises(AttributeError):
            DEFAULT_ENGINE_CONFIG.period_size = 60  # type: ignore[misc]


class TestEngineConfigValidation:
    """Invalid values are rejected at construction."""

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"period_size": 0},
            {"minimum_liquidity": -1},
            {"minimum_k": -1},
            {"max_solver_iterations": 0},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            EngineConfig(**kwargs)


class TestEngineConfigFromEnv:
    """Tests for EngineConfig.from_env()."""

    def test_unset_uses_defaults(self, monkeypatch):
        for name in (
            "PAIRSWAP_PERIOD_SIZE",
            "PAIRSWAP_MINIMUM_LIQUIDITY",
            "PAIRSWAP_MINIMUM_K",
            "PAIRSWAP_MAX_SOLVER_ITERATIONS",
            "PAIRSWAP_STRICT_CONVERGENCE",
        ):
            monkeypatch.delenv(name, raising=False)
        assert EngineConfig.from_env() == EngineConfig()

    def test_reads_overrides(self, monkeypatch):
        monkeypatch.setenv("PAIRSWAP_PERIOD_SIZE", "60")
        monkeypatch.setenv("PAIRSWAP_MAX_SOLVER_ITERATIONS", "32")
        monkeypatch.setenv("PAIRSWAP_STRICT_CONVERGENCE", "false")
        config = EngineConfig.from_env()
        assert config.period_size == 60
        assert config.max_solver_iterations == 32
        assert config.strict_convergence is False

    @pytest.mark.parametrize("raw", ["true", "1", "YES"])
    def test_truthy_strings(self, monkeypatch, raw):
        monkeypatch.setenv("PAIRSWAP_STRICT_CONVERGENCE", raw)
        assert EngineConfig.from_env().strict_convergence is True

    def test_invalid_override_rejected(self, monkeypatch):
        monkeypatch.setenv("PAIRSWAP_PERIOD_SIZE", "0")
        with pytest.raises(ValueError):
            EngineConfig.from_env()
