"""Engine configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

from pairswap.constants import MAX_SOLVER_ITERATIONS, MINIMUM_K, MINIMUM_LIQUIDITY, PERIOD_SIZE


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class EngineConfig:
    """Centralized configuration for pool behavior.

    Holds the numeric constants a pool is created with, so tests can run
    pools with short oracle periods or lenient solver settings without
    patching module constants.

    Attributes:
        period_size: Minimum seconds between two oracle observations (default: 1800)
        minimum_liquidity: Shares locked on the first mint (default: 1000)
        minimum_k: Smallest stable-curve value accepted for the first deposit
        max_solver_iterations: Newton iteration cap for the stable curve (default: 255)
        strict_convergence: If True, pricing raises when the stable solver hits
            its iteration cap. If False, the best estimate is used and a
            warning is logged.
    """

    period_size: int = PERIOD_SIZE
    minimum_liquidity: int = MINIMUM_LIQUIDITY
    minimum_k: int = MINIMUM_K
    max_solver_iterations: int = MAX_SOLVER_ITERATIONS
    strict_convergence: bool = True

    def __post_init__(self) -> None:
        if self.period_size <= 0:
            raise ValueError(f"period_size must be positive, got {self.period_size}")
        if self.minimum_liquidity < 0:
            raise ValueError(
                f"minimum_liquidity must be non-negative, got {self.minimum_liquidity}"
            )
        if self.minimum_k < 0:
            raise ValueError(f"minimum_k must be non-negative, got {self.minimum_k}")
        if self.max_solver_iterations <= 0:
            raise ValueError(
                f"max_solver_iterations must be positive, got {self.max_solver_iterations}"
            )

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Build a config from PAIRSWAP_* environment variables.

        - PAIRSWAP_PERIOD_SIZE (default: 1800)
        - PAIRSWAP_MINIMUM_LIQUIDITY (default: 1000)
        - PAIRSWAP_MINIMUM_K (default: 10**10)
        - PAIRSWAP_MAX_SOLVER_ITERATIONS (default: 255)
        - PAIRSWAP_STRICT_CONVERGENCE (default: true)
        """
        return cls(
            period_size=int(os.environ.get("PAIRSWAP_PERIOD_SIZE", str(PERIOD_SIZE))),
            minimum_liquidity=int(
                os.environ.get("PAIRSWAP_MINIMUM_LIQUIDITY", str(MINIMUM_LIQUIDITY))
            ),
            minimum_k=int(os.environ.get("PAIRSWAP_MINIMUM_K", str(MINIMUM_K))),
            max_solver_iterations=int(
                os.environ.get("PAIRSWAP_MAX_SOLVER_ITERATIONS", str(MAX_SOLVER_ITERATIONS))
            ),
            strict_convergence=_env_bool("PAIRSWAP_STRICT_CONVERGENCE", True),
        )


# Default configuration instance
DEFAULT_ENGINE_CONFIG = EngineConfig()
