"""pairswap - two-asset AMM pool engine with volatile and stable curves."""

from pairswap.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from pairswap.factory import FactoryView, StaticFactory
from pairswap.math.curves import CurveKind
from pairswap.pool import Pool, PoolMetadata, SwapCallee
from pairswap.registry import PoolRegistry
from pairswap.tokens import InMemoryToken, Token

__version__ = "0.1.0"
__all__ = [
    "DEFAULT_ENGINE_CONFIG",
    "CurveKind",
    "EngineConfig",
    "FactoryView",
    "InMemoryToken",
    "Pool",
    "PoolMetadata",
    "PoolRegistry",
    "StaticFactory",
    "SwapCallee",
    "Token",
    "__version__",
]
