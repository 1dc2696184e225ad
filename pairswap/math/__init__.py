"""Invariant math for the pool engine.

- curves: curve kinds, invariant evaluation and swap pricing
- stable_math: the quartic stable curve and its Newton solver
"""

from pairswap.math.curves import CurveKind, amount_out, compute_k
from pairswap.math.stable_math import SolveResult, get_y

__all__ = ["CurveKind", "SolveResult", "amount_out", "compute_k", "get_y"]
