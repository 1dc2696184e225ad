"""Invariant curves and swap pricing.

Two curves are supported:
- Volatile: constant product, K = x * y
- Stable: quartic K = x³y + xy³ on 18-decimal normalized reserves

Pricing functions here take amounts that already have the fee removed;
fee handling lives on the pool.
"""

from __future__ import annotations

from enum import Enum

import structlog

from pairswap.constants import MAX_SOLVER_ITERATIONS
from pairswap.errors import StableSolverDidNotConverge
from pairswap.math.stable_math import denormalize, get_y, normalize, stable_k
from pairswap.safe_int import S

logger = structlog.get_logger()


class CurveKind(str, Enum):
    """Which invariant a pool prices with."""

    VOLATILE = "volatile"
    STABLE = "stable"


def compute_k(kind: CurveKind, x: int, y: int, unit_x: int, unit_y: int) -> int:
    """Evaluate the pool invariant on native-decimal reserves.

    Args:
        kind: Curve kind
        x: Reserve of token0
        y: Reserve of token1
        unit_x: Unit scale of token0 (10**decimals)
        unit_y: Unit scale of token1 (10**decimals)

    Returns:
        Invariant value (x*y for volatile, normalized quartic for stable)
    """
    if kind is CurveKind.STABLE:
        return stable_k(x, y, unit_x, unit_y)
    return (S(x) * S(y)).value


def volatile_amount_out(amount_in: int, reserve_in: int, reserve_out: int) -> int:
    """Constant product output: amount_in * reserve_out / (reserve_in + amount_in).

    Returns:
        Output amount (floor), 0 for empty input or empty reserves
    """
    if amount_in <= 0 or reserve_in <= 0 or reserve_out <= 0:
        return 0
    return (S(amount_in) * S(reserve_out) // (S(reserve_in) + S(amount_in))).value


def stable_amount_out(
    amount_in: int,
    reserve_in: int,
    reserve_out: int,
    unit_in: int,
    unit_out: int,
    *,
    max_iterations: int = MAX_SOLVER_ITERATIONS,
    strict: bool = True,
) -> int:
    """Stable curve output for a given input.

    Algorithm:
        1. Compute the current invariant from the reserves
        2. Normalize reserves and input to 18 decimals
        3. Solve for the output reserve that keeps the invariant after
           adding the input
        4. Output = old reserve - new reserve, scaled back to native decimals

    Args:
        amount_in: Input amount after fee (native decimals)
        reserve_in: Reserve of the input token
        reserve_out: Reserve of the output token
        unit_in: Unit scale of the input token
        unit_out: Unit scale of the output token
        max_iterations: Newton iteration cap
        strict: Raise instead of using the best estimate when the solver
            does not converge

    Returns:
        Output amount (native decimals of the output token)

    Raises:
        StableSolverDidNotConverge: If strict and the cap was reached
    """
    if amount_in <= 0 or reserve_in <= 0 or reserve_out <= 0:
        return 0

    xy = stable_k(reserve_in, reserve_out, unit_in, unit_out)
    norm_in = normalize(reserve_in, unit_in)
    norm_out = normalize(reserve_out, unit_out)
    norm_amount = normalize(amount_in, unit_in)

    result = get_y(norm_amount + norm_in, xy, norm_out, max_iterations)
    if not result.converged:
        if strict:
            raise StableSolverDidNotConverge(
                f"Stable solver did not converge after {result.iterations} iterations"
            )
        logger.warning(
            "stable_solver_not_converged",
            iterations=result.iterations,
            estimate=result.y,
            reserve_in=reserve_in,
            reserve_out=reserve_out,
            amount_in=amount_in,
        )

    # Dust inputs can leave the solved reserve a unit above the current one
    out = S(norm_out).positive_diff(result.y)
    return denormalize(out.value, unit_out)


def amount_out(
    kind: CurveKind,
    amount_in: int,
    reserve_in: int,
    reserve_out: int,
    unit_in: int,
    unit_out: int,
    *,
    max_iterations: int = MAX_SOLVER_ITERATIONS,
    strict: bool = True,
) -> int:
    """Price an input (fee already removed) through the given curve."""
    if kind is CurveKind.STABLE:
        return stable_amount_out(
            amount_in,
            reserve_in,
            reserve_out,
            unit_in,
            unit_out,
            max_iterations=max_iterations,
            strict=strict,
        )
    return volatile_amount_out(amount_in, reserve_in, reserve_out)
