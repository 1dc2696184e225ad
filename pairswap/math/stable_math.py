"""Stable curve math.

Core functions for the quartic stable invariant

    K(x, y) = x³y + xy³ = (x·y)·(x² + y²)

evaluated on reserves normalized to 18-decimal fixed point. The curve is
flat around x == y, so near-parity swaps see little slippage.

Solving K(x, y) = K₀ for y uses Newton's method. All arithmetic goes
through SafeInt so a bad step surfaces as an error, never as a negative
reserve.
"""

from __future__ import annotations

from dataclasses import dataclass

from pairswap.constants import MAX_SOLVER_ITERATIONS, ONE_18
from pairswap.safe_int import S, SafeInt


@dataclass(frozen=True)
class SolveResult:
    """Outcome of a Newton solve for the stable-curve counterpart reserve.

    Attributes:
        y: Best estimate of the reserve (normalized units)
        iterations: Number of Newton steps taken
        converged: False if the iteration cap was reached first
    """

    y: int
    iterations: int
    converged: bool


def normalize(amount: int, unit: int) -> int:
    """Scale a native token amount to 18 decimals.

    Args:
        amount: Amount in the token's native decimals
        unit: The token's unit scale (10**decimals)
    """
    return (S(amount) * S(ONE_18) // S(unit)).value


def denormalize(amount: int, unit: int) -> int:
    """Scale an 18-decimal amount back to native decimals, rounding down."""
    return (S(amount) * S(unit) // S(ONE_18)).value


def _f(x0: SafeInt, y: SafeInt) -> SafeInt:
    a = (x0 * y) // ONE_18
    b = (x0 * x0) // ONE_18 + (y * y) // ONE_18
    return (a * b) // ONE_18


def _d(x0: SafeInt, y: SafeInt) -> SafeInt:
    # dK/dy = 3·x·y² + x³
    return (S(3) * x0 * ((y * y) // ONE_18)) // ONE_18 + (((x0 * x0) // ONE_18) * x0) // ONE_18


def curve_value(x: int, y: int) -> int:
    """Evaluate the stable invariant on normalized reserves."""
    return _f(S(x), S(y)).value


def curve_derivative(x: int, y: int) -> int:
    """Partial derivative of the stable invariant in y, on normalized reserves."""
    return _d(S(x), S(y)).value


def stable_k(x: int, y: int, unit_x: int, unit_y: int) -> int:
    """Stable invariant of native-decimal reserves.

    Args:
        x: Reserve of the first token (native decimals)
        y: Reserve of the second token (native decimals)
        unit_x: Unit scale of the first token (10**decimals)
        unit_y: Unit scale of the second token (10**decimals)
    """
    return curve_value(normalize(x, unit_x), normalize(y, unit_y))


def get_y(x0: int, xy: int, y: int, max_iterations: int = MAX_SOLVER_ITERATIONS) -> SolveResult:
    """Solve K(x0, y) = xy for y using Newton's method.

    Algorithm:
        1. Start from the current reserve y
        2. Step y by |K(x0, y) - xy| / K'(x0, y) toward the target
        3. Stop when the step rounds to zero, nudging by one unit when
           rounding would otherwise leave y on the wrong side of the target
        4. Give up after max_iterations and report converged=False

    The returned y always satisfies K(x0, y) >= xy on convergence, so
    pricing off it never lets a swap decrease the invariant.

    Args:
        x0: New normalized reserve of the input token
        xy: Target invariant value
        y: Starting guess (normalized reserve of the output token)
        max_iterations: Iteration cap

    Returns:
        SolveResult with the estimate and convergence status

    Raises:
        DivisionByZero: If the derivative vanishes (x0 == 0)
        Underflow: If a step would drive y negative
    """
    sx0 = S(x0)
    target = S(xy)
    sy = S(y)

    for i in range(max_iterations):
        k = _f(sx0, sy)
        if k < target:
            dy = ((target - k) * ONE_18) // _d(sx0, sy)
            if dy == 0:
                if k == target:
                    return SolveResult(y=sy.value, iterations=i + 1, converged=True)
                if _f(sx0, sy + 1) > target:
                    # y + 1 is the closest value on the safe side
                    return SolveResult(y=sy.value + 1, iterations=i + 1, converged=True)
                dy = S(1)
            sy = sy + dy
        else:
            dy = ((k - target) * ONE_18) // _d(sx0, sy)
            if dy == 0:
                if k == target or _f(sx0, sy - 1) < target:
                    return SolveResult(y=sy.value, iterations=i + 1, converged=True)
                dy = S(1)
            sy = sy - dy

    return SolveResult(y=sy.value, iterations=max_iterations, converged=False)
