"""Pool engine error classes.

Every failed operation raises one of these and leaves the pool (and the
pooled token ledgers that support rollback) exactly as it found them.
"""


class PoolError(Exception):
    """Base error for pool operations."""

    pass


class InsufficientLiquidity(PoolError):
    """Requested swap output is greater than or equal to the reserve."""

    pass


class InsufficientLiquidityMinted(PoolError):
    """Deposit would mint zero shares."""

    pass


class InsufficientLiquidityBurned(PoolError):
    """Burn would redeem zero of either asset."""

    pass


class InsufficientInputAmount(PoolError):
    """Swap received no payment in either asset."""

    pass


class InsufficientOutputAmount(PoolError):
    """Swap requested no output."""

    pass


class InsufficientK(PoolError):
    """First stable-pool deposit is below the minimum curve value."""

    pass


class InvalidTo(PoolError):
    """Swap recipient is one of the pooled token ledgers, or does not match the callee."""

    pass


class KInvariantViolated(PoolError):
    """Curve value after the swap (net of fees) is below the value before it."""

    pass


class Forbidden(PoolError):
    """Caller is not allowed to use this entry point."""

    pass


class Reentrancy(PoolError):
    """A mutating entry point was called while another one is in flight."""

    pass


class IsPaused(PoolError):
    """Swaps are paused by the factory."""

    pass


class InsufficientObservations(PoolError):
    """Oracle does not hold enough observations for the requested window."""

    pass


class StableSolverDidNotConverge(PoolError):
    """Newton iteration for the stable-curve reserve hit its iteration cap."""

    pass


class InsufficientBalance(PoolError):
    """Ledger transfer or burn exceeds the holder's balance."""

    pass


class InsufficientAllowance(PoolError):
    """Delegated transfer exceeds the approved allowance."""

    pass
