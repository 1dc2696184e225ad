"""Read-only API endpoints over a pool registry."""

from collections.abc import Callable
from typing import TypeVar

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query

from pairswap.errors import PoolError
from pairswap.models.api import (
    AmountResponse,
    ClaimableResponse,
    ObservationsResponse,
    ObservationView,
    PoolDetail,
    PoolSummary,
    PricesResponse,
)
from pairswap.models.types import UINT256_MAX, normalize_address
from pairswap.pool import Pool
from pairswap.registry import PoolRegistry
from pairswap.safe_int import SafeIntError

logger = structlog.get_logger()

router = APIRouter()

T = TypeVar("T")

# Registry served when no override is installed
_default_registry = PoolRegistry()


def get_registry() -> PoolRegistry:
    """Dependency provider for the pool registry.

    Override this in tests or in a hosting process to serve real pools:
        app.dependency_overrides[get_registry] = lambda: registry

    Returns:
        The registry whose pools the API exposes.
    """
    return _default_registry


def _get_pool(registry: PoolRegistry, address: str) -> Pool:
    pool = registry.get(address)
    if pool is None:
        raise HTTPException(status_code=404, detail=f"Pool {address} not found")
    return pool


def _query(pool: Pool, query: str, fn: Callable[[], T]) -> T:
    """Run a pool read, mapping engine and arithmetic failures to 400."""
    try:
        return fn()
    except (PoolError, SafeIntError, ValueError) as e:
        logger.info("query_rejected", pool=pool.address, query=query, error=str(e))
        raise HTTPException(status_code=400, detail=str(e)) from e


def _summary_fields(pool: Pool) -> dict[str, object]:
    reserve0, reserve1, block_timestamp_last = pool.get_reserves()
    token0, token1 = pool.tokens()
    return {
        "address": pool.address,
        "name": pool.name,
        "symbol": pool.symbol,
        "token0": normalize_address(token0),
        "token1": normalize_address(token1),
        "stable": pool.stable,
        "fee": pool.fee,
        "reserve0": reserve0,
        "reserve1": reserve1,
        "block_timestamp_last": block_timestamp_last,
    }


@router.get("/pools")
def list_pools(registry: PoolRegistry = Depends(get_registry)) -> list[PoolSummary]:
    """List every registered pool."""
    return [PoolSummary(**_summary_fields(pool)) for pool in registry.all()]


@router.get("/pools/{address}")
def pool_detail(address: str, registry: PoolRegistry = Depends(get_registry)) -> PoolDetail:
    """Reserves, supply, fee indices and oracle state of one pool."""
    pool = _get_pool(registry, address)
    return PoolDetail(
        **_summary_fields(pool),
        decimals0=pool.decimals0,
        decimals1=pool.decimals1,
        total_supply=pool.total_supply,
        k=pool.get_k(),
        index0=pool.index0,
        index1=pool.index1,
        reserve0_cumulative_last=pool.reserve0_cumulative_last,
        reserve1_cumulative_last=pool.reserve1_cumulative_last,
        observation_length=pool.observation_length(),
        escrow=pool.escrow.address,
        protocol_fees0=pool.escrow.protocol_fees0,
        protocol_fees1=pool.escrow.protocol_fees1,
    )


@router.get("/pools/{address}/amount-out")
def amount_out(
    address: str,
    token_in: str,
    amount_in: int = Query(ge=0, le=UINT256_MAX),
    registry: PoolRegistry = Depends(get_registry),
) -> AmountResponse:
    """Output of a swap at current reserves, after the pool fee."""
    pool = _get_pool(registry, address)
    out = _query(pool, "amount_out", lambda: pool.get_amount_out(amount_in, token_in))
    return AmountResponse(
        token_in=normalize_address(token_in), amount_in=amount_in, amount_out=out
    )


@router.get("/pools/{address}/current")
def current(
    address: str,
    token_in: str,
    amount_in: int = Query(ge=0, le=UINT256_MAX),
    registry: PoolRegistry = Depends(get_registry),
) -> AmountResponse:
    """Price over the interval since the last observation."""
    pool = _get_pool(registry, address)
    out = _query(pool, "current", lambda: pool.current(token_in, amount_in))
    return AmountResponse(
        token_in=normalize_address(token_in), amount_in=amount_in, amount_out=out
    )


@router.get("/pools/{address}/quote")
def quote(
    address: str,
    token_in: str,
    amount_in: int = Query(ge=0, le=UINT256_MAX),
    granularity: int = Query(ge=1),
    registry: PoolRegistry = Depends(get_registry),
) -> AmountResponse:
    """Mean price over the last `granularity` observation intervals."""
    pool = _get_pool(registry, address)
    out = _query(pool, "quote", lambda: pool.quote(token_in, amount_in, granularity))
    return AmountResponse(
        token_in=normalize_address(token_in), amount_in=amount_in, amount_out=out
    )


@router.get("/pools/{address}/prices")
def prices(
    address: str,
    token_in: str,
    amount_in: int = Query(ge=0, le=UINT256_MAX),
    points: int = Query(ge=1),
    window: int = Query(default=1, ge=1),
    registry: PoolRegistry = Depends(get_registry),
) -> PricesResponse:
    """Prices over the last `points` intervals of `window` observations."""
    pool = _get_pool(registry, address)
    values = _query(
        pool, "prices", lambda: pool.sample(token_in, amount_in, points, window)
    )
    return PricesResponse(
        token_in=normalize_address(token_in), amount_in=amount_in, prices=values
    )


@router.get("/pools/{address}/observations")
def observations(
    address: str, registry: PoolRegistry = Depends(get_registry)
) -> ObservationsResponse:
    """Every recorded oracle observation, oldest first."""
    pool = _get_pool(registry, address)
    return ObservationsResponse(
        observations=[
            ObservationView(
                timestamp=o.timestamp,
                reserve0_cumulative=o.reserve0_cumulative,
                reserve1_cumulative=o.reserve1_cumulative,
            )
            for o in pool.observations
        ]
    )


@router.get("/pools/{address}/claimable/{holder}")
def claimable(
    address: str, holder: str, registry: PoolRegistry = Depends(get_registry)
) -> ClaimableResponse:
    """Fees the holder would receive by claiming now."""
    pool = _get_pool(registry, address)
    try:
        holder = normalize_address(holder, validate=True)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    claimable0, claimable1 = pool.pending_fees(holder)
    return ClaimableResponse(
        holder=holder,
        shares=pool.balance_of(holder),
        claimable0=claimable0,
        claimable1=claimable1,
    )
