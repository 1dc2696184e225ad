"""Response models for the read API."""

from pydantic import BaseModel, Field

from pairswap.models.types import Address, Uint


class PoolSummary(BaseModel):
    """Identity and reserves of a pool."""

    address: Address
    name: str
    symbol: str
    token0: Address
    token1: Address
    stable: bool
    fee: int = Field(description="Swap fee in basis points")
    reserve0: Uint
    reserve1: Uint
    block_timestamp_last: Uint


class PoolDetail(PoolSummary):
    """Full read-side state of a pool."""

    decimals0: Uint
    decimals1: Uint
    total_supply: Uint
    k: Uint
    index0: Uint
    index1: Uint
    reserve0_cumulative_last: Uint
    reserve1_cumulative_last: Uint
    observation_length: int
    escrow: Address
    protocol_fees0: Uint
    protocol_fees1: Uint


class AmountResponse(BaseModel):
    """A single priced amount."""

    token_in: Address
    amount_in: Uint
    amount_out: Uint


class PricesResponse(BaseModel):
    """Prices over consecutive observation intervals, oldest first."""

    token_in: Address
    amount_in: Uint
    prices: list[Uint]


class ObservationView(BaseModel):
    timestamp: Uint
    reserve0_cumulative: Uint
    reserve1_cumulative: Uint


class ObservationsResponse(BaseModel):
    """The recorded oracle trail."""

    observations: list[ObservationView]


class ClaimableResponse(BaseModel):
    """Fees a holder can claim now."""

    holder: Address
    shares: Uint
    claimable0: Uint
    claimable1: Uint
