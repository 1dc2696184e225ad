"""Pydantic models for persisted pool state.

A PoolSnapshot carries every mutable field of a pool. Amounts use the
Uint type, so JSON snapshots store them as decimal strings and big
values survive any JSON reader.
"""

from pydantic import BaseModel, ConfigDict, Field

from pairswap.models.types import Address, Uint

SNAPSHOT_VERSION = 1


class ObservationModel(BaseModel):
    """One oracle observation."""

    model_config = ConfigDict(frozen=True)

    timestamp: Uint
    reserve0_cumulative: Uint
    reserve1_cumulative: Uint


class CheckpointModel(BaseModel):
    """Fee checkpoint of one share holder."""

    supply_index0: Uint = 0
    supply_index1: Uint = 0
    claimable0: Uint = 0
    claimable1: Uint = 0


class AllowanceModel(BaseModel):
    """Share allowance granted by owner to spender."""

    owner: Address
    spender: Address
    amount: Uint


class PoolSnapshot(BaseModel):
    """Durable state of a pool, its share ledger and its escrow."""

    version: int = SNAPSHOT_VERSION

    # Immutable identity
    address: Address
    token0: Address
    token1: Address
    stable: bool
    fee: int = Field(ge=0, lt=10_000)
    escrow: Address

    # Reserve ledger
    reserve0: Uint = 0
    reserve1: Uint = 0
    block_timestamp_last: Uint = 0
    reserve0_cumulative_last: Uint = 0
    reserve1_cumulative_last: Uint = 0

    # Oracle
    observations: list[ObservationModel] = Field(min_length=1)

    # Fee accrual
    index0: Uint = 0
    index1: Uint = 0
    checkpoints: dict[str, CheckpointModel] = Field(default_factory=dict)

    # Share ledger
    balances: dict[str, Uint] = Field(default_factory=dict)
    allowances: list[AllowanceModel] = Field(default_factory=list)

    # Escrow
    protocol_fees0: Uint = 0
    protocol_fees1: Uint = 0
