"""Pydantic models and shared types."""

from pairswap.models.snapshot import (
    AllowanceModel,
    CheckpointModel,
    ObservationModel,
    PoolSnapshot,
)
from pairswap.models.types import Address, Uint, is_valid_address, normalize_address

__all__ = [
    "Address",
    "AllowanceModel",
    "CheckpointModel",
    "ObservationModel",
    "PoolSnapshot",
    "Uint",
    "is_valid_address",
    "normalize_address",
]
