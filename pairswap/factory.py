"""Factory collaborator interface.

Pool deployment and fee governance live outside the engine. A pool only
reads three values from its factory, at the time it needs them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from pairswap.constants import FEE_DENOMINATOR
from pairswap.models.types import normalize_address


@runtime_checkable
class FactoryView(Protocol):
    """Values a pool trusts from its factory."""

    @property
    def protocol_fee_bps(self) -> int:
        """Share of each swap fee kept by the protocol, in basis points."""
        ...

    @property
    def fee_handler(self) -> str:
        """Account allowed to withdraw protocol fees from escrow."""
        ...

    @property
    def is_paused(self) -> bool:
        """True while swaps are halted."""
        ...


@dataclass
class StaticFactory:
    """FactoryView backed by plain attributes.

    Mutable so an operator (or a test) can rotate the handler, change the
    protocol cut or pause swaps on a live pool.
    """

    fee_handler: str
    protocol_fee_bps: int = 0
    is_paused: bool = False

    def __post_init__(self) -> None:
        self.fee_handler = normalize_address(self.fee_handler, validate=True)
        if not 0 <= self.protocol_fee_bps <= FEE_DENOMINATOR:
            raise ValueError(
                f"protocol_fee_bps must be in [0, {FEE_DENOMINATOR}], got {self.protocol_fee_bps}"
            )
