"""Fee accrual and custody."""

from pairswap.fees.accrual import FeeAccrual, FeeCheckpoint
from pairswap.fees.escrow import FeeEscrow

__all__ = ["FeeAccrual", "FeeCheckpoint", "FeeEscrow"]
