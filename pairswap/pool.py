"""Two-asset liquidity pool.

The pool follows a measure-then-account pattern: callers move tokens
into the pool first, then call an entry point that compares actual
balances with the accounted reserves to see what arrived.

- mint: deposit both assets, receive shares
- burn: send shares to the pool, receive both assets
- swap: receive outputs optimistically, pay inputs before returning
- skim / sync: reconcile balances and reserves
- claim_fees: collect accrued trading fees

Every mutating entry point runs inside a per-pool transaction: one at a
time, no re-entry, and all-or-nothing across every journaling ledger it
touches: the pool itself, its escrow, the pooled tokens and any other
pool a swap hook trades with.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import structlog

from pairswap import journal
from pairswap.clock import Clock, SystemClock
from pairswap.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from pairswap.constants import DEAD_ADDRESS, FEE_DENOMINATOR, SHARE_DECIMALS
from pairswap.errors import (
    InsufficientInputAmount,
    InsufficientK,
    InsufficientLiquidity,
    InsufficientLiquidityBurned,
    InsufficientLiquidityMinted,
    InsufficientOutputAmount,
    InvalidTo,
    IsPaused,
    KInvariantViolated,
    Reentrancy,
)
from pairswap.factory import FactoryView
from pairswap.fees.accrual import FeeAccrual, FeeCheckpoint
from pairswap.fees.escrow import FeeEscrow
from pairswap.math.curves import CurveKind, amount_out, compute_k
from pairswap.models.snapshot import (
    AllowanceModel,
    CheckpointModel,
    ObservationModel,
    PoolSnapshot,
)
from pairswap.models.types import normalize_address
from pairswap.oracle import Observation, PriceOracle
from pairswap.reserves import ReserveLedger
from pairswap.safe_int import S
from pairswap.storage import PoolStore
from pairswap.tokens import BalanceLedger, Token

logger = structlog.get_logger()


@runtime_checkable
class SwapCallee(Protocol):
    """Recipient that wants a callback between receiving outputs and paying inputs."""

    address: str

    def hook(self, initiator: str | None, amount0_out: int, amount1_out: int, data: bytes) -> None:
        ...


@dataclass(frozen=True)
class PoolMetadata:
    """Static description of a pool plus its current reserves."""

    decimals0: int
    decimals1: int
    reserve0: int
    reserve1: int
    stable: bool
    token0: str
    token1: str


def _require_amount(name: str, amount: int) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise TypeError(f"{name} must be an int, got {type(amount).__name__}")
    if amount < 0:
        raise ValueError(f"{name} cannot be negative: {amount}")


class Pool:
    """A two-asset AMM pool with its share ledger, oracle and fee accounting.

    Attributes:
        address: Account that holds the pooled tokens
        token0: Pooled token with the lower address
        token1: Pooled token with the higher address
        stable: True for the stable curve, False for constant product
        fee: Swap fee tier in basis points
        decimals0: Unit scale of token0 (10**decimals)
        decimals1: Unit scale of token1 (10**decimals)
        escrow: Fee escrow owned by this pool
    """

    def __init__(
        self,
        address: str,
        token_a: Token,
        token_b: Token,
        *,
        stable: bool,
        fee: int,
        factory: FactoryView,
        escrow_address: str,
        clock: Clock | None = None,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
        store: PoolStore | None = None,
    ) -> None:
        if not 0 <= fee < FEE_DENOMINATOR:
            raise ValueError(f"fee must be in [0, {FEE_DENOMINATOR}) bps, got {fee}")

        address_a = normalize_address(token_a.address, validate=True)
        address_b = normalize_address(token_b.address, validate=True)
        if address_a == address_b:
            raise ValueError(f"Pool tokens must differ, got {address_a} twice")
        # Canonical order: lower address first
        if bytes.fromhex(address_a[2:]) > bytes.fromhex(address_b[2:]):
            token_a, token_b = token_b, token_a

        self.address = normalize_address(address, validate=True)
        self.token0 = token_a
        self.token1 = token_b
        self.stable = stable
        self.curve = CurveKind.STABLE if stable else CurveKind.VOLATILE
        self.fee = fee
        self.decimals0 = 10**token_a.decimals
        self.decimals1 = 10**token_b.decimals
        self.factory = factory
        self.config = config
        self.clock: Clock = clock if clock is not None else SystemClock()
        self.store = store

        prefix = "StableV2" if stable else "VolatileV2"
        self.name = f"{prefix} AMM - {token_a.symbol}/{token_b.symbol}"
        self.symbol = f"{'s' if stable else 'v'}AMM-{token_a.symbol}/{token_b.symbol}"
        self.decimals = SHARE_DECIMALS

        self._mutex = threading.RLock()
        self._entered = False

        now = self.clock()
        self._shares = BalanceLedger()
        self._reserves = ReserveLedger(block_timestamp_last=now)
        self._oracle = PriceOracle.start(now, config.period_size)
        self._fees = FeeAccrual()
        self.escrow = FeeEscrow(
            escrow_address,
            self.address,
            token_a,
            token_b,
            factory,
            lock=self._mutex,
            persist=self._persist,
        )

        if self.store is not None:
            self.store.save(self.snapshot())

        logger.info(
            "pool_created",
            pool=self.address,
            token0=self.token0.address,
            token1=self.token1.address,
            stable=stable,
            fee=fee,
        )

    def __repr__(self) -> str:
        return f"Pool(address={self.address}, symbol={self.symbol}, fee={self.fee}bps)"

    # --- Transaction boundary ---

    @contextmanager
    def _transaction(self, operation: str, *, reentrant: bool = False) -> Iterator[None]:
        """Serialize, guard and make atomic one pool operation.

        The pool lock stays held until the outermost atomic block on this
        thread ends. When another pool's swap hook calls in here, that is
        the end of the other pool's operation, so a failure there can still
        undo this one without another thread having seen it.

        Args:
            operation: Name used in the re-entry error
            reentrant: Allow this operation from inside another one (share
                ledger operations and fee claims called from a swap hook)

        Raises:
            Reentrancy: If a non-reentrant operation is entered while another runs
        """
        with journal.atomic() as tx:
            tx.acquire(self._mutex)
            nested = self._entered
            if nested and not reentrant:
                raise Reentrancy(f"{operation} called while another pool operation is in flight")
            self._entered = True
            try:
                yield
                if not nested:
                    self._save()
            finally:
                self._entered = nested

    def _save(self) -> None:
        if self.store is None:
            return
        self._write_snapshot()
        # An enclosing block that rolls back must also roll back what was stored
        tx = journal.current()
        if tx is not None:
            tx.after_rollback(self._write_snapshot)

    def _write_snapshot(self) -> None:
        if self.store is not None:
            self.store.save(self.snapshot())

    def _persist(self) -> None:
        # Escrow-initiated changes; an enclosing pool operation saves on its own
        if not self._entered:
            self._save()

    # --- Internal accounting ---

    def _balances(self) -> tuple[int, int]:
        return self.token0.balance_of(self.address), self.token1.balance_of(self.address)

    def _update(self, balance0: int, balance1: int) -> None:
        """Accumulate the oracle trail and adopt new reserves."""
        now = self.clock()
        self._reserves.update(balance0, balance1, now)
        recorded = self._oracle.record(
            now,
            self._reserves.reserve0_cumulative_last,
            self._reserves.reserve1_cumulative_last,
        )
        if recorded:
            logger.debug("observation_recorded", pool=self.address, timestamp=now)
        logger.debug("sync", pool=self.address, reserve0=balance0, reserve1=balance1)

    def _mint_shares(self, to: str, amount: int) -> None:
        self._fees.update_for(to, self._shares.balance_of(to))
        self._shares.mint(to, amount)

    def _burn_shares(self, holder: str, amount: int) -> None:
        self._fees.update_for(holder, self._shares.balance_of(holder))
        self._shares.burn(holder, amount)

    def _transfer_shares(self, sender: str, to: str, amount: int) -> None:
        self._fees.update_for(sender, self._shares.balance_of(sender))
        self._fees.update_for(to, self._shares.balance_of(to))
        self._shares.transfer(sender, to, amount)

    def _collect_fees(self, fee0: int, fee1: int) -> None:
        """Move swap fees to the escrow and credit them to protocol and LPs."""
        protocol_fee_bps = self.factory.protocol_fee_bps
        protocol0 = (S(fee0) * protocol_fee_bps // FEE_DENOMINATOR).value
        protocol1 = (S(fee1) * protocol_fee_bps // FEE_DENOMINATOR).value

        if fee0 > 0:
            self.token0.transfer(self.address, self.escrow.address, fee0)
        if fee1 > 0:
            self.token1.transfer(self.address, self.escrow.address, fee1)
        if protocol0 > 0 or protocol1 > 0:
            self.escrow.notify_protocol_fee(self.address, protocol0, protocol1)

        delta0, delta1 = self._fees.distribute(
            fee0 - protocol0, fee1 - protocol1, self._shares.total_supply
        )
        logger.debug(
            "fees_collected",
            pool=self.address,
            fee0=fee0,
            fee1=fee1,
            protocol0=protocol0,
            protocol1=protocol1,
            index_delta0=delta0,
            index_delta1=delta1,
        )

    def _k(self, x: int, y: int) -> int:
        return compute_k(self.curve, x, y, self.decimals0, self.decimals1)

    def _is_token0(self, token_in: str) -> bool:
        token_in_norm = normalize_address(token_in)
        if token_in_norm == normalize_address(self.token0.address):
            return True
        if token_in_norm == normalize_address(self.token1.address):
            return False
        raise ValueError(f"Token {token_in} not in pool")

    def _price(self, amount_in: int, token_in: str, reserve0: int, reserve1: int) -> int:
        """Price an input (fee already removed) against the given reserves."""
        if self._is_token0(token_in):
            reserve_in, reserve_out = reserve0, reserve1
            unit_in, unit_out = self.decimals0, self.decimals1
        else:
            reserve_in, reserve_out = reserve1, reserve0
            unit_in, unit_out = self.decimals1, self.decimals0
        return amount_out(
            self.curve,
            amount_in,
            reserve_in,
            reserve_out,
            unit_in,
            unit_out,
            max_iterations=self.config.max_solver_iterations,
            strict=self.config.strict_convergence,
        )

    # --- Liquidity ---

    def mint(self, to: str) -> int:
        """Mint shares for the tokens transferred in since the last update.

        The first deposit mints sqrt(amount0 * amount1) shares, of which
        minimum_liquidity are locked forever with DEAD_ADDRESS. Later deposits
        mint the smaller of the two proportional claims, so an excess of one
        token is donated to existing holders.

        Args:
            to: Recipient of the shares

        Returns:
            Shares minted to `to`

        Raises:
            InsufficientLiquidityMinted: If no shares would be minted
            InsufficientK: If a first stable deposit is below the curve floor
        """
        to = normalize_address(to, validate=True)
        with self._transaction("mint"):
            reserve0, reserve1 = self._reserves.reserve0, self._reserves.reserve1
            balance0, balance1 = self._balances()
            amount0 = (S(balance0) - S(reserve0)).value
            amount1 = (S(balance1) - S(reserve1)).value
            total_supply = self._shares.total_supply

            if total_supply == 0:
                minimum_liquidity = self.config.minimum_liquidity
                root = (S(amount0) * S(amount1)).sqrt()
                if root <= minimum_liquidity:
                    raise InsufficientLiquidityMinted(
                        f"Initial deposit too small: sqrt={root.value}, "
                        f"minimum={minimum_liquidity}"
                    )
                liquidity = (root - S(minimum_liquidity)).value
                self._mint_shares(DEAD_ADDRESS, minimum_liquidity)
                if self.stable:
                    k = self._k(amount0, amount1)
                    if k < self.config.minimum_k:
                        raise InsufficientK(
                            f"Initial stable deposit K={k} below {self.config.minimum_k}"
                        )
            else:
                liquidity = (
                    (S(amount0) * S(total_supply) // S(reserve0))
                    .min(S(amount1) * S(total_supply) // S(reserve1))
                    .value
                )

            if liquidity == 0:
                raise InsufficientLiquidityMinted("Deposit mints zero shares")

            self._mint_shares(to, liquidity)
            self._update(balance0, balance1)

        logger.info(
            "mint",
            pool=self.address,
            to=to,
            amount0=amount0,
            amount1=amount1,
            liquidity=liquidity,
        )
        return liquidity

    def burn(self, to: str) -> tuple[int, int]:
        """Burn the shares held by the pool and pay out both tokens.

        Holders transfer shares to the pool first. Payouts are a pro-rata
        share of the pool's actual balances, so any unsynced surplus goes to
        the burner in proportion.

        Args:
            to: Recipient of the tokens

        Returns:
            Tuple of (amount0, amount1) paid out

        Raises:
            InsufficientLiquidityBurned: If either payout is zero
        """
        to = normalize_address(to, validate=True)
        with self._transaction("burn"):
            balance0, balance1 = self._balances()
            liquidity = self._shares.balance_of(self.address)
            total_supply = self._shares.total_supply
            if total_supply == 0:
                raise InsufficientLiquidityBurned("Pool has no shares outstanding")

            amount0 = (S(liquidity) * S(balance0) // S(total_supply)).value
            amount1 = (S(liquidity) * S(balance1) // S(total_supply)).value
            if amount0 == 0 or amount1 == 0:
                raise InsufficientLiquidityBurned(
                    f"Burn of {liquidity} shares redeems {amount0}/{amount1}"
                )

            self._burn_shares(self.address, liquidity)
            self.token0.transfer(self.address, to, amount0)
            self.token1.transfer(self.address, to, amount1)

            balance0, balance1 = self._balances()
            self._update(balance0, balance1)

        logger.info(
            "burn",
            pool=self.address,
            to=to,
            liquidity=liquidity,
            amount0=amount0,
            amount1=amount1,
        )
        return amount0, amount1

    # --- Trading ---

    def swap(
        self,
        amount0_out: int,
        amount1_out: int,
        to: str,
        data: bytes = b"",
        *,
        caller: str | None = None,
        callee: SwapCallee | None = None,
    ) -> tuple[int, int]:
        """Send outputs, let the recipient react, then check it paid enough.

        Outputs are transferred before any payment is checked, so a callee
        can use them (flash swap) as long as the pool ends up with enough
        input for the curve, net of fees, to not decrease.

        Args:
            amount0_out: token0 to send
            amount1_out: token1 to send
            to: Recipient of the outputs
            data: Opaque bytes passed to the callee's hook
            caller: Initiator reported to the hook
            callee: Recipient object whose hook runs after outputs are sent;
                its address must equal `to`

        Returns:
            Tuple of (amount0_in, amount1_in) the pool received

        Raises:
            IsPaused: If the factory paused swaps
            InsufficientOutputAmount: If both outputs are zero
            InsufficientLiquidity: If an output is not below its reserve
            InvalidTo: If `to` is a pooled token or does not match the callee
            InsufficientInputAmount: If nothing was paid in
            KInvariantViolated: If the curve value decreased
        """
        _require_amount("amount0_out", amount0_out)
        _require_amount("amount1_out", amount1_out)
        to = normalize_address(to, validate=True)

        with self._transaction("swap"):
            if self.factory.is_paused:
                raise IsPaused("Swaps are paused")
            if amount0_out == 0 and amount1_out == 0:
                raise InsufficientOutputAmount("Swap requests no output")

            reserve0, reserve1 = self._reserves.reserve0, self._reserves.reserve1
            if amount0_out >= reserve0 or amount1_out >= reserve1:
                raise InsufficientLiquidity(
                    f"Requested {amount0_out}/{amount1_out} from reserves {reserve0}/{reserve1}"
                )

            if to in (
                normalize_address(self.token0.address),
                normalize_address(self.token1.address),
            ):
                raise InvalidTo(f"Recipient {to} is a pooled token")
            if callee is not None and normalize_address(callee.address) != to:
                raise InvalidTo(f"Callee {callee.address} is not the recipient {to}")

            if amount0_out > 0:
                self.token0.transfer(self.address, to, amount0_out)
            if amount1_out > 0:
                self.token1.transfer(self.address, to, amount1_out)
            if callee is not None:
                callee.hook(caller, amount0_out, amount1_out, data)

            balance0, balance1 = self._balances()
            amount0_in = S(balance0).positive_diff(S(reserve0) - S(amount0_out)).value
            amount1_in = S(balance1).positive_diff(S(reserve1) - S(amount1_out)).value
            if amount0_in == 0 and amount1_in == 0:
                raise InsufficientInputAmount("Swap received no input")

            fee0 = (S(amount0_in) * self.fee // FEE_DENOMINATOR).value
            fee1 = (S(amount1_in) * self.fee // FEE_DENOMINATOR).value
            self._collect_fees(fee0, fee1)

            balance0, balance1 = self._balances()
            k_after = self._k(balance0, balance1)
            k_before = self._k(reserve0, reserve1)
            if k_after < k_before:
                raise KInvariantViolated(f"K decreased from {k_before} to {k_after}")

            self._update(balance0, balance1)

        logger.info(
            "swap",
            pool=self.address,
            caller=caller,
            to=to,
            amount0_in=amount0_in,
            amount1_in=amount1_in,
            amount0_out=amount0_out,
            amount1_out=amount1_out,
        )
        return amount0_in, amount1_in

    def skim(self, to: str) -> tuple[int, int]:
        """Send the excess of balances over reserves to `to`.

        Returns:
            Tuple of (amount0, amount1) sent

        Raises:
            Underflow: If a balance is below its reserve
        """
        to = normalize_address(to, validate=True)
        with self._transaction("skim"):
            balance0, balance1 = self._balances()
            excess0 = (S(balance0) - S(self._reserves.reserve0)).value
            excess1 = (S(balance1) - S(self._reserves.reserve1)).value
            if excess0 > 0:
                self.token0.transfer(self.address, to, excess0)
            if excess1 > 0:
                self.token1.transfer(self.address, to, excess1)

        logger.info("skim", pool=self.address, to=to, amount0=excess0, amount1=excess1)
        return excess0, excess1

    def sync(self) -> None:
        """Adopt the actual balances as reserves."""
        with self._transaction("sync"):
            balance0, balance1 = self._balances()
            self._update(balance0, balance1)

    # --- Fees ---

    def claim_fees(self, caller: str) -> tuple[int, int]:
        """Pay the caller every fee their shares have earned.

        Returns:
            Tuple of (claimed0, claimed1)
        """
        caller = normalize_address(caller, validate=True)
        with self._transaction("claim_fees", reentrant=True):
            self._fees.update_for(caller, self._shares.balance_of(caller))
            claimed0, claimed1 = self._fees.take_claimable(caller)
            if claimed0 > 0 or claimed1 > 0:
                self.escrow.claim_fees_for(self.address, caller, claimed0, claimed1)

        if claimed0 > 0 or claimed1 > 0:
            logger.info(
                "claim_fees",
                pool=self.address,
                holder=caller,
                amount0=claimed0,
                amount1=claimed1,
            )
        return claimed0, claimed1

    def claimable(self, holder: str) -> tuple[int, int]:
        """Fees credited to holder at their last checkpoint."""
        with self._mutex:
            cp = self._fees.checkpoint_of(holder)
            return cp.claimable0, cp.claimable1

    def pending_fees(self, holder: str) -> tuple[int, int]:
        """Fees holder would receive if they claimed now."""
        with self._mutex:
            return self._fees.pending(holder, self._shares.balance_of(holder))

    def supply_index(self, holder: str) -> tuple[int, int]:
        with self._mutex:
            cp = self._fees.checkpoint_of(holder)
            return cp.supply_index0, cp.supply_index1

    @property
    def index0(self) -> int:
        with self._mutex:
            return self._fees.index0

    @property
    def index1(self) -> int:
        with self._mutex:
            return self._fees.index1

    # --- Share token ---

    @property
    def total_supply(self) -> int:
        with self._mutex:
            return self._shares.total_supply

    def balance_of(self, account: str) -> int:
        with self._mutex:
            return self._shares.balance_of(account)

    def allowance(self, owner: str, spender: str) -> int:
        with self._mutex:
            return self._shares.allowance(owner, spender)

    def approve(self, owner: str, spender: str, amount: int) -> None:
        owner = normalize_address(owner, validate=True)
        spender = normalize_address(spender, validate=True)
        with self._transaction("approve", reentrant=True):
            self._shares.approve(owner, spender, amount)

    def transfer(self, sender: str, to: str, amount: int) -> None:
        """Move shares, settling both parties' fees first."""
        sender = normalize_address(sender, validate=True)
        to = normalize_address(to, validate=True)
        with self._transaction("transfer", reentrant=True):
            self._transfer_shares(sender, to, amount)

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> None:
        owner = normalize_address(owner, validate=True)
        to = normalize_address(to, validate=True)
        with self._transaction("transfer_from", reentrant=True):
            self._shares.spend_allowance(owner, spender, amount)
            self._transfer_shares(owner, to, amount)

    # --- Views ---

    @property
    def reserve0(self) -> int:
        with self._mutex:
            return self._reserves.reserve0

    @property
    def reserve1(self) -> int:
        with self._mutex:
            return self._reserves.reserve1

    @property
    def block_timestamp_last(self) -> int:
        with self._mutex:
            return self._reserves.block_timestamp_last

    @property
    def reserve0_cumulative_last(self) -> int:
        with self._mutex:
            return self._reserves.reserve0_cumulative_last

    @property
    def reserve1_cumulative_last(self) -> int:
        with self._mutex:
            return self._reserves.reserve1_cumulative_last

    def get_reserves(self) -> tuple[int, int, int]:
        """Return (reserve0, reserve1, block_timestamp_last)."""
        with self._mutex:
            return (
                self._reserves.reserve0,
                self._reserves.reserve1,
                self._reserves.block_timestamp_last,
            )

    def tokens(self) -> tuple[str, str]:
        return self.token0.address, self.token1.address

    def metadata(self) -> PoolMetadata:
        with self._mutex:
            return PoolMetadata(
                decimals0=self.decimals0,
                decimals1=self.decimals1,
                reserve0=self._reserves.reserve0,
                reserve1=self._reserves.reserve1,
                stable=self.stable,
                token0=self.token0.address,
                token1=self.token1.address,
            )

    def get_k(self) -> int:
        """Curve value of the current reserves."""
        with self._mutex:
            return self._k(self._reserves.reserve0, self._reserves.reserve1)

    def get_amount_out(self, amount_in: int, token_in: str) -> int:
        """Output a swap of amount_in would receive at current reserves, after the fee."""
        _require_amount("amount_in", amount_in)
        with self._mutex:
            amount_in_after_fee = (S(amount_in) - S(amount_in) * self.fee // FEE_DENOMINATOR).value
            return self._price(
                amount_in_after_fee, token_in, self._reserves.reserve0, self._reserves.reserve1
            )

    # --- Oracle ---

    @property
    def observations(self) -> tuple[Observation, ...]:
        with self._mutex:
            return self._oracle.observations

    def observation_length(self) -> int:
        with self._mutex:
            return len(self._oracle)

    def last_observation(self) -> Observation:
        with self._mutex:
            return self._oracle.last_observation()

    def current_cumulative_prices(self) -> tuple[int, int, int]:
        """Cumulative reserves extrapolated to now.

        Returns:
            Tuple of (reserve0_cumulative, reserve1_cumulative, timestamp)
        """
        with self._mutex:
            return self._reserves.current_cumulative_prices(self.clock())

    def current(self, token_in: str, amount_in: int) -> int:
        """Price of amount_in over the interval since the last observation."""
        with self._mutex:
            reserve0_cumulative, reserve1_cumulative, now = (
                self._reserves.current_cumulative_prices(self.clock())
            )
            return self._oracle.current(
                now,
                reserve0_cumulative,
                reserve1_cumulative,
                lambda r0, r1: self._price(amount_in, token_in, r0, r1),
            )

    def quote(self, token_in: str, amount_in: int, granularity: int) -> int:
        """Mean price of amount_in over the last `granularity` observation intervals."""
        with self._mutex:
            return self._oracle.quote(
                granularity, lambda r0, r1: self._price(amount_in, token_in, r0, r1)
            )

    def prices(self, token_in: str, amount_in: int, points: int) -> list[int]:
        """Price of amount_in over each of the last `points` observation intervals."""
        return self.sample(token_in, amount_in, points, 1)

    def sample(self, token_in: str, amount_in: int, points: int, window: int) -> list[int]:
        """Price of amount_in over the last `points` intervals of `window` observations."""
        self._is_token0(token_in)
        with self._mutex:
            return self._oracle.sample(
                points, window, lambda r0, r1: self._price(amount_in, token_in, r0, r1)
            )

    # --- Persistence ---

    def snapshot(self) -> PoolSnapshot:
        """Capture every mutable field for durable storage."""
        with self._mutex:
            reserves = self._reserves
            return PoolSnapshot(
                address=self.address,
                token0=normalize_address(self.token0.address),
                token1=normalize_address(self.token1.address),
                stable=self.stable,
                fee=self.fee,
                escrow=self.escrow.address,
                reserve0=reserves.reserve0,
                reserve1=reserves.reserve1,
                block_timestamp_last=reserves.block_timestamp_last,
                reserve0_cumulative_last=reserves.reserve0_cumulative_last,
                reserve1_cumulative_last=reserves.reserve1_cumulative_last,
                observations=[
                    ObservationModel(
                        timestamp=o.timestamp,
                        reserve0_cumulative=o.reserve0_cumulative,
                        reserve1_cumulative=o.reserve1_cumulative,
                    )
                    for o in self._oracle.observations
                ],
                index0=self._fees.index0,
                index1=self._fees.index1,
                checkpoints={
                    holder: CheckpointModel(
                        supply_index0=cp.supply_index0,
                        supply_index1=cp.supply_index1,
                        claimable0=cp.claimable0,
                        claimable1=cp.claimable1,
                    )
                    for holder, cp in self._fees.checkpoints.items()
                },
                balances=self._shares.holders(),
                allowances=[
                    AllowanceModel(owner=owner, spender=spender, amount=amount)
                    for (owner, spender), amount in self._shares.allowances().items()
                    if amount > 0
                ],
                protocol_fees0=self.escrow.protocol_fees0,
                protocol_fees1=self.escrow.protocol_fees1,
            )

    def _apply_snapshot(self, snapshot: PoolSnapshot) -> None:
        self._reserves = ReserveLedger(
            reserve0=snapshot.reserve0,
            reserve1=snapshot.reserve1,
            block_timestamp_last=snapshot.block_timestamp_last,
            reserve0_cumulative_last=snapshot.reserve0_cumulative_last,
            reserve1_cumulative_last=snapshot.reserve1_cumulative_last,
        )
        self._oracle = PriceOracle(
            [
                Observation(o.timestamp, o.reserve0_cumulative, o.reserve1_cumulative)
                for o in snapshot.observations
            ],
            self.config.period_size,
        )
        self._fees = FeeAccrual(
            snapshot.index0,
            snapshot.index1,
            {
                normalize_address(holder): FeeCheckpoint(
                    supply_index0=cp.supply_index0,
                    supply_index1=cp.supply_index1,
                    claimable0=cp.claimable0,
                    claimable1=cp.claimable1,
                )
                for holder, cp in snapshot.checkpoints.items()
            },
        )
        self._shares.load(
            snapshot.balances,
            {(a.owner, a.spender): a.amount for a in snapshot.allowances},
        )
        self.escrow.protocol_fees0 = snapshot.protocol_fees0
        self.escrow.protocol_fees1 = snapshot.protocol_fees1

    @classmethod
    def from_snapshot(
        cls,
        snapshot: PoolSnapshot,
        token_a: Token,
        token_b: Token,
        *,
        factory: FactoryView,
        clock: Clock | None = None,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
        store: PoolStore | None = None,
    ) -> Pool:
        """Rebuild a pool from a persisted snapshot.

        Raises:
            ValueError: If the tokens do not match the snapshot
        """
        pool = cls(
            snapshot.address,
            token_a,
            token_b,
            stable=snapshot.stable,
            fee=snapshot.fee,
            factory=factory,
            escrow_address=snapshot.escrow,
            clock=clock,
            config=config,
        )
        expected = (normalize_address(snapshot.token0), normalize_address(snapshot.token1))
        actual = (normalize_address(pool.token0.address), normalize_address(pool.token1.address))
        if expected != actual:
            raise ValueError(f"Snapshot tokens {expected} do not match {actual}")
        pool._apply_snapshot(snapshot)
        pool.store = store
        logger.info("pool_restored", pool=pool.address, observations=len(pool._oracle))
        return pool
