"""Fungible balance ledgers.

The pool consumes pooled assets through the Token protocol and keeps its
own shares in a BalanceLedger. InMemoryToken is the reference asset
ledger: exact-amount, non-rebasing, no fee on transfer. Every change it
makes inside an atomic block is journaled as an inverse movement, so a
failed pool operation undoes exactly its own transfers and nothing else.
"""

from __future__ import annotations

import threading
from typing import Protocol, runtime_checkable

from pairswap import journal
from pairswap.errors import InsufficientAllowance, InsufficientBalance
from pairswap.models.types import normalize_address


@runtime_checkable
class Token(Protocol):
    """Interface the pool needs from a pooled asset."""

    address: str
    symbol: str
    decimals: int

    def balance_of(self, account: str) -> int: ...

    def transfer(self, sender: str, to: str, amount: int) -> None: ...

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> None: ...


class BalanceLedger:
    """Balances, allowances and total supply of one fungible unit.

    Accounts are normalized to lowercase. Every method validates amounts
    and raises instead of letting a balance go negative. Mutations are
    serialized by an internal lock, so ledgers shared by several pools
    stay consistent across threads.
    """

    def __init__(self) -> None:
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}
        self._total_supply = 0
        self._lock = threading.Lock()

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, account: str) -> int:
        return self._balances.get(normalize_address(account), 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((normalize_address(owner), normalize_address(spender)), 0)

    def holders(self) -> dict[str, int]:
        """Non-zero balances by account."""
        return {a: b for a, b in self._balances.items() if b > 0}

    def allowances(self) -> dict[tuple[str, str], int]:
        """All allowances by (owner, spender)."""
        return dict(self._allowances)

    def approve(self, owner: str, spender: str, amount: int) -> None:
        _check_amount(amount)
        key = (normalize_address(owner), normalize_address(spender))
        with self._lock:
            journal.record(self._restore_allowance, key, self._allowances.get(key))
            self._allowances[key] = amount

    def spend_allowance(self, owner: str, spender: str, amount: int) -> None:
        """Consume allowance for a delegated transfer.

        Raises:
            InsufficientAllowance: If the allowance is smaller than amount
        """
        _check_amount(amount)
        if normalize_address(owner) == normalize_address(spender):
            return
        current = self.allowance(owner, spender)
        if current < amount:
            raise InsufficientAllowance(
                f"Allowance {current} of {spender} for {owner} is below {amount}"
            )
        self.approve(owner, spender, current - amount)

    def transfer(self, sender: str, to: str, amount: int) -> None:
        """Move amount from sender to to.

        Raises:
            InsufficientBalance: If sender holds less than amount
        """
        _check_amount(amount)
        sender = normalize_address(sender)
        to = normalize_address(to)
        with self._lock:
            balance = self._balances.get(sender, 0)
            if balance < amount:
                raise InsufficientBalance(f"Balance {balance} of {sender} is below {amount}")
            self._move(sender, to, amount)
            journal.record(self._undo_move, sender, to, amount)

    def mint(self, to: str, amount: int) -> None:
        _check_amount(amount)
        to = normalize_address(to)
        with self._lock:
            self._adjust_supply(to, amount)
            journal.record(self._undo_adjust_supply, to, amount)

    def burn(self, holder: str, amount: int) -> None:
        """Destroy amount from holder.

        Raises:
            InsufficientBalance: If holder holds less than amount
        """
        _check_amount(amount)
        holder = normalize_address(holder)
        with self._lock:
            balance = self._balances.get(holder, 0)
            if balance < amount:
                raise InsufficientBalance(f"Balance {balance} of {holder} is below {amount}")
            self._adjust_supply(holder, -amount)
            journal.record(self._undo_adjust_supply, holder, -amount)

    def load(
        self,
        balances: dict[str, int],
        allowances: dict[tuple[str, str], int],
    ) -> None:
        """Replace ledger contents, deriving total supply from balances."""
        with self._lock:
            self._balances = {normalize_address(a): b for a, b in balances.items()}
            self._allowances = {
                (normalize_address(o), normalize_address(s)): v for (o, s), v in allowances.items()
            }
            self._total_supply = sum(self._balances.values())

    # Undo entries reverse a movement by its amount, so changes other
    # threads made to the same accounts in the meantime are kept.

    def _move(self, sender: str, to: str, amount: int) -> None:
        self._balances[sender] = self._balances.get(sender, 0) - amount
        self._balances[to] = self._balances.get(to, 0) + amount

    def _undo_move(self, sender: str, to: str, amount: int) -> None:
        with self._lock:
            self._move(to, sender, amount)

    def _adjust_supply(self, account: str, amount: int) -> None:
        self._balances[account] = self._balances.get(account, 0) + amount
        self._total_supply += amount

    def _undo_adjust_supply(self, account: str, amount: int) -> None:
        with self._lock:
            self._adjust_supply(account, -amount)

    def _restore_allowance(self, key: tuple[str, str], previous: int | None) -> None:
        with self._lock:
            if previous is None:
                self._allowances.pop(key, None)
            else:
                self._allowances[key] = previous


class InMemoryToken(BalanceLedger):
    """Reference in-process asset ledger implementing Token."""

    def __init__(self, address: str, symbol: str, decimals: int = 18) -> None:
        super().__init__()
        if not 0 <= decimals <= 77:
            raise ValueError(f"decimals must be in [0, 77], got {decimals}")
        self.address = normalize_address(address, validate=True)
        self.symbol = symbol
        self.decimals = decimals

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> None:
        self.spend_allowance(owner, spender, amount)
        self.transfer(owner, to, amount)

    def __repr__(self) -> str:
        return f"InMemoryToken(symbol={self.symbol}, address={self.address})"


def _check_amount(amount: int) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise TypeError(f"Amount must be an int, got {type(amount).__name__}")
    if amount < 0:
        raise ValueError(f"Amount cannot be negative: {amount}")
