"""All-or-nothing execution across ledgers.

A pool operation touches the pool's own state, its fee escrow, both
pooled token ledgers and, through a swap hook, possibly other pools.
Each ledger records how to undo every change it makes into the journal
of the running thread. `atomic` marks the journal on entry and, if the
block raises, undoes the changes made since the mark, newest first.

A nested block that succeeds leaves its entries to the enclosing block,
so a failure further out reverts them too. Locks taken inside a block
are held until the outermost block ends, so no other thread sees state
that may still be undone.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

import structlog

logger = structlog.get_logger()

_local = threading.local()


class Journal:
    """Undo log of one thread's outermost atomic block."""

    def __init__(self) -> None:
        self._undo: list[tuple[Callable[..., None], tuple[Any, ...]]] = []
        self._after_rollback: list[tuple[int, Callable[[], None]]] = []
        self._held: list[threading.RLock] = []

    def __len__(self) -> int:
        return len(self._undo)

    def record(self, undo: Callable[..., None], *args: Any) -> None:
        """Register undo(*args) as the inverse of a change just made."""
        self._undo.append((undo, args))

    def after_rollback(self, callback: Callable[[], None]) -> None:
        """Run callback once the changes recorded so far are undone."""
        self._after_rollback.append((len(self._undo), callback))

    def acquire(self, lock: threading.RLock) -> None:
        """Acquire lock and keep it until the outermost block ends."""
        lock.acquire()
        self._held.append(lock)

    def undo_to(self, mark: int) -> int:
        """Undo every change recorded after mark.

        Returns:
            Number of changes undone
        """
        undone = 0
        while len(self._undo) > mark:
            undo, args = self._undo.pop()
            undo(*args)
            undone += 1

        callbacks: list[Callable[[], None]] = []
        kept = []
        for position, callback in self._after_rollback:
            if position < mark:
                kept.append((position, callback))
            elif callback not in callbacks:
                callbacks.append(callback)
        self._after_rollback = kept
        for callback in callbacks:
            callback()
        return undone

    def _release(self) -> None:
        while self._held:
            self._held.pop().release()


def current() -> Journal | None:
    """Journal of the atomic block running on this thread, if any."""
    return getattr(_local, "journal", None)


def record(undo: Callable[..., None], *args: Any) -> None:
    """Record an undo entry if an atomic block is running on this thread."""
    journal = current()
    if journal is not None:
        journal.record(undo, *args)


@contextmanager
def atomic() -> Iterator[Journal]:
    """Run the block as a transaction over every journaling ledger it touches.

    Ledgers that do not record undo entries are left alone; their side
    effects are the caller's responsibility.
    """
    journal = current()
    outermost = journal is None
    if journal is None:
        journal = Journal()
        _local.journal = journal
    mark = len(journal)
    try:
        yield journal
    except BaseException as exc:
        undone = journal.undo_to(mark)
        logger.debug("rolled_back", error=type(exc).__name__, changes=undone)
        raise
    finally:
        if outermost:
            _local.journal = None
            journal._release()
