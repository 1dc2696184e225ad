"""Tests for all-or-nothing execution across ledgers."""

import threading

import pytest

from pairswap import journal
from pairswap.journal import atomic
from pairswap.tokens import InMemoryToken
from tests.helpers import ALICE, BOB, CAROL, TOKEN_A, TOKEN_B


@pytest.fixture
def token() -> InMemoryToken:
    token = InMemoryToken(TOKEN_A, "AAA")
    token.mint(ALICE, 10)
    return token


def _free_for_other_thread(lock: threading.RLock) -> bool:
    acquired = []

    def try_acquire() -> None:
        got = lock.acquire(blocking=False)
        acquired.append(got)
        if got:
            lock.release()

    worker = threading.Thread(target=try_acquire)
    worker.start()
    worker.join()
    return acquired[0]


class TestAtomic:
    """Commit and rollback of journaled changes."""

    def test_commit(self, token):
        with atomic():
            token.transfer(ALICE, BOB, 4)
        assert token.balance_of(BOB) == 4
        assert journal.current() is None

    def test_rollback_every_touched_ledger(self, token):
        other = InMemoryToken(TOKEN_B, "BBB")
        other.mint(ALICE, 10)
        with pytest.raises(RuntimeError):
            with atomic():
                token.transfer(ALICE, BOB, 4)
                token.approve(ALICE, CAROL, 3)
                other.transfer(ALICE, BOB, 6)
                other.mint(CAROL, 5)
                raise RuntimeError("boom")
        assert token.balance_of(ALICE) == 10
        assert token.balance_of(BOB) == 0
        assert token.allowance(ALICE, CAROL) == 0
        assert other.balance_of(BOB) == 0
        assert other.total_supply == 10

    def test_changes_outside_a_block_are_not_journaled(self, token):
        token.transfer(ALICE, BOB, 4)
        with pytest.raises(RuntimeError):
            with atomic():
                raise RuntimeError("boom")
        assert token.balance_of(BOB) == 4

    def test_failed_inner_block_keeps_outer_changes(self, token):
        with atomic():
            token.transfer(ALICE, BOB, 1)
            with pytest.raises(RuntimeError):
                with atomic():
                    token.transfer(ALICE, BOB, 2)
                    raise RuntimeError("inner")
        assert token.balance_of(BOB) == 1

    def test_outer_failure_undoes_committed_inner_block(self, token):
        with pytest.raises(RuntimeError):
            with atomic():
                with atomic():
                    token.transfer(ALICE, BOB, 2)
                raise RuntimeError("outer")
        assert token.balance_of(BOB) == 0

    def test_after_rollback_runs_once_changes_are_undone(self, token):
        seen = []
        with pytest.raises(RuntimeError):
            with atomic() as tx:
                token.transfer(ALICE, BOB, 2)
                tx.after_rollback(lambda: seen.append(token.balance_of(BOB)))
                raise RuntimeError("boom")
        assert seen == [0]

    def test_after_rollback_skipped_on_commit(self, token):
        seen = []
        with atomic() as tx:
            tx.after_rollback(lambda: seen.append(True))
        assert seen == []

    def test_held_locks_released_at_outermost_exit(self):
        lock = threading.RLock()
        with atomic():
            with atomic() as tx:
                tx.acquire(lock)
            assert not _free_for_other_thread(lock)
        assert _free_for_other_thread(lock)


class TestConcurrentLedgers:
    """Rollback undoes only this thread's movements."""

    def test_other_thread_transfer_survives_rollback(self, token):
        token.mint(CAROL, 10)

        def other_thread_transfer():
            token.transfer(CAROL, BOB, 5)

        with pytest.raises(RuntimeError):
            with atomic():
                token.transfer(ALICE, BOB, 3)
                worker = threading.Thread(target=other_thread_transfer)
                worker.start()
                worker.join()
                raise RuntimeError("boom")

        assert token.balance_of(BOB) == 5
        assert token.balance_of(ALICE) == 10
        assert token.balance_of(CAROL) == 5
