"""Tests for the in-memory token ledger."""

import pytest

from pairswap.errors import InsufficientAllowance, InsufficientBalance
from pairswap.journal import atomic
from pairswap.tokens import BalanceLedger, InMemoryToken, Token
from tests.helpers import ALICE, BOB, CAROL, TOKEN_A


@pytest.fixture
def token() -> InMemoryToken:
    token = InMemoryToken(TOKEN_A, "AAA")
    token.mint(ALICE, 100)
    return token


class TestInMemoryToken:
    """Balances, transfers and allowances."""

    def test_satisfies_protocols(self, token):
        assert isinstance(token, Token)

    def test_address_is_normalized(self):
        token = InMemoryToken(TOKEN_A.upper().replace("0X", "0x"), "AAA")
        assert token.address == TOKEN_A

    def test_invalid_address_rejected(self):
        with pytest.raises(ValueError):
            InMemoryToken("0x1234", "BAD")

    def test_transfer(self, token):
        token.transfer(ALICE, BOB, 40)
        assert token.balance_of(ALICE) == 60
        assert token.balance_of(BOB) == 40
        assert token.total_supply == 100

    def test_transfer_more_than_balance(self, token):
        with pytest.raises(InsufficientBalance):
            token.transfer(ALICE, BOB, 101)
        assert token.balance_of(ALICE) == 100

    def test_negative_amount_rejected(self, token):
        with pytest.raises(ValueError):
            token.transfer(ALICE, BOB, -1)

    def test_non_int_amount_rejected(self, token):
        with pytest.raises(TypeError):
            token.transfer(ALICE, BOB, 1.5)  # type: ignore[arg-type]

    def test_transfer_from_spends_allowance(self, token):
        token.approve(ALICE, BOB, 50)
        token.transfer_from(BOB, ALICE, CAROL, 30)
        assert token.balance_of(CAROL) == 30
        assert token.allowance(ALICE, BOB) == 20

    def test_transfer_from_without_allowance(self, token):
        with pytest.raises(InsufficientAllowance):
            token.transfer_from(BOB, ALICE, CAROL, 1)

    def test_owner_needs_no_allowance(self, token):
        token.transfer_from(ALICE, ALICE, BOB, 10)
        assert token.balance_of(BOB) == 10

    def test_burn(self, token):
        token.burn(ALICE, 30)
        assert token.total_supply == 70
        with pytest.raises(InsufficientBalance):
            token.burn(ALICE, 71)


class TestBalanceLedgerRollback:
    """Journaled changes are undone by a failed atomic block."""

    def test_rollback(self, token):
        with pytest.raises(RuntimeError):
            with atomic():
                token.transfer(ALICE, BOB, 10)
                token.approve(ALICE, BOB, 5)
                token.mint(CAROL, 7)
                token.burn(ALICE, 20)
                raise RuntimeError("boom")
        assert token.balance_of(ALICE) == 100
        assert token.balance_of(BOB) == 0
        assert token.balance_of(CAROL) == 0
        assert token.allowance(ALICE, BOB) == 0
        assert token.total_supply == 100

    def test_rollback_restores_previous_allowance(self, token):
        token.approve(ALICE, BOB, 8)
        with pytest.raises(RuntimeError):
            with atomic():
                token.transfer_from(BOB, ALICE, CAROL, 3)
                raise RuntimeError("boom")
        assert token.allowance(ALICE, BOB) == 8
        assert token.balance_of(CAROL) == 0

    def test_rejected_transfer_records_nothing(self, token):
        with atomic() as tx:
            with pytest.raises(InsufficientBalance):
                token.transfer(ALICE, BOB, 101)
            assert len(tx) == 0

    def test_load_derives_supply(self):
        ledger = BalanceLedger()
        ledger.load({ALICE: 5, BOB: 7}, {(ALICE, BOB): 3})
        assert ledger.total_supply == 12
        assert ledger.allowance(ALICE, BOB) == 3
        assert ledger.holders() == {ALICE: 5, BOB: 7}
