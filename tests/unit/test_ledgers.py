"""Tests for in-memory asset ledgers."""

import pytest

from stableswap.errors import (
    AuthorizationError,
    InsufficientBalanceError,
    TransferError,
    ValidationError,
)
from stableswap.ledgers import InMemoryToken, LPShareToken, NativeLedger
from tests.helpers import ALICE, BOB, POOL, TOKEN_A
from tests.helpers.constants import LP_TOKEN


class TestInMemoryToken:
    """Tests for the fungible token ledger."""

    def test_mint_and_transfer(self):
        token = InMemoryToken(TOKEN_A)
        token.mint(ALICE, 100)
        token.transfer(ALICE, BOB, 40)
        assert token.balance_of(ALICE) == 60
        assert token.balance_of(BOB.upper().replace("0X", "0x")) == 40

    def test_insufficient_balance(self):
        token = InMemoryToken(TOKEN_A)
        token.mint(ALICE, 10)
        with pytest.raises(InsufficientBalanceError, match="10 < 11"):
            token.transfer(ALICE, BOB, 11)
        assert token.balance_of(ALICE) == 10

    def test_insufficient_balance_is_validation_error(self):
        assert issubclass(InsufficientBalanceError, ValidationError)

    def test_negative_amount_raises(self):
        token = InMemoryToken(TOKEN_A)
        with pytest.raises(ValidationError, match="non-negative"):
            token.transfer(ALICE, BOB, -1)

    def test_snapshot_restore(self):
        token = InMemoryToken(TOKEN_A)
        token.mint(ALICE, 5)
        snapshot = token.snapshot()
        token.transfer(ALICE, BOB, 5)
        token.restore(snapshot)
        assert token.balance_of(ALICE) == 5
        assert token.balance_of(BOB) == 0


class TestNativeLedger:
    """Tests for native value transfers and receiver hooks."""

    def test_send_runs_receiver_hook(self):
        ledger = NativeLedger()
        ledger.fund(POOL, 100)
        received = []
        ledger.register_receiver(ALICE, lambda sender, amount: received.append((sender, amount)))
        ledger.send(POOL, ALICE, 30)
        assert received == [(POOL, 30)]
        assert ledger.balance_of(ALICE) == 30

    def test_rejecting_receiver_reverts_transfer(self):
        """A receiver that raises gets nothing and the sender keeps the value."""
        ledger = NativeLedger()
        ledger.fund(POOL, 100)

        def reject(sender: str, amount: int) -> None:
            raise RuntimeError("no thanks")

        ledger.register_receiver(ALICE, reject)
        with pytest.raises(TransferError, match="no thanks") as exc_info:
            ledger.send(POOL, ALICE, 30)
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert ledger.balance_of(POOL) == 100
        assert ledger.balance_of(ALICE) == 0


class TestLPShareToken:
    """Tests for the minter-restricted LP token."""

    def test_only_minter_mints_and_burns(self):
        token = LPShareToken(LP_TOKEN)
        token.set_minter(POOL)
        token.mint(POOL, ALICE, 100)
        with pytest.raises(AuthorizationError):
            token.mint(ALICE, ALICE, 1)
        with pytest.raises(AuthorizationError):
            token.burn_from(ALICE, ALICE, 1)
        token.burn_from(POOL, ALICE, 40)
        assert token.balance_of(ALICE) == 60
        assert token.total_supply == 60

    def test_no_minter_means_no_mint(self):
        with pytest.raises(AuthorizationError):
            LPShareToken(LP_TOKEN).mint(POOL, ALICE, 1)

    def test_minter_set_once(self):
        token = LPShareToken(LP_TOKEN)
        token.set_minter(POOL)
        with pytest.raises(ValidationError, match="already set"):
            token.set_minter(ALICE)

    def test_burn_more_than_balance(self):
        token = LPShareToken(LP_TOKEN)
        token.set_minter(POOL)
        token.mint(POOL, ALICE, 10)
        with pytest.raises(InsufficientBalanceError):
            token.burn_from(POOL, ALICE, 11)
        assert token.total_supply == 10

    def test_snapshot_includes_supply(self):
        token = LPShareToken(LP_TOKEN)
        token.set_minter(POOL)
        snapshot = token.snapshot()
        token.mint(POOL, ALICE, 10)
        token.restore(snapshot)
        assert token.total_supply == 0
        assert token.balance_of(ALICE) == 0
