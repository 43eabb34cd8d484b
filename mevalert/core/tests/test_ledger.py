"""Tests for the native value ledger and clocks."""
import pytest

from mevalert.core.errors import TransferFailedError, ZeroAmountError
from mevalert.core.ledger import Ledger, ManualClock, normalize_account


class TestLedger:
    """Test cases for Ledger."""

    def test_mint_and_balance(self):
        """Test minting credits an account."""
        ledger = Ledger()
        ledger.mint("alice", 10)
        ledger.mint("alice", 5)
        assert ledger.balance_of("alice") == 15
        assert ledger.balance_of("bob") == 0

    def test_mint_rejects_zero(self):
        """Test minting nothing is rejected."""
        with pytest.raises(ZeroAmountError):
            Ledger().mint("alice", 0)

    def test_hex_addresses_share_one_balance(self, alice):
        """Test lower-case and checksummed spellings map to one account."""
        ledger = Ledger()
        ledger.mint(alice.lower(), 7)
        assert ledger.balance_of(alice) == 7
        assert normalize_account(alice.lower()) == alice

    def test_transfer_moves_value(self):
        """Test a transfer debits the sender and credits the recipient."""
        ledger = Ledger()
        ledger.mint("alice", 10)
        ledger.transfer("alice", "bob", 4)
        assert ledger.balance_of("alice") == 6
        assert ledger.balance_of("bob") == 4

    def test_transfer_insufficient_balance(self):
        """Test overdrawing raises and moves nothing."""
        ledger = Ledger()
        ledger.mint("alice", 3)
        with pytest.raises(TransferFailedError, match="insufficient balance"):
            ledger.transfer("alice", "bob", 4)
        assert ledger.balance_of("alice") == 3
        assert ledger.balance_of("bob") == 0

    def test_receive_hook_called(self):
        """Test the recipient callback sees sender and amount."""
        ledger = Ledger()
        ledger.mint("alice", 10)
        seen = []
        ledger.set_receive_hook("bob", lambda sender, amount: seen.append((sender, amount)))
        ledger.transfer("alice", "bob", 2)
        assert seen == [("alice", 2)]

    def test_receive_hook_rejection(self):
        """Test a raising callback turns into a failed transfer."""
        ledger = Ledger()
        ledger.mint("alice", 10)

        def reject(sender, amount):
            raise RuntimeError("no thanks")

        ledger.set_receive_hook("bob", reject)
        with pytest.raises(TransferFailedError, match="no thanks"):
            ledger.transfer("alice", "bob", 2)

        # The enclosing hook transaction is responsible for rolling back
        assert ledger.balance_of("bob") == 2

        ledger.set_receive_hook("bob", None)
        ledger.transfer("alice", "bob", 2)
        assert ledger.balance_of("bob") == 4

    def test_snapshot_restore(self):
        """Test balances can be rolled back to a snapshot."""
        ledger = Ledger()
        ledger.mint("alice", 10)
        snapshot = ledger.snapshot()
        ledger.transfer("alice", "bob", 10)
        ledger.restore(snapshot)
        assert ledger.balance_of("alice") == 10
        assert ledger.balance_of("bob") == 0


class TestManualClock:
    """Test cases for ManualClock."""

    def test_advance_and_set(self):
        """Test the clock moves forward."""
        clock = ManualClock(start=100)
        assert clock.now() == 100
        assert clock.advance(5) == 105
        assert clock.set(200) == 200

    def test_never_moves_backwards(self):
        """Test the clock refuses to go back in time."""
        clock = ManualClock(start=100)
        with pytest.raises(ValueError):
            clock.advance(-1)
        with pytest.raises(ValueError):
            clock.set(99)
        assert clock.now() == 100
