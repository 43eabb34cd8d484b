"""Tests for relay read helpers and bid submission."""
import pytest

from mevalert.core.errors import AuctionNotFoundError, BidNotHigherError
from mevalert.core.types import ETHER, AuctionStatus
from mevalert.relay.queries import HookQueries


@pytest.fixture
def queries(hook):
    return HookQueries(hook)


class TestHookQueries:
    """Test cases for HookQueries."""

    def test_get_auction(self, queries, hook, accounts):
        """Test auction details include liveness."""
        owner, pool = accounts["owner"], accounts["pool"]
        auction_id = hook.start_auction(owner, pool, ETHER // 10, 300)
        hook.clock.advance(100)

        info = queries.get_auction(pool, auction_id)
        assert info.auction_id == auction_id
        assert info.is_active is True
        assert info.time_remaining == 200
        assert info.status is AuctionStatus.CREATED
        assert info.to_dict()["status"] == "created"

        hook.clock.advance(200)
        info = queries.get_auction(pool, auction_id)
        assert info.is_active is False
        assert info.time_remaining == 0
        assert info.status is AuctionStatus.ENDED

    def test_missing_auction(self, queries, accounts):
        """Test unknown ids give None."""
        assert queries.get_auction(accounts["pool"], 3) is None

    def test_next_id_and_insurance(self, queries, hook, accounts):
        """Test simple counters pass through."""
        owner, pool = accounts["owner"], accounts["pool"]
        hook.start_auction(owner, pool, ETHER // 10, 300)
        hook.deposit_insurance(owner, pool, ETHER)

        assert queries.get_next_auction_id(pool) == 1
        assert queries.get_insurance_fund(pool) == ETHER

    def test_active_auctions_look_back_five(self, queries, hook, accounts):
        """Test only open auctions among the last five ids are listed."""
        owner, pool = accounts["owner"], accounts["pool"]
        # ids 0-1 stay open but fall outside the look-back
        for _ in range(2):
            hook.start_auction(owner, pool, ETHER // 10, 10_000)
        hook.start_auction(owner, pool, ETHER // 10, 10)      # id 2, closes soon
        for _ in range(4):
            hook.start_auction(owner, pool, ETHER // 10, 10_000)
        hook.clock.advance(20)

        active = queries.get_active_auctions(pool)
        assert [info.auction_id for info in active] == [3, 4, 5, 6]

    def test_place_bid(self, queries, hook, accounts):
        """Test bids are placed from the bidder's own balance."""
        owner, alice, pool = accounts["owner"], accounts["alice"], accounts["pool"]
        auction_id = hook.start_auction(owner, pool, ETHER // 10, 300)

        effective = queries.place_bid(alice, pool, auction_id, ETHER)
        assert effective == 12 * ETHER // 10
        assert hook.ledger.balance_of(alice) == 99 * ETHER

    def test_rejected_bid_propagates(self, queries, hook, accounts):
        """Test hook rejections reach the caller."""
        owner, alice, bob, pool = accounts["owner"], accounts["alice"], accounts["bob"], accounts["pool"]
        auction_id = hook.start_auction(owner, pool, ETHER // 10, 300)
        queries.place_bid(alice, pool, auction_id, ETHER)

        with pytest.raises(BidNotHigherError):
            queries.place_bid(bob, pool, auction_id, ETHER)

    def test_bid_on_unknown_auction_logged(self, queries, accounts, caplog):
        """Test a bid on a missing auction is logged as rejected and re-raised."""
        alice, pool = accounts["alice"], accounts["pool"]

        with caplog.at_level("WARNING", logger="mevalert.relay.queries"):
            with pytest.raises(AuctionNotFoundError):
                queries.place_bid(alice, pool, 7, ETHER)

        assert "rejected" in caplog.text
