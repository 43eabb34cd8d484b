"""
Time-weighted fee-override auctions.

Each pool runs a sequence of auctions (ids 0, 1, 2, ...). Bids are compared
by their *effective* value: the raw bid plus a bonus that decays linearly
from ``max_time_bonus_pct`` at the start of the auction to zero at its end.
A late bidder therefore has to out-raise both the leading raw bid and the
leader's time advantage. Equal effective bids keep the incumbent.

Settlement splits the winning raw bid between the winner, the treasury, the
protocol and the pool's insurance fund, then installs the fee captured when
the auction was created as a temporary override.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .errors import (
    AuctionAlreadySettledError,
    AuctionEndedError,
    AuctionNotEndedError,
    BidNotHigherError,
    BidTooLowError,
    InvalidDurationError,
)
from .events import AuctionSettled, AuctionStarted, BidPlaced, EventLog, TimeWeightedBid
from .fee_override import FeeOverrideStore
from .insurance import InsuranceFund
from .ledger import Ledger
from .state import HookState
from .types import (
    PROTOCOL_SHARE_PCT,
    TREASURY_SHARE_PCT,
    WINNER_SHARE_PCT,
    Auction,
)

logger = logging.getLogger(__name__)


def time_bonus_pct(start: int, end: int, now: int, max_bonus_pct: int) -> int:
    """Bonus percent for a bid placed at ``now``; zero for a zero-length window."""
    duration = end - start
    if duration <= 0:
        return 0
    elapsed = max(0, now - start)
    remaining = max(0, duration - elapsed)
    return remaining * max_bonus_pct // duration


def effective_bid(amount: int, bonus_pct: int) -> int:
    return amount * (100 + bonus_pct) // 100


@dataclass(frozen=True)
class PayoutSplit:
    """How a winning raw bid is distributed at settlement."""
    winner: int
    treasury: int
    protocol: int
    insurance: int

    @classmethod
    def from_bid(cls, amount: int) -> "PayoutSplit":
        winner = amount * WINNER_SHARE_PCT // 100
        treasury = amount * TREASURY_SHARE_PCT // 100
        protocol = amount * PROTOCOL_SHARE_PCT // 100
        return cls(
            winner=winner,
            treasury=treasury,
            protocol=protocol,
            insurance=amount - winner - treasury - protocol,
        )


class AuctionEngine:
    """Creates auctions, admits bids and settles results."""

    def __init__(
        self,
        state: HookState,
        events: EventLog,
        ledger: Ledger,
        account: str,
        fee_overrides: FeeOverrideStore,
        insurance: InsuranceFund,
    ):
        self.state = state
        self.events = events
        self.ledger = ledger
        self.account = account
        self.fee_overrides = fee_overrides
        self.insurance = insurance

    def start_auction(self, pool: str, min_bid: int, duration_secs: int, now: int) -> int:
        self.state.require_registered(pool)
        if duration_secs <= 0:
            raise InvalidDurationError(f"Auction duration must be positive, got {duration_secs}")
        if min_bid < 0:
            raise BidTooLowError(min_bid, 0)

        auction = Auction(
            start=now,
            end=now + duration_secs,
            min_bid=min_bid,
            fee_bps=self.state.params.default_fee_bps,
        )
        auction_id = self.state.add_auction(pool, auction)
        self.events.emit(
            AuctionStarted(
                pool=pool,
                auction_id=auction_id,
                min_bid=min_bid,
                start_time=auction.start,
                end_time=auction.end,
            )
        )
        logger.info(f"Auction {auction_id} started for {pool}: min bid {min_bid}, ends at {auction.end}")
        return auction_id

    def quote(self, pool: str, auction_id: int, amount: int, now: int) -> Tuple[int, int]:
        """Effective value and bonus percent a bid of ``amount`` would get now."""
        auction = self.state.get_auction(pool, auction_id)
        bonus = time_bonus_pct(auction.start, auction.end, now, self.state.params.max_time_bonus_pct)
        return effective_bid(amount, bonus), bonus

    def place_bid(self, bidder: str, pool: str, auction_id: int, amount: int, now: int) -> int:
        """
        Admit a bid, escrow it and refund the previous leader.

        Returns:
            The bid's effective (time-weighted) value
        """
        auction = self.state.get_auction(pool, auction_id)
        if not auction.is_open(now):
            raise AuctionEndedError(f"Auction {auction_id} for {pool} ended at {auction.end}")
        self.state.require_registered(pool)
        if amount < auction.min_bid:
            raise BidTooLowError(amount, auction.min_bid)

        effective, bonus = self.quote(pool, auction_id, amount, now)
        if effective <= auction.highest_effective_bid:
            raise BidNotHigherError(effective, auction.highest_effective_bid)

        previous_bidder = auction.highest_bidder
        previous_bid = auction.highest_bid

        auction.highest_bid = amount
        auction.highest_bidder = bidder
        auction.highest_effective_bid = effective

        self.ledger.transfer(bidder, self.account, amount)
        if previous_bidder is not None and previous_bid > 0:
            self.ledger.transfer(self.account, previous_bidder, previous_bid)
            logger.debug(f"Refunded {previous_bid} to outbid {previous_bidder}")

        self.events.emit(BidPlaced(pool=pool, auction_id=auction_id, bidder=bidder, bid_amount=amount))
        self.events.emit(
            TimeWeightedBid(
                pool=pool,
                auction_id=auction_id,
                bidder=bidder,
                raw_amount=amount,
                effective_amount=effective,
                time_bonus_pct=bonus,
            )
        )
        logger.info(
            f"Bid on {pool}#{auction_id} by {bidder}: {amount} (effective {effective}, +{bonus}%)"
        )
        return effective

    def finalize_auction(
        self,
        pool: str,
        auction_id: int,
        now: int,
        treasury: str,
        protocol: str,
    ) -> Optional[PayoutSplit]:
        """
        Settle an ended auction and install its fee override.

        Returns:
            The payout split, or None when nobody bid
        """
        auction = self.state.get_auction(pool, auction_id)
        if now < auction.end:
            raise AuctionNotEndedError(f"Auction {auction_id} for {pool} ends at {auction.end}")
        if auction.settled:
            raise AuctionAlreadySettledError(f"Auction {auction_id} for {pool} is already settled")

        auction.settled = True

        split = None
        winner = auction.highest_bidder
        if winner is not None and auction.highest_bid > 0:
            split = PayoutSplit.from_bid(auction.highest_bid)
            self.insurance.top_up(pool, auction_id, split.insurance)
            self.ledger.transfer(self.account, winner, split.winner)
            self.ledger.transfer(self.account, treasury, split.treasury)
            self.ledger.transfer(self.account, protocol, split.protocol)

        self.fee_overrides.install(pool, auction.fee_bps, now, source=f"auction:{auction_id}")
        self.events.emit(
            AuctionSettled(pool=pool, auction_id=auction_id, winner=winner, final_fee_bps=auction.fee_bps)
        )
        logger.info(f"Auction {auction_id} for {pool} settled, winner {winner}, fee {auction.fee_bps} bps")
        return split
