"""
Read helpers over a hook, plus bid submission for users who hold their own
funds.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from mevalert.core.errors import AuctionNotFoundError, HookError
from mevalert.core.types import AuctionStatus

logger = logging.getLogger(__name__)

ACTIVE_AUCTION_LOOKBACK = 5


@dataclass
class AuctionInfo:
    pool: str
    auction_id: int
    start: int
    end: int
    min_bid: int
    highest_bid: int
    highest_bidder: Optional[str]
    settled: bool
    is_active: bool
    time_remaining: int
    status: AuctionStatus

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


class HookQueries:
    """Convenience queries against a deployed hook."""

    def __init__(self, hook):
        self.hook = hook

    def get_auction(self, pool: str, auction_id: int) -> Optional[AuctionInfo]:
        """Auction details, or None when the id does not exist."""
        try:
            auction = self.hook.auction(pool, auction_id)
        except AuctionNotFoundError as e:
            logger.warning(f"Error fetching auction: {e}")
            return None

        now = self.hook.now()
        return AuctionInfo(
            pool=pool,
            auction_id=auction_id,
            start=auction.start,
            end=auction.end,
            min_bid=auction.min_bid,
            highest_bid=auction.highest_bid,
            highest_bidder=auction.highest_bidder,
            settled=auction.settled,
            is_active=auction.is_open(now),
            time_remaining=auction.time_remaining(now),
            status=auction.status(now),
        )

    def get_next_auction_id(self, pool: str) -> int:
        return self.hook.next_auction_id(pool)

    def get_insurance_fund(self, pool: str) -> int:
        return self.hook.insurance_fund(pool)

    def get_active_auctions(self, pool: str, lookback: int = ACTIVE_AUCTION_LOOKBACK) -> List[AuctionInfo]:
        """Open auctions among the most recent ``lookback`` ids for a pool."""
        next_id = self.get_next_auction_id(pool)
        active = []
        for auction_id in range(max(0, next_id - lookback), next_id):
            info = self.get_auction(pool, auction_id)
            if info is not None and info.is_active:
                active.append(info)
        return active

    def place_bid(self, bidder: str, pool: str, auction_id: int, amount: int) -> int:
        """
        Submit a bid from ``bidder``'s own balance.

        Returns:
            The effective bid the hook recorded

        Raises:
            HookError: whatever the hook rejected the bid with
        """
        try:
            effective = self.hook.effective_bid(pool, auction_id, amount)
            logger.info(f"Submitting bid of {amount} on {pool}#{auction_id} for {bidder} (effective {effective})")
            return self.hook.place_bid(bidder, pool, auction_id, amount)
        except HookError as e:
            logger.warning(f"Bid by {bidder} on {pool}#{auction_id} rejected: {e}")
            raise
