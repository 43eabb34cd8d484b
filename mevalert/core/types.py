"""
Data types shared by the hook components.

All amounts are integers in the smallest native unit (wei); fees are in
basis points.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

ETHER = 10 ** 18

TRACKING_WINDOW = 24 * 60 * 60
MAX_FEE_BPS = 10_000

# Auction proceeds split, in percent of the winning raw bid.
# The insurance fund takes whatever is left after these three.
WINNER_SHARE_PCT = 45
TREASURY_SHARE_PCT = 35
PROTOCOL_SHARE_PCT = 10


class AuctionStatus(Enum):
    """Lifecycle status of an auction."""
    CREATED = "created"
    ACTIVE = "active"
    ENDED = "ended"
    SETTLED = "settled"


@dataclass
class HookParameters:
    """Owner-tunable parameters of the hook."""

    # Scoring
    large_swap_threshold: int = ETHER
    rapid_swap_window: int = 300
    volume_spike_multiplier: int = 10
    consecutive_swap_bonus_pct: int = 200

    # Auctions
    auction_owner_only: bool = False
    default_fee_bps: int = 100
    fee_override_duration: int = 300
    max_time_bonus_pct: int = 20

    # Insurance
    max_compensation_pct: int = 50
    min_insurable_loss: int = ETHER // 100


@dataclass
class PoolConfig:
    """Allow-list entry for a pool."""
    allowed: bool = False
    alert_threshold: int = 0


@dataclass
class SwapTrackingRecord:
    """Rolling per-pool swap counters used as scoring inputs."""
    last_large_swap_time: int = 0
    last_large_swap_amount: int = 0
    swap_count: int = 0
    volume: int = 0
    last_reset: int = 0


@dataclass
class Auction:
    """
    One fee-override auction for a pool.

    ``start`` and ``end`` are fixed at creation. ``highest_bid`` and
    ``highest_effective_bid`` only ever grow, and ``settled`` flips once.
    """
    start: int
    end: int
    min_bid: int
    fee_bps: int
    highest_bid: int = 0
    highest_bidder: Optional[str] = None
    highest_effective_bid: int = 0
    settled: bool = False

    @property
    def duration(self) -> int:
        return self.end - self.start

    def is_open(self, now: int) -> bool:
        return now < self.end

    def time_remaining(self, now: int) -> int:
        return max(0, self.end - now)

    def status(self, now: int) -> AuctionStatus:
        if self.settled:
            return AuctionStatus.SETTLED
        if now >= self.end:
            return AuctionStatus.ENDED
        if self.highest_bidder is None:
            return AuctionStatus.CREATED
        return AuctionStatus.ACTIVE


@dataclass
class FeeOverride:
    """Temporary fee installed for a pool."""
    expiry: int = 0
    fee_bps: int = 0

    def is_active(self, now: int) -> bool:
        return now < self.expiry


@dataclass
class EmergencyState:
    """Global circuit breaker state."""
    paused: bool = False
    reason: str = ""
    timestamp: int = 0


@dataclass
class SwapDeltas:
    """Amounts moved by one trade, derived from the venue's signed deltas."""
    amount_in: int = 0
    amount_out: int = 0

    @classmethod
    def from_signed(cls, amount0_delta: int, amount1_delta: int) -> "SwapDeltas":
        """
        Build from signed deltas seen from the trader's side.

        A negative delta was paid into the pool, a positive one was received.
        """
        deltas = (amount0_delta, amount1_delta)
        paid = [-d for d in deltas if d < 0]
        received = [d for d in deltas if d > 0]
        return cls(
            amount_in=max(paid, default=0),
            amount_out=max(received, default=0),
        )


@dataclass
class ClaimRecord:
    """Cumulative insurance payouts to one claimant on one pool."""
    total_compensation: int = 0
    claims: int = 0
    evidence: list = field(default_factory=list)
