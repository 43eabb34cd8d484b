"""
Typed notifications emitted by the hook.

Events emitted during a call only become visible once that call commits.
The relay subscribes to the committed stream.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Callable, ClassVar, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HookEvent:
    """Base class for hook notifications."""

    event_type: ClassVar[str] = "hook_event"
    category: ClassVar[str] = "hook"

    @property
    def subject(self) -> str:
        return f"mevalert.{self.category}.{self.event_type}"

    def to_message(self) -> Dict[str, Any]:
        message = {"type": self.event_type}
        message.update(asdict(self))
        return message


@dataclass(frozen=True)
class SwapObserved(HookEvent):
    event_type: ClassVar[str] = "swap_observed"
    category: ClassVar[str] = "swaps"

    pool: str
    trader: str
    amount_in: int
    amount_out: int
    timestamp: int


@dataclass(frozen=True)
class MevAlert(HookEvent):
    event_type: ClassVar[str] = "mev_alert"
    category: ClassVar[str] = "alerts"

    pool: str
    mev_score: int
    timestamp: int
    metadata_hash: str


@dataclass(frozen=True)
class AuctionStarted(HookEvent):
    event_type: ClassVar[str] = "auction_started"
    category: ClassVar[str] = "auctions"

    pool: str
    auction_id: int
    min_bid: int
    start_time: int
    end_time: int


@dataclass(frozen=True)
class BidPlaced(HookEvent):
    event_type: ClassVar[str] = "bid_placed"
    category: ClassVar[str] = "auctions"

    pool: str
    auction_id: int
    bidder: str
    bid_amount: int


@dataclass(frozen=True)
class TimeWeightedBid(HookEvent):
    event_type: ClassVar[str] = "time_weighted_bid"
    category: ClassVar[str] = "auctions"

    pool: str
    auction_id: int
    bidder: str
    raw_amount: int
    effective_amount: int
    time_bonus_pct: int


@dataclass(frozen=True)
class AuctionSettled(HookEvent):
    event_type: ClassVar[str] = "auction_settled"
    category: ClassVar[str] = "auctions"

    pool: str
    auction_id: int
    winner: Optional[str]
    final_fee_bps: int


@dataclass(frozen=True)
class FeeOverrideSet(HookEvent):
    event_type: ClassVar[str] = "fee_override_set"
    category: ClassVar[str] = "fees"

    pool: str
    fee_bps: int
    expiry: int
    source: str


@dataclass(frozen=True)
class EmergencyPaused(HookEvent):
    event_type: ClassVar[str] = "emergency_paused"
    category: ClassVar[str] = "emergency"

    timestamp: int
    reason: str


@dataclass(frozen=True)
class EmergencyUnpaused(HookEvent):
    event_type: ClassVar[str] = "emergency_unpaused"
    category: ClassVar[str] = "emergency"

    timestamp: int


@dataclass(frozen=True)
class InsuranceDeposit(HookEvent):
    event_type: ClassVar[str] = "insurance_deposit"
    category: ClassVar[str] = "insurance"

    pool: str
    depositor: str
    amount: int
    new_total: int


@dataclass(frozen=True)
class InsuranceTopUp(HookEvent):
    event_type: ClassVar[str] = "insurance_top_up"
    category: ClassVar[str] = "insurance"

    pool: str
    auction_id: int
    amount: int
    new_total: int


@dataclass(frozen=True)
class InsuranceClaimed(HookEvent):
    event_type: ClassVar[str] = "insurance_claimed"
    category: ClassVar[str] = "insurance"

    pool: str
    claimant: str
    loss_amount: int
    compensation: int
    evidence_hash: str


@dataclass(frozen=True)
class InsuranceEmergencyWithdrawal(HookEvent):
    event_type: ClassVar[str] = "insurance_emergency_withdrawal"
    category: ClassVar[str] = "insurance"

    pool: str
    recipient: str
    amount: int
    remaining: int


@dataclass(frozen=True)
class FeesWithdrawn(HookEvent):
    event_type: ClassVar[str] = "fees_withdrawn"
    category: ClassVar[str] = "admin"

    recipient: str
    amount: int


EventSubscriber = Callable[[HookEvent], None]


class EventLog:
    """
    Append-only log of committed hook events.

    Events are staged while a call runs. ``commit`` moves staged events into
    the log and notifies subscribers; ``rollback_to`` drops everything staged
    after a mark.
    """

    def __init__(self):
        self._records: List[HookEvent] = []
        self._pending: List[HookEvent] = []
        self._subscribers: List[EventSubscriber] = []

    @property
    def records(self) -> List[HookEvent]:
        return list(self._records)

    def of_type(self, event_cls) -> List[HookEvent]:
        return [event for event in self._records if isinstance(event, event_cls)]

    def subscribe(self, subscriber: EventSubscriber):
        self._subscribers.append(subscriber)

    def unsubscribe(self, subscriber: EventSubscriber):
        if subscriber in self._subscribers:
            self._subscribers.remove(subscriber)

    def emit(self, event: HookEvent):
        self._pending.append(event)

    def mark(self) -> int:
        return len(self._pending)

    def rollback_to(self, mark: int):
        del self._pending[mark:]

    def commit(self):
        committed, self._pending = self._pending, []
        self._records.extend(committed)
        for event in committed:
            for subscriber in list(self._subscribers):
                try:
                    subscriber(event)
                except Exception:
                    logger.exception(f"Event subscriber failed on {event.event_type}")
