"""
Core hook components.

Usage:
    from mevalert.core import MevAlertHook, Ledger, ManualClock

    ledger = Ledger()
    clock = ManualClock(start=1_700_000_000)
    hook = MevAlertHook(owner="0xf39F...", ledger=ledger, clock=clock)

    hook.register_pool(owner, "0xPOOL", alert_threshold=5 * ETHER)
    auction_id = hook.start_auction(owner, "0xPOOL", min_bid=ETHER // 10, duration_secs=300)
"""

from .auction import AuctionEngine, PayoutSplit, effective_bid, time_bonus_pct
from .circuit_breaker import CircuitBreaker
from .errors import HookError
from .events import EventLog, HookEvent
from .fee_override import FeeOverrideStore, recommendation_digest, sign_recommendation
from .hook import MevAlertHook
from .insurance import InsuranceFund
from .ledger import Ledger, ManualClock, SystemClock, normalize_account
from .scoring import MevScorer, calculate_mev_score
from .state import HookState
from .tracker import SwapTracker
from .types import ETHER, AuctionStatus, HookParameters

__all__ = [
    "AuctionEngine",
    "AuctionStatus",
    "CircuitBreaker",
    "ETHER",
    "EventLog",
    "FeeOverrideStore",
    "HookError",
    "HookEvent",
    "HookParameters",
    "HookState",
    "InsuranceFund",
    "Ledger",
    "ManualClock",
    "MevAlertHook",
    "MevScorer",
    "PayoutSplit",
    "SwapTracker",
    "SystemClock",
    "calculate_mev_score",
    "effective_bid",
    "normalize_account",
    "recommendation_digest",
    "sign_recommendation",
    "time_bonus_pct",
]
