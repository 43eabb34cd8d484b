"""
Rolling per-pool swap counters.
"""

import logging

from .state import HookState
from .types import TRACKING_WINDOW, SwapTrackingRecord

logger = logging.getLogger(__name__)


class SwapTracker:
    """Keeps swap count, volume and the last large swap for each pool."""

    def __init__(self, state: HookState):
        self.state = state

    def record_swap(self, pool: str, amount_in: int, now: int) -> SwapTrackingRecord:
        """
        Apply one observed trade to the pool's record.

        Counters are zeroed first when the rolling window has elapsed since
        the last reset.
        """
        record = self.state.swap_record(pool)

        if now - record.last_reset > TRACKING_WINDOW:
            logger.debug(f"Resetting swap counters for {pool} after {now - record.last_reset}s")
            record.swap_count = 0
            record.volume = 0
            record.last_reset = now

        record.swap_count += 1
        record.volume += amount_in

        if amount_in >= self.state.params.large_swap_threshold:
            record.last_large_swap_time = now
            record.last_large_swap_amount = amount_in

        return record
