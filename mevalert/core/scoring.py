"""
MEV risk scoring heuristic.

The score starts at the swap size and is scaled by a chain of bonuses:

1. rapid-swap bonus for large swaps close to the previous large swap,
   with an extra sandwich bonus when the two sizes are similar
2. volume-spike bonus
3. frequency bonus once a pool has seen more than ten swaps today
4. size bonus for swaps above five times the large-swap floor
5. time-of-day bonus during the busiest UTC hours

Every step uses integer percentages and rounds down, so the same record
and input always produce the same score.
"""

from dataclasses import replace

from .types import TRACKING_WINDOW, HookParameters, SwapTrackingRecord

SANDWICH_BONUS_PCT = 150
SANDWICH_SIMILARITY_PCT = 150
VOLUME_SPIKE_BONUS_PCT = 120
FREQUENCY_FREE_SWAPS = 10
FREQUENCY_STEP_PCT = 5
FREQUENCY_CAP_PCT = 200
SIZE_FLOOR_MULTIPLE = 5
SIZE_STEP_PCT = 10
SIZE_MAX_STEPS = 3
PEAK_HOURS = ((8, 10), (14, 16))
PEAK_HOUR_BONUS_PCT = 110


def _apply(score: int, pct: int) -> int:
    return score * pct // 100


def _similar_size(amount: int, prior: int) -> bool:
    """True when the larger amount is at most 150% of the smaller one."""
    return (
        amount * 100 <= prior * SANDWICH_SIMILARITY_PCT
        and prior * 100 <= amount * SANDWICH_SIMILARITY_PCT
    )


def is_peak_hour(now: int) -> bool:
    hour = (now // 3600) % 24
    return any(low <= hour <= high for low, high in PEAK_HOURS)


def calculate_mev_score(
    record: SwapTrackingRecord,
    amount_in: int,
    now: int,
    params: HookParameters,
) -> int:
    """
    Score a swap of ``amount_in`` against a pool's tracking record.

    Args:
        record: Pool counters as they stood before this swap
        amount_in: Size of the incoming swap
        now: Chain timestamp of the swap
        params: Hook parameters (large-swap floor, windows, multipliers)

    Returns:
        Integer score, 0 for swaps below the large-swap floor
    """
    floor = params.large_swap_threshold
    if amount_in < floor:
        return 0

    score = amount_in

    since_last_large = now - record.last_large_swap_time
    if 0 < since_last_large <= params.rapid_swap_window:
        score = _apply(score, params.consecutive_swap_bonus_pct)
        if _similar_size(amount_in, record.last_large_swap_amount):
            score = _apply(score, SANDWICH_BONUS_PCT)

    today_volume = record.volume
    average_volume = today_volume // 2 if today_volume > 0 else floor * 100
    if today_volume > average_volume * params.volume_spike_multiplier:
        score = _apply(score, VOLUME_SPIKE_BONUS_PCT)

    if record.swap_count > FREQUENCY_FREE_SWAPS:
        frequency_pct = 100 + FREQUENCY_STEP_PCT * (record.swap_count - FREQUENCY_FREE_SWAPS)
        score = _apply(score, min(frequency_pct, FREQUENCY_CAP_PCT))

    size_floor = floor * SIZE_FLOOR_MULTIPLE
    if amount_in > size_floor:
        steps = min(amount_in // size_floor, SIZE_MAX_STEPS)
        score = _apply(score, 100 + SIZE_STEP_PCT * steps)

    if is_peak_hour(now):
        score = _apply(score, PEAK_HOUR_BONUS_PCT)

    return score


class MevScorer:
    """Read-only scorer bound to the hook state."""

    def __init__(self, state):
        self.state = state

    def score(self, pool: str, amount_in: int, now: int) -> int:
        record = self.state.swap_records.get(pool) or SwapTrackingRecord()
        if now - record.last_reset > TRACKING_WINDOW:
            # Counters from an elapsed window do not count toward today
            record = replace(record, swap_count=0, volume=0, last_reset=now)
        return calculate_mev_score(record, amount_in, now, self.state.params)

    def is_alert(self, pool: str, score: int) -> bool:
        return score > 0 and score >= self.state.pool_config(pool).alert_threshold
