"""
The MEV alert hook: single entry point for the swap venue, bidders,
insurance users and the owner.

Every public mutating method runs as one transaction. Hook state, ledger
balances and staged events are snapshotted on entry; any exception restores
them and propagates, so a failed call leaves no trace. Events reach
subscribers only after the outermost call commits.

``place_bid``, ``finalize_auction`` and ``claim_insurance`` run entirely
inside a non-reentrant section, since they pay out to arbitrary accounts.
"""

import functools
import inspect
import logging
from contextlib import contextmanager
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional, Union

from eth_abi import encode
from eth_utils import encode_hex, keccak

from .auction import AuctionEngine, PayoutSplit
from .circuit_breaker import CircuitBreaker
from .errors import (
    InsufficientFeesError,
    InvalidParameterError,
    NotPausedError,
    ReentrantCallError,
    UnauthorizedError,
    UnauthorizedVenueError,
    ZeroAmountError,
)
from .events import EventLog, FeesWithdrawn, MevAlert, SwapObserved
from .fee_override import DEFAULT_CHAIN_ID, FeeOverrideStore, validate_fee
from .insurance import EvidenceHash, InsuranceFund
from .ledger import Ledger, ManualClock, SystemClock, normalize_account
from .scoring import MevScorer
from .state import HookState, StateSnapshot
from .tracker import SwapTracker
from .types import (
    Auction,
    ClaimRecord,
    EmergencyState,
    FeeOverride,
    HookParameters,
    PoolConfig,
    SwapDeltas,
    SwapTrackingRecord,
)

logger = logging.getLogger(__name__)

Clock = Union[ManualClock, SystemClock]


class ReentrancyGuard:
    """Flag held for the whole body of a payable entry point."""

    def __init__(self):
        self.locked = False

    def __enter__(self):
        if self.locked:
            raise ReentrantCallError("Re-entrant call rejected")
        self.locked = True
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.locked = False
        return False


def entrypoint(nonreentrant: bool = False) -> Callable:
    """Run a hook method as a single all-or-nothing transaction."""

    def decorator(method: Callable) -> Callable:
        signature = inspect.signature(method)
        pool_scoped = "pool" in signature.parameters

        @functools.wraps(method)
        def wrapper(self: "MevAlertHook", caller: str, *args, **kwargs):
            caller = normalize_account(caller)
            pool = None
            if pool_scoped:
                pool = signature.bind(self, caller, *args, **kwargs).arguments["pool"]
            if nonreentrant:
                with self._reentrancy_guard, self._transaction(pool):
                    return method(self, caller, *args, **kwargs)
            with self._transaction(pool):
                return method(self, caller, *args, **kwargs)

        return wrapper

    return decorator


class MevAlertHook:
    """
    MEV mitigation hook attached to a swap venue.

    Args:
        owner: Admin identity; bypasses the circuit breaker
        ledger: Native value ledger shared with every other account
        clock: Source of the chain timestamp
        address: The hook's own account on the ledger
        params: Initial tunable parameters
        treasury: Receives the treasury share of auction proceeds
        protocol: Receives the protocol share of auction proceeds
        venue: When set, only this caller may invoke the swap hooks
        chain_id: Bound into signed fee recommendations
    """

    def __init__(
        self,
        owner: str,
        ledger: Optional[Ledger] = None,
        clock: Optional[Clock] = None,
        address: str = "mev-alert-hook",
        params: Optional[HookParameters] = None,
        treasury: Optional[str] = None,
        protocol: Optional[str] = None,
        venue: Optional[str] = None,
        chain_id: int = DEFAULT_CHAIN_ID,
    ):
        self.owner = normalize_account(owner)
        self.address = normalize_account(address)
        self.ledger = ledger or Ledger()
        self.clock = clock or SystemClock()
        self.treasury = normalize_account(treasury) if treasury else self.owner
        self.protocol = normalize_account(protocol) if protocol else self.owner
        self.venue = normalize_account(venue) if venue else None
        self.chain_id = chain_id

        self.state = HookState(params)
        self.events = EventLog()
        self._reentrancy_guard = ReentrancyGuard()
        self._snapshots: List[StateSnapshot] = []

        self.tracker = SwapTracker(self.state)
        self.scorer = MevScorer(self.state)
        self.circuit_breaker = CircuitBreaker(self.state, self.events, self.is_admin)
        self.fee_overrides = FeeOverrideStore(self.state, self.events, chain_id)
        self.insurance = InsuranceFund(self.state, self.events, self.ledger, self.address)
        self.auctions = AuctionEngine(
            self.state, self.events, self.ledger, self.address, self.fee_overrides, self.insurance
        )

        logger.info(f"MEV alert hook {self.address} deployed, owner {self.owner}")

    # Transactions

    @contextmanager
    def _transaction(self, pool: Optional[str] = None):
        state_snapshot = self.state.snapshot(pool)
        if pool is not None:
            # Enclosing calls may roll back a pool they did not touch themselves
            for outer in self._snapshots:
                self.state.cover(outer, pool)
        balances = self.ledger.snapshot()
        mark = self.events.mark()
        self._snapshots.append(state_snapshot)
        try:
            yield
        except Exception as e:
            self.state.restore(state_snapshot)
            self.ledger.restore(balances)
            self.events.rollback_to(mark)
            logger.debug(f"Call reverted: {e}")
            raise
        finally:
            self._snapshots.pop()
        if not self._snapshots:
            self.events.commit()

    def now(self) -> int:
        return self.clock.now()

    def is_admin(self, caller: str) -> bool:
        return normalize_account(caller) == self.owner

    def _require_owner(self, caller: str, action: str):
        if not self.is_admin(caller):
            raise UnauthorizedError(caller, action)

    # Swap venue hooks

    def _require_venue(self, caller: str):
        if self.venue is not None and caller != self.venue:
            raise UnauthorizedVenueError(f"{caller} is not the swap venue")

    @entrypoint()
    def before_swap(self, caller: str, pool: str, trader: str) -> Optional[int]:
        """Fee override to apply to the coming trade, or None."""
        self._require_venue(caller)
        self.circuit_breaker.guard(normalize_account(trader))
        self.state.require_registered(pool)
        return self.fee_overrides.active_fee(pool, self.now())

    @entrypoint()
    def after_swap(
        self, caller: str, pool: str, trader: str, amount0_delta: int, amount1_delta: int
    ) -> int:
        """
        Track and score a completed trade.

        Deltas are signed from the trader's side; the negative one is what the
        trader paid in.

        Returns:
            The trade's MEV score
        """
        self._require_venue(caller)
        deltas = SwapDeltas.from_signed(amount0_delta, amount1_delta)
        return self._observe_swap(pool, normalize_account(trader), deltas)

    @entrypoint()
    def record_swap(self, caller: str, pool: str, amount_in: int) -> int:
        """Report a trade by its input amount alone; returns its score."""
        self._require_venue(caller)
        return self._observe_swap(pool, caller, SwapDeltas(amount_in=amount_in))

    def _observe_swap(self, pool: str, trader: str, deltas: SwapDeltas) -> int:
        # Scored against the record as it stood before this trade
        self.circuit_breaker.guard(trader)
        self.state.require_registered(pool)

        now = self.now()
        score = self.scorer.score(pool, deltas.amount_in, now)
        self.tracker.record_swap(pool, deltas.amount_in, now)

        self.events.emit(
            SwapObserved(
                pool=pool,
                trader=trader,
                amount_in=deltas.amount_in,
                amount_out=deltas.amount_out,
                timestamp=now,
            )
        )
        if self.scorer.is_alert(pool, score):
            self._emit_alert(pool, deltas.amount_in, score, now)
        return score

    def _emit_alert(self, pool: str, amount_in: int, score: int, now: int):
        metadata_hash = encode_hex(
            keccak(encode(["string", "uint256", "uint256", "uint256"], [pool, amount_in, score, now]))
        )
        self.events.emit(MevAlert(pool=pool, mev_score=score, timestamp=now, metadata_hash=metadata_hash))
        logger.warning(f"MEV alert on {pool}: score {score}")

    # Auctions

    @entrypoint()
    def start_auction(self, caller: str, pool: str, min_bid: int, duration_secs: int) -> int:
        self.circuit_breaker.guard(caller)
        if self.state.params.auction_owner_only:
            self._require_owner(caller, "start auctions")
        return self.auctions.start_auction(pool, min_bid, duration_secs, self.now())

    @entrypoint(nonreentrant=True)
    def place_bid(self, caller: str, pool: str, auction_id: int, amount: int) -> int:
        """Bid ``amount`` of the caller's native balance; returns the effective bid."""
        self.circuit_breaker.guard(caller)
        return self.auctions.place_bid(caller, pool, auction_id, amount, self.now())

    @entrypoint(nonreentrant=True)
    def finalize_auction(self, caller: str, pool: str, auction_id: int) -> Optional[PayoutSplit]:
        self.circuit_breaker.guard(caller)
        return self.auctions.finalize_auction(
            pool, auction_id, self.now(), self.treasury, self.protocol
        )

    # Insurance

    @entrypoint()
    def deposit_insurance(self, caller: str, pool: str, amount: int) -> int:
        self.circuit_breaker.guard(caller)
        return self.insurance.deposit(caller, pool, amount)

    @entrypoint(nonreentrant=True)
    def claim_insurance(
        self, caller: str, pool: str, loss_amount: int, evidence_hash: EvidenceHash
    ) -> int:
        self.circuit_breaker.guard(caller)
        return self.insurance.claim(caller, pool, loss_amount, evidence_hash)

    @entrypoint(nonreentrant=True)
    def emergency_withdraw_insurance(
        self, caller: str, pool: str, amount: int, recipient: str
    ) -> int:
        self._require_owner(caller, "withdraw insurance")
        if not self.circuit_breaker.paused:
            raise NotPausedError("Emergency withdrawal requires the hook to be paused")
        return self.insurance.emergency_withdraw(pool, amount, normalize_account(recipient))

    # Circuit breaker

    @entrypoint()
    def pause(self, caller: str, reason: str):
        self._require_owner(caller, "pause")
        self.circuit_breaker.pause(reason, self.now())

    @entrypoint()
    def unpause(self, caller: str):
        self._require_owner(caller, "unpause")
        self.circuit_breaker.unpause(self.now())

    # Fee overrides

    @entrypoint()
    def submit_fee_recommendation(
        self,
        caller: str,
        pool: str,
        fee_bps: int,
        deadline: int,
        nonce: int,
        signature: bytes,
    ) -> FeeOverride:
        self._require_owner(caller, "submit fee recommendations")
        self.state.require_registered(pool)
        return self.fee_overrides.apply_recommendation(
            pool, fee_bps, deadline, nonce, signature, self.now()
        )

    # Administration

    @entrypoint()
    def register_pool(self, caller: str, pool: str, alert_threshold: int):
        self._require_owner(caller, "register pools")
        if alert_threshold < 0:
            raise InvalidParameterError("Alert threshold cannot be negative")
        self.state.pools[pool] = PoolConfig(allowed=True, alert_threshold=alert_threshold)
        logger.info(f"Pool {pool} registered with alert threshold {alert_threshold}")

    @entrypoint()
    def set_pool_allowed(self, caller: str, pool: str, allowed: bool):
        self._require_owner(caller, "change the pool allow-list")
        config = self.state.pools.setdefault(pool, PoolConfig())
        config.allowed = allowed

    @entrypoint()
    def set_alert_threshold(self, caller: str, pool: str, threshold: int):
        self._require_owner(caller, "set alert thresholds")
        if threshold < 0:
            raise InvalidParameterError("Alert threshold cannot be negative")
        self.state.require_registered(pool)
        self.state.pools[pool].alert_threshold = threshold

    @entrypoint()
    def set_scoring_params(
        self,
        caller: str,
        rapid_swap_window: int,
        volume_spike_multiplier: int,
        consecutive_swap_bonus_pct: int,
    ):
        self._require_owner(caller, "set scoring parameters")
        if rapid_swap_window < 0 or volume_spike_multiplier <= 0 or consecutive_swap_bonus_pct < 100:
            raise InvalidParameterError("Scoring parameters out of range")
        params = self.state.params
        params.rapid_swap_window = rapid_swap_window
        params.volume_spike_multiplier = volume_spike_multiplier
        params.consecutive_swap_bonus_pct = consecutive_swap_bonus_pct

    @entrypoint()
    def set_large_swap_threshold(self, caller: str, amount: int):
        self._require_owner(caller, "set the large swap threshold")
        if amount <= 0:
            raise InvalidParameterError("Large swap threshold must be positive")
        self.state.params.large_swap_threshold = amount

    @entrypoint()
    def set_auction_policy(
        self, caller: str, owner_only: bool, default_fee_bps: int, override_duration: int
    ):
        self._require_owner(caller, "set auction policy")
        validate_fee(default_fee_bps)
        if override_duration <= 0:
            raise InvalidParameterError("Override duration must be positive")
        params = self.state.params
        params.auction_owner_only = owner_only
        params.default_fee_bps = default_fee_bps
        params.fee_override_duration = override_duration

    @entrypoint()
    def set_treasury(self, caller: str, treasury: str):
        self._require_owner(caller, "set the treasury")
        self.treasury = normalize_account(treasury)

    @entrypoint()
    def set_protocol_address(self, caller: str, protocol: str):
        self._require_owner(caller, "set the protocol address")
        self.protocol = normalize_account(protocol)

    @entrypoint()
    def set_max_time_bonus(self, caller: str, max_bonus_pct: int):
        self._require_owner(caller, "set the time bonus")
        if max_bonus_pct < 0 or max_bonus_pct > 100:
            raise InvalidParameterError("Time bonus must be within 0..100 percent")
        self.state.params.max_time_bonus_pct = max_bonus_pct

    @entrypoint()
    def set_insurance_params(self, caller: str, max_compensation_pct: int, min_insurable_loss: int):
        self._require_owner(caller, "set insurance parameters")
        if max_compensation_pct <= 0 or max_compensation_pct > 100 or min_insurable_loss < 0:
            raise InvalidParameterError("Insurance parameters out of range")
        self.state.params.max_compensation_pct = max_compensation_pct
        self.state.params.min_insurable_loss = min_insurable_loss

    @entrypoint()
    def add_oracle_signer(self, caller: str, signer: str):
        self._require_owner(caller, "add oracle signers")
        self.state.oracle_signers.add(normalize_account(signer))

    @entrypoint()
    def remove_oracle_signer(self, caller: str, signer: str):
        self._require_owner(caller, "remove oracle signers")
        self.state.oracle_signers.discard(normalize_account(signer))

    @entrypoint(nonreentrant=True)
    def withdraw_fees(self, caller: str, recipient: str, amount: int) -> int:
        """Withdraw hook balance that no auction escrow or insurance fund owns."""
        self._require_owner(caller, "withdraw fees")
        if amount <= 0:
            raise ZeroAmountError("Withdrawal amount must be positive")
        available = self.withdrawable_fees()
        if amount > available:
            raise InsufficientFeesError(f"Requested {amount}, only {available} withdrawable")
        recipient = normalize_account(recipient)
        self.ledger.transfer(self.address, recipient, amount)
        self.events.emit(FeesWithdrawn(recipient=recipient, amount=amount))
        return amount

    @entrypoint()
    def trigger_alert(self, caller: str, pool: str):
        """Raise a manual MEV alert at the pool's threshold score."""
        self._require_owner(caller, "trigger alerts")
        self.state.require_registered(pool)
        threshold = self.state.pool_config(pool).alert_threshold
        self._emit_alert(pool, 0, threshold, self.now())

    # Read accessors

    def pool_config(self, pool: str) -> PoolConfig:
        return replace(self.state.pool_config(pool))

    def swap_record(self, pool: str) -> SwapTrackingRecord:
        return replace(self.state.swap_records.get(pool) or SwapTrackingRecord())

    def score(self, pool: str, amount_in: int) -> int:
        return self.scorer.score(pool, amount_in, self.now())

    def auction(self, pool: str, auction_id: int) -> Auction:
        return replace(self.state.get_auction(pool, auction_id))

    def next_auction_id(self, pool: str) -> int:
        return self.state.next_auction_id(pool)

    def effective_bid(self, pool: str, auction_id: int, amount: int) -> int:
        return self.auctions.quote(pool, auction_id, amount, self.now())[0]

    def insurance_fund(self, pool: str) -> int:
        return self.state.insurance_balance(pool)

    def claim_history(self, pool: str, claimant: str) -> ClaimRecord:
        record = self.state.claim_history.get((pool, normalize_account(claimant))) or ClaimRecord()
        return replace(record, evidence=list(record.evidence))

    def fee_override(self, pool: str) -> FeeOverride:
        return replace(self.state.fee_override(pool))

    def active_fee(self, pool: str) -> Optional[int]:
        return self.fee_overrides.active_fee(pool, self.now())

    def emergency_state(self) -> EmergencyState:
        return replace(self.state.emergency)

    @property
    def params(self) -> HookParameters:
        return self.state.params

    def escrowed_balance(self) -> int:
        return self.state.escrowed_total()

    def withdrawable_fees(self) -> int:
        held = self.state.escrowed_total() + self.state.insurance_total()
        return max(0, self.ledger.balance_of(self.address) - held)

    def signer_nonce(self, signer: str) -> int:
        return self.state.signer_nonces.get(normalize_account(signer), 0)

    def oracle_signers(self) -> List[str]:
        return sorted(self.state.oracle_signers)

    def to_dict(self) -> Dict[str, Any]:
        """Summary of the hook's configuration."""
        return {
            "address": self.address,
            "owner": self.owner,
            "treasury": self.treasury,
            "protocol": self.protocol,
            "venue": self.venue,
            "chain_id": self.chain_id,
            "paused": self.state.emergency.paused,
            "pools": sorted(pool for pool, cfg in self.state.pools.items() if cfg.allowed),
        }
