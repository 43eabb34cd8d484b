"""
Keyed state store owned by the hook.

Holds every per-pool map plus the global emergency state. Components read
and write through the accessors here; nothing else keeps hook state.
"""

import copy
from typing import Any, Dict, List, Optional, Set, Tuple

from .errors import AuctionNotFoundError, PoolNotRegisteredError
from .types import (
    Auction,
    ClaimRecord,
    EmergencyState,
    FeeOverride,
    HookParameters,
    PoolConfig,
    SwapTrackingRecord,
)

GLOBAL_FIELDS = ("params", "emergency", "oracle_signers", "signer_nonces")
POOL_FIELDS = ("pools", "swap_records", "auctions", "fee_overrides", "insurance_funds")


class HookState:
    """All mutable hook state, snapshot-able per pool."""

    def __init__(self, params: Optional[HookParameters] = None):
        self.params: HookParameters = params or HookParameters()
        self.pools: Dict[str, PoolConfig] = {}
        self.swap_records: Dict[str, SwapTrackingRecord] = {}
        self.auctions: Dict[str, List[Auction]] = {}
        self.fee_overrides: Dict[str, FeeOverride] = {}
        self.insurance_funds: Dict[str, int] = {}
        self.claim_history: Dict[Tuple[str, str], ClaimRecord] = {}
        self.emergency = EmergencyState()
        self.oracle_signers: Set[str] = set()
        self.signer_nonces: Dict[str, int] = {}

    # Pools

    def pool_config(self, pool: str) -> PoolConfig:
        return self.pools.get(pool) or PoolConfig()

    def is_registered(self, pool: str) -> bool:
        return self.pool_config(pool).allowed

    def require_registered(self, pool: str):
        if not self.is_registered(pool):
            raise PoolNotRegisteredError(pool)

    # Swap tracking

    def swap_record(self, pool: str) -> SwapTrackingRecord:
        if pool not in self.swap_records:
            self.swap_records[pool] = SwapTrackingRecord()
        return self.swap_records[pool]

    # Auctions

    def pool_auctions(self, pool: str) -> List[Auction]:
        return self.auctions.setdefault(pool, [])

    def next_auction_id(self, pool: str) -> int:
        return len(self.auctions.get(pool, []))

    def add_auction(self, pool: str, auction: Auction) -> int:
        auctions = self.pool_auctions(pool)
        auctions.append(auction)
        return len(auctions) - 1

    def get_auction(self, pool: str, auction_id: int) -> Auction:
        auctions = self.auctions.get(pool, [])
        if auction_id < 0 or auction_id >= len(auctions):
            raise AuctionNotFoundError(pool, auction_id)
        return auctions[auction_id]

    def escrowed_total(self) -> int:
        """Raw bids held for leaders of auctions not yet settled."""
        return sum(
            auction.highest_bid
            for auctions in self.auctions.values()
            for auction in auctions
            if not auction.settled and auction.highest_bidder is not None
        )

    # Fee overrides

    def fee_override(self, pool: str) -> FeeOverride:
        return self.fee_overrides.get(pool) or FeeOverride()

    # Insurance

    def insurance_balance(self, pool: str) -> int:
        return self.insurance_funds.get(pool, 0)

    def insurance_total(self) -> int:
        return sum(self.insurance_funds.values())

    def claim_record(self, pool: str, claimant: str) -> ClaimRecord:
        key = (pool, claimant)
        if key not in self.claim_history:
            self.claim_history[key] = ClaimRecord()
        return self.claim_history[key]

    # Snapshots

    def snapshot(self, pool: Optional[str] = None) -> "StateSnapshot":
        """
        Copy of the global fields, plus one pool's entries when ``pool`` is given.

        Pool-scoped calls never write to other pools, so a transaction only
        needs the pools it touches. Settled auctions never change again and
        are shared rather than copied.
        """
        snapshot = StateSnapshot({name: copy.deepcopy(getattr(self, name)) for name in GLOBAL_FIELDS})
        if pool is not None:
            self.cover(snapshot, pool)
        return snapshot

    def cover(self, snapshot: "StateSnapshot", pool: str):
        """Add a pool's current entries to a snapshot that does not hold it yet."""
        if pool in snapshot.pools:
            return
        snapshot.pools[pool] = {
            name: _copy_entry(name, getattr(self, name)[pool])
            for name in POOL_FIELDS
            if pool in getattr(self, name)
        }
        snapshot.claims[pool] = {
            key: copy.deepcopy(record) for key, record in self.claim_history.items() if key[0] == pool
        }

    def restore(self, snapshot: "StateSnapshot"):
        for name, value in snapshot.fields.items():
            setattr(self, name, value)

        for pool, entries in snapshot.pools.items():
            for name in POOL_FIELDS:
                mapping = getattr(self, name)
                if name in entries:
                    mapping[pool] = entries[name]
                else:
                    mapping.pop(pool, None)

            for key in [key for key in self.claim_history if key[0] == pool]:
                del self.claim_history[key]
            self.claim_history.update(snapshot.claims[pool])


class StateSnapshot:
    """Saved global fields and per-pool entries; restored at most once."""

    def __init__(self, fields: Dict[str, Any]):
        self.fields = fields
        self.pools: Dict[str, Dict[str, Any]] = {}
        self.claims: Dict[str, Dict[Tuple[str, str], ClaimRecord]] = {}


def _copy_entry(name: str, value: Any) -> Any:
    if name == "auctions":
        return [auction if auction.settled else copy.deepcopy(auction) for auction in value]
    return copy.deepcopy(value)
