"""
Per-pool temporary fee overrides.

Overrides are installed by auction settlement or by a signed fee
recommendation from an allow-listed oracle signer.
"""

import logging
from typing import Optional

from eth_account import Account
from eth_account.messages import encode_defunct
from hexbytes import HexBytes
from web3 import Web3

from .errors import (
    InvalidFeeError,
    InvalidNonceError,
    RecommendationError,
    RecommendationExpiredError,
    UnknownSignerError,
)
from .events import EventLog, FeeOverrideSet
from .state import HookState
from .types import MAX_FEE_BPS, FeeOverride

logger = logging.getLogger(__name__)

DEFAULT_CHAIN_ID = 31337


def recommendation_digest(
    pool: str, fee_bps: int, deadline: int, nonce: int, chain_id: int = DEFAULT_CHAIN_ID
) -> HexBytes:
    """Packed keccak of the fields an oracle signs."""
    return HexBytes(
        Web3.solidity_keccak(
            ["string", "uint256", "uint256", "uint256", "uint256"],
            [pool, fee_bps, deadline, nonce, chain_id],
        )
    )


def sign_recommendation(
    private_key: str,
    pool: str,
    fee_bps: int,
    deadline: int,
    nonce: int,
    chain_id: int = DEFAULT_CHAIN_ID,
) -> HexBytes:
    """Produce the personal-message signature an oracle submits."""
    digest = recommendation_digest(pool, fee_bps, deadline, nonce, chain_id)
    signed = Account.sign_message(encode_defunct(primitive=bytes(digest)), private_key=private_key)
    return HexBytes(signed.signature)


def recover_signer(
    pool: str,
    fee_bps: int,
    deadline: int,
    nonce: int,
    signature: bytes,
    chain_id: int = DEFAULT_CHAIN_ID,
) -> str:
    digest = recommendation_digest(pool, fee_bps, deadline, nonce, chain_id)
    try:
        return Account.recover_message(encode_defunct(primitive=bytes(digest)), signature=signature)
    except Exception as e:
        raise RecommendationError(f"Malformed signature: {e}") from e


def validate_fee(fee_bps: int):
    if fee_bps < 0 or fee_bps > MAX_FEE_BPS:
        raise InvalidFeeError(f"Fee {fee_bps} bps outside 0..{MAX_FEE_BPS}")


class FeeOverrideStore:
    """Reads and writes the per-pool fee override."""

    def __init__(self, state: HookState, events: EventLog, chain_id: int = DEFAULT_CHAIN_ID):
        self.state = state
        self.events = events
        self.chain_id = chain_id

    def active_fee(self, pool: str, now: int) -> Optional[int]:
        """Installed fee while the override lasts, else None."""
        override = self.state.fee_overrides.get(pool)
        if override is None or not override.is_active(now):
            return None
        return override.fee_bps

    def install(self, pool: str, fee_bps: int, now: int, source: str) -> FeeOverride:
        validate_fee(fee_bps)
        expiry = now + self.state.params.fee_override_duration
        override = FeeOverride(expiry=expiry, fee_bps=fee_bps)
        self.state.fee_overrides[pool] = override
        self.events.emit(FeeOverrideSet(pool=pool, fee_bps=fee_bps, expiry=expiry, source=source))
        logger.info(f"Fee override {fee_bps} bps installed for {pool} until {expiry} ({source})")
        return override

    def apply_recommendation(
        self,
        pool: str,
        fee_bps: int,
        deadline: int,
        nonce: int,
        signature: bytes,
        now: int,
    ) -> FeeOverride:
        """
        Verify a signed recommendation and install its fee.

        Raises:
            RecommendationExpiredError: past the deadline
            UnknownSignerError: signer is not an allow-listed oracle
            InvalidNonceError: nonce is not the signer's next nonce
        """
        validate_fee(fee_bps)
        if now > deadline:
            raise RecommendationExpiredError(f"Recommendation expired at {deadline}, now {now}")

        signer = recover_signer(pool, fee_bps, deadline, nonce, signature, self.chain_id)
        if signer not in self.state.oracle_signers:
            raise UnknownSignerError(f"{signer} is not an allowed oracle signer")

        expected = self.state.signer_nonces.get(signer, 0)
        if nonce != expected:
            raise InvalidNonceError(f"Expected nonce {expected} for {signer}, got {nonce}")
        self.state.signer_nonces[signer] = expected + 1

        return self.install(pool, fee_bps, now, source=f"oracle:{signer}")
