"""
Per-pool insurance escrow.

Funded by direct deposits and by a share of auction proceeds; paid out to
claimants who commit to loss evidence. Evidence is recorded, not verified.
"""

import logging
from typing import Union

from eth_utils import encode_hex
from hexbytes import HexBytes

from .errors import (
    EmptyInsuranceFundError,
    InvalidEvidenceError,
    LossTooSmallError,
    ZeroAmountError,
)
from .events import (
    EventLog,
    InsuranceClaimed,
    InsuranceDeposit,
    InsuranceEmergencyWithdrawal,
    InsuranceTopUp,
)
from .ledger import Ledger
from .state import HookState

logger = logging.getLogger(__name__)

EvidenceHash = Union[bytes, str]


def parse_evidence(evidence_hash: EvidenceHash) -> HexBytes:
    """Validate a 32-byte, non-zero evidence commitment."""
    try:
        evidence = HexBytes(evidence_hash)
    except (TypeError, ValueError) as e:
        raise InvalidEvidenceError(f"Evidence is not a hash: {e}") from e
    if len(evidence) != 32:
        raise InvalidEvidenceError(f"Evidence must be 32 bytes, got {len(evidence)}")
    if not any(evidence):
        raise InvalidEvidenceError("Evidence hash is empty")
    return evidence


class InsuranceFund:
    """Bookkeeping and payouts for every pool's insurance balance."""

    def __init__(self, state: HookState, events: EventLog, ledger: Ledger, account: str):
        self.state = state
        self.events = events
        self.ledger = ledger
        self.account = account

    def balance(self, pool: str) -> int:
        return self.state.insurance_balance(pool)

    def _credit(self, pool: str, amount: int) -> int:
        new_total = self.state.insurance_funds.get(pool, 0) + amount
        self.state.insurance_funds[pool] = new_total
        return new_total

    def _debit(self, pool: str, amount: int) -> int:
        remaining = self.state.insurance_funds.get(pool, 0) - amount
        if remaining < 0:
            raise EmptyInsuranceFundError(f"Insurance fund for {pool} cannot cover {amount}")
        self.state.insurance_funds[pool] = remaining
        return remaining

    def deposit(self, depositor: str, pool: str, amount: int) -> int:
        self.state.require_registered(pool)
        if amount <= 0:
            raise ZeroAmountError("Deposit amount must be positive")

        new_total = self._credit(pool, amount)
        self.ledger.transfer(depositor, self.account, amount)
        self.events.emit(InsuranceDeposit(pool=pool, depositor=depositor, amount=amount, new_total=new_total))
        logger.info(f"Insurance deposit of {amount} for {pool}, fund now {new_total}")
        return new_total

    def top_up(self, pool: str, auction_id: int, amount: int) -> int:
        """Credit auction proceeds already held by the hook."""
        new_total = self._credit(pool, amount)
        self.events.emit(InsuranceTopUp(pool=pool, auction_id=auction_id, amount=amount, new_total=new_total))
        return new_total

    def claim(self, claimant: str, pool: str, loss_amount: int, evidence_hash: EvidenceHash) -> int:
        """
        Pay compensation for an evidenced loss.

        Returns:
            The compensation paid to ``claimant``
        """
        params = self.state.params
        self.state.require_registered(pool)
        if loss_amount < params.min_insurable_loss:
            raise LossTooSmallError(
                f"Loss {loss_amount} below minimum insurable loss {params.min_insurable_loss}"
            )
        evidence = parse_evidence(evidence_hash)

        fund = self.balance(pool)
        if fund <= 0:
            raise EmptyInsuranceFundError(f"Insurance fund for {pool} is empty")

        compensation = min(loss_amount * params.max_compensation_pct // 100, fund)
        if compensation <= 0:
            raise EmptyInsuranceFundError(f"No compensation available for loss {loss_amount}")

        self._debit(pool, compensation)
        record = self.state.claim_record(pool, claimant)
        record.total_compensation += compensation
        record.claims += 1
        record.evidence.append(encode_hex(evidence))

        self.ledger.transfer(self.account, claimant, compensation)
        self.events.emit(
            InsuranceClaimed(
                pool=pool,
                claimant=claimant,
                loss_amount=loss_amount,
                compensation=compensation,
                evidence_hash=encode_hex(evidence),
            )
        )
        logger.info(f"Insurance claim on {pool} by {claimant}: loss {loss_amount}, paid {compensation}")
        return compensation

    def emergency_withdraw(self, pool: str, amount: int, recipient: str) -> int:
        """Move up to ``amount`` out of a pool's fund; returns what was sent."""
        if amount <= 0:
            raise ZeroAmountError("Withdrawal amount must be positive")
        amount = min(amount, self.balance(pool))
        if amount == 0:
            raise EmptyInsuranceFundError(f"Insurance fund for {pool} is empty")

        remaining = self._debit(pool, amount)
        self.ledger.transfer(self.account, recipient, amount)
        self.events.emit(
            InsuranceEmergencyWithdrawal(pool=pool, recipient=recipient, amount=amount, remaining=remaining)
        )
        logger.warning(f"Emergency withdrawal of {amount} from {pool} insurance to {recipient}")
        return amount
