"""
Native value ledger and chain clock.

The ledger stands in for the host chain's balance bookkeeping. Accounts
are opaque strings; hex addresses are checksummed so the same account is
never tracked under two spellings.
"""

import logging
import time
from typing import Callable, Dict, Optional

from eth_utils import is_hex_address, to_checksum_address

from .errors import HookError, TransferFailedError, ZeroAmountError

logger = logging.getLogger(__name__)

ReceiveHook = Callable[[str, int], None]


def normalize_account(account: str) -> str:
    """Checksum hex addresses, leave other identities untouched."""
    if account is None:
        raise HookError("Account identity is required")
    if is_hex_address(account):
        return to_checksum_address(account)
    return str(account)


class SystemClock:
    """Wall-clock timestamps in whole seconds."""

    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """
    Clock driven explicitly by the caller.

    Time never moves backwards, like a chain's block timestamp.
    """

    def __init__(self, start: int = 0):
        self._now = int(start)

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError("Clock cannot move backwards")
        self._now += int(seconds)
        return self._now

    def set(self, timestamp: int) -> int:
        if timestamp < self._now:
            raise ValueError(f"Clock cannot move backwards from {self._now} to {timestamp}")
        self._now = int(timestamp)
        return self._now


class Ledger:
    """
    Balances of every account plus optional receive callbacks.

    A receive callback plays the part of a contract's fallback: it runs after
    value lands in the account and may raise to reject the transfer, or call
    back into the hook.
    """

    def __init__(self):
        self._balances: Dict[str, int] = {}
        self._receive_hooks: Dict[str, ReceiveHook] = {}

    def balance_of(self, account: str) -> int:
        return self._balances.get(normalize_account(account), 0)

    def mint(self, account: str, amount: int) -> int:
        """Credit new value to an account (genesis / faucet)."""
        if amount <= 0:
            raise ZeroAmountError("Mint amount must be positive")
        account = normalize_account(account)
        self._balances[account] = self._balances.get(account, 0) + amount
        return self._balances[account]

    def set_receive_hook(self, account: str, hook: Optional[ReceiveHook]):
        account = normalize_account(account)
        if hook is None:
            self._receive_hooks.pop(account, None)
        else:
            self._receive_hooks[account] = hook

    def transfer(self, sender: str, recipient: str, amount: int):
        """
        Move ``amount`` from ``sender`` to ``recipient``.

        Raises:
            TransferFailedError: if the sender cannot cover the amount or the
                recipient's receive callback rejects it. Balances already
                moved are left for the caller's transaction to roll back.
        """
        sender = normalize_account(sender)
        recipient = normalize_account(recipient)
        if amount < 0:
            raise TransferFailedError(sender, recipient, amount, "negative amount")
        if amount == 0:
            return

        available = self._balances.get(sender, 0)
        if available < amount:
            raise TransferFailedError(
                sender, recipient, amount, f"insufficient balance {available}"
            )

        self._balances[sender] = available - amount
        self._balances[recipient] = self._balances.get(recipient, 0) + amount
        logger.debug(f"Transferred {amount} from {sender} to {recipient}")

        receive_hook = self._receive_hooks.get(recipient)
        if receive_hook is not None:
            try:
                receive_hook(sender, amount)
            except Exception as e:
                raise TransferFailedError(sender, recipient, amount, str(e)) from e

    def snapshot(self) -> Dict[str, int]:
        return dict(self._balances)

    def restore(self, balances: Dict[str, int]):
        self._balances = dict(balances)
