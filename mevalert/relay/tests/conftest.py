"""Test configuration for the relay."""
import pytest

from mevalert.core import ETHER, Ledger, ManualClock, MevAlertHook

OWNER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
ALICE = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
BOB = "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC"
POOL = "0x88e6a0c2ddd26feeb64f039a2c41296fcb3f5640"


@pytest.fixture
def accounts():
    return {"owner": OWNER, "alice": ALICE, "bob": BOB, "pool": POOL}


@pytest.fixture
def hook():
    """Funded hook with one registered pool."""
    ledger = Ledger()
    for account in (OWNER, ALICE, BOB):
        ledger.mint(account, 100 * ETHER)
    hook = MevAlertHook(owner=OWNER, ledger=ledger, clock=ManualClock(start=1_700_000_000))
    hook.register_pool(OWNER, POOL, 5 * ETHER)
    return hook
