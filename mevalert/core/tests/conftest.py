"""Test configuration for the hook core."""
import pytest

from mevalert.core import ETHER, Ledger, ManualClock, MevAlertHook

# 22:13 UTC, outside the peak-hour scoring window
START = 1_700_000_000
# 08:00 UTC on the same day
PEAK_TIME = 1_699_948_800


@pytest.fixture
def owner():
    return "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


@pytest.fixture
def alice():
    return "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"


@pytest.fixture
def bob():
    return "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC"


@pytest.fixture
def carol():
    return "0x90F79bf6EB2c4f870365E785982E1f101E93b906"


@pytest.fixture
def pool():
    return "0x88e6a0c2ddd26feeb64f039a2c41296fcb3f5640"


@pytest.fixture
def clock():
    return ManualClock(start=START)


@pytest.fixture
def ledger(owner, alice, bob, carol):
    ledger = Ledger()
    for account in (owner, alice, bob, carol):
        ledger.mint(account, 100 * ETHER)
    return ledger


@pytest.fixture
def hook(owner, ledger, clock, pool):
    """Hook with one registered pool alerting at 5 ETH of score."""
    hook = MevAlertHook(
        owner=owner,
        ledger=ledger,
        clock=clock,
        treasury="treasury",
        protocol="protocol",
    )
    hook.register_pool(owner, pool, 5 * ETHER)
    return hook


@pytest.fixture
def committed(hook):
    """Events delivered to subscribers, in commit order."""
    received = []
    hook.events.subscribe(received.append)
    return received
