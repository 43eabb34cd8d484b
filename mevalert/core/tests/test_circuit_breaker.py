"""Tests for the emergency pause."""
import pytest

from mevalert.core.circuit_breaker import CircuitBreaker
from mevalert.core.errors import (
    AlreadyPausedError,
    EmergencyPausedError,
    NotPausedError,
    UnauthorizedError,
)
from mevalert.core.events import EmergencyPaused, EmergencyUnpaused, EventLog
from mevalert.core.state import HookState
from mevalert.core.types import ETHER

EVIDENCE = "0x" + "ab" * 32


class TestCircuitBreaker:
    """Test cases for CircuitBreaker on its own."""

    @pytest.fixture
    def breaker(self):
        return CircuitBreaker(HookState(), EventLog(), lambda caller: caller == "admin")

    def test_guard_when_running(self, breaker):
        """Test nothing is blocked while running."""
        breaker.guard("anyone")

    def test_guard_when_paused(self, breaker):
        """Test users are blocked and admins are not."""
        breaker.pause("incident", 100)
        with pytest.raises(EmergencyPausedError, match="incident"):
            breaker.guard("anyone")
        breaker.guard("admin")

    def test_pause_transitions(self, breaker):
        """Test pause and unpause only flip the flag once each."""
        breaker.pause("incident", 100)
        with pytest.raises(AlreadyPausedError):
            breaker.pause("again", 101)

        breaker.unpause(102)
        assert breaker.paused is False
        with pytest.raises(NotPausedError):
            breaker.unpause(103)

        breaker.events.commit()
        types = [type(event) for event in breaker.events.records]
        assert types == [EmergencyPaused, EmergencyUnpaused]


class TestHookPause:
    """Test cases for the pause as seen through the hook."""

    def test_pause_state(self, hook, owner, clock, committed):
        """Test pausing records the reason and time."""
        hook.pause(owner, "Demo: critical issue")

        state = hook.emergency_state()
        assert state.paused is True
        assert state.reason == "Demo: critical issue"
        assert state.timestamp == clock.now()
        assert isinstance(committed[-1], EmergencyPaused)

    def test_only_owner_pauses(self, hook, alice):
        """Test users cannot pause or unpause."""
        with pytest.raises(UnauthorizedError):
            hook.pause(alice, "griefing")
        with pytest.raises(UnauthorizedError):
            hook.unpause(alice)

    def test_user_operations_blocked(self, hook, owner, alice, pool):
        """Test every user entry point fails while paused."""
        auction_id = hook.start_auction(owner, pool, ETHER // 10, 300)
        hook.deposit_insurance(owner, pool, ETHER)
        hook.pause(owner, "incident")

        blocked = [
            lambda: hook.start_auction(alice, pool, ETHER // 10, 300),
            lambda: hook.place_bid(alice, pool, auction_id, ETHER),
            lambda: hook.deposit_insurance(alice, pool, ETHER),
            lambda: hook.claim_insurance(alice, pool, ETHER, EVIDENCE),
            lambda: hook.before_swap(owner, pool, alice),
            lambda: hook.after_swap(owner, pool, alice, -ETHER, ETHER),
            lambda: hook.record_swap(alice, pool, ETHER),
        ]
        for call in blocked:
            with pytest.raises(EmergencyPausedError):
                call()

    def test_owner_keeps_operating(self, hook, owner, pool):
        """Test the owner bypasses the pause, including admin setters."""
        hook.pause(owner, "incident")
        hook.set_alert_threshold(owner, pool, 7 * ETHER)
        auction_id = hook.start_auction(owner, pool, ETHER // 10, 300)

        assert hook.pool_config(pool).alert_threshold == 7 * ETHER
        assert hook.next_auction_id(pool) == auction_id + 1

    def test_unpause_restores_operations(self, hook, owner, alice, pool, committed):
        """Test users can act again after the pause lifts."""
        hook.pause(owner, "incident")
        hook.unpause(owner)

        assert hook.emergency_state().paused is False
        assert isinstance(committed[-1], EmergencyUnpaused)
        assert hook.start_auction(alice, pool, ETHER // 10, 60) == 0
