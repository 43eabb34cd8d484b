"""
Global emergency pause.
"""

import logging
from typing import Callable

from .errors import AlreadyPausedError, EmergencyPausedError, NotPausedError
from .events import EmergencyPaused, EmergencyUnpaused, EventLog
from .state import HookState

logger = logging.getLogger(__name__)


class CircuitBreaker:
    """
    Kill-switch over every non-admin mutating entry point.

    ``is_admin`` is the capability check evaluated beside the pause flag; an
    admin keeps operating while everyone else is blocked.
    """

    def __init__(self, state: HookState, events: EventLog, is_admin: Callable[[str], bool]):
        self.state = state
        self.events = events
        self.is_admin = is_admin

    @property
    def paused(self) -> bool:
        return self.state.emergency.paused

    def guard(self, caller: str):
        """Raise unless the hook is running or the caller is an admin."""
        if self.state.emergency.paused and not self.is_admin(caller):
            raise EmergencyPausedError(self.state.emergency.reason)

    def pause(self, reason: str, now: int):
        emergency = self.state.emergency
        if emergency.paused:
            raise AlreadyPausedError(f"Hook already paused since {emergency.timestamp}")
        emergency.paused = True
        emergency.reason = reason
        emergency.timestamp = now
        self.events.emit(EmergencyPaused(timestamp=now, reason=reason))
        logger.warning(f"Emergency pause engaged: {reason}")

    def unpause(self, now: int):
        emergency = self.state.emergency
        if not emergency.paused:
            raise NotPausedError("Hook is not paused")
        emergency.paused = False
        emergency.reason = ""
        emergency.timestamp = now
        self.events.emit(EmergencyUnpaused(timestamp=now))
        logger.info("Emergency pause lifted")
