"""
Off-chain notification relay for the MEV alert hook.

Example:
    from mevalert.relay import HookEventPublisher, RelayMonitor

    publisher = HookEventPublisher("local")
    publisher.attach(hook)
    await publisher.aconnect()
    await publisher.aflush()
"""

from .event_publisher import HookEventPublisher, event_message
from .monitor import RelayMonitor
from .queries import AuctionInfo, HookQueries

__all__ = ["AuctionInfo", "HookEventPublisher", "HookQueries", "RelayMonitor", "event_message"]
