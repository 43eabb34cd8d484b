"""
NATS client utilities for the MEV alert network.

This module provides NATS messaging functionality with both basic
pub/sub and JetStream support for persistent messaging.
"""

from .client import NatsClient, NatsClientJS
from .json_helpers import dumps, loads

__all__ = ["NatsClient", "NatsClientJS", "dumps", "loads"]
