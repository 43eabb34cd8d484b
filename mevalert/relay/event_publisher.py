"""
NATS publisher for committed hook events.

The publisher subscribes to a hook's event log and queues every committed
event. ``aflush`` sends the queue to JetStream on the event's subject,
``mevalert.<category>.<event_type>``.
"""

import asyncio
import logging
import time
from collections import deque
from typing import Any, Deque, Dict, Optional, Tuple, Union

from mevalert.config.nats_config import NatsConfig
from mevalert.core.events import HookEvent
from mevalert.utils.nats import NatsClient, NatsClientJS

logger = logging.getLogger(__name__)

QueuedMessage = Tuple[str, Dict[str, Any]]


def event_message(event: HookEvent) -> Dict[str, Any]:
    """Relay message for an event; events without a chain time are stamped now."""
    message = event.to_message()
    message.setdefault("timestamp", int(time.time()))
    return message


class HookEventPublisher:
    """
    Publisher for hook events to NATS/JetStream.

    This class handles publishing alerts, auction progress and insurance
    activity for consumption by notification bots and dashboards.
    """

    def __init__(
        self,
        env: str = "local",
        nats_client: Optional[Union[NatsClient, NatsClientJS]] = None,
        config: Optional[NatsConfig] = None,
    ):
        """
        Initialize the hook event publisher.

        Args:
            env: Environment to connect to (local, dev, production)
            nats_client: Pre-built client, mainly for tests
            config: NATS settings; read from the environment when omitted
        """
        config = config or NatsConfig()
        self.enabled = config.NATS_ENABLED
        self.jetstream = config.JETSTREAM_ENABLED
        self.stream_name = config.STREAM_NAME
        self.subjects = config.stream_subjects
        self.stream_limits = {
            key: config.jetstream_config[key] for key in ("no_ack", "max_age", "max_msgs")
        }
        client_cls = NatsClientJS if self.jetstream else NatsClient
        self.nats_client = nats_client or client_cls(
            env, url=config.get_nats_url(env), options=config.client_options
        )
        self.outbox: Deque[QueuedMessage] = deque()
        self._attached = []

    async def aconnect(self):
        """Connect to NATS and setup JetStream"""
        if not self.enabled:
            logger.info("NATS publishing disabled, hook events stay local")
            return
        await self.nats_client.aconnect()
        if self.jetstream:
            await self.nats_client.aregister_new_stream(self.stream_name, self.subjects, **self.stream_limits)
        logger.info("HookEventPublisher connected")

    def connect(self):
        """Connect to NATS and setup JetStream (synchronous wrapper)"""
        asyncio.run(self.aconnect())

    async def aclose(self):
        """Close NATS connection"""
        await self.nats_client.aclose()
        logger.info("HookEventPublisher connection closed")

    def close(self):
        """Close NATS connection (synchronous wrapper)"""
        asyncio.run(self.aclose())

    # Event log integration

    def attach(self, hook):
        """Queue every event the hook commits from now on."""
        hook.events.subscribe(self.enqueue)
        self._attached.append(hook)
        logger.info(f"Publishing events from hook {hook.address}")

    def detach(self, hook):
        hook.events.unsubscribe(self.enqueue)
        if hook in self._attached:
            self._attached.remove(hook)

    def enqueue(self, event: HookEvent):
        if not self.enabled:
            return
        self.outbox.append((event.subject, event_message(event)))

    @property
    def pending(self) -> int:
        return len(self.outbox)

    # Publishing

    async def apublish_event(self, event: HookEvent):
        """
        Publish a single hook event immediately.

        Args:
            event: Committed hook event
        """
        if not self.enabled:
            return
        await self.nats_client.apublish(event.subject, event_message(event))
        logger.debug(f"Published {event.event_type} to {event.subject}")

    def publish_event(self, event: HookEvent):
        """Publish a single hook event (synchronous wrapper)"""
        asyncio.run(self.apublish_event(event))

    async def aflush(self) -> int:
        """
        Publish every queued event in commit order.

        A failed publish leaves that message and everything after it queued.

        Returns:
            Number of messages published
        """
        published = 0
        while self.outbox:
            subject, message = self.outbox[0]
            await self.nats_client.apublish(subject, message)
            self.outbox.popleft()
            published += 1
        if published:
            logger.info(f"Published {published} hook events to NATS")
        return published

    def flush(self) -> int:
        """Publish every queued event (synchronous wrapper)"""
        return asyncio.run(self.aflush())
