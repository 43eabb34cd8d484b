"""
Relay monitor for hook notifications.

Listens for alert and auction events, either on NATS subjects or directly
on an in-process hook's event log, and dispatches each message to a
handler. Handler failures are logged and never stop the monitor.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from mevalert.config.nats_config import NatsConfig
from mevalert.utils.nats import NatsClient

logger = logging.getLogger(__name__)

Message = Dict[str, Any]
Listener = Callable[[Message], None]

MONITORED_EVENTS = {
    "mev_alert": "alerts",
    "auction_started": "auctions",
    "bid_placed": "auctions",
    "auction_settled": "auctions",
}


class RelayMonitor:
    """
    Dispatches hook notifications to per-event handlers.

    Extra listeners registered with ``on`` run after the built-in handler for
    their event type, e.g. a chat bot forwarding alerts to its users.
    """

    def __init__(
        self,
        env: str = "local",
        nats_client: Optional[NatsClient] = None,
        config: Optional[NatsConfig] = None,
    ):
        self.config = config or NatsConfig()
        self.nats_client = nats_client or NatsClient(
            env, url=self.config.get_nats_url(env), options=self.config.client_options
        )
        self.handlers: Dict[str, Callable[[Message], None]] = {
            "mev_alert": self.handle_mev_alert,
            "auction_started": self.handle_auction_started,
            "bid_placed": self.handle_bid_placed,
            "auction_settled": self.handle_auction_settled,
        }
        self.listeners: Dict[str, List[Listener]] = {event_type: [] for event_type in self.handlers}
        self.subscriptions = []
        self._hooks = []

    @property
    def subjects(self) -> List[str]:
        return [
            self.config.get_event_subject(category, event_type)
            for event_type, category in MONITORED_EVENTS.items()
        ]

    def on(self, event_type: str, listener: Listener):
        if event_type not in self.listeners:
            raise ValueError(f"Unsupported event type: {event_type}")
        self.listeners[event_type].append(listener)

    # Dispatch

    def dispatch(self, message: Message) -> bool:
        """
        Route one decoded message to its handler and listeners.

        Returns:
            True when every callback succeeded, False otherwise
        """
        event_type = message.get("type")
        handler = self.handlers.get(event_type)
        if handler is None:
            logger.debug(f"Ignoring unmonitored event type {event_type}")
            return True

        ok = True
        for callback in [handler, *self.listeners[event_type]]:
            try:
                callback(message)
            except Exception:
                logger.exception(f"Handler failed for {event_type} message")
                ok = False
        return ok

    def handle_mev_alert(self, message: Message):
        logger.warning(f"MEV Alert: Pool {message['pool']}, Score {message['mev_score']}")

    def handle_auction_started(self, message: Message):
        logger.info(
            f"Auction Started: Pool {message['pool']}, ID {message['auction_id']}, "
            f"min bid {message['min_bid']}, ends at {message['end_time']}"
        )

    def handle_bid_placed(self, message: Message):
        logger.info(
            f"Bid Placed: Pool {message['pool']}, ID {message['auction_id']}, "
            f"Bidder {message['bidder']}, Amount {message['bid_amount']}"
        )

    def handle_auction_settled(self, message: Message):
        logger.info(
            f"Auction Settled: Pool {message['pool']}, ID {message['auction_id']}, "
            f"Winner {message['winner']}, fee {message['final_fee_bps']} bps"
        )

    # NATS monitoring

    async def astart_monitoring(self):
        """Subscribe to every monitored subject"""
        if not self.config.NATS_ENABLED:
            logger.info("NATS disabled, monitoring in-process hooks only")
            return
        logger.info("Starting hook event monitoring")
        if not self.nats_client.is_connected:
            await self.nats_client.aconnect()
        for subject in self.subjects:
            subscription = await self.nats_client.asubscribe(subject, self.dispatch)
            self.subscriptions.append(subscription)

    async def astop_monitoring(self):
        """Drop every subscription"""
        for subscription in self.subscriptions:
            await self.nats_client.aunsubscribe(subscription)
        self.subscriptions = []
        logger.info("Stopped hook event monitoring")

    # In-process monitoring

    def attach(self, hook):
        """Receive a hook's committed events without going through NATS."""
        hook.events.subscribe(self._on_event)
        self._hooks.append(hook)

    def detach(self, hook):
        hook.events.unsubscribe(self._on_event)
        if hook in self._hooks:
            self._hooks.remove(hook)

    def _on_event(self, event):
        self.dispatch(event.to_message())
