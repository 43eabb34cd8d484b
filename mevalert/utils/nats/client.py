import functools
import logging
from typing import Any, Callable, Dict, List, Optional

import nats
from nats.aio.client import Client as NATS
from nats.aio.subscription import Msg, Subscription
from nats.js.client import JetStreamContext
from nats.js.errors import NotFoundError

from mevalert.config.nats_config import NatsConfig

from .json_helpers import dumps, loads

logger = logging.getLogger(__name__)


class NatsClient:
    """
    Core NATS connection carrying JSON-encoded hook messages.
    Methods starting with 'a' execute asynchronously.
    """

    def __init__(self, env: str = "local", url: Optional[str] = None, options: Optional[Dict[str, Any]] = None):
        self.url = url or NatsConfig().get_nats_url(env)
        self.options = options or {}
        self.nc: Optional[NATS] = None

    @property
    def is_connected(self) -> bool:
        return self.nc is not None and self.nc.is_connected

    async def aconnect(self):
        """Connect to the NATS server"""
        logger.info(f"Connecting to NATS at {self.url}")
        self.nc = await nats.connect(servers=[self.url], **self.options)
        logger.info(f"Connected to NATS at {self.url}")

    async def aclose(self):
        """Close the connection"""
        if self.nc:
            await self.nc.close()
            self.nc = None

    async def apublish(self, subject: str, msg: Any):
        """Publish one message on a core NATS subject"""
        if not self.nc:
            raise ConnectionError("Not connected to NATS server")
        await self.nc.publish(subject, dumps(msg).encode())

    async def asubscribe(self, subject: str, callback_hdlr: Callable[[Any], None]) -> Subscription:
        """Subscribe to a subject; the handler receives decoded messages"""
        if not self.nc:
            raise ConnectionError("Not connected to NATS server")
        wrapped_callback = functools.partial(self.subscribe_cb_wrapper, callback_hdlr=callback_hdlr)
        return await self.nc.subscribe(subject, cb=wrapped_callback)

    async def aunsubscribe(self, sub: Subscription):
        await sub.unsubscribe()

    async def subscribe_cb_wrapper(self, msg: Msg, callback_hdlr: Callable[[Any], None]):
        """Decode a raw NATS message before handing it to the handler"""
        callback_hdlr(loads(msg.data.decode()))


class NatsClientJS(NatsClient):
    """
    NATS client publishing through JetStream, so hook events persist in a
    stream until consumers read them.
    """

    def __init__(self, env: str = "local", url: Optional[str] = None, options: Optional[Dict[str, Any]] = None):
        super().__init__(env, url, options)
        self.js: Optional[JetStreamContext] = None

    async def aconnect(self):
        """Connect to NATS and initialize the JetStream context"""
        await super().aconnect()
        self.js = self.nc.jetstream()
        logger.info("JetStream context initialized")

    async def _stream_exists(self, stream_name: str) -> bool:
        try:
            await self.js.stream_info(stream_name)
            return True
        except NotFoundError:
            return False

    async def aregister_new_stream(self, stream_name: str, subjects: List[str], no_ack: bool = True, **limits):
        """Create the stream unless it already exists; ``limits`` go to the stream config"""
        if await self._stream_exists(stream_name):
            logger.debug(f"Stream {stream_name} already registered")
            return
        await self.js.add_stream(name=stream_name, subjects=subjects, no_ack=no_ack, **limits)
        logger.info(f"Registered stream: {stream_name} with subjects: {subjects}")

    async def apublish(self, subject: str, msg: Any):
        """Publish one message to JetStream"""
        if not self.js:
            raise ConnectionError("JetStream not initialized")
        await self.js.publish(subject, dumps(msg).encode())
