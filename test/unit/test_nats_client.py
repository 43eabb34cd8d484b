"""
Unit tests for the NATS client wrappers.
"""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from nats.js.errors import NotFoundError

from mevalert.core.types import ETHER
from mevalert.utils.nats import NatsClient, NatsClientJS


class TestNatsClient:
    """Test cases for the core NATS client."""

    def test_url_from_environment(self):
        """Test the server URL comes from the NATS config."""
        client = NatsClient("local")
        assert client.url.startswith("nats://")
        assert client.is_connected is False

    async def test_aconnect_passes_options(self):
        """Test connection options reach nats.connect."""
        client = NatsClient("local", url="nats://example:4222", options={"max_reconnect_attempts": 3})

        with patch("nats.connect", new=AsyncMock()) as mock_connect:
            await client.aconnect()

        mock_connect.assert_called_once_with(servers=["nats://example:4222"], max_reconnect_attempts=3)
        assert client.nc is mock_connect.return_value

    async def test_apublish_requires_connection(self):
        """Test publishing before connecting fails loudly."""
        client = NatsClient("local")
        with pytest.raises(ConnectionError):
            await client.apublish("mevalert.alerts.mev_alert", {"type": "mev_alert"})

    async def test_apublish_encodes_json(self):
        """Test messages are sent as UTF-8 JSON."""
        client = NatsClient("local")
        client.nc = AsyncMock()

        await client.apublish("mevalert.alerts.mev_alert", {"mev_score": 12 * ETHER})

        subject, payload = client.nc.publish.call_args[0]
        assert subject == "mevalert.alerts.mev_alert"
        assert json.loads(payload.decode()) == {"mev_score": 12 * ETHER}

    async def test_subscribe_callback_decodes(self):
        """Test handlers receive decoded messages."""
        received = []
        client = NatsClient("local")
        msg = MagicMock()
        msg.data = b'{"type": "bid_placed", "bid_amount": 1}'

        await client.subscribe_cb_wrapper(msg, callback_hdlr=received.append)

        assert received == [{"type": "bid_placed", "bid_amount": 1}]

    async def test_aclose(self):
        """Test closing drops the connection."""
        client = NatsClient("local")
        nc = AsyncMock()
        client.nc = nc

        await client.aclose()

        nc.close.assert_called_once()
        assert client.nc is None


class TestNatsClientJS:
    """Test cases for the JetStream client."""

    async def test_apublish_requires_jetstream(self):
        """Test JetStream publishing before connecting fails loudly."""
        client = NatsClientJS("local")
        with pytest.raises(ConnectionError):
            await client.apublish("mevalert.alerts.mev_alert", {})

    async def test_register_new_stream(self):
        """Test a missing stream is created with its limits."""
        client = NatsClientJS("local")
        client.js = AsyncMock()
        client.js.stream_info.side_effect = NotFoundError()

        await client.aregister_new_stream("MEV_ALERTS", ["mevalert.alerts.*"], no_ack=False, max_msgs=10)

        client.js.add_stream.assert_called_once_with(
            name="MEV_ALERTS", subjects=["mevalert.alerts.*"], no_ack=False, max_msgs=10
        )

    async def test_existing_stream_left_alone(self):
        """Test an existing stream is not recreated."""
        client = NatsClientJS("local")
        client.js = AsyncMock()

        await client.aregister_new_stream("MEV_ALERTS", ["mevalert.alerts.*"])

        client.js.add_stream.assert_not_called()
