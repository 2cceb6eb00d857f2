"""Lightning Feed Client - Imperative Shell.

This module subscribes to a lightning strike feed over MQTT and forwards
strikes inside the configured bounding box to a callback. Strikes outside
the box are dropped here and never reach the aggregator.
"""

import json
import logging
from collections.abc import Callable

import paho.mqtt.client as mqtt

from stormrelay.core.geo import BoundingBox, GeoPoint, parse_point


logger = logging.getLogger(__name__)


DEFAULT_KEEPALIVE = 60


class LightningClient:
    """Client for the MQTT lightning feed.

    This is part of the imperative shell - it handles network I/O.
    Messages are handled on paho's network thread.
    """

    def __init__(
        self,
        bounds: BoundingBox,
        on_strike: Callable[[GeoPoint], None],
        host: str = "blitzortung.ha.sed.pl",
        port: int = 1883,
        topic: str = "blitzortung/1.1/#",
    ) -> None:
        """Initialize lightning client.

        Args:
            bounds: Only strikes inside this box are forwarded
            on_strike: Called with each accepted strike
            host: MQTT broker host
            port: MQTT broker port
            topic: Topic filter to subscribe to
        """
        self.bounds = bounds
        self.on_strike = on_strike
        self.host = host
        self.port = port
        self.topic = topic
        self.accepted = 0
        self.dropped = 0
        self._client: mqtt.Client | None = None

    def handle_payload(self, payload: bytes) -> bool:
        """Decode one feed message and forward it if it is in bounds.

        Returns:
            True if the strike was forwarded
        """
        try:
            data = json.loads(payload.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            logger.debug("Dropping undecodable lightning payload: %s", e)
            return False

        point = parse_point(data)
        if point is None:
            logger.debug("Dropping lightning payload without coordinates")
            return False

        if not self.bounds.contains(point.lat, point.lon):
            self.dropped += 1
            return False

        try:
            self.on_strike(point)
        except Exception:
            logger.exception("Strike handler failed for %s", point)
            return False

        self.accepted += 1
        return True

    def _on_connect(self, client, userdata, flags, reason_code, properties) -> None:
        if reason_code.is_failure:
            logger.error("Lightning feed connection refused: %s", reason_code)
            return

        logger.info("Connected to lightning feed, subscribing to %s", self.topic)
        client.subscribe(self.topic)

    def _on_disconnect(self, client, userdata, flags, reason_code, properties) -> None:
        logger.warning("Disconnected from lightning feed: %s", reason_code)

    def _on_message(self, client, userdata, message) -> None:
        self.handle_payload(message.payload)

    def start(self) -> None:
        """Connect to the broker and start the network thread.

        This method performs network I/O. paho reconnects automatically
        and the subscription is renewed on every connect.

        Raises:
            OSError: If the broker cannot be reached
        """
        client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2)
        client.on_connect = self._on_connect
        client.on_disconnect = self._on_disconnect
        client.on_message = self._on_message

        logger.info("Connecting to lightning feed at %s:%d", self.host, self.port)
        client.connect(self.host, self.port, keepalive=DEFAULT_KEEPALIVE)
        client.loop_start()

        self._client = client

    def stop(self) -> None:
        """Stop the network thread and disconnect."""
        if self._client is None:
            return

        self._client.loop_stop()
        self._client.disconnect()
        self._client = None

        logger.info(
            "Lightning feed stopped: %d strikes accepted, %d outside bounds",
            self.accepted,
            self.dropped,
        )
