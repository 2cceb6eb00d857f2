"""Mesh Radio Client - Imperative Shell.

This module handles communication with a Meshtastic radio, attached either
over a serial port or over the network. All I/O is contained here; message
sizing and pacing are handled by the dispatcher.
"""

import logging
from dataclasses import dataclass
from typing import Any

from meshtastic.mesh_interface import MeshInterface
from meshtastic.serial_interface import SerialInterface
from meshtastic.tcp_interface import TCPInterface
from pubsub import pub


logger = logging.getLogger(__name__)


# pubsub topic meshtastic publishes decoded text packets on
RECEIVE_TEXT_TOPIC = "meshtastic.receive.text"

# Channel role value meshtastic uses for unused channel slots
CHANNEL_ROLE_DISABLED = 0

# Raised by meshtastic when the radio does not answer (e.g., config timeout)
RadioError = MeshInterface.MeshInterfaceError


@dataclass
class MeshResponse:
    """Result of sending a text message to the radio.

    Attributes:
        success: Whether the radio accepted the message
        channel_index: Channel the message was sent on
        error: Error message if failed
    """
    success: bool
    channel_index: int
    error: str | None = None


class MeshClient:
    """Client for sending text messages through a Meshtastic radio.

    This is part of the imperative shell - it handles radio I/O.
    The interface is opened lazily on first use.
    """

    def __init__(
        self,
        device: str | None = None,
        host: str | None = None,
    ) -> None:
        """Initialize mesh client.

        Args:
            device: Serial device path (e.g., /dev/ttyACM0)
            host: Hostname of a network-attached radio (takes precedence)
        """
        self.device = device
        self.host = host
        self._interface: Any = None

    @property
    def interface(self) -> Any:
        """Lazy initialization of the radio interface."""
        if self._interface is None:
            if self.host:
                logger.info("Connecting to radio at %s", self.host)
                self._interface = TCPInterface(hostname=self.host)
            else:
                logger.info("Connecting to radio on %s", self.device or "first serial port")
                self._interface = SerialInterface(devPath=self.device)
            logger.info("Connected to radio")
        return self._interface

    def find_channel_index(self, name: str) -> int | None:
        """Look up a channel index by its name.

        This method performs radio I/O on first use.

        Args:
            name: Channel name as configured on the radio

        Returns:
            Channel index, or None if no enabled channel has that name
        """
        for channel in self.interface.localNode.channels or []:
            if channel.role == CHANNEL_ROLE_DISABLED:
                continue
            if channel.settings.name == name:
                return channel.index

        logger.warning("Channel %s not found on radio", name)
        return None

    def send_text(self, channel_index: int, text: str) -> MeshResponse:
        """Send a text message on a channel.

        This method performs radio I/O.

        Args:
            channel_index: Channel to send on
            text: Message text (already sized to the channel's limit)

        Returns:
            MeshResponse indicating success or failure
        """
        try:
            self.interface.sendText(text, channelIndex=channel_index)
        except Exception as e:
            logger.error("Radio send on channel %d failed: %s", channel_index, str(e))
            return MeshResponse(
                success=False,
                channel_index=channel_index,
                error=str(e),
            )

        logger.debug(
            "Radio accepted %d bytes on channel %d",
            len(text.encode("utf-8")),
            channel_index,
        )
        return MeshResponse(success=True, channel_index=channel_index)

    def log_incoming(self) -> None:
        """Log text messages received from the mesh."""
        pub.subscribe(_on_receive_text, RECEIVE_TEXT_TOPIC)

    def close(self) -> None:
        """Close the radio interface if it was opened."""
        if self._interface is not None:
            self._interface.close()
            self._interface = None


def _on_receive_text(packet: dict[str, Any], interface: Any = None) -> None:
    """pubsub listener for incoming text packets."""
    decoded = packet.get("decoded", {})
    logger.info(
        "Received message from %s on channel %s: %s",
        packet.get("fromId", "?"),
        packet.get("channel", 0),
        decoded.get("text", ""),
    )
