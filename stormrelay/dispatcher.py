"""Alert Dispatcher - Sizes, paces and sends messages.

The dispatcher is the only component that knows a destination's byte
ceiling and the radio's pacing delay. Alerts are segmented with the core
segmenter, every chunk is checked against the ceiling once more, and sends
are spaced at least pacing_seconds apart to respect the radio's duty cycle.
"""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from stormrelay.core.segmenter import segment, truncate
from stormrelay.shell.mesh_client import MeshResponse


logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Anything that can put a text message on a channel."""

    def send_text(self, channel_index: int, text: str) -> MeshResponse:
        ...


@dataclass(frozen=True)
class Destination:
    """A radio channel resolved at startup.

    Attributes:
        name: Channel name (for logging)
        channel_index: Channel index on the radio
        max_bytes: Per-message byte ceiling
    """
    name: str
    channel_index: int
    max_bytes: int


@dataclass
class DispatchResult:
    """Result of dispatching one alert.

    Attributes:
        destination: Where the chunks went
        sent: Chunks the transport accepted
        failed: Chunks the transport rejected
        skipped: Chunks dropped because they could not be sized to fit
        errors: Transport error messages
    """
    destination: Destination
    sent: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Returns True if nothing failed and something was sent."""
        return bool(self.sent) and not self.failed

    @property
    def summary(self) -> str:
        """Human-readable summary of the dispatch."""
        return (
            f"{len(self.sent)} sent, {len(self.failed)} failed, "
            f"{self.skipped} skipped on {self.destination.name}"
        )


class AlertDispatcher:
    """Sends alerts to the radio within its byte and duty-cycle limits.

    Sends are serialized: chunks of two alerts dispatched from different
    timer threads never interleave, and the pacing delay applies across all
    destinations. The delay blocks only the dispatching thread.
    """

    def __init__(
        self,
        transport: Transport,
        pacing_seconds: float = 15.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize dispatcher.

        Args:
            transport: Radio client
            pacing_seconds: Minimum delay between two sends
            clock: Monotonic clock (injectable for tests)
            sleep: Sleep function (injectable for tests)
        """
        self.transport = transport
        self.pacing_seconds = pacing_seconds
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._last_sent: float | None = None

    def _wait_for_pacing(self) -> None:
        """Sleep until pacing_seconds have passed since the last send."""
        if self._last_sent is None:
            return

        remaining = self._last_sent + self.pacing_seconds - self._clock()
        if remaining > 0:
            logger.debug("Pacing: waiting %.1fs before next send", remaining)
            self._sleep(remaining)

    def _send_one(self, text: str, destination: Destination) -> MeshResponse:
        """Send one sized chunk, turning transport exceptions into failures."""
        try:
            return self.transport.send_text(destination.channel_index, text)
        except Exception as e:
            logger.exception("Transport raised while sending to %s", destination.name)
            return MeshResponse(
                success=False,
                channel_index=destination.channel_index,
                error=str(e),
            )

    def send_chunks(self, chunks: list[str], destination: Destination) -> DispatchResult:
        """Send pre-chunked text in order.

        Each chunk is truncated to the destination's ceiling as a final
        guard; a chunk that cannot be shortened at a word boundary is
        skipped. A failed send is logged and the remaining chunks are
        still attempted.

        Args:
            chunks: Messages to send, in order
            destination: Channel to send to

        Returns:
            DispatchResult describing what happened to each chunk
        """
        result = DispatchResult(destination=destination)

        with self._lock:
            for chunk in chunks:
                text = truncate(chunk, destination.max_bytes)
                if not text:
                    logger.warning(
                        "Skipping chunk that does not fit %d bytes: %r",
                        destination.max_bytes,
                        chunk,
                    )
                    result.skipped += 1
                    continue

                self._wait_for_pacing()
                response = self._send_one(text, destination)
                self._last_sent = self._clock()

                if response.success:
                    logger.info("Sent out [%s]: %s", destination.name, text)
                    result.sent.append(text)
                else:
                    logger.error(
                        "Failed to send to [%s]: %s (%s)",
                        destination.name,
                        text,
                        response.error,
                    )
                    result.failed.append(text)
                    if response.error:
                        result.errors.append(response.error)

        return result

    def dispatch(self, text: str, destination: Destination) -> DispatchResult:
        """Segment an alert to the destination's ceiling and send it.

        Args:
            text: Alert text of any length
            destination: Channel to send to

        Returns:
            DispatchResult describing what happened to each chunk
        """
        chunks = segment(text, destination.max_bytes)
        if not chunks:
            logger.warning("Nothing to send to %s for %r", destination.name, text)
            return DispatchResult(destination=destination)

        return self.send_chunks(chunks, destination)
