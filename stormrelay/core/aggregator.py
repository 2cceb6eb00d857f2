"""Lightning aggregation - In-memory, no I/O.

Strikes are reduced to (octant, distance bucket) pairs relative to a fixed
reference point. On every aggregation tick the buffered strikes are counted
per bucket, and each bucket that reaches the threshold is announced once for
the lifetime of the process.
"""

import logging
import threading
from collections import Counter
from dataclasses import dataclass

from stormrelay.core.dedup import DedupGate
from stormrelay.core.formatter import format_storm_alert, format_storm_part
from stormrelay.core.geo import BearingDistance, GeoPoint, bearing_and_distance


logger = logging.getLogger(__name__)


DEFAULT_STORM_THRESHOLD = 10
DEFAULT_BUCKET_WIDTH_KM = 10


@dataclass(frozen=True)
class BucketKey:
    """Spatial bucket a strike falls into.

    Attributes:
        octant: Compass octant code
        distance_index: floor(distance_km / bucket width)
    """
    octant: str
    distance_index: int

    @property
    def dedup_key(self) -> str:
        """Opaque key used with the DedupGate."""
        return f"{self.octant}|{self.distance_index}"


def bucket_for(
    strike: BearingDistance,
    bucket_width_km: int = DEFAULT_BUCKET_WIDTH_KM,
) -> BucketKey:
    """Compute the bucket for a strike.

    Pure function.
    """
    return BucketKey(
        octant=strike.octant,
        distance_index=int(strike.distance_km // bucket_width_km),
    )


def count_buckets(
    strikes: list[BearingDistance],
    bucket_width_km: int = DEFAULT_BUCKET_WIDTH_KM,
) -> Counter:
    """Count strikes per bucket.

    Pure function. Buckets keep the order in which they were first seen.
    """
    return Counter(bucket_for(s, bucket_width_km) for s in strikes)


class EventAggregator:
    """Buffers strikes between ticks and turns dense buckets into alerts.

    on_event() is called from the feed's network thread and tick() from the
    aggregation timer; the buffer is guarded by a lock and swapped out as a
    whole on each tick.
    """

    def __init__(
        self,
        reference: GeoPoint,
        compass_names: dict[str, str],
        gate: DedupGate | None = None,
        threshold: int = DEFAULT_STORM_THRESHOLD,
        bucket_width_km: int = DEFAULT_BUCKET_WIDTH_KM,
    ) -> None:
        """Initialize the aggregator.

        Args:
            reference: Point bearings and distances are measured from
            compass_names: Display name per octant code
            gate: Persistent gate for buckets (created if not provided)
            threshold: Strikes per bucket and tick needed to alert
            bucket_width_km: Width of a distance bucket
        """
        self.reference = reference
        self.compass_names = compass_names
        self.gate = gate or DedupGate()
        self.threshold = threshold
        self.bucket_width_km = bucket_width_km
        self._lock = threading.Lock()
        self._buffer: list[BearingDistance] = []

    @property
    def pending(self) -> int:
        """Number of strikes buffered since the last tick."""
        with self._lock:
            return len(self._buffer)

    def on_event(self, point: GeoPoint) -> None:
        """Buffer a strike."""
        strike = bearing_and_distance(self.reference, point)
        with self._lock:
            self._buffer.append(strike)

    def tick(self) -> str | None:
        """Close the current window and build its storm alert.

        The buffer is cleared whether or not anything fires, so counts never
        roll over into the next window. A bucket that already fired in an
        earlier window is not announced again.

        Returns:
            Alert text, or None if no new bucket reached the threshold
        """
        with self._lock:
            strikes, self._buffer = self._buffer, []

        counts = count_buckets(strikes, self.bucket_width_km)
        parts = []

        for bucket, count in counts.items():
            if count < self.threshold:
                continue
            if not self.gate.should_fire(bucket.dedup_key):
                logger.debug("Bucket %s already announced", bucket.dedup_key)
                continue

            parts.append(format_storm_part(
                bucket.octant,
                bucket.distance_index,
                self.compass_names,
                self.bucket_width_km,
            ))

        logger.info(
            "Aggregated %d strikes into %d buckets, %d new alerts",
            len(strikes),
            len(counts),
            len(parts),
        )

        if not parts:
            return None

        return format_storm_alert(parts)
