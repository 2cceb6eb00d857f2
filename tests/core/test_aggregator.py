"""Unit tests for lightning aggregation.

In-memory tests; the concurrency test spies on bucket counting.
"""

import threading
from unittest.mock import patch

import pytest

from stormrelay.core.aggregator import (
    BucketKey,
    EventAggregator,
    bucket_for,
    count_buckets,
)
from stormrelay.core.dedup import DedupGate
from stormrelay.core.formatter import DEFAULT_COMPASS_NAMES
from stormrelay.core.geo import BearingDistance, GeoPoint


ORIGIN = GeoPoint(lat=0.0, lon=0.0)

# About 22.2 km from the origin
EAST_22KM = GeoPoint(lat=0.0, lon=0.2)
NORTH_22KM = GeoPoint(lat=0.2, lon=0.0)
# About 55.6 km from the origin
WEST_55KM = GeoPoint(lat=0.0, lon=-0.5)


@pytest.fixture
def aggregator():
    """Aggregator around the origin with the default threshold of 10."""
    return EventAggregator(reference=ORIGIN, compass_names=DEFAULT_COMPASS_NAMES)


def feed(aggregator, point, count):
    for _ in range(count):
        aggregator.on_event(point)


class TestBucketing:
    """Tests for bucket_for() and count_buckets()."""

    def test_bucket_index_is_floor_of_distance(self):
        assert bucket_for(BearingDistance("NE", 19.99)) == BucketKey("NE", 1)
        assert bucket_for(BearingDistance("NE", 20.0)) == BucketKey("NE", 2)
        assert bucket_for(BearingDistance("S", 3.2)) == BucketKey("S", 0)

    def test_custom_bucket_width(self):
        assert bucket_for(BearingDistance("W", 55.6), bucket_width_km=25) == BucketKey("W", 2)

    def test_dedup_key(self):
        assert BucketKey("NE", 2).dedup_key == "NE|2"

    def test_counts_per_bucket_in_discovery_order(self):
        strikes = [
            BearingDistance("E", 22.0),
            BearingDistance("N", 5.0),
            BearingDistance("E", 28.0),
            BearingDistance("E", 31.0),
        ]

        counts = count_buckets(strikes)

        assert list(counts.items()) == [
            (BucketKey("E", 2), 2),
            (BucketKey("N", 0), 1),
            (BucketKey("E", 3), 1),
        ]


class TestEventAggregator:
    """Tests for EventAggregator.on_event() and tick()."""

    def test_threshold_reached_fires_once(self, aggregator):
        """Ten strikes in one bucket produce one alert."""
        feed(aggregator, EAST_22KM, 10)

        assert aggregator.tick() == "[STORM]: 20km Vychodne"

    def test_below_threshold_does_not_fire(self, aggregator):
        feed(aggregator, EAST_22KM, 9)

        assert aggregator.tick() is None

    def test_fired_bucket_never_fires_again(self, aggregator):
        """A bucket announced in one window stays quiet in later windows."""
        feed(aggregator, EAST_22KM, 10)
        assert aggregator.tick() is not None

        feed(aggregator, EAST_22KM, 10)
        assert aggregator.tick() is None

    def test_buffer_cleared_even_without_alert(self, aggregator):
        """Counts never roll over into the next window."""
        feed(aggregator, EAST_22KM, 9)
        assert aggregator.tick() is None
        assert aggregator.pending == 0

        feed(aggregator, EAST_22KM, 1)
        assert aggregator.tick() is None

    def test_pending_counts_buffered_strikes(self, aggregator):
        feed(aggregator, EAST_22KM, 3)

        assert aggregator.pending == 3

    def test_multiple_buckets_in_discovery_order(self, aggregator):
        feed(aggregator, EAST_22KM, 10)
        feed(aggregator, NORTH_22KM, 12)
        feed(aggregator, WEST_55KM, 4)

        assert aggregator.tick() == "[STORM]: 20km Vychodne, 20km Severne"

    def test_only_new_buckets_are_listed(self, aggregator):
        feed(aggregator, EAST_22KM, 10)
        aggregator.tick()

        feed(aggregator, EAST_22KM, 10)
        feed(aggregator, WEST_55KM, 10)

        assert aggregator.tick() == "[STORM]: 50km Zapadne"

    def test_custom_threshold_and_width(self):
        aggregator = EventAggregator(
            reference=ORIGIN,
            compass_names=DEFAULT_COMPASS_NAMES,
            threshold=3,
            bucket_width_km=25,
        )
        feed(aggregator, WEST_55KM, 3)

        assert aggregator.tick() == "[STORM]: 50km Zapadne"

    def test_uses_supplied_gate(self):
        """Buckets already in a shared gate are suppressed."""
        gate = DedupGate()
        gate.should_fire("E|2")
        aggregator = EventAggregator(
            reference=ORIGIN,
            compass_names=DEFAULT_COMPASS_NAMES,
            gate=gate,
        )
        feed(aggregator, EAST_22KM, 10)

        assert aggregator.tick() is None

    def test_empty_tick(self, aggregator):
        assert aggregator.tick() is None


class TestConcurrency:
    """Tests for on_event() and tick() running on different threads."""

    def test_no_strike_lost_or_counted_twice(self, aggregator):
        """Strikes fed while ticks run are counted in exactly one window."""
        window_sizes = []

        def counting(strikes, bucket_width_km):
            window_sizes.append(len(strikes))
            return count_buckets(strikes, bucket_width_km)

        feeders_done = threading.Event()

        def feeder():
            feed(aggregator, EAST_22KM, 500)

        def ticker():
            while not feeders_done.is_set():
                aggregator.tick()

        with patch("stormrelay.core.aggregator.count_buckets", side_effect=counting):
            tick_thread = threading.Thread(target=ticker)
            feed_threads = [threading.Thread(target=feeder) for _ in range(4)]

            tick_thread.start()
            for t in feed_threads:
                t.start()
            for t in feed_threads:
                t.join()
            feeders_done.set()
            tick_thread.join()

        assert sum(window_sizes) + aggregator.pending == 2000
