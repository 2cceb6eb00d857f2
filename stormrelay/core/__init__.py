"""Functional Core - Business logic with no I/O.

This module contains all business logic:
- Geo/bearing calculations
- Byte-budget text segmentation
- Deduplication gates
- Lightning aggregation
- Warning parsing
- Message formatting

Nothing here touches the network, the radio or the filesystem.
"""

from stormrelay.core.geo import GeoPoint, BoundingBox, bearing_and_distance
from stormrelay.core.segmenter import segment, truncate
from stormrelay.core.dedup import DedupGate, DailyPolicy, PersistentPolicy
from stormrelay.core.aggregator import EventAggregator
from stormrelay.core.warning import WarningRecord, parse_warnings, warning_identity
from stormrelay.core.formatter import format_warning_alert, format_forecast_header

__all__ = [
    # Geo
    "GeoPoint",
    "BoundingBox",
    "bearing_and_distance",
    # Segmenter
    "segment",
    "truncate",
    # Dedup
    "DedupGate",
    "DailyPolicy",
    "PersistentPolicy",
    # Aggregation
    "EventAggregator",
    # Warnings
    "WarningRecord",
    "parse_warnings",
    "warning_identity",
    # Formatter
    "format_warning_alert",
    "format_forecast_header",
]
