"""Geographic calculations - Pure functions.

This module provides distance, bearing and boundary calculations for
lightning strike locations. All functions are pure with no side effects.
"""

import math
from dataclasses import dataclass
from typing import Any


# Earth's radius in kilometers
EARTH_RADIUS_KM = 6371.0

# Compass octants, clockwise from north
OCTANTS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")


@dataclass(frozen=True)
class GeoPoint:
    """A point on the Earth's surface.

    Attributes:
        lat: Latitude in degrees
        lon: Longitude in degrees
    """
    lat: float
    lon: float


@dataclass(frozen=True)
class BearingDistance:
    """Direction and distance of a target as seen from an origin.

    Attributes:
        octant: Compass octant (one of OCTANTS)
        distance_km: Great-circle distance in kilometers
    """
    octant: str
    distance_km: float


@dataclass(frozen=True)
class BoundingBox:
    """Geographic bounding box.

    Attributes:
        min_latitude: Southern boundary
        max_latitude: Northern boundary
        min_longitude: Western boundary
        max_longitude: Eastern boundary
    """
    min_latitude: float
    max_latitude: float
    min_longitude: float
    max_longitude: float

    def contains(self, latitude: float, longitude: float) -> bool:
        """Check if a point is within this bounding box."""
        return (
            self.min_latitude <= latitude <= self.max_latitude
            and self.min_longitude <= longitude <= self.max_longitude
        )


def calculate_distance(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
) -> float:
    """Calculate distance between two points using Haversine formula.

    Pure function.

    Args:
        lat1: Latitude of first point
        lon1: Longitude of first point
        lat2: Latitude of second point
        lon2: Longitude of second point

    Returns:
        Distance in kilometers
    """
    # Convert to radians
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    # Haversine formula
    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2
    )
    # Rounding can push a just outside [0, 1] for near-antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def calculate_bearing(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
) -> float:
    """Calculate the initial bearing (forward azimuth) from point 1 to point 2.

    Pure function.

    Returns:
        Bearing in degrees, normalized to [0, 360)
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lon = math.radians(lon2 - lon1)

    y = math.sin(delta_lon) * math.cos(lat2_rad)
    x = (
        math.cos(lat1_rad) * math.sin(lat2_rad)
        - math.sin(lat1_rad) * math.cos(lat2_rad) * math.cos(delta_lon)
    )

    return (math.degrees(math.atan2(y, x)) + 360) % 360


def bearing_to_octant(bearing: float) -> str:
    """Quantize a bearing to one of the 8 compass octants.

    Pure function. Each octant spans 45 degrees centered on its direction;
    a bearing exactly on a sector edge rounds up (22.5 -> NE).
    """
    index = int(math.floor(bearing / 45 + 0.5)) % 8
    return OCTANTS[index]


def bearing_and_distance(origin: GeoPoint, target: GeoPoint) -> BearingDistance:
    """Compute octant and distance of target as seen from origin.

    Pure function.

    Args:
        origin: Observer location
        target: Event location

    Returns:
        BearingDistance for the target
    """
    bearing = calculate_bearing(origin.lat, origin.lon, target.lat, target.lon)
    distance = calculate_distance(origin.lat, origin.lon, target.lat, target.lon)

    return BearingDistance(
        octant=bearing_to_octant(bearing),
        distance_km=distance,
    )


def parse_point(payload: Any) -> GeoPoint | None:
    """Extract a GeoPoint from a decoded feed payload.

    Pure function: other fields are ignored, malformed payloads give None.

    Args:
        payload: Decoded JSON object, expected to carry "lat" and "lon"

    Returns:
        GeoPoint or None if the payload has no usable coordinates
    """
    if not isinstance(payload, dict):
        return None

    try:
        lat = float(payload["lat"])
        lon = float(payload["lon"])
    except (KeyError, TypeError, ValueError):
        return None

    if not (math.isfinite(lat) and math.isfinite(lon)):
        return None

    return GeoPoint(lat=lat, lon=lon)
