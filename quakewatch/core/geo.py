"""Geographic calculations - Pure functions.

This module provides great-circle distance and zone containment checks for
seismic events. All functions are pure with no side effects.
"""

import math
from dataclasses import dataclass

from quakewatch.core.event import SeismicEvent, strongest_event
from quakewatch.core.zones import AlertZone


# Earth's radius in kilometers
EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class Location:
    """A user position (e.g., from a location watch or config)."""
    latitude: float
    longitude: float


@dataclass(frozen=True)
class EventStats:
    """Headline numbers for an event snapshot.

    Attributes:
        total: Number of events in the snapshot
        strongest: Highest-magnitude event, if any
        nearest: Closest event to the user, if a location is known
        nearest_distance_km: Distance to the nearest event
    """
    total: int
    strongest: SeismicEvent | None = None
    nearest: SeismicEvent | None = None
    nearest_distance_km: float | None = None


def distance_km(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
) -> float:
    """Calculate distance between two points using Haversine formula.

    Pure function. Symmetric, zero for identical points and well defined
    for antipodal points.

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
    # Rounding can push a just past 1 for antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def distance_to_event(event: SeismicEvent, latitude: float, longitude: float) -> float:
    """Distance from a point to an event epicenter, in kilometers.

    Pure function.
    """
    return distance_km(latitude, longitude, event.latitude, event.longitude)


def is_within_zone(event: SeismicEvent, zone: AlertZone) -> bool:
    """Check if an event epicenter lies inside a zone.

    Pure function. The boundary counts as inside.

    Args:
        event: Event to check
        zone: Circular alert zone

    Returns:
        True if the epicenter is at most radius_km from the zone center
    """
    distance = distance_km(
        zone.latitude,
        zone.longitude,
        event.latitude,
        event.longitude,
    )
    return distance <= zone.radius_km


def nearest_event(
    events: list[SeismicEvent],
    latitude: float,
    longitude: float,
) -> tuple[SeismicEvent, float] | None:
    """Find the event closest to a point.

    Pure function.

    Args:
        events: Events to search
        latitude: Reference latitude
        longitude: Reference longitude

    Returns:
        (event, distance_km) for the closest event, or None if no events
    """
    best: tuple[SeismicEvent, float] | None = None
    for event in events:
        d = distance_to_event(event, latitude, longitude)
        if best is None or d < best[1]:
            best = (event, d)
    return best


def summarize_events(
    events: list[SeismicEvent],
    location: Location | None = None,
) -> EventStats:
    """Compute snapshot statistics.

    Pure function. Without a location the nearest-event fields are omitted
    rather than treated as an error.
    """
    nearest = None
    if location is not None:
        nearest = nearest_event(events, location.latitude, location.longitude)

    return EventStats(
        total=len(events),
        strongest=strongest_event(events),
        nearest=nearest[0] if nearest else None,
        nearest_distance_km=nearest[1] if nearest else None,
    )
