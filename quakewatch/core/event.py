"""Seismic event models and parsing - Pure functions.

This module handles parsing USGS GeoJSON feed data into typed SeismicEvent
objects, plus the filtering and sorting used by the event list.
All functions are pure with no side effects.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any


MS_PER_HOUR = 60 * 60 * 1000


@dataclass(frozen=True)
class SeismicEvent:
    """Immutable seismic event data model.

    Events are never patched in place: every fetch produces a new snapshot.

    Attributes:
        id: Unique feed event ID
        magnitude: Event magnitude
        place: Human-readable location description
        occurred_at: Origin time in milliseconds since epoch
        latitude: Epicenter latitude
        longitude: Epicenter longitude
        depth_km: Depth in kilometers
        url: Feed event detail URL
        felt: Number of "felt" reports (optional)
        tsunami: Whether a tsunami flag was set
        event_type: Feed event type (e.g., 'earthquake', 'quarry blast')
        mag_type: Magnitude type (e.g., 'ml', 'md', 'mb')
    """
    id: str
    magnitude: float
    place: str
    occurred_at: int
    latitude: float
    longitude: float
    depth_km: float
    url: str = ""
    felt: int | None = None
    tsunami: bool = False
    event_type: str = "earthquake"
    mag_type: str = "ml"

    @property
    def coordinates(self) -> tuple[float, float]:
        """Return (latitude, longitude) tuple."""
        return (self.latitude, self.longitude)

    @property
    def time(self) -> datetime:
        """Origin time as an aware UTC datetime."""
        return datetime.fromtimestamp(self.occurred_at / 1000, tz=timezone.utc)


class SortOrder(str, Enum):
    """Orderings offered by the event list."""
    NEWEST = "newest"
    OLDEST = "oldest"
    MAG_DESC = "mag_desc"
    MAG_ASC = "mag_asc"


class TimeRange(str, Enum):
    """Relative time filters offered by the event list."""
    ALL = "all"
    LAST_6H = "6h"
    LAST_12H = "12h"
    LAST_24H = "24h"


_TIME_RANGE_HOURS = {
    TimeRange.LAST_6H: 6,
    TimeRange.LAST_12H: 12,
    TimeRange.LAST_24H: 24,
}


def parse_event(feature: dict[str, Any]) -> SeismicEvent | None:
    """Parse a single GeoJSON feature into a SeismicEvent.

    Pure function: takes raw dict, returns typed event or None if invalid.

    Args:
        feature: GeoJSON feature dict from the USGS feed

    Returns:
        SeismicEvent or None if parsing fails
    """
    try:
        props = feature.get("properties") or {}
        geometry = feature.get("geometry") or {}
        coords = geometry.get("coordinates") or []

        if len(coords) < 3:
            return None

        # The feed uses milliseconds since epoch
        time_ms = props.get("time")
        if time_ms is None:
            return None

        magnitude = props.get("mag")
        if magnitude is None:
            return None

        return SeismicEvent(
            id=str(feature.get("id", "")),
            magnitude=float(magnitude),
            place=props.get("place") or "Unknown location",
            occurred_at=int(time_ms),
            longitude=float(coords[0]),
            latitude=float(coords[1]),
            depth_km=float(coords[2]),
            url=props.get("url") or "",
            felt=props.get("felt"),
            tsunami=bool(props.get("tsunami", 0)),
            event_type=props.get("type") or "earthquake",
            mag_type=props.get("magType") or "ml",
        )
    except (KeyError, TypeError, ValueError):
        return None


def parse_events(geojson: dict[str, Any]) -> list[SeismicEvent]:
    """Parse a USGS GeoJSON feed into a list of SeismicEvents.

    Pure function: filters out invalid features, returns valid events.
    The result is sorted newest first; the head of the list is the
    "latest event" used by the notification dispatcher.

    Args:
        geojson: Full GeoJSON FeatureCollection from the feed

    Returns:
        List of valid SeismicEvent objects, sorted by time (newest first)
    """
    features = geojson.get("features", [])
    events = []

    for feature in features:
        event = parse_event(feature)
        if event is not None:
            events.append(event)

    return sorted(events, key=lambda e: e.occurred_at, reverse=True)


def event_types(events: list[SeismicEvent]) -> list[str]:
    """Distinct event types present in a snapshot, alphabetically.

    Pure function.
    """
    return sorted({e.event_type for e in events})


def get_region_name(place: str) -> str:
    """Extract the region part of a place description.

    "10 km SW of Dhaka, Bangladesh" -> "Bangladesh". A place without a
    comma is already a region name (e.g. "Northern Mid-Atlantic Ridge").

    Pure function.
    """
    if not place:
        return ""
    parts = place.split(",")
    if len(parts) >= 2:
        return parts[-1].strip()
    return place


def filter_events(
    events: list[SeismicEvent],
    now: int,
    search: str = "",
    min_magnitude: float = 0.0,
    types: list[str] | None = None,
    time_range: TimeRange = TimeRange.ALL,
) -> list[SeismicEvent]:
    """Filter events the way the event list does.

    Pure function.

    Args:
        events: Events to filter
        now: Current time in milliseconds since epoch
        search: Case-insensitive substring to find in the place
        min_magnitude: Minimum magnitude (inclusive)
        types: Event types to keep, None or empty keeps all
        time_range: Maximum event age relative to now

    Returns:
        Filtered list of events, input order preserved
    """
    needle = search.lower()
    max_hours = _TIME_RANGE_HOURS.get(TimeRange(time_range))
    result = []

    for event in events:
        if needle and needle not in event.place.lower():
            continue
        if event.magnitude < min_magnitude:
            continue
        if types and event.event_type not in types:
            continue
        if max_hours is not None and (now - event.occurred_at) / MS_PER_HOUR > max_hours:
            continue
        result.append(event)

    return result


def sort_events(
    events: list[SeismicEvent],
    order: SortOrder = SortOrder.NEWEST,
) -> list[SeismicEvent]:
    """Return a new list of events in the requested order.

    Pure function.
    """
    order = SortOrder(order)
    if order == SortOrder.OLDEST:
        return sorted(events, key=lambda e: e.occurred_at)
    if order == SortOrder.MAG_DESC:
        return sorted(events, key=lambda e: e.magnitude, reverse=True)
    if order == SortOrder.MAG_ASC:
        return sorted(events, key=lambda e: e.magnitude)
    return sorted(events, key=lambda e: e.occurred_at, reverse=True)


def strongest_event(events: list[SeismicEvent]) -> SeismicEvent | None:
    """Return the event with the highest magnitude, or None if empty.

    Pure function.
    """
    if not events:
        return None
    return max(events, key=lambda e: e.magnitude)
