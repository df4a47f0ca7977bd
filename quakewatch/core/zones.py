"""Alert zones - Pure functions.

This module defines user alert zones and the copy-on-write operations over
a zone collection. Every operation returns a new tuple; the input is never
modified, so a reader holding the previous snapshot is unaffected.

Note: Persisting zones is handled by the zone store and the shell storage
layer. This module only contains the pure logic.
"""

from dataclasses import dataclass, replace
from typing import Any

from quakewatch.core.config import ValidationError, validate_coordinates


@dataclass(frozen=True)
class AlertZone:
    """A user-defined circular region of interest.

    Visibility is a display concern only: invisible zones still raise
    alerts.

    Attributes:
        id: Unique zone ID (time-based token)
        name: User-editable name
        latitude: Center latitude
        longitude: Center longitude
        radius_km: Alert radius in kilometers, > 0
        is_visible: Whether the zone is drawn on the map
    """
    id: str
    name: str
    latitude: float
    longitude: float
    radius_km: float
    is_visible: bool = True


class ZoneNotFoundError(KeyError):
    """Raised when a zone id is not in the collection."""


class InvalidZoneError(ValueError):
    """Raised when zone fields violate the zone constraints."""

    def __init__(self, errors: list[ValidationError]) -> None:
        self.errors = errors
        super().__init__("; ".join(e.message for e in errors))


def new_zone_id(now_ms: int, existing_ids: set[str] | frozenset[str] = frozenset()) -> str:
    """Generate a time-based zone id that is not already taken.

    Pure function. Only uniqueness is guaranteed, not monotonicity.

    Args:
        now_ms: Current time in milliseconds since epoch
        existing_ids: IDs already in use

    Returns:
        A fresh zone id
    """
    candidate = str(now_ms)
    suffix = 1
    while candidate in existing_ids:
        candidate = f"{now_ms}-{suffix}"
        suffix += 1
    return candidate


def validate_zone(zone: AlertZone) -> list[ValidationError]:
    """Validate zone fields.

    Pure function.

    Returns:
        List of validation errors (empty if valid)
    """
    errors = validate_coordinates(zone.latitude, zone.longitude, "zone")

    if not zone.name or not zone.name.strip():
        errors.append(ValidationError(
            field="zone.name",
            message="Zone name must not be empty",
        ))

    if not zone.radius_km > 0:
        errors.append(ValidationError(
            field="zone.radius_km",
            message=f"Alert radius must be positive, got {zone.radius_km}",
        ))

    return errors


def find_zone(zones: tuple[AlertZone, ...], zone_id: str) -> AlertZone | None:
    """Look up a zone by id.

    Pure function.
    """
    for zone in zones:
        if zone.id == zone_id:
            return zone
    return None


def add_zone(zones: tuple[AlertZone, ...], zone: AlertZone) -> tuple[AlertZone, ...]:
    """Append a zone; new zones are always visible.

    Pure function.
    """
    return zones + (replace(zone, is_visible=True),)


def update_zone(
    zones: tuple[AlertZone, ...],
    zone: AlertZone,
    is_visible: bool | None = None,
) -> tuple[AlertZone, ...]:
    """Replace the zone with the same id.

    Pure function. When is_visible is None the previous visibility is kept.

    Raises:
        ZoneNotFoundError: If no zone has zone.id
    """
    existing = find_zone(zones, zone.id)
    if existing is None:
        raise ZoneNotFoundError(zone.id)

    visible = existing.is_visible if is_visible is None else is_visible
    updated = replace(zone, is_visible=visible)
    return tuple(updated if z.id == zone.id else z for z in zones)


def toggle_zone_visibility(zones: tuple[AlertZone, ...], zone_id: str) -> tuple[AlertZone, ...]:
    """Flip a zone's visibility.

    Pure function.

    Raises:
        ZoneNotFoundError: If no zone has zone_id
    """
    if find_zone(zones, zone_id) is None:
        raise ZoneNotFoundError(zone_id)

    return tuple(
        replace(z, is_visible=not z.is_visible) if z.id == zone_id else z
        for z in zones
    )


def delete_zone(zones: tuple[AlertZone, ...], zone_id: str) -> tuple[AlertZone, ...]:
    """Remove a zone. Alerts already raised for it are not touched.

    Pure function.

    Raises:
        ZoneNotFoundError: If no zone has zone_id
    """
    if find_zone(zones, zone_id) is None:
        raise ZoneNotFoundError(zone_id)

    return tuple(z for z in zones if z.id != zone_id)


def zone_to_dict(zone: AlertZone) -> dict[str, Any]:
    """Serialize a zone for storage."""
    return {
        "id": zone.id,
        "name": zone.name,
        "lat": zone.latitude,
        "lng": zone.longitude,
        "radiusKm": zone.radius_km,
        "isVisible": zone.is_visible,
    }


def zone_from_dict(data: dict[str, Any]) -> AlertZone:
    """Parse a stored zone.

    A missing or null isVisible means visible.
    """
    visible = data.get("isVisible")
    return AlertZone(
        id=str(data["id"]),
        name=data.get("name", ""),
        latitude=float(data["lat"]),
        longitude=float(data["lng"]),
        radius_km=float(data["radiusKm"]),
        is_visible=visible is not False,
    )
