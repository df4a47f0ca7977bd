"""Zone Store - owns the alert zone collection.

Loads the persisted zones once, applies the pure copy-on-write operations
from core.zones, and rewrites the repository after every mutation.
"""

import logging
import time
from typing import Callable

from quakewatch.core.zones import (
    AlertZone,
    InvalidZoneError,
    ZoneNotFoundError,
    add_zone,
    delete_zone,
    find_zone,
    new_zone_id,
    toggle_zone_visibility,
    update_zone,
    validate_zone,
    zone_from_dict,
    zone_to_dict,
)
from quakewatch.shell.storage import Repository


logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class ZoneStore:
    """CRUD over alert zones, persisted through a repository.

    The zones property always returns an immutable snapshot; mutations
    replace it with a new tuple.
    """

    def __init__(
        self,
        repository: Repository,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        """Initialize the store and load persisted zones.

        Args:
            repository: Repository bound to the zones key
            clock: Milliseconds since epoch, used for new zone ids
        """
        self.repository = repository
        self.clock = clock
        self._zones: tuple[AlertZone, ...] = self._load()

    def _load(self) -> tuple[AlertZone, ...]:
        raw = self.repository.load()
        if not raw:
            return ()

        zones = []
        for item in raw:
            try:
                zones.append(zone_from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed stored zone %r: %s", item, e)

        logger.info("Loaded %d alert zones", len(zones))
        return tuple(zones)

    def _commit(self, zones: tuple[AlertZone, ...]) -> None:
        self._zones = zones
        self.repository.save([zone_to_dict(z) for z in zones])

    @staticmethod
    def _check(zone: AlertZone) -> None:
        errors = validate_zone(zone)
        if errors:
            raise InvalidZoneError(errors)

    @property
    def zones(self) -> tuple[AlertZone, ...]:
        """Current zone snapshot."""
        return self._zones

    def get(self, zone_id: str) -> AlertZone:
        """Look up a zone.

        Raises:
            ZoneNotFoundError: If the id is unknown
        """
        zone = find_zone(self._zones, zone_id)
        if zone is None:
            raise ZoneNotFoundError(zone_id)
        return zone

    def create(
        self,
        name: str,
        latitude: float,
        longitude: float,
        radius_km: float,
    ) -> AlertZone:
        """Create a visible zone with a fresh id.

        Raises:
            InvalidZoneError: If the fields violate zone constraints
        """
        zone = AlertZone(
            id=new_zone_id(self.clock(), {z.id for z in self._zones}),
            name=name,
            latitude=latitude,
            longitude=longitude,
            radius_km=radius_km,
        )
        self._check(zone)
        self._commit(add_zone(self._zones, zone))

        logger.info("Created zone %s (%s, %.0f km)", zone.id, zone.name, zone.radius_km)
        return zone

    def update(
        self,
        zone_id: str,
        name: str,
        latitude: float,
        longitude: float,
        radius_km: float,
        is_visible: bool | None = None,
    ) -> AlertZone:
        """Replace a zone's fields; visibility is kept unless given.

        Raises:
            ZoneNotFoundError: If the id is unknown
            InvalidZoneError: If the fields violate zone constraints
        """
        zone = AlertZone(
            id=zone_id,
            name=name,
            latitude=latitude,
            longitude=longitude,
            radius_km=radius_km,
        )
        self._check(zone)
        self._commit(update_zone(self._zones, zone, is_visible=is_visible))

        logger.info("Updated zone %s", zone_id)
        return self.get(zone_id)

    def toggle_visibility(self, zone_id: str) -> AlertZone:
        """Flip a zone's visibility.

        Raises:
            ZoneNotFoundError: If the id is unknown
        """
        self._commit(toggle_zone_visibility(self._zones, zone_id))
        return self.get(zone_id)

    def delete(self, zone_id: str) -> None:
        """Delete a zone. Alerts already raised for it stay active.

        Raises:
            ZoneNotFoundError: If the id is unknown
        """
        self._commit(delete_zone(self._zones, zone_id))
        logger.info("Deleted zone %s", zone_id)
