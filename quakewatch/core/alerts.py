"""Zone alert evaluation - Pure functions.

This module decides which (event, zone) pairs raise a new alert.
Evaluation is a pure, idempotent pass over the latest full snapshot: it
never mutates the active alert collection, the caller merges the result.
"""

from dataclasses import dataclass

from quakewatch.core.event import SeismicEvent
from quakewatch.core.geo import is_within_zone
from quakewatch.core.zones import AlertZone


# Events older than this never raise a new alert (24 hours)
DEFAULT_RECENCY_WINDOW_MS = 24 * 60 * 60 * 1000


@dataclass(frozen=True)
class AlertNotification:
    """A raised alert for one (event, zone) pair.

    Zone and event fields are snapshotted at alert time so the alert stays
    meaningful after the zone is edited or the event leaves the feed.

    Attributes:
        id: Deterministic "{event_id}-{zone_id}", the dedup key
        event_id: Triggering event ID
        zone_id: Matching zone ID
        zone_name: Zone name at alert time
        event_place: Event place at alert time
        magnitude: Event magnitude
        occurred_at: Event origin time in milliseconds since epoch
    """
    id: str
    event_id: str
    zone_id: str
    zone_name: str
    event_place: str
    magnitude: float
    occurred_at: int


def alert_id(event_id: str, zone_id: str) -> str:
    """Build the deterministic alert id for an (event, zone) pair.

    Pure function.
    """
    return f"{event_id}-{zone_id}"


def is_recent(event: SeismicEvent, now: int, recency_window_ms: int) -> bool:
    """Check if an event is young enough to raise an alert.

    Pure function. An event exactly recency_window_ms old is not recent.
    """
    return now - event.occurred_at < recency_window_ms


def matches_magnitude(event: SeismicEvent, min_magnitude: float) -> bool:
    """Check the alert magnitude threshold (inclusive).

    Pure function.
    """
    return event.magnitude >= min_magnitude


def build_alert(event: SeismicEvent, zone: AlertZone) -> AlertNotification:
    """Snapshot an (event, zone) pair into an alert.

    Pure function.
    """
    return AlertNotification(
        id=alert_id(event.id, zone.id),
        event_id=event.id,
        zone_id=zone.id,
        zone_name=zone.name,
        event_place=event.place,
        magnitude=event.magnitude,
        occurred_at=event.occurred_at,
    )


def evaluate(
    events: list[SeismicEvent],
    zones: tuple[AlertZone, ...] | list[AlertZone],
    min_magnitude: float,
    existing_alert_ids: set[str] | frozenset[str],
    now: int,
    recency_window_ms: int = DEFAULT_RECENCY_WINDOW_MS,
) -> list[AlertNotification]:
    """Compute the alerts that are new for this snapshot.

    Pure function. Zones are checked regardless of visibility. Output order
    follows event order, then zone order, so identical inputs always give
    identical output.

    Args:
        events: Latest full event snapshot
        zones: All alert zones
        min_magnitude: Alert magnitude threshold (inclusive)
        existing_alert_ids: IDs of alerts already raised
        now: Current time in milliseconds since epoch
        recency_window_ms: Maximum event age that may raise an alert

    Returns:
        Newly qualifying alerts, none of which is in existing_alert_ids
    """
    if not zones or not events:
        return []

    new_alerts: list[AlertNotification] = []
    seen: set[str] = set()

    for event in events:
        if not matches_magnitude(event, min_magnitude):
            continue

        if not is_recent(event, now, recency_window_ms):
            continue

        for zone in zones:
            if not is_within_zone(event, zone):
                continue

            candidate_id = alert_id(event.id, zone.id)
            if candidate_id in existing_alert_ids or candidate_id in seen:
                continue

            seen.add(candidate_id)
            new_alerts.append(build_alert(event, zone))

    return new_alerts
