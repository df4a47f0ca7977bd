"""Functional Core - Pure functions with no side effects.

This module contains all business logic as pure functions:
- Seismic event parsing, filtering and sorting
- Geo/distance calculations
- Alert zone operations
- Zone alert evaluation and merging
- Notification planning and tone synthesis
- Message and prompt formatting

All functions here are deterministic and have no I/O.
"""

from quakewatch.core.event import SeismicEvent, parse_events, filter_events, sort_events
from quakewatch.core.geo import distance_km, is_within_zone, summarize_events
from quakewatch.core.zones import AlertZone, InvalidZoneError, ZoneNotFoundError
from quakewatch.core.alerts import AlertNotification, evaluate
from quakewatch.core.dedup import AlertNotFoundError, merge_alerts, dismiss_alert
from quakewatch.core.notifications import (
    DispatcherState,
    plan_alert_notifications,
    plan_latest_event_notification,
)
from quakewatch.core.tones import QUAKE_TONE, SIREN_TONE, render_tone
from quakewatch.core.config import AppConfig, Settings

__all__ = [
    # Events
    "SeismicEvent",
    "parse_events",
    "filter_events",
    "sort_events",
    # Geo
    "distance_km",
    "is_within_zone",
    "summarize_events",
    # Zones
    "AlertZone",
    "InvalidZoneError",
    "ZoneNotFoundError",
    # Alerts
    "AlertNotification",
    "evaluate",
    "AlertNotFoundError",
    "merge_alerts",
    "dismiss_alert",
    # Notifications
    "DispatcherState",
    "plan_alert_notifications",
    "plan_latest_event_notification",
    "QUAKE_TONE",
    "SIREN_TONE",
    "render_tone",
    # Config
    "AppConfig",
    "Settings",
]
