"""Monitor - Wires Functional Core and Imperative Shell.

This module coordinates the flow of data between the pure functional
core and the I/O-performing shell components:

    fetch -> evaluate -> merge -> dispatch -> render

It owns the latest event snapshot, the active alert collection and the
settings. Collections are replaced, never edited in place, so a renderer
holding the previous snapshot is never affected by the next cycle.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable

import requests

from quakewatch.core.alerts import AlertNotification, evaluate
from quakewatch.core.config import (
    AppConfig,
    Settings,
    validate_coordinates,
    validate_settings,
)
from quakewatch.core.dedup import dismiss_alert, merge_alerts
from quakewatch.core.event import SeismicEvent, parse_events
from quakewatch.core.geo import EventStats, Location, summarize_events
from quakewatch.core.zones import AlertZone
from quakewatch.dispatcher import NotificationDispatcher
from quakewatch.shell.config_loader import settings_from_dict, settings_to_dict
from quakewatch.shell.storage import Repository
from quakewatch.shell.usgs_client import USGSClient
from quakewatch.zone_store import ZoneStore


logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class InvalidSettingsError(ValueError):
    """Raised when a settings change violates settings constraints."""

    def __init__(self, errors) -> None:
        self.errors = errors
        super().__init__("; ".join(f"{e.field}: {e.message}" for e in errors))


@dataclass
class RefreshResult:
    """Result of one refresh cycle.

    Attributes:
        events_fetched: Events in the new snapshot (0 if the fetch failed)
        new_alerts: Alerts raised in this cycle
        errors: Any errors that occurred
    """
    events_fetched: int
    new_alerts: list[AlertNotification] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Returns True if the feed was fetched and evaluated."""
        return len(self.errors) == 0

    @property
    def summary(self) -> str:
        """Human-readable summary of the refresh."""
        if not self.success:
            return f"Refresh failed: {'; '.join(self.errors)}"
        return (
            f"Fetched {self.events_fetched} events, "
            f"{len(self.new_alerts)} new alerts"
        )


@dataclass(frozen=True)
class MonitorSnapshot:
    """What a renderer needs after each pipeline stage.

    Attributes:
        events: Latest event snapshot, newest first
        active_alerts: Active alerts, newest first
        zones: Alert zones
        settings: Current settings
        last_updated: Time of the last successful fetch (ms), None before it
        error: Last refresh error, None after a successful refresh
    """
    events: tuple[SeismicEvent, ...]
    active_alerts: tuple[AlertNotification, ...]
    zones: tuple[AlertZone, ...]
    settings: Settings
    last_updated: int | None = None
    error: str | None = None


class Monitor:
    """Coordinates earthquake monitoring and zone alerting.

    This class wires together:
    - USGS client (fetches event snapshots)
    - Core functions (parsing, evaluation, merging)
    - Zone store (alert zones)
    - Notification dispatcher (siren, quake tone, voice)
    - Settings repository (persisted user settings)
    """

    def __init__(
        self,
        config: AppConfig,
        zone_store: ZoneStore,
        settings_repository: Repository,
        dispatcher: NotificationDispatcher,
        usgs_client: USGSClient | None = None,
        clock: Callable[[], int] = _now_ms,
        on_render: Callable[[MonitorSnapshot], None] | None = None,
    ) -> None:
        """Initialize monitor.

        Args:
            config: Application configuration
            zone_store: Alert zone store
            settings_repository: Repository bound to the settings key
            dispatcher: Notification dispatcher
            usgs_client: USGS client (created if not provided)
            clock: Milliseconds since epoch
            on_render: Called with a snapshot after every state change
        """
        self.config = config
        self.zone_store = zone_store
        self.settings_repository = settings_repository
        self.dispatcher = dispatcher
        self.usgs_client = usgs_client or USGSClient()
        self.clock = clock
        self.on_render = on_render

        self._settings = settings_from_dict(settings_repository.load())
        self._events: tuple[SeismicEvent, ...] = ()
        self._active_alerts: tuple[AlertNotification, ...] = ()
        # Raised ids (dismissed ones included) -> event time, pruned once stale
        self._raised_ids: dict[str, int] = {}
        self._last_updated: int | None = None
        self._last_error: str | None = None
        self._user_location: Location | None = None

        if config.home_latitude is not None and config.home_longitude is not None:
            self._user_location = Location(config.home_latitude, config.home_longitude)

    @property
    def events(self) -> tuple[SeismicEvent, ...]:
        return self._events

    @property
    def active_alerts(self) -> tuple[AlertNotification, ...]:
        return self._active_alerts

    @property
    def raised_alert_ids(self) -> frozenset[str]:
        """Ids that will not be raised again while their event is recent."""
        return frozenset(self._raised_ids)

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def user_location(self) -> Location | None:
        return self._user_location

    @property
    def last_updated(self) -> int | None:
        return self._last_updated

    @property
    def last_error(self) -> str | None:
        return self._last_error

    def snapshot(self) -> MonitorSnapshot:
        """Build the current render snapshot."""
        return MonitorSnapshot(
            events=self._events,
            active_alerts=self._active_alerts,
            zones=self.zone_store.zones,
            settings=self._settings,
            last_updated=self._last_updated,
            error=self._last_error,
        )

    def _render(self) -> None:
        if self.on_render is None:
            return
        try:
            self.on_render(self.snapshot())
        except Exception:
            logger.exception("Render callback failed")

    def fetch_snapshot(self, period: str | None = None) -> list[SeismicEvent]:
        """Fetch and parse a feed snapshot.

        This method performs HTTP I/O and touches no monitor state, so it
        can run on a worker thread.

        Raises:
            requests.RequestException: If the request fails
            ValueError: If the body is not valid JSON
        """
        geojson = self.usgs_client.fetch_feed(period or self._settings.period)

        # Pure core function
        return parse_events(geojson)

    def _evaluate(self) -> list[AlertNotification]:
        """Evaluate the current snapshot and merge new alerts."""
        now = self.clock()
        window = self.config.recency_window_ms

        # An event at or past the window edge can never alert again
        self._raised_ids = {
            alert_id: occurred_at
            for alert_id, occurred_at in self._raised_ids.items()
            if now - occurred_at < window
        }

        new_alerts = evaluate(
            list(self._events),
            self.zone_store.zones,
            self._settings.min_alert_magnitude,
            frozenset(self._raised_ids),
            now,
            window,
        )

        if new_alerts:
            self._active_alerts = merge_alerts(self._active_alerts, new_alerts)
            self._raised_ids.update((a.id, a.occurred_at) for a in new_alerts)
            for alert in new_alerts:
                logger.warning(
                    "ALERT: M%.1f %s within zone %s",
                    alert.magnitude,
                    alert.event_place,
                    alert.zone_name,
                )

        self.dispatcher.on_alerts_changed(self._active_alerts, self._settings)
        return new_alerts

    def apply_snapshot(self, events: list[SeismicEvent]) -> list[AlertNotification]:
        """Install a freshly fetched snapshot and run the alert pipeline.

        Returns:
            Alerts raised for this snapshot
        """
        self._events = tuple(events)
        self._last_updated = self.clock()
        self._last_error = None

        new_alerts = self._evaluate()
        self.dispatcher.on_events_changed(list(self._events), self._settings)
        self._render()

        return new_alerts

    def fetch_failed(self, error: Exception) -> RefreshResult:
        """Record a failed fetch; the previous snapshot stays in place."""
        if isinstance(error, requests.RequestException):
            message = f"Failed to fetch USGS feed: {error}"
        else:
            message = f"Invalid USGS feed: {error}"

        logger.error(message)
        self._last_error = message
        self._render()
        return RefreshResult(events_fetched=0, errors=[message])

    def fetch_succeeded(self, events: list[SeismicEvent]) -> RefreshResult:
        """Run the alert pipeline on a fetched snapshot."""
        new_alerts = self.apply_snapshot(events)
        result = RefreshResult(events_fetched=len(events), new_alerts=new_alerts)
        logger.info(result.summary)
        return result

    def refresh(self) -> RefreshResult:
        """Run one complete fetch -> evaluate -> dispatch cycle.

        A failed fetch keeps the previous snapshot and skips evaluation.
        """
        try:
            events = self.fetch_snapshot()
        except (requests.RequestException, ValueError) as e:
            return self.fetch_failed(e)

        return self.fetch_succeeded(events)

    def _reevaluate(self) -> None:
        self._evaluate()
        self._render()

    # --- Zones ---

    def add_zone(
        self,
        name: str,
        latitude: float,
        longitude: float,
        radius_km: float,
    ) -> AlertZone:
        """Create a zone and evaluate the current snapshot against it."""
        zone = self.zone_store.create(name, latitude, longitude, radius_km)
        self._reevaluate()
        return zone

    def update_zone(
        self,
        zone_id: str,
        name: str,
        latitude: float,
        longitude: float,
        radius_km: float,
        is_visible: bool | None = None,
    ) -> AlertZone:
        """Edit a zone and re-evaluate."""
        zone = self.zone_store.update(
            zone_id, name, latitude, longitude, radius_km, is_visible=is_visible,
        )
        self._reevaluate()
        return zone

    def toggle_zone_visibility(self, zone_id: str) -> AlertZone:
        """Flip visibility. Alerting is unaffected."""
        zone = self.zone_store.toggle_visibility(zone_id)
        self._render()
        return zone

    def delete_zone(self, zone_id: str) -> None:
        """Delete a zone. Its active alerts stay until dismissed."""
        self.zone_store.delete(zone_id)
        self._render()

    # --- Alerts and sound ---

    def dismiss_alert(self, alert_id: str) -> None:
        """Remove an active alert.

        Raises:
            AlertNotFoundError: If the id is not active
        """
        self._active_alerts = dismiss_alert(self._active_alerts, alert_id)
        self.dispatcher.on_alerts_changed(self._active_alerts, self._settings)
        self._render()

    def stop_alarm(self) -> None:
        """Silence every tone and utterance."""
        self.dispatcher.stop()

    def test_sound(self) -> None:
        """Play the test tone (and test utterance) with current settings."""
        self.dispatcher.test_sound(self._settings)

    # --- Settings ---

    def update_settings(self, **changes) -> Settings:
        """Apply and persist settings changes.

        A new alert threshold re-evaluates the current snapshot; a new
        period needs a fresh fetch (see set_period).

        Raises:
            InvalidSettingsError: If the result violates settings constraints
        """
        settings = self._settings.with_changes(**changes)
        errors = validate_settings(settings)
        if errors:
            raise InvalidSettingsError(errors)

        previous = self._settings
        self._settings = settings
        self.settings_repository.save(settings_to_dict(settings))

        if settings.min_alert_magnitude != previous.min_alert_magnitude:
            self._reevaluate()
        else:
            self._render()

        return settings

    def set_period(self, period: str) -> RefreshResult:
        """Switch the feed window and refetch.

        Raises:
            InvalidSettingsError: If the period is unknown
        """
        self.update_settings(period=period)
        return self.refresh()

    def set_user_location(self, latitude: float, longitude: float) -> Location:
        """Record the user's position for nearest-event statistics.

        Raises:
            InvalidSettingsError: If the coordinates are out of range
        """
        errors = validate_coordinates(latitude, longitude, "location")
        if errors:
            raise InvalidSettingsError(errors)

        self._user_location = Location(latitude, longitude)
        return self._user_location

    def stats(self) -> EventStats:
        """Statistics over the current snapshot."""
        return summarize_events(list(self._events), self._user_location)
