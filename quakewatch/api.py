"""QuakeWatch API - FastAPI surface for the monitor.

Serves the event list, zones, active alerts, settings and the AI assistant
to a UI. Every handler is async and touches the monitor on the event loop
thread only; blocking I/O (feed fetch, model calls) runs in worker threads.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any

import requests
from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from pydantic import BaseModel, Field

from quakewatch.assistant import SafetyAssistant
from quakewatch.core.alerts import AlertNotification
from quakewatch.core.dedup import AlertNotFoundError
from quakewatch.core.event import (
    SeismicEvent,
    SortOrder,
    TimeRange,
    event_types,
    filter_events,
    sort_events,
)
from quakewatch.core.zones import AlertZone, InvalidZoneError, ZoneNotFoundError
from quakewatch.monitor import InvalidSettingsError, Monitor, RefreshResult


logger = logging.getLogger(__name__)


# ===== Request Models =====

class ZoneCreate(BaseModel):
    name: str
    latitude: float
    longitude: float
    radius_km: float


class ZoneUpdate(ZoneCreate):
    is_visible: bool | None = None


class SettingsUpdate(BaseModel):
    min_alert_magnitude: float | None = None
    sound_enabled: bool | None = None
    siren_enabled: bool | None = None
    quake_sound_enabled: bool | None = None
    voice_alert_enabled: bool | None = None
    volume: float | None = None
    period: str | None = None


class LocationUpdate(BaseModel):
    latitude: float
    longitude: float


class ChatRequest(BaseModel):
    message: str = Field(min_length=1)


# ===== Serialization =====

def _iso(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).isoformat()


def _event_to_dict(event: SeismicEvent) -> dict[str, Any]:
    data = asdict(event)
    data["time"] = _iso(event.occurred_at)
    return data


def _alert_to_dict(alert: AlertNotification) -> dict[str, Any]:
    data = asdict(alert)
    data["time"] = _iso(alert.occurred_at)
    return data


def _zone_to_dict(zone: AlertZone) -> dict[str, Any]:
    return asdict(zone)


def _refresh_to_dict(result: RefreshResult) -> dict[str, Any]:
    return {
        "success": result.success,
        "events_fetched": result.events_fetched,
        "new_alerts": [_alert_to_dict(a) for a in result.new_alerts],
        "errors": result.errors,
    }


def _validation_detail(errors) -> list[dict[str, str]]:
    return [{"field": e.field, "message": e.message} for e in errors]


# ===== Refresh =====

async def refresh_monitor(monitor: Monitor) -> RefreshResult:
    """Fetch on a worker thread, then run the pipeline on the loop thread."""
    try:
        events = await asyncio.to_thread(monitor.fetch_snapshot)
    except (requests.RequestException, ValueError) as e:
        return monitor.fetch_failed(e)
    return monitor.fetch_succeeded(events)


async def _refresh_loop(monitor: Monitor, interval: float) -> None:
    """Initial load, then periodic refresh while the period is 'day'."""
    await refresh_monitor(monitor)
    while True:
        await asyncio.sleep(interval)
        if monitor.settings.period != "day":
            continue
        try:
            await refresh_monitor(monitor)
        except Exception:
            logger.exception("Background refresh failed")


def create_app(
    monitor: Monitor,
    assistant: SafetyAssistant | None = None,
    background_refresh: bool = True,
) -> FastAPI:
    """Build the API application.

    Args:
        monitor: Monitor owning events, zones and alerts
        assistant: AI assistant (features fall back when None)
        background_refresh: Run the polling loop while the app is up
    """
    assistant = assistant or SafetyAssistant(None)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        task = None
        if background_refresh:
            task = asyncio.create_task(
                _refresh_loop(monitor, monitor.config.refresh_interval_seconds)
            )
        try:
            yield
        finally:
            if task is not None:
                task.cancel()
            monitor.stop_alarm()

    app = FastAPI(
        title="QuakeWatch API",
        description="Earthquake monitoring with zone alerts",
        version="1.0.0",
        lifespan=lifespan,
    )

    # ===== Feed =====

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "last_updated": monitor.last_updated,
            "error": monitor.last_error,
        }

    @app.get("/events")
    async def get_events(
        search: str = Query(default=""),
        min_magnitude: float = Query(default=0.0, ge=0),
        types: list[str] | None = Query(default=None),
        time_range: TimeRange = Query(default=TimeRange.ALL),
        sort: SortOrder = Query(default=SortOrder.NEWEST),
        limit: int | None = Query(default=None, ge=1),
    ):
        events = list(monitor.events)
        filtered = filter_events(
            events,
            now=monitor.clock(),
            search=search,
            min_magnitude=min_magnitude,
            types=types,
            time_range=time_range,
        )
        ordered = sort_events(filtered, sort)
        if limit is not None:
            ordered = ordered[:limit]

        return {
            "count": len(ordered),
            "total": len(events),
            "types": event_types(events),
            "period": monitor.settings.period,
            "last_updated": monitor.last_updated,
            "error": monitor.last_error,
            "events": [_event_to_dict(e) for e in ordered],
        }

    @app.get("/stats")
    async def get_stats():
        stats = monitor.stats()
        return {
            "total": stats.total,
            "strongest": _event_to_dict(stats.strongest) if stats.strongest else None,
            "nearest": _event_to_dict(stats.nearest) if stats.nearest else None,
            "nearest_distance_km": stats.nearest_distance_km,
        }

    @app.post("/refresh")
    async def post_refresh():
        return _refresh_to_dict(await refresh_monitor(monitor))

    # ===== Zones =====

    @app.get("/zones")
    async def list_zones():
        return {"zones": [_zone_to_dict(z) for z in monitor.zone_store.zones]}

    @app.post("/zones", status_code=201)
    async def create_zone(body: ZoneCreate):
        try:
            zone = monitor.add_zone(body.name, body.latitude, body.longitude, body.radius_km)
        except InvalidZoneError as e:
            raise HTTPException(status_code=422, detail=_validation_detail(e.errors))
        return _zone_to_dict(zone)

    @app.put("/zones/{zone_id}")
    async def update_zone(zone_id: str, body: ZoneUpdate):
        try:
            zone = monitor.update_zone(
                zone_id,
                body.name,
                body.latitude,
                body.longitude,
                body.radius_km,
                is_visible=body.is_visible,
            )
        except ZoneNotFoundError:
            raise HTTPException(status_code=404, detail=f"Zone '{zone_id}' not found")
        except InvalidZoneError as e:
            raise HTTPException(status_code=422, detail=_validation_detail(e.errors))
        return _zone_to_dict(zone)

    @app.post("/zones/{zone_id}/toggle")
    async def toggle_zone(zone_id: str):
        try:
            zone = monitor.toggle_zone_visibility(zone_id)
        except ZoneNotFoundError:
            raise HTTPException(status_code=404, detail=f"Zone '{zone_id}' not found")
        return _zone_to_dict(zone)

    @app.delete("/zones/{zone_id}")
    async def delete_zone(zone_id: str):
        try:
            monitor.delete_zone(zone_id)
        except ZoneNotFoundError:
            raise HTTPException(status_code=404, detail=f"Zone '{zone_id}' not found")
        return {"deleted": zone_id}

    # ===== Alerts =====

    @app.get("/alerts")
    async def list_alerts():
        return {"alerts": [_alert_to_dict(a) for a in monitor.active_alerts]}

    @app.delete("/alerts/{alert_id}")
    async def dismiss_alert(alert_id: str):
        try:
            monitor.dismiss_alert(alert_id)
        except AlertNotFoundError:
            raise HTTPException(status_code=404, detail=f"Alert '{alert_id}' not found")
        return {"dismissed": alert_id}

    @app.post("/alarm/stop")
    async def stop_alarm():
        monitor.stop_alarm()
        return {"stopped": True}

    @app.post("/alarm/test")
    async def test_alarm():
        monitor.test_sound()
        return {"played": monitor.settings.sound_enabled}

    # ===== Settings =====

    @app.get("/settings")
    async def get_settings():
        return asdict(monitor.settings)

    @app.put("/settings")
    async def update_settings(body: SettingsUpdate):
        changes = body.model_dump(exclude_none=True)
        previous_period = monitor.settings.period

        try:
            settings = monitor.update_settings(**changes)
        except InvalidSettingsError as e:
            raise HTTPException(status_code=422, detail=_validation_detail(e.errors))

        if settings.period != previous_period:
            await refresh_monitor(monitor)

        return asdict(settings)

    @app.put("/location")
    async def set_location(body: LocationUpdate):
        try:
            location = monitor.set_user_location(body.latitude, body.longitude)
        except InvalidSettingsError as e:
            raise HTTPException(status_code=422, detail=_validation_detail(e.errors))
        return asdict(location)

    # ===== Assistant =====

    @app.get("/assistant/analysis")
    async def get_analysis():
        text = await asyncio.to_thread(assistant.analyze, list(monitor.events))
        return {"text": text}

    @app.post("/assistant/chat")
    async def post_chat(body: ChatRequest):
        text = await asyncio.to_thread(assistant.chat, body.message)
        return {"text": text}

    @app.post("/assistant/locate")
    async def post_locate(image: UploadFile = File(...)):
        data = await image.read()
        mime_type = image.content_type or "image/jpeg"

        guess = await asyncio.to_thread(assistant.locate, data, mime_type)
        if guess is None:
            return {"identified": False}

        return {
            "identified": True,
            "latitude": guess.latitude,
            "longitude": guess.longitude,
            "name": guess.name,
        }

    return app
