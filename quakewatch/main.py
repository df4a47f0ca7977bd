"""Command-line entry point.

Loads configuration, wires the monitor and runs one of:

    run         poll the feed and alert until interrupted
    once        run a single refresh cycle
    serve       start the HTTP API
    zones       list, add, remove or toggle alert zones
    test-sound  play the test tone and utterance
"""

import argparse
import logging
import os
import sys
import time

from quakewatch.assistant import SafetyAssistant
from quakewatch.core.config import AppConfig, validate_config
from quakewatch.core.formatter import format_alert_banner
from quakewatch.core.zones import InvalidZoneError, ZoneNotFoundError
from quakewatch.dispatcher import NotificationDispatcher
from quakewatch.monitor import Monitor, MonitorSnapshot
from quakewatch.shell.audio import NullAudioOutput, SoundDeviceOutput
from quakewatch.shell.config_loader import load_config, load_config_from_env
from quakewatch.shell.firestore_client import FirestoreConfig, FirestoreStore
from quakewatch.shell.gemini_client import GeminiClient
from quakewatch.shell.speech import NullSpeechOutput, Pyttsx3Speech
from quakewatch.shell.storage import (
    SETTINGS_KEY,
    ZONES_KEY,
    JsonFileStore,
    KeyValueStore,
    Repository,
)
from quakewatch.shell.usgs_client import USGSClient
from quakewatch.zone_store import ZoneStore


logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _get_config() -> AppConfig:
    """Load configuration from file or environment."""
    config_path = os.environ.get("CONFIG_PATH")

    if config_path:
        return load_config(config_path)
    elif os.environ.get("GEMINI_API_KEY") or os.environ.get("STORAGE_BACKEND"):
        # Simple env-based config
        return load_config_from_env()
    else:
        # Try default config path
        return load_config()


def build_store(config: AppConfig) -> KeyValueStore:
    """Create the configured key-value backend."""
    if config.storage_backend == "firestore":
        return FirestoreStore(
            FirestoreConfig(
                database=config.firestore_database,
                collection=config.firestore_collection,
            )
        )
    return JsonFileStore(config.storage_path)


class BannerLogger:
    """Render callback that logs each active alert once."""

    def __init__(self) -> None:
        self._logged_ids: set[str] = set()

    def __call__(self, snapshot: MonitorSnapshot) -> None:
        active_ids = {alert.id for alert in snapshot.active_alerts}
        for alert in snapshot.active_alerts:
            if alert.id not in self._logged_ids:
                logger.info(format_alert_banner(alert))
        # Only ids still active are remembered
        self._logged_ids = active_ids


def build_monitor(config: AppConfig, quiet: bool = False) -> tuple[Monitor, SafetyAssistant]:
    """Wire the monitor and assistant for a configuration.

    Args:
        config: Application configuration
        quiet: Use null audio and speech outputs
    """
    store = build_store(config)

    if quiet:
        audio, speech = NullAudioOutput(), NullSpeechOutput()
    else:
        audio, speech = SoundDeviceOutput(), Pyttsx3Speech(language=config.voice_language)

    dispatcher = NotificationDispatcher(
        audio,
        speech,
        significant_magnitude=config.significant_magnitude,
        voice_language=config.voice_language,
    )

    monitor = Monitor(
        config,
        zone_store=ZoneStore(Repository(store, ZONES_KEY)),
        settings_repository=Repository(store, SETTINGS_KEY),
        dispatcher=dispatcher,
        usgs_client=USGSClient(),
    )

    gemini = None
    if config.gemini_api_key and not config.gemini_api_key.startswith("${"):
        gemini = GeminiClient(config.gemini_api_key, model=config.gemini_model)

    return monitor, SafetyAssistant(gemini)


# ===== Commands =====

def cmd_run(monitor: Monitor, args: argparse.Namespace) -> int:
    monitor.on_render = BannerLogger()
    interval = args.interval or monitor.config.refresh_interval_seconds

    logger.info("Monitoring %s feed every %ds (Ctrl+C to stop)", monitor.settings.period, interval)
    try:
        monitor.refresh()
        while True:
            time.sleep(interval)
            if monitor.settings.period == "day":
                monitor.refresh()
    except KeyboardInterrupt:
        logger.info("Stopping")
    finally:
        monitor.stop_alarm()
    return 0


def cmd_once(monitor: Monitor, args: argparse.Namespace) -> int:
    result = monitor.refresh()
    print(result.summary)
    for alert in result.new_alerts:
        print(format_alert_banner(alert))

    # Let tones and speech finish before exiting
    time.sleep(args.linger)
    monitor.stop_alarm()
    return 0 if result.success else 1


def cmd_serve(monitor: Monitor, assistant: SafetyAssistant, args: argparse.Namespace) -> int:
    import uvicorn

    from quakewatch.api import create_app

    app = create_app(monitor, assistant)
    uvicorn.run(
        app,
        host=args.host or monitor.config.api_host,
        port=args.port or monitor.config.api_port,
    )
    return 0


def cmd_zones(monitor: Monitor, args: argparse.Namespace) -> int:
    try:
        if args.zones_command == "add":
            zone = monitor.add_zone(args.name, args.lat, args.lon, args.radius)
            print(f"Created {zone.id}")
        elif args.zones_command == "remove":
            monitor.delete_zone(args.zone_id)
            print(f"Deleted {args.zone_id}")
        elif args.zones_command == "toggle":
            zone = monitor.toggle_zone_visibility(args.zone_id)
            print(f"{zone.id} visible={zone.is_visible}")
        else:
            zones = monitor.zone_store.zones
            if not zones:
                print("No alert zones")
            for z in zones:
                hidden = "" if z.is_visible else " (hidden)"
                print(f"{z.id}  {z.name}  {z.latitude:.4f},{z.longitude:.4f}  {z.radius_km:.0f} km{hidden}")
    except ZoneNotFoundError as e:
        print(f"Zone not found: {e}", file=sys.stderr)
        return 1
    except InvalidZoneError as e:
        print(f"Invalid zone: {e}", file=sys.stderr)
        return 1
    return 0


def cmd_test_sound(monitor: Monitor, args: argparse.Namespace) -> int:
    monitor.test_sound()
    time.sleep(args.linger)
    monitor.stop_alarm()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quakewatch",
        description="Earthquake monitoring with zone alerts",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Disable sound and speech output",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Poll the feed until interrupted")
    run.add_argument("--interval", type=int, help="Seconds between refreshes")

    once = sub.add_parser("once", help="Run a single refresh cycle")
    once.add_argument("--linger", type=float, default=5.0, help="Seconds to let sounds play")

    serve = sub.add_parser("serve", help="Start the HTTP API")
    serve.add_argument("--host", type=str)
    serve.add_argument("--port", type=int)

    zones = sub.add_parser("zones", help="Manage alert zones")
    zones_sub = zones.add_subparsers(dest="zones_command")
    zones_sub.add_parser("list", help="List zones")
    add = zones_sub.add_parser("add", help="Add a zone")
    add.add_argument("name", type=str)
    add.add_argument("--lat", type=float, required=True)
    add.add_argument("--lon", type=float, required=True)
    add.add_argument("--radius", type=float, required=True, help="Radius in km")
    remove = zones_sub.add_parser("remove", help="Delete a zone")
    remove.add_argument("zone_id", type=str)
    toggle = zones_sub.add_parser("toggle", help="Toggle zone visibility")
    toggle.add_argument("zone_id", type=str)

    test = sub.add_parser("test-sound", help="Play the test tone and utterance")
    test.add_argument("--linger", type=float, default=5.0, help="Seconds to let sounds play")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging()

    config = _get_config()
    validation = validate_config(config)
    for warning in validation.warnings:
        logger.warning("Config %s: %s", warning.field, warning.message)
    if not validation.valid:
        for error in validation.critical_errors:
            logger.error("Config %s: %s", error.field, error.message)
        return 2

    monitor, assistant = build_monitor(config, quiet=args.quiet or args.command == "zones")

    if args.command == "run":
        return cmd_run(monitor, args)
    if args.command == "once":
        return cmd_once(monitor, args)
    if args.command == "serve":
        return cmd_serve(monitor, assistant, args)
    if args.command == "zones":
        return cmd_zones(monitor, args)
    return cmd_test_sound(monitor, args)


if __name__ == "__main__":
    sys.exit(main())
