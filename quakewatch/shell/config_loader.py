"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables, and converting persisted settings. All I/O is
contained here.

Models (AppConfig, Settings) are defined in quakewatch/core/config.py
to avoid information leakage between layers.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import Any, Optional

import yaml

from quakewatch.core.config import AppConfig, Settings
from quakewatch.shell.secret_manager_client import SecretManagerClient, SecretManagerConfig


logger = logging.getLogger(__name__)


def _get_secret_manager_client() -> Optional[SecretManagerClient]:
    """Get or create a Secret Manager client.

    Returns None if GCP_PROJECT is not set (e.g., local development).
    """
    project_id = os.environ.get("GCP_PROJECT")
    if not project_id:
        # Try to get from gcloud config
        try:
            result = subprocess.run(
                ["gcloud", "config", "get-value", "project"],
                capture_output=True,
                text=True,
                timeout=2,
            )
            if result.returncode == 0 and result.stdout.strip():
                project_id = result.stdout.strip()
        except (OSError, subprocess.SubprocessError):
            logger.debug("gcloud not available, skipping Secret Manager")

    if project_id:
        return SecretManagerClient(SecretManagerConfig(project_id=project_id))
    return None


def _resolve_value(value: Any, secret_client: Optional[SecretManagerClient] = None) -> Any:
    """Resolve a value that may contain secret or env var placeholders.

    Delegates to SecretManagerClient.resolve() when a client is available.

    Args:
        value: Value to resolve (may contain ${...} placeholders)
        secret_client: Client for resolving secrets

    Returns:
        Resolved value
    """
    if not isinstance(value, str):
        return value

    if secret_client:
        return secret_client.resolve(value)

    # No secret client - only handle env vars
    if value.startswith("${") and value.endswith("}"):
        var_spec = value[2:-1]
        if not var_spec.startswith("secret:"):
            env_value = os.environ.get(var_spec)
            if env_value:
                return env_value
            logger.warning("Environment variable %s not set", var_spec)

    return value


def _optional_float(value: Any) -> float | None:
    return None if value is None else float(value)


def load_config_from_dict(data: dict[str, Any]) -> AppConfig:
    """Load configuration from a dictionary.

    This is a pure-ish function (only placeholder expansion has side effects).

    Args:
        data: Configuration dictionary

    Returns:
        Parsed AppConfig object
    """
    storage = data.get("storage", {}) or {}
    assistant = data.get("assistant", {}) or {}
    home = data.get("home_location", {}) or {}
    api = data.get("api", {}) or {}

    api_key = assistant.get("api_key")
    if isinstance(api_key, str) and api_key.startswith("${secret:"):
        api_key = _resolve_value(api_key, _get_secret_manager_client())
    else:
        api_key = _resolve_value(api_key)

    return AppConfig(
        refresh_interval_seconds=int(data.get("refresh_interval_seconds", 300)),
        recency_window_hours=float(data.get("recency_window_hours", 24)),
        significant_magnitude=float(data.get("significant_magnitude", 5.5)),
        storage_backend=storage.get("backend", "file"),
        storage_path=storage.get("path", "data/quakewatch.json"),
        firestore_database=storage.get("firestore_database"),
        firestore_collection=storage.get("firestore_collection", "quakewatch"),
        gemini_api_key=api_key or None,
        gemini_model=assistant.get("model", "gemini-2.5-flash"),
        voice_language=data.get("voice_language", "bn"),
        home_latitude=_optional_float(home.get("latitude")),
        home_longitude=_optional_float(home.get("longitude")),
        api_host=api.get("host", "127.0.0.1"),
        api_port=int(api.get("port", 8080)),
    )


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    This method performs file I/O.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var or default.

    Returns:
        Parsed AppConfig object

    Raises:
        yaml.YAMLError: If config file is invalid YAML
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", "config/config.yaml")

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        logger.warning("Config file not found: %s, using defaults", path)
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        logger.warning("Config file is empty, using defaults")
        return AppConfig()

    config = load_config_from_dict(data)

    logger.info(
        "Loaded config: storage=%s, refresh=%ds, assistant=%s",
        config.storage_backend,
        config.refresh_interval_seconds,
        "on" if config.gemini_api_key else "off",
    )

    return config


def load_config_from_env() -> AppConfig:
    """Load minimal configuration from environment variables.

    Useful for simple deployments without a YAML file.

    Environment variables:
        GEMINI_API_KEY: Assistant API key (or GEMINI_API_SECRET in Secret Manager)
        GEMINI_API_SECRET: Secret name holding the assistant key
        STORAGE_BACKEND: 'file' or 'firestore'
        STORAGE_PATH: JSON file for the file backend
        FIRESTORE_DATABASE: Firestore database name
        HOME_LOCATION: Comma-separated "lat,lon"

    Returns:
        AppConfig object from environment
    """
    api_key = os.environ.get("GEMINI_API_KEY")

    secret_name = os.environ.get("GEMINI_API_SECRET")
    if not api_key and secret_name:
        secret_client = _get_secret_manager_client()
        if secret_client:
            api_key = secret_client.get_secret(secret_name)
            if api_key:
                logger.info("Using Gemini API key from Secret Manager")

    home_lat = home_lon = None
    home_str = os.environ.get("HOME_LOCATION")
    if home_str:
        parts = [p.strip() for p in home_str.split(",")]
        if len(parts) == 2:
            home_lat, home_lon = float(parts[0]), float(parts[1])
        else:
            logger.warning("Ignoring HOME_LOCATION, expected 'lat,lon'")

    return AppConfig(
        storage_backend=os.environ.get("STORAGE_BACKEND", "file"),
        storage_path=os.environ.get("STORAGE_PATH", "data/quakewatch.json"),
        firestore_database=os.environ.get("FIRESTORE_DATABASE"),
        gemini_api_key=api_key or None,
        home_latitude=home_lat,
        home_longitude=home_lon,
    )


def settings_from_dict(data: dict[str, Any] | None) -> Settings:
    """Build Settings from a persisted dictionary.

    Missing keys fall back to defaults; unknown keys are ignored.
    """
    if not data:
        return Settings()

    defaults = Settings()
    return Settings(
        min_alert_magnitude=float(data.get("min_alert_magnitude", defaults.min_alert_magnitude)),
        sound_enabled=bool(data.get("sound_enabled", defaults.sound_enabled)),
        siren_enabled=bool(data.get("siren_enabled", defaults.siren_enabled)),
        quake_sound_enabled=bool(data.get("quake_sound_enabled", defaults.quake_sound_enabled)),
        voice_alert_enabled=bool(data.get("voice_alert_enabled", defaults.voice_alert_enabled)),
        volume=float(data.get("volume", defaults.volume)),
        period=data.get("period", defaults.period),
    )


def settings_to_dict(settings: Settings) -> dict[str, Any]:
    """Serialize Settings for persistence."""
    return {
        "min_alert_magnitude": settings.min_alert_magnitude,
        "sound_enabled": settings.sound_enabled,
        "siren_enabled": settings.siren_enabled,
        "quake_sound_enabled": settings.quake_sound_enabled,
        "voice_alert_enabled": settings.voice_alert_enabled,
        "volume": settings.volume,
        "period": settings.period,
    }
