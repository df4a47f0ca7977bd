"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.
"""

from dataclasses import dataclass, field, replace


DEFAULT_MIN_ALERT_MAGNITUDE = 3.0
DEFAULT_REFRESH_INTERVAL_SECONDS = 300
DEFAULT_RECENCY_WINDOW_HOURS = 24
DEFAULT_SIGNIFICANT_MAGNITUDE = 5.5

PERIODS = ("day", "week", "month")


@dataclass(frozen=True)
class Settings:
    """User-adjustable settings consumed by the alert pipeline.

    Passed explicitly into the evaluator and dispatcher; never read from
    ambient state. Persisted under the "settings" key.

    Attributes:
        min_alert_magnitude: Minimum magnitude for zone alerts (inclusive)
        sound_enabled: Master sound toggle
        siren_enabled: Siren channel toggle (zone alerts)
        quake_sound_enabled: Quake tone channel toggle (significant events)
        voice_alert_enabled: Voice channel toggle
        volume: Output volume in [0, 1]
        period: Feed window, one of 'day', 'week', 'month'
    """
    min_alert_magnitude: float = DEFAULT_MIN_ALERT_MAGNITUDE
    sound_enabled: bool = True
    siren_enabled: bool = True
    quake_sound_enabled: bool = True
    voice_alert_enabled: bool = True
    volume: float = 1.0
    period: str = "day"

    def with_changes(self, **changes) -> "Settings":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)


@dataclass
class AppConfig:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        refresh_interval_seconds: Poll interval in 'day' mode
        recency_window_hours: Maximum event age that may still raise an alert
        significant_magnitude: Severity floor for the quake tone
        storage_backend: 'file' or 'firestore'
        storage_path: JSON file used by the file backend
        firestore_database: Firestore database name (None for default)
        firestore_collection: Firestore collection for persisted keys
        gemini_api_key: API key for the AI assistant (None disables it)
        gemini_model: Model name for the AI assistant
        voice_language: Preferred speech voice language prefix
        home_latitude: Fixed user latitude (optional)
        home_longitude: Fixed user longitude (optional)
        api_host: Bind host for the HTTP API
        api_port: Bind port for the HTTP API
    """
    refresh_interval_seconds: int = DEFAULT_REFRESH_INTERVAL_SECONDS
    recency_window_hours: float = DEFAULT_RECENCY_WINDOW_HOURS
    significant_magnitude: float = DEFAULT_SIGNIFICANT_MAGNITUDE
    storage_backend: str = "file"
    storage_path: str = "data/quakewatch.json"
    firestore_database: str | None = None
    firestore_collection: str = "quakewatch"
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-2.5-flash"
    voice_language: str = "bn"
    home_latitude: float | None = None
    home_longitude: float | None = None
    api_host: str = "127.0.0.1"
    api_port: int = 8080

    @property
    def recency_window_ms(self) -> int:
        """Recency window in milliseconds."""
        return int(self.recency_window_hours * 60 * 60 * 1000)


@dataclass
class ValidationError:
    """A configuration validation error.

    Attributes:
        field: The field that has an error
        message: Human-readable error description
        severity: 'error' or 'warning'
    """
    field: str
    message: str
    severity: str = "error"


@dataclass
class ValidationResult:
    """Result of validating configuration.

    Attributes:
        valid: True if no errors (warnings are OK)
        errors: List of validation errors/warnings
    """
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationError]:
        """Get only warnings."""
        return [e for e in self.errors if e.severity == "warning"]

    @property
    def critical_errors(self) -> list[ValidationError]:
        """Get only critical errors."""
        return [e for e in self.errors if e.severity == "error"]


def validate_coordinates(lat: float, lon: float, field_name: str) -> list[ValidationError]:
    """Validate latitude/longitude coordinates.

    Pure function.

    Args:
        lat: Latitude value
        lon: Longitude value
        field_name: Name of the field for error messages

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    if not -90 <= lat <= 90:
        errors.append(ValidationError(
            field=field_name,
            message=f"Latitude {lat} out of range [-90, 90]",
        ))

    if not -180 <= lon <= 180:
        errors.append(ValidationError(
            field=field_name,
            message=f"Longitude {lon} out of range [-180, 180]",
        ))

    return errors


def validate_settings(settings: Settings) -> list[ValidationError]:
    """Validate user settings.

    Pure function.
    """
    errors = []

    if not 0.0 <= settings.volume <= 1.0:
        errors.append(ValidationError(
            field="volume",
            message=f"Volume must be within [0, 1], got {settings.volume}",
        ))

    if not settings.min_alert_magnitude >= 0:
        errors.append(ValidationError(
            field="min_alert_magnitude",
            message=f"Minimum alert magnitude must be >= 0, got {settings.min_alert_magnitude}",
        ))

    if settings.period not in PERIODS:
        errors.append(ValidationError(
            field="period",
            message=f"Unknown period '{settings.period}', expected one of {', '.join(PERIODS)}",
        ))

    return errors


def validate_config(config: AppConfig) -> ValidationResult:
    """Validate configuration for errors and warnings.

    Pure function.

    Args:
        config: Configuration to validate

    Returns:
        ValidationResult with any errors/warnings found
    """
    errors: list[ValidationError] = []

    if not config.refresh_interval_seconds > 0:
        errors.append(ValidationError(
            field="refresh_interval_seconds",
            message=f"Refresh interval must be positive, got {config.refresh_interval_seconds}",
        ))

    if not config.recency_window_hours > 0:
        errors.append(ValidationError(
            field="recency_window_hours",
            message=f"Recency window must be positive, got {config.recency_window_hours}",
        ))

    if config.storage_backend not in ("file", "firestore"):
        errors.append(ValidationError(
            field="storage_backend",
            message=f"Unknown storage backend '{config.storage_backend}'",
        ))

    if (config.home_latitude is None) != (config.home_longitude is None):
        errors.append(ValidationError(
            field="home_location",
            message="Both home_latitude and home_longitude must be set",
        ))
    elif config.home_latitude is not None:
        errors.extend(validate_coordinates(
            config.home_latitude, config.home_longitude, "home_location",
        ))

    if not config.gemini_api_key or config.gemini_api_key.startswith("${"):
        errors.append(ValidationError(
            field="gemini_api_key",
            message="Gemini API key not resolved, assistant features disabled",
            severity="warning",
        ))

    has_critical = any(e.severity == "error" for e in errors)

    return ValidationResult(
        valid=not has_critical,
        errors=errors,
    )
