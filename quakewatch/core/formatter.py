"""Message formatting - Pure functions.

This module formats events and alerts into banner lines and spoken text.
All functions are pure with no side effects.
"""

from datetime import datetime, timezone

from quakewatch.core.alerts import AlertNotification
from quakewatch.core.event import SeismicEvent, get_region_name


VOICE_TEST_MESSAGES = {
    "bn": "এটি একটি পরীক্ষামূলক ভয়েস অ্যালার্ট।",
    "en": "This is a test voice alert.",
}


def get_magnitude_emoji(magnitude: float) -> str:
    """Get an emoji representing earthquake severity.

    Pure function.
    """
    if magnitude >= 7.0:
        return "🚨"  # Major
    elif magnitude >= 6.0:
        return "⚠️"  # Strong
    elif magnitude >= 5.0:
        return "🔶"  # Moderate
    elif magnitude >= 4.0:
        return "🔸"  # Light
    else:
        return "🔹"  # Minor


def get_severity_label(magnitude: float) -> str:
    """Get a human-readable severity label.

    Pure function.
    """
    if magnitude >= 8.0:
        return "Great"
    elif magnitude >= 7.0:
        return "Major"
    elif magnitude >= 6.0:
        return "Strong"
    elif magnitude >= 5.0:
        return "Moderate"
    elif magnitude >= 4.0:
        return "Light"
    elif magnitude >= 3.0:
        return "Minor"
    else:
        return "Micro"


def format_timestamp(occurred_at: int) -> str:
    """Format a millisecond timestamp as UTC text.

    Pure function.
    """
    moment = datetime.fromtimestamp(occurred_at / 1000, tz=timezone.utc)
    return moment.strftime("%Y-%m-%d %H:%M:%S UTC")


def format_event_summary(event: SeismicEvent) -> str:
    """Format a one-line summary of an event.

    Pure function.

    Args:
        event: Event to summarize

    Returns:
        One-line summary string
    """
    return (
        f"M{event.magnitude:.1f} - {event.place} "
        f"at {format_timestamp(event.occurred_at)} (depth: {event.depth_km:.1f}km)"
    )


def format_alert_banner(alert: AlertNotification) -> str:
    """Format the visual banner line for an active alert.

    Pure function.
    """
    emoji = get_magnitude_emoji(alert.magnitude)
    return (
        f"{emoji} ALERT [{alert.zone_name}] "
        f"M{alert.magnitude:.1f} {get_severity_label(alert.magnitude)} earthquake - "
        f"{alert.event_place} ({get_region_name(alert.event_place)}) "
        f"at {format_timestamp(alert.occurred_at)}"
    )


def format_voice_alert(alert: AlertNotification, language: str = "en") -> str:
    """Format the utterance spoken for a zone alert.

    Pure function.

    Args:
        alert: Alert to announce
        language: 'bn' for Bengali, anything else for English

    Returns:
        Text to synthesize
    """
    if language.startswith("bn"):
        return (
            f"সতর্কতা! {alert.zone_name} এলাকায় "
            f"{alert.magnitude} মাত্রার ভূমিকম্প শনাক্ত হয়েছে।"
        )
    return (
        f"Warning! A magnitude {alert.magnitude:.1f} earthquake "
        f"was detected in {alert.zone_name}."
    )


def format_voice_test(language: str = "en") -> str:
    """Utterance used by the test-sound action.

    Pure function.
    """
    if language.startswith("bn"):
        return VOICE_TEST_MESSAGES["bn"]
    return VOICE_TEST_MESSAGES["en"]
