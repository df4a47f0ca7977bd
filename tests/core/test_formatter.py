"""Unit tests for message formatting.

Pure function tests - verify output format without side effects.
"""

import pytest

from quakewatch.core.alerts import AlertNotification
from quakewatch.core.event import SeismicEvent
from quakewatch.core.formatter import (
    VOICE_TEST_MESSAGES,
    format_alert_banner,
    format_event_summary,
    format_timestamp,
    format_voice_alert,
    format_voice_test,
    get_magnitude_emoji,
    get_severity_label,
)


@pytest.fixture
def sample_event():
    return SeismicEvent(
        id="us123",
        magnitude=4.5,
        place="10 km SW of Sylhet, Bangladesh",
        occurred_at=1_700_000_000_000,
        latitude=24.8,
        longitude=91.8,
        depth_km=12.3,
    )


@pytest.fixture
def sample_alert():
    return AlertNotification(
        id="us123-z1",
        event_id="us123",
        zone_id="z1",
        zone_name="Sylhet",
        event_place="10 km SW of Sylhet, Bangladesh",
        magnitude=4.5,
        occurred_at=1_700_000_000_000,
    )


class TestGetMagnitudeEmoji:
    """Tests for get_magnitude_emoji() function."""

    def test_major_earthquake(self):
        assert get_magnitude_emoji(7.5) == "🚨"

    def test_strong_earthquake(self):
        assert get_magnitude_emoji(6.5) == "⚠️"

    def test_moderate_earthquake(self):
        assert get_magnitude_emoji(5.5) == "🔶"

    def test_light_earthquake(self):
        assert get_magnitude_emoji(4.5) == "🔸"

    def test_minor_earthquake(self):
        assert get_magnitude_emoji(3.0) == "🔹"


class TestGetSeverityLabel:
    """Tests for get_severity_label() function."""

    @pytest.mark.parametrize("magnitude,label", [
        (8.1, "Great"),
        (7.0, "Major"),
        (6.2, "Strong"),
        (5.0, "Moderate"),
        (4.9, "Light"),
        (3.0, "Minor"),
        (2.5, "Micro"),
    ])
    def test_labels(self, magnitude, label):
        assert get_severity_label(magnitude) == label


class TestFormatTimestamp:
    """Tests for format_timestamp() function."""

    def test_utc_text(self):
        assert format_timestamp(1_700_000_000_000) == "2023-11-14 22:13:20 UTC"


class TestFormatEventSummary:
    """Tests for format_event_summary() function."""

    def test_contains_key_fields(self, sample_event):
        result = format_event_summary(sample_event)

        assert "M4.5" in result
        assert "Sylhet" in result
        assert "12.3km" in result


class TestFormatAlertBanner:
    """Tests for format_alert_banner() function."""

    def test_contains_zone_and_magnitude(self, sample_alert):
        result = format_alert_banner(sample_alert)

        assert "[Sylhet]" in result
        assert "M4.5 Light" in result
        assert "(Bangladesh)" in result


class TestFormatVoiceAlert:
    """Tests for format_voice_alert() function."""

    def test_english(self, sample_alert):
        result = format_voice_alert(sample_alert, "en")
        assert result == "Warning! A magnitude 4.5 earthquake was detected in Sylhet."

    def test_bengali(self, sample_alert):
        result = format_voice_alert(sample_alert, "bn-BD")

        assert "Sylhet" in result
        assert "4.5" in result
        assert result.startswith("সতর্কতা!")


class TestFormatVoiceTest:
    """Tests for format_voice_test() function."""

    def test_languages(self):
        assert format_voice_test("bn") == VOICE_TEST_MESSAGES["bn"]
        assert format_voice_test("en-US") == VOICE_TEST_MESSAGES["en"]
