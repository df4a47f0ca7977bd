"""Notification Dispatcher - drives tone and voice channels.

Executes the plans produced by core.notifications against the injected
audio and speech capabilities. Capability failures are caught here, logged,
and never reach the alert pipeline; the visual banner (rendered by the UI
shell) stays the guaranteed channel.
"""

import logging
import threading

from quakewatch.core.alerts import AlertNotification
from quakewatch.core.config import DEFAULT_SIGNIFICANT_MAGNITUDE, Settings
from quakewatch.core.event import SeismicEvent
from quakewatch.core.formatter import format_voice_alert, format_voice_test
from quakewatch.core.notifications import (
    DispatcherState,
    plan_alert_notifications,
    plan_latest_event_notification,
)
from quakewatch.core.tones import QUAKE_TONE, SIREN_TONE, ToneSpec
from quakewatch.shell.audio import AudioOutput
from quakewatch.shell.speech import SpeechOutput


logger = logging.getLogger(__name__)


# Pause between the test tone and the test utterance (seconds)
TEST_VOICE_DELAY = 2.5


class NotificationDispatcher:
    """Reacts to alert collection and event snapshot changes."""

    def __init__(
        self,
        audio: AudioOutput,
        speech: SpeechOutput,
        significant_magnitude: float = DEFAULT_SIGNIFICANT_MAGNITUDE,
        voice_language: str = "en",
        test_voice_delay: float = TEST_VOICE_DELAY,
    ) -> None:
        """Initialize dispatcher.

        Args:
            audio: Tone playback capability
            speech: Speech capability
            significant_magnitude: Severity floor for the quake tone
            voice_language: Language of spoken alerts
            test_voice_delay: Seconds between test tone and test utterance
        """
        self.audio = audio
        self.speech = speech
        self.significant_magnitude = significant_magnitude
        self.voice_language = voice_language
        self.test_voice_delay = test_voice_delay
        self.state = DispatcherState()
        self._pending_test: threading.Timer | None = None

    def _play(self, spec: ToneSpec, volume: float) -> bool:
        try:
            self.audio.play_tone(spec, volume)
            return True
        except Exception as e:
            logger.error("Failed to play %s tone: %s", spec.name, e)
            return False

    def _speak(self, text: str, volume: float) -> bool:
        try:
            self.speech.cancel()
            self.speech.speak(text, volume)
            return True
        except Exception as e:
            logger.error("Failed to speak voice alert: %s", e)
            return False

    def on_alerts_changed(
        self,
        active_alerts: tuple[AlertNotification, ...],
        settings: Settings,
    ) -> None:
        """Handle a change of the active alert collection.

        Fires the siren and one voice announcement when the count grew.
        """
        plan, self.state = plan_alert_notifications(self.state, active_alerts, settings)

        if plan.play_siren:
            self._play(SIREN_TONE, settings.volume)

        if plan.announce is not None:
            self._speak(
                format_voice_alert(plan.announce, self.voice_language),
                settings.volume,
            )

    def on_events_changed(self, events: list[SeismicEvent], settings: Settings) -> None:
        """Handle a new event snapshot.

        Plays the quake tone when a new significant event heads the feed.
        """
        play, self.state = plan_latest_event_notification(
            self.state,
            events,
            settings,
            significant_magnitude=self.significant_magnitude,
        )

        if play:
            logger.info("New significant event %s", events[0].id)
            self._play(QUAKE_TONE, settings.volume)

    def test_sound(self, settings: Settings) -> None:
        """Play the quake tone, then a test utterance if voice is enabled."""
        if not settings.sound_enabled:
            return

        self._play(QUAKE_TONE, settings.volume)

        if not settings.voice_alert_enabled:
            return

        text = format_voice_test(self.voice_language)
        if self.test_voice_delay <= 0:
            self._speak(text, settings.volume)
            return

        self._cancel_pending_test()
        self._pending_test = threading.Timer(
            self.test_voice_delay, self._speak, args=(text, settings.volume),
        )
        self._pending_test.daemon = True
        self._pending_test.start()

    def _cancel_pending_test(self) -> None:
        if self._pending_test is not None:
            self._pending_test.cancel()
            self._pending_test = None

    def stop(self) -> None:
        """Stop every tone and utterance ("stop alarm")."""
        self._cancel_pending_test()

        try:
            self.audio.stop()
        except Exception as e:
            logger.error("Failed to stop audio: %s", e)

        try:
            self.speech.cancel()
        except Exception as e:
            logger.error("Failed to cancel speech: %s", e)
