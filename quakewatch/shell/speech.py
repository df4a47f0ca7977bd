"""Speech Output - Imperative Shell.

This module speaks voice alerts with pyttsx3. Speaking is last-wins: a new
utterance cancels the one in flight instead of queueing behind it.
"""

import logging
import threading
from typing import Any, Callable, Protocol


logger = logging.getLogger(__name__)


# Longest time cancel() blocks its caller (seconds)
CANCEL_JOIN_TIMEOUT = 0.05


class SpeechOutput(Protocol):
    """Speech capability used by the notification dispatcher."""

    def speak(self, text: str, volume: float) -> None:
        """Start speaking without blocking."""
        ...

    def cancel(self) -> None:
        """Stop the current utterance, if any."""
        ...


def _voice_matches(voice: Any, language: str) -> bool:
    languages = getattr(voice, "languages", None) or []
    for lang in languages:
        if isinstance(lang, bytes):
            lang = lang.decode("utf-8", errors="ignore")
        if language in str(lang):
            return True
    return language in str(getattr(voice, "id", ""))


class Pyttsx3Speech:
    """Text-to-speech through a pyttsx3 engine on a worker thread."""

    def __init__(
        self,
        language: str = "bn",
        engine_factory: Callable[[], Any] | None = None,
    ) -> None:
        """Initialize speech output.

        Args:
            language: Preferred voice language prefix; default voice otherwise
            engine_factory: Builds a pyttsx3-compatible engine
        """
        self.language = language
        self._engine_factory = engine_factory or self._pyttsx3_engine
        self._engine: Any | None = None
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

    @staticmethod
    def _pyttsx3_engine() -> Any:
        # The platform speech driver is loaded only when speaking
        import pyttsx3

        return pyttsx3.init()

    def _select_voice(self, engine: Any) -> None:
        for voice in engine.getProperty("voices") or []:
            if _voice_matches(voice, self.language):
                engine.setProperty("voice", voice.id)
                return
        logger.debug("No %s voice installed, using default voice", self.language)

    def _run(self, engine: Any) -> None:
        try:
            engine.runAndWait()
        except Exception:
            logger.exception("Speech synthesis failed")
        finally:
            with self._lock:
                # pyttsx3 caches its engine, so ownership is by thread
                if self._thread is threading.current_thread():
                    self._engine = None
                    self._thread = None

    def speak(self, text: str, volume: float) -> None:
        """Cancel any utterance in flight and speak text.

        Args:
            text: Text to speak
            volume: Output volume in [0, 1]
        """
        self.cancel()

        engine = self._engine_factory()
        engine.setProperty("volume", min(1.0, max(0.0, volume)))
        self._select_voice(engine)
        engine.say(text)

        thread = threading.Thread(target=self._run, args=(engine,), name="speech", daemon=True)
        with self._lock:
            self._engine = engine
            self._thread = thread

        logger.info("Speaking voice alert")
        thread.start()

    def cancel(self, timeout: float = CANCEL_JOIN_TIMEOUT) -> None:
        """Stop the current utterance and briefly wait for its thread."""
        with self._lock:
            engine, thread = self._engine, self._thread
            self._engine = None
            self._thread = None

        if engine is not None:
            engine.stop()
        if thread is not None:
            thread.join(timeout)

    def wait(self, timeout: float | None = None) -> None:
        """Block until the current utterance finishes."""
        with self._lock:
            thread = self._thread
        if thread is not None:
            thread.join(timeout)


class NullSpeechOutput:
    """Speech output that only logs."""

    def speak(self, text: str, volume: float) -> None:
        logger.info("Speech disabled, skipping: %s", text)

    def cancel(self) -> None:
        pass
