"""Audio Output - Imperative Shell.

This module plays synthesized alert tones through the sound card with
sounddevice. Each tone plays on its own worker thread so the alert
pipeline never blocks; every output stream is opened in a scoped block and
closed on every exit path, including errors and stop().
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Protocol

import numpy as np

from quakewatch.core.tones import DEFAULT_SAMPLE_RATE, ToneSpec, render_tone


logger = logging.getLogger(__name__)


# Longest time stop() waits for each tone thread (seconds)
STOP_JOIN_TIMEOUT = 0.05


# Frames written per block; stop() is honoured between blocks
BLOCK_SIZE = 1024


class AudioOutput(Protocol):
    """Tone playback capability used by the notification dispatcher."""

    def play_tone(self, spec: ToneSpec, volume: float) -> None:
        """Start playing a tone without blocking."""
        ...

    def stop(self) -> None:
        """Stop every playing tone and release its resources."""
        ...


class _Playback:
    """One tone being played."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.stop_event = threading.Event()
        self.thread: threading.Thread | None = None


class SoundDeviceOutput:
    """Plays tones with a sounddevice OutputStream per tone."""

    def __init__(
        self,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        stream_factory: Callable[[int], Any] | None = None,
        block_size: int = BLOCK_SIZE,
    ) -> None:
        """Initialize audio output.

        Args:
            sample_rate: Samples per second
            stream_factory: Builds an output stream for a sample rate
                (defaults to sounddevice.OutputStream, mono float32)
            block_size: Frames per write
        """
        self.sample_rate = sample_rate
        self.block_size = block_size
        self._stream_factory = stream_factory or self._sounddevice_stream
        self._playbacks: list[_Playback] = []
        self._lock = threading.Lock()

    @staticmethod
    def _sounddevice_stream(sample_rate: int) -> Any:
        # PortAudio is loaded on import, only when real playback is needed
        import sounddevice as sd

        return sd.OutputStream(samplerate=sample_rate, channels=1, dtype="float32")

    @contextmanager
    def open_stream(self) -> Iterator[Any]:
        """Open, start and always close an output stream."""
        stream = self._stream_factory(self.sample_rate)
        try:
            stream.start()
            yield stream
        finally:
            stream.close()

    def _write(self, playback: _Playback, samples: np.ndarray) -> None:
        try:
            with self.open_stream() as stream:
                for start in range(0, len(samples), self.block_size):
                    if playback.stop_event.is_set():
                        logger.debug("Tone %s stopped", playback.name)
                        break
                    block = samples[start:start + self.block_size]
                    stream.write(block.reshape(-1, 1))
        except Exception:
            logger.exception("Audio playback failed for tone %s", playback.name)
        finally:
            with self._lock:
                if playback in self._playbacks:
                    self._playbacks.remove(playback)

    def play_tone(self, spec: ToneSpec, volume: float) -> None:
        """Render a tone and play it on a worker thread.

        Args:
            spec: Tone description
            volume: Output volume in [0, 1]
        """
        samples = render_tone(spec, volume, self.sample_rate)
        playback = _Playback(spec.name)
        playback.thread = threading.Thread(
            target=self._write,
            args=(playback, samples),
            name=f"tone-{spec.name}",
            daemon=True,
        )

        with self._lock:
            self._playbacks.append(playback)

        logger.info("Playing %s tone at volume %.2f", spec.name, volume)
        playback.thread.start()

    def stop(self, timeout: float = STOP_JOIN_TIMEOUT) -> None:
        """Stop all tones; streams close at the next block boundary."""
        with self._lock:
            playbacks = list(self._playbacks)

        for playback in playbacks:
            playback.stop_event.set()
        for playback in playbacks:
            if playback.thread is not None:
                playback.thread.join(timeout)

    def wait(self, timeout: float | None = None) -> None:
        """Block until every tone has finished."""
        with self._lock:
            playbacks = list(self._playbacks)

        for playback in playbacks:
            if playback.thread is not None:
                playback.thread.join(timeout)

    @property
    def active_count(self) -> int:
        """Number of tones still playing."""
        with self._lock:
            return len(self._playbacks)


class NullAudioOutput:
    """Audio output that only logs; used when no sound device is wanted."""

    def play_tone(self, spec: ToneSpec, volume: float) -> None:
        logger.info("Audio disabled, skipping %s tone", spec.name)

    def stop(self) -> None:
        pass
