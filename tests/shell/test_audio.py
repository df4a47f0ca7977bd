"""Tests for tone playback.

The sounddevice stream is replaced by a mock through the stream factory;
no sound card is needed.
"""

import threading
import time
from unittest.mock import MagicMock

from quakewatch.core.tones import QUAKE_TONE, SIREN_TONE
from quakewatch.shell.audio import NullAudioOutput, SoundDeviceOutput


SAMPLE_RATE = 8000


def _output(stream, block_size=1024):
    return SoundDeviceOutput(
        sample_rate=SAMPLE_RATE,
        stream_factory=lambda rate: stream,
        block_size=block_size,
    )


class TestSoundDeviceOutput:
    """Tests for SoundDeviceOutput."""

    def test_plays_whole_tone(self):
        stream = MagicMock()
        output = _output(stream)

        output.play_tone(SIREN_TONE, 1.0)
        output.wait(2)

        stream.start.assert_called_once()
        stream.close.assert_called_once()
        written = sum(call.args[0].shape[0] for call in stream.write.call_args_list)
        assert written == int(SIREN_TONE.duration_s * SAMPLE_RATE)
        assert output.active_count == 0

    def test_writes_mono_blocks(self):
        stream = MagicMock()
        output = _output(stream, block_size=500)

        output.play_tone(QUAKE_TONE, 0.5)
        output.wait(2)

        first_block = stream.write.call_args_list[0].args[0]
        assert first_block.shape == (500, 1)

    def test_stream_closed_when_write_fails(self):
        stream = MagicMock()
        stream.write.side_effect = RuntimeError("device lost")
        output = _output(stream)

        output.play_tone(SIREN_TONE, 1.0)
        output.wait(2)

        stream.close.assert_called_once()
        assert output.active_count == 0

    def test_stream_closed_when_start_fails(self):
        stream = MagicMock()
        stream.start.side_effect = RuntimeError("no device")
        output = _output(stream)

        output.play_tone(SIREN_TONE, 1.0)
        output.wait(2)

        stream.close.assert_called_once()
        stream.write.assert_not_called()

    def test_stop_interrupts_playback(self):
        started = threading.Event()
        release = threading.Event()

        def blocking_write(block):
            if not started.is_set():
                started.set()
                release.wait(2)

        stream = MagicMock()
        stream.write.side_effect = blocking_write
        output = _output(stream, block_size=100)

        output.play_tone(SIREN_TONE, 1.0)
        assert started.wait(2)

        output.stop(timeout=0)
        release.set()
        output.wait(2)

        assert stream.write.call_count == 1
        stream.close.assert_called_once()
        assert output.active_count == 0

    def test_stop_does_not_block_on_stuck_stream(self):
        started = threading.Event()
        release = threading.Event()

        def blocking_write(block):
            started.set()
            release.wait(2)

        stream = MagicMock()
        stream.write.side_effect = blocking_write
        output = _output(stream)
        output.play_tone(SIREN_TONE, 1.0)
        assert started.wait(2)

        begin = time.monotonic()
        output.stop()
        elapsed = time.monotonic() - begin

        release.set()
        output.wait(2)
        assert elapsed < 0.5
        stream.close.assert_called_once()

    def test_stop_without_playback(self):
        output = _output(MagicMock())
        output.stop()
        assert output.active_count == 0


class TestNullAudioOutput:
    """Tests for NullAudioOutput."""

    def test_does_nothing(self):
        output = NullAudioOutput()
        output.play_tone(SIREN_TONE, 1.0)
        output.stop()
