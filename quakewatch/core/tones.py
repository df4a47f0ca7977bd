"""Alert tone synthesis - Pure functions.

Tones are described declaratively (oscillators plus a gain envelope) and
rendered to float32 PCM samples with numpy. Playback is handled by the
shell audio output.
"""

from dataclasses import dataclass

import numpy as np


DEFAULT_SAMPLE_RATE = 44100

WAVEFORMS = ("sine", "square", "sawtooth", "triangle")


@dataclass(frozen=True)
class Oscillator:
    """One oscillator with a frequency automation curve.

    Attributes:
        waveform: One of 'sine', 'square', 'sawtooth', 'triangle'
        frequency_points: (time_s, hz) breakpoints; held after the last one
        curve: 'linear' or 'exponential' ramp between breakpoints
    """
    waveform: str
    frequency_points: tuple[tuple[float, float], ...]
    curve: str = "linear"


@dataclass(frozen=True)
class EnvelopePoint:
    """Gain breakpoint; level is a fraction of the tone's peak gain.

    curve is the ramp used to reach this point from the previous one.
    """
    time_s: float
    level: float
    curve: str = "linear"


@dataclass(frozen=True)
class ToneSpec:
    """A complete tone.

    Attributes:
        name: Identifier used in logs
        duration_s: Length of the tone in seconds
        oscillators: Oscillators mixed into the output
        envelope: Gain breakpoints, first one at time 0
        peak_gain: Gain at level 1.0 and full volume
    """
    name: str
    duration_s: float
    oscillators: tuple[Oscillator, ...]
    envelope: tuple[EnvelopePoint, ...]
    peak_gain: float = 0.3


# Zone alert siren: modulating sawtooth, linear fade over 1.5s
SIREN_TONE = ToneSpec(
    name="siren",
    duration_s=1.5,
    oscillators=(
        Oscillator(
            waveform="sawtooth",
            frequency_points=(
                (0.0, 600.0),
                (0.3, 850.0),
                (0.6, 600.0),
                (0.9, 850.0),
                (1.2, 600.0),
            ),
        ),
    ),
    envelope=(
        EnvelopePoint(0.0, 1.0),
        EnvelopePoint(1.5, 0.0),
    ),
)

# Significant quake: low triangle rumble under a sine, long exponential tail
QUAKE_TONE = ToneSpec(
    name="quake",
    duration_s=2.0,
    oscillators=(
        Oscillator(
            waveform="triangle",
            frequency_points=((0.0, 150.0), (1.0, 100.0)),
            curve="exponential",
        ),
        Oscillator(
            waveform="sine",
            frequency_points=((0.0, 220.0), (1.0, 180.0)),
            curve="exponential",
        ),
    ),
    envelope=(
        EnvelopePoint(0.0, 0.0),
        EnvelopePoint(0.1, 1.0),
        EnvelopePoint(2.0, 0.01 / 0.3, curve="exponential"),
    ),
)


def _automation(
    t: np.ndarray,
    points: tuple[tuple[float, float], ...],
    curves: tuple[str, ...],
) -> np.ndarray:
    """Evaluate a breakpoint curve at times t.

    curves[i] is the ramp used between points[i - 1] and points[i].
    Values hold before the first and after the last breakpoint.
    """
    values = np.full(t.shape, points[0][1], dtype=np.float64)

    for i in range(1, len(points)):
        (t0, v0), (t1, v1) = points[i - 1], points[i]
        mask = (t >= t0) & (t < t1)
        if not mask.any() or t1 <= t0:
            continue
        frac = (t[mask] - t0) / (t1 - t0)
        if curves[i] == "exponential" and v0 > 0 and v1 > 0:
            values[mask] = v0 * (v1 / v0) ** frac
        else:
            values[mask] = v0 + (v1 - v0) * frac

    values[t >= points[-1][0]] = points[-1][1]
    return values


def _waveform(name: str, phase: np.ndarray) -> np.ndarray:
    """Evaluate a periodic waveform at phase (in cycles)."""
    cycle = phase % 1.0
    if name == "sine":
        return np.sin(2 * np.pi * phase)
    if name == "square":
        return np.where(cycle < 0.5, 1.0, -1.0)
    if name == "sawtooth":
        return 2.0 * cycle - 1.0
    if name == "triangle":
        return 1.0 - 4.0 * np.abs(cycle - 0.5)
    raise ValueError(f"Unknown waveform: {name}")


def render_tone(
    spec: ToneSpec,
    volume: float,
    sample_rate: int = DEFAULT_SAMPLE_RATE,
) -> np.ndarray:
    """Render a tone to mono float32 samples.

    Pure function. Volume is clamped to [0, 1] and scales the peak gain.

    Args:
        spec: Tone description
        volume: Output volume
        sample_rate: Samples per second

    Returns:
        Samples in [-1, 1], length duration_s * sample_rate
    """
    volume = min(1.0, max(0.0, volume))
    n = int(round(spec.duration_s * sample_rate))
    t = np.arange(n, dtype=np.float64) / sample_rate

    mix = np.zeros(n, dtype=np.float64)
    for osc in spec.oscillators:
        curves = (osc.curve,) * len(osc.frequency_points)
        freq = _automation(t, osc.frequency_points, curves)
        phase = np.cumsum(freq) / sample_rate
        mix += _waveform(osc.waveform, phase)

    env_points = tuple((p.time_s, p.level) for p in spec.envelope)
    env_curves = tuple(p.curve for p in spec.envelope)
    gain = _automation(t, env_points, env_curves) * spec.peak_gain * volume

    return np.clip(mix * gain, -1.0, 1.0).astype(np.float32)
