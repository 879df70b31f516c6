"""One-shot voice rendering.

A trigger renders the whole voice up front (it is short and bounded by the
instrument's release time) and hands the finished buffer to the audio
output, which only has to mix. Each harmonic path is

    oscillator -> resonant low-pass -> envelope gain

and the paths are summed. All envelope times are measured from the single
trigger instant t0 = sample 0 of the buffer.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np
from scipy.signal import lfilter

from .diagnostics import Diagnostics, Fault
from .instruments import Instrument

logger = logging.getLogger(__name__)

# Hard ceiling so a step full of large stickers never clips.
MAX_VOICE_VOLUME = 0.15
# Exponential ramps cannot target zero; this is "silent".
ENV_FLOOR = 0.001
# Tail target relative to the sustain level for voices quieter than ENV_FLOOR.
TAIL_RATIO = 0.5
# (width + height) of a default 80x80 sticker.
REFERENCE_SIZE = 160.0


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

def overall_volume(width: float, height: float,
                   global_volume: float, token_volume: float) -> float:
    """Loudness of one trigger before per-harmonic gains."""
    v = (width + height) / REFERENCE_SIZE * global_volume * token_volume * 0.1
    return max(0.0, min(v, MAX_VOICE_VOLUME))


def harmonic_frequencies(instrument: Instrument, step_index: int) -> list[float]:
    base = instrument.note_frequency(step_index)
    return [base * r for r in instrument.harmonic_ratios]


def envelope(t, peak: float, attack: float, decay: float,
             sustain: float, release: float) -> np.ndarray:
    """Gain curve sampled at times t (seconds from the trigger).

    Linear 0 -> peak over `attack`, exponential down to peak * sustain over
    `decay`, then exponential down to the tail level at the absolute instant
    `release`. The tail level is ENV_FLOOR, or half the sustain level for
    voices already quieter than that, so the curve falls strictly from the
    end of the attack to `release`. Zero outside [0, release].
    """
    t = np.asarray(t, dtype=np.float64)
    out = np.zeros_like(t)
    if peak <= 0:
        return out

    sustain_level = peak * sustain
    tail_level = min(ENV_FLOOR, sustain_level * TAIL_RATIO)
    decay_end = attack + decay

    if attack > 0:
        seg = (t >= 0) & (t < attack)
        out[seg] = peak * t[seg] / attack

    if decay > 0:
        seg = (t >= attack) & (t < decay_end)
        out[seg] = peak * (sustain_level / peak) ** ((t[seg] - attack) / decay)

    seg = (t >= decay_end) & (t <= release)
    span = release - decay_end
    out[seg] = sustain_level * (tail_level / sustain_level) ** ((t[seg] - decay_end) / span)
    return out


def oscillator(waveform: str, freq: float, num_frames: int, sr: int) -> np.ndarray:
    cycles = freq * np.arange(num_frames) / sr
    frac = cycles % 1.0
    if waveform == 'square':
        return np.where(frac < 0.5, 1.0, -1.0)
    if waveform == 'sawtooth':
        return 2.0 * frac - 1.0
    if waveform == 'triangle':
        return 1.0 - 4.0 * np.abs(frac - 0.5)
    return np.sin(2.0 * np.pi * cycles)


def lowpass_coefficients(cutoff: float, q: float, sr: int):
    """Resonant low-pass biquad (RBJ cookbook). Returns (b, a)."""
    nyquist = sr / 2.0
    cutoff = min(max(cutoff, 10.0), nyquist * 0.99)
    q = max(q, 1e-4)
    w0 = 2.0 * math.pi * cutoff / sr
    alpha = math.sin(w0) / (2.0 * q)
    cos_w0 = math.cos(w0)
    b = np.array([(1 - cos_w0) / 2, 1 - cos_w0, (1 - cos_w0) / 2])
    a = np.array([1 + alpha, -2 * cos_w0, 1 - alpha])
    return b / a[0], a / a[0]


def render_voice(instrument: Instrument, step_index: int, width: float, height: float,
                 global_volume: float, token_volume: float,
                 sr: int = 44100) -> Optional[np.ndarray]:
    """Render one trigger to a mono float32 buffer lasting `release` seconds.

    Returns None when the trigger would be inaudible (zero volume).
    """
    volume = overall_volume(width, height, global_volume, token_volume)
    if volume <= 0:
        return None

    n = int(round(instrument.release * sr))
    if n <= 0:
        return None
    t = np.arange(n) / sr
    b, a = lowpass_coefficients(instrument.filter_freq, instrument.resonance, sr)

    out = np.zeros(n, dtype=np.float64)
    freqs = harmonic_frequencies(instrument, step_index)
    for freq, gain in zip(freqs, instrument.harmonic_gains):
        sig = oscillator(instrument.waveform, freq, n, sr)
        sig = lfilter(b, a, sig)
        sig *= envelope(t, gain * volume, instrument.attack, instrument.decay,
                        instrument.sustain, instrument.release)
        out += sig
    return out.astype(np.float32)


# ---------------------------------------------------------------------------
# Synthesizer
# ---------------------------------------------------------------------------

class VoiceSynthesizer:
    """Fire-and-forget trigger front end for an AudioOutput.

    Holds no per-voice state: every trigger renders an independent buffer,
    so overlapping voices cannot disturb each other's envelopes.
    """

    def __init__(self, output, diagnostics: Optional[Diagnostics] = None):
        self.output = output
        self.diagnostics = diagnostics or Diagnostics()
        self.triggered = 0
        self.dropped = 0

    def trigger(self, instrument: Instrument, step_index: int, width: float,
                height: float, global_volume: float, token_volume: float) -> None:
        if self.output is None or not self.output.ready:
            self.dropped += 1
            self.diagnostics.report(Fault.AUDIO, "audio output not ready, dropped %s",
                                    instrument.name)
            return
        buf = render_voice(instrument, step_index, width, height,
                           global_volume, token_volume, self.output.sample_rate)
        if buf is None:
            return
        self.output.play_buffer(buf)
        self.triggered += 1
