"""Fixed catalog of synthesizer voices.

Stickers never store their instrument. The voice is recomputed on every
trigger from a hash of the sticker id, so the same sticker always sounds
the same without any mapping table to keep in sync.
"""

from __future__ import annotations

from dataclasses import dataclass

WAVEFORMS = ('sine', 'square', 'sawtooth', 'triangle')
PATTERN_LENGTH = 8


@dataclass(frozen=True)
class Instrument:
    name: str
    scale: tuple            # 8 frequencies in Hz
    waveform: str
    harmonic_ratios: tuple
    harmonic_gains: tuple
    attack: float           # seconds, linear 0 -> peak
    decay: float            # seconds after attack, exponential -> sustain level
    sustain: float          # fraction of peak
    release: float          # absolute deadline from the trigger instant
    filter_freq: float      # low-pass cutoff in Hz
    resonance: float        # low-pass Q
    pattern: tuple          # 8 indices into scale, used modulo 8

    def __post_init__(self):
        if len(self.scale) != PATTERN_LENGTH:
            raise ValueError(f"{self.name}: scale needs {PATTERN_LENGTH} entries")
        if len(self.pattern) != PATTERN_LENGTH:
            raise ValueError(f"{self.name}: pattern needs {PATTERN_LENGTH} entries")
        if len(self.harmonic_ratios) != len(self.harmonic_gains):
            raise ValueError(f"{self.name}: harmonic ratios/gains length mismatch")
        if not self.harmonic_ratios:
            raise ValueError(f"{self.name}: at least one harmonic required")
        if any(g <= 0 for g in self.harmonic_gains):
            raise ValueError(f"{self.name}: harmonic gains must be positive")
        if self.waveform not in WAVEFORMS:
            raise ValueError(f"{self.name}: unknown waveform {self.waveform!r}")
        if not 0 < self.sustain < 1:
            raise ValueError(f"{self.name}: sustain must be in (0, 1)")
        if self.attack < 0 or self.decay < 0:
            raise ValueError(f"{self.name}: attack/decay must not be negative")
        if self.release <= self.attack + self.decay:
            raise ValueError(f"{self.name}: release must end after attack + decay")

    def note_frequency(self, step_index: int) -> float:
        """Base frequency for the given step (before harmonic ratios)."""
        degree = self.pattern[step_index % PATTERN_LENGTH] % PATTERN_LENGTH
        return self.scale[degree]


CATALOG = (
    Instrument(
        name='glass_bell',
        scale=(523.25, 587.33, 659.25, 783.99, 880.00, 1046.50, 1174.66, 1318.51),
        waveform='sine',
        harmonic_ratios=(1.0, 2.76, 5.40),
        harmonic_gains=(0.6, 0.25, 0.2),
        attack=0.005, decay=0.25, sustain=0.15, release=1.4,
        filter_freq=5000.0, resonance=0.8,
        pattern=(0, 2, 4, 5, 7, 4, 2, 1),
    ),
    Instrument(
        name='warm_pad',
        scale=(220.00, 261.63, 293.66, 329.63, 392.00, 440.00, 523.25, 587.33),
        waveform='triangle',
        harmonic_ratios=(1.0, 2.0, 3.0),
        harmonic_gains=(0.7, 0.3, 0.2),
        attack=0.12, decay=0.5, sustain=0.6, release=1.8,
        filter_freq=1800.0, resonance=0.7,
        pattern=(0, 3, 5, 3, 7, 5, 2, 4),
    ),
    Instrument(
        name='pluck_bass',
        scale=(65.41, 73.42, 82.41, 98.00, 110.00, 130.81, 146.83, 164.81),
        waveform='sawtooth',
        harmonic_ratios=(1.0, 2.0),
        harmonic_gains=(0.9, 0.35),
        attack=0.004, decay=0.18, sustain=0.3, release=0.7,
        filter_freq=900.0, resonance=4.0,
        pattern=(0, 0, 4, 0, 5, 0, 3, 7),
    ),
    Instrument(
        name='wood_block',
        scale=(392.00, 440.00, 493.88, 523.25, 587.33, 659.25, 698.46, 783.99),
        waveform='square',
        harmonic_ratios=(1.0, 1.5, 2.3),
        harmonic_gains=(0.5, 0.3, 0.2),
        attack=0.001, decay=0.04, sustain=0.12, release=0.22,
        filter_freq=2600.0, resonance=6.0,
        pattern=(0, 4, 2, 6, 1, 5, 3, 7),
    ),
    Instrument(
        name='tom',
        scale=(98.00, 110.00, 123.47, 130.81, 146.83, 164.81, 174.61, 196.00),
        waveform='sine',
        harmonic_ratios=(1.0, 1.59, 2.14),
        harmonic_gains=(1.0, 0.45, 0.25),
        attack=0.002, decay=0.1, sustain=0.2, release=0.45,
        filter_freq=1200.0, resonance=1.5,
        pattern=(0, 0, 2, 0, 4, 0, 2, 7),
    ),
)


def token_hash(token_id: str) -> int:
    """Order-sensitive 32-bit signed string hash (h * 31 + c)."""
    h = 0
    for ch in str(token_id):
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h


def select_instrument(token_id: str, catalog=CATALOG) -> Instrument:
    return catalog[abs(token_hash(token_id)) % len(catalog)]


def find_instrument(name: str, catalog=CATALOG):
    return next((i for i in catalog if i.name == name), None)
