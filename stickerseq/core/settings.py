"""User-facing settings - read from ~/.config/stickerseq/settings.json.

Covers the transport tempo, the master volume, the audio stream parameters
and the default size of a freshly dropped sticker. Nothing here is written
back: the canvas itself is never persisted.

Hard-coded values that are plausible candidates to move here in the future:
  - Scale step (currently 10 px) and rotate step (currently 15 degrees)
  - Default per-sticker volume (currently 0.5)
"""

import json
import logging
import math
from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_PATH = Path.home() / '.config' / 'stickerseq' / 'settings.json'

DEFAULTS = {
    'tempo': 120,              # BPM, two steps per beat
    'global_volume': 0.4,      # master volume, 0..1
    'sample_rate': 44100,
    'audio_block_size': 512,
    'sticker_size': 80,        # width/height of a dropped sticker in px
}


def valid_tempo(value):
    """Return value as a float BPM, or None if it is not a positive number."""
    try:
        bpm = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(bpm) or math.isinf(bpm) or bpm <= 0:
        return None
    return bpm


class Settings:
    def __init__(self, path=None):
        self.path = Path(path) if path else CONFIG_PATH
        self.tempo: float = DEFAULTS['tempo']
        self.global_volume: float = DEFAULTS['global_volume']
        self.sample_rate: int = DEFAULTS['sample_rate']
        self.block_size: int = DEFAULTS['audio_block_size']
        self.sticker_size: float = DEFAULTS['sticker_size']
        self._load()

    def _load(self):
        if not self.path.exists():
            return
        try:
            with open(self.path) as f:
                d = json.load(f)
            self.set_tempo(d.get('tempo', self.tempo))
            self.set_global_volume(d.get('global_volume', self.global_volume))
            self.sample_rate = int(d.get('sample_rate', self.sample_rate))
            self.block_size = int(d.get('audio_block_size', self.block_size))
            self.sticker_size = float(d.get('sticker_size', self.sticker_size))
        except (OSError, ValueError, TypeError, AttributeError) as e:
            # keep defaults on any parse error
            logger.warning("Ignoring settings file %s: %s", self.path, e)

    def set_tempo(self, value):
        """Apply a tempo override. Non-positive or non-numeric values are ignored."""
        bpm = valid_tempo(value)
        if bpm is None:
            logger.warning("Ignoring invalid tempo %r, keeping %s BPM", value, self.tempo)
            return False
        self.tempo = bpm
        return True

    def set_global_volume(self, value):
        self.global_volume = max(0.0, min(1.0, float(value)))
