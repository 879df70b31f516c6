"""Realtime audio output handle.

Key design constraints:
- Created once at startup, opened once, shut down once on exit.
- `ready` is a plain synchronous flag; callers check it before triggering.
- The main thread only appends finished voice buffers to a pending list
  (guarded by a lock); the audio thread picks them up and mixes.
- Voices are one-shot and time-bounded, so nothing ever needs to
  force-stop them: they ring out and are dropped when exhausted.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from .diagnostics import Diagnostics, Fault
from .settings import Settings

logger = logging.getLogger(__name__)

STATE_CLOSED = 'closed'
STATE_PENDING = 'pending'
STATE_READY = 'ready'
STATE_FAILED = 'failed'


@dataclass(slots=True)
class _PlayingVoice:
    samples: np.ndarray
    pos: int = 0

    @property
    def done(self) -> bool:
        return self.pos >= len(self.samples)


class AudioOutput:
    """Owns the sounddevice output stream and mixes one-shot voices.

    Threading model:
    - Main thread: open(), shutdown(), play_buffer()
    - Audio thread: _audio_callback() mixes active voices into the block

    stream_factory(callback) -> stream object with start/stop/close. The
    default opens a stereo float32 sounddevice.OutputStream.
    """

    def __init__(self, settings: Optional[Settings] = None,
                 diagnostics: Optional[Diagnostics] = None,
                 stream_factory: Optional[Callable] = None):
        self.settings = settings or Settings()
        self.diagnostics = diagnostics or Diagnostics()
        self._sr = self.settings.sample_rate
        self._block_size = self.settings.block_size
        self._stream_factory = stream_factory or self._open_sounddevice

        self._state = STATE_CLOSED
        self._stream = None

        # Cross-thread communication
        self._pending: list[_PlayingVoice] = []
        self._lock = threading.Lock()  # only protects _pending

        # Audio thread only
        self._voices: list[_PlayingVoice] = []
        self.frames_rendered = 0

    # -------------------------------------------------------------------
    # Lifecycle (main thread)
    # -------------------------------------------------------------------

    @property
    def state(self) -> str:
        return self._state

    @property
    def ready(self) -> bool:
        return self._state == STATE_READY

    @property
    def sample_rate(self) -> int:
        return self._sr

    def open(self) -> bool:
        """Open and start the output stream. Safe to call more than once."""
        if self._state in (STATE_READY, STATE_PENDING):
            return self.ready
        self._state = STATE_PENDING
        try:
            self._stream = self._stream_factory(self._audio_callback)
            self._stream.start()
        except Exception as e:  # PortAudioError, missing PortAudio library
            self._stream = None
            self._state = STATE_FAILED
            logger.warning("Audio output unavailable: %s", e)
            self.diagnostics.report(Fault.AUDIO, "failed to open output stream: %s", e)
            return False
        self._state = STATE_READY
        logger.info("Audio output ready (%d Hz, block %d)", self._sr, self._block_size)
        return True

    def shutdown(self):
        """Stop and close the stream. The handle cannot be reused afterwards."""
        self._state = STATE_CLOSED
        if self._stream is not None:
            try:
                self._stream.stop()
                self._stream.close()
            except Exception as e:
                self.diagnostics.report(Fault.AUDIO, "error closing output stream: %s", e)
            self._stream = None
        with self._lock:
            self._pending.clear()
        self._voices = []

    def _open_sounddevice(self, callback):
        import sounddevice as sd
        return sd.OutputStream(
            samplerate=self._sr,
            channels=2,
            dtype='float32',
            blocksize=self._block_size,
            callback=callback,
        )

    # -------------------------------------------------------------------
    # Voices (main thread)
    # -------------------------------------------------------------------

    def play_buffer(self, samples: np.ndarray) -> bool:
        """Queue a mono buffer to start at the next audio block."""
        if not self.ready:
            return False
        voice = _PlayingVoice(np.asarray(samples, dtype=np.float32))
        with self._lock:
            self._pending.append(voice)
        return True

    @property
    def active_voices(self) -> int:
        return len(self._voices) + len(self._pending)

    # -------------------------------------------------------------------
    # Audio callback (runs on audio thread)
    # -------------------------------------------------------------------

    def _audio_callback(self, outdata, frames, time_info, status):
        """sounddevice OutputStream callback. Must be fast and never raise."""
        try:
            self._take_pending()
            mix = self.mix(frames)
            outdata[:] = np.column_stack([mix, mix])
            self.frames_rendered += frames
        except Exception as e:
            # an exception escaping here kills the PortAudio stream
            outdata[:] = 0
            self.diagnostics.report(Fault.AUDIO, "audio callback error: %s", e)

    def _take_pending(self):
        if not self._pending:
            return
        with self._lock:
            pending = self._pending[:]
            self._pending.clear()
        self._voices.extend(pending)

    def mix(self, frames: int) -> np.ndarray:
        """Sum the next `frames` samples of every active voice."""
        out = np.zeros(frames, dtype=np.float32)
        alive = []
        for v in self._voices:
            chunk = v.samples[v.pos:v.pos + frames]
            out[:len(chunk)] += chunk
            v.pos += len(chunk)
            if not v.done:
                alive.append(v)
        self._voices = alive
        # Soft-clip via tanh, transparent below ~0.95
        if frames and np.max(np.abs(out)) > 0.95:
            out = np.tanh(out)
        return out
