"""Step sequencer: a tick timer that walks the stickers' step indices.

Every tick re-reads tempo, step and the live sticker count from this
object and the canvas state, never from values captured when the timer
was created. Two steps per beat: interval = (60 / tempo) * 500 ms.

Threading model: everything runs on the Qt main thread. Ticks and input
callbacks never interleave, so the token list needs no locking here.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from PySide6.QtCore import QTimer

from .diagnostics import Diagnostics, Fault
from .settings import DEFAULTS, valid_tempo

logger = logging.getLogger(__name__)

TRANSPORT_STOPPED = 'stopped'
TRANSPORT_PLAYING = 'playing'
TRANSPORT_PAUSED = 'paused'


class StepSequencer:
    """Fires the synth for the sticker(s) on the current step each tick.

    timer: anything with setInterval/start/stop and a `timeout` signal;
    a QTimer is created when omitted.
    """

    def __init__(self, state, synth, tempo: float = DEFAULTS['tempo'],
                 timer=None, diagnostics: Optional[Diagnostics] = None):
        self.state = state
        self.synth = synth
        self.diagnostics = diagnostics or Diagnostics()
        self.tempo: float = valid_tempo(tempo) or float(DEFAULTS['tempo'])
        self.current_step: int = 0
        self.transport: str = TRANSPORT_STOPPED
        self._step_listeners: list[Callable] = []

        self._timer = timer if timer is not None else QTimer()
        self._timer.setInterval(self.interval_ms)
        self._timer.timeout.connect(self._on_tick)

    @property
    def interval_ms(self) -> int:
        return max(1, int(round(60.0 / self.tempo * 500)))

    @property
    def playing(self) -> bool:
        return self.transport == TRANSPORT_PLAYING

    def on_step(self, callback: Callable):
        """callback(step) after the sticker(s) on a step were triggered."""
        self._step_listeners.append(callback)

    # -------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------

    def play(self):
        if self.transport == TRANSPORT_PLAYING:
            return
        from_stopped = self.transport == TRANSPORT_STOPPED
        self.transport = TRANSPORT_PLAYING
        if from_stopped:
            self.current_step = 0
        self._timer.setInterval(self.interval_ms)
        self._timer.start()
        logger.debug("play from step %d (%.1f BPM)", self.current_step, self.tempo)
        if from_stopped:
            self._fire(self.current_step)

    def pause(self):
        """Freeze the cursor in place. Sounding voices ring out."""
        if self.transport != TRANSPORT_PLAYING:
            return
        self._timer.stop()
        self.transport = TRANSPORT_PAUSED

    def stop(self):
        """Cancel the timer and rewind to step 0."""
        self._timer.stop()
        self.transport = TRANSPORT_STOPPED
        self.current_step = 0

    def toggle(self):
        if self.playing:
            self.pause()
        else:
            self.play()

    def set_tempo(self, bpm) -> bool:
        """Change tempo. While playing, restart the interval without re-firing."""
        tempo = valid_tempo(bpm)
        if tempo is None:
            self.diagnostics.report(Fault.CONFIG, "ignoring invalid tempo %r", bpm)
            return False
        self.tempo = tempo
        self._timer.setInterval(self.interval_ms)
        if self.playing:
            self._timer.stop()
            self._timer.start()
        return True

    # -------------------------------------------------------------------
    # Ticks
    # -------------------------------------------------------------------

    def _on_tick(self):
        if self.transport != TRANSPORT_PLAYING:
            return
        count = len(self.state)
        if count == 0:
            return
        self.current_step = (self.current_step + 1) % count
        self._fire(self.current_step)

    def _fire(self, step):
        for t in self.state.tokens_at_step(step):
            self.synth.trigger(t.instrument, t.step_index, t.width, t.height,
                               self.state.global_volume, t.volume)
        for cb in self._step_listeners:
            cb(step)
