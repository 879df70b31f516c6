"""
Shared fixtures for Sticker Sequencer tests.

Provides a canvas state, stand-ins for the tick timer, the sound device
stream and the synth, so nothing here needs a display or an audio card.
"""
import os

import pytest

# Headless Qt for the few tests that create real Qt objects
os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')

from stickerseq.state import CanvasState, DESCRIPTORS
from stickerseq.core.diagnostics import Diagnostics
from stickerseq.ops.stickers import drop_token


# ── Stand-ins ────────────────────────────────────────────────────────────

class _Signal:
    def __init__(self):
        self._slots = []

    def connect(self, slot):
        self._slots.append(slot)

    def emit(self):
        for slot in self._slots:
            slot()


class FakeTimer:
    """Quacks like QTimer; tests call fire() instead of waiting."""

    def __init__(self):
        self.timeout = _Signal()
        self.interval = None
        self.active = False
        self.starts = 0

    def setInterval(self, ms):
        self.interval = ms

    def start(self):
        self.active = True
        self.starts += 1

    def stop(self):
        self.active = False

    def isActive(self):
        return self.active

    def fire(self, times=1):
        for _ in range(times):
            if self.active:
                self.timeout.emit()


class FakeStream:
    """Quacks like sounddevice.OutputStream."""

    def __init__(self, callback):
        self.callback = callback
        self.started = False
        self.closed = False

    def start(self):
        self.started = True

    def stop(self):
        self.started = False

    def close(self):
        self.closed = True


class RecordingSynth:
    """Records every trigger instead of rendering it."""

    def __init__(self):
        self.calls = []

    def trigger(self, instrument, step_index, width, height, global_volume, token_volume):
        self.calls.append((instrument.name, step_index, width, height,
                           global_volume, token_volume))

    @property
    def steps(self):
        return [c[1] for c in self.calls]


# ── Fixtures ─────────────────────────────────────────────────────────────

@pytest.fixture
def state():
    return CanvasState()


@pytest.fixture
def descriptor():
    return DESCRIPTORS[0]


@pytest.fixture
def three_tokens(state, descriptor):
    """A state with three 80x80 stickers at (0,0), (100,0), (200,0)."""
    for i in range(3):
        drop_token(state, descriptor, i * 100, 0)
    return state


@pytest.fixture
def diagnostics():
    return Diagnostics()


@pytest.fixture
def fake_timer():
    return FakeTimer()


@pytest.fixture
def streams():
    """List collecting every FakeStream a factory creates."""
    return []


@pytest.fixture
def stream_factory(streams):
    def factory(callback):
        s = FakeStream(callback)
        streams.append(s)
        return s
    return factory


@pytest.fixture
def synth():
    return RecordingSynth()
