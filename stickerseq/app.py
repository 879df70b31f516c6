"""Main application class - creates the window, wires up the core and the UI."""

import logging

from PySide6.QtWidgets import QMainWindow, QWidget, QFrame, QVBoxLayout
from PySide6.QtCore import Qt
from PySide6.QtGui import QKeySequence, QShortcut

from .state import CanvasState
from .core.audio import AudioOutput
from .core.diagnostics import Diagnostics
from .core.sequencer import StepSequencer
from .core.settings import Settings
from .core.synth import VoiceSynthesizer
from .ops import layers, stickers
from .ops.canvas import Rect
from .ops.transform import TransformController

from .ui.topbar import TopBar
from .ui.canvas_view import CanvasView

logger = logging.getLogger(__name__)


class App(QMainWindow):
    """Main application - owns the state and the audio chain, coordinates UI."""

    def __init__(self, settings=None, stream_factory=None):
        super().__init__()
        self.settings = settings or Settings()
        self.diagnostics = Diagnostics()
        self.state = CanvasState(global_volume=self.settings.global_volume,
                                 sticker_size=self.settings.sticker_size)

        # Audio chain: one output handle for the process lifetime
        self.output = AudioOutput(self.settings, self.diagnostics, stream_factory)
        self.synth = VoiceSynthesizer(self.output, self.diagnostics)
        self.sequencer = StepSequencer(self.state, self.synth,
                                       tempo=self.settings.tempo,
                                       diagnostics=self.diagnostics)
        self.controller = TransformController(self.state, Rect(0, 0, 0, 0),
                                              self.diagnostics)

        self._setup_theme()
        self._build_ui()
        self._bind_keys()

        self.output.open()

        self.state.on_change(self._on_state_change)
        self.sequencer.on_step(lambda step: self.canvas.update())

    def _setup_theme(self):
        """Configure Qt stylesheet for dark mode."""
        self.setStyleSheet("""
            QMainWindow, QWidget {
                background-color: #16213e;
                color: #eeeeee;
            }
            QPushButton {
                background-color: #1a1a2e;
                color: #eeeeee;
                border: 1px solid #2a2a4a;
                padding: 4px 8px;
                border-radius: 2px;
            }
            QPushButton:hover {
                background-color: #e94560;
                color: #ffffff;
            }
            QPushButton:disabled {
                color: #555577;
            }
            QSpinBox, QComboBox {
                background-color: #1a1a2e;
                color: #eeeeee;
                border: 1px solid #2a2a4a;
                padding: 2px 4px;
            }
            QSlider::groove:horizontal {
                background: #1a1a2e;
                height: 4px;
            }
            QSlider::handle:horizontal {
                background: #e94560;
                width: 12px;
                margin: -4px 0;
                border-radius: 6px;
            }
        """)

    def _build_ui(self):
        """Build the main UI layout."""
        self.setWindowTitle('Sticker Sequencer')
        self.resize(1100, 700)
        self.setMinimumSize(700, 450)

        central = QWidget()
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        self.topbar = TopBar(central, self)
        layout.addWidget(self.topbar)

        sep = QFrame()
        sep.setFrameShape(QFrame.HLine)
        sep.setStyleSheet("background-color: #2a2a4a;")
        sep.setFixedHeight(1)
        layout.addWidget(sep)

        self.canvas = CanvasView(central, self)
        layout.addWidget(self.canvas, 1)

        self.topbar.refresh()

    def _bind_keys(self):
        """Bind keyboard shortcuts."""
        QShortcut(Qt.Key_Space, self, self._on_space)
        QShortcut(QKeySequence.SelectAll, self, self.select_all)
        QShortcut(QKeySequence.Delete, self, self.delete_selected)
        QShortcut(Qt.Key_Backspace, self, self.delete_selected)
        QShortcut(Qt.Key_Plus, self, lambda: self.scale_selected(stickers.SCALE_STEP))
        QShortcut(Qt.Key_Minus, self, lambda: self.scale_selected(-stickers.SCALE_STEP))
        QShortcut(Qt.Key_BracketLeft, self, lambda: self.rotate_selected(-stickers.ROTATE_STEP))
        QShortcut(Qt.Key_BracketRight, self, lambda: self.rotate_selected(stickers.ROTATE_STEP))
        QShortcut(Qt.Key_M, self, self.mirror_selected)
        QShortcut(Qt.Key_PageUp, self, lambda: self.move_layer(layers.UP))
        QShortcut(Qt.Key_PageDown, self, lambda: self.move_layer(layers.DOWN))
        QShortcut(Qt.Key_Left, self, lambda: stickers.group_move(self.state, -1, 0))
        QShortcut(Qt.Key_Right, self, lambda: stickers.group_move(self.state, 1, 0))
        QShortcut(Qt.Key_Up, self, lambda: stickers.group_move(self.state, 0, -1))
        QShortcut(Qt.Key_Down, self, lambda: stickers.group_move(self.state, 0, 1))

    def _on_state_change(self, source=None):
        """Called whenever state changes. Refreshes the UI."""
        self.topbar.refresh()
        self.canvas.refresh()

    # ---- Keyboard handlers ----

    def _on_space(self):
        focused = self.focusWidget()
        if focused and focused.__class__.__name__ in ('QSpinBox', 'QComboBox'):
            return
        self.toggle_play()

    # ---- Transport ----

    def toggle_play(self):
        self.sequencer.toggle()
        self.topbar.refresh()

    def stop_play(self):
        self.sequencer.stop()
        self.topbar.refresh()
        self.canvas.refresh()

    def set_tempo(self, bpm):
        self.sequencer.set_tempo(bpm)

    def set_volume(self, volume):
        stickers.set_global_volume(self.state, volume)

    # ---- Sticker tools ----

    def current_descriptor(self):
        return self.topbar.current_descriptor()

    def select_all(self):
        stickers.select_all(self.state)

    def clear_canvas(self):
        self.controller.cancel_all()
        stickers.clear_canvas(self.state)

    def scale_selected(self, delta):
        stickers.scale_selected(self.state, delta)

    def rotate_selected(self, delta):
        stickers.rotate_selected(self.state, delta)

    def mirror_selected(self):
        stickers.toggle_mirror_selected(self.state)

    def move_layer(self, direction):
        layers.move_layer_selected(self.state, direction, self.diagnostics)

    def delete_selected(self):
        for tid in list(self.state.selected):
            self.controller.cancel(tid)
        stickers.remove_selected(self.state)

    def closeEvent(self, event):
        """Stop playback and release the audio device on window close."""
        self.sequencer.stop()
        self.controller.cancel_all()
        self.output.shutdown()
        if self.diagnostics.total():
            logger.info("Faults this session: %s",
                        {f.value: n for f, n in self.diagnostics.counts.items()})
        super().closeEvent(event)
