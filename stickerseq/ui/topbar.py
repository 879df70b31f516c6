"""Top control bar - transport, tempo, volume, sticker choice and selection tools."""

from PySide6.QtWidgets import (QFrame, QLabel, QPushButton, QSpinBox, QComboBox,
                               QSlider, QHBoxLayout)
from PySide6.QtCore import Qt
from PySide6.QtGui import QFont

from ..state import DESCRIPTORS
from ..ops.layers import UP, DOWN
from ..ops.stickers import SCALE_STEP, ROTATE_STEP


class TopBar(QFrame):
    """Top bar with transport controls, BPM, volume and sticker tools."""

    def __init__(self, parent, app):
        super().__init__(parent)
        self.app = app
        self.state = app.state
        self._selection_btns = []
        self._build()

    def _build(self):
        layout = QHBoxLayout(self)
        layout.setContentsMargins(6, 3, 6, 3)
        layout.setSpacing(6)

        # Title
        title_label = QLabel("Stickers")
        font = QFont()
        font.setPointSize(11)
        font.setBold(True)
        title_label.setFont(font)
        title_label.setStyleSheet('color: #e94560;')
        layout.addWidget(title_label)
        layout.addSpacing(12)

        # Transport
        self.play_btn = QPushButton('▶')
        self.play_btn.setMaximumWidth(40)
        self.play_btn.clicked.connect(self.app.toggle_play)
        layout.addWidget(self.play_btn)

        stop_btn = QPushButton('⏹')
        stop_btn.setMaximumWidth(40)
        stop_btn.clicked.connect(self.app.stop_play)
        layout.addWidget(stop_btn)

        layout.addSpacing(8)

        # BPM
        layout.addWidget(QLabel('BPM'))
        self.bpm_spin = QSpinBox()
        self.bpm_spin.setRange(20, 300)
        self.bpm_spin.setValue(int(self.app.sequencer.tempo))
        self.bpm_spin.setMaximumWidth(60)
        self.bpm_spin.valueChanged.connect(self.app.set_tempo)
        layout.addWidget(self.bpm_spin)

        layout.addSpacing(8)

        # Master volume
        layout.addWidget(QLabel('Vol'))
        self.volume_slider = QSlider(Qt.Horizontal)
        self.volume_slider.setRange(0, 100)
        self.volume_slider.setValue(int(round(self.state.global_volume * 100)))
        self.volume_slider.setMaximumWidth(100)
        self.volume_slider.valueChanged.connect(lambda v: self.app.set_volume(v / 100))
        layout.addWidget(self.volume_slider)

        layout.addSpacing(8)

        # Sticker to drop on double-click
        layout.addWidget(QLabel('Sticker'))
        self.sticker_combo = QComboBox()
        self.sticker_combo.addItems([d.label for d in DESCRIPTORS])
        self.sticker_combo.setMaximumWidth(110)
        layout.addWidget(self.sticker_combo)

        layout.addStretch()

        select_all_btn = QPushButton('Select All')
        select_all_btn.clicked.connect(self.app.select_all)
        layout.addWidget(select_all_btn)

        clear_btn = QPushButton('Clear')
        clear_btn.clicked.connect(self.app.clear_canvas)
        layout.addWidget(clear_btn)

        sep = QFrame()
        sep.setFrameShape(QFrame.VLine)
        sep.setFrameShadow(QFrame.Sunken)
        layout.addWidget(sep)

        # Selection tools, enabled only while something is selected
        tools = [
            ('−', 'Shrink', lambda: self.app.scale_selected(-SCALE_STEP)),
            ('+', 'Grow', lambda: self.app.scale_selected(SCALE_STEP)),
            ('⟲', 'Rotate left', lambda: self.app.rotate_selected(-ROTATE_STEP)),
            ('⟳', 'Rotate right', lambda: self.app.rotate_selected(ROTATE_STEP)),
            ('⇋', 'Mirror', self.app.mirror_selected),
            ('▲', 'Bring forward', lambda: self.app.move_layer(UP)),
            ('▼', 'Send backward', lambda: self.app.move_layer(DOWN)),
            ('✕', 'Delete', self.app.delete_selected),
        ]
        for text, tip, slot in tools:
            btn = QPushButton(text)
            btn.setToolTip(tip)
            btn.setMaximumWidth(32)
            btn.clicked.connect(slot)
            layout.addWidget(btn)
            self._selection_btns.append(btn)

    def current_descriptor(self):
        return DESCRIPTORS[max(0, self.sticker_combo.currentIndex())]

    def refresh(self):
        """Update controls from state."""
        self.play_btn.setText('⏸' if self.app.sequencer.playing else '▶')
        has_selection = bool(self.state.selected)
        for btn in self._selection_btns:
            btn.setEnabled(has_selection)
