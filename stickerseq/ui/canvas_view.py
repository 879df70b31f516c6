"""Sticker canvas widget - paints the snapshot and feeds gestures to the controller.

Pointer coordinates are widget-local, so the controller's canvas rect is
(0, 0, width, height) and is refreshed on every resize.
"""

from PySide6.QtWidgets import QWidget
from PySide6.QtCore import Qt, QEvent, QRectF
from PySide6.QtGui import QPainter, QColor, QPen, QBrush, QFont

from ..ops.canvas import Rect
from ..ops.frames import capture_frame
from ..ops.stickers import clear_selection, drop_at, select
from ..ops.transform import HANDLE_ZONE, Mode


class CanvasView(QWidget):
    """The bounded canvas stickers live on."""

    def __init__(self, parent, app):
        super().__init__(parent)
        self.app = app
        self.state = app.state
        self.controller = app.controller
        self._mouse_token = None
        self._touch_token = None

        self.setFocusPolicy(Qt.StrongFocus)
        self.setAttribute(Qt.WA_AcceptTouchEvents)
        self.setMinimumSize(400, 300)

    def refresh(self):
        self.update()

    def resizeEvent(self, event):
        self.controller.set_canvas_rect(Rect(0, 0, self.width(), self.height()))
        super().resizeEvent(event)

    # ---- Mouse ----

    def mousePressEvent(self, event):
        if event.button() != Qt.LeftButton:
            return
        pos = event.position()
        token = self.state.token_at(pos.x(), pos.y())
        if token is None:
            clear_selection(self.state)
            return
        select(self.state, token.id)
        if self.controller.begin(token.id, [(pos.x(), pos.y())]) != Mode.IDLE:
            self._mouse_token = token.id

    def mouseMoveEvent(self, event):
        if self._mouse_token is None or not (event.buttons() & Qt.LeftButton):
            return
        pos = event.position()
        self.controller.move(self._mouse_token, [(pos.x(), pos.y())])

    def mouseReleaseEvent(self, event):
        if self._mouse_token is None:
            return
        self.controller.end(self._mouse_token)
        self._mouse_token = None
        self.update()

    def mouseDoubleClickEvent(self, event):
        pos = event.position()
        if self.state.token_at(pos.x(), pos.y()) is not None:
            return
        drop_at(self.state, self.app.current_descriptor(), (pos.x(), pos.y()))

    # ---- Touch ----

    def event(self, event):
        etype = event.type()
        if etype in (QEvent.TouchBegin, QEvent.TouchUpdate,
                     QEvent.TouchEnd, QEvent.TouchCancel):
            points = [(p.position().x(), p.position().y()) for p in event.points()]
            self._route_touch(etype, points)
            event.accept()
            return True
        return super().event(event)

    def _route_touch(self, etype, points):
        """Feed one touch event (type + widget-local points) to the controller."""
        if etype == QEvent.TouchCancel:
            if self._touch_token is not None:
                self.controller.cancel(self._touch_token)
            self._touch_token = None
            return

        if etype == QEvent.TouchEnd:
            if self._touch_token is not None:
                self.controller.end(self._touch_token)
            self._touch_token = None
            self.update()
            return

        if self._touch_token is None:
            if not points:
                return
            token = self.state.token_at(*points[0])
            if token is None:
                return
            select(self.state, token.id)
            if self.controller.begin(token.id, points[:2]) != Mode.IDLE:
                self._touch_token = token.id
            return

        session = self.controller.session(self._touch_token)
        if session is None:
            self._touch_token = None
            return
        if len(points) >= 2 and session.pointers == 1:
            # second finger landed: restart as a pinch
            self.controller.begin(self._touch_token, points[:2])
            return
        self.controller.move(self._touch_token, points[:session.pointers])

    # ---- Painting ----

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)
        painter.fillRect(self.rect(), QColor('#1a1a30'))

        frame = capture_frame(self.state, self.app.sequencer, self.controller)
        for snap in frame.tokens:
            self._paint_token(painter, snap)
        painter.end()

    def _paint_token(self, painter, t):
        painter.save()
        painter.translate(t.x + t.width / 2, t.y + t.height / 2)
        painter.rotate(t.rotation)
        if t.mirrored:
            painter.scale(-1, 1)
        box = QRectF(-t.width / 2, -t.height / 2, t.width, t.height)

        color = QColor(t.color)
        if t.trash_hint:
            color.setAlpha(90)
        painter.setBrush(QBrush(color))
        if t.is_current_step:
            painter.setPen(QPen(QColor('#ffffff'), 3))
        else:
            painter.setPen(QPen(color.darker(150), 1))
        painter.drawRoundedRect(box, 8, 8)

        painter.setPen(QColor('#16213e'))
        painter.setFont(QFont('Sans', 9))
        painter.drawText(box, Qt.AlignCenter, f'{t.step_index + 1}\n{t.instrument}')

        if t.selected:
            painter.setBrush(Qt.NoBrush)
            painter.setPen(QPen(QColor('#e94560'), 1, Qt.DashLine))
            painter.drawRect(box.adjusted(-3, -3, 3, 3))
            painter.setBrush(QBrush(QColor('#e94560')))
            hz = HANDLE_ZONE / 2
            painter.drawEllipse(QRectF(box.right() - hz, box.top(), hz, hz))
            painter.drawRect(QRectF(box.right() - hz, box.bottom() - hz, hz, hz))

        if t.trash_hint:
            painter.setPen(QColor('#e94560'))
            painter.drawText(box, Qt.AlignBottom | Qt.AlignHCenter, 'remove')
        painter.restore()
