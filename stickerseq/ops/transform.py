"""Gesture resolution: pointer and touch sessions -> sticker geometry.

Each sticker has at most one session at a time. A session is entered only
from idle, is classified once at begin() and keeps its mode until it ends:

    Idle -> Dragging | Resizing | Rotating   (one pointer)
    Idle -> Pinching                          (two pointers)

The session object carries everything captured at the start (pointer,
geometry), so every update is computed from that snapshot rather than
accumulated frame to frame.

Coordinates: pointer positions are in the same space as canvas_rect
(window or screen); sticker x/y are canvas-local, i.e. relative to
canvas_rect's top-left.

Key design constraints:
- Malformed events (wrong pointer count, missing or NaN coordinates) are
  reported as GESTURE faults and change nothing.
- A second pointer arriving during a one-pointer session cancels it and
  starts a fresh pinch; geometry stays as last applied.
- A drag whose sticker centre ends outside the canvas removes the sticker.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ..core.diagnostics import Diagnostics, Fault
from .canvas import (Point, Rect, is_crossing_boundary, is_degenerate,
                     is_outside, all_finite)
from .stickers import remove_token

# Side of the square handle zones at the top-right / bottom-right corners.
HANDLE_ZONE = 20
# Smallest width/height reachable by free resize and pinch.
MIN_SIZE = 20


class Mode(Enum):
    IDLE = 'idle'
    DRAGGING = 'dragging'
    RESIZING = 'resizing'
    ROTATING = 'rotating'
    PINCHING = 'pinching'


class Outcome(Enum):
    COMMITTED = 'committed'
    REMOVED = 'removed'
    CANCELLED = 'cancelled'
    IGNORED = 'ignored'


# ---------------------------------------------------------------------------
# Session payloads
# ---------------------------------------------------------------------------

@dataclass
class DragSession:
    start_pointer: Point
    start_pos: Point
    pending_removal: bool = False
    trash_hint: bool = False
    mode = Mode.DRAGGING
    pointers = 1


@dataclass
class ResizeSession:
    start_pointer: Point
    start_size: tuple[float, float]
    mode = Mode.RESIZING
    pointers = 1


@dataclass
class RotateSession:
    center: Point
    start_angle: float
    start_rotation: float
    mode = Mode.ROTATING
    pointers = 1


@dataclass
class PinchSession:
    start_distance: float
    start_angle: float
    start_midpoint: Point
    start_size: tuple[float, float]
    start_rotation: float
    start_pos: Point
    mode = Mode.PINCHING
    pointers = 2


Session = Union[DragSession, ResizeSession, RotateSession, PinchSession]


def _angle(origin, target) -> float:
    return math.degrees(math.atan2(target[1] - origin[1], target[0] - origin[0]))


def _pair_metrics(points):
    """(distance, angle in degrees, midpoint) of a two-pointer set."""
    (x1, y1), (x2, y2) = points
    distance = math.hypot(x2 - x1, y2 - y1)
    return distance, _angle((x1, y1), (x2, y2)), Point((x1 + x2) / 2, (y1 + y2) / 2)


def _parse_points(points) -> Optional[list[Point]]:
    """Validate a pointer set. Returns None if it is malformed."""
    if points is None:
        return None
    try:
        parsed = [Point(float(p[0]), float(p[1])) for p in points]
    except (TypeError, ValueError, IndexError):
        return None
    if not 1 <= len(parsed) <= 2:
        return None
    if not all(all_finite(*p) for p in parsed):
        return None
    return parsed


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------

class TransformController:
    """Turns begin/move/end pointer events into geometry updates.

    Sessions for different stickers are independent and may interleave.
    """

    def __init__(self, state, canvas_rect: Rect, diagnostics: Optional[Diagnostics] = None):
        self.state = state
        self.canvas_rect = Rect(*canvas_rect)
        self.diagnostics = diagnostics or Diagnostics()
        self._sessions: dict[str, Session] = {}

    def set_canvas_rect(self, rect):
        self.canvas_rect = Rect(*rect)

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------

    def session(self, token_id) -> Optional[Session]:
        return self._sessions.get(token_id)

    def mode(self, token_id) -> Mode:
        s = self._sessions.get(token_id)
        return s.mode if s else Mode.IDLE

    def trash_ids(self) -> set:
        """Stickers currently dragged more than half outside the canvas."""
        return {tid for tid, s in self._sessions.items()
                if isinstance(s, DragSession) and s.trash_hint}

    def classify(self, token, pointer) -> Mode:
        """Pick the one-pointer mode for a press at `pointer`."""
        lx = pointer[0] - self.canvas_rect.left - token.x
        ly = pointer[1] - self.canvas_rect.top - token.y
        in_right = token.width - HANDLE_ZONE <= lx <= token.width
        if in_right and token.height - HANDLE_ZONE <= ly <= token.height:
            return Mode.RESIZING
        if in_right and 0 <= ly <= HANDLE_ZONE:
            return Mode.ROTATING
        return Mode.DRAGGING

    # -------------------------------------------------------------------
    # Session lifecycle
    # -------------------------------------------------------------------

    def begin(self, token_id, points) -> Mode:
        """Start a session. Returns the chosen mode, or IDLE if ignored."""
        pts = _parse_points(points)
        if pts is None:
            self._fault("malformed begin for %s: %r", token_id, points)
            return Mode.IDLE
        token = self.state.find_token(token_id)
        if token is None:
            self._fault("begin on unknown sticker %r", token_id)
            return Mode.IDLE

        if len(pts) == 2:
            distance, angle, midpoint = _pair_metrics(pts)
            if distance <= 0:
                self._fault("pinch on %s with coincident pointers", token_id)
                return Mode.IDLE

        current = self._sessions.get(token_id)
        if current is not None:
            if current.pointers == 1 and len(pts) == 2:
                # second finger: the one-pointer session is superseded
                self._sessions.pop(token_id)
            else:
                self._fault("begin while %s already %s", token_id, current.mode.value)
                return Mode.IDLE

        if len(pts) == 2:
            session = PinchSession(
                start_distance=distance, start_angle=angle, start_midpoint=midpoint,
                start_size=(token.width, token.height),
                start_rotation=token.rotation, start_pos=Point(token.x, token.y))
        else:
            pointer = pts[0]
            mode = self.classify(token, pointer)
            if mode == Mode.RESIZING:
                session = ResizeSession(pointer, (token.width, token.height))
            elif mode == Mode.ROTATING:
                center = Point(self.canvas_rect.left + token.x + token.width / 2,
                               self.canvas_rect.top + token.y + token.height / 2)
                session = RotateSession(center, _angle(center, pointer), token.rotation)
            else:
                session = DragSession(pointer, Point(token.x, token.y))

        self._sessions[token_id] = session
        return session.mode

    def move(self, token_id, points) -> bool:
        """Apply one move event. Returns True if geometry was updated."""
        session = self._sessions.get(token_id)
        if session is None:
            self._fault("move without session for %r", token_id)
            return False
        pts = _parse_points(points)
        if pts is None or len(pts) != session.pointers:
            self._fault("malformed move for %s: %r", token_id, points)
            return False
        token = self.state.find_token(token_id)
        if token is None:
            # removed by another path mid-gesture
            self._sessions.pop(token_id, None)
            self._fault("sticker %r vanished during %s", token_id, session.mode.value)
            return False

        if isinstance(session, DragSession):
            self._drag(token, session, pts[0])
        elif isinstance(session, ResizeSession):
            self._resize(token, pts[0])
        elif isinstance(session, RotateSession):
            self._rotate(token, session, pts[0])
        else:
            self._pinch(token, session, pts)
        self.state.notify(session.mode.value)
        return True

    def end(self, token_id) -> Outcome:
        """Finish a session: commit the geometry, or remove a trashed sticker."""
        session = self._sessions.pop(token_id, None)
        if session is None:
            return Outcome.IGNORED
        if isinstance(session, DragSession) and session.pending_removal:
            if remove_token(self.state, token_id):
                return Outcome.REMOVED
            return Outcome.IGNORED
        self.state.notify('transform_end')
        return Outcome.COMMITTED

    def cancel(self, token_id) -> Outcome:
        """Abandon a session, keeping the geometry as last applied."""
        if self._sessions.pop(token_id, None) is None:
            return Outcome.IGNORED
        self.state.notify('transform_cancel')
        return Outcome.CANCELLED

    def cancel_all(self):
        for tid in list(self._sessions):
            self.cancel(tid)

    # -------------------------------------------------------------------
    # Per-mode updates
    # -------------------------------------------------------------------

    def _drag(self, token, s: DragSession, pointer):
        token.x = pointer.x - (s.start_pointer.x - s.start_pos.x)
        token.y = pointer.y - (s.start_pointer.y - s.start_pos.y)
        bounds = self.canvas_rect.local()
        if is_degenerate(bounds):
            self.diagnostics.report(Fault.BOUNDS, "degenerate canvas %r", self.canvas_rect)
        s.pending_removal = is_outside(token.center, bounds)
        s.trash_hint = is_crossing_boundary(token.x, token.y, token.width,
                                            token.height, bounds)

    def _resize(self, token, pointer):
        token.width = max(MIN_SIZE, pointer.x - self.canvas_rect.left - token.x)
        token.height = max(MIN_SIZE, pointer.y - self.canvas_rect.top - token.y)

    def _rotate(self, token, s: RotateSession, pointer):
        token.rotation = s.start_rotation + (_angle(s.center, pointer) - s.start_angle)

    def _pinch(self, token, s: PinchSession, pts):
        distance, angle, midpoint = _pair_metrics(pts)
        scale = distance / s.start_distance
        token.width = max(MIN_SIZE, s.start_size[0] * scale)
        token.height = max(MIN_SIZE, s.start_size[1] * scale)
        token.rotation = s.start_rotation + (angle - s.start_angle)
        token.x = s.start_pos.x + (midpoint.x - s.start_midpoint.x)
        token.y = s.start_pos.y + (midpoint.y - s.start_midpoint.y)

    def _fault(self, message, *args):
        self.diagnostics.report(Fault.GESTURE, message, *args)
