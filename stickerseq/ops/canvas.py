"""Canvas geometry helpers.

Pure functions, no owned state. Degenerate input (a zero-size canvas,
NaN coordinates) always counts as "inside" so a glitch can never delete a
sticker.
"""

import math
from typing import NamedTuple


class Point(NamedTuple):
    x: float
    y: float


class Rect(NamedTuple):
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self):
        return self.left + self.width

    @property
    def bottom(self):
        return self.top + self.height

    def local(self):
        """Same size, origin at (0, 0)."""
        return Rect(0.0, 0.0, self.width, self.height)


def all_finite(*values):
    try:
        return all(math.isfinite(v) for v in values)
    except TypeError:
        return False


def is_degenerate(rect) -> bool:
    if rect is None or not all_finite(*rect):
        return True
    return rect.width <= 0 or rect.height <= 0


def is_outside(center, rect) -> bool:
    """True when center lies outside rect. Degenerate input is inside."""
    if is_degenerate(rect) or center is None or not all_finite(*center):
        return False
    x, y = center
    return x < rect.left or x > rect.right or y < rect.top or y > rect.bottom


def is_crossing_boundary(x, y, width, height, rect) -> bool:
    """True when more than half of a box at (x, y) hangs outside rect.

    Used for the trash overlay while dragging; rect is in the same
    (canvas-local) coordinates as the box.
    """
    if is_degenerate(rect) or not all_finite(x, y, width, height):
        return False
    hw, hh = width / 2, height / 2
    return (x < rect.left - hw or x + width > rect.right + hw
            or y < rect.top - hh or y + height > rect.bottom + hh)


def drop_to_placement(drop_point, default_size) -> Point:
    """Top-left for a sticker centred on drop_point, clamped to >= 0."""
    if isinstance(default_size, (int, float)):
        w = h = default_size
    else:
        w, h = default_size
    x, y = drop_point
    x = x - w / 2 if all_finite(x, w) else 0.0
    y = y - h / 2 if all_finite(y, h) else 0.0
    return Point(max(0.0, x), max(0.0, y))
