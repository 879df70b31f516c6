"""Central state model: the collection of placed stickers.

The token list is the single shared mutable resource. Geometry is changed
by the transform controller, z-order by the layer operations, and
membership only by the drop/remove operations in ops/stickers.py. Supports
an observer pattern for UI updates.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from .core.instruments import select_instrument

# Palette of stickers a user can drop. The visual asset is the painter's
# business; the core only needs a stable id to build token ids from.
PALETTE = [
    '#e94560', '#533483', '#0f3460', '#00b4d8', '#06d6a0', '#ffd166',
    '#ef476f', '#118ab2', '#9b5de5', '#f15bb5', '#00f5d4', '#fee440',
]


@dataclass(frozen=True)
class StickerDescriptor:
    """What gets dropped: a visual/sound reference, never geometry."""
    id: str
    label: str = ''
    color: str = PALETTE[0]


DESCRIPTORS = [
    StickerDescriptor(id=f'sticker-{i}', label=f'Sticker {i + 1}',
                      color=PALETTE[i % len(PALETTE)])
    for i in range(20)
]


@dataclass
class Token:
    id: str
    descriptor_id: str
    x: float
    y: float
    width: float = 80.0
    height: float = 80.0
    rotation: float = 0.0      # degrees, unbounded
    mirrored: bool = False
    volume: float = 0.5
    z_order: int = 1
    step_index: int = 0
    color: str = PALETTE[0]

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def instrument(self):
        return select_instrument(self.id)


@dataclass(frozen=True)
class TokenSnapshot:
    """Read-only view of one token for an external painter."""
    id: str
    descriptor_id: str
    x: float
    y: float
    width: float
    height: float
    rotation: float
    mirrored: bool
    volume: float
    z_order: int
    step_index: int
    instrument: str
    color: str
    is_current_step: bool = False
    selected: bool = False
    trash_hint: bool = False


class CanvasState:
    """Sticker collection with observer pattern for UI updates."""

    def __init__(self, global_volume: float = 0.4, sticker_size: float = 80.0):
        self.tokens: list[Token] = []
        self.selected: list[str] = []
        self.global_volume: float = global_volume
        self.sticker_size: float = sticker_size

        # Internal
        self._next_id: int = 1
        self._listeners: list[Callable] = []

    def new_id(self) -> int:
        nid = self._next_id
        self._next_id += 1
        return nid

    def on_change(self, callback: Callable):
        self._listeners.append(callback)

    def notify(self, source=None):
        for cb in self._listeners:
            cb(source)

    # Lookup helpers
    def find_token(self, token_id) -> Optional[Token]:
        return next((t for t in self.tokens if t.id == token_id), None)

    def tokens_at_step(self, step: int) -> list[Token]:
        return [t for t in self.tokens if t.step_index == step]

    def token_at(self, x: float, y: float) -> Optional[Token]:
        """Topmost token whose untransformed box contains (x, y)."""
        hits = [t for t in self.tokens
                if t.x <= x <= t.x + t.width and t.y <= y <= t.y + t.height]
        if not hits:
            return None
        return max(hits, key=lambda t: t.z_order)

    def __len__(self):
        return len(self.tokens)

    def renumber_steps(self):
        """Re-establish contiguous step indices 0..N-1 in collection order."""
        for i, t in enumerate(self.tokens):
            t.step_index = i

    def snapshot(self, current_step: Optional[int] = None,
                 trash_ids=()) -> list[TokenSnapshot]:
        """Tokens in paint order (ascending z-order)."""
        selected = set(self.selected)
        trash = set(trash_ids)
        return [
            TokenSnapshot(
                id=t.id, descriptor_id=t.descriptor_id,
                x=t.x, y=t.y, width=t.width, height=t.height,
                rotation=t.rotation, mirrored=t.mirrored, volume=t.volume,
                z_order=t.z_order, step_index=t.step_index,
                instrument=t.instrument.name, color=t.color,
                is_current_step=(current_step is not None
                                 and t.step_index == current_step),
                selected=t.id in selected,
                trash_hint=t.id in trash,
            )
            for t in sorted(self.tokens, key=lambda t: t.z_order)
        ]
