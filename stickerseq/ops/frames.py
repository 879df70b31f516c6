"""Frame snapshots for export collaborators.

A recorder polls capture_frame() at its own cadence; encoding, naming and
storage are its business.
"""

import time
from dataclasses import dataclass
from typing import Optional

from ..core.sequencer import TRANSPORT_STOPPED
from ..state import TokenSnapshot


@dataclass(frozen=True)
class Frame:
    tokens: tuple[TokenSnapshot, ...]
    current_step: Optional[int]
    transport: str
    timestamp: float


def capture_frame(state, sequencer=None, controller=None) -> Frame:
    """Read-only picture of the canvas at this instant, in paint order."""
    transport = sequencer.transport if sequencer else TRANSPORT_STOPPED
    step = sequencer.current_step if transport != TRANSPORT_STOPPED else None
    trash = controller.trash_ids() if controller else ()
    return Frame(
        tokens=tuple(state.snapshot(current_step=step, trash_ids=trash)),
        current_step=step,
        transport=transport,
        timestamp=time.monotonic(),
    )
