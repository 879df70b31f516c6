"""Non-fatal fault reporting.

Every recoverable problem in the core (a malformed touch event, a trigger
while the sound device is not up, a layer move on a stale id) is reported
here instead of being raised. The default sink is the standard logging
module; tests read the per-kind counters.

report() is called from both the GUI thread and the audio callback, so the
counters are guarded by a lock.
"""

import logging
import threading
from collections import Counter
from enum import Enum


class Fault(Enum):
    GESTURE = 'gesture'
    AUDIO = 'audio'
    LAYER = 'layer'
    BOUNDS = 'bounds'
    CONFIG = 'config'


# Everything but configuration problems happens during normal use
# (stray touches, triggers before the device is up) and stays at DEBUG.
_LOUD = {Fault.CONFIG}


class Diagnostics:
    """Counts faults per kind and forwards them to a logger."""

    def __init__(self, logger=None):
        self.logger = logger or logging.getLogger('stickerseq')
        self.counts = Counter()
        self._lock = threading.Lock()

    def report(self, fault: Fault, message: str, *args):
        with self._lock:
            self.counts[fault] += 1
        level = logging.WARNING if fault in _LOUD else logging.DEBUG
        self.logger.log(level, f"[{fault.value}] {message}", *args)

    def total(self) -> int:
        with self._lock:
            return sum(self.counts.values())

    def clear(self):
        with self._lock:
            self.counts.clear()
