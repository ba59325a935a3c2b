"""Synchronized-update mode: hold redraws until the update ends or times out."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable


@dataclass
class SyncState:
    """Tracks whether a synchronized update is in progress."""

    clock: Callable[[], float] = field(default_factory=lambda: time.monotonic)
    active: bool = False
    write_aborted: bool = False
    _started: float = 0.0

    def begin(self) -> None:
        """Start a synchronized update now."""
        self._started = self.clock()
        self.active = True

    def end(self) -> None:
        """Finish the synchronized update."""
        self.active = False

    def in_sync(self, timeout: float) -> bool:
        """Tell whether the update is still on, ending it once timeout ms have passed."""
        if self.active and (self.clock() - self._started) * 1000 >= timeout:
            self.active = False
        return self.active