from __future__ import annotations

import time
from typing import Callable

Sleep = Callable[[float], None]


class PollInterval:
    """Fixed delay between two status checks of the same bulk operation."""

    def __init__(self, interval_ms: int, sleep: Sleep = time.sleep):
        self.interval_ms = max(0, int(interval_ms))
        self.delay_s = self.interval_ms / 1000.0
        self._sleep = sleep

    def sleep(self) -> None:
        """Suspend for the configured delay."""
        self._sleep(self.delay_s)
