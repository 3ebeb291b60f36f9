"""
Clock implementations.

The replay only reads wall-clock time to judge node freshness and to turn a
"period" into a minimum ballot time, so the clock is injected.
"""

import time
from dataclasses import dataclass


class SystemClock:
    """Wall-clock time source in unix seconds."""

    def now(self) -> int:
        return int(time.time())


@dataclass(frozen=True)
class DeterministicClock:
    """Fixed time source for tests and reproducible runs."""
    current: int = 0

    def now(self) -> int:
        """Get current timestamp without advancing."""
        return self.current
