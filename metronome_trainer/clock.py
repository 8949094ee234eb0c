from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Monotonic clock abstraction.

    The session engine depends on this interface rather than calling real time directly.
    """

    def now(self) -> float:
        """Return monotonic seconds."""


class RealClock:
    """Production clock backed by time.perf_counter()."""

    def now(self) -> float:
        return time.perf_counter()


def elapsed_ms(clock: Clock, origin_s: float) -> float:
    """Milliseconds elapsed on ``clock`` since ``origin_s``."""

    return (clock.now() - origin_s) * 1000.0
