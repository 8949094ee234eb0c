from __future__ import annotations

import math

from .patterns import Pattern, generate_expected_input
from .timing_core import Beat


def interval_ms(bpm: float) -> float:
    if bpm <= 0:
        raise ValueError("bpm must be > 0")
    return 60000.0 / float(bpm)


def total_beats(bpm: float, duration_seconds: float) -> int:
    if duration_seconds <= 0:
        raise ValueError("duration_seconds must be > 0")
    return int(math.floor(float(duration_seconds) * 1000.0 / interval_ms(bpm)))


def build_beats(pattern: Pattern, *, bpm: float, duration_seconds: float) -> list[Beat]:
    """Create the full beat timeline for a session.

    Expected times are exact multiples of the interval; there is no drift
    correction against the presentation layer's actual fire times.
    """

    step = interval_ms(bpm)
    return [
        Beat(
            beat_number=i,
            expected_time_ms=i * step,
            expected_input=generate_expected_input(pattern, i),
        )
        for i in range(total_beats(bpm, duration_seconds))
    ]


def beat_index_at(elapsed_ms: float, step_ms: float) -> int:
    """Index of the most recent beat that has become due (-1 before beat 0)."""

    if elapsed_ms < 0:
        return -1
    return int(math.floor(elapsed_ms / step_ms))


def window_closed(beat: Beat, *, elapsed_ms: float, step_ms: float) -> bool:
    """A beat's input window closes one interval after it was due."""

    return elapsed_ms >= beat.expected_time_ms + step_ms
