"""Bind asynchronous input events to scheduled beats.

Each input is matched to the nearest still-open beat inside a window of
``MATCH_WINDOW_SLOTS`` beat slots around the beat its timestamp points at.
The caller is responsible for never delivering the same event
twice: the only dedup key here is "beat already matched".
"""

from __future__ import annotations

import logging
from typing import Sequence

from .evaluator import evaluate_beat
from .timing_core import Beat, InputEvent, round_half_up

LOGGER = logging.getLogger(__name__)

MATCH_WINDOW_SLOTS = 2
ACCEPTANCE_RADIUS_MS = 500.0


def find_match(timestamp_ms: float, beats: Sequence[Beat], interval_ms: float) -> int | None:
    """Return the index of the beat an input at ``timestamp_ms`` belongs to.

    Matched and expired beats are skipped.  Ties go to the lower index.  A
    candidate exactly ``ACCEPTANCE_RADIUS_MS`` away is still accepted.
    """

    if not beats or interval_ms <= 0:
        return None

    estimated = round_half_up(float(timestamp_ms) / float(interval_ms))
    start = max(0, estimated - MATCH_WINDOW_SLOTS)
    end = min(len(beats) - 1, estimated + MATCH_WINDOW_SLOTS)

    best_index: int | None = None
    best_distance = float("inf")
    for i in range(start, end + 1):
        beat = beats[i]
        if beat.is_matched or beat.expired:
            continue
        distance = abs(float(timestamp_ms) - beat.expected_time_ms)
        if distance < best_distance:
            best_distance = distance
            best_index = i

    if best_index is None or best_distance > ACCEPTANCE_RADIUS_MS:
        return None
    return best_index


def bind_input(event: InputEvent, beats: Sequence[Beat], interval_ms: float) -> Beat | None:
    """Match, score and bind ``event``; ``None`` means the input is discarded."""

    idx = find_match(event.timestamp_ms, beats, interval_ms)
    if idx is None:
        LOGGER.debug(
            "Discarded %s input at %.1fms: no open beat within %.0fms",
            event.channel,
            event.timestamp_ms,
            ACCEPTANCE_RADIUS_MS,
        )
        return None

    beat = beats[idx]
    feedback, correct = evaluate_beat(
        beat.expected_time_ms,
        event.timestamp_ms,
        event.channel,
        beat.expected_input,
    )
    beat.bind(event=event, feedback=feedback, is_correct_channel=correct)
    return beat
