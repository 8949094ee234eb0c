from __future__ import annotations

import math
from dataclasses import dataclass

from .timing_core import Channel, Direction, ExpectedInput, Feedback, FeedbackCategory


@dataclass(frozen=True, slots=True)
class FeedbackThreshold:
    category: FeedbackCategory
    max_abs_ms: float  # inclusive
    points: float
    color: str
    message: str


# Ordered best -> worst; the first threshold whose bound holds wins.
FEEDBACK_THRESHOLDS: tuple[FeedbackThreshold, ...] = (
    FeedbackThreshold(FeedbackCategory.PERFECT, 15.0, 100.0, "#10b981", "PERFECT!"),
    FeedbackThreshold(FeedbackCategory.EXCELLENT, 30.0, 90.0, "#22c55e", "EXCELLENT"),
    FeedbackThreshold(FeedbackCategory.GOOD, 50.0, 75.0, "#84cc16", "GOOD"),
    FeedbackThreshold(FeedbackCategory.FAIR, 80.0, 60.0, "#eab308", "FAIR"),
    FeedbackThreshold(FeedbackCategory.POOR, 120.0, 40.0, "#f97316", "POOR"),
    FeedbackThreshold(FeedbackCategory.MISS, math.inf, 0.0, "#ef4444", "MISS"),
)

THRESHOLDS_BY_CATEGORY: dict[FeedbackCategory, FeedbackThreshold] = {
    t.category: t for t in FEEDBACK_THRESHOLDS
}

ON_TIME_BAND_MS = 5.0
WRONG_CHANNEL_FACTOR = 0.5


def threshold_for(abs_deviation_ms: float) -> FeedbackThreshold:
    for threshold in FEEDBACK_THRESHOLDS:
        if abs_deviation_ms <= threshold.max_abs_ms:
            return threshold
    return FEEDBACK_THRESHOLDS[-1]


def categorize(abs_deviation_ms: float) -> FeedbackCategory:
    return threshold_for(abs_deviation_ms).category


def direction_for(deviation_ms: float) -> Direction:
    # Narrower than the perfect band.
    if abs(deviation_ms) <= ON_TIME_BAND_MS:
        return Direction.ON_TIME
    return Direction.EARLY if deviation_ms < 0 else Direction.LATE


def format_deviation(deviation_ms: float) -> str:
    # Half away from zero; the sign follows the raw value, so 0.3 -> "+0ms".
    magnitude = int(math.floor(abs(deviation_ms) + 0.5))
    sign = "+" if deviation_ms > 0 else "-" if deviation_ms < 0 else ""
    return f"{sign}{magnitude}ms"


def is_correct_channel(channel: Channel, expected: ExpectedInput) -> bool:
    return expected.accepts(channel)


def evaluate_beat(
    expected_time_ms: float,
    actual_time_ms: float,
    actual_channel: Channel,
    expected_input: ExpectedInput,
) -> tuple[Feedback, bool]:
    """Score one bound input against its beat.

    A wrong channel keeps the timing category but earns half the points.
    """

    deviation = float(actual_time_ms) - float(expected_time_ms)
    threshold = threshold_for(abs(deviation))
    correct = is_correct_channel(actual_channel, expected_input)

    points = threshold.points if correct else threshold.points * WRONG_CHANNEL_FACTOR
    message = threshold.message if correct else f"WRONG INPUT - {threshold.message}"

    feedback = Feedback(
        category=threshold.category,
        deviation_ms=deviation,
        direction=direction_for(deviation),
        points=points,
        color=threshold.color,
        message=message,
        display_text=format_deviation(deviation),
    )
    return feedback, correct


def missed_feedback() -> Feedback:
    """Feedback shown when a beat's window closes with no input."""

    return Feedback(
        category=FeedbackCategory.MISS,
        deviation_ms=0.0,
        direction=Direction.LATE,
        points=0.0,
        color="#999999",
        message="MISSED",
        display_text="NO INPUT",
    )


def format_feedback(feedback: Feedback) -> str:
    return f"{feedback.message} ({feedback.display_text})"
