from __future__ import annotations

import pytest

from metronome_trainer.evaluator import (
    FEEDBACK_THRESHOLDS,
    categorize,
    direction_for,
    evaluate_beat,
    format_deviation,
    format_feedback,
    missed_feedback,
)
from metronome_trainer.timing_core import Channel, Direction, ExpectedInput, FeedbackCategory

LEFT = ExpectedInput(beat_number=0, channels=(Channel.LEFT_HAND,))


@pytest.mark.parametrize(
    ("abs_dev", "category", "points"),
    [
        (0.0, FeedbackCategory.PERFECT, 100.0),
        (15.0, FeedbackCategory.PERFECT, 100.0),
        (15.01, FeedbackCategory.EXCELLENT, 90.0),
        (30.0, FeedbackCategory.EXCELLENT, 90.0),
        (50.0, FeedbackCategory.GOOD, 75.0),
        (80.0, FeedbackCategory.FAIR, 60.0),
        (120.0, FeedbackCategory.POOR, 40.0),
        (120.5, FeedbackCategory.MISS, 0.0),
        (499.0, FeedbackCategory.MISS, 0.0),
    ],
)
def test_threshold_boundaries_are_inclusive(abs_dev: float, category: FeedbackCategory, points: float) -> None:
    fb, correct = evaluate_beat(0.0, abs_dev, Channel.LEFT_HAND, LEFT)
    assert correct is True
    assert fb.category is category
    assert fb.points == points
    assert categorize(abs_dev) is category


def test_points_never_decrease_as_deviation_shrinks() -> None:
    samples = [float(x) for x in range(0, 400)]
    points = [evaluate_beat(0.0, d, Channel.LEFT_HAND, LEFT)[0].points for d in samples]
    assert all(a >= b for a, b in zip(points, points[1:]))
    assert [t.points for t in FEEDBACK_THRESHOLDS] == [100.0, 90.0, 75.0, 60.0, 40.0, 0.0]


@pytest.mark.parametrize("actual", [-140.0, -60.0, -12.0, 0.0, 3.0, 22.0, 45.0, 110.0])
def test_wrong_channel_halves_points_only(actual: float) -> None:
    right, ok = evaluate_beat(0.0, actual, Channel.LEFT_HAND, LEFT)
    wrong, bad = evaluate_beat(0.0, actual, Channel.RIGHT_FOOT, LEFT)
    assert ok is True and bad is False
    assert wrong.points == right.points / 2.0
    assert wrong.category is right.category
    assert wrong.color == right.color
    assert wrong.deviation_ms == right.deviation_ms
    assert wrong.message.startswith("WRONG INPUT - ")


def test_direction_uses_narrow_on_time_band() -> None:
    assert direction_for(0.0) is Direction.ON_TIME
    assert direction_for(5.0) is Direction.ON_TIME
    assert direction_for(-5.0) is Direction.ON_TIME
    assert direction_for(5.1) is Direction.LATE
    assert direction_for(-10.0) is Direction.EARLY

    fb, _ = evaluate_beat(1000.0, 1010.0, Channel.LEFT_HAND, LEFT)
    assert fb.category is FeedbackCategory.PERFECT
    assert fb.direction is Direction.LATE


def test_deviation_is_signed_actual_minus_expected() -> None:
    fb, _ = evaluate_beat(2000.0, 1977.0, Channel.LEFT_HAND, LEFT)
    assert fb.deviation_ms == pytest.approx(-23.0)
    assert fb.display_text == "-23ms"


def test_format_deviation() -> None:
    assert format_deviation(23.0) == "+23ms"
    assert format_deviation(-4.0) == "-4ms"
    assert format_deviation(0.0) == "0ms"
    assert format_deviation(0.4) == "+0ms"
    assert format_deviation(-0.3) == "-0ms"
    assert format_deviation(2.5) == "+3ms"
    assert format_deviation(-2.5) == "-3ms"


def test_simultaneous_beat_accepts_either_listed_channel() -> None:
    both = ExpectedInput(beat_number=0, channels=(Channel.LEFT_HAND, Channel.RIGHT_HAND))
    assert evaluate_beat(0.0, 0.0, Channel.RIGHT_HAND, both)[1] is True
    assert evaluate_beat(0.0, 0.0, Channel.LEFT_FOOT, both)[1] is False


def test_missed_feedback() -> None:
    fb = missed_feedback()
    assert fb.category is FeedbackCategory.MISS
    assert fb.points == 0.0
    assert format_feedback(fb) == "MISSED (NO INPUT)"
