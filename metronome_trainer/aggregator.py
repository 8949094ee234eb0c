"""Reduce a completed beat timeline into a SessionResult."""

from __future__ import annotations

from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Mapping, Sequence

from .evaluator import ON_TIME_BAND_MS
from .norms import determine_class_by_age
from .timing_core import (
    CHANNEL_ORDER,
    Beat,
    Channel,
    FeedbackCategory,
    Modality,
    clamp,
    mean,
    pstdev,
)

# Task Average when nothing was answered on the right channel. Always worse
# than the last finite class boundary, so it classifies as class 1.
NO_RESPONSE_TASK_AVERAGE = 999.0


@dataclass(frozen=True, slots=True)
class ChannelStats:
    count: int
    average_deviation_ms: float
    average_points: float


@dataclass(frozen=True, slots=True)
class SessionResult:
    task_average: float
    class_level: int
    early_hit_percent: float
    late_hit_percent: float
    on_target_percent: float

    total_beats: int
    responded_beats: int
    missed_beats: int
    wrong_channel_beats: int
    correct_beats: int
    response_rate: float
    accuracy_rate: float

    category_counts: Mapping[FeedbackCategory, int]
    average_points: float
    consistency: float
    channel_stats: Mapping[Channel, ChannelStats]

    ta_improvement: float | None = None
    class_improvement: int | None = None

    @property
    def has_correct_responses(self) -> bool:
        return self.correct_beats > 0

    def count(self, category: FeedbackCategory) -> int:
        return int(self.category_counts.get(category, 0))


def correct_abs_deviations(beats: Sequence[Beat]) -> list[float]:
    """|deviation| of correctly-channeled responses, in beat order."""

    return [
        abs(float(b.deviation_ms))
        for b in beats
        if b.is_matched and b.is_correct_channel and b.deviation_ms is not None
    ]


def calculate_consistency(abs_deviations: Sequence[float]) -> float:
    """100 minus the population std-dev of |deviation|, clamped to [0, 100]."""

    if len(abs_deviations) < 2:
        return 100.0
    return clamp(100.0 - pstdev(abs_deviations), 0.0, 100.0)


def _percent(part: int, whole: int) -> float:
    return 0.0 if whole <= 0 else (part / whole) * 100.0


def evaluate_session(beats: Sequence[Beat], user_age: int, modality: Modality | str) -> SessionResult:
    responded = [b for b in beats if b.is_matched]
    correct = [b for b in responded if b.is_correct_channel]
    wrong = [b for b in responded if not b.is_correct_channel]

    abs_devs = correct_abs_deviations(beats)
    task_average = mean(abs_devs) if abs_devs else NO_RESPONSE_TASK_AVERAGE
    class_level = determine_class_by_age(task_average, user_age, modality)

    early = sum(1 for b in correct if b.deviation_ms is not None and b.deviation_ms < -ON_TIME_BAND_MS)
    late = sum(1 for b in correct if b.deviation_ms is not None and b.deviation_ms > ON_TIME_BAND_MS)
    on_target = len(correct) - early - late

    counts = {category: 0 for category in FeedbackCategory}
    for beat in beats:
        if beat.feedback is None:
            counts[FeedbackCategory.MISS] += 1
        else:
            counts[beat.feedback.category] += 1

    points = [b.feedback.points for b in responded if b.feedback is not None]

    channel_stats: dict[Channel, ChannelStats] = {}
    for channel in CHANNEL_ORDER:
        hits = [b for b in responded if b.actual_channel == channel]
        if not hits:
            continue
        channel_stats[channel] = ChannelStats(
            count=len(hits),
            average_deviation_ms=mean(abs(float(b.deviation_ms or 0.0)) for b in hits),
            average_points=mean(b.feedback.points if b.feedback else 0.0 for b in hits),
        )

    return SessionResult(
        task_average=task_average,
        class_level=class_level,
        early_hit_percent=_percent(early, len(correct)),
        late_hit_percent=_percent(late, len(correct)),
        on_target_percent=_percent(on_target, len(correct)),
        total_beats=len(beats),
        responded_beats=len(responded),
        missed_beats=len(beats) - len(responded),
        wrong_channel_beats=len(wrong),
        correct_beats=len(correct),
        response_rate=_percent(len(responded), len(beats)),
        accuracy_rate=_percent(len(correct), len(responded)),
        category_counts=MappingProxyType(counts),
        average_points=mean(points),
        consistency=calculate_consistency(abs_devs),
        channel_stats=MappingProxyType(channel_stats),
    )


def calculate_improvement(current: SessionResult, previous: SessionResult) -> tuple[float, int]:
    """(TA improvement in percent, class delta) relative to ``previous``.

    A positive TA improvement means the Task Average went down.
    """

    if previous.task_average > 0:
        ta = (previous.task_average - current.task_average) / previous.task_average * 100.0
    else:
        ta = 0.0
    return ta, current.class_level - previous.class_level


def with_improvement(current: SessionResult, previous: SessionResult | None) -> SessionResult:
    if previous is None:
        return current
    ta, cls = calculate_improvement(current, previous)
    return replace(current, ta_improvement=ta, class_improvement=cls)


def evaluate_balance(early_percent: float, late_percent: float) -> str:
    if abs(early_percent - late_percent) <= 10.0:
        return "Balanced"
    return "Early-Biased" if early_percent > late_percent else "Late-Biased"


def format_ta(task_average: float) -> str:
    return f"{task_average:.1f}ms"
