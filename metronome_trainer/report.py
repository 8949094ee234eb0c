"""Comprehensive assessment report over the 8-session battery.

The battery is every combination of {hand, foot} x {left, right} x
{audio, visual}.  Six dimensions are derived from it: processing capability,
learning style, attention, brain speed, sustainability and hemisphere
balance.  All level/percentile mappings are fixed step tables.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Sequence

from .aggregator import SessionResult
from .norms import class_percentile, determine_class_by_age, performance_level
from .profile import UserProfile
from .timing_core import BodyPart, Modality, Side, mean, pstdev, round_half_up


class ReportError(ValueError):
    """Raised when the session battery does not satisfy the report's preconditions."""


LEVEL_GOOD = "우수"
LEVEL_AVERAGE = "보통"
LEVEL_DEFICIENT = "미달"

CORRELATION_HIGH = "높음"
CORRELATION_MEDIUM = "보통"
CORRELATION_LOW = "낮음"

BATTERY_SIZE = 8


@dataclass(frozen=True, slots=True)
class BatteryTest:
    name: str
    body_part: BodyPart
    side: Side
    modality: Modality

    @property
    def key(self) -> tuple[BodyPart, Side, Modality]:
        return (self.body_part, self.side, self.modality)


# Presentation order of the standard assessment.
REQUIRED_BATTERY: tuple[BatteryTest, ...] = (
    BatteryTest("왼손 청각", BodyPart.HAND, Side.LEFT, Modality.AUDIO),
    BatteryTest("왼손 시각", BodyPart.HAND, Side.LEFT, Modality.VISUAL),
    BatteryTest("오른손 청각", BodyPart.HAND, Side.RIGHT, Modality.AUDIO),
    BatteryTest("오른손 시각", BodyPart.HAND, Side.RIGHT, Modality.VISUAL),
    BatteryTest("왼발 청각", BodyPart.FOOT, Side.LEFT, Modality.AUDIO),
    BatteryTest("왼발 시각", BodyPart.FOOT, Side.LEFT, Modality.VISUAL),
    BatteryTest("오른발 청각", BodyPart.FOOT, Side.RIGHT, Modality.AUDIO),
    BatteryTest("오른발 시각", BodyPart.FOOT, Side.RIGHT, Modality.VISUAL),
)


@dataclass(frozen=True, slots=True)
class BatteryEntry:
    """One finished session of the battery.

    ``abs_deviations`` are the |deviation| values of correctly-channeled
    responses, in the order the inputs arrived.
    """

    body_part: BodyPart
    side: Side
    modality: Modality
    result: SessionResult
    abs_deviations: tuple[float, ...] = ()

    @property
    def key(self) -> tuple[BodyPart, Side, Modality]:
        return (self.body_part, self.side, self.modality)


@dataclass(frozen=True, slots=True)
class ProcessingCapability:
    task_average: int
    percentile: int
    level: str
    class_level: int


@dataclass(frozen=True, slots=True)
class LearningStyle:
    dominant_style: str  # "visual" | "auditory" | "balanced"
    difference: int
    dominant_label: str


@dataclass(frozen=True, slots=True)
class AttentionMetrics:
    percentile: int
    level: str
    standard_deviation: int


@dataclass(frozen=True, slots=True)
class BrainSpeed:
    task_average: int
    level: str
    percentile: int


@dataclass(frozen=True, slots=True)
class SustainabilityMetrics:
    error_rate: int
    improvement_rate: int
    early_average: int
    late_average: int


@dataclass(frozen=True, slots=True)
class HemisphereBalance:
    left_brain: int
    right_brain: int
    correlation: str
    difference: int


@dataclass(frozen=True, slots=True)
class IndividualResult:
    test_name: str
    result: SessionResult


@dataclass(frozen=True, slots=True)
class ComprehensiveReport:
    name: str | None
    gender: str | None
    age: int
    test_date: dt.date

    visual_capability: ProcessingCapability
    auditory_capability: ProcessingCapability
    learning_style: LearningStyle
    visual_attention: AttentionMetrics
    auditory_attention: AttentionMetrics
    brain_speed: BrainSpeed
    visual_sustainability: SustainabilityMetrics
    auditory_sustainability: SustainabilityMetrics
    hemisphere_balance: HemisphereBalance

    individual_results: tuple[IndividualResult, ...]
    entries: tuple[BatteryEntry, ...]


def calculate_attention_metrics(abs_deviations: Sequence[float]) -> AttentionMetrics:
    """Attention from the spread of |deviation|: lower spread, higher percentile."""

    if not abs_deviations:
        return AttentionMetrics(percentile=0, level=LEVEL_DEFICIENT, standard_deviation=0)

    sd = pstdev(abs_deviations)
    if sd < 20.0:
        percentile = 85.0
        level = LEVEL_GOOD
    elif sd < 40.0:
        # 20ms -> 70th, 40ms -> 30th
        percentile = 70.0 - ((sd - 20.0) / 20.0) * 40.0
        level = LEVEL_AVERAGE
    else:
        # 40ms -> 30th, 100ms and beyond -> 5th
        percentile = max(5.0, 30.0 - ((sd - 40.0) / 60.0) * 25.0)
        level = LEVEL_DEFICIENT

    return AttentionMetrics(
        percentile=round_half_up(percentile),
        level=level,
        standard_deviation=round_half_up(sd),
    )


def calculate_sustainability(abs_deviations: Sequence[float]) -> SustainabilityMetrics:
    """Compare the first and second half of the responses, in input order."""

    if len(abs_deviations) < 2:
        only = round_half_up(abs_deviations[0]) if abs_deviations else 0
        return SustainabilityMetrics(error_rate=0, improvement_rate=0, early_average=only, late_average=only)

    midpoint = len(abs_deviations) // 2
    early_avg = mean(abs_deviations[:midpoint])
    late_avg = mean(abs_deviations[midpoint:])

    error_rate = 0.0
    improvement_rate = 0.0
    if late_avg > early_avg:
        error_rate = 100.0 if early_avg == 0 else min(100.0, (late_avg - early_avg) / early_avg * 100.0)
    elif early_avg > late_avg:
        improvement_rate = min(100.0, (early_avg - late_avg) / early_avg * 100.0)

    return SustainabilityMetrics(
        error_rate=round_half_up(error_rate),
        improvement_rate=round_half_up(improvement_rate),
        early_average=round_half_up(early_avg),
        late_average=round_half_up(late_avg),
    )


def calculate_hemisphere_balance(left_side_average: float, right_side_average: float) -> HemisphereBalance:
    """Map left/right body-side Task Averages to contralateral hemisphere shares.

    Left body maps to the right hemisphere.  A lower Task Average on one side
    gives its hemisphere the larger share; the shares sum to 100.
    """

    total = float(left_side_average) + float(right_side_average)
    if total <= 0:
        right_brain = 50
    else:
        right_brain = round_half_up(float(right_side_average) / total * 100.0)
    left_brain = 100 - right_brain
    difference = abs(left_brain - right_brain)

    if difference < 10:
        correlation = CORRELATION_HIGH
    elif difference < 20:
        correlation = CORRELATION_MEDIUM
    else:
        correlation = CORRELATION_LOW

    return HemisphereBalance(
        left_brain=left_brain,
        right_brain=right_brain,
        correlation=correlation,
        difference=difference,
    )


def determine_learning_style(visual_percentile: int, auditory_percentile: int) -> LearningStyle:
    difference = abs(int(visual_percentile) - int(auditory_percentile))
    if difference < 5:
        return LearningStyle(dominant_style="balanced", difference=difference, dominant_label="균형적")
    if visual_percentile > auditory_percentile:
        return LearningStyle(dominant_style="visual", difference=difference, dominant_label="시각우성")
    return LearningStyle(dominant_style="auditory", difference=difference, dominant_label="청각우성")


def calculate_brain_speed(visual_task_average: float, auditory_task_average: float) -> BrainSpeed:
    task_average = round_half_up((float(visual_task_average) + float(auditory_task_average)) / 2.0)
    if task_average < 50:
        return BrainSpeed(task_average=task_average, level=LEVEL_GOOD, percentile=85)
    if task_average < 100:
        return BrainSpeed(task_average=task_average, level=LEVEL_AVERAGE, percentile=50)
    return BrainSpeed(task_average=task_average, level=LEVEL_DEFICIENT, percentile=15)


def calculate_processing_capability(task_average: float, age: int, modality: Modality) -> ProcessingCapability:
    """Capability for one modality from its averaged Task Average."""

    class_level = determine_class_by_age(task_average, age, modality)
    return ProcessingCapability(
        task_average=round_half_up(task_average),
        percentile=class_percentile(class_level),
        level=performance_level(class_level),
        class_level=class_level,
    )


def _validate_battery(entries: Sequence[BatteryEntry]) -> dict[tuple[BodyPart, Side, Modality], BatteryEntry]:
    if len(entries) != BATTERY_SIZE:
        raise ReportError(
            f"Comprehensive report requires exactly {BATTERY_SIZE} assessment sessions, got {len(entries)}"
        )
    by_key: dict[tuple[BodyPart, Side, Modality], BatteryEntry] = {}
    for entry in entries:
        if entry.key in by_key:
            raise ReportError(f"Duplicate assessment session: {entry.body_part}/{entry.side}/{entry.modality}")
        by_key[entry.key] = entry
    missing = [t.name for t in REQUIRED_BATTERY if t.key not in by_key]
    if missing:
        raise ReportError(f"Missing assessment sessions: {', '.join(missing)}")
    return by_key


def build_comprehensive_report(
    entries: Sequence[BatteryEntry],
    *,
    age: int | None = None,
    profile: UserProfile | None = None,
    test_date: dt.date | None = None,
) -> ComprehensiveReport:
    """Combine the 8 battery sessions into a ComprehensiveReport.

    Either ``age`` or ``profile`` must be given; the profile's age is used
    when ``age`` is omitted.  Input sessions are never modified.
    """

    by_key = _validate_battery(entries)
    if age is None:
        if profile is None:
            raise ReportError("age or profile is required")
        age = profile.age
    ordered = tuple(by_key[t.key] for t in REQUIRED_BATTERY)

    visual = [e for e in ordered if e.modality is Modality.VISUAL]
    auditory = [e for e in ordered if e.modality is Modality.AUDIO]
    left = [e for e in ordered if e.side is Side.LEFT]
    right = [e for e in ordered if e.side is Side.RIGHT]

    visual_ta = mean(e.result.task_average for e in visual)
    auditory_ta = mean(e.result.task_average for e in auditory)

    visual_devs = [d for e in visual for d in e.abs_deviations]
    auditory_devs = [d for e in auditory for d in e.abs_deviations]

    visual_capability = calculate_processing_capability(visual_ta, age, Modality.VISUAL)
    auditory_capability = calculate_processing_capability(auditory_ta, age, Modality.AUDIO)

    return ComprehensiveReport(
        name=None if profile is None else profile.name,
        gender=None if profile is None else str(profile.gender),
        age=int(age),
        test_date=test_date or dt.date.today(),
        visual_capability=visual_capability,
        auditory_capability=auditory_capability,
        learning_style=determine_learning_style(visual_capability.percentile, auditory_capability.percentile),
        visual_attention=calculate_attention_metrics(visual_devs),
        auditory_attention=calculate_attention_metrics(auditory_devs),
        brain_speed=calculate_brain_speed(visual_ta, auditory_ta),
        visual_sustainability=calculate_sustainability(visual_devs),
        auditory_sustainability=calculate_sustainability(auditory_devs),
        hemisphere_balance=calculate_hemisphere_balance(
            mean(e.result.task_average for e in left),
            mean(e.result.task_average for e in right),
        ),
        individual_results=tuple(
            IndividualResult(test_name=t.name, result=by_key[t.key].result) for t in REQUIRED_BATTERY
        ),
        entries=ordered,
    )
