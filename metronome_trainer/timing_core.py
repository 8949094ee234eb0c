from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum
from typing import Iterable


class Channel(StrEnum):
    LEFT_HAND = "left-hand"
    RIGHT_HAND = "right-hand"
    LEFT_FOOT = "left-foot"
    RIGHT_FOOT = "right-foot"

    @property
    def body_part(self) -> "BodyPart":
        return BodyPart.HAND if self.value.endswith("hand") else BodyPart.FOOT

    @property
    def side(self) -> "Side":
        return Side.LEFT if self.value.startswith("left") else Side.RIGHT


# Fixed round-robin order; also the display order for per-channel stats.
CHANNEL_ORDER: tuple[Channel, ...] = (
    Channel.LEFT_HAND,
    Channel.RIGHT_HAND,
    Channel.LEFT_FOOT,
    Channel.RIGHT_FOOT,
)


class Modality(StrEnum):
    VISUAL = "visual"
    AUDIO = "audio"

    @property
    def norm_key(self) -> str:
        # Norm tables are keyed by "auditory" rather than "audio".
        return "auditory" if self is Modality.AUDIO else "visual"


class BodyPart(StrEnum):
    HAND = "hand"
    FOOT = "foot"


class Side(StrEnum):
    LEFT = "left"
    RIGHT = "right"


class TrainingRange(StrEnum):
    LEFT = "left"
    RIGHT = "right"
    BOTH = "both"


class InputSource(StrEnum):
    KEYBOARD = "keyboard"
    USB = "usb"
    MIDI = "midi"
    GAMEPAD = "gamepad"
    TOUCH = "touch"
    SIMULATED = "simulated"


class FeedbackCategory(StrEnum):
    PERFECT = "perfect"
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    MISS = "miss"

    @property
    def rank(self) -> int:
        """Ordinal where miss=0 and perfect=5."""
        return _CATEGORY_RANK[self]


_CATEGORY_RANK = {
    FeedbackCategory.MISS: 0,
    FeedbackCategory.POOR: 1,
    FeedbackCategory.FAIR: 2,
    FeedbackCategory.GOOD: 3,
    FeedbackCategory.EXCELLENT: 4,
    FeedbackCategory.PERFECT: 5,
}


class Direction(StrEnum):
    EARLY = "early"
    ON_TIME = "on-time"
    LATE = "late"


class Phase(StrEnum):
    READY = "ready"
    RUNNING = "running"
    FINISHED = "finished"
    ABORTED = "aborted"


@dataclass(frozen=True, slots=True)
class ExpectedInput:
    beat_number: int
    channels: tuple[Channel, ...]  # ordered, non-empty
    is_alternating: bool = False
    alternate_index: int | None = None

    def __post_init__(self) -> None:
        if not self.channels:
            raise ValueError("ExpectedInput requires at least one channel")

    def accepts(self, channel: Channel) -> bool:
        return channel in self.channels


@dataclass(frozen=True, slots=True)
class InputEvent:
    channel: Channel
    timestamp_ms: float  # since session start, monotonic
    source: InputSource = InputSource.KEYBOARD
    seq: int | None = None  # caller-assigned, used for duplicate rejection
    raw: object | None = None


@dataclass(frozen=True, slots=True)
class Feedback:
    category: FeedbackCategory
    deviation_ms: float
    direction: Direction
    points: float
    color: str
    message: str
    display_text: str


@dataclass(slots=True)
class Beat:
    """One scheduled beat. Actual-fields are written at most once."""

    beat_number: int
    expected_time_ms: float
    expected_input: ExpectedInput

    actual_channel: Channel | None = None
    actual_time_ms: float | None = None
    source: InputSource | None = None
    deviation_ms: float | None = None
    is_correct_channel: bool = False
    feedback: Feedback | None = None
    expired: bool = False

    @property
    def is_matched(self) -> bool:
        return self.actual_time_ms is not None

    @property
    def is_wrong_channel(self) -> bool:
        return self.is_matched and not self.is_correct_channel

    def bind(
        self,
        *,
        event: InputEvent,
        feedback: Feedback,
        is_correct_channel: bool,
    ) -> None:
        if self.is_matched:
            raise RuntimeError(f"beat {self.beat_number} is already matched")
        self.actual_channel = event.channel
        self.actual_time_ms = float(event.timestamp_ms)
        self.source = event.source
        self.deviation_ms = feedback.deviation_ms
        self.is_correct_channel = bool(is_correct_channel)
        self.feedback = feedback


def mean(values: Iterable[float]) -> float:
    """Arithmetic mean; 0.0 for an empty sample."""

    vals = list(values)
    if not vals:
        return 0.0
    return sum(vals) / len(vals)


def pstdev(values: Iterable[float]) -> float:
    """Population standard deviation; 0.0 for fewer than two samples."""

    vals = list(values)
    if len(vals) < 2:
        return 0.0
    mu = sum(vals) / len(vals)
    variance = sum((v - mu) ** 2 for v in vals) / len(vals)
    return math.sqrt(variance)


def clamp(x: float, lo: float, hi: float) -> float:
    return lo if x <= lo else hi if x >= hi else float(x)


def round_half_up(x: float) -> int:
    # round() rounds half to even.
    return int(math.floor(x + 0.5))
