"""Expected-input patterns.

A pattern is a small tagged value describing which channel(s) count as correct
on each beat.  ``generate_expected_input`` is a pure function of
``(pattern, beat_number)`` so a session's schedule can always be rebuilt from
its settings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Union

from .timing_core import CHANNEL_ORDER, BodyPart, Channel, ExpectedInput, TrainingRange

if TYPE_CHECKING:
    from .config import TrainingSettings


@dataclass(frozen=True, slots=True)
class Single:
    channel: Channel


@dataclass(frozen=True, slots=True)
class Alternating:
    first: Channel
    second: Channel


@dataclass(frozen=True, slots=True)
class Simultaneous:
    first: Channel
    second: Channel


@dataclass(frozen=True, slots=True)
class RoundRobin:
    channels: tuple[Channel, ...] = CHANNEL_ORDER


@dataclass(frozen=True, slots=True)
class Custom:
    sequence: tuple[Channel, ...]


Pattern = Union[Single, Alternating, Simultaneous, RoundRobin, Custom]


NAMED_PATTERNS: dict[str, Pattern] = {
    "left-hand-only": Single(Channel.LEFT_HAND),
    "right-hand-only": Single(Channel.RIGHT_HAND),
    "both-hands-alternate": Alternating(Channel.LEFT_HAND, Channel.RIGHT_HAND),
    "both-hands-simultaneous": Simultaneous(Channel.LEFT_HAND, Channel.RIGHT_HAND),
    "left-foot-only": Single(Channel.LEFT_FOOT),
    "right-foot-only": Single(Channel.RIGHT_FOOT),
    "both-feet-alternate": Alternating(Channel.LEFT_FOOT, Channel.RIGHT_FOOT),
    "both-feet-simultaneous": Simultaneous(Channel.LEFT_FOOT, Channel.RIGHT_FOOT),
    "left-hand-right-foot": Alternating(Channel.LEFT_HAND, Channel.RIGHT_FOOT),
    "right-hand-left-foot": Alternating(Channel.RIGHT_HAND, Channel.LEFT_FOOT),
    "all-alternate": RoundRobin(),
}


def pattern_from_name(name: str) -> Pattern:
    try:
        return NAMED_PATTERNS[str(name)]
    except KeyError:
        raise ValueError(f"unknown training pattern: {name!r}") from None


def pattern_name(pattern: Pattern) -> str:
    """Legacy name for a built-in pattern, or ``custom`` for sequences."""

    for name, candidate in NAMED_PATTERNS.items():
        if candidate == pattern:
            return name
    return "custom"


def custom_sequence(channels: Iterable[Channel | str]) -> Custom:
    """Build a custom pattern from 1-4 distinct channels."""

    seq = tuple(Channel(c) for c in channels)
    if not 1 <= len(seq) <= 4:
        raise ValueError("custom sequence must contain 1 to 4 channels")
    if len(set(seq)) != len(seq):
        raise ValueError("custom sequence channels must be distinct")
    return Custom(seq)


def generate_expected_input(pattern: Pattern, beat_number: int) -> ExpectedInput:
    n = int(beat_number)
    if n < 0:
        raise ValueError("beat_number must be >= 0")

    if isinstance(pattern, Single):
        return ExpectedInput(beat_number=n, channels=(pattern.channel,))
    if isinstance(pattern, Alternating):
        idx = n % 2
        return ExpectedInput(
            beat_number=n,
            channels=(pattern.first if idx == 0 else pattern.second,),
            is_alternating=True,
            alternate_index=idx,
        )
    if isinstance(pattern, Simultaneous):
        return ExpectedInput(beat_number=n, channels=(pattern.first, pattern.second))
    if isinstance(pattern, RoundRobin):
        idx = n % len(pattern.channels)
        return ExpectedInput(
            beat_number=n,
            channels=(pattern.channels[idx],),
            is_alternating=True,
            alternate_index=idx,
        )
    if isinstance(pattern, Custom):
        seq = pattern.sequence
        idx = n % len(seq)
        alternating = len(seq) > 1
        return ExpectedInput(
            beat_number=n,
            channels=(seq[idx],),
            is_alternating=alternating,
            alternate_index=idx if alternating else None,
        )
    raise TypeError(f"unsupported pattern: {pattern!r}")


def settings_to_pattern(body_part: BodyPart | str, training_range: TrainingRange | str) -> str:
    """Map the legacy (body part, range) pair to a pattern name.

    ``both`` always means alternating, never simultaneous.
    """

    part = BodyPart(body_part)
    rng = TrainingRange(training_range)
    if part is BodyPart.HAND:
        if rng is TrainingRange.LEFT:
            return "left-hand-only"
        if rng is TrainingRange.RIGHT:
            return "right-hand-only"
        return "both-hands-alternate"
    if rng is TrainingRange.LEFT:
        return "left-foot-only"
    if rng is TrainingRange.RIGHT:
        return "right-foot-only"
    return "both-feet-alternate"


def pattern_for_settings(settings: "TrainingSettings") -> Pattern:
    if settings.custom_sequence:
        return custom_sequence(settings.custom_sequence)
    return pattern_from_name(settings_to_pattern(settings.body_part, settings.training_range))


_CHANNEL_LABELS = {
    Channel.LEFT_HAND: "Left hand",
    Channel.RIGHT_HAND: "Right hand",
    Channel.LEFT_FOOT: "Left foot",
    Channel.RIGHT_FOOT: "Right foot",
}


def channel_label(channel: Channel) -> str:
    return _CHANNEL_LABELS[Channel(channel)]


def describe_pattern(pattern: Pattern) -> str:
    if isinstance(pattern, Single):
        return f"{channel_label(pattern.channel)} only"
    if isinstance(pattern, Alternating):
        return f"{channel_label(pattern.first)} / {channel_label(pattern.second)} alternating"
    if isinstance(pattern, Simultaneous):
        return f"{channel_label(pattern.first)} + {channel_label(pattern.second)} together"
    if isinstance(pattern, RoundRobin):
        return " -> ".join(channel_label(c) for c in pattern.channels)
    if isinstance(pattern, Custom):
        return " -> ".join(channel_label(c) for c in pattern.sequence)
    raise TypeError(f"unsupported pattern: {pattern!r}")
