from __future__ import annotations

import pytest

from metronome_trainer.config import TrainingSettings
from metronome_trainer.patterns import (
    NAMED_PATTERNS,
    Custom,
    RoundRobin,
    custom_sequence,
    describe_pattern,
    generate_expected_input,
    pattern_for_settings,
    pattern_from_name,
    pattern_name,
    settings_to_pattern,
)
from metronome_trainer.schedule import build_beats, interval_ms, total_beats
from metronome_trainer.timing_core import BodyPart, Channel, TrainingRange


def test_expected_input_is_a_pure_function_of_pattern_and_beat() -> None:
    for name, pattern in NAMED_PATTERNS.items():
        for n in range(12):
            a = generate_expected_input(pattern, n)
            b = generate_expected_input(pattern_from_name(name), n)
            assert a == b
            assert a.beat_number == n


def test_single_channel_pattern_never_alternates() -> None:
    e = generate_expected_input(pattern_from_name("left-hand-only"), 7)
    assert e.channels == (Channel.LEFT_HAND,)
    assert e.is_alternating is False
    assert e.alternate_index is None


def test_alternating_pattern_switches_on_parity() -> None:
    p = pattern_from_name("both-feet-alternate")
    even = generate_expected_input(p, 4)
    odd = generate_expected_input(p, 5)
    assert even.channels == (Channel.LEFT_FOOT,)
    assert even.alternate_index == 0
    assert odd.channels == (Channel.RIGHT_FOOT,)
    assert odd.alternate_index == 1
    assert even.is_alternating and odd.is_alternating


def test_cross_body_patterns() -> None:
    p = pattern_from_name("right-hand-left-foot")
    assert generate_expected_input(p, 0).channels == (Channel.RIGHT_HAND,)
    assert generate_expected_input(p, 1).channels == (Channel.LEFT_FOOT,)


def test_simultaneous_pattern_accepts_either_channel() -> None:
    e = generate_expected_input(pattern_from_name("both-hands-simultaneous"), 3)
    assert e.channels == (Channel.LEFT_HAND, Channel.RIGHT_HAND)
    assert e.accepts(Channel.LEFT_HAND)
    assert e.accepts(Channel.RIGHT_HAND)
    assert not e.accepts(Channel.LEFT_FOOT)
    assert e.is_alternating is False


def test_all_alternate_cycles_in_fixed_order() -> None:
    p = pattern_from_name("all-alternate")
    assert isinstance(p, RoundRobin)
    seen = [generate_expected_input(p, n).channels[0] for n in range(8)]
    assert seen == [
        Channel.LEFT_HAND,
        Channel.RIGHT_HAND,
        Channel.LEFT_FOOT,
        Channel.RIGHT_FOOT,
    ] * 2


def test_custom_sequence_cycles_and_validates() -> None:
    p = custom_sequence(["right-foot", "left-hand", "right-hand"])
    assert isinstance(p, Custom)
    assert [generate_expected_input(p, n).channels[0] for n in range(4)] == [
        Channel.RIGHT_FOOT,
        Channel.LEFT_HAND,
        Channel.RIGHT_HAND,
        Channel.RIGHT_FOOT,
    ]
    assert generate_expected_input(p, 4).alternate_index == 1
    assert pattern_name(p) == "custom"

    with pytest.raises(ValueError):
        custom_sequence([])
    with pytest.raises(ValueError):
        custom_sequence(["left-hand", "left-hand"])
    with pytest.raises(ValueError):
        custom_sequence(["elbow"])


def test_single_element_custom_sequence_is_not_alternating() -> None:
    e = generate_expected_input(custom_sequence(["left-foot"]), 9)
    assert e.channels == (Channel.LEFT_FOOT,)
    assert e.is_alternating is False


def test_unknown_pattern_name_is_rejected() -> None:
    with pytest.raises(ValueError):
        pattern_from_name("both-elbows")


def test_negative_beat_number_is_rejected() -> None:
    with pytest.raises(ValueError):
        generate_expected_input(pattern_from_name("left-hand-only"), -1)


def test_settings_map_both_to_alternating() -> None:
    assert settings_to_pattern(BodyPart.HAND, TrainingRange.BOTH) == "both-hands-alternate"
    assert settings_to_pattern("foot", "both") == "both-feet-alternate"
    assert settings_to_pattern("hand", "left") == "left-hand-only"
    assert settings_to_pattern("foot", "right") == "right-foot-only"


def test_custom_sequence_in_settings_overrides_body_part() -> None:
    s = TrainingSettings(custom_sequence=(Channel.RIGHT_FOOT, Channel.LEFT_FOOT))
    p = pattern_for_settings(s)
    assert isinstance(p, Custom)
    assert "Right foot" in describe_pattern(p)


def test_schedule_has_exact_multiples_of_interval() -> None:
    assert interval_ms(60) == pytest.approx(1000.0)
    assert total_beats(60, 5) == 5
    beats = build_beats(pattern_from_name("left-hand-only"), bpm=60, duration_seconds=5)
    assert [b.expected_time_ms for b in beats] == [0.0, 1000.0, 2000.0, 3000.0, 4000.0]
    assert [b.beat_number for b in beats] == list(range(5))
    assert all(not b.is_matched for b in beats)


def test_schedule_floors_partial_beats() -> None:
    # 90 bpm -> 666.67ms; 5s holds 7.5 intervals
    assert total_beats(90, 5) == 7
    with pytest.raises(ValueError):
        interval_ms(0)
