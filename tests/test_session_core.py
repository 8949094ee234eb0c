from __future__ import annotations

from dataclasses import dataclass

import pytest

from metronome_trainer.config import TrainingSettings
from metronome_trainer.session import build_metronome_session
from metronome_trainer.timing_core import (
    BodyPart,
    Channel,
    Direction,
    FeedbackCategory,
    InputEvent,
    Modality,
    Phase,
    TrainingRange,
)


@dataclass
class FakeClock:
    t: float = 0.0

    def now(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += dt


def _left_hand(seconds: int = 5, bpm: int = 60) -> TrainingSettings:
    return TrainingSettings(
        modality=Modality.VISUAL,
        body_part=BodyPart.HAND,
        training_range=TrainingRange.LEFT,
        bpm=bpm,
        duration_seconds=seconds,
    )


def test_perfect_late_hit_on_beat_one() -> None:
    clock = FakeClock(t=100.0)
    session = build_metronome_session(settings=_left_hand(), clock=clock, user_age=14)
    assert [b.expected_time_ms for b in session.beats] == [0.0, 1000.0, 2000.0, 3000.0, 4000.0]

    session.start()
    clock.advance(1.010)
    fb = session.submit_input(session.input_at_now(Channel.LEFT_HAND))

    assert fb is not None
    beat = session.beats[1]
    assert beat.is_matched
    assert beat.deviation_ms == pytest.approx(10.0)
    assert fb.category is FeedbackCategory.PERFECT
    assert fb.direction is Direction.LATE
    assert fb.points == 100.0
    assert beat.is_correct_channel is True
    assert session.last_feedback == fb


def test_wrong_channel_far_from_beat_one_lands_on_beat_two() -> None:
    session = build_metronome_session(settings=_left_hand(), clock=FakeClock(), user_age=14)
    session.start()

    fb = session.submit_input(InputEvent(Channel.RIGHT_HAND, 1700.0))

    # Beat 1 is 700ms away and out of reach; beat 2 is 300ms away.
    assert session.beats[1].is_matched is False
    beat = session.beats[2]
    assert beat.is_matched
    assert beat.is_correct_channel is False
    assert beat.deviation_ms == pytest.approx(-300.0)
    assert fb is not None
    assert fb.category is FeedbackCategory.MISS
    assert fb.points == 0.0


def test_input_out_of_reach_of_every_beat_is_discarded() -> None:
    session = build_metronome_session(settings=_left_hand(seconds=6, bpm=30), clock=FakeClock(), user_age=14)
    session.start()
    # Beats at 0/2000/4000ms; 1250ms is more than 500ms from all of them.
    assert session.submit_input(InputEvent(Channel.LEFT_HAND, 1250.0)) is None
    assert not any(b.is_matched for b in session.beats)


def test_redelivered_sequence_number_is_rejected() -> None:
    session = build_metronome_session(settings=_left_hand(), clock=FakeClock(), user_age=14)
    session.start()

    assert session.submit_input(InputEvent(Channel.LEFT_HAND, 10.0, seq=1)) is not None
    # Same seq again, even aimed at a different beat, never binds.
    assert session.submit_input(InputEvent(Channel.LEFT_HAND, 1010.0, seq=1)) is None
    assert session.beats[1].is_matched is False
    assert session.submit_input(InputEvent(Channel.LEFT_HAND, 1010.0, seq=2)) is not None
    assert session.beats[1].is_matched is True


def test_out_of_order_sequence_numbers_still_bind() -> None:
    settings = TrainingSettings(
        modality=Modality.VISUAL,
        body_part=BodyPart.HAND,
        training_range=TrainingRange.BOTH,
        bpm=60,
        duration_seconds=4,
    )
    session = build_metronome_session(settings=settings, clock=FakeClock(), user_age=14)
    session.start()

    # The right-hand press for beat 1 arrives before the left-hand press for beat 0.
    late = session.submit_input(InputEvent(Channel.RIGHT_HAND, 1008.0, seq=2))
    early = session.submit_input(InputEvent(Channel.LEFT_HAND, 12.0, seq=1))

    assert late is not None and early is not None
    assert session.beats[0].is_matched is True
    assert session.beats[0].is_correct_channel is True
    assert session.beats[1].is_matched is True
    # Only a repeat of an already seen seq is rejected.
    assert session.submit_input(InputEvent(Channel.LEFT_HAND, 2010.0, seq=1)) is None
    assert session.beats[2].is_matched is False


def test_inputs_are_ignored_unless_running() -> None:
    session = build_metronome_session(settings=_left_hand(), clock=FakeClock(), user_age=14)
    assert session.submit_input(InputEvent(Channel.LEFT_HAND, 0.0)) is None
    session.start()
    session.finish()
    assert session.submit_input(InputEvent(Channel.LEFT_HAND, 0.0)) is None


def test_expired_beat_is_not_matched_even_inside_window() -> None:
    session = build_metronome_session(settings=_left_hand(), clock=FakeClock(), user_age=14)
    session.start()

    assert session.expire_beat(1) is True
    assert session.expire_beat(1) is False
    assert session.submit_input(InputEvent(Channel.LEFT_HAND, 1020.0)) is None
    assert session.beats[1].is_matched is False
    assert session.expire_beat(99) is False


def test_update_expires_closed_windows_and_finishes() -> None:
    clock = FakeClock()
    session = build_metronome_session(settings=_left_hand(seconds=3), clock=clock, user_age=14)
    session.start()

    clock.advance(0.005)
    session.submit_input(session.input_at_now(Channel.LEFT_HAND))

    clock.advance(1.5)  # 1505ms: beat 0 matched, beat 1 window still open
    assert session.update() == []

    clock.advance(0.5)  # 2005ms: beat 1 window closed
    expired = session.update()
    assert [b.beat_number for b in expired] == [1]
    assert session.phase is Phase.RUNNING

    clock.advance(1.0)  # 3005ms: last beat's window closed
    expired = session.update()
    assert [b.beat_number for b in expired] == [2]
    assert session.phase is Phase.FINISHED
    assert session.result is not None
    assert session.result.responded_beats == 1
    assert session.result.missed_beats == 2


def test_abort_keeps_partial_timeline() -> None:
    clock = FakeClock()
    session = build_metronome_session(settings=_left_hand(seconds=10), clock=clock, user_age=14)
    session.start()
    for i in range(3):
        clock.t = i * 1.0 + 0.02
        session.submit_input(session.input_at_now(Channel.LEFT_HAND))

    result = session.abort()
    assert session.phase is Phase.ABORTED
    assert result.total_beats == 10
    assert result.responded_beats == 3
    assert result.missed_beats == 7
    assert result.task_average == pytest.approx(20.0)
    # Idempotent: the first completion wins.
    assert session.finish() is result
    assert session.phase is Phase.ABORTED


def test_input_order_deviations_follow_arrival() -> None:
    session = build_metronome_session(settings=_left_hand(), clock=FakeClock(), user_age=14)
    session.start()
    session.submit_input(InputEvent(Channel.LEFT_HAND, 2040.0))
    session.submit_input(InputEvent(Channel.LEFT_HAND, 10.0))
    session.submit_input(InputEvent(Channel.RIGHT_HAND, 1000.0))  # wrong channel
    assert session.abs_deviations_in_input_order() == pytest.approx((40.0, 10.0))


def test_snapshot_reports_progress() -> None:
    clock = FakeClock()
    session = build_metronome_session(settings=_left_hand(), clock=clock, user_age=14)
    snap = session.snapshot()
    assert snap.phase is Phase.READY
    assert snap.current_beat == -1
    assert snap.time_remaining_s is None

    session.start()
    clock.advance(2.2)
    snap = session.snapshot()
    assert snap.current_beat == 2
    assert snap.total_beats == 5
    assert snap.expected_input is not None
    assert snap.expected_input.channels == (Channel.LEFT_HAND,)
    assert snap.time_remaining_s == pytest.approx(2.8)
    assert snap.pattern_name == "left-hand-only"


def test_invalid_settings_are_rejected() -> None:
    with pytest.raises(ValueError):
        TrainingSettings(bpm=0)
    with pytest.raises(ValueError):
        TrainingSettings(duration_seconds=0)
    with pytest.raises(ValueError):
        build_metronome_session(settings=_left_hand(), clock=FakeClock(), user_age=-1)
