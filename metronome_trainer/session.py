"""Live metronome session engine.

The session owns the beat timeline for one run and is driven by its caller:

- ``submit_input`` for every InputEvent the presentation layer captures,
- ``update`` (or ``expire_beat``) to close beats whose window has passed,
- ``finish`` / ``abort`` to produce the immutable SessionResult.

Matching, scoring and aggregation are delegated to the stateless modules; the
session only sequences them and guards the timeline's invariants.  Time comes
exclusively from the injected Clock.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .aggregator import SessionResult, evaluate_session
from .clock import Clock, elapsed_ms
from .config import TrainingSettings
from .matcher import bind_input
from .patterns import Pattern, pattern_for_settings, pattern_name
from .schedule import beat_index_at, build_beats, interval_ms, window_closed
from .timing_core import Beat, Channel, ExpectedInput, Feedback, InputEvent, InputSource, Phase

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    """View model for the UI (pure data)."""

    phase: Phase
    pattern_name: str
    bpm: int
    current_beat: int
    total_beats: int
    time_remaining_s: float | None
    expected_input: ExpectedInput | None
    last_feedback: Feedback | None
    responded: int
    missed: int


class MetronomeSession:
    def __init__(
        self,
        *,
        settings: TrainingSettings,
        clock: Clock,
        user_age: int,
        pattern: Pattern | None = None,
    ) -> None:
        if user_age < 0:
            raise ValueError("user_age must be >= 0")

        self._settings = settings
        self._clock = clock
        self._user_age = int(user_age)
        self._pattern: Pattern = pattern if pattern is not None else pattern_for_settings(settings)
        self._interval_ms = interval_ms(settings.bpm)
        self._beats: list[Beat] = build_beats(
            self._pattern,
            bpm=settings.bpm,
            duration_seconds=settings.duration_seconds,
        )

        self._phase = Phase.READY
        self._started_at_s: float | None = None
        self._seen_seqs: set[int] = set()
        self._last_feedback: Feedback | None = None
        self._result: SessionResult | None = None
        self._bound: list[Beat] = []  # in arrival order

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def settings(self) -> TrainingSettings:
        return self._settings

    @property
    def pattern(self) -> Pattern:
        return self._pattern

    @property
    def interval_ms(self) -> float:
        return self._interval_ms

    @property
    def user_age(self) -> int:
        return self._user_age

    @property
    def beats(self) -> list[Beat]:
        return self._beats

    @property
    def result(self) -> SessionResult | None:
        return self._result

    @property
    def last_feedback(self) -> Feedback | None:
        return self._last_feedback

    def abs_deviations_in_input_order(self) -> tuple[float, ...]:
        """|deviation| of correct-channel responses, ordered by arrival."""

        return tuple(
            abs(float(b.deviation_ms))
            for b in self._bound
            if b.is_correct_channel and b.deviation_ms is not None
        )

    def start(self) -> None:
        if self._phase is not Phase.READY:
            return
        self._phase = Phase.RUNNING
        self._started_at_s = self._clock.now()
        LOGGER.info(
            "Session started: %s, %d bpm, %d beats, %s",
            pattern_name(self._pattern),
            self._settings.bpm,
            len(self._beats),
            self._settings.modality,
            extra={
                "pattern": pattern_name(self._pattern),
                "bpm": self._settings.bpm,
                "modality": self._settings.modality,
            },
        )

    def elapsed_ms(self) -> float:
        if self._started_at_s is None:
            return 0.0
        return elapsed_ms(self._clock, self._started_at_s)

    def time_remaining_s(self) -> float | None:
        if self._phase is not Phase.RUNNING:
            return None
        remaining = float(self._settings.duration_seconds) - self.elapsed_ms() / 1000.0
        return max(0.0, remaining)

    def current_beat_index(self) -> int:
        idx = beat_index_at(self.elapsed_ms(), self._interval_ms)
        return min(idx, len(self._beats) - 1)

    def input_at_now(
        self,
        channel: Channel,
        *,
        source: InputSource = InputSource.KEYBOARD,
        seq: int | None = None,
        raw: object | None = None,
    ) -> InputEvent:
        return InputEvent(
            channel=Channel(channel),
            timestamp_ms=self.elapsed_ms(),
            source=source,
            seq=seq,
            raw=raw,
        )

    def submit_input(self, event: InputEvent) -> Feedback | None:
        """Bind one input event. Returns its feedback, or None if discarded."""

        if self._phase is not Phase.RUNNING:
            return None

        if event.seq is not None:
            if event.seq in self._seen_seqs:
                LOGGER.debug("Rejected re-delivered input seq=%d", event.seq, extra={"seq": event.seq})
                return None
            self._seen_seqs.add(event.seq)

        beat = bind_input(event, self._beats, self._interval_ms)
        if beat is None:
            return None
        self._bound.append(beat)
        self._last_feedback = beat.feedback
        return beat.feedback

    def expire_beat(self, beat_number: int) -> bool:
        """Mark a beat definitively missed. Returns True if it was newly expired.

        An expired beat can no longer be matched, even by an input that would
        still fall inside the matcher's window.
        """

        if not 0 <= beat_number < len(self._beats):
            return False
        beat = self._beats[beat_number]
        if beat.is_matched or beat.expired:
            return False
        beat.expired = True
        return True

    def update(self) -> list[Beat]:
        """Expire beats whose window has closed; finish after the last one.

        Returns the beats that expired during this call.
        """

        if self._phase is not Phase.RUNNING:
            return []

        now_ms = self.elapsed_ms()
        expired: list[Beat] = []
        for beat in self._beats:
            if beat.expected_time_ms > now_ms:
                break
            if beat.is_matched or beat.expired:
                continue
            if window_closed(beat, elapsed_ms=now_ms, step_ms=self._interval_ms):
                beat.expired = True
                expired.append(beat)

        if not self._beats or window_closed(self._beats[-1], elapsed_ms=now_ms, step_ms=self._interval_ms):
            self.finish()
        return expired

    def finish(self) -> SessionResult:
        return self._complete(Phase.FINISHED)

    def abort(self) -> SessionResult:
        """Stop early; beats past this point simply count as missed."""

        return self._complete(Phase.ABORTED)

    def snapshot(self) -> SessionSnapshot:
        current = self.current_beat_index() if self._phase is Phase.RUNNING else -1
        expected = self._beats[current].expected_input if 0 <= current < len(self._beats) else None
        responded = sum(1 for b in self._beats if b.is_matched)
        missed = sum(1 for b in self._beats if b.expired)
        return SessionSnapshot(
            phase=self._phase,
            pattern_name=pattern_name(self._pattern),
            bpm=int(self._settings.bpm),
            current_beat=current,
            total_beats=len(self._beats),
            time_remaining_s=self.time_remaining_s(),
            expected_input=expected,
            last_feedback=self._last_feedback,
            responded=responded,
            missed=missed,
        )

    def _complete(self, phase: Phase) -> SessionResult:
        if self._result is not None:
            return self._result
        if self._phase is Phase.READY:
            self._started_at_s = self._clock.now()
        self._phase = phase
        self._result = evaluate_session(self._beats, self._user_age, self._settings.modality)
        LOGGER.info(
            "Session %s: TA=%.1fms class=%d responded=%d/%d",
            phase.value,
            self._result.task_average,
            self._result.class_level,
            self._result.responded_beats,
            self._result.total_beats,
        )
        return self._result


def build_metronome_session(
    *,
    settings: TrainingSettings,
    clock: Clock,
    user_age: int,
    pattern: Pattern | None = None,
) -> MetronomeSession:
    return MetronomeSession(settings=settings, clock=clock, user_age=user_age, pattern=pattern)
