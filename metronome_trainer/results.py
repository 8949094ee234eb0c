from __future__ import annotations

from dataclasses import dataclass

from .aggregator import SessionResult
from .patterns import pattern_name
from .session import MetronomeSession
from .timing_core import Beat, Phase


@dataclass(frozen=True, slots=True)
class SessionRecord:
    """Persistable summary + beat log for a completed session.

    ``beats`` are copies; later changes to the live session do not reach the
    record.
    """

    pattern: str
    modality: str
    body_part: str
    training_range: str
    bpm: int
    duration_seconds: int
    user_age: int
    aborted: bool

    result: SessionResult
    beats: list[Beat]
    abs_deviations: tuple[float, ...]


def session_record_from(session: MetronomeSession) -> SessionRecord:
    """Build a SessionRecord from a finished (or aborted) MetronomeSession."""

    result = session.result
    if result is None:
        raise ValueError("session has not finished")

    settings = session.settings
    beats = [
        Beat(
            beat_number=b.beat_number,
            expected_time_ms=b.expected_time_ms,
            expected_input=b.expected_input,
            actual_channel=b.actual_channel,
            actual_time_ms=b.actual_time_ms,
            source=b.source,
            deviation_ms=b.deviation_ms,
            is_correct_channel=b.is_correct_channel,
            feedback=b.feedback,
            expired=b.expired,
        )
        for b in session.beats
    ]

    return SessionRecord(
        pattern=pattern_name(session.pattern),
        modality=str(settings.modality),
        body_part=str(settings.body_part),
        training_range=str(settings.training_range),
        bpm=int(settings.bpm),
        duration_seconds=int(settings.duration_seconds),
        user_age=int(session.user_age),
        aborted=session.phase is Phase.ABORTED,
        result=result,
        beats=beats,
        abs_deviations=session.abs_deviations_in_input_order(),
    )
