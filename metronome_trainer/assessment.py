"""The standard 8-session assessment protocol."""

from __future__ import annotations

import datetime as dt
import logging

from .clock import Clock
from .config import TrainingSettings
from .profile import UserProfile
from .report import REQUIRED_BATTERY, BatteryEntry, BatteryTest, ComprehensiveReport, build_comprehensive_report
from .session import MetronomeSession, build_metronome_session
from .timing_core import Phase, TrainingRange

LOGGER = logging.getLogger(__name__)

ASSESSMENT_BPM = 60
ASSESSMENT_DURATION_S = 60


def settings_for_test(test: BatteryTest, *, bpm: int = ASSESSMENT_BPM, duration_seconds: int = ASSESSMENT_DURATION_S) -> TrainingSettings:
    return TrainingSettings(
        modality=test.modality,
        body_part=test.body_part,
        training_range=TrainingRange(str(test.side)),
        bpm=bpm,
        duration_seconds=duration_seconds,
    )


def entry_from_session(test: BatteryTest, session: MetronomeSession) -> BatteryEntry:
    if session.result is None:
        raise ValueError("session has not finished")
    return BatteryEntry(
        body_part=test.body_part,
        side=test.side,
        modality=test.modality,
        result=session.result,
        abs_deviations=session.abs_deviations_in_input_order(),
    )


class AssessmentBattery:
    """Runs the battery tests one after another and collects their entries.

    Typical flow::

        battery = AssessmentBattery(clock=clock, profile=profile)
        while not battery.is_complete:
            session = battery.start_next()
            ... drive the session until it finishes ...
            battery.record(session)
        report = battery.build_report()
    """

    def __init__(
        self,
        *,
        clock: Clock,
        profile: UserProfile | None = None,
        user_age: int | None = None,
        bpm: int = ASSESSMENT_BPM,
        duration_seconds: int = ASSESSMENT_DURATION_S,
    ) -> None:
        if profile is None and user_age is None:
            raise ValueError("profile or user_age is required")
        self._clock = clock
        self._profile = profile
        self._user_age = int(user_age) if user_age is not None else profile.age  # type: ignore[union-attr]
        self._bpm = int(bpm)
        self._duration_seconds = int(duration_seconds)
        self._entries: list[BatteryEntry] = []
        self._active: MetronomeSession | None = None

    @property
    def user_age(self) -> int:
        return self._user_age

    @property
    def entries(self) -> tuple[BatteryEntry, ...]:
        return tuple(self._entries)

    @property
    def is_complete(self) -> bool:
        return len(self._entries) >= len(REQUIRED_BATTERY)

    @property
    def current_index(self) -> int:
        return len(self._entries)

    @property
    def current_test(self) -> BatteryTest | None:
        if self.is_complete:
            return None
        return REQUIRED_BATTERY[len(self._entries)]

    @property
    def active_session(self) -> MetronomeSession | None:
        return self._active

    def start_next(self) -> MetronomeSession:
        test = self.current_test
        if test is None:
            raise RuntimeError("assessment is already complete")
        if self._active is not None and self._active.result is None:
            raise RuntimeError("previous assessment session is still running")

        session = build_metronome_session(
            settings=settings_for_test(test, bpm=self._bpm, duration_seconds=self._duration_seconds),
            clock=self._clock,
            user_age=self._user_age,
        )
        self._active = session
        LOGGER.info("Assessment %d/%d: %s", self.current_index + 1, len(REQUIRED_BATTERY), test.name)
        return session

    def record(self, session: MetronomeSession) -> BatteryEntry:
        """Store the finished session as the current test's entry and advance."""

        test = self.current_test
        if test is None:
            raise RuntimeError("assessment is already complete")
        if session is not self._active:
            raise ValueError("session does not belong to the current assessment test")
        if session.phase is Phase.ABORTED:
            raise ValueError("aborted sessions cannot be recorded; restart the test")

        entry = entry_from_session(test, session)
        self._entries.append(entry)
        self._active = None
        return entry

    def build_report(self, *, test_date: dt.date | None = None) -> ComprehensiveReport:
        return build_comprehensive_report(
            self._entries,
            age=self._user_age,
            profile=self._profile,
            test_date=test_date,
        )
