"""Seeded simulated performer for headless runs and the ``demo`` command."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Sequence

from .config import TrainingSettings
from .session import MetronomeSession, build_metronome_session
from .timing_core import CHANNEL_ORDER, Beat, Channel, InputEvent, InputSource


class SeededRng:
    """Simple seeded RNG wrapper to keep deterministic streams explicit."""

    def __init__(self, seed: int) -> None:
        self._rng = random.Random(int(seed))

    def random(self) -> float:
        return self._rng.random()

    def gauss(self, mu: float, sigma: float) -> float:
        return self._rng.gauss(mu, sigma)

    def choice(self, seq: Sequence[Channel]) -> Channel:
        return self._rng.choice(list(seq))


@dataclass
class SimulatedClock:
    t: float = 0.0

    def now(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += dt


@dataclass(frozen=True, slots=True)
class PerformerProfile:
    jitter_ms: float = 25.0  # std-dev of timing noise
    bias_ms: float = 0.0  # negative = rushing
    miss_rate: float = 0.05
    wrong_channel_rate: float = 0.03

    def __post_init__(self) -> None:
        if self.jitter_ms < 0:
            raise ValueError("jitter_ms must be >= 0")
        for name in ("miss_rate", "wrong_channel_rate"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be in [0, 1]")


class SimulatedPerformer:
    def __init__(self, *, seed: int, profile: PerformerProfile | None = None) -> None:
        self._seed = int(seed)
        self._profile = profile or PerformerProfile()
        self._rng = SeededRng(self._seed)

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def profile(self) -> PerformerProfile:
        return self._profile

    def events_for(self, beats: Sequence[Beat]) -> list[InputEvent]:
        """One input per beat (unless missed), sorted by time, seq-numbered."""

        p = self._profile
        planned: list[tuple[float, Channel]] = []
        for beat in beats:
            if self._rng.random() < p.miss_rate:
                continue
            expected = beat.expected_input.channels
            if self._rng.random() < p.wrong_channel_rate:
                wrong = [c for c in CHANNEL_ORDER if c not in expected]
                channel = self._rng.choice(wrong) if wrong else expected[0]
            else:
                channel = self._rng.choice(expected)
            t_ms = beat.expected_time_ms + p.bias_ms + self._rng.gauss(0.0, p.jitter_ms)
            planned.append((max(0.0, t_ms), channel))

        planned.sort(key=lambda item: item[0])
        return [
            InputEvent(channel=channel, timestamp_ms=t_ms, source=InputSource.SIMULATED, seq=i)
            for i, (t_ms, channel) in enumerate(planned)
        ]


def drive_session(session: MetronomeSession, clock: SimulatedClock, events: Sequence[InputEvent]) -> None:
    """Feed ``events`` into a started session, advancing ``clock`` to each one."""

    origin = clock.now() - session.elapsed_ms() / 1000.0
    for event in events:
        clock.t = max(clock.t, origin + event.timestamp_ms / 1000.0)
        session.update()
        session.submit_input(event)

    if session.beats:
        end_ms = session.beats[-1].expected_time_ms + session.interval_ms
        clock.t = max(clock.t, origin + end_ms / 1000.0)
    session.update()
    session.finish()


def run_simulated_session(
    *,
    settings: TrainingSettings,
    user_age: int,
    performer: SimulatedPerformer,
    clock: SimulatedClock | None = None,
) -> MetronomeSession:
    clock = clock or SimulatedClock()
    session = build_metronome_session(settings=settings, clock=clock, user_age=user_age)
    session.start()
    drive_session(session, clock, performer.events_for(session.beats))
    return session
