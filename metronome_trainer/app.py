"""Pygame UI shell for the Metronome Timing Trainer.

Screens:
- Training (configurable body part / range / modality / tempo / duration)
- Assessment (the 8-session battery and its comprehensive report)
- Demo (a seeded simulated performer, results only)
- History (task-average trend from the local SQLite store)

Deterministic timing/matching/scoring lives in metronome_trainer/* (core
modules). This module only presents cues and turns pygame events into
InputEvents.
"""

from __future__ import annotations

import logging
import math
import random
from array import array
from collections.abc import Callable
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Protocol, TypeVar

import pygame

from .aggregator import SessionResult, evaluate_balance, format_ta, with_improvement
from .assessment import AssessmentBattery
from .clock import RealClock
from .config import MAX_BPM, MIN_BPM, TrainingSettings
from .evaluator import format_feedback, missed_feedback
from .input_mapping import InputMapper
from .norms import class_info
from .patterns import describe_pattern
from .persistence import load_history, record_session
from .profile import UserProfile
from .report import REQUIRED_BATTERY, ComprehensiveReport
from .results import session_record_from
from .session import MetronomeSession, build_metronome_session
from .simulation import SimulatedPerformer, run_simulated_session
from .timing_core import BodyPart, Channel, Feedback, InputSource, Modality, Phase, TrainingRange

LOGGER = logging.getLogger(__name__)

APP_VERSION = "0.1.0"
DEFAULT_AGE = 14

CHANNEL_COLORS: dict[Channel, tuple[int, int, int]] = {
    Channel.LEFT_HAND: (59, 130, 246),
    Channel.RIGHT_HAND: (239, 68, 68),
    Channel.LEFT_FOOT: (34, 197, 94),
    Channel.RIGHT_FOOT: (234, 179, 8),
}

FLASH_MS = 120.0

_T = TypeVar("_T")


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


@dataclass(frozen=True, slots=True)
class MenuItem:
    label: str
    action: Callable[[], None]


class _BeepPlayer:
    """Metronome click for audio-modality sessions.

    Silently disabled when no audio device is available (e.g. headless CI).
    """

    _sample_rate = 22050
    _amp = 32767

    def __init__(self, *, frequency_hz: float = 1200.0, duration_s: float = 0.1, gain: float = 0.3) -> None:
        self._sound: pygame.mixer.Sound | None = None
        try:
            if pygame.mixer.get_init() is None:
                pygame.mixer.init(frequency=self._sample_rate, size=-16, channels=1, buffer=512)
            pcm = self._render_tone_pcm(frequency_hz, duration_s, gain=gain)
            self._sound = pygame.mixer.Sound(buffer=pcm.tobytes())
        except pygame.error as exc:
            LOGGER.warning("Audio unavailable, beeps disabled: %s", exc)
            self._sound = None

    @property
    def available(self) -> bool:
        return self._sound is not None

    def play(self) -> None:
        if self._sound is not None:
            self._sound.play()

    def _render_tone_pcm(self, frequency_hz: float, duration_s: float, *, gain: float) -> array[int]:
        sample_count = max(1, int(self._sample_rate * duration_s))
        out = array("h")
        for idx in range(sample_count):
            # exponential decay to ~1% over the click
            envelope = math.exp(-4.6 * idx / float(sample_count))
            phase = (2.0 * math.pi * float(frequency_hz) * idx) / float(self._sample_rate)
            sample = math.sin(phase) * gain * envelope
            out.append(int(max(-1.0, min(1.0, sample)) * self._amp))
        return out


WINDOW_SIZE = (960, 540)
TARGET_FPS = 120

BG = (3, 9, 78)
TEXT_MAIN = (238, 245, 255)
TEXT_MUTED = (186, 200, 224)


class App:
    def __init__(self, surface: pygame.Surface, font: pygame.font.Font) -> None:
        self._surface = surface
        self._font = font
        self._screens: list[Screen] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    @property
    def font(self) -> pygame.font.Font:
        return self._font

    def push(self, screen: Screen) -> None:
        self._screens.append(screen)

    def pop(self) -> None:
        # Never pop the last/root screen; root handles its own quit/back behavior.
        if len(self._screens) > 1:
            self._screens.pop()

    def replace(self, screen: Screen) -> None:
        if len(self._screens) > 1:
            self._screens.pop()
        self._screens.append(screen)

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if not self._screens:
            return
        self._screens[-1].handle_event(event)

    def render(self) -> None:
        if not self._screens:
            return
        self._screens[-1].render(self._surface)


def _draw_lines(
    surface: pygame.Surface,
    font: pygame.font.Font,
    lines: list[str],
    *,
    x: int,
    y: int,
    color: tuple[int, int, int] = TEXT_MAIN,
    gap: int = 4,
) -> int:
    for line in lines:
        text = font.render(line, True, color)
        surface.blit(text, (x, y))
        y += text.get_height() + gap
    return y


class MenuScreen:
    def __init__(self, app: App, title: str, items: list[MenuItem], *, is_root: bool = False) -> None:
        self._app = app
        self._title = title
        self._items = items
        self._selected = 0
        self._is_root = is_root
        self._title_font = pygame.font.Font(None, 42)
        self._item_font = pygame.font.Font(None, 32)
        self._hint_font = pygame.font.Font(None, 22)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            self._handle_key(event.key)
            return

        if event.type == pygame.JOYHATMOTION:
            _, y = event.value
            if y == 1:
                self._move(-1)
            elif y == -1:
                self._move(1)
            return

        if event.type == pygame.JOYBUTTONDOWN:
            # Common mapping: 0 = select, 1 = back/cancel.
            if event.button == 0:
                self._activate()
            elif event.button == 1:
                self._back()

    def _handle_key(self, key: int) -> None:
        if key in (pygame.K_UP, pygame.K_w):
            self._move(-1)
        elif key in (pygame.K_DOWN, pygame.K_s):
            self._move(1)
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            self._activate()
        elif key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self._back()

    def _move(self, delta: int) -> None:
        if not self._items:
            return
        self._selected = (self._selected + delta) % len(self._items)

    def _activate(self) -> None:
        if not self._items:
            return
        self._items[self._selected].action()

    def _back(self) -> None:
        if self._is_root:
            self._app.quit()
        else:
            self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        w, h = surface.get_size()
        surface.fill(BG)

        title = self._title_font.render(self._title, True, TEXT_MAIN)
        surface.blit(title, title.get_rect(midtop=(w // 2, 30)))

        y = 110
        for idx, item in enumerate(self._items):
            selected = idx == self._selected
            row = pygame.Rect(w // 2 - 220, y, 440, 40)
            if selected:
                pygame.draw.rect(surface, (244, 248, 255), row)
            else:
                pygame.draw.rect(surface, (62, 84, 152), row, 1)
            color = (14, 26, 74) if selected else TEXT_MAIN
            text = self._item_font.render(item.label, True, color)
            surface.blit(text, text.get_rect(center=row.center))
            y += 50

        foot = self._hint_font.render("Enter/Space: Select  |  Esc/Backspace: Back", True, TEXT_MUTED)
        surface.blit(foot, foot.get_rect(midbottom=(w // 2, h - 12)))


class TrainingSetupScreen:
    """Pick modality, body part, range, tempo and duration, then start."""

    _rows = ("modality", "body_part", "training_range", "bpm", "duration")

    def __init__(self, app: App, *, settings: TrainingSettings, on_start: Callable[[TrainingSettings], None]) -> None:
        self._app = app
        self._settings = settings
        self._on_start = on_start
        self._selected = 0
        self._font = pygame.font.Font(None, 32)
        self._hint_font = pygame.font.Font(None, 22)

    @property
    def settings(self) -> TrainingSettings:
        return self._settings

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        if event.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self._app.pop()
        elif event.key in (pygame.K_UP, pygame.K_w):
            self._selected = (self._selected - 1) % len(self._rows)
        elif event.key in (pygame.K_DOWN, pygame.K_s):
            self._selected = (self._selected + 1) % len(self._rows)
        elif event.key in (pygame.K_LEFT, pygame.K_a):
            self._adjust(-1)
        elif event.key in (pygame.K_RIGHT, pygame.K_d):
            self._adjust(1)
        elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            self._on_start(self._settings)

    def _adjust(self, delta: int) -> None:
        s = self._settings
        row = self._rows[self._selected]
        if row == "modality":
            s = replace(s, modality=_cycle(list(Modality), s.modality, delta))
        elif row == "body_part":
            s = replace(s, body_part=_cycle(list(BodyPart), s.body_part, delta))
        elif row == "training_range":
            s = replace(s, training_range=_cycle(list(TrainingRange), s.training_range, delta))
        elif row == "bpm":
            s = replace(s, bpm=max(MIN_BPM, min(MAX_BPM, s.bpm + 5 * delta)))
        elif row == "duration":
            s = replace(s, duration_seconds=max(30, min(600, s.duration_seconds + 30 * delta)))
        self._settings = s

    def render(self, surface: pygame.Surface) -> None:
        w, h = surface.get_size()
        surface.fill(BG)
        s = self._settings
        values = (
            f"Modality: {s.modality}",
            f"Body part: {s.body_part}",
            f"Range: {s.training_range}",
            f"Tempo: {s.bpm} BPM",
            f"Duration: {s.duration_seconds // 60}:{s.duration_seconds % 60:02d}",
        )
        y = 60
        for idx, label in enumerate(values):
            color = (250, 220, 90) if idx == self._selected else TEXT_MAIN
            text = self._font.render(label, True, color)
            surface.blit(text, (80, y))
            y += 44
        hint = self._hint_font.render("Up/Down: field  |  Left/Right: change  |  Enter: start", True, TEXT_MUTED)
        surface.blit(hint, hint.get_rect(midbottom=(w // 2, h - 12)))


def _cycle(options: list[_T], current: _T, delta: int) -> _T:
    idx = options.index(current)
    return options[(idx + delta) % len(options)]


class MetronomeScreen:
    """Drives one MetronomeSession: cues, key capture, beat expiry."""

    def __init__(
        self,
        app: App,
        *,
        session_factory: Callable[[], MetronomeSession],
        mapper: InputMapper,
        beep: _BeepPlayer | None,
        on_finished: Callable[[MetronomeSession], None],
        title: str = "",
    ) -> None:
        self._app = app
        self._session = session_factory()
        self._mapper = mapper
        self._beep = beep
        self._on_finished = on_finished
        self._title = title or describe_pattern(self._session.pattern)
        self._seq = 0
        self._last_cued_beat = -1
        self._flash_until_ms = -1.0
        self._shown_feedback: Feedback | None = None
        self._done = False
        self._big_font = pygame.font.Font(None, 64)
        self._font = pygame.font.Font(None, 32)
        self._small_font = pygame.font.Font(None, 22)

    @property
    def session(self) -> MetronomeSession:
        return self._session

    def handle_event(self, event: pygame.event.Event) -> None:
        if self._done:
            return
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                self._session.abort()
                self._complete()
                return
            if self._session.phase is Phase.READY and event.key in (pygame.K_RETURN, pygame.K_SPACE):
                self._session.start()
                return
            channel = self._mapper.from_keyboard(getattr(event, "unicode", "") or "")
            if channel is not None:
                self._submit(channel, InputSource.KEYBOARD, raw=event.key)
            return

        if event.type == pygame.JOYBUTTONDOWN:
            channel = self._mapper.from_gamepad(event.button)
            if channel is not None:
                self._submit(channel, InputSource.GAMEPAD, raw=event.button)

    def _submit(self, channel: Channel, source: InputSource, *, raw: object) -> None:
        if self._session.phase is not Phase.RUNNING:
            return
        self._seq += 1
        event = self._session.input_at_now(channel, source=source, seq=self._seq, raw=raw)
        feedback = self._session.submit_input(event)
        if feedback is not None:
            self._shown_feedback = feedback

    def _complete(self) -> None:
        if self._done:
            return
        self._done = True
        self._on_finished(self._session)

    def render(self, surface: pygame.Surface) -> None:
        session = self._session
        if session.phase is Phase.RUNNING and session.update():
            self._shown_feedback = missed_feedback()
        if session.phase in (Phase.FINISHED, Phase.ABORTED):
            self._complete()
            return

        w, h = surface.get_size()
        surface.fill(BG)
        snap = session.snapshot()

        title = self._font.render(self._title, True, TEXT_MAIN)
        surface.blit(title, title.get_rect(midtop=(w // 2, 16)))

        if snap.phase is Phase.READY:
            hint = self._font.render("Press Enter to start", True, TEXT_MUTED)
            surface.blit(hint, hint.get_rect(center=(w // 2, h // 2)))
            return

        now_ms = session.elapsed_ms()
        if snap.current_beat > self._last_cued_beat:
            self._last_cued_beat = snap.current_beat
            self._flash_until_ms = now_ms + FLASH_MS
            if session.settings.modality is Modality.AUDIO and self._beep is not None:
                self._beep.play()

        expected = snap.expected_input
        if expected is not None:
            slots = len(expected.channels)
            for i, channel in enumerate(expected.channels):
                cx = w // 2 + int((i - (slots - 1) / 2.0) * 160)
                lit = session.settings.modality is Modality.VISUAL and now_ms < self._flash_until_ms
                color = CHANNEL_COLORS[channel] if lit else (40, 52, 120)
                pygame.draw.circle(surface, color, (cx, h // 2 - 30), 56)
                label = self._font.render(self._mapper.keyboard_label(channel), True, TEXT_MAIN)
                surface.blit(label, label.get_rect(center=(cx, h // 2 - 30)))

        if self._shown_feedback is not None:
            fb = self._big_font.render(format_feedback(self._shown_feedback), True, pygame.Color(self._shown_feedback.color))
            surface.blit(fb, fb.get_rect(center=(w // 2, h // 2 + 80)))

        remaining = snap.time_remaining_s or 0.0
        status = (
            f"{snap.bpm} BPM  |  beat {snap.current_beat + 1}/{snap.total_beats}  |  "
            f"hit {snap.responded}  missed {snap.missed}  |  {int(remaining)}s left"
        )
        surface.blit(self._small_font.render(status, True, TEXT_MUTED), (16, h - 30))


class ResultsScreen:
    def __init__(self, app: App, *, title: str, result: SessionResult) -> None:
        self._app = app
        self._title = title
        self._result = result
        self._title_font = pygame.font.Font(None, 42)
        self._font = pygame.font.Font(None, 28)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN and event.key in (
            pygame.K_ESCAPE,
            pygame.K_BACKSPACE,
            pygame.K_RETURN,
            pygame.K_SPACE,
        ):
            self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        r = self._result
        surface.fill(BG)
        info = class_info(r.class_level)
        surface.blit(self._title_font.render(self._title, True, TEXT_MAIN), (40, 24))
        lines = [
            f"Task Average: {format_ta(r.task_average)}   Class {r.class_level} ({info.label})",
            f"Early {r.early_hit_percent:.0f}%  On target {r.on_target_percent:.0f}%  Late {r.late_hit_percent:.0f}%"
            f"  ({evaluate_balance(r.early_hit_percent, r.late_hit_percent)})",
            f"Responded {r.responded_beats}/{r.total_beats}  Missed {r.missed_beats}  Wrong input {r.wrong_channel_beats}",
            f"Response rate {r.response_rate:.0f}%  Accuracy {r.accuracy_rate:.0f}%",
            f"Average points {r.average_points:.1f}  Consistency {r.consistency:.0f}",
        ]
        if r.ta_improvement is not None:
            lines.append(f"vs previous: TA {r.ta_improvement:+.1f}%  class {r.class_improvement:+d}")
        y = _draw_lines(surface, self._font, lines, x=40, y=90, gap=10)
        _draw_lines(surface, self._font, ["Press Enter to continue"], x=40, y=y + 20, color=TEXT_MUTED)


class ReportScreen:
    def __init__(self, app: App, *, report: ComprehensiveReport) -> None:
        self._app = app
        self._report = report
        self._title_font = pygame.font.Font(None, 40)
        self._font = pygame.font.Font(None, 26)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN and event.key in (pygame.K_ESCAPE, pygame.K_RETURN, pygame.K_BACKSPACE):
            self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        r = self._report
        surface.fill(BG)
        who = r.name or "Assessment"
        surface.blit(self._title_font.render(f"{who} - age {r.age} - {r.test_date.isoformat()}", True, TEXT_MAIN), (30, 18))
        lines = [
            f"Visual capability: TA {r.visual_capability.task_average}ms  P{r.visual_capability.percentile}  {r.visual_capability.level}",
            f"Auditory capability: TA {r.auditory_capability.task_average}ms  P{r.auditory_capability.percentile}  {r.auditory_capability.level}",
            f"Learning style: {r.learning_style.dominant_style} (diff {r.learning_style.difference})",
            f"Attention V/A: P{r.visual_attention.percentile} (SD {r.visual_attention.standard_deviation})"
            f" / P{r.auditory_attention.percentile} (SD {r.auditory_attention.standard_deviation})",
            f"Brain speed: {r.brain_speed.task_average}ms  P{r.brain_speed.percentile}",
            f"Sustainability V: +{r.visual_sustainability.error_rate}% err / {r.visual_sustainability.improvement_rate}% impr",
            f"Sustainability A: +{r.auditory_sustainability.error_rate}% err / {r.auditory_sustainability.improvement_rate}% impr",
            f"Hemispheres L/R: {r.hemisphere_balance.left_brain}/{r.hemisphere_balance.right_brain}"
            f"  (diff {r.hemisphere_balance.difference})",
        ]
        y = _draw_lines(surface, self._font, lines, x=30, y=70, gap=8)
        results = [f"{ir.test_name}: {format_ta(ir.result.task_average)}" for ir in r.individual_results]
        _draw_lines(surface, self._font, results, x=30, y=y + 12, color=TEXT_MUTED, gap=4)


class AssessmentScreen:
    """Intro card between battery tests; pushes a MetronomeScreen per test."""

    def __init__(
        self,
        app: App,
        *,
        battery: AssessmentBattery,
        mapper: InputMapper,
        beep: _BeepPlayer | None,
    ) -> None:
        self._app = app
        self._battery = battery
        self._mapper = mapper
        self._beep = beep
        self._font = pygame.font.Font(None, 34)
        self._small_font = pygame.font.Font(None, 24)

    @property
    def battery(self) -> AssessmentBattery:
        return self._battery

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        if event.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self._app.pop()
            return
        if event.key not in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            return

        if self._battery.is_complete:
            self._app.replace(ReportScreen(self._app, report=self._battery.build_report()))
            return

        test = self._battery.current_test
        self._app.push(
            MetronomeScreen(
                self._app,
                session_factory=self._battery.start_next,
                mapper=self._mapper,
                beep=self._beep,
                on_finished=self._on_test_finished,
                title=test.name if test is not None else "",
            )
        )

    def _on_test_finished(self, session: MetronomeSession) -> None:
        self._app.pop()
        if session.phase is Phase.FINISHED:
            self._battery.record(session)

    def render(self, surface: pygame.Surface) -> None:
        w, h = surface.get_size()
        surface.fill(BG)
        total = len(REQUIRED_BATTERY)
        if self._battery.is_complete:
            lines = ["All tests complete.", "Press Enter to view the report."]
        else:
            test = self._battery.current_test
            assert test is not None
            lines = [
                f"Test {self._battery.current_index + 1} of {total}: {test.name}",
                f"{test.body_part} / {test.side} / {test.modality}",
                "Press Enter, then Enter again to start the metronome.",
            ]
        _draw_lines(surface, self._font, lines, x=60, y=h // 3, gap=14)
        hint = self._small_font.render("Esc: leave assessment (progress is lost)", True, TEXT_MUTED)
        surface.blit(hint, hint.get_rect(midbottom=(w // 2, h - 12)))


class HistoryScreen:
    def __init__(self, app: App, *, db_path: Path | None) -> None:
        self._app = app
        self._db_path = db_path
        self._font = pygame.font.Font(None, 26)
        self._lines = self._load()

    def _load(self) -> list[str]:
        if self._db_path is None or not self._db_path.exists():
            return ["No history yet."]
        rows = load_history(db_path=self._db_path, limit=14)
        if not rows:
            return ["No history yet."]
        return [
            f"{r.created_at_utc}  {r.pattern:<24} {r.bpm:>3} BPM  {format_ta(r.task_average):>9}  class {r.class_level}"
            for r in rows
        ]

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN and event.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE, pygame.K_RETURN):
            self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        surface.fill(BG)
        _draw_lines(surface, self._font, self._lines, x=30, y=30, gap=6)


def _init_joysticks() -> None:
    # Safe on platforms with no joystick support.
    try:
        count = pygame.joystick.get_count()
    except pygame.error:
        return

    for i in range(count):
        try:
            pygame.joystick.Joystick(i).init()
        except pygame.error:
            continue


def _new_seed() -> int:
    return random.SystemRandom().randint(1, 2**31 - 1)


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    settings: TrainingSettings | None = None,
    profile: UserProfile | None = None,
    user_age: int | None = None,
    mapper: InputMapper | None = None,
    db_path: Path | None = None,
) -> int:
    pygame.init()
    _init_joysticks()

    pygame.display.set_caption("Metronome Timing Trainer")
    surface = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)

    font = pygame.font.Font(None, 36)
    clock = pygame.time.Clock()

    app = App(surface=surface, font=font)

    real_clock = RealClock()
    mapper = mapper or InputMapper()
    beep = _BeepPlayer()
    age = user_age if user_age is not None else (profile.age if profile is not None else DEFAULT_AGE)
    previous: dict[str, SessionResult] = {}

    def save(session: MetronomeSession) -> SessionResult:
        record = session_record_from(session)
        if db_path is not None and session.phase is Phase.FINISHED:
            record_session(db_path=db_path, record=record, app_version=APP_VERSION)
        # Improvement is only meaningful against the same pattern.
        shown = with_improvement(record.result, previous.get(record.pattern))
        previous[record.pattern] = record.result
        return shown

    def on_training_finished(session: MetronomeSession) -> None:
        shown = save(session)
        app.replace(ResultsScreen(app, title=describe_pattern(session.pattern), result=shown))

    def start_training(chosen: TrainingSettings) -> None:
        app.push(
            MetronomeScreen(
                app,
                session_factory=lambda: build_metronome_session(settings=chosen, clock=real_clock, user_age=age),
                mapper=mapper,
                beep=beep,
                on_finished=on_training_finished,
            )
        )

    setup = TrainingSetupScreen(app, settings=settings or TrainingSettings(), on_start=start_training)

    def open_assessment() -> None:
        battery = AssessmentBattery(clock=real_clock, profile=profile, user_age=age)
        app.push(AssessmentScreen(app, battery=battery, mapper=mapper, beep=beep))

    def open_demo() -> None:
        seed = _new_seed()
        session = run_simulated_session(
            settings=setup.settings,
            user_age=age,
            performer=SimulatedPerformer(seed=seed),
        )
        app.push(ResultsScreen(app, title=f"Demo (seed {seed})", result=session_record_from(session).result))

    main_items = [
        MenuItem("Training", lambda: app.push(setup)),
        MenuItem("Assessment", open_assessment),
        MenuItem("Demo", open_demo),
        MenuItem("History", lambda: app.push(HistoryScreen(app, db_path=db_path))),
        MenuItem("Quit", app.quit),
    ]

    app.push(MenuScreen(app, "Metronome Trainer", main_items, is_root=True))

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            clock.tick(TARGET_FPS)
    finally:
        pygame.quit()

    return 0
