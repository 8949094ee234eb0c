"""Training configuration and config-file loading."""

from __future__ import annotations

import json
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from .timing_core import BodyPart, Channel, Modality, TrainingRange

DB_PATH_ENV = "METRONOME_TRAINER_DB"

MIN_BPM = 40
MAX_BPM = 200


class ConfigError(RuntimeError):
    """Raised when configuration loading or validation fails."""


@dataclass(frozen=True, slots=True)
class TrainingSettings:
    modality: Modality = Modality.VISUAL
    body_part: BodyPart = BodyPart.HAND
    training_range: TrainingRange = TrainingRange.BOTH
    bpm: int = 60
    duration_seconds: int = 60
    # When set, overrides body_part + training_range.
    custom_sequence: tuple[Channel, ...] | None = None

    def __post_init__(self) -> None:
        if self.bpm <= 0:
            raise ValueError("bpm must be > 0")
        if self.duration_seconds <= 0:
            raise ValueError("duration_seconds must be > 0")


def load_config(path: str | Path) -> dict[str, Any]:
    """Load a configuration file (TOML or JSON)."""

    path_obj = Path(path)
    if not path_obj.exists():
        raise ConfigError(f"Config path does not exist: {path_obj}")

    suffix = path_obj.suffix.lower()
    try:
        if suffix == ".toml":
            with path_obj.open("rb") as handle:
                return tomllib.load(handle)
        if suffix == ".json":
            with path_obj.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
            if not isinstance(data, dict):
                raise ConfigError(f"Config root must be an object: {path_obj}")
            return data
    except (tomllib.TOMLDecodeError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Could not parse {path_obj}: {exc}") from exc

    raise ConfigError(f"Unsupported config format: {path_obj.suffix}")


def settings_from_mapping(data: Mapping[str, Any]) -> TrainingSettings:
    """Validate a ``[training]`` table (or a flat mapping) into settings."""

    raw = data.get("training", data)
    if not isinstance(raw, Mapping):
        raise ConfigError("training section must be a table")

    defaults = TrainingSettings()
    try:
        modality = Modality(str(raw.get("modality", defaults.modality)))
        body_part = BodyPart(str(raw.get("body_part", defaults.body_part)))
        training_range = TrainingRange(str(raw.get("training_range", defaults.training_range)))
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc

    bpm = _as_int(raw.get("bpm", defaults.bpm), "bpm")
    if not MIN_BPM <= bpm <= MAX_BPM:
        raise ConfigError(f"bpm must be between {MIN_BPM} and {MAX_BPM}, got {bpm}")

    if "duration_seconds" in raw:
        duration_s = _as_int(raw["duration_seconds"], "duration_seconds")
    elif "duration_minutes" in raw:
        duration_s = _as_int(raw["duration_minutes"], "duration_minutes") * 60
    else:
        duration_s = defaults.duration_seconds
    if duration_s <= 0:
        raise ConfigError("duration must be > 0")

    custom: tuple[Channel, ...] | None = None
    raw_seq = raw.get("custom_sequence")
    if raw_seq:
        if not isinstance(raw_seq, (list, tuple)):
            raise ConfigError("custom_sequence must be a list of channels")
        try:
            custom = tuple(Channel(str(c)) for c in raw_seq)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc
        if not 1 <= len(custom) <= 4 or len(set(custom)) != len(custom):
            raise ConfigError("custom_sequence must hold 1 to 4 distinct channels")

    return TrainingSettings(
        modality=modality,
        body_part=body_part,
        training_range=training_range,
        bpm=bpm,
        duration_seconds=duration_s,
        custom_sequence=custom,
    )


def keyboard_overrides(data: Mapping[str, Any]) -> dict[str, Channel]:
    """Read an optional ``[input.keyboard]`` table of key -> channel."""

    section = data.get("input", {})
    if not isinstance(section, Mapping):
        raise ConfigError("input section must be a table")
    keyboard = section.get("keyboard", {})
    if not isinstance(keyboard, Mapping):
        raise ConfigError("input.keyboard must be a table")
    out: dict[str, Channel] = {}
    for key, channel in keyboard.items():
        try:
            out[str(key)] = Channel(str(channel))
        except ValueError as exc:
            raise ConfigError(f"input.keyboard.{key}: {exc}") from exc
    return out


def default_db_path() -> Path:
    explicit = os.environ.get(DB_PATH_ENV)
    if explicit:
        return Path(explicit).expanduser()
    return Path.home() / ".metronome_trainer.sqlite3"


def _as_int(value: object, name: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be an integer")
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None
