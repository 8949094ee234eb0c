"""Device-specific codes -> Channel.

Only the lookup tables live here; polling MIDI/HID/gamepad hardware is the
presentation layer's business.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from .timing_core import CHANNEL_ORDER, Channel, InputSource

LOGGER = logging.getLogger(__name__)

KEYBOARD_MAPPING: Mapping[str, Channel] = MappingProxyType(
    {
        "e": Channel.LEFT_HAND,
        "E": Channel.LEFT_HAND,
        "i": Channel.RIGHT_HAND,
        "I": Channel.RIGHT_HAND,
        "x": Channel.LEFT_FOOT,
        "X": Channel.LEFT_FOOT,
        "n": Channel.RIGHT_FOOT,
        "N": Channel.RIGHT_FOOT,
    }
)

KEYBOARD_LABELS: Mapping[Channel, str] = MappingProxyType(
    {
        Channel.LEFT_HAND: "E",
        Channel.RIGHT_HAND: "I",
        Channel.LEFT_FOOT: "X",
        Channel.RIGHT_FOOT: "N",
    }
)

MIDI_NOTE_MAPPING: Mapping[int, Channel] = MappingProxyType(
    {
        60: Channel.LEFT_HAND,  # C4
        62: Channel.RIGHT_HAND,  # D4
        64: Channel.LEFT_FOOT,  # E4
        65: Channel.RIGHT_FOOT,  # F4
    }
)

MIDI_NOTE_LABELS: Mapping[Channel, str] = MappingProxyType(
    {
        Channel.LEFT_HAND: "C4 (60)",
        Channel.RIGHT_HAND: "D4 (62)",
        Channel.LEFT_FOOT: "E4 (64)",
        Channel.RIGHT_FOOT: "F4 (65)",
    }
)

HID_BUTTON_MAPPING: Mapping[int, Channel] = MappingProxyType(dict(enumerate(CHANNEL_ORDER)))

HID_BUTTON_LABELS: Mapping[Channel, str] = MappingProxyType(
    {channel: f"Button {i + 1}" for i, channel in enumerate(CHANNEL_ORDER)}
)

GAMEPAD_BUTTON_MAPPING: Mapping[int, Channel] = MappingProxyType(dict(enumerate(CHANNEL_ORDER)))

GAMEPAD_BUTTON_LABELS: Mapping[Channel, str] = MappingProxyType(
    {
        Channel.LEFT_HAND: "A Button",
        Channel.RIGHT_HAND: "B Button",
        Channel.LEFT_FOOT: "X Button",
        Channel.RIGHT_FOOT: "Y Button",
    }
)


@dataclass(frozen=True, slots=True)
class MappingValidation:
    is_valid: bool
    missing: tuple[Channel, ...]


def validate_input_mapping(mapping: Mapping[object, Channel] = KEYBOARD_MAPPING) -> MappingValidation:
    """Every channel must be reachable from at least one code."""

    mapped = set(mapping.values())
    missing = tuple(c for c in CHANNEL_ORDER if c not in mapped)
    return MappingValidation(is_valid=not missing, missing=missing)


@dataclass(slots=True)
class InputMapper:
    """Translate raw device codes into channels.

    ``keyboard`` replaces the default key table when given; the device tables
    are fixed.
    """

    keyboard: Mapping[str, Channel] = field(default_factory=lambda: dict(KEYBOARD_MAPPING))

    def __post_init__(self) -> None:
        check = validate_input_mapping(self.keyboard)
        if not check.is_valid:
            LOGGER.warning(
                "Keyboard mapping is incomplete; no key for: %s",
                ", ".join(str(c) for c in check.missing),
            )

    @classmethod
    def with_overrides(cls, overrides: Mapping[str, Channel]) -> "InputMapper":
        keyboard = dict(KEYBOARD_MAPPING)
        if overrides:
            # An override for a channel drops its default keys.
            rebound = set(overrides.values())
            keyboard = {k: c for k, c in keyboard.items() if c not in rebound}
            for key, channel in overrides.items():
                # Keys match in either case.
                keyboard[key.lower()] = channel
                keyboard[key.upper()] = channel
        return cls(keyboard=keyboard)

    def from_keyboard(self, key: str) -> Channel | None:
        return self.keyboard.get(key)

    def from_midi(self, note: int) -> Channel | None:
        return MIDI_NOTE_MAPPING.get(int(note))

    def from_hid(self, button: int) -> Channel | None:
        return HID_BUTTON_MAPPING.get(int(button))

    def from_gamepad(self, button: int) -> Channel | None:
        return GAMEPAD_BUTTON_MAPPING.get(int(button))

    def resolve(self, source: InputSource, code: object) -> Channel | None:
        if source is InputSource.KEYBOARD:
            return self.from_keyboard(str(code))
        if source is InputSource.MIDI:
            return self.from_midi(int(code))  # type: ignore[arg-type]
        if source is InputSource.USB:
            return self.from_hid(int(code))  # type: ignore[arg-type]
        if source is InputSource.GAMEPAD:
            return self.from_gamepad(int(code))  # type: ignore[arg-type]
        if source in (InputSource.TOUCH, InputSource.SIMULATED):
            try:
                return Channel(str(code))
            except ValueError:
                return None
        return None

    def keyboard_label(self, channel: Channel) -> str:
        keys = sorted({k.upper() for k, c in self.keyboard.items() if c == channel})
        return "/".join(keys) if keys else KEYBOARD_LABELS[channel]


def label_for(source: InputSource, channel: Channel) -> str:
    if source is InputSource.MIDI:
        return MIDI_NOTE_LABELS[channel]
    if source is InputSource.USB:
        return HID_BUTTON_LABELS[channel]
    if source is InputSource.GAMEPAD:
        return GAMEPAD_BUTTON_LABELS[channel]
    return KEYBOARD_LABELS[channel]
