from __future__ import annotations

from metronome_trainer.input_mapping import (
    GAMEPAD_BUTTON_LABELS,
    HID_BUTTON_LABELS,
    KEYBOARD_MAPPING,
    MIDI_NOTE_MAPPING,
    InputMapper,
    label_for,
    validate_input_mapping,
)
from metronome_trainer.timing_core import Channel, InputSource


def test_default_keyboard_mapping_is_case_insensitive() -> None:
    m = InputMapper()
    assert m.from_keyboard("e") is Channel.LEFT_HAND
    assert m.from_keyboard("E") is Channel.LEFT_HAND
    assert m.from_keyboard("i") is Channel.RIGHT_HAND
    assert m.from_keyboard("x") is Channel.LEFT_FOOT
    assert m.from_keyboard("N") is Channel.RIGHT_FOOT
    assert m.from_keyboard("q") is None


def test_device_tables() -> None:
    m = InputMapper()
    assert m.from_midi(60) is Channel.LEFT_HAND
    assert m.from_midi(65) is Channel.RIGHT_FOOT
    assert m.from_midi(61) is None
    assert m.from_hid(1) is Channel.RIGHT_HAND
    assert m.from_gamepad(2) is Channel.LEFT_FOOT
    assert m.from_gamepad(9) is None
    assert set(MIDI_NOTE_MAPPING.values()) == set(Channel)


def test_resolve_by_source() -> None:
    m = InputMapper()
    assert m.resolve(InputSource.KEYBOARD, "i") is Channel.RIGHT_HAND
    assert m.resolve(InputSource.MIDI, 64) is Channel.LEFT_FOOT
    assert m.resolve(InputSource.USB, 3) is Channel.RIGHT_FOOT
    assert m.resolve(InputSource.TOUCH, "left-hand") is Channel.LEFT_HAND
    assert m.resolve(InputSource.TOUCH, "nose") is None


def test_labels() -> None:
    assert label_for(InputSource.KEYBOARD, Channel.LEFT_FOOT) == "X"
    assert label_for(InputSource.MIDI, Channel.RIGHT_HAND) == "D4 (62)"
    assert HID_BUTTON_LABELS[Channel.RIGHT_FOOT] == "Button 4"
    assert GAMEPAD_BUTTON_LABELS[Channel.LEFT_HAND] == "A Button"
    assert InputMapper().keyboard_label(Channel.LEFT_HAND) == "E"


def test_validation_reports_missing_channels() -> None:
    assert validate_input_mapping().is_valid
    partial = {k: c for k, c in KEYBOARD_MAPPING.items() if c is not Channel.RIGHT_FOOT}
    check = validate_input_mapping(partial)
    assert check.is_valid is False
    assert check.missing == (Channel.RIGHT_FOOT,)


def test_overrides_replace_default_keys_for_rebound_channels() -> None:
    m = InputMapper.with_overrides({"f": Channel.LEFT_HAND, "j": Channel.RIGHT_HAND})
    assert m.from_keyboard("f") is Channel.LEFT_HAND
    assert m.from_keyboard("e") is None
    assert m.from_keyboard("x") is Channel.LEFT_FOOT
    assert m.keyboard_label(Channel.RIGHT_HAND) == "J"
    assert validate_input_mapping(m.keyboard).is_valid


def test_rebound_keys_match_in_either_case() -> None:
    m = InputMapper.with_overrides({"f": Channel.LEFT_HAND, "J": Channel.RIGHT_HAND})
    assert m.from_keyboard("f") is Channel.LEFT_HAND
    assert m.from_keyboard("F") is Channel.LEFT_HAND
    assert m.from_keyboard("j") is Channel.RIGHT_HAND
    assert m.from_keyboard("J") is Channel.RIGHT_HAND
    assert m.keyboard_label(Channel.LEFT_HAND) == "F"
