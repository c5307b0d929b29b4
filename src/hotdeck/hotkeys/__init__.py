"""Keyboard hotkeys: binding strings, registry, capture and sources."""

from .binding import (
    MODIFIER_ORDER,
    KeyEvent,
    build_binding,
    build_chord,
    canonical_binding,
    clean_binding,
    is_modifier,
    is_valid_binding,
    key_name,
)
from .capture import KeyboardCapture, RecordingCallback
from .registry import HotkeyRegistry
from .sources import KeyboardSource, PynputKeyboardSource, pynput_key_name

__all__ = [
    "HotkeyRegistry",
    "KeyEvent",
    "KeyboardCapture",
    "KeyboardSource",
    "MODIFIER_ORDER",
    "PynputKeyboardSource",
    "RecordingCallback",
    "build_binding",
    "build_chord",
    "canonical_binding",
    "clean_binding",
    "is_modifier",
    "is_valid_binding",
    "key_name",
    "pynput_key_name",
]
