"""Hotkey binding strings: key naming, normalization and chord building.

A binding is a `+`-joined list of modifier names (ctrl, alt, shift, meta)
and non-modifier key names, e.g. ``ctrl+shift+d``. Two bindings are equal
when their parts match regardless of order, so ``Shift+Ctrl+1`` and
``ctrl+shift+1`` name the same gesture.
"""

from collections.abc import Iterable
from dataclasses import dataclass

# Canonical modifier order used when building chords
MODIFIER_ORDER: tuple[str, ...] = ("ctrl", "alt", "shift", "meta")
MODIFIER_KEYS = frozenset(MODIFIER_ORDER)

# Legacy key codes for keys whose printable value is missing or misleading
KEY_CODE_NAMES: dict[int, str] = {
    8: "backspace",
    9: "tab",
    13: "enter",
    16: "shift",
    17: "ctrl",
    18: "alt",
    19: "pause",
    20: "capslock",
    27: "escape",
    32: "space",
    33: "pageup",
    34: "pagedown",
    35: "end",
    36: "home",
    37: "left",
    38: "up",
    39: "right",
    40: "down",
    45: "insert",
    46: "delete",
    91: "meta",
    92: "meta",
    93: "menu",
    144: "numlock",
    145: "scrolllock",
    **{112 + i: f"f{i + 1}" for i in range(24)},
}

# Named (multi-character) key values, compared lowercased
NAMED_KEYS: dict[str, str] = {
    "backspace": "backspace",
    "tab": "tab",
    "enter": "enter",
    "return": "enter",
    "shift": "shift",
    "control": "ctrl",
    "ctrl": "ctrl",
    "alt": "alt",
    "option": "alt",
    "meta": "meta",
    "os": "meta",
    "cmd": "meta",
    "super": "meta",
    "pause": "pause",
    "capslock": "capslock",
    "escape": "escape",
    "esc": "escape",
    "space": "space",
    "spacebar": "space",
    "pageup": "pageup",
    "pagedown": "pagedown",
    "end": "end",
    "home": "home",
    "arrowleft": "left",
    "arrowup": "up",
    "arrowright": "right",
    "arrowdown": "down",
    "left": "left",
    "up": "up",
    "right": "right",
    "down": "down",
    "insert": "insert",
    "delete": "delete",
    "contextmenu": "menu",
    "menu": "menu",
    "numlock": "numlock",
    "scrolllock": "scrolllock",
    "printscreen": "printscreen",
    "plus": "plus",
    # Media keys
    "mediaplaypause": "mediaplaypause",
    "mediatracknext": "medianext",
    "medianext": "medianext",
    "mediatrackprevious": "mediaprevious",
    "mediaprevious": "mediaprevious",
    "audiovolumemute": "volumemute",
    "volumemute": "volumemute",
    "audiovolumedown": "volumedown",
    "volumedown": "volumedown",
    "audiovolumeup": "volumeup",
    "volumeup": "volumeup",
    **{f"f{i}": f"f{i}" for i in range(1, 25)},
}


@dataclass(frozen=True)
class KeyEvent:
    """
    A raw key-down or key-up event from a keyboard source.

    Attributes:
        key: Logical key value ("a", "A", "Enter", "ArrowLeft", ...)
        code: Physical key identifier ("KeyA", "Digit1", "Numpad1", ...)
        key_code: Legacy numeric key code, if the source provides one
        ctrl/alt/shift/meta: Modifier state at the time of the event
        editable: True when the focused target is a text field
    """

    key: str | None = None
    code: str | None = None
    key_code: int | None = None
    ctrl: bool = False
    alt: bool = False
    shift: bool = False
    meta: bool = False
    editable: bool = False


def key_name(event: KeyEvent) -> str | None:
    """
    Resolve the normalized name of the key in an event.

    Resolution order: legacy key code, single printable character,
    named key, physical code.

    Returns:
        Normalized key name, or None if the key cannot be named
    """
    if event.key_code is not None and event.key_code in KEY_CODE_NAMES:
        return KEY_CODE_NAMES[event.key_code]

    if event.key:
        if event.key == " ":
            return "space"
        if event.key == "+":
            # "+" is the binding separator
            return "plus"
        if len(event.key) == 1:
            return event.key.lower()
        named = NAMED_KEYS.get(event.key.lower())
        if named:
            return named

    code = event.code
    if code:
        if code.startswith("Key") and len(code) > 3:
            return code[3:].lower()
        if code.startswith("Digit") and len(code) > 5:
            return code[5:]
        if code.startswith("Numpad") and len(code) > 6:
            return "numpad" + code[6:].lower()

    return None


def is_modifier(name: str) -> bool:
    """Check whether a normalized key name is a modifier."""
    return name in MODIFIER_KEYS


def clean_binding(binding: str) -> str:
    """Registration form of a binding: lowercased and trimmed."""
    return binding.strip().lower()


def canonical_binding(binding: str) -> str:
    """
    Order-independent comparison form of a binding.

    >>> canonical_binding("Shift+Ctrl+1")
    '1+ctrl+shift'
    """
    parts = [part.strip() for part in clean_binding(binding).split("+")]
    return "+".join(sorted(parts))


def is_valid_binding(binding: str | None) -> bool:
    """A binding is valid when it is non-blank and has no empty segments."""
    if not binding or not binding.strip():
        return False
    return all(part.strip() for part in binding.split("+"))


def build_binding(event: KeyEvent) -> str | None:
    """
    Build the candidate binding for a key-down event.

    Lone modifier presses produce no binding.
    """
    name = key_name(event)
    if not name or is_modifier(name):
        return None

    parts = []
    if event.ctrl:
        parts.append("ctrl")
    if event.alt:
        parts.append("alt")
    if event.shift:
        parts.append("shift")
    if event.meta:
        parts.append("meta")
    parts.append(name)
    return "+".join(parts)


def build_chord(keys: Iterable[str]) -> str:
    """
    Build a chord from recorded key names.

    Modifiers come first in canonical order, then the remaining keys in the
    order they were pressed.

    >>> build_chord(["a", "shift", "ctrl"])
    'ctrl+shift+a'
    """
    keys = list(keys)
    modifiers = [m for m in MODIFIER_ORDER if m in keys]
    others = [k for k in keys if not is_modifier(k)]
    return "+".join(modifiers + others)
