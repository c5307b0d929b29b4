"""Keyboard event sources.

A source delivers raw key events to the capture service. The global source
uses pynput's keyboard Listener (one listener thread, so events arrive
sequentially). Embedding UIs can implement the protocol themselves and pass
the `editable` flag for focused text fields.
"""

import logging
from collections.abc import Callable
from typing import Any, Protocol

from .binding import KeyEvent

logger = logging.getLogger(__name__)

KeyHandler = Callable[[KeyEvent], bool]

# pynput special key names -> hotdeck key names
_PYNPUT_KEY_NAMES: dict[str, str] = {
    "alt_gr": "alt",
    "cmd": "meta",
    "caps_lock": "capslock",
    "page_up": "pageup",
    "page_down": "pagedown",
    "esc": "escape",
    "num_lock": "numlock",
    "scroll_lock": "scrolllock",
    "print_screen": "printscreen",
    "media_play_pause": "mediaplaypause",
    "media_next": "medianext",
    "media_previous": "mediaprevious",
    "media_volume_mute": "volumemute",
    "media_volume_down": "volumedown",
    "media_volume_up": "volumeup",
}


class KeyboardSource(Protocol):
    """Anything that can feed key-down/key-up events to a handler pair."""

    def attach(self, on_key_down: KeyHandler, on_key_up: KeyHandler) -> None:
        """Start delivering events to the handlers."""
        ...

    def detach(self) -> None:
        """Stop delivering events and release native listeners."""
        ...


def pynput_key_name(key: Any) -> str | None:
    """
    Translate a pynput Key/KeyCode into a hotdeck key name.

    Works on duck-typed objects: KeyCode exposes `char`, Key exposes `name`.
    """
    char = getattr(key, "char", None)
    if char:
        # Some platforms report ctrl+letter as an ASCII control character
        if len(char) == 1 and ord(char) < 32:
            return chr(ord(char) + 96)
        return char.lower()

    name = getattr(key, "name", None)
    if not name:
        return None
    if name in _PYNPUT_KEY_NAMES:
        return _PYNPUT_KEY_NAMES[name]

    for suffix in ("_l", "_r"):
        if name.endswith(suffix):
            name = name[: -len(suffix)]
    return _PYNPUT_KEY_NAMES.get(name, name)


class PynputKeyboardSource:
    """
    Global keyboard source backed by pynput.

    pynput reports keys without modifier flags, so modifier state is tracked
    from the press/release stream. Global listeners cannot suppress events
    system-wide; the handlers' return value is therefore informational.
    """

    def __init__(self) -> None:
        self._listener: Any = None
        self._held: set[str] = set()
        self._on_key_down: KeyHandler | None = None
        self._on_key_up: KeyHandler | None = None

    def attach(self, on_key_down: KeyHandler, on_key_up: KeyHandler) -> None:
        from pynput import keyboard

        self._on_key_down = on_key_down
        self._on_key_up = on_key_up
        self._held.clear()
        self._listener = keyboard.Listener(on_press=self._on_press, on_release=self._on_release)
        self._listener.start()
        logger.info("pynput keyboard listener started")

    def detach(self) -> None:
        listener, self._listener = self._listener, None
        if listener is not None:
            listener.stop()
            logger.info("pynput keyboard listener stopped")
        self._on_key_down = None
        self._on_key_up = None
        self._held.clear()

    def to_event(self, name: str) -> KeyEvent:
        """Build a KeyEvent for a key name using the tracked modifier state."""
        return KeyEvent(
            key=name,
            ctrl="ctrl" in self._held,
            alt="alt" in self._held,
            shift="shift" in self._held,
            meta="meta" in self._held,
        )

    def _on_press(self, key: Any) -> None:
        name = pynput_key_name(key)
        if name is None:
            return
        if name in ("ctrl", "alt", "shift", "meta"):
            self._held.add(name)
        if self._on_key_down is not None:
            self._on_key_down(self.to_event(name))

    def _on_release(self, key: Any) -> None:
        name = pynput_key_name(key)
        if name is None:
            return
        event = self.to_event(name)
        self._held.discard(name)
        if self._on_key_up is not None:
            self._on_key_up(event)

    def __repr__(self) -> str:
        return "PynputKeyboardSource()"
