"""Dispatch categories and their payloads.

Each category carries exactly one payload type:

- HOTKEY_TRIGGERED: binding ID (str) of the matched keyboard hotkey
- VOLUME_CHANGE: VolumeChange
- HOTKEY_ACTION: HotkeyAction
- RECORDING_STARTED / RECORDING_STOPPED: None
- HOTKEY_RECORDED: recorded chord (str)
- DECK_ACTION: DeckAction
- DECK_SWITCHED: DeckSwitch
- MIDI_MESSAGE: MidiMessage (every decoded message, for UI feedback)
- LEARNING_STATE_CHANGED: bool (True while MIDI learning is active)
- DEVICE_STATE_CHANGE: DeviceStateChange
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hotdeck.decks.models import ButtonType
    from hotdeck.midi.mappings import VolumeMapping


class DispatchEvent(str, Enum):
    """Categories published on the action dispatcher."""

    HOTKEY_TRIGGERED = "hotkeyTriggered"
    VOLUME_CHANGE = "volumeChange"
    HOTKEY_ACTION = "hotkeyAction"
    RECORDING_STARTED = "recordingStarted"
    RECORDING_STOPPED = "recordingStopped"
    HOTKEY_RECORDED = "hotkeyRecorded"
    DECK_ACTION = "deckAction"
    DECK_SWITCHED = "deckSwitched"
    MIDI_MESSAGE = "midiMessage"
    LEARNING_STATE_CHANGED = "learningStateChanged"
    DEVICE_STATE_CHANGE = "deviceStateChange"


@dataclass(frozen=True)
class VolumeChange:
    """A volume target moved to a new level in dB (-60..0)."""

    target: str
    value: float
    midi_value: int
    db_value: float
    mapping: VolumeMapping | None = None
    source: str = "midi"


@dataclass(frozen=True)
class HotkeyAction:
    """A logical action fired by a MIDI control or a deck button."""

    action: str
    target: str | None = None
    velocity: int | None = None
    custom_command: str | None = None
    source: str = "midi"


@dataclass(frozen=True)
class DeckAction:
    """A deck button was executed; scoped to the button's declared type."""

    type: ButtonType
    action: str | None
    target: str | None
    deck_id: str
    button_key: str
    custom_command: str | None = None


@dataclass(frozen=True)
class DeckSwitch:
    """The active deck changed."""

    previous: str | None
    current: str


@dataclass(frozen=True)
class DeviceStateChange:
    """A MIDI input port appeared or disappeared."""

    port_name: str
    connected: bool
