"""Raw MIDI message decoding.

Status byte layout: the high nibble is the message kind, the low nibble the
channel (0-15). The remaining one or two bytes are the note/controller
number and the velocity/value.
"""

import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from hotdeck.exceptions import InvalidMidiMessageError


class MidiMessageKind(str, Enum):
    """Channel message kinds, keyed by status high nibble."""

    NOTE_OFF = "noteOff"
    NOTE_ON = "noteOn"
    AFTERTOUCH = "aftertouch"
    CONTROL_CHANGE = "controlChange"
    PROGRAM_CHANGE = "programChange"
    CHANNEL_PRESSURE = "channelPressure"
    PITCH_BEND = "pitchBend"
    UNKNOWN = "unknown"


_KIND_BY_NIBBLE: dict[int, MidiMessageKind] = {
    8: MidiMessageKind.NOTE_OFF,
    9: MidiMessageKind.NOTE_ON,
    10: MidiMessageKind.AFTERTOUCH,
    11: MidiMessageKind.CONTROL_CHANGE,
    12: MidiMessageKind.PROGRAM_CHANGE,
    13: MidiMessageKind.CHANNEL_PRESSURE,
    14: MidiMessageKind.PITCH_BEND,
}


@dataclass(frozen=True)
class MidiMessage:
    """
    A decoded MIDI channel message.

    Attributes:
        kind: Message kind from the status high nibble
        channel: Channel 0-15 from the status low nibble
        number: Note or controller number (first data byte)
        value: Velocity or controller value (second data byte, 0 if absent)
        timestamp: Monotonic receive time in seconds
        raw: The undecoded bytes
    """

    kind: MidiMessageKind
    channel: int
    number: int
    value: int = 0
    timestamp: float = 0.0
    raw: tuple[int, ...] = field(default=())

    @property
    def note(self) -> int:
        """Alias of `number` for note messages."""
        return self.number

    @property
    def controller(self) -> int:
        """Alias of `number` for control change messages."""
        return self.number

    @property
    def velocity(self) -> int:
        """Alias of `value` for note messages."""
        return self.value

    @property
    def is_press(self) -> bool:
        """True for note-on with nonzero velocity."""
        return self.kind is MidiMessageKind.NOTE_ON and self.value > 0


def decode(data: Sequence[int], timestamp: float | None = None) -> MidiMessage:
    """
    Decode a raw MIDI channel message.

    Args:
        data: Two or three raw bytes
        timestamp: Monotonic receive time (defaults to now)

    Returns:
        The decoded message

    Raises:
        InvalidMidiMessageError: If the payload length or status byte is wrong
    """
    data = tuple(data)
    if len(data) < 2 or len(data) > 3:
        raise InvalidMidiMessageError(data, f"expected 2 or 3 bytes, got {len(data)}")
    if any(not isinstance(b, int) or b < 0 or b > 0xFF for b in data):
        raise InvalidMidiMessageError(data, "bytes must be integers 0-255")

    status = data[0]
    if status < 0x80:
        raise InvalidMidiMessageError(data, f"missing status byte (got {status:#04x})")

    return MidiMessage(
        kind=_KIND_BY_NIBBLE.get(status >> 4, MidiMessageKind.UNKNOWN),
        channel=status & 0x0F,
        number=data[1],
        value=data[2] if len(data) > 2 else 0,
        timestamp=time.monotonic() if timestamp is None else timestamp,
        raw=data,
    )

