"""Tests for raw MIDI decoding."""

import mido
import pytest

from hotdeck.exceptions import InvalidMidiMessageError
from hotdeck.midi import MidiMessageKind, decode


@pytest.mark.unit
class TestDecode:
    """Test status byte and data byte decoding."""

    @pytest.mark.parametrize(
        "status,kind",
        [
            (0x80, MidiMessageKind.NOTE_OFF),
            (0x90, MidiMessageKind.NOTE_ON),
            (0xA0, MidiMessageKind.AFTERTOUCH),
            (0xB0, MidiMessageKind.CONTROL_CHANGE),
            (0xC0, MidiMessageKind.PROGRAM_CHANGE),
            (0xD0, MidiMessageKind.CHANNEL_PRESSURE),
            (0xE0, MidiMessageKind.PITCH_BEND),
            (0xF0, MidiMessageKind.UNKNOWN),
        ],
    )
    def test_kind_from_high_nibble(self, status, kind):
        assert decode([status, 1, 2]).kind is kind

    def test_channel_and_data(self):
        message = decode([0xB3, 7, 100], timestamp=12.5)

        assert message.channel == 3
        assert message.controller == 7
        assert message.value == 100
        assert message.timestamp == 12.5
        assert message.raw == (0xB3, 7, 100)

    def test_two_byte_message_defaults_value(self):
        """A missing second data byte decodes as 0."""
        message = decode([0xC1, 5])
        assert message.kind is MidiMessageKind.PROGRAM_CHANGE
        assert message.number == 5
        assert message.value == 0

    def test_timestamp_defaults_to_monotonic(self):
        assert decode([0x90, 60, 1]).timestamp > 0

    def test_is_press(self):
        assert decode([0x90, 60, 100]).is_press
        assert not decode([0x90, 60, 0]).is_press
        assert not decode([0x80, 60, 100]).is_press

    @pytest.mark.parametrize(
        "data",
        [[], [0x90], [0x90, 1, 2, 3], [0x40, 1, 2], [0x90, 300, 1], [0x90, -1, 1]],
    )
    def test_invalid_payloads(self, data):
        with pytest.raises(InvalidMidiMessageError) as exc_info:
            decode(data)
        assert exc_info.value.data == tuple(data)
        assert exc_info.value.recoverable

    def test_decode_mido_bytes(self):
        message = decode(mido.Message("note_on", channel=2, note=64, velocity=90).bytes())

        assert message.kind is MidiMessageKind.NOTE_ON
        assert message.channel == 2
        assert message.note == 64
        assert message.velocity == 90
