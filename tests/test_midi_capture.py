"""Tests for MIDI capture: routing, smoothing, filtering and learning."""

from unittest.mock import Mock

import mido
import pytest

from hotdeck.dispatch import DispatchEvent, HotkeyAction
from hotdeck.midi import MidiCapture, MidiMappingTable, MidiMessageKind


@pytest.fixture
def capture(dispatcher):
    return MidiCapture(MidiMappingTable(), dispatcher)


@pytest.mark.unit
class TestVolumeRouting:
    """Test control change messages mapped to volume."""

    def test_volume_change_published(self, capture, recorder):
        capture.handle_bytes([0xB0, 1, 127], timestamp=1.0)

        (change,) = recorder.of(DispatchEvent.VOLUME_CHANGE)
        assert change.target == "master"
        assert change.value == 0.0
        assert change.midi_value == 127
        assert change.db_value == 0.0
        assert change.mapping.target == "master"
        assert change.source == "midi"

    def test_successive_values_are_smoothed(self, capture, recorder):
        capture.handle_bytes([0xB0, 1, 0])
        capture.handle_bytes([0xB0, 1, 127])
        capture.handle_bytes([0xB0, 1, 127])

        values = [c.value for c in recorder.of(DispatchEvent.VOLUME_CHANGE)]
        assert values == [-60.0, -54.0, -48.6]

    def test_smoothing_is_per_target(self, capture, recorder):
        capture.handle_bytes([0xB0, 1, 0])
        capture.handle_bytes([0xB0, 3, 127])

        changes = recorder.of(DispatchEvent.VOLUME_CHANGE)
        assert [(c.target, c.value) for c in changes] == [("master", -60.0), ("mic", 0.0)]

    def test_channel_is_ignored_for_routing(self, capture, recorder):
        capture.handle_bytes([0xBF, 2, 127])
        assert recorder.of(DispatchEvent.VOLUME_CHANGE)[0].target == "desktop"


@pytest.mark.unit
class TestHotkeyRouting:
    """Test mapped hotkey actions."""

    def test_control_change_fires_action(self, capture, recorder):
        capture.handle_bytes([0xB0, 18, 127])

        assert recorder.of(DispatchEvent.HOTKEY_ACTION) == [
            HotkeyAction(action="playPause", velocity=127)
        ]

    def test_zero_value_never_fires(self, capture, recorder):
        """Releases (value 0) don't re-trigger the action."""
        capture.handle_bytes([0xB0, 18, 0])
        assert recorder.of(DispatchEvent.HOTKEY_ACTION) == []

    def test_note_press_and_release(self, capture, recorder):
        """A pad press fires once; its release fires nothing."""
        capture.table.set_mapping("note_36", {"kind": "hotkey", "action": "soundEffect", "target": "airhorn"})

        capture.handle_bytes([0x90, 36, 100])
        capture.handle_bytes([0x90, 36, 0])
        capture.handle_bytes([0x80, 36, 0])

        actions = recorder.of(DispatchEvent.HOTKEY_ACTION)
        assert actions == [HotkeyAction(action="soundEffect", target="airhorn", velocity=100)]

    def test_unmapped_message_dropped(self, capture, recorder):
        capture.handle_bytes([0xB0, 99, 64])

        assert recorder.of(DispatchEvent.HOTKEY_ACTION) == []
        assert recorder.of(DispatchEvent.VOLUME_CHANGE) == []
        assert len(recorder.of(DispatchEvent.MIDI_MESSAGE)) == 1

    def test_test_mapping(self, capture, recorder):
        assert capture.test_mapping(22)
        assert not capture.test_mapping(99)
        assert recorder.of(DispatchEvent.HOTKEY_ACTION) == [
            HotkeyAction(action="mute", target="master", velocity=64)
        ]


@pytest.mark.unit
class TestInput:
    """Test raw input handling."""

    def test_invalid_payload_is_noop(self, capture, recorder):
        assert capture.handle_bytes([0xB0]) is None
        assert capture.handle_bytes([0x10, 1, 1]) is None
        assert recorder.events == []

    def test_handle_mido(self, capture, recorder):
        message = capture.handle_mido(mido.Message("control_change", control=1, value=127))

        assert message.kind is MidiMessageKind.CONTROL_CHANGE
        assert recorder.of(DispatchEvent.VOLUME_CHANGE)[0].target == "master"

    def test_handle_mido_skips_system_messages(self, capture, recorder):
        assert capture.handle_mido(mido.Message("clock")) is None
        assert recorder.events == []


@pytest.mark.unit
class TestLearning:
    """Test MIDI learning sessions."""

    def test_learning_redirects_messages(self, capture, recorder):
        """While learning, messages reach the callback and not the table."""
        callback = Mock()
        assert capture.start_learning(callback)

        capture.handle_bytes([0xB0, 18, 127])

        callback.assert_called_once()
        assert callback.call_args.args[0].controller == 18
        assert recorder.of(DispatchEvent.HOTKEY_ACTION) == []

    def test_learning_receives_unmapped_and_release_messages(self, capture):
        callback = Mock()
        capture.start_learning(callback)

        capture.handle_bytes([0x80, 50, 0])
        capture.handle_bytes([0xE0, 0, 64])

        assert callback.call_count == 2

    def test_second_start_rejected(self, capture):
        assert capture.start_learning(Mock())
        assert not capture.start_learning(Mock())

    def test_stop_learning_restores_routing(self, capture, recorder):
        callback = Mock()
        capture.start_learning(callback)
        capture.stop_learning()
        capture.stop_learning()

        capture.handle_bytes([0xB0, 18, 127])

        callback.assert_not_called()
        assert len(recorder.of(DispatchEvent.HOTKEY_ACTION)) == 1
        assert recorder.of(DispatchEvent.LEARNING_STATE_CHANGED) == [True, False]

    def test_failing_callback_is_isolated(self, capture):
        capture.start_learning(Mock(side_effect=RuntimeError("boom")))
        capture.handle_bytes([0xB0, 1, 1])
        assert capture.is_learning

    def test_destroy(self, capture):
        capture.handle_bytes([0xB0, 1, 1])
        capture.start_learning(Mock())
        assert len(capture.smoother) == 1

        capture.destroy()

        assert not capture.is_learning
        assert len(capture.smoother) == 0
