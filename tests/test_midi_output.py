"""Tests for the MIDI LED feedback output (mido patched)."""

from unittest.mock import MagicMock, patch

import pytest

from hotdeck.exceptions import MidiUnavailableError
from hotdeck.midi import MidiFeedbackOutput


@pytest.fixture
def mock_mido():
    with patch("hotdeck.midi.output.mido") as mido_mock:
        mido_mock.get_output_names.return_value = ["Launch Control", "Synth"]
        mido_mock.open_output.side_effect = lambda name: MagicMock(name=name)
        yield mido_mock


@pytest.mark.unit
class TestMidiFeedbackOutput:
    """Test port selection, LED feedback and hot-plug."""

    def test_first_matching_port_is_used(self, mock_mido):
        output = MidiFeedbackOutput(device_filter=lambda name: "Launch" in name)

        output.refresh()

        assert output.is_connected
        assert output.current_port == "Launch Control"
        mock_mido.open_output.assert_called_once_with("Launch Control")

    def test_port_selector(self, mock_mido):
        output = MidiFeedbackOutput(port_selector=lambda names: names[-1])

        output.refresh()

        assert output.current_port == "Synth"

    def test_send_feedback_sends_note_on(self, mock_mido):
        output = MidiFeedbackOutput()
        output.refresh()

        assert output.send_feedback(36, velocity=64, channel=9)

        mock_mido.Message.assert_called_once_with("note_on", channel=9, note=36, velocity=64)
        output._port.send.assert_called_once_with(mock_mido.Message.return_value)

    def test_send_feedback_defaults(self, mock_mido):
        output = MidiFeedbackOutput()
        output.refresh()

        output.send_feedback(10)

        mock_mido.Message.assert_called_once_with("note_on", channel=0, note=10, velocity=127)

    def test_send_without_port(self, mock_mido):
        mock_mido.get_output_names.return_value = []
        output = MidiFeedbackOutput()
        output.refresh()

        assert not output.is_connected
        assert output.send_feedback(36) is False

    def test_send_error_returns_false(self, mock_mido):
        output = MidiFeedbackOutput()
        output.refresh()
        output._port.send.side_effect = OSError("device gone")

        assert output.send_feedback(36) is False

    def test_select_output(self, mock_mido):
        output = MidiFeedbackOutput()
        output.refresh()
        first = output._port

        assert output.select_output("Synth")

        first.close.assert_called_once()
        assert output.current_port == "Synth"

    def test_selected_port_survives_replug_only_by_name(self, mock_mido):
        """A selected port is reconnected when it comes back, never swapped."""
        output = MidiFeedbackOutput()
        output.select_output("Synth")

        mock_mido.get_output_names.return_value = ["Launch Control"]
        output.refresh()
        assert output.current_port is None

        mock_mido.get_output_names.return_value = ["Launch Control", "Synth"]
        output.refresh()
        assert output.current_port == "Synth"

    def test_failed_select(self, mock_mido):
        mock_mido.open_output.side_effect = OSError("busy")
        output = MidiFeedbackOutput()

        assert output.select_output("Synth") is False
        assert not output.is_connected

    def test_vanished_port_is_closed_and_replaced(self, mock_mido):
        output = MidiFeedbackOutput()
        output.refresh()
        first = output._port

        mock_mido.get_output_names.return_value = ["Synth"]
        output.refresh()

        first.close.assert_called_once()
        assert output.current_port == "Synth"

    def test_start_unavailable(self, mock_mido):
        mock_mido.get_output_names.side_effect = OSError("no backend")
        output = MidiFeedbackOutput()

        with pytest.raises(MidiUnavailableError):
            output.start()

        assert not output.is_running

    def test_start_and_stop(self, mock_mido):
        output = MidiFeedbackOutput(poll_interval=60)
        output.start()
        try:
            assert output.is_running
            assert output.current_port == "Launch Control"
            port = output._port
        finally:
            output.stop()

        port.close.assert_called_once()
        assert not output.is_connected
        assert output.select_output("Synth") is False
        output.refresh()
        assert not output.is_connected
