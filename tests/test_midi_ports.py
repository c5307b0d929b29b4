"""Tests for MIDI port hot-plug management (mido patched)."""

from unittest.mock import MagicMock, Mock, patch

import pytest

from hotdeck.exceptions import MidiUnavailableError
from hotdeck.midi import MidiInputHub


@pytest.fixture
def mock_mido():
    with patch("hotdeck.midi.ports.mido") as mido_mock:
        mido_mock.get_input_names.return_value = ["Pad 1"]
        mido_mock.get_output_names.return_value = []
        mido_mock.open_input.side_effect = lambda name, callback: MagicMock(name=name)
        yield mido_mock


@pytest.mark.unit
class TestMidiInputHub:
    """Test port discovery, hot-plug and failure handling."""

    def test_list_ports(self, mock_mido):
        assert MidiInputHub.list_ports() == {"input": ["Pad 1"], "output": []}

    def test_list_ports_unavailable(self, mock_mido):
        mock_mido.get_input_names.side_effect = OSError("no backend")
        with pytest.raises(MidiUnavailableError):
            MidiInputHub.list_ports()

    def test_start_unavailable(self, mock_mido):
        mock_mido.get_input_names.side_effect = OSError("access denied")
        hub = MidiInputHub()

        with pytest.raises(MidiUnavailableError) as exc_info:
            hub.start()

        assert exc_info.value.original_error == "access denied"
        assert not hub.is_running

    def test_refresh_opens_and_closes_ports(self, mock_mido):
        """Plugged ports are opened and announced; vanished ports closed."""
        changes = Mock()
        hub = MidiInputHub()
        hub.on_connection_changed(changes)

        hub.refresh()
        assert hub.connected_ports == ["Pad 1"]

        mock_mido.get_input_names.return_value = ["Pad 1", "Faders"]
        hub.refresh()
        assert hub.connected_ports == ["Faders", "Pad 1"]

        mock_mido.get_input_names.return_value = ["Faders"]
        hub.refresh()
        assert hub.connected_ports == ["Faders"]

        assert [c.args for c in changes.call_args_list] == [
            ("Pad 1", True),
            ("Faders", True),
            ("Pad 1", False),
        ]

    def test_hot_plugged_port_feeds_message_callback(self, mock_mido):
        """A port opened later delivers into the same message callback."""
        callbacks = {}

        def open_input(name, callback):
            callbacks[name] = callback
            return MagicMock()

        mock_mido.open_input.side_effect = open_input
        on_message = Mock()
        hub = MidiInputHub()
        hub.on_message(on_message)
        hub.refresh()

        mock_mido.get_input_names.return_value = ["Pad 1", "Late Device"]
        hub.refresh()
        msg = Mock()
        callbacks["Late Device"](msg)

        on_message.assert_called_once_with("Late Device", msg)

    def test_device_filter(self, mock_mido):
        mock_mido.get_input_names.return_value = ["Launch Control", "Through Port"]
        hub = MidiInputHub(device_filter=lambda name: "Launch" in name)

        hub.refresh()

        assert hub.connected_ports == ["Launch Control"]

    def test_failed_open_is_skipped(self, mock_mido):
        mock_mido.open_input.side_effect = OSError("busy")
        hub = MidiInputHub()

        hub.refresh()

        assert hub.connected_ports == []

    def test_callback_errors_are_contained(self, mock_mido):
        callbacks = {}

        def open_input(name, callback):
            callbacks[name] = callback
            return MagicMock()

        mock_mido.open_input.side_effect = open_input
        hub = MidiInputHub()
        hub.on_message(Mock(side_effect=RuntimeError("boom")))
        hub.refresh()

        callbacks["Pad 1"](Mock())

    def test_start_and_stop(self, mock_mido):
        hub = MidiInputHub(poll_interval=60)
        hub.start()
        try:
            assert hub.is_running
            assert hub.connected_ports == ["Pad 1"]
        finally:
            hub.stop()

        assert not hub.is_running
        assert hub.connected_ports == []

    def test_stop_during_open_closes_the_port(self, mock_mido):
        """A port that finishes opening after stop() is closed, not kept."""
        hub = MidiInputHub()
        changes = Mock()
        hub.on_connection_changed(changes)
        opened = []

        def open_input(name, callback):
            port = MagicMock(name=name)
            opened.append(port)
            hub.stop()
            return port

        mock_mido.open_input.side_effect = open_input

        hub.refresh()

        assert hub.connected_ports == []
        opened[0].close.assert_called_once()
        changes.assert_not_called()

    def test_refresh_after_stop_keeps_nothing_open(self, mock_mido):
        hub = MidiInputHub(poll_interval=60)
        hub.start()
        hub.stop()

        hub.refresh()

        assert hub.connected_ports == []
