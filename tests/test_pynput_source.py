"""Tests for the pynput keyboard source (pynput objects duck-typed)."""

import sys
from types import SimpleNamespace
from unittest.mock import MagicMock, Mock, patch

import pytest

from hotdeck.hotkeys import KeyEvent, PynputKeyboardSource, key_name, pynput_key_name


def char_key(char):
    return SimpleNamespace(char=char)


def special_key(name):
    return SimpleNamespace(char=None, name=name)


@pytest.mark.unit
class TestPynputKeyName:
    """Test translation of pynput keys."""

    def test_characters(self):
        assert pynput_key_name(char_key("A")) == "a"
        assert pynput_key_name(char_key("1")) == "1"

    def test_control_characters(self):
        """ctrl+letter reported as a control character maps back to the letter."""
        assert pynput_key_name(char_key("\x04")) == "d"

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("ctrl_l", "ctrl"),
            ("shift_r", "shift"),
            ("alt_gr", "alt"),
            ("cmd", "meta"),
            ("cmd_r", "meta"),
            ("page_up", "pageup"),
            ("esc", "escape"),
            ("space", "space"),
            ("f5", "f5"),
            ("left", "left"),
        ],
    )
    def test_special_keys(self, name, expected):
        assert pynput_key_name(special_key(name)) == expected

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("print_screen", "printscreen"),
            ("num_lock", "numlock"),
            ("scroll_lock", "scrolllock"),
            ("media_play_pause", "mediaplaypause"),
            ("media_volume_up", "volumeup"),
            ("media_next", "medianext"),
            ("f20", "f20"),
        ],
    )
    def test_translated_names_resolve_to_keys(self, name, expected):
        """Every translated special key can be named, recorded and triggered."""
        translated = pynput_key_name(special_key(name))
        assert key_name(KeyEvent(key=translated)) == expected

    def test_plus_character(self):
        assert key_name(KeyEvent(key=pynput_key_name(char_key("+")))) == "plus"

    def test_unknown(self):
        assert pynput_key_name(SimpleNamespace(char=None, name=None)) is None


@pytest.mark.unit
class TestPynputKeyboardSource:
    """Test modifier tracking and listener lifecycle."""

    @pytest.fixture
    def fake_pynput(self):
        pynput = MagicMock()
        with patch.dict(sys.modules, {"pynput": pynput, "pynput.keyboard": pynput.keyboard}):
            yield pynput

    def test_attach_starts_listener(self, fake_pynput):
        source = PynputKeyboardSource()
        source.attach(Mock(), Mock())

        listener = fake_pynput.keyboard.Listener.return_value
        listener.start.assert_called_once()

        source.detach()
        listener.stop.assert_called_once()

    def test_modifier_state_tracked(self, fake_pynput):
        down, up = Mock(), Mock()
        source = PynputKeyboardSource()
        source.attach(down, up)
        kwargs = fake_pynput.keyboard.Listener.call_args.kwargs
        on_press, on_release = kwargs["on_press"], kwargs["on_release"]

        on_press(special_key("ctrl_l"))
        on_press(special_key("shift"))
        on_press(char_key("\x04"))

        assert down.call_args_list[-1].args[0] == KeyEvent(key="d", ctrl=True, shift=True)

        on_release(char_key("d"))
        on_release(special_key("ctrl_l"))
        on_release(special_key("shift"))
        on_press(char_key("d"))

        assert up.call_args_list[0].args[0] == KeyEvent(key="d", ctrl=True, shift=True)
        assert down.call_args_list[-1].args[0] == KeyEvent(key="d")

    def test_to_event_without_modifiers(self):
        assert PynputKeyboardSource().to_event("space") == KeyEvent(key="space")
