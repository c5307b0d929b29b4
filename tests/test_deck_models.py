"""Tests for deck and button models."""

import pytest
from pydantic import ValidationError

from hotdeck.decks import ButtonType, Deck, DeckButton, TriggerType


@pytest.mark.unit
class TestDeckButton:
    """Test button models."""

    def test_defaults(self):
        button = DeckButton(type=ButtonType.VOLUME, target="mic")
        assert button.volume_value == 64
        assert button.color == "gray"
        assert button.keyboard_trigger is None

    def test_volume_value_range(self):
        with pytest.raises(ValidationError):
            DeckButton(type=ButtonType.VOLUME, volume_value=128)

    def test_obs_target_resolution(self):
        """OBS buttons prefer the scene, then the source, then the target."""
        assert DeckButton(type="obs", obs_scene="Intro", obs_source="Cam", target="x").resolved_target == "Intro"
        assert DeckButton(type="obs", obs_source="Cam", target="x").resolved_target == "Cam"
        assert DeckButton(type="obs", target="x").resolved_target == "x"
        assert DeckButton(type="hotkey", obs_scene="Intro", target="x").resolved_target == "x"


@pytest.mark.unit
class TestDeck:
    """Test deck models."""

    def test_id_must_be_slug(self):
        with pytest.raises(ValidationError):
            Deck(id="My Deck", name="My Deck")

    def test_slugify(self):
        assert Deck.slugify(" My Deck ") == "my-deck"

    def test_button_positions_validated(self):
        with pytest.raises(ValidationError):
            Deck(id="d", name="D", rows=1, cols=2, buttons={"1-0": DeckButton(type="music")})
        with pytest.raises(ValidationError):
            Deck(id="d", name="D", buttons={"a-b": DeckButton(type="music")})

    def test_check_position(self):
        deck = Deck(id="d", name="D", rows=2, cols=4)
        assert deck.check_position("1-3") == (1, 3)
        with pytest.raises(ValueError):
            deck.check_position("2-0")

    def test_uses_keyboard_trigger(self):
        assert Deck(id="d", name="D", trigger_type="keyboard", keyboard_trigger="f1").uses_keyboard_trigger
        assert Deck(id="d", name="D", trigger_type="both", keyboard_trigger="f1").uses_keyboard_trigger
        assert not Deck(id="d", name="D", trigger_type="midi", keyboard_trigger="f1").uses_keyboard_trigger
        assert not Deck(id="d", name="D", trigger_type="keyboard").uses_keyboard_trigger

    def test_default_deck(self):
        deck = Deck.default()

        assert deck.id == "default"
        assert deck.trigger_type is TriggerType.KEYBOARD
        assert deck.keyboard_trigger == "ctrl+shift+d"
        assert set(deck.buttons) == {"0-0", "0-1", "0-2", "0-3", "1-0", "1-1"}
        assert deck.buttons["0-0"].action == "playPause"
        assert deck.buttons["0-0"].keyboard_trigger == "space"
        assert deck.buttons["1-0"].target_deck == "settings"

    def test_json_round_trip_keeps_types(self):
        deck = Deck.default()
        restored = Deck.model_validate_json(deck.model_dump_json())
        assert restored == deck
        assert restored.buttons["0-3"].type is ButtonType.VOLUME
