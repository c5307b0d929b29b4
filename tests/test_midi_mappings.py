"""Tests for the MIDI mapping table."""

import pytest
from pydantic import ValidationError

from hotdeck.midi import (
    HotkeyMapping,
    MidiMappingTable,
    VolumeMapping,
    decode,
    default_mappings,
    mapping_key_for,
    parse_mapping,
    routing_key,
)


@pytest.mark.unit
class TestMappingModels:
    """Test mapping validation."""

    def test_parse_dicts_by_kind(self):
        volume = parse_mapping({"kind": "volume", "target": "mic"})
        hotkey = parse_mapping({"kind": "hotkey", "action": "shuffle"})

        assert isinstance(volume, VolumeMapping)
        assert volume.min == 0 and volume.max == 127
        assert isinstance(hotkey, HotkeyMapping)
        assert hotkey.target is None

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError):
            parse_mapping({"kind": "scene", "target": "x"})

    def test_volume_range_must_be_increasing(self):
        with pytest.raises(ValidationError):
            VolumeMapping(target="master", min=100, max=20)

    def test_models_pass_through(self):
        mapping = HotkeyMapping(action="mute", target="mic")
        assert parse_mapping(mapping) is mapping


@pytest.mark.unit
class TestRoutingKeys:
    """Test which messages reach the table."""

    def test_control_change_key(self):
        assert routing_key(decode([0xB0, 7, 0])) == "7"

    def test_note_on_key(self):
        assert routing_key(decode([0x90, 36, 127])) == "note_36"

    def test_ignored_messages(self):
        """Zero-velocity note-on, note-off and other kinds are not routed."""
        assert routing_key(decode([0x90, 36, 0])) is None
        assert routing_key(decode([0x80, 36, 64])) is None
        assert routing_key(decode([0xC0, 3])) is None
        assert routing_key(decode([0xE0, 0, 64])) is None

    def test_mapping_key_for_learned_messages(self):
        assert mapping_key_for(decode([0xB0, 12, 1])) == "12"
        assert mapping_key_for(decode([0x80, 40, 0])) == "note_40"
        assert mapping_key_for(decode([0xE0, 0, 64])) is None


@pytest.mark.unit
class TestMappingTable:
    """Test table operations."""

    def test_factory_defaults(self):
        table = MidiMappingTable()
        mappings = table.get_all_mappings()

        assert len(mappings) == 16
        assert mappings["1"] == VolumeMapping(target="master")
        assert mappings["8"] == VolumeMapping(target="alert")
        assert mappings["16"] == HotkeyMapping(action="moodSwap", target="chill")
        assert mappings["23"] == HotkeyMapping(action="soundEffect", target="applause")

    def test_set_mapping_with_int_key(self):
        """Integer keys are stored as strings."""
        table = MidiMappingTable()
        table.set_mapping(30, {"kind": "hotkey", "action": "shuffle"})

        assert table.get_mapping("30") == HotkeyMapping(action="shuffle")
        assert table.get_mapping(30) == HotkeyMapping(action="shuffle")

    def test_override_replaces_default(self):
        table = MidiMappingTable()
        table.set_mapping("1", VolumeMapping(target="game"))

        assert table.get_mapping("1").target == "game"
        assert table.overrides() == {"1": VolumeMapping(target="game")}

    def test_invalid_mapping_leaves_table_unchanged(self):
        table = MidiMappingTable()
        with pytest.raises(ValidationError):
            table.set_mapping("1", {"kind": "volume"})
        assert table.get_mapping("1") == VolumeMapping(target="master")

    def test_remove_mapping(self):
        table = MidiMappingTable()
        assert table.remove_mapping(18)
        assert not table.remove_mapping(18)
        assert "18" not in table

    def test_lookup(self):
        table = MidiMappingTable()
        table.set_mapping("note_36", {"kind": "hotkey", "action": "playPause"})

        assert table.lookup(decode([0x90, 36, 100])) == HotkeyMapping(action="playPause")
        assert table.lookup(decode([0xB0, 2, 5])) == VolumeMapping(target="desktop")
        assert table.lookup(decode([0xB0, 99, 5])) is None

    def test_overrides_in_constructor(self):
        table = MidiMappingTable(overrides={"40": {"kind": "volume", "target": "music"}})
        assert table.get_mapping("40") == VolumeMapping(target="music")
        assert len(table) == 17

    def test_reset_to_defaults(self):
        table = MidiMappingTable()
        table.set_mapping("40", {"kind": "hotkey", "action": "x"})
        table.remove_mapping("1")

        table.reset_to_defaults()

        assert table.get_all_mappings() == default_mappings()
        assert table.overrides() == {}

    def test_get_all_returns_snapshot(self):
        table = MidiMappingTable()
        snapshot = table.get_all_mappings()
        snapshot.clear()
        assert len(table) == 16
