"""MIDI: decoding, mapping table, smoothing, capture, input ports and LED feedback output."""

from .capture import LearningCallback, MidiCapture
from .mappings import (
    HotkeyMapping,
    MidiMapping,
    MidiMappingTable,
    VolumeMapping,
    default_mappings,
    mapping_key_for,
    parse_mapping,
    routing_key,
)
from .messages import MidiMessage, MidiMessageKind, decode
from .output import MidiFeedbackOutput
from .ports import MidiInputHub
from .smoothing import ValueSmoother, midi_to_decibel

__all__ = [
    "HotkeyMapping",
    "LearningCallback",
    "MidiCapture",
    "MidiFeedbackOutput",
    "MidiInputHub",
    "MidiMapping",
    "MidiMappingTable",
    "MidiMessage",
    "MidiMessageKind",
    "ValueSmoother",
    "VolumeMapping",
    "decode",
    "default_mappings",
    "mapping_key_for",
    "midi_to_decibel",
    "parse_mapping",
    "routing_key",
]
