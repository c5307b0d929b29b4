"""MIDI mapping table: controls to logical volume or hotkey mappings."""

import logging
from threading import Lock
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, TypeAdapter, model_validator

from .messages import MidiMessage, MidiMessageKind

logger = logging.getLogger(__name__)


class VolumeMapping(BaseModel):
    """Continuous control mapped onto a volume target (-60..0 dB)."""

    kind: Literal["volume"] = "volume"
    target: str = Field(description="Volume target, e.g. 'master' or 'mic'")
    min: int = Field(default=0, ge=0, le=127, description="Raw value mapped to -60 dB")
    max: int = Field(default=127, ge=0, le=127, description="Raw value mapped to 0 dB")

    @model_validator(mode="after")
    def check_range(self) -> "VolumeMapping":
        if self.max <= self.min:
            raise ValueError(f"max ({self.max}) must be greater than min ({self.min})")
        return self


class HotkeyMapping(BaseModel):
    """Control or pad mapped onto a logical action."""

    kind: Literal["hotkey"] = "hotkey"
    action: str = Field(description="Action name, e.g. 'playPause'")
    target: str | None = Field(default=None, description="Optional action target")


MidiMapping = Annotated[VolumeMapping | HotkeyMapping, Field(discriminator="kind")]

_mapping_adapter: TypeAdapter[VolumeMapping | HotkeyMapping] = TypeAdapter(MidiMapping)

VOLUME_TARGETS = ("master", "desktop", "mic", "discord", "browser", "game", "music", "alert")


def default_mappings() -> dict[str, VolumeMapping | HotkeyMapping]:
    """Factory mappings: volume on CC 1-8, hotkey slots on 16-23."""
    mappings: dict[str, VolumeMapping | HotkeyMapping] = {
        str(cc): VolumeMapping(target=target) for cc, target in enumerate(VOLUME_TARGETS, start=1)
    }
    mappings.update({
        "16": HotkeyMapping(action="moodSwap", target="chill"),
        "17": HotkeyMapping(action="moodSwap", target="action"),
        "18": HotkeyMapping(action="playPause"),
        "19": HotkeyMapping(action="nextSong"),
        "20": HotkeyMapping(action="prevSong"),
        "21": HotkeyMapping(action="shuffle"),
        "22": HotkeyMapping(action="mute", target="master"),
        "23": HotkeyMapping(action="soundEffect", target="applause"),
    })
    return mappings


def parse_mapping(mapping: Any) -> VolumeMapping | HotkeyMapping:
    """
    Validate a mapping given as a model or a plain dict.

    Raises:
        pydantic.ValidationError: If the mapping is malformed
    """
    if isinstance(mapping, (VolumeMapping, HotkeyMapping)):
        return mapping
    return _mapping_adapter.validate_python(mapping)


def mapping_key(key: int | str) -> str:
    """Normalize a mapping key: controller numbers become strings."""
    return str(key).strip()


def routing_key(message: MidiMessage) -> str | None:
    """
    Key used to look up a message during normal dispatch.

    Control change keys by controller number, note-on with velocity > 0 by
    "note_<n>". Everything else (note-off, zero-velocity note-on, program
    change, pitch bend...) has no mapping.
    """
    if message.kind is MidiMessageKind.CONTROL_CHANGE:
        return str(message.controller)
    if message.is_press:
        return f"note_{message.note}"
    return None


def mapping_key_for(message: MidiMessage) -> str | None:
    """
    Suggest a table key for a message captured in learning mode.

    Unlike routing_key, releases are accepted so a pad can be learned from
    either edge.
    """
    if message.kind is MidiMessageKind.CONTROL_CHANGE:
        return str(message.controller)
    if message.kind in (MidiMessageKind.NOTE_ON, MidiMessageKind.NOTE_OFF):
        return f"note_{message.note}"
    return None


class MidiMappingTable:
    """
    Mapping key to MIDI mapping, pre-populated with factory defaults.

    Entries can be overridden, added or removed per key; removing a factory
    key leaves that control unmapped until reset_to_defaults().

    Thread Safety:
        All operations are thread-safe; lookups happen on MIDI I/O threads
        while the UI edits the table.
    """

    def __init__(self, overrides: dict[str, Any] | None = None):
        """
        Initialize the table.

        Args:
            overrides: Optional user mappings applied on top of the defaults
        """
        self._lock = Lock()
        self._mappings = default_mappings()
        for key, mapping in (overrides or {}).items():
            self.set_mapping(key, mapping)

    def set_mapping(self, key: int | str, mapping: Any) -> VolumeMapping | HotkeyMapping:
        """
        Set or replace the mapping for a key.

        Args:
            key: Controller number or "note_<n>"
            mapping: VolumeMapping, HotkeyMapping or an equivalent dict

        Returns:
            The validated mapping

        Raises:
            pydantic.ValidationError: If the mapping is malformed
        """
        parsed = parse_mapping(mapping)
        key = mapping_key(key)
        with self._lock:
            self._mappings[key] = parsed
        logger.info(f"MIDI mapping set: {key} -> {parsed!r}")
        return parsed

    def remove_mapping(self, key: int | str) -> bool:
        """
        Remove the mapping for a key.

        Returns:
            True if a mapping was removed
        """
        key = mapping_key(key)
        with self._lock:
            removed = self._mappings.pop(key, None)
        if removed is not None:
            logger.info(f"MIDI mapping removed: {key}")
        return removed is not None

    def get_mapping(self, key: int | str) -> VolumeMapping | HotkeyMapping | None:
        """Look up the mapping for a key."""
        with self._lock:
            return self._mappings.get(mapping_key(key))

    def lookup(self, message: MidiMessage) -> VolumeMapping | HotkeyMapping | None:
        """Find the mapping that handles a decoded message, if any."""
        key = routing_key(message)
        if key is None:
            return None
        return self.get_mapping(key)

    def get_all_mappings(self) -> dict[str, VolumeMapping | HotkeyMapping]:
        """Snapshot of every mapping, defaults included."""
        with self._lock:
            return dict(self._mappings)

    def overrides(self) -> dict[str, VolumeMapping | HotkeyMapping]:
        """Entries that differ from or extend the factory defaults."""
        defaults = default_mappings()
        with self._lock:
            return {k: v for k, v in self._mappings.items() if defaults.get(k) != v}

    def reset_to_defaults(self) -> None:
        """Drop every user change and restore the factory mappings."""
        with self._lock:
            self._mappings = default_mappings()
        logger.info("MIDI mappings reset to defaults")

    def clear(self) -> None:
        """Remove every mapping, defaults included."""
        with self._lock:
            self._mappings.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._mappings)

    def __contains__(self, key: int | str) -> bool:
        return self.get_mapping(key) is not None
