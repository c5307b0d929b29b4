"""Application configuration model."""

from pathlib import Path

from pydantic import BaseModel, Field

from hotdeck.decks.models import Deck
from hotdeck.midi.mappings import MidiMapping
from hotdeck.utils.persistence import PydanticPersistence

DEFAULT_CONFIG_DIR = Path.home() / ".hotdeck"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.json"


def _name_contains(text: str | None):
    if not text:
        return None
    needle = text.lower()
    return lambda name: needle in name.lower()


class AppConfig(BaseModel):
    """Application configuration and settings."""

    # Keyboard recording
    recording_idle_ms: int = Field(
        default=500, gt=0, description="Idle window that completes a hotkey recording (ms)"
    )
    key_release_grace_ms: int = Field(
        default=100, ge=0, description="Grace period after a key release before completing (ms)"
    )
    recording_timeout_s: float = Field(
        default=10.0, gt=0, description="Hard limit on a hotkey recording session (seconds)"
    )
    keyboard_listener: bool = Field(
        default=True,
        description="Listen to the global keyboard via pynput when the console starts",
    )

    # MIDI settings
    smoothing_factor: float = Field(
        default=0.1, gt=0, le=1, description="Exponential smoothing factor for volume controls"
    )
    midi_poll_interval: float = Field(
        default=2.0, gt=0, description="How often to check for MIDI device changes (seconds)"
    )
    midi_device_filter: str | None = Field(
        default=None,
        description="Only open MIDI inputs whose name contains this text (None = all ports)",
    )
    midi_feedback_output: str | None = Field(
        default=None,
        description="Send LED feedback to the first MIDI output whose name contains this text "
        "(None = feedback disabled)",
    )
    midi_mappings: dict[str, MidiMapping] = Field(
        default_factory=dict,
        description="Mapping overrides keyed by controller number or note_<n>",
    )

    # Decks
    decks: list[Deck] = Field(
        default_factory=list,
        description="Hotkey decks (the default deck is created when empty)",
    )

    def device_filter(self):
        """Port-name predicate for MidiInputHub, or None to accept every port."""
        return _name_contains(self.midi_device_filter)

    def feedback_filter(self):
        """Port-name predicate for the LED feedback output, or None when disabled."""
        return _name_contains(self.midi_feedback_output)

    @classmethod
    def load_or_default(cls, path: Path | None = None) -> "AppConfig":
        """
        Load config from file or return default.

        Args:
            path: Path to config file. If None, uses ~/.hotdeck/config.json.

        Raises:
            ConfigFileInvalidError: If config file has invalid JSON syntax
            ConfigValidationError: If config values fail validation
        """
        return PydanticPersistence.load_json_or_default(path or DEFAULT_CONFIG_PATH, cls)

    def save(self, path: Path | None = None) -> None:
        """Save config to file (with .bak backup of the previous version)."""
        PydanticPersistence.save_json(self, path or DEFAULT_CONFIG_PATH)
