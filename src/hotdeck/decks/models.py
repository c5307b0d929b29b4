"""Deck and button models."""

import re
from enum import Enum

from pydantic import BaseModel, Field, model_validator

DECK_ID_PATTERN = r"^[a-z0-9-]+$"
BUTTON_KEY_PATTERN = re.compile(r"^(\d+)-(\d+)$")


class ButtonType(str, Enum):
    """What a deck button does when executed."""

    HOTKEY = "hotkey"  # Fire a logical action (playPause, nextSong, custom command...)
    VOLUME = "volume"  # Set a volume target to a fixed level
    NAVIGATION = "navigation"  # Switch to another deck
    OBS = "obs"  # Scene or source action for the broadcasting tool
    MUSIC = "music"  # Playback action for the music player


class TriggerType(str, Enum):
    """Which inputs switch to a deck."""

    NONE = "none"
    KEYBOARD = "keyboard"
    MIDI = "midi"
    BOTH = "both"


class DeckButton(BaseModel):
    """A single bindable action slot in a deck grid."""

    type: ButtonType = Field(description="Action type")
    action: str | None = Field(default=None, description="Action name, e.g. 'playPause'")
    target: str | None = Field(default=None, description="Action target, e.g. volume channel")
    target_deck: str | None = Field(default=None, description="Deck to switch to (navigation)")
    volume_value: int = Field(default=64, ge=0, le=127, description="Volume level (volume)")
    custom_command: str | None = Field(default=None, description="Free-form command (hotkey)")
    obs_scene: str | None = Field(default=None, description="OBS scene (obs)")
    obs_source: str | None = Field(default=None, description="OBS source (obs)")
    label: str = Field(default="", description="Caption shown on the button")
    icon: str | None = Field(default=None, description="Icon name")
    color: str = Field(default="gray", description="Button color")
    keyboard_trigger: str | None = Field(default=None, description="Hotkey executing this button")

    @property
    def resolved_target(self) -> str | None:
        """Target used when executing: OBS buttons prefer scene, then source."""
        if self.type is ButtonType.OBS:
            return self.obs_scene or self.obs_source or self.target
        return self.target


class Deck(BaseModel):
    """A named grid of buttons keyed by "row-col"."""

    id: str = Field(pattern=DECK_ID_PATTERN, description="Deck identifier (a-z, 0-9, -)")
    name: str = Field(min_length=1, description="Display name")
    description: str = Field(default="", description="Free-form description")
    rows: int = Field(default=2, ge=1, le=16, description="Grid rows")
    cols: int = Field(default=4, ge=1, le=16, description="Grid columns")
    color: str = Field(default="blue", description="Deck color")
    category: str = Field(default="general", description="Category used for filtering")
    trigger_type: TriggerType = Field(default=TriggerType.NONE, description="Deck switch inputs")
    keyboard_trigger: str | None = Field(default=None, description="Hotkey switching to this deck")
    buttons: dict[str, DeckButton] = Field(default_factory=dict, description="Buttons by 'row-col'")

    @model_validator(mode="after")
    def check_button_positions(self) -> "Deck":
        for key in self.buttons:
            self.check_position(key)
        return self

    def check_position(self, key: str) -> tuple[int, int]:
        """
        Validate a "row-col" button key against the grid.

        Raises:
            ValueError: If the key is malformed or outside the grid
        """
        match = BUTTON_KEY_PATTERN.match(key)
        if not match:
            raise ValueError(f"Invalid button key {key!r}, expected 'row-col'")
        row, col = int(match.group(1)), int(match.group(2))
        if row >= self.rows or col >= self.cols:
            raise ValueError(f"Button {key} is outside the {self.rows}x{self.cols} grid")
        return row, col

    @property
    def uses_keyboard_trigger(self) -> bool:
        """True if the deck's own hotkey should be registered."""
        return bool(self.keyboard_trigger) and self.trigger_type in (
            TriggerType.KEYBOARD,
            TriggerType.BOTH,
        )

    @staticmethod
    def slugify(name: str) -> str:
        """Derive a deck ID from a display name."""
        return re.sub(r"[^a-z0-9-]", "-", name.strip().lower())

    @classmethod
    def default(cls) -> "Deck":
        """The deck created when no decks are configured."""
        return cls(
            id="default",
            name="Default Deck",
            description="Default hotkey deck with basic controls",
            rows=2,
            cols=4,
            trigger_type=TriggerType.KEYBOARD,
            keyboard_trigger="ctrl+shift+d",
            buttons={
                "0-0": DeckButton(
                    type=ButtonType.HOTKEY, action="playPause", label="Play/Pause",
                    icon="play", color="green", keyboard_trigger="space",
                ),
                "0-1": DeckButton(
                    type=ButtonType.HOTKEY, action="nextSong", label="Next",
                    icon="skip-forward", color="blue", keyboard_trigger="ctrl+right",
                ),
                "0-2": DeckButton(
                    type=ButtonType.HOTKEY, action="prevSong", label="Previous",
                    icon="skip-back", color="blue", keyboard_trigger="ctrl+left",
                ),
                "0-3": DeckButton(
                    type=ButtonType.VOLUME, target="master", label="Master",
                    icon="volume-2", color="purple",
                ),
                "1-0": DeckButton(
                    type=ButtonType.NAVIGATION, action="switchDeck", target_deck="settings",
                    label="Settings", icon="settings", color="gray",
                ),
                "1-1": DeckButton(
                    type=ButtonType.VOLUME, target="mic", label="Mic", icon="mic", color="red",
                ),
            },
        )
