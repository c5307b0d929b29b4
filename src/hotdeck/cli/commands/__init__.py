"""CLI commands for hotdeck."""

from .config import config
from .keys import keys_group
from .midi import midi_group
from .run import run

__all__ = ["config", "keys_group", "midi_group", "run"]
