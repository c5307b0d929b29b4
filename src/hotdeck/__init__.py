"""hotdeck: keyboard and MIDI input routing for streaming-control consoles."""

__version__ = "0.1.0"

from .core import StreamConsole
from .dispatch import ActionDispatcher, DispatchEvent
from .models import AppConfig

__all__ = ["ActionDispatcher", "AppConfig", "DispatchEvent", "StreamConsole"]
