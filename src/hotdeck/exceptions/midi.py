"""MIDI-related exceptions.

- MidiError: Base class for MIDI errors
- MidiUnavailableError: No usable MIDI backend (access denied or unsupported)
- InvalidMidiMessageError: Raw payload cannot be decoded
"""

from typing import Optional

from .base import HotdeckError


class MidiError(HotdeckError):
    """MIDI subsystem error."""
    pass


class MidiUnavailableError(MidiError):
    """MIDI access is denied or not supported on this system."""

    def __init__(self, original_error: Optional[str] = None):
        """
        Initialize MIDI unavailable error.

        Args:
            original_error: Error reported by the MIDI backend
        """
        technical = "MIDI backend unavailable"
        if original_error:
            technical += f": {original_error}"

        super().__init__(
            user_message="MIDI is not available. Continuing with keyboard hotkeys only.",
            technical_message=technical,
            recoverable=True,
            recovery_hint=(
                "Install a MIDI backend (pip install python-rtmidi) and check that "
                "your user may access MIDI devices.\n"
                "Run 'hotdeck midi list' to verify."
            )
        )
        self.original_error = original_error


class InvalidMidiMessageError(MidiError):
    """A raw MIDI payload has the wrong shape."""

    def __init__(self, data: tuple[int, ...] | list[int], reason: str):
        """
        Initialize invalid MIDI message error.

        Args:
            data: The offending raw bytes
            reason: Why the payload was rejected
        """
        super().__init__(
            user_message=f"Invalid MIDI message: {reason}",
            technical_message=f"Invalid MIDI message {list(data)}: {reason}",
            recoverable=True
        )
        self.data = tuple(data)
        self.reason = reason
