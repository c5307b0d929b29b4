"""
Custom exception hierarchy for hotdeck.

## Exception Hierarchy

```
HotdeckError (base)
├── ConfigurationError
│   ├── ConfigFileInvalidError
│   └── ConfigValidationError
└── MidiError
    ├── MidiUnavailableError
    └── InvalidMidiMessageError
```

Hotkey conflicts are not exceptions: registration reports them as a
False result so a form can show a message and let the user retry.

All custom exceptions inherit from `HotdeckError`, which provides
`user_message`, `technical_message`, `recoverable` and `recovery_hint`.

See `hotdeck.exceptions.handlers` for utilities to handle these exceptions systematically.
"""

from .base import HotdeckError
from .config import ConfigFileInvalidError, ConfigurationError, ConfigValidationError
from .handlers import (
    ErrorCollector,
    ErrorContext,
    collect_errors,
    format_error_for_display,
    wrap_pydantic_error,
)
from .midi import InvalidMidiMessageError, MidiError, MidiUnavailableError

__all__ = [
    "ConfigFileInvalidError",
    "ConfigValidationError",
    # Config
    "ConfigurationError",
    "ErrorCollector",
    "ErrorContext",
    # Base
    "HotdeckError",
    "InvalidMidiMessageError",
    # MIDI
    "MidiError",
    "MidiUnavailableError",
    "collect_errors",
    "format_error_for_display",
    # Handlers
    "wrap_pydantic_error",
]
