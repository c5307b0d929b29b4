"""Core console."""

from .console import StreamConsole

__all__ = ["StreamConsole"]
