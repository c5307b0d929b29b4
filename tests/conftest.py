"""Pytest fixtures for tests."""

from dataclasses import dataclass, field

import pytest

from hotdeck.dispatch import ActionDispatcher, DispatchEvent
from hotdeck.hotkeys import HotkeyRegistry, KeyEvent


@dataclass
class ManualCall:
    """Pending call scheduled on a ManualScheduler."""

    due: float
    callback: object
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class ManualScheduler:
    """Scheduler driven by advance() instead of wall-clock time."""

    now: float = 0.0
    calls: list[ManualCall] = field(default_factory=list)

    def schedule(self, delay, callback):
        call = ManualCall(self.now + delay, callback)
        self.calls.append(call)
        return call

    def advance(self, seconds: float) -> None:
        """Move the clock forward, running due calls in order."""
        target = self.now + seconds
        while True:
            due = [c for c in self.calls if not c.cancelled and c.due <= target]
            if not due:
                break
            call = min(due, key=lambda c: c.due)
            self.calls.remove(call)
            self.now = call.due
            call.callback()
        self.now = target

    @property
    def pending(self) -> list[ManualCall]:
        return [c for c in self.calls if not c.cancelled]


class Recorder:
    """Collects payloads published on a dispatcher, per category."""

    def __init__(self, dispatcher: ActionDispatcher):
        self.events: list[tuple[DispatchEvent, object]] = []
        for category in DispatchEvent:
            dispatcher.subscribe(category, self._make_handler(category))

    def _make_handler(self, category):
        def handler(payload):
            self.events.append((category, payload))

        return handler

    def of(self, category: DispatchEvent) -> list:
        return [payload for cat, payload in self.events if cat is category]

    def categories(self) -> list[DispatchEvent]:
        return [cat for cat, _ in self.events]


def key(name: str, **modifiers) -> KeyEvent:
    """Shorthand for a KeyEvent with a logical key value."""
    return KeyEvent(key=name, **modifiers)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def dispatcher():
    return ActionDispatcher()


@pytest.fixture
def registry():
    return HotkeyRegistry()


@pytest.fixture
def recorder(dispatcher):
    return Recorder(dispatcher)
