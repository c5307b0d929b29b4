"""Action dispatch: categories, payloads and the publish/subscribe bus."""

from .dispatcher import ActionDispatcher
from .events import (
    DeckAction,
    DeckSwitch,
    DeviceStateChange,
    DispatchEvent,
    HotkeyAction,
    VolumeChange,
)
from .subscribers import Handler, SubscriberList

__all__ = [
    "ActionDispatcher",
    "DeckAction",
    "DeckSwitch",
    "DeviceStateChange",
    "DispatchEvent",
    "Handler",
    "HotkeyAction",
    "SubscriberList",
    "VolumeChange",
]
