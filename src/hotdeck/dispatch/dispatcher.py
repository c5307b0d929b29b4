"""Action dispatcher: the fan-out point between capture and consumers."""

import logging
from typing import Any

from .events import DispatchEvent
from .subscribers import Handler, SubscriberList

logger = logging.getLogger(__name__)


class ActionDispatcher:
    """
    Typed publish/subscribe bus keyed by DispatchEvent.

    Both capture paths (keyboard and MIDI) and the deck router publish here;
    the deck router, volume mixer, scene switcher and playback controller
    subscribe. Publication is synchronous: every current subscriber of the
    category runs in subscription order before publish() returns, and a
    failing subscriber never stops the ones after it.

    Example:
        ```python
        dispatcher = ActionDispatcher()
        dispatcher.subscribe(DispatchEvent.HOTKEY_TRIGGERED, router.handle_hotkey)
        dispatcher.publish(DispatchEvent.HOTKEY_TRIGGERED, "deck_default")
        ```
    """

    def __init__(self) -> None:
        """Create one subscriber list per category."""
        self._subscribers: dict[DispatchEvent, SubscriberList] = {
            category: SubscriberList(category.value) for category in DispatchEvent
        }

    @staticmethod
    def _category(category: DispatchEvent | str) -> DispatchEvent:
        """Resolve a category given as enum member or its string value."""
        try:
            return DispatchEvent(category)
        except ValueError:
            raise ValueError(f"Unknown dispatch category: {category!r}") from None

    def subscribe(self, category: DispatchEvent | str, handler: Handler) -> None:
        """
        Append a handler for a category.

        Args:
            category: Dispatch category (enum member or e.g. "hotkeyTriggered")
            handler: Callable receiving the category's payload

        Raises:
            ValueError: If the category is unknown
        """
        self._subscribers[self._category(category)].append(handler)

    def unsubscribe(self, category: DispatchEvent | str, handler: Handler) -> bool:
        """
        Remove a previously subscribed handler.

        Returns:
            True if the handler was found and removed
        """
        return self._subscribers[self._category(category)].remove(handler)

    def publish(self, category: DispatchEvent | str, payload: Any = None) -> int:
        """
        Invoke every subscriber of the category with the payload.

        Returns:
            Number of subscribers that handled the payload without raising
        """
        event = self._category(category)
        logger.debug(f"Publishing {event.value}: {payload!r}")
        return self._subscribers[event].notify(payload)

    def subscriber_count(self, category: DispatchEvent | str) -> int:
        """Number of handlers subscribed to a category."""
        return len(self._subscribers[self._category(category)])

    def clear(self) -> None:
        """Drop every subscription in every category."""
        for subscribers in self._subscribers.values():
            subscribers.clear()
