"""Thread-safe subscriber list for a single dispatch category.

Adapted from the generic observer manager pattern: registration happens under
a lock, notification works on a snapshot so handlers may subscribe or
unsubscribe while a publication is in flight.
"""

import logging
from collections.abc import Callable
from threading import Lock
from typing import Any

logger = logging.getLogger(__name__)

Handler = Callable[[Any], None]


class SubscriberList:
    """
    Ordered list of handlers with isolated, logged invocation.

    Unlike a set of observers, the same handler may be subscribed more than
    once and is then called once per subscription.
    """

    def __init__(self, category: str):
        """
        Initialize the subscriber list.

        Args:
            category: Category name used in log messages
        """
        self._handlers: list[Handler] = []
        self._lock = Lock()
        self._category = category

    def append(self, handler: Handler) -> None:
        """Append a handler to the end of the list."""
        with self._lock:
            self._handlers.append(handler)
        logger.debug(f"Subscribed to {self._category}: {handler!r}")

    def remove(self, handler: Handler) -> bool:
        """
        Remove the first subscription of a handler.

        Returns:
            True if the handler was subscribed
        """
        with self._lock:
            for i, existing in enumerate(self._handlers):
                if existing is handler or existing == handler:
                    del self._handlers[i]
                    logger.debug(f"Unsubscribed from {self._category}: {handler!r}")
                    return True

        logger.warning(f"Attempted to unsubscribe unknown {self._category} handler: {handler!r}")
        return False

    def notify(self, payload: Any) -> int:
        """
        Call every handler with the payload, in subscription order.

        Exceptions raised by a handler are logged with the category and the
        handler, then the next handler runs.

        Returns:
            Number of handlers that completed without raising
        """
        with self._lock:
            handlers = list(self._handlers)

        delivered = 0
        for handler in handlers:
            try:
                handler(payload)
                delivered += 1
            except Exception as e:
                logger.error(
                    f"Error in {self._category} handler {handler!r}: {e}",
                    exc_info=True,
                )
        return delivered

    def clear(self) -> None:
        """Remove all handlers."""
        with self._lock:
            count = len(self._handlers)
            self._handlers.clear()
        if count > 0:
            logger.debug(f"Cleared {count} {self._category} handler(s)")

    def __contains__(self, handler: Handler) -> bool:
        with self._lock:
            return any(existing is handler or existing == handler for existing in self._handlers)

    def __len__(self) -> int:
        with self._lock:
            return len(self._handlers)
