"""Hotkey registry: normalized binding strings to opaque binding IDs."""

import logging
from threading import Lock

from .binding import canonical_binding, clean_binding, is_valid_binding

logger = logging.getLogger(__name__)


class HotkeyRegistry:
    """
    One-to-one table of hotkey bindings to binding IDs.

    Bindings are stored lowercased and trimmed, and compared in their
    order-independent canonical form. A binding already held by one ID can't
    be taken by another: that is a conflict, reported as a False result so
    the caller can tell the user and let them pick another chord.

    Binding IDs are opaque to the registry. The deck router uses
    ``deck_<deck id>`` and ``button_<deck id>_<row>-<col>``.

    Thread Safety:
        All operations are thread-safe; registration can come from the UI
        while the capture path is matching on another thread.
    """

    def __init__(self) -> None:
        # canonical form -> (registered binding, binding ID)
        self._entries: dict[str, tuple[str, str]] = {}
        self._lock = Lock()

    def register(self, binding_id: str, binding: str | None) -> bool:
        """
        Register a binding for an ID.

        Args:
            binding_id: Owner of the binding
            binding: Hotkey string, e.g. "Ctrl+Shift+D"

        Returns:
            True on success (also when the ID already holds this binding),
            False for blank/invalid bindings or a conflict with another ID
        """
        if not is_valid_binding(binding):
            logger.warning(f"Invalid hotkey binding {binding!r} for ID: {binding_id}")
            return False

        cleaned = clean_binding(binding)
        canonical = canonical_binding(cleaned)

        with self._lock:
            existing = self._entries.get(canonical)
            if existing is not None and existing[1] != binding_id:
                logger.warning(
                    f"Hotkey conflict: {cleaned} already registered for {existing[1]}, "
                    f"rejected for {binding_id}"
                )
                return False
            self._entries[canonical] = (cleaned, binding_id)

        logger.info(f"Registered hotkey {cleaned} for ID: {binding_id}")
        return True

    def unregister(self, binding_id: str) -> bool:
        """
        Remove every binding owned by an ID.

        Returns:
            True if anything was removed
        """
        with self._lock:
            owned = [key for key, (_, owner) in self._entries.items() if owner == binding_id]
            removed = [self._entries.pop(key)[0] for key in owned]

        for binding in removed:
            logger.info(f"Unregistered hotkey {binding} for ID: {binding_id}")
        return bool(removed)

    def unregister_by_binding(self, binding: str | None) -> bool:
        """
        Remove the entry matching a binding, whoever owns it.

        Returns:
            True if a binding was removed
        """
        if not is_valid_binding(binding):
            return False

        with self._lock:
            entry = self._entries.pop(canonical_binding(binding), None)

        if entry is None:
            return False
        logger.info(f"Unregistered hotkey {entry[0]} (owner: {entry[1]})")
        return True

    def match(self, candidate: str | None) -> str | None:
        """
        Find the ID owning a binding.

        Args:
            candidate: Binding built from a key event

        Returns:
            The owning binding ID, or None
        """
        if not is_valid_binding(candidate):
            return None

        with self._lock:
            entry = self._entries.get(canonical_binding(candidate))
        return entry[1] if entry else None

    def get_all(self) -> dict[str, str]:
        """Snapshot of all registrations as {binding: binding ID}."""
        with self._lock:
            return {binding: owner for binding, owner in self._entries.values()}

    def clear(self) -> None:
        """Remove every registration."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        if count:
            logger.debug(f"Cleared {count} hotkey registration(s)")

    def __contains__(self, binding: str) -> bool:
        return self.match(binding) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
