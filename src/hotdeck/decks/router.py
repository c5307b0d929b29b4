"""Deck router: resolves triggered hotkeys to deck switches and button actions."""

import logging
from threading import RLock

from hotdeck.dispatch import (
    ActionDispatcher,
    DeckAction,
    DeckSwitch,
    DispatchEvent,
    HotkeyAction,
    VolumeChange,
)
from hotdeck.hotkeys import HotkeyRegistry
from hotdeck.midi.smoothing import midi_to_decibel

from .models import ButtonType, Deck, DeckButton

logger = logging.getLogger(__name__)

DECK_PREFIX = "deck_"
BUTTON_PREFIX = "button_"


def deck_binding_id(deck_id: str) -> str:
    """Binding ID owning a deck's own hotkey."""
    return f"{DECK_PREFIX}{deck_id}"


def button_binding_id(deck_id: str, button_key: str) -> str:
    """Binding ID owning a button's hotkey."""
    return f"{BUTTON_PREFIX}{deck_id}_{button_key}"


def parse_binding_id(binding_id: str) -> tuple[str, str | None] | None:
    """
    Split a binding ID into (deck_id, button_key).

    Returns:
        (deck_id, None) for deck IDs, (deck_id, button_key) for button IDs,
        None for IDs the router doesn't own
    """
    if binding_id.startswith(DECK_PREFIX):
        return binding_id[len(DECK_PREFIX):], None
    if binding_id.startswith(BUTTON_PREFIX):
        deck_id, _, button_key = binding_id[len(BUTTON_PREFIX):].partition("_")
        if deck_id and button_key:
            return deck_id, button_key
    return None


class DeckRouter:
    """
    Owns the decks and executes them in response to triggered hotkeys.

    Deck and button hotkeys live in the shared HotkeyRegistry. The router
    keeps them in sync with its decks: the old binding is unregistered
    before a replacement is registered, and deleting a deck or button
    unregisters everything it owned, so a chord never stays blocked by an
    entry nobody uses.

    Execution publishes a DECK_ACTION for every button, plus the concrete
    effect of the button type (HOTKEY_ACTION, VOLUME_CHANGE or a deck switch).
    """

    def __init__(self, registry: HotkeyRegistry, dispatcher: ActionDispatcher):
        """
        Initialize the router and subscribe to HOTKEY_TRIGGERED.

        Args:
            registry: Hotkey registry holding deck/button bindings
            dispatcher: Dispatcher to subscribe to and publish actions on
        """
        self._registry = registry
        self._dispatcher = dispatcher
        self._lock = RLock()
        self._decks: dict[str, Deck] = {}
        self._active_deck: str | None = None
        self._dispatcher.subscribe(DispatchEvent.HOTKEY_TRIGGERED, self.handle_hotkey)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def active_deck_id(self) -> str | None:
        with self._lock:
            return self._active_deck

    @property
    def active_deck(self) -> Deck | None:
        with self._lock:
            return self._decks.get(self._active_deck) if self._active_deck else None

    @property
    def decks(self) -> dict[str, Deck]:
        """Snapshot of all decks by ID."""
        with self._lock:
            return dict(self._decks)

    def get_deck(self, deck_id: str) -> Deck | None:
        with self._lock:
            return self._decks.get(deck_id)

    def categories(self) -> list[str]:
        """Sorted deck categories."""
        with self._lock:
            return sorted({deck.category for deck in self._decks.values()})

    def decks_by_category(self, category: str = "all") -> list[Deck]:
        """Decks in a category ("all" returns every deck)."""
        with self._lock:
            decks = list(self._decks.values())
        if category == "all":
            return decks
        return [deck for deck in decks if deck.category == category]

    def __contains__(self, deck_id: str) -> bool:
        with self._lock:
            return deck_id in self._decks

    def __len__(self) -> int:
        with self._lock:
            return len(self._decks)

    # ------------------------------------------------------------------
    # Deck management
    # ------------------------------------------------------------------

    def add_deck(self, deck: Deck) -> bool:
        """
        Add a deck and register its hotkeys.

        The first deck added becomes active.

        Returns:
            True if every hotkey of the deck was registered, False if any
            conflicted (the deck is added either way)

        Raises:
            ValueError: If a deck with the same ID already exists
        """
        with self._lock:
            if deck.id in self._decks:
                raise ValueError(f"A deck with ID {deck.id!r} already exists")
            self._decks[deck.id] = deck
            ok = self._register_deck_bindings(deck)
            activate = self._active_deck is None

        logger.info(f"Deck added: {deck.id} ({len(deck.buttons)} buttons)")
        if activate:
            self.switch_to_deck(deck.id)
        return ok

    def update_deck(self, deck: Deck) -> bool:
        """
        Replace an existing deck, re-registering its hotkeys.

        Returns:
            True if every new hotkey was registered

        Raises:
            KeyError: If the deck doesn't exist
        """
        with self._lock:
            old = self._decks.get(deck.id)
            if old is None:
                raise KeyError(deck.id)
            self._unregister_deck_bindings(old)
            self._decks[deck.id] = deck
            ok = self._register_deck_bindings(deck)

        logger.info(f"Deck updated: {deck.id}")
        return ok

    def delete_deck(self, deck_id: str) -> bool:
        """
        Delete a deck and every hotkey it owned.

        If it was active, the first remaining deck becomes active.

        Returns:
            True if the deck existed
        """
        with self._lock:
            deck = self._decks.pop(deck_id, None)
            if deck is None:
                return False
            self._unregister_deck_bindings(deck)

            next_deck = None
            if self._active_deck == deck_id:
                self._active_deck = None
                next_deck = next(iter(self._decks), None)

        logger.info(f"Deck deleted: {deck_id}")
        if next_deck is not None:
            self.switch_to_deck(next_deck)
        return True

    def set_button(self, deck_id: str, button_key: str, button: DeckButton | None) -> bool:
        """
        Create, replace or (with None) remove a button.

        The old button hotkey is unregistered before the new one is registered.

        Returns:
            True unless the new button's hotkey conflicted with another binding

        Raises:
            KeyError: If the deck doesn't exist
            ValueError: If the button key is outside the deck grid
        """
        with self._lock:
            deck = self._decks.get(deck_id)
            if deck is None:
                raise KeyError(deck_id)
            deck.check_position(button_key)

            binding_id = button_binding_id(deck_id, button_key)
            self._registry.unregister(binding_id)

            buttons = dict(deck.buttons)
            if button is None:
                buttons.pop(button_key, None)
            else:
                buttons[button_key] = button
            self._decks[deck_id] = deck.model_copy(update={"buttons": buttons})

            if button is None or not button.keyboard_trigger:
                return True
            return self._registry.register(binding_id, button.keyboard_trigger)

    def create_default_deck(self) -> Deck:
        """Add the default deck (replacing one with the same ID) and activate it."""
        deck = Deck.default()
        if deck.id in self:
            self.update_deck(deck)
        else:
            self.add_deck(deck)
        self.switch_to_deck(deck.id)
        return deck

    def switch_to_deck(self, deck_id: str) -> bool:
        """
        Make a deck active.

        Returns:
            False if the deck doesn't exist
        """
        with self._lock:
            if deck_id not in self._decks:
                logger.debug(f"Cannot switch to unknown deck: {deck_id}")
                return False
            previous = self._active_deck
            self._active_deck = deck_id

        logger.info(f"Switched to deck: {deck_id}")
        self._dispatcher.publish(DispatchEvent.DECK_SWITCHED, DeckSwitch(previous=previous, current=deck_id))
        return True

    def _register_deck_bindings(self, deck: Deck) -> bool:
        ok = True
        if deck.uses_keyboard_trigger:
            ok = self._registry.register(deck_binding_id(deck.id), deck.keyboard_trigger) and ok
        for button_key, button in deck.buttons.items():
            if button.keyboard_trigger:
                ok = self._registry.register(
                    button_binding_id(deck.id, button_key), button.keyboard_trigger
                ) and ok
        return ok

    def _unregister_deck_bindings(self, deck: Deck) -> None:
        self._registry.unregister(deck_binding_id(deck.id))
        for button_key in deck.buttons:
            self._registry.unregister(button_binding_id(deck.id, button_key))

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def handle_hotkey(self, binding_id: str) -> None:
        """HOTKEY_TRIGGERED handler: switch decks or execute buttons."""
        parsed = parse_binding_id(binding_id)
        if parsed is None:
            logger.debug(f"Ignoring hotkey not owned by a deck: {binding_id}")
            return

        deck_id, button_key = parsed
        if button_key is None:
            self.switch_to_deck(deck_id)
        else:
            self.execute_button(deck_id, button_key)

    def execute_button(self, deck_id: str, button_key: str) -> bool:
        """
        Execute a button's action.

        Returns:
            False if the deck or button doesn't exist
        """
        with self._lock:
            deck = self._decks.get(deck_id)
            button = deck.buttons.get(button_key) if deck else None

        if button is None:
            logger.debug(f"No button {button_key} in deck {deck_id}")
            return False

        logger.info(f"Executing button {deck_id}/{button_key}: {button.type.value} {button.action}")

        match button.type:
            case ButtonType.HOTKEY:
                self._dispatcher.publish(
                    DispatchEvent.HOTKEY_ACTION,
                    HotkeyAction(
                        action=button.action or "",
                        target=button.target,
                        custom_command=button.custom_command,
                        source="deck",
                    ),
                )
            case ButtonType.VOLUME:
                self._execute_volume(button)
            case ButtonType.NAVIGATION:
                if button.action == "switchDeck" and button.target_deck:
                    self.switch_to_deck(button.target_deck)
            case ButtonType.OBS | ButtonType.MUSIC:
                pass

        self._dispatcher.publish(
            DispatchEvent.DECK_ACTION,
            DeckAction(
                type=button.type,
                action=button.action,
                target=button.resolved_target,
                deck_id=deck_id,
                button_key=button_key,
                custom_command=button.custom_command,
            ),
        )
        return True

    def _execute_volume(self, button: DeckButton) -> None:
        if not button.target:
            logger.warning("Volume button without target ignored")
            return

        db_value = midi_to_decibel(button.volume_value)
        self._dispatcher.publish(
            DispatchEvent.VOLUME_CHANGE,
            VolumeChange(
                target=button.target,
                value=round(db_value, 2),
                midi_value=button.volume_value,
                db_value=db_value,
                source="deck",
            ),
        )

    def close(self) -> None:
        """Unsubscribe, unregister every deck hotkey and forget all decks."""
        self._dispatcher.unsubscribe(DispatchEvent.HOTKEY_TRIGGERED, self.handle_hotkey)
        with self._lock:
            for deck in self._decks.values():
                self._unregister_deck_bindings(deck)
            self._decks.clear()
            self._active_deck = None
        logger.debug("DeckRouter closed")
