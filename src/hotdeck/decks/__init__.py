"""Hotkey decks: grid models and the router executing them."""

from .models import ButtonType, Deck, DeckButton, TriggerType
from .router import DeckRouter, button_binding_id, deck_binding_id, parse_binding_id

__all__ = [
    "ButtonType",
    "Deck",
    "DeckButton",
    "DeckRouter",
    "TriggerType",
    "button_binding_id",
    "deck_binding_id",
    "parse_binding_id",
]
