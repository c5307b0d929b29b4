"""
Stream console: owner of every input routing service.

The console wires keyboard capture, MIDI capture, the mapping table, the
deck router and MIDI port monitoring around one ActionDispatcher, and
exposes the operations an embedding UI needs. It is constructed
explicitly; there are no module-level singletons.
"""

import logging
import time
from collections.abc import Sequence
from typing import Any

import mido

from hotdeck.decks import Deck, DeckRouter
from hotdeck.dispatch import ActionDispatcher, DeviceStateChange, DispatchEvent, Handler
from hotdeck.exceptions import ErrorContext, MidiUnavailableError, collect_errors
from hotdeck.hotkeys import (
    HotkeyRegistry,
    KeyboardCapture,
    KeyboardSource,
    KeyEvent,
    PynputKeyboardSource,
    RecordingCallback,
)
from hotdeck.midi import (
    HotkeyMapping,
    LearningCallback,
    MidiCapture,
    MidiFeedbackOutput,
    MidiInputHub,
    MidiMappingTable,
    MidiMessage,
    VolumeMapping,
)
from hotdeck.models import AppConfig
from hotdeck.utils import Scheduler

logger = logging.getLogger(__name__)


class StreamConsole:
    """
    Input routing engine for a streaming-control console.

    Architecture:
        StreamConsole (this class)
        ├── dispatcher: ActionDispatcher (publish/subscribe bus)
        ├── registry: HotkeyRegistry <- keyboard: KeyboardCapture
        ├── mappings: MidiMappingTable <- midi: MidiCapture <- hub: MidiInputHub
        ├── feedback: MidiFeedbackOutput (optional LED feedback)
        └── decks: DeckRouter (subscribed to hotkeyTriggered)

    Example:
        ```python
        with StreamConsole(AppConfig.load_or_default()) as console:
            console.on("hotkeyAction", lambda action: print(action))
            console.start()
            ...
        ```
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        scheduler: Scheduler | None = None,
        keyboard_source: KeyboardSource | None = None,
        hub: MidiInputHub | None = None,
        feedback: MidiFeedbackOutput | None = None,
    ):
        """
        Build every service from the configuration.

        Args:
            config: Application configuration (defaults when None)
            scheduler: Timer source for keyboard recording (threading timers when None)
            keyboard_source: Keyboard source attached on start (pynput when None
                and config.keyboard_listener is set)
            hub: MIDI port hub (built from the config when None)
            feedback: LED feedback output (built when config.midi_feedback_output
                is set, otherwise feedback is disabled)
        """
        self.config = config or AppConfig()
        self._closed = False
        self._started = False

        self.dispatcher = ActionDispatcher()
        self.registry = HotkeyRegistry()
        self.keyboard = KeyboardCapture(
            self.registry,
            self.dispatcher,
            scheduler=scheduler,
            idle_window=self.config.recording_idle_ms / 1000,
            release_grace=self.config.key_release_grace_ms / 1000,
            recording_timeout=self.config.recording_timeout_s,
        )
        self.mappings = MidiMappingTable(overrides=dict(self.config.midi_mappings))
        self.midi = MidiCapture(
            self.mappings, self.dispatcher, smoothing_factor=self.config.smoothing_factor
        )
        self.hub = hub or MidiInputHub(
            device_filter=self.config.device_filter(),
            poll_interval=self.config.midi_poll_interval,
        )
        self.feedback = feedback
        if self.feedback is None and self.config.midi_feedback_output:
            self.feedback = MidiFeedbackOutput(
                device_filter=self.config.feedback_filter(),
                poll_interval=self.config.midi_poll_interval,
            )
        self.decks = DeckRouter(self.registry, self.dispatcher)

        self._keyboard_source = keyboard_source
        if self._keyboard_source is None and self.config.keyboard_listener:
            self._keyboard_source = PynputKeyboardSource()

        self._load_decks(self.config.decks)

    def _load_decks(self, decks: list[Deck]) -> None:
        if not decks:
            self.decks.create_default_deck()
            return

        collector = collect_errors("load decks")
        for deck in decks:
            with collector.try_operation(f"add deck {deck.id}"):
                if not self.decks.add_deck(deck):
                    logger.warning(f"Deck {deck.id} has conflicting hotkeys")

        if collector.has_errors:
            logger.warning(collector.get_summary())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """
        Attach the keyboard source and start MIDI input.

        Returns:
            True if MIDI input is running, False when MIDI is unavailable
            and the console runs keyboard-only
        """
        if self._started:
            return self.hub.is_running
        self._started = True

        if self._keyboard_source is not None:
            with ErrorContext("attach keyboard source", logger, re_raise=False):
                self.keyboard.attach(self._keyboard_source)

        self.hub.on_message(self._on_port_message)
        self.hub.on_connection_changed(self._on_port_connection)
        try:
            self.hub.start()
        except MidiUnavailableError as e:
            logger.warning(f"{e.technical_message}; running keyboard-only")
            return False

        if self.feedback is not None:
            with ErrorContext("start MIDI feedback output", logger, re_raise=False):
                self.feedback.start()

        logger.info(f"Console started ({len(self.hub.connected_ports)} MIDI input(s))")
        return True

    def close(self) -> None:
        """Stop all inputs and release every resource. Safe to call twice."""
        if self._closed:
            return
        self._closed = True

        self.keyboard.destroy()
        self.hub.stop()
        if self.feedback is not None:
            self.feedback.stop()
        self.midi.destroy()
        self.decks.close()
        self.registry.clear()
        self.dispatcher.clear()
        logger.info("Console closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def _on_port_message(self, port_name: str, message: mido.Message) -> None:
        self.midi.handle_mido(message, time.monotonic())

    def _on_port_connection(self, port_name: str, connected: bool) -> None:
        self.dispatcher.publish(
            DispatchEvent.DEVICE_STATE_CHANGE,
            DeviceStateChange(port_name=port_name, connected=connected),
        )

    # ------------------------------------------------------------------
    # Hotkeys
    # ------------------------------------------------------------------

    def register_hotkey(self, binding_id: str, binding: str) -> bool:
        return self.registry.register(binding_id, binding)

    def unregister_hotkey(self, binding_id: str) -> bool:
        return self.registry.unregister(binding_id)

    def unregister_hotkey_by_string(self, binding: str) -> bool:
        return self.registry.unregister_by_binding(binding)

    def start_recording(self, callback: RecordingCallback | None = None) -> bool:
        return self.keyboard.start_recording(callback)

    def stop_recording(self) -> None:
        self.keyboard.stop_recording()

    def handle_key_down(self, event: KeyEvent) -> bool:
        """Feed a key-down event; True means the UI should suppress it."""
        return self.keyboard.handle_key_down(event)

    def handle_key_up(self, event: KeyEvent) -> bool:
        return self.keyboard.handle_key_up(event)

    # ------------------------------------------------------------------
    # MIDI
    # ------------------------------------------------------------------

    def set_mapping(self, key: int | str, mapping: Any) -> VolumeMapping | HotkeyMapping:
        return self.mappings.set_mapping(key, mapping)

    def remove_mapping(self, key: int | str) -> bool:
        return self.mappings.remove_mapping(key)

    def get_all_mappings(self) -> dict[str, VolumeMapping | HotkeyMapping]:
        return self.mappings.get_all_mappings()

    def start_learning(self, callback: LearningCallback) -> bool:
        return self.midi.start_learning(callback)

    def stop_learning(self) -> None:
        self.midi.stop_learning()

    def send_feedback(self, note: int, velocity: int = 127, channel: int = 0) -> bool:
        """Light a controller LED; False when feedback is disabled or disconnected."""
        if self.feedback is None:
            return False
        return self.feedback.send_feedback(note, velocity, channel)

    def handle_midi_bytes(
        self, data: Sequence[int], timestamp: float | None = None
    ) -> MidiMessage | None:
        """Feed a raw MIDI payload; invalid payloads are logged and dropped."""
        return self.midi.handle_bytes(data, timestamp)

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def on(self, category: DispatchEvent | str, handler: Handler) -> None:
        self.dispatcher.subscribe(category, handler)

    def off(self, category: DispatchEvent | str, handler: Handler) -> bool:
        return self.dispatcher.unsubscribe(category, handler)
