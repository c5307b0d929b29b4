"""MIDI capture: decode, learn, smooth and dispatch controller input."""

import logging
from collections.abc import Callable, Sequence
from threading import Lock

import mido

from hotdeck.dispatch import ActionDispatcher, DispatchEvent, HotkeyAction, VolumeChange
from hotdeck.exceptions import InvalidMidiMessageError

from .mappings import HotkeyMapping, MidiMappingTable, VolumeMapping
from .messages import MidiMessage, decode
from .smoothing import ValueSmoother, midi_to_decibel

logger = logging.getLogger(__name__)

LearningCallback = Callable[[MidiMessage], None]


class MidiCapture:
    """
    Routes decoded MIDI messages to the mapping table and the dispatcher.

    Normal operation:
        Control change messages look up their controller number, note-on
        messages with velocity > 0 look up "note_<n>". Volume mappings are
        rescaled to dB, smoothed per target and published as VOLUME_CHANGE;
        hotkey mappings publish HOTKEY_ACTION for nonzero values only.
        Unmapped controls are dropped.

    Learning mode:
        Every decoded message goes to the learning callback instead of the
        table. The caller turns it into a mapping (see mapping_key_for) and
        calls stop_learning(). Learning has no timeout.

    Thread Safety:
        Messages may arrive from several mido I/O threads (one per port).
        Learning state and smoothing state are lock-protected.
    """

    def __init__(
        self,
        table: MidiMappingTable,
        dispatcher: ActionDispatcher,
        smoothing_factor: float = 0.1,
    ):
        """
        Initialize MIDI capture.

        Args:
            table: Mapping table used for lookups
            dispatcher: Where volume and hotkey actions are published
            smoothing_factor: Exponential smoothing factor for volume controls
        """
        self._table = table
        self._dispatcher = dispatcher
        self._smoother = ValueSmoother(smoothing_factor)
        self._lock = Lock()
        self._learning = False
        self._learning_callback: LearningCallback | None = None

    @property
    def table(self) -> MidiMappingTable:
        return self._table

    @property
    def smoother(self) -> ValueSmoother:
        return self._smoother

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def handle_bytes(self, data: Sequence[int], timestamp: float | None = None) -> MidiMessage | None:
        """
        Decode and process a raw MIDI payload.

        Malformed payloads are logged and ignored.

        Returns:
            The decoded message, or None if the payload was invalid
        """
        try:
            message = decode(data, timestamp)
        except InvalidMidiMessageError as e:
            logger.warning(e.technical_message)
            return None

        self.handle_message(message)
        return message

    def handle_mido(self, message: mido.Message, timestamp: float | None = None) -> MidiMessage | None:
        """
        Process a message delivered by a mido input port.

        System messages (clock, sysex, ...) carry no channel and are skipped.
        """
        if not hasattr(message, "channel"):
            return None
        return self.handle_bytes(message.bytes(), timestamp)

    def handle_message(self, message: MidiMessage) -> None:
        """Process a decoded message: learning callback or mapping dispatch."""
        logger.debug(f"MIDI message: {message}")
        self._dispatcher.publish(DispatchEvent.MIDI_MESSAGE, message)

        with self._lock:
            learning = self._learning
            callback = self._learning_callback

        if learning:
            if callback is not None:
                try:
                    callback(message)
                except Exception as e:
                    logger.error(f"Error in MIDI learning callback: {e}", exc_info=True)
            return

        mapping = self._table.lookup(message)
        if mapping is None:
            logger.debug(f"No MIDI mapping for {message.kind.value} {message.number}")
            return

        self.execute(mapping, message.value)

    def execute(self, mapping: VolumeMapping | HotkeyMapping, value: int) -> None:
        """Run a mapping with a raw 0-127 value."""
        match mapping:
            case VolumeMapping():
                self._handle_volume(mapping, value)
            case HotkeyMapping():
                self._handle_hotkey(mapping, value)

    def _handle_volume(self, mapping: VolumeMapping, value: int) -> None:
        db_value = midi_to_decibel(value, mapping.min, mapping.max)
        smoothed = self._smoother.smooth(f"volume_{mapping.target}", db_value)
        logger.debug(f"Volume {mapping.target} = {smoothed}dB (MIDI: {value})")

        self._dispatcher.publish(
            DispatchEvent.VOLUME_CHANGE,
            VolumeChange(
                target=mapping.target,
                value=smoothed,
                midi_value=value,
                db_value=db_value,
                mapping=mapping,
            ),
        )

    def _handle_hotkey(self, mapping: HotkeyMapping, value: int) -> None:
        # A release must never re-trigger the action
        if value == 0:
            return

        logger.info(f"MIDI hotkey action: {mapping.action} (target: {mapping.target})")
        self._dispatcher.publish(
            DispatchEvent.HOTKEY_ACTION,
            HotkeyAction(action=mapping.action, target=mapping.target, velocity=value),
        )

    def test_mapping(self, key: int | str, value: int = 64) -> bool:
        """
        Execute the mapping for a key without hardware.

        Returns:
            False if no mapping exists for the key
        """
        mapping = self._table.get_mapping(key)
        if mapping is None:
            logger.warning(f"No MIDI mapping found for key: {key}")
            return False

        self.execute(mapping, value)
        return True

    # ------------------------------------------------------------------
    # Learning
    # ------------------------------------------------------------------

    @property
    def is_learning(self) -> bool:
        with self._lock:
            return self._learning

    def start_learning(self, callback: LearningCallback) -> bool:
        """
        Redirect every decoded message to a callback.

        Returns:
            False if a learning session is already active
        """
        with self._lock:
            if self._learning:
                logger.warning("MIDI learning already active")
                return False
            self._learning = True
            self._learning_callback = callback

        logger.info("MIDI learning started - move a control on your MIDI device")
        self._dispatcher.publish(DispatchEvent.LEARNING_STATE_CHANGED, True)
        return True

    def stop_learning(self) -> None:
        """End the learning session. Calling it again is a no-op."""
        with self._lock:
            if not self._learning:
                return
            self._learning = False
            self._learning_callback = None

        logger.info("MIDI learning stopped")
        self._dispatcher.publish(DispatchEvent.LEARNING_STATE_CHANGED, False)

    def destroy(self) -> None:
        """Drop learning state and smoothing state without notifying anyone."""
        with self._lock:
            self._learning = False
            self._learning_callback = None
        self._smoother.clear()
        logger.debug("MidiCapture destroyed")
