"""MIDI output for controller LED feedback, with hot-plug support."""

import logging
import threading
from collections.abc import Callable
from typing import Optional

import mido

from hotdeck.exceptions import MidiUnavailableError

logger = logging.getLogger(__name__)


class MidiFeedbackOutput:
    """
    Single MIDI output port used to light controller pads and buttons.

    A port can be selected explicitly by name; otherwise the first port
    accepted by the device filter is used. A monitor thread reconnects when
    the device is unplugged and plugged back in.
    """

    def __init__(
        self,
        device_filter: Optional[Callable[[str], bool]] = None,
        poll_interval: float = 5.0,
        port_selector: Optional[Callable[[list[str]], Optional[str]]] = None,
    ):
        """
        Initialize the feedback output.

        Args:
            device_filter: Returns True for port names that may be used (default: all)
            poll_interval: How often to check for device changes (seconds)
            port_selector: Optional function to pick a port from the candidates.
                          If None, selects the first matching port.
        """
        self._device_filter = device_filter or (lambda name: True)
        self._poll_interval = poll_interval
        self._port_selector = port_selector
        self._running = False
        self._stop_event = threading.Event()
        self._monitor_thread: Optional[threading.Thread] = None
        self._port: Optional[mido.ports.BaseOutput] = None
        self._port_name: Optional[str] = None
        self._selected: Optional[str] = None
        self._port_lock = threading.Lock()
        self._no_device_warned = False

    def start(self) -> None:
        """
        Probe the MIDI backend, connect, and start monitoring outputs.

        Raises:
            MidiUnavailableError: If MIDI access is denied or unsupported
        """
        if self._running:
            logger.warning("MidiFeedbackOutput is already running")
            return

        try:
            mido.get_output_names()
        except Exception as e:
            raise MidiUnavailableError(str(e)) from e

        self._running = True
        self._stop_event.clear()
        self.refresh()
        self._monitor_thread = threading.Thread(target=self._monitor_devices, daemon=True)
        self._monitor_thread.start()
        logger.debug("MidiFeedbackOutput started")

    def stop(self) -> None:
        """Stop monitoring and close the output port."""
        self._running = False

        with self._port_lock:
            self._stop_event.set()
            self._close_port()

        if self._monitor_thread and self._monitor_thread.is_alive():
            self._monitor_thread.join(timeout=1.0)
        self._monitor_thread = None

        logger.debug("MidiFeedbackOutput stopped")

    def select_output(self, port_name: str) -> bool:
        """
        Use a specific output port, replacing the current one.

        Returns:
            True if the port was opened (always False once stopped)
        """
        with self._port_lock:
            self._selected = port_name
            self._close_port()
            if self._stop_event.is_set():
                return False
            self._connect_to_port(port_name)
            return self._port is not None

    def send(self, message: mido.Message) -> bool:
        """
        Send a MIDI message to the output.

        Returns:
            True if sent successfully, False if not connected
        """
        with self._port_lock:
            if self._port is None:
                return False
            try:
                self._port.send(message)
                return True
            except Exception as e:
                logger.error(f"Error sending MIDI message to {self._port_name}: {e}")
                return False

    def send_feedback(self, note: int, velocity: int = 127, channel: int = 0) -> bool:
        """
        Light (or with velocity 0, clear) a controller LED with a note-on.

        Raises:
            ValueError: If note, velocity or channel is out of range

        Returns:
            True if the message was sent
        """
        message = mido.Message("note_on", channel=channel, note=note, velocity=velocity)
        sent = self.send(message)
        if sent:
            logger.debug(f"LED feedback: note {note} velocity {velocity} channel {channel}")
        return sent

    def refresh(self) -> None:
        """Drop a vanished port and connect when no port is open."""
        available = mido.get_output_names()

        with self._port_lock:
            if self._stop_event.is_set():
                return

            if self._port is not None and self._port_name not in available:
                logger.warning(f"MIDI output disconnected: {self._port_name}")
                self._close_port()
                self._no_device_warned = False

            if self._port is None:
                port_name = self._find_matching_port(available)
                if port_name:
                    self._connect_to_port(port_name)
                elif not self._no_device_warned:
                    logger.debug("No matching MIDI output device found")
                    self._no_device_warned = True

    def _find_matching_port(self, available: list[str]) -> Optional[str]:
        if self._selected is not None:
            return self._selected if self._selected in available else None

        matching = [name for name in available if self._device_filter(name)]
        if not matching:
            return None
        if self._port_selector:
            return self._port_selector(matching)
        return matching[0]

    def _connect_to_port(self, port_name: str) -> None:
        """
        Open an output port.

        Note: Should be called with _port_lock held.
        """
        try:
            self._port = mido.open_output(port_name)
            self._port_name = port_name
            logger.info(f"Connected to MIDI output: {port_name}")
        except Exception as e:
            logger.error(f"Failed to connect to {port_name}: {e}")
            self._port = None
            self._port_name = None

    def _close_port(self) -> None:
        """
        Close the open port, if any.

        Note: Should be called with _port_lock held.
        """
        if self._port is None:
            return
        try:
            self._port.close()
        except Exception as e:
            logger.error(f"Error closing MIDI output port {self._port_name}: {e}")
        self._port = None
        self._port_name = None

    def _monitor_devices(self) -> None:
        """Poll for device connection/disconnection until stopped."""
        logger.debug("Starting MIDI output device monitoring")
        while not self._stop_event.wait(self._poll_interval):
            try:
                self.refresh()
            except Exception as e:
                logger.error(f"Error in MIDI output monitoring: {e}")

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_connected(self) -> bool:
        """Check if an output port is currently open."""
        with self._port_lock:
            return self._port is not None

    @property
    def current_port(self) -> Optional[str]:
        """Name of the open output port."""
        with self._port_lock:
            return self._port_name

    def __enter__(self):
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.stop()
