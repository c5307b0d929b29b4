"""MIDI input ports with hot-plug support."""

import logging
import threading
from collections.abc import Callable
from typing import Optional

import mido

from hotdeck.exceptions import MidiUnavailableError

logger = logging.getLogger(__name__)

MessageCallback = Callable[[str, mido.Message], None]
ConnectionCallback = Callable[[str, bool], None]


class MidiInputHub:
    """
    Keeps every matching MIDI input port open and routed to one callback.

    A monitor thread polls the available input names. Ports present at start
    and ports plugged in later are opened the same way, so all of them feed
    the same decode pipeline; vanished ports are closed.

    Messages are delivered on mido's internal I/O threads - keep callbacks fast!
    """

    def __init__(
        self,
        device_filter: Optional[Callable[[str], bool]] = None,
        poll_interval: float = 2.0,
    ):
        """
        Initialize the hub.

        Args:
            device_filter: Returns True for port names to open (default: all)
            poll_interval: How often to check for device changes (seconds)
        """
        self._device_filter = device_filter or (lambda name: True)
        self._poll_interval = poll_interval
        self._running = False
        self._stop_event = threading.Event()
        self._monitor_thread: Optional[threading.Thread] = None
        self._ports: dict[str, mido.ports.BaseInput] = {}
        self._port_lock = threading.Lock()
        self._on_message: Optional[MessageCallback] = None
        self._on_connection_changed: Optional[ConnectionCallback] = None

    def on_message(self, callback: MessageCallback) -> None:
        """
        Register callback for incoming messages.

        Args:
            callback: Function receiving (port_name, mido.Message)
        """
        self._on_message = callback

    def on_connection_changed(self, callback: ConnectionCallback) -> None:
        """
        Register callback for port connect/disconnect.

        Args:
            callback: Function receiving (port_name, is_connected)
        """
        self._on_connection_changed = callback

    @staticmethod
    def list_ports() -> dict[str, list[str]]:
        """
        List all available MIDI ports.

        Raises:
            MidiUnavailableError: If no MIDI backend can be loaded
        """
        try:
            return {
                "input": mido.get_input_names(),
                "output": mido.get_output_names(),
            }
        except Exception as e:
            raise MidiUnavailableError(str(e)) from e

    def start(self) -> None:
        """
        Probe the MIDI backend and start monitoring ports.

        Raises:
            MidiUnavailableError: If MIDI access is denied or unsupported
        """
        if self._running:
            logger.warning("MidiInputHub is already running")
            return

        try:
            mido.get_input_names()
        except Exception as e:
            raise MidiUnavailableError(str(e)) from e

        self._running = True
        self._stop_event.clear()
        self.refresh()
        self._monitor_thread = threading.Thread(target=self._monitor_devices, daemon=True)
        self._monitor_thread.start()
        logger.debug("MidiInputHub started")

    def stop(self) -> None:
        """Stop monitoring and close every open port."""
        self._running = False

        with self._port_lock:
            self._stop_event.set()
            ports = list(self._ports.items())
            self._ports.clear()

        for name, port in ports:
            try:
                port.close()
            except Exception as e:
                logger.error(f"Error closing MIDI input port {name}: {e}")

        if self._monitor_thread and self._monitor_thread.is_alive():
            self._monitor_thread.join(timeout=1.0)
        self._monitor_thread = None

        logger.debug("MidiInputHub stopped")

    def refresh(self) -> None:
        """Open newly available matching ports and close vanished ones."""
        available = {name for name in mido.get_input_names() if self._device_filter(name)}

        with self._port_lock:
            current = set(self._ports)
            removed = [(name, self._ports.pop(name)) for name in current - available]

        for name, port in removed:
            logger.warning(f"MIDI input disconnected: {name}")
            try:
                port.close()
            except Exception as e:
                logger.debug(f"Error closing vanished port {name}: {e}")
            self._notify_connection(name, False)

        for name in sorted(available - current):
            self._connect_to_port(name)

    def _connect_to_port(self, port_name: str) -> None:
        try:
            port = mido.open_input(port_name, callback=self._make_callback(port_name))
        except Exception as e:
            logger.error(f"Failed to connect to {port_name}: {e}")
            return

        with self._port_lock:
            # stop() may have cleared the ports while this one was opening
            stopped = self._stop_event.is_set()
            if not stopped:
                self._ports[port_name] = port

        if stopped:
            logger.debug(f"Hub stopped while opening {port_name}, closing it")
            try:
                port.close()
            except Exception as e:
                logger.debug(f"Error closing MIDI input port {port_name}: {e}")
            return

        logger.info(f"Connected to MIDI input: {port_name}")
        self._notify_connection(port_name, True)

    def _make_callback(self, port_name: str) -> Callable[[mido.Message], None]:
        def callback(msg: mido.Message) -> None:
            try:
                if self._on_message:
                    self._on_message(port_name, msg)
            except Exception as e:
                logger.error(f"Error in MIDI input callback for {port_name}: {e}")

        return callback

    def _notify_connection(self, port_name: str, connected: bool) -> None:
        if not self._on_connection_changed:
            return
        try:
            self._on_connection_changed(port_name, connected)
        except Exception as e:
            logger.error(f"Error in connection callback: {e}")

    def _monitor_devices(self) -> None:
        """Poll for device connection/disconnection until stopped."""
        logger.debug("Starting MIDI input device monitoring")
        while not self._stop_event.wait(self._poll_interval):
            try:
                self.refresh()
            except Exception as e:
                logger.error(f"Error in MIDI input monitoring: {e}")

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def connected_ports(self) -> list[str]:
        """Names of the currently open input ports."""
        with self._port_lock:
            return sorted(self._ports)

    def __enter__(self):
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.stop()
