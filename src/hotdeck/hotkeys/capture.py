"""Keyboard capture: turns raw key events into hotkey triggers and recorded chords."""

import logging
from collections.abc import Callable
from functools import partial
from threading import Lock
from typing import TYPE_CHECKING, Any

from hotdeck.dispatch import ActionDispatcher, DispatchEvent
from hotdeck.utils.scheduling import ScheduledCall, Scheduler, ThreadingScheduler

from .binding import KeyEvent, build_binding, build_chord, is_modifier, key_name
from .registry import HotkeyRegistry

if TYPE_CHECKING:
    from .sources import KeyboardSource

logger = logging.getLogger(__name__)

RecordingCallback = Callable[[str | None], None]


class KeyboardCapture:
    """
    Keyboard state machine with a Normal and a Recording mode.

    Normal mode:
        Key-downs outside editable fields are turned into a candidate binding
        (active modifiers + the non-modifier key) and matched against the
        registry. A hit is suppressed and published as HOTKEY_TRIGGERED.

    Recording mode:
        Every key-down is captured and suppressed, even in editable fields.
        The chord is finalized when no new key arrives within the idle
        window, shortly after a non-modifier key is released, or when the
        overall timeout expires. Only one recording session exists at a time.

    Handlers return True when the event was consumed and the source should
    suppress it.

    Thread Safety:
        Key events, timers and UI calls may arrive on different threads.
        Session state is guarded by a lock; callbacks and publications run
        outside of it.
    """

    def __init__(
        self,
        registry: HotkeyRegistry,
        dispatcher: ActionDispatcher,
        scheduler: Scheduler | None = None,
        idle_window: float = 0.5,
        release_grace: float = 0.1,
        recording_timeout: float = 10.0,
    ):
        """
        Initialize keyboard capture.

        Args:
            registry: Registry used to resolve key events to binding IDs
            dispatcher: Where triggers and recording events are published
            scheduler: Timer source (defaults to threading timers)
            idle_window: Seconds without a new key that finalize a recording
            release_grace: Seconds after a non-modifier key-up before finalizing
            recording_timeout: Hard cap on a recording session in seconds
        """
        self._registry = registry
        self._dispatcher = dispatcher
        self._scheduler = scheduler or ThreadingScheduler()
        self.idle_window = idle_window
        self.release_grace = release_grace
        self.recording_timeout = recording_timeout

        self._lock = Lock()
        self._recording = False
        self._session = 0
        self._recorded: list[str] = []
        self._callback: RecordingCallback | None = None
        self._idle_timer: ScheduledCall | None = None
        self._timeout_timer: ScheduledCall | None = None
        self._release_timers: list[ScheduledCall] = []
        self._source: "KeyboardSource | None" = None

    # ------------------------------------------------------------------
    # Sources
    # ------------------------------------------------------------------

    def attach(self, source: "KeyboardSource") -> None:
        """Start receiving events from a keyboard source."""
        if self._source is not None:
            self.detach()
        source.attach(self.handle_key_down, self.handle_key_up)
        self._source = source
        logger.info(f"Keyboard source attached: {source!r}")

    def detach(self) -> None:
        """Stop receiving events from the current keyboard source."""
        source, self._source = self._source, None
        if source is not None:
            source.detach()
            logger.info(f"Keyboard source detached: {source!r}")

    # ------------------------------------------------------------------
    # Raw events
    # ------------------------------------------------------------------

    def handle_key_down(self, event: KeyEvent) -> bool:
        """
        Process a key-down event.

        Returns:
            True if the event was consumed (hotkey hit or recording)
        """
        with self._lock:
            if self._recording:
                self._record_key(event)
                return True

        if event.editable:
            return False

        binding = build_binding(event)
        if not binding:
            return False

        binding_id = self._registry.match(binding)
        if binding_id is None:
            return False

        logger.info(f"Hotkey triggered: {binding_id} for {binding}")
        self._dispatcher.publish(DispatchEvent.HOTKEY_TRIGGERED, binding_id)
        return True

    def handle_key_up(self, event: KeyEvent) -> bool:
        """
        Process a key-up event.

        Releasing a non-modifier key while recording schedules a short check
        that commits the chord, so a single tap doesn't wait for the full
        idle window.

        Returns:
            True if a recording session consumed the event
        """
        with self._lock:
            if not self._recording:
                return False

            name = key_name(event)
            if name and not is_modifier(name):
                self._release_timers.append(
                    self._scheduler.schedule(
                        self.release_grace, partial(self._finish, self._session, "release")
                    )
                )
            return True

    def _record_key(self, event: KeyEvent) -> None:
        """Add a key to the current recording. Caller holds the lock."""
        name = key_name(event)
        if not name:
            return

        if name not in self._recorded:
            self._recorded.append(name)

        if self._idle_timer is not None:
            self._idle_timer.cancel()
        self._idle_timer = self._scheduler.schedule(
            self.idle_window, partial(self._finish, self._session, "idle")
        )

    # ------------------------------------------------------------------
    # Recording sessions
    # ------------------------------------------------------------------

    @property
    def is_recording(self) -> bool:
        """True while a recording session is active."""
        with self._lock:
            return self._recording

    def start_recording(self, callback: RecordingCallback | None = None) -> bool:
        """
        Start recording a chord.

        Args:
            callback: One-shot callable receiving the recorded chord, or None
                      if the session timed out without any key

        Returns:
            False if a recording session is already active
        """
        with self._lock:
            if self._recording:
                logger.warning("Already recording a hotkey")
                return False

            self._recording = True
            self._session += 1
            self._recorded.clear()
            self._callback = callback
            self._timeout_timer = self._scheduler.schedule(
                self.recording_timeout, partial(self._finish, self._session, "timeout")
            )

        logger.info("Hotkey recording started")
        self._dispatcher.publish(DispatchEvent.RECORDING_STARTED)
        return True

    def stop_recording(self) -> None:
        """Cancel the current recording session. Calling it again is a no-op."""
        with self._lock:
            if not self._recording:
                return
            self._end_session()

        logger.info("Hotkey recording stopped")
        self._dispatcher.publish(DispatchEvent.RECORDING_STOPPED)

    def _end_session(self) -> None:
        """Reset session state and cancel timers. Caller holds the lock."""
        self._recording = False
        self._callback = None
        self._recorded.clear()

        timers = [self._idle_timer, self._timeout_timer, *self._release_timers]
        self._idle_timer = None
        self._timeout_timer = None
        self._release_timers = []
        for timer in timers:
            if timer is not None:
                timer.cancel()

    def _finish(self, session: int, reason: str) -> None:
        """
        Finalize a recording session from one of its timers.

        Timers belonging to an earlier session are ignored. Idle and release
        checks only commit when keys are pending; the timeout always ends the
        session, handing None to the callback when nothing was pressed.
        """
        with self._lock:
            if not self._recording or session != self._session:
                return
            if reason != "timeout" and not self._recorded:
                return

            chord = build_chord(self._recorded) if self._recorded else None
            callback = self._callback
            self._end_session()

        if reason == "timeout":
            logger.info(f"Hotkey recording timed out with: {chord!r}")
        else:
            logger.info(f"Recorded hotkey: {chord}")

        self._dispatcher.publish(DispatchEvent.RECORDING_STOPPED)

        if callback is not None:
            try:
                callback(chord)
            except Exception as e:
                logger.error(f"Error in hotkey recording callback: {e}", exc_info=True)

        if chord:
            self._dispatcher.publish(DispatchEvent.HOTKEY_RECORDED, chord)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def trigger(self, binding: str) -> bool:
        """
        Fire a registered binding as if its keys were pressed.

        Returns:
            True if the binding is registered
        """
        binding_id = self._registry.match(binding)
        if binding_id is None:
            logger.debug(f"No hotkey registered for {binding!r}")
            return False

        self._dispatcher.publish(DispatchEvent.HOTKEY_TRIGGERED, binding_id)
        return True

    def debug_info(self) -> dict[str, Any]:
        """Snapshot of registrations and recording state."""
        with self._lock:
            recording = self._recording
            recorded = list(self._recorded)
        return {
            "registered_hotkeys": self._registry.get_all(),
            "is_recording": recording,
            "recorded_keys": recorded,
            "source": repr(self._source) if self._source else None,
        }

    def destroy(self) -> None:
        """Detach the source and drop any session without notifying anyone."""
        self.detach()
        with self._lock:
            self._end_session()
        logger.debug("KeyboardCapture destroyed")
