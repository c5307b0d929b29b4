"""Non-blocking delayed calls.

Recording sessions need idle timers and timeouts that never block the
thread delivering key events. The capture services take a Scheduler so tests
can substitute a deterministic clock.
"""

import logging
import threading
from collections.abc import Callable
from typing import Protocol

logger = logging.getLogger(__name__)


class ScheduledCall(Protocol):
    """Handle to a pending delayed call."""

    def cancel(self) -> None:
        """Cancel the call if it has not run yet. Safe to call repeatedly."""
        ...


class Scheduler(Protocol):
    """Schedules a callable to run once after a delay."""

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        """
        Run callback once after `delay` seconds.

        Args:
            delay: Delay in seconds
            callback: Zero-argument callable

        Returns:
            Handle that can cancel the call
        """
        ...


class ThreadingScheduler:
    """Scheduler backed by daemon threading.Timer instances."""

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        def run() -> None:
            try:
                callback()
            except Exception as e:
                logger.error(f"Error in scheduled callback {callback!r}: {e}", exc_info=True)

        timer = threading.Timer(delay, run)
        timer.daemon = True
        timer.start()
        return timer
