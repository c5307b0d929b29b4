"""Utility modules."""

from .persistence import PydanticPersistence
from .scheduling import Scheduler, ScheduledCall, ThreadingScheduler

__all__ = ["PydanticPersistence", "ScheduledCall", "Scheduler", "ThreadingScheduler"]
