"""Volume scaling and exponential smoothing for continuous controls."""

from threading import Lock

SILENCE_DB = -60.0
DB_RANGE = 60.0


def midi_to_decibel(value: int, minimum: int = 0, maximum: int = 127) -> float:
    """
    Rescale a raw 0-127 value into the -60..0 dB range.

    The value is clamped to [minimum, maximum] first. A silent value maps to
    exactly -60 dB.
    """
    if maximum <= minimum:
        return 0.0 if value > minimum else SILENCE_DB

    normalized = (min(max(value, minimum), maximum) - minimum) / (maximum - minimum)
    if normalized == 0:
        return SILENCE_DB
    return normalized * DB_RANGE - DB_RANGE


class ValueSmoother:
    """
    Per-key exponential smoothing.

    ``smoothed = previous + (value - previous) * factor``, where `previous`
    is seeded with the first value seen for a key so the first message is
    passed through unchanged. The unrounded value is kept as state; callers
    get it rounded to two decimals.
    """

    def __init__(self, factor: float = 0.1):
        if not 0 < factor <= 1:
            raise ValueError(f"Smoothing factor must be in (0, 1], got {factor}")
        self.factor = factor
        self._last: dict[str, float] = {}
        self._lock = Lock()

    def smooth(self, key: str, value: float) -> float:
        """Feed a new value for a key and return the smoothed, rounded value."""
        with self._lock:
            previous = self._last.get(key, value)
            smoothed = previous + (value - previous) * self.factor
            self._last[key] = smoothed
        return round(smoothed, 2)

    def last(self, key: str) -> float | None:
        """Last unrounded smoothed value for a key."""
        with self._lock:
            return self._last.get(key)

    def clear(self) -> None:
        with self._lock:
            self._last.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._last)
