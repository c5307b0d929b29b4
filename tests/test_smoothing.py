"""Tests for volume scaling and smoothing."""

import threading

import pytest

from hotdeck.midi import ValueSmoother, midi_to_decibel


@pytest.mark.unit
class TestMidiToDecibel:
    """Test raw value to dB conversion."""

    def test_extremes(self):
        assert midi_to_decibel(0) == -60.0
        assert midi_to_decibel(127) == 0.0

    def test_midpoint(self):
        assert midi_to_decibel(64) == pytest.approx(64 / 127 * 60 - 60)

    def test_custom_range_clamps(self):
        """Values outside [min, max] clamp to the ends of the range."""
        assert midi_to_decibel(5, minimum=10, maximum=110) == -60.0
        assert midi_to_decibel(120, minimum=10, maximum=110) == 0.0
        assert midi_to_decibel(60, minimum=10, maximum=110) == pytest.approx(-30.0)

    def test_silence_is_exact(self):
        """A silent input is exactly -60, not a rounding artifact."""
        assert midi_to_decibel(10, minimum=10, maximum=20) == -60.0


@pytest.mark.unit
class TestValueSmoother:
    """Test exponential smoothing."""

    def test_first_value_passes_through(self):
        smoother = ValueSmoother()
        assert smoother.smooth("volume_master", -30.0) == -30.0

    def test_exponential_step(self):
        smoother = ValueSmoother(0.1)
        smoother.smooth("volume_master", -60.0)

        assert smoother.smooth("volume_master", 0.0) == -54.0
        assert smoother.smooth("volume_master", 0.0) == -48.6

    def test_state_is_unrounded(self):
        """Rounding applies to the output only."""
        smoother = ValueSmoother(0.1)
        smoother.smooth("k", 0.0)
        smoother.smooth("k", 0.001)

        assert smoother.last("k") == pytest.approx(0.0001)

    def test_keys_are_independent(self):
        smoother = ValueSmoother(0.5)
        smoother.smooth("volume_master", -60.0)
        smoother.smooth("volume_mic", 0.0)

        assert smoother.smooth("volume_master", 0.0) == -30.0
        assert smoother.smooth("volume_mic", 0.0) == 0.0

    @pytest.mark.parametrize("factor", [0, -0.1, 1.5])
    def test_invalid_factor(self, factor):
        with pytest.raises(ValueError):
            ValueSmoother(factor)

    def test_clear(self):
        smoother = ValueSmoother()
        smoother.smooth("k", 1.0)
        smoother.clear()
        assert len(smoother) == 0
        assert smoother.last("k") is None

    def test_concurrent_updates_keep_state_consistent(self):
        """Concurrent updates of one key converge to the shared input."""
        smoother = ValueSmoother(0.5)
        smoother.smooth("k", 0.0)

        def worker() -> None:
            for _ in range(200):
                smoother.smooth("k", 10.0)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert smoother.last("k") == pytest.approx(10.0)
