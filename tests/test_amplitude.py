"""Tests for amplitude extraction."""

import numpy as np
import pytest

from hyperscope.audio.amplitude import AmplitudeTrack, ConstantAmplitude, silence


class TestAmplitudeTrack:
    def test_one_value_per_frame(self, loud_then_quiet):
        y, sr = loud_then_quiet
        track = AmplitudeTrack.from_signal(y, sr, fps=30)
        assert len(track) == 60
        assert track.duration == pytest.approx(2.0)

    def test_levels_are_byte_range(self, loud_then_quiet):
        y, sr = loud_then_quiet
        track = AmplitudeTrack.from_signal(y, sr, fps=30)
        assert track.values.min() >= 0.0
        assert track.values.max() <= 255.0

    def test_loud_part_is_louder(self, loud_then_quiet):
        y, sr = loud_then_quiet
        track = AmplitudeTrack.from_signal(y, sr, fps=30)
        # steady windows, clear of the onset and release transients
        loud = track.values[10:25].mean()
        quiet = track.values[50:].mean()
        assert loud > 100.0
        assert loud > quiet + 50.0

    def test_silence_is_zero(self, sample_rate):
        track = AmplitudeTrack.from_signal(np.zeros(sample_rate, dtype=np.float32), sample_rate, fps=30)
        np.testing.assert_array_equal(track.values, np.zeros(30))

    def test_call_past_end_is_none(self):
        track = AmplitudeTrack(np.array([10.0, 20.0]), fps=30)
        assert track(1) == 20.0
        assert track(2) is None
        assert track(-1) is None

    def test_from_file(self, temp_audio_file):
        track = AmplitudeTrack.from_file(temp_audio_file, fps=30)
        assert len(track) == 60
        assert track.values[10] > 0


class TestSources:
    def test_constant(self):
        source = ConstantAmplitude(150.0)
        assert source(0) == 150.0
        assert source(999) == 150.0

    def test_constant_rejects_negative(self):
        with pytest.raises(ValueError):
            ConstantAmplitude(-1.0)

    def test_silence(self):
        assert silence(3) is None
