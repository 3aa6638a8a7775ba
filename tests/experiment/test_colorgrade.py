"""Tests for colours and post-processing."""

import numpy as np
import pytest

from hyperscope.experiment.colorgrade import (
    add_glow,
    apply_trails,
    blend,
    hsl_color,
    random_hue_color,
    tone_map_soft,
    vignette,
)


class TestColours:
    def test_hsl_primaries(self):
        assert hsl_color(0.0) == (255, 0, 0)
        assert hsl_color(1.0 / 3.0) == (0, 255, 0)
        assert hsl_color(2.0 / 3.0) == (0, 0, 255)

    def test_hsl_wraps(self):
        assert hsl_color(1.25) == hsl_color(0.25)

    def test_random_hue_is_seeded(self):
        a = random_hue_color(np.random.default_rng(3))
        b = random_hue_color(np.random.default_rng(3))
        assert a == b
        assert max(a) == 255

    def test_blend(self):
        assert blend((200, 100, 0), (0, 0, 0), 0.5) == (100, 50, 0)
        assert blend((200, 100, 0), (10, 10, 10), 1.0) == (200, 100, 0)
        assert blend((200, 100, 0), (10, 10, 10), -3.0) == (10, 10, 10)


class TestTrails:
    def test_first_frame_passthrough(self):
        current = np.full((10, 10, 3), 50, dtype=np.uint8)
        assert apply_trails(None, current, 0.8) is current

    def test_zero_persistence(self):
        previous = np.full((10, 10, 3), 200, dtype=np.uint8)
        current = np.zeros((10, 10, 3), dtype=np.uint8)
        np.testing.assert_array_equal(apply_trails(previous, current, 0.0), current)

    def test_fading_copy(self):
        previous = np.full((4, 4, 3), 200, dtype=np.uint8)
        current = np.zeros((4, 4, 3), dtype=np.uint8)
        current[0, 0] = 255
        out = apply_trails(previous, current, 0.5)
        assert out.dtype == np.uint8
        assert out[1, 1, 0] == 100
        assert out[0, 0, 0] == 255


class TestAddGlow:
    def test_output_shape_and_dtype(self):
        frame = np.random.randint(0, 255, (60, 80, 3), dtype=np.uint8)
        result = add_glow(frame)
        assert result.shape == (60, 80, 3)
        assert result.dtype == np.uint8

    def test_brightens_around_point(self):
        frame = np.zeros((41, 41, 3), dtype=np.uint8)
        frame[20, 20] = 255
        result = add_glow(frame, intensity=0.9, radius=2)
        assert result[20, 22].max() > 0

    def test_disabled(self):
        frame = np.random.randint(0, 255, (20, 20, 3), dtype=np.uint8)
        assert add_glow(frame, intensity=0.0) is frame


class TestVignette:
    def test_corners_darker_than_centre(self):
        frame = np.full((61, 81, 3), 200, dtype=np.uint8)
        result = vignette(frame, strength=0.6)
        assert result[30, 40, 0] == 200
        assert result[0, 0, 0] < 200

    def test_disabled(self):
        frame = np.full((10, 10, 3), 200, dtype=np.uint8)
        assert vignette(frame, strength=0.0) is frame


class TestToneMap:
    def test_below_knee_untouched(self):
        frame = np.full((5, 5, 3), 100, dtype=np.uint8)
        np.testing.assert_array_equal(tone_map_soft(frame), frame)

    def test_highlights_compressed(self):
        frame = np.full((5, 5, 3), 255, dtype=np.uint8)
        result = tone_map_soft(frame)
        assert 204 < result[0, 0, 0] < 255
