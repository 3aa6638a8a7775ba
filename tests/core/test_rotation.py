"""Tests for N-dimensional plane rotations."""

import math

import numpy as np
import pytest

from hyperscope.core.rotation import (
    DEFAULT_PLANES_5D,
    RotationPlane,
    rotate,
    rotate_plane,
    rotate_points,
    validate_planes,
)
from hyperscope.errors import ConfigurationError


@pytest.fixture
def v5():
    return np.array([10.0, -20.0, 30.0, -40.0, 50.0])


class TestRotatePlane:
    def test_quarter_turn(self):
        v = np.array([1.0, 0.0, 7.0])
        rotate_plane(v, 0, 1, math.pi / 2)
        np.testing.assert_allclose(v, [0.0, 1.0, 7.0], atol=1e-12)

    def test_sub_norm_preserved(self, rng):
        for _ in range(50):
            v = rng.uniform(-200, 200, 5)
            i, j = rng.choice(5, size=2, replace=False)
            before = v[i] ** 2 + v[j] ** 2
            rotate_plane(v, int(i), int(j), float(rng.uniform(-10, 10)))
            assert v[i] ** 2 + v[j] ** 2 == pytest.approx(before, rel=1e-12)

    def test_other_axes_untouched(self, v5):
        out = rotate_plane(v5.copy(), 1, 3, 0.7)
        assert out[0] == v5[0]
        assert out[2] == v5[2]
        assert out[4] == v5[4]


class TestRotate:
    def test_identity_at_time_zero(self, v5):
        np.testing.assert_array_equal(rotate(v5, 0.0, DEFAULT_PLANES_5D), v5)

    def test_input_not_modified(self, v5):
        original = v5.copy()
        rotate(v5, 1234.0, DEFAULT_PLANES_5D)
        np.testing.assert_array_equal(v5, original)

    def test_norm_preserved(self, v5):
        out = rotate(v5, 5000.0, DEFAULT_PLANES_5D)
        assert np.linalg.norm(out) == pytest.approx(np.linalg.norm(v5))

    def test_deterministic(self, v5):
        a = rotate(v5, 777.0, DEFAULT_PLANES_5D)
        b = rotate(v5, 777.0, DEFAULT_PLANES_5D)
        np.testing.assert_array_equal(a, b)

    def test_order_matters(self, v5):
        planes = (RotationPlane(0, 1, 0.001), RotationPlane(1, 2, 0.002))
        forward = rotate(v5, 900.0, planes)
        backward = rotate(v5, 900.0, tuple(reversed(planes)))
        assert not np.allclose(forward, backward)

    def test_rotate_points_matches_rotate(self, rng):
        points = rng.uniform(-100, 100, (20, 5))
        batch = rotate_points(points, 321.0, DEFAULT_PLANES_5D)
        for row, point in zip(batch, points):
            np.testing.assert_allclose(row, rotate(point, 321.0, DEFAULT_PLANES_5D))

    def test_rotate_points_empty(self):
        out = rotate_points(np.zeros((0, 5)), 10.0, DEFAULT_PLANES_5D)
        assert out.shape == (0, 5)


class TestPlanes:
    def test_default_sequence(self):
        assert [p.as_tuple() for p in DEFAULT_PLANES_5D] == [
            (0, 1, 0.001), (0, 2, 0.002), (1, 3, 0.003), (2, 4, 0.004), (3, 4, 0.005),
        ]

    def test_from_tuple(self):
        plane = RotationPlane.from_tuple([2, 4, "0.5"])
        assert plane == RotationPlane(2, 4, 0.5)

    def test_validate_accepts_defaults(self):
        validate_planes(DEFAULT_PLANES_5D, 5)

    def test_axis_out_of_range(self):
        with pytest.raises(ConfigurationError):
            validate_planes(DEFAULT_PLANES_5D, 4)

    def test_negative_axis(self):
        with pytest.raises(ConfigurationError):
            validate_planes([RotationPlane(-1, 2, 0.1)], 5)

    def test_same_axis_twice(self):
        with pytest.raises(ConfigurationError):
            validate_planes([RotationPlane(2, 2, 0.1)], 5)
