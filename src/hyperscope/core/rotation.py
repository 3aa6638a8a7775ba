"""
N-dimensional rotation by successive 2-plane rotations.

The tumbling motion is built from an ordered list of planes, each spanned by
two coordinate axes and turning at its own angular rate. Rotations in
different planes do not commute for N >= 3, so the order of the list is part
of the animation and is applied identically on every call.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

import numpy as np

from hyperscope.errors import ConfigurationError


@dataclass(frozen=True)
class RotationPlane:
    """Plane spanned by ``axis_i`` and ``axis_j`` turning at ``rate`` rad per ms."""

    axis_i: int
    axis_j: int
    rate: float

    @classmethod
    def from_tuple(cls, value: Sequence[float]) -> "RotationPlane":
        i, j, rate = value
        return cls(int(i), int(j), float(rate))

    def as_tuple(self) -> Tuple[int, int, float]:
        return (self.axis_i, self.axis_j, self.rate)


# Stock 5-D tumble: x-y, x-z, y-w, z-u, w-u
DEFAULT_PLANES_5D: Tuple[RotationPlane, ...] = (
    RotationPlane(0, 1, 0.001),
    RotationPlane(0, 2, 0.002),
    RotationPlane(1, 3, 0.003),
    RotationPlane(2, 4, 0.004),
    RotationPlane(3, 4, 0.005),
)


def validate_planes(planes: Iterable[RotationPlane], dimensions: int) -> None:
    """Raise ConfigurationError if any plane references an axis outside [0, N)."""
    for plane in planes:
        for axis in (plane.axis_i, plane.axis_j):
            if not 0 <= axis < dimensions:
                raise ConfigurationError(
                    f"Rotation plane {plane.as_tuple()} uses axis {axis}, "
                    f"outside [0, {dimensions})"
                )
        if plane.axis_i == plane.axis_j:
            raise ConfigurationError(
                f"Rotation plane {plane.as_tuple()} needs two distinct axes"
            )


def rotate_plane(v: np.ndarray, i: int, j: int, angle: float) -> np.ndarray:
    """Rotate the (i, j) sub-vector of ``v`` in place by ``angle`` radians."""
    c = math.cos(angle)
    s = math.sin(angle)
    vi = v[..., i].copy()
    vj = v[..., j].copy()
    v[..., i] = vi * c - vj * s
    v[..., j] = vi * s + vj * c
    return v


def rotate(v: np.ndarray, t: float, planes: Sequence[RotationPlane]) -> np.ndarray:
    """
    Apply every plane rotation in order with angle ``t * rate``.

    Args:
        v: Vector of length N. Not modified.
        t: Animation time in milliseconds.
        planes: Ordered plane sequence.

    Returns:
        New rotated vector of length N.
    """
    out = np.array(v, dtype=np.float64)
    for plane in planes:
        rotate_plane(out, plane.axis_i, plane.axis_j, t * plane.rate)
    return out


def rotate_points(points: np.ndarray, t: float, planes: Sequence[RotationPlane]) -> np.ndarray:
    """Vectorised :func:`rotate` over the rows of an (m, N) array."""
    out = np.array(points, dtype=np.float64)
    if out.size == 0:
        return out
    for plane in planes:
        rotate_plane(out, plane.axis_i, plane.axis_j, t * plane.rate)
    return out
