"""
Chained perspective projection from N dimensions down to 2.

Each stage treats the trailing coordinate as depth, foreshortens the
remaining coordinates by ``D / (D - depth + offset)`` and drops the depth
axis, like a pinhole camera collapsing one dimension at a time.
"""

import logging
import math
from typing import Sequence, Tuple

import numpy as np

from hyperscope.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Magnitude floor for a stage divisor; keeps a degenerate stage finite but huge
_MIN_DIVISOR = 1e-9


def derive_offset(bound: float, dimensions: int) -> float:
    """
    Smallest offset that keeps every stage divisor >= D.

    Rotation preserves the norm, so any coordinate of a rotated point inside
    ``[-bound, bound]^N`` satisfies ``|d| <= bound * sqrt(N)``. With that
    offset every factor lies in (0, 1], so later stages never see a larger
    depth than the first one.
    """
    return float(bound) * math.sqrt(dimensions)


class ProjectionPipeline:
    """
    Successive N -> N-1 -> ... -> 2 perspective divisions.

    Args:
        focal_distances: One focal distance per stage, applied to the
            highest axis first. Needs exactly ``N - 2`` entries.
        offset: Added to every divisor. Use :func:`derive_offset` unless a
            hand-tuned look is wanted.
    """

    def __init__(self, focal_distances: Sequence[float], offset: float = 0.0):
        self.focal_distances = tuple(float(d) for d in focal_distances)
        self.offset = float(offset)
        for d in self.focal_distances:
            if d <= 0:
                raise ConfigurationError(f"Focal distance must be positive, got {d}")

    @property
    def dimensions(self) -> int:
        return len(self.focal_distances) + 2

    def _check_dims(self, n: int) -> None:
        if n != self.dimensions:
            raise ConfigurationError(
                f"Projection expects {self.dimensions}-D input "
                f"({len(self.focal_distances)} stages), got {n}-D"
            )

    def _stage_factors(self, depth: np.ndarray, focal: float) -> np.ndarray:
        divisor = focal - depth + self.offset
        tiny = np.abs(divisor) < _MIN_DIVISOR
        if np.any(tiny):
            logger.debug("Degenerate projection divisor for %d point(s)", int(tiny.sum()))
            divisor = np.where(tiny, np.copysign(_MIN_DIVISOR, divisor), divisor)
        return focal / divisor

    def project_points(self, points: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Project an (m, N) array.

        Returns:
            xy: (m, 2) projected coordinates.
            scale: (m,) product of the stage factors, i.e. how much a unit
                length at that point shrinks on screen.
        """
        pts = np.array(points, dtype=np.float64)
        if pts.ndim != 2:
            raise ValueError("project_points expects an (m, N) array")
        self._check_dims(pts.shape[1])

        scale = np.ones(pts.shape[0], dtype=np.float64)
        current = pts
        for focal in self.focal_distances:
            factor = self._stage_factors(current[:, -1], focal)
            current = current[:, :-1] * factor[:, None]
            scale *= factor
        return current, scale

    def project(self, v: np.ndarray) -> np.ndarray:
        """Project a single N-vector to a 2-D point."""
        xy, _ = self.project_points(np.asarray(v, dtype=np.float64)[None, :])
        return xy[0]


def viewport_map(
    xy: np.ndarray,
    scale: float,
    center: Tuple[float, float],
) -> np.ndarray:
    """Affine map into screen space: ``screen = projected * scale + center``."""
    return np.asarray(xy, dtype=np.float64) * scale + np.asarray(center, dtype=np.float64)
