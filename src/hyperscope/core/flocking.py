"""
Boids-style 2-D flocking with a sound-triggered scatter.

Three steering behaviours, each over its own neighbourhood radius:

- Separation (short range): inverse-distance weighted push away from
  crowding neighbours. Weighted highest.
- Alignment (mid range): steer toward the neighbours' mean heading.
- Cohesion (long range): steer toward the neighbours' centroid.

Each steering vector is clamped to ``max_force``. When the amplitude sample
exceeds ``scatter_threshold`` every fish also gets a radial push away from
the viewport centre (the "shark attack"). All steering for a tick is
computed from one snapshot of the flock, then velocities are clamped per
axis to ``max_speed`` and positions wrap around the viewport edges.
"""

from typing import Optional, Tuple

import numpy as np

from hyperscope.core import vector
from hyperscope.core.physics import SimulationState


class FlockingModel:
    """
    Args:
        separation_radius: Neighbours closer than this push the fish away.
        alignment_radius: Neighbours closer than this share their heading.
        cohesion_radius: Neighbours closer than this pull toward their centroid.
        max_speed: Desired speed and per-axis velocity clamp.
        max_force: Magnitude clamp for each steering vector.
        width, height: Viewport size used for wrapping and the scatter centre.
    """

    def __init__(
        self,
        separation_radius: float = 20.0,
        alignment_radius: float = 50.0,
        cohesion_radius: float = 100.0,
        max_speed: float = 2.0,
        max_force: float = 0.1,
        separation_weight: float = 1.5,
        alignment_weight: float = 1.0,
        cohesion_weight: float = 1.0,
        scatter_threshold: float = 100.0,
        scatter_gain: float = 2.0,
        width: float = 1920.0,
        height: float = 1080.0,
    ):
        self.separation_radius = float(separation_radius)
        self.alignment_radius = float(alignment_radius)
        self.cohesion_radius = float(cohesion_radius)
        self.max_speed = float(max_speed)
        self.max_force = float(max_force)
        self.separation_weight = float(separation_weight)
        self.alignment_weight = float(alignment_weight)
        self.cohesion_weight = float(cohesion_weight)
        self.scatter_threshold = float(scatter_threshold)
        self.scatter_gain = float(scatter_gain)
        self.width = float(width)
        self.height = float(height)

    @property
    def center(self) -> Tuple[float, float]:
        return (self.width / 2.0, self.height / 2.0)

    # ------------------------------------------------------------------
    # Neighbourhood helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _offsets(positions: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """(n, n, 2) offsets ``p_i - p_j`` and (n, n) distances."""
        delta = positions[:, None, :] - positions[None, :, :]
        dist = np.sqrt(np.einsum("ijk,ijk->ij", delta, delta))
        return delta, dist

    @staticmethod
    def _neighbours(dist: np.ndarray, radius: float) -> np.ndarray:
        mask = dist < radius
        np.fill_diagonal(mask, False)
        return mask

    def _steer(self, desired: np.ndarray, velocities: np.ndarray, active: np.ndarray) -> np.ndarray:
        """Reynolds steering: desired heading at max_speed minus velocity, clamped."""
        steer = vector.normalize_rows(desired) * self.max_speed - velocities
        steer = vector.limit_rows(steer, self.max_force)
        steer[~active] = 0.0
        return steer

    # ------------------------------------------------------------------
    # Behaviours
    # ------------------------------------------------------------------

    def separation(
        self,
        positions: np.ndarray,
        velocities: np.ndarray,
        _cache: Optional[Tuple[np.ndarray, np.ndarray]] = None,
    ) -> np.ndarray:
        delta, dist = _cache or self._offsets(positions)
        mask = self._neighbours(dist, self.separation_radius)
        count = mask.sum(axis=1)

        # normalize(offset) / distance, with coincident fish contributing zero
        safe = np.where(dist > 0, dist, 1.0)
        weighted = delta / (safe * safe)[:, :, None]
        weighted[~mask] = 0.0
        push = weighted.sum(axis=1) / np.maximum(count, 1)[:, None]

        active = (count > 0) & (vector.magnitudes(push) > 0)
        return self._steer(push, velocities, active)

    def alignment(
        self,
        positions: np.ndarray,
        velocities: np.ndarray,
        _cache: Optional[Tuple[np.ndarray, np.ndarray]] = None,
    ) -> np.ndarray:
        _, dist = _cache or self._offsets(positions)
        mask = self._neighbours(dist, self.alignment_radius)
        count = mask.sum(axis=1)
        mean_heading = (mask.astype(np.float64) @ velocities) / np.maximum(count, 1)[:, None]
        return self._steer(mean_heading, velocities, count > 0)

    def cohesion(
        self,
        positions: np.ndarray,
        velocities: np.ndarray,
        _cache: Optional[Tuple[np.ndarray, np.ndarray]] = None,
    ) -> np.ndarray:
        _, dist = _cache or self._offsets(positions)
        mask = self._neighbours(dist, self.cohesion_radius)
        count = mask.sum(axis=1)
        centroid = (mask.astype(np.float64) @ positions) / np.maximum(count, 1)[:, None]
        return self._steer(centroid - positions, velocities, count > 0)

    def scatter(self, positions: np.ndarray, amplitude: Optional[float]) -> np.ndarray:
        """Radial push away from the centre when the amplitude is above threshold."""
        if amplitude is None or amplitude <= self.scatter_threshold:
            return np.zeros_like(positions)
        away = positions - np.asarray(self.center, dtype=np.float64)
        return vector.normalize_rows(away) * (self.max_force * self.scatter_gain)

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def steering(self, positions: np.ndarray, velocities: np.ndarray, amplitude: Optional[float]) -> np.ndarray:
        """Weighted sum of the three behaviours plus scatter."""
        cache = self._offsets(positions)
        force = (
            self.separation(positions, velocities, cache) * self.separation_weight
            + self.alignment(positions, velocities, cache) * self.alignment_weight
            + self.cohesion(positions, velocities, cache) * self.cohesion_weight
        )
        return force + self.scatter(positions, amplitude)

    def apply(self, state: SimulationState, amplitude: Optional[float] = None) -> None:
        """Steer, clamp, move and wrap every fish in place."""
        if state.dimensions != 2:
            raise ValueError(f"Flocking runs in 2-D, state is {state.dimensions}-D")

        force = self.steering(state.positions, state.velocities, amplitude)
        state.velocities += force
        np.clip(state.velocities, -self.max_speed, self.max_speed, out=state.velocities)
        state.positions += state.velocities

        extent = np.array([self.width, self.height])
        pos = state.positions
        pos += np.where(pos < 0, extent, 0.0)
        pos -= np.where(pos > extent, extent, 0.0)
