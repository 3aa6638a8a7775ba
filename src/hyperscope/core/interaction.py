"""
Pairwise N-dimensional forces and random turbulence.

For every unordered pair closer than ``radius`` a force along the pair's
separation direction of size ``strength / max(distance, 1)`` is added to one
velocity and subtracted from the other, so each pair contributes zero net
momentum. Positive strength pushes entities apart, negative pulls them
together. The pass must run before integration in the same tick.
"""

import numpy as np

from hyperscope.core import vector
from hyperscope.core.physics import SimulationState


def pair_force(
    pa: np.ndarray,
    pb: np.ndarray,
    radius: float,
    strength: float,
) -> np.ndarray:
    """
    Force on entity A from entity B. Entity B receives the exact negation.

    Coincident entities (distance 0) have no separation direction and get a
    zero force.
    """
    delta = vector.subtract(pa, pb)
    dist = vector.magnitude(delta)
    if dist >= radius or dist == 0.0:
        return np.zeros_like(delta)
    return vector.normalize(delta) * (strength / max(dist, 1.0))


def pairwise_deltas(positions: np.ndarray, radius: float, strength: float) -> np.ndarray:
    """
    Velocity change for every entity from all pair interactions.

    Builds the antisymmetric (n, n, N) force matrix ``F[i, j] = -F[j, i]``
    from the upper triangle and sums each row.
    """
    n = positions.shape[0]
    if n < 2:
        return np.zeros_like(positions)

    delta = positions[:, None, :] - positions[None, :, :]
    dist = np.sqrt(np.einsum("ijk,ijk->ij", delta, delta))

    upper = np.triu(np.ones((n, n), dtype=bool), k=1)
    active = upper & (dist < radius) & (dist > 0.0)
    if not np.any(active):
        return np.zeros_like(positions)

    ii, jj = np.nonzero(active)
    d = dist[ii, jj]
    forces = delta[ii, jj] / d[:, None] * (strength / np.maximum(d, 1.0))[:, None]

    out = np.zeros_like(positions)
    np.add.at(out, ii, forces)
    np.add.at(out, jj, -forces)
    return out


class PairwiseInteraction:
    """
    Short-range repulsion/attraction plus sporadic turbulence kicks.

    Args:
        radius: Pairs at or beyond this distance do not interact.
        strength: Force scale; sign selects repulsion (+) or attraction (-).
        turbulence_probability: Per-entity chance per tick of a kick.
        turbulence_magnitude: Kick components are ``uniform(-m, m)``.
    """

    def __init__(
        self,
        radius: float = 50.0,
        strength: float = 0.5,
        turbulence_probability: float = 0.01,
        turbulence_magnitude: float = 1.0,
    ):
        self.radius = float(radius)
        self.strength = float(strength)
        self.turbulence_probability = float(turbulence_probability)
        self.turbulence_magnitude = float(turbulence_magnitude)

    def apply_forces(self, state: SimulationState) -> np.ndarray:
        """Add pair forces to ``state.velocities`` in place; return the deltas."""
        deltas = pairwise_deltas(state.positions, self.radius, self.strength)
        state.velocities += deltas
        return deltas

    def apply_turbulence(self, state: SimulationState, rng: np.random.Generator) -> np.ndarray:
        """Kick a random subset of entities; return the mask of kicked entities."""
        n, dims = state.velocities.shape
        if self.turbulence_probability <= 0 or self.turbulence_magnitude == 0:
            return np.zeros(n, dtype=bool)
        kicked = rng.random(n) < self.turbulence_probability
        count = int(kicked.sum())
        if count:
            m = self.turbulence_magnitude
            state.velocities[kicked] += rng.uniform(-m, m, (count, dims))
        return kicked

    def apply(self, state: SimulationState, rng: np.random.Generator) -> None:
        self.apply_forces(state)
        self.apply_turbulence(state, rng)
