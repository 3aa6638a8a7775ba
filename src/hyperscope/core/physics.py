"""
Entity state and the per-entity Euler integrator.

Entities keep their position and velocity as row views into the
``SimulationState`` arrays. Mutating ``entity.velocity[i]`` therefore
updates the shared (n, N) array the vectorised force passes read, and the
other way round.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np


@dataclass
class Decoration:
    """Rendering-only attributes. Physics never reads these."""

    size: float = 5.0
    color: Tuple[int, int, int] = (255, 0, 0)
    phase: float = 0.0
    phase_speed: float = 0.0


@dataclass
class Entity:
    """A simulated ball / fish."""

    position: np.ndarray
    velocity: np.ndarray
    decoration: Optional[Decoration] = None

    @property
    def dimensions(self) -> int:
        return self.position.shape[0]


@dataclass
class SimulationState:
    """Everything that survives from one tick to the next."""

    positions: np.ndarray
    velocities: np.ndarray
    entities: List[Entity] = field(default_factory=list)
    tick: int = 0
    elapsed_ms: float = 0.0

    @classmethod
    def create(
        cls,
        positions: np.ndarray,
        velocities: np.ndarray,
        decorations: Optional[Sequence[Optional[Decoration]]] = None,
    ) -> "SimulationState":
        positions = np.array(positions, dtype=np.float64)
        velocities = np.array(velocities, dtype=np.float64)
        if positions.ndim != 2 or positions.shape != velocities.shape:
            raise ValueError(
                f"positions {positions.shape} and velocities {velocities.shape} "
                "must be matching (n, N) arrays"
            )
        n = positions.shape[0]
        if decorations is None:
            decorations = [None] * n
        elif len(decorations) != n:
            raise ValueError(f"Expected {n} decorations, got {len(decorations)}")

        state = cls(positions=positions, velocities=velocities)
        state.entities = [
            Entity(positions[k], velocities[k], decorations[k]) for k in range(n)
        ]
        return state

    @property
    def population(self) -> int:
        return self.positions.shape[0]

    @property
    def dimensions(self) -> int:
        return self.positions.shape[1]


class PhysicsIntegrator:
    """
    Gravity, displacement, wall reflection and damping inside ``[-bound, bound]^N``.

    Args:
        bound: Half-extent of the box on every axis.
        gravity: Added to the velocity along ``gravity_axis`` each tick.
        gravity_axis: Index of the "vertical" axis.
        friction: Velocity multiplier applied every tick (< 1 damps).
        restitution: Negative multiplier applied on a wall hit.
    """

    def __init__(
        self,
        bound: float,
        gravity: float = 0.2,
        gravity_axis: int = 1,
        friction: float = 0.99,
        restitution: float = -0.8,
    ):
        self.bound = float(bound)
        self.gravity = float(gravity)
        self.gravity_axis = int(gravity_axis)
        self.friction = float(friction)
        self.restitution = float(restitution)

    def step(self, entity: Entity) -> int:
        """
        Advance one entity by one tick, in place.

        Axes are handled independently in the order gravity, displacement,
        reflection, damping.

        Returns:
            Number of axes that hit a wall this tick.
        """
        pos = entity.position
        vel = entity.velocity
        bound = self.bound
        bounces = 0
        for i in range(pos.shape[0]):
            if i == self.gravity_axis:
                vel[i] += self.gravity

            pos[i] += vel[i]

            if pos[i] > bound:
                pos[i] = bound
                vel[i] *= self.restitution
                bounces += 1
            elif pos[i] < -bound:
                pos[i] = -bound
                vel[i] *= self.restitution
                bounces += 1

            vel[i] *= self.friction
        return bounces

    def step_all(self, state: SimulationState) -> List[int]:
        """Step every entity; return the indices of those that bounced."""
        bounced = []
        for index, entity in enumerate(state.entities):
            if self.step(entity):
                bounced.append(index)
        return bounced


def apply_audio_jitter(
    state: SimulationState,
    amplitude: Optional[float],
    rng: np.random.Generator,
    gain: float = 1.0,
) -> None:
    """
    Shake every velocity component by ``uniform(-0.5, 0.5) * gain * amplitude / 255``.

    ``amplitude`` is an 8-bit style analyser level; ``None`` means silence.
    """
    if not amplitude or gain == 0:
        return
    level = gain * float(amplitude) / 255.0
    state.velocities += (rng.random(state.velocities.shape) - 0.5) * level
