"""Simulation core: rotation, projection, physics and interaction models."""

from hyperscope.core.flocking import FlockingModel
from hyperscope.core.hypercube import HypercubeGraph
from hyperscope.core.interaction import PairwiseInteraction, pair_force
from hyperscope.core.physics import (
    Decoration,
    Entity,
    PhysicsIntegrator,
    SimulationState,
    apply_audio_jitter,
)
from hyperscope.core.projection import ProjectionPipeline, derive_offset, viewport_map
from hyperscope.core.rotation import RotationPlane, rotate, rotate_plane, rotate_points

__all__ = [
    "Decoration",
    "Entity",
    "FlockingModel",
    "HypercubeGraph",
    "PairwiseInteraction",
    "PhysicsIntegrator",
    "ProjectionPipeline",
    "RotationPlane",
    "SimulationState",
    "apply_audio_jitter",
    "derive_offset",
    "pair_force",
    "rotate",
    "rotate_plane",
    "rotate_points",
    "viewport_map",
]
