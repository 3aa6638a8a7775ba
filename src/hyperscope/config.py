"""
Simulation and rendering configuration.

``BaseConfig`` carries the frame/post-processing knobs shared by every
scene; ``SimulationConfig`` adds the physics, interaction, rotation and
projection parameters. Named presets describe the four stock scenes and JSON
files can override any field on top of a preset.
"""

import dataclasses
import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from hyperscope.core.projection import derive_offset
from hyperscope.core.rotation import DEFAULT_PLANES_5D, RotationPlane, validate_planes
from hyperscope.errors import ConfigurationError

logger = logging.getLogger(__name__)

INTERACTION_MODES = ("none", "pairwise", "flocking")
COLOR_MODES = ("solid", "random_hue")


@dataclass
class BaseConfig:
    """Universal frame configuration."""
    width: int = 1920
    height: int = 1080
    fps: int = 60

    # Post-processing
    glow_enabled: bool = True
    glow_intensity: float = 0.35
    glow_radius: int = 6
    vignette_strength: float = 0.3
    trail_persistence: float = 0.0  # 0 clears every frame, close to 1 leaves long trails

    # Colours
    background_color: Tuple[int, int, int] = (0, 0, 0)
    wireframe_color: Tuple[int, int, int] = (255, 255, 255)
    wireframe_alpha: float = 0.3
    line_width: int = 1


@dataclass
class SimulationConfig(BaseConfig):
    """Every scalar knob of the simulation. Read-only for the core."""

    # Space
    dimensions: int = 5
    bound: float = 200.0

    # Physics
    gravity: float = 0.2
    gravity_axis: int = 1
    friction: float = 0.99
    restitution: float = -0.8
    population: int = 100
    initial_speed: float = 2.0

    # Rotation / projection
    rotation_planes: Tuple[Tuple[int, int, float], ...] = field(
        default_factory=lambda: tuple(p.as_tuple() for p in DEFAULT_PLANES_5D)
    )
    focal_distances: Tuple[float, ...] = (400.0, 400.0, 400.0)
    projection_offset: Optional[float] = None  # None derives bound * sqrt(N)
    viewport_scale: float = 1.0
    centered: bool = True  # False maps world (0, 0) to the top-left corner

    # Interaction
    interaction: str = "none"  # none | pairwise | flocking
    interaction_radius: float = 50.0
    interaction_strength: float = 0.5
    turbulence_probability: float = 0.0
    turbulence_magnitude: float = 1.0
    audio_jitter_gain: float = 0.0

    # Flocking
    separation_radius: float = 20.0
    alignment_radius: float = 50.0
    cohesion_radius: float = 100.0
    max_speed: float = 2.0
    max_force: float = 0.1
    separation_weight: float = 1.5
    alignment_weight: float = 1.0
    cohesion_weight: float = 1.0
    scatter_threshold: float = 100.0
    scatter_gain: float = 2.0

    # Drawing
    draw_wireframe: bool = True
    depth_sort: bool = False
    recolor_on_bounce: bool = False
    color_mode: str = "solid"  # solid | random_hue
    particle_color: Tuple[int, int, int] = (255, 0, 0)
    particle_size: float = 5.0
    perspective_size: bool = False
    phase_speed: float = 0.0
    pulse: float = 0.0
    min_depth_alpha: float = 0.25

    @property
    def planes(self) -> Tuple[RotationPlane, ...]:
        return tuple(RotationPlane.from_tuple(p) for p in self.rotation_planes)

    @property
    def resolved_offset(self) -> float:
        if self.projection_offset is not None:
            return float(self.projection_offset)
        return derive_offset(self.bound, self.dimensions)

    @property
    def depth_extent(self) -> float:
        """Largest depth any rotated point can reach."""
        return self.bound * math.sqrt(self.dimensions)

    @property
    def viewport_center(self) -> Tuple[float, float]:
        if self.centered:
            return (self.width / 2.0, self.height / 2.0)
        return (0.0, 0.0)

    def validate(self) -> "SimulationConfig":
        """Fail fast on inconsistent settings. Returns self for chaining."""
        n = self.dimensions
        if n < 2:
            raise ConfigurationError(f"dimensions must be >= 2, got {n}")
        if self.bound <= 0:
            raise ConfigurationError(f"bound must be positive, got {self.bound}")
        if self.population <= 0:
            raise ConfigurationError(f"population must be positive, got {self.population}")
        if self.width <= 0 or self.height <= 0 or self.fps <= 0:
            raise ConfigurationError(
                f"width/height/fps must be positive, got {self.width}x{self.height}@{self.fps}"
            )
        if not 0 < self.friction < 1:
            raise ConfigurationError(f"friction must be in (0, 1), got {self.friction}")
        if self.restitution >= 0:
            raise ConfigurationError(
                f"restitution must be negative to reverse direction, got {self.restitution}"
            )
        if not 0 <= self.gravity_axis < n:
            raise ConfigurationError(f"gravity_axis {self.gravity_axis} outside [0, {n})")
        try:
            planes = self.planes
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"rotation_planes must be (axis_i, axis_j, rate) triples, got {self.rotation_planes!r}"
            ) from e
        validate_planes(planes, n)
        if len(self.focal_distances) != n - 2:
            raise ConfigurationError(
                f"{n}-D projection needs {n - 2} focal distances, got {len(self.focal_distances)}"
            )
        if not all(isinstance(d, (int, float)) for d in self.focal_distances):
            raise ConfigurationError(f"focal distances must be numbers: {self.focal_distances}")
        if any(d <= 0 for d in self.focal_distances):
            raise ConfigurationError(f"focal distances must be positive: {self.focal_distances}")
        if self.interaction not in INTERACTION_MODES:
            raise ConfigurationError(
                f"interaction must be one of {INTERACTION_MODES}, got {self.interaction!r}"
            )
        if self.interaction == "flocking" and n != 2:
            raise ConfigurationError(f"flocking needs dimensions=2, got {n}")
        if self.color_mode not in COLOR_MODES:
            raise ConfigurationError(f"color_mode must be one of {COLOR_MODES}, got {self.color_mode!r}")
        if not 0 <= self.turbulence_probability <= 1:
            raise ConfigurationError(
                f"turbulence_probability must be in [0, 1], got {self.turbulence_probability}"
            )
        if self.max_speed <= 0 or self.max_force < 0:
            raise ConfigurationError("max_speed must be positive and max_force non-negative")
        if not 0 <= self.trail_persistence < 1:
            raise ConfigurationError(f"trail_persistence must be in [0, 1), got {self.trail_persistence}")

        offset = self.resolved_offset
        if self.projection_offset is not None and offset < self.depth_extent:
            logger.info(
                "projection_offset %.1f is below the reachable depth %.1f; "
                "points may blow up near the camera",
                offset, self.depth_extent,
            )
        logger.debug(
            "Config OK: %d-D, %d entities, interaction=%s, offset=%.1f",
            n, self.population, self.interaction, offset,
        )
        return self

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base: Optional["SimulationConfig"] = None) -> "SimulationConfig":
        """Apply ``data`` on top of ``base`` (defaults when None). Unknown keys are errors."""
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown config keys: {', '.join(unknown)}")

        values = dict(data)
        try:
            if "rotation_planes" in values:
                values["rotation_planes"] = tuple(tuple(p) for p in values["rotation_planes"])
            for key in ("focal_distances", "background_color", "wireframe_color", "particle_color"):
                if key in values:
                    values[key] = tuple(values[key])
        except TypeError as e:
            raise ConfigurationError(f"Malformed config value: {e}") from e
        return dataclasses.replace(base or cls(), **values)


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------

PRESETS: Dict[str, Dict[str, Any]] = {
    # 100 red balls bouncing in a tumbling 5-cube wireframe
    "hypercube": {},
    # Hypercube with short-range repulsion, turbulence and depth ordering
    "swarm": {
        "interaction": "pairwise",
        "interaction_radius": 60.0,
        "interaction_strength": 0.8,
        "turbulence_probability": 0.02,
        "turbulence_magnitude": 1.5,
        "depth_sort": True,
        "recolor_on_bounce": True,
        "color_mode": "random_hue",
        "perspective_size": True,
        "phase_speed": 0.05,
        "pulse": 0.3,
        "trail_persistence": 0.6,
    },
    # 1000 fish that school and scatter on loud sounds
    "flock": {
        "dimensions": 2,
        "rotation_planes": (),
        "focal_distances": (),
        "population": 1000,
        "interaction": "flocking",
        "gravity": 0.0,
        "draw_wireframe": False,
        "color_mode": "random_hue",
        "particle_size": 2.0,
        "centered": False,
    },
    # 1000 particles shaken by the sound level inside a bouncy box
    "jitter": {
        "dimensions": 2,
        "rotation_planes": (),
        "focal_distances": (),
        "population": 1000,
        "gravity": 0.0,
        "restitution": -0.9,
        "bound": 540.0,
        "initial_speed": 1.0,
        "audio_jitter_gain": 1.0,
        "draw_wireframe": False,
        "color_mode": "random_hue",
        "particle_size": 2.0,
    },
}


def preset(name: str, **overrides: Any) -> SimulationConfig:
    """Build a validated config from a named preset plus keyword overrides."""
    if name not in PRESETS:
        raise ConfigurationError(f"Unknown preset {name!r}; choose from {sorted(PRESETS)}")
    cfg = SimulationConfig.from_dict(PRESETS[name])
    if overrides:
        cfg = SimulationConfig.from_dict(overrides, base=cfg)
    return cfg.validate()


def load_config(path: Union[str, Path], base: Optional[SimulationConfig] = None) -> SimulationConfig:
    """
    Read a JSON override file.

    A top-level ``"preset"`` key selects the starting preset; every other key
    overrides a field.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: expected a JSON object")

    preset_name = data.pop("preset", None)
    if preset_name is not None:
        base = preset(preset_name)
    return SimulationConfig.from_dict(data, base=base).validate()
