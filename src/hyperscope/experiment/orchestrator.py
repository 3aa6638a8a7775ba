"""
Frame orchestrator for the particle simulation.

Owns the simulation state and the static wireframe, advances physics once
per tick, then turns every entity and cube vertex into screen space
(rotate -> project -> viewport) and hands ordered draw instructions to a
render sink. Ticks are strictly sequential; nothing here blocks or retries.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Protocol, Sequence, Tuple

import numpy as np

from hyperscope.config import SimulationConfig
from hyperscope.core.flocking import FlockingModel
from hyperscope.core.hypercube import HypercubeGraph
from hyperscope.core.interaction import PairwiseInteraction
from hyperscope.core.physics import (
    Decoration,
    PhysicsIntegrator,
    SimulationState,
    apply_audio_jitter,
)
from hyperscope.core.projection import ProjectionPipeline, viewport_map
from hyperscope.core.rotation import rotate_points
from hyperscope.errors import ConfigurationError
from hyperscope.experiment.colorgrade import random_hue_color

logger = logging.getLogger(__name__)

AmplitudeSource = Callable[[int], Optional[float]]


@dataclass(frozen=True)
class DrawInstruction:
    """One filled circle in screen space."""
    x: float
    y: float
    radius: float
    color: Tuple[int, int, int]
    depth_alpha: float = 1.0


@dataclass(frozen=True)
class LineSegment:
    """One wireframe edge in screen space."""
    x1: float
    y1: float
    x2: float
    y2: float


@dataclass
class Frame:
    """Everything a sink needs to paint one tick."""
    tick: int
    elapsed_ms: float
    circles: List[DrawInstruction] = field(default_factory=list)
    segments: List[LineSegment] = field(default_factory=list)
    amplitude: Optional[float] = None


class RenderSink(Protocol):
    """Paints frames. Clearing and presenting are the sink's business."""

    def begin_frame(self, frame: Frame) -> None: ...

    def draw_segments(self, segments: Sequence[LineSegment]) -> None: ...

    def draw_circles(self, circles: Sequence[DrawInstruction]) -> None: ...

    def end_frame(self) -> None: ...


class FrameOrchestrator:
    """
    Drives one simulation run.

    Args:
        config: Simulation config; validated here.
        seed: Seed for the random source when ``rng`` is not given.
        amplitude_source: ``tick -> level`` callable polled once per tick.
            Missing source or ``None`` samples mean silence.
        rng: Random generator shared by spawning, turbulence, jitter and
            recolouring.
        state: Pre-built state to simulate instead of a random spawn.
    """

    IDLE = "idle"
    RUNNING = "running"

    def __init__(
        self,
        config: SimulationConfig,
        seed: Optional[int] = None,
        amplitude_source: Optional[AmplitudeSource] = None,
        rng: Optional[np.random.Generator] = None,
        state: Optional[SimulationState] = None,
    ):
        self.cfg = config.validate()
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.amplitude_source = amplitude_source
        self.status = self.IDLE

        cfg = self.cfg
        self.planes = cfg.planes
        self.projection = ProjectionPipeline(cfg.focal_distances, cfg.resolved_offset)
        self.graph: Optional[HypercubeGraph] = (
            HypercubeGraph.build(cfg.dimensions, cfg.bound) if cfg.draw_wireframe else None
        )
        self.integrator = PhysicsIntegrator(
            bound=cfg.bound,
            gravity=cfg.gravity,
            gravity_axis=cfg.gravity_axis,
            friction=cfg.friction,
            restitution=cfg.restitution,
        )
        self.pairwise: Optional[PairwiseInteraction] = None
        self.flocking: Optional[FlockingModel] = None
        if cfg.interaction == "pairwise":
            self.pairwise = PairwiseInteraction(
                radius=cfg.interaction_radius,
                strength=cfg.interaction_strength,
                turbulence_probability=cfg.turbulence_probability,
                turbulence_magnitude=cfg.turbulence_magnitude,
            )
        elif cfg.interaction == "flocking":
            self.flocking = FlockingModel(
                separation_radius=cfg.separation_radius,
                alignment_radius=cfg.alignment_radius,
                cohesion_radius=cfg.cohesion_radius,
                max_speed=cfg.max_speed,
                max_force=cfg.max_force,
                separation_weight=cfg.separation_weight,
                alignment_weight=cfg.alignment_weight,
                cohesion_weight=cfg.cohesion_weight,
                scatter_threshold=cfg.scatter_threshold,
                scatter_gain=cfg.scatter_gain,
                width=cfg.width,
                height=cfg.height,
            )

        if state is None:
            state = self.spawn()
        elif state.dimensions != cfg.dimensions:
            raise ConfigurationError(
                f"State is {state.dimensions}-D but config says dimensions={cfg.dimensions}"
            )
        self.state = state
        logger.debug(
            "Orchestrator ready: %d entities, wireframe=%s, interaction=%s",
            self.state.population, self.graph is not None, cfg.interaction,
        )

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def _decoration(self) -> Decoration:
        cfg = self.cfg
        if cfg.color_mode == "random_hue":
            color = random_hue_color(self.rng)
        else:
            color = tuple(cfg.particle_color)
        phase = float(self.rng.uniform(0.0, 2 * math.pi)) if cfg.phase_speed else 0.0
        return Decoration(
            size=cfg.particle_size,
            color=color,
            phase=phase,
            phase_speed=cfg.phase_speed,
        )

    def spawn(self) -> SimulationState:
        """Create the fixed population with seeded random positions and velocities."""
        cfg = self.cfg
        n, dims = cfg.population, cfg.dimensions
        if cfg.interaction == "flocking":
            positions = self.rng.random((n, 2)) * np.array([cfg.width, cfg.height], dtype=np.float64)
            velocities = np.zeros((n, 2))
        else:
            positions = self.rng.uniform(-cfg.bound, cfg.bound, (n, dims))
            velocities = self.rng.uniform(-cfg.initial_speed, cfg.initial_speed, (n, dims))
        decorations = [self._decoration() for _ in range(n)]
        return SimulationState.create(positions, velocities, decorations)

    def reset(self, seed: Optional[int] = None) -> None:
        """Respawn the population; a new seed also replaces the random source."""
        if seed is not None:
            self.rng = np.random.default_rng(seed)
        self.state = self.spawn()
        self.status = self.IDLE

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def sample_amplitude(self) -> Optional[float]:
        if self.amplitude_source is None:
            return None
        value = self.amplitude_source(self.state.tick)
        if value is None:
            return None
        return max(float(value), 0.0)

    def advance(self, amplitude: Optional[float]) -> List[int]:
        """Run interaction and integration for one tick. Returns bounced entity indices."""
        state = self.state
        if self.pairwise is not None:
            self.pairwise.apply(state, self.rng)
        if self.cfg.audio_jitter_gain:
            apply_audio_jitter(state, amplitude, self.rng, self.cfg.audio_jitter_gain)

        if self.flocking is not None:
            self.flocking.apply(state, amplitude)
            return []
        return self.integrator.step_all(state)

    def _animate_decorations(self, bounced: Sequence[int]) -> None:
        entities = self.state.entities
        for entity in entities:
            deco = entity.decoration
            if deco is not None and deco.phase_speed:
                deco.phase = (deco.phase + deco.phase_speed) % (2 * math.pi)
        if self.cfg.recolor_on_bounce:
            for index in bounced:
                deco = entities[index].decoration
                if deco is not None:
                    deco.color = random_hue_color(self.rng)

    def _to_screen(self, points: np.ndarray, t: float) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """rotate -> project -> viewport. Returns (screen xy, perspective scale, depth)."""
        rotated = rotate_points(points, t, self.planes)
        if rotated.shape[1] > 2:
            depth = rotated[:, -1].copy()
        else:
            depth = np.zeros(rotated.shape[0])
        xy, scale = self.projection.project_points(rotated)
        screen = viewport_map(xy, self.cfg.viewport_scale, self.cfg.viewport_center)
        return screen, scale, depth

    def _depth_alpha(self, depth: np.ndarray) -> np.ndarray:
        cfg = self.cfg
        if cfg.dimensions <= 2:
            return np.ones_like(depth)
        extent = cfg.depth_extent
        t = np.clip((depth + extent) / (2 * extent), 0.0, 1.0)
        return cfg.min_depth_alpha + (1.0 - cfg.min_depth_alpha) * t

    def build_circles(self, t: float) -> List[DrawInstruction]:
        cfg = self.cfg
        screen, scale, depth = self._to_screen(self.state.positions, t)
        alpha = self._depth_alpha(depth)

        order = np.argsort(depth, kind="stable") if cfg.depth_sort else range(len(depth))
        circles = []
        for k in order:
            deco = self.state.entities[k].decoration
            size = deco.size if deco is not None else cfg.particle_size
            color = deco.color if deco is not None else tuple(cfg.particle_color)
            radius = size * cfg.viewport_scale
            if cfg.perspective_size:
                radius *= float(scale[k])
            if deco is not None and cfg.pulse:
                radius *= 1.0 + cfg.pulse * math.sin(deco.phase)
            circles.append(
                DrawInstruction(
                    x=float(screen[k, 0]),
                    y=float(screen[k, 1]),
                    radius=max(radius, 0.5),
                    color=color,
                    depth_alpha=float(alpha[k]),
                )
            )
        return circles

    def build_segments(self, t: float) -> List[LineSegment]:
        if self.graph is None:
            return []
        screen, _, _ = self._to_screen(self.graph.vertices, t)
        return [
            LineSegment(
                float(screen[i, 0]), float(screen[i, 1]),
                float(screen[j, 0]), float(screen[j, 1]),
            )
            for i, j in self.graph.edges
        ]

    def tick(self) -> Frame:
        """
        Advance one tick and describe it.

        The frame is rendered at the animation time the tick started at, so
        the first frame shows the unrotated scene.
        """
        state = self.state
        amplitude = self.sample_amplitude()
        bounced = self.advance(amplitude)
        self._animate_decorations(bounced)

        t = state.elapsed_ms
        frame = Frame(
            tick=state.tick,
            elapsed_ms=t,
            circles=self.build_circles(t),
            segments=self.build_segments(t),
            amplitude=amplitude,
        )
        state.tick += 1
        state.elapsed_ms = state.tick * 1000.0 / self.cfg.fps
        return frame

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    @staticmethod
    def emit(frame: Frame, sink: RenderSink) -> None:
        """Hand a frame to the sink. Sink errors propagate to the caller."""
        sink.begin_frame(frame)
        sink.draw_segments(frame.segments)
        sink.draw_circles(frame.circles)
        sink.end_frame()

    def frames(self, count: Optional[int] = None) -> Iterator[Frame]:
        """Yield ``count`` ticks (forever when None)."""
        self.status = self.RUNNING
        produced = 0
        while count is None or produced < count:
            yield self.tick()
            produced += 1

    def run(
        self,
        sink: RenderSink,
        request_next_tick: Optional[Callable[[], bool]] = None,
        max_ticks: Optional[int] = None,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> int:
        """
        Tick, emit, wait for the host, repeat.

        Args:
            sink: Receives every frame.
            request_next_tick: Blocks until the host wants the next frame
                (e.g. a display refresh). Returning False ends the loop.
            max_ticks: Stop after this many ticks.
            should_stop: Polled before each tick.

        Returns:
            Number of ticks executed.
        """
        self.status = self.RUNNING
        count = 0
        while max_ticks is None or count < max_ticks:
            if should_stop is not None and should_stop():
                break
            self.emit(self.tick(), sink)
            count += 1
            if request_next_tick is not None and request_next_tick() is False:
                break
        return count
