"""
Base classes and universal styling for hyperscope visualizers.
"""

import abc
from typing import Any, Callable, Dict, Iterator, Optional

import numpy as np

from hyperscope.config import BaseConfig
from hyperscope.experiment.colorgrade import add_glow, apply_trails, tone_map_soft, vignette


class BaseVisualizer(abc.ABC):
    """
    Abstract base for frame-producing visualizers.

    Subclasses advance their simulation in ``update`` and paint the raw
    frame in ``get_raw_frame``; ``render_frame`` adds the shared
    post-processing. Audio arrives as manifest frame dicts carrying an
    ``"amplitude"`` level (0-255).
    """

    def __init__(self, config: Optional[BaseConfig] = None, seed: Optional[int] = None):
        self.cfg = config or BaseConfig()
        self.seed = seed
        self.rng = np.random.default_rng(seed)
        self.time = 0.0
        self.polisher = FramePolisher(self.cfg)

        # Smoothed amplitude, 0-1
        self._smooth_level = 0.0

    def _lerp(self, current: float, target: float, factor: float) -> float:
        return current + (target - current) * factor

    def _smooth_audio(self, frame_data: Dict[str, Any]) -> None:
        level = frame_data.get("amplitude")
        target = 0.0 if level is None else min(max(float(level), 0.0), 255.0) / 255.0
        # Rise fast, fall slowly
        factor = 0.4 if target > self._smooth_level else 0.08
        self._smooth_level = self._lerp(self._smooth_level, target, factor)

    @abc.abstractmethod
    def update(self, frame_data: Dict[str, Any]) -> None:
        """Advance the simulation state by one frame."""

    @abc.abstractmethod
    def get_raw_frame(self) -> np.ndarray:
        """(H, W, 3) uint8 frame before post-processing."""

    def reset(self) -> None:
        """Return to the initial state before a fresh render."""
        self.rng = np.random.default_rng(self.seed)
        self.time = 0.0
        self._smooth_level = 0.0
        self.polisher = FramePolisher(self.cfg)

    def render_frame(self, frame_data: Dict[str, Any], frame_index: int) -> np.ndarray:
        self.time += 1.0 / self.cfg.fps
        self._smooth_audio(frame_data)
        self.update(frame_data)
        return self.polisher.apply(self.get_raw_frame(), self._smooth_level)

    def render_manifest(
        self,
        manifest: Dict[str, Any],
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> Iterator[np.ndarray]:
        """
        Render all frames of a manifest as a generator.

        Args:
            manifest: Dict with a ``"frames"`` list of frame dicts.
            progress_callback: Optional callback(current, total).

        Yields:
            (H, W, 3) uint8 RGB arrays, one per frame.
        """
        frames = manifest.get("frames", [])
        total = len(frames)
        self.reset()
        for i, frame_data in enumerate(frames):
            yield self.render_frame(frame_data, i)
            if progress_callback:
                progress_callback(i + 1, total)


class FramePolisher:
    """
    Shared post-processing: trails, level-reactive bloom, vignette, tone map.

    Holds the previous output for trail persistence, so use one polisher per
    render.
    """

    def __init__(self, config: BaseConfig):
        self.cfg = config
        self._previous: Optional[np.ndarray] = None

    def apply(self, frame: np.ndarray, level: float = 0.0) -> np.ndarray:
        cfg = self.cfg
        out = apply_trails(self._previous, frame, cfg.trail_persistence)
        self._previous = out

        if cfg.glow_enabled:
            intensity = min(cfg.glow_intensity * (1.0 + level), 0.9)
            out = add_glow(out, intensity=intensity, radius=cfg.glow_radius)
        if cfg.vignette_strength > 0:
            out = vignette(out, strength=cfg.vignette_strength)
        return tone_map_soft(out)
