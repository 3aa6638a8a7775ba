"""
Offline renderer: simulation + Pillow rasteriser -> RGB frames.

Wraps a ``FrameOrchestrator`` and a ``RasterSink`` behind the
``BaseVisualizer`` interface so a manifest of per-frame amplitudes can be
turned into a frame generator for the encoder.
"""

from typing import Any, Dict, Optional

import numpy as np

from hyperscope.audio.amplitude import AmplitudeTrack
from hyperscope.config import SimulationConfig
from hyperscope.experiment.base import BaseVisualizer
from hyperscope.experiment.orchestrator import Frame, FrameOrchestrator
from hyperscope.experiment.sinks import RasterSink


def amplitude_manifest(track: AmplitudeTrack, max_frames: Optional[int] = None) -> Dict[str, Any]:
    """Frame dicts (index, time, amplitude) for every frame of an amplitude track."""
    n = len(track) if max_frames is None else min(len(track), max_frames)
    return {
        "metadata": {"fps": track.fps, "n_frames": n, "duration": n / track.fps},
        "frames": [
            {
                "frame_index": i,
                "time": round(i / track.fps, 4),
                "amplitude": round(float(track.values[i]), 4),
            }
            for i in range(n)
        ],
    }


def silent_manifest(n_frames: int, fps: int) -> Dict[str, Any]:
    """Manifest for a run without audio."""
    return {
        "metadata": {"fps": fps, "n_frames": n_frames, "duration": n_frames / fps},
        "frames": [{"frame_index": i, "time": round(i / fps, 4)} for i in range(n_frames)],
    }


class ParticleRenderer(BaseVisualizer):
    """
    Renders the hypercube / swarm / flock / jitter scenes to RGB frames.

    The amplitude of the frame being rendered is fed to the orchestrator as
    its amplitude sample for that tick.
    """

    cfg: SimulationConfig

    def __init__(self, config: Optional[SimulationConfig] = None, seed: Optional[int] = None):
        super().__init__(config or SimulationConfig(), seed)

        self._level: Optional[float] = None
        self.last_frame: Optional[Frame] = None
        self.sink = RasterSink(
            self.cfg.width,
            self.cfg.height,
            background=self.cfg.background_color,
            wireframe_color=self.cfg.wireframe_color,
            wireframe_alpha=self.cfg.wireframe_alpha,
            line_width=self.cfg.line_width,
        )
        self.orchestrator = self._build_orchestrator()

    def _build_orchestrator(self) -> FrameOrchestrator:
        return FrameOrchestrator(
            self.cfg,
            rng=self.rng,
            amplitude_source=lambda tick: self._level,
        )

    def reset(self) -> None:
        super().reset()
        self._level = None
        self.last_frame = None
        self.orchestrator = self._build_orchestrator()

    def update(self, frame_data: Dict[str, Any]) -> None:
        self._level = frame_data.get("amplitude")
        frame = self.orchestrator.tick()
        self.orchestrator.emit(frame, self.sink)
        self.last_frame = frame

    def get_raw_frame(self) -> np.ndarray:
        return self.sink.last_frame
