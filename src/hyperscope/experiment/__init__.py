"""
Hyperscope rendering layer: orchestration, sinks, offline video output.
"""

from hyperscope.experiment.base import BaseVisualizer, FramePolisher
from hyperscope.experiment.orchestrator import (
    DrawInstruction,
    Frame,
    FrameOrchestrator,
    LineSegment,
    RenderSink,
)
from hyperscope.experiment.renderer import ParticleRenderer
from hyperscope.experiment.sinks import PygameSink, RasterSink, RecordingSink
