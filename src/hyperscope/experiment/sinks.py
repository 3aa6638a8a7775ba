"""
Render sinks: where draw instructions end up.

- ``RecordingSink`` keeps frames in memory (tests, analysis).
- ``RasterSink`` paints with Pillow into an RGB array for video encoding.
- ``PygameSink`` paints onto a pygame surface for the live preview.

Instructions far outside the canvas (a projection that blew up near the
camera) are culled here; painting them would only overflow the rasteriser.
"""

import math
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pygame
from PIL import Image, ImageDraw

from hyperscope.experiment.colorgrade import blend
from hyperscope.experiment.orchestrator import DrawInstruction, Frame, LineSegment

_CULL_LIMIT = 1e6


def _drawable(*coords: float) -> bool:
    return all(math.isfinite(c) and abs(c) < _CULL_LIMIT for c in coords)


def _on_canvas(circle: DrawInstruction, width: int, height: int) -> bool:
    r = circle.radius
    return (
        _drawable(circle.x, circle.y, r)
        and -r <= circle.x <= width + r
        and -r <= circle.y <= height + r
    )


class RecordingSink:
    """Stores every emitted frame."""

    def __init__(self):
        self.frames: List[Frame] = []
        self._open = False

    def begin_frame(self, frame: Frame) -> None:
        if self._open:
            raise RuntimeError("begin_frame called twice without end_frame")
        self._open = True
        self.frames.append(frame)

    def draw_segments(self, segments: Sequence[LineSegment]) -> None:
        pass

    def draw_circles(self, circles: Sequence[DrawInstruction]) -> None:
        pass

    def end_frame(self) -> None:
        self._open = False


class RasterSink:
    """
    Pillow rasteriser producing (H, W, 3) uint8 frames.

    Depth alpha is applied by blending each circle's colour toward the
    background; the wireframe is drawn first at ``wireframe_alpha``.
    """

    def __init__(
        self,
        width: int,
        height: int,
        background: Tuple[int, int, int] = (0, 0, 0),
        wireframe_color: Tuple[int, int, int] = (255, 255, 255),
        wireframe_alpha: float = 0.3,
        line_width: int = 1,
    ):
        self.width = width
        self.height = height
        self.background = tuple(background)
        self.line_color = blend(tuple(wireframe_color), self.background, wireframe_alpha)
        self.line_width = line_width

        self._image: Optional[Image.Image] = None
        self._draw: Optional[ImageDraw.ImageDraw] = None
        self.last_frame: Optional[np.ndarray] = None

    def begin_frame(self, frame: Frame) -> None:
        self._image = Image.new("RGB", (self.width, self.height), self.background)
        self._draw = ImageDraw.Draw(self._image)

    def draw_segments(self, segments: Sequence[LineSegment]) -> None:
        for seg in segments:
            if not _drawable(seg.x1, seg.y1, seg.x2, seg.y2):
                continue
            self._draw.line(
                [(seg.x1, seg.y1), (seg.x2, seg.y2)],
                fill=self.line_color,
                width=self.line_width,
            )

    def draw_circles(self, circles: Sequence[DrawInstruction]) -> None:
        for c in circles:
            if not _on_canvas(c, self.width, self.height):
                continue
            color = blend(c.color, self.background, c.depth_alpha)
            self._draw.ellipse(
                [c.x - c.radius, c.y - c.radius, c.x + c.radius, c.y + c.radius],
                fill=color,
            )

    def end_frame(self) -> None:
        self.last_frame = np.asarray(self._image, dtype=np.uint8).copy()
        self._image = None
        self._draw = None


class PygameSink:
    """
    Paints onto a pygame surface.

    Args:
        surface: Target surface; the display surface for a live window or
            any off-screen ``pygame.Surface``.
        present: Flip the display after each frame.
    """

    def __init__(
        self,
        surface: "pygame.Surface",
        background: Tuple[int, int, int] = (0, 0, 0),
        wireframe_color: Tuple[int, int, int] = (255, 255, 255),
        wireframe_alpha: float = 0.3,
        present: bool = True,
    ):
        self.surface = surface
        self.background = tuple(background)
        self.line_color = blend(tuple(wireframe_color), self.background, wireframe_alpha)
        self.present = present

    def begin_frame(self, frame: Frame) -> None:
        self.surface.fill(self.background)

    def draw_segments(self, segments: Sequence[LineSegment]) -> None:
        for seg in segments:
            if not _drawable(seg.x1, seg.y1, seg.x2, seg.y2):
                continue
            pygame.draw.aaline(self.surface, self.line_color, (seg.x1, seg.y1), (seg.x2, seg.y2))

    def draw_circles(self, circles: Sequence[DrawInstruction]) -> None:
        w, h = self.surface.get_size()
        for c in circles:
            if not _on_canvas(c, w, h):
                continue
            color = blend(c.color, self.background, c.depth_alpha)
            pygame.draw.circle(self.surface, color, (c.x, c.y), max(1, int(round(c.radius))))

    def end_frame(self) -> None:
        if self.present:
            pygame.display.flip()

    def to_array(self) -> np.ndarray:
        """Current surface as an (H, W, 3) uint8 array."""
        return pygame.surfarray.array3d(self.surface).swapaxes(0, 1).copy()
