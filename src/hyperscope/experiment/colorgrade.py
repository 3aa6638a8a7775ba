"""
Particle colours and frame post-processing.

Colours are plain 8-bit RGB tuples. Post-processing works on
(H, W, 3) uint8 frames produced by the raster sink: trail persistence,
gaussian bloom, radial vignette and a soft highlight shoulder.
"""

import colorsys
from typing import Tuple

import numpy as np
from scipy.ndimage import gaussian_filter

RGB = Tuple[int, int, int]


def hsl_color(hue: float, saturation: float = 1.0, lightness: float = 0.5) -> RGB:
    """
    CSS-style ``hsl()`` to an RGB tuple.

    Args:
        hue: Hue in [0, 1).
        saturation: [0, 1].
        lightness: [0, 1]; 0.5 gives the fully saturated colour.
    """
    r, g, b = colorsys.hls_to_rgb(hue % 1.0, lightness, saturation)
    return (int(round(r * 255)), int(round(g * 255)), int(round(b * 255)))


def random_hue_color(rng: np.random.Generator) -> RGB:
    """Bright colour with a uniformly random hue."""
    return hsl_color(float(rng.random()))


def blend(color: RGB, background: RGB, alpha: float) -> RGB:
    """Mix ``color`` over ``background`` with opacity ``alpha``."""
    a = min(max(alpha, 0.0), 1.0)
    return tuple(int(round(c * a + b * (1.0 - a))) for c, b in zip(color, background))


def apply_trails(
    previous: np.ndarray,
    current: np.ndarray,
    persistence: float,
) -> np.ndarray:
    """
    Keep a fading copy of the previous frame under the current one.

    Args:
        previous: Last output frame, or None on the first frame.
        current: Freshly drawn frame.
        persistence: 0 keeps nothing, values near 1 leave long trails.

    Returns:
        (H, W, 3) uint8 frame.
    """
    if previous is None or persistence <= 0:
        return current
    faded = previous.astype(np.float32) * persistence
    return np.maximum(faded, current.astype(np.float32)).astype(np.uint8)


def add_glow(
    frame: np.ndarray,
    intensity: float = 0.35,
    radius: float = 6.0,
) -> np.ndarray:
    """
    Screen-blend a blurred copy of the frame for bloom.

    Args:
        frame: (H, W, 3) uint8 RGB.
        intensity: Bloom opacity (0-1).
        radius: Gaussian sigma in pixels.
    """
    if intensity <= 0 or radius <= 0:
        return frame

    base = frame.astype(np.float32) / 255.0
    bloom = gaussian_filter(base, sigma=(radius, radius, 0)) * intensity
    screen = 1.0 - (1.0 - base) * (1.0 - np.clip(bloom, 0.0, 1.0))
    return (np.clip(screen, 0.0, 1.0) * 255).astype(np.uint8)


def vignette(frame: np.ndarray, strength: float = 0.3) -> np.ndarray:
    """Darken toward the corners; 0 disables."""
    if strength <= 0:
        return frame

    h, w = frame.shape[:2]
    y, x = np.ogrid[:h, :w]
    cy, cx = (h - 1) / 2.0, (w - 1) / 2.0
    r = np.sqrt((x - cx) ** 2 + (y - cy) ** 2) / max(np.hypot(cx, cy), 1e-6)
    falloff = 1.0 - np.clip(r * strength, 0.0, 1.0) ** 2
    return (frame.astype(np.float32) * falloff[:, :, None]).astype(np.uint8)


def tone_map_soft(frame: np.ndarray, shoulder: float = 0.8) -> np.ndarray:
    """Compress values above ``shoulder * 255`` so highlights approach 255 smoothly."""
    knee = shoulder * 255.0
    headroom = 255.0 - knee
    f = frame.astype(np.float32)
    over = np.maximum(f - knee, 0.0)
    mapped = np.where(f > knee, knee + over * headroom / (over + headroom), f)
    return mapped.astype(np.uint8)
