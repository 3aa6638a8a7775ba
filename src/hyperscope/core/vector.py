"""
Vector helpers for steering and force accumulation.

All functions accept numpy arrays of any length (2-D fish, 5-D balls).
Single-vector helpers return new arrays; the ``*_rows`` variants operate
row-wise on (n, N) arrays for the vectorised O(n²) passes.
"""

import numpy as np


def add(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return np.asarray(a, dtype=np.float64) + b


def subtract(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return np.asarray(a, dtype=np.float64) - b


def scale(v: np.ndarray, scalar: float) -> np.ndarray:
    return np.asarray(v, dtype=np.float64) * scalar


def magnitude(v: np.ndarray) -> float:
    return float(np.sqrt(np.dot(v, v)))


def distance(a: np.ndarray, b: np.ndarray) -> float:
    return magnitude(subtract(a, b))


def normalize(v: np.ndarray) -> np.ndarray:
    """Unit vector in the direction of ``v``; the zero vector stays zero."""
    v = np.asarray(v, dtype=np.float64)
    mag = magnitude(v)
    if mag > 0:
        return v / mag
    return v.copy()


def limit(v: np.ndarray, max_magnitude: float) -> np.ndarray:
    """Clamp the magnitude of ``v`` to ``max_magnitude`` keeping its direction."""
    v = np.asarray(v, dtype=np.float64)
    if magnitude(v) > max_magnitude:
        return normalize(v) * max_magnitude
    return v.copy()


def clamp_components(v: np.ndarray, max_abs: float) -> np.ndarray:
    """Symmetric per-axis clamp to ``[-max_abs, max_abs]``."""
    return np.clip(v, -max_abs, max_abs)


# ---------------------------------------------------------------------------
# Row-wise batch forms
# ---------------------------------------------------------------------------

def magnitudes(rows: np.ndarray) -> np.ndarray:
    """(n, N) -> (n,) Euclidean norms."""
    return np.sqrt(np.einsum("ij,ij->i", rows, rows))


def normalize_rows(rows: np.ndarray) -> np.ndarray:
    """Normalise each row; zero rows are returned unchanged."""
    mags = magnitudes(rows)
    safe = np.where(mags > 0, mags, 1.0)
    return rows / safe[:, None]


def limit_rows(rows: np.ndarray, max_magnitude: float) -> np.ndarray:
    """Clamp each row's magnitude to ``max_magnitude``."""
    mags = magnitudes(rows)
    over = mags > max_magnitude
    if not np.any(over):
        return rows.copy()
    out = rows.copy()
    out[over] = rows[over] / mags[over, None] * max_magnitude
    return out
