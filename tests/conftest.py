"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

from hyperscope.config import SimulationConfig

# Default sample rate for test audio
TEST_SR = 22050


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded generator for reproducible random draws."""
    return np.random.default_rng(1234)


@pytest.fixture
def small_config() -> SimulationConfig:
    """5-D hypercube scene small enough to tick quickly."""
    return SimulationConfig(width=160, height=120, fps=30, population=12, bound=40.0)


@pytest.fixture
def flock_config() -> SimulationConfig:
    """2-D flocking scene with a handful of fish."""
    return SimulationConfig(
        width=200,
        height=150,
        fps=30,
        dimensions=2,
        rotation_planes=(),
        focal_distances=(),
        population=30,
        interaction="flocking",
        draw_wireframe=False,
        centered=False,
    )


@pytest.fixture
def sample_rate() -> int:
    return TEST_SR


@pytest.fixture
def loud_then_quiet(sample_rate: int) -> tuple[np.ndarray, int]:
    """
    One second of loud white noise followed by one second of silence.

    Noise lights every analyser bin, so the level is high across the spectrum.

    Returns:
        Tuple of (audio_signal, sample_rate).
    """
    noise = np.random.default_rng(42).standard_normal(sample_rate) * 0.25
    y = np.concatenate([noise, np.zeros(sample_rate)])
    return y.astype(np.float32), sample_rate


@pytest.fixture
def temp_audio_file(tmp_path, loud_then_quiet):
    """Write the test signal to a wav file."""
    import soundfile as sf

    y, sr = loud_then_quiet
    audio_path = tmp_path / "test_audio.wav"
    sf.write(audio_path, y, sr)
    return audio_path
