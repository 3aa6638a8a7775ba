"""
Per-frame amplitude samples for driving the simulation.

The simulation only ever sees one non-negative number per tick. This module
produces those numbers from an audio file the way a browser
``AnalyserNode`` with ``fftSize=512`` reports them: byte-scaled frequency
bins (dB mapped from [-100, -30] to [0, 255]) with 0.8 temporal smoothing,
averaged over all bins. Typical music lands between 40 and 140.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import librosa
import numpy as np

logger = logging.getLogger(__name__)


@dataclass
class AnalyserParams:
    """Mirror of the browser analyser defaults."""

    n_fft: int = 512
    min_db: float = -100.0
    max_db: float = -30.0
    smoothing: float = 0.8


class AmplitudeTrack:
    """
    Precomputed amplitude per video frame.

    Calling the track with a tick index returns that frame's level, or
    ``None`` once the audio has ended (treated as silence downstream).
    """

    def __init__(self, values: np.ndarray, fps: int):
        self.values = np.asarray(values, dtype=np.float64)
        self.fps = fps

    def __len__(self) -> int:
        return len(self.values)

    def __call__(self, tick: int) -> Optional[float]:
        if 0 <= tick < len(self.values):
            return float(self.values[tick])
        return None

    @property
    def duration(self) -> float:
        return len(self.values) / self.fps

    @classmethod
    def from_signal(
        cls,
        y: np.ndarray,
        sr: int,
        fps: int,
        params: Optional[AnalyserParams] = None,
    ) -> "AmplitudeTrack":
        """
        Analyse a mono signal.

        Args:
            y: Audio samples.
            sr: Sample rate.
            fps: Video frame rate; one value is produced per frame.
            params: Analyser emulation settings.
        """
        params = params or AnalyserParams()
        hop = max(1, int(sr / fps))
        n_frames = int(np.ceil(len(y) / sr * fps))

        spec = np.abs(
            librosa.stft(
                np.asarray(y, dtype=np.float32),
                n_fft=params.n_fft,
                hop_length=hop,
                window="blackman",
                center=True,
            )
        )
        # Drop the Nyquist bin: the analyser exposes n_fft / 2 bins
        spec = spec[: params.n_fft // 2] / params.n_fft

        smoothed = np.empty_like(spec)
        prev = np.zeros(spec.shape[0], dtype=spec.dtype)
        for t in range(spec.shape[1]):
            prev = params.smoothing * prev + (1.0 - params.smoothing) * spec[:, t]
            smoothed[:, t] = prev

        db = librosa.amplitude_to_db(smoothed, ref=1.0, amin=1e-10, top_db=None)
        byte = np.clip(
            255.0 * (db - params.min_db) / (params.max_db - params.min_db), 0.0, 255.0
        )
        levels = byte.mean(axis=0)

        if len(levels) < n_frames:
            levels = np.pad(levels, (0, n_frames - len(levels)))
        return cls(levels[:n_frames], fps)

    @classmethod
    def from_file(
        cls,
        audio_path: Union[str, Path],
        fps: int,
        sr: int = 22050,
        params: Optional[AnalyserParams] = None,
    ) -> "AmplitudeTrack":
        """Load an audio file (wav, mp3, flac) and analyse it."""
        y, sr_out = librosa.load(audio_path, sr=sr, mono=True)
        track = cls.from_signal(y, sr_out, fps, params)
        logger.info(
            "Analysed %s: %d frames, mean level %.1f, peak %.1f",
            audio_path, len(track), float(track.values.mean()) if len(track) else 0.0,
            float(track.values.max()) if len(track) else 0.0,
        )
        return track


class ConstantAmplitude:
    """Amplitude source that always reports the same level."""

    def __init__(self, value: float):
        if value < 0:
            raise ValueError(f"Amplitude must be non-negative, got {value}")
        self.value = float(value)

    def __call__(self, tick: int) -> float:
        return self.value


def silence(tick: int) -> None:
    """Amplitude source for runs without audio."""
    return None
