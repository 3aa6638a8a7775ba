"""
FFmpeg video encoder.

Raw RGB frames are piped to ffmpeg's stdin and optionally muxed with the
audio track that drove the simulation.
"""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Callable, Iterable, List, Optional

import numpy as np

from hyperscope.errors import EncoderError

logger = logging.getLogger(__name__)

# Quality presets: (preset, crf, pix_fmt)
QUALITY_PRESETS = {
    "high": ("slow", "18", "yuv444p"),
    "medium": ("medium", "23", "yuv420p"),
    "fast": ("ultrafast", "28", "yuv420p"),
}


def ffmpeg_available() -> bool:
    return shutil.which("ffmpeg") is not None


def build_command(
    output_path: Path,
    width: int,
    height: int,
    fps: int,
    quality: str = "high",
    audio_path: Optional[Path] = None,
    duration: Optional[float] = None,
) -> List[str]:
    """ffmpeg argument list reading rgb24 frames from stdin."""
    if quality not in QUALITY_PRESETS:
        raise ValueError(f"Unknown quality {quality!r}; choose from {sorted(QUALITY_PRESETS)}")
    preset, crf, pix_fmt = QUALITY_PRESETS[quality]

    cmd = [
        "ffmpeg", "-y",
        # Keep stderr short: it is only drained after the last frame
        "-hide_banner", "-loglevel", "error",
        "-f", "rawvideo",
        "-pix_fmt", "rgb24",
        "-s", f"{width}x{height}",
        "-r", str(fps),
        "-i", "pipe:0",
    ]
    if audio_path is not None:
        cmd += ["-i", str(audio_path)]

    cmd += ["-c:v", "libx264", "-preset", preset, "-crf", crf, "-pix_fmt", pix_fmt]

    if audio_path is not None:
        cmd += ["-c:a", "aac", "-b:a", "192k", "-shortest"]
    else:
        cmd += ["-an"]

    if duration is not None:
        cmd += ["-t", f"{duration:.3f}"]

    cmd.append(str(output_path))
    return cmd


def encode_video(
    frame_iterator: Iterable[np.ndarray],
    output_path: Path,
    width: int = 1920,
    height: int = 1080,
    fps: int = 60,
    quality: str = "high",
    audio_path: Optional[Path] = None,
    duration: Optional[float] = None,
    total_frames: Optional[int] = None,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> Path:
    """
    Encode frames to MP4, with or without an audio track.

    Args:
        frame_iterator: Yields (H, W, 3) uint8 arrays.
        output_path: Output MP4 path; parent directories are created.
        width, height, fps: Frame geometry; frames must match.
        quality: "high", "medium" or "fast".
        audio_path: Audio to mux in, or None for a silent video.
        duration: Optional output length cap in seconds.
        total_frames: Frame count for progress reporting.
        progress_callback: Optional callback(current_frame, total_frames).

    Returns:
        Path to the output file.

    Raises:
        EncoderError: ffmpeg is missing or exited with an error.
    """
    if not ffmpeg_available():
        raise EncoderError("ffmpeg not found on PATH")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    cmd = build_command(output_path, width, height, fps, quality, audio_path, duration)
    logger.debug("Running %s", " ".join(cmd))

    proc = subprocess.Popen(
        cmd,
        stdin=subprocess.PIPE,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.PIPE,
    )

    frame_count = 0
    try:
        for frame in frame_iterator:
            if frame.shape != (height, width, 3):
                raise ValueError(
                    f"Frame {frame_count} has shape {frame.shape}, expected {(height, width, 3)}"
                )
            proc.stdin.write(np.ascontiguousarray(frame, dtype=np.uint8).tobytes())
            frame_count += 1
            if progress_callback and total_frames:
                progress_callback(frame_count, total_frames)
    except BrokenPipeError:
        # ffmpeg died early; its stderr below says why
        pass
    except BaseException:
        proc.kill()
        proc.wait()
        raise
    finally:
        if proc.stdin and not proc.stdin.closed:
            try:
                proc.stdin.close()
            except BrokenPipeError:
                pass

    stderr = proc.stderr.read().decode("utf-8", errors="replace")
    proc.wait()

    if proc.returncode != 0:
        error_lines = [
            line for line in stderr.split("\n")
            if "error" in line.lower() or "invalid" in line.lower()
        ]
        detail = "\n".join(error_lines[-5:]) if error_lines else stderr[-500:]
        raise EncoderError(f"ffmpeg exited with code {proc.returncode}: {detail}")

    logger.info("Encoded %d frames to %s", frame_count, output_path)
    return output_path
