"""
CLI entry point for offline rendering.

Usage:
    hyperscope-render [audio_file] [options]
    python -m hyperscope.experiment.cli [audio_file] [options]
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from hyperscope.audio.amplitude import AmplitudeTrack
from hyperscope.config import PRESETS, SimulationConfig, load_config, preset
from hyperscope.errors import HyperscopeError
from hyperscope.experiment.encoder import encode_video
from hyperscope.experiment.renderer import ParticleRenderer, amplitude_manifest, silent_manifest
from hyperscope.logging_config import setup_logging

PROFILES = {
    "low": {"width": 1280, "height": 720, "fps": 30, "quality": "fast"},
    "medium": {"width": 1920, "height": 1080, "fps": 60, "quality": "medium"},
    "high": {"width": 3840, "height": 2160, "fps": 60, "quality": "high"},
}


def _progress_bar(current: int, total: int, width: int = 35):
    """Print a progress bar to stdout."""
    pct = current / max(total, 1) * 100
    filled = int(width * current / max(total, 1))
    bar = "#" * filled + "-" * (width - filled)
    if sys.stdout.isatty():
        sys.stdout.write(f"\r[{bar}] {pct:5.1f}%  frame {current}/{total}")
        sys.stdout.flush()
        if current >= total:
            sys.stdout.write("\n")
    elif current % max(1, total // 20) == 0 or current >= total:
        print(f"{pct:5.1f}%  frame {current}/{total}", flush=True)


def add_simulation_arguments(parser: argparse.ArgumentParser) -> None:
    """Scene and physics flags shared by the render and preview commands."""
    parser.add_argument(
        "--preset", type=str, default="hypercube", choices=sorted(PRESETS),
        help="Scene preset (default: hypercube)",
    )
    parser.add_argument("--config", type=Path, default=None, help="JSON file overriding preset fields")
    parser.add_argument("--population", type=int, default=None, help="Number of entities")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for a reproducible run")
    parser.add_argument("--depth-sort", action="store_true", help="Draw far entities first")
    parser.add_argument("--no-wireframe", action="store_true", help="Hide the hypercube wireframe")
    parser.add_argument(
        "--scatter-threshold", type=float, default=None,
        help="Amplitude (0-255) above which the flock scatters",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--log-file", type=str, default=None, help="Also write the log to this file")


def build_config(args: argparse.Namespace, **frame_overrides) -> SimulationConfig:
    """Preset -> JSON overrides -> command line flags."""
    cfg = preset(args.preset)
    if args.config is not None:
        cfg = load_config(args.config, base=cfg)

    overrides = {k: v for k, v in frame_overrides.items() if v is not None}
    if args.population is not None:
        overrides["population"] = args.population
    if args.depth_sort:
        overrides["depth_sort"] = True
    if args.no_wireframe:
        overrides["draw_wireframe"] = False
    if args.scatter_threshold is not None:
        overrides["scatter_threshold"] = args.scatter_threshold
    return SimulationConfig.from_dict(overrides, base=cfg).validate()


def main(argv: Optional[Sequence[str]] = None):
    parser = argparse.ArgumentParser(
        prog="hyperscope-render",
        description="Render the N-dimensional particle simulation to MP4",
    )
    parser.add_argument(
        "audio", type=Path, nargs="?", default=None,
        help="Audio file driving the amplitude input (wav, mp3, flac). Optional.",
    )
    parser.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Output MP4 path (default: <audio>_<preset>.mp4 or hyperscope_<preset>.mp4)",
    )
    parser.add_argument(
        "-p", "--profile", type=str, default="medium", choices=sorted(PROFILES),
        help="Target profile (low: 720p 30fps, medium: 1080p 60fps, high: 4k 60fps)",
    )
    parser.add_argument("--width", type=int, default=None, help="Video width (overrides profile)")
    parser.add_argument("--height", type=int, default=None, help="Video height (overrides profile)")
    parser.add_argument("-f", "--fps", type=int, default=None, help="Frames per second (overrides profile)")
    parser.add_argument(
        "--duration", type=float, default=10.0,
        help="Length in seconds when no audio is given (default: 10)",
    )
    parser.add_argument("--max-duration", type=float, default=None, help="Limit output to N seconds")
    parser.add_argument("--no-glow", action="store_true", help="Disable glow")
    parser.add_argument("--no-vignette", action="store_true", help="Disable vignette")
    parser.add_argument(
        "-q", "--quality", type=str, default=None, choices=["high", "medium", "fast"],
        help="Encoding quality (defaults to profile quality)",
    )
    add_simulation_arguments(parser)

    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING, args.log_file)

    if args.audio is not None and not args.audio.exists():
        print(f"Error: Audio file not found: {args.audio}", file=sys.stderr)
        sys.exit(1)

    p_cfg = PROFILES[args.profile]
    width = args.width or p_cfg["width"]
    height = args.height or p_cfg["height"]
    fps = args.fps or p_cfg["fps"]
    quality = args.quality or p_cfg["quality"]

    try:
        config = build_config(
            args,
            width=width,
            height=height,
            fps=fps,
            glow_enabled=False if args.no_glow else None,
            vignette_strength=0.0 if args.no_vignette else None,
        )
    except HyperscopeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    output = args.output
    if output is None:
        if args.audio is not None:
            output = args.audio.with_name(f"{args.audio.stem}_{args.preset}.mp4")
        else:
            output = Path(f"hyperscope_{args.preset}.mp4")

    # Step 1: Amplitude input
    max_frames = int(args.max_duration * fps) if args.max_duration is not None else None
    if args.audio is not None:
        print(f"Analyzing audio: {args.audio}")
        t0 = time.time()
        track = AmplitudeTrack.from_file(args.audio, fps=fps)
        manifest = amplitude_manifest(track, max_frames=max_frames)
        print(f"  Duration: {track.duration:.1f}s")
        print(f"  Mean level: {track.values.mean():.1f} / 255")
        print(f"  Analysis took {time.time() - t0:.1f}s")
    else:
        n_frames = int(args.duration * fps)
        if max_frames is not None:
            n_frames = min(n_frames, max_frames)
        manifest = silent_manifest(n_frames, fps)

    total_frames = len(manifest["frames"])
    duration = total_frames / fps

    # Step 2: Render + encode
    print(f"\nRendering {total_frames} frames at {width}x{height} @ {fps}fps")
    print(f"  Preset: {args.preset}, Entities: {config.population}, Quality: {quality}")

    renderer = ParticleRenderer(config, seed=args.seed)
    frame_gen = renderer.render_manifest(manifest, progress_callback=_progress_bar)

    t1 = time.time()
    try:
        encode_video(
            frame_iterator=frame_gen,
            output_path=output,
            width=width,
            height=height,
            fps=fps,
            quality=quality,
            audio_path=args.audio,
            duration=duration,
            total_frames=total_frames,
        )
    except HyperscopeError as e:
        print(f"\nError: {e}", file=sys.stderr)
        sys.exit(1)

    elapsed = time.time() - t1
    file_size_mb = output.stat().st_size / 1024 / 1024
    print(f"\nDone! {file_size_mb:.1f} MB")
    print(f"  Render+encode took {elapsed:.1f}s ({total_frames / max(elapsed, 0.01):.1f} fps)")
    print(f"  Output: {output}")


if __name__ == "__main__":
    main()
