"""
Live preview window.

Runs the simulation in a pygame window paced by the display clock. With an
audio file the precomputed amplitude track is indexed by tick; without one
the scene runs silent.

Usage:
    hyperscope-preview [audio_file] [options]
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

import pygame

from hyperscope.audio.amplitude import AmplitudeTrack
from hyperscope.errors import HyperscopeError
from hyperscope.experiment.cli import add_simulation_arguments, build_config
from hyperscope.experiment.orchestrator import FrameOrchestrator
from hyperscope.experiment.sinks import PygameSink
from hyperscope.logging_config import setup_logging

logger = logging.getLogger(__name__)


def _frame_pacer(clock: "pygame.time.Clock", fps: int):
    """Wait for the next display slot; False once the window is closed or Esc is hit."""

    def request_next_tick() -> bool:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                return False
        clock.tick(fps)
        return True

    return request_next_tick


def main(argv: Optional[Sequence[str]] = None):
    parser = argparse.ArgumentParser(
        prog="hyperscope-preview",
        description="Live preview of the N-dimensional particle simulation",
    )
    parser.add_argument("audio", type=Path, nargs="?", default=None, help="Optional audio file")
    parser.add_argument("--width", type=int, default=1280, help="Window width")
    parser.add_argument("--height", type=int, default=720, help="Window height")
    parser.add_argument("-f", "--fps", type=int, default=60, help="Target frame rate")
    parser.add_argument("--max-ticks", type=int, default=None, help="Close after N ticks")
    add_simulation_arguments(parser)

    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)

    if args.audio is not None and not args.audio.exists():
        print(f"Error: Audio file not found: {args.audio}", file=sys.stderr)
        sys.exit(1)

    try:
        config = build_config(args, width=args.width, height=args.height, fps=args.fps)
    except HyperscopeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    amplitude_source = None
    if args.audio is not None:
        track = AmplitudeTrack.from_file(args.audio, fps=config.fps)
        logger.info("Loaded %s (%.1fs, %d frames)", args.audio, track.duration, len(track))
        amplitude_source = track

    pygame.init()
    try:
        screen = pygame.display.set_mode((config.width, config.height))
        pygame.display.set_caption(f"hyperscope - {args.preset}")
        sink = PygameSink(
            screen,
            background=config.background_color,
            wireframe_color=config.wireframe_color,
            wireframe_alpha=config.wireframe_alpha,
        )
        orchestrator = FrameOrchestrator(
            config, seed=args.seed, amplitude_source=amplitude_source
        )
        ticks = orchestrator.run(
            sink,
            request_next_tick=_frame_pacer(pygame.time.Clock(), config.fps),
            max_ticks=args.max_ticks,
        )
        logger.info("Preview closed after %d ticks", ticks)
    finally:
        pygame.quit()


if __name__ == "__main__":
    main()
