"""Render the light-sweep animation from the command line.

Usage:
    raymarcher [options]
    python -m raymarcher.cli [options]

Options:
    --frames FRAMES         Number of frames in the sweep (default: 300)
    --size SIZE             Width and height of each frame (default: 1024)
    --output-dir DIR        Directory for <frame>.png files (default: frames)
    --start-frame FRAME     First frame to render (default: 0)
    --step-budget N         Primary march step budget (default: 100)
    --hit-threshold D       Primary march hit threshold (default: 0.001)
    --max-distance D        Primary march escape distance (default: 1000.0)
    --normal-epsilon D      Normal estimation step (default: 0.0001)
    --shadow-threshold D    Shadow march hit threshold (default: 0.0001)
    --shadow-step-budget N  Shadow march step cap (default: 100000)
    --fov DEGREES           Vertical field of view (default: none)
    --threads N             CPU threads for the pixel loop (default: Taichi's)
    --preview               Show the last frame in a Matplotlib window
    --log-level LEVEL       DEBUG, INFO, WARNING or ERROR (default: INFO)
    --log-file PATH         Also write the log to a file

Example:
    raymarcher --frames 30 --size 256 --output-dir frames
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from raymarcher.config import (
    DEFAULT_HIT_THRESHOLD,
    DEFAULT_MAX_DISTANCE,
    DEFAULT_NORMAL_EPSILON,
    DEFAULT_SHADOW_HIT_THRESHOLD,
    DEFAULT_SHADOW_STEP_BUDGET,
    DEFAULT_STEP_BUDGET,
    MarchConfig,
    init_taichi,
)
from raymarcher.logging_config import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a light sweep over two spheres with an SDF ray marcher.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--frames",
        type=int,
        default=300,
        help="Number of frames in the sweep (default: 300)",
    )
    parser.add_argument(
        "--size",
        type=int,
        default=1024,
        help="Width and height of each frame in pixels (default: 1024)",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default="frames",
        help="Directory for <frame>.png files (default: frames)",
    )
    parser.add_argument(
        "--start-frame",
        type=int,
        default=0,
        help="First frame to render (default: 0)",
    )
    parser.add_argument(
        "--step-budget",
        type=int,
        default=DEFAULT_STEP_BUDGET,
        help=f"Primary march step budget (default: {DEFAULT_STEP_BUDGET})",
    )
    parser.add_argument(
        "--hit-threshold",
        type=float,
        default=DEFAULT_HIT_THRESHOLD,
        help=f"Primary march hit threshold (default: {DEFAULT_HIT_THRESHOLD})",
    )
    parser.add_argument(
        "--max-distance",
        type=float,
        default=DEFAULT_MAX_DISTANCE,
        help=f"Primary march escape distance (default: {DEFAULT_MAX_DISTANCE})",
    )
    parser.add_argument(
        "--normal-epsilon",
        type=float,
        default=DEFAULT_NORMAL_EPSILON,
        help=f"Normal estimation step (default: {DEFAULT_NORMAL_EPSILON})",
    )
    parser.add_argument(
        "--shadow-threshold",
        type=float,
        default=DEFAULT_SHADOW_HIT_THRESHOLD,
        help=f"Shadow march hit threshold (default: {DEFAULT_SHADOW_HIT_THRESHOLD})",
    )
    parser.add_argument(
        "--shadow-step-budget",
        type=int,
        default=DEFAULT_SHADOW_STEP_BUDGET,
        help=f"Shadow march step cap (default: {DEFAULT_SHADOW_STEP_BUDGET})",
    )
    parser.add_argument(
        "--fov",
        type=float,
        default=None,
        help="Vertical field of view in degrees (default: none)",
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=None,
        help="CPU threads for the pixel loop (default: Taichi's choice)",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Show the last frame in a Matplotlib window",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Also write the log to this file",
    )
    return parser.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> MarchConfig:
    """Build the march configuration from parsed arguments."""
    return MarchConfig(
        step_budget=args.step_budget,
        hit_threshold=args.hit_threshold,
        max_distance=args.max_distance,
        normal_epsilon=args.normal_epsilon,
        shadow_hit_threshold=args.shadow_threshold,
        shadow_step_budget=args.shadow_step_budget,
    )


def run(args: argparse.Namespace, config: MarchConfig | None = None) -> list[Path]:
    """Render the sweep described by the arguments.

    Taichi must already be initialized.

    Args:
        args: Parsed command-line arguments.
        config: Already validated march constants. Built from args if None.

    Returns:
        Paths of the written frames.
    """
    # Lazy imports to allow Taichi initialization first
    from raymarcher.animation import render_sweep

    if config is None:
        config = config_from_args(args)
    start_time = time.time()

    written = list(
        render_sweep(
            args.output_dir,
            frames=args.frames,
            size=args.size,
            start_frame=args.start_frame,
            config=config,
            fov=args.fov,
        )
    )

    total_time = time.time() - start_time
    logger.info(f"Rendered {len(written)} frames in {total_time:.2f}s")

    if args.preview and written:
        import numpy as np
        from PIL import Image as PILImage

        from raymarcher.preview.display import show_preview

        last = written[-1]
        show_preview(np.asarray(PILImage.open(last).convert("RGB")), title=last.name)

    return written


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(getattr(logging, args.log_level), args.log_file)

    try:
        config = config_from_args(args)
        init_taichi(threads=args.threads)
        run(args, config)
        return 0
    except Exception as e:
        logger.error(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
