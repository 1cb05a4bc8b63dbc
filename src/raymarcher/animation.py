"""Light-sweep animation: one freshly built scene per frame.

The sweep renders two spheres while a single point light moves along the y
axis, from y = -10 at frame 0 toward y = 30 at the last frame. Every frame gets
its own Scene; nothing carries over between frames except the output files.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from raymarcher.animation import render_sweep
    >>> for path in render_sweep("frames", frames=30, size=256):
    ...     print(path)
"""

from __future__ import annotations

import logging
from collections.abc import Generator
from pathlib import Path

from raymarcher.camera.pinhole import Camera
from raymarcher.config import MarchConfig
from raymarcher.core.rasterizer import Rasterizer
from raymarcher.preview.export import save_png_from_array
from raymarcher.scene.scene import Scene, SpherePrimitive, make_scene

logger = logging.getLogger(__name__)

# Light height at frame 0 and the distance it travels over the whole sweep
LIGHT_START_Y = -10.0
LIGHT_TRAVEL_Y = 40.0


def light_height(frame: int, frames: int) -> float:
    """Light y position for a frame: -10 + 40 * frame / frames."""
    if frames <= 0:
        raise ValueError(f"frames must be positive, got {frames}")
    return LIGHT_START_Y + LIGHT_TRAVEL_Y * (frame / frames)


def build_sweep_scene(
    frame: int,
    frames: int,
    size: int,
    fov: float | None = None,
) -> Scene:
    """Build the scene for one frame of the sweep.

    Args:
        frame: Frame index in [0, frames).
        frames: Total number of frames in the sweep.
        size: Width and height of the square image.
        fov: Optional camera field of view in degrees.

    Returns:
        A scene with a large sphere (group 1), a smaller sphere beside it
        (group 2), one light and a camera at the origin looking down +z.
    """
    spheres = (
        SpherePrimitive(center=(0.0, 0.0, 20.0), radius=10.0, group_id=1),
        SpherePrimitive(center=(10.0, 0.0, 20.0), radius=5.0, group_id=2),
    )
    lights = [(0.0, light_height(frame, frames), 0.0)]
    camera = Camera(position=(0.0, 0.0, 0.0), resolution=(size, size), fov=fov)
    return make_scene(spheres, lights, camera)


def render_sweep(
    output_dir: str | Path,
    frames: int = 300,
    size: int = 1024,
    *,
    start_frame: int = 0,
    config: MarchConfig | None = None,
    fov: float | None = None,
) -> Generator[Path, None, None]:
    """Render the sweep and write each frame as ``<output_dir>/<frame>.png``.

    Args:
        output_dir: Directory receiving the frames (created if missing).
        frames: Total number of frames in the sweep.
        size: Width and height of each frame.
        start_frame: First frame to render, for resuming an interrupted sweep.
        config: March constants; defaults to ``MarchConfig()``.
        fov: Optional camera field of view in degrees.

    Yields:
        The path of each written frame.
    """
    if not 0 <= start_frame <= frames:
        raise ValueError(f"start_frame must be in [0, {frames}], got {start_frame}")

    output = Path(output_dir)
    rasterizer = Rasterizer(config)
    logger.info(f"Rendering frames {start_frame}..{frames - 1} at {size}x{size} into {output}")

    for frame in range(start_frame, frames):
        scene = build_sweep_scene(frame, frames, size, fov=fov)
        image = rasterizer.render(scene)
        path = save_png_from_array(image, output / f"{frame}.png")
        logger.info(f"Frame {frame}/{frames} written to {path}")
        yield path
