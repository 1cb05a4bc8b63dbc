"""Per-pixel rasterizer: one primary ray per pixel, one 8-bit color out.

For every pixel of the render target the rasterizer builds the camera ray,
marches and shades it, scales the radiance by 255 and stores it as an 8-bit
RGB triple (NaN becomes 0, values are clamped to [0, 255] and truncated).

Pixels are independent. The pixel loop is the outermost loop of a Taichi
kernel, so Taichi may spread it over CPU threads; each pixel's march stays
sequential and the scene fields are not written while the kernel runs.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from raymarcher.core.rasterizer import Rasterizer
    >>> from raymarcher.animation import build_sweep_scene
    >>>
    >>> rasterizer = Rasterizer()
    >>> image = rasterizer.render(build_sweep_scene(0, 300, size=256))
    >>> image.shape
    (256, 256, 3)
"""

import logging
from collections.abc import Callable

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from raymarcher.camera.pinhole import MAX_RESOLUTION, get_ray, setup_camera
from raymarcher.config import MarchConfig
from raymarcher.core.marcher import _check_marcher_configured, configure_marcher, shade
from raymarcher.core.vector import vec3
from raymarcher.scene.scene import Scene, upload_scene

logger = logging.getLogger(__name__)

# Pixel sink: receives (x, y, (r, g, b)) for every pixel of a frame
PixelSink = Callable[[int, int, tuple[int, int, int]], None]

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = MAX_RESOLUTION
MAX_IMAGE_HEIGHT = MAX_RESOLUTION

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# 8-bit color buffer, indexed [x, y] (preallocated to max size)
_pixel_buffer = ti.Vector.field(3, dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffer.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffer to black."""
    _pixel_buffer.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def reset_render_target() -> None:
    """Mark the render target as not set up."""
    _render_target_initialized[None] = 0


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.func
def to_rgb8(color: vec3):
    """Convert linear radiance in [0, 1] to 8-bit channel values.

    Scales by 255, replaces NaN with 0, clamps to [0, 255] and truncates.
    """
    scaled = color * 255.0
    for c in ti.static(range(3)):
        if tm.isnan(scaled[c]):
            scaled[c] = 0.0
    scaled = tm.clamp(scaled, 0.0, 255.0)
    return ti.cast(scaled, ti.i32)


@ti.kernel
def _render_frame(width: ti.i32, height: ti.i32):
    for i, j in ti.ndrange(width, height):
        ray = get_ray(i, j, width, height)
        _pixel_buffer[i, j] = to_rgb8(shade(ray))


@ti.kernel
def _render_single_pixel(pixel_x: ti.i32, pixel_y: ti.i32, width: ti.i32, height: ti.i32):
    for _run in range(1):
        ray = get_ray(pixel_x, pixel_y, width, height)
        _pixel_buffer[pixel_x, pixel_y] = to_rgb8(shade(ray))


# =============================================================================
# Public Rendering API
# =============================================================================


def render_image() -> None:
    """Render every pixel of the render target for the uploaded scene.

    The scene, camera and marcher must already be set up for this frame.

    Raises:
        RuntimeError: If the render target or marcher is not set up.
    """
    _check_render_target_initialized()
    _check_marcher_configured()

    width, height = get_image_dimensions()
    _render_frame(width, height)


def render_pixel(pixel_x: int, pixel_y: int) -> tuple[int, int, int]:
    """Render a single pixel and return its 8-bit color.

    Raises:
        RuntimeError: If the render target or marcher is not set up.
        IndexError: If the pixel lies outside the render target.
    """
    _check_render_target_initialized()
    _check_marcher_configured()

    width, height = get_image_dimensions()
    if not (0 <= pixel_x < width and 0 <= pixel_y < height):
        raise IndexError(f"Pixel ({pixel_x}, {pixel_y}) outside {width}x{height} image")

    _render_single_pixel(pixel_x, pixel_y, width, height)
    color = _pixel_buffer[pixel_x, pixel_y]
    return (int(color[0]), int(color[1]), int(color[2]))


def get_image_numpy() -> npt.NDArray[np.uint8]:
    """Get the rendered image as a NumPy array.

    The array shape is (height, width, 3) with dtype uint8, and
    ``image[py, px]`` holds pixel (px, py). Row 0 is the v = -1 edge of the
    screen, which is the top row of the saved file.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    full_image = _pixel_buffer.to_numpy()

    # Extract active region and transpose from (width, height, 3) to (height, width, 3)
    image = full_image[:width, :height, :]
    image = np.transpose(image, (1, 0, 2))

    return np.ascontiguousarray(image, dtype=np.uint8)


class Rasterizer:
    """Renders scenes into 8-bit RGB images.

    Each call uploads the scene, configures the marcher and the camera, and
    then runs the pixel kernel. The Scene itself is never modified.

    Attributes:
        config: The march constants used for every frame.
    """

    def __init__(self, config: MarchConfig | None = None) -> None:
        self.config = config if config is not None else MarchConfig()

    def prepare(self, scene: Scene) -> None:
        """Set up every device-side input for one frame.

        This is the frame boundary: the only point where scene, camera and
        marcher fields are written.
        """
        camera = scene.camera
        setup_render_target(camera.width, camera.height)
        upload_scene(scene)
        configure_marcher(self.config)
        setup_camera(camera)

    def render(self, scene: Scene) -> npt.NDArray[np.uint8]:
        """Render a scene.

        Returns:
            NumPy array of shape (height, width, 3) with dtype uint8.
        """
        self.prepare(scene)
        logger.debug(f"Rendering {scene.camera.width}x{scene.camera.height} frame")
        render_image()
        return get_image_numpy()

    def render_pixel(self, scene: Scene, pixel_x: int, pixel_y: int) -> tuple[int, int, int]:
        """Render a single pixel of a scene."""
        self.prepare(scene)
        return render_pixel(pixel_x, pixel_y)

    def render_to(self, scene: Scene, sink: PixelSink) -> None:
        """Render a scene and write every pixel to a sink.

        Args:
            scene: The scene to render.
            sink: Called as sink(x, y, (r, g, b)) once per pixel.
        """
        image = self.render(scene)
        height, width, _ = image.shape
        for y in range(height):
            for x in range(width):
                r, g, b = image[y, x]
                sink(x, y, (int(r), int(g), int(b)))

    def __repr__(self) -> str:
        """Return a string representation of the rasterizer."""
        return f"Rasterizer(config={self.config})"
