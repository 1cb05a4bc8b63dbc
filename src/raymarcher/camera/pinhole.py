"""Pinhole camera model for per-pixel ray generation.

Each output pixel (px, py) of a width x height image is mapped to normalized
device coordinates

    u = (2 * px - width) / width
    v = (2 * py - height) / height

and the ray leaves the camera position in the direction normalize(u, v, 1).
This is the minimal camera: no orientation, no field of view.

Two optional extensions change only how (u, v) become a direction:
- ``fov``: vertical field of view in degrees; u and v are scaled by
  tan(fov / 2). A 90 degree field of view matches the minimal camera up to
  rounding.
- ``look_at`` / ``vup``: the (right, up, forward) basis is rotated so that the
  forward axis points at ``look_at``. Without ``look_at`` the basis is the
  identity (+x, +y, +z), which gives bit-identical directions to the minimal
  camera.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from raymarcher.camera.pinhole import Camera, setup_camera, get_ray
    >>>
    >>> camera = Camera(position=(0.0, 0.0, 0.0), resolution=(64, 64))
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(32, 32, 64, 64)  # Straight ahead along +z
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from raymarcher.core.vector import Ray, make_ray, normalize

# Largest supported image side, shared with the render target
MAX_RESOLUTION = 2048

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class Camera:
    """Configuration for the pinhole camera.

    Attributes:
        position: Camera position in world space (x, y, z).
        resolution: Output image size in pixels (width, height).
        fov: Optional vertical field of view in degrees, in (0, 180).
        look_at: Optional point the camera looks at. Defaults to looking
            down +z.
        vup: Up direction used with look_at (typically (0, 1, 0)).
    """

    position: tuple[float, float, float]
    resolution: tuple[int, int]
    fov: float | None = None
    look_at: tuple[float, float, float] | None = None
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)

    def __post_init__(self) -> None:
        width, height = self.resolution
        if width <= 0 or height <= 0:
            raise ValueError(f"Camera resolution must be positive, got {width}x{height}")
        if width > MAX_RESOLUTION or height > MAX_RESOLUTION:
            raise ValueError(
                f"Camera resolution ({width}x{height}) exceeds maximum supported "
                f"({MAX_RESOLUTION}x{MAX_RESOLUTION})"
            )
        if self.fov is not None and not 0.0 < self.fov < 180.0:
            raise ValueError(f"Field of view must be in (0, 180) degrees, got {self.fov}")

    @property
    def width(self) -> int:
        return self.resolution[0]

    @property
    def height(self) -> int:
        return self.resolution[1]


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f64, shape=())

# Orthonormal basis vectors
_camera_right = ti.Vector.field(3, dtype=ti.f64, shape=())
_camera_up = ti.Vector.field(3, dtype=ti.f64, shape=())
_camera_forward = ti.Vector.field(3, dtype=ti.f64, shape=())

# Scale applied to screen coordinates (1.0 without a field of view)
_screen_scale = ti.field(dtype=ti.f64, shape=())


def compute_camera_basis(
    camera: Camera,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Compute the (right, up, forward) basis for a camera.

    Raises:
        ValueError: If look_at coincides with the position or the view
            direction is parallel to vup.
    """
    if camera.look_at is None:
        return (
            np.array([1.0, 0.0, 0.0]),
            np.array([0.0, 1.0, 0.0]),
            np.array([0.0, 0.0, 1.0]),
        )

    position = np.array(camera.position, dtype=np.float64)
    target = np.array(camera.look_at, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    forward = target - position
    norm = np.linalg.norm(forward)
    if norm == 0.0:
        raise ValueError("Camera look_at must differ from the camera position")
    forward = forward / norm

    right = np.cross(vup, forward)
    norm = np.linalg.norm(right)
    if norm < 1e-12:
        raise ValueError("Camera view direction must not be parallel to vup")
    right = right / norm

    up = np.cross(forward, right)
    return right, up, forward


def setup_camera(camera: Camera) -> None:
    """Initialize camera state from configuration.

    Writes the camera origin, its basis and the screen scale into Taichi
    fields. Must be called (from Python) before rendering.

    Args:
        camera: Camera configuration with position and optional orientation.
    """
    right, up, forward = compute_camera_basis(camera)

    scale = 1.0
    if camera.fov is not None:
        scale = math.tan(math.radians(camera.fov) / 2.0)

    _camera_origin[None] = list(camera.position)
    _camera_right[None] = right.tolist()
    _camera_up[None] = up.tolist()
    _camera_forward[None] = forward.tolist()
    _screen_scale[None] = scale


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def screen_coordinates(pixel_x: ti.i32, pixel_y: ti.i32, width: ti.i32, height: ti.i32):
    """Map a pixel to normalized device coordinates in [-1, 1)."""
    w = ti.cast(width, ti.f64)
    h = ti.cast(height, ti.f64)
    u = (2.0 * ti.cast(pixel_x, ti.f64) - w) / w
    v = (2.0 * ti.cast(pixel_y, ti.f64) - h) / h
    return u, v


@ti.func
def get_ray(pixel_x: ti.i32, pixel_y: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate the primary ray through a pixel.

    Args:
        pixel_x: Pixel column (0 = left).
        pixel_y: Pixel row (0 = the v = -1 edge).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A Ray from the camera position with a unit-length direction.
    """
    u, v = screen_coordinates(pixel_x, pixel_y, width, height)
    scale = _screen_scale[None]

    direction = normalize(
        _camera_right[None] * (u * scale)
        + _camera_up[None] * (v * scale)
        + _camera_forward[None]
    )
    return make_ray(_camera_origin[None], direction)


def get_camera_info() -> dict[str, tuple[float, ...]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, right, up, forward and scale.
    """
    origin = _camera_origin[None]
    right = _camera_right[None]
    up = _camera_up[None]
    forward = _camera_forward[None]

    return {
        "origin": (float(origin[0]), float(origin[1]), float(origin[2])),
        "right": (float(right[0]), float(right[1]), float(right[2])),
        "up": (float(up[0]), float(up[1]), float(up[2])),
        "forward": (float(forward[0]), float(forward[1]), float(forward[2])),
        "scale": (float(_screen_scale[None]),),
    }
