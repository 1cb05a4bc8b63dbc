"""Camera module for primary ray generation.

Components:
    pinhole: Pinhole camera with optional field of view and look-at basis

Importing this package declares the camera's Taichi fields, so Taichi must be
initialized first.
"""

from .pinhole import (
    MAX_RESOLUTION,
    Camera,
    compute_camera_basis,
    get_camera_info,
    get_ray,
    screen_coordinates,
    setup_camera,
)

__all__ = [
    "MAX_RESOLUTION",
    "Camera",
    "compute_camera_basis",
    "setup_camera",
    "screen_coordinates",
    "get_ray",
    "get_camera_info",
]
