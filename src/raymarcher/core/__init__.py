"""Core rendering module.

Components:
    vector: Ray data structure and vector utilities
    marcher: Primary march, normal estimation, soft shadows and shading
    rasterizer: Per-pixel render loop producing 8-bit RGB images

Note: marcher and rasterizer declare Taichi fields and are NOT imported here.
Initialize Taichi first, then import them directly, e.g.:
    from raymarcher.core.rasterizer import Rasterizer
"""

from .vector import Ray, dot, length, make_ray, normalize, ray_at, vec3

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "dot",
    "normalize",
]
