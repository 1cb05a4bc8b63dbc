"""Geometry module for signed distance primitives.

Components:
    sphere: Sphere primitive and its signed distance function

Every primitive is a Taichi dataclass with a signed distance function of the
form:
    distance = sdf_shape(shape, point)
which is negative inside the shape, zero on its surface and positive outside.
"""

from .sphere import Sphere, make_sphere, sdf_sphere

__all__ = [
    "Sphere",
    "make_sphere",
    "sdf_sphere",
]
