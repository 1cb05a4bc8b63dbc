"""Sphere distance-field primitive.

A sphere is the simplest signed distance field: the distance from a point to
the center, minus the radius. The value is negative inside the sphere, zero on
its surface and positive outside.

Each sphere carries a group id. Spheres that share a group never shadow each
other, which keeps a lit surface from occluding itself during the shadow
sub-march.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from raymarcher.geometry.sphere import Sphere, sdf_sphere, vec3
    >>> sphere = Sphere(center=vec3(0, 0, 20), radius=10.0, group_id=1)
    >>> # Use sdf_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from raymarcher.core.vector import vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point, radius and shadow group.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
        group_id: Non-negative group id used to exclude self-shadowing.
    """

    center: vec3
    radius: ti.f64
    group_id: ti.i32


@ti.func
def sdf_sphere(sphere: Sphere, point: vec3) -> ti.f64:
    """Signed distance from a point to the sphere surface.

    Args:
        sphere: The sphere to measure against.
        point: The query point in world space.

    Returns:
        The signed distance (negative inside the sphere).
    """
    return tm.length(point - sphere.center) - sphere.radius


@ti.func
def make_sphere(center: vec3, radius: ti.f64, group_id: ti.i32) -> Sphere:
    """Create a sphere from center, radius and group id.

    This is a convenience function for creating spheres within Taichi kernels.
    """
    return Sphere(center=center, radius=radius, group_id=group_id)
