"""Scene-level signed distance queries.

This module stores the primitives and point lights of the current frame in
Taichi fields and answers the nearest-distance query the marcher issues at
every step: the minimum signed distance over all spheres, and the group id of
the sphere achieving it.

The fields are a staging area for one frame. They are written by
``raymarcher.scene.scene.upload_scene`` at the frame boundary and only read
while a kernel runs.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from raymarcher.scene.field import (
    ...     add_light, add_sphere, clear_scene, query_nearest_distance
    ... )
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, 20.0), 10.0, group_id=1)
    >>> add_light((0.0, -10.0, 0.0))
    >>> query_nearest_distance((0.0, 0.0, 0.0))
    (10.0, 1)
"""

import taichi as ti

from raymarcher.core.vector import vec3
from raymarcher.geometry.sphere import Sphere, sdf_sphere

# Maximum number of primitives and lights supported in the scene
MAX_SPHERES = 1024
MAX_LIGHTS = 64

# Owner id reported when no primitive is considered; group ids are never negative
NO_GROUP = -1

# Largest group id the i32 group field can hold
MAX_GROUP_ID = 2**31 - 1

# Distance reported by an empty query
FAR_DISTANCE = float("inf")

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f64, shape=MAX_SPHERES)
sphere_group_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Point light storage
light_positions = ti.Vector.field(3, dtype=ti.f64, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())

# Results written by the host-side query kernel
_query_distance = ti.field(dtype=ti.f64, shape=())
_query_owner = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all primitives and lights from the scene.

    Resets the counts to zero. The actual field data is not cleared but will
    be overwritten when new primitives are added.
    """
    num_spheres[None] = 0
    num_lights[None] = 0


def add_sphere(center: tuple[float, float, float], radius: float, group_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere (should be positive).
        group_id: The shadow group of the sphere.

    Returns:
        The index of the added sphere.

    Raises:
        ValueError: If group_id is outside [0, MAX_GROUP_ID].
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    if not 0 <= group_id <= MAX_GROUP_ID:
        raise ValueError(f"Sphere group_id must be in [0, {MAX_GROUP_ID}], got {group_id}")
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = center
    sphere_radii[idx] = radius
    sphere_group_ids[idx] = group_id
    num_spheres[None] = idx + 1
    return idx


def add_light(position: tuple[float, float, float]) -> int:
    """Add a point light to the scene.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
    """
    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")
    light_positions[idx] = position
    num_lights[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


def get_light_count() -> int:
    """Get the number of lights in the scene."""
    return int(num_lights[None])


@ti.func
def nearest_distance_excluding(point: vec3, excluded_group: ti.i32):
    """Find the closest primitive, skipping one shadow group.

    Iterates through all spheres in insertion order. A strict comparison is
    used, so on equal distances the first sphere encountered wins.

    Args:
        point: The query point in world space.
        excluded_group: Spheres with this group id are ignored. Pass NO_GROUP
            to consider every sphere.

    Returns:
        A tuple (distance, owner) where distance is the minimum signed
        distance and owner the group id of the closest sphere. An empty
        selection yields (FAR_DISTANCE, NO_GROUP).
    """
    min_distance = FAR_DISTANCE
    owner = NO_GROUP

    for i in range(num_spheres[None]):
        group_id = sphere_group_ids[i]
        if group_id != excluded_group:
            sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i], group_id=group_id)
            distance = sdf_sphere(sphere, point)
            if distance < min_distance:
                min_distance = distance
                owner = group_id

    return min_distance, owner


@ti.func
def nearest_distance(point: vec3):
    """Find the closest primitive over the whole scene.

    Returns:
        A tuple (distance, owner); see nearest_distance_excluding.
    """
    return nearest_distance_excluding(point, NO_GROUP)


@ti.func
def scene_sdf(point: vec3) -> ti.f64:
    """Evaluate the scene signed distance field at a point."""
    distance, _owner = nearest_distance(point)
    return distance


@ti.kernel
def _query_nearest(x: ti.f64, y: ti.f64, z: ti.f64, excluded_group: ti.i32):
    # Single-iteration outer loop keeps the per-sphere loop serial
    for _run in range(1):
        distance, owner = nearest_distance_excluding(vec3(x, y, z), excluded_group)
        _query_distance[None] = distance
        _query_owner[None] = owner


def query_nearest_distance(
    point: tuple[float, float, float], excluded_group: int = NO_GROUP
) -> tuple[float, int]:
    """Run the nearest-distance query from Python.

    Useful for tests and for inspecting a scene without rendering it.

    Args:
        point: The query point in world space.
        excluded_group: Group id to skip, or NO_GROUP to consider all spheres.

    Returns:
        Tuple of (distance, owner group id).
    """
    _query_nearest(point[0], point[1], point[2], excluded_group)
    return float(_query_distance[None]), int(_query_owner[None])
