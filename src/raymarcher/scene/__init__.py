"""Scene module: immutable scene description and the device-side scene field.

Components:
    scene: SpherePrimitive, PointLight and Scene values, and upload_scene
    field: Taichi storage for primitives and lights, and the nearest-distance
        query the marcher runs at every step

Importing this package declares Taichi fields, so Taichi must be initialized
first.
"""

from .field import (
    FAR_DISTANCE,
    MAX_GROUP_ID,
    MAX_LIGHTS,
    MAX_SPHERES,
    NO_GROUP,
    add_light,
    add_sphere,
    clear_scene,
    get_light_count,
    get_sphere_count,
    nearest_distance,
    nearest_distance_excluding,
    query_nearest_distance,
    scene_sdf,
)
from .scene import PointLight, Scene, SpherePrimitive, make_scene, upload_scene

__all__ = [
    # Scene description
    "SpherePrimitive",
    "PointLight",
    "Scene",
    "make_scene",
    "upload_scene",
    # Scene field
    "MAX_SPHERES",
    "MAX_LIGHTS",
    "NO_GROUP",
    "MAX_GROUP_ID",
    "FAR_DISTANCE",
    "clear_scene",
    "add_sphere",
    "add_light",
    "get_sphere_count",
    "get_light_count",
    "nearest_distance",
    "nearest_distance_excluding",
    "scene_sdf",
    "query_nearest_distance",
]
