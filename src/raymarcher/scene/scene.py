"""Immutable scene description and its upload to the scene field.

A Scene is built fresh for every frame from caller-supplied geometry, light
positions and a camera. It is a frozen value: rendering never mutates it.
``upload_scene`` copies it into the Taichi fields of
``raymarcher.scene.field`` at the frame boundary, which is the only point
where those fields change.

Example:
    >>> from raymarcher.camera.pinhole import Camera
    >>> from raymarcher.scene.scene import (
    ...     PointLight, Scene, SpherePrimitive, upload_scene
    ... )
    >>> scene = Scene(
    ...     spheres=(SpherePrimitive(center=(0, 0, 20), radius=10, group_id=1),),
    ...     lights=(PointLight(position=(0, -10, 0)),),
    ...     camera=Camera(position=(0, 0, 0), resolution=(64, 64)),
    ... )
    >>> upload_scene(scene)
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from raymarcher.camera.pinhole import Camera
from raymarcher.scene.field import (
    MAX_GROUP_ID,
    MAX_LIGHTS,
    MAX_SPHERES,
    add_light,
    add_sphere,
    clear_scene,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpherePrimitive:
    """A sphere in the scene description.

    Attributes:
        center: The center of the sphere.
        radius: The radius of the sphere (positive).
        group_id: Shadow group in [0, MAX_GROUP_ID]. Spheres sharing a group
            never shadow each other.
    """

    center: tuple[float, float, float]
    radius: float
    group_id: int = 0

    def __post_init__(self) -> None:
        if len(self.center) != 3:
            raise ValueError(f"Sphere center must have 3 components, got {len(self.center)}")
        if not self.radius > 0.0:
            raise ValueError(f"Sphere radius must be positive, got {self.radius}")
        if self.group_id < 0:
            raise ValueError(f"Sphere group_id must be non-negative, got {self.group_id}")
        if self.group_id > MAX_GROUP_ID:
            raise ValueError(
                f"Sphere group_id must not exceed {MAX_GROUP_ID}, got {self.group_id}"
            )


@dataclass(frozen=True)
class PointLight:
    """A point light source.

    Attributes:
        position: The light position in world space.
    """

    position: tuple[float, float, float]

    def __post_init__(self) -> None:
        if len(self.position) != 3:
            raise ValueError(
                f"Light position must have 3 components, got {len(self.position)}"
            )


@dataclass(frozen=True)
class Scene:
    """Everything needed to render one frame.

    Attributes:
        spheres: Distance-field primitives. Order only matters for tie-breaks
            between equally distant spheres.
        lights: Point lights.
        camera: The camera producing primary rays.
    """

    spheres: tuple[SpherePrimitive, ...]
    lights: tuple[PointLight, ...]
    camera: Camera

    def __post_init__(self) -> None:
        # Accept any iterable but store tuples so the scene stays immutable
        object.__setattr__(self, "spheres", tuple(self.spheres))
        object.__setattr__(self, "lights", tuple(self.lights))
        if len(self.spheres) > MAX_SPHERES:
            raise ValueError(
                f"Scene has {len(self.spheres)} spheres, maximum is {MAX_SPHERES}"
            )
        if len(self.lights) > MAX_LIGHTS:
            raise ValueError(f"Scene has {len(self.lights)} lights, maximum is {MAX_LIGHTS}")

    @property
    def is_empty(self) -> bool:
        """Whether the scene has no primitives (every ray misses)."""
        return not self.spheres


def make_scene(
    spheres: Iterable[SpherePrimitive],
    lights: Iterable[tuple[float, float, float]],
    camera: Camera,
) -> Scene:
    """Build a Scene from primitives and raw light positions."""
    return Scene(
        spheres=tuple(spheres),
        lights=tuple(PointLight(position=tuple(p)) for p in lights),
        camera=camera,
    )


def upload_scene(scene: Scene) -> None:
    """Copy a scene's primitives and lights into the Taichi scene field.

    Clears whatever the previous frame left behind. An empty scene is valid:
    every nearest-distance query then returns an infinite distance and all
    rays resolve to the background.

    Args:
        scene: The scene to upload.
    """
    clear_scene()
    for sphere in scene.spheres:
        add_sphere(sphere.center, sphere.radius, sphere.group_id)
    for light in scene.lights:
        add_light(light.position)

    if scene.is_empty:
        logger.warning("Scene has no primitives; every pixel will be background")
    if not scene.lights:
        logger.warning("Scene has no lights; every hit will be unlit")
    logger.debug(f"Uploaded {len(scene.spheres)} spheres and {len(scene.lights)} lights")
