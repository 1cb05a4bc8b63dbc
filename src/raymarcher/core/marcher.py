"""Sphere-tracing ray marcher with soft-shadowed point lights.

This module implements the per-ray pipeline:

1. Primary march: step along the ray by the scene distance until the distance
   drops below the hit threshold (HIT), exceeds the maximum distance
   (MISS_ESCAPED) or the step budget runs out (MISS_EXHAUSTED). The scene
   distance is a lower bound on the distance to any surface, so a step never
   overshoots.
2. Normal estimation: symmetric finite differences of the scene distance
   along each axis, normalized and negated.
3. Light accumulation: for every light in front of the surface, the largest
   alignment between the normal and the light direction becomes the
   Lambertian factor, and the largest shadow visibility the light factor.
   Both are maxima over lights, not sums.
4. Shadow sub-march: march from the hit point toward the light, ignoring the
   hit primitive's group. Touching another primitive gives a hard shadow (0);
   otherwise the smallest distance margin seen along the way, capped at 1,
   is the visibility, which softens shadow edges.

The color of a hit is ``surface_color * light_angle * light``; a miss returns
the background color. Both colors and all thresholds come from
``MarchConfig`` through ``configure_marcher``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from raymarcher.config import MarchConfig
    >>> from raymarcher.core.marcher import configure_marcher, march_ray
    >>> # after upload_scene(scene) for the current frame:
    >>> configure_marcher(MarchConfig())
    >>> outcome = march_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
    >>> outcome.hit, outcome.distance
"""

import logging
import math
from dataclasses import dataclass
from enum import IntEnum

import taichi as ti

from raymarcher.config import MarchConfig
from raymarcher.core.vector import Ray, dot, length, make_ray, normalize, ray_at, vec3
from raymarcher.scene.field import (
    NO_GROUP,
    light_positions,
    nearest_distance,
    nearest_distance_excluding,
    num_lights,
    scene_sdf,
)

logger = logging.getLogger(__name__)


class MarchState(IntEnum):
    """Terminal and intermediate states of the primary march."""

    MARCHING = 0
    HIT = 1
    MISS_ESCAPED = 2
    MISS_EXHAUSTED = 3


# Starting value of the shadow margin; anything above 1 means "fully lit"
_SHADOW_MARGIN_START = 1.1

# =============================================================================
# March Configuration (written from MarchConfig)
# =============================================================================

_step_budget = ti.field(dtype=ti.i32, shape=())
_hit_threshold = ti.field(dtype=ti.f64, shape=())
_max_distance = ti.field(dtype=ti.f64, shape=())
_normal_epsilon = ti.field(dtype=ti.f64, shape=())
_shadow_hit_threshold = ti.field(dtype=ti.f64, shape=())
_shadow_step_budget = ti.field(dtype=ti.i32, shape=())
_background = ti.Vector.field(3, dtype=ti.f64, shape=())
_surface_color = ti.Vector.field(3, dtype=ti.f64, shape=())

_marcher_configured = ti.field(dtype=ti.i32, shape=())


def configure_marcher(config: MarchConfig | None = None) -> None:
    """Copy march constants into the Taichi fields read by the kernels.

    Args:
        config: The constants to use. Defaults to ``MarchConfig()``.
    """
    if config is None:
        config = MarchConfig()

    _step_budget[None] = config.step_budget
    _hit_threshold[None] = config.hit_threshold
    _max_distance[None] = config.max_distance
    _normal_epsilon[None] = config.normal_epsilon
    _shadow_hit_threshold[None] = config.shadow_hit_threshold
    _shadow_step_budget[None] = config.shadow_step_budget
    _background[None] = list(config.background)
    _surface_color[None] = list(config.surface_color)
    _marcher_configured[None] = 1

    logger.debug(f"Marcher configured: {config}")


def reset_marcher() -> None:
    """Mark the marcher as unconfigured."""
    _marcher_configured[None] = 0


def is_marcher_configured() -> bool:
    """Check if configure_marcher has been called."""
    return bool(_marcher_configured[None])


def _check_marcher_configured() -> None:
    """Check if the marcher is configured and raise if not."""
    if _marcher_configured[None] == 0:
        raise RuntimeError("Marcher not configured. Call configure_marcher() first.")


# =============================================================================
# Primary March
# =============================================================================


@ti.dataclass
class MarchResult:
    """Outcome of the primary march.

    Attributes:
        state: A MarchState value (HIT, MISS_ESCAPED or MISS_EXHAUSTED).
        position: The hit position. Only valid if state == HIT.
        distance: Distance accumulated along the ray.
        owner: Group id of the hit primitive, NO_GROUP on a miss.
        steps: Number of distance queries performed.
    """

    state: ti.i32
    position: vec3
    distance: ti.f64
    owner: ti.i32
    steps: ti.i32


@ti.func
def march(ray: Ray) -> MarchResult:
    """March a ray through the scene until it hits, escapes or runs out of steps.

    Args:
        ray: The ray to march. Its direction must be unit length.

    Returns:
        A MarchResult describing the terminal state.
    """
    total_distance = 0.0
    state = int(MarchState.MARCHING)
    position = ray.origin
    owner = NO_GROUP
    steps = 0

    for _ in range(_step_budget[None]):
        if state == int(MarchState.MARCHING):
            current_position = ray_at(ray, total_distance)
            distance_to_closest, closest = nearest_distance(current_position)
            steps += 1

            if distance_to_closest < _hit_threshold[None]:
                state = int(MarchState.HIT)
                position = current_position
                owner = closest
            elif distance_to_closest > _max_distance[None]:
                state = int(MarchState.MISS_ESCAPED)
            else:
                total_distance += distance_to_closest

    if state == int(MarchState.MARCHING):
        state = int(MarchState.MISS_EXHAUSTED)

    return MarchResult(
        state=state,
        position=position,
        distance=total_distance,
        owner=owner,
        steps=steps,
    )


# =============================================================================
# Normal Estimation
# =============================================================================


@ti.func
def estimate_normal(point: vec3) -> vec3:
    """Estimate the surface normal from the scene distance field.

    Each component is sdf(p + eps * axis) - sdf(p - eps * axis). The gradient
    is normalized and negated, so on the lit side of a surface the result
    points along the direction of incoming light. A vanishing gradient gives
    the zero vector.

    Args:
        point: The point to evaluate, normally a hit position.

    Returns:
        The estimated normal (unit length, or zero).
    """
    eps = _normal_epsilon[None]
    gradient = vec3(0.0, 0.0, 0.0)

    for axis in ti.static(range(3)):
        offset = vec3(0.0, 0.0, 0.0)
        offset[axis] = eps
        gradient[axis] = scene_sdf(point + offset) - scene_sdf(point - offset)

    return -normalize(gradient)


# =============================================================================
# Shadows and Lighting
# =============================================================================


@ti.func
def cast_shadow_ray(
    start: vec3,
    direction_from_light: vec3,
    distance_to_light: ti.f64,
    exclude_group: ti.i32,
) -> ti.f64:
    """Estimate how visible a light is from a surface point.

    Marches from ``start`` toward the light, skipping every primitive of
    ``exclude_group``. At each step the margin (distance - threshold) is
    checked: a non-positive margin means another primitive blocks the light
    and the visibility is 0. Otherwise the smallest margin seen is kept and
    returned, capped at 1.

    Args:
        start: The shaded surface point.
        direction_from_light: Direction from the light to the point.
        distance_to_light: Distance between the light and the point.
        exclude_group: Group id of the shaded primitive.

    Returns:
        Visibility in [0, 1].
    """
    threshold = _shadow_hit_threshold[None]
    toward_light = -normalize(direction_from_light)

    total_distance = 0.0
    min_margin = _SHADOW_MARGIN_START
    occluded = 0
    steps = 0

    while (
        occluded == 0
        and total_distance < distance_to_light
        and steps < _shadow_step_budget[None]
    ):
        current_position = start + toward_light * total_distance
        distance_to_closest, _owner = nearest_distance_excluding(current_position, exclude_group)
        margin = distance_to_closest - threshold

        if margin <= 0.0:
            occluded = 1
        else:
            min_margin = ti.min(min_margin, margin)
            total_distance += distance_to_closest
        steps += 1

    visibility = 0.0
    if occluded == 0:
        visibility = ti.min(min_margin, 1.0)
    return visibility


@ti.func
def light_contribution(position: vec3, owner: ti.i32):
    """Accumulate direct lighting at a hit point over all lights.

    Lights behind the surface (alignment <= 0) contribute nothing. Both terms
    are maxima over the remaining lights: the dominant light decides.

    Args:
        position: The hit position.
        owner: Group id of the hit primitive, excluded from its own shadow.

    Returns:
        A tuple (light, light_angle): the largest shadow visibility and the
        largest normal/light alignment.
    """
    normal = estimate_normal(position)

    light = 0.0
    light_angle = 0.0

    for k in range(num_lights[None]):
        to_point = position - light_positions[k]
        distance = length(to_point)
        direction = normalize(to_point)
        alignment = dot(normal, direction)

        if alignment > 0.0:
            light_angle = ti.max(light_angle, alignment)
            visibility = cast_shadow_ray(position, direction, distance, owner)
            light = ti.max(light, visibility)

    return light, light_angle


@ti.func
def shade(ray: Ray) -> vec3:
    """March a ray and return its color.

    Args:
        ray: The primary ray (unit-length direction).

    Returns:
        The linear RGB radiance: the background color on a miss, otherwise
        surface_color * light_angle * light.
    """
    result = march(ray)
    color = _background[None]

    if result.state == int(MarchState.HIT):
        light, light_angle = light_contribution(result.position, result.owner)
        color = _surface_color[None] * light_angle * light

    return color


# =============================================================================
# Python-callable Queries
# =============================================================================

# Results written by the query kernels
_result_state = ti.field(dtype=ti.i32, shape=())
_result_position = ti.Vector.field(3, dtype=ti.f64, shape=())
_result_distance = ti.field(dtype=ti.f64, shape=())
_result_owner = ti.field(dtype=ti.i32, shape=())
_result_steps = ti.field(dtype=ti.i32, shape=())
_result_vector = ti.Vector.field(3, dtype=ti.f64, shape=())
_result_light = ti.field(dtype=ti.f64, shape=())
_result_light_angle = ti.field(dtype=ti.f64, shape=())


@dataclass(frozen=True)
class MarchOutcome:
    """Python-side copy of a MarchResult."""

    state: MarchState
    position: tuple[float, float, float]
    distance: float
    owner: int
    steps: int

    @property
    def hit(self) -> bool:
        return self.state == MarchState.HIT


def _unit_direction(direction: tuple[float, float, float]) -> tuple[float, float, float]:
    """Normalize a caller-supplied direction.

    Raises:
        ValueError: If the direction has zero length.
    """
    norm = math.sqrt(sum(c * c for c in direction))
    if norm == 0.0:
        raise ValueError("Ray direction must have non-zero length")
    return (direction[0] / norm, direction[1] / norm, direction[2] / norm)


# Each query kernel wraps its body in a single-iteration loop so the loops
# inside the Taichi functions stay serial.


@ti.kernel
def _march_kernel(ox: ti.f64, oy: ti.f64, oz: ti.f64, dx: ti.f64, dy: ti.f64, dz: ti.f64):
    for _run in range(1):
        result = march(make_ray(vec3(ox, oy, oz), vec3(dx, dy, dz)))
        _result_state[None] = result.state
        _result_position[None] = result.position
        _result_distance[None] = result.distance
        _result_owner[None] = result.owner
        _result_steps[None] = result.steps


@ti.kernel
def _shade_kernel(ox: ti.f64, oy: ti.f64, oz: ti.f64, dx: ti.f64, dy: ti.f64, dz: ti.f64):
    for _run in range(1):
        _result_vector[None] = shade(make_ray(vec3(ox, oy, oz), vec3(dx, dy, dz)))


@ti.kernel
def _normal_kernel(x: ti.f64, y: ti.f64, z: ti.f64):
    for _run in range(1):
        _result_vector[None] = estimate_normal(vec3(x, y, z))


@ti.kernel
def _shadow_kernel(
    sx: ti.f64,
    sy: ti.f64,
    sz: ti.f64,
    dx: ti.f64,
    dy: ti.f64,
    dz: ti.f64,
    distance: ti.f64,
    exclude_group: ti.i32,
):
    for _run in range(1):
        _result_light[None] = cast_shadow_ray(
            vec3(sx, sy, sz), vec3(dx, dy, dz), distance, exclude_group
        )


@ti.kernel
def _light_kernel(x: ti.f64, y: ti.f64, z: ti.f64, owner: ti.i32):
    for _run in range(1):
        light, light_angle = light_contribution(vec3(x, y, z), owner)
        _result_light[None] = light
        _result_light_angle[None] = light_angle


def march_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
) -> MarchOutcome:
    """Run the primary march for a single ray from Python.

    The direction is normalized here, since the march assumes unit length.

    Raises:
        ValueError: If the direction has zero length.
        RuntimeError: If the marcher has not been configured.
    """
    _check_marcher_configured()
    d = _unit_direction(direction)
    _march_kernel(origin[0], origin[1], origin[2], d[0], d[1], d[2])

    p = _result_position[None]
    return MarchOutcome(
        state=MarchState(int(_result_state[None])),
        position=(float(p[0]), float(p[1]), float(p[2])),
        distance=float(_result_distance[None]),
        owner=int(_result_owner[None]),
        steps=int(_result_steps[None]),
    )


def shade_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
) -> tuple[float, float, float]:
    """March and shade a single ray; returns linear RGB.

    Raises:
        ValueError: If the direction has zero length.
        RuntimeError: If the marcher has not been configured.
    """
    _check_marcher_configured()
    d = _unit_direction(direction)
    _shade_kernel(origin[0], origin[1], origin[2], d[0], d[1], d[2])

    c = _result_vector[None]
    return (float(c[0]), float(c[1]), float(c[2]))


def estimate_normal_at(point: tuple[float, float, float]) -> tuple[float, float, float]:
    """Estimate the surface normal at a point from Python."""
    _check_marcher_configured()
    _normal_kernel(point[0], point[1], point[2])

    n = _result_vector[None]
    return (float(n[0]), float(n[1]), float(n[2]))


def shadow_visibility(
    start: tuple[float, float, float],
    direction_from_light: tuple[float, float, float],
    distance_to_light: float,
    exclude_group: int = NO_GROUP,
) -> float:
    """Run the shadow sub-march from Python.

    Raises:
        ValueError: If the direction has zero length.
        RuntimeError: If the marcher has not been configured.
    """
    _check_marcher_configured()
    d = _unit_direction(direction_from_light)
    _shadow_kernel(start[0], start[1], start[2], d[0], d[1], d[2], distance_to_light, exclude_group)
    return float(_result_light[None])


def light_contribution_at(
    position: tuple[float, float, float], owner: int
) -> tuple[float, float]:
    """Compute (light, light_angle) at a surface point from Python."""
    _check_marcher_configured()
    _light_kernel(position[0], position[1], position[2], owner)
    return float(_result_light[None]), float(_result_light_angle[None])
