"""Runtime configuration for the ray marcher.

Two pieces of configuration live here:

- ``MarchConfig`` holds the numeric constants of the marching and shading
  pipeline. It is a plain frozen dataclass; ``configure_marcher`` in
  ``raymarcher.core.marcher`` copies it into Taichi fields before a frame is
  rendered.
- ``init_taichi`` initializes the Taichi runtime. It must be called before
  importing any module that declares Taichi fields (scene, camera, marcher,
  rasterizer).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import taichi as ti

logger = logging.getLogger(__name__)

# Default march constants
DEFAULT_STEP_BUDGET = 100
DEFAULT_HIT_THRESHOLD = 0.001
DEFAULT_MAX_DISTANCE = 1000.0
DEFAULT_NORMAL_EPSILON = 0.0001
DEFAULT_SHADOW_HIT_THRESHOLD = 0.0001
DEFAULT_SHADOW_STEP_BUDGET = 100_000

# Background color for rays that miss, and the base color of lit surfaces
DEFAULT_BACKGROUND = (0.0, 0.0, 0.0)
DEFAULT_SURFACE_COLOR = (1.0, 0.0, 0.0)


@dataclass(frozen=True)
class MarchConfig:
    """Constants of the primary march, normal estimation and shadow march.

    Attributes:
        step_budget: Maximum number of steps of the primary march.
        hit_threshold: Distance below which the primary march reports a hit.
        max_distance: Distance above which the primary march gives up.
        normal_epsilon: Finite-difference step of the normal estimator.
        shadow_hit_threshold: Distance margin of the shadow sub-march.
        shadow_step_budget: Hard iteration cap of the shadow sub-march.
        background: RGB color returned for rays that miss, in [0, 1].
        surface_color: RGB color of lit surfaces, scaled by light terms.
    """

    step_budget: int = DEFAULT_STEP_BUDGET
    hit_threshold: float = DEFAULT_HIT_THRESHOLD
    max_distance: float = DEFAULT_MAX_DISTANCE
    normal_epsilon: float = DEFAULT_NORMAL_EPSILON
    shadow_hit_threshold: float = DEFAULT_SHADOW_HIT_THRESHOLD
    shadow_step_budget: int = DEFAULT_SHADOW_STEP_BUDGET
    background: tuple[float, float, float] = DEFAULT_BACKGROUND
    surface_color: tuple[float, float, float] = DEFAULT_SURFACE_COLOR

    def __post_init__(self) -> None:
        if self.step_budget < 1:
            raise ValueError(f"step_budget must be at least 1, got {self.step_budget}")
        if self.shadow_step_budget < 1:
            raise ValueError(
                f"shadow_step_budget must be at least 1, got {self.shadow_step_budget}"
            )
        for name in ("hit_threshold", "max_distance", "normal_epsilon", "shadow_hit_threshold"):
            value = getattr(self, name)
            if not value > 0.0:
                raise ValueError(f"{name} must be positive, got {value}")
        if self.hit_threshold >= self.max_distance:
            raise ValueError(
                f"hit_threshold ({self.hit_threshold}) must be below "
                f"max_distance ({self.max_distance})"
            )
        for name in ("background", "surface_color"):
            color = getattr(self, name)
            if len(color) != 3:
                raise ValueError(f"{name} must have 3 components, got {len(color)}")


def init_taichi(threads: int | None = None, debug: bool = False) -> None:
    """Initialize Taichi on the CPU backend with double precision.

    Fast math is disabled: the scene distance is infinite for an empty
    selection and the rasterizer tests for NaN, neither of which survives
    no-NaN/no-Inf float assumptions.

    Args:
        threads: Maximum number of CPU threads for parallel pixel loops.
            None keeps Taichi's default.
        debug: Enable Taichi debug mode (bounds checks in kernels).

    Raises:
        ValueError: If threads is less than 1.
    """
    kwargs = {}
    if threads is not None:
        if threads < 1:
            raise ValueError(f"threads must be at least 1, got {threads}")
        kwargs["cpu_max_num_threads"] = threads

    ti.init(arch=ti.cpu, default_fp=ti.f64, fast_math=False, debug=debug, **kwargs)
    logger.debug(f"Taichi initialized (threads={threads}, debug={debug})")
