"""Pytest configuration for ray marcher tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts. Double precision
    matches the vector type used by every kernel, and fast math stays off
    as in raymarcher.config.init_taichi.
    """
    ti.init(arch=ti.cpu, default_fp=ti.f64, fast_math=False, random_seed=42)
    yield
    # Note: We don't call ti.reset() here as it can cause issues
    # with subsequent tests if any cleanup happens after


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene, marcher and render target state before each test.

    This ensures tests are isolated from each other.
    """
    # Import here to ensure Taichi is initialized
    from raymarcher.core.marcher import reset_marcher
    from raymarcher.core.rasterizer import clear_render_target, reset_render_target
    from raymarcher.scene.field import clear_scene

    def _clear_all():
        clear_scene()
        reset_marcher()
        clear_render_target()
        reset_render_target()

    _clear_all()

    yield

    _clear_all()


@pytest.fixture
def two_sphere_scene():
    """The sweep's two spheres, with one light above the camera, at 64x64."""
    from raymarcher.camera.pinhole import Camera
    from raymarcher.scene.scene import SpherePrimitive, make_scene

    return make_scene(
        spheres=[
            SpherePrimitive(center=(0.0, 0.0, 20.0), radius=10.0, group_id=1),
            SpherePrimitive(center=(10.0, 0.0, 20.0), radius=5.0, group_id=2),
        ],
        lights=[(0.0, -10.0, 0.0)],
        camera=Camera(position=(0.0, 0.0, 0.0), resolution=(64, 64)),
    )
