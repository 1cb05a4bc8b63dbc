"""Unit tests for the pinhole camera module.

Tests cover:
- Camera validation (resolution, field of view)
- Basis computation with and without look_at
- Ray generation for center and corner pixels
- Field-of-view scaling
"""

import math

import pytest
import taichi as ti


def _trace_pixel(pixel_x, pixel_y, width, height):
    """Generate the primary ray for one pixel and return (origin, direction)."""
    from raymarcher.camera.pinhole import get_ray

    origin = ti.Vector.field(3, dtype=ti.f64, shape=())
    direction = ti.Vector.field(3, dtype=ti.f64, shape=())

    @ti.kernel
    def test_kernel(px: ti.i32, py: ti.i32, w: ti.i32, h: ti.i32):
        ray = get_ray(px, py, w, h)
        origin[None] = ray.origin
        direction[None] = ray.direction

    test_kernel(pixel_x, pixel_y, width, height)
    o = origin[None]
    d = direction[None]
    return (o[0], o[1], o[2]), (d[0], d[1], d[2])


class TestCameraValidation:
    """Tests for Camera construction."""

    def test_non_positive_resolution(self):
        """Test that zero or negative resolution is rejected."""
        from raymarcher.camera.pinhole import Camera

        with pytest.raises(ValueError, match="must be positive"):
            Camera(position=(0.0, 0.0, 0.0), resolution=(0, 64))

    def test_resolution_above_maximum(self):
        """Test that oversize resolutions are rejected."""
        from raymarcher.camera.pinhole import MAX_RESOLUTION, Camera

        with pytest.raises(ValueError, match="exceeds maximum supported"):
            Camera(position=(0.0, 0.0, 0.0), resolution=(MAX_RESOLUTION + 1, 64))

    @pytest.mark.parametrize("fov", [0.0, 180.0, -10.0])
    def test_invalid_fov(self, fov):
        """Test that field of view outside (0, 180) is rejected."""
        from raymarcher.camera.pinhole import Camera

        with pytest.raises(ValueError, match="Field of view"):
            Camera(position=(0.0, 0.0, 0.0), resolution=(64, 64), fov=fov)

    def test_width_and_height(self):
        """Test the resolution accessors."""
        from raymarcher.camera.pinhole import Camera

        camera = Camera(position=(0.0, 0.0, 0.0), resolution=(32, 16))
        assert camera.width == 32
        assert camera.height == 16


class TestCameraBasis:
    """Tests for basis computation."""

    def test_default_basis_is_identity(self):
        """Test that a camera without look_at looks down +z."""
        from raymarcher.camera.pinhole import Camera, compute_camera_basis

        right, up, forward = compute_camera_basis(
            Camera(position=(1.0, 2.0, 3.0), resolution=(8, 8))
        )
        assert right.tolist() == [1.0, 0.0, 0.0]
        assert up.tolist() == [0.0, 1.0, 0.0]
        assert forward.tolist() == [0.0, 0.0, 1.0]

    def test_look_at_negative_z(self):
        """Test basis vectors when camera looks down -z axis."""
        from raymarcher.camera.pinhole import Camera, compute_camera_basis

        right, up, forward = compute_camera_basis(
            Camera(position=(0.0, 0.0, 0.0), resolution=(8, 8), look_at=(0.0, 0.0, -5.0))
        )
        assert forward.tolist() == pytest.approx([0.0, 0.0, -1.0])
        assert right.tolist() == pytest.approx([-1.0, 0.0, 0.0])
        assert up.tolist() == pytest.approx([0.0, 1.0, 0.0])

    def test_look_at_basis_is_orthonormal(self):
        """Test that an oblique look_at still gives an orthonormal basis."""
        from raymarcher.camera.pinhole import Camera, compute_camera_basis

        right, up, forward = compute_camera_basis(
            Camera(position=(3.0, 1.0, -2.0), resolution=(8, 8), look_at=(0.0, 0.0, 20.0))
        )
        for a, b in ((right, up), (right, forward), (up, forward)):
            assert abs(float(a @ b)) < 1e-12
        for v in (right, up, forward):
            assert abs(math.sqrt(float(v @ v)) - 1.0) < 1e-12

    def test_look_at_same_as_position(self):
        """Test that a degenerate view direction raises ValueError."""
        from raymarcher.camera.pinhole import Camera, compute_camera_basis

        camera = Camera(position=(1.0, 1.0, 1.0), resolution=(8, 8), look_at=(1.0, 1.0, 1.0))
        with pytest.raises(ValueError, match="must differ"):
            compute_camera_basis(camera)

    def test_look_at_parallel_to_vup(self):
        """Test that looking straight along vup raises ValueError."""
        from raymarcher.camera.pinhole import Camera, compute_camera_basis

        camera = Camera(position=(0.0, 0.0, 0.0), resolution=(8, 8), look_at=(0.0, 5.0, 0.0))
        with pytest.raises(ValueError, match="parallel to vup"):
            compute_camera_basis(camera)

    def test_setup_camera_info(self):
        """Test that setup_camera writes origin, basis and scale."""
        from raymarcher.camera.pinhole import Camera, get_camera_info, setup_camera

        setup_camera(Camera(position=(1.0, 2.0, 3.0), resolution=(8, 8)))
        info = get_camera_info()

        assert info["origin"] == (1.0, 2.0, 3.0)
        assert info["forward"] == (0.0, 0.0, 1.0)
        assert info["scale"] == (1.0,)


class TestRayGeneration:
    """Tests for per-pixel ray generation."""

    def test_center_pixel_looks_forward(self):
        """Test that the center pixel of an even image looks straight ahead."""
        from raymarcher.camera.pinhole import Camera, setup_camera

        setup_camera(Camera(position=(0.0, 0.0, 0.0), resolution=(64, 64)))
        origin, direction = _trace_pixel(32, 32, 64, 64)

        assert origin == (0.0, 0.0, 0.0)
        assert direction == pytest.approx((0.0, 0.0, 1.0), abs=1e-12)

    def test_corner_pixel(self):
        """Test that pixel (0, 0) maps to u = v = -1."""
        from raymarcher.camera.pinhole import Camera, setup_camera

        setup_camera(Camera(position=(0.0, 0.0, 0.0), resolution=(64, 64)))
        _, direction = _trace_pixel(0, 0, 64, 64)

        inv = 1.0 / math.sqrt(3.0)
        assert direction == pytest.approx((-inv, -inv, inv), abs=1e-12)

    def test_non_square_image(self):
        """Test that u and v are normalized by width and height separately."""
        from raymarcher.camera.pinhole import Camera, setup_camera

        setup_camera(Camera(position=(0.0, 0.0, 0.0), resolution=(8, 4)))
        _, direction = _trace_pixel(6, 3, 8, 4)

        # u = (12 - 8) / 8 = 0.5, v = (6 - 4) / 4 = 0.5
        norm = math.sqrt(0.5**2 + 0.5**2 + 1.0)
        assert direction == pytest.approx((0.5 / norm, 0.5 / norm, 1.0 / norm), abs=1e-12)

    def test_ray_starts_at_camera_position(self):
        """Test that rays originate at the camera position."""
        from raymarcher.camera.pinhole import Camera, setup_camera

        setup_camera(Camera(position=(4.0, -2.0, 7.0), resolution=(16, 16)))
        origin, _ = _trace_pixel(3, 11, 16, 16)

        assert origin == (4.0, -2.0, 7.0)

    def test_fov_narrows_rays(self):
        """Test that a 60 degree field of view scales screen coordinates."""
        from raymarcher.camera.pinhole import Camera, setup_camera

        setup_camera(Camera(position=(0.0, 0.0, 0.0), resolution=(64, 64), fov=60.0))
        _, direction = _trace_pixel(0, 32, 64, 64)

        s = math.tan(math.radians(30.0))
        norm = math.sqrt(s * s + 1.0)
        assert direction == pytest.approx((-s / norm, 0.0, 1.0 / norm), abs=1e-12)

    def test_fov_90_matches_default(self):
        """Test that a 90 degree field of view matches the default camera."""
        from raymarcher.camera.pinhole import Camera, setup_camera

        setup_camera(Camera(position=(0.0, 0.0, 0.0), resolution=(64, 64)))
        _, default_direction = _trace_pixel(5, 50, 64, 64)

        setup_camera(Camera(position=(0.0, 0.0, 0.0), resolution=(64, 64), fov=90.0))
        _, fov_direction = _trace_pixel(5, 50, 64, 64)

        assert fov_direction == pytest.approx(default_direction, abs=1e-12)
