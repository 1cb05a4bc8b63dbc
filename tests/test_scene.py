"""Tests for the immutable scene description and its upload.

Tests cover:
- SpherePrimitive and PointLight validation
- Scene immutability and capacity checks
- make_scene helper
- upload_scene replacing the previous frame's contents
"""

import dataclasses
import logging

import pytest


class TestSceneValues:
    """Tests for the scene value types."""

    def test_sphere_validation(self):
        """Test that invalid spheres are rejected."""
        from raymarcher.scene.scene import SpherePrimitive

        with pytest.raises(ValueError, match="radius must be positive"):
            SpherePrimitive(center=(0.0, 0.0, 0.0), radius=0.0)
        with pytest.raises(ValueError, match="group_id must be non-negative"):
            SpherePrimitive(center=(0.0, 0.0, 0.0), radius=1.0, group_id=-1)
        with pytest.raises(ValueError, match="3 components"):
            SpherePrimitive(center=(0.0, 0.0), radius=1.0)

    def test_group_id_upper_bound(self):
        """Test that group ids beyond the i32 group field are rejected."""
        from raymarcher.scene.field import MAX_GROUP_ID
        from raymarcher.scene.scene import SpherePrimitive

        assert SpherePrimitive(center=(0.0, 0.0, 0.0), radius=1.0, group_id=MAX_GROUP_ID)
        with pytest.raises(ValueError, match="must not exceed"):
            SpherePrimitive(center=(0.0, 0.0, 0.0), radius=1.0, group_id=MAX_GROUP_ID + 1)
        with pytest.raises(ValueError, match="must not exceed"):
            SpherePrimitive(center=(0.0, 0.0, 0.0), radius=1.0, group_id=2**32 + 1)

    def test_light_validation(self):
        """Test that lights need three coordinates."""
        from raymarcher.scene.scene import PointLight

        with pytest.raises(ValueError, match="3 components"):
            PointLight(position=(0.0, 1.0))

    def test_scene_is_frozen(self, two_sphere_scene):
        """Test that a scene cannot be modified after construction."""
        with pytest.raises(dataclasses.FrozenInstanceError):
            two_sphere_scene.lights = ()

    def test_make_scene_converts_lights(self, two_sphere_scene):
        """Test that make_scene wraps light positions and stores tuples."""
        from raymarcher.scene.scene import PointLight

        assert isinstance(two_sphere_scene.spheres, tuple)
        assert two_sphere_scene.lights == (PointLight(position=(0.0, -10.0, 0.0)),)
        assert not two_sphere_scene.is_empty

    def test_scene_accepts_lists(self):
        """Test that list inputs are stored as tuples."""
        from raymarcher.camera.pinhole import Camera
        from raymarcher.scene.scene import PointLight, Scene

        scene = Scene(
            spheres=[],
            lights=[PointLight(position=(0.0, 0.0, 0.0))],
            camera=Camera(position=(0.0, 0.0, 0.0), resolution=(4, 4)),
        )
        assert scene.spheres == ()
        assert isinstance(scene.lights, tuple)
        assert scene.is_empty

    def test_too_many_spheres(self):
        """Test that scenes beyond the field capacity are rejected."""
        from raymarcher.camera.pinhole import Camera
        from raymarcher.scene.field import MAX_SPHERES
        from raymarcher.scene.scene import Scene, SpherePrimitive

        spheres = [
            SpherePrimitive(center=(float(i), 0.0, 0.0), radius=0.1)
            for i in range(MAX_SPHERES + 1)
        ]
        with pytest.raises(ValueError, match="maximum is"):
            Scene(
                spheres=spheres,
                lights=(),
                camera=Camera(position=(0.0, 0.0, 0.0), resolution=(4, 4)),
            )


class TestUploadScene:
    """Tests for copying a scene into the scene field."""

    def test_upload_counts(self, two_sphere_scene):
        """Test that every sphere and light is uploaded."""
        from raymarcher.scene.field import get_light_count, get_sphere_count
        from raymarcher.scene.scene import upload_scene

        upload_scene(two_sphere_scene)

        assert get_sphere_count() == 2
        assert get_light_count() == 1

    def test_upload_replaces_previous_frame(self, two_sphere_scene):
        """Test that uploading a second scene discards the first."""
        from raymarcher.camera.pinhole import Camera
        from raymarcher.scene.field import get_sphere_count, query_nearest_distance
        from raymarcher.scene.scene import SpherePrimitive, make_scene, upload_scene

        upload_scene(two_sphere_scene)
        upload_scene(
            make_scene(
                spheres=[SpherePrimitive(center=(0.0, 0.0, 5.0), radius=1.0, group_id=9)],
                lights=[],
                camera=Camera(position=(0.0, 0.0, 0.0), resolution=(4, 4)),
            )
        )

        assert get_sphere_count() == 1
        distance, owner = query_nearest_distance((0.0, 0.0, 0.0))
        assert abs(distance - 4.0) < 1e-12
        assert owner == 9

    def test_upload_empty_scene_warns(self, caplog):
        """Test that an empty scene uploads with a warning."""
        from raymarcher.camera.pinhole import Camera
        from raymarcher.scene.field import get_sphere_count
        from raymarcher.scene.scene import make_scene, upload_scene

        scene = make_scene([], [], Camera(position=(0.0, 0.0, 0.0), resolution=(4, 4)))
        with caplog.at_level(logging.WARNING, logger="raymarcher"):
            upload_scene(scene)

        assert get_sphere_count() == 0
        assert "no primitives" in caplog.text
        assert "no lights" in caplog.text
