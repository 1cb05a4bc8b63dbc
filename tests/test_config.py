"""Tests for march configuration.

Tests cover:
- Default constants
- Validation of budgets, thresholds and colors
"""

import pytest


class TestMarchConfig:
    """Tests for the MarchConfig dataclass."""

    def test_defaults(self):
        """Test the default march constants."""
        from raymarcher.config import MarchConfig

        config = MarchConfig()
        assert config.step_budget == 100
        assert config.hit_threshold == 0.001
        assert config.max_distance == 1000.0
        assert config.normal_epsilon == 0.0001
        assert config.shadow_hit_threshold == 0.0001
        assert config.background == (0.0, 0.0, 0.0)
        assert config.surface_color == (1.0, 0.0, 0.0)

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"step_budget": 0}, "step_budget"),
            ({"shadow_step_budget": 0}, "shadow_step_budget"),
            ({"hit_threshold": 0.0}, "hit_threshold must be positive"),
            ({"max_distance": -1.0}, "max_distance must be positive"),
            ({"normal_epsilon": 0.0}, "normal_epsilon must be positive"),
            ({"shadow_hit_threshold": -0.1}, "shadow_hit_threshold must be positive"),
            ({"hit_threshold": 5.0, "max_distance": 1.0}, "must be below"),
            ({"background": (0.0, 0.0)}, "background must have 3 components"),
            ({"surface_color": (1.0, 0.0, 0.0, 1.0)}, "surface_color must have 3"),
        ],
    )
    def test_invalid_values(self, kwargs, message):
        """Test that invalid constants raise ValueError."""
        from raymarcher.config import MarchConfig

        with pytest.raises(ValueError, match=message):
            MarchConfig(**kwargs)

    def test_nan_threshold_rejected(self):
        """Test that NaN is not accepted as a positive threshold."""
        from raymarcher.config import MarchConfig

        with pytest.raises(ValueError, match="hit_threshold"):
            MarchConfig(hit_threshold=float("nan"))

    def test_init_taichi_rejects_zero_threads(self):
        """Test that init_taichi validates the thread count before init."""
        from raymarcher.config import init_taichi

        with pytest.raises(ValueError, match="threads must be at least 1"):
            init_taichi(threads=0)
