"""Python implementation of the Taichi-based SDF ray marcher.

This package renders images by sphere tracing a signed distance field, with:
- Spheres as distance-field primitives, grouped for shadow exclusion
- Point lights with soft shadows from a distance-margin sub-march
- A brute-force per-pixel rasterizer running on Taichi's CPU backend
- A frame driver that sweeps the light across an animation

Subpackages:
    core: Vector utilities, the ray marcher and the rasterizer
    geometry: Distance-field primitives
    scene: Scene description and the device-side scene field
    camera: Camera model with per-pixel ray generation
    preview: PNG export and Matplotlib preview
"""

__version__ = "0.1.0"
