"""Preview module for output and visualization.

Components:
    display: Matplotlib-based preview display
    export: PNG export utilities

Example:
    >>> from raymarcher.preview import save_png_from_array, show_preview
    >>> image = rasterizer.render(scene)
    >>> save_png_from_array(image, "frame.png")
    >>> show_preview(image)
"""

from raymarcher.preview.display import show_preview
from raymarcher.preview.export import save_png_from_array

__all__ = [
    "show_preview",
    "save_png_from_array",
]
