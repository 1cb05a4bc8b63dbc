"""Image export utilities for rendered frames.

Rendered frames are already 8-bit RGB arrays (linear radiance scaled by 255,
no gamma), so export is a straight Pillow encode.

Supported formats:
    - PNG (8-bit RGB via Pillow)

Example:
    >>> from raymarcher.preview.export import save_png_from_array
    >>> image = rasterizer.render(scene)
    >>> save_png_from_array(image, "frames/0.png")
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)


def save_png_from_array(image: npt.NDArray[np.uint8], filepath: str | Path) -> Path:
    """Save an 8-bit RGB array as a PNG file.

    Args:
        image: Image array of shape (H, W, 3) with dtype uint8.
        filepath: Output file path (should end in .png). Missing parent
            directories are created.

    Returns:
        The path written.

    Raises:
        ValueError: If the array is not an (H, W, 3) uint8 image.
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")
    if image.dtype != np.uint8:
        raise ValueError(f"Expected a uint8 image, got dtype {image.dtype}")

    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    pil_image = PILImage.fromarray(image)
    pil_image.save(path)
    logger.debug(f"Saved {image.shape[1]}x{image.shape[0]} image to {path}")

    return path
