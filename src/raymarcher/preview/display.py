"""Matplotlib-based preview display for rendered frames.

Example:
    >>> from raymarcher.preview.display import show_preview
    >>> image = rasterizer.render(scene)
    >>> show_preview(image, title="Frame 0")
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt


def show_preview(
    image: npt.NDArray[np.uint8],
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 8),
    block: bool = True,
) -> None:
    """Display a rendered frame as a Matplotlib figure.

    Args:
        image: Image array of shape (H, W, 3) with dtype uint8.
        title: Custom title (default shows the image size).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(1, 1, figsize=figsize)

    # Row 0 of the image is the top of the frame, as in the saved PNG
    ax.imshow(image, origin="upper")
    ax.axis("off")

    if title is None:
        height, width = image.shape[:2]
        title = f"Render Preview - {width}x{height}"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)
