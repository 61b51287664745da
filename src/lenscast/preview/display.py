"""Matplotlib-based preview display for rendered images.

Matplotlib is an optional dependency (the `preview` extra) and is imported
only when a preview is requested.

Example:
    >>> from src.lenscast.preview.display import show_preview
    >>>
    >>> image = renderer.render_image(rng)
    >>> show_preview(image, title="Sky")
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt


def show_preview(
    image: npt.NDArray[np.uint8],
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 4.5),
    block: bool = True,
) -> None:
    """Display a rendered image as a Matplotlib figure.

    Args:
        image: uint8 array of shape (H, W, 3), row 0 at the top.
        title: Figure title (default shows the image size).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until the figure is closed.

    Raises:
        ValueError: If the image is not an (H, W, 3) array.
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")

    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(1, 1, figsize=figsize)

    ax.imshow(image)
    ax.axis("off")

    if title is None:
        height, width = image.shape[:2]
        title = f"Render Preview - {width}x{height}"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)
