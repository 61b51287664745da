"""Preview module for output and visualization.

Components:
    export: Pillow-backed image encoder and byte conversion
    display: Matplotlib-based preview (optional dependency)

Example:
    >>> from src.lenscast.preview import ImageEncoder
    >>>
    >>> encoder = ImageEncoder("dist/image.jpg", 1280, 720)
    >>> renderer.render_into(encoder, rng)
    >>> encoder.save()
"""

from src.lenscast.preview.display import show_preview
from src.lenscast.preview.export import (
    EncodeError,
    Encoder,
    ImageEncoder,
    colours_to_uint8,
)

__all__ = [
    # Display functions
    "show_preview",
    # Export
    "Encoder",
    "ImageEncoder",
    "EncodeError",
    "colours_to_uint8",
]
