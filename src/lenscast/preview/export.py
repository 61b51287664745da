"""Image encoding and export utilities for rendered images.

This module owns the final write of a render: pixels are collected into an
8-bit RGB NumPy buffer and saved through Pillow, which picks the file format
from the path extension (JPEG, PNG, ...).

Example:
    >>> from src.lenscast.preview.export import ImageEncoder
    >>>
    >>> encoder = ImageEncoder("dist/image.png", 2, 2)
    >>> encoder.put_pixel(0, 0, (255, 255, 255))
    >>> encoder.save()
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from src.lenscast.core.spectrum import BYTE_SCALE

logger = logging.getLogger(__name__)


class EncodeError(RuntimeError):
    """Raised when an image cannot be encoded or written."""


class Encoder(Protocol):
    """Destination for rendered pixels."""

    def put_pixel(self, x: int, y: int, rgb: tuple[int, int, int]) -> None:
        """Store one pixel; (0, 0) is the top-left corner."""
        ...

    def save(self) -> None:
        """Write the image, raising EncodeError on failure."""
        ...


class ImageEncoder:
    """Pillow-backed encoder holding an (height, width, 3) uint8 buffer.

    Attributes:
        path: Output file path. The extension selects the format.
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, path: str | Path, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
        self.path = Path(path)
        self.width = width
        self.height = height
        self._pixels = np.zeros((height, width, 3), dtype=np.uint8)

    @property
    def pixels(self) -> npt.NDArray[np.uint8]:
        """The pixel buffer, row 0 at the top."""
        return self._pixels

    def put_pixel(self, x: int, y: int, rgb: tuple[int, int, int]) -> None:
        """Store one pixel.

        Args:
            x: Column in [0, width).
            y: Row in [0, height), 0 = top.
            rgb: Byte triplet.

        Raises:
            IndexError: If (x, y) lies outside the image.
        """
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(
                f"Pixel ({x}, {y}) outside image of size {self.width}x{self.height}"
            )
        self._pixels[y, x] = rgb

    def put_pixels(self, image: npt.NDArray[np.uint8]) -> None:
        """Replace the whole buffer with `image` of shape (height, width, 3)."""
        expected = (self.height, self.width, 3)
        if image.shape != expected:
            raise ValueError(f"Image shape must be {expected}, got {image.shape}")
        self._pixels[...] = image

    def save(self) -> None:
        """Write the buffer to `path`.

        Raises:
            EncodeError: If the format is unknown or the file cannot be written.
        """
        pil_image = PILImage.fromarray(self._pixels)
        try:
            pil_image.save(self.path)
        except (OSError, ValueError) as exc:
            raise EncodeError(f"Failed to save image to {self.path}: {exc}") from exc
        logger.info(f"Saved {self.width}x{self.height} image to {self.path}")

    def __repr__(self) -> str:
        return f"ImageEncoder(path={str(self.path)!r}, width={self.width}, height={self.height})"


def colours_to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a float RGB array to bytes.

    Array counterpart of spectrum.to_byte_triplet: each channel is scaled by
    255.99 and truncated, with the integer cast saturating to [0, 255] and
    NaN mapping to 0.

    Args:
        image: Float array of any shape ending in 3 channels.

    Returns:
        uint8 array of the same shape.
    """
    scaled = np.nan_to_num(np.asarray(image, dtype=np.float64) * BYTE_SCALE, nan=0.0)
    return np.clip(np.trunc(scaled), 0.0, 255.0).astype(np.uint8)
