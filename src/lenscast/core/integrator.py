"""Super-sampling integrator: turns camera rays into an anti-aliased image.

For every pixel the renderer draws `samples_per_pixel` jittered sub-pixel
positions, casts a ray through each with the camera, resolves the ray to a
colour, averages the samples and applies gamma 2 correction. Rows are walked
bottom-up in viewport space and written top-down in image space, so image row 0
shows the top of the viewport.

Colour resolution is pluggable. A ColourResolver receives the ray and the
remaining bounce budget; the built-in SkyGradient only shades the background,
but a scene-intersecting resolver can replace it without touching the
sampling loop.

Example:
    >>> from src.lenscast.camera.thin_lens import CameraOptions, ThinLensCamera
    >>> from src.lenscast.core.integrator import Renderer, RenderOptions
    >>> from src.lenscast.core.sampler import NumpyRandomSource
    >>>
    >>> options = RenderOptions(
    ...     camera=ThinLensCamera(CameraOptions()),
    ...     image_width=64,
    ...     image_height=36,
    ... )
    >>> image = Renderer(options).render_image(NumpyRandomSource.from_seed(1))
    >>> image.shape
    (36, 64, 3)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

import numpy as np
import numpy.typing as npt

from src.lenscast.camera.thin_lens import ThinLensCamera
from src.lenscast.core.ray import Ray
from src.lenscast.core.sampler import RandomSource
from src.lenscast.core.spectrum import (
    BLACK,
    SKY_BLUE,
    WHITE,
    Colour,
    add_colours,
    divide_colour,
    gamma_correct,
    lerp_colour,
    to_byte_triplet,
)
from src.lenscast.preview.export import Encoder, ImageEncoder

logger = logging.getLogger(__name__)

# =============================================================================
# Rendering Constants
# =============================================================================

DEFAULT_IMAGE_HEIGHT = 720
DEFAULT_SAMPLES_PER_PIXEL = 1

# Maximum ray bounces (path length)
DEFAULT_MAX_DEPTH = 50

DEFAULT_OUTPUT_PATH = Path("dist/image.jpg")

# Callback receives (rows_completed, total_rows)
ProgressCallback = Callable[[int, int], None]

EncoderFactory = Callable[[Path, int, int], Encoder]


# =============================================================================
# Colour Resolvers
# =============================================================================


class ColourResolver(Protocol):
    """Maps a ray to the colour it carries back to the camera."""

    def resolve(self, ray: Ray, remaining_depth: int) -> Colour:
        """Return the colour seen along `ray`.

        Args:
            ray: The ray to shade.
            remaining_depth: Bounces still allowed. Implementations return
                black once this drops below 1.
        """
        ...


@dataclass(frozen=True)
class SkyGradient:
    """Background-only resolver blending two colours by ray elevation.

    A ray pointing straight down sees `bottom`, straight up sees `top`.

    Attributes:
        bottom: Colour at direction.y = -1.
        top: Colour at direction.y = +1.
    """

    bottom: Colour = WHITE
    top: Colour = SKY_BLUE

    def resolve(self, ray: Ray, remaining_depth: int) -> Colour:
        # Bounce budget exhausted: the ray carries no light.
        if remaining_depth < 1:
            return BLACK

        t = 0.5 * (ray.direction.y + 1.0)
        return lerp_colour(self.bottom, self.top, t)


# =============================================================================
# Render Configuration
# =============================================================================


@dataclass(frozen=True)
class RenderOptions:
    """Everything a render needs besides the random source.

    Attributes:
        camera: Source of primary rays.
        image_width: Image width in pixels (at least 2).
        image_height: Image height in pixels (at least 2).
        samples_per_pixel: Jittered samples averaged per pixel.
        max_depth: Bounce budget handed to the resolver.
        output_path: Where render() writes the image.
    """

    camera: ThinLensCamera
    image_width: int
    image_height: int
    samples_per_pixel: int = DEFAULT_SAMPLES_PER_PIXEL
    max_depth: int = DEFAULT_MAX_DEPTH
    output_path: Path = field(default=DEFAULT_OUTPUT_PATH)

    def __post_init__(self) -> None:
        # Pixel coordinates are normalised by (size - 1).
        if self.image_width < 2 or self.image_height < 2:
            raise ValueError(
                f"Image dimensions must be at least 2x2, got "
                f"{self.image_width}x{self.image_height}"
            )
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel must be >= 1, got {self.samples_per_pixel}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        object.__setattr__(self, "output_path", Path(self.output_path))


# =============================================================================
# Renderer
# =============================================================================


class Renderer:
    """Single-threaded super-sampling renderer.

    Attributes:
        options: The render configuration.
        resolver: Colour resolver used for every sample.
    """

    def __init__(
        self,
        options: RenderOptions,
        resolver: ColourResolver | None = None,
        encoder_factory: EncoderFactory = ImageEncoder,
    ) -> None:
        self.options = options
        self.resolver = resolver if resolver is not None else SkyGradient()
        self._encoder_factory = encoder_factory

    @property
    def width(self) -> int:
        return self.options.image_width

    @property
    def height(self) -> int:
        return self.options.image_height

    def render_pixel(self, i: int, j: int, rng: RandomSource) -> Colour:
        """Render one pixel with anti-aliasing.

        Args:
            i: Pixel column (0 = left).
            j: Pixel row in viewport space (0 = bottom).
            rng: Source of jitter and lens samples.

        Returns:
            The averaged, gamma-corrected colour.
        """
        opts = self.options
        camera = opts.camera
        resolver = self.resolver
        x_extent = float(opts.image_width - 1)
        y_extent = float(opts.image_height - 1)

        total = BLACK
        for _ in range(opts.samples_per_pixel):
            s = (i + rng.uniform(0.0, 1.0)) / x_extent
            t = (j + rng.uniform(0.0, 1.0)) / y_extent
            ray = camera.cast_ray(s, t, rng)
            total = add_colours(total, resolver.resolve(ray, opts.max_depth))

        return gamma_correct(divide_colour(total, float(opts.samples_per_pixel)))

    def render_row(self, j: int, rng: RandomSource) -> list[Colour]:
        """Render every pixel of viewport row j, left to right."""
        return [self.render_pixel(i, j, rng) for i in range(self.width)]

    def _write_row(self, encoder: Encoder, j: int, row: list[Colour]) -> None:
        # Viewport row j (0 = bottom) lands on image row height - 1 - j.
        y = self.height - 1 - j
        for i, colour in enumerate(row):
            encoder.put_pixel(i, y, to_byte_triplet(colour))

    def render_into(
        self,
        encoder: Encoder,
        rng: RandomSource,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render the full image into `encoder`.

        Args:
            encoder: Destination for the pixels.
            rng: Source of randomness, consumed row by row from the bottom.
            callback: Optional callback called after each row with
                (rows_completed, total_rows).
        """
        for j in range(self.height):
            self._write_row(encoder, j, self.render_row(j, rng))
            logger.debug(f"Lines remaining: {self.height - j - 1}")
            if callback is not None:
                callback(j + 1, self.height)

    def render_image(
        self,
        rng: RandomSource,
        callback: ProgressCallback | None = None,
    ) -> npt.NDArray[np.uint8]:
        """Render to memory.

        Returns:
            uint8 array of shape (height, width, 3), row 0 at the top.
        """
        encoder = ImageEncoder(self.options.output_path, self.width, self.height)
        self.render_into(encoder, rng, callback)
        return encoder.pixels

    def render(
        self,
        rng: RandomSource,
        callback: ProgressCallback | None = None,
    ) -> Path:
        """Render the image and write it to options.output_path.

        Returns:
            The path written.

        Raises:
            EncodeError: If the image cannot be saved. Nothing is retried.
        """
        opts = self.options
        logger.info(
            f"Rendering {self.width}x{self.height} at {opts.samples_per_pixel} spp "
            f"(max depth {opts.max_depth})"
        )
        start = time.perf_counter()

        encoder = self._encoder_factory(opts.output_path, self.width, self.height)
        self.render_into(encoder, rng, callback)
        encoder.save()

        logger.info(f"Render finished in {time.perf_counter() - start:.2f}s")
        return opts.output_path

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(width={self.width}, height={self.height}, "
            f"samples={self.options.samples_per_pixel})"
        )
