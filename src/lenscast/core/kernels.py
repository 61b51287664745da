"""Taichi backend: the whole sampling loop as one data-parallel kernel.

This module runs the same per-pixel algorithm as core.integrator.Renderer
(jittered samples, thin-lens offset, resolver, average, gamma 2) but launches
every pixel at once through `ti.ndrange`, on CPU threads or the GPU. It is
the fast path for previews at full resolution.

Differences from the Python renderer:
    - Randomness comes from Taichi's per-thread generator (`ti.random`),
      seeded through `ti.init(random_seed=...)`, not from a RandomSource.
    - Arithmetic is float32.
    - Resolvers are `ti.func`s taking (origin, direction, depth) and
      returning a vec3 colour; `sky_gradient` mirrors SkyGradient.

Taichi must be initialized before a TaichiRenderer is created.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, random_seed=7)
    >>> from src.lenscast.core.kernels import TaichiRenderer
    >>>
    >>> renderer = TaichiRenderer(options)
    >>> image = renderer.render_image()  # (height, width, 3) uint8
"""

import logging
import time
from pathlib import Path
from typing import Any

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.lenscast.core.integrator import RenderOptions
from src.lenscast.preview.export import ImageEncoder, colours_to_uint8

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3


# =============================================================================
# Taichi Functions
# =============================================================================


@ti.func
def sky_gradient(origin: vec3, direction: vec3, depth: ti.i32) -> vec3:
    """Blend white to sky blue by ray elevation; black once depth < 1."""
    colour = vec3(0.0, 0.0, 0.0)
    if depth >= 1:
        t = 0.5 * (direction.y + 1.0)
        colour = (1.0 - t) * vec3(1.0, 1.0, 1.0) + t * vec3(0.5, 0.75, 1.0)
    return colour


@ti.func
def random_in_unit_disk() -> vec3:
    """Rejection-sample a point (x, y, 0) with x^2 + y^2 < 1."""
    p = vec3(ti.random(ti.f32) * 2.0 - 1.0, ti.random(ti.f32) * 2.0 - 1.0, 0.0)
    while p.x * p.x + p.y * p.y >= 1.0:
        p = vec3(ti.random(ti.f32) * 2.0 - 1.0, ti.random(ti.f32) * 2.0 - 1.0, 0.0)
    return p


# =============================================================================
# Renderer
# =============================================================================


class TaichiRenderer:
    """Renders RenderOptions with a single Taichi kernel launch.

    Attributes:
        options: The render configuration.
    """

    def __init__(self, options: RenderOptions, resolver: Any = sky_gradient) -> None:
        """Allocate the camera and pixel fields and build the kernel.

        Args:
            options: Render configuration. The camera is copied into Taichi
                fields once here.
            resolver: A `ti.func` with signature
                (origin: vec3, direction: vec3, depth: ti.i32) -> vec3.
        """
        self.options = options
        width, height = options.image_width, options.image_height

        self._origin = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._u = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._v = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._vertical = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._lower_left = ti.Vector.field(3, dtype=ti.f32, shape=())

        # Indexed [i, j] with j = 0 at the bottom of the viewport.
        self._pixels = ti.Vector.field(3, dtype=ti.f32, shape=(width, height))

        camera = options.camera
        self._origin[None] = list(camera.origin.as_tuple())
        self._u[None] = list(camera.u.as_tuple())
        self._v[None] = list(camera.v.as_tuple())
        self._horizontal[None] = list(camera.horizontal.as_tuple())
        self._vertical[None] = list(camera.vertical.as_tuple())
        self._lower_left[None] = list(camera.lower_left_corner.as_tuple())

        self._kernel = self._build_kernel(resolver)

    def _build_kernel(self, resolver: Any) -> Any:
        origin = self._origin
        cam_u = self._u
        cam_v = self._v
        horizontal = self._horizontal
        vertical = self._vertical
        lower_left = self._lower_left
        pixels = self._pixels

        @ti.kernel
        def render_kernel(
            width: ti.i32,
            height: ti.i32,
            samples: ti.i32,
            max_depth: ti.i32,
            lens_radius: ti.f32,
        ):
            for i, j in ti.ndrange(width, height):
                total = vec3(0.0, 0.0, 0.0)
                for _ in range(samples):
                    s = (ti.cast(i, ti.f32) + ti.random(ti.f32)) / ti.cast(width - 1, ti.f32)
                    t = (ti.cast(j, ti.f32) + ti.random(ti.f32)) / ti.cast(height - 1, ti.f32)

                    disk = random_in_unit_disk() * lens_radius
                    offset = cam_u[None] * disk.x + cam_v[None] * disk.y
                    direction = tm.normalize(
                        lower_left[None]
                        + s * horizontal[None]
                        + t * vertical[None]
                        - origin[None]
                        - offset
                    )
                    total += resolver(origin[None] + offset, direction, max_depth)

                # Average and gamma 2 correction
                pixels[i, j] = ti.sqrt(total / ti.cast(samples, ti.f32))

        return render_kernel

    def render_image(self) -> npt.NDArray[np.uint8]:
        """Render to memory.

        Returns:
            uint8 array of shape (height, width, 3), row 0 at the top.
        """
        opts = self.options
        self._kernel(
            opts.image_width,
            opts.image_height,
            opts.samples_per_pixel,
            opts.max_depth,
            opts.camera.lens_radius,
        )

        # (width, height, 3) with bottom-left origin -> (height, width, 3) top-down
        image = np.flipud(np.transpose(self._pixels.to_numpy(), (1, 0, 2)))
        return colours_to_uint8(image)

    def render(self) -> Path:
        """Render the image and write it to options.output_path.

        Returns:
            The path written.

        Raises:
            EncodeError: If the image cannot be saved.
        """
        opts = self.options
        logger.info(
            f"Rendering {opts.image_width}x{opts.image_height} at "
            f"{opts.samples_per_pixel} spp with Taichi"
        )
        start = time.perf_counter()

        encoder = ImageEncoder(opts.output_path, opts.image_width, opts.image_height)
        encoder.put_pixels(self.render_image())
        encoder.save()

        logger.info(f"Render finished in {time.perf_counter() - start:.2f}s")
        return opts.output_path

    def __repr__(self) -> str:
        opts = self.options
        return (
            f"TaichiRenderer(width={opts.image_width}, height={opts.image_height}, "
            f"samples={opts.samples_per_pixel})"
        )
