#!/usr/bin/env python3
"""Render the sky gradient through a thin-lens camera.

This script renders the background-only scene end to end: it builds the
camera, picks a backend, renders with progress output and saves the image.

Usage:
    python -m examples.render_sky [options]

Options:
    --height HEIGHT          Image height in pixels (default: 720)
    --width WIDTH            Image width in pixels (default: height * aspect ratio)
    --aspect-ratio RATIO     Viewport aspect ratio (default: 16/9)
    --samples SAMPLES        Samples per pixel (default: 1)
    --max-depth DEPTH        Bounce budget handed to the resolver (default: 50)
    --vfov DEGREES           Vertical field of view (default: 90)
    --aperture APERTURE      Lens diameter (default: 0.1)
    --focus-distance DIST    Distance to the focus plane (default: 1.0)
    --look-from X Y Z        Camera position (default: 0 0 0)
    --look-at X Y Z          Point the camera faces (default: 0 0 -1)
    --up X Y Z               Camera up vector (default: 0 1 0)
    --output OUTPUT          Output file path (default: ./dist/image.jpg)
    --seed SEED              Random seed (default: fresh entropy)
    --backend NAME           serial, parallel or taichi (default: serial)
    --workers N              Worker threads for the parallel backend
    --preview                Show the result in a Matplotlib window
    --quiet                  Suppress progress output

Example:
    python -m examples.render_sky --height 180 --samples 8 --seed 1
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from collections.abc import Sequence
from pathlib import Path

import numpy as np

from src.lenscast.camera.thin_lens import (
    DEFAULT_APERTURE,
    DEFAULT_ASPECT_RATIO,
    DEFAULT_FOCUS_DISTANCE,
    DEFAULT_VERTICAL_FOV,
    CameraOptions,
    ThinLensCamera,
)
from src.lenscast.core.integrator import (
    DEFAULT_IMAGE_HEIGHT,
    DEFAULT_MAX_DEPTH,
    DEFAULT_OUTPUT_PATH,
    DEFAULT_SAMPLES_PER_PIXEL,
    Renderer,
    RenderOptions,
)
from src.lenscast.core.parallel import ParallelRenderer
from src.lenscast.core.ray import Vector3
from src.lenscast.core.sampler import NumpyRandomSource
from src.lenscast.preview.export import EncodeError, ImageEncoder

BACKENDS = ("serial", "parallel", "taichi")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the sky gradient through a thin-lens camera.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--height",
        type=int,
        default=DEFAULT_IMAGE_HEIGHT,
        help=f"Image height in pixels (default: {DEFAULT_IMAGE_HEIGHT})",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=None,
        help="Image width in pixels (default: height * aspect ratio)",
    )
    parser.add_argument(
        "--aspect-ratio",
        type=float,
        default=DEFAULT_ASPECT_RATIO,
        help="Viewport aspect ratio, ignored when --width is given (default: 16/9)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=DEFAULT_SAMPLES_PER_PIXEL,
        help=f"Number of samples per pixel (default: {DEFAULT_SAMPLES_PER_PIXEL})",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help=f"Maximum bounce depth (default: {DEFAULT_MAX_DEPTH})",
    )
    parser.add_argument(
        "--vfov",
        type=float,
        default=DEFAULT_VERTICAL_FOV,
        help=f"Vertical field of view in degrees (default: {DEFAULT_VERTICAL_FOV:g})",
    )
    parser.add_argument(
        "--aperture",
        type=float,
        default=DEFAULT_APERTURE,
        help=f"Lens aperture (default: {DEFAULT_APERTURE})",
    )
    parser.add_argument(
        "--focus-distance",
        type=float,
        default=DEFAULT_FOCUS_DISTANCE,
        help=f"Focus distance (default: {DEFAULT_FOCUS_DISTANCE})",
    )
    parser.add_argument(
        "--look-from",
        type=float,
        nargs=3,
        default=[0.0, 0.0, 0.0],
        metavar=("X", "Y", "Z"),
        help="Camera position (default: 0 0 0)",
    )
    parser.add_argument(
        "--look-at",
        type=float,
        nargs=3,
        default=[0.0, 0.0, -1.0],
        metavar=("X", "Y", "Z"),
        help="Point the camera looks at (default: 0 0 -1)",
    )
    parser.add_argument(
        "--up",
        type=float,
        nargs=3,
        default=[0.0, 1.0, 0.0],
        metavar=("X", "Y", "Z"),
        help="Camera up vector (default: 0 1 0)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=f"./{DEFAULT_OUTPUT_PATH.as_posix()}",
        help=f"Output file path (default: ./{DEFAULT_OUTPUT_PATH.as_posix()})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible renders",
    )
    parser.add_argument(
        "--backend",
        choices=BACKENDS,
        default="serial",
        help="Rendering backend (default: serial)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker threads for the parallel backend",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Show the rendered image in a Matplotlib window",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def build_options(args: argparse.Namespace) -> RenderOptions:
    """Map parsed arguments onto camera and render options.

    Raises:
        ValueError: If any option violates a camera or render precondition.
    """
    height = args.height
    if args.width is None:
        aspect_ratio = args.aspect_ratio
        width = int(height * aspect_ratio)
    else:
        width = args.width
        if height <= 0:
            raise ValueError(f"Image height must be positive, got {height}")
        aspect_ratio = width / height

    camera = ThinLensCamera(
        CameraOptions(
            look_from=Vector3(*args.look_from),
            look_at=Vector3(*args.look_at),
            up=Vector3(*args.up),
            aspect_ratio=aspect_ratio,
            vertical_fov_degrees=args.vfov,
            aperture=args.aperture,
            focus_distance=args.focus_distance,
        )
    )
    return RenderOptions(
        camera=camera,
        image_width=width,
        image_height=height,
        samples_per_pixel=args.samples,
        max_depth=args.max_depth,
        output_path=Path(args.output),
    )


def taichi_seed(seed: int | None) -> int:
    """Return the seed for ti.init, drawing fresh entropy when `seed` is None."""
    if seed is not None:
        return seed
    return int(np.random.default_rng().integers(0, 2**31 - 1))


def render_sky(options: RenderOptions, args: argparse.Namespace) -> Path:
    """Render with the selected backend and save to options.output_path.

    Args:
        options: Render configuration.
        args: Parsed arguments (backend, seed, workers, preview, quiet).

    Returns:
        Path to the saved image file.

    Raises:
        EncodeError: If the output directory or image cannot be written.
    """
    quiet = args.quiet
    output_dir = options.output_path.parent
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise EncodeError(f"Cannot create output directory {output_dir}: {exc}") from exc

    if not quiet:
        print(
            f"Rendering {options.image_width}x{options.image_height} at "
            f"{options.samples_per_pixel} spp ({args.backend} backend)..."
        )

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (current / target) * 100 if target > 0 else 0
            rows_per_sec = current / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {current}/{target} rows "
                f"({progress_pct:.1f}%) - {rows_per_sec:.1f} rows/s",
                end="",
                flush=True,
            )

    if args.backend == "taichi":
        # Lazy import so Taichi is only initialized when asked for
        import taichi as ti

        from src.lenscast.core.kernels import TaichiRenderer

        # Falls back to the CPU backend when no GPU is available
        ti.init(arch=ti.gpu, random_seed=taichi_seed(args.seed))
        image = TaichiRenderer(options).render_image()
    else:
        if args.backend == "parallel":
            renderer: Renderer = ParallelRenderer(options, max_workers=args.workers)
        else:
            renderer = Renderer(options)
        rng = NumpyRandomSource.from_seed(args.seed)
        image = renderer.render_image(rng, progress_callback)

    encoder = ImageEncoder(options.output_path, options.image_width, options.image_height)
    encoder.put_pixels(image)
    encoder.save()
    output_file = options.output_path

    if not quiet:
        print()  # Newline after progress
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {time.time() - start_time:.2f}s")

    if args.preview:
        from src.lenscast.preview.display import show_preview

        show_preview(image)

    return output_file


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        options = build_options(args)
        render_sky(options, args)
        return 0
    except (EncodeError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
