"""Core rendering module.

This module contains the fundamental building blocks:

Components:
    ray: Vector3 algebra and the Ray data structure
    spectrum: Colour representation, gamma and byte conversion
    sampler: Random sources and unit-disk sampling
    integrator: Colour resolvers, render options and the sampling loop
    parallel: Row-parallel renderer on a concurrent.futures executor
    kernels: Taichi kernel renderer

Every sampling function takes an explicit random source, so renders are
reproducible from a seed and safe to split across workers.
"""

from .ray import (
    ZERO,
    Ray,
    Vector3,
    add,
    cross,
    divide,
    dot,
    length,
    length_squared,
    near_zero,
    negate,
    normalize,
    ray_at,
    scale,
    subtract,
)
from .sampler import NumpyRandomSource, RandomSource, random_in_unit_disk
from .spectrum import (
    BLACK,
    SKY_BLUE,
    WHITE,
    Colour,
    add_colours,
    divide_colour,
    gamma_correct,
    lerp_colour,
    scale_colour,
    to_byte_triplet,
)

# Note: integrator, parallel and kernels are NOT imported here. integrator
# depends on the camera package, and kernels pulls in Taichi.
#
# For rendering, use:
#   from src.lenscast.core.integrator import Renderer, RenderOptions

__all__ = [
    "Vector3",
    "ZERO",
    "Ray",
    "ray_at",
    "add",
    "negate",
    "subtract",
    "scale",
    "divide",
    "dot",
    "length_squared",
    "length",
    "cross",
    "normalize",
    "near_zero",
    "Colour",
    "BLACK",
    "WHITE",
    "SKY_BLUE",
    "add_colours",
    "scale_colour",
    "divide_colour",
    "lerp_colour",
    "gamma_correct",
    "to_byte_triplet",
    "RandomSource",
    "NumpyRandomSource",
    "random_in_unit_disk",
]
