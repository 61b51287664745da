"""Random number sources and Monte Carlo sampling utilities.

Sampling code never touches a global generator. Every function that needs
entropy takes a RandomSource handle, so renders can be seeded for tests and
split into independent streams for parallel workers.

Example:
    >>> rng = NumpyRandomSource.from_seed(7)
    >>> p = random_in_unit_disk(rng)
    >>> p.x * p.x + p.y * p.y < 1.0
    True
"""

from __future__ import annotations

from typing import Protocol

import numpy as np

from src.lenscast.core.ray import Vector3


class RandomSource(Protocol):
    """Anything that can draw uniform floats."""

    def uniform(self, lo: float, hi: float) -> float:
        """Return a float drawn uniformly from [lo, hi)."""
        ...


class NumpyRandomSource:
    """RandomSource backed by a numpy.random.Generator.

    Attributes:
        generator: The wrapped NumPy generator.
    """

    def __init__(self, generator: np.random.Generator | None = None) -> None:
        self.generator = generator if generator is not None else np.random.default_rng()

    @classmethod
    def from_seed(cls, seed: int | None) -> NumpyRandomSource:
        """Create a source seeded with `seed` (None draws fresh OS entropy)."""
        return cls(np.random.default_rng(seed))

    def uniform(self, lo: float, hi: float) -> float:
        return lo + (hi - lo) * float(self.generator.random())

    def spawn(self, count: int) -> list[NumpyRandomSource]:
        """Split off `count` statistically independent child sources.

        The children depend only on this source's seed and their position in
        the returned list, which keeps parallel renders reproducible.
        """
        return [NumpyRandomSource(child) for child in self.generator.spawn(count)]

    def __repr__(self) -> str:
        return f"NumpyRandomSource({self.generator!r})"


def random_in_unit_disk(rng: RandomSource) -> Vector3:
    """Generate a random point inside the unit disk in the xy-plane.

    Uses rejection sampling from the square [-1, 1) x [-1, 1). The expected
    number of draws is 4/pi (about 1.27). There is no iteration cap, so the
    loop only terminates if `rng` is really uniform over the square.

    Args:
        rng: Source of uniform random numbers.

    Returns:
        A random point (x, y, 0) with x^2 + y^2 < 1.
    """
    while True:
        x = rng.uniform(-1.0, 1.0)
        y = rng.uniform(-1.0, 1.0)
        if x * x + y * y < 1.0:
            return Vector3(x, y, 0.0)
