"""Unit tests for the sampler module.

Tests cover:
- NumpyRandomSource range and determinism
- Spawning independent child sources
- Unit-disk rejection sampling bounds and distribution
"""

import pytest


class ScriptedSource:
    """RandomSource replaying a fixed list of values, ignoring the range."""

    def __init__(self, values):
        self._values = list(values)
        self.calls = 0

    def uniform(self, lo, hi):
        self.calls += 1
        return self._values.pop(0)


class TestNumpyRandomSource:
    """Tests for the NumPy-backed random source."""

    def test_uniform_within_range(self):
        """Test draws stay in [lo, hi)."""
        from src.lenscast.core.sampler import NumpyRandomSource

        rng = NumpyRandomSource.from_seed(0)
        for _ in range(1000):
            x = rng.uniform(-1.0, 1.0)
            assert -1.0 <= x < 1.0

    def test_same_seed_same_stream(self):
        """Test seeding makes the stream reproducible."""
        from src.lenscast.core.sampler import NumpyRandomSource

        a = NumpyRandomSource.from_seed(99)
        b = NumpyRandomSource.from_seed(99)
        assert [a.uniform(0.0, 1.0) for _ in range(20)] == [b.uniform(0.0, 1.0) for _ in range(20)]

    def test_different_seeds_differ(self):
        """Test different seeds give different streams."""
        from src.lenscast.core.sampler import NumpyRandomSource

        a = NumpyRandomSource.from_seed(1)
        b = NumpyRandomSource.from_seed(2)
        assert [a.uniform(0.0, 1.0) for _ in range(5)] != [b.uniform(0.0, 1.0) for _ in range(5)]

    def test_uniform_returns_python_float(self):
        """Test draws are plain floats."""
        from src.lenscast.core.sampler import NumpyRandomSource

        assert type(NumpyRandomSource.from_seed(0).uniform(0.0, 1.0)) is float

    def test_spawn_is_reproducible(self):
        """Test child streams depend only on the parent seed."""
        from src.lenscast.core.sampler import NumpyRandomSource

        first = NumpyRandomSource.from_seed(5).spawn(3)
        second = NumpyRandomSource.from_seed(5).spawn(3)
        for a, b in zip(first, second):
            assert a.uniform(0.0, 1.0) == b.uniform(0.0, 1.0)

    def test_spawned_children_are_distinct(self):
        """Test sibling streams differ."""
        from src.lenscast.core.sampler import NumpyRandomSource

        children = NumpyRandomSource.from_seed(5).spawn(4)
        draws = {child.uniform(0.0, 1.0) for child in children}
        assert len(draws) == 4


class TestRandomInUnitDisk:
    """Tests for unit-disk rejection sampling."""

    def test_points_inside_disk(self):
        """Test 10,000 draws all satisfy x^2 + y^2 < 1 with z == 0."""
        from src.lenscast.core.sampler import NumpyRandomSource, random_in_unit_disk

        rng = NumpyRandomSource.from_seed(2024)
        for _ in range(10_000):
            p = random_in_unit_disk(rng)
            assert p.x * p.x + p.y * p.y < 1.0
            assert p.z == 0.0

    def test_mean_is_centered(self):
        """Test the empirical mean is close to the origin."""
        from src.lenscast.core.sampler import NumpyRandomSource, random_in_unit_disk

        rng = NumpyRandomSource.from_seed(11)
        n = 10_000
        sum_x = sum_y = 0.0
        for _ in range(n):
            p = random_in_unit_disk(rng)
            sum_x += p.x
            sum_y += p.y
        # Standard error of the mean is 0.5 / sqrt(n) = 0.005
        assert abs(sum_x / n) < 0.03
        assert abs(sum_y / n) < 0.03

    def test_rejects_points_outside_disk(self):
        """Test candidates on or outside the circle are redrawn."""
        from src.lenscast.core.sampler import random_in_unit_disk

        # (0.9, 0.9) is outside, (1.0, 0.0) is on the boundary, (0.3, -0.4) is inside
        source = ScriptedSource([0.9, 0.9, 1.0, 0.0, 0.3, -0.4])
        p = random_in_unit_disk(source)
        assert (p.x, p.y, p.z) == (0.3, -0.4, 0.0)
        assert source.calls == 6

    def test_deterministic_for_seed(self):
        """Test the same seed yields the same disk samples."""
        from src.lenscast.core.sampler import NumpyRandomSource, random_in_unit_disk

        a = NumpyRandomSource.from_seed(8)
        b = NumpyRandomSource.from_seed(8)
        assert [random_in_unit_disk(a) for _ in range(50)] == [
            random_in_unit_disk(b) for _ in range(50)
        ]


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_expected_iteration_count(seed):
    """Test the acceptance rate is close to pi / 4."""
    from src.lenscast.core.sampler import NumpyRandomSource, random_in_unit_disk

    class CountingSource(NumpyRandomSource):
        draws = 0

        def uniform(self, lo, hi):
            CountingSource.draws += 1
            return super().uniform(lo, hi)

    CountingSource.draws = 0
    rng = CountingSource(NumpyRandomSource.from_seed(seed).generator)
    n = 5000
    for _ in range(n):
        random_in_unit_disk(rng)

    attempts_per_sample = CountingSource.draws / 2 / n
    assert abs(attempts_per_sample - 4.0 / 3.141592653589793) < 0.05
