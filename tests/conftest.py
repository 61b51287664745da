"""Pytest configuration for lenscast tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture
def reference_camera():
    """Camera at the origin looking down -z with a pinhole lens."""
    from src.lenscast.camera.thin_lens import CameraOptions, ThinLensCamera
    from src.lenscast.core.ray import Vector3

    return ThinLensCamera(
        CameraOptions(
            look_from=Vector3(0.0, 0.0, 0.0),
            look_at=Vector3(0.0, 0.0, -1.0),
            up=Vector3(0.0, 1.0, 0.0),
            aspect_ratio=16.0 / 9.0,
            vertical_fov_degrees=90.0,
            aperture=0.0,
            focus_distance=1.0,
        )
    )


@pytest.fixture
def rng():
    """Deterministic random source."""
    from src.lenscast.core.sampler import NumpyRandomSource

    return NumpyRandomSource.from_seed(1234)
