"""Thin-lens camera model with depth of field.

This module implements a positionable camera that generates primary rays for
rendering. The camera supports:
- Look-at positioning (look_from, look_at, up)
- Vertical field of view
- Arbitrary aspect ratios
- Depth of field through a finite aperture and a focus distance

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from look_at toward look_from (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The viewport is placed on the focus plane, `focus_distance` in front of the
camera. Each ray starts at a random point on the lens disk and passes through
its target point on that plane, so only geometry at the focus distance stays
sharp. An aperture of 0 gives a pinhole camera.

Example:
    >>> from src.lenscast.camera.thin_lens import CameraOptions, ThinLensCamera
    >>> from src.lenscast.core.sampler import NumpyRandomSource
    >>>
    >>> camera = ThinLensCamera(CameraOptions(aperture=0.0))
    >>> ray = camera.cast_ray(0.5, 0.5, NumpyRandomSource.from_seed(0))
    >>> round(ray.direction.z, 6)
    -1.0
"""

import math
from dataclasses import dataclass, field

from src.lenscast.core.ray import (
    ZERO,
    Ray,
    Vector3,
    add,
    cross,
    divide,
    length,
    normalize,
    scale,
    subtract,
)
from src.lenscast.core.sampler import RandomSource, random_in_unit_disk

# =============================================================================
# Reference Defaults
# =============================================================================

DEFAULT_LOOK_FROM = Vector3(0.0, 0.0, 0.0)
DEFAULT_LOOK_AT = Vector3(0.0, 0.0, -1.0)
DEFAULT_UP = Vector3(0.0, 1.0, 0.0)
DEFAULT_ASPECT_RATIO = 16.0 / 9.0
DEFAULT_VERTICAL_FOV = 90.0
DEFAULT_APERTURE = 0.1
DEFAULT_FOCUS_DISTANCE = 1.0

# Smallest sin(angle) between up and the view direction that still defines a basis
PARALLEL_TOLERANCE = 1e-8


@dataclass(frozen=True)
class CameraOptions:
    """Configuration for a thin-lens camera.

    Attributes:
        look_from: Camera position in world space.
        look_at: Point the camera is looking at in world space.
        up: Up direction for camera orientation. Must not be parallel to the
            view direction.
        aspect_ratio: Width divided by height of the viewport.
        vertical_fov_degrees: Vertical field of view in degrees, in (0, 180).
        aperture: Lens diameter. 0 disables depth of field.
        focus_distance: Distance from the camera to the plane in focus.
    """

    look_from: Vector3 = field(default=DEFAULT_LOOK_FROM)
    look_at: Vector3 = field(default=DEFAULT_LOOK_AT)
    up: Vector3 = field(default=DEFAULT_UP)
    aspect_ratio: float = DEFAULT_ASPECT_RATIO
    vertical_fov_degrees: float = DEFAULT_VERTICAL_FOV
    aperture: float = DEFAULT_APERTURE
    focus_distance: float = DEFAULT_FOCUS_DISTANCE

    def __post_init__(self) -> None:
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if not 0.0 < self.vertical_fov_degrees < 180.0:
            raise ValueError(
                f"vertical_fov_degrees must be in (0, 180), got {self.vertical_fov_degrees}"
            )
        if self.aperture < 0.0:
            raise ValueError(f"aperture must be non-negative, got {self.aperture}")
        if self.focus_distance <= 0.0:
            raise ValueError(f"focus_distance must be positive, got {self.focus_distance}")


class ThinLensCamera:
    """A camera whose basis and viewport are derived once from CameraOptions.

    Instances are read-only after construction and safe to share between
    render workers.

    Attributes:
        u: Right direction in world space.
        v: Up direction in world space.
        w: Backward direction (opposite view direction).
        origin: Camera position.
        horizontal: Full viewport width vector on the focus plane.
        vertical: Full viewport height vector on the focus plane.
        lower_left_corner: Lower-left corner of the viewport.
        lens_radius: Half the aperture.
    """

    __slots__ = (
        "options",
        "u",
        "v",
        "w",
        "origin",
        "horizontal",
        "vertical",
        "lower_left_corner",
        "lens_radius",
    )

    def __init__(self, options: CameraOptions) -> None:
        """Compute the camera basis and viewport geometry.

        Args:
            options: Camera pose and lens parameters.

        Raises:
            ValueError: If look_from equals look_at, or if up is parallel to
                the view direction.
        """
        self.options = options

        view = subtract(options.look_from, options.look_at)
        if view == ZERO:
            raise ValueError("look_from and look_at must be distinct points")
        w = normalize(view)

        right = cross(options.up, w)
        # w is unit length, so |up x w| = |up| sin(angle)
        if length(right) <= PARALLEL_TOLERANCE * length(options.up):
            raise ValueError(f"up vector {options.up} is parallel to the view direction")
        u = normalize(right)
        v = cross(w, u)

        theta = math.radians(options.vertical_fov_degrees)
        viewport_height = 2.0 * math.tan(theta / 2.0)
        viewport_width = options.aspect_ratio * viewport_height

        origin = options.look_from
        horizontal = scale(scale(u, viewport_width), options.focus_distance)
        vertical = scale(scale(v, viewport_height), options.focus_distance)
        lower_left_corner = subtract(
            subtract(subtract(origin, divide(horizontal, 2.0)), divide(vertical, 2.0)),
            scale(w, options.focus_distance),
        )

        self.u = u
        self.v = v
        self.w = w
        self.origin = origin
        self.horizontal = horizontal
        self.vertical = vertical
        self.lower_left_corner = lower_left_corner
        self.lens_radius = options.aperture / 2.0

    def cast_ray(self, s: float, t: float, rng: RandomSource) -> Ray:
        """Generate a ray through normalized viewport coordinates (s, t).

        The coordinates are normalized:
        - s = 0: left edge, s = 1: right edge
        - t = 0: bottom edge, t = 1: top edge

        Draws from `rng` for the lens offset even when the lens radius is 0,
        so the random stream does not depend on the aperture.

        Args:
            s: Horizontal coordinate.
            t: Vertical coordinate.
            rng: Source of randomness for the lens sample.

        Returns:
            A Ray leaving a jittered point on the lens toward the focus plane.
        """
        disk = scale(random_in_unit_disk(rng), self.lens_radius)
        offset = add(scale(self.u, disk.x), scale(self.v, disk.y))

        target = add(
            add(self.lower_left_corner, scale(self.horizontal, s)),
            scale(self.vertical, t),
        )
        direction = normalize(subtract(subtract(target, self.origin), offset))

        return Ray(origin=add(self.origin, offset), direction=direction)

    def camera_info(self) -> dict[str, tuple[float, float, float]]:
        """Get the derived camera vectors for debugging.

        Returns:
            Dictionary with origin, u, v, w, horizontal, vertical, lower_left.
        """
        return {
            "origin": self.origin.as_tuple(),
            "u": self.u.as_tuple(),
            "v": self.v.as_tuple(),
            "w": self.w.as_tuple(),
            "horizontal": self.horizontal.as_tuple(),
            "vertical": self.vertical.as_tuple(),
            "lower_left": self.lower_left_corner.as_tuple(),
        }

    def __repr__(self) -> str:
        return f"ThinLensCamera({self.options!r})"
