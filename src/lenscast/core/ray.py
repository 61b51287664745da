"""Ray data structure and vector utilities.

This module provides the immutable Vector3 value type, the vector algebra used
by the camera and resolvers, and the Ray dataclass. Arithmetic is expressed as
named pure functions rather than operator overloads; every function returns a
new value and the evaluation order is fixed so results are reproducible.

Example:
    >>> origin = Vector3(0.0, 0.0, 0.0)
    >>> ray = Ray(origin=origin, direction=Vector3(0.0, 0.0, -2.0))
    >>> ray.direction
    Vector3(x=0.0, y=0.0, z=-1.0)
    >>> ray_at(ray, 5.0)  # Point 5 units along the ray
    Vector3(x=0.0, y=0.0, z=-5.0)
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Vector3:
    """A 3-component vector used both as a point and as a direction.

    Attributes:
        x: First component.
        y: Second component.
        z: Third component.
    """

    x: float
    y: float
    z: float

    def as_tuple(self) -> tuple[float, float, float]:
        """Return the components as a plain tuple."""
        return (self.x, self.y, self.z)


ZERO = Vector3(0.0, 0.0, 0.0)


# =============================================================================
# Vector Utility Functions
# =============================================================================


def add(a: Vector3, b: Vector3) -> Vector3:
    """Component-wise sum a + b."""
    return Vector3(a.x + b.x, a.y + b.y, a.z + b.z)


def negate(v: Vector3) -> Vector3:
    """Return -v."""
    return Vector3(-v.x, -v.y, -v.z)


def subtract(a: Vector3, b: Vector3) -> Vector3:
    """Compute a - b as a + (-b)."""
    return add(a, negate(b))


def scale(v: Vector3, k: float) -> Vector3:
    """Multiply every component of v by the scalar k."""
    return Vector3(v.x * k, v.y * k, v.z * k)


def divide(v: Vector3, k: float) -> Vector3:
    """Divide v by the scalar k.

    Computed as a scale by the reciprocal 1/k, so the result can differ from a
    per-component division in the last bit.
    """
    return scale(v, 1.0 / k)


def dot(a: Vector3, b: Vector3) -> float:
    """Compute the dot product of two vectors.

    Args:
        a: First vector.
        b: Second vector.

    Returns:
        The dot product a . b.
    """
    return a.x * b.x + a.y * b.y + a.z * b.z


def length_squared(v: Vector3) -> float:
    """Compute the squared length of a vector (its dot product with itself).

    This is cheaper than length() when only comparing magnitudes,
    as it avoids the square root computation.
    """
    return dot(v, v)


def length(v: Vector3) -> float:
    """Compute the length (magnitude) of a vector."""
    return math.sqrt(length_squared(v))


def cross(a: Vector3, b: Vector3) -> Vector3:
    """Compute the cross product of two vectors.

    Args:
        a: First vector.
        b: Second vector.

    Returns:
        The cross product a x b, perpendicular to both inputs.
    """
    return Vector3(
        a.y * b.z - a.z * b.y,
        a.z * b.x - a.x * b.z,
        a.x * b.y - a.y * b.x,
    )


def normalize(v: Vector3) -> Vector3:
    """Normalize a vector to unit length.

    Args:
        v: The input vector. Must not be zero-length.

    Returns:
        A unit vector in the same direction as v.

    Raises:
        ValueError: If v has zero length.
    """
    magnitude = length(v)
    if magnitude == 0.0:
        raise ValueError(f"Cannot normalize a zero-length vector: {v}")
    return divide(v, magnitude)


def near_zero(v: Vector3, eps: float = 1e-8) -> bool:
    """Check if a vector is near zero in all components.

    Useful for detecting degenerate cases such as parallel basis vectors.
    """
    return abs(v.x) < eps and abs(v.y) < eps and abs(v.z) < eps


# =============================================================================
# Ray
# =============================================================================


@dataclass(frozen=True, slots=True)
class Ray:
    """A ray with an origin point and a unit direction vector.

    Attributes:
        origin: The starting point of the ray.
        direction: The direction of the ray. Normalized at construction, so
            callers may pass any non-zero vector.
    """

    origin: Vector3
    direction: Vector3

    def __post_init__(self) -> None:
        object.__setattr__(self, "direction", normalize(self.direction))


def ray_at(ray: Ray, t: float) -> Vector3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + ray.direction * t.
    """
    return add(ray.origin, scale(ray.direction, t))
