"""
Vector math and validation for the Skyline 3D generator.

Provides subtraction, cross product, normalization and face normal
computation on Point3D. The arithmetic itself lives on Point3D; these
functions add the validation and zero checks. All zero checks use
ZERO_EPSILON; no exact float comparisons are made.
"""

from typing import Iterable

from ..errors import DegenerateGeometry
from ..models.geometry import Point3D, ZERO_EPSILON


def vector_subtract(a: Point3D, b: Point3D) -> Point3D:
    """Vector from b to a."""
    return a - b


def vector_cross(u: Point3D, v: Point3D) -> Point3D:
    """Cross product of two 3D vectors (right-handed)."""
    return u.cross(v)


def vector_length(v: Point3D) -> float:
    """Length of a 3D vector."""
    return v.length()


def is_zero_vector(v: Point3D, epsilon: float = ZERO_EPSILON) -> bool:
    """Check if a vector has near-zero magnitude."""
    return vector_length(v) < epsilon


def normalize_vector(v: Point3D) -> Point3D:
    """
    Normalize a 3D vector to unit length.

    Args:
        v: Vector

    Returns:
        Unit vector

    Raises:
        DegenerateGeometry: If the vector has near-zero length
    """
    length = vector_length(v)
    if length < ZERO_EPSILON:
        raise DegenerateGeometry(f"cannot normalize zero-length vector {v}")
    return Point3D(v.x / length, v.y / length, v.z / length)


def validate_points(points: Iterable[Point3D]) -> None:
    """
    Reject points with NaN or infinite components.

    Raises:
        DegenerateGeometry: On the first invalid point
    """
    for p in points:
        if not p.is_valid():
            raise DegenerateGeometry(f"point contains invalid components: {p}")


def compute_normal(p1: Point3D, p2: Point3D, p3: Point3D) -> Point3D:
    """
    Unit normal of the plane through three points.

    The normal follows the right-hand rule for the winding p1 -> p2 -> p3.

    Args:
        p1, p2, p3: Triangle vertices

    Returns:
        Unit normal vector

    Raises:
        DegenerateGeometry: If any point is invalid or the points are
            (nearly) collinear or coincident
    """
    validate_points((p1, p2, p3))

    normal = vector_cross(vector_subtract(p2, p1), vector_subtract(p3, p1))

    if is_zero_vector(normal):
        raise DegenerateGeometry(f"degenerate triangle: {p1}, {p2}, {p3}")

    return normalize_vector(normal)
