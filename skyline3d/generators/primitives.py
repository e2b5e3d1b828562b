"""
Box and quad primitives for the Skyline 3D generator.

Every solid in the model is an axis-aligned box built from six quads,
each split into two triangles. Coordinate convention:
    - X increases along the week axis (to the right)
    - Y increases along the day / year-stacking axis (away from viewer)
    - Z increases upward

Box sizes follow the (width, height, depth) order used across the
generators: width along X, height along Y, depth along Z.
"""

from typing import List

from ..config import BASE_HEIGHT
from ..errors import DegenerateGeometry, InvalidDimensions
from ..models.geometry import Point3D, Triangle
from ..utils.vector_math import compute_normal


# Corner indices: 0-3 bottom ring, 4-7 top ring, both starting at the
# origin corner and going +X, +X+Y, +Y.
# Each face lists its corners counter-clockwise seen from outside.
BOX_FACES = (
    (0, 3, 2, 1),  # bottom (-Z)
    (4, 5, 6, 7),  # top (+Z)
    (0, 1, 5, 4),  # front (-Y)
    (3, 7, 6, 2),  # back (+Y)
    (0, 4, 7, 3),  # left (-X)
    (1, 2, 6, 5),  # right (+X)
)

TRIANGLES_PER_BOX = len(BOX_FACES) * 2


def make_quad(v1: Point3D, v2: Point3D, v3: Point3D, v4: Point3D) -> List[Triangle]:
    """
    Build a planar quad as two triangles.

    The quad is fan-split into (v1, v2, v3) and (v1, v3, v4). Both
    triangles share the normal computed from the first three vertices.

    Args:
        v1, v2, v3, v4: Corners in counter-clockwise order (seen from
            the side the normal should face)

    Returns:
        Two triangles

    Raises:
        DegenerateGeometry: If either triangle has zero area or a
            vertex is not finite
    """
    normal = compute_normal(v1, v2, v3)

    return [
        Triangle(normal, v1, v2, v3),
        Triangle(normal, v1, v3, v4),
    ]


def box_corners(origin: Point3D, width: float, height: float, depth: float) -> List[Point3D]:
    """The eight corners of a box in BOX_FACES index order."""
    x0, y0, z0 = origin.x, origin.y, origin.z
    x1, y1, z1 = x0 + width, y0 + height, z0 + depth

    return [
        Point3D(x0, y0, z0),
        Point3D(x1, y0, z0),
        Point3D(x1, y1, z0),
        Point3D(x0, y1, z0),
        Point3D(x0, y0, z1),
        Point3D(x1, y0, z1),
        Point3D(x1, y1, z1),
        Point3D(x0, y1, z1),
    ]


def make_box(origin: Point3D, width: float, height: float, depth: float) -> List[Triangle]:
    """
    Build a closed axis-aligned box.

    Args:
        origin: Minimum corner (front bottom left)
        width: Size along X
        height: Size along Y
        depth: Size along Z

    Returns:
        12 triangles covering all six faces, normals pointing outward

    Raises:
        InvalidDimensions: If any size is zero or negative
        DegenerateGeometry: If the origin is not finite
    """
    if width <= 0 or height <= 0 or depth <= 0:
        raise InvalidDimensions(
            f"box dimensions must be positive, got "
            f"width={width}, height={height}, depth={depth}"
        )

    corners = box_corners(origin, width, height, depth)

    triangles: List[Triangle] = []
    for a, b, c, d in BOX_FACES:
        try:
            triangles.extend(make_quad(corners[a], corners[b], corners[c], corners[d]))
        except DegenerateGeometry as e:
            raise DegenerateGeometry(
                f"box at {origin} ({width} x {height} x {depth}): {e}"
            ) from e

    return triangles


def create_cuboid_base(width: float, depth: float) -> List[Triangle]:
    """
    Build the base slab.

    The slab spans Z = -BASE_HEIGHT to Z = 0 so that columns standing on
    it start at Z = 0.

    Args:
        width: Model width along X
        depth: Model depth along Y

    Returns:
        12 triangles
    """
    return make_box(Point3D(0.0, 0.0, -BASE_HEIGHT), width, depth, BASE_HEIGHT)


def create_column(x: float, y: float, height: float, size: float) -> List[Triangle]:
    """
    Build one contribution column standing on the base.

    Args:
        x, y: Footprint minimum corner
        height: Column height along Z
        size: Footprint edge length

    Returns:
        12 triangles

    Raises:
        InvalidDimensions: If height or size is not positive
    """
    return make_box(Point3D(x, y, 0.0), size, size, height)
