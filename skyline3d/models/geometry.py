"""
Core geometry types for the Skyline 3D generator.

Provides Point3D and Triangle, used in double precision throughout the
pipeline, plus their single-precision mirrors that exist only at the
STL serialization boundary.
"""

from dataclasses import dataclass
import math
import struct

from ..errors import DegenerateGeometry

# Tolerance for the unit-length check on triangle normals
NORMAL_TOLERANCE = 1e-6

# Cross products shorter than this are treated as zero
ZERO_EPSILON = 1e-10

_FLOAT32 = struct.Struct('<f')


def to_float32(value: float) -> float:
    """Round a double to the nearest IEEE-754 single precision value."""
    return _FLOAT32.unpack(_FLOAT32.pack(value))[0]


@dataclass(frozen=True, slots=True)
class Point3D:
    """3D point (or vector) in model millimeters, double precision."""
    x: float
    y: float
    z: float

    def __sub__(self, other: 'Point3D') -> 'Point3D':
        """Vector subtraction."""
        return Point3D(self.x - other.x, self.y - other.y, self.z - other.z)

    def __add__(self, other: 'Point3D') -> 'Point3D':
        """Vector addition."""
        return Point3D(self.x + other.x, self.y + other.y, self.z + other.z)

    def dot(self, other: 'Point3D') -> float:
        """Dot product."""
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: 'Point3D') -> 'Point3D':
        """Cross product (right-handed)."""
        return Point3D(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def length(self) -> float:
        """Euclidean length when used as a vector."""
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def is_valid(self) -> bool:
        """Check that no component is NaN or infinite."""
        return (
            math.isfinite(self.x) and
            math.isfinite(self.y) and
            math.isfinite(self.z)
        )

    def to_float32(self) -> 'Point3DFloat32':
        """Convert to single precision for STL output."""
        return Point3DFloat32(
            to_float32(self.x),
            to_float32(self.y),
            to_float32(self.z),
        )


@dataclass(frozen=True, slots=True)
class Point3DFloat32:
    """Single precision point. Only produced when writing STL files."""
    x: float
    y: float
    z: float

    def as_tuple(self):
        return (self.x, self.y, self.z)


@dataclass(frozen=True, slots=True)
class Triangle:
    """
    Triangle with a unit outward normal and three vertices.

    Vertices are wound counter-clockwise when viewed from the side the
    normal points to. Construction fails with DegenerateGeometry if any
    coordinate is invalid, the triangle has zero area, or the normal is
    not unit length.
    """
    normal: Point3D
    v1: Point3D
    v2: Point3D
    v3: Point3D

    def __post_init__(self):
        for p in (self.normal, self.v1, self.v2, self.v3):
            if not p.is_valid():
                raise DegenerateGeometry(f"triangle contains invalid coordinates: {p}")

        if abs(self.normal.length() - 1.0) > NORMAL_TOLERANCE:
            raise DegenerateGeometry(
                f"triangle normal is not normalized (length {self.normal.length():.9f})"
            )

        area_vector = (self.v2 - self.v1).cross(self.v3 - self.v1)
        if area_vector.length() < ZERO_EPSILON:
            raise DegenerateGeometry(
                f"zero-area triangle: {self.v1}, {self.v2}, {self.v3}"
            )

    @property
    def vertices(self):
        """The three vertices in winding order."""
        return (self.v1, self.v2, self.v3)

    def area(self) -> float:
        """Surface area of the triangle."""
        return (self.v2 - self.v1).cross(self.v3 - self.v1).length() / 2.0

    def to_float32(self) -> 'TriangleFloat32':
        """Convert to single precision for STL output."""
        return TriangleFloat32(
            normal=self.normal.to_float32(),
            v1=self.v1.to_float32(),
            v2=self.v2.to_float32(),
            v3=self.v3.to_float32(),
        )


@dataclass(frozen=True, slots=True)
class TriangleFloat32:
    """Single precision triangle, laid out in STL record order."""
    normal: Point3DFloat32
    v1: Point3DFloat32
    v2: Point3DFloat32
    v3: Point3DFloat32

    def values(self):
        """The 12 floats of an STL record: normal, then the three vertices."""
        return (
            self.normal.as_tuple() +
            self.v1.as_tuple() +
            self.v2.as_tuple() +
            self.v3.as_tuple()
        )
