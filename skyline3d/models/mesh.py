"""
Mesh data model for the Skyline 3D generator.

A Mesh is an ordered list of independent triangles. No vertex sharing or
adjacency is tracked; watertightness comes from every box emitting all
six of its faces.

Meshes are append-only while a producer builds them and are frozen before
being handed to the STL exporter.
"""

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Tuple

from .geometry import Point3D, Triangle


class FrozenMeshError(RuntimeError):
    """Raised when appending to a mesh that has been frozen."""
    pass


@dataclass
class Mesh:
    """
    Generated triangle soup.

    Attributes:
        triangles: Triangles in emission order
        name: Optional label (producer name) used in logs and reports
    """
    triangles: List[Triangle] = field(default_factory=list)
    name: Optional[str] = None
    _frozen: bool = field(default=False, init=False, repr=False, compare=False)

    def triangle_count(self) -> int:
        """Get number of triangles."""
        return len(self.triangles)

    def __len__(self) -> int:
        return len(self.triangles)

    def __iter__(self) -> Iterator[Triangle]:
        return iter(self.triangles)

    @property
    def frozen(self) -> bool:
        """True once the mesh has been handed off for serialization."""
        return self._frozen

    def _check_mutable(self) -> None:
        if self._frozen:
            raise FrozenMeshError(f"mesh '{self.name}' is frozen")

    def add_triangle(self, triangle: Triangle) -> None:
        """Append a single triangle."""
        self._check_mutable()
        self.triangles.append(triangle)

    def extend(self, triangles: Iterable[Triangle]) -> None:
        """Append several triangles, keeping their order."""
        self._check_mutable()
        self.triangles.extend(triangles)

    def merge(self, other: 'Mesh') -> None:
        """
        Append another mesh's triangles to this one.

        Args:
            other: Mesh to merge into this one
        """
        if other.is_empty():
            return
        self.extend(other.triangles)

    def freeze(self) -> 'Mesh':
        """Make the mesh immutable and return it."""
        self._frozen = True
        return self

    def is_empty(self) -> bool:
        """Check if mesh has no geometry."""
        return len(self.triangles) == 0

    def vertices(self) -> List[Point3D]:
        """All vertices in emission order (three per triangle, not deduplicated)."""
        result = []
        for tri in self.triangles:
            result.extend(tri.vertices)
        return result

    def compute_bounds(self) -> Optional[Tuple[Tuple[float, float, float],
                                                 Tuple[float, float, float]]]:
        """
        Compute bounding box of the mesh.

        Returns:
            ((min_x, min_y, min_z), (max_x, max_y, max_z)) or None if empty
        """
        if not self.triangles:
            return None

        points = self.vertices()
        xs = [p.x for p in points]
        ys = [p.y for p in points]
        zs = [p.z for p in points]

        return (
            (min(xs), min(ys), min(zs)),
            (max(xs), max(ys), max(zs))
        )

    def __repr__(self) -> str:
        return f"Mesh(name={self.name!r}, triangles={len(self.triangles)})"


def create_empty_mesh(name: Optional[str] = None) -> Mesh:
    """
    Create an empty mesh with an optional label.

    Args:
        name: Optional producer name

    Returns:
        Empty Mesh instance
    """
    return Mesh(name=name)


def merge_meshes(meshes: List[Mesh], name: Optional[str] = None) -> Mesh:
    """
    Concatenate meshes in the given order.

    Args:
        meshes: Meshes to merge
        name: Label for the result

    Returns:
        Single merged Mesh
    """
    result = Mesh(name=name)

    for mesh in meshes:
        result.merge(mesh)

    return result
