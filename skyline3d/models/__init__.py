"""
Data models for the Skyline 3D generator.
"""

from .geometry import Point3D, Point3DFloat32, Triangle, TriangleFloat32
from .mesh import Mesh, FrozenMeshError
from .activity import ActivityDay, YearGrid

__all__ = [
    'Point3D', 'Point3DFloat32', 'Triangle', 'TriangleFloat32',
    'Mesh', 'FrozenMeshError',
    'ActivityDay', 'YearGrid',
]
