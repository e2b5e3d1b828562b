"""
Binary STL exporter for the Skyline 3D generator.

Layout (all little-endian):
- 80-byte free-form header, zero padded
- uint32 triangle count
- per triangle, a 50-byte record: normal (3 x float32), three vertices
  (9 x float32), uint16 attribute byte count (always 0)

Geometry is kept in double precision up to this module; each triangle is
converted to single precision right before its record is packed.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple, Union
import logging
import os
import struct

from ..config import (
    STL_DEFAULT_EXTENSION,
    STL_HEADER_SIZE,
    STL_RECORD_SIZE,
)
from ..errors import InvalidInput
from ..models.geometry import Point3DFloat32, TriangleFloat32
from ..models.mesh import Mesh

logger = logging.getLogger(__name__)

STL_COUNT = struct.Struct('<I')
STL_RECORD = struct.Struct('<12fH')

HeaderType = Union[str, bytes, None]


@dataclass
class ExportStats:
    """Statistics from STL export."""
    total_triangles: int = 0
    file_size_bytes: int = 0
    filepath: str = ""


def ensure_extension(filepath: str, extension: str = STL_DEFAULT_EXTENSION) -> str:
    """
    Append the default extension if the path does not already end with it.

    The comparison is case-insensitive, so "model.STL" is left alone.
    """
    if not filepath:
        raise InvalidInput("output path cannot be empty")
    if filepath.lower().endswith(extension.lower()):
        return filepath
    return filepath + extension


def output_filename(subject: str, start_year: int, end_year: int) -> str:
    """
    Deterministic file name for a generated model.

    Returns:
        "<subject>-<year>.stl" for one year,
        "<subject>-<YY>-<YY>.stl" for a range
    """
    if start_year == end_year:
        stem = f"{subject}-{start_year}"
    else:
        stem = f"{subject}-{start_year % 100:02d}-{end_year % 100:02d}"
    return ensure_extension(stem)


def build_header(header: HeaderType = None) -> bytes:
    """
    Encode the 80-byte header.

    Text is ASCII-encoded (unencodable characters replaced), truncated
    and zero padded. None gives an all-zero header.
    """
    if header is None:
        return bytes(STL_HEADER_SIZE)
    if isinstance(header, str):
        header = header.encode('ascii', errors='replace')
    return header[:STL_HEADER_SIZE].ljust(STL_HEADER_SIZE, b'\0')


def pack_triangle(triangle: TriangleFloat32) -> bytes:
    """Pack one single precision triangle into its 50-byte record."""
    return STL_RECORD.pack(*triangle.values(), 0)


def export_stl(mesh: Mesh, filepath: str, header: HeaderType = None) -> ExportStats:
    """
    Write a mesh to a binary STL file.

    The mesh is frozen before writing; it must not be modified afterwards.

    Args:
        mesh: Assembled model
        filepath: Output file path (.stl appended if missing)
        header: Optional header text or bytes (zero-filled when None)

    Returns:
        ExportStats with export statistics
    """
    stats = ExportStats()
    filepath = ensure_extension(filepath)
    mesh.freeze()

    os.makedirs(os.path.dirname(filepath) or '.', exist_ok=True)

    with open(filepath, 'wb') as f:
        f.write(build_header(header))
        f.write(STL_COUNT.pack(mesh.triangle_count()))

        for triangle in mesh:
            f.write(pack_triangle(triangle.to_float32()))

    stats.total_triangles = mesh.triangle_count()
    stats.file_size_bytes = os.path.getsize(filepath)
    stats.filepath = filepath

    logger.info(
        f"Exported STL: {stats.total_triangles} triangles, "
        f"{stats.file_size_bytes} bytes -> {filepath}"
    )

    return stats


def expected_file_size(triangle_count: int) -> int:
    """Size in bytes of a binary STL holding triangle_count triangles."""
    return STL_HEADER_SIZE + STL_COUNT.size + STL_RECORD_SIZE * triangle_count


def read_stl(filepath: Union[str, Path]) -> Tuple[bytes, List[TriangleFloat32]]:
    """
    Read a binary STL file.

    Args:
        filepath: Path to STL file

    Returns:
        (header bytes, triangles)

    Raises:
        ValueError: If the file is truncated or the count does not match
    """
    with open(filepath, 'rb') as f:
        header = f.read(STL_HEADER_SIZE)
        count_bytes = f.read(STL_COUNT.size)
        if len(header) < STL_HEADER_SIZE or len(count_bytes) < STL_COUNT.size:
            raise ValueError(f"{filepath}: file too short for an STL header")

        (count,) = STL_COUNT.unpack(count_bytes)
        triangles = []

        for i in range(count):
            record = f.read(STL_RECORD_SIZE)
            if len(record) < STL_RECORD_SIZE:
                raise ValueError(
                    f"{filepath}: truncated at triangle {i} of {count}"
                )
            values = STL_RECORD.unpack(record)
            points = [Point3DFloat32(*values[j:j + 3]) for j in range(0, 12, 3)]
            triangles.append(TriangleFloat32(*points))

        if f.read(1):
            raise ValueError(f"{filepath}: trailing data after {count} triangles")

    return header, triangles


def validate_stl_file(filepath: str) -> List[str]:
    """
    Validate a binary STL file for common issues.

    Args:
        filepath: Path to STL file

    Returns:
        List of error messages (empty if valid)
    """
    errors = []

    if not os.path.exists(filepath):
        errors.append(f"File does not exist: {filepath}")
        return errors

    size = os.path.getsize(filepath)
    if size < expected_file_size(0):
        errors.append(f"File is {size} bytes, smaller than an STL header")
        return errors

    with open(filepath, 'rb') as f:
        f.seek(STL_HEADER_SIZE)
        (count,) = STL_COUNT.unpack(f.read(STL_COUNT.size))

    if size != expected_file_size(count):
        errors.append(
            f"File size {size} does not match {count} triangles "
            f"(expected {expected_file_size(count)})"
        )

    if count == 0:
        errors.append("File contains no triangles")

    return errors
