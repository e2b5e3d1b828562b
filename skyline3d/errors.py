"""
Error taxonomy for the Skyline 3D generator.

All errors raised by the geometry core derive from SkylineError so callers
can catch the whole family at once. Validation errors also derive from
ValueError, matching how the rest of the package reports bad arguments.
"""

from typing import Optional


class SkylineError(Exception):
    """Base class for all generator errors."""
    pass


class InvalidInput(SkylineError, ValueError):
    """Raised when the caller passes structurally invalid input data."""
    pass


class InvalidDimensions(SkylineError, ValueError):
    """Raised when a size, height or year count is out of range."""
    pass


class DegenerateGeometry(SkylineError):
    """Raised when a triangle or normal would have (near) zero magnitude."""
    pass


class AssetUnavailable(SkylineError):
    """Raised when an embedded font or bitmap cannot be loaded."""
    pass


class ProducerFailed(SkylineError):
    """
    Raised when a required geometry producer fails during assembly.

    Attributes:
        producer: Name of the failing producer (e.g. "base", "columns")
        dimensions: Model dimensions the run was using, for diagnosis
    """

    def __init__(self, producer: str, message: str, dimensions: Optional[object] = None):
        self.producer = producer
        self.dimensions = dimensions
        detail = f"failed to generate {producer} geometry: {message}"
        if dimensions is not None:
            detail = f"{detail} (dimensions: {dimensions})"
        super().__init__(detail)
