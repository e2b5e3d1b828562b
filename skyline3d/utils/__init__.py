"""
Utility functions for the Skyline 3D generator.
"""

from .vector_math import (
    vector_subtract,
    vector_cross,
    vector_length,
    normalize_vector,
    is_zero_vector,
    validate_points,
    compute_normal,
)

__all__ = [
    'vector_subtract',
    'vector_cross',
    'vector_length',
    'normalize_vector',
    'is_zero_vector',
    'validate_points',
    'compute_normal',
]
