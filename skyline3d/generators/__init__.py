"""
Mesh generators for the Skyline 3D generator.

Contains the box primitives, the contribution column builder, the voxel
rasterizer for caption text and emblem, and the model assembler that
runs them all.
"""

from .primitives import make_box, make_quad, create_cuboid_base, create_column
from .columns import (
    normalize_contribution,
    create_contribution_geometry,
    create_columns_for_years,
)
from .voxels import (
    RenderConfig,
    TextRenderConfig,
    create_3d_text,
    format_year_label,
    generate_image_geometry,
)
from .model_generator import (
    ModelDimensions,
    calculate_dimensions,
    ProducerStatus,
    ProducerResult,
    AssemblyResult,
    GenerationResult,
    validate_input,
    generate_model_geometry,
    generate_stl,
    generate_stl_range,
)

__all__ = [
    'make_box',
    'make_quad',
    'create_cuboid_base',
    'create_column',
    'normalize_contribution',
    'create_contribution_geometry',
    'create_columns_for_years',
    'RenderConfig',
    'TextRenderConfig',
    'create_3d_text',
    'format_year_label',
    'generate_image_geometry',
    'ModelDimensions',
    'calculate_dimensions',
    'ProducerStatus',
    'ProducerResult',
    'AssemblyResult',
    'GenerationResult',
    'validate_input',
    'generate_model_geometry',
    'generate_stl',
    'generate_stl_range',
]
