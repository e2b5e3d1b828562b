"""
Input/Output modules for the Skyline 3D generator.
"""

from .assets import load_font, load_emblem, asset_path
from .contributions_loader import (
    parse_contributions,
    load_contributions,
    infer_year_range,
)
from .stl_exporter import (
    ExportStats,
    export_stl,
    read_stl,
    validate_stl_file,
    output_filename,
    ensure_extension,
)

__all__ = [
    # Assets
    'load_font',
    'load_emblem',
    'asset_path',
    # Activity data
    'parse_contributions',
    'load_contributions',
    'infer_year_range',
    # STL export
    'ExportStats',
    'export_stl',
    'read_stl',
    'validate_stl_file',
    'output_filename',
    'ensure_extension',
]
