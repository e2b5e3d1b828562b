"""
Configuration constants for the Skyline 3D generator.

Contains all tunable parameters for model generation, including
model dimensions, caption and emblem placement, asset names and
export settings. All lengths are in millimeters.
"""

from dataclasses import dataclass
from typing import Optional

from .errors import InvalidInput


# =============================================================================
# MODEL DIMENSIONS
# =============================================================================

# Base slab thickness; its top face sits at Z = 0
BASE_HEIGHT = 10.0

# Column footprint (square) and lattice pitch
CELL_SIZE = 2.5

# Column height range. A day with any activity is at least one cell tall.
MIN_HEIGHT = CELL_SIZE
MAX_HEIGHT = 25.0

# Weeks in a calendar year (width of one year's grid). Also caps the
# number of stacked years accepted per model.
GRID_SIZE = 53

DAYS_PER_WEEK = 7

# =============================================================================
# MULTI-YEAR STACKING
# =============================================================================

# Each year occupies a 7-cell band along Y. Year index 0 (most recent)
# is nearest the viewer.
YEAR_OFFSET = DAYS_PER_WEEK * CELL_SIZE
YEAR_SPACING = 0.0

# =============================================================================
# CAPTION TEXT
# =============================================================================

# Off-screen canvas sizes (pixels) and font sizes (points)
USERNAME_CANVAS_WIDTH = 1000
USERNAME_CANVAS_HEIGHT = 200
USERNAME_FONT_SIZE = 48.0

YEAR_CANVAS_WIDTH = 800
YEAR_CANVAS_HEIGHT = 200
YEAR_FONT_SIZE = 56.0

# Placement as fractions of model width / base height
USERNAME_X_FRACTION = -0.01
USERNAME_Z_FRACTION = 0.7
YEAR_X_FRACTION = 0.77
YEAR_Z_FRACTION = 0.4

# Voxel edge length for one caption pixel
TEXT_VOXEL_SIZE = 1.0
YEAR_VOXEL_SIZE = TEXT_VOXEL_SIZE * 0.75

# The caption canvas is supersampled: 8 pixels per voxel edge
TEXT_SUPERSAMPLE = 8

# Text is pushed into the base's front face (Y = 0)
TEXT_DEPTH_OFFSET = 2.0
FRONT_EMBED_DEPTH = 1.5

DEFAULT_USERNAME = "anonymous"

# =============================================================================
# EMBLEM
# =============================================================================

EMBLEM_X_FRACTION = 0.025
EMBLEM_Z_FRACTION = -0.85

# Physical height of the emblem; the image is scaled to fit
EMBLEM_HEIGHT = 9.0
EMBLEM_VOXEL_SCALE = 0.8

# =============================================================================
# RASTERIZATION
# =============================================================================

# An 8-bit channel must exceed half intensity for the pixel to be solid
PIXEL_THRESHOLD = 127

# =============================================================================
# ASSETS
# =============================================================================

PRIMARY_FONT = "monasans-medium.ttf"
FALLBACK_FONT = "monasans-regular.ttf"
EMBLEM_IMAGE = "emblem.pgm"

# =============================================================================
# EXPORT SETTINGS
# =============================================================================

STL_HEADER_SIZE = 80
STL_RECORD_SIZE = 50
STL_DEFAULT_EXTENSION = ".stl"
STL_DEFAULT_HEADER = "skyline3d binary STL"


# =============================================================================
# RUNTIME CONFIGURATION
# =============================================================================

@dataclass
class SkylineConfig:
    """
    Runtime configuration for one generation run.

    This class holds all parameters that can be adjusted per run via
    CLI arguments or programmatically.
    """

    # Subject and year range
    subject: str = ""
    start_year: int = 0
    end_year: int = 0

    # Input / output
    input_path: str = ""
    output_path: Optional[str] = None
    output_dir: str = "./"
    stl_header: str = STL_DEFAULT_HEADER
    write_report: bool = False

    # Geometry
    include_text: bool = True
    include_emblem: bool = True

    # Normalize column heights by the maximum over all years instead of
    # each year's own maximum
    shared_height_scale: bool = False

    # Debug
    verbose: bool = False

    def __post_init__(self):
        """Validate configuration values."""
        if self.end_year and self.start_year and self.end_year < self.start_year:
            raise InvalidInput(
                f"end year {self.end_year} is before start year {self.start_year}"
            )

        if len(self.stl_header.encode('ascii', errors='replace')) > STL_HEADER_SIZE:
            raise InvalidInput(f"stl_header must fit in {STL_HEADER_SIZE} bytes")


# Default configuration instance
DEFAULT_CONFIG = SkylineConfig()
