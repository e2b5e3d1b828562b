"""
Contribution column generator for the Skyline 3D generator.

Turns a year of daily activity counts into a lattice of boxes standing
on the base slab: one column per active day, placed by week (X) and
day of week (Y), with each stacked year shifted further back along Y.
"""

from typing import List, Optional
import logging
import math

from ..config import (
    CELL_SIZE,
    MIN_HEIGHT,
    MAX_HEIGHT,
    YEAR_OFFSET,
    YEAR_SPACING,
)
from ..errors import InvalidDimensions
from ..models.activity import YearGrid, find_max_count
from ..models.mesh import Mesh
from .primitives import create_column

logger = logging.getLogger(__name__)


def normalize_contribution(count: int, max_count: int) -> float:
    """
    Convert a daily count to a column height.

    Uses square-root scaling so moderate days stay clearly visible next
    to a single outlier maximum:

        height = MIN_HEIGHT + sqrt(count) / sqrt(max_count) * (MAX_HEIGHT - MIN_HEIGHT)

    Args:
        count: Daily count (>= 0)
        max_count: Largest count used for scaling

    Returns:
        0.0 for no activity, MIN_HEIGHT when max_count <= 0, otherwise a
        height in [MIN_HEIGHT, MAX_HEIGHT] for count <= max_count
    """
    if count <= 0:
        return 0.0
    if max_count <= 0:
        return MIN_HEIGHT

    height_range = MAX_HEIGHT - MIN_HEIGHT
    normalized = math.sqrt(count) / math.sqrt(max_count)

    return MIN_HEIGHT + normalized * height_range


def year_y_offset(year_index: int) -> float:
    """Y shift of a stacked year. Index 0 is the front (most recent) year."""
    return year_index * (YEAR_OFFSET + YEAR_SPACING)


def cell_origin(week_index: int, day_index: int, year_index: int = 0):
    """
    Footprint minimum corner for a day cell.

    The lattice starts one cell in from the base edge on both axes.

    Returns:
        (x, y) tuple
    """
    x = CELL_SIZE + week_index * CELL_SIZE
    y = CELL_SIZE + year_y_offset(year_index) + day_index * CELL_SIZE
    return x, y


def create_contribution_geometry(
    year: YearGrid,
    year_index: int = 0,
    max_count: Optional[int] = None,
    log: Optional[logging.Logger] = None,
) -> Mesh:
    """
    Generate columns for a single year.

    Days with zero activity produce no column. A column that cannot be
    built (non-positive height) is skipped with a warning; the rest of
    the year is still generated.

    Args:
        year: Weeks of ActivityDay entries
        year_index: Stacking position, 0 = front
        max_count: Count that maps to MAX_HEIGHT (defaults to the year's
            own maximum)
        log: Logger for diagnostics (defaults to the module logger)

    Returns:
        Mesh with 12 triangles per active day
    """
    log = log or logger
    if max_count is None:
        max_count = find_max_count(year)

    mesh = Mesh(name="columns")

    for week_idx, week in enumerate(year):
        for day_idx, day in enumerate(week):
            if day.count <= 0:
                continue

            height = normalize_contribution(day.count, max_count)
            x, y = cell_origin(week_idx, day_idx, year_index)

            try:
                mesh.extend(create_column(x, y, height, CELL_SIZE))
            except InvalidDimensions as e:
                log.warning(
                    f"Skipping column for {day.date} (week {week_idx}, day {day_idx}): {e}"
                )

    log.debug(
        f"Year index {year_index}: {mesh.triangle_count() // 12} columns, "
        f"max count {max_count}"
    )

    return mesh


def create_columns_for_years(
    years: List[YearGrid],
    shared_max_count: Optional[int] = None,
    log: Optional[logging.Logger] = None,
) -> Mesh:
    """
    Generate columns for stacked years.

    Years are given oldest first. The most recent year is placed at the
    front (year index 0), each older year one band further back.

    Args:
        years: Year grids, oldest first
        shared_max_count: If set, every year is scaled by this count
            instead of its own maximum
        log: Logger for diagnostics

    Returns:
        Mesh with all years' columns, front year first
    """
    log = log or logger
    mesh = Mesh(name="columns")

    for i in range(len(years) - 1, -1, -1):
        year_index = len(years) - 1 - i
        mesh.merge(create_contribution_geometry(
            years[i],
            year_index=year_index,
            max_count=shared_max_count,
            log=log,
        ))

    return mesh
