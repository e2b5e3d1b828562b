"""
Shared test fixtures for the skyline3d test suite.

Provides builders for synthetic activity grids and asset loaders that
fail on demand, so producer degradation can be tested without touching
the bundled assets.
"""

from datetime import date, timedelta
from typing import List, Sequence

import pytest

from skyline3d.errors import AssetUnavailable
from skyline3d.models.activity import ActivityDay, YearGrid


def build_year(weeks: Sequence[Sequence[int]], start: date = date(2024, 1, 7)) -> YearGrid:
    """Build a year grid from per-week lists of daily counts."""
    year: YearGrid = []
    day = start
    for counts in weeks:
        week: List[ActivityDay] = []
        for count in counts:
            week.append(ActivityDay(date=day.isoformat(), count=count))
            day += timedelta(days=1)
        year.append(week)
    return year


@pytest.fixture
def year_factory():
    """Callable building a YearGrid from nested count lists."""
    return build_year


@pytest.fixture
def single_day_year():
    """One week with a single active day (count 5) on Sunday."""
    return build_year([[5, 0, 0, 0, 0, 0, 0]])


@pytest.fixture
def small_year():
    """Two weeks with a mix of active and empty days; max count 10."""
    return build_year([
        [0, 1, 2, 0, 10, 0, 3],
        [4, 0, 0, 5, 0, 0, 0],
    ])


@pytest.fixture
def failing_font_loader():
    """Font loader that always reports a missing font."""
    def loader(size):
        raise AssetUnavailable(f"no font at {size}pt")
    return loader


@pytest.fixture
def missing_emblem(tmp_path):
    """Path to an emblem file that does not exist."""
    return str(tmp_path / "missing-emblem.png")
