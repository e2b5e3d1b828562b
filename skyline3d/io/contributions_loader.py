"""
Activity data loader for the Skyline 3D generator.

Reads stacked years of daily activity from JSON. Accepted shapes:

- nested lists: [year][week][day], each day {"date", "count"} or
  {"date", "contributionCount"}
- {"years": <nested lists>}
- a GitHub GraphQL contributions response (one year), or a list of them
  (one per year, oldest first):
      {"data": {"user": {"contributionsCollection":
          {"contributionCalendar": {"weeks": [{"contributionDays": [...]}]}}}}}

Weeks may also be given as {"contributionDays": [...]} inside nested lists.
"""

from pathlib import Path
from typing import List, Tuple, Union
import json
import logging

from ..errors import InvalidInput
from ..models.activity import ActivityDay, YearGrid

logger = logging.getLogger(__name__)


def _parse_week(week, year_idx: int, week_idx: int) -> List[ActivityDay]:
    if isinstance(week, dict):
        if 'contributionDays' not in week:
            raise InvalidInput(
                f"year {year_idx}, week {week_idx}: missing 'contributionDays'"
            )
        week = week['contributionDays']

    if not isinstance(week, list):
        raise InvalidInput(f"year {year_idx}, week {week_idx}: expected a list of days")

    days = []
    for day_idx, day in enumerate(week):
        try:
            days.append(ActivityDay.from_dict(day))
        except InvalidInput as e:
            raise InvalidInput(
                f"year {year_idx}, week {week_idx}, day {day_idx}: {e}"
            ) from e
    return days


def _parse_year(year, year_idx: int) -> YearGrid:
    if isinstance(year, dict) and 'data' in year:
        year = _calendar_weeks(year, year_idx)

    if not isinstance(year, list):
        raise InvalidInput(f"year {year_idx}: expected a list of weeks")

    return [_parse_week(week, year_idx, i) for i, week in enumerate(year)]


def _calendar_weeks(response: dict, year_idx: int) -> list:
    """Dig the weeks list out of a GraphQL contributions response."""
    try:
        calendar = (
            response['data']['user']['contributionsCollection']['contributionCalendar']
        )
        return calendar['weeks']
    except (KeyError, TypeError) as e:
        raise InvalidInput(
            f"year {year_idx}: not a contributions calendar response (missing {e})"
        ) from e


def parse_contributions(data) -> List[YearGrid]:
    """
    Convert decoded JSON into year grids.

    Args:
        data: Decoded JSON document

    Returns:
        Year grids, in document order (oldest first)

    Raises:
        InvalidInput: If the document has an unsupported shape
    """
    if isinstance(data, dict):
        if 'years' in data:
            data = data['years']
        elif 'data' in data:
            data = [data]
        else:
            raise InvalidInput("expected 'years' or a contributions response")

    if not isinstance(data, list):
        raise InvalidInput("expected a list of years")

    return [_parse_year(year, i) for i, year in enumerate(data)]


def load_contributions(filepath: Union[str, Path]) -> List[YearGrid]:
    """
    Load activity grids from a JSON file.

    Args:
        filepath: Path to JSON file

    Returns:
        Year grids, oldest first

    Raises:
        FileNotFoundError: If file doesn't exist
        InvalidInput: If the file is not valid JSON or has the wrong shape
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Activity file not found: {filepath}")

    logger.info(f"Loading activity data from {filepath}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidInput(f"{filepath}: invalid JSON: {e}") from e

    years = parse_contributions(data)

    logger.info(
        f"Loaded {len(years)} year(s), "
        f"{sum(len(y) for y in years)} weeks total"
    )
    return years


def infer_year_range(years: List[YearGrid]) -> Tuple[int, int]:
    """
    Derive (start_year, end_year) from the data.

    Each grid is labelled by the calendar year of its last day, since a
    calendar's first week can start in the previous December.

    Raises:
        InvalidInput: If a grid has no days
    """
    labels = []
    for i, year in enumerate(years):
        days = [day for week in year for day in week]
        if not days:
            raise InvalidInput(f"year {i} has no days to infer a year from")
        labels.append(days[-1].parsed_date.year)

    if not labels:
        raise InvalidInput("activity data cannot be empty")

    return labels[0], labels[-1]
