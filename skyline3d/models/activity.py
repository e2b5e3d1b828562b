"""
Activity data model for the Skyline 3D generator.

A year of activity is a list of weeks, each week a list of up to seven
ActivityDay entries ordered Sunday to Saturday. Several years are stacked
oldest first.
"""

from dataclasses import dataclass
from datetime import date
from typing import List

from ..errors import InvalidInput

DATE_FORMAT_HINT = "YYYY-MM-DD"


@dataclass(frozen=True, slots=True)
class ActivityDay:
    """
    Activity count for a single calendar day.

    Attributes:
        date: ISO calendar date string (YYYY-MM-DD)
        count: Number of contributions that day (>= 0)
    """
    date: str
    count: int

    @property
    def parsed_date(self) -> date:
        """The date as a datetime.date (raises InvalidInput if malformed)."""
        try:
            return date.fromisoformat(self.date)
        except (TypeError, ValueError) as e:
            raise InvalidInput(
                f"invalid date {self.date!r}, expected {DATE_FORMAT_HINT}"
            ) from e

    def validate(self) -> None:
        """
        Check that the date parses and the count is non-negative.

        Raises:
            InvalidInput: If either field is invalid
        """
        self.parsed_date  # raises on malformed dates
        if isinstance(self.count, bool) or not isinstance(self.count, int):
            raise InvalidInput(f"{self.date}: count must be an integer, got {self.count!r}")
        if self.count < 0:
            raise InvalidInput(f"{self.date}: count cannot be negative ({self.count})")

    @classmethod
    def from_dict(cls, data: dict) -> 'ActivityDay':
        """
        Build from a JSON object.

        Accepts both the short form {"date", "count"} and the GitHub
        calendar form {"date", "contributionCount"}.
        """
        if not isinstance(data, dict):
            raise InvalidInput(f"activity day must be an object, got {type(data).__name__}")
        if 'date' not in data:
            raise InvalidInput(f"activity day is missing 'date': {data}")

        if 'contributionCount' in data:
            count = data['contributionCount']
        elif 'count' in data:
            count = data['count']
        else:
            raise InvalidInput(f"activity day is missing a count: {data}")

        day = cls(date=data['date'], count=count)
        day.validate()
        return day


# One year: weeks x days
YearGrid = List[List[ActivityDay]]


def find_max_count(year: YearGrid) -> int:
    """Largest daily count in one year (0 for an all-empty year)."""
    max_count = 0
    for week in year:
        for day in week:
            if day.count > max_count:
                max_count = day.count
    return max_count


def find_max_count_across_years(years: List[YearGrid]) -> int:
    """Largest daily count over all stacked years."""
    max_count = 0
    for year in years:
        max_count = max(max_count, find_max_count(year))
    return max_count


def count_active_days(year: YearGrid) -> int:
    """Number of days with at least one contribution."""
    return sum(1 for week in year for day in week if day.count > 0)
