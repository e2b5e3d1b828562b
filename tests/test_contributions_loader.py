"""Tests for loading activity data from JSON."""

import json

import pytest

from skyline3d.errors import InvalidInput
from skyline3d.io.contributions_loader import (
    infer_year_range,
    load_contributions,
    parse_contributions,
)
from skyline3d.models.activity import ActivityDay


def _graphql_response(weeks):
    return {
        "data": {"user": {"contributionsCollection": {"contributionCalendar": {
            "totalContributions": 0,
            "weeks": [{"contributionDays": days} for days in weeks],
        }}}}
    }


class TestParseContributions:
    def test_nested_lists(self):
        data = [[[{"date": "2024-01-07", "count": 3}, {"date": "2024-01-08", "count": 0}]]]
        years = parse_contributions(data)
        assert years == [[[ActivityDay("2024-01-07", 3), ActivityDay("2024-01-08", 0)]]]

    def test_years_key(self):
        data = {"years": [[[{"date": "2024-01-07", "contributionCount": 1}]]]}
        assert parse_contributions(data)[0][0][0].count == 1

    def test_graphql_single_response(self):
        data = _graphql_response([[{"date": "2024-12-29", "contributionCount": 4}]])
        years = parse_contributions(data)
        assert len(years) == 1
        assert years[0][0][0] == ActivityDay("2024-12-29", 4)

    def test_graphql_response_list(self):
        data = [
            _graphql_response([[{"date": "2023-06-01", "contributionCount": 1}]]),
            _graphql_response([[{"date": "2024-06-01", "contributionCount": 2}]]),
        ]
        years = parse_contributions(data)
        assert [y[0][0].count for y in years] == [1, 2]

    def test_week_objects_in_nested_lists(self):
        data = [[{"contributionDays": [{"date": "2024-01-07", "count": 2}]}]]
        assert parse_contributions(data)[0][0][0].count == 2

    @pytest.mark.parametrize("data", [
        "not a list",
        {"unexpected": 1},
        [["not a week"]],
        [[[{"count": 1}]]],
        [[[{"date": "2024-01-07"}]]],
        [[[{"date": "2024-01-07", "count": -2}]]],
        [[[{"date": "yesterday", "count": 1}]]],
        [[{"days": []}]],
        {"data": {"user": None}},
    ])
    def test_invalid_shapes(self, data):
        with pytest.raises(InvalidInput):
            parse_contributions(data)


class TestLoadContributions:
    def test_load_file(self, tmp_path):
        path = tmp_path / "activity.json"
        path.write_text(json.dumps([[[{"date": "2024-01-07", "count": 3}]]]), encoding="utf-8")
        years = load_contributions(path)
        assert years[0][0][0].count == 3

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_contributions(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(InvalidInput):
            load_contributions(path)


class TestInferYearRange:
    def test_uses_last_day_of_each_year(self, year_factory):
        from datetime import date
        first = year_factory([[1] * 7], start=date(2022, 12, 25))
        second = year_factory([[1] * 7], start=date(2023, 12, 31))
        assert infer_year_range([first, second]) == (2022, 2024)

    def test_empty(self):
        with pytest.raises(InvalidInput):
            infer_year_range([])

    def test_year_without_days(self):
        with pytest.raises(InvalidInput):
            infer_year_range([[[]]])
