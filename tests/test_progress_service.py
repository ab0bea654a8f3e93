"""Tests for progress metric helpers."""

from datetime import date

import pytest

from app.services.progress_service import (
    default_date_range,
    month_date_range,
    parse_month,
    percentage,
    previous_month,
    progress_band,
    weeks_in_range,
)


class TestMonths:

    def test_parse_month_bounds(self):
        assert parse_month("2024-02") == (date(2024, 2, 1), date(2024, 2, 29))
        assert parse_month("2023-12") == (date(2023, 12, 1), date(2023, 12, 31))

    @pytest.mark.parametrize("value", ["2024-13", "2024-2", "24-02", "", None, "2024-02-01"])
    def test_parse_month_rejects_bad_input(self, value):
        with pytest.raises(ValueError):
            parse_month(value)

    def test_previous_month_crosses_year(self):
        assert previous_month("2024-01") == "2023-12"


class TestRanges:

    def test_month_range_covers_whole_past_month(self):
        assert month_date_range("2024-02", today=date(2024, 6, 1)) == (date(2024, 2, 1), date(2024, 2, 29))

    def test_current_month_stops_at_today(self):
        assert month_date_range("2024-06", today=date(2024, 6, 12)) == (date(2024, 6, 1), date(2024, 6, 12))

    def test_default_range_starts_on_monday(self):
        start, end = default_date_range(date(2024, 3, 14))  # Thursday
        assert end == date(2024, 3, 14)
        assert start == date(2024, 2, 12)
        assert start.weekday() == 0

    def test_weeks_never_below_one(self):
        assert weeks_in_range(date(2024, 3, 1), date(2024, 3, 1)) == 1
        assert weeks_in_range(date(2024, 3, 1), date(2024, 3, 8)) == 1
        assert weeks_in_range(date(2024, 3, 1), date(2024, 3, 9)) == 2


class TestRatesAndBands:

    def test_percentage(self):
        assert percentage(1, 3) == 33.33
        assert percentage(0, 0) == 0

    def test_bands(self):
        assert progress_band(10, 10) == "complete"
        assert progress_band(8, 10) == "on_track"
        assert progress_band(5, 10) == "behind"
        assert progress_band(4, 10) == "at_risk"
        assert progress_band(0, 0) == "complete"
